# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Memoized asynchronous commands.

A command wraps a single-shot unit of work. Nothing happens until the first call
to ``compute()``, which starts the work exactly once. Every caller, be it the
executable graph or another command depending on it directly, awaits the same
underlying task and observes the same result or the same exception.

Example:
    >>> class Add(Command[int, int]):
    ...     def __init__(self, x: int, logger: Logger, *operands: Add) -> None:
    ...         super().__init__(x, logger)
    ...         self._operands = operands
    ...
    ...     async def compute_result(self) -> int:
    ...         result = self.parameters
    ...         for operand in self._operands:
    ...             result += await operand.compute()
    ...         return result
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from enum import StrEnum
from typing import Generic, Protocol, TypeVar, runtime_checkable

from command_graph.errors import CommandStateError, SkippedError
from command_graph.logger import Level, Logger

ResultT = TypeVar("ResultT")
ParametersT = TypeVar("ParametersT")
ResultT_co = TypeVar("ResultT_co", covariant=True)
StateT = TypeVar("StateT")


class ComputableState(StrEnum):
    """Lifecycle states of a computable entity.

    - INITIAL: neither told to compute, nor done computing
    - PENDING: told to compute, but not done yet
    - SUCCEEDED: done computing
    - FAILED: encountered problems while computing
    - SKIPPED: deliberately skipped, either by itself or by its graph
    """

    INITIAL = "initial"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_resolved(self) -> bool:
        return self in _RESOLVED_STATES


_RESOLVED_STATES = frozenset({ComputableState.SUCCEEDED, ComputableState.FAILED, ComputableState.SKIPPED})


@runtime_checkable
class Computable(Protocol[ResultT_co]):
    """An entity which can compute a result."""

    def compute(self) -> Awaitable[ResultT_co]: ...


@runtime_checkable
class Stateful(Protocol[StateT]):
    """An entity exposing a state which can be overridden from the outside."""

    def get_state(self) -> StateT: ...

    def set_state(self, state: StateT) -> None: ...


@runtime_checkable
class Failable(Protocol):
    """An entity which may have failed."""

    def get_failure(self) -> BaseException | None: ...


class Command(ABC, Generic[ResultT, ParametersT]):
    """Base class for memoized asynchronous computations.

    Subclasses implement ``compute_result``. Callers only ever use ``compute``,
    which triggers ``compute_result`` on first use and returns its memoized
    outcome afterwards.

    State only ever moves forward: ``initial -> pending -> succeeded | failed | skipped``.
    A scheduler may resolve a command early through ``set_state`` (for example to
    skip it because an upstream dependency failed), in which case the command's
    own computation never runs.
    """

    def __init__(self, parameters: ParametersT, logger: Logger) -> None:
        self._parameters = parameters
        self._logger = logger
        self._state = ComputableState.INITIAL
        self._failure: BaseException | None = None
        self._task: asyncio.Task[ResultT] | None = None

    @property
    def parameters(self) -> ParametersT:
        return self._parameters

    @property
    def logger(self) -> Logger:
        return self._logger

    def get_parameters(self) -> ParametersT:
        return self._parameters

    def get_state(self) -> ComputableState:
        return self._state

    def set_state(self, state: ComputableState) -> None:
        """Force the command into a resolved state.

        Args:
            state: The new state. Must be a resolved state unless it equals the current one.

        Raises:
            CommandStateError: If the transition would move the state backwards.
        """
        if state == self._state:
            return
        if self._state.is_resolved or not state.is_resolved:
            raise CommandStateError(f"Illegal state transition of {self!r}: {self._state} -> {state}")
        self._state = state

    def get_failure(self) -> BaseException | None:
        """Return the exception the computation raised, if any."""
        return self._failure

    def has_result(self) -> bool:
        """Return whether the computation ran to completion and produced a result.

        Unlike the state, this is unaffected by ``set_state``: a command forced into
        ``succeeded`` without computing has no result.
        """
        return (
            self._task is not None
            and self._task.done()
            and not self._task.cancelled()
            and self._task.exception() is None
        )

    async def compute(self) -> ResultT:
        """Compute the command's result, starting the computation on first use.

        Returns:
            The memoized result.

        Raises:
            SkippedError: If the command skipped itself or was skipped before computing.
            CommandStateError: If the command was resolved from the outside before computing.
            Exception: Whatever ``compute_result`` raised, re-raised to every caller.
            asyncio.CancelledError: If ``compute_result`` was cancelled from within. The
                command is then failed, like for any other error.
        """
        if self._task is None:
            if self._state != ComputableState.INITIAL:
                raise self._unstarted_resolution_error()
            self._state = ComputableState.PENDING
            self._task = asyncio.create_task(self._evaluate(), name=f"compute-{type(self).__name__}")
        # Shielded so that cancelling one awaiter never cancels the shared computation.
        return await asyncio.shield(self._task)

    @abstractmethod
    async def compute_result(self) -> ResultT:
        """Compute the command's result. Called at most once per command."""

    async def _evaluate(self) -> ResultT:
        self._logger.message(Level.DEBUG, f"Computing {self!r}")
        try:
            result = await self.compute_result()
        except SkippedError as error:
            self._resolve(ComputableState.SKIPPED, error)
            self._logger.message(Level.DEBUG, f"Skipped {self!r}: {error}")
            raise
        except (Exception, asyncio.CancelledError) as error:
            self._resolve(ComputableState.FAILED, error)
            raise
        self._resolve(ComputableState.SUCCEEDED)
        return result

    def _resolve(self, state: ComputableState, failure: BaseException | None = None) -> None:
        # A state forced while computing wins over the computation's own outcome.
        if self._state != ComputableState.PENDING:
            return
        self._state = state
        self._failure = failure

    def _unstarted_resolution_error(self) -> Exception:
        if self._state == ComputableState.SKIPPED:
            return SkippedError(f"{self!r} was skipped before it could compute its result")
        return CommandStateError(f"{self!r} was marked {self._state} without computing a result")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._parameters!r})"
