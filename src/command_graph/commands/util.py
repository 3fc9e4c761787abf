# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
from collections.abc import Collection, Hashable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from command_graph.commands.base import Command, ComputableState, ResultT
from command_graph.logger import Level, Logger

FallbackT = TypeVar("FallbackT")


class ConstantCommand(Command[ResultT, ResultT]):
    """A command whose result is known upfront."""

    async def compute_result(self) -> ResultT:
        return self.parameters


class DestructureCommand(Command[Any, Hashable]):
    """Extracts a single element from another command's mapping or sequence result."""

    def __init__(self, key: Hashable, logger: Logger, input_command: Command[Any, Any]) -> None:
        super().__init__(key, logger)
        self._input = input_command

    async def compute_result(self) -> Any:
        value = await self._input.compute()
        try:
            return value[self.parameters]
        except (KeyError, IndexError, TypeError) as e:
            serialized = json.dumps(value, separators=(",", ":"), default=str)
            raise ValueError(f"Failed to access element {self.parameters} in: {serialized}") from e


@dataclass(frozen=True)
class FallbackParameters(Generic[FallbackT]):
    """Parameters of a FallbackCommand.

    Attributes:
        fallback_on: Input states which trigger the fallback value.
        fallback_value: The value to resolve to instead of the input's result.
    """

    fallback_on: Collection[ComputableState]
    fallback_value: FallbackT


class FallbackCommand(Command[Any, FallbackParameters[Any]]):
    """Resolves to a fallback value if its input ends up in one of the configured states.

    Connect the input to this command with an optional edge, otherwise an input
    failure skips this command before it can fall back.
    """

    def __init__(
        self, parameters: FallbackParameters[Any], logger: Logger, input_command: Command[Any, Any]
    ) -> None:
        super().__init__(parameters, logger)
        self._input = input_command

    async def compute_result(self) -> Any:
        if self._input.get_state() in self.parameters.fallback_on:
            return self._fallback()
        try:
            return await self._input.compute()
        except Exception:
            if self._input.get_state() in self.parameters.fallback_on:
                return self._fallback()
            raise

    def _fallback(self) -> Any:
        self.logger.message(
            Level.DEBUG,
            f"Falling back to {self.parameters.fallback_value!r}: {self._input!r} is {self._input.get_state()}",
        )
        return self.parameters.fallback_value
