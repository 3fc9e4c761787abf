# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio

import pytest

from command_graph.commands.base import Command, Computable, ComputableState, Failable, Stateful
from command_graph.errors import CommandStateError, SkippedError
from command_graph.logger import Level
from command_graph.testing.stubs import CapturingLogger


class ArithmeticCommand(Command[int, int]):
    """x plus the results of all operands."""

    def __init__(self, x: int, logger: CapturingLogger, *operands: ArithmeticCommand) -> None:
        super().__init__(x, logger)
        self.operands = operands
        self.calls = 0

    async def compute_result(self) -> int:
        self.calls += 1
        result = self.parameters
        for operand in self.operands:
            result += await operand.compute()
        return result


class GatedCommand(Command[str, str]):
    """Blocks until released, then returns its parameters or raises the configured error."""

    def __init__(self, value: str, logger: CapturingLogger, error: Exception | None = None) -> None:
        super().__init__(value, logger)
        self.release = asyncio.Event()
        self.error = error
        self.calls = 0

    async def compute_result(self) -> str:
        self.calls += 1
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.parameters


class CancelledWithinCommand(Command[None, None]):
    """Awaits a future which gets cancelled underneath it."""

    async def compute_result(self) -> None:
        future = asyncio.get_running_loop().create_future()
        future.cancel()
        await future


# -- compute / memoization ----------------------------------------------------


@pytest.mark.asyncio
async def test_computes_shared_operands_once(capturing_logger: CapturingLogger) -> None:
    a = ArithmeticCommand(50, capturing_logger)
    b = ArithmeticCommand(40, capturing_logger)
    total = ArithmeticCommand(10, capturing_logger, a, b)

    results = await asyncio.gather(total.compute(), a.compute(), b.compute(), total.compute())

    assert results == [100, 50, 40, 100]
    assert (a.calls, b.calls, total.calls) == (1, 1, 1)


@pytest.mark.asyncio
async def test_does_not_compute_before_first_call(capturing_logger: CapturingLogger) -> None:
    command = ArithmeticCommand(1, capturing_logger)
    await asyncio.sleep(0)

    assert command.calls == 0
    assert command.get_state() == ComputableState.INITIAL


@pytest.mark.asyncio
async def test_concurrent_calls_share_one_computation(capturing_logger: CapturingLogger) -> None:
    command = GatedCommand("result", capturing_logger)
    awaiters = [asyncio.ensure_future(command.compute()) for _ in range(5)]
    await asyncio.sleep(0)

    assert command.get_state() == ComputableState.PENDING
    command.release.set()

    assert await asyncio.gather(*awaiters) == ["result"] * 5
    assert await command.compute() == "result"
    assert command.calls == 1
    assert command.get_state() == ComputableState.SUCCEEDED


@pytest.mark.asyncio
async def test_failure_is_cached_and_rethrown(capturing_logger: CapturingLogger) -> None:
    error = RuntimeError("boom")
    command = GatedCommand("unused", capturing_logger, error=error)
    command.release.set()

    for _ in range(3):
        with pytest.raises(RuntimeError) as exc_info:
            await command.compute()
        assert exc_info.value is error

    assert command.calls == 1
    assert command.get_state() == ComputableState.FAILED
    assert command.get_failure() is error


@pytest.mark.asyncio
async def test_concurrent_calls_share_one_failure(capturing_logger: CapturingLogger) -> None:
    error = RuntimeError("boom")
    command = GatedCommand("unused", capturing_logger, error=error)
    awaiters = [asyncio.ensure_future(command.compute()) for _ in range(5)]
    await asyncio.sleep(0)
    command.release.set()

    results = await asyncio.gather(*awaiters, return_exceptions=True)

    assert all(result is error for result in results)
    assert command.calls == 1
    assert command.get_state() == ComputableState.FAILED


@pytest.mark.asyncio
async def test_cancellation_from_within_fails_command(capturing_logger: CapturingLogger) -> None:
    command = CancelledWithinCommand(None, capturing_logger)

    for _ in range(2):
        with pytest.raises(asyncio.CancelledError):
            await command.compute()

    assert command.get_state() == ComputableState.FAILED
    assert isinstance(command.get_failure(), asyncio.CancelledError)
    assert not command.has_result()


@pytest.mark.asyncio
async def test_has_result(capturing_logger: CapturingLogger) -> None:
    computed = ArithmeticCommand(1, capturing_logger)
    forced = ArithmeticCommand(2, capturing_logger)
    forced.set_state(ComputableState.SUCCEEDED)
    failed = GatedCommand("unused", capturing_logger, error=RuntimeError("boom"))
    failed.release.set()

    assert not computed.has_result()
    await computed.compute()
    with pytest.raises(RuntimeError):
        await failed.compute()

    assert computed.has_result()
    assert not forced.has_result()
    assert not failed.has_result()


@pytest.mark.asyncio
async def test_skipped_error_marks_command_skipped(capturing_logger: CapturingLogger) -> None:
    command = GatedCommand("unused", capturing_logger, error=SkippedError("nothing to upload"))
    command.release.set()

    with pytest.raises(SkippedError, match="nothing to upload"):
        await command.compute()

    assert command.get_state() == ComputableState.SKIPPED
    assert isinstance(command.get_failure(), SkippedError)
    assert any("nothing to upload" in text for text in capturing_logger.messages_at(Level.DEBUG))


@pytest.mark.asyncio
async def test_cancelled_awaiter_does_not_cancel_computation(capturing_logger: CapturingLogger) -> None:
    command = GatedCommand("result", capturing_logger)
    first = asyncio.ensure_future(command.compute())
    await asyncio.sleep(0)
    first.cancel()
    with pytest.raises(asyncio.CancelledError):
        await first

    command.release.set()
    assert await command.compute() == "result"
    assert command.calls == 1


@pytest.mark.asyncio
async def test_get_failure_is_none_on_success(capturing_logger: CapturingLogger) -> None:
    command = ArithmeticCommand(3, capturing_logger)
    assert await command.compute() == 3
    assert command.get_failure() is None


# -- set_state ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_forced_skip_prevents_computation(capturing_logger: CapturingLogger) -> None:
    command = ArithmeticCommand(3, capturing_logger)
    command.set_state(ComputableState.SKIPPED)

    with pytest.raises(SkippedError, match="was skipped"):
        await command.compute()

    assert command.calls == 0
    assert command.get_state() == ComputableState.SKIPPED
    assert command.get_failure() is None


@pytest.mark.asyncio
async def test_forced_failure_prevents_computation(capturing_logger: CapturingLogger) -> None:
    command = ArithmeticCommand(3, capturing_logger)
    command.set_state(ComputableState.FAILED)

    with pytest.raises(CommandStateError, match="without computing a result"):
        await command.compute()
    assert command.calls == 0


@pytest.mark.asyncio
async def test_resolved_state_is_final(capturing_logger: CapturingLogger) -> None:
    command = ArithmeticCommand(3, capturing_logger)
    await command.compute()

    command.set_state(ComputableState.SUCCEEDED)
    for state in (ComputableState.INITIAL, ComputableState.PENDING, ComputableState.FAILED, ComputableState.SKIPPED):
        with pytest.raises(CommandStateError, match="Illegal state transition"):
            command.set_state(state)
    assert command.get_state() == ComputableState.SUCCEEDED


def test_pending_cannot_be_set_from_outside(capturing_logger: CapturingLogger) -> None:
    command = ArithmeticCommand(3, capturing_logger)
    with pytest.raises(CommandStateError):
        command.set_state(ComputableState.PENDING)


@pytest.mark.asyncio
async def test_state_forced_while_pending_wins(capturing_logger: CapturingLogger) -> None:
    command = GatedCommand("result", capturing_logger)
    awaiter = asyncio.ensure_future(command.compute())
    await asyncio.sleep(0)

    command.set_state(ComputableState.SKIPPED)
    command.release.set()

    assert await awaiter == "result"
    assert command.get_state() == ComputableState.SKIPPED


# -- accessors ------------------------------------------------------------------


def test_parameters_and_logger(capturing_logger: CapturingLogger) -> None:
    command = ArithmeticCommand(7, capturing_logger)
    assert command.parameters == 7
    assert command.get_parameters() == 7
    assert command.logger is capturing_logger


def test_commands_are_distinct_by_identity(capturing_logger: CapturingLogger) -> None:
    assert ArithmeticCommand(1, capturing_logger) != ArithmeticCommand(1, capturing_logger)
    assert repr(ArithmeticCommand(1, capturing_logger)) == "ArithmeticCommand(1)"


def test_satisfies_protocols(capturing_logger: CapturingLogger) -> None:
    command = ArithmeticCommand(1, capturing_logger)
    assert isinstance(command, Computable)
    assert isinstance(command, Stateful)
    assert isinstance(command, Failable)


def test_computable_state_is_resolved() -> None:
    assert not ComputableState.INITIAL.is_resolved
    assert not ComputableState.PENDING.is_resolved
    assert ComputableState.SUCCEEDED.is_resolved
    assert ComputableState.FAILED.is_resolved
    assert ComputableState.SKIPPED.is_resolved
