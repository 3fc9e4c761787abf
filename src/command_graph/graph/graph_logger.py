# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Failure reports for executed graphs.

A failure deep down in a graph usually surfaces as a cascade of skipped
vertices. Instead of logging every vertex on its own, the graph loggers log
chains: a vertex's message followed by the messages of its predecessors, each
indented by its distance, so the root cause is shown directly below the symptom.
"""

from __future__ import annotations

import textwrap
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from command_graph.commands.base import Command, ComputableState, Failable
from command_graph.errors import SkippedError
from command_graph.graph.algorithms import traverse
from command_graph.graph.graph import DirectedGraph
from command_graph.logger import Level, Logger

V = TypeVar("V", bound=Failable)

INDENT = "  "


@dataclass(frozen=True)
class LogMessage:
    """A message describing a single vertex.

    Attributes:
        text: The message text.
        level: The level to log the message at.
        include_predecessors: Whether to walk past predecessors without messages of their own.
    """

    text: str
    level: Level
    include_predecessors: bool = False


@dataclass(frozen=True)
class _IndentedLogMessage(Generic[V]):
    vertex: V
    message: LogMessage
    indent: int


class ChainingGraphLogger(Generic[V]):
    """Logs the failures of an executed graph as indented chains.

    Args:
        logger: The logger to write the chains to.
        has_priority: Vertices for which this returns True are logged first, sorted by class name.
    """

    def __init__(self, logger: Logger, has_priority: Callable[[V], bool] | None = None) -> None:
        self._logger = logger
        self._has_priority = has_priority or (lambda _: False)

    def log_graph(self, graph: DirectedGraph[V]) -> None:
        logged_vertices: set[V] = set()
        prioritized_vertices = sorted(
            (vertex for vertex in graph.get_vertices() if self._has_priority(vertex)),
            key=lambda vertex: type(vertex).__name__,
        )
        for vertex in [*prioritized_vertices, *traverse(graph, "bottom-up")]:
            if vertex in logged_vertices:
                continue
            message_chain = self._compute_log_message_chain(vertex, graph)
            logged_vertices.update(self._log_message_chain(message_chain))

    def get_log_message(self, vertex: V) -> LogMessage | None:
        """Return the message describing a vertex, or None if there is nothing to report."""
        failure = vertex.get_failure()
        if failure is None:
            return None
        level = Level.WARNING if isinstance(failure, SkippedError) else Level.ERROR
        return LogMessage(text=str(failure), level=level)

    def _compute_log_message_chain(self, vertex: V, graph: DirectedGraph[V]) -> list[_IndentedLogMessage[V]]:
        chain: list[_IndentedLogMessage[V]] = []
        queue: deque[tuple[V, int, bool]] = deque([(vertex, 0, False)])
        seen = {vertex}
        while queue:
            current, indent, include_predecessors = queue.popleft()
            message = self.get_log_message(current)
            if message is not None:
                chain.append(_IndentedLogMessage(current, message, indent))
                next_indent, next_include = indent + 1, message.include_predecessors
            elif include_predecessors:
                next_indent, next_include = indent, True
            else:
                continue
            for predecessor in graph.get_predecessors(current):
                if predecessor not in seen:
                    seen.add(predecessor)
                    queue.append((predecessor, next_indent, next_include))
        return chain

    def _log_message_chain(self, chain: list[_IndentedLogMessage[V]]) -> set[V]:
        logged_vertices: set[V] = set()
        for entry in sorted(chain, key=lambda entry: entry.indent):
            logged_vertices.add(entry.vertex)
            self._logger.message(entry.message.level, textwrap.indent(entry.message.text, INDENT * entry.indent))
        return logged_vertices


class ChainingCommandGraphLogger(ChainingGraphLogger[Command[Any, Any]]):
    """Graph logger for command graphs which explains why important commands were skipped.

    Args:
        logger: The logger to write the chains to.
        skipped_messages: Maps command types to the text to log when a command of that
            type was skipped because one of its dependencies did not compute. Commands
            of these types are logged first, followed by the reasons they were skipped.
    """

    def __init__(self, logger: Logger, skipped_messages: Mapping[type[Command[Any, Any]], str]) -> None:
        super().__init__(logger, has_priority=lambda command: isinstance(command, tuple(skipped_messages)))
        self._skipped_messages = skipped_messages

    def get_log_message(self, vertex: Command[Any, Any]) -> LogMessage | None:
        message = super().get_log_message(vertex)
        if message is not None:
            return message
        if vertex.get_state() != ComputableState.SKIPPED:
            return None
        for command_type, text in self._skipped_messages.items():
            if isinstance(vertex, command_type):
                return LogMessage(text=text, level=Level.ERROR, include_predecessors=True)
        return None
