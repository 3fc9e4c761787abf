# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Top-down execution of command graphs.

Execution starts at every vertex without incoming edges and follows the edges
towards the leaves. Each root starts its own chain, chains run concurrently on
the event loop. A vertex is only started once all of its predecessors are done:

- an edge whose source computed its result is satisfied
- an edge whose source failed or was skipped is satisfied only if it is optional

When a vertex fails, every vertex reachable through non-optional edges is marked
forbidden and skipped without ever computing. Vertices reached through optional
edges stay eligible and are re-evaluated as new roots.
"""

from __future__ import annotations

import asyncio
from enum import Enum, auto
from typing import Any, Protocol, TypeVar

from command_graph.commands.base import ComputableState
from command_graph.errors import SkippedError
from command_graph.graph.graph import DirectedEdge, SimpleDirectedGraph
from command_graph.logger import EngineLogger, Level, Logger


class ExecutableVertex(Protocol):
    """A vertex which can be computed and whose state can be overridden."""

    async def compute(self) -> Any: ...

    def get_state(self) -> ComputableState: ...

    def set_state(self, state: ComputableState) -> None: ...


V = TypeVar("V", bound=ExecutableVertex)


class VertexState(Enum):
    PENDING = auto()
    """The vertex has been queued and is pending computation."""
    COMPUTED = auto()
    """The vertex successfully computed its result."""
    FORBIDDEN = auto()
    """The vertex failed, was skipped or must not compute because a hard dependency did not compute."""


class ExecutableGraph(SimpleDirectedGraph[V]):
    """A directed acyclic graph of computable vertices which can be executed top-down.

    Examples:
        >>> graph = ExecutableGraph()
        >>> fields = graph.place(FetchFieldsCommand(...))
        >>> upload = graph.place(UploadCommand(..., fields))
        >>> videos = graph.place(AttachVideosCommand(...))
        >>> graph.connect(fields, upload)
        >>> graph.connect(upload, videos, optional=True)
        >>> await graph.execute()
    """

    def __init__(self, logger: Logger | None = None) -> None:
        super().__init__()
        self._logger = logger or EngineLogger()
        self._states: dict[V, VertexState] = {}

    def connect(self, source: V, destination: V, optional: bool = False) -> DirectedEdge[V]:
        """Connect two vertices, inserting them first if necessary.

        Args:
            source: The source vertex.
            destination: The destination vertex.
            optional: Whether the destination should still compute if the source fails or is skipped.

        Returns:
            The new edge.

        Raises:
            CycleError: If the connection would introduce a cycle.
            DuplicateEdgeError: If the connection would introduce a duplicate edge.
        """
        return super().connect(source, destination, optional)

    def is_optional(self, edge: DirectedEdge[V]) -> bool:
        return edge.optional

    def get_execution_state(self, vertex: V) -> VertexState | None:
        """Return the vertex's state in the current (or latest) execution, or None if it was not visited."""
        return self._states.get(vertex)

    async def execute(self) -> None:
        """Execute the graph.

        Returns once every chain starting at a root has terminated. Vertex failures
        never escape this method, they are reflected in the vertices' states. This
        includes vertices cancelled from within. Only cancelling the task awaiting
        ``execute()`` raises ``asyncio.CancelledError``.
        """
        self._states.clear()
        roots = [vertex for vertex in self.get_vertices() if not self.has_incoming(vertex)]
        for root in roots:
            self._states[root] = VertexState.PENDING
        await asyncio.gather(*(self._execute_followed_by_successors(root) for root in roots))

    async def _execute_followed_by_successors(self, vertex: V) -> None:
        successors = dict.fromkeys(self.get_successors(vertex))
        try:
            await vertex.compute()
        except asyncio.CancelledError:
            # Only cancelling execute() itself aborts the run, a vertex cancelled from within just failed.
            current_task = asyncio.current_task()
            if current_task is not None and current_task.cancelling():
                raise
            self._logger.message(Level.ERROR, f"{vertex!r}: computation was cancelled")
            for root in self._mark_forbidden(vertex):
                successors[root] = None
        except Exception as error:
            level = Level.WARNING if isinstance(error, SkippedError) else Level.ERROR
            self._logger.message(level, f"{vertex!r}: {error}")
            for root in self._mark_forbidden(vertex):
                successors[root] = None
        else:
            self._states[vertex] = VertexState.COMPUTED

        queued = []
        for successor in successors:
            if self._can_queue_vertex(successor):
                self._states[successor] = VertexState.PENDING
                queued.append(self._execute_followed_by_successors(successor))
        await asyncio.gather(*queued)

    def _mark_forbidden(self, vertex: V) -> dict[V, None]:
        """Forbid a vertex and everything depending on it through non-optional edges.

        Returns:
            The destinations of optional edges leaving the forbidden vertices. These
            might still be computable and must be reconsidered as new roots.
        """
        next_roots: dict[V, None] = {}
        if self._states.get(vertex) == VertexState.FORBIDDEN:
            return next_roots
        self._states[vertex] = VertexState.FORBIDDEN
        for edge in self.get_outgoing(vertex):
            if edge.optional:
                next_roots[edge.destination] = None
                continue
            next_roots.update(self._mark_forbidden(edge.destination))
            # Vertices started or resolved by someone else keep their own outcome.
            if edge.destination.get_state() == ComputableState.INITIAL:
                edge.destination.set_state(ComputableState.SKIPPED)
        return next_roots

    def _can_queue_vertex(self, vertex: V) -> bool:
        if vertex in self._states:
            return False
        # An incoming edge is satisfied iff its source computed, or its source is
        # forbidden and the edge is optional.
        for edge in self.get_incoming(vertex):
            source_state = self._states.get(edge.source)
            if source_state == VertexState.COMPUTED:
                continue
            if source_state == VertexState.FORBIDDEN and edge.optional:
                continue
            return False
        return True
