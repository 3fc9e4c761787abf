# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Directed acyclic graphs over arbitrary hashable vertices.

Vertices are stored as dictionary keys, so two vertices are the same vertex if
they hash and compare equal. Commands compare by identity, which makes every
command instance its own vertex even when parameters coincide.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Generic, Literal, Protocol, TypeVar, overload

from command_graph.errors import (
    AmbiguousVertexError,
    CycleError,
    DuplicateEdgeError,
    UnknownEdgeError,
    UnknownVertexError,
)
from command_graph.graph.algorithms import dfs

V = TypeVar("V")
T = TypeVar("T")


@dataclass(frozen=True)
class DirectedEdge(Generic[V]):
    """A directed edge between two vertices.

    Attributes:
        source: The source vertex.
        destination: The destination vertex.
        optional: Whether the destination may still compute if the source does not.
    """

    source: V
    destination: V
    optional: bool = False

    def __repr__(self) -> str:
        arrow = "-.->" if self.optional else "->"
        return f"{self.source!r} {arrow} {self.destination!r}"


class DirectedGraph(Protocol[V]):
    """Protocol for read access to a directed graph - enables duck typing in the graph algorithms."""

    def get_vertices(self) -> Iterator[V]: ...

    def get_edges(self) -> Iterator[DirectedEdge[V]]: ...

    def get_outgoing(self, vertex: V) -> Iterator[DirectedEdge[V]]: ...

    def get_incoming(self, vertex: V) -> Iterator[DirectedEdge[V]]: ...

    def has_incoming(self, vertex: V) -> bool: ...

    def get_predecessors(self, vertex: V) -> Iterator[V]: ...

    def get_successors(self, vertex: V) -> Iterator[V]: ...


class SimpleDirectedGraph(Generic[V]):
    """A mutable directed acyclic graph.

    Edges are rejected when they would introduce a cycle or duplicate an existing
    edge, so the graph is acyclic at all times. All queries return generators which
    reflect the graph's state at the time they are iterated.

    Examples:
        >>> graph = SimpleDirectedGraph[int]()
        >>> graph.connect(0, 1)
        0 -> 1
        >>> graph.connect(1, 0)
        Traceback (most recent call last):
        ...
        command_graph.errors.CycleError: Failed to connect vertices 1 -> 0: cycle detected
    """

    def __init__(self) -> None:
        # vertex -> destination -> edge
        self._outgoing: dict[V, dict[V, DirectedEdge[V]]] = {}
        # vertex -> source -> edge
        self._incoming: dict[V, dict[V, DirectedEdge[V]]] = {}

    def __contains__(self, vertex: object) -> bool:
        return vertex in self._outgoing

    def place(self, vertex: T) -> T:
        """Insert a vertex without connecting it.

        Args:
            vertex: The vertex to insert.

        Returns:
            The vertex. Placing a vertex twice is a no-op returning the existing vertex.
        """
        if vertex in self._outgoing:
            return next(existing for existing in self._outgoing if existing == vertex)
        self._outgoing[vertex] = {}
        self._incoming[vertex] = {}
        return vertex

    def connect(self, source: V, destination: V, optional: bool = False) -> DirectedEdge[V]:
        """Connect two vertices, inserting them first if necessary.

        Args:
            source: The source vertex.
            destination: The destination vertex.
            optional: Whether the edge is optional.

        Returns:
            The new edge.

        Raises:
            CycleError: If the destination already reaches the source (self loops included).
            DuplicateEdgeError: If both vertices are already connected in this direction.
        """
        if source == destination or (
            source in self and destination in self and dfs(self, source=destination, destination=source)
        ):
            raise CycleError(f"Failed to connect vertices {source!r} -> {destination!r}: cycle detected")
        if source in self and destination in self._outgoing[source]:
            raise DuplicateEdgeError(
                f"Failed to connect vertices {source!r} -> {destination!r}: duplicate edge detected"
            )
        self.place(source)
        self.place(destination)
        edge = DirectedEdge(source, destination, optional)
        self._outgoing[source][destination] = edge
        self._incoming[destination][source] = edge
        return edge

    def remove(self, edge: DirectedEdge[V]) -> None:
        """Remove an edge. Its vertices stay in the graph.

        Raises:
            UnknownEdgeError: If the graph does not contain the edge.
        """
        outgoing = self._outgoing.get(edge.source, {})
        if outgoing.get(edge.destination) != edge:
            raise UnknownEdgeError(f"Unknown edge: {edge!r}")
        del outgoing[edge.destination]
        del self._incoming[edge.destination][edge.source]

    def find(self, predicate: Callable[[V], bool]) -> V | None:
        """Return the first vertex matching the predicate, or None."""
        for vertex in self.get_vertices():
            if predicate(vertex):
                return vertex
        return None

    @overload
    def find_or_default(
        self,
        predicate_or_type: type[T],
        factory: Callable[[], T],
        extra_predicate: Callable[[T], bool] | None = None,
    ) -> T: ...

    @overload
    def find_or_default(
        self,
        predicate_or_type: Callable[[V], bool],
        factory: Callable[[], T],
        extra_predicate: Callable[[V], bool] | None = None,
    ) -> T: ...

    def find_or_default(self, predicate_or_type, factory, extra_predicate=None):
        """Find the single vertex matching some criteria, or create and place it.

        Builders use this to share one vertex between all requests for the same
        computation. What counts as "the same" is entirely up to the criteria.

        Args:
            predicate_or_type: A vertex class (matched with isinstance) or a predicate.
            factory: Creates the vertex if none matches. The result is placed in the graph.
            extra_predicate: Additional criteria a matching vertex must satisfy.

        Returns:
            The matching vertex or the newly placed one.

        Raises:
            AmbiguousVertexError: If more than one vertex matches.
        """
        if isinstance(predicate_or_type, type):
            vertex_type = predicate_or_type

            def matches_criteria(vertex: V) -> bool:
                return isinstance(vertex, vertex_type)

        else:
            matches_criteria = predicate_or_type

        matches = [
            vertex
            for vertex in self.get_vertices()
            if matches_criteria(vertex) and (extra_predicate is None or extra_predicate(vertex))
        ]
        if len(matches) > 1:
            raise AmbiguousVertexError(
                f"Expected at most one matching vertex, found {len(matches)}: {', '.join(map(repr, matches))}"
            )
        if matches:
            return matches[0]
        return self.place(factory())

    def get_vertices(self) -> Iterator[V]:
        yield from self._outgoing

    def get_edges(self) -> Iterator[DirectedEdge[V]]:
        for outgoing in self._outgoing.values():
            yield from outgoing.values()

    def size(self, of: Literal["vertices", "edges"]) -> int:
        """Return the number of vertices or edges."""
        if of == "vertices":
            return len(self._outgoing)
        return sum(len(outgoing) for outgoing in self._outgoing.values())

    def get_outgoing(self, vertex: V) -> Iterator[DirectedEdge[V]]:
        yield from self._edges_of(self._outgoing, vertex).values()

    def get_incoming(self, vertex: V) -> Iterator[DirectedEdge[V]]:
        yield from self._edges_of(self._incoming, vertex).values()

    def has_outgoing(self, vertex: V) -> bool:
        return len(self._edges_of(self._outgoing, vertex)) > 0

    def has_incoming(self, vertex: V) -> bool:
        return len(self._edges_of(self._incoming, vertex)) > 0

    def get_predecessors(self, vertex: V) -> Iterator[V]:
        for edge in self.get_incoming(vertex):
            yield edge.source

    def get_successors(self, vertex: V) -> Iterator[V]:
        for edge in self.get_outgoing(vertex):
            yield edge.destination

    @staticmethod
    def _edges_of(edges: dict[V, dict[V, DirectedEdge[V]]], vertex: V) -> dict[V, DirectedEdge[V]]:
        try:
            return edges[vertex]
        except KeyError:
            raise UnknownVertexError(f"Unknown vertex: {vertex!r}") from None
