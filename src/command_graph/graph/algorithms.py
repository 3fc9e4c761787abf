# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, Literal, TypeVar

if TYPE_CHECKING:
    from command_graph.graph.graph import DirectedGraph

V = TypeVar("V")

_MISSING: Any = object()


def dfs(
    graph: DirectedGraph[V],
    *,
    destination: V = _MISSING,
    predicate: Callable[[V], bool] | None = None,
    source: V = _MISSING,
) -> bool:
    """Depth-first reachability search.

    Args:
        graph: The graph to search.
        destination: The vertex to look for. Mutually exclusive with ``predicate``.
        predicate: Describes the vertices to look for. Mutually exclusive with ``destination``.
        source: The vertex to start at. If omitted, the search starts at every vertex
            without incoming edges.

    Returns:
        True if a destination vertex is reachable, otherwise False. A source which is
        a destination itself counts as reachable.
    """
    return _search(graph, destination, predicate, source, deque.pop)


def bfs(
    graph: DirectedGraph[V],
    *,
    destination: V = _MISSING,
    predicate: Callable[[V], bool] | None = None,
    source: V = _MISSING,
) -> bool:
    """Breadth-first reachability search. Takes the same arguments as ``dfs``."""
    return _search(graph, destination, predicate, source, deque.popleft)


def _search(
    graph: DirectedGraph[V],
    destination: V,
    predicate: Callable[[V], bool] | None,
    source: V,
    pop: Callable[[deque[V]], V],
) -> bool:
    if (destination is _MISSING) == (predicate is None):
        raise ValueError("Exactly one of 'destination' or 'predicate' must be given")

    def is_destination(vertex: V) -> bool:
        if predicate is not None:
            return predicate(vertex)
        return vertex == destination

    if source is not _MISSING:
        worklist = deque([source])
    else:
        worklist = deque(vertex for vertex in graph.get_vertices() if not graph.has_incoming(vertex))
    discovered = set(worklist)
    for vertex in worklist:
        if is_destination(vertex):
            return True

    while worklist:
        current = pop(worklist)
        for successor in graph.get_successors(current):
            if is_destination(successor):
                return True
            if successor not in discovered:
                discovered.add(successor)
                worklist.append(successor)
    return False


def compute_topological_order(graph: DirectedGraph[V]) -> dict[V, int]:
    """Map every vertex to its depth, the length of the longest path reaching it from a root.

    Vertices sharing a depth do not depend on each other.
    """
    in_degree: dict[V, int] = {vertex: sum(1 for _ in graph.get_incoming(vertex)) for vertex in graph.get_vertices()}
    queue = deque(vertex for vertex, degree in in_degree.items() if degree == 0)
    depths: dict[V, int] = {vertex: 0 for vertex in queue}

    while queue:
        vertex = queue.popleft()
        for successor in graph.get_successors(vertex):
            depths[successor] = max(depths.get(successor, 0), depths[vertex] + 1)
            in_degree[successor] -= 1
            if in_degree[successor] == 0:
                queue.append(successor)
    return depths


def traverse(graph: DirectedGraph[V], direction: Literal["top-down", "bottom-up"]) -> Iterator[V]:
    """Iterate over all vertices ordered by depth.

    ``top-down`` yields roots first, ``bottom-up`` yields the deepest vertices first.
    Vertices of equal depth keep their insertion order.
    """
    depths = compute_topological_order(graph)
    yield from sorted(depths, key=lambda vertex: depths[vertex], reverse=direction == "bottom-up")
