# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import html
import json
from collections.abc import Callable
from typing import Any, Literal, TypeVar

from command_graph.commands.base import Command, ComputableState
from command_graph.graph.graph import DirectedEdge, DirectedGraph

V = TypeVar("V")

EdgeStyle = Literal["normal", "dotted", "thick"]

MAX_LABEL_LINE_LENGTH = 200

_EDGE_ARROWS: dict[str, str] = {
    "normal": "--->",
    "dotted": "-.->",
    "thick": "===>",
}

STATE_CLASSES: dict[ComputableState, str] = {
    ComputableState.INITIAL: "fill:#e0e0e0,stroke:#9e9e9e",
    ComputableState.PENDING: "fill:#fff3cd,stroke:#ffc107",
    ComputableState.SUCCEEDED: "fill:#d4edda,stroke:#28a745",
    ComputableState.FAILED: "fill:#f8d7da,stroke:#dc3545",
    ComputableState.SKIPPED: "fill:#fde2c8,stroke:#fd7e14",
}


def graph_to_mermaid(
    graph: DirectedGraph[V],
    labeller: Callable[[V], str],
    vertex_class: Callable[[V], str],
    edge_style: Callable[[DirectedEdge[V]], EdgeStyle],
) -> str:
    """Render a graph as a Mermaid flowchart.

    Args:
        graph: The graph to render.
        labeller: Returns the (Mermaid-escaped) label of a vertex.
        vertex_class: Returns the CSS style of a vertex. Vertices with equal styles share a class.
        edge_style: Returns how to draw an edge.

    Returns:
        The Mermaid diagram string.
    """
    ids = {vertex: f"v{i}" for i, vertex in enumerate(graph.get_vertices())}
    css_classes: dict[str, list[V]] = {}
    for vertex in ids:
        css_classes.setdefault(vertex_class(vertex), []).append(vertex)
    css_class_ids = {css: f"c{i}" for i, css in enumerate(css_classes)}

    lines = [
        "%%{ init: { 'flowchart': { 'curve': 'monotoneY' } } }%%",
        "flowchart TD",
    ]
    for css, class_id in css_class_ids.items():
        lines.append(f"  classDef {class_id} {css};")
    for vertex, vertex_id in ids.items():
        lines.append(f"  {vertex_id}[{labeller(vertex)}];")
    for edge in graph.get_edges():
        lines.append(f"  {ids[edge.source]} {_EDGE_ARROWS[edge_style(edge)]} {ids[edge.destination]};")
    for css, vertices in css_classes.items():
        lines.append(f"  class {','.join(ids[vertex] for vertex in vertices)} {css_class_ids[css]};")
    return "\n".join(lines)


async def command_to_mermaid(command: Command[Any, Any]) -> str:
    """Build the Mermaid label of a command, showing its parameters and outcome."""
    state = command.get_state()
    if state == ComputableState.SUCCEEDED and command.has_result():
        result = _escape_html_label(_to_text(await command.compute()))
    elif state.is_resolved:
        failure = command.get_failure()
        result = _escape_html_label(str(failure)) if failure is not None else str(state)
    else:
        result = str(state)

    name = type(command).__name__
    if command.parameters is None:
        return f'"{name}<hr/>Result<br/>{result}"'
    parameters = _escape_html_label(_to_text(command.parameters))
    return f'"<b>{name}</b><hr/>Parameters<hr/>{parameters}<hr/>Result<br/>{result}"'


async def command_graph_to_mermaid(graph: DirectedGraph[Command[Any, Any]]) -> str:
    """Render a command graph, colouring commands by state and dotting optional edges."""
    labels = {command: await command_to_mermaid(command) for command in graph.get_vertices()}
    return graph_to_mermaid(
        graph,
        labeller=labels.__getitem__,
        vertex_class=lambda command: STATE_CLASSES[command.get_state()],
        edge_style=lambda edge: "dotted" if edge.optional else "normal",
    )


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, indent=2, default=str)
    except (TypeError, ValueError):
        return repr(value)


def _escape_html_label(value: str) -> str:
    lines = []
    for line in value.split("\n"):
        if len(line) >= MAX_LABEL_LINE_LENGTH:
            line = f"{line[: MAX_LABEL_LINE_LENGTH - 4]} [...]"
        lines.append(html.escape(line).replace(" ", "&nbsp;"))
    return "<br/>".join(lines)
