# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Directed acyclic graphs and their execution.

Example:
    >>> from command_graph.graph import ExecutableGraph
    >>>
    >>> graph = ExecutableGraph(logger)
    >>> graph.connect(fetch_fields, upload_results)
    >>> graph.connect(upload_results, attach_videos, optional=True)
    >>> await graph.execute()
    >>> ChainingGraphLogger(logger).log_graph(graph)
"""

from command_graph.graph.algorithms import bfs, compute_topological_order, dfs, traverse
from command_graph.graph.executable_graph import ExecutableGraph, ExecutableVertex, VertexState
from command_graph.graph.graph import DirectedEdge, DirectedGraph, SimpleDirectedGraph
from command_graph.graph.graph_logger import ChainingCommandGraphLogger, ChainingGraphLogger, LogMessage
from command_graph.graph.visualization import command_graph_to_mermaid, command_to_mermaid, graph_to_mermaid

__all__ = [
    # Graphs
    "DirectedEdge",
    "DirectedGraph",
    "SimpleDirectedGraph",
    # Execution
    "ExecutableGraph",
    "ExecutableVertex",
    "VertexState",
    # Algorithms
    "bfs",
    "dfs",
    "compute_topological_order",
    "traverse",
    # Reporting
    "ChainingGraphLogger",
    "ChainingCommandGraphLogger",
    "LogMessage",
    "graph_to_mermaid",
    "command_to_mermaid",
    "command_graph_to_mermaid",
]
