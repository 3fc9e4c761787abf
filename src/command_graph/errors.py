# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations


class CommandGraphError(Exception):
    """Base exception for all errors raised by command_graph."""


class SkippedError(CommandGraphError):
    """Raised by a command that deliberately has nothing to do.

    Skips propagate through an executable graph exactly like failures, they only
    differ in how they are reported.
    """


class LoggedError(CommandGraphError):
    """An error whose details have already been written to the logs."""


class CommandStateError(CommandGraphError):
    """Raised on illegal command state transitions."""


class ConfigLoadError(CommandGraphError):
    """Raised when a configuration source cannot be loaded."""


class GraphStructureError(CommandGraphError):
    """Base exception for errors made while building a graph."""


class CycleError(GraphStructureError):
    """Raised when connecting two vertices would introduce a cycle."""


class DuplicateEdgeError(GraphStructureError):
    """Raised when connecting two vertices which are already connected."""


class UnknownVertexError(GraphStructureError):
    """Raised when querying a vertex which is not part of the graph."""


class UnknownEdgeError(GraphStructureError):
    """Raised when removing an edge which is not part of the graph."""


class AmbiguousVertexError(GraphStructureError):
    """Raised when a vertex lookup expected at most one match but found several."""
