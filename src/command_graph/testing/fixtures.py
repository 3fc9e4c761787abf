# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Pytest fixtures for command graph testing."""

from __future__ import annotations

import pytest

from command_graph.graph.executable_graph import ExecutableGraph
from command_graph.testing.stubs import CapturingLogger


@pytest.fixture
def capturing_logger() -> CapturingLogger:
    """Logger recording all messages for later assertions."""
    return CapturingLogger()


@pytest.fixture
def executable_graph(capturing_logger: CapturingLogger) -> ExecutableGraph:
    """Empty executable graph logging to the capturing logger."""
    return ExecutableGraph(capturing_logger)
