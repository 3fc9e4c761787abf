# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from command_graph.commands.base import (
    Command,
    Computable,
    ComputableState,
    Failable,
    Stateful,
)
from command_graph.commands.util import (
    ConstantCommand,
    DestructureCommand,
    FallbackCommand,
    FallbackParameters,
)

__all__ = [
    # Primitives
    "Computable",
    "ComputableState",
    "Failable",
    "Stateful",
    "Command",
    # Generic commands
    "ConstantCommand",
    "DestructureCommand",
    "FallbackCommand",
    "FallbackParameters",
]
