# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

try:
    from importlib.metadata import version

    __version__ = version("command-graph")
except Exception:
    __version__ = "0.0.0.dev0+unknown"

__all__ = ["__version__"]
