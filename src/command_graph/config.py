# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from command_graph.errors import ConfigLoadError

YAML_EXTENSIONS = {".yaml", ".yml"}
JSON_EXTENSIONS = {".json"}
CONFIG_FILE_EXTENSIONS = YAML_EXTENSIONS | JSON_EXTENSIONS

LOGGING_SECTION = "logging"


class LoggingOptions(BaseModel):
    """Options controlling how an EngineLogger emits messages and files.

    Attributes:
        debug: Whether debug messages should be emitted at all.
        log_directory: Directory that file logs are written to. Created on first write.
        handler: Optional callable receiving ``(level, *text)`` for every message instead
            of the standard library logger. Never serialized.
    """

    model_config = ConfigDict(extra="forbid")

    debug: bool = False
    log_directory: Path = Path(".")
    handler: Callable[..., Any] | None = Field(default=None, exclude=True)


def load_logging_options(config_source: str | Path) -> LoggingOptions:
    """Load LoggingOptions from a YAML or JSON file.

    The options may either sit at the top level of the file or be nested under a
    ``logging`` key, so the file can be shared with other settings.

    Args:
        config_source: Path to the configuration file.

    Returns:
        The validated logging options.

    Raises:
        ConfigLoadError: If the file cannot be found, parsed or validated.
    """
    path = Path(config_source)

    if not path.exists():
        raise ConfigLoadError(f"Config source not found: {path}")

    if not path.is_file():
        raise ConfigLoadError(f"Config source is not a file: {path}")

    suffix = path.suffix.lower()
    if suffix not in CONFIG_FILE_EXTENSIONS:
        supported = ", ".join(sorted(CONFIG_FILE_EXTENSIONS))
        raise ConfigLoadError(f"Unsupported file extension '{suffix}'. Supported extensions: {supported}")

    config_dict = _parse_config_file(path)
    config_dict = config_dict.get(LOGGING_SECTION, config_dict)

    try:
        return LoggingOptions.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid logging options in '{path}': {e}") from e


def _parse_config_file(path: Path) -> dict:
    suffix = path.suffix.lower()

    try:
        with open(path) as f:
            config = json.load(f) if suffix in JSON_EXTENSIONS else yaml.safe_load(f)
        if not isinstance(config, dict):
            file_type = "JSON object" if suffix in JSON_EXTENSIONS else "YAML mapping"
            raise ValueError(f"Expected a {file_type} (dict), got {type(config).__name__}")
        return config
    except Exception as e:
        raise ConfigLoadError(f"Failed to parse config file '{path}': {e}") from e
