# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Logging capability injected into commands and graphs.

Commands and graphs never reach for a global logger. They receive an object
implementing the Logger protocol, which in production is an EngineLogger
forwarding to the standard library ``command_graph`` logger.
"""

from __future__ import annotations

import json
import logging
import traceback
from enum import StrEnum
from pathlib import Path
from typing import Protocol, runtime_checkable

from rich.logging import RichHandler

from command_graph.config import LoggingOptions
from command_graph.errors import LoggedError

ROOT_LOGGER_NAME = "command_graph"


class Level(StrEnum):
    DEBUG = "debug"
    ERROR = "error"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"


_STDLIB_LEVELS: dict[Level, int] = {
    Level.DEBUG: logging.DEBUG,
    Level.ERROR: logging.ERROR,
    Level.INFO: logging.INFO,
    Level.NOTICE: logging.INFO,
    Level.WARNING: logging.WARNING,
}


@runtime_checkable
class Logger(Protocol):
    """Protocol for the logging capability commands and graphs depend on."""

    def configure(self, options: LoggingOptions) -> None:
        """Replace the logging options in use."""
        ...

    def message(self, level: Level, *text: str) -> None:
        """Log a message made up of the given text fragments."""
        ...

    def log_to_file(self, data: str, filename: str) -> Path:
        """Write arbitrary data to a file in the log directory and return its path."""
        ...

    def log_error_to_file(self, error: object, filename: str) -> Path | None:
        """Write an error's details to a file in the log directory and return its path."""
        ...


class EngineLogger:
    """Logger implementation backed by the standard library logging module."""

    def __init__(self, options: LoggingOptions | None = None, *, name: str = ROOT_LOGGER_NAME) -> None:
        self._options = options or LoggingOptions()
        self._logger = logging.getLogger(name)

    @property
    def options(self) -> LoggingOptions:
        return self._options

    def configure(self, options: LoggingOptions) -> None:
        self._options = options

    def message(self, level: Level, *text: str) -> None:
        # A custom handler takes precedence over the standard library logger.
        if self._options.handler is not None:
            self._options.handler(level, *text)
            return
        if level == Level.DEBUG and not self._options.debug:
            return
        self._logger.log(_STDLIB_LEVELS[level], " ".join(text))

    def log_to_file(self, data: str, filename: str) -> Path:
        log_directory = self._options.log_directory.resolve()
        log_directory.mkdir(parents=True, exist_ok=True)
        file_path = log_directory / filename
        file_path.write_text(data)
        return file_path

    def log_error_to_file(self, error: object, filename: str) -> Path | None:
        if isinstance(error, LoggedError):
            return None
        if isinstance(error, BaseException):
            error_data = json.dumps(
                {
                    "error": f"{type(error).__name__}: {error}",
                    "stacktrace": "".join(traceback.format_exception(error)),
                },
                indent=2,
            )
            file_path = self.log_to_file(error_data, f"{filename}.json")
        else:
            file_path = self.log_to_file(str(error), f"{filename}.log")
        self.message(Level.ERROR, f"Complete error logs have been written to: {file_path}")
        return file_path


def configure_logging(level: int = logging.INFO, *, rich_tracebacks: bool = True) -> logging.Logger:
    """Attach a rich console handler to the package's root logger.

    Calling this repeatedly replaces the previously attached handler instead of
    stacking duplicates.

    Args:
        level: The standard library log level to emit at.
        rich_tracebacks: Whether tracebacks should be rendered by rich.

    Returns:
        The configured package logger.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    handler = RichHandler(rich_tracebacks=rich_tracebacks, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(level)
    return root
