# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, context)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import typer
from rich.console import Console
from rich.text import Text

from ..config import RepositoryConfig
from ..logging import fail as core_fail
from ..logging import info as core_info
from ..logging import ok as core_ok
from ..logging import warn as core_warn
from ..repository import FileSystemLibraryRepository


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI emoji and colour settings."""

    console: Console
    use_emoji: bool
    use_color: bool = True
    debug_enabled: bool = False
    _key_value_re: re.Pattern[str] = re.compile(r"([\w-]+)=(\".*?\"|\S+)")

    def fail(self, message: str) -> None:
        """Log a failure message."""

        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def info(self, message: str) -> None:
        """Log an informational message."""

        core_info(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        """Log a warning message."""

        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        """Log a success message."""

        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def echo(self, message: str) -> None:
        """Write ``message`` to stdout using Typer's echo helper."""

        typer.echo(message)

    def debug(self, message: str) -> None:
        """Emit a debug message when debug logging is enabled.

        ``key=value`` pairs in ``message`` are highlighted.

        Args:
            message: Debug payload.
        """

        if not self.debug_enabled:
            return
        text = Text("[debug] ", style="bold cyan")
        cursor = 0
        for match in self._key_value_re.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            text.append(match.group(1), style="bold magenta")
            text.append("=", style="dim")
            text.append(match.group(2), style="bold green")
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        self.console.print(text)


def build_cli_logger(*, emoji: bool, debug: bool = False, no_color: bool = False) -> CLILogger:
    """Return a ``CLILogger`` bound to a dedicated Rich console.

    Args:
        emoji: Whether log output may include emoji glyphs.
        debug: Whether debug logging should be enabled.
        no_color: Whether terminal colour output should be disabled.

    Returns:
        CLILogger: Configured logger.
    """

    console = Console(no_color=no_color, highlight=False)
    return CLILogger(console=console, use_emoji=emoji, use_color=not no_color, debug_enabled=debug)


class CLILogHandler(logging.Handler):
    """Forward records from the library loggers to a CLI logger's debug channel."""

    def __init__(self, logger: CLILogger) -> None:
        super().__init__(level=logging.DEBUG)
        self.cli_logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        self.cli_logger.debug(f"{record.name}: {self.format(record)}")


def attach_library_logging(logger: CLILogger) -> CLILogHandler | None:
    """Route ``fwlib`` debug records to ``logger`` when its debug channel is enabled.

    Returns:
        CLILogHandler | None: The installed handler, or ``None`` when debugging is off.
    """

    if not logger.debug_enabled:
        return None
    handler = CLILogHandler(logger)
    library_logger = logging.getLogger("fwlib")
    library_logger.addHandler(handler)
    library_logger.setLevel(logging.DEBUG)
    return handler


@dataclass(slots=True)
class CLIContext:
    """State resolved by the top-level callback and shared with every command."""

    config: RepositoryConfig
    logger: CLILogger

    @property
    def repository(self) -> FileSystemLibraryRepository:
        """Return a repository built from the resolved configuration."""

        return self.config.build_repository()


__all__ = [
    "CLIContext",
    "CLIError",
    "CLILogHandler",
    "CLILogger",
    "attach_library_logging",
    "build_cli_logger",
]
