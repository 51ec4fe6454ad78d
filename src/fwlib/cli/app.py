# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring repository commands and shared services."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from rich import box
from rich.table import Table

from ..config import ConfigError, load_repository_config
from ..errors import LibraryRepositoryError
from ..examples import is_library_example
from ..logging import section
from ..repository import LAYOUT_V2
from ..validation import validate_library
from .shared import CLIContext, CLIError, CLILogger, attach_library_logging, build_cli_logger

app = typer.Typer(
    name="fwlib",
    help="Inspect, migrate and validate firmware library repositories.",
    no_args_is_help=True,
    add_completion=False,
)

ROOT_OPTION = Annotated[
    Path | None,
    typer.Option("--root", "-r", help="Project root holding pyproject.toml; defaults to the working directory."),
]
NAMING_OPTION = Annotated[
    str | None,
    typer.Option("--naming", help="Naming strategy: name, name@version or direct."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
COLOR_OPTION = Annotated[
    bool,
    typer.Option("--color/--no-color", help="Toggle coloured output."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Show library debug messages."),
]
NAME_ARGUMENT = Annotated[
    str,
    typer.Argument(help="Library identifier; empty for the root library of a direct repository."),
]


@contextmanager
def handle_errors(logger: CLILogger) -> Iterator[None]:
    """Report library and CLI errors through ``logger`` and exit with their status."""

    try:
        yield
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    except LibraryRepositoryError as exc:
        logger.fail(str(exc))
        if exc.cause is not None:
            logger.debug(f"cause={type(exc.cause).__name__} detail={exc.cause}")
        raise typer.Exit(code=1) from exc


def _state(ctx: typer.Context) -> CLIContext:
    state: CLIContext = ctx.obj
    return state


@app.callback()
def main(
    ctx: typer.Context,
    root: ROOT_OPTION = None,
    naming: NAMING_OPTION = None,
    emoji: EMOJI_OPTION = True,
    color: COLOR_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Resolve configuration shared by every command."""

    logger = build_cli_logger(emoji=emoji, debug=debug, no_color=not color)
    project_root = (root or Path.cwd()).absolute()
    overrides = {"naming": naming, "emoji": None if emoji else False, "color": None if color else False}
    try:
        config = load_repository_config(project_root, overrides)
    except ConfigError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=2) from exc
    logger.use_emoji = config.emoji
    logger.use_color = config.color

    handler = attach_library_logging(logger)
    if handler is not None:
        ctx.call_on_close(lambda: logging.getLogger("fwlib").removeHandler(handler))
    logger.debug(f"root={config.root} naming={config.naming}")
    ctx.obj = CLIContext(config=config, logger=logger)


@app.command("names")
def names_command(ctx: typer.Context) -> None:
    """List the libraries available in the repository."""

    state = _state(ctx)
    with handle_errors(state.logger):
        for name in state.repository.names():
            state.logger.echo(name)


@app.command("layout")
def layout_command(ctx: typer.Context, name: NAME_ARGUMENT = "") -> None:
    """Print the layout version (1 or 2) of a library."""

    state = _state(ctx)
    with handle_errors(state.logger):
        state.logger.echo(str(state.repository.get_library_layout(name)))


@app.command("migrate")
def migrate_command(ctx: typer.Context, name: NAME_ARGUMENT = "") -> None:
    """Migrate a library to the configured layout."""

    state = _state(ctx)
    with handle_errors(state.logger):
        repo = state.repository
        current = repo.get_library_layout(name)
        target = state.config.layout
        if current == target:
            state.logger.ok(f"library '{name}' already uses layout {target}")
            return
        state.logger.info(f"migrating library '{name}' from layout {current} to layout {target}")
        repo.set_library_layout(name, target)
        state.logger.ok(f"migrated library '{name}' from layout {current} to layout {target}")


@app.command("add-adapters")
def add_adapters_command(
    ctx: typer.Context,
    name: NAME_ARGUMENT = "",
    target: Annotated[
        Path | None,
        typer.Option("--target", "-t", help="Library root receiving the adapters; defaults to the library itself."),
    ] = None,
) -> None:
    """Write include adapters so v1-style includes resolve in a v2 library."""

    state = _state(ctx)
    with handle_errors(state.logger):
        repo = state.repository
        target_dir = target if target is not None else Path(repo.library_directory(name))
        state.logger.info(f"writing include adapters for library '{name}' to {target_dir}")
        written = repo.add_adapters(name, target_dir, lambda path: state.logger.debug(f"adapter={path}"))
        state.logger.ok(f"wrote {len(written)} adapter header(s) to {target_dir}")


@app.command("validate")
def validate_command(ctx: typer.Context, name: NAME_ARGUMENT = "") -> None:
    """Check a library's layout and descriptor fields."""

    state = _state(ctx)
    with handle_errors(state.logger):
        result = validate_library(state.repository, name)
        if not result.valid:
            for field, message in result.errors.items():
                state.logger.fail(f"{field} {message}")
            raise CLIError(f"library '{name}' is not valid")
        state.logger.ok(f"library '{name}' is valid")


@app.command("example")
def example_command(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Example file or directory inside a v2 library.")],
) -> None:
    """Show how a library example maps onto a standalone project."""

    state = _state(ctx)
    with handle_errors(state.logger):
        try:
            example = is_library_example(path, state.config.root)
        except OSError as exc:
            raise CLIError(f"cannot access '{path}': {exc.strerror}") from exc
        if example is None:
            raise CLIError(f"'{path}' is not an example of a layout {LAYOUT_V2} library")
        try:
            mapping = example.build_files()
        except FileNotFoundError as exc:
            raise CLIError(f"example is incomplete: missing '{exc.filename}'") from exc

        section(f"Example {example.example}", use_color=state.logger.use_color)
        table = Table(box=box.SIMPLE, show_edge=False)
        table.add_column("Project path", style="bold")
        table.add_column("Source")
        for destination, source in sorted(mapping.map.items()):
            table.add_row(destination, source)
        state.logger.console.print(table)


__all__ = ["app", "handle_errors"]
