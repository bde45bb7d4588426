"""Shared types and utilities for CLI commands.

This module provides the argument types and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer

from archon.cli.prompt import TyperConfirm
from archon.core.config import get_game, require_config
from archon.models.config import ArchonConfig, GameConfig
from archon.snapshot.decisions import AutoConfirm, Confirm
from archon.snapshot.errors import ArchonError, OperationCancelledError
from archon.utils.formatting import print_error, print_info

# Positional game identifier shared by the per-game commands
GameName = Annotated[str, typer.Argument(help="Game identifier from the configuration.")]

# --yes flag shared by the commands that ask questions
YesOption = Annotated[
    bool,
    typer.Option(
        "--yes",
        "-y",
        help="Answer yes to every question.",
    ),
]


def get_config_path(ctx: typer.Context) -> Path | None:
    """Get the --config path stored by the main callback, if any."""
    obj = ctx.obj or {}
    path: Path | None = obj.get("config_path")
    return path


def is_quiet(ctx: typer.Context) -> bool:
    """Check whether --quiet was given."""
    obj = ctx.obj or {}
    return bool(obj.get("quiet", False))


def load_game(ctx: typer.Context, name: str) -> tuple[ArchonConfig, GameConfig]:
    """Load the configuration and look up a game, exiting on failure.

    Args:
        ctx: Typer context carrying the global options.
        name: Game identifier.

    Returns:
        The configuration and the game's settings.

    Raises:
        typer.Exit: If the configuration cannot be loaded or the game is unknown.
    """
    config = require_config(get_config_path(ctx))
    with reported_errors():
        game = get_game(config, name)
    return config, game


def get_confirm(yes: bool) -> Confirm:
    """Get the Confirm callable for a command: interactive unless --yes."""
    if yes:
        return AutoConfirm(True)
    return TyperConfirm()


@contextmanager
def reported_errors() -> Iterator[None]:
    """Convert archon errors into CLI error output and exit code 1.

    Cancellations are reported as information rather than errors.

    Raises:
        typer.Exit: If an ArchonError was raised inside the block.
    """
    try:
        yield
    except OperationCancelledError as e:
        print_info(str(e))
        raise typer.Exit(code=1) from e
    except ArchonError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
