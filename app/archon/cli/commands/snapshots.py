"""Snapshots command.

This module provides the `archon snapshots` command for listing a
game's snapshot archives and their backup health.
"""

import typer

from archon.cli.display import create_snapshots_table, format_condition
from archon.cli.types import GameName, load_game, reported_errors
from archon.core.paths import expand_path
from archon.snapshot.errors import ConfigurationError
from archon.snapshot.health import DEFAULT_MAX_AGE, check_condition, find_snapshots
from archon.utils.formatting import console, print_info


def snapshots(ctx: typer.Context, name: GameName) -> None:
    """List the snapshot archives of a game.

    Archives are shown newest first; those taken within the last 24 hours
    are marked as recent.

    Examples:
        archon snapshots eldenring
    """
    config, game = load_game(ctx, name)

    with reported_errors():
        if not config.archon.backup_dir:
            raise ConfigurationError("No backup_dir is configured")
        snapshot_dir = expand_path(config.archon.backup_dir) / game.name
        condition = check_condition(snapshot_dir, name)
        found = find_snapshots(snapshot_dir, name)

    if found:
        console.print(create_snapshots_table(found, DEFAULT_MAX_AGE))
    else:
        print_info(f"No snapshots found in {snapshot_dir}")
    console.print(f"\nCondition: {format_condition(condition)}")
