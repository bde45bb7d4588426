"""Backup command.

This module provides the `archon backup` command, which captures a
game's configured backup targets into a new snapshot archive.
"""

import typer

from archon.cli.types import GameName, get_confirm, is_quiet, load_game, reported_errors
from archon.snapshot.service import SnapshotService
from archon.utils.formatting import print_info, print_success


def backup(ctx: typer.Context, name: GameName) -> None:
    """Create a snapshot of a game's save data.

    Every backup target of the game is copied into a zip archive named
    <name>_<YYYYmmdd_HHMMSS>.zip below <backup_dir>/<name>/. If that
    directory does not exist yet you are asked before it is created.

    Examples:
        archon backup eldenring
        archon --config ./archon.yaml backup stardew
    """
    config, game = load_game(ctx, name)
    service = SnapshotService(config.archon, game, get_confirm(yes=False))

    with reported_errors():
        service.validate()
        service.ensure_snapshot_dir()
        if not is_quiet(ctx):
            print_info(
                f"Backing up {game.backup_targets.target_count} target(s) of {name}..."
            )
        archive = service.create_snapshot()

    print_success(f"Snapshot written to {archive}")
