"""Restore command.

This module provides the `archon restore` command, which writes a
snapshot archive back to a game's live save locations.
"""

from pathlib import Path
from typing import Annotated

import typer

from archon.cli.display import print_restore_report
from archon.cli.types import GameName, YesOption, get_confirm, load_game, reported_errors
from archon.snapshot.service import SnapshotService


def restore(
    ctx: typer.Context,
    name: GameName,
    archive: Annotated[
        Path,
        typer.Argument(help="Snapshot archive (.zip) to restore."),
    ],
    yes: YesOption = False,
) -> None:
    """Restore a snapshot archive.

    Before anything is written you are asked to confirm when the snapshot
    was taken on another OS, when it contains entries the configuration
    no longer declares, and when existing files would be overwritten.

    Examples:
        archon restore eldenring ~/backups/eldenring/eldenring_20240101_120000.zip
        archon restore eldenring snapshot.zip --yes
    """
    config, game = load_game(ctx, name)
    service = SnapshotService(config.archon, game, get_confirm(yes))

    with reported_errors():
        report = service.restore_snapshot(archive)

    print_restore_report(report)
