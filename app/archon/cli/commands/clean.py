"""Clean command.

This module provides the `archon clean` command, which deletes the
contents of a game's installation directory after checking that a
recent snapshot exists.
"""

import typer

from archon.cli.types import (
    GameName,
    YesOption,
    get_confirm,
    is_quiet,
    load_game,
    reported_errors,
)
from archon.core.paths import expand_path
from archon.snapshot.errors import SnapshotError
from archon.snapshot.health import clear_directory, confirm_clean
from archon.snapshot.service import SnapshotService
from archon.utils.formatting import print_info, print_success


def clean(ctx: typer.Context, name: GameName, yes: YesOption = False) -> None:
    """Delete a game's installation after checking its backups.

    When no snapshot from the last 24 hours exists you are offered to
    create one first, and asked twice before anything is deleted. The
    installation directory itself is kept; only its contents are removed.

    Examples:
        archon clean eldenring
        archon clean eldenring --yes    # Back up if needed, then delete
    """
    config, game = load_game(ctx, name)
    confirm = get_confirm(yes)
    service = SnapshotService(config.archon, game, confirm)

    with reported_errors():
        service.validate(require_targets=False)
        install_dir = expand_path(game.install_dir)
        if not install_dir.is_dir():
            raise SnapshotError(f"Installation directory not found: {install_dir}")

        if not is_quiet(ctx):
            print_info(f"Checking snapshots of {name} before cleaning...")
        if not confirm_clean(service, confirm):
            print_info(f"Clean of {name} cancelled.")
            raise typer.Exit(code=1)

        removed = clear_directory(install_dir)

    print_success(f"Removed {removed} entries from {install_dir}")
