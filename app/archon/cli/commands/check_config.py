"""Check-config command.

This module provides the `archon check-config` command, which reports
problems in the configuration before they break a backup or restore.
"""

import typer

from archon.cli.types import get_config_path, is_quiet
from archon.core.config import check_game, check_settings, require_config
from archon.snapshot.resolver import current_os
from archon.utils.formatting import console, print_error, print_success, print_warning


def check_config(ctx: typer.Context) -> None:
    """Check the configuration for problems.

    Reports missing or nonexistent directories and runtime settings that
    cannot work on this machine, such as a Windows binary configured to
    run natively on Linux. Exits with code 1 if a problem was found.

    Examples:
        archon check-config
        archon --config ./archon.yaml check-config
    """
    config = require_config(get_config_path(ctx))
    host_os = current_os()
    settings_problems = check_settings(config.archon)
    for problem in settings_problems:
        print_warning(f"archon: {problem}")
    failed = bool(settings_problems)

    if not config.games:
        print_error("No games are configured.")
        raise typer.Exit(code=1)

    for name, game in config.games.items():
        problems = check_game(game, host_os)
        if not problems:
            if not is_quiet(ctx):
                console.print(f"{name} ... [success]OK[/]")
            continue
        failed = True
        console.print(f"{name} ... [error]error[/]")
        for problem in problems:
            print_error(f"game: {name}: {problem}")

    if failed:
        raise typer.Exit(code=1)
    print_success("No problems found.")
