"""Main CLI application entry point.

Defines the Typer application, global options and logging setup.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from archon import __version__
from archon.cli.commands import backup, check_config, clean, restore, snapshots
from archon.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="archon",
    help="Back up and restore game save data.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"archon version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Log everything down to DEBUG.
        quiet: Only log errors.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    root = logging.getLogger()
    if not any(isinstance(handler, RichHandler) for handler in root.handlers):
        handler = RichHandler(console=err_console, show_path=verbose, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(level)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Configuration file (default: ~/.config/archon/archon.yaml).",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """archon - Back up and restore game save data.

    Declare where each game keeps its saves in archon.yaml and capture
    them into timestamped zip snapshots, whether the game runs natively,
    under Wine or under Proton.
    """
    configure_logging(verbose, quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config


# Register commands
app.command(name="backup")(backup.backup)
app.command(name="restore")(restore.restore)
app.command(name="clean")(clean.clean)
app.command(name="snapshots")(snapshots.snapshots)
app.command(name="check-config")(check_config.check_config)


if __name__ == "__main__":
    app()
