"""CLI package for archon.

This package contains the Typer application and all subcommands.
"""

from archon.cli.main import app

__all__ = ["app"]
