"""CLI commands for archon.

This package contains all subcommand implementations.
"""

from archon.cli.commands import backup, check_config, clean, restore, snapshots

__all__ = ["backup", "check_config", "clean", "restore", "snapshots"]
