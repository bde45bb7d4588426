"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.table import Table

from archon.core.theme import get_theme
from archon.models.snapshot import ManifestEntry


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_entry_table(title: str = "Snapshot Entries") -> Table:
    """Create a pre-configured table for displaying manifest entries.

    Args:
        title: Table title.

    Returns:
        Rich Table with Type, Path and Modified columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],  # Zebra striping for readability
    )
    table.add_column("Type", style="entry.category", no_wrap=True)
    table.add_column("Path", style="entry.path", overflow="fold")
    table.add_column("Modified (UTC)", style="entry.time", no_wrap=True)
    return table


def format_entry_row(entry: ManifestEntry) -> tuple[str, str, str]:
    """Format a manifest entry as a table row.

    Returns:
        Tuple of (type, original path, modification time).
    """
    return (
        entry.storage_category,
        entry.original_path,
        entry.modified_at.strftime("%Y-%m-%d %H:%M:%S"),
    )


def format_size(size_bytes: int | None) -> str:
    """Format byte count as human-readable string."""
    if size_bytes is None or size_bytes == 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TB"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
