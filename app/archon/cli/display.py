"""Shared Rich display functions for snapshots and restore results.

Provides reusable table builders and summary printers used by the
restore, snapshots and check-config commands.
"""

from datetime import UTC, datetime, timedelta

from rich.table import Table

from archon.models.snapshot import SnapshotCondition
from archon.snapshot.health import SnapshotFile
from archon.snapshot.reconcile import RestoreReport
from archon.utils.formatting import (
    console,
    create_entry_table,
    format_entry_row,
    format_size,
    print_success,
)

# Rich style per snapshot condition
CONDITION_STYLES: dict[SnapshotCondition, str] = {
    SnapshotCondition.HEALTHY: "condition.healthy",
    SnapshotCondition.TOO_OLD: "condition.stale",
    SnapshotCondition.FILE_NOT_FOUND: "condition.missing",
    SnapshotCondition.DIR_NOT_FOUND: "condition.missing",
}


def format_age(age: timedelta) -> str:
    """Format an age as a short string (e.g., "3h 12m", "2d 4h")."""
    seconds = max(int(age.total_seconds()), 0)
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes = seconds // 60
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_condition(condition: SnapshotCondition) -> str:
    """Format a snapshot condition with color markup."""
    style = CONDITION_STYLES[condition]
    return f"[{style}]{condition.value}[/{style}]"


def create_snapshots_table(
    snapshots: list[SnapshotFile],
    max_age: timedelta,
    now: datetime | None = None,
) -> Table:
    """Create a Rich table listing snapshot archives.

    Archives younger than max_age are marked as recent.

    Args:
        snapshots: Archives to list, newest first.
        max_age: Largest age that still counts as recent.
        now: Reference time (aware); defaults to now.

    Returns:
        Rich Table with Archive, Created, Age and Size columns.
    """
    now = now or datetime.now(UTC)
    table = Table(
        title="Snapshots",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Archive", no_wrap=True)
    table.add_column("Created", style="muted", no_wrap=True)
    table.add_column("Age", justify="right")
    table.add_column("Size", style="info", justify="right")

    for snapshot in snapshots:
        age = snapshot.age(now)
        if age <= max_age:
            icon = "[condition.healthy]●[/]"  # Filled circle
            age_text = f"[condition.healthy]{format_age(age)}[/]"
        else:
            icon = "[muted]○[/]"  # Empty circle
            age_text = f"[muted]{format_age(age)}[/]"
        table.add_row(
            icon,
            snapshot.path.name,
            snapshot.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            age_text,
            format_size(snapshot.size),
        )

    return table


def print_restore_report(report: RestoreReport) -> None:
    """Print the entries written by a restore and a summary line."""
    table = create_entry_table(title=f"Restored from '{report.name}' ({report.origin_os})")
    overwritten = {entry.archive_path for entry in report.overwritten}
    undeclared = {entry.archive_path for entry in report.undeclared}
    table.add_column("Status", no_wrap=True)

    for entry in report.restored:
        if entry.archive_path in overwritten:
            status = "[overwrite]overwritten[/]"
        else:
            status = "[restored]created[/]"
        if entry.archive_path in undeclared:
            status += " [undeclared](undeclared)[/]"
        table.add_row(*format_entry_row(entry), status)

    console.print(table)
    print_success(f"Restored {len(report.restored)} entries.")
