"""Backup-health gate for destructive operations.

Before a game's installation directory is cleared the operator is told
whether a recent snapshot exists, offered to take one, and asked to
confirm (twice when no recent snapshot is available).
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from archon.models.snapshot import SnapshotCondition
from archon.snapshot.decisions import Confirm, DecisionKind, DecisionRequest, ask
from archon.snapshot.errors import SnapshotError
from archon.snapshot.service import TIMESTAMP_FORMAT

if TYPE_CHECKING:
    from archon.snapshot.service import SnapshotService

logger = logging.getLogger(__name__)

# Snapshots older than this do not count as a recent backup
DEFAULT_MAX_AGE = timedelta(hours=24)


@dataclass(frozen=True, slots=True)
class SnapshotFile:
    """A snapshot archive found in a game's snapshot directory.

    Attributes:
        path: Location of the archive.
        timestamp: Time encoded in the file name (local time, naive).
        modified_at: Last modification time of the file (UTC).
        size: File size in bytes.
    """

    path: Path
    timestamp: datetime
    modified_at: datetime
    size: int

    def age(self, now: datetime | None = None) -> timedelta:
        """Time elapsed since the archive was last written."""
        return (now or datetime.now(UTC)) - self.modified_at


def find_snapshots(snapshot_dir: Path, name: str) -> list[SnapshotFile]:
    """List the snapshot archives of a game, newest first.

    Only regular files named ``<name>_<YYYYmmdd_HHMMSS>.zip`` are
    considered; anything else in the directory is ignored.

    Args:
        snapshot_dir: The game's snapshot directory.
        name: Game name.

    Returns:
        Archives ordered by modification time, newest first. Empty when the
        directory does not exist.

    Raises:
        SnapshotError: If the directory exists but cannot be read.
    """
    prefix = f"{name}_"
    suffix = ".zip"
    try:
        children = list(snapshot_dir.iterdir())
    except FileNotFoundError:
        return []
    except OSError as e:
        raise SnapshotError(f"Failed to read snapshot directory {snapshot_dir}: {e}") from e

    snapshots: list[SnapshotFile] = []
    for child in children:
        file_name = child.name
        if not (file_name.startswith(prefix) and file_name.endswith(suffix)):
            continue
        try:
            timestamp = datetime.strptime(file_name[len(prefix) : -len(suffix)], TIMESTAMP_FORMAT)
        except ValueError:
            continue
        try:
            if not child.is_file():
                continue
            stat_result = child.stat()
        except OSError as e:
            logger.warning("Skipping unreadable snapshot %s: %s", child, e)
            continue
        snapshots.append(
            SnapshotFile(
                path=child,
                timestamp=timestamp,
                modified_at=datetime.fromtimestamp(stat_result.st_mtime, tz=UTC),
                size=stat_result.st_size,
            )
        )

    snapshots.sort(key=lambda snapshot: snapshot.modified_at, reverse=True)
    return snapshots


def check_condition(
    snapshot_dir: Path,
    name: str,
    now: datetime | None = None,
    max_age: timedelta = DEFAULT_MAX_AGE,
) -> SnapshotCondition:
    """Classify the snapshots available for a game.

    Args:
        snapshot_dir: The game's snapshot directory.
        name: Game name.
        now: Reference time (aware); defaults to now.
        max_age: Largest age of a snapshot that still counts as recent.

    Returns:
        DIR_NOT_FOUND, FILE_NOT_FOUND, TOO_OLD or HEALTHY.
    """
    if not snapshot_dir.is_dir():
        return SnapshotCondition.DIR_NOT_FOUND

    snapshots = find_snapshots(snapshot_dir, name)
    if not snapshots:
        return SnapshotCondition.FILE_NOT_FOUND

    now = now or datetime.now(UTC)
    if any(snapshot.age(now) <= max_age for snapshot in snapshots):
        return SnapshotCondition.HEALTHY
    return SnapshotCondition.TOO_OLD


_OFFER_MESSAGES = {
    SnapshotCondition.DIR_NOT_FOUND: "Snapshot directory '{path}' does not exist.",
    SnapshotCondition.FILE_NOT_FOUND: "No snapshot archive was found in '{path}'.",
    SnapshotCondition.TOO_OLD: "No snapshot was taken within the last 24 hours.",
}


def confirm_clean(service: SnapshotService, confirm: Confirm) -> bool:
    """Run the backup-health gate before clearing a game's installation.

    Args:
        service: Snapshot service of the game.
        confirm: Callable answering the operator questions.

    Returns:
        True if the operator agreed to clear the installation directory.

    Raises:
        ConfirmationError: If an answer cannot be read.
        ArchonError: If the offered backup fails.
    """
    name = service.game.name
    snapshot_dir = service.snapshot_dir
    condition = check_condition(snapshot_dir, name)
    logger.info("Snapshot condition of %s: %s", name, condition.value)

    if condition is not SnapshotCondition.HEALTHY:
        offer = DecisionRequest(
            kind=DecisionKind.OFFER_BACKUP,
            question="Create a snapshot now?",
            default=True,
            message=_OFFER_MESSAGES[condition].format(path=snapshot_dir),
        )
        if ask(confirm, offer):
            service.ensure_snapshot_dir()
            service.create_snapshot()
            condition = SnapshotCondition.HEALTHY

    match condition:
        case SnapshotCondition.HEALTHY:
            request = DecisionRequest(
                kind=DecisionKind.CONFIRM_CLEAN,
                question=f"Delete the installation of {name}?",
                default=True,
            )
        case SnapshotCondition.TOO_OLD:
            request = DecisionRequest(
                kind=DecisionKind.BACKUP_STALE,
                question=f"Only old snapshots exist. Delete the installation of {name} anyway?",
                default=False,
            )
        case _:
            request = DecisionRequest(
                kind=DecisionKind.BACKUP_MISSING,
                question=f"No snapshot exists. Delete the installation of {name} anyway?",
                default=False,
            )

    if not ask(confirm, request):
        return False
    if condition is SnapshotCondition.HEALTHY:
        return True

    again = DecisionRequest(
        kind=DecisionKind.CONFIRM_CLEAN_AGAIN,
        question="Are you really sure? This cannot be undone.",
        default=False,
    )
    return ask(confirm, again)


def clear_directory(path: Path) -> int:
    """Delete every child of a directory but keep the directory itself.

    Symlinks are removed without following them.

    Args:
        path: Directory to empty.

    Returns:
        Number of top-level entries removed.

    Raises:
        SnapshotError: If the directory cannot be listed or an entry removed.
    """
    removed = 0
    try:
        for child in path.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
            removed += 1
    except OSError as e:
        raise SnapshotError(f"Failed to clear {path}: {e}") from e
    logger.info("Removed %d entries from %s", removed, path)
    return removed
