"""Copy live backup targets into a staging directory.

Each configured (category, pattern) pair is copied to
``<staging>/<category>/<relative path>``, which is also the entry's
archive path. The whole target set is planned before the first byte is
copied, so configuration mistakes abort the backup without side effects.
"""

import logging
import stat
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath, PureWindowsPath

from archon.models.config import BackupTargets
from archon.models.snapshot import ManifestEntry, StorageCategory
from archon.snapshot.errors import (
    ConfigurationError,
    DuplicateArchivePathError,
    SnapshotError,
    SourceNotFoundError,
)
from archon.snapshot.resolver import ResolverContext, relative_pattern, resolve
from archon.utils.fileops import copy_file_or_dir

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlannedTarget:
    """A backup target with its archive location computed.

    Attributes:
        category: Storage category of the pattern.
        pattern: Configured pattern, verbatim.
        archive_path: Slash-separated location inside the archive.
    """

    category: StorageCategory
    pattern: str
    archive_path: str

    def staging_path(self, staging_dir: Path) -> Path:
        """Location of this target's copy below a staging directory."""
        return staging_dir.joinpath(*self.archive_path.split("/"))


def archive_path_for(category: StorageCategory, pattern: str) -> str:
    """Compute the archive path of a backup target.

    Args:
        category: Storage category of the pattern.
        pattern: Configured pattern.

    Returns:
        ``<category>/<relative path>`` with forward slashes.

    Raises:
        ConfigurationError: If the pattern is not valid for its category.
    """
    if category is StorageCategory.ABSOLUTE:
        parts = _absolute_parts(pattern)
    else:
        parts = relative_pattern(category, pattern).parts
    return "/".join((category.value, *parts))


def _absolute_parts(pattern: str) -> tuple[str, ...]:
    """Split an absolute pattern into archive path components.

    The anchor is dropped; a Windows drive letter is kept without its colon
    so ``C:\\Games\\save`` becomes ``C/Games/save``.
    """
    windows = PureWindowsPath(pattern)
    if windows.drive.endswith(":") and windows.root:
        parts: tuple[str, ...] = (windows.drive[0], *windows.parts[1:])
    else:
        posix = PurePosixPath(pattern)
        if not posix.is_absolute():
            raise ConfigurationError(
                f"Pattern for {StorageCategory.ABSOLUTE.value} must be an absolute path: '{pattern}'"
            )
        parts = posix.parts[1:]

    if not parts or ".." in parts:
        raise ConfigurationError(
            f"Pattern for {StorageCategory.ABSOLUTE.value} must name a path below the root: '{pattern}'"
        )
    return parts


def plan_targets(targets: BackupTargets) -> list[PlannedTarget]:
    """Compute archive paths for every target, in backup order.

    Raises:
        ConfigurationError: If a pattern is not valid for its category.
        DuplicateArchivePathError: If two targets map to one archive path.
    """
    planned: list[PlannedTarget] = []
    seen: dict[str, PlannedTarget] = {}
    for category, pattern in targets.iter_targets():
        target = PlannedTarget(category, pattern, archive_path_for(category, pattern))
        previous = seen.get(target.archive_path)
        if previous is not None:
            msg = (
                f"Backup targets '{previous.category.value}: {previous.pattern}' and "
                f"'{category.value}: {pattern}' both map to {target.archive_path}"
            )
            raise DuplicateArchivePathError(msg)
        seen[target.archive_path] = target
        planned.append(target)
    return planned


def copy_to_staging(
    staging_dir: Path,
    targets: BackupTargets,
    context: ResolverContext,
) -> list[ManifestEntry]:
    """Copy every backup target into a staging directory.

    Args:
        staging_dir: Directory receiving the copies (created if missing).
        targets: Backup targets of the game.
        context: Resolution context for the game and host.

    Returns:
        One manifest entry per target, in backup order.

    Raises:
        ConfigurationError: If the target set is invalid.
        SnapshotEnvironmentError: If a target's location cannot be resolved.
        SourceNotFoundError: If a target does not exist.
        SnapshotError: If a target cannot be read or copied.
    """
    planned = plan_targets(targets)
    staging_dir.mkdir(parents=True, exist_ok=True)

    entries: list[ManifestEntry] = []
    for target in planned:
        source = resolve(target.category, target.pattern, context)
        try:
            source_stat = source.lstat()
        except FileNotFoundError as e:
            msg = f"Backup source not found for {target.category.value}: {source}"
            raise SourceNotFoundError(msg) from e
        except OSError as e:
            raise SnapshotError(f"Cannot access backup source {source}: {e}") from e

        dest = target.staging_path(staging_dir)
        try:
            copy_file_or_dir(source, dest)
        except OSError as e:
            raise SnapshotError(f"Failed to copy {source} to {dest}: {e}") from e

        kind = "directory" if stat.S_ISDIR(source_stat.st_mode) else "file"
        logger.info("Captured %s %s as %s", kind, source, target.archive_path)
        entries.append(
            ManifestEntry(
                modified_at=datetime.fromtimestamp(source_stat.st_mtime, tz=UTC).replace(
                    microsecond=0
                ),
                archive_path=target.archive_path,
                storage_category=target.category.value,
                original_path=target.pattern,
            )
        )
    return entries
