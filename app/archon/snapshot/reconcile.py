"""Restore reconciliation.

Decides whether an extracted snapshot may be written back to its live
locations and replays it. The checks run in a fixed order and every
prompt happens before the first byte is written:

1. the manifest must list at least one entry with a known category;
2. a snapshot taken on another OS needs confirmation;
3. entries the current configuration no longer declares need confirmation;
4. live files that would be replaced need confirmation.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from archon.models.config import BackupTargets
from archon.models.snapshot import ManifestEntry, SnapshotManifest
from archon.snapshot.decisions import Confirm, DecisionKind, DecisionRequest, ask
from archon.snapshot.errors import (
    EmptyManifestError,
    RestoreCancelledError,
    SnapshotError,
    SourceNotFoundError,
    UnsafeArchivePathError,
    UnsupportedStorageCategoryError,
)
from archon.snapshot.resolver import ResolverContext, resolve_entry
from archon.utils.fileops import copy_file_or_dir

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RestoreReport:
    """Outcome of a completed restore.

    Attributes:
        name: Snapshot name from the manifest.
        origin_os: OS the snapshot was taken on.
        restored: Entries written back, in manifest order.
        overwritten: Entries whose live location already existed.
        undeclared: Entries not declared by the current configuration.
    """

    name: str
    origin_os: str
    restored: list[ManifestEntry] = field(default_factory=list)
    overwritten: list[ManifestEntry] = field(default_factory=list)
    undeclared: list[ManifestEntry] = field(default_factory=list)


def check_origin(manifest: SnapshotManifest, host_os: str) -> DecisionRequest | None:
    """Build the origin-mismatch question, if the snapshot came from another OS."""
    if manifest.os == host_os:
        return None
    return DecisionRequest(
        kind=DecisionKind.ORIGIN_MISMATCH,
        question="Restore it anyway?",
        default=False,
        message=(
            f"Snapshot '{manifest.name}' was created on {manifest.os}, "
            f"but this machine runs {host_os}."
        ),
    )


def find_undeclared(manifest: SnapshotManifest, targets: BackupTargets) -> list[ManifestEntry]:
    """Get entries the configuration does not declare (unknown categories included)."""
    return [
        entry
        for entry in manifest.files
        if not targets.declares(entry.storage_category, entry.original_path)
    ]


def find_overwrites(manifest: SnapshotManifest, context: ResolverContext) -> list[ManifestEntry]:
    """Get entries whose live location already exists.

    A location that cannot be inspected for any reason other than not
    existing counts as existing.

    Raises:
        UnsupportedStorageCategoryError: If an entry's category is unknown.
        ConfigurationError: If an entry's pattern is invalid.
        SnapshotEnvironmentError: If a location cannot be resolved.
    """
    overwrites: list[ManifestEntry] = []
    for entry in manifest.files:
        dest = resolve_entry(entry, context)
        try:
            dest.lstat()
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.debug("Cannot inspect %s, treating it as existing: %s", dest, e)
        overwrites.append(entry)
    return overwrites


def replay(
    extracted_dir: Path,
    manifest: SnapshotManifest,
    context: ResolverContext,
) -> list[ManifestEntry]:
    """Copy every entry of an extracted snapshot to its live location.

    Existing files are overwritten without asking.

    Args:
        extracted_dir: Root of the extracted archive.
        manifest: The snapshot's manifest.
        context: Resolution context for the game and host.

    Returns:
        The restored entries, in manifest order.

    Raises:
        EmptyManifestError: If the manifest lists no entries.
        UnsupportedStorageCategoryError: If an entry's category is unknown.
        SourceNotFoundError: If the archive lacks an entry's data.
        SnapshotError: If an entry cannot be copied.
    """
    if not manifest.files:
        raise EmptyManifestError(f"Snapshot '{manifest.name}' contains no files")

    restored: list[ManifestEntry] = []
    for entry in manifest.files:
        dest = resolve_entry(entry, context)
        source = _extracted_path(extracted_dir, entry)
        if not source.exists():
            raise SourceNotFoundError(f"Archive has no data for {entry.label}")
        try:
            copy_file_or_dir(source, dest)
        except OSError as e:
            raise SnapshotError(f"Failed to restore {entry.label} to {dest}: {e}") from e
        logger.info("Restored %s to %s", entry.archive_path, dest)
        restored.append(entry)
    return restored


def _extracted_path(extracted_dir: Path, entry: ManifestEntry) -> Path:
    root = os.path.abspath(extracted_dir)
    source = os.path.normpath(os.path.join(root, *entry.archive_path.split("/")))
    if not source.startswith(root.rstrip(os.sep) + os.sep):
        raise UnsafeArchivePathError(
            f"Manifest entry points outside the archive: {entry.archive_path}"
        )
    return Path(source)


class Reconciler:
    """Run the confirmation sequence of a restore and replay it.

    Args:
        context: Resolution context for the game and host.
        targets: Backup targets currently configured for the game.
        host_os: OS tag of this machine.
    """

    def __init__(self, context: ResolverContext, targets: BackupTargets, host_os: str) -> None:
        self.context = context
        self.targets = targets
        self.host_os = host_os

    def restore(
        self,
        extracted_dir: Path,
        manifest: SnapshotManifest,
        confirm: Confirm,
    ) -> RestoreReport:
        """Confirm and replay a snapshot.

        Args:
            extracted_dir: Root of the extracted archive.
            manifest: The snapshot's manifest.
            confirm: Callable answering the operator questions.

        Returns:
            Summary of what was restored.

        Raises:
            EmptyManifestError: If the manifest lists no entries.
            UnsupportedStorageCategoryError: If an entry's category is unknown.
            RestoreCancelledError: If the operator declines a question.
            ConfirmationError: If an answer cannot be read.
        """
        if not manifest.files:
            raise EmptyManifestError(f"Snapshot '{manifest.name}' contains no files")

        unknown = [entry for entry in manifest.files if entry.category is None]
        if unknown:
            labels = ", ".join(entry.label for entry in unknown)
            raise UnsupportedStorageCategoryError(f"Unsupported storage categories: {labels}")

        origin = check_origin(manifest, self.host_os)
        if origin is not None:
            self._require(confirm, origin)

        undeclared = find_undeclared(manifest, self.targets)
        if undeclared:
            self._require(
                confirm,
                DecisionRequest(
                    kind=DecisionKind.UNDECLARED_ENTRIES,
                    question="Restore these entries as well?",
                    default=True,
                    message="The snapshot contains entries not declared in the configuration:",
                    entries=tuple(undeclared),
                ),
            )

        overwrites = find_overwrites(manifest, self.context)
        if overwrites:
            self._require(
                confirm,
                DecisionRequest(
                    kind=DecisionKind.OVERWRITE,
                    question="Overwrite them?",
                    default=True,
                    message="The following locations already exist and will be overwritten:",
                    entries=tuple(overwrites),
                ),
            )

        restored = replay(extracted_dir, manifest, self.context)
        return RestoreReport(
            name=manifest.name,
            origin_os=manifest.os,
            restored=restored,
            overwritten=overwrites,
            undeclared=undeclared,
        )

    @staticmethod
    def _require(confirm: Confirm, request: DecisionRequest) -> None:
        if not ask(confirm, request):
            logger.info("Restore declined at %s", request.kind.value)
            raise RestoreCancelledError(f"Restore cancelled: {request.message or request.question}")
