"""Backup and restore orchestration for a single game.

SnapshotService wires the configuration to the engine: it validates the
settings, owns the game's snapshot directory and runs the
copy → manifest → archive pipeline for backups and the
extract → manifest → reconcile pipeline for restores.
"""

import logging
import os
import shutil
import tempfile
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from archon.core.paths import expand_path
from archon.models.config import ArchonSettings, GameConfig
from archon.snapshot.archive import compress, extract, is_zip_file
from archon.snapshot.copier import copy_to_staging
from archon.snapshot.decisions import Confirm, DecisionKind, DecisionRequest, ask
from archon.snapshot.errors import (
    ArchiveError,
    ConfigurationError,
    OperationCancelledError,
    SnapshotError,
)
from archon.snapshot.manifest import MANIFEST_FILENAME, build_manifest, load_manifest, save_manifest
from archon.snapshot.reconcile import Reconciler, RestoreReport
from archon.snapshot.resolver import ResolverContext, current_os

logger = logging.getLogger(__name__)

# Timestamp layout embedded in archive names (local time)
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

# Name of the scratch directory below the snapshot directory
STAGING_DIRNAME = "tmp"

# Permissions of a newly created snapshot directory
SNAPSHOT_DIR_MODE = 0o755


def archive_name(name: str, timestamp: datetime) -> str:
    """Get the file name of a snapshot archive: ``<name>_<YYYYmmdd_HHMMSS>.zip``."""
    return f"{name}_{timestamp.strftime(TIMESTAMP_FORMAT)}.zip"


def build_context(
    settings: ArchonSettings,
    game: GameConfig,
    *,
    host_os: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ResolverContext:
    """Create the path resolution context for a game.

    Directories from the configuration are expanded (``~`` and ``$VARS``).
    """
    return ResolverContext(
        install_dir=expand_path(game.install_dir),
        runtime_env=game.runtime_env,
        appdata_dir=expand_path(settings.appdata_dir) if settings.appdata_dir else None,
        document_dir=expand_path(settings.document_dir) if settings.document_dir else None,
        steam_app_id=game.steam_app_id,
        environ=dict(os.environ if environ is None else environ),
        host_os=host_os or current_os(),
    )


class SnapshotService:
    """Create and restore snapshots of one game.

    Args:
        settings: Global archon settings.
        game: Configuration of the game.
        confirm: Callable answering operator questions.
        host_os: OS tag of this machine (detected when None).
        environ: Environment variables for path resolution (os.environ when None).
    """

    def __init__(
        self,
        settings: ArchonSettings,
        game: GameConfig,
        confirm: Confirm,
        *,
        host_os: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.settings = settings
        self.game = game
        self.confirm = confirm
        self.host_os = host_os or current_os()
        self._environ = environ

    @property
    def context(self) -> ResolverContext:
        """Path resolution context for the game on this host."""
        return build_context(
            self.settings, self.game, host_os=self.host_os, environ=self._environ
        )

    @property
    def snapshot_dir(self) -> Path:
        """Directory holding the game's archives: ``<backup_dir>/<name>``."""
        return expand_path(self.settings.backup_dir) / self.game.name

    def validate(self, *, require_targets: bool = True) -> None:
        """Check that the configuration can drive a backup.

        Args:
            require_targets: Also require at least one backup target.

        Raises:
            ConfigurationError: If the backup dir, install dir or targets are missing.
        """
        if not self.settings.backup_dir:
            raise ConfigurationError("No backup_dir is configured")
        self.require_install_dir()
        if require_targets and self.game.backup_targets.is_empty:
            raise ConfigurationError(f"No backup targets are configured for {self.game.name}")

    def require_install_dir(self) -> None:
        """Raise ConfigurationError if the game has no install_dir."""
        if not self.game.install_dir:
            raise ConfigurationError(f"No install_dir is configured for {self.game.name}")

    def ensure_snapshot_dir(self) -> Path:
        """Make sure the snapshot directory exists, asking before creating it.

        Returns:
            The snapshot directory.

        Raises:
            OperationCancelledError: If the operator declines creation.
            SnapshotError: If the path exists but is not a directory, or
                cannot be created.
        """
        path = self.snapshot_dir
        if path.is_dir():
            return path
        if path.exists():
            raise SnapshotError(f"Snapshot path exists but is not a directory: {path}")

        request = DecisionRequest(
            kind=DecisionKind.CREATE_SNAPSHOT_DIR,
            question=f"Snapshot directory '{path}' does not exist. Create it?",
            default=True,
        )
        if not ask(self.confirm, request):
            raise OperationCancelledError(f"Creation of {path} was cancelled")

        try:
            path.mkdir(mode=SNAPSHOT_DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise SnapshotError(f"Failed to create snapshot directory {path}: {e}") from e
        logger.info("Created snapshot directory %s", path)
        return path

    def create_snapshot(self, now: datetime | None = None) -> Path:
        """Capture every backup target into a new archive.

        The staging directory is always removed afterwards, whether or not
        the snapshot succeeded.

        Args:
            now: Timestamp of the snapshot (local time); defaults to now.

        Returns:
            Path of the written archive.

        Raises:
            ConfigurationError: If the configuration is incomplete or invalid.
            SnapshotEnvironmentError: If a target's location cannot be resolved.
            SnapshotError: If a target cannot be copied.
            ArchiveError: If an archive of the same name exists or the
                archive cannot be written.
        """
        self.validate()
        now = now or datetime.now()
        name = self.game.name
        snapshot_dir = self.snapshot_dir
        staging_root = snapshot_dir / STAGING_DIRNAME
        staging_dir = staging_root / f"{name}_{now.strftime(TIMESTAMP_FORMAT)}"
        archive_path = snapshot_dir / archive_name(name, now)
        if archive_path.exists():
            raise ArchiveError(f"Archive {archive_path} already exists")

        logger.info("Creating snapshot of %s in %s", name, snapshot_dir)
        try:
            entries = copy_to_staging(staging_dir, self.game.backup_targets, self.context)
            manifest = build_manifest(
                name, entries, created_at=now.astimezone(), os_name=self.host_os
            )
            save_manifest(manifest, staging_dir / MANIFEST_FILENAME)
            compress(staging_dir, archive_path)
        finally:
            self._remove_staging(staging_root)

        logger.info("Snapshot of %s written to %s", name, archive_path)
        return archive_path

    def restore_snapshot(self, archive: Path) -> RestoreReport:
        """Restore an archive to the game's live locations.

        Args:
            archive: Snapshot archive to restore.

        Returns:
            Summary of what was restored.

        Raises:
            ConfigurationError: If the game has no install_dir.
            ArchiveError: If the file is not a readable snapshot archive.
            ManifestError: If the manifest is missing or invalid.
            RestoreCancelledError: If the operator declines a question.
        """
        self.require_install_dir()
        if not is_zip_file(archive):
            raise ArchiveError(f"Not a zip archive: {archive}")

        with tempfile.TemporaryDirectory(prefix="archon-restore-") as tmp:
            extracted = extract(archive, Path(tmp))
            manifest = load_manifest(extracted / MANIFEST_FILENAME)
            logger.info(
                "Restoring snapshot '%s' (%d entries) from %s",
                manifest.name,
                manifest.entry_count,
                archive,
            )
            reconciler = Reconciler(self.context, self.game.backup_targets, self.host_os)
            return reconciler.restore(extracted, manifest, self.confirm)

    @staticmethod
    def _remove_staging(staging_root: Path) -> None:
        try:
            shutil.rmtree(staging_root)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to remove staging directory %s: %s", staging_root, e)
