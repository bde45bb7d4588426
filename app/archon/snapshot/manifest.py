"""Snapshot manifest I/O operations.

This module builds the metadata.yaml document describing a snapshot and
provides functions for saving and loading it in YAML format with
validation through the Pydantic models.
"""

import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import yaml
from pydantic import ValidationError

from archon import __version__
from archon.models.snapshot import ManifestEntry, SnapshotManifest
from archon.snapshot.errors import (
    ManifestError,
    ManifestNotFoundError,
    ManifestParseError,
    ManifestValidationError,
    UnsupportedManifestVersionError,
)
from archon.snapshot.resolver import current_os

logger = logging.getLogger(__name__)

# File name of the manifest at the root of every snapshot archive
MANIFEST_FILENAME = "metadata.yaml"

# Manifest schema version written by this release
MANIFEST_VERSION = "1"

# RFC 3339 layout used for every timestamp in the manifest
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def build_manifest(
    name: str,
    entries: list[ManifestEntry],
    *,
    created_at: datetime | None = None,
    os_name: str | None = None,
) -> SnapshotManifest:
    """Create the manifest for a freshly captured snapshot.

    Args:
        name: Game name the snapshot belongs to.
        entries: Captured entries, in backup order.
        created_at: Creation time; defaults to now.
        os_name: Origin OS tag; defaults to the host OS.

    Returns:
        A manifest stamped with the current schema and tool versions.
    """
    return SnapshotManifest(
        version=MANIFEST_VERSION,
        name=name,
        created_at=(created_at or datetime.now(UTC)).replace(microsecond=0),
        tool_version=__version__,
        os=os_name or current_os(),
        files=entries,
    )


def save_manifest(manifest: SnapshotManifest, path: Path) -> Path:
    """Save a manifest to a YAML file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        manifest: The manifest to save.
        path: Destination file.

    Returns:
        Path where the manifest was saved.

    Raises:
        ManifestError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = _manifest_to_dict(manifest)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ManifestError(f"Failed to write manifest: {e}") from e

    logger.debug("Wrote manifest with %d entries to %s", manifest.entry_count, path)
    return path


def load_manifest(path: Path) -> SnapshotManifest:
    """Load and validate a manifest from a YAML file.

    Args:
        path: Path to the manifest file.

    Returns:
        Validated manifest.

    Raises:
        ManifestNotFoundError: If the manifest file doesn't exist.
        ManifestParseError: If the YAML syntax is invalid.
        UnsupportedManifestVersionError: If the schema version is unknown.
        ManifestValidationError: If the content doesn't match the schema.
    """
    if not path.is_file():
        raise ManifestNotFoundError(f"Manifest not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ManifestParseError(f"Invalid YAML syntax in {path.name}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Failed to read manifest: {e}") from e

    if not isinstance(data, dict):
        raise ManifestValidationError(f"Manifest {path.name} must be a mapping")

    version = data.get("version")
    if version is not None and str(version) != MANIFEST_VERSION:
        msg = f"Unsupported manifest version '{version}' (expected {MANIFEST_VERSION})"
        raise UnsupportedManifestVersionError(msg)

    try:
        return SnapshotManifest.model_validate(data)
    except ValidationError as e:
        raise ManifestValidationError(f"Invalid manifest content: {e}") from e


def _format_timestamp(value: datetime) -> str:
    return value.astimezone(UTC).strftime(_TIMESTAMP_FORMAT)


def _manifest_to_dict(manifest: SnapshotManifest) -> dict[str, Any]:
    """Convert a manifest to a dictionary suitable for YAML serialization.

    Key order is fixed so the document reads the same on every platform.
    """
    return {
        "version": manifest.version,
        "name": manifest.name,
        "created_at": _format_timestamp(manifest.created_at),
        "tool_version": manifest.tool_version,
        "os": manifest.os,
        "files": [
            {
                "modified_at": _format_timestamp(entry.modified_at),
                "archive_path": entry.archive_path,
                "type": entry.storage_category,
                "original_path": entry.original_path,
            }
            for entry in manifest.files
        ],
    }
