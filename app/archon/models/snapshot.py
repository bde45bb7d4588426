"""Snapshot models for archive manifests.

This module defines the storage categories a backup target can be rooted
under and the Pydantic models describing the metadata.yaml document that
is embedded in every snapshot archive.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class StorageCategory(str, Enum):
    """Well-known directory class a backup pattern is rooted under.

    The values are persisted verbatim in manifests and used as the top-level
    directory names inside snapshot archives. Declaration order is the order
    in which categories are processed during backup.

    Attributes:
        INSTALL_DIR: Relative to the game's installation directory.
        USER_HOME: Relative to the current user's home directory.
        WIN_APPDATA_LOCAL: Relative to Windows %LOCALAPPDATA%.
        WIN_APPDATA_LOCALLOW: Relative to Windows AppData/LocalLow.
        WIN_APPDATA_ROAMING: Relative to Windows %APPDATA%.
        WIN_DOCUMENTS: Relative to the Windows Documents folder.
        ABSOLUTE: The pattern is an absolute path.
    """

    INSTALL_DIR = "install_dir"
    USER_HOME = "user_home"
    WIN_APPDATA_LOCAL = "win_appdata_local"
    WIN_APPDATA_LOCALLOW = "win_appdata_locallow"
    WIN_APPDATA_ROAMING = "win_appdata_roaming"
    WIN_DOCUMENTS = "win_documents"
    ABSOLUTE = "absolute"

    @property
    def is_windows_style(self) -> bool:
        """Whether this category resolves through a Windows base directory."""
        return self in _WINDOWS_CATEGORIES

    @classmethod
    def parse(cls, value: str) -> StorageCategory | None:
        """Look up a category by its tag, returning None for unknown tags."""
        try:
            return cls(value)
        except ValueError:
            return None


_WINDOWS_CATEGORIES = frozenset(
    {
        StorageCategory.WIN_APPDATA_LOCAL,
        StorageCategory.WIN_APPDATA_LOCALLOW,
        StorageCategory.WIN_APPDATA_ROAMING,
        StorageCategory.WIN_DOCUMENTS,
    }
)


class RuntimeEnvironment(str, Enum):
    """How the game executes relative to the host OS.

    Attributes:
        NATIVE: Runs natively on the host OS.
        WINE: Windows binary under a Wine prefix.
        PROTON: Windows binary under Steam's Proton.
    """

    NATIVE = "native"
    WINE = "wine"
    PROTON = "proton"


class SnapshotCondition(str, Enum):
    """Health of the snapshots available for a game.

    Attributes:
        DIR_NOT_FOUND: The game's snapshot directory does not exist.
        FILE_NOT_FOUND: The directory exists but holds no snapshot archive.
        TOO_OLD: Snapshots exist but none is recent enough.
        HEALTHY: A recent snapshot exists.
    """

    DIR_NOT_FOUND = "dir_not_found"
    FILE_NOT_FOUND = "file_not_found"
    TOO_OLD = "too_old"
    HEALTHY = "healthy"


def _as_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class ManifestEntry(BaseModel):
    """One captured backup target inside a snapshot archive.

    Attributes:
        modified_at: Last modification time of the source (UTC, whole seconds).
        archive_path: Slash-separated location inside the archive,
            always ``<category>/<relative path>``.
        storage_category: Category tag (``type`` in YAML). Kept as a plain
            string so manifests with unknown tags can still be loaded.
        original_path: The configured pattern, verbatim.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    modified_at: Annotated[datetime, Field(description="Source modification time (UTC)")]
    archive_path: Annotated[str, Field(min_length=1, description="Path inside the archive")]
    storage_category: Annotated[
        str,
        Field(alias="type", min_length=1, description="Storage category tag"),
    ]
    original_path: Annotated[str, Field(min_length=1, description="Configured pattern")]

    @field_validator("modified_at")
    @classmethod
    def normalize_modified_at(cls, value: datetime) -> datetime:
        """Store modification times in UTC."""
        return _as_utc(value)

    @property
    def category(self) -> StorageCategory | None:
        """The parsed storage category, or None if the tag is unknown."""
        return StorageCategory.parse(self.storage_category)

    @property
    def label(self) -> str:
        """Short human-readable form used in prompts: ``<type>: <path>``."""
        return f"{self.storage_category}: {self.original_path}"


class SnapshotManifest(BaseModel):
    """The metadata.yaml document embedded in a snapshot archive.

    Created once at backup time and never mutated afterwards; at restore
    time it is read back and handed to the reconciler.

    Attributes:
        version: Manifest schema version.
        name: Game name the snapshot was taken for.
        created_at: Snapshot creation time (UTC).
        tool_version: archon version that produced the snapshot.
        os: Origin OS tag (e.g., "linux", "windows").
        files: Captured entries, in backup order.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: Annotated[str, Field(min_length=1, description="Manifest schema version")]
    name: Annotated[str, Field(description="Snapshot name")]
    created_at: Annotated[datetime, Field(description="Creation time (UTC)")]
    tool_version: Annotated[str, Field(description="Producing tool version")] = ""
    os: Annotated[str, Field(description="Origin OS")]
    files: Annotated[
        list[ManifestEntry],
        Field(default_factory=list, description="Captured entries"),
    ]

    @field_validator("version", "tool_version", mode="before")
    @classmethod
    def coerce_str(cls, value: Any) -> Any:
        """Accept unquoted YAML scalars such as ``version: 1``."""
        if isinstance(value, int | float):
            return str(value)
        return value

    @field_validator("files", mode="before")
    @classmethod
    def coerce_null_files(cls, value: Any) -> Any:
        """Treat ``files:`` with no value as an empty list."""
        return [] if value is None else value

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: datetime) -> datetime:
        """Store the creation time in UTC."""
        return _as_utc(value)

    @model_validator(mode="after")
    def validate_unique_archive_paths(self) -> Self:
        """Validate that no two entries share an archive path."""
        seen: set[str] = set()
        duplicates: set[str] = set()
        for entry in self.files:
            if entry.archive_path in seen:
                duplicates.add(entry.archive_path)
            seen.add(entry.archive_path)
        if duplicates:
            msg = f"Duplicate archive paths in manifest: {sorted(duplicates)}"
            raise ValueError(msg)
        return self

    @property
    def entry_count(self) -> int:
        """Number of entries captured in the snapshot."""
        return len(self.files)
