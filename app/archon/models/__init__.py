"""Data models for archon.

This module exports the core data structures used throughout the application.
"""

from archon.models.config import (
    ArchonConfig,
    ArchonSettings,
    BackupTargets,
    GameConfig,
    SteamConfig,
)
from archon.models.snapshot import (
    ManifestEntry,
    RuntimeEnvironment,
    SnapshotCondition,
    SnapshotManifest,
    StorageCategory,
)

__all__ = [
    "ArchonConfig",
    "ArchonSettings",
    "BackupTargets",
    "GameConfig",
    "ManifestEntry",
    "RuntimeEnvironment",
    "SnapshotCondition",
    "SnapshotManifest",
    "SteamConfig",
    "StorageCategory",
]
