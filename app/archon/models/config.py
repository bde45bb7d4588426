"""Configuration models for archon.

This module defines the Pydantic models representing the archon.yaml
document: global settings under ``archon`` and one entry per game under
``games``, each with its backup targets grouped by storage category.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from archon.models.snapshot import StorageCategory

# Type alias for the platform of the binaries a game's store delivers
SteamPlatformType = Literal["windows", "linux", "macos"]


class BackupTargets(BaseModel):
    """Backup target patterns, one ordered list per storage category.

    Field names match the StorageCategory tags so the YAML keys, the
    manifest ``type`` values and the archive's top-level directories all
    use the same vocabulary.
    """

    model_config = ConfigDict(extra="forbid")

    install_dir: Annotated[list[str], Field(default_factory=list)]
    user_home: Annotated[list[str], Field(default_factory=list)]
    win_appdata_local: Annotated[list[str], Field(default_factory=list)]
    win_appdata_locallow: Annotated[list[str], Field(default_factory=list)]
    win_appdata_roaming: Annotated[list[str], Field(default_factory=list)]
    win_documents: Annotated[list[str], Field(default_factory=list)]
    absolute: Annotated[list[str], Field(default_factory=list)]

    @field_validator("*", mode="before")
    @classmethod
    def coerce_null_list(cls, value: Any) -> Any:
        """Treat a category key with no value as an empty list."""
        return [] if value is None else value

    def patterns(self, category: StorageCategory) -> list[str]:
        """Get the patterns declared for a storage category.

        Args:
            category: Storage category to look up.

        Returns:
            Patterns in declaration order.
        """
        patterns: list[str] = getattr(self, category.value)
        return patterns

    def iter_targets(self) -> Iterator[tuple[StorageCategory, str]]:
        """Iterate over every (category, pattern) pair in backup order."""
        for category in StorageCategory:
            for pattern in self.patterns(category):
                yield category, pattern

    def declares(self, category: str, original_path: str) -> bool:
        """Check whether a (category tag, pattern) pair is declared.

        Unknown category tags are never declared.
        """
        parsed = StorageCategory.parse(category)
        if parsed is None:
            return False
        return original_path in self.patterns(parsed)

    @property
    def is_empty(self) -> bool:
        """True when no category declares any pattern."""
        return not any(self.patterns(category) for category in StorageCategory)

    @property
    def target_count(self) -> int:
        """Total number of declared patterns."""
        return sum(len(self.patterns(category)) for category in StorageCategory)


class SteamConfig(BaseModel):
    """Store integration settings for a game.

    Attributes:
        app_id: Steam application id, used to locate the Proton prefix.
        platform: Platform of the binaries being installed.
    """

    model_config = ConfigDict(extra="forbid")

    app_id: Annotated[str | None, Field(description="Steam application id")] = None
    platform: Annotated[SteamPlatformType | None, Field(description="Binary platform")] = None

    @field_validator("app_id", mode="before")
    @classmethod
    def coerce_app_id(cls, value: Any) -> Any:
        """Accept numeric app ids as written in YAML."""
        if isinstance(value, int):
            return str(value)
        return value


class GameConfig(BaseModel):
    """Configuration of a single game installation.

    Attributes:
        name: Game identifier; filled from the ``games`` mapping key.
        install_dir: Installation directory of the game.
        runtime_env: native, wine or proton (unset means native). Kept as a
            string so an unknown value surfaces when paths are resolved.
        steam: Optional store integration settings.
        backup_targets: Patterns to capture, grouped by storage category.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(description="Game identifier")] = ""
    install_dir: Annotated[str, Field(description="Installation directory")] = ""
    runtime_env: Annotated[str | None, Field(description="Runtime environment")] = None
    steam: Annotated[SteamConfig | None, Field(description="Store settings")] = None
    backup_targets: Annotated[
        BackupTargets,
        Field(default_factory=BackupTargets, description="Backup targets"),
    ]

    @property
    def steam_app_id(self) -> str | None:
        """The configured Steam app id, if any."""
        if self.steam is None:
            return None
        return self.steam.app_id or None


class ArchonSettings(BaseModel):
    """Global settings shared by every game.

    Attributes:
        backup_dir: Directory holding one snapshot subdirectory per game.
        appdata_dir: Override for the Windows AppData root; the Local,
            LocalLow and Roaming folders are expected directly beneath it.
        document_dir: Override for the Windows Documents folder.
    """

    model_config = ConfigDict(extra="forbid")

    backup_dir: Annotated[str, Field(description="Snapshot root directory")] = ""
    appdata_dir: Annotated[str | None, Field(description="AppData root override")] = None
    document_dir: Annotated[str | None, Field(description="Documents override")] = None


class ArchonConfig(BaseModel):
    """Complete archon configuration document."""

    model_config = ConfigDict(extra="forbid")

    archon: Annotated[
        ArchonSettings,
        Field(default_factory=ArchonSettings, description="Global settings"),
    ]
    games: Annotated[
        dict[str, GameConfig],
        Field(default_factory=dict, description="Games by identifier"),
    ]

    @model_validator(mode="before")
    @classmethod
    def fill_game_names(cls, data: Any) -> Any:
        """Default each game's name to its key in the ``games`` mapping."""
        if not isinstance(data, dict):
            return data
        games = data.get("games")
        if not isinstance(games, dict):
            return data
        filled: dict[str, Any] = {}
        for key, game in games.items():
            if isinstance(game, dict) and not game.get("name"):
                game = {**game, "name": key}
            elif game is None:
                game = {"name": key}
            filled[key] = game
        return {**data, "games": filled}
