"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from archon.models.config import ArchonSettings, BackupTargets, GameConfig
from archon.snapshot.resolver import ResolverContext


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Fake home directory of a user named 'gamer'."""
    path = tmp_path / "home" / "gamer"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def install_dir(tmp_path: Path) -> Path:
    """Empty game installation directory."""
    path = tmp_path / "games" / "mygame"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    """Root directory for snapshots (not created)."""
    return tmp_path / "backups"


@pytest.fixture
def make_context(home: Path, install_dir: Path) -> Callable[..., ResolverContext]:
    """Factory for resolver contexts rooted in the temporary directory.

    Defaults to a native game on a Linux host with an empty environment.
    """

    def _make(**overrides: Any) -> ResolverContext:
        values: dict[str, Any] = {
            "install_dir": install_dir,
            "runtime_env": None,
            "environ": {},
            "host_os": "linux",
            "home": home,
        }
        values.update(overrides)
        return ResolverContext(**values)

    return _make


@pytest.fixture
def settings(backup_dir: Path) -> ArchonSettings:
    """Global settings pointing at the temporary backup directory."""
    return ArchonSettings(backup_dir=str(backup_dir))


@pytest.fixture
def game(install_dir: Path) -> GameConfig:
    """Native game backing up a save file and a settings directory."""
    return GameConfig(
        name="mygame",
        install_dir=str(install_dir),
        backup_targets=BackupTargets(install_dir=["save.dat", "settings"]),
    )


@pytest.fixture
def populated_install(install_dir: Path) -> Path:
    """Installation directory containing save.dat and settings/options.ini."""
    (install_dir / "save.dat").write_bytes(b"slot-1 progress 42%")
    settings_dir = install_dir / "settings"
    settings_dir.mkdir()
    (settings_dir / "options.ini").write_text("[video]\nwidth=1920\nheight=1080\n")
    return install_dir
