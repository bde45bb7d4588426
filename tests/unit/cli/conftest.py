"""Fixtures for CLI command tests."""

from pathlib import Path

import pytest


@pytest.fixture
def config_file(tmp_path: Path, install_dir: Path, backup_dir: Path) -> Path:
    """archon.yaml declaring 'mygame' with save.dat and settings as targets."""
    path = tmp_path / "archon.yaml"
    path.write_text(
        "archon:\n"
        f"  backup_dir: {backup_dir}\n"
        "games:\n"
        "  mygame:\n"
        f"    install_dir: {install_dir}\n"
        "    backup_targets:\n"
        "      install_dir:\n"
        "        - save.dat\n"
        "        - settings\n"
    )
    return path
