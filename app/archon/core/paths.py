"""XDG-compliant path management for archon.

This module provides standardized paths following the XDG Base Directory
Specification for configuration storage, plus the path
expansion applied to directories written in the configuration file.

XDG defaults:
- Config: ~/.config/archon/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "archon"

# Environment variable that points at an alternative configuration file
CONFIG_ENV_VAR = "ARCHON_CONFIG"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/archon/ (or XDG_CONFIG_HOME/archon/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_config_path() -> Path:
    """Get the configuration file path.

    The ARCHON_CONFIG environment variable takes precedence over the
    XDG location.

    Returns:
        Path to ~/.config/archon/archon.yaml or the ARCHON_CONFIG override.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return expand_path(override)
    return get_config_dir() / "archon.yaml"


def get_user_theme_path() -> Path:
    """Get the user theme configuration path.

    Returns:
        Path to ~/.config/archon/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def expand_path(value: str | os.PathLike[str]) -> Path:
    """Expand environment variables and a leading ``~`` in a path.

    Relative results are made absolute against the current directory.
    ``~user`` forms are left to os.path.expanduser.

    Args:
        value: Path as written by the user.

    Returns:
        Absolute, expanded path (not resolved through symlinks).
    """
    expanded = os.path.expanduser(os.path.expandvars(os.fspath(value)))
    return Path(os.path.abspath(expanded))
