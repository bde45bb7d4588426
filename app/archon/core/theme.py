"""Theme management for archon CLI.

Provides color theming with defaults from the ThemeColors model and user
overrides from ~/.config/archon/theme.toml.
"""

import logging
import sys
import tomllib
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from archon.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)


class ThemeColors(BaseModel):
    """Color configuration for archon CLI.

    All colors must be valid hex codes (#RRGGBB or #RGB).
    """

    model_config = ConfigDict(extra="forbid")

    # Base colors
    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    # Semantic colors
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Restore entries
    restored: str = "#c1ff62"
    overwrite: str = "#f5b332"
    undeclared: str = "#d44ebc"

    # Storage categories and paths
    category: str = "#0e8ac8"
    path: str = "#ffffff"

    # Snapshot condition
    condition_healthy: str = "#03b971"
    condition_stale: str = "#faf870"
    condition_missing: str = "#f53263"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        """Validate that all color values are valid hex codes."""
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{info.field_name}: color must start with '#'"
            raise ValueError(msg)
        color_part = color[1:]
        if len(color_part) not in (3, 6):
            msg = f"{info.field_name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        try:
            int(color_part, 16)
        except ValueError:
            msg = f"{info.field_name}: invalid hex color '{color}'"
            raise ValueError(msg) from None
        return color


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Load colors section from a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Dictionary of color name to hex value, or None if loading failed.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as e:
        logger.warning("Failed to parse TOML file %s: %s", path, e)
        print(f"Warning: Failed to parse {path}: {e}", file=sys.stderr)
        return None
    except OSError as e:
        logger.warning("Failed to read theme file %s: %s", path, e)
        return None

    colors_raw: object = data.get("colors", {})
    if not isinstance(colors_raw, dict):
        logger.warning("Invalid 'colors' section in %s", path)
        return None
    # TOML dictionaries have string keys, extract string values only
    result: dict[str, str] = {}
    for key, value in cast(dict[str, object], colors_raw).items():
        if isinstance(value, str):
            result[key] = value
    return result


def load_theme(path: Path | None = None) -> ThemeColors:
    """Load theme colors with user override support.

    Colors missing from the user theme keep their defaults.

    Args:
        path: Theme file to read. If None, uses ~/.config/archon/theme.toml.

    Returns:
        ThemeColors instance with merged configuration.
    """
    user_path = path or get_user_theme_path()
    user_colors = _load_toml_colors(user_path)
    if user_colors is None:
        return ThemeColors()

    logger.debug("Loaded user theme overrides from %s", user_path)
    try:
        return ThemeColors(**user_colors)
    except ValidationError as e:
        logger.warning("Theme validation failed, using defaults: %s", e)
        # Also print to stderr so user sees it without debug logging
        print(f"Warning: Invalid theme configuration: {e}", file=sys.stderr)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Convert ThemeColors to a Rich Theme.

    Args:
        colors: ThemeColors instance to convert. If None, loads theme automatically.

    Returns:
        Rich Theme instance configured with the color scheme.
    """
    if colors is None:
        colors = load_theme()

    styles: dict[str, str] = {
        # Direct color mappings
        "text": colors.text,
        "muted": colors.muted,
        "header": colors.header,
        "border": colors.border,
        "success": colors.success,
        "warning": colors.warning,
        "error": f"bold {colors.error}",
        "info": colors.info,
        "restored": colors.restored,
        "overwrite": colors.overwrite,
        "undeclared": colors.undeclared,
        "condition.healthy": f"bold {colors.condition_healthy}",
        "condition.stale": colors.condition_stale,
        "condition.missing": colors.condition_missing,
        # Convenience styles
        "bold_header": f"bold {colors.header}",
        "dim": colors.muted,
        "entry.category": colors.category,
        "entry.path": f"bold {colors.path}",
        "entry.time": colors.muted,
    }

    return Theme(styles)


# Module-level cached theme instance
_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme, loading and caching it if necessary.

    Returns:
        Cached Rich Theme instance.
    """
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
