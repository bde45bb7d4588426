"""Unit tests for theme module.

Tests for theme loading, validation, and Rich theme generation.
"""

# pyright: reportPrivateUsage=false

from pathlib import Path
from unittest.mock import patch

import archon.core.theme as theme_module
import pytest
from archon.core.theme import (
    ThemeColors,
    _load_toml_colors,
    get_rich_theme,
    get_theme,
    load_theme,
)
from rich.theme import Theme


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """ThemeColors has sensible defaults."""
        colors = ThemeColors()
        assert colors.text == "#ffffff"
        assert colors.header == "#69B9A1"
        assert colors.success == "#03b971"
        assert colors.error == "#f53263"

    def test_valid_hex_colors(self) -> None:
        """ThemeColors accepts valid hex color codes."""
        colors = ThemeColors(
            text="#AABBCC",
            muted="#abc",
            restored="#123456",
        )
        assert colors.text == "#AABBCC"
        assert colors.muted == "#abc"
        assert colors.restored == "#123456"

    def test_invalid_hex_no_hash(self) -> None:
        """ThemeColors rejects colors without # prefix."""
        with pytest.raises(ValueError, match="must start with '#'"):
            ThemeColors(text="ffffff")

    def test_invalid_hex_wrong_length(self) -> None:
        """ThemeColors rejects colors with wrong length."""
        with pytest.raises(ValueError, match="must be #RGB or #RRGGBB"):
            ThemeColors(condition_stale="#ff")

    def test_invalid_hex_chars(self) -> None:
        """ThemeColors rejects invalid hex characters."""
        with pytest.raises(ValueError, match="invalid hex color"):
            ThemeColors(text="#gggggg")

    def test_extra_fields_forbidden(self) -> None:
        """ThemeColors rejects unknown fields."""
        with pytest.raises(ValueError):
            ThemeColors(package_manual="#ffffff")  # type: ignore[call-arg]


class TestLoadTomlColors:
    """Tests for _load_toml_colors internal function."""

    def test_loads_valid_toml(self, tmp_path: Path) -> None:
        """Loads colors from valid TOML file."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\ntext = "#000000"\noverwrite = "#aabbcc"\n')

        result = _load_toml_colors(theme_file)

        assert result == {"text": "#000000", "overwrite": "#aabbcc"}

    def test_returns_none_for_missing_file(self, tmp_path: Path) -> None:
        """Returns None when file doesn't exist."""
        assert _load_toml_colors(tmp_path / "nonexistent.toml") is None

    def test_returns_none_for_invalid_toml(self, tmp_path: Path) -> None:
        """Returns None for malformed TOML."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text("not valid [ toml syntax")

        assert _load_toml_colors(theme_file) is None

    def test_returns_empty_dict_for_missing_colors_section(self, tmp_path: Path) -> None:
        """Returns empty dict when colors section is missing."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[other]\nkey = "value"\n')

        assert _load_toml_colors(theme_file) == {}


class TestLoadTheme:
    """Tests for load_theme function."""

    def test_defaults_without_user_theme(self, tmp_path: Path) -> None:
        """Without a theme file the defaults are used."""
        with patch(
            "archon.core.theme.get_user_theme_path",
            return_value=tmp_path / "missing.toml",
        ):
            colors = load_theme()

        assert colors == ThemeColors()

    def test_user_theme_overrides_defaults(self, tmp_path: Path) -> None:
        """User theme overrides default values."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\nheader = "#ff0000"\nundeclared = "#00ff00"\n')

        with patch(
            "archon.core.theme.get_user_theme_path",
            return_value=user_theme,
        ):
            colors = load_theme()

        assert colors.header == "#ff0000"
        assert colors.undeclared == "#00ff00"
        assert colors.text == "#ffffff"

    def test_explicit_path(self, tmp_path: Path) -> None:
        """An explicit path is read instead of the user theme."""
        theme_file = tmp_path / "custom.toml"
        theme_file.write_text('[colors]\ncategory = "#111111"\n')

        assert load_theme(theme_file).category == "#111111"

    def test_graceful_fallback_on_invalid_colors(self, tmp_path: Path) -> None:
        """Falls back to defaults when a color is invalid."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\nheader = "red"\n')

        colors = load_theme(theme_file)

        assert colors.header == "#69B9A1"


class TestGetRichTheme:
    """Tests for get_rich_theme function."""

    def test_returns_rich_theme(self) -> None:
        """Returns a Rich Theme instance."""
        assert isinstance(get_rich_theme(ThemeColors()), Theme)

    def test_includes_styles(self) -> None:
        """Theme includes the styles used by the CLI."""
        theme = get_rich_theme(ThemeColors())

        for style in (
            "text",
            "muted",
            "header",
            "success",
            "warning",
            "error",
            "restored",
            "overwrite",
            "undeclared",
            "condition.healthy",
            "condition.stale",
            "condition.missing",
            "bold_header",
            "entry.category",
            "entry.path",
            "entry.time",
        ):
            assert style in theme.styles

    def test_uses_provided_colors(self) -> None:
        """Uses provided ThemeColors instance."""
        theme = get_rich_theme(ThemeColors(header="#123456"))

        assert theme.styles["header"].color is not None
        assert theme.styles["header"].color.name == "#123456"


class TestGetTheme:
    """Tests for get_theme caching function."""

    def test_caches_theme(self) -> None:
        """get_theme returns cached instance on subsequent calls."""
        theme_module._cached_theme = None

        theme1 = get_theme()
        theme2 = get_theme()

        assert theme1 is theme2
