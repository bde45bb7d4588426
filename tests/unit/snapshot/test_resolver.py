"""Unit tests for path resolution.

Tests for resolving backup patterns to live paths for every storage
category, runtime environment and host OS combination.
"""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest
from archon.models.snapshot import ManifestEntry, RuntimeEnvironment, StorageCategory
from archon.snapshot.errors import (
    ConfigurationError,
    EnvironmentUnavailableError,
    MissingCompatibilityDataError,
    UnknownRuntimeEnvironmentError,
    UnsupportedEnvironmentError,
    UnsupportedStorageCategoryError,
)
from archon.snapshot.resolver import (
    PROTON_USER,
    ResolverContext,
    relative_pattern,
    resolve,
    resolve_entry,
    windows_base_dir,
)

ContextFactory = Callable[..., ResolverContext]


class TestInstallDirAndHome:
    """Tests for the install_dir, user_home and absolute categories."""

    def test_install_dir(self, make_context: ContextFactory, install_dir: Path) -> None:
        """install_dir patterns are joined to the installation directory."""
        result = resolve(StorageCategory.INSTALL_DIR, "saves/slot1.sav", make_context())
        assert result == install_dir / "saves" / "slot1.sav"

    def test_user_home(self, make_context: ContextFactory, home: Path) -> None:
        """user_home patterns are joined to the home directory."""
        result = resolve(StorageCategory.USER_HOME, ".local/share/game", make_context())
        assert result == home / ".local" / "share" / "game"

    def test_absolute(self, make_context: ContextFactory, tmp_path: Path) -> None:
        """absolute patterns are used as they are."""
        target = tmp_path / "srv" / "save"
        assert resolve(StorageCategory.ABSOLUTE, str(target), make_context()) == target

    def test_absolute_rejects_relative(self, make_context: ContextFactory) -> None:
        """absolute patterns must be absolute on the host."""
        with pytest.raises(ConfigurationError, match="absolute path"):
            resolve(StorageCategory.ABSOLUTE, "saves/slot1.sav", make_context())

    def test_home_lookup_failure(self, install_dir: Path) -> None:
        """A missing home directory raises EnvironmentUnavailableError."""
        context = ResolverContext(install_dir=install_dir, environ={}, host_os="linux")
        with (
            patch("archon.snapshot.resolver.Path.home", side_effect=RuntimeError("no home")),
            pytest.raises(EnvironmentUnavailableError, match="home directory"),
        ):
            resolve(StorageCategory.USER_HOME, "x", context)

    def test_resolution_does_not_touch_filesystem(self, tmp_path: Path, home: Path) -> None:
        """Resolving paths below missing directories succeeds."""
        context = ResolverContext(
            install_dir=tmp_path / "missing",
            environ={},
            host_os="linux",
            home=home,
        )
        result = resolve(StorageCategory.INSTALL_DIR, "save.dat", context)
        assert result == tmp_path / "missing" / "save.dat"
        assert not result.parent.exists()

    def test_same_inputs_same_output(self, make_context: ContextFactory) -> None:
        """Resolution is deterministic for identical contexts."""
        category = StorageCategory.WIN_APPDATA_ROAMING
        first = resolve(category, "Game", make_context(runtime_env="wine"))
        second = resolve(category, "Game", make_context(runtime_env="wine"))
        assert first == second


class TestRelativePattern:
    """Tests for relative pattern validation."""

    @pytest.mark.parametrize("pattern", ["", ".", "/etc/passwd", "../outside", "a/../../b"])
    def test_rejects_invalid_patterns(self, pattern: str) -> None:
        """Empty, absolute and parent-escaping patterns are rejected."""
        with pytest.raises(ConfigurationError):
            relative_pattern(StorageCategory.INSTALL_DIR, pattern)

    def test_accepts_nested_pattern(self) -> None:
        """Nested relative patterns are returned as paths."""
        assert relative_pattern(StorageCategory.USER_HOME, "a/b/c").parts == ("a", "b", "c")

    def test_resolve_rejects_escape(self, make_context: ContextFactory) -> None:
        """resolve refuses install_dir patterns that leave the directory."""
        with pytest.raises(ConfigurationError, match=r"'\.\.'"):
            resolve(StorageCategory.INSTALL_DIR, "../other/save.dat", make_context())


class TestOverrides:
    """Tests for appdata_dir and document_dir overrides."""

    @pytest.mark.parametrize(
        ("category", "folder"),
        [
            (StorageCategory.WIN_APPDATA_LOCAL, "Local"),
            (StorageCategory.WIN_APPDATA_LOCALLOW, "LocalLow"),
            (StorageCategory.WIN_APPDATA_ROAMING, "Roaming"),
        ],
    )
    def test_appdata_override(
        self,
        make_context: ContextFactory,
        tmp_path: Path,
        category: StorageCategory,
        folder: str,
    ) -> None:
        """appdata_dir overrides hold the AppData folders directly."""
        appdata = tmp_path / "AppData"
        context = make_context(appdata_dir=appdata)
        assert resolve(category, "Game/save", context) == appdata / folder / "Game" / "save"

    def test_document_override(self, make_context: ContextFactory, tmp_path: Path) -> None:
        """document_dir is used verbatim for win_documents."""
        documents = tmp_path / "Docs"
        context = make_context(document_dir=documents)
        result = resolve(StorageCategory.WIN_DOCUMENTS, "My Games/Foo", context)
        assert result == documents / "My Games" / "Foo"

    def test_override_wins_over_unsupported_environment(
        self, make_context: ContextFactory, tmp_path: Path
    ) -> None:
        """Overrides apply even where the runtime has no native location."""
        context = make_context(appdata_dir=tmp_path / "AppData", runtime_env="native")
        result = windows_base_dir(StorageCategory.WIN_APPDATA_LOCAL, context)
        assert result == tmp_path / "AppData" / "Local"

    def test_appdata_override_does_not_apply_to_documents(
        self, make_context: ContextFactory, home: Path
    ) -> None:
        """appdata_dir does not relocate the Documents folder."""
        context = make_context(appdata_dir=Path("/ignored"), runtime_env="wine")
        result = resolve(StorageCategory.WIN_DOCUMENTS, "Foo", context)
        assert result == home / ".wine" / "drive_c" / "users" / "gamer" / "Documents" / "Foo"


class TestNative:
    """Tests for natively running games."""

    @pytest.mark.parametrize("runtime_env", [None, "", "native"])
    def test_native_on_linux_unsupported(
        self, make_context: ContextFactory, runtime_env: str | None
    ) -> None:
        """Windows folders have no native location on Linux."""
        context = make_context(runtime_env=runtime_env)
        with pytest.raises(UnsupportedEnvironmentError, match="no native location"):
            resolve(StorageCategory.WIN_APPDATA_LOCAL, "Game", context)

    def test_native_on_windows_uses_known_folder(
        self, make_context: ContextFactory, tmp_path: Path
    ) -> None:
        """On Windows the shell's known folder is used."""
        known = tmp_path / "Users" / "gamer" / "AppData" / "LocalLow"
        context = make_context(host_os="windows")
        with patch(
            "archon.snapshot.winfolders.known_folder_path", return_value=known
        ) as mock_lookup:
            result = resolve(StorageCategory.WIN_APPDATA_LOCALLOW, "Studio/Game", context)

        mock_lookup.assert_called_once_with("LocalLow")
        assert result == known / "Studio" / "Game"


class TestWine:
    """Tests for games running under Wine."""

    @pytest.mark.parametrize(
        ("category", "subdir"),
        [
            (StorageCategory.WIN_APPDATA_LOCAL, ("AppData", "Local")),
            (StorageCategory.WIN_APPDATA_LOCALLOW, ("AppData", "LocalLow")),
            (StorageCategory.WIN_APPDATA_ROAMING, ("AppData", "Roaming")),
            (StorageCategory.WIN_DOCUMENTS, ("Documents",)),
        ],
    )
    def test_default_prefix(
        self,
        make_context: ContextFactory,
        home: Path,
        category: StorageCategory,
        subdir: tuple[str, ...],
    ) -> None:
        """Without WINEPREFIX the prefix is ~/.wine and the user is the home name."""
        context = make_context(runtime_env="wine")
        expected = home / ".wine" / "drive_c" / "users" / "gamer"
        assert resolve(category, "Game", context) == expected.joinpath(*subdir, "Game")

    def test_wineprefix(self, make_context: ContextFactory, tmp_path: Path) -> None:
        """WINEPREFIX relocates the prefix."""
        prefix = tmp_path / "prefixes" / "game"
        context = make_context(runtime_env="wine", environ={"WINEPREFIX": str(prefix)})
        result = resolve(StorageCategory.WIN_APPDATA_ROAMING, "Game", context)
        assert result == prefix / "drive_c" / "users" / "gamer" / "AppData" / "Roaming" / "Game"

    def test_wine_on_windows_unsupported(self, make_context: ContextFactory) -> None:
        """Wine is meaningless on a Windows host."""
        context = make_context(runtime_env="wine", host_os="windows")
        with pytest.raises(UnsupportedEnvironmentError, match="not supported on Windows"):
            resolve(StorageCategory.WIN_DOCUMENTS, "Game", context)


class TestProton:
    """Tests for games running under Proton."""

    def test_compat_data_path(self, make_context: ContextFactory, tmp_path: Path) -> None:
        """STEAM_COMPAT_DATA_PATH names the prefix parent directly."""
        compat = tmp_path / "compat" / "1245620"
        context = make_context(
            runtime_env="proton",
            environ={"STEAM_COMPAT_DATA_PATH": str(compat)},
        )
        result = resolve(StorageCategory.WIN_APPDATA_ROAMING, "EldenRing", context)
        assert result == (
            compat / "pfx" / "drive_c" / "users" / PROTON_USER / "AppData" / "Roaming" / "EldenRing"
        )

    def test_compat_data_path_wins_over_app_id(
        self, make_context: ContextFactory, tmp_path: Path
    ) -> None:
        """STEAM_COMPAT_DATA_PATH takes precedence over the app id."""
        compat = tmp_path / "compat"
        context = make_context(
            runtime_env="proton",
            steam_app_id="99",
            environ={"STEAM_COMPAT_DATA_PATH": str(compat), "STEAM_ROOT": "/elsewhere"},
        )
        result = windows_base_dir(StorageCategory.WIN_DOCUMENTS, context)
        assert result == compat / "pfx" / "drive_c" / "users" / PROTON_USER / "Documents"

    def test_app_id_with_steam_root(self, make_context: ContextFactory, tmp_path: Path) -> None:
        """The app id selects the compatdata prefix below STEAM_ROOT."""
        steam_root = tmp_path / "steam"
        context = make_context(
            runtime_env="proton",
            steam_app_id="1245620",
            environ={"STEAM_ROOT": str(steam_root)},
        )
        result = windows_base_dir(StorageCategory.WIN_APPDATA_LOCAL, context)
        assert result == (
            steam_root
            / "steamapps"
            / "compatdata"
            / "1245620"
            / "pfx"
            / "drive_c"
            / "users"
            / PROTON_USER
            / "AppData"
            / "Local"
        )

    def test_app_id_default_steam_root(self, make_context: ContextFactory, home: Path) -> None:
        """Without STEAM_ROOT the library is ~/.steam/steam."""
        context = make_context(runtime_env="proton", steam_app_id="413150")
        result = windows_base_dir(StorageCategory.WIN_APPDATA_LOCALLOW, context)
        assert result == (
            home
            / ".steam"
            / "steam"
            / "steamapps"
            / "compatdata"
            / "413150"
            / "pfx"
            / "drive_c"
            / "users"
            / PROTON_USER
            / "AppData"
            / "LocalLow"
        )

    def test_missing_compat_data(self, make_context: ContextFactory) -> None:
        """Without compat path or app id the prefix cannot be found."""
        context = make_context(runtime_env="proton")
        with pytest.raises(MissingCompatibilityDataError) as exc_info:
            resolve(StorageCategory.WIN_APPDATA_LOCAL, "Game", context)
        assert isinstance(exc_info.value, ConfigurationError)

    def test_proton_on_windows_unsupported(self, make_context: ContextFactory) -> None:
        """Proton is meaningless on a Windows host."""
        context = make_context(runtime_env="proton", host_os="windows", steam_app_id="1")
        with pytest.raises(UnsupportedEnvironmentError):
            resolve(StorageCategory.WIN_APPDATA_LOCAL, "Game", context)


class TestRuntimeEnvironment:
    """Tests for runtime_env parsing."""

    def test_unknown_runtime(self, make_context: ContextFactory) -> None:
        """Unknown runtime values raise UnknownRuntimeEnvironmentError."""
        context = make_context(runtime_env="dosbox")
        with pytest.raises(UnknownRuntimeEnvironmentError, match="dosbox"):
            resolve(StorageCategory.WIN_APPDATA_LOCAL, "Game", context)

    def test_unknown_runtime_ignored_for_install_dir(
        self, make_context: ContextFactory, install_dir: Path
    ) -> None:
        """The runtime only matters for Windows-style categories."""
        context = make_context(runtime_env="dosbox")
        assert resolve(StorageCategory.INSTALL_DIR, "a", context) == install_dir / "a"

    def test_environment_property(self, make_context: ContextFactory) -> None:
        """environment parses the configured value."""
        assert make_context(runtime_env="proton").environment is RuntimeEnvironment.PROTON
        assert make_context(runtime_env=None).environment is RuntimeEnvironment.NATIVE


class TestResolveEntry:
    """Tests for resolve_entry."""

    def test_resolves_known_category(self, make_context: ContextFactory, home: Path) -> None:
        """Entries resolve through their storage category."""
        entry = ManifestEntry.model_validate(
            {
                "modified_at": "2024-01-01T00:00:00Z",
                "archive_path": "user_home/.game",
                "type": "user_home",
                "original_path": ".game",
            }
        )
        assert resolve_entry(entry, make_context()) == home / ".game"

    def test_unknown_category(self, make_context: ContextFactory) -> None:
        """Unknown categories raise UnsupportedStorageCategoryError."""
        entry = ManifestEntry.model_validate(
            {
                "modified_at": "2024-01-01T00:00:00Z",
                "archive_path": "win_local/Game",
                "type": "win_local",
                "original_path": "Game",
            }
        )
        with pytest.raises(UnsupportedStorageCategoryError, match="win_local"):
            resolve_entry(entry, make_context())

    def test_relative_absolute_entry(self, make_context: ContextFactory) -> None:
        """absolute entries with a relative original_path are refused."""
        entry = ManifestEntry.model_validate(
            {
                "modified_at": "2024-01-01T00:00:00Z",
                "archive_path": "absolute/save.dat",
                "type": "absolute",
                "original_path": "save.dat",
            }
        )
        with pytest.raises(ConfigurationError, match="absolute path"):
            resolve_entry(entry, make_context())


class TestWindowsBaseDir:
    """Tests for windows_base_dir argument checks."""

    @pytest.mark.parametrize(
        "category",
        [StorageCategory.INSTALL_DIR, StorageCategory.USER_HOME, StorageCategory.ABSOLUTE],
    )
    def test_rejects_other_categories(
        self, make_context: ContextFactory, category: StorageCategory
    ) -> None:
        """Only the Windows-style categories have a Windows base directory."""
        with pytest.raises(UnsupportedStorageCategoryError, match="not a Windows"):
            windows_base_dir(category, make_context(appdata_dir=Path("/appdata")))
