"""Path resolution for backup targets.

Maps a storage category and a configured pattern to the absolute path
where the live data is kept on this machine. The four Windows-style
categories share a single base-directory lookup that branches on the
game's runtime environment (native, Wine or Proton) and on the host OS.

All functions are pure with respect to their ResolverContext: the
environment variables, host OS and home directory they consult are
carried by the context, so the same inputs always yield the same path.
"""

import logging
import os
import platform
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from archon.models.snapshot import ManifestEntry, RuntimeEnvironment, StorageCategory
from archon.snapshot import winfolders
from archon.snapshot.errors import (
    ConfigurationError,
    EnvironmentUnavailableError,
    MissingCompatibilityDataError,
    UnknownRuntimeEnvironmentError,
    UnsupportedEnvironmentError,
    UnsupportedStorageCategoryError,
)

logger = logging.getLogger(__name__)

# Host OS on which the Windows-style categories are native
WINDOWS_OS = "windows"

# User name Proton creates inside every prefix
PROTON_USER = "steamuser"

# Folder names below drive_c/users/<user>/ (AppData/<name> except Documents)
WINDOWS_FOLDERS: dict[StorageCategory, str] = {
    StorageCategory.WIN_APPDATA_LOCAL: "Local",
    StorageCategory.WIN_APPDATA_LOCALLOW: "LocalLow",
    StorageCategory.WIN_APPDATA_ROAMING: "Roaming",
    StorageCategory.WIN_DOCUMENTS: "Documents",
}


def current_os() -> str:
    """Get the host OS tag stored in manifests (e.g., "linux", "windows")."""
    return platform.system().lower()


@dataclass(frozen=True)
class ResolverContext:
    """Everything path resolution needs to know about one game on one host.

    Attributes:
        install_dir: Game installation directory.
        runtime_env: Raw runtime environment value from the configuration.
        appdata_dir: Optional AppData root override.
        document_dir: Optional Documents folder override.
        steam_app_id: Store app id used to locate the Proton prefix.
        environ: Environment variables consulted (WINEPREFIX,
            STEAM_COMPAT_DATA_PATH, STEAM_ROOT).
        host_os: Host OS tag; Windows-style categories are native on "windows".
        home: Home directory; looked up from the OS when None.
    """

    install_dir: Path
    runtime_env: str | None = None
    appdata_dir: Path | None = None
    document_dir: Path | None = None
    steam_app_id: str | None = None
    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    host_os: str = field(default_factory=current_os)
    home: Path | None = None

    def home_dir(self) -> Path:
        """Get the current user's home directory.

        Raises:
            EnvironmentUnavailableError: If the home directory is unknown.
        """
        if self.home is not None:
            return self.home
        try:
            return Path.home()
        except (RuntimeError, KeyError) as e:
            raise EnvironmentUnavailableError(
                f"Cannot determine the user's home directory: {e}"
            ) from e

    @property
    def environment(self) -> RuntimeEnvironment:
        """The parsed runtime environment (unset means native).

        Raises:
            UnknownRuntimeEnvironmentError: For unrecognized values.
        """
        if not self.runtime_env:
            return RuntimeEnvironment.NATIVE
        try:
            return RuntimeEnvironment(self.runtime_env)
        except ValueError:
            msg = (
                f"Unknown runtime_env '{self.runtime_env}' "
                f"(expected one of: {', '.join(e.value for e in RuntimeEnvironment)})"
            )
            raise UnknownRuntimeEnvironmentError(msg) from None


def resolve(category: StorageCategory, pattern: str, context: ResolverContext) -> Path:
    """Resolve a backup pattern to its live absolute path.

    Args:
        category: Storage category the pattern is rooted under.
        pattern: Configured pattern (relative, except for ABSOLUTE).
        context: Resolution context for the game and host.

    Returns:
        Absolute path of the live file or directory. Existence is not checked.

    Raises:
        ConfigurationError: If a relative pattern is absolute or escapes its
            base, or an ABSOLUTE pattern is not absolute on this host.
        SnapshotEnvironmentError: If the base directory cannot be derived.
    """
    match category:
        case StorageCategory.INSTALL_DIR:
            return context.install_dir / relative_pattern(category, pattern)
        case StorageCategory.USER_HOME:
            return context.home_dir() / relative_pattern(category, pattern)
        case StorageCategory.ABSOLUTE:
            path = Path(pattern)
            if not path.is_absolute():
                raise ConfigurationError(
                    f"Pattern for {category.value} must be an absolute path: '{pattern}'"
                )
            return path
        case _:
            base = windows_base_dir(category, context)
            return base / relative_pattern(category, pattern)


def resolve_entry(entry: ManifestEntry, context: ResolverContext) -> Path:
    """Resolve the live destination of a manifest entry.

    Raises:
        UnsupportedStorageCategoryError: If the entry's category is unknown.
    """
    category = entry.category
    if category is None:
        msg = f"Unsupported storage category '{entry.storage_category}' for {entry.original_path}"
        raise UnsupportedStorageCategoryError(msg)
    return resolve(category, entry.original_path, context)


def relative_pattern(category: StorageCategory, pattern: str) -> PurePath:
    """Validate a pattern that must stay below its category's base directory.

    Raises:
        ConfigurationError: If the pattern is empty, absolute or contains "..".
    """
    path = PurePath(pattern)
    if not path.parts or path.is_absolute() or path.anchor:
        raise ConfigurationError(
            f"Pattern for {category.value} must be a relative path: '{pattern}'"
        )
    if ".." in path.parts:
        raise ConfigurationError(
            f"Pattern for {category.value} must not contain '..': '{pattern}'"
        )
    return path


def windows_base_dir(category: StorageCategory, context: ResolverContext) -> Path:
    """Get the base directory of a Windows-style storage category.

    Overrides from the configuration win; otherwise the location depends on
    the runtime environment and the host OS.

    Args:
        category: One of the four Windows-style categories.
        context: Resolution context for the game and host.

    Returns:
        Absolute base directory for the category.

    Raises:
        UnsupportedEnvironmentError: For native runs off Windows, or
            Wine/Proton runs on Windows.
        MissingCompatibilityDataError: For Proton without a prefix location.
        UnknownRuntimeEnvironmentError: For unrecognized runtime values.
    """
    if not category.is_windows_style:
        raise UnsupportedStorageCategoryError(
            f"{category.value} is not a Windows storage category"
        )
    folder = WINDOWS_FOLDERS[category]

    if category is StorageCategory.WIN_DOCUMENTS:
        if context.document_dir is not None:
            logger.debug("Using document_dir override %s", context.document_dir)
            return context.document_dir
    elif context.appdata_dir is not None:
        logger.debug("Using appdata_dir override %s for %s", context.appdata_dir, folder)
        return context.appdata_dir / folder

    environment = context.environment
    on_windows = context.host_os == WINDOWS_OS

    match environment:
        case RuntimeEnvironment.NATIVE:
            if not on_windows:
                msg = (
                    f"{category.value} has no native location on {context.host_os}; "
                    "set runtime_env to wine or proton, or configure appdata_dir/document_dir"
                )
                raise UnsupportedEnvironmentError(msg)
            return winfolders.known_folder_path(folder)
        case RuntimeEnvironment.WINE | RuntimeEnvironment.PROTON if on_windows:
            msg = f"runtime_env '{environment.value}' is not supported on Windows"
            raise UnsupportedEnvironmentError(msg)
        case RuntimeEnvironment.WINE:
            return _wine_users_dir(context) / _prefix_subdir(folder)
        case RuntimeEnvironment.PROTON:
            return _proton_users_dir(context) / _prefix_subdir(folder)


def _prefix_subdir(folder: str) -> PurePath:
    """Location of a folder below drive_c/users/<user>/ in a prefix."""
    if folder == WINDOWS_FOLDERS[StorageCategory.WIN_DOCUMENTS]:
        return PurePath(folder)
    return PurePath("AppData", folder)


def _wine_users_dir(context: ResolverContext) -> Path:
    """drive_c/users/<user> of the Wine prefix (WINEPREFIX or ~/.wine)."""
    home = context.home_dir()
    prefix = context.environ.get("WINEPREFIX")
    prefix_dir = Path(prefix) if prefix else home / ".wine"
    return prefix_dir / "drive_c" / "users" / home.name


def _proton_users_dir(context: ResolverContext) -> Path:
    """drive_c/users/steamuser of the game's Proton prefix.

    STEAM_COMPAT_DATA_PATH (set when Proton is run by hand) takes precedence
    over the Steam library's compatdata directory for the game's app id.
    """
    compat_data = context.environ.get("STEAM_COMPAT_DATA_PATH")
    if compat_data:
        prefix_dir = Path(compat_data) / "pfx"
    else:
        if not context.steam_app_id:
            msg = (
                "Proton needs STEAM_COMPAT_DATA_PATH or a steam.app_id in the game "
                "configuration to locate its prefix"
            )
            raise MissingCompatibilityDataError(msg)
        steam_root = context.environ.get("STEAM_ROOT")
        root = Path(steam_root) if steam_root else context.home_dir() / ".steam" / "steam"
        prefix_dir = root / "steamapps" / "compatdata" / context.steam_app_id / "pfx"
    return prefix_dir / "drive_c" / "users" / PROTON_USER
