"""Configuration file I/O and checks.

This module loads the archon.yaml configuration with validation through
the Pydantic models, looks up games, and reports problems that would
make a backup, restore or clean fail later on.

Configuration is stored in ~/.config/archon/archon.yaml (or the file
named by ARCHON_CONFIG).
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from archon.core.paths import expand_path, get_config_path
from archon.models.config import ArchonConfig, ArchonSettings, GameConfig
from archon.models.snapshot import RuntimeEnvironment
from archon.snapshot.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Host OS on which a Windows binary needs Wine or Proton
_LINUX_OS = "linux"


class ConfigFileError(ConfigurationError):
    """Base exception for configuration file errors."""


class ConfigNotFoundError(ConfigFileError):
    """Raised when the configuration file is not found."""


class ConfigParseError(ConfigFileError):
    """Raised when the configuration file cannot be parsed."""


class ConfigValidationError(ConfigFileError):
    """Raised when the configuration content is invalid."""


class GameNotFoundError(ConfigurationError):
    """Raised when a game is not defined in the configuration."""


def load_config(path: Path | None = None) -> ArchonConfig:
    """Load and validate the configuration from a YAML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated ArchonConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the YAML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid YAML syntax: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Failed to read config: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigValidationError(f"Config {config_path} must be a mapping")

    try:
        config = ArchonConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e

    logger.debug("Loaded %d games from %s", len(config.games), config_path)
    return config


def require_config(config_path: Path | None = None) -> ArchonConfig:
    """Load the configuration or exit with a helpful error message.

    This is a convenience wrapper around load_config() that handles
    common error cases by printing user-friendly messages and exiting.

    Args:
        config_path: Optional custom config path.

    Returns:
        Loaded and validated ArchonConfig.

    Raises:
        typer.Exit: If the configuration cannot be loaded.
    """
    import typer

    from archon.utils.formatting import print_error, print_info

    path = config_path or get_config_path()
    try:
        return load_config(path)
    except ConfigNotFoundError as e:
        print_error(f"Config not found: {path}")
        print_info("Create it or point ARCHON_CONFIG / --config at an existing file.")
        raise typer.Exit(code=1) from e
    except ConfigFileError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=1) from e


def get_game(config: ArchonConfig, name: str) -> GameConfig:
    """Look up a game by its identifier.

    Raises:
        GameNotFoundError: If the game is not configured.
    """
    game = config.games.get(name)
    if game is None:
        known = ", ".join(sorted(config.games)) or "none"
        raise GameNotFoundError(f"Game '{name}' is not configured (known games: {known})")
    return game


def check_settings(settings: ArchonSettings) -> list[str]:
    """Report problems with the global settings.

    Returns:
        Human-readable problems; empty if none were found.
    """
    if not settings.backup_dir:
        return ["backup_dir is not set"]

    problems: list[str] = []
    if not expand_path(settings.backup_dir).exists():
        problems.append(
            f"backup_dir {settings.backup_dir} does not exist "
            "(it is created on the first backup)"
        )
    if settings.appdata_dir and not expand_path(settings.appdata_dir).exists():
        problems.append(f"appdata_dir {settings.appdata_dir} is set but does not exist")
    if settings.document_dir and not expand_path(settings.document_dir).exists():
        problems.append(f"document_dir {settings.document_dir} is set but does not exist")
    return problems


def check_game(game: GameConfig, host_os: str) -> list[str]:
    """Report problems with a single game's configuration.

    Args:
        game: Game to check.
        host_os: OS tag of this machine.

    Returns:
        Human-readable problems; empty if none were found.
    """
    if not game.install_dir:
        return ["install_dir is not set"]
    if not expand_path(game.install_dir).exists():
        return [f"install_dir {game.install_dir} does not exist"]

    problems: list[str] = []
    runtime = game.runtime_env or RuntimeEnvironment.NATIVE.value
    if runtime not in {environment.value for environment in RuntimeEnvironment}:
        problems.append(f"runtime_env '{runtime}' is not one of native, wine or proton")
    elif host_os == _LINUX_OS and game.steam is not None and game.steam.platform:
        windows_binary = game.steam.platform == "windows"
        native = runtime == RuntimeEnvironment.NATIVE.value
        if windows_binary and native:
            problems.append(
                "Windows binaries cannot run natively on Linux; set runtime_env to wine or proton"
            )
        elif not windows_binary and not native:
            problems.append(
                f"runtime_env is {runtime} but steam.platform is {game.steam.platform}; "
                "set steam.platform to windows"
            )

    if game.backup_targets.is_empty:
        problems.append("no backup_targets are configured")
    return problems


def check_config(config: ArchonConfig, host_os: str) -> list[str]:
    """Report every problem in the configuration.

    Args:
        config: Configuration to check.
        host_os: OS tag of this machine.

    Returns:
        Problems prefixed with ``archon:`` or ``game: <name>:``.
    """
    problems = [f"archon: {problem}" for problem in check_settings(config.archon)]
    if not config.games:
        problems.append("archon: no games are configured")
    for name, game in config.games.items():
        problems.extend(f"game: {name}: {problem}" for problem in check_game(game, host_os))
    return problems
