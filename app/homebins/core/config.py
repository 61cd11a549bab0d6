"""User configuration for homebins.

Configuration is stored in ~/.config/homebins/config.toml. Every setting is
optional; a missing file means defaults throughout.

Example config.toml:

    manifest_dir = "~/src/homebin-manifests/manifests"
    download_timeout = 120

    [dirs]
    bin_dir = "~/bin"

    [dirs.completion_dirs]
    fish = "~/.config/fish/completions"
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from homebins.core.errors import HomebinsError
from homebins.core.paths import InstallDirs, Shell, get_config_path, get_default_manifest_dir

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_TIMEOUT = 300


class DirsConfig(BaseModel):
    """Overrides for the install directory layout.

    Attributes:
        bin_dir: Directory for executables.
        man_dir: Base directory for manpages.
        systemd_user_unit_dir: Directory for systemd user units.
        completion_dirs: Completion directory per shell.
    """

    model_config = ConfigDict(extra="forbid")

    bin_dir: Annotated[Path | None, Field(description="Directory for executables")] = None
    man_dir: Annotated[Path | None, Field(description="Base directory for manpages")] = None
    systemd_user_unit_dir: Annotated[
        Path | None,
        Field(description="Directory for systemd user units"),
    ] = None
    completion_dirs: Annotated[
        dict[Shell, Path],
        Field(default_factory=dict, description="Completion directory per shell"),
    ]


class HomebinsConfig(BaseModel):
    """Configuration for homebins.

    Attributes:
        manifest_dir: Directory holding <name>.toml manifests.
        download_timeout: Timeout in seconds for a single download.
        dirs: Overrides for the install directory layout.
    """

    model_config = ConfigDict(extra="forbid")

    manifest_dir: Annotated[
        Path | None,
        Field(description="Manifest directory (None = ~/.config/homebins/manifests)"),
    ] = None
    download_timeout: Annotated[
        int,
        Field(ge=5, le=3600, description="Download timeout in seconds (5-3600)"),
    ] = DEFAULT_DOWNLOAD_TIMEOUT
    dirs: Annotated[
        DirsConfig,
        Field(default_factory=DirsConfig, description="Install directory overrides"),
    ]

    @property
    def effective_manifest_dir(self) -> Path:
        """The configured manifest directory, or the default one."""
        if self.manifest_dir is not None:
            return self.manifest_dir.expanduser()
        return get_default_manifest_dir()

    def install_dirs(self) -> InstallDirs:
        """Build the install directory layout with overrides applied.

        Returns:
            InstallDirs based on $HOME with configured directories replaced.
        """
        defaults = InstallDirs.from_home()
        completion_dirs = dict(defaults.completion_dirs)
        for shell, path in self.dirs.completion_dirs.items():
            completion_dirs[shell] = path.expanduser()
        return InstallDirs(
            bin_dir=_override(self.dirs.bin_dir, defaults.bin_dir),
            man_dir=_override(self.dirs.man_dir, defaults.man_dir),
            completion_dirs=completion_dirs,
            systemd_user_unit_dir=_override(
                self.dirs.systemd_user_unit_dir, defaults.systemd_user_unit_dir
            ),
        )


def _override(configured: Path | None, default: Path) -> Path:
    return configured.expanduser() if configured is not None else default


class ConfigError(HomebinsError):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> HomebinsConfig:
    """Load configuration from a TOML file.

    A missing file is not an error and yields the default configuration.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated HomebinsConfig object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return HomebinsConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return HomebinsConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def save_config(config: HomebinsConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The HomebinsConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config_to_dict(config), f)
        os.replace(tmp_path, config_path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def config_to_dict(config: HomebinsConfig) -> dict[str, object]:
    """Convert HomebinsConfig to a dictionary for TOML serialization.

    None values are left out, TOML has no null.

    Args:
        config: The HomebinsConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    result: dict[str, object] = {"download_timeout": config.download_timeout}

    if config.manifest_dir is not None:
        result["manifest_dir"] = str(config.manifest_dir)

    dirs: dict[str, object] = {}
    for key in ("bin_dir", "man_dir", "systemd_user_unit_dir"):
        value = getattr(config.dirs, key)
        if value is not None:
            dirs[key] = str(value)
    if config.dirs.completion_dirs:
        dirs["completion_dirs"] = {
            shell.value: str(path) for shell, path in config.dirs.completion_dirs.items()
        }
    if dirs:
        result["dirs"] = dirs

    return result
