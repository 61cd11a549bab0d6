"""XDG-compliant path management for homebins.

This module provides the directories homebins reads its own configuration
from, and the directory layout it installs files into.

XDG defaults:
- Config: ~/.config/homebins/
- Binaries: ~/.local/bin/
- Manpages: ~/.local/share/man/man<section>/
- Completions: ~/.local/share/bash-completion/completions/ (bash),
  ~/.config/fish/completions/ (fish), ~/.local/share/zsh/site-functions/ (zsh)
- Systemd user units: ~/.config/systemd/user/
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "homebins"


class Shell(str, Enum):
    """Shells homebins can install completions for."""

    BASH = "bash"
    FISH = "fish"
    ZSH = "zsh"


def _get_xdg_base(env_var: str, default_subdir: str) -> Path:
    """Get an XDG base directory respecting the environment override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the base directory, without the application name.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base)
    return Path.home() / default_subdir


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/homebins/ (or XDG_CONFIG_HOME/homebins/).
    """
    return _get_xdg_base("XDG_CONFIG_HOME", ".config") / APP_NAME


def get_config_path() -> Path:
    """Get the user configuration file path.

    Returns:
        Path to ~/.config/homebins/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_default_manifest_dir() -> Path:
    """Get the default directory manifests are loaded from.

    Returns:
        Path to ~/.config/homebins/manifests/.
    """
    return get_config_dir() / "manifests"


@dataclass(frozen=True, slots=True)
class InstallDirs:
    """Directories homebins installs files to.

    Every directory is plain configuration; nothing here is created until a
    file is actually installed.

    Attributes:
        bin_dir: Directory for executables.
        man_dir: Base directory for manpages, containing man<section>/.
        completion_dirs: Completion directory per shell.
        systemd_user_unit_dir: Directory for systemd user units.
    """

    bin_dir: Path
    man_dir: Path
    completion_dirs: dict[Shell, Path]
    systemd_user_unit_dir: Path

    def man_section_dir(self, section: int) -> Path:
        """The directory to install manpages of the given section to."""
        return self.man_dir / f"man{section}"

    def completion_dir(self, shell: Shell) -> Path:
        """The directory for completion files of the given shell."""
        return self.completion_dirs[shell]

    @classmethod
    def from_home(cls) -> "InstallDirs":
        """Build the default layout from $HOME and the XDG variables.

        Returns:
            InstallDirs rooted at the user's home directory.
        """
        home = Path.home()
        data_home = _get_xdg_base("XDG_DATA_HOME", ".local/share")
        config_home = _get_xdg_base("XDG_CONFIG_HOME", ".config")
        return cls(
            bin_dir=home / ".local" / "bin",
            man_dir=data_home / "man",
            completion_dirs={
                Shell.BASH: data_home / "bash-completion" / "completions",
                Shell.FISH: config_home / "fish" / "completions",
                Shell.ZSH: data_home / "zsh" / "site-functions",
            },
            systemd_user_unit_dir=config_home / "systemd" / "user",
        )

    @classmethod
    def under(cls, root: Path) -> "InstallDirs":
        """Build the default layout below an arbitrary root directory.

        Useful for staging installs and for tests.

        Args:
            root: Directory taking the place of $HOME.

        Returns:
            InstallDirs rooted at root.
        """
        return cls(
            bin_dir=root / ".local" / "bin",
            man_dir=root / ".local" / "share" / "man",
            completion_dirs={
                Shell.BASH: root / ".local" / "share" / "bash-completion" / "completions",
                Shell.FISH: root / ".config" / "fish" / "completions",
                Shell.ZSH: root / ".local" / "share" / "zsh" / "site-functions",
            },
            systemd_user_unit_dir=root / ".config" / "systemd" / "user",
        )
