"""Version probing of installed binaries.

The prober runs an installed binary with the manifest's version check
arguments and extracts a version from its output. Nothing about installed
tools is ever stored; every status query probes again.

A version check that does not match is not an error: some tools print
variant-dependent output, and a non-match means this manifest's binary is
not the one installed. Likewise a binary that cannot be run is reported as
not installed, so probing never aborts a batch over many manifests.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from homebins.models.manifest import Discover
from homebins.utils.shell import CommandResult, run_command

logger = logging.getLogger(__name__)

# Version checks should answer immediately; anything slower is hanging.
PROBE_TIMEOUT: float = 10.0


class CommandRunner(Protocol):
    """Capability to run a command and capture its output."""

    def __call__(self, args: list[str]) -> CommandResult: ...


def default_runner(args: list[str]) -> CommandResult:
    """Run a command with the probe timeout."""
    return run_command(args, timeout=PROBE_TIMEOUT)


@dataclass(frozen=True, slots=True)
class Installed:
    """The binary is installed and reported a version.

    Attributes:
        version: Version captured by the version check pattern.
    """

    version: str


@dataclass(frozen=True, slots=True)
class NotInstalled:
    """The binary is missing or is not the one described by the manifest.

    Attributes:
        reason: Human-readable explanation, for verbose output.
    """

    reason: str = "not installed"


ProbeResult = Installed | NotInstalled


class VersionProber:
    """Detects installed versions by running binaries.

    Example:
        >>> prober = VersionProber()
        >>> result = prober.probe(Path("~/.local/bin").expanduser(), manifest.discover)
        >>> if isinstance(result, Installed):
        ...     print(result.version)
    """

    def __init__(self, runner: CommandRunner | None = None) -> None:
        """Initialize the prober.

        Args:
            runner: Command runner to invoke binaries with. Defaults to a
                subprocess runner; tests substitute a fake.
        """
        self._runner: CommandRunner = runner or default_runner

    def probe(self, bin_dir: Path, discover: Discover) -> ProbeResult:
        """Probe the installed version of a binary.

        Args:
            bin_dir: Directory the binary is installed in.
            discover: Discovery rule from the manifest.

        Returns:
            Installed with the captured version, or NotInstalled.
        """
        binary = bin_dir / discover.binary
        if not binary.is_file():
            return NotInstalled(f"{binary} does not exist")

        args = [str(binary), *discover.version_check.args]
        try:
            result = self._runner(args)
        except (OSError, subprocess.SubprocessError) as e:
            logger.info("Failed to run %s: %s", " ".join(args), e)
            return NotInstalled(f"failed to run {binary}: {e}")

        output = result.output
        match = discover.version_check.regex().search(output)
        if match is None or not match.group(1):
            logger.info(
                "Output of %s did not match %r: %s",
                " ".join(args),
                discover.version_check.pattern,
                output.strip(),
            )
            return NotInstalled(f"version check of {binary} did not match")

        if not result.success:
            logger.debug("%s exited with %d, using its output anyway", binary, result.returncode)

        return Installed(match.group(1))
