"""Container engine invocation.

Builds the engine command lines Aurora needs (image build and image save)
and runs them with output streamed line by line to a sink while the process
is still running. No timeout is ever applied: production builds can take
as long as they take.
"""

import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from aurora.deployment.runtime_helper import engine_unavailable_message, find_engine
from aurora.errors import EngineUnavailableError
from aurora.utils.logger import get_logger

logger = get_logger("docker")

LineSink = Callable[[str], None]


@dataclass
class EngineRun:
    """Outcome of one engine invocation."""

    command: list[str]
    returncode: int
    output: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class ContainerEngine:
    """Thin wrapper over the Docker/Podman CLI."""

    def __init__(self, preference: str | None = "auto", cwd: str | Path | None = None):
        """
        Args:
            preference: Engine preference ('docker', 'podman' or 'auto')
            cwd: Working directory for engine processes
        """
        self.preference = preference
        self.cwd = str(cwd) if cwd else None

    def locate(self) -> str | None:
        """Return the engine binary name, or None if it cannot be found."""
        return find_engine(self.preference)

    def is_available(self) -> bool:
        return self.locate() is not None

    def require(self) -> str:
        """Return the engine binary name or raise EngineUnavailableError."""
        binary = self.locate()
        if binary is None:
            raise EngineUnavailableError(engine_unavailable_message(self.preference))
        return binary

    def build_command(self, tag: str, context_dir: str | Path, dockerfile: str | Path) -> list[str]:
        """Construct the image build command."""
        return [self.require(), "build", "-t", tag, "-f", str(dockerfile), str(context_dir)]

    def save_command(self, tag: str, archive_path: str | Path) -> list[str]:
        """Construct the image save command."""
        return [self.require(), "save", "-o", str(archive_path), tag]

    def run_streaming(self, command: list[str], sink: LineSink | None = None) -> EngineRun:
        """Run an engine command, forwarding each output line as it arrives.

        stdout and stderr are merged so ordering is preserved per line. Blocks
        until the process exits.

        Args:
            command: Command to run
            sink: Called with every output line (trailing newline stripped).
                Defaults to the docker component logger.

        Returns:
            EngineRun with exit status and accumulated output
        """
        sink = sink or logger.output
        logger.trace(f"Running: {' '.join(command)}")

        output: list[str] = []
        process = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
            cwd=self.cwd,
        )
        with process:
            for raw_line in process.stdout:
                line = raw_line.rstrip("\n")
                output.append(line)
                sink(line)
            returncode = process.wait()

        return EngineRun(command=command, returncode=returncode, output=output)
