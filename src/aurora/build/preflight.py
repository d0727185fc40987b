"""Pre-flight checks for production builds.

Every check runs before anything is written to disk, so a failure here
leaves the filesystem untouched.
"""

import shutil
import subprocess
from pathlib import Path

from aurora.deployment.engine import ContainerEngine
from aurora.errors import BuildCancelledError, VersionControlMissingError
from aurora.utils.logger import get_logger
from aurora.utils.prompts import Confirm

logger = get_logger("preflight")


class PreFlightChecker:
    """Validate build preconditions: engine, git, and the user's intent."""

    def __init__(
        self,
        engine: ContainerEngine,
        project_root: str | Path,
        app_name: str,
        confirm: Confirm,
    ):
        self.engine = engine
        self.project_root = Path(project_root)
        self.app_name = app_name
        self.confirm = confirm

    def run(self, skip_confirmations: bool = False) -> None:
        """Run all checks.

        Raises:
            EngineUnavailableError: The container engine cannot be located
            VersionControlMissingError: The project is not a git working tree
            BuildCancelledError: The user declined to continue
        """
        self.engine.require()
        self.check_version_control()
        self.warn_if_dirty()

        if not skip_confirmations:
            if not self.confirm(f"Build a production image of {self.app_name}?"):
                raise BuildCancelledError("Build cancelled by user.")

    def check_version_control(self) -> None:
        if not (self.project_root / ".git").exists():
            raise VersionControlMissingError(
                technical_details={"project_root": str(self.project_root)}
            )

    def warn_if_dirty(self) -> None:
        """Warn about uncommitted changes; they will end up in the image."""
        if shutil.which("git") is None:
            logger.debug("git binary not found, skipping working tree status check")
            return

        result = subprocess.run(
            ["git", "status", "--porcelain"],
            cwd=self.project_root,
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            logger.debug(f"git status failed: {result.stderr.strip()}")
            return

        changed = [line for line in result.stdout.splitlines() if line.strip()]
        if changed:
            logger.warning(
                f"Working tree has {len(changed)} uncommitted change(s); "
                "they will be included in the image."
            )
