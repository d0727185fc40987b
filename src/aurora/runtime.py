"""Aurora orchestrator handle.

``Aurora`` is constructed once per process (usually by the CLI) and passed to
whatever needs it. Construction guarantees the storage layout exists.

The development lifecycle commands (start, stop, build, shell) only compose a
compose command line and hand back an unstarted :class:`ShellProcess`; the
caller decides when to run it and whether to wait. ``build_production`` runs
the full production pipeline and reports a :class:`BuildOutcome` instead of
raising.
"""

import shlex
import subprocess
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from aurora.build.pipeline import BuildRequest, ProductionBuildPipeline
from aurora.deployment.compose import ComposeComposer
from aurora.deployment.engine import ContainerEngine
from aurora.deployment.environment import running_in_mercury
from aurora.deployment.storage import ensure_storage_exists
from aurora.errors import AuroraError, BuildCancelledError, NotApplicableError
from aurora.utils.config import ConfigBuilder
from aurora.utils.logger import get_logger
from aurora.utils.prompts import Confirm, questionary_confirm

logger = get_logger("aurora")


@dataclass
class ShellProcess:
    """A shell command line ready to be spawned.

    No timeout is applied: lifecycle commands and interactive shells run as
    long as the user wants them to.
    """

    command: str
    tty: bool = False
    cwd: Path | None = None

    def start(self) -> subprocess.Popen:
        """Spawn the command without waiting for it. Standard streams are inherited."""
        if self.tty and not sys.stdin.isatty():
            logger.warning("No terminal attached, the interactive session may not behave")
        logger.trace(f"Running: {self.command}")
        return subprocess.Popen(self.command, shell=True, cwd=str(self.cwd) if self.cwd else None)

    def run(self) -> int:
        """Spawn the command and block until it exits. Returns the exit status."""
        with self.start() as process:
            return process.wait()


class BuildStatus(Enum):
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class BuildOutcome:
    """Result of ``Aurora.build_production``."""

    status: BuildStatus
    image_tag: str | None = None
    export_path: Path | None = None
    error: AuroraError | None = None
    diagnostics: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status is BuildStatus.DONE

    @property
    def exit_code(self) -> int:
        return 0 if self.error is None else self.error.exit_code


class Aurora:
    """Lifecycle orchestrator for one project."""

    def __init__(
        self,
        config: ConfigBuilder,
        engine: ContainerEngine | None = None,
        confirm: Confirm | None = None,
        mercury: bool | None = None,
    ):
        """
        Args:
            config: Project configuration
            engine: Container engine wrapper; built from ``container_runtime`` if omitted
            confirm: Yes/no prompt; defaults to an interactive questionary prompt
            mercury: Force managed mode on or off; detected from the environment if None
        """
        self.config = config
        self.engine = engine or ContainerEngine(config.container_runtime, cwd=config.project_root)
        self.confirm = confirm or questionary_confirm
        self.is_mercury = running_in_mercury() if mercury is None else mercury
        self.composer = ComposeComposer(config, self.engine)

        ensure_storage_exists(config.storage_path)

    @classmethod
    def from_project(
        cls,
        project: str | Path | None = None,
        config_path: str | Path | None = None,
        **kwargs,
    ) -> "Aurora":
        """Load configuration for ``project`` and construct the orchestrator."""
        return cls(ConfigBuilder(project, config_path), **kwargs)

    def _compose_process(self, actions: list[str], tty: bool = False) -> ShellProcess:
        if self.is_mercury:
            raise NotApplicableError()
        self.engine.require()

        command = " && ".join(self.composer.compose_prompt(action) for action in actions)
        return ShellProcess(command, tty=tty, cwd=self.config.project_root)

    def start(self) -> ShellProcess:
        """Bring the development stack up."""
        return self._compose_process(["up"])

    def stop(self) -> ShellProcess:
        """Tear the development stack down immediately, removing its volumes."""
        return self._compose_process(["down -t 0 --volumes"])

    def build(self) -> ShellProcess:
        """Rebuild the Mercury service image, then the rest of the stack."""
        service = shlex.quote(self.config.compose_service)
        return self._compose_process([f"build {service}", "build"])

    def shell(self) -> ShellProcess:
        """Interactive bash inside the Mercury container."""
        service = shlex.quote(self.config.compose_service)
        return self._compose_process([f"exec -it {service} bash"], tty=True)

    def production_pipeline(self) -> ProductionBuildPipeline:
        return ProductionBuildPipeline(self.config, self.engine, self.confirm)

    def build_production(
        self,
        export: bool = False,
        export_dir: str | Path | None = None,
        yes: bool = False,
    ) -> BuildOutcome:
        """Build (and optionally export) a production image.

        Cancellation and failures are reported through the outcome; nothing
        but unexpected errors propagates.
        """
        pipeline = self.production_pipeline()
        request = BuildRequest(export=export, export_dir=export_dir, skip_confirmations=yes)

        try:
            session = pipeline.execute(request)
        except BuildCancelledError as e:
            logger.warning(e.message)
            return self._outcome(BuildStatus.CANCELLED, pipeline, e)
        except AuroraError as e:
            logger.error(e.message)
            return self._outcome(BuildStatus.FAILED, pipeline, e)

        return BuildOutcome(
            status=BuildStatus.DONE,
            image_tag=session.image_tag,
            export_path=session.export_path,
            diagnostics=list(session.build_output),
        )

    @staticmethod
    def _outcome(
        status: BuildStatus, pipeline: ProductionBuildPipeline, error: AuroraError
    ) -> BuildOutcome:
        session = pipeline.session
        return BuildOutcome(
            status=status,
            image_tag=session.image_tag if session else None,
            error=error,
            diagnostics=list(session.build_output) if session else [],
        )
