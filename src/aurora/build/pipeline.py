"""Production Build & Export Pipeline.

This module sequences a production image build:

1. Pre-flight checks (engine, git, user confirmation); no side effects on failure
2. Build lock, then a disposable copy of the working tree (the temp context)
3. Production ``.env`` and ``Dockerfile`` generated into the temp context
4. Image tag computed once: ``<normalized-app-name>:<YYYY-MM-DD_HH-MM-SS>``
5. Engine build, output streamed line by line and kept for diagnostics
6. Temp context removed, on success and on every failure path
7. Optional export: destination validated, then the engine saves the image

Engine invocations are never retried. Any non-zero exit ends the run with a
typed error carrying the accumulated output.

Examples:
    Build without exporting and without prompts::

        pipeline = ProductionBuildPipeline(config, engine, confirm=questionary_confirm)
        session = pipeline.execute(BuildRequest(export=False, skip_confirmations=True))
        print(session.image_tag)
"""

import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from aurora.build.dockerfile import create_prod_dockerfile
from aurora.build.env_file import generate_production_env_file
from aurora.build.preflight import PreFlightChecker
from aurora.build.temp_context import BuildLock, TempContextPreparer
from aurora.deployment.engine import ContainerEngine
from aurora.errors import (
    BuildCancelledError,
    EngineBuildFailedError,
    EngineExportFailedError,
    ExportDirMissingError,
    ExportDirNotADirectoryError,
    ExportDirNotWritableError,
)
from aurora.utils.config import ConfigBuilder
from aurora.utils.logger import get_logger
from aurora.utils.naming import compute_image_tag
from aurora.utils.prompts import Confirm

logger = get_logger("build")

ARCHIVE_EXTENSION = "docker"


class BuildPhase(Enum):
    IDLE = "idle"
    PRE_FLIGHT = "pre_flight"
    STAGING = "staging"
    TAGGED = "tagged"
    BUILDING = "building"
    EXPORTING = "exporting"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class BuildRequest:
    """Caller-supplied parameters for one production build.

    Attributes:
        export: Export the image without asking
        export_dir: Archive destination; None means the configured build path
        skip_confirmations: Bypass every prompt (``--yes``); without ``export``
            this also means "do not export"
    """

    export: bool = False
    export_dir: str | Path | None = None
    skip_confirmations: bool = False


class BuildSession:
    """Mutable state of one pipeline run."""

    def __init__(self) -> None:
        self.phase = BuildPhase.IDLE
        self.temp_context_path: Path | None = None
        self.build_output: list[str] = []
        self.export_path: Path | None = None
        self._image_tag: str | None = None

    @property
    def image_tag(self) -> str | None:
        return self._image_tag

    @image_tag.setter
    def image_tag(self, value: str) -> None:
        if self._image_tag is not None:
            raise RuntimeError(f"Image tag already set to {self._image_tag!r} for this session")
        self._image_tag = value


def resolve_export_dir(export_dir: str | Path) -> Path:
    """Absolute, symlink-resolved export directory without trailing separators."""
    resolved = os.path.realpath(os.path.expanduser(str(export_dir)))
    return Path(resolved.rstrip(os.sep) or os.sep)


def validate_export_dir(export_dir: Path) -> None:
    """Check existence, then type, then write permission; raise on the first violation."""
    if not export_dir.exists():
        raise ExportDirMissingError(str(export_dir))
    if not export_dir.is_dir():
        raise ExportDirNotADirectoryError(str(export_dir))
    if not os.access(export_dir, os.W_OK):
        raise ExportDirNotWritableError(str(export_dir))


class ProductionBuildPipeline:
    """Build a production image from a staged copy of the project and optionally export it.

    Collaborators are injected so each can be replaced in isolation; the
    defaults are built from the configuration.
    """

    def __init__(
        self,
        config: ConfigBuilder,
        engine: ContainerEngine,
        confirm: Confirm,
        preflight: PreFlightChecker | None = None,
        preparer: TempContextPreparer | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.config = config
        self.engine = engine
        self.confirm = confirm
        self.preflight = preflight or PreFlightChecker(
            engine, config.project_root, config.app_name, confirm
        )
        self.preparer = preparer or TempContextPreparer(
            config.project_root,
            excludes=config.context_excludes,
            skip_paths=[config.storage_path],
        )
        self.clock = clock or datetime.now
        self.session: BuildSession | None = None

    def execute(self, request: BuildRequest) -> BuildSession:
        """Run the pipeline.

        Returns:
            The finished session (phase DONE)

        Raises:
            BuildCancelledError: A confirmation prompt was declined
            EngineUnavailableError, VersionControlMissingError: Pre-flight failure
            BuildInProgressError: Another build holds the lock
            EngineBuildFailedError, EngineExportFailedError: Engine exited non-zero
            ExportDirMissingError, ExportDirNotADirectoryError, ExportDirNotWritableError:
                Export destination failed validation
        """
        session = BuildSession()
        self.session = session

        try:
            session.phase = BuildPhase.PRE_FLIGHT
            self.preflight.run(request.skip_confirmations)

            logger.key_info("Building production...")
            with BuildLock(self.config.storage_path):
                self._build(session, request)
                logger.success(f"Image built successfully. Tag: {session.image_tag}")

                if self._should_export(request):
                    session.phase = BuildPhase.EXPORTING
                    session.export_path = self.export_image(session, request.export_dir)

            session.phase = BuildPhase.DONE
            return session

        except BuildCancelledError:
            session.phase = BuildPhase.CANCELLED
            raise
        except Exception:
            session.phase = BuildPhase.FAILED
            raise

    def _build(self, session: BuildSession, request: BuildRequest) -> None:
        """Stage, tag and build; the temp context is gone when this returns or raises."""
        with self.preparer.session() as context_dir:
            session.temp_context_path = context_dir
            session.phase = BuildPhase.STAGING

            production = self.config.production
            generate_production_env_file(
                context_dir, self.config.project_root, production.get("env")
            )
            dockerfile = create_prod_dockerfile(
                context_dir,
                self.config.app_name,
                production,
                request.skip_confirmations,
                self.confirm,
                project_root=self.config.project_root,
            )

            session.image_tag = compute_image_tag(self.config.app_name, self.clock())
            session.phase = BuildPhase.TAGGED

            logger.key_info("Building Docker image...")
            session.phase = BuildPhase.BUILDING
            command = self.engine.build_command(session.image_tag, context_dir, dockerfile)
            run = self.engine.run_streaming(command)
            session.build_output.extend(run.output)

            if not run.succeeded:
                raise EngineBuildFailedError(
                    "The Docker build process ended with a non-zero exit code. "
                    "Check the logs for more information.",
                    command,
                    run.returncode,
                    session.build_output,
                )

    def _should_export(self, request: BuildRequest) -> bool:
        if request.export:
            return True
        if request.skip_confirmations:
            return False
        return self.confirm("Would you like to export the image?")

    def export_image(self, session: BuildSession, export_dir: str | Path | None) -> Path:
        """Validate the destination and save the tagged image as an archive.

        Returns:
            Absolute path of the written archive
        """
        logger.key_info("Exporting image...")

        build_path = self.config.build_path
        if not build_path.exists():
            os.makedirs(build_path, mode=0o777, exist_ok=True)

        target_dir = resolve_export_dir(export_dir or build_path)
        validate_export_dir(target_dir)

        archive_path = target_dir / f"{session.image_tag}.{ARCHIVE_EXTENSION}"
        logger.trace(f"Creating tarball @ {archive_path}")

        command = self.engine.save_command(session.image_tag, archive_path)
        run = self.engine.run_streaming(command)
        session.build_output.extend(run.output)

        if not run.succeeded:
            raise EngineExportFailedError(
                "The Docker save process ended with a non-zero exit code. "
                "Check the logs for more information.",
                command,
                run.returncode,
                session.build_output,
            )

        logger.success(f"Image exported successfully. Path: {archive_path}")
        return archive_path
