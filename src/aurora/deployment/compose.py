"""Compose command composition.

Turns a compose action ("up", "down -t 0 --volumes", "exec -it mercury bash")
into a single shell command line using the project's compose files.
"""

import shlex
from pathlib import Path

from aurora.deployment.engine import ContainerEngine
from aurora.utils.config import DEFAULT_COMPOSE_FILES, ConfigBuilder
from aurora.utils.logger import get_logger
from aurora.utils.naming import normalize_app_name

logger = get_logger("compose")


class ComposeComposer:
    """Compose command lines for the development stack."""

    def __init__(self, config: ConfigBuilder, engine: ContainerEngine):
        self.config = config
        self.engine = engine

    @property
    def project_root(self) -> Path:
        return self.config.project_root

    def discover_compose_files(self) -> list[Path]:
        """Compose files to pass with ``-f``.

        Configured files are used as-is (missing ones are reported); otherwise
        the well-known file names that exist in the project root, in order.
        """
        configured = self.config.compose_files
        if configured:
            files = []
            for name in configured:
                path = Path(name)
                if not path.is_absolute():
                    path = self.project_root / path
                if not path.exists():
                    logger.warning(f"Configured compose file not found: {path}")
                files.append(path)
            return files

        files = [self.project_root / name for name in DEFAULT_COMPOSE_FILES]
        found = [path for path in files if path.exists()]
        if not found:
            logger.warning(
                f"No compose files found in {self.project_root}, relying on engine defaults"
            )
        return found

    def base_command(self) -> list[str]:
        """``<engine> compose -p <project> -f ... [--env-file .env]`` as an argument list."""
        cmd = [self.engine.require(), "compose", "-p", normalize_app_name(self.config.app_name)]
        for compose_file in self.discover_compose_files():
            cmd.extend(("-f", str(compose_file)))

        env_file = self.project_root / ".env"
        if env_file.exists():
            cmd.extend(["--env-file", str(env_file)])

        return cmd

    def compose_prompt(self, action: str) -> str:
        """Full shell command line for a compose action.

        Args:
            action: Compose subcommand and its arguments, e.g. ``"down -t 0 --volumes"``
        """
        command = shlex.join(self.base_command()) + " " + action
        logger.debug(f"Composed command: {command}")
        return command
