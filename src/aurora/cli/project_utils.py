"""Utilities for project path resolution.

Every command accepts ``--project`` and ``--config``; these helpers turn
them into a loaded configuration and a ready ``Aurora`` handle.
"""

import os
from pathlib import Path

import click

from aurora.utils.config import CONFIG_FILENAME, ConfigBuilder
from aurora.utils.logger import configure_logging

PROJECT_ENV_VAR = "AURORA_PROJECT"


def resolve_project_path(project_arg: str | None = None) -> Path:
    """Resolve the project directory.

    Resolution priority:
    1. --project CLI argument (if provided)
    2. AURORA_PROJECT environment variable (if set)
    3. Current working directory (default)

    Examples:
        >>> resolve_project_path("~/projects/shop")
        Path('/Users/user/projects/shop')
    """
    if project_arg:
        return Path(project_arg).expanduser().resolve()

    env_project = os.environ.get(PROJECT_ENV_VAR)
    if env_project:
        return Path(env_project).expanduser().resolve()

    return Path.cwd()


def resolve_config_path(project_arg: str | None = None, config_arg: str | None = None) -> Path | None:
    """Resolve the configuration file.

    An explicit ``--config`` is returned as-is (it must exist). Otherwise
    ``aurora.yml`` in the project directory is used when present; None means
    "no configuration file, defaults only".
    """
    if config_arg:
        return Path(config_arg).expanduser()

    candidate = resolve_project_path(project_arg) / CONFIG_FILENAME
    return candidate if candidate.exists() else None


def load_config(project_arg: str | None = None, config_arg: str | None = None) -> ConfigBuilder:
    """Load configuration and apply its logging and theme sections."""
    from aurora.cli.styles import initialize_theme_from_config

    config = ConfigBuilder(
        resolve_project_path(project_arg), resolve_config_path(project_arg, config_arg)
    )
    configure_logging(config.logging_settings)
    initialize_theme_from_config(config)
    return config


def load_runtime(project_arg: str | None = None, config_arg: str | None = None):
    """Load configuration and construct the Aurora handle (ensures storage exists)."""
    from aurora.runtime import Aurora

    return Aurora(load_config(project_arg, config_arg))


def project_options(func):
    """Attach the ``--project`` and ``--config`` options shared by every command."""
    func = click.option(
        "--config",
        "-c",
        type=click.Path(dir_okay=False),
        default=None,
        help="Configuration file (default: aurora.yml in project directory, optional)",
    )(func)
    func = click.option(
        "--project",
        "-p",
        type=click.Path(exists=True, file_okay=False, dir_okay=True),
        default=None,
        help="Project directory (default: current directory or AURORA_PROJECT env var)",
    )(func)
    return func
