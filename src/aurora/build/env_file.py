"""Production environment file generation.

The staged build context gets its own ``.env``: the project's environment
(``.env.production`` if the project keeps one, else ``.env``) with the
production switches forced and the configured overrides applied on top.
The output depends only on those inputs.
"""

import re
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from aurora.utils.logger import get_logger

logger = get_logger("build")

PRODUCTION_ENV_OVERRIDES = {
    "APP_ENV": "production",
    "APP_DEBUG": "false",
}

_BARE_VALUE = re.compile(r"^[A-Za-z0-9_./:@,+\-]*$")


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        value = "true" if value else "false"
    value = str(value)
    if _BARE_VALUE.match(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def render_env(values: dict[str, Any]) -> str:
    """Serialize key/value pairs in dotenv syntax, one per line, in insertion order."""
    return "".join(f"{key}={_format_value(value)}\n" for key, value in values.items())


def source_env_file(project_root: str | Path) -> Path | None:
    """The env file production values are derived from, if any."""
    root = Path(project_root)
    for name in (".env.production", ".env"):
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def production_env_values(
    project_root: str | Path, overrides: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Merge the project environment, the production switches and configured overrides."""
    values: dict[str, Any] = {}
    source = source_env_file(project_root)
    if source is not None:
        values.update(dotenv_values(source))
    else:
        logger.warning("No .env file found, generating production environment from defaults")

    values.update(PRODUCTION_ENV_OVERRIDES)
    for key, value in (overrides or {}).items():
        values[str(key)] = value
    return values


def generate_production_env_file(
    context_dir: str | Path,
    project_root: str | Path,
    overrides: dict[str, Any] | None = None,
) -> Path:
    """Write ``<context_dir>/.env`` for the production image.

    Args:
        context_dir: The staged build context
        project_root: Project whose environment is used as the base
        overrides: ``production.env`` from configuration

    Returns:
        Path to the generated file
    """
    target = Path(context_dir) / ".env"
    target.write_text(render_env(production_env_values(project_root, overrides)))
    logger.trace(f"Generated production environment file {target}")
    return target
