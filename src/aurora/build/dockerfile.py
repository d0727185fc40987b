"""Production Dockerfile generation.

Renders the production build descriptor from a Jinja2 template and the
``production`` configuration section into the staged build context.
"""

import shlex
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from aurora import __version__
from aurora.errors import BuildCancelledError, ConfigurationError
from aurora.utils.logger import get_logger
from aurora.utils.prompts import Confirm

logger = get_logger("build")

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_FILENAME = "Dockerfile.prod.j2"
DOCKERFILE_NAME = "Dockerfile"


def build_template_context(app_name: str, production: dict[str, Any]) -> dict[str, Any]:
    """Template variables for the production Dockerfile."""
    command = production.get("command")
    if isinstance(command, str):
        command = shlex.split(command)

    build_commands = production.get("build_commands") or []
    if isinstance(build_commands, str):
        build_commands = [build_commands]

    return {
        "app_name": app_name,
        "aurora_version": __version__,
        "base_image": production["base_image"],
        "workdir": production["workdir"],
        "expose": production.get("expose"),
        "build_commands": [str(c) for c in build_commands],
        "command": command,
    }


def render_dockerfile(
    app_name: str,
    production: dict[str, Any],
    template_path: str | Path | None = None,
) -> str:
    """Render the production Dockerfile text.

    Args:
        app_name: Application name, used for labels
        production: Merged ``production`` configuration section
        template_path: Custom template file; defaults to the packaged template

    Raises:
        ConfigurationError: The template cannot be loaded or rendered
    """
    if template_path:
        template_path = Path(template_path)
        template_dir, template_name = template_path.parent, template_path.name
    else:
        template_dir, template_name = TEMPLATES_DIR, TEMPLATE_FILENAME

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    try:
        template = env.get_template(template_name)
        return template.render(build_template_context(app_name, production))
    except TemplateError as e:
        source = str(template_path) if template_path else TEMPLATE_FILENAME
        raise ConfigurationError(
            f"Could not render Dockerfile template {source}: {e.message or e}", source
        ) from e


def create_prod_dockerfile(
    context_dir: str | Path,
    app_name: str,
    production: dict[str, Any],
    skip_confirmations: bool,
    confirm: Confirm,
    project_root: str | Path | None = None,
) -> Path:
    """Write ``<context_dir>/Dockerfile``.

    A Dockerfile copied in from the working tree is only replaced after the
    user agrees, unless confirmations are skipped.

    Raises:
        BuildCancelledError: The user declined to overwrite the existing Dockerfile
    """
    target = Path(context_dir) / DOCKERFILE_NAME

    if target.exists() and not skip_confirmations:
        if not confirm("A Dockerfile already exists in the project. Overwrite it for this build?"):
            raise BuildCancelledError("Build cancelled: existing Dockerfile kept.")

    template_path = production.get("dockerfile_template")
    if template_path and project_root and not Path(template_path).is_absolute():
        template_path = Path(project_root) / template_path

    target.write_text(render_dockerfile(app_name, production, template_path))
    logger.trace(f"Generated production Dockerfile {target}")
    return target
