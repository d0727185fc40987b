"""Production image build command.

``aurora build-production`` runs the production build pipeline and, when
asked (``--export``) or confirmed interactively, exports the image as an
archive.
"""

import click
from rich.markup import escape

from aurora.cli.styles import Messages, get_console
from aurora.errors import AuroraError, EngineCommandError

from .environment_cmd import report_error
from .project_utils import load_runtime, project_options

DIAGNOSTIC_TAIL_LINES = 20


@click.command("build-production")
@project_options
@click.option("--export", is_flag=True, help="Export the image without asking.")
@click.option(
    "--export-dir",
    type=click.Path(),
    default=None,
    help="Directory the image archive is written to (default: the configured build_path).",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Skip all confirmations. Without --export the image is not exported.",
)
@click.pass_context
def build_production(
    ctx: click.Context,
    project: str | None,
    config: str | None,
    export: bool,
    export_dir: str | None,
    yes: bool,
):
    """Build a production image of the project.

    The working tree is copied to a temporary build context, a production
    .env and Dockerfile are generated there, and the image is tagged
    <app_name>:<YYYY-MM-DD_HH-MM-SS>.

    Examples:

    \b
      # Build, answering prompts interactively
      $ aurora build-production

      # Unattended build and export to ./dist
      $ aurora build-production --yes --export --export-dir dist
    """
    console = get_console()

    try:
        aurora = load_runtime(project, config)
    except AuroraError as e:
        report_error(e)
        ctx.exit(e.exit_code)

    outcome = aurora.build_production(export=export, export_dir=export_dir, yes=yes)

    if outcome.succeeded:
        console.print(Messages.success("Production build complete"))
        console.print(Messages.label_value("Image", escape(outcome.image_tag)))
        if outcome.export_path:
            console.print(Messages.label_value("Archive", escape(str(outcome.export_path))))
        ctx.exit(0)

    if isinstance(outcome.error, EngineCommandError):
        tail = outcome.error.output_tail(DIAGNOSTIC_TAIL_LINES)
        if tail:
            console.print(Messages.header("Last lines of engine output:"))
            for line in tail:
                console.print(escape(line), style="dim", highlight=False)

    ctx.exit(outcome.exit_code)

