"""Development environment commands.

``aurora start``, ``aurora stop``, ``aurora build`` and ``aurora shell`` are
thin wrappers: each asks the runtime for its compose command line, runs it
in the foreground and exits with the command's status.
"""

import click
from rich.markup import escape

from aurora.cli.styles import Messages, get_console
from aurora.errors import AuroraError

from .project_utils import load_runtime, project_options


def report_error(error: AuroraError) -> None:
    """Print an Aurora error the way every command does."""
    console = get_console()
    if error.is_user_abort:
        console.print(Messages.warning(escape(error.message)))
    else:
        console.print(Messages.error(escape(error.message)))


def run_lifecycle(ctx: click.Context, action: str, project: str | None, config: str | None):
    try:
        aurora = load_runtime(project, config)
        process = getattr(aurora, action)()
    except AuroraError as e:
        report_error(e)
        ctx.exit(e.exit_code)

    get_console().print(Messages.command(escape(process.command)), highlight=False)
    returncode = process.run()
    if returncode != 0:
        get_console().print(Messages.error(f"Command exited with status {returncode}"))
    ctx.exit(returncode)


@click.command()
@project_options
@click.pass_context
def start(ctx: click.Context, project: str | None, config: str | None):
    """Start the development stack (compose up)."""
    run_lifecycle(ctx, "start", project, config)


@click.command()
@project_options
@click.pass_context
def stop(ctx: click.Context, project: str | None, config: str | None):
    """Stop the development stack and remove its volumes."""
    run_lifecycle(ctx, "stop", project, config)


@click.command()
@project_options
@click.pass_context
def build(ctx: click.Context, project: str | None, config: str | None):
    """Build the Mercury image, then the rest of the stack."""
    run_lifecycle(ctx, "build", project, config)


@click.command()
@project_options
@click.pass_context
def shell(ctx: click.Context, project: str | None, config: str | None):
    """Open an interactive bash shell inside the Mercury container."""
    run_lifecycle(ctx, "shell", project, config)
