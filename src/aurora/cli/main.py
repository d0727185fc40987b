"""Main CLI entry point for the Aurora runtime.

This module provides the main CLI group that organizes all commands under
the ``aurora`` command namespace.

Commands are imported lazily so ``aurora --help`` does not load the build
pipeline.
"""

import importlib
import sys

import click

from aurora import __version__
from aurora.errors import EXIT_FAILURE


class LazyGroup(click.Group):
    """Click group that lazily loads subcommands only when invoked."""

    # command name -> (module path, attribute)
    commands_map = {
        "start": ("aurora.cli.environment_cmd", "start"),
        "stop": ("aurora.cli.environment_cmd", "stop"),
        "build": ("aurora.cli.environment_cmd", "build"),
        "shell": ("aurora.cli.environment_cmd", "shell"),
        "build-production": ("aurora.cli.build_production_cmd", "build_production"),
    }

    def get_command(self, ctx, cmd_name):
        """Lazily import and return the command when it's invoked."""
        if cmd_name not in self.commands_map:
            return None

        module_path, attribute = self.commands_map[cmd_name]
        mod = importlib.import_module(module_path)
        return getattr(mod, attribute)

    def list_commands(self, ctx):
        """Return list of available commands (for --help)."""
        return list(self.commands_map)


@click.group(cls=LazyGroup)
@click.version_option(version=__version__, prog_name="aurora")
def cli():
    """Aurora - lifecycle orchestrator for containerized PHP projects.

    Starts, stops and shells into the development stack, and builds
    production images that can be exported as archives.

    Use 'aurora COMMAND --help' for more information on a specific command.

    Examples:

    \b
      aurora start                          Start the development stack
      aurora stop                           Stop it and remove volumes
      aurora build                          Rebuild development images
      aurora shell                          Shell into the Mercury container
      aurora build-production --export      Build and export a production image
      aurora build-production -y            Unattended build, no export
    """


def main():
    """Entry point for the aurora CLI.

    Runs click outside standalone mode so Ctrl-C maps to 130 (click would
    report it as a generic abort).
    """
    try:
        rv = cli.main(standalone_mode=False)
    except (KeyboardInterrupt, click.Abort):
        click.echo("\nInterrupted.", err=True)
        sys.exit(130)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILURE)

    sys.exit(rv if isinstance(rv, int) else 0)


if __name__ == "__main__":
    main()
