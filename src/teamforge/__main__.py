"""
main:
    Main CLI entry point for teamforge
"""

import click

from teamforge import __version__, ui
from teamforge.cli import (
    deploy_cmd,
    status_cmd,
    systems_cmd,
    team,
    validate_cmd,
)
from teamforge.cli.common import setup_logging


def ver():
    """Show version."""
    ui.console.print(f"teamforge {__version__}")


@click.group(invoke_without_command=True, no_args_is_help=True)
@click.option("--version", is_flag=True, help="Show version")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.option(
    "--library",
    envvar="TEAMFORGE_LIBRARY",
    type=click.Path(file_okay=False),
    default=None,
    help="Template library directory",
)
@click.pass_context
def main(ctx, version, verbose, library):
    """
    teamforge - Deploy AI assistant teams

    Deploy teams of agents, skills, hooks and MCP servers to
    Claude Code, Gemini CLI and Cline.

    \b
    Quick start:
        teamforge systems                              Show supported systems
        teamforge validate team.json -t cline          Check before deploying
        teamforge deploy team.json -t claude-code      Deploy a team

    \b
    For more help on any command:
        teamforge [command] --help
    """
    ctx.ensure_object(dict)
    ctx.obj["library"] = library
    setup_logging(verbose)
    if version:
        ver()


# Register command groups
main.add_command(team)

# Register top-level commands
main.add_command(systems_cmd)
main.add_command(validate_cmd)
main.add_command(deploy_cmd)
main.add_command(status_cmd)


if __name__ == "__main__":
    main()
