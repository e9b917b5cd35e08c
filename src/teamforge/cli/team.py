"""
Team management CLI commands.

Commands for importing, listing, showing and removing the teams stored in a
project.
"""

import click

from teamforge import ui
from teamforge.cli.common import get_library, handle_error, resolve_project
from teamforge.detector import ConfigDetector
from teamforge.exceptions import TeamForgeError
from teamforge.teams import TeamStore, load_team_file


@click.group(name="team")
def team():
    """
    Manage the teams stored in a project.

    Teams are stored under .teamforge/teams/ in the project directory.
    """
    pass


@team.command(name="add")
@click.argument("team_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("project_path", required=False, default="./")
@click.pass_context
def add_team(ctx: click.Context, team_file: str, project_path: str):
    """
    Store a team definition (.json/.yml) in a project.
    """
    project_path = resolve_project(project_path)
    store = TeamStore(project_path)
    try:
        loaded = load_team_file(team_file)
        store.save(loaded)
        store.write_snapshot(loaded, get_library(ctx))
    except TeamForgeError as e:
        handle_error(e)

    ui.success(f"Added team {loaded.name}")
    ui.kv("ID", loaded.id)


@team.command(name="ls")
@click.argument("project_path", required=False, default="./")
def list_teams(project_path: str):
    """
    List stored teams.
    """
    project_path = resolve_project(project_path)
    teams = TeamStore(project_path).list()

    if not teams:
        ui.warning("No teams stored")
        ui.hint("Use 'teamforge team add <file>' to store a team")
        return

    ui.console.print(f"[bold]Teams[/bold] [dim]({len(teams)})[/dim]")
    ui.blank()
    for t in teams:
        counts = ", ".join(
            ui.count_summary(label, n)
            for label, n in (
                ("agents", len(t.agents)),
                ("skills", len(t.skills)),
                ("hooks", len(t.hooks)),
                ("mcp servers", len(t.mcp_servers)),
            )
            if n
        )
        ui.console.print(f"  [cyan]{t.name}[/cyan] [dim]{t.id}[/dim]")
        if counts:
            ui.console.print(f"    [dim]{counts}[/dim]")


@team.command(name="show")
@click.argument("team_id")
@click.argument("project_path", required=False, default="./")
def show_team(team_id: str, project_path: str):
    """
    Show a stored team.
    """
    project_path = resolve_project(project_path)
    try:
        loaded = TeamStore(project_path).load(team_id)
    except TeamForgeError as e:
        handle_error(e)

    ui.team_tree(loaded)
    if loaded.description:
        ui.kv("Description", loaded.description)
    if loaded.updated_at:
        ui.kv("Updated", loaded.updated_at)


@team.command(name="rm")
@click.argument("team_id")
@click.argument("project_path", required=False, default="./")
@click.option("-f", "--force", is_flag=True, help="Force removal without confirmation")
def remove_team(team_id: str, project_path: str, force: bool):
    """
    Remove a stored team.

    Deployed configuration files are left untouched.
    """
    project_path = resolve_project(project_path)
    store = TeamStore(project_path)
    if not store.exists(team_id):
        ui.error(f"Team '{team_id}' not found")
        ui.hint("Use 'teamforge team ls' to see stored teams")
        raise SystemExit(1)

    if not force and not click.confirm(f"Remove team {team_id}?"):
        ui.warning("Cancelled")
        return

    try:
        store.delete(team_id)
    except TeamForgeError as e:
        handle_error(e)
    ui.success(f"Removed team {team_id}")


@team.command(name="active")
@click.argument("project_path", required=False, default="./")
def active_team(project_path: str):
    """
    Show which stored team is currently deployed for Claude Code.
    """
    project_path = resolve_project(project_path)
    deployed = ConfigDetector.create().find_deployed_team(project_path, TeamStore(project_path))
    if deployed is None:
        ui.dim("No stored team matches the current .claude configuration")
        return
    ui.console.print(f"[cyan]{deployed.team_name}[/cyan] [dim]{deployed.team_id}[/dim]")
