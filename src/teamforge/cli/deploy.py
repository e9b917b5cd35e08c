"""
Deployment CLI commands.

Commands for listing systems, validating and deploying teams, and showing
what is currently deployed in a project.
"""

from typing import Optional

import click

from teamforge import ui
from teamforge.capabilities import CapabilityRegistry
from teamforge.cli.common import (
    get_library,
    handle_error,
    load_team,
    resolve_project,
)
from teamforge.detector import ConfigDetector
from teamforge.exceptions import TeamForgeError, ValidationError
from teamforge.library import TemplateLibrary
from teamforge.models import LOCATIONS, DeploymentValidation, DeployOptions
from teamforge.service import DeploymentService
from teamforge.teams import TeamStore

SYSTEMS = CapabilityRegistry().get_all_systems()

system_option = click.option(
    "-t",
    "--target",
    "targets",
    type=click.Choice(SYSTEMS),
    multiple=True,
    required=True,
    help="Target system (repeatable)",
)
location_option = click.option(
    "-l",
    "--location",
    type=click.Choice(list(LOCATIONS)),
    default="project",
    help="Deploy to the project, the user's home directory, or both",
)


def _print_validation(validation: DeploymentValidation) -> None:
    for warning in validation.warnings:
        ui.warning(f"{warning.system}: {warning.message}")
    for err in validation.errors:
        ui.error(err)


@click.command(name="systems")
def systems_cmd():
    """
    List supported systems and their capabilities.
    """
    ui.capabilities_table(CapabilityRegistry())


@click.command(name="validate")
@click.argument("team")
@system_option
@location_option
@click.argument("project_path", required=False, default="./")
def validate_cmd(
    team: str, targets: tuple[str, ...], location: str, project_path: str
):
    """
    Check a team against target systems without writing anything.

    TEAM is a team file (.json/.yml) or the ID of a stored team.

    \b
    Examples:
        teamforge validate team.json -t claude-code -t cline
        teamforge validate team-1712345678901-ab12cd -t gemini-cli ./my-project
    """
    project_path = resolve_project(project_path)
    loaded = load_team(team, project_path)
    service = DeploymentService(TemplateLibrary())

    validation = service.validate_deployment(
        loaded, list(targets), project_path, DeployOptions(location=location)
    )
    _print_validation(validation)
    if not validation.valid:
        handle_error(ValidationError(validation.errors))
    if not validation.warnings:
        ui.success(f"Team '{loaded.name}' can be fully deployed")
    else:
        ui.info(f"Team '{loaded.name}' is valid, unsupported features will be skipped")


@click.command(name="deploy")
@click.argument("team")
@system_option
@location_option
@click.option("--clear", is_flag=True, help="Remove existing configuration first")
@click.option(
    "--local-constitution",
    is_flag=True,
    help="Claude Code: write CLAUDE.local.md instead of CLAUDE.md",
)
@click.option(
    "--rules-folder",
    is_flag=True,
    help="Cline: write rules into a .clinerules/ folder",
)
@click.option(
    "--rules-file",
    default="rules.md",
    show_default=True,
    help="Cline: file name inside the rules folder",
)
@click.option("--no-memory-bank", is_flag=True, help="Cline: skip the memory bank")
@click.option("--save", is_flag=True, help="Store the team in the project after deploying")
@click.argument("project_path", required=False, default="./")
@click.pass_context
def deploy_cmd(
    ctx: click.Context,
    team: str,
    targets: tuple[str, ...],
    location: str,
    clear: bool,
    local_constitution: bool,
    rules_folder: bool,
    rules_file: str,
    no_memory_bank: bool,
    save: bool,
    project_path: str,
):
    """
    Deploy a team to one or more target systems.

    TEAM is a team file (.json/.yml) or the ID of a stored team.

    \b
    Examples:
        teamforge deploy team.json -t claude-code                 # Current directory
        teamforge deploy team.json -t claude-code -t cline --clear
        teamforge deploy my-team-id -t gemini-cli -l global
    """
    project_path = resolve_project(project_path)
    loaded = load_team(team, project_path)
    library = get_library(ctx)
    service = DeploymentService(library)
    options = DeployOptions(
        clear_existing=clear,
        location=location,
        use_local_constitution=local_constitution,
        use_rules_folder=rules_folder,
        rules_file_name=rules_file,
        deploy_memory_bank=not no_memory_bank,
    )

    ui.console.print(f"Deploying [cyan]{loaded.name}[/cyan] {ui.Icons.ARROW} {ui.path(project_path)}")
    multi = service.deploy_to_multiple(loaded, list(targets), project_path, options)

    _print_validation(multi.validation)
    if not multi.validation.valid:
        raise SystemExit(1)

    ui.blank()
    for result in multi.results.values():
        ui.deployment_result(result)
    ui.blank()

    if save:
        store = TeamStore(project_path)
        try:
            store.save(loaded)
            store.write_snapshot(loaded, library)
        except (TeamForgeError, OSError) as e:
            ui.error(f"Failed to save team: {e}")
            raise SystemExit(1)
        ui.dim(f"Saved team as {loaded.id}")

    if multi.success:
        ui.success(multi.summary())
    else:
        ui.error(multi.summary())
        raise SystemExit(1)


@click.command(name="status")
@click.argument("project_path", required=False, default="./")
@click.option(
    "-t",
    "--target",
    "target",
    type=click.Choice(SYSTEMS),
    default=None,
    help="Only show one system",
)
def status_cmd(project_path: str, target: Optional[str]):
    """
    Show which assistant configuration exists in a project.
    """
    project_path = resolve_project(project_path)
    detector = ConfigDetector.create()

    try:
        configs = (
            {target: detector.detect(target, project_path)}
            if target
            else detector.detect_all(project_path)
        )
    except TeamForgeError as e:
        handle_error(e)

    for config in configs.values():
        ui.config_status(config)

    deployed = detector.find_deployed_team(project_path, TeamStore(project_path))
    ui.blank()
    if deployed:
        ui.kv("Deployed team", f"[cyan]{deployed.team_name}[/cyan] [dim]{deployed.team_id}[/dim]", indent=0)
    else:
        ui.dim("No stored team matches the current .claude configuration")
