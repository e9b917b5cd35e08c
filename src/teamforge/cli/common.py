"""
Shared helpers for the CLI commands.
"""

import logging
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.logging import RichHandler

from teamforge import ui
from teamforge.exceptions import TeamForgeError
from teamforge.library import LibraryCache, TemplateLibrary
from teamforge.models import Team
from teamforge.teams import TeamStore


def setup_logging(verbose: bool) -> None:
    """Route the teamforge logger through rich; -v shows debug output."""
    logger = logging.getLogger("teamforge")
    logger.handlers.clear()
    handler = RichHandler(console=ui.console, show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def handle_error(e: TeamForgeError) -> NoReturn:
    """Handle a TeamForgeError by printing an error message and exiting."""
    ui.error(str(e))
    raise SystemExit(1)


def get_library(ctx: click.Context) -> TemplateLibrary:
    """Template library selected by --library, or the configured one."""
    library_path: Optional[str] = (ctx.obj or {}).get("library")
    if library_path:
        return LibraryCache({"local": Path(library_path)}).get("local")
    return LibraryCache.from_config().get()


def load_team(reference: str, project_path: str) -> Team:
    """Load TEAM argument: a .json/.yml file or the ID of a stored team."""
    try:
        return TeamStore(project_path).resolve(reference)
    except TeamForgeError as e:
        handle_error(e)


def resolve_project(project_path: str) -> str:
    path = Path(project_path).resolve()
    if not path.is_dir():
        ui.error(f"Project path does not exist: {path}")
        raise SystemExit(1)
    return str(path)
