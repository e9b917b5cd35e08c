"""
teams:
    Per-project team storage.

Teams live under ``<project>/.teamforge/teams/<id>/``:

    team.json      full team definition (rewritten as a whole on every save)
    snapshot/      the team rendered in the claude-code layout, used to
                   recognise which team is currently deployed
"""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml

import teamforge.config as config
from teamforge.capabilities import CapabilityRegistry
from teamforge.exceptions import PathNotFoundError, TeamInvalidError, TeamNotFoundError
from teamforge.library import TemplateLibrary
from teamforge.models import DeploymentResult, DeployOptions, Team, generate_team_id
from teamforge.providers import ClaudeCodeProvider, dump_json

logger = logging.getLogger(__name__)

TEAM_FILE_SUFFIXES = (".json", ".yml", ".yaml")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def load_team_file(path: Path | str) -> Team:
    """Read a team definition from a JSON or YAML file.

    Raises:
        PathNotFoundError: If the file does not exist.
        TeamInvalidError: If the content is not a team mapping.
    """
    path = Path(path)
    if not path.is_file():
        raise PathNotFoundError(path, "Team file")

    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in (".yml", ".yaml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        raise TeamInvalidError(path, str(e)) from e

    if not isinstance(data, dict):
        raise TeamInvalidError(path, "expected a mapping at the top level")
    try:
        return Team.from_dict(data)
    except (AttributeError, TypeError) as e:
        raise TeamInvalidError(path, str(e)) from e


class TeamStore:
    """Create, list, load, save and delete the teams of one project."""

    def __init__(self, project_path: Path | str):
        self.project_path = Path(project_path)
        self.teams_dir = self.project_path / config.TEAMS_DIRNAME

    def team_dir(self, team_id: str) -> Path:
        return self.teams_dir / team_id

    def snapshot_path(self, team_id: str) -> Path:
        return self.team_dir(team_id) / config.SNAPSHOT_DIRNAME

    def exists(self, team_id: str) -> bool:
        return (self.team_dir(team_id) / config.TEAM_FILE).is_file()

    def list(self) -> list[Team]:
        """All readable teams, sorted by name. Unreadable entries are logged and skipped."""
        if not self.teams_dir.is_dir():
            return []

        teams = []
        for team_dir in sorted(self.teams_dir.iterdir()):
            team_file = team_dir / config.TEAM_FILE
            if not team_file.is_file():
                continue
            try:
                teams.append(load_team_file(team_file))
            except TeamInvalidError as e:
                logger.warning("Skipping team %s: %s", team_dir.name, e)
        return sorted(teams, key=lambda t: (t.name.lower(), t.id))

    def load(self, team_id: str) -> Team:
        """
        Raises:
            TeamNotFoundError: If no team with this ID is stored.
            TeamInvalidError: If the stored definition cannot be read.
        """
        if not self.exists(team_id):
            raise TeamNotFoundError(team_id)
        return load_team_file(self.team_dir(team_id) / config.TEAM_FILE)

    def save(self, team: Team) -> Team:
        """Write the whole team, assigning an ID and timestamps as needed."""
        if not team.id:
            team.id = generate_team_id()
        now = _now()
        if not team.created_at:
            team.created_at = now
        team.updated_at = now

        team_file = self.team_dir(team.id) / config.TEAM_FILE
        team_file.parent.mkdir(parents=True, exist_ok=True)
        team_file.write_text(dump_json(team.to_dict()), encoding="utf-8")
        logger.info("Saved team '%s' (%s)", team.name, team.id)
        return team

    def delete(self, team_id: str) -> None:
        """
        Raises:
            TeamNotFoundError: If no team with this ID is stored.
        """
        team_dir = self.team_dir(team_id)
        if not team_dir.is_dir():
            raise TeamNotFoundError(team_id)
        shutil.rmtree(team_dir)
        logger.info("Deleted team %s", team_id)

    def write_snapshot(
        self,
        team: Team,
        library: TemplateLibrary,
        registry: Optional[CapabilityRegistry] = None,
    ) -> DeploymentResult:
        """Render the team in the claude-code layout under its snapshot directory."""
        snapshot = self.snapshot_path(team.id)
        snapshot.mkdir(parents=True, exist_ok=True)
        provider = ClaudeCodeProvider(library, registry=registry)
        return provider.deploy(team, snapshot, DeployOptions(clear_existing=True))

    def resolve(self, reference: str) -> Team:
        """Load a team from a file path, or else from a stored ID."""
        path = Path(reference)
        if path.suffix in TEAM_FILE_SUFFIXES and path.is_file():
            return load_team_file(path)
        if path.suffix in TEAM_FILE_SUFFIXES and not self.exists(reference):
            raise PathNotFoundError(path, "Team file")
        return self.load(reference)
