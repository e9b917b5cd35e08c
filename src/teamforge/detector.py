"""
detector:
    Read-only inspection of which assistant configuration exists on disk.

Nothing in this module writes to the filesystem, and missing paths are
reported as absent rather than raised.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from teamforge.capabilities import CapabilityRegistry
from teamforge.library import TemplateLibrary
from teamforge.models import ArtifactStatus, DeployedConfig, DeployedTeam
from teamforge.providers import PROVIDERS, Provider, create_provider
from teamforge.providers.base import DIR, FILE, FILE_OR_FOLDER, FOLDERS, MD_FILES

if TYPE_CHECKING:
    from teamforge.teams import TeamStore

logger = logging.getLogger(__name__)

SCOPES = ("project", "global")


def _modified_at(path: Path) -> Optional[str]:
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return None
    return datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat()


def _count_md_files(directory: Path) -> int:
    try:
        return sum(1 for p in directory.iterdir() if p.is_file() and p.suffix == ".md")
    except OSError:
        return 0


def _count_folders(directory: Path) -> int:
    try:
        return sum(1 for p in directory.iterdir() if p.is_dir())
    except OSError:
        return 0


def inspect_artifact(path: Path, kind: str, display: str) -> ArtifactStatus:
    """Report whether an artifact exists, with counts for directory kinds."""
    if kind == FILE:
        exists = path.is_file()
    elif kind == FILE_OR_FOLDER:
        exists = path.exists()
    else:
        exists = path.is_dir()

    status = ArtifactStatus(path=display, exists=exists, kind=kind)
    if not exists:
        return status

    status.modified_at = _modified_at(path)
    if kind == MD_FILES:
        status.count = _count_md_files(path)
    elif kind == FOLDERS:
        status.count = _count_folders(path)
    elif kind == FILE_OR_FOLDER:
        if path.is_dir():
            status.kind = DIR
            status.count = _count_md_files(path)
        else:
            status.kind = FILE
    return status


def tree_digest(root: Path, exclude: Iterable[str] = ()) -> dict[str, str]:
    """Map each file under root (relative POSIX path) to its SHA-256.

    Files whose path contains an excluded component are ignored. A missing
    root yields an empty mapping.
    """
    excluded = set(exclude)
    digest: dict[str, str] = {}
    if not root.is_dir():
        return digest

    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        relative = path.relative_to(root)
        if excluded.intersection(relative.parts):
            continue
        sha = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(65536), b""):
                sha.update(chunk)
        digest[relative.as_posix()] = sha.hexdigest()
    return digest


class ConfigDetector:
    """Reports deployed configuration per system and scope."""

    def __init__(
        self,
        providers: dict[str, Provider],
        registry: Optional[CapabilityRegistry] = None,
    ):
        self.providers = providers
        self.registry = registry or CapabilityRegistry()

    @classmethod
    def create(
        cls,
        registry: Optional[CapabilityRegistry] = None,
        home: Optional[Path | str] = None,
    ) -> "ConfigDetector":
        """Build a detector over the built-in providers. Layouts need no templates."""
        registry = registry or CapabilityRegistry()
        library = TemplateLibrary()
        providers: dict[str, Provider] = {
            system: create_provider(system, library, registry=registry, home=home)
            for system in registry.get_all_systems()
            if system in PROVIDERS
        }
        return cls(providers, registry)

    def detect(self, system: str, project_path: Path | str) -> DeployedConfig:
        """Inspect one system. Unknown systems report as not deployed."""
        provider = self.providers.get(system)
        if provider is None or not hasattr(provider, "artifact_layout"):
            return DeployedConfig(system=system, deployed=False)

        config = DeployedConfig(system=system)
        for scope in SCOPES:
            if system in self.registry and not self.registry.supports_scope(system, scope):
                continue
            layout = provider.artifact_layout(project_path, scope)
            if not layout:
                continue
            entries = {
                name: inspect_artifact(path, kind, provider.display_path(path, project_path))
                for name, (path, kind) in layout.items()
            }
            if scope == "project":
                config.project = entries
            else:
                config.global_ = entries

        config.deployed = any(
            status.exists
            for entries in (config.project, config.global_)
            if entries
            for status in entries.values()
        )
        logger.debug("Detected %s: deployed=%s", system, config.deployed)
        return config

    def detect_all(self, project_path: Path | str) -> dict[str, DeployedConfig]:
        systems = list(dict.fromkeys([*self.registry.get_all_systems(), *self.providers]))
        return {system: self.detect(system, project_path) for system in systems}

    def find_deployed_team(
        self, project_path: Path | str, store: "TeamStore"
    ) -> Optional[DeployedTeam]:
        """Find the stored team whose snapshot matches the project's .claude tree exactly."""
        current = tree_digest(Path(project_path) / ".claude")
        if not current:
            return None

        for team in store.list():
            snapshot = tree_digest(store.snapshot_path(team.id) / ".claude")
            if snapshot == current:
                logger.info("Project matches team '%s' (%s)", team.name, team.id)
                return DeployedTeam(team_id=team.id, team_name=team.name)
        return None
