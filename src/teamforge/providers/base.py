"""
base:
    ABC, base class, and shared helpers for deployment providers.

This module provides:
- Provider ABC defining the interface every target system implements
- BaseProvider with the shared deploy pass (scopes, clearing, capability
  skipping, template resolution, write tracking)
- DeployContext, which records every file a deploy pass writes
- Shared helpers for the aggregate JSON documents (MCP servers, settings)
"""

from __future__ import annotations

import json
import logging
import re
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, TypeVar

from teamforge.capabilities import CapabilityRegistry, unsupported_categories
from teamforge.exceptions import ProviderWriteError, TemplateNotFoundError
from teamforge.library import TemplateLibrary
from teamforge.models import (
    AgentRef,
    CapabilityDescriptor,
    DeploymentResult,
    DeployOptions,
    GlobalSecurity,
    HookRef,
    McpTemplate,
    SkillRef,
    Team,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Artifact kinds understood by the config detector
FILE = "file"
DIR = "dir"
MD_FILES = "md-files"
FOLDERS = "folders"
FILE_OR_FOLDER = "file-or-folder"


# =============================================================================
# Provider ABC
# =============================================================================


class Provider(ABC):
    """Abstract base class defining the interface for deployment providers."""

    name: str

    @abstractmethod
    def capabilities(self) -> CapabilityDescriptor:
        """Feature categories this provider can write."""
        ...

    @abstractmethod
    def deploy(
        self,
        team: Team,
        project_path: Path | str,
        options: Optional[DeployOptions] = None,
    ) -> DeploymentResult:
        """Materialize a team into this system's file layout.

        Side effects are confined to this system's own configuration roots.
        Write failures are reported through the returned result, together
        with the files written before the failure.
        """
        ...


# =============================================================================
# DeployContext
# =============================================================================


@dataclass
class DeployContext:
    """State for deploying to one scope of one system."""

    system: str
    project_path: Path
    scope: str
    root: Path
    options: DeployOptions
    result: DeploymentResult

    def _record(self, path: Path) -> None:
        text = str(path)
        if text not in self.result.files_written:
            self.result.files_written.append(text)

    def _failed(self, path: Path, error: OSError) -> ProviderWriteError:
        return self.invalid(path, error.strerror or str(error))

    def invalid(self, path: Path, reason: str) -> ProviderWriteError:
        """Error for path carrying the files written so far."""
        return ProviderWriteError(
            self.system,
            path,
            reason,
            written=list(self.result.files_written),
        )

    def read_json(self, path: Path) -> dict:
        try:
            return read_json(path)
        except (OSError, ValueError) as e:
            raise self.invalid(path, f"cannot read existing document ({e})") from e

    def update_json(self, path: Path, update: Callable[[dict], Any]) -> Path:
        """Merge into the JSON document at path and write it back.

        A document that can't be read or whose shape update rejects with
        ValueError is left as is and fails the pass.
        """
        document = self.read_json(path)
        try:
            update(document)
        except ValueError as e:
            raise self.invalid(path, f"cannot merge into existing document ({e})") from e
        return self.write_json(path, document)

    def write_text(self, path: Path, content: str) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise self._failed(path, e) from e
        self._record(path)
        return path

    def write_json(self, path: Path, data: dict) -> Path:
        return self.write_text(path, dump_json(data))

    def copy_file(self, source: Path, dest: Path) -> Path:
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, dest)
        except OSError as e:
            raise self._failed(dest, e) from e
        self._record(dest)
        return dest

    def mkdir(self, path: Path) -> Path:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise self._failed(path, e) from e
        return path

    def remove(self, path: Path) -> None:
        """Remove a file or directory tree. Missing paths are fine."""
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            elif path.exists() or path.is_symlink():
                path.unlink()
        except OSError as e:
            raise self._failed(path, e) from e


# =============================================================================
# BaseProvider
# =============================================================================


class BaseProvider(Provider):
    """Base class with the shared deploy pass.

    Subclasses define ``name``, ``get_config_root`` and override the
    ``deploy_<category>`` methods for the categories they support. Whether a
    category is attempted is decided by the shared CapabilityRegistry, never
    by the subclass.
    """

    name: str = ""

    def __init__(
        self,
        library: TemplateLibrary,
        registry: Optional[CapabilityRegistry] = None,
        home: Optional[Path | str] = None,
    ):
        self.library = library
        self.registry = registry or CapabilityRegistry()
        self.home = Path(home) if home is not None else Path.home()

    def capabilities(self) -> CapabilityDescriptor:
        return self.registry.get_capabilities(self.name)

    def scopes(self) -> tuple[str, ...]:
        return self.registry.get_descriptor(self.name).scopes

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_config_root(self, project_path: Path | str, scope: str) -> Path:
        """Root directory this provider owns for a scope."""
        ...

    def artifact_layout(
        self, project_path: Path | str, scope: str
    ) -> dict[str, tuple[Path, str]]:
        """Artifacts the config detector inspects: name -> (path, kind)."""
        return {}

    # -------------------------------------------------------------------------
    # Category hooks (default: nothing to write)
    # -------------------------------------------------------------------------

    def clear(self, ctx: DeployContext) -> None:
        """Default: remove the whole configuration root and recreate it."""
        logger.info("[%s] Clearing %s", self.name, ctx.root)
        ctx.remove(ctx.root)
        ctx.mkdir(ctx.root)

    def deploy_constitution(self, ctx: DeployContext, content: str) -> None:
        pass

    def deploy_agents(self, ctx: DeployContext, agents: list[AgentRef]) -> None:
        pass

    def deploy_skills(self, ctx: DeployContext, skills: list[SkillRef]) -> None:
        pass

    def deploy_settings(
        self,
        ctx: DeployContext,
        team: Team,
        hooks: list[HookRef],
        security: Optional[GlobalSecurity],
    ) -> None:
        """Write hooks and security rules. Empty inputs mean the category is skipped."""
        pass

    def deploy_mcp_servers(self, ctx: DeployContext, servers: list[McpTemplate]) -> None:
        pass

    def deploy_memory_bank(self, ctx: DeployContext, memory_bank: dict[str, str]) -> None:
        pass

    def mcp_server_config(self, server: McpTemplate) -> dict[str, Any]:
        """Entry written for one MCP server. Default: Claude-style with 'type'."""
        config: dict[str, Any] = {"type": server.type}
        if server.is_stdio:
            if server.command:
                config["command"] = server.command
            if server.args:
                config["args"] = list(server.args)
        else:
            if server.url:
                config["url"] = server.url
            if server.headers:
                config["headers"] = dict(server.headers)
        if server.env:
            config["env"] = dict(server.env)
        return config

    # -------------------------------------------------------------------------
    # Deploy pass
    # -------------------------------------------------------------------------

    def deploy(
        self,
        team: Team,
        project_path: Path | str,
        options: Optional[DeployOptions] = None,
    ) -> DeploymentResult:
        options = options or DeployOptions()
        result = DeploymentResult(system=self.name)
        caps = self.capabilities()

        scopes = []
        for scope in options.scopes:
            if scope in self.scopes():
                scopes.append(scope)
            else:
                result.warnings.append(f"{scope} scope not supported by {self.name}, skipped")
        if not scopes:
            return result.fail(
                f"{self.name} does not support location '{options.location}'"
            )

        result.skipped = unsupported_categories(team, caps)
        for category in result.skipped:
            logger.info("[%s] %s not supported, skipped", self.name, category)

        try:
            for scope in scopes:
                ctx = DeployContext(
                    system=self.name,
                    project_path=Path(project_path),
                    scope=scope,
                    root=self.get_config_root(project_path, scope),
                    options=options,
                    result=result,
                )
                self._deploy_scope(ctx, team, caps)
        except ProviderWriteError as e:
            logger.error("[%s] Deployment error: %s", self.name, e)
            return result.fail(str(e))
        except Exception as e:
            logger.exception("[%s] Unexpected deployment error", self.name)
            return result.fail(str(e) or type(e).__name__)

        logger.info(
            "[%s] Deployed team '%s' (%d files)",
            self.name,
            team.name,
            len(result.files_written),
        )
        return result

    def _deploy_scope(
        self, ctx: DeployContext, team: Team, caps: CapabilityDescriptor
    ) -> None:
        if ctx.options.clear_existing:
            self.clear(ctx)
        ctx.mkdir(ctx.root)

        if team.constitution and caps.constitution:
            self.deploy_constitution(ctx, team.constitution)

        if team.agents and caps.agents:
            self.deploy_agents(ctx, team.sorted_agents())

        if team.skills and caps.skills:
            self.deploy_skills(ctx, team.sorted_skills())

        hooks = team.sorted_hooks() if caps.hooks else []
        security = team.security if team.security_configured and caps.security else None
        if hooks or security or (caps.security and has_element_security(team)):
            self.deploy_settings(ctx, team, hooks, security)

        if team.mcp_servers and caps.mcp_servers:
            servers = [
                server
                for _, server in self.resolve(
                    ctx, "MCP server", team.mcp_servers, self.library.get_mcp
                )
            ]
            if servers:
                self.deploy_mcp_servers(ctx, servers)

        if team.has_memory_bank and caps.memory and ctx.options.deploy_memory_bank:
            self.deploy_memory_bank(ctx, team.memory_bank)

    def resolve(
        self,
        ctx: DeployContext,
        kind: str,
        refs: list,
        lookup: Callable[[str], Optional[T]],
    ) -> Iterator[tuple[Any, T]]:
        """Yield (ref, template) pairs, warning about and skipping unknown IDs."""
        for ref in refs:
            template = lookup(ref.ref_id)
            if template is None:
                message = f"{TemplateNotFoundError(kind, ref.ref_id)}, skipped"
                if message not in ctx.result.warnings:
                    ctx.result.warnings.append(message)
                logger.warning("[%s] %s", self.name, message)
                continue
            yield ref, template

    def display_path(self, path: Path, project_path: Path | str) -> str:
        """Path relative to the project, or ~-relative for the home directory."""
        try:
            return str(path.relative_to(Path(project_path)))
        except ValueError:
            pass
        try:
            return str(Path("~") / path.relative_to(self.home))
        except ValueError:
            return str(path)


# =============================================================================
# Shared helpers
# =============================================================================


def has_element_security(team: Team) -> bool:
    refs = [*team.agents, *team.skills, *team.hooks]
    return any(ref.security and ref.security.configured for ref in refs)


def slugify(text: str) -> str:
    """Lowercase slug with runs of other characters collapsed to '-'."""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def dump_json(data: dict) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def read_json(path: Path) -> dict:
    """Read a JSON object document. A missing file yields an empty dict.

    Raises:
        OSError: If the file exists but can't be read
        ValueError: If the file isn't UTF-8 JSON with an object at the top
    """
    if not path.is_file():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def merge_mcp_servers(
    document: dict,
    servers: dict[str, dict[str, Any]],
    replace: bool = False,
) -> dict:
    """Merge MCP server entries into a document's 'mcpServers' mapping.

    Args:
        document: Existing JSON document (other keys are preserved)
        servers: slug -> server config
        replace: Drop existing entries instead of merging by slug
    """
    current = document.get("mcpServers") or {}
    if not isinstance(current, dict):
        raise ValueError("'mcpServers' must be a JSON object")
    existing = {} if replace else dict(current)
    existing.update(servers)
    document["mcpServers"] = existing
    return document


def merge_unique(existing: list[str], incoming: list[str]) -> list[str]:
    """Append incoming items that aren't already present, preserving order."""
    merged = list(existing)
    for item in incoming:
        if item not in merged:
            merged.append(item)
    return merged
