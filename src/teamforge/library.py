"""
library:
    Template library lookup and the explicit cache that owns loaded libraries.

A library directory is laid out as:

    agents/**/<name>.md          agent templates (ID = relative path, '/' -> '-')
    skills/<id>/SKILL.md         skill templates
    hooks/library.json           {"hooks": [...]} hook catalog
    mcp/<id>/mcp.json            MCP server templates
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import teamforge.config as config
import teamforge.frontmatter as fm
from teamforge.exceptions import ConfigurationError, TemplateInvalidError
from teamforge.models import AgentTemplate, HookTemplate, McpTemplate, SkillTemplate

logger = logging.getLogger(__name__)


class TemplateLibrary:
    """Resolves short template IDs to full template content.

    Lookups return None for unknown IDs; callers treat that as
    "element unavailable", never as a fatal error.
    """

    def __init__(
        self,
        agents: Optional[list[AgentTemplate]] = None,
        skills: Optional[list[SkillTemplate]] = None,
        hooks: Optional[list[HookTemplate]] = None,
        mcps: Optional[list[McpTemplate]] = None,
        source: str = "memory",
    ):
        self.source = source
        self._agents = {a.id: a for a in agents or []}
        self._skills = {s.id: s for s in skills or []}
        self._hooks = {h.id: h for h in hooks or []}
        self._mcps = {m.id: m for m in mcps or []}

    def get_agent(self, agent_id: str) -> Optional[AgentTemplate]:
        return self._agents.get(agent_id)

    def get_skill(self, skill_id: str) -> Optional[SkillTemplate]:
        return self._skills.get(skill_id)

    def get_hook(self, hook_id: str) -> Optional[HookTemplate]:
        return self._hooks.get(hook_id)

    def get_mcp(self, mcp_id: str) -> Optional[McpTemplate]:
        return self._mcps.get(mcp_id)

    @property
    def agents(self) -> list[AgentTemplate]:
        return list(self._agents.values())

    @property
    def skills(self) -> list[SkillTemplate]:
        return list(self._skills.values())

    @property
    def hooks(self) -> list[HookTemplate]:
        return list(self._hooks.values())

    @property
    def mcps(self) -> list[McpTemplate]:
        return list(self._mcps.values())

    @classmethod
    def from_path(cls, root: Path, source: str = "local") -> "TemplateLibrary":
        """Load every template found under a library directory.

        Missing sub-directories simply yield no templates. Individual files
        that fail to parse are logged and skipped.
        """
        library = cls(
            agents=scan_agents(root / config.AGENTS_DIRNAME),
            skills=scan_skills(root / config.SKILLS_DIRNAME),
            hooks=load_hooks(root / config.HOOKS_DIRNAME / config.HOOKS_LIBRARY_FILE),
            mcps=scan_mcps(root / config.MCP_DIRNAME),
            source=source,
        )
        logger.info(
            "Loaded library from %s (%s): %d agents, %d skills, %d hooks, %d MCP servers",
            root,
            source,
            len(library._agents),
            len(library._skills),
            len(library._hooks),
            len(library._mcps),
        )
        return library


# =============================================================================
# Scanning
# =============================================================================


def load_agent(agent_file: Path, agents_dir: Path) -> AgentTemplate:
    """
    Load one agent template.

    Missing descriptions and unknown models are logged but still loaded.

    Raises:
        TemplateInvalidError: If a known header field has the wrong shape.
    """
    relative = agent_file.relative_to(agents_dir)
    agent_id = "-".join(relative.with_suffix("").parts)
    category = relative.parts[0] if len(relative.parts) > 1 else None

    try:
        raw, body = fm.parse_file(agent_file)
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateInvalidError(agent_file, f"cannot read file ({e})") from e
    try:
        metadata = fm.Metadata.from_dict(raw)
    except fm.MetadataError as e:
        raise TemplateInvalidError(agent_file, str(e)) from e
    for problem in fm.validate_agent(raw):
        logger.warning("Agent template %s: %s", agent_file, problem)

    return AgentTemplate(
        id=agent_id,
        name=metadata.name or agent_file.stem,
        description=metadata.description or "",
        body=body,
        tags=metadata.tags,
        tools=metadata.tools if metadata.tools is not None else "*",
        model=metadata.model or "sonnet",
        category=metadata.category or category or "general",
        suggested_for=metadata.suggested_for,
        extra=metadata.extra,
    )


def scan_agents(agents_dir: Path) -> list[AgentTemplate]:
    """Recursively collect agent templates. The first directory level is the category."""
    if not agents_dir.is_dir():
        return []

    agents = []
    for agent_file in sorted(agents_dir.rglob(f"*{config.AGENT_EXT}")):
        if not agent_file.is_file() or agent_file.name.lower() == "readme.md":
            continue
        try:
            agents.append(load_agent(agent_file, agents_dir))
        except TemplateInvalidError as e:
            logger.warning("Skipping agent template: %s", e)
    return agents


def scan_skills(skills_dir: Path) -> list[SkillTemplate]:
    """Collect skill folders that contain a SKILL.md."""
    if not skills_dir.is_dir():
        return []

    skills = []
    for skill_dir in sorted(skills_dir.iterdir()):
        skill_file = skill_dir / config.SKILL_FILE
        if skill_dir.name.startswith(".") or not skill_file.is_file():
            continue

        try:
            metadata, body = fm.parse_metadata(skill_file.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, fm.MetadataError) as e:
            logger.warning("Skipping skill template %s: %s", skill_file, e)
            continue

        skills.append(
            SkillTemplate(
                id=skill_dir.name,
                name=metadata.name or skill_dir.name,
                description=metadata.description or "",
                body=body,
                allowed_tools=metadata.allowed_tools,
                path=skill_dir,
                extra=metadata.extra,
            )
        )
    return skills


def load_hooks(hooks_file: Path) -> list[HookTemplate]:
    """Read the hook catalog. Entries missing id, event or command are skipped."""
    if not hooks_file.is_file():
        return []

    try:
        data = json.loads(hooks_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring malformed hook catalog %s: %s", hooks_file, e)
        return []

    entries = data.get("hooks", []) if isinstance(data, dict) else None
    if not isinstance(entries, list):
        logger.warning("Ignoring hook catalog %s: expected a 'hooks' list", hooks_file)
        return []

    hooks = []
    for entry in entries:
        try:
            hooks.append(HookTemplate.from_dict(entry))
        except (KeyError, TypeError) as e:
            logger.warning("Skipping hook entry without %s in %s", e, hooks_file)
    return hooks


def scan_mcps(mcp_dir: Path) -> list[McpTemplate]:
    """Collect MCP server folders that contain an mcp.json."""
    if not mcp_dir.is_dir():
        return []

    mcps = []
    for server_dir in sorted(mcp_dir.iterdir()):
        mcp_file = server_dir / config.MCP_FILE
        if not mcp_file.is_file():
            continue
        try:
            data = json.loads(mcp_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Skipping MCP template %s: %s", mcp_file, e)
            continue
        if not isinstance(data, dict):
            logger.warning("Skipping MCP template %s: expected a JSON object", mcp_file)
            continue
        mcps.append(McpTemplate.from_dict(server_dir.name, data))
    return mcps


# =============================================================================
# Cache
# =============================================================================


class LibraryCache:
    """Owns loaded template libraries, keyed by source name.

    Libraries are loaded on first use and then treated as immutable until
    invalidate() or reload() is called. Construct one per process (or per
    test) and pass it to whatever needs templates.
    """

    def __init__(self, sources: dict[str, Path]):
        self.sources = dict(sources)
        self._loaded: dict[str, TemplateLibrary] = {}

    @classmethod
    def from_config(cls) -> "LibraryCache":
        sources = {"cache": config.LIBRARY_DIR}
        if config.DEV_LIBRARY_DIR is not None:
            sources["dev"] = config.DEV_LIBRARY_DIR
        return cls(sources)

    def get(self, source: str = "cache") -> TemplateLibrary:
        if source not in self.sources:
            raise ConfigurationError(
                f"Unknown library source: {source}. Configured: {sorted(self.sources)}"
            )
        if source not in self._loaded:
            self._loaded[source] = TemplateLibrary.from_path(self.sources[source], source)
        return self._loaded[source]

    def is_loaded(self, source: str) -> bool:
        return source in self._loaded

    def invalidate(self, source: Optional[str] = None) -> None:
        """Drop one cached library, or all of them."""
        if source is None:
            self._loaded.clear()
        else:
            self._loaded.pop(source, None)

    def reload(self, source: str = "cache") -> TemplateLibrary:
        self.invalidate(source)
        return self.get(source)
