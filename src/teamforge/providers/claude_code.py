"""Claude Code provider implementation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import teamforge.config as config
import teamforge.frontmatter as fm
from teamforge.models import (
    AgentRef,
    AgentTemplate,
    GlobalSecurity,
    HookRef,
    HookTemplate,
    McpTemplate,
    SkillRef,
    SkillTemplate,
    Team,
)
from .base import (
    DIR,
    FILE,
    FOLDERS,
    MD_FILES,
    BaseProvider,
    DeployContext,
    merge_mcp_servers,
    merge_unique,
    slugify,
)

logger = logging.getLogger(__name__)

CONSTITUTION_FILE = "CLAUDE.md"
LOCAL_CONSTITUTION_FILE = "CLAUDE.local.md"
SETTINGS_FILE = "settings.json"
LOCAL_SETTINGS_FILE = "settings.local.json"
MCP_FILE = ".mcp.json"

# Paths under ~/.claude this provider owns; everything else there belongs to the assistant
GLOBAL_MANAGED_PATHS = (
    config.AGENTS_DIRNAME,
    config.SKILLS_DIRNAME,
    MCP_FILE,
    LOCAL_SETTINGS_FILE,
)
MANAGED_SETTINGS_KEYS = ("hooks", "permissions", "env")


def render_agent(template: AgentTemplate, ref: Optional[AgentRef] = None) -> str:
    """Render an agent file: metadata header, body, optional custom instructions."""
    header: dict[str, Any] = {
        "name": template.name or template.id,
        "description": template.description,
    }
    if template.tags:
        header["tags"] = list(template.tags)
    if template.tools and template.tools != "*":
        header["tools"] = (
            template.tools
            if isinstance(template.tools, str)
            else ", ".join(template.tools)
        )
    if template.model:
        header["model"] = template.model
    for key, value in template.extra.items():
        header.setdefault(key, value)

    body = template.body.rstrip()
    if ref is not None and ref.custom_instructions:
        body += f"\n\n## Custom Instructions\n\n{ref.custom_instructions.strip()}"
    return fm.render(header, body + "\n")


def render_skill(template: SkillTemplate) -> str:
    """Render a SKILL.md file."""
    header: dict[str, Any] = {
        "name": template.name or template.id,
        "description": template.description,
    }
    if template.allowed_tools:
        header["allowed-tools"] = ", ".join(template.allowed_tools)
    for key, value in template.extra.items():
        header.setdefault(key, value)
    return fm.render(header, template.body.rstrip() + "\n")


def merge_hooks(settings: dict, hooks: list[HookTemplate]) -> dict:
    """Merge hooks into a settings document.

    Hooks are grouped event -> matcher -> [{type, command}]. An entry with
    the same (event, matcher, command) replaces the existing one, so a
    changed ``type`` wins; other entries and keys are left alone.

    Raises:
        ValueError: If the existing hooks don't have that shape
    """
    events = settings.get("hooks", {})
    if not isinstance(events, dict):
        raise ValueError("'hooks' must be a JSON object")

    for hook in hooks:
        groups = events.setdefault(hook.event, [])
        if not isinstance(groups, list):
            raise ValueError(f"'hooks.{hook.event}' must be a list")
        group = next(
            (g for g in groups if isinstance(g, dict) and g.get("matcher", "*") == hook.matcher),
            None,
        )
        if group is None:
            group = {"matcher": hook.matcher, "hooks": []}
            groups.append(group)

        entries = group.setdefault("hooks", [])
        if not isinstance(entries, list):
            raise ValueError(f"hooks for {hook.event} matcher '{hook.matcher}' must be a list")
        entry = {"type": hook.type, "command": hook.command}
        for i, existing in enumerate(entries):
            if isinstance(existing, dict) and existing.get("command") == hook.command:
                entries[i] = entry
                break
        else:
            entries.append(entry)

    settings["hooks"] = events
    return settings


def merge_security(settings: dict, security: GlobalSecurity) -> dict:
    """Merge global permissions and env into a settings document.

    Raises:
        ValueError: If existing permissions or env have the wrong shape
    """
    permissions = settings.get("permissions", {})
    if not isinstance(permissions, dict):
        raise ValueError("'permissions' must be a JSON object")

    for key in ("allow", "deny", "ask"):
        incoming = getattr(security.permissions, key)
        if incoming:
            current = permissions.get(key) or []
            if not isinstance(current, list):
                raise ValueError(f"'permissions.{key}' must be a list")
            permissions[key] = merge_unique(current, incoming)
    if permissions:
        settings["permissions"] = permissions

    if security.env:
        env = settings.get("env", {})
        if not isinstance(env, dict):
            raise ValueError("'env' must be a JSON object")
        env.update(security.env)
        settings["env"] = env
    return settings


def element_permissions(team: Team) -> dict[str, dict[str, dict]]:
    """Configured per-element permissions, grouped by element kind."""
    sections = {}
    for section, refs in (
        ("agentPermissions", team.agents),
        ("skillPermissions", team.skills),
        ("hookPermissions", team.hooks),
    ):
        entries = {
            ref.ref_id: ref.security.permissions.to_dict(include_ask=False)
            for ref in refs
            if ref.security and ref.security.configured
        }
        if entries:
            sections[section] = entries
    return sections


class ClaudeCodeProvider(BaseProvider):
    """Provider for Claude Code."""

    name = "claude-code"

    def get_config_root(self, project_path: Path | str, scope: str) -> Path:
        if scope == "global":
            return self.home / ".claude"
        return Path(project_path) / ".claude"

    def get_constitution_path(
        self, project_path: Path | str, scope: str, use_local: bool = False
    ) -> Path:
        if scope == "global":
            return self.get_config_root(project_path, scope) / CONSTITUTION_FILE
        filename = LOCAL_CONSTITUTION_FILE if use_local else CONSTITUTION_FILE
        return Path(project_path) / filename

    def artifact_layout(
        self, project_path: Path | str, scope: str
    ) -> dict[str, tuple[Path, str]]:
        root = self.get_config_root(project_path, scope)
        layout = {
            "root": (root, DIR),
            "agents": (root / config.AGENTS_DIRNAME, MD_FILES),
            "skills": (root / config.SKILLS_DIRNAME, FOLDERS),
            "settings": (root / SETTINGS_FILE, FILE),
            "localSettings": (root / LOCAL_SETTINGS_FILE, FILE),
            "mcpServers": (root / MCP_FILE, FILE),
            "constitution": (self.get_constitution_path(project_path, scope), FILE),
        }
        if scope == "project":
            layout["localConstitution"] = (
                self.get_constitution_path(project_path, scope, use_local=True),
                FILE,
            )
        return layout

    def clear(self, ctx: DeployContext) -> None:
        if ctx.scope == "project":
            super().clear(ctx)
            return

        logger.info("[%s] Clearing managed paths under %s", self.name, ctx.root)
        for name in GLOBAL_MANAGED_PATHS:
            ctx.remove(ctx.root / name)

        settings_path = ctx.root / SETTINGS_FILE
        settings = ctx.read_json(settings_path)
        if any(key in settings for key in MANAGED_SETTINGS_KEYS):
            for key in MANAGED_SETTINGS_KEYS:
                settings.pop(key, None)
            ctx.write_json(settings_path, settings)

    def deploy_constitution(self, ctx: DeployContext, content: str) -> None:
        path = self.get_constitution_path(
            ctx.project_path, ctx.scope, ctx.options.use_local_constitution
        )
        ctx.write_text(path, content)
        logger.debug("[%s] Constitution deployed to %s", self.name, path)

    def deploy_agents(self, ctx: DeployContext, agents: list[AgentRef]) -> None:
        agents_dir = ctx.root / config.AGENTS_DIRNAME
        count = 0
        for ref, template in self.resolve(ctx, "Agent", agents, self.library.get_agent):
            ctx.write_text(
                agents_dir / f"{template.id}{config.AGENT_EXT}",
                render_agent(template, ref),
            )
            count += 1
        logger.debug("[%s] Deployed %d agents", self.name, count)

    def deploy_skills(self, ctx: DeployContext, skills: list[SkillRef]) -> None:
        skills_dir = ctx.root / config.SKILLS_DIRNAME
        for _, template in self.resolve(ctx, "Skill", skills, self.library.get_skill):
            skill_dest = skills_dir / template.id
            ctx.write_text(skill_dest / config.SKILL_FILE, render_skill(template))

            # Supporting files
            if template.path is not None and template.path.is_dir():
                for item in sorted(template.path.rglob("*")):
                    relative = item.relative_to(template.path)
                    if item.is_dir() or relative == Path(config.SKILL_FILE):
                        continue
                    ctx.copy_file(item, skill_dest / relative)

    def deploy_settings(
        self,
        ctx: DeployContext,
        team: Team,
        hooks: list[HookRef],
        security: Optional[GlobalSecurity],
    ) -> None:
        templates = [
            template
            for _, template in self.resolve(ctx, "Hook", hooks, self.library.get_hook)
        ]

        if templates or security:
            def update(settings: dict) -> None:
                if templates:
                    merge_hooks(settings, templates)
                if security:
                    merge_security(settings, security)

            ctx.update_json(ctx.root / SETTINGS_FILE, update)

        if not self.capabilities().security:
            return
        sections = element_permissions(team)
        if sections:
            def update_local(local: dict) -> None:
                for section, entries in sections.items():
                    existing = local.get(section, {})
                    if not isinstance(existing, dict):
                        raise ValueError(f"'{section}' must be a JSON object")
                    existing.update(entries)
                    local[section] = existing

            ctx.update_json(ctx.root / LOCAL_SETTINGS_FILE, update_local)

    def deploy_mcp_servers(self, ctx: DeployContext, servers: list[McpTemplate]) -> None:
        configs = {slugify(server.id): self.mcp_server_config(server) for server in servers}
        ctx.update_json(ctx.root / MCP_FILE, lambda document: merge_mcp_servers(document, configs))
        logger.debug("[%s] Deployed %d MCP servers", self.name, len(servers))
