"""
capabilities:
    Static description of what each target system supports and where it is written.

Both the validator and the providers consult the same registry, so the
warnings produced before a deployment always match what a provider skips.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from teamforge.exceptions import UnknownSystemError
from teamforge.models import CapabilityDescriptor, Team


@dataclass(frozen=True)
class SystemDescriptor:
    """Registry entry for one target system."""

    name: str
    display_name: str
    capabilities: CapabilityDescriptor
    scopes: tuple[str, ...] = ("project",)
    layout: dict[str, str] = field(default_factory=dict)


CLAUDE_CODE = SystemDescriptor(
    name="claude-code",
    display_name="Claude Code",
    capabilities=CapabilityDescriptor(
        agents=True,
        skills=True,
        hooks=True,
        mcp_servers=True,
        constitution=True,
        memory=False,
        security=True,
    ),
    scopes=("project", "global"),
    layout={
        "agents": ".claude/agents/",
        "skills": ".claude/skills/",
        "hooks": ".claude/settings.json",
        "security": ".claude/settings.json",
        "mcpServers": ".claude/.mcp.json",
        "constitution": "CLAUDE.md",
    },
)

GEMINI_CLI = SystemDescriptor(
    name="gemini-cli",
    display_name="Gemini CLI",
    capabilities=CapabilityDescriptor(
        agents=False,
        skills=False,
        hooks=False,
        mcp_servers=True,
        constitution=True,
        memory=True,
    ),
    scopes=("project", "global"),
    layout={
        "mcpServers": ".gemini/settings.json",
        "constitution": "GEMINI.md",
    },
)

CLINE = SystemDescriptor(
    name="cline",
    display_name="Cline",
    capabilities=CapabilityDescriptor(
        agents=False,
        skills=False,
        hooks=False,
        mcp_servers=True,
        constitution=True,
        memory=True,
    ),
    scopes=("project",),
    layout={
        "mcpServers": ".vscode/mcp.json",
        "constitution": ".clinerules",
        "memory": "memory-bank/",
    },
)

DEFAULT_SYSTEMS = (CLAUDE_CODE, GEMINI_CLI, CLINE)


class CapabilityRegistry:
    """Lookup table of SystemDescriptors. Pure, no I/O."""

    def __init__(self, descriptors: Optional[Iterable[SystemDescriptor]] = None):
        self._systems: dict[str, SystemDescriptor] = {}
        for descriptor in DEFAULT_SYSTEMS if descriptors is None else descriptors:
            self.register(descriptor)

    def register(self, descriptor: SystemDescriptor) -> None:
        """Add a system, replacing any existing entry with the same name."""
        self._systems[descriptor.name] = descriptor

    def __contains__(self, system: str) -> bool:
        return system in self._systems

    def get_descriptor(self, system: str) -> SystemDescriptor:
        """
        Raises:
            UnknownSystemError: If the system is not registered.
        """
        if system not in self._systems:
            raise UnknownSystemError(system, self.get_all_systems())
        return self._systems[system]

    def get_capabilities(self, system: str) -> CapabilityDescriptor:
        return self.get_descriptor(system).capabilities

    def get_all_systems(self) -> list[str]:
        return list(self._systems.keys())

    def supports_scope(self, system: str, scope: str) -> bool:
        return scope in self.get_descriptor(system).scopes


def unsupported_categories(team: Team, caps: CapabilityDescriptor) -> list[str]:
    """Non-empty team categories the capability descriptor cannot represent."""
    checks = [
        ("constitution", bool(team.constitution), caps.constitution),
        ("agents", bool(team.agents), caps.agents),
        ("skills", bool(team.skills), caps.skills),
        ("hooks", bool(team.hooks), caps.hooks),
        ("mcpServers", bool(team.mcp_servers), caps.mcp_servers),
        ("memory", team.has_memory_bank, caps.memory),
        ("security", team.security_configured, caps.security),
    ]
    return [name for name, present, supported in checks if present and not supported]
