"""
models:
    Data models for teams, library templates, and deployment results
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

# Deployment locations accepted by providers that support more than one scope
LOCATIONS = ("project", "global", "both")

MEMORY_BANK_FILES = ("projectBrief", "techContext", "activeContext")


def generate_team_id() -> str:
    """Generate a unique team ID: team-<millis>-<6 random chars>."""
    timestamp = int(time.time() * 1000)
    return f"team-{timestamp}-{secrets.token_urlsafe(6)[:6]}"


def _str_list(value: Any) -> list[str]:
    if not value:
        return []
    return [str(v) for v in value]


# =============================================================================
# Security
# =============================================================================


@dataclass
class Permissions:
    """Permission patterns (e.g. 'Bash(npm run *)')."""

    allow: list[str] = field(default_factory=list)
    deny: list[str] = field(default_factory=list)
    ask: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.allow or self.deny or self.ask)

    def to_dict(self, include_ask: bool = True) -> dict:
        result = {"allow": list(self.allow), "deny": list(self.deny)}
        if include_ask:
            result["ask"] = list(self.ask)
        return result

    @classmethod
    def from_dict(cls, data: Optional[dict], include_ask: bool = True) -> "Permissions":
        data = data or {}
        return cls(
            allow=_str_list(data.get("allow")),
            deny=_str_list(data.get("deny")),
            ask=_str_list(data.get("ask")) if include_ask else [],
        )


@dataclass
class GlobalSecurity:
    """Team-wide permissions and environment variables."""

    permissions: Permissions = field(default_factory=Permissions)
    env: dict[str, str] = field(default_factory=dict)
    configured: bool = False

    def to_dict(self) -> dict:
        return {
            "permissions": self.permissions.to_dict(),
            "env": dict(self.env),
            "configured": self.configured,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "GlobalSecurity":
        data = data or {}
        return cls(
            permissions=Permissions.from_dict(data.get("permissions")),
            env={str(k): str(v) for k, v in (data.get("env") or {}).items()},
            configured=bool(data.get("configured", False)),
        )


@dataclass
class ElementSecurity:
    """Per-element permissions. No 'ask' list and no env, those are global-only."""

    permissions: Permissions = field(default_factory=Permissions)
    configured: bool = False

    def to_dict(self) -> dict:
        return {
            "permissions": self.permissions.to_dict(include_ask=False),
            "configured": self.configured,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["ElementSecurity"]:
        if data is None:
            return None
        return cls(
            permissions=Permissions.from_dict(data.get("permissions"), include_ask=False),
            configured=bool(data.get("configured", False)),
        )


# =============================================================================
# Team
# =============================================================================


@dataclass
class AgentRef:
    """Reference from a team to an agent template."""

    agent_id: str
    order: float = 0
    security: Optional[ElementSecurity] = None
    custom_instructions: Optional[str] = None

    @property
    def ref_id(self) -> str:
        return self.agent_id

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"agentId": self.agent_id, "order": self.order}
        if self.security:
            result["security"] = self.security.to_dict()
        if self.custom_instructions:
            result["customInstructions"] = self.custom_instructions
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "AgentRef":
        return cls(
            agent_id=str(data.get("agentId", "")),
            order=data.get("order", 0),
            security=ElementSecurity.from_dict(data.get("security")),
            custom_instructions=data.get("customInstructions"),
        )


@dataclass
class SkillRef:
    """Reference from a team to a skill template."""

    skill_id: str
    order: float = 0
    security: Optional[ElementSecurity] = None

    @property
    def ref_id(self) -> str:
        return self.skill_id

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"skillId": self.skill_id, "order": self.order}
        if self.security:
            result["security"] = self.security.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "SkillRef":
        return cls(
            skill_id=str(data.get("skillId", "")),
            order=data.get("order", 0),
            security=ElementSecurity.from_dict(data.get("security")),
        )


@dataclass
class HookRef:
    """Reference from a team to a hook template."""

    hook_id: str
    order: float = 0
    security: Optional[ElementSecurity] = None

    @property
    def ref_id(self) -> str:
        return self.hook_id

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"hookId": self.hook_id, "order": self.order}
        if self.security:
            result["security"] = self.security.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "HookRef":
        return cls(
            hook_id=str(data.get("hookId", "")),
            order=data.get("order", 0),
            security=ElementSecurity.from_dict(data.get("security")),
        )


@dataclass
class McpRef:
    """Reference from a team to an MCP server template."""

    mcp_id: str
    security: Optional[ElementSecurity] = None

    @property
    def ref_id(self) -> str:
        return self.mcp_id

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"mcpId": self.mcp_id}
        if self.security:
            result["security"] = self.security.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "McpRef":
        return cls(
            mcp_id=str(data.get("mcpId", "")),
            security=ElementSecurity.from_dict(data.get("security")),
        )


def _by_order(items: list) -> list:
    # sorted() is stable, so equal orders keep insertion order
    return sorted(items, key=lambda item: item.order)


@dataclass
class Team:
    """A deployable bundle of agents, skills, hooks, MCP servers and security rules."""

    id: str
    name: str
    description: str = ""
    agents: list[AgentRef] = field(default_factory=list)
    skills: list[SkillRef] = field(default_factory=list)
    hooks: list[HookRef] = field(default_factory=list)
    mcp_servers: list[McpRef] = field(default_factory=list)
    security: Optional[GlobalSecurity] = None
    constitution: Optional[str] = None
    memory_bank: dict[str, str] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def sorted_agents(self) -> list[AgentRef]:
        return _by_order(self.agents)

    def sorted_skills(self) -> list[SkillRef]:
        return _by_order(self.skills)

    def sorted_hooks(self) -> list[HookRef]:
        return _by_order(self.hooks)

    @property
    def security_configured(self) -> bool:
        return bool(self.security and self.security.configured)

    @property
    def has_memory_bank(self) -> bool:
        return any(self.memory_bank.get(key) for key in MEMORY_BANK_FILES)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "agents": [a.to_dict() for a in self.agents],
            "skills": [s.to_dict() for s in self.skills],
            "hooks": [h.to_dict() for h in self.hooks],
            "mcpServers": [m.to_dict() for m in self.mcp_servers],
            "security": (
                self.security.to_dict() if self.security else {"configured": False}
            ),
        }
        if self.constitution:
            result["constitution"] = self.constitution
        if self.memory_bank:
            result["memoryBank"] = dict(self.memory_bank)
        if self.created_at:
            result["createdAt"] = self.created_at
        if self.updated_at:
            result["updatedAt"] = self.updated_at
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "Team":
        """Create from dictionary. Accepts the legacy 'workflow' list for agents."""
        agents = data.get("agents") or data.get("workflow") or []
        security = data.get("security")
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            description=data.get("description") or "",
            agents=[AgentRef.from_dict(a) for a in agents],
            skills=[SkillRef.from_dict(s) for s in data.get("skills") or []],
            hooks=[HookRef.from_dict(h) for h in data.get("hooks") or []],
            mcp_servers=[McpRef.from_dict(m) for m in data.get("mcpServers") or []],
            security=GlobalSecurity.from_dict(security) if security else None,
            constitution=data.get("constitution") or None,
            memory_bank={
                k: str(v) for k, v in (data.get("memoryBank") or {}).items() if v
            },
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


# =============================================================================
# Library templates
# =============================================================================


@dataclass
class AgentTemplate:
    """An agent definition from the template library."""

    id: str
    name: str
    description: str = ""
    body: str = ""
    tags: list[str] = field(default_factory=list)
    tools: str | list[str] = "*"
    model: str = "sonnet"
    category: str = "general"
    suggested_for: list[str] = field(default_factory=list)
    extra: dict[str, str] = field(default_factory=dict)


@dataclass
class SkillTemplate:
    """A skill definition from the template library."""

    id: str
    name: str
    description: str = ""
    body: str = ""
    allowed_tools: list[str] = field(default_factory=list)
    path: Optional[Path] = None
    extra: dict[str, str] = field(default_factory=dict)


@dataclass
class HookTemplate:
    """A hook definition from the template library."""

    id: str
    name: str
    event: str
    command: str
    description: str = ""
    matcher: str = "*"
    type: str = "command"
    category: str = "Custom"
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "HookTemplate":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            event=str(data["event"]),
            command=str(data["command"]),
            description=data.get("description") or "",
            matcher=data.get("matcher") or "*",
            type=data.get("type") or "command",
            category=data.get("category") or "Custom",
            tags=_str_list(data.get("tags")),
        )


@dataclass
class McpTemplate:
    """An MCP server definition from the template library."""

    id: str
    name: str
    type: str = "stdio"
    description: str = ""
    command: Optional[str] = None
    args: list[str] = field(default_factory=list)
    url: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)
    env: dict[str, str] = field(default_factory=dict)
    category: str = "tools"
    tags: list[str] = field(default_factory=list)

    @property
    def is_stdio(self) -> bool:
        return self.type == "stdio"

    @classmethod
    def from_dict(cls, mcp_id: str, data: dict) -> "McpTemplate":
        return cls(
            id=mcp_id,
            name=data.get("name") or mcp_id,
            type=data.get("type") or "stdio",
            description=data.get("description") or "",
            command=data.get("command"),
            args=_str_list(data.get("args")),
            url=data.get("url"),
            headers=dict(data.get("headers") or {}),
            env=dict(data.get("env") or {}),
            category=data.get("category") or "tools",
            tags=_str_list(data.get("tags")),
        )


# =============================================================================
# Capabilities and options
# =============================================================================


@dataclass(frozen=True)
class CapabilityDescriptor:
    """Feature categories a target system can represent."""

    agents: bool = False
    skills: bool = False
    hooks: bool = False
    mcp_servers: bool = False
    constitution: bool = False
    memory: bool = False
    security: bool = False

    def to_dict(self) -> dict:
        return {
            "agents": self.agents,
            "skills": self.skills,
            "hooks": self.hooks,
            "mcpServers": self.mcp_servers,
            "constitution": self.constitution,
            "memory": self.memory,
            "security": self.security,
        }


@dataclass
class DeployOptions:
    """Options for a single deployment pass."""

    clear_existing: bool = False
    location: str = "project"
    use_local_constitution: bool = False
    use_rules_folder: bool = False
    rules_file_name: str = "rules.md"
    deploy_memory_bank: bool = True

    def __post_init__(self):
        if self.location not in LOCATIONS:
            raise ValueError(
                f"Invalid location '{self.location}'. Must be one of: {', '.join(LOCATIONS)}"
            )

    @property
    def scopes(self) -> list[str]:
        if self.location == "both":
            return ["project", "global"]
        return [self.location]

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "DeployOptions":
        """Build options from snake_case or camelCase keys."""
        data = data or {}

        def pick(snake: str, camel: str, default):
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        return cls(
            clear_existing=bool(pick("clear_existing", "clearExisting", False)),
            location=pick("location", "location", "project"),
            use_local_constitution=bool(pick("use_local_constitution", "useLocal", False)),
            use_rules_folder=bool(pick("use_rules_folder", "useRulesFolder", False)),
            rules_file_name=pick("rules_file_name", "rulesFileName", "rules.md"),
            deploy_memory_bank=bool(pick("deploy_memory_bank", "deployMemoryBank", True)),
        )


# =============================================================================
# Results
# =============================================================================


@dataclass
class ValidationWarning:
    """A non-blocking pre-flight finding for one target system."""

    system: str
    feature: str
    message: str

    def to_dict(self) -> dict:
        return {"system": self.system, "feature": self.feature, "message": self.message}


@dataclass
class DeploymentValidation:
    """Outcome of a validation pass. Produced fresh per call, never persisted."""

    warnings: list[ValidationWarning] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def warnings_for(self, system: str) -> list[ValidationWarning]:
        return [w for w in self.warnings if w.system == system]

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "warnings": [w.to_dict() for w in self.warnings],
            "errors": list(self.errors),
        }


@dataclass
class DeploymentResult:
    """Outcome of deploying a team to one target system."""

    system: str
    success: bool = True
    files_written: list[str] = field(default_factory=list)
    error: Optional[str] = None
    warnings: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def fail(self, error: str) -> "DeploymentResult":
        self.success = False
        self.error = error
        return self

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "system": self.system,
            "success": self.success,
            "filesWritten": list(self.files_written),
            "warnings": list(self.warnings),
            "skipped": list(self.skipped),
        }
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class MultiDeploymentResult:
    """Aggregated outcome of deploying one team to several targets."""

    results: dict[str, DeploymentResult] = field(default_factory=dict)
    validation: DeploymentValidation = field(default_factory=DeploymentValidation)
    errors: list[dict[str, str]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.results) and all(r.success for r in self.results.values())

    @property
    def deployed_count(self) -> int:
        return sum(1 for r in self.results.values() if r.success)

    def summary(self) -> str:
        total = len(self.results)
        noun = "system" if total == 1 else "systems"
        return f"{self.deployed_count} of {total} {noun} deployed"

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "results": {k: v.to_dict() for k, v in self.results.items()},
            "validation": self.validation.to_dict(),
            "errors": [dict(e) for e in self.errors],
        }


# =============================================================================
# Detection
# =============================================================================


@dataclass
class ArtifactStatus:
    """Presence of one configuration artifact on disk."""

    path: str
    exists: bool = False
    kind: str = "file"
    count: Optional[int] = None
    modified_at: Optional[str] = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"path": self.path, "exists": self.exists, "kind": self.kind}
        if self.count is not None:
            result["count"] = self.count
        if self.modified_at is not None:
            result["modifiedAt"] = self.modified_at
        return result


@dataclass
class DeployedConfig:
    """Snapshot of which artifacts exist for one system, per scope."""

    system: str
    deployed: bool = False
    project: Optional[dict[str, ArtifactStatus]] = None
    global_: Optional[dict[str, ArtifactStatus]] = None

    def to_dict(self) -> dict:
        def scope(entries):
            if entries is None:
                return None
            return {name: status.to_dict() for name, status in entries.items()}

        return {
            "system": self.system,
            "deployed": self.deployed,
            "project": scope(self.project),
            "global": scope(self.global_),
        }


@dataclass
class DeployedTeam:
    """The stored team whose rendering matches a project's configuration."""

    team_id: str
    team_name: str
