"""
providers:
    Deployment providers for each supported target system.

This module provides:
- Provider ABC and BaseProvider with the shared deploy pass
- Concrete implementations for each supported assistant
- PROVIDERS registry for looking up provider classes by system name
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from teamforge.capabilities import CapabilityRegistry
from teamforge.exceptions import UnknownSystemError
from teamforge.library import TemplateLibrary

# Base classes and shared helpers
from teamforge.providers.base import (
    BaseProvider,
    DeployContext,
    Provider,
    dump_json,
    merge_mcp_servers,
    merge_unique,
    read_json,
    slugify,
)

# Concrete provider implementations
from teamforge.providers.claude_code import (
    ClaudeCodeProvider,
    merge_hooks,
    merge_security,
    render_agent,
    render_skill,
)
from teamforge.providers.cline import ClineProvider
from teamforge.providers.gemini import GeminiCliProvider

# =============================================================================
# Provider Registry
# =============================================================================

PROVIDERS: dict[str, type[BaseProvider]] = {
    "claude-code": ClaudeCodeProvider,
    "gemini-cli": GeminiCliProvider,
    "cline": ClineProvider,
}


def create_provider(
    system: str,
    library: TemplateLibrary,
    registry: Optional[CapabilityRegistry] = None,
    home: Optional[Path | str] = None,
) -> BaseProvider:
    """Instantiate the provider for a system.

    Raises:
        UnknownSystemError: If no provider is implemented for the system.
    """
    if system not in PROVIDERS:
        raise UnknownSystemError(system, list(PROVIDERS.keys()))
    return PROVIDERS[system](library, registry=registry, home=home)


__all__ = [
    # ABC and base classes
    "Provider",
    "BaseProvider",
    "DeployContext",
    # Concrete providers
    "ClaudeCodeProvider",
    "GeminiCliProvider",
    "ClineProvider",
    # Registry
    "PROVIDERS",
    "create_provider",
    # Helpers
    "dump_json",
    "merge_hooks",
    "merge_mcp_servers",
    "merge_security",
    "merge_unique",
    "read_json",
    "render_agent",
    "render_skill",
    "slugify",
]
