"""Gemini CLI provider implementation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from teamforge.models import McpTemplate
from .base import (
    DIR,
    FILE,
    BaseProvider,
    DeployContext,
    merge_mcp_servers,
    slugify,
)

logger = logging.getLogger(__name__)

CONSTITUTION_FILE = "GEMINI.md"
SETTINGS_FILE = "settings.json"


class GeminiCliProvider(BaseProvider):
    """Provider for Gemini CLI.

    The global root (~/.gemini) also holds the assistant's own state, so
    clearing never removes directories: it only drops the managed
    ``mcpServers`` mapping before the new one is written.
    """

    name = "gemini-cli"

    def get_config_root(self, project_path: Path | str, scope: str) -> Path:
        if scope == "global":
            return self.home / ".gemini"
        return Path(project_path) / ".gemini"

    def get_constitution_path(self, project_path: Path | str, scope: str) -> Path:
        if scope == "global":
            return self.get_config_root(project_path, scope) / CONSTITUTION_FILE
        return Path(project_path) / CONSTITUTION_FILE

    def artifact_layout(
        self, project_path: Path | str, scope: str
    ) -> dict[str, tuple[Path, str]]:
        root = self.get_config_root(project_path, scope)
        return {
            "root": (root, DIR),
            "settings": (root / SETTINGS_FILE, FILE),
            "constitution": (self.get_constitution_path(project_path, scope), FILE),
        }

    def clear(self, ctx: DeployContext) -> None:
        settings_path = ctx.root / SETTINGS_FILE
        settings = ctx.read_json(settings_path)
        if "mcpServers" in settings:
            logger.info("[%s] Clearing MCP servers in %s", self.name, settings_path)
            del settings["mcpServers"]
            ctx.write_json(settings_path, settings)

    def mcp_server_config(self, server: McpTemplate) -> dict[str, Any]:
        config: dict[str, Any] = {}
        if server.is_stdio:
            if server.command:
                config["command"] = server.command
            if server.args:
                config["args"] = list(server.args)
        else:
            if server.url:
                config["httpUrl" if server.type == "http" else "url"] = server.url
            if server.headers:
                config["headers"] = dict(server.headers)
        if server.env:
            config["env"] = dict(server.env)
        return config

    def deploy_constitution(self, ctx: DeployContext, content: str) -> None:
        path = self.get_constitution_path(ctx.project_path, ctx.scope)
        ctx.write_text(path, content)
        logger.debug("[%s] Constitution deployed to %s", self.name, path)

    def deploy_mcp_servers(self, ctx: DeployContext, servers: list[McpTemplate]) -> None:
        configs = {slugify(server.id): self.mcp_server_config(server) for server in servers}
        ctx.update_json(
            ctx.root / SETTINGS_FILE,
            lambda settings: merge_mcp_servers(
                settings, configs, replace=ctx.options.clear_existing
            ),
        )
        logger.debug("[%s] Deployed %d MCP servers", self.name, len(servers))
