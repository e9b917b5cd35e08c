"""Cline provider implementation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from teamforge.models import MEMORY_BANK_FILES, McpTemplate
from .base import (
    FILE,
    FILE_OR_FOLDER,
    MD_FILES,
    BaseProvider,
    DeployContext,
    merge_mcp_servers,
    slugify,
)

logger = logging.getLogger(__name__)

RULES_PATH = ".clinerules"
MEMORY_BANK_DIR = "memory-bank"
MCP_PATH = Path(".vscode") / "mcp.json"


class ClineProvider(BaseProvider):
    """Provider for Cline (VS Code extension). Project scope only.

    Cline has no single root directory: rules, the memory bank and the MCP
    document live side by side in the project.
    """

    name = "cline"

    def get_config_root(self, project_path: Path | str, scope: str) -> Path:
        return Path(project_path)

    def artifact_layout(
        self, project_path: Path | str, scope: str
    ) -> dict[str, tuple[Path, str]]:
        root = Path(project_path)
        return {
            "rules": (root / RULES_PATH, FILE_OR_FOLDER),
            "memoryBank": (root / MEMORY_BANK_DIR, MD_FILES),
            "mcpServers": (root / MCP_PATH, FILE),
        }

    def clear(self, ctx: DeployContext) -> None:
        logger.info("[%s] Clearing rules, memory bank and MCP servers", self.name)
        ctx.remove(ctx.root / RULES_PATH)
        ctx.remove(ctx.root / MEMORY_BANK_DIR)

        mcp_path = ctx.root / MCP_PATH
        document = ctx.read_json(mcp_path)
        if "mcpServers" in document:
            del document["mcpServers"]
            ctx.write_json(mcp_path, document)

    def mcp_server_config(self, server: McpTemplate) -> dict[str, Any]:
        config: dict[str, Any] = {}
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

    def deploy_constitution(self, ctx: DeployContext, content: str) -> None:
        rules = ctx.root / RULES_PATH
        if ctx.options.use_rules_folder:
            # Switching from the single-file form
            if rules.is_file():
                ctx.remove(rules)
            path = rules / ctx.options.rules_file_name
        else:
            if rules.is_dir():
                ctx.remove(rules)
            path = rules
        ctx.write_text(path, content)
        logger.debug("[%s] Rules deployed to %s", self.name, path)

    def deploy_memory_bank(self, ctx: DeployContext, memory_bank: dict[str, str]) -> None:
        memory_dir = ctx.root / MEMORY_BANK_DIR
        deployed = []
        for key in MEMORY_BANK_FILES:
            content = memory_bank.get(key)
            if content:
                ctx.write_text(memory_dir / f"{key}.md", content)
                deployed.append(key)
        logger.debug("[%s] Memory bank deployed: %s", self.name, ", ".join(deployed))

    def deploy_mcp_servers(self, ctx: DeployContext, servers: list[McpTemplate]) -> None:
        mcp_path = ctx.root / MCP_PATH
        configs = {slugify(server.id): self.mcp_server_config(server) for server in servers}
        ctx.update_json(
            mcp_path,
            lambda document: merge_mcp_servers(
                document, configs, replace=ctx.options.clear_existing
            ),
        )
        logger.debug("[%s] Deployed %d MCP servers to %s", self.name, len(servers), mcp_path)
