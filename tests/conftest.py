"""Shared pytest fixtures for teamforge tests."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from teamforge.library import TemplateLibrary
from teamforge.models import (
    AgentRef,
    ElementSecurity,
    GlobalSecurity,
    HookRef,
    McpRef,
    Permissions,
    SkillRef,
    Team,
)


@pytest.fixture
def cli_runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def library_dir(tmp_path: Path) -> Path:
    """Create a template library directory with agents, skills, hooks and MCP servers."""
    root = tmp_path / "library"

    agents_dir = root / "agents"
    (agents_dir / "testing").mkdir(parents=True)
    (agents_dir / "code-reviewer.md").write_text("""---
name: Code Reviewer
description: Reviews code for quality
tags: [review, quality]
tools: Read, Grep
model: sonnet
color: blue
---

You review code carefully.
""")
    (agents_dir / "docs-writer.md").write_text("""---
name: Docs Writer
description: Writes documentation
model: haiku
---

You write documentation.
""")
    (agents_dir / "testing" / "test-writer.md").write_text("""---
name: Test Writer
description: Writes tests
---

You write tests.
""")
    (agents_dir / "README.md").write_text("# Agents\n")

    skill_dir = root / "skills" / "pdf-tools"
    (skill_dir / "scripts").mkdir(parents=True)
    (skill_dir / "SKILL.md").write_text("""---
name: PDF Tools
description: Work with PDF files
allowed-tools: [Read, Bash]
---

# PDF Tools

Use ./scripts/extract.py to extract text.
""")
    (skill_dir / "scripts" / "extract.py").write_text("print('extract')\n")

    hooks_dir = root / "hooks"
    hooks_dir.mkdir(parents=True)
    (hooks_dir / "library.json").write_text(json.dumps({
        "hooks": [
            {
                "id": "pre-commit-lint",
                "name": "Lint before commit",
                "event": "PreToolUse",
                "matcher": "Bash",
                "command": "npm run lint",
            },
            {
                "id": "format-on-save",
                "name": "Format on save",
                "event": "PostToolUse",
                "matcher": "Edit|Write",
                "command": "prettier --write",
            },
        ]
    }))

    github_dir = root / "mcp" / "github"
    github_dir.mkdir(parents=True)
    (github_dir / "mcp.json").write_text(json.dumps({
        "name": "GitHub",
        "type": "stdio",
        "command": "npx",
        "args": ["-y", "@modelcontextprotocol/server-github"],
        "env": {"GITHUB_TOKEN": "${GITHUB_TOKEN}"},
    }))
    docs_dir = root / "mcp" / "Remote Docs"
    docs_dir.mkdir(parents=True)
    (docs_dir / "mcp.json").write_text(json.dumps({
        "name": "Remote Docs",
        "type": "http",
        "url": "https://docs.example.com/mcp",
        "headers": {"Authorization": "Bearer token"},
    }))

    return root


@pytest.fixture
def library(library_dir: Path) -> TemplateLibrary:
    """Template library loaded from library_dir."""
    return TemplateLibrary.from_path(library_dir)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty project directory."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def fake_home(tmp_path: Path) -> Path:
    """A home directory for global-scope deployments."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def sample_team() -> Team:
    """A team using every element category."""
    return Team(
        id="team-1700000000000-abc123",
        name="Full Stack",
        description="Reviews, docs and tests",
        agents=[
            AgentRef(agent_id="code-reviewer", order=1),
            AgentRef(
                agent_id="docs-writer",
                order=2,
                security=ElementSecurity(
                    permissions=Permissions(allow=["Read(docs/**)"]), configured=True
                ),
            ),
        ],
        skills=[SkillRef(skill_id="pdf-tools", order=1)],
        hooks=[HookRef(hook_id="pre-commit-lint", order=1)],
        mcp_servers=[McpRef(mcp_id="github")],
        security=GlobalSecurity(
            permissions=Permissions(allow=["Bash(npm run *)"], deny=["Read(.env)"]),
            env={"NODE_ENV": "development"},
            configured=True,
        ),
        constitution="# Project rules\n\nBe careful.\n",
        memory_bank={"projectBrief": "A demo project."},
    )


@pytest.fixture
def team_file(tmp_path: Path, sample_team: Team) -> Path:
    """sample_team written as a JSON team file."""
    path = tmp_path / "team.json"
    path.write_text(json.dumps(sample_team.to_dict(), indent=2))
    return path


@pytest.fixture
def mock_teamforge_home(tmp_path, library_dir):
    """Point the configured template library at library_dir."""
    teamforge_home = tmp_path / ".teamforge"
    teamforge_home.mkdir()

    with (
        patch("teamforge.config.TEAMFORGE_HOME", teamforge_home),
        patch("teamforge.config.LIBRARY_DIR", library_dir),
        patch("teamforge.config.DEV_LIBRARY_DIR", None),
    ):
        yield {
            "home": teamforge_home,
            "library": library_dir,
        }
