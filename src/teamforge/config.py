"""
config:
    Configuration and paths for teamforge
"""

from pathlib import Path
import os

# Base teamforge directory
TEAMFORGE_HOME = Path(os.environ.get("TEAMFORGE_HOME", Path.home() / ".teamforge"))

# Synced template repositories end up here
CACHE_DIR = TEAMFORGE_HOME / "cache"

# Template library used for deployments
LIBRARY_DIR = Path(os.environ.get("TEAMFORGE_LIBRARY", CACHE_DIR))

# Optional local directory used instead of the cache in developer mode
DEV_LIBRARY_DIR = (
    Path(os.environ["TEAMFORGE_DEV_PATH"]) if os.environ.get("TEAMFORGE_DEV_PATH") else None
)

# Per-project team storage, relative to the project root
TEAMS_DIRNAME = Path(".teamforge") / "teams"

# Team metadata filename
TEAM_FILE = "team.json"

# Rendered copy of a team, used to detect which team is deployed
SNAPSHOT_DIRNAME = "snapshot"

# Library layout
AGENTS_DIRNAME = "agents"
SKILLS_DIRNAME = "skills"
HOOKS_DIRNAME = "hooks"
MCP_DIRNAME = "mcp"

# Skill definition filename
SKILL_FILE = "SKILL.md"

# Agent definition extension
AGENT_EXT = ".md"

# Hook templates are stored as a single JSON catalog
HOOKS_LIBRARY_FILE = "library.json"

# MCP server definition filename
MCP_FILE = "mcp.json"
