"""Tests for the template library and LibraryCache."""

import pytest

from teamforge.exceptions import ConfigurationError
from teamforge.library import LibraryCache, TemplateLibrary, scan_agents


class TestTemplateLibrary:
    """Tests for TemplateLibrary.from_path and lookups."""

    def test_agents(self, library):
        ids = sorted(a.id for a in library.agents)

        assert ids == ["code-reviewer", "docs-writer", "testing-test-writer"]

    def test_agent_fields(self, library):
        agent = library.get_agent("code-reviewer")

        assert agent.name == "Code Reviewer"
        assert agent.description == "Reviews code for quality"
        assert agent.tags == ["review", "quality"]
        assert agent.tools == ["Read", "Grep"]
        assert agent.model == "sonnet"
        assert agent.extra == {"color": "blue"}
        assert agent.body.strip() == "You review code carefully."

    def test_agent_defaults(self, library):
        agent = library.get_agent("testing-test-writer")

        assert agent.tools == "*"
        assert agent.model == "sonnet"
        assert agent.category == "testing"

    def test_readme_skipped(self, library):
        assert library.get_agent("README") is None

    def test_skill(self, library, library_dir):
        skill = library.get_skill("pdf-tools")

        assert skill.name == "PDF Tools"
        assert skill.allowed_tools == ["Read", "Bash"]
        assert skill.path == library_dir / "skills" / "pdf-tools"

    def test_hooks(self, library):
        hook = library.get_hook("format-on-save")

        assert hook.event == "PostToolUse"
        assert hook.matcher == "Edit|Write"
        assert hook.type == "command"

    def test_mcp_ids_are_directory_names(self, library):
        github = library.get_mcp("github")
        docs = library.get_mcp("Remote Docs")

        assert github.is_stdio
        assert github.env == {"GITHUB_TOKEN": "${GITHUB_TOKEN}"}
        assert docs.type == "http"
        assert docs.headers == {"Authorization": "Bearer token"}

    def test_unknown_ids_return_none(self, library):
        assert library.get_agent("nope") is None
        assert library.get_skill("nope") is None
        assert library.get_hook("nope") is None
        assert library.get_mcp("nope") is None

    def test_empty_directory(self, tmp_path):
        library = TemplateLibrary.from_path(tmp_path)

        assert library.agents == []
        assert library.mcps == []

    def test_malformed_hook_catalog(self, tmp_path):
        (tmp_path / "hooks").mkdir()
        (tmp_path / "hooks" / "library.json").write_text("{broken")

        assert TemplateLibrary.from_path(tmp_path).hooks == []

    def test_hook_entry_without_command_skipped(self, tmp_path):
        (tmp_path / "hooks").mkdir()
        (tmp_path / "hooks" / "library.json").write_text(
            '{"hooks": [{"id": "a", "event": "Stop"}, '
            '{"id": "b", "event": "Stop", "command": "echo"}]}'
        )

        assert [h.id for h in TemplateLibrary.from_path(tmp_path).hooks] == ["b"]

    def test_undecodable_files_skipped(self, library_dir):
        (library_dir / "agents" / "binary.md").write_bytes(b"\xff\xfe---\nname: x\n")
        bad_skill = library_dir / "skills" / "broken"
        bad_skill.mkdir()
        (bad_skill / "SKILL.md").write_bytes(b"\xff\xfe")
        bad_mcp = library_dir / "mcp" / "broken"
        bad_mcp.mkdir()
        (bad_mcp / "mcp.json").write_bytes(b'{"command": "\xff"}')

        library = TemplateLibrary.from_path(library_dir)

        assert library.get_agent("binary") is None
        assert sorted(a.id for a in library.agents) == [
            "code-reviewer",
            "docs-writer",
            "testing-test-writer",
        ]
        assert [s.id for s in library.skills] == ["pdf-tools"]
        assert library.get_mcp("broken") is None
        assert library.get_mcp("github") is not None

    def test_undecodable_hook_catalog(self, tmp_path):
        (tmp_path / "hooks").mkdir()
        (tmp_path / "hooks" / "library.json").write_bytes(b'{"hooks": ["\xff"]}')

        assert TemplateLibrary.from_path(tmp_path).hooks == []

    @pytest.mark.parametrize("content", ["[]", '{"hooks": {"id": "a"}}', '{"hooks": ["a", 1]}'])
    def test_hook_catalog_wrong_shape(self, tmp_path, content):
        (tmp_path / "hooks").mkdir()
        (tmp_path / "hooks" / "library.json").write_text(content)

        assert TemplateLibrary.from_path(tmp_path).hooks == []

    def test_mcp_template_not_an_object_skipped(self, library_dir):
        listed = library_dir / "mcp" / "listed"
        listed.mkdir()
        (listed / "mcp.json").write_text('["npx", "server"]')

        library = TemplateLibrary.from_path(library_dir)

        assert library.get_mcp("listed") is None
        assert sorted(m.id for m in library.mcps) == ["Remote Docs", "github"]


class TestScanAgents:
    """Tests for scan_agents()."""

    def test_invalid_header_skipped(self, tmp_path):
        (tmp_path / "good.md").write_text("---\ndescription: Good\n---\n\nGood.\n")
        (tmp_path / "bad.md").write_text("---\nname: [a, b]\n---\n\nBad.\n")

        assert [a.id for a in scan_agents(tmp_path)] == ["good"]

    def test_missing_description_still_loaded(self, tmp_path):
        (tmp_path / "plain.md").write_text("Just a prompt.\n")

        agents = scan_agents(tmp_path)

        assert [a.id for a in agents] == ["plain"]
        assert agents[0].name == "plain"


class TestLibraryCache:
    """Tests for LibraryCache."""

    def test_loads_once(self, library_dir):
        cache = LibraryCache({"local": library_dir})

        first = cache.get("local")

        assert cache.is_loaded("local")
        assert cache.get("local") is first
        assert first.source == "local"

    def test_unknown_source(self, library_dir):
        with pytest.raises(ConfigurationError, match="Unknown library source"):
            LibraryCache({"local": library_dir}).get("remote")

    def test_invalidate_and_reload(self, library_dir):
        cache = LibraryCache({"local": library_dir})
        first = cache.get("local")
        (library_dir / "agents" / "new-agent.md").write_text("---\ndescription: New\n---\n\nNew.\n")

        assert cache.get("local").get_agent("new-agent") is None

        reloaded = cache.reload("local")

        assert reloaded is not first
        assert reloaded.get_agent("new-agent") is not None

    def test_invalidate_all(self, library_dir):
        cache = LibraryCache({"a": library_dir, "b": library_dir})
        cache.get("a")
        cache.get("b")

        cache.invalidate()

        assert not cache.is_loaded("a")
        assert not cache.is_loaded("b")
