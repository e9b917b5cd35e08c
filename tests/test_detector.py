"""Tests for ConfigDetector and the artifact helpers."""

import pytest

from teamforge.detector import ConfigDetector, inspect_artifact, tree_digest
from teamforge.models import DeployOptions, Team
from teamforge.providers import create_provider
from teamforge.providers.base import DIR, FILE, FILE_OR_FOLDER, FOLDERS, MD_FILES
from teamforge.teams import TeamStore


@pytest.fixture
def detector(fake_home):
    return ConfigDetector.create(home=fake_home)


def _deploy(library, system, team, project, fake_home, **options):
    provider = create_provider(system, library, home=fake_home)
    result = provider.deploy(team, project, DeployOptions(**options))
    assert result.success, result.error
    return result


class TestInspectArtifact:
    """Tests for inspect_artifact()."""

    def test_missing(self, tmp_path):
        status = inspect_artifact(tmp_path / "nope", FILE, "nope")

        assert status.exists is False
        assert status.count is None
        assert status.modified_at is None

    def test_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{}")

        status = inspect_artifact(path, FILE, "settings.json")

        assert status.exists
        assert status.modified_at is not None

    def test_directory_is_not_a_file(self, tmp_path):
        status = inspect_artifact(tmp_path, FILE, "dir")

        assert status.exists is False

    def test_md_files_counted(self, tmp_path):
        (tmp_path / "a.md").write_text("a")
        (tmp_path / "b.md").write_text("b")
        (tmp_path / "notes.txt").write_text("c")

        status = inspect_artifact(tmp_path, MD_FILES, "agents")

        assert status.count == 2

    def test_folders_counted(self, tmp_path):
        (tmp_path / "one").mkdir()
        (tmp_path / "two").mkdir()
        (tmp_path / "file.md").write_text("x")

        status = inspect_artifact(tmp_path, FOLDERS, "skills")

        assert status.count == 2

    def test_file_or_folder_as_file(self, tmp_path):
        path = tmp_path / ".clinerules"
        path.write_text("rules")

        status = inspect_artifact(path, FILE_OR_FOLDER, ".clinerules")

        assert status.exists
        assert status.kind == FILE
        assert status.count is None

    def test_file_or_folder_as_folder(self, tmp_path):
        path = tmp_path / ".clinerules"
        path.mkdir()
        (path / "rules.md").write_text("rules")

        status = inspect_artifact(path, FILE_OR_FOLDER, ".clinerules")

        assert status.kind == DIR
        assert status.count == 1


class TestTreeDigest:
    """Tests for tree_digest()."""

    def test_missing_root(self, tmp_path):
        assert tree_digest(tmp_path / "missing") == {}

    def test_relative_posix_keys(self, tmp_path):
        (tmp_path / "agents").mkdir()
        (tmp_path / "agents" / "a.md").write_text("a")

        assert list(tree_digest(tmp_path)) == ["agents/a.md"]

    def test_content_changes_digest(self, tmp_path):
        path = tmp_path / "a.md"
        path.write_text("a")
        before = tree_digest(tmp_path)
        path.write_text("b")

        assert tree_digest(tmp_path) != before

    def test_exclude(self, tmp_path):
        (tmp_path / "cache").mkdir()
        (tmp_path / "cache" / "x").write_text("x")
        (tmp_path / "keep").write_text("k")

        assert list(tree_digest(tmp_path, exclude=["cache"])) == ["keep"]


class TestConfigDetector:
    """Tests for ConfigDetector.detect and detect_all."""

    def test_nothing_deployed(self, detector, project):
        configs = detector.detect_all(project)

        assert set(configs) == {"claude-code", "gemini-cli", "cline"}
        assert not any(c.deployed for c in configs.values())

    def test_unknown_system(self, detector, project):
        config = detector.detect("cursor", project)

        assert config.deployed is False
        assert config.project is None

    def test_claude_code_after_deploy(self, detector, library, project, fake_home, sample_team):
        _deploy(library, "claude-code", sample_team, project, fake_home)

        config = detector.detect("claude-code", project)

        assert config.deployed
        assert config.project["agents"].count == 2
        assert config.project["skills"].count == 1
        assert config.project["settings"].exists
        assert config.project["constitution"].path == "CLAUDE.md"
        assert config.project["localConstitution"].exists is False
        assert config.global_["agents"].exists is False

    def test_global_paths_shown_from_home(self, detector, library, project, fake_home, sample_team):
        _deploy(library, "claude-code", sample_team, project, fake_home, location="global")

        config = detector.detect("claude-code", project)

        assert config.deployed
        assert config.project["agents"].exists is False
        assert config.global_["agents"].exists
        assert config.global_["agents"].path.startswith("~")

    def test_cline_has_no_global_scope(self, detector, library, project, fake_home, sample_team):
        _deploy(library, "cline", sample_team, project, fake_home)

        config = detector.detect("cline", project)

        assert config.deployed
        assert config.global_ is None
        assert config.project["rules"].kind == FILE
        assert config.project["memoryBank"].count == 1
        assert config.project["mcpServers"].exists

    def test_gemini_after_deploy(self, detector, library, project, fake_home, sample_team):
        _deploy(library, "gemini-cli", sample_team, project, fake_home)

        config = detector.detect("gemini-cli", project)

        assert config.deployed
        assert config.project["settings"].exists
        assert config.project["constitution"].path == "GEMINI.md"

    def test_detection_writes_nothing(self, detector, project):
        detector.detect_all(project)

        assert list(project.iterdir()) == []

    def test_to_dict(self, detector, project):
        data = detector.detect("cline", project).to_dict()

        assert data["system"] == "cline"
        assert data["global"] is None
        assert data["project"]["rules"]["exists"] is False


class TestFindDeployedTeam:
    """Tests for ConfigDetector.find_deployed_team."""

    def test_no_claude_directory(self, detector, project):
        assert detector.find_deployed_team(project, TeamStore(project)) is None

    def test_matches_stored_team(self, detector, library, project, fake_home, sample_team):
        store = TeamStore(project)
        store.save(sample_team)
        store.write_snapshot(sample_team, library)
        _deploy(library, "claude-code", sample_team, project, fake_home)

        deployed = detector.find_deployed_team(project, store)

        assert deployed is not None
        assert deployed.team_id == sample_team.id
        assert deployed.team_name == "Full Stack"

    def test_modified_configuration_does_not_match(
        self, detector, library, project, fake_home, sample_team
    ):
        store = TeamStore(project)
        store.save(sample_team)
        store.write_snapshot(sample_team, library)
        _deploy(library, "claude-code", sample_team, project, fake_home)
        (project / ".claude" / "agents" / "extra.md").write_text("extra")

        assert detector.find_deployed_team(project, store) is None

    def test_picks_the_matching_team(self, detector, library, project, fake_home, sample_team):
        store = TeamStore(project)
        other = Team(id="t-other", name="Other", constitution="Other rules")
        for team in (sample_team, other):
            store.save(team)
            store.write_snapshot(team, library)
        _deploy(library, "claude-code", sample_team, project, fake_home)

        deployed = detector.find_deployed_team(project, store)

        assert deployed.team_id == sample_team.id
