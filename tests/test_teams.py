"""Tests for team files and the per-project TeamStore."""

import json

import pytest
import yaml

from teamforge.exceptions import PathNotFoundError, TeamInvalidError, TeamNotFoundError
from teamforge.models import Team
from teamforge.teams import TeamStore, load_team_file


class TestLoadTeamFile:
    """Tests for load_team_file()."""

    def test_json(self, team_file, sample_team):
        team = load_team_file(team_file)

        assert team.id == sample_team.id
        assert [a.agent_id for a in team.agents] == ["code-reviewer", "docs-writer"]
        assert team.security.env == {"NODE_ENV": "development"}

    def test_yaml(self, tmp_path, sample_team):
        path = tmp_path / "team.yml"
        path.write_text(yaml.safe_dump(sample_team.to_dict()))

        team = load_team_file(path)

        assert team.name == "Full Stack"
        assert team.memory_bank == {"projectBrief": "A demo project."}

    def test_missing_file(self, tmp_path):
        with pytest.raises(PathNotFoundError, match="Team file does not exist"):
            load_team_file(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "team.json"
        path.write_text("{not json")

        with pytest.raises(TeamInvalidError):
            load_team_file(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "team.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(TeamInvalidError, match="mapping"):
            load_team_file(path)

    def test_legacy_workflow_key(self, tmp_path):
        path = tmp_path / "team.json"
        path.write_text(json.dumps({
            "id": "t1",
            "name": "Legacy",
            "workflow": [{"agentId": "code-reviewer", "order": 1}],
        }))

        team = load_team_file(path)

        assert [a.agent_id for a in team.agents] == ["code-reviewer"]


class TestTeamStore:
    """Tests for TeamStore."""

    def test_empty_store(self, project):
        assert TeamStore(project).list() == []

    def test_save_and_load(self, project, sample_team):
        store = TeamStore(project)

        store.save(sample_team)
        loaded = store.load(sample_team.id)

        assert loaded.to_dict() == sample_team.to_dict()
        assert (project / ".teamforge" / "teams" / sample_team.id / "team.json").is_file()

    def test_save_assigns_id_and_timestamps(self, project):
        store = TeamStore(project)
        team = Team(id="", name="New")

        saved = store.save(team)

        assert saved.id.startswith("team-")
        assert saved.created_at is not None
        assert saved.updated_at == saved.created_at
        assert store.exists(saved.id)

    def test_resave_keeps_created_at(self, project, sample_team):
        store = TeamStore(project)
        sample_team.created_at = "2024-01-01T00:00:00+00:00"

        store.save(sample_team)

        assert store.load(sample_team.id).created_at == "2024-01-01T00:00:00+00:00"

    def test_list_sorted_by_name(self, project):
        store = TeamStore(project)
        for team_id, name in [("t1", "beta"), ("t2", "Alpha"), ("t3", "gamma")]:
            store.save(Team(id=team_id, name=name))

        assert [t.name for t in store.list()] == ["Alpha", "beta", "gamma"]

    def test_list_skips_invalid_entries(self, project, sample_team):
        store = TeamStore(project)
        store.save(sample_team)
        broken = store.team_dir("broken")
        broken.mkdir(parents=True)
        (broken / "team.json").write_text("{oops")

        assert [t.id for t in store.list()] == [sample_team.id]

    def test_load_missing(self, project):
        with pytest.raises(TeamNotFoundError):
            TeamStore(project).load("nope")

    def test_delete(self, project, sample_team):
        store = TeamStore(project)
        store.save(sample_team)

        store.delete(sample_team.id)

        assert not store.exists(sample_team.id)
        assert not store.team_dir(sample_team.id).exists()

    def test_delete_missing(self, project):
        with pytest.raises(TeamNotFoundError):
            TeamStore(project).delete("nope")

    def test_write_snapshot(self, project, library, sample_team):
        store = TeamStore(project)
        store.save(sample_team)

        result = store.write_snapshot(sample_team, library)

        assert result.success
        snapshot = store.snapshot_path(sample_team.id)
        assert (snapshot / ".claude" / "agents" / "code-reviewer.md").is_file()
        assert not (project / ".claude").exists()

    def test_resolve_file(self, project, team_file, sample_team):
        assert TeamStore(project).resolve(str(team_file)).id == sample_team.id

    def test_resolve_stored_id(self, project, sample_team):
        store = TeamStore(project)
        store.save(sample_team)

        assert store.resolve(sample_team.id).name == "Full Stack"

    def test_resolve_missing_file(self, project, tmp_path):
        with pytest.raises(PathNotFoundError):
            TeamStore(project).resolve(str(tmp_path / "missing.json"))

    def test_resolve_unknown_id(self, project):
        with pytest.raises(TeamNotFoundError):
            TeamStore(project).resolve("unknown")
