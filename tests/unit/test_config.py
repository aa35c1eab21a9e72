"""
Unit tests for configuration loading and database path resolution.
"""

import json
import os

import pytest

from epimem.config import (
    DecayConfig,
    EpimemConfig,
    QueryConfig,
    load_project_env,
)


class TestEpimemConfig:
    """Tests for EpimemConfig load/save."""

    def test_defaults(self):
        config = EpimemConfig()
        assert config.decay == DecayConfig()
        assert config.decay.findings_limit == 20
        assert config.decay.session_limit == 100
        assert config.query == QueryConfig(threshold=0.3, limit=50, pool_size=500)
        assert config.oracle.enabled
        assert config.logging.level == "WARNING"
        assert config.ai_id == "claude-code"

    def test_missing_file_means_defaults(self, tmp_path):
        assert EpimemConfig.load(tmp_path / "absent.json") == EpimemConfig()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        config = EpimemConfig(ai_id="other-agent")
        config.query.limit = 10
        config.oracle.enabled = False
        config.save(path)

        loaded = EpimemConfig.load(path)
        assert loaded == config
        assert json.loads(path.read_text())["query"]["limit"] == 10

    def test_partial_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"decay": {"findings_limit": 5}}))
        loaded = EpimemConfig.load(path)
        assert loaded.decay.findings_limit == 5
        assert loaded.decay.dead_ends_limit == 10
        assert loaded.query == QueryConfig()

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"query": {"bogus": 1}}))
        with pytest.raises(ValueError, match="Invalid config"):
            EpimemConfig.load(path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{")
        with pytest.raises(ValueError):
            EpimemConfig.load(path)


class TestResolveDbPath:
    """Explicit, env, configured, local directory, home."""

    @pytest.fixture(autouse=True)
    def _no_env(self, monkeypatch, tmp_path):
        monkeypatch.delenv("EPIMEM_DB", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))

    def test_explicit_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("EPIMEM_DB", "/env.db")
        assert EpimemConfig().resolve_db_path("/explicit.db", cwd=tmp_path) == "/explicit.db"

    def test_env_var(self, monkeypatch, tmp_path):
        monkeypatch.setenv("EPIMEM_DB", "/env.db")
        assert EpimemConfig().resolve_db_path(cwd=tmp_path) == "/env.db"

    def test_configured_path(self, tmp_path):
        config = EpimemConfig()
        config.storage.db_path = str(tmp_path / "configured.db")
        assert config.resolve_db_path(cwd=tmp_path) == str(tmp_path / "configured.db")

    def test_local_directory(self, tmp_path):
        (tmp_path / ".epimem").mkdir()
        assert EpimemConfig().resolve_db_path(cwd=tmp_path) == str(
            tmp_path / ".epimem" / "sessions.db"
        )

    def test_home_fallback(self, tmp_path):
        resolved = EpimemConfig().resolve_db_path(cwd=tmp_path)
        assert resolved == str(tmp_path / "home" / ".epimem" / "sessions.db")


class TestProjectEnv:
    def test_loads_env_file(self, monkeypatch, tmp_path):
        # setenv first so monkeypatch restores the original state afterwards
        monkeypatch.setenv("EPIMEM_DB", "placeholder")
        monkeypatch.delenv("EPIMEM_DB")
        (tmp_path / ".env").write_text("EPIMEM_DB=/from/dotenv.db\n")
        assert load_project_env(tmp_path)
        assert os.environ["EPIMEM_DB"] == "/from/dotenv.db"

    def test_does_not_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("EPIMEM_DB", "/already/set.db")
        (tmp_path / ".env").write_text("EPIMEM_DB=/from/dotenv.db\n")
        load_project_env(tmp_path)
        assert os.environ["EPIMEM_DB"] == "/already/set.db"

    def test_missing_file(self, tmp_path):
        assert not load_project_env(tmp_path)
