"""
Pytest configuration and fixtures for epimem tests.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path so we can import the epimem package
sys.path.insert(0, str(Path(__file__).parent.parent))

from epimem.decay import SECONDS_PER_DAY
from epimem.models import DeadEnd, Finding, Unknown, new_id
from epimem.store import MemoryStore

# Fixed evaluation instant (2023-11-14T22:13:20Z)
NOW = 1_700_000_000.0
HOUR = 3600.0
DAY = SECONDS_PER_DAY


@pytest.fixture
def now():
    """Provide the fixed clock value."""
    return NOW


@pytest.fixture
def temp_db_path(tmp_path):
    """Provide a database path inside a per-test temporary directory."""
    return str(tmp_path / "epimem" / "sessions.db")


@pytest.fixture
def memory_store(temp_db_path):
    """Provide a MemoryStore backed by a temporary database."""
    return MemoryStore(db_path=temp_db_path)


@pytest.fixture
def project(memory_store):
    return memory_store.create_project("demo", now=NOW - 30 * DAY)


@pytest.fixture
def session(memory_store, project):
    return memory_store.create_session(
        "claude-code", project.id, "Implement user authentication", now=NOW - HOUR
    )


@pytest.fixture
def make_finding():
    """Factory for in-memory findings verified `age_days` before NOW."""

    def _make(text="Auth uses JWT", age_days=0.0, subject=None, subject_hash=None):
        created = NOW - age_days * DAY
        return Finding(
            id=new_id(),
            project_id="p1",
            session_id="s1",
            text=text,
            created_timestamp=created,
            last_verified_timestamp=created,
            subject=subject,
            subject_hash=subject_hash,
        )

    return _make


@pytest.fixture
def make_unknown():
    def _make(text="Where are tokens refreshed?", resolved=False):
        unknown = Unknown.new("p1", "s1", text, now=NOW - HOUR)
        if resolved:
            unknown.is_resolved = True
            unknown.resolved_by = "reading the code"
            unknown.resolved_timestamp = NOW
        return unknown

    return _make


@pytest.fixture
def make_dead_end():
    def _make(approach="localStorage for tokens", why_failed="XSS exposure"):
        return DeadEnd(
            id=new_id(),
            project_id="p1",
            session_id="s1",
            approach=approach,
            why_failed=why_failed,
            created_timestamp=NOW - HOUR,
        )

    return _make


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """
    Run the CLI inside a throwaway project directory.

    The project has its own `.epimem/` so the database and the active-session
    file stay local; HOME points into tmp_path so no user config is read.
    """
    project_dir = tmp_path / "demo-project"
    (project_dir / ".epimem").mkdir(parents=True)
    monkeypatch.chdir(project_dir)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("EPIMEM_DB", raising=False)

    from epimem.file_oracle import GitFileOracle

    hashes = {}
    monkeypatch.setattr(GitFileOracle, "_hash_object", lambda self, path: hashes.get(path))
    return project_dir, hashes


@pytest.fixture
def run_cli(workspace, capsys):
    """Invoke epimem.cli.main; returns (exit code, parsed stdout or text, stderr)."""
    import json

    from epimem.cli import main

    def _run(*args, text=False):
        argv = list(args) + (["--text"] if text else [])
        code = main(argv)
        captured = capsys.readouterr()
        out = captured.out if text or not captured.out else json.loads(captured.out)
        return code, out, captured.err

    return _run


# Markers
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "hypothesis: property-based tests"
    )
    config.addinivalue_line(
        "markers", "integration: end-to-end CLI flows against a temporary database"
    )
