"""
Persistent breadcrumb and session store with SQLite storage.

One local file, one writer. Every operation opens its own connection, so the
store can be constructed once per CLI invocation and passed around freely.

Malformed rows: single-record reads raise DataCorruptionError; list reads skip
the record and log a warning.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from epimem.config import EpimemConfig
from epimem.epistemic.vectors import EpistemicVectors
from epimem.models import (
    BranchStatus,
    Cascade,
    CascadePhase,
    DeadEnd,
    EpistemicImportance,
    Finding,
    Goal,
    GoalStatus,
    HandoffReport,
    InvestigationBranch,
    Mistake,
    Project,
    ProjectStatus,
    Reflex,
    RootCauseVector,
    ScopeVector,
    Session,
    SubTask,
    SuccessCriterion,
    TaskStatus,
    Unknown,
    new_id,
    now_ts,
)
from epimem.types import DataCorruptionError, NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")



# =============================================================================
# Schema Definition
# =============================================================================

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    description TEXT,
    repos JSON DEFAULT '[]',
    status TEXT DEFAULT 'active',
    created_timestamp REAL NOT NULL,
    last_activity_timestamp REAL,
    total_sessions INTEGER DEFAULT 0,
    total_goals INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    ai_id TEXT NOT NULL,
    project_id TEXT REFERENCES projects(id),
    subject TEXT,
    start_time REAL NOT NULL,
    end_time REAL
);

CREATE TABLE IF NOT EXISTS goals (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id),
    project_id TEXT REFERENCES projects(id),
    objective TEXT NOT NULL,
    scope JSON NOT NULL,
    success_criteria JSON DEFAULT '[]',
    status TEXT DEFAULT 'in_progress',
    created_timestamp REAL NOT NULL,
    completed_timestamp REAL
);

CREATE TABLE IF NOT EXISTS subtasks (
    id TEXT PRIMARY KEY,
    goal_id TEXT NOT NULL REFERENCES goals(id),
    description TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    importance TEXT NOT NULL DEFAULT 'medium',
    completion_evidence TEXT,
    created_timestamp REAL NOT NULL,
    completed_timestamp REAL
);

-- Breadcrumbs
CREATE TABLE IF NOT EXISTS findings (
    id TEXT PRIMARY KEY,
    project_id TEXT NOT NULL REFERENCES projects(id),
    session_id TEXT NOT NULL,
    goal_id TEXT,
    subtask_id TEXT,
    text TEXT NOT NULL,
    subject TEXT,
    subject_hash TEXT,
    impact REAL DEFAULT 0.5,
    created_timestamp REAL NOT NULL,
    last_verified_timestamp REAL
);

CREATE TABLE IF NOT EXISTS unknowns (
    id TEXT PRIMARY KEY,
    project_id TEXT NOT NULL REFERENCES projects(id),
    session_id TEXT NOT NULL,
    goal_id TEXT,
    subtask_id TEXT,
    text TEXT NOT NULL,
    subject TEXT,
    impact REAL DEFAULT 0.5,
    is_resolved INTEGER DEFAULT 0,
    resolved_by TEXT,
    created_timestamp REAL NOT NULL,
    resolved_timestamp REAL
);

CREATE TABLE IF NOT EXISTS dead_ends (
    id TEXT PRIMARY KEY,
    project_id TEXT NOT NULL REFERENCES projects(id),
    session_id TEXT NOT NULL,
    goal_id TEXT,
    subtask_id TEXT,
    approach TEXT NOT NULL,
    why_failed TEXT NOT NULL,
    subject TEXT,
    impact REAL DEFAULT 0.5,
    created_timestamp REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS mistakes (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id),
    project_id TEXT,
    goal_id TEXT,
    mistake TEXT NOT NULL,
    why_wrong TEXT NOT NULL,
    cost_estimate TEXT,
    root_cause_vector TEXT,
    prevention TEXT,
    created_timestamp REAL NOT NULL
);

-- Session history
CREATE TABLE IF NOT EXISTS handoffs (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id),
    project_id TEXT,
    ai_id TEXT NOT NULL,
    task_summary TEXT NOT NULL,
    key_findings JSON DEFAULT '[]',
    remaining_unknowns JSON DEFAULT '[]',
    next_session_context TEXT,
    created_timestamp REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS reflexes (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id),
    cascade_id TEXT,
    phase TEXT NOT NULL,
    round INTEGER DEFAULT 1,
    vectors JSON NOT NULL,
    reasoning TEXT,
    timestamp REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS cascades (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id),
    goal_id TEXT,
    task TEXT NOT NULL,
    completed_phases JSON DEFAULT '[]',
    final_action TEXT,
    final_confidence REAL,
    started_at REAL NOT NULL,
    completed_at REAL
);

CREATE TABLE IF NOT EXISTS investigation_branches (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id),
    branch_name TEXT NOT NULL,
    investigation_path TEXT NOT NULL,
    preflight_vectors JSON NOT NULL,
    postflight_vectors JSON,
    status TEXT DEFAULT 'active',
    merge_score REAL,
    is_winner INTEGER DEFAULT 0,
    created_timestamp REAL NOT NULL,
    checkpoint_timestamp REAL
);

-- Indexes for performance
CREATE INDEX IF NOT EXISTS idx_sessions_project ON sessions(project_id);
CREATE INDEX IF NOT EXISTS idx_sessions_ai ON sessions(ai_id);
CREATE INDEX IF NOT EXISTS idx_goals_session ON goals(session_id);
CREATE INDEX IF NOT EXISTS idx_subtasks_goal ON subtasks(goal_id);
CREATE INDEX IF NOT EXISTS idx_findings_project ON findings(project_id);
CREATE INDEX IF NOT EXISTS idx_findings_session ON findings(session_id);
CREATE INDEX IF NOT EXISTS idx_unknowns_project ON unknowns(project_id);
CREATE INDEX IF NOT EXISTS idx_unknowns_session ON unknowns(session_id);
CREATE INDEX IF NOT EXISTS idx_dead_ends_project ON dead_ends(project_id);
CREATE INDEX IF NOT EXISTS idx_mistakes_session ON mistakes(session_id);
CREATE INDEX IF NOT EXISTS idx_handoffs_project ON handoffs(project_id);
CREATE INDEX IF NOT EXISTS idx_reflexes_session_phase ON reflexes(session_id, phase);
CREATE INDEX IF NOT EXISTS idx_cascades_session ON cascades(session_id);
CREATE INDEX IF NOT EXISTS idx_branches_session ON investigation_branches(session_id);
"""


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class MatchResult:
    """
    Outcome of resolving a breadcrumb by text or id prefix.

    Exactly one match is actionable; several matches are handed back to the
    caller for disambiguation instead of acting on any of them.
    """

    query: str
    candidates: list[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.candidates

    @property
    def is_ambiguous(self) -> bool:
        return len(self.candidates) > 1

    @property
    def unique(self) -> Any | None:
        return self.candidates[0] if len(self.candidates) == 1 else None


# =============================================================================
# MemoryStore Class
# =============================================================================


class MemoryStore:
    """
    SQLite store for breadcrumbs, sessions and their administrative entities.

    Features:
    - WAL mode, foreign keys on, one connection per operation
    - Breadcrumb logging, listing, verification and resolution
    - Project, session, goal, subtask, handoff, reflex, cascade and
      investigation-branch CRUD
    """

    def __init__(self, db_path: str | None = None):
        """
        Initialize the store.

        Args:
            db_path: Path to the SQLite file. If None, uses EPIMEM_DB, then a
                local `.epimem/` directory, then `~/.epimem/`.
        """
        if db_path is None:
            db_path = EpimemConfig().resolve_db_path()

        self.db_path = db_path
        self._ensure_directory()
        self._init_database()

    def _ensure_directory(self) -> None:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    def _init_database(self) -> None:
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = sqlite3.Row
        return conn

    def _fetch_one(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Row | None:
        conn = self._get_connection()
        try:
            return conn.execute(sql, tuple(params)).fetchone()
        finally:
            conn.close()

    def _fetch_all(self, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
        conn = self._get_connection()
        try:
            return conn.execute(sql, tuple(params)).fetchall()
        finally:
            conn.close()

    def _execute(self, sql: str, params: Iterable[Any] = ()) -> int:
        """Run one write statement and return the affected row count."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(sql, tuple(params))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    # =========================================================================
    # Row conversion
    # =========================================================================

    @staticmethod
    def _convert(kind: str, row: sqlite3.Row, converter: Callable[[sqlite3.Row], T]) -> T:
        try:
            return converter(row)
        except DataCorruptionError:
            raise
        except (ValueError, TypeError, KeyError) as e:
            raise DataCorruptionError(f"Malformed {kind} record {row['id']}: {e}") from e

    def _get_one(
        self, kind: str, sql: str, params: Iterable[Any], converter: Callable[[sqlite3.Row], T]
    ) -> T | None:
        row = self._fetch_one(sql, params)
        if row is None:
            return None
        return self._convert(kind, row, converter)

    def _rows_to(
        self, kind: str, rows: Iterable[sqlite3.Row], converter: Callable[[sqlite3.Row], T]
    ) -> list[T]:
        """Convert rows, skipping and logging any that fail to parse."""
        results = []
        for row in rows:
            try:
                results.append(self._convert(kind, row, converter))
            except DataCorruptionError as e:
                logger.warning("Skipping record: %s", e)
        return results

    @staticmethod
    def _scoped_where(
        clauses: list[str], params: list[Any], project_id: str | None, session_id: str | None
    ) -> None:
        if project_id:
            clauses.append("project_id = ?")
            params.append(project_id)
        if session_id:
            clauses.append("session_id = ?")
            params.append(session_id)

    @staticmethod
    def _where_sql(clauses: list[str]) -> str:
        return f" WHERE {' AND '.join(clauses)}" if clauses else ""

    # =========================================================================
    # Projects
    # =========================================================================

    def create_project(
        self,
        name: str,
        description: str | None = None,
        repos: list[str] | None = None,
        now: float | None = None,
    ) -> Project:
        if not name or not name.strip():
            raise ValueError("Project name must not be empty")

        project = Project(
            id=new_id(),
            name=name,
            description=description,
            repos=list(repos or []),
            created_timestamp=now_ts() if now is None else now,
        )
        project.last_activity_timestamp = project.created_timestamp
        self._execute(
            """
            INSERT INTO projects (id, name, description, repos, status,
                                  created_timestamp, last_activity_timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                project.id,
                project.name,
                project.description,
                json.dumps(project.repos),
                project.status.value,
                project.created_timestamp,
                project.last_activity_timestamp,
            ),
        )
        logger.info("Created project %s (%s)", project.name, project.id)
        return project

    def get_project(self, project_id: str) -> Project | None:
        return self._get_one(
            "project", "SELECT * FROM projects WHERE id = ?", (project_id,), self._row_to_project
        )

    def get_project_by_name(self, name: str) -> Project | None:
        return self._get_one(
            "project", "SELECT * FROM projects WHERE name = ?", (name,), self._row_to_project
        )

    def get_or_create_project(self, name: str, now: float | None = None) -> Project:
        project = self.get_project_by_name(name)
        if project is not None:
            return project
        return self.create_project(name, now=now)

    def list_projects(self, status: ProjectStatus | None = None, limit: int = 50) -> list[Project]:
        sql = "SELECT * FROM projects"
        params: list[Any] = []
        if status is not None:
            sql += " WHERE status = ?"
            params.append(status.value)
        sql += " ORDER BY last_activity_timestamp DESC LIMIT ?"
        params.append(limit)
        return self._rows_to("project", self._fetch_all(sql, params), self._row_to_project)

    def update_project_status(self, project_id: str, status: ProjectStatus) -> None:
        if not self._execute(
            "UPDATE projects SET status = ? WHERE id = ?", (status.value, project_id)
        ):
            raise NotFoundError("project", project_id)

    def record_project_activity(
        self,
        project_id: str,
        sessions: int = 0,
        goals: int = 0,
        now: float | None = None,
    ) -> None:
        """Bump the session/goal counters and the last-activity time."""
        self._execute(
            """
            UPDATE projects
            SET total_sessions = total_sessions + ?,
                total_goals = total_goals + ?,
                last_activity_timestamp = ?
            WHERE id = ?
            """,
            (sessions, goals, now_ts() if now is None else now, project_id),
        )

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(
        self,
        ai_id: str,
        project_id: str | None = None,
        subject: str | None = None,
        now: float | None = None,
    ) -> Session:
        session = Session(
            id=new_id(),
            ai_id=ai_id,
            start_time=now_ts() if now is None else now,
            project_id=project_id,
            subject=subject,
        )
        self._execute(
            """
            INSERT INTO sessions (id, ai_id, project_id, subject, start_time)
            VALUES (?, ?, ?, ?, ?)
            """,
            (session.id, session.ai_id, session.project_id, session.subject, session.start_time),
        )
        if project_id:
            self.record_project_activity(project_id, sessions=1, now=session.start_time)
        logger.info("Started session %s for %s", session.id, ai_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        return self._get_one(
            "session", "SELECT * FROM sessions WHERE id = ?", (session_id,), self._row_to_session
        )

    def list_sessions(
        self, project_id: str | None = None, ai_id: str | None = None, limit: int = 20
    ) -> list[Session]:
        clauses: list[str] = []
        params: list[Any] = []
        self._scoped_where(clauses, params, project_id, None)
        if ai_id:
            clauses.append("ai_id = ?")
            params.append(ai_id)
        sql = f"SELECT * FROM sessions{self._where_sql(clauses)} ORDER BY start_time DESC LIMIT ?"
        params.append(limit)
        return self._rows_to("session", self._fetch_all(sql, params), self._row_to_session)

    def end_session(self, session_id: str, now: float | None = None) -> None:
        if not self._execute(
            "UPDATE sessions SET end_time = ? WHERE id = ?",
            (now_ts() if now is None else now, session_id),
        ):
            raise NotFoundError("session", session_id)
        logger.info("Ended session %s", session_id)

    # =========================================================================
    # Breadcrumbs: logging
    # =========================================================================

    def log_finding(
        self,
        project_id: str,
        session_id: str,
        text: str,
        goal_id: str | None = None,
        subtask_id: str | None = None,
        subject: str | None = None,
        subject_hash: str | None = None,
        impact: float = 0.5,
        now: float | None = None,
    ) -> Finding:
        """
        Record a finding.

        The verification time starts equal to the creation time.

        Raises:
            ValueError: If text is empty or impact is outside [0, 1]
        """
        if not text or not text.strip():
            raise ValueError("Finding text must not be empty")

        finding = Finding.new(
            project_id,
            session_id,
            text,
            now=now,
            goal_id=goal_id,
            subtask_id=subtask_id,
            subject=subject,
            subject_hash=subject_hash,
            impact=impact,
        )
        self._execute(
            """
            INSERT INTO findings (id, project_id, session_id, goal_id, subtask_id, text,
                                  subject, subject_hash, impact, created_timestamp,
                                  last_verified_timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                finding.id,
                finding.project_id,
                finding.session_id,
                finding.goal_id,
                finding.subtask_id,
                finding.text,
                finding.subject,
                finding.subject_hash,
                finding.impact,
                finding.created_timestamp,
                finding.last_verified_timestamp,
            ),
        )
        return finding

    def log_unknown(
        self,
        project_id: str,
        session_id: str,
        text: str,
        goal_id: str | None = None,
        subtask_id: str | None = None,
        subject: str | None = None,
        impact: float = 0.5,
        now: float | None = None,
    ) -> Unknown:
        if not text or not text.strip():
            raise ValueError("Unknown text must not be empty")

        unknown = Unknown.new(
            project_id,
            session_id,
            text,
            now=now,
            goal_id=goal_id,
            subtask_id=subtask_id,
            subject=subject,
            impact=impact,
        )
        self._execute(
            """
            INSERT INTO unknowns (id, project_id, session_id, goal_id, subtask_id, text,
                                  subject, impact, created_timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                unknown.id,
                unknown.project_id,
                unknown.session_id,
                unknown.goal_id,
                unknown.subtask_id,
                unknown.text,
                unknown.subject,
                unknown.impact,
                unknown.created_timestamp,
            ),
        )
        return unknown

    def log_dead_end(
        self,
        project_id: str,
        session_id: str,
        approach: str,
        why_failed: str,
        goal_id: str | None = None,
        subtask_id: str | None = None,
        subject: str | None = None,
        impact: float = 0.5,
        now: float | None = None,
    ) -> DeadEnd:
        if not approach or not approach.strip():
            raise ValueError("Dead-end approach must not be empty")
        if not why_failed or not why_failed.strip():
            raise ValueError("Dead-end reason must not be empty")

        dead_end = DeadEnd(
            id=new_id(),
            project_id=project_id,
            session_id=session_id,
            approach=approach,
            why_failed=why_failed,
            created_timestamp=now_ts() if now is None else now,
            goal_id=goal_id,
            subtask_id=subtask_id,
            subject=subject,
            impact=impact,
        )
        self._execute(
            """
            INSERT INTO dead_ends (id, project_id, session_id, goal_id, subtask_id,
                                   approach, why_failed, subject, impact, created_timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                dead_end.id,
                dead_end.project_id,
                dead_end.session_id,
                dead_end.goal_id,
                dead_end.subtask_id,
                dead_end.approach,
                dead_end.why_failed,
                dead_end.subject,
                dead_end.impact,
                dead_end.created_timestamp,
            ),
        )
        return dead_end

    def log_mistake(
        self,
        session_id: str,
        mistake: str,
        why_wrong: str,
        project_id: str | None = None,
        goal_id: str | None = None,
        cost_estimate: str | None = None,
        root_cause_vector: RootCauseVector | None = None,
        prevention: str | None = None,
        now: float | None = None,
    ) -> Mistake:
        if not mistake or not mistake.strip():
            raise ValueError("Mistake text must not be empty")

        record = Mistake(
            id=new_id(),
            session_id=session_id,
            mistake=mistake,
            why_wrong=why_wrong,
            created_timestamp=now_ts() if now is None else now,
            project_id=project_id,
            goal_id=goal_id,
            cost_estimate=cost_estimate,
            root_cause_vector=root_cause_vector,
            prevention=prevention,
        )
        self._execute(
            """
            INSERT INTO mistakes (id, session_id, project_id, goal_id, mistake, why_wrong,
                                  cost_estimate, root_cause_vector, prevention,
                                  created_timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.session_id,
                record.project_id,
                record.goal_id,
                record.mistake,
                record.why_wrong,
                record.cost_estimate,
                record.root_cause_vector.value if record.root_cause_vector else None,
                record.prevention,
                record.created_timestamp,
            ),
        )
        return record

    # =========================================================================
    # Breadcrumbs: reads
    # =========================================================================

    def get_finding(self, finding_id: str) -> Finding | None:
        return self._get_one(
            "finding", "SELECT * FROM findings WHERE id = ?", (finding_id,), self._row_to_finding
        )

    def get_unknown(self, unknown_id: str) -> Unknown | None:
        return self._get_one(
            "unknown", "SELECT * FROM unknowns WHERE id = ?", (unknown_id,), self._row_to_unknown
        )

    def get_dead_end(self, dead_end_id: str) -> DeadEnd | None:
        return self._get_one(
            "dead end",
            "SELECT * FROM dead_ends WHERE id = ?",
            (dead_end_id,),
            self._row_to_dead_end,
        )

    def list_findings(
        self, project_id: str | None = None, session_id: str | None = None, limit: int = 50
    ) -> list[Finding]:
        """Findings newest first, with staleness fields populated."""
        clauses: list[str] = []
        params: list[Any] = []
        self._scoped_where(clauses, params, project_id, session_id)
        sql = (
            f"SELECT * FROM findings{self._where_sql(clauses)} "
            "ORDER BY created_timestamp DESC, rowid DESC LIMIT ?"
        )
        params.append(limit)
        return self._rows_to("finding", self._fetch_all(sql, params), self._row_to_finding)

    def list_unknowns(
        self,
        project_id: str | None = None,
        session_id: str | None = None,
        resolved: bool | None = None,
        limit: int = 50,
    ) -> list[Unknown]:
        clauses: list[str] = []
        params: list[Any] = []
        self._scoped_where(clauses, params, project_id, session_id)
        if resolved is not None:
            clauses.append("is_resolved = ?")
            params.append(1 if resolved else 0)
        sql = (
            f"SELECT * FROM unknowns{self._where_sql(clauses)} "
            "ORDER BY created_timestamp DESC, rowid DESC LIMIT ?"
        )
        params.append(limit)
        return self._rows_to("unknown", self._fetch_all(sql, params), self._row_to_unknown)

    def list_dead_ends(
        self, project_id: str | None = None, session_id: str | None = None, limit: int = 50
    ) -> list[DeadEnd]:
        clauses: list[str] = []
        params: list[Any] = []
        self._scoped_where(clauses, params, project_id, session_id)
        sql = (
            f"SELECT * FROM dead_ends{self._where_sql(clauses)} "
            "ORDER BY created_timestamp DESC, rowid DESC LIMIT ?"
        )
        params.append(limit)
        return self._rows_to("dead end", self._fetch_all(sql, params), self._row_to_dead_end)

    def list_mistakes(
        self,
        session_id: str | None = None,
        goal_id: str | None = None,
        project_id: str | None = None,
        limit: int = 50,
    ) -> list[Mistake]:
        clauses: list[str] = []
        params: list[Any] = []
        self._scoped_where(clauses, params, project_id, session_id)
        if goal_id:
            clauses.append("goal_id = ?")
            params.append(goal_id)
        sql = (
            f"SELECT * FROM mistakes{self._where_sql(clauses)} "
            "ORDER BY created_timestamp DESC, rowid DESC LIMIT ?"
        )
        params.append(limit)
        return self._rows_to("mistake", self._fetch_all(sql, params), self._row_to_mistake)

    def find_findings_by_text(
        self, text: str, project_id: str | None = None, limit: int = 10
    ) -> list[Finding]:
        """Findings whose text contains `text` (case-insensitive), newest first."""
        clauses = ["text LIKE ? ESCAPE '\\'"]
        params: list[Any] = [f"%{_escape_like(text)}%"]
        self._scoped_where(clauses, params, project_id, None)
        sql = (
            f"SELECT * FROM findings{self._where_sql(clauses)} "
            "ORDER BY created_timestamp DESC LIMIT ?"
        )
        params.append(limit)
        return self._rows_to("finding", self._fetch_all(sql, params), self._row_to_finding)

    def find_findings_by_id_prefix(
        self, prefix: str, project_id: str | None = None, limit: int = 10
    ) -> list[Finding]:
        clauses = ["id LIKE ? ESCAPE '\\'"]
        params: list[Any] = [f"{_escape_like(prefix)}%"]
        self._scoped_where(clauses, params, project_id, None)
        sql = f"SELECT * FROM findings{self._where_sql(clauses)} LIMIT ?"
        params.append(limit)
        return self._rows_to("finding", self._fetch_all(sql, params), self._row_to_finding)

    def find_unknowns_by_text(
        self,
        text: str,
        project_id: str | None = None,
        resolved: bool | None = False,
        limit: int = 10,
    ) -> list[Unknown]:
        clauses = ["text LIKE ? ESCAPE '\\'"]
        params: list[Any] = [f"%{_escape_like(text)}%"]
        self._scoped_where(clauses, params, project_id, None)
        if resolved is not None:
            clauses.append("is_resolved = ?")
            params.append(1 if resolved else 0)
        sql = (
            f"SELECT * FROM unknowns{self._where_sql(clauses)} "
            "ORDER BY created_timestamp DESC LIMIT ?"
        )
        params.append(limit)
        return self._rows_to("unknown", self._fetch_all(sql, params), self._row_to_unknown)

    def find_unknowns_by_id_prefix(
        self, prefix: str, project_id: str | None = None, limit: int = 10
    ) -> list[Unknown]:
        clauses = ["id LIKE ? ESCAPE '\\'"]
        params: list[Any] = [f"{_escape_like(prefix)}%"]
        self._scoped_where(clauses, params, project_id, None)
        sql = f"SELECT * FROM unknowns{self._where_sql(clauses)} LIMIT ?"
        params.append(limit)
        return self._rows_to("unknown", self._fetch_all(sql, params), self._row_to_unknown)

    def match_finding(
        self, text: str | None = None, id_prefix: str | None = None, project_id: str | None = None
    ) -> MatchResult:
        """Resolve a finding by id prefix (preferred) or text fragment."""
        if id_prefix:
            return MatchResult(id_prefix, self.find_findings_by_id_prefix(id_prefix, project_id))
        if text:
            return MatchResult(text, self.find_findings_by_text(text, project_id))
        raise ValueError("Either text or id_prefix is required")

    def match_unknown(
        self, text: str | None = None, id_prefix: str | None = None, project_id: str | None = None
    ) -> MatchResult:
        """Resolve an open unknown by id prefix (preferred) or text fragment."""
        if id_prefix:
            return MatchResult(id_prefix, self.find_unknowns_by_id_prefix(id_prefix, project_id))
        if text:
            return MatchResult(text, self.find_unknowns_by_text(text, project_id, resolved=False))
        raise ValueError("Either text or id_prefix is required")

    # =========================================================================
    # Breadcrumbs: mutations
    # =========================================================================

    def verify_finding(
        self,
        finding_id: str,
        new_hash: str | None = None,
        new_text: str | None = None,
        now: float | None = None,
    ) -> Finding:
        """
        Refresh a finding's verification time, optionally replacing text and hash.

        The new verification time never precedes the creation time. Other
        findings are untouched.

        Raises:
            NotFoundError: If no finding has this id
        """
        if new_text is not None and not new_text.strip():
            raise ValueError("Finding text must not be empty")

        verified_at = now_ts() if now is None else now
        sets = ["last_verified_timestamp = MAX(?, created_timestamp)"]
        params: list[Any] = [verified_at]
        if new_hash is not None:
            sets.append("subject_hash = ?")
            params.append(new_hash)
        if new_text is not None:
            sets.append("text = ?")
            params.append(new_text)
        params.append(finding_id)

        if not self._execute(f"UPDATE findings SET {', '.join(sets)} WHERE id = ?", params):
            raise NotFoundError("finding", finding_id)

        finding = self.get_finding(finding_id)
        if finding is None:
            raise NotFoundError("finding", finding_id)
        return finding

    def resolve_unknown(
        self, unknown_id: str, resolved_by: str, now: float | None = None
    ) -> Unknown:
        """
        Mark an unknown resolved.

        Raises:
            NotFoundError: If no unknown has this id
            ValueError: If it is already resolved
        """
        existing = self.get_unknown(unknown_id)
        if existing is None:
            raise NotFoundError("unknown", unknown_id)
        if existing.is_resolved:
            raise ValueError(f"Unknown already resolved: {unknown_id}")

        resolved_at = now_ts() if now is None else now
        self._execute(
            """
            UPDATE unknowns
            SET is_resolved = 1, resolved_by = ?, resolved_timestamp = ?
            WHERE id = ? AND is_resolved = 0
            """,
            (resolved_by, resolved_at, unknown_id),
        )
        existing.is_resolved = True
        existing.resolved_by = resolved_by
        existing.resolved_timestamp = resolved_at
        return existing

    # =========================================================================
    # Goals and subtasks
    # =========================================================================

    def create_goal(
        self,
        session_id: str,
        objective: str,
        scope: ScopeVector | None = None,
        success_criteria: list[SuccessCriterion] | None = None,
        project_id: str | None = None,
        now: float | None = None,
    ) -> Goal:
        if not objective or not objective.strip():
            raise ValueError("Goal objective must not be empty")

        goal = Goal(
            id=new_id(),
            session_id=session_id,
            objective=objective,
            created_timestamp=now_ts() if now is None else now,
            project_id=project_id,
            scope=scope or ScopeVector(),
            success_criteria=list(success_criteria or []),
        )
        self._execute(
            """
            INSERT INTO goals (id, session_id, project_id, objective, scope,
                               success_criteria, status, created_timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                goal.id,
                goal.session_id,
                goal.project_id,
                goal.objective,
                json.dumps(goal.scope.__dict__),
                json.dumps([c.__dict__ for c in goal.success_criteria]),
                goal.status.value,
                goal.created_timestamp,
            ),
        )
        if project_id:
            self.record_project_activity(project_id, goals=1, now=goal.created_timestamp)
        return goal

    def get_goal(self, goal_id: str) -> Goal | None:
        return self._get_one(
            "goal", "SELECT * FROM goals WHERE id = ?", (goal_id,), self._row_to_goal
        )

    def list_goals(
        self,
        session_id: str | None = None,
        project_id: str | None = None,
        status: GoalStatus | None = None,
        limit: int = 50,
    ) -> list[Goal]:
        clauses: list[str] = []
        params: list[Any] = []
        self._scoped_where(clauses, params, project_id, session_id)
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        sql = (
            f"SELECT * FROM goals{self._where_sql(clauses)} "
            "ORDER BY created_timestamp DESC, rowid DESC LIMIT ?"
        )
        params.append(limit)
        return self._rows_to("goal", self._fetch_all(sql, params), self._row_to_goal)

    def update_goal_status(
        self, goal_id: str, status: GoalStatus, now: float | None = None
    ) -> None:
        completed = (now_ts() if now is None else now) if status == GoalStatus.COMPLETE else None
        if not self._execute(
            "UPDATE goals SET status = ?, completed_timestamp = ? WHERE id = ?",
            (status.value, completed, goal_id),
        ):
            raise NotFoundError("goal", goal_id)

    def complete_goal(self, goal_id: str, now: float | None = None) -> None:
        self.update_goal_status(goal_id, GoalStatus.COMPLETE, now=now)

    def create_subtask(
        self,
        goal_id: str,
        description: str,
        importance: EpistemicImportance = EpistemicImportance.MEDIUM,
        now: float | None = None,
    ) -> SubTask:
        if not description or not description.strip():
            raise ValueError("Subtask description must not be empty")

        subtask = SubTask(
            id=new_id(),
            goal_id=goal_id,
            description=description,
            created_timestamp=now_ts() if now is None else now,
            importance=importance,
        )
        self._execute(
            """
            INSERT INTO subtasks (id, goal_id, description, status, importance,
                                  created_timestamp)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                subtask.id,
                subtask.goal_id,
                subtask.description,
                subtask.status.value,
                subtask.importance.value,
                subtask.created_timestamp,
            ),
        )
        return subtask

    def get_subtask(self, subtask_id: str) -> SubTask | None:
        return self._get_one(
            "subtask", "SELECT * FROM subtasks WHERE id = ?", (subtask_id,), self._row_to_subtask
        )

    def list_subtasks(self, goal_id: str) -> list[SubTask]:
        rows = self._fetch_all(
            "SELECT * FROM subtasks WHERE goal_id = ? ORDER BY created_timestamp, rowid",
            (goal_id,),
        )
        return self._rows_to("subtask", rows, self._row_to_subtask)

    def update_subtask_status(self, subtask_id: str, status: TaskStatus) -> None:
        if not self._execute(
            "UPDATE subtasks SET status = ? WHERE id = ?", (status.value, subtask_id)
        ):
            raise NotFoundError("subtask", subtask_id)

    def complete_subtask(
        self, subtask_id: str, evidence: str | None = None, now: float | None = None
    ) -> None:
        if not self._execute(
            """
            UPDATE subtasks
            SET status = ?, completion_evidence = ?, completed_timestamp = ?
            WHERE id = ?
            """,
            (
                TaskStatus.COMPLETED.value,
                evidence,
                now_ts() if now is None else now,
                subtask_id,
            ),
        ):
            raise NotFoundError("subtask", subtask_id)

    # =========================================================================
    # Handoffs
    # =========================================================================

    def create_handoff(
        self,
        session_id: str,
        ai_id: str,
        task_summary: str,
        key_findings: list[str] | None = None,
        remaining_unknowns: list[str] | None = None,
        next_session_context: str | None = None,
        project_id: str | None = None,
        now: float | None = None,
    ) -> HandoffReport:
        report = HandoffReport(
            id=new_id(),
            session_id=session_id,
            ai_id=ai_id,
            task_summary=task_summary,
            created_timestamp=now_ts() if now is None else now,
            project_id=project_id,
            key_findings=list(key_findings or []),
            remaining_unknowns=list(remaining_unknowns or []),
            next_session_context=next_session_context,
        )
        self._execute(
            """
            INSERT INTO handoffs (id, session_id, project_id, ai_id, task_summary,
                                  key_findings, remaining_unknowns, next_session_context,
                                  created_timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                report.id,
                report.session_id,
                report.project_id,
                report.ai_id,
                report.task_summary,
                json.dumps(report.key_findings),
                json.dumps(report.remaining_unknowns),
                report.next_session_context,
                report.created_timestamp,
            ),
        )
        return report

    def list_handoffs(
        self, project_id: str | None = None, ai_id: str | None = None, limit: int = 10
    ) -> list[HandoffReport]:
        clauses: list[str] = []
        params: list[Any] = []
        self._scoped_where(clauses, params, project_id, None)
        if ai_id:
            clauses.append("ai_id = ?")
            params.append(ai_id)
        sql = (
            f"SELECT * FROM handoffs{self._where_sql(clauses)} "
            "ORDER BY created_timestamp DESC, rowid DESC LIMIT ?"
        )
        params.append(limit)
        return self._rows_to("handoff", self._fetch_all(sql, params), self._row_to_handoff)

    def get_latest_handoff(
        self, project_id: str | None = None, ai_id: str | None = None
    ) -> HandoffReport | None:
        handoffs = self.list_handoffs(project_id=project_id, ai_id=ai_id, limit=1)
        return handoffs[0] if handoffs else None

    # =========================================================================
    # Reflexes
    # =========================================================================

    def create_reflex(
        self,
        session_id: str,
        phase: CascadePhase,
        vectors: EpistemicVectors,
        cascade_id: str | None = None,
        round: int = 1,
        reasoning: str | None = None,
        now: float | None = None,
    ) -> Reflex:
        reflex = Reflex(
            id=new_id(),
            session_id=session_id,
            phase=phase,
            vectors=vectors,
            timestamp=now_ts() if now is None else now,
            cascade_id=cascade_id,
            round=round,
            reasoning=reasoning,
        )
        self._execute(
            """
            INSERT INTO reflexes (id, session_id, cascade_id, phase, round, vectors,
                                  reasoning, timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                reflex.id,
                reflex.session_id,
                reflex.cascade_id,
                reflex.phase.value,
                reflex.round,
                reflex.vectors.to_json(),
                reflex.reasoning,
                reflex.timestamp,
            ),
        )
        return reflex

    def get_latest_reflex(self, session_id: str, phase: CascadePhase) -> Reflex | None:
        return self._get_one(
            "reflex",
            """
            SELECT * FROM reflexes WHERE session_id = ? AND phase = ?
            ORDER BY timestamp DESC, rowid DESC LIMIT 1
            """,
            (session_id, phase.value),
            self._row_to_reflex,
        )

    def list_reflexes(self, session_id: str, limit: int = 50) -> list[Reflex]:
        rows = self._fetch_all(
            "SELECT * FROM reflexes WHERE session_id = ? ORDER BY timestamp, rowid LIMIT ?",
            (session_id, limit),
        )
        return self._rows_to("reflex", rows, self._row_to_reflex)

    def get_reflex_delta(self, session_id: str) -> EpistemicVectors | None:
        """Latest POSTFLIGHT minus latest PREFLIGHT, or None if either is missing."""
        pre = self.get_latest_reflex(session_id, CascadePhase.PREFLIGHT)
        post = self.get_latest_reflex(session_id, CascadePhase.POSTFLIGHT)
        if pre is None or post is None:
            return None
        return post.vectors.delta(pre.vectors)

    # =========================================================================
    # Cascades
    # =========================================================================

    def create_cascade(
        self,
        session_id: str,
        task: str,
        goal_id: str | None = None,
        now: float | None = None,
    ) -> Cascade:
        cascade = Cascade(
            id=new_id(),
            session_id=session_id,
            task=task,
            started_at=now_ts() if now is None else now,
            goal_id=goal_id,
        )
        self._execute(
            """
            INSERT INTO cascades (id, session_id, goal_id, task, started_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (cascade.id, cascade.session_id, cascade.goal_id, cascade.task, cascade.started_at),
        )
        return cascade

    def get_cascade(self, cascade_id: str) -> Cascade | None:
        return self._get_one(
            "cascade", "SELECT * FROM cascades WHERE id = ?", (cascade_id,), self._row_to_cascade
        )

    def mark_phase(self, cascade_id: str, phase: CascadePhase) -> Cascade:
        """Record a workflow phase as completed; repeated marks are no-ops."""
        cascade = self.get_cascade(cascade_id)
        if cascade is None:
            raise NotFoundError("cascade", cascade_id)
        if phase not in cascade.completed_phases:
            cascade.completed_phases.append(phase)
            self._execute(
                "UPDATE cascades SET completed_phases = ? WHERE id = ?",
                (json.dumps([p.value for p in cascade.completed_phases]), cascade_id),
            )
        return cascade

    def complete_cascade(
        self,
        cascade_id: str,
        final_action: str,
        final_confidence: float,
        now: float | None = None,
    ) -> None:
        if not self._execute(
            """
            UPDATE cascades
            SET final_action = ?, final_confidence = ?, completed_at = ?
            WHERE id = ?
            """,
            (final_action, final_confidence, now_ts() if now is None else now, cascade_id),
        ):
            raise NotFoundError("cascade", cascade_id)

    # =========================================================================
    # Investigation branches
    # =========================================================================

    def create_branch(
        self,
        session_id: str,
        branch_name: str,
        investigation_path: str,
        preflight_vectors: EpistemicVectors,
        now: float | None = None,
    ) -> InvestigationBranch:
        branch = InvestigationBranch(
            id=new_id(),
            session_id=session_id,
            branch_name=branch_name,
            investigation_path=investigation_path,
            preflight_vectors=preflight_vectors,
            created_timestamp=now_ts() if now is None else now,
        )
        self._execute(
            """
            INSERT INTO investigation_branches (id, session_id, branch_name,
                                                investigation_path, preflight_vectors,
                                                status, created_timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                branch.id,
                branch.session_id,
                branch.branch_name,
                branch.investigation_path,
                branch.preflight_vectors.to_json(),
                branch.status.value,
                branch.created_timestamp,
            ),
        )
        return branch

    def get_branch(self, branch_id: str) -> InvestigationBranch | None:
        return self._get_one(
            "investigation branch",
            "SELECT * FROM investigation_branches WHERE id = ?",
            (branch_id,),
            self._row_to_branch,
        )

    def list_branches(
        self, session_id: str, status: BranchStatus | None = None
    ) -> list[InvestigationBranch]:
        sql = "SELECT * FROM investigation_branches WHERE session_id = ?"
        params: list[Any] = [session_id]
        if status is not None:
            sql += " AND status = ?"
            params.append(status.value)
        sql += " ORDER BY created_timestamp, rowid"
        return self._rows_to("investigation branch", self._fetch_all(sql, params), self._row_to_branch)

    def checkpoint_branch(
        self, branch_id: str, postflight_vectors: EpistemicVectors, now: float | None = None
    ) -> InvestigationBranch:
        if not self._execute(
            """
            UPDATE investigation_branches
            SET postflight_vectors = ?, checkpoint_timestamp = ?
            WHERE id = ?
            """,
            (postflight_vectors.to_json(), now_ts() if now is None else now, branch_id),
        ):
            raise NotFoundError("investigation branch", branch_id)
        branch = self.get_branch(branch_id)
        if branch is None:
            raise NotFoundError("investigation branch", branch_id)
        return branch

    def mark_winner(self, branch_id: str, merge_score: float) -> None:
        """Flag a branch as the winning investigation and merge it."""
        if not self._execute(
            """
            UPDATE investigation_branches
            SET is_winner = 1, merge_score = ?, status = ?
            WHERE id = ?
            """,
            (merge_score, BranchStatus.MERGED.value, branch_id),
        ):
            raise NotFoundError("investigation branch", branch_id)

    # =========================================================================
    # Row converters
    # =========================================================================

    @staticmethod
    def _row_to_project(row: sqlite3.Row) -> Project:
        return Project(
            id=row["id"],
            name=row["name"],
            created_timestamp=row["created_timestamp"],
            description=row["description"],
            repos=json.loads(row["repos"] or "[]"),
            status=ProjectStatus(row["status"]),
            last_activity_timestamp=row["last_activity_timestamp"],
            total_sessions=row["total_sessions"],
            total_goals=row["total_goals"],
        )

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> Session:
        return Session(
            id=row["id"],
            ai_id=row["ai_id"],
            start_time=row["start_time"],
            project_id=row["project_id"],
            subject=row["subject"],
            end_time=row["end_time"],
        )

    @staticmethod
    def _row_to_finding(row: sqlite3.Row) -> Finding:
        return Finding(
            id=row["id"],
            project_id=row["project_id"],
            session_id=row["session_id"],
            text=row["text"],
            created_timestamp=row["created_timestamp"],
            goal_id=row["goal_id"],
            subtask_id=row["subtask_id"],
            subject=row["subject"],
            subject_hash=row["subject_hash"],
            last_verified_timestamp=row["last_verified_timestamp"],
            impact=row["impact"],
        )

    @staticmethod
    def _row_to_unknown(row: sqlite3.Row) -> Unknown:
        return Unknown(
            id=row["id"],
            project_id=row["project_id"],
            session_id=row["session_id"],
            text=row["text"],
            created_timestamp=row["created_timestamp"],
            goal_id=row["goal_id"],
            subtask_id=row["subtask_id"],
            is_resolved=bool(row["is_resolved"]),
            resolved_by=row["resolved_by"],
            resolved_timestamp=row["resolved_timestamp"],
            subject=row["subject"],
            impact=row["impact"],
        )

    @staticmethod
    def _row_to_dead_end(row: sqlite3.Row) -> DeadEnd:
        return DeadEnd(
            id=row["id"],
            project_id=row["project_id"],
            session_id=row["session_id"],
            approach=row["approach"],
            why_failed=row["why_failed"],
            created_timestamp=row["created_timestamp"],
            goal_id=row["goal_id"],
            subtask_id=row["subtask_id"],
            subject=row["subject"],
            impact=row["impact"],
        )

    @staticmethod
    def _row_to_mistake(row: sqlite3.Row) -> Mistake:
        root_cause = row["root_cause_vector"]
        return Mistake(
            id=row["id"],
            session_id=row["session_id"],
            mistake=row["mistake"],
            why_wrong=row["why_wrong"],
            created_timestamp=row["created_timestamp"],
            project_id=row["project_id"],
            goal_id=row["goal_id"],
            cost_estimate=row["cost_estimate"],
            root_cause_vector=RootCauseVector(root_cause) if root_cause else None,
            prevention=row["prevention"],
        )

    @staticmethod
    def _row_to_goal(row: sqlite3.Row) -> Goal:
        return Goal(
            id=row["id"],
            session_id=row["session_id"],
            objective=row["objective"],
            created_timestamp=row["created_timestamp"],
            project_id=row["project_id"],
            scope=ScopeVector(**json.loads(row["scope"])),
            success_criteria=[
                SuccessCriterion(**c) for c in json.loads(row["success_criteria"] or "[]")
            ],
            status=GoalStatus(row["status"]),
            completed_timestamp=row["completed_timestamp"],
        )

    @staticmethod
    def _row_to_subtask(row: sqlite3.Row) -> SubTask:
        return SubTask(
            id=row["id"],
            goal_id=row["goal_id"],
            description=row["description"],
            created_timestamp=row["created_timestamp"],
            status=TaskStatus(row["status"]),
            importance=EpistemicImportance(row["importance"]),
            completion_evidence=row["completion_evidence"],
            completed_timestamp=row["completed_timestamp"],
        )

    @staticmethod
    def _row_to_handoff(row: sqlite3.Row) -> HandoffReport:
        return HandoffReport(
            id=row["id"],
            session_id=row["session_id"],
            ai_id=row["ai_id"],
            task_summary=row["task_summary"],
            created_timestamp=row["created_timestamp"],
            project_id=row["project_id"],
            key_findings=json.loads(row["key_findings"] or "[]"),
            remaining_unknowns=json.loads(row["remaining_unknowns"] or "[]"),
            next_session_context=row["next_session_context"],
        )

    @staticmethod
    def _row_to_reflex(row: sqlite3.Row) -> Reflex:
        return Reflex(
            id=row["id"],
            session_id=row["session_id"],
            phase=CascadePhase(row["phase"]),
            vectors=EpistemicVectors.from_json(row["vectors"]),
            timestamp=row["timestamp"],
            cascade_id=row["cascade_id"],
            round=row["round"],
            reasoning=row["reasoning"],
        )

    @staticmethod
    def _row_to_cascade(row: sqlite3.Row) -> Cascade:
        return Cascade(
            id=row["id"],
            session_id=row["session_id"],
            task=row["task"],
            started_at=row["started_at"],
            goal_id=row["goal_id"],
            completed_phases=[
                CascadePhase(p) for p in json.loads(row["completed_phases"] or "[]")
            ],
            final_action=row["final_action"],
            final_confidence=row["final_confidence"],
            completed_at=row["completed_at"],
        )

    @staticmethod
    def _row_to_branch(row: sqlite3.Row) -> InvestigationBranch:
        postflight = row["postflight_vectors"]
        return InvestigationBranch(
            id=row["id"],
            session_id=row["session_id"],
            branch_name=row["branch_name"],
            investigation_path=row["investigation_path"],
            preflight_vectors=EpistemicVectors.from_json(row["preflight_vectors"]),
            created_timestamp=row["created_timestamp"],
            postflight_vectors=EpistemicVectors.from_json(postflight) if postflight else None,
            status=BranchStatus(row["status"]),
            merge_score=row["merge_score"],
            is_winner=bool(row["is_winner"]),
            checkpoint_timestamp=row["checkpoint_timestamp"],
        )


__all__ = ["MemoryStore", "MatchResult", "SCHEMA_SQL"]
