"""
Unit tests for start/status session context assembly.
"""

import pytest

from epimem.config import DecayConfig
from epimem.models import HandoffReport
from epimem.session_context import (
    breadcrumb_counts,
    build_continuity,
    build_session_context,
    collect_breadcrumbs,
    format_elapsed,
)

NOW = 1_700_000_000.0
HOUR = 3600.0
DAY = 86400.0


def handoff(**overrides):
    values = dict(
        id="h1",
        session_id="s0",
        ai_id="claude-code",
        task_summary="JWT auth with refresh tokens",
        created_timestamp=NOW - 2 * HOUR,
        key_findings=["a", "b", "c", "d"],
        next_session_context="Add rate limiting",
    )
    values.update(overrides)
    return HandoffReport(**values)


class TestFormatElapsed:
    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0, "0 minutes ago"),
            (125, "2 minutes ago"),
            (1.5 * HOUR, "1.5 hours ago"),
            (36 * HOUR, "1.5 days ago"),
            (-10, "0 minutes ago"),
        ],
    )
    def test_phrasing(self, seconds, expected):
        assert format_elapsed(seconds) == expected


class TestBuildContinuity:
    def test_none_without_handoff(self):
        assert build_continuity(None, NOW) is None

    def test_top_three_highlights(self):
        continuity = build_continuity(handoff(), NOW)
        assert continuity.summary == "JWT auth with refresh tokens"
        assert continuity.recommendations == "Add rate limiting"
        assert continuity.highlights == ["a", "b", "c"]
        assert continuity.time_since_last_session == "2.0 hours ago"

    def test_empty_handoff_carries_nothing(self):
        empty = handoff(
            task_summary="", key_findings=[], next_session_context=None, created_timestamp=0.0
        )
        assert build_continuity(empty, NOW) is None


class TestCollectBreadcrumbs:
    def test_project_limits(self, memory_store, project, session):
        for i in range(5):
            memory_store.log_finding(project.id, session.id, f"f{i}", now=NOW + i)
            memory_store.log_unknown(project.id, session.id, f"u{i}", now=NOW + i)
        limits = DecayConfig(findings_limit=3, open_unknowns_limit=2)

        crumbs = collect_breadcrumbs(memory_store, project.id, limits=limits)
        assert [f.text for f in crumbs.findings] == ["f4", "f3", "f2"]
        assert len(crumbs.open_unknowns) == 2
        assert crumbs.resolved_unknowns == []

    def test_session_scope_uses_session_limit(self, memory_store, project, session):
        for i in range(5):
            memory_store.log_finding(project.id, session.id, f"f{i}", now=NOW + i)
        limits = DecayConfig(findings_limit=1, session_limit=4)
        crumbs = collect_breadcrumbs(memory_store, project.id, session.id, limits=limits)
        assert len(crumbs.findings) == 4


class TestBuildSessionContext:
    """Tests for build_session_context()."""

    def test_empty_project(self, memory_store, project, session):
        context = build_session_context(
            memory_store, session.id, project.id, "Objective", NOW, NOW
        )
        assert context.decision.action == "proceed"
        assert context.requires_verification == []
        assert context.knowledge == []
        assert context.continuity is None
        assert context.vectors.overall == pytest.approx(0.6)

    def test_full_payload(self, memory_store, project, session):
        memory_store.log_finding(project.id, session.id, "fresh fact", now=NOW - DAY)
        memory_store.log_finding(
            project.id, session.id, "old fact", subject="src/auth.py", now=NOW - 30 * DAY
        )
        memory_store.log_unknown(project.id, session.id, "Refresh flow?", now=NOW)
        memory_store.log_dead_end(
            project.id, session.id, "localStorage", "XSS", subject="web/", now=NOW
        )
        memory_store.create_handoff(
            session.id,
            "claude-code",
            "Previous work",
            key_findings=["fresh fact"],
            project_id=project.id,
            now=NOW - HOUR,
        )

        context = build_session_context(
            memory_store,
            session.id,
            project.id,
            "Implement auth",
            NOW - HOUR,
            NOW,
            ai_id="claude-code",
        )

        assert [v.finding for v in context.requires_verification] == ["old fact"]
        assert context.requires_verification[0].days_stale == 30
        assert context.requires_verification[0].scope == "src/auth.py"
        assert [k.finding for k in context.knowledge] == ["fresh fact"]
        assert context.open_questions == ["Refresh flow?"]
        assert context.dead_ends[0].approach == "localStorage"
        assert context.dead_ends[0].scope == "web/"
        assert context.continuity.summary == "Previous work"
        assert context.continuity.time_since_last_session == "1.0 hours ago"

        counts = breadcrumb_counts(context)
        assert counts.findings == 2
        assert counts.findings_fresh == 1
        assert counts.findings_stale == 1
        assert counts.unknowns_open == 1
        assert counts.dead_ends == 1

    def test_continuity_filtered_by_agent(self, memory_store, project, session):
        memory_store.create_handoff(
            session.id, "other-ai", "Not mine", project_id=project.id, now=NOW
        )
        context = build_session_context(
            memory_store, session.id, project.id, "x", NOW, NOW, ai_id="claude-code"
        )
        assert context.continuity is None

    def test_json_dump_leads_with_decision(self, memory_store, project, session):
        context = build_session_context(memory_store, session.id, project.id, "x", NOW, NOW)
        data = context.model_dump(mode="json", exclude_none=True)
        keys = list(data)
        assert keys.index("decision") < keys.index("requires_verification")
        assert "continuity" not in data
