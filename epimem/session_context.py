"""
Session context assembly: the payload returned by `start` and `status`.

Reads the project's recent breadcrumbs, synthesizes the epistemic state,
builds decision guidance, and carries over the last handoff. Nothing here is
cached; every call re-reads the store and re-scores against `now`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from epimem.config import DecayConfig
from epimem.decay import ChangeOracle
from epimem.epistemic.guidance import build_guidance, partition_findings
from epimem.epistemic.synthesizer import EpistemicState, synthesize_state
from epimem.models import DeadEnd, Finding, HandoffReport, Unknown
from epimem.store import MemoryStore
from epimem.types import (
    BreadcrumbCounts,
    ContinuityContext,
    DeadEndWarning,
    EpistemicSnapshot,
    SessionContext,
)

logger = logging.getLogger(__name__)

MAX_HIGHLIGHTS = 3


@dataclass
class Breadcrumbs:
    """The four breadcrumb lists the synthesizer consumes."""

    findings: list[Finding] = field(default_factory=list)
    open_unknowns: list[Unknown] = field(default_factory=list)
    resolved_unknowns: list[Unknown] = field(default_factory=list)
    dead_ends: list[DeadEnd] = field(default_factory=list)

    def synthesize(
        self, session_start: float, now: float, oracle: ChangeOracle | None = None
    ) -> EpistemicState:
        return synthesize_state(
            self.findings,
            self.open_unknowns,
            self.resolved_unknowns,
            self.dead_ends,
            session_start,
            now,
            oracle,
        )


def collect_breadcrumbs(
    store: MemoryStore,
    project_id: str,
    session_id: str | None = None,
    limits: DecayConfig | None = None,
) -> Breadcrumbs:
    """
    Read breadcrumbs for scoring.

    Project-wide reads use the per-kind context limits; session-scoped reads
    (for `done`) use the larger session limit for every kind.
    """
    limits = limits or DecayConfig()
    if session_id is not None:
        findings_limit = open_limit = resolved_limit = dead_limit = limits.session_limit
    else:
        findings_limit = limits.findings_limit
        open_limit = limits.open_unknowns_limit
        resolved_limit = limits.resolved_unknowns_limit
        dead_limit = limits.dead_ends_limit

    return Breadcrumbs(
        findings=store.list_findings(project_id, session_id, limit=findings_limit),
        open_unknowns=store.list_unknowns(
            project_id, session_id, resolved=False, limit=open_limit
        ),
        resolved_unknowns=store.list_unknowns(
            project_id, session_id, resolved=True, limit=resolved_limit
        ),
        dead_ends=store.list_dead_ends(project_id, session_id, limit=dead_limit),
    )


def format_elapsed(seconds: float) -> str:
    """Human phrasing of time since an event: minutes, hours, then days."""
    seconds = max(0.0, seconds)
    hours = seconds / 3600.0
    if hours < 1:
        return f"{int(seconds // 60)} minutes ago"
    if hours < 24:
        return f"{hours:.1f} hours ago"
    return f"{hours / 24:.1f} days ago"


def build_continuity(handoff: HandoffReport | None, now: float) -> ContinuityContext | None:
    """Continuity from the previous handoff; None when there is nothing to carry."""
    if handoff is None:
        return None

    continuity = ContinuityContext()
    has_content = False
    if handoff.task_summary:
        continuity.summary = handoff.task_summary
        has_content = True
    if handoff.next_session_context:
        continuity.recommendations = handoff.next_session_context
        has_content = True
    if handoff.key_findings:
        continuity.highlights = handoff.key_findings[:MAX_HIGHLIGHTS]
        has_content = True
    if handoff.created_timestamp > 0:
        continuity.time_since_last_session = format_elapsed(now - handoff.created_timestamp)
        has_content = True

    return continuity if has_content else None


def snapshot(state: EpistemicState) -> EpistemicSnapshot:
    return EpistemicSnapshot(
        know=state.know,
        uncertainty=state.uncertainty,
        clarity=state.clarity,
        coherence=state.coherence,
        completion=state.completion,
        engagement=state.engagement,
        overall=state.confidence,
    )


def build_session_context(
    store: MemoryStore,
    session_id: str,
    project_id: str,
    objective: str,
    session_start: float,
    now: float,
    ai_id: str | None = None,
    oracle: ChangeOracle | None = None,
    limits: DecayConfig | None = None,
    command: str = "epimem",
) -> SessionContext:
    """
    Assemble the start/status payload for a session.

    Args:
        store: Breadcrumb store
        session_id: Active session
        project_id: Project whose breadcrumbs are in scope
        objective: The session's stated objective
        session_start: When the session began (epoch seconds)
        now: Evaluation instant (epoch seconds)
        ai_id: Restricts continuity to this agent's handoffs when set
        oracle: Optional file-change oracle
        limits: Breadcrumb read limits
        command: CLI name used in guidance text

    Returns:
        SessionContext with decision guidance first
    """
    crumbs = collect_breadcrumbs(store, project_id, limits=limits)
    state = crumbs.synthesize(session_start, now, oracle)
    partition = partition_findings(crumbs.findings, now, oracle, command)

    decision = build_guidance(
        state,
        crumbs.findings,
        crumbs.open_unknowns,
        crumbs.dead_ends,
        now=now,
        oracle=oracle,
        command=command,
    )

    handoff = store.get_latest_handoff(project_id=project_id, ai_id=ai_id)

    logger.debug(
        "Session context for %s: %d findings, %d open, %d resolved, %d dead ends",
        session_id,
        len(crumbs.findings),
        len(crumbs.open_unknowns),
        len(crumbs.resolved_unknowns),
        len(crumbs.dead_ends),
    )

    return SessionContext(
        session_id=session_id,
        project_id=project_id,
        objective=objective,
        decision=decision,
        requires_verification=partition.requires_verification,
        dead_ends=[
            DeadEndWarning(approach=d.approach, why_failed=d.why_failed, scope=d.subject)
            for d in crumbs.dead_ends
        ],
        knowledge=partition.knowledge,
        open_questions=[u.text for u in crumbs.open_unknowns],
        continuity=build_continuity(handoff, now),
        vectors=snapshot(state),
    )


def breadcrumb_counts(context: SessionContext) -> BreadcrumbCounts:
    """Tallies for `status`, derived from an assembled context."""
    fresh = sum(1 for k in context.knowledge if k.status == "fresh")
    aging = sum(1 for k in context.knowledge if k.status == "aging")
    stale = len(context.requires_verification)
    return BreadcrumbCounts(
        findings=fresh + aging + stale,
        findings_fresh=fresh,
        findings_aging=aging,
        findings_stale=stale,
        unknowns_open=len(context.open_questions),
        dead_ends=len(context.dead_ends),
    )
