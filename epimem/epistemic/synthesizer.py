"""
Session epistemic-state synthesis from logged breadcrumbs.

Where the vector model scores an explicit self-assessment, this module
derives a coarser six-value proxy purely from what a session has logged:
how much was learned, how much is still open, how fresh the knowledge is,
how many approaches failed, and how long the session has been running.

The state is a view over the breadcrumb population at one instant. Findings
decay with wall-clock time, so callers recompute it on every request instead
of storing it.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from epimem.decay import ChangeOracle, assess_finding
from epimem.epistemic.types import (
    CLARITY_MIN,
    COHERENCE_MIN,
    ENGAGEMENT_THRESHOLD,
    KNOW_MIN,
    UNCERTAINTY_MAX,
    Action,
    ConfidencePhase,
    ConfidenceSummary,
    clamp01,
)
from epimem.models import StalenessStatus

if TYPE_CHECKING:
    from epimem.models import DeadEnd, Finding, Unknown

ENGAGEMENT_HALF_LIFE_HOURS = 2.0
ENGAGEMENT_FLOOR = 0.1

# Neutral values when a ratio has nothing to divide by
NEUTRAL_CLARITY = 0.5
NEUTRAL_COMPLETION = 0.5
EMPTY_COHERENCE = 1.0

SECONDS_PER_HOUR = 3600.0


def session_engagement(session_start: float, now: float) -> float:
    """
    Freshness of the session, halving every two hours.

    Floored at 0.1 so a long session is never permanently locked out of the
    gate, and capped at 1.0 when the start time lies in the future.
    """
    hours = max(0.0, (now - session_start) / SECONDS_PER_HOUR)
    decay = math.exp(-math.log(2) / ENGAGEMENT_HALF_LIFE_HOURS * hours)
    return max(ENGAGEMENT_FLOOR, decay)


@dataclass(frozen=True)
class EpistemicState:
    """
    Breadcrumb-derived session state.

    Attributes:
        know: Grows with findings and resolved questions
        uncertainty: Grows with open questions, shrinks as they resolve
        clarity: Fraction of findings that are still fresh
        coherence: One minus the dead-end share of all breadcrumbs
        completion: Fraction of questions resolved
        engagement: Session freshness (two-hour half-life)
        confidence: Weighted composite in [0, 1]
    """

    know: float
    uncertainty: float
    clarity: float
    coherence: float
    completion: float
    engagement: float
    confidence: float

    @property
    def passes_engagement_gate(self) -> bool:
        return self.engagement >= ENGAGEMENT_THRESHOLD

    @property
    def ready_to_proceed(self) -> bool:
        return (
            self.passes_engagement_gate
            and self.know >= KNOW_MIN
            and self.uncertainty <= UNCERTAINTY_MAX
        )

    @property
    def needs_investigation(self) -> bool:
        return self.know < KNOW_MIN or self.uncertainty > UNCERTAINTY_MAX

    @property
    def recommended_action(self) -> Action:
        # No density proxy exists here; stale knowledge takes its slot.
        if not self.passes_engagement_gate:
            return Action.STOP
        if self.coherence < COHERENCE_MIN:
            return Action.RESET
        if self.clarity < CLARITY_MIN:
            return Action.VERIFY
        if self.needs_investigation:
            return Action.INVESTIGATE
        return Action.PROCEED

    @property
    def confidence_phase(self) -> ConfidencePhase:
        return ConfidencePhase.for_confidence(self.confidence)

    def summary(self) -> ConfidenceSummary:
        return ConfidenceSummary(
            confidence=self.confidence,
            phase=self.confidence_phase,
            action=self.recommended_action,
            ready_to_proceed=self.ready_to_proceed,
            source="breadcrumbs",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "know": self.know,
            "uncertainty": self.uncertainty,
            "clarity": self.clarity,
            "coherence": self.coherence,
            "completion": self.completion,
            "engagement": self.engagement,
            "confidence": self.confidence,
            "passes_engagement_gate": self.passes_engagement_gate,
            "ready_to_proceed": self.ready_to_proceed,
            "needs_investigation": self.needs_investigation,
            "recommended_action": self.recommended_action.value,
            "confidence_phase": self.confidence_phase.value,
        }


def synthesize_state(
    findings: Sequence[Finding],
    open_unknowns: Sequence[Unknown],
    resolved_unknowns: Sequence[Unknown],
    dead_ends: Sequence[DeadEnd],
    session_start: float,
    now: float,
    oracle: ChangeOracle | None = None,
) -> EpistemicState:
    """
    Derive the session's epistemic state.

    Args:
        findings: Findings in scope, with staleness fields loaded
        open_unknowns: Unresolved questions
        resolved_unknowns: Resolved questions
        dead_ends: Failed approaches
        session_start: When the session began (epoch seconds)
        now: Evaluation instant (epoch seconds)
        oracle: Optional file-change oracle applied per finding

    Returns:
        EpistemicState; total over empty inputs
    """
    n_findings = len(findings)
    n_open = len(open_unknowns)
    n_resolved = len(resolved_unknowns)
    n_dead = len(dead_ends)

    know = clamp01(0.5 + 0.1 * n_findings + 0.15 * n_resolved)
    uncertainty = clamp01(0.5 + 0.1 * n_open - 0.1 * n_resolved)

    if n_findings:
        fresh = sum(
            1
            for f in findings
            if assess_finding(f, now, oracle).status == StalenessStatus.FRESH
        )
        clarity = fresh / n_findings
    else:
        clarity = NEUTRAL_CLARITY

    total = n_findings + n_open + n_resolved + n_dead
    coherence = 1.0 - n_dead / total if total else EMPTY_COHERENCE

    n_unknowns = n_open + n_resolved
    completion = n_resolved / n_unknowns if n_unknowns else NEUTRAL_COMPLETION

    engagement = session_engagement(session_start, now)

    confidence = clamp01(
        0.30 * know
        + 0.20 * clarity
        + 0.20 * coherence
        + 0.15 * completion
        + 0.15 * engagement
        - 0.15 * uncertainty
    )

    return EpistemicState(
        know=know,
        uncertainty=uncertainty,
        clarity=clarity,
        coherence=coherence,
        completion=completion,
        engagement=engagement,
        confidence=confidence,
    )
