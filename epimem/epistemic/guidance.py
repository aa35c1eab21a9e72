"""
Decision guidance built from a synthesized session state.

Turns an EpistemicState plus the breadcrumbs behind it into what an agent
reads first on session start: whether to proceed, why, and what to do before
proceeding. Also splits findings into those that must be re-verified and
those that can be used as-is.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from epimem.decay import ChangeOracle, assess_finding
from epimem.epistemic.synthesizer import EpistemicState
from epimem.epistemic.types import KNOW_MIN, Action
from epimem.models import StalenessStatus, now_ts
from epimem.types import DecisionGuidance, KnowledgeItem, VerificationNeeded

if TYPE_CHECKING:
    from epimem.models import DeadEnd, Finding, Unknown

logger = logging.getLogger(__name__)

VERIFY_ID_PREFIX_LEN = 8
VERIFY_TEXT_MAX_LEN = 30


def truncate_text(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def verify_command(finding: Finding, command: str = "epimem") -> str:
    """Shell command that re-verifies a finding, by id prefix when possible."""
    if len(finding.id) >= VERIFY_ID_PREFIX_LEN:
        return f"{command} verify --id {finding.id[:VERIFY_ID_PREFIX_LEN]}"
    return f'{command} verify "{truncate_text(finding.text, VERIFY_TEXT_MAX_LEN)}"'


@dataclass
class FindingPartition:
    requires_verification: list[VerificationNeeded] = field(default_factory=list)
    knowledge: list[KnowledgeItem] = field(default_factory=list)

    @property
    def stale_count(self) -> int:
        return len(self.requires_verification)


def partition_findings(
    findings: Sequence[Finding],
    now: float,
    oracle: ChangeOracle | None = None,
    command: str = "epimem",
) -> FindingPartition:
    """
    Split findings by staleness tier.

    Stale findings become VerificationNeeded entries carrying whole days since
    verification; fresh and aging ones become KnowledgeItem entries. Both carry
    the (possibly file-change penalized) confidence that decided the tier.
    Input order is preserved within each list.
    """
    partition = FindingPartition()
    for finding in findings:
        assessment = assess_finding(finding, now, oracle)
        if assessment.status == StalenessStatus.STALE:
            partition.requires_verification.append(
                VerificationNeeded(
                    id=finding.id,
                    finding=finding.text,
                    days_stale=int(assessment.days_since_verified),
                    confidence=assessment.confidence,
                    file_changed=assessment.file_changed,
                    scope=finding.subject,
                    verify_command=verify_command(finding, command),
                )
            )
        else:
            partition.knowledge.append(
                KnowledgeItem(
                    id=finding.id,
                    finding=finding.text,
                    confidence=assessment.confidence,
                    status=assessment.status.value,
                    scope=finding.subject,
                )
            )
    return partition


def _reason_and_prerequisites(
    state: EpistemicState,
    stale_count: int,
    open_count: int,
    dead_end_count: int,
    command: str,
) -> tuple[str, list[str]]:
    action = state.recommended_action
    prerequisites: list[str] = []

    if action == Action.PROCEED:
        return (
            "Knowledge is fresh and uncertainty is manageable. "
            "Safe to proceed with the task.",
            prerequisites,
        )

    if action == Action.INVESTIGATE:
        if open_count > 0:
            prerequisites.append(f"Resolve {open_count} open question(s)")
        if state.know < KNOW_MIN:
            prerequisites.append(f"Log discoveries with `{command} learned`")
        return (
            "Uncertainty is high or knowledge is low. "
            "Gather more information before acting.",
            prerequisites,
        )

    if action == Action.VERIFY:
        prerequisites.append(f"Verify stale findings with `{command} verify`")
        return (
            f"{stale_count} finding(s) may be outdated. Verify before relying on them.",
            prerequisites,
        )

    if action == Action.RESET:
        if dead_end_count > 0:
            prerequisites.append(
                f"Review {dead_end_count} dead end(s) to avoid repeating mistakes"
            )
        return (
            "Too many failed approaches have reduced coherence. "
            "Consider a fresh approach.",
            prerequisites,
        )

    if action == Action.STOP:
        return (
            "Session engagement is too low. Consider taking a break or starting fresh.",
            prerequisites,
        )

    return "Proceed with caution.", prerequisites


def build_guidance(
    state: EpistemicState,
    findings: Sequence[Finding],
    open_unknowns: Sequence[Unknown],
    dead_ends: Sequence[DeadEnd],
    now: float | None = None,
    oracle: ChangeOracle | None = None,
    command: str = "epimem",
) -> DecisionGuidance:
    """
    Build decision guidance for the current state.

    Args:
        state: Synthesized session state
        findings: Findings the state was computed from
        open_unknowns: Unresolved questions
        dead_ends: Failed approaches
        now: Evaluation instant; defaults to the current time
        oracle: Optional file-change oracle for counting stale findings
        command: CLI name interpolated into prerequisites

    Returns:
        DecisionGuidance with templates selected by the recommended action
    """
    if now is None:
        now = now_ts()

    stale_count = sum(
        1
        for f in findings
        if assess_finding(f, now, oracle).status == StalenessStatus.STALE
    )
    reason, prerequisites = _reason_and_prerequisites(
        state, stale_count, len(open_unknowns), len(dead_ends), command
    )
    phase = state.confidence_phase

    logger.debug(
        "Guidance: action=%s confidence=%.3f stale=%d open=%d dead_ends=%d",
        state.recommended_action.value,
        state.confidence,
        stale_count,
        len(open_unknowns),
        len(dead_ends),
    )

    return DecisionGuidance(
        ready_to_proceed=state.ready_to_proceed,
        action=state.recommended_action.value,
        reason=reason,
        prerequisites=prerequisites,
        confidence_phase=phase.value,
        phase_marker=phase.marker,
        confidence=state.confidence,
    )
