"""
Time-decay confidence for findings.

Confidence halves every 14 days since a finding was last verified (or
created), and halves again when the file it refers to has changed since the
finding was recorded. Tiers are cut on the penalized value.

Example:
    >>> round(decay_confidence(0.0, 14 * SECONDS_PER_DAY), 6)
    0.5
    >>> staleness_tier(0.7)
    <StalenessStatus.FRESH: 'fresh'>
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from epimem.models import StalenessStatus

if TYPE_CHECKING:
    from epimem.models import Finding

DECAY_HALF_LIFE_DAYS = 14.0
FILE_CHANGE_MULTIPLIER = 0.5
FRESH_THRESHOLD = 0.70
AGING_THRESHOLD = 0.40

SECONDS_PER_DAY = 86400.0

# (path, recorded_hash) -> changed?
ChangeOracle = Callable[[str, str], bool]


def days_elapsed(base_timestamp: float, now: float) -> float:
    return (now - base_timestamp) / SECONDS_PER_DAY


def decay_confidence(base_timestamp: float, now: float, file_changed: bool = False) -> float:
    """
    Decayed confidence in (0, 1].

    A base timestamp in the future (clock skew) yields 1.0 rather than a value
    above it.
    """
    days = max(0.0, days_elapsed(base_timestamp, now))
    confidence = math.exp(-math.log(2) / DECAY_HALF_LIFE_DAYS * days)
    if file_changed:
        confidence *= FILE_CHANGE_MULTIPLIER
    return confidence


def staleness_tier(confidence: float) -> StalenessStatus:
    """Lower bounds are inclusive: 0.70 is fresh, 0.40 is aging."""
    if confidence >= FRESH_THRESHOLD:
        return StalenessStatus.FRESH
    if confidence >= AGING_THRESHOLD:
        return StalenessStatus.AGING
    return StalenessStatus.STALE


@dataclass(frozen=True)
class FindingAssessment:
    """Decay result for one finding at one instant."""

    confidence: float
    status: StalenessStatus
    file_changed: bool
    days_since_verified: float


def subject_changed(finding: Finding, oracle: ChangeOracle | None) -> bool:
    """Ask the oracle about a finding's subject; unscoped findings never change."""
    if oracle is None or not finding.subject or not finding.subject_hash:
        return False
    return oracle(finding.subject, finding.subject_hash)


def assess_finding(
    finding: Finding, now: float, oracle: ChangeOracle | None = None
) -> FindingAssessment:
    changed = subject_changed(finding, oracle)
    confidence = decay_confidence(finding.base_timestamp, now, changed)
    return FindingAssessment(
        confidence=confidence,
        status=staleness_tier(confidence),
        file_changed=changed,
        days_since_verified=max(0.0, days_elapsed(finding.base_timestamp, now)),
    )


def compute_confidence(
    finding: Finding, now: float, oracle: ChangeOracle | None = None
) -> tuple[float, StalenessStatus]:
    """Confidence score and staleness tier for a finding."""
    assessment = assess_finding(finding, now, oracle)
    return assessment.confidence, assessment.status
