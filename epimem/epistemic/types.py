"""
Core types shared by the two epistemic scoring paths.

The vector model (explicit 13-dimension self-assessment) and the session
synthesizer (breadcrumb-derived proxies) are calibrated independently. They
share the action vocabulary, the gate thresholds, the confidence phase bands
and the ConfidenceSummary shape defined here, and nothing else.
"""

from dataclasses import dataclass
from enum import Enum

# Gate and readiness thresholds
ENGAGEMENT_THRESHOLD = 0.60
KNOW_MIN = 0.50
UNCERTAINTY_MAX = 0.50

# Action boundaries
COHERENCE_MIN = 0.50
DENSITY_MAX = 0.90
CLARITY_MIN = 0.40


class Action(str, Enum):
    """Recommended next action, in no particular priority order."""

    PROCEED = "proceed"
    INVESTIGATE = "investigate"
    CLARIFY = "clarify"
    VERIFY = "verify"
    RESET = "reset"
    STOP = "stop"


class ConfidencePhase(str, Enum):
    """Five fixed confidence bands, each with its own display marker."""

    CRITICAL = "critical"
    LOW = "low"
    MODERATE = "moderate"
    GOOD = "good"
    EXCELLENT = "excellent"

    @property
    def marker(self) -> str:
        return _PHASE_MARKERS[self]

    @classmethod
    def for_confidence(cls, confidence: float) -> "ConfidencePhase":
        """Map a confidence in [0, 1] to its band."""
        if confidence < 0.25:
            return cls.CRITICAL
        if confidence < 0.50:
            return cls.LOW
        if confidence < 0.75:
            return cls.MODERATE
        if confidence < 0.90:
            return cls.GOOD
        return cls.EXCELLENT


_PHASE_MARKERS = {
    ConfidencePhase.CRITICAL: "\U0001f311",  # new moon
    ConfidencePhase.LOW: "\U0001f312",  # waxing crescent
    ConfidencePhase.MODERATE: "\U0001f313",  # first quarter
    ConfidencePhase.GOOD: "\U0001f314",  # waxing gibbous
    ConfidencePhase.EXCELLENT: "\U0001f315",  # full moon
}


@dataclass(frozen=True)
class ConfidenceSummary:
    """
    Common presentation shape for either scoring path.

    Attributes:
        confidence: Aggregate confidence in [0, 1]
        phase: Band of the aggregate confidence
        action: Recommended next action
        ready_to_proceed: Whether the gate and readiness predicates hold
        source: Which scoring path produced it ("vectors" or "breadcrumbs")
    """

    confidence: float
    phase: ConfidencePhase
    action: Action
    ready_to_proceed: bool
    source: str


def clamp01(value: float) -> float:
    """Clamp a score to [0, 1]."""
    return max(0.0, min(1.0, value))
