"""
The 13-dimension epistemic vector model.

An agent submits these values explicitly (preflight, check, postflight) as a
self-assessment. Tier scores are plain means; the overall score weights the
tiers and engagement and subtracts an uncertainty penalty.

Example:
    >>> v = EpistemicVectors.default()
    >>> v.foundation_score()
    0.5
    >>> v.recommended_action()
    <Action.STOP: 'stop'>
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from typing import Any

from epimem.epistemic.types import (
    COHERENCE_MIN,
    DENSITY_MAX,
    ENGAGEMENT_THRESHOLD,
    KNOW_MIN,
    UNCERTAINTY_MAX,
    Action,
    ConfidencePhase,
    ConfidenceSummary,
    clamp01,
)
from epimem.types import DataCorruptionError

# Tier weights for overall confidence
FOUNDATION_WEIGHT = 0.35
COMPREHENSION_WEIGHT = 0.25
EXECUTION_WEIGHT = 0.25
ENGAGEMENT_WEIGHT = 0.15
UNCERTAINTY_PENALTY = 0.15

# (serialized name, attribute name); `do` is a keyword
VECTOR_FIELDS: tuple[tuple[str, str], ...] = (
    ("engagement", "engagement"),
    ("know", "know"),
    ("do", "do_"),
    ("context", "context"),
    ("clarity", "clarity"),
    ("coherence", "coherence"),
    ("signal", "signal"),
    ("density", "density"),
    ("state", "state"),
    ("change", "change"),
    ("completion", "completion"),
    ("impact", "impact"),
    ("uncertainty", "uncertainty"),
)

VECTOR_NAMES: tuple[str, ...] = tuple(name for name, _ in VECTOR_FIELDS)


@dataclass
class EpistemicVectors:
    """
    Snapshot of an agent's self-assessed knowledge state.

    Individual values are nominally in [0, 1] but are not clamped; only the
    aggregate scores are.

    Attributes:
        engagement: Gate dimension, must reach 0.60
        know, do_, context: Foundation tier
        clarity, coherence, signal, density: Comprehension tier
            (high density means overload)
        state, change, completion, impact: Execution tier
        uncertainty: Explicit doubt, penalizes the overall score
    """

    engagement: float = 0.0
    know: float = 0.0
    do_: float = 0.0
    context: float = 0.0
    clarity: float = 0.0
    coherence: float = 0.0
    signal: float = 0.0
    density: float = 0.0
    state: float = 0.0
    change: float = 0.0
    completion: float = 0.0
    impact: float = 0.0
    uncertainty: float = 0.0

    @classmethod
    def default(cls) -> EpistemicVectors:
        """Moderate starting point: 0.5 everywhere, nothing completed yet."""
        values = {f.name: 0.5 for f in fields(cls)}
        values["completion"] = 0.0
        return cls(**values)

    # =========================================================================
    # Tier aggregation
    # =========================================================================

    def foundation_score(self) -> float:
        return (self.know + self.do_ + self.context) / 3.0

    def comprehension_score(self) -> float:
        return (self.clarity + self.coherence + self.signal + self.density) / 4.0

    def execution_score(self) -> float:
        return (self.state + self.change + self.completion + self.impact) / 4.0

    def overall_confidence(self) -> float:
        """Weighted tier score minus the uncertainty penalty, clamped to [0, 1]."""
        base = (
            FOUNDATION_WEIGHT * self.foundation_score()
            + COMPREHENSION_WEIGHT * self.comprehension_score()
            + EXECUTION_WEIGHT * self.execution_score()
            + ENGAGEMENT_WEIGHT * self.engagement
        )
        return clamp01(base - UNCERTAINTY_PENALTY * self.uncertainty)

    # =========================================================================
    # Gate and readiness
    # =========================================================================

    def passes_engagement_gate(self) -> bool:
        return self.engagement >= ENGAGEMENT_THRESHOLD

    def is_ready_to_proceed(self) -> bool:
        return (
            self.passes_engagement_gate()
            and self.know >= KNOW_MIN
            and self.uncertainty <= UNCERTAINTY_MAX
        )

    def needs_investigation(self) -> bool:
        return self.know < KNOW_MIN or self.uncertainty > UNCERTAINTY_MAX

    def recommended_action(self) -> Action:
        """
        Pick the next action by strict priority.

        Engagement failure dominates everything; coherence collapse comes
        before overload and investigation.
        """
        if not self.passes_engagement_gate():
            return Action.STOP
        if self.coherence < COHERENCE_MIN:
            return Action.RESET
        if self.density > DENSITY_MAX:
            return Action.CLARIFY
        if self.needs_investigation():
            return Action.INVESTIGATE
        return Action.PROCEED

    def confidence_phase(self) -> ConfidencePhase:
        return ConfidencePhase.for_confidence(self.overall_confidence())

    def summary(self) -> ConfidenceSummary:
        confidence = self.overall_confidence()
        return ConfidenceSummary(
            confidence=confidence,
            phase=ConfidencePhase.for_confidence(confidence),
            action=self.recommended_action(),
            ready_to_proceed=self.is_ready_to_proceed(),
            source="vectors",
        )

    def delta(self, other: EpistemicVectors) -> EpistemicVectors:
        """Component-wise `self - other`."""
        return EpistemicVectors(
            **{
                attr: getattr(self, attr) - getattr(other, attr)
                for _, attr in VECTOR_FIELDS
            }
        )

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, float]:
        return {name: getattr(self, attr) for name, attr in VECTOR_FIELDS}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EpistemicVectors:
        """
        Build vectors from a serialized mapping.

        Absent names default to 0.0; unknown names are ignored.

        Raises:
            ValueError: If a present value is not numeric
        """
        values = {}
        for name, attr in VECTOR_FIELDS:
            raw = data.get(name, 0.0)
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise ValueError(f"Vector '{name}' must be numeric, got {raw!r}")
            values[attr] = float(raw)
        return cls(**values)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, data: str) -> EpistemicVectors:
        """
        Parse vectors from their JSON form.

        Raises:
            DataCorruptionError: If the text is not a JSON object of numbers
        """
        try:
            parsed = json.loads(data)
            if not isinstance(parsed, dict):
                raise ValueError(f"expected a JSON object, got {type(parsed).__name__}")
            return cls.from_dict(parsed)
        except ValueError as e:
            raise DataCorruptionError(f"Malformed epistemic vectors: {e}") from e


def delta(a: EpistemicVectors, b: EpistemicVectors) -> EpistemicVectors:
    """Difference vector `a - b`, e.g. postflight minus preflight."""
    return a.delta(b)
