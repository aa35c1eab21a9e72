"""
Epistemic scoring for epimem.

Two independently calibrated paths share one presentation shape:

- vectors: the 13-dimension self-assessment an agent submits explicitly
- synthesizer: a six-value proxy derived from logged breadcrumbs

Both expose `summary() -> ConfidenceSummary`. The synthesizer and guidance
modules depend on the decay calculator and are imported by full path.

Example:
    >>> from epimem.epistemic import EpistemicVectors
    >>> EpistemicVectors.default().summary().phase
    <ConfidencePhase.LOW: 'low'>
"""

from epimem.epistemic.types import (
    CLARITY_MIN,
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
from epimem.epistemic.vectors import (
    VECTOR_FIELDS,
    VECTOR_NAMES,
    EpistemicVectors,
    delta,
)

__all__ = [
    # Types
    "Action",
    "ConfidencePhase",
    "ConfidenceSummary",
    "clamp01",
    # Thresholds
    "CLARITY_MIN",
    "COHERENCE_MIN",
    "DENSITY_MAX",
    "ENGAGEMENT_THRESHOLD",
    "KNOW_MIN",
    "UNCERTAINTY_MAX",
    # Vectors
    "EpistemicVectors",
    "VECTOR_FIELDS",
    "VECTOR_NAMES",
    "delta",
]
