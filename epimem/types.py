"""
Shared response models and error types for epimem.

Everything the CLI prints as JSON is a pydantic model defined here, so the
payload shape agents parse is declared in one place.
"""

from typing import Literal

from pydantic import BaseModel, Field

# =============================================================================
# Decision support
# =============================================================================


class DecisionGuidance(BaseModel):
    """
    What the agent should do right now.

    Built from a synthesized EpistemicState; see
    epimem.epistemic.guidance.build_guidance.
    """

    ready_to_proceed: bool
    action: str
    reason: str
    prerequisites: list[str] = Field(default_factory=list)
    confidence_phase: str
    phase_marker: str
    confidence: float


class VerificationNeeded(BaseModel):
    """A stale finding that must be re-checked before it is relied on."""

    id: str
    finding: str
    days_stale: int
    confidence: float
    file_changed: bool = False
    scope: str | None = None
    verify_command: str


class KnowledgeItem(BaseModel):
    """A fresh or aging finding that can be used as-is."""

    id: str
    finding: str
    confidence: float
    status: Literal["fresh", "aging"]
    scope: str | None = None


class DeadEndWarning(BaseModel):
    """A failed approach, with the reason it failed."""

    approach: str
    why_failed: str
    scope: str | None = None


class ContinuityContext(BaseModel):
    """Handoff carried over from the previous session."""

    summary: str | None = None
    recommendations: str | None = None
    highlights: list[str] = Field(default_factory=list)
    time_since_last_session: str | None = None


class EpistemicSnapshot(BaseModel):
    """Numeric view of the synthesized state."""

    know: float
    uncertainty: float
    clarity: float
    coherence: float
    completion: float
    engagement: float
    overall: float


class SessionContext(BaseModel):
    """
    Payload returned on session start and status.

    Ordered by how urgently an agent needs each part: the decision first,
    then what must be verified, what must not be repeated, and what is known.
    """

    session_id: str
    project_id: str
    objective: str
    decision: DecisionGuidance
    requires_verification: list[VerificationNeeded] = Field(default_factory=list)
    dead_ends: list[DeadEndWarning] = Field(default_factory=list)
    knowledge: list[KnowledgeItem] = Field(default_factory=list)
    open_questions: list[str] = Field(default_factory=list)
    continuity: ContinuityContext | None = None
    vectors: EpistemicSnapshot


class BreadcrumbCounts(BaseModel):
    """Breadcrumb tallies shown by `status`."""

    findings: int = 0
    findings_fresh: int = 0
    findings_aging: int = 0
    findings_stale: int = 0
    unknowns_open: int = 0
    dead_ends: int = 0


class StartResponse(BaseModel):
    status: Literal["started"] = "started"
    context: SessionContext


class StatusResponse(BaseModel):
    status: Literal["active", "no_session"]
    duration: str | None = None
    counts: BreadcrumbCounts | None = None
    context: SessionContext | None = None
    message: str | None = None


class SearchHit(BaseModel):
    """One ranked result of a fuzzy query."""

    id: str
    type: str
    text: str
    score: float
    secondary_text: str | None = None
    scope: str | None = None


# =============================================================================
# Error classes
# =============================================================================


class EpimemError(Exception):
    """Base class for epimem errors."""

    pass


class NotFoundError(EpimemError, LookupError):
    """A lookup by id matched no record."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class DataCorruptionError(EpimemError, ValueError):
    """A persisted record could not be parsed back into its entity."""

    pass


class NoActiveSessionError(EpimemError):
    """A command needing an active session ran without one."""

    def __init__(self, command: str = "epimem"):
        super().__init__(f"No active session. Run '{command} start \"objective\"' first")
