"""
Entity model for epimem.

Breadcrumbs (Finding, Unknown, DeadEnd) are what the scoring engine reads.
Mistakes and the administrative entities (Project, Session, Goal, SubTask,
Cascade, Reflex, HandoffReport, InvestigationBranch) provide scoping keys and
history but carry no algorithmic content.

All timestamps are float seconds since the epoch.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum

from epimem.epistemic.vectors import EpistemicVectors


def now_ts() -> float:
    """Current wall-clock time in epoch seconds."""
    return time.time()


def new_id() -> str:
    return str(uuid.uuid4())


def _check_unit(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be between 0.0 and 1.0, got: {value}")


# =============================================================================
# Enums
# =============================================================================


class StalenessStatus(str, Enum):
    FRESH = "fresh"
    AGING = "aging"
    STALE = "stale"


class RootCauseVector(str, Enum):
    """Epistemic dimension a mistake is attributed to."""

    KNOW = "KNOW"
    CONTEXT = "CONTEXT"
    CLARITY = "CLARITY"
    COHERENCE = "COHERENCE"
    UNCERTAINTY = "UNCERTAINTY"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETE = "complete"


class GoalStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    SKIPPED = "skipped"


class EpistemicImportance(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class BranchStatus(str, Enum):
    ACTIVE = "active"
    MERGED = "merged"
    ABANDONED = "abandoned"


class CascadePhase(str, Enum):
    """Workflow phases; reflexes are recorded for PREFLIGHT, CHECK and POSTFLIGHT."""

    PREFLIGHT = "PREFLIGHT"
    THINK = "THINK"
    PLAN = "PLAN"
    INVESTIGATE = "INVESTIGATE"
    CHECK = "CHECK"
    ACT = "ACT"
    POSTFLIGHT = "POSTFLIGHT"


REFLEX_PHASES = frozenset(
    {CascadePhase.PREFLIGHT, CascadePhase.CHECK, CascadePhase.POSTFLIGHT}
)


# =============================================================================
# Breadcrumbs
# =============================================================================


@dataclass
class Finding:
    """
    A discovered fact.

    Mutated only by verification. `last_verified_timestamp`, when set, is
    never earlier than `created_timestamp`.
    """

    id: str
    project_id: str
    session_id: str
    text: str
    created_timestamp: float
    goal_id: str | None = None
    subtask_id: str | None = None
    subject: str | None = None  # file path or topic
    subject_hash: str | None = None  # content hash of subject when recorded
    last_verified_timestamp: float | None = None
    impact: float = 0.5

    def __post_init__(self) -> None:
        _check_unit("impact", self.impact)
        if (
            self.last_verified_timestamp is not None
            and self.last_verified_timestamp < self.created_timestamp
        ):
            raise ValueError("last_verified_timestamp precedes created_timestamp")

    @classmethod
    def new(
        cls,
        project_id: str,
        session_id: str,
        text: str,
        now: float | None = None,
        **kwargs,
    ) -> Finding:
        """Create a finding whose verification time equals its creation time."""
        created = now_ts() if now is None else now
        return cls(
            id=new_id(),
            project_id=project_id,
            session_id=session_id,
            text=text,
            created_timestamp=created,
            last_verified_timestamp=created,
            **kwargs,
        )

    @property
    def base_timestamp(self) -> float:
        """Timestamp confidence decays from."""
        if self.last_verified_timestamp is not None:
            return self.last_verified_timestamp
        return self.created_timestamp


@dataclass
class Unknown:
    """An open question; resolved at most once."""

    id: str
    project_id: str
    session_id: str
    text: str
    created_timestamp: float
    goal_id: str | None = None
    subtask_id: str | None = None
    is_resolved: bool = False
    resolved_by: str | None = None
    resolved_timestamp: float | None = None
    subject: str | None = None
    impact: float = 0.5

    def __post_init__(self) -> None:
        _check_unit("impact", self.impact)

    @classmethod
    def new(
        cls, project_id: str, session_id: str, text: str, now: float | None = None, **kwargs
    ) -> Unknown:
        return cls(
            id=new_id(),
            project_id=project_id,
            session_id=session_id,
            text=text,
            created_timestamp=now_ts() if now is None else now,
            **kwargs,
        )


@dataclass(frozen=True)
class DeadEnd:
    """A failed approach. Never updated."""

    id: str
    project_id: str
    session_id: str
    approach: str
    why_failed: str
    created_timestamp: float
    goal_id: str | None = None
    subtask_id: str | None = None
    subject: str | None = None
    impact: float = 0.5

    def __post_init__(self) -> None:
        _check_unit("impact", self.impact)


@dataclass(frozen=True)
class Mistake:
    """An error made by the agent, with its attributed root cause."""

    id: str
    session_id: str
    mistake: str
    why_wrong: str
    created_timestamp: float
    project_id: str | None = None
    goal_id: str | None = None
    cost_estimate: str | None = None
    root_cause_vector: RootCauseVector | None = None
    prevention: str | None = None


# =============================================================================
# Administrative entities
# =============================================================================


@dataclass
class Project:
    id: str
    name: str
    created_timestamp: float
    description: str | None = None
    repos: list[str] = field(default_factory=list)
    status: ProjectStatus = ProjectStatus.ACTIVE
    last_activity_timestamp: float | None = None
    total_sessions: int = 0
    total_goals: int = 0


@dataclass
class Session:
    """One agent working session; `subject` holds the stated objective."""

    id: str
    ai_id: str
    start_time: float
    project_id: str | None = None
    subject: str | None = None
    end_time: float | None = None

    @property
    def is_active(self) -> bool:
        return self.end_time is None


@dataclass
class ScopeVector:
    """How big a goal is, each axis in [0, 1]."""

    breadth: float = 0.3
    duration: float = 0.3
    coordination: float = 0.1

    def __post_init__(self) -> None:
        _check_unit("breadth", self.breadth)
        _check_unit("duration", self.duration)
        _check_unit("coordination", self.coordination)


@dataclass
class SuccessCriterion:
    description: str
    validation_method: str = "completion"
    is_required: bool = True
    is_met: bool = False


@dataclass
class Goal:
    id: str
    session_id: str
    objective: str
    created_timestamp: float
    project_id: str | None = None
    scope: ScopeVector = field(default_factory=ScopeVector)
    success_criteria: list[SuccessCriterion] = field(default_factory=list)
    status: GoalStatus = GoalStatus.IN_PROGRESS
    completed_timestamp: float | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == GoalStatus.COMPLETE


@dataclass
class SubTask:
    id: str
    goal_id: str
    description: str
    created_timestamp: float
    status: TaskStatus = TaskStatus.PENDING
    importance: EpistemicImportance = EpistemicImportance.MEDIUM
    completion_evidence: str | None = None
    completed_timestamp: float | None = None


@dataclass
class Cascade:
    """A task run through the workflow phases, tracking which ones completed."""

    id: str
    session_id: str
    task: str
    started_at: float
    goal_id: str | None = None
    completed_phases: list[CascadePhase] = field(default_factory=list)
    final_action: str | None = None
    final_confidence: float | None = None
    completed_at: float | None = None

    def phase_done(self, phase: CascadePhase) -> bool:
        return phase in self.completed_phases


@dataclass
class Reflex:
    """A stored self-assessment checkpoint."""

    id: str
    session_id: str
    phase: CascadePhase
    vectors: EpistemicVectors
    timestamp: float
    cascade_id: str | None = None
    round: int = 1
    reasoning: str | None = None

    def __post_init__(self) -> None:
        if self.phase not in REFLEX_PHASES:
            raise ValueError(
                f"Reflex phase must be one of {sorted(p.value for p in REFLEX_PHASES)}, "
                f"got: {self.phase.value}"
            )


@dataclass
class HandoffReport:
    """What a finished session passes on to the next one."""

    id: str
    session_id: str
    ai_id: str
    task_summary: str
    created_timestamp: float
    project_id: str | None = None
    key_findings: list[str] = field(default_factory=list)
    remaining_unknowns: list[str] = field(default_factory=list)
    next_session_context: str | None = None


@dataclass
class InvestigationBranch:
    """A parallel line of investigation compared by its epistemic gain."""

    id: str
    session_id: str
    branch_name: str
    investigation_path: str
    preflight_vectors: EpistemicVectors
    created_timestamp: float
    postflight_vectors: EpistemicVectors | None = None
    status: BranchStatus = BranchStatus.ACTIVE
    merge_score: float | None = None
    is_winner: bool = False
    checkpoint_timestamp: float | None = None

    def epistemic_delta(self) -> EpistemicVectors | None:
        """Postflight minus preflight, or None before a checkpoint."""
        if self.postflight_vectors is None:
            return None
        return self.postflight_vectors.delta(self.preflight_vectors)

    def gain(self) -> float | None:
        """Change in overall confidence across the branch."""
        if self.postflight_vectors is None:
            return None
        return (
            self.postflight_vectors.overall_confidence()
            - self.preflight_vectors.overall_confidence()
        )
