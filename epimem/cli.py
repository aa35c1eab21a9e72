"""
Command-line interface for epimem.

JSON on stdout by default (agents parse it); `--text` for humans. Errors go
to stderr as `{"status": "error", "error": ...}` (or `Error: ...` in text
mode) with exit code 1.

Example:
    epimem start "Implement user authentication"
    epimem learned "Auth uses JWT with 15min expiry" --scope src/auth.py
    epimem tried "localStorage for tokens" "XSS vulnerability"
    epimem done "JWT auth with refresh tokens" --next "Add rate limiting"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from epimem import __version__
from epimem.active_session import ActiveSession, ActiveSessionFile
from epimem.config import EpimemConfig, load_project_env
from epimem.decay import assess_finding
from epimem.epistemic.vectors import EpistemicVectors
from epimem.file_oracle import GitFileOracle
from epimem.models import (
    CascadePhase,
    GoalStatus,
    Project,
    RootCauseVector,
    ScopeVector,
    now_ts,
)
from epimem.render import (
    ICON_FAILED,
    ICON_FRESH,
    format_duration,
    render_done,
    render_fuzzy,
    render_matches,
    render_query,
    render_session_context,
)
from epimem.search import SearchItem, fuzzy_search
from epimem.session_context import (
    breadcrumb_counts,
    build_session_context,
    collect_breadcrumbs,
)
from epimem.store import MemoryStore
from epimem.types import (
    EpimemError,
    NotFoundError,
    SearchHit,
    StartResponse,
    StatusResponse,
)

logger = logging.getLogger(__name__)

COMMAND_NAME = "epimem"


# =============================================================================
# Invocation context
# =============================================================================


@dataclass
class CommandContext:
    """Everything one command invocation needs, built once in main()."""

    args: argparse.Namespace
    config: EpimemConfig
    store: MemoryStore
    active_file: ActiveSessionFile
    oracle: GitFileOracle | None
    now: float
    text: bool

    def emit(self, payload: BaseModel | dict[str, Any], text: str | None = None) -> None:
        if self.text and text is not None:
            print(text)
            return
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json", exclude_none=True)
        print(json.dumps(payload, indent=2, ensure_ascii=False))

    def project(self) -> Project:
        """Project named after the current directory."""
        return self.store.get_or_create_project(Path.cwd().name or "default", now=self.now)

    def current_hash(self, path: str | None) -> str | None:
        if not path or self.oracle is None:
            return None
        return self.oracle.current_hash(path)

    def require_active(self) -> ActiveSession:
        return self.active_file.require(COMMAND_NAME)


def _scope_fields(scope: str | None, git_hash: str | None = None) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if scope:
        fields["scope"] = scope
        if git_hash:
            fields["git_hash"] = git_hash
    return fields


# =============================================================================
# Session lifecycle
# =============================================================================


def cmd_start(ctx: CommandContext) -> int:
    objective = ctx.args.objective
    ai_id = ctx.args.ai_id or ctx.config.ai_id

    previous = ctx.active_file.load()
    if previous is not None:
        logger.info("Replacing active session %s", previous.session_id)

    project = ctx.project()
    session = ctx.store.create_session(ai_id, project.id, objective, now=ctx.now)
    active = ActiveSession(
        session_id=session.id,
        ai_id=ai_id,
        objective=objective,
        started_at=session.start_time,
        project_id=project.id,
    )
    ctx.active_file.save(active)

    context = build_session_context(
        ctx.store,
        session.id,
        project.id,
        objective,
        session.start_time,
        ctx.now,
        ai_id=ai_id,
        oracle=ctx.oracle,
        limits=ctx.config.decay,
        command=COMMAND_NAME,
    )
    ctx.emit(
        StartResponse(context=context),
        render_session_context(context, [f"Session started: {objective}", f"ID: {session.id}"]),
    )
    return 0


def cmd_status(ctx: CommandContext) -> int:
    active = ctx.active_file.load()
    if active is None:
        message = f"No active session. Run '{COMMAND_NAME} start \"objective\"' to begin."
        ctx.emit(StatusResponse(status="no_session", message=message), message)
        return 0

    context = build_session_context(
        ctx.store,
        active.session_id,
        active.project_id,
        active.objective,
        active.started_at,
        ctx.now,
        ai_id=active.ai_id,
        oracle=ctx.oracle,
        limits=ctx.config.decay,
        command=COMMAND_NAME,
    )
    duration = format_duration(ctx.now - active.started_at)
    response = StatusResponse(
        status="active",
        duration=duration,
        counts=breadcrumb_counts(context),
        context=context,
    )
    ctx.emit(
        response,
        render_session_context(
            context, [f"Session: {active.objective} ({duration})"], show_vectors=True
        ),
    )
    return 0


def cmd_done(ctx: CommandContext) -> int:
    active = ctx.require_active()
    summary = ctx.args.summary

    crumbs = collect_breadcrumbs(
        ctx.store, active.project_id, active.session_id, limits=ctx.config.decay
    )
    state = crumbs.synthesize(active.started_at, ctx.now, ctx.oracle)

    ctx.store.create_handoff(
        session_id=active.session_id,
        ai_id=active.ai_id,
        task_summary=summary,
        key_findings=[f.text for f in crumbs.findings],
        remaining_unknowns=[u.text for u in crumbs.open_unknowns],
        next_session_context=ctx.args.next,
        project_id=active.project_id,
        now=ctx.now,
    )
    ctx.store.end_session(active.session_id, now=ctx.now)
    ctx.active_file.clear()

    result = {
        "status": "completed",
        "objective": active.objective,
        "summary": summary,
        "duration": format_duration(ctx.now - active.started_at),
        "epistemic_state": state.to_dict(),
        "phase_marker": state.confidence_phase.marker,
        "stats": {
            "findings": len(crumbs.findings),
            "unknowns_resolved": len(crumbs.resolved_unknowns),
            "unknowns_open": len(crumbs.open_unknowns),
            "dead_ends": len(crumbs.dead_ends),
        },
        # change against the neutral 0.5 a fresh session starts from
        "delta": {
            "know": state.know - 0.5,
            "uncertainty": state.uncertainty - 0.5,
            "clarity": state.clarity - 0.5,
        },
    }
    ctx.emit(result, render_done(result))
    return 0


# =============================================================================
# Breadcrumb logging
# =============================================================================


def cmd_learned(ctx: CommandContext) -> int:
    active = ctx.require_active()
    scope = ctx.args.scope
    git_hash = ctx.current_hash(scope)

    finding = ctx.store.log_finding(
        active.project_id,
        active.session_id,
        ctx.args.text,
        goal_id=active.current_goal_id,
        subject=scope,
        subject_hash=git_hash,
        impact=ctx.args.impact,
        now=ctx.now,
    )
    text = f"{ICON_FRESH} Learned: {finding.text}"
    if scope:
        text += f"\n  (scoped to: {scope})"
    ctx.emit(
        {
            "status": "logged",
            "type": "finding",
            "id": finding.id,
            "finding": finding.text,
            **_scope_fields(scope, git_hash),
        },
        text,
    )
    return 0


def cmd_uncertain(ctx: CommandContext) -> int:
    active = ctx.require_active()
    unknown = ctx.store.log_unknown(
        active.project_id,
        active.session_id,
        ctx.args.text,
        goal_id=active.current_goal_id,
        subject=ctx.args.scope,
        now=ctx.now,
    )
    ctx.emit(
        {
            "status": "logged",
            "type": "unknown",
            "id": unknown.id,
            "unknown": unknown.text,
            **_scope_fields(ctx.args.scope),
        },
        f"? Uncertain: {unknown.text}",
    )
    return 0


def cmd_tried(ctx: CommandContext) -> int:
    active = ctx.require_active()
    dead_end = ctx.store.log_dead_end(
        active.project_id,
        active.session_id,
        ctx.args.approach,
        ctx.args.why_failed,
        goal_id=active.current_goal_id,
        subject=ctx.args.scope,
        now=ctx.now,
    )
    ctx.emit(
        {
            "status": "logged",
            "type": "dead_end",
            "id": dead_end.id,
            "approach": dead_end.approach,
            "why_failed": dead_end.why_failed,
            **_scope_fields(ctx.args.scope),
        },
        f"{ICON_FAILED} Tried: {dead_end.approach} → {dead_end.why_failed}",
    )
    return 0


def cmd_resolved(ctx: CommandContext) -> int:
    active = ctx.require_active()
    match = ctx.store.match_unknown(ctx.args.text, ctx.args.id, active.project_id)
    if match.is_empty:
        raise NotFoundError("open unknown", match.query)
    if match.is_ambiguous:
        matches = [{"id": u.id, "text": u.text} for u in match.candidates]
        ctx.emit(
            {
                "status": "multiple_matches",
                "message": "Multiple unknowns match. Use --id to specify.",
                "matches": matches,
            },
            render_matches("unknown", matches),
        )
        return 0

    resolved_by = ctx.args.by or active.ai_id
    unknown = ctx.store.resolve_unknown(match.unique.id, resolved_by, now=ctx.now)
    ctx.emit(
        {
            "status": "resolved",
            "id": unknown.id,
            "unknown": unknown.text,
            "resolved_by": resolved_by,
        },
        f"{ICON_FRESH} Resolved: {unknown.text}",
    )
    return 0


def cmd_mistake(ctx: CommandContext) -> int:
    active = ctx.require_active()
    root_cause = RootCauseVector(ctx.args.root_cause) if ctx.args.root_cause else None
    mistake = ctx.store.log_mistake(
        active.session_id,
        ctx.args.text,
        ctx.args.why_wrong,
        project_id=active.project_id,
        goal_id=active.current_goal_id,
        cost_estimate=ctx.args.cost,
        root_cause_vector=root_cause,
        prevention=ctx.args.prevention,
        now=ctx.now,
    )
    payload: dict[str, Any] = {
        "status": "logged",
        "type": "mistake",
        "id": mistake.id,
        "mistake": mistake.mistake,
        "why_wrong": mistake.why_wrong,
    }
    if root_cause is not None:
        payload["root_cause_vector"] = root_cause.value
    text = f"{ICON_FAILED} Mistake: {mistake.mistake}\n  Why: {mistake.why_wrong}"
    if mistake.prevention:
        text += f"\n  Prevention: {mistake.prevention}"
    ctx.emit(payload, text)
    return 0


def cmd_verify(ctx: CommandContext) -> int:
    if not ctx.args.text and not ctx.args.id:
        raise ValueError("Provide search text or --id")

    active = ctx.active_file.load()
    project_id = active.project_id if active else None
    match = ctx.store.match_finding(ctx.args.text, ctx.args.id, project_id)
    if match.is_empty:
        raise NotFoundError("finding", match.query)
    if match.is_ambiguous:
        matches = []
        for f in match.candidates:
            assessment = assess_finding(f, ctx.now, ctx.oracle)
            matches.append(
                {
                    "id": f.id,
                    "text": f.text,
                    "status": assessment.status.value,
                    "days_old": int(assessment.days_since_verified),
                    "file_changed": assessment.file_changed,
                }
            )
        ctx.emit(
            {
                "status": "multiple_matches",
                "message": "Multiple findings match. Use --id to specify.",
                "matches": matches,
            },
            render_matches("finding", matches),
        )
        return 0

    target = match.unique
    new_hash = ctx.current_hash(target.subject)
    updated = ctx.store.verify_finding(target.id, new_hash, ctx.args.update, now=ctx.now)

    text = f"{ICON_FRESH} Verified: {updated.text}"
    if ctx.args.update is not None:
        text += f"\n  (updated from: {target.text})"
    payload: dict[str, Any] = {
        "status": "verified",
        "id": updated.id,
        "finding": updated.text,
        "updated": ctx.args.update is not None,
    }
    if new_hash:
        payload["git_hash"] = new_hash
    ctx.emit(payload, text)
    return 0


# =============================================================================
# Query
# =============================================================================


def _run_fuzzy_query(
    ctx: CommandContext,
    project_id: str,
    query: str,
    kinds: tuple[bool, bool, bool],
    limit: int,
    threshold: float,
) -> int:
    show_findings, show_unknowns, show_dead_ends = kinds
    pool = ctx.config.query.pool_size
    items: list[SearchItem] = []
    if show_findings:
        items.extend(
            SearchItem(id=f.id, kind="finding", text=f.text, scope=f.subject or "")
            for f in ctx.store.list_findings(project_id, limit=pool)
        )
    if show_unknowns:
        items.extend(
            SearchItem(id=u.id, kind="unknown", text=u.text, scope=u.subject or "")
            for u in ctx.store.list_unknowns(project_id, resolved=False, limit=pool)
        )
    if show_dead_ends:
        items.extend(
            SearchItem(
                id=d.id,
                kind="dead_end",
                text=d.approach,
                secondary_text=d.why_failed,
                scope=d.subject or "",
            )
            for d in ctx.store.list_dead_ends(project_id, limit=pool)
        )

    results = fuzzy_search(query, items, threshold)[:limit]
    hits = [
        SearchHit(
            id=r.id,
            type=r.kind,
            text=r.text,
            score=r.score,
            secondary_text=r.secondary_text or None,
            scope=r.scope or None,
        ).model_dump(exclude_none=True)
        for r in results
    ]
    ctx.emit({"query": query, "results": hits, "count": len(hits)}, render_fuzzy(query, results))
    return 0


def cmd_query(ctx: CommandContext) -> int:
    args = ctx.args
    project = ctx.project()
    limit = args.limit if args.limit is not None else ctx.config.query.limit
    threshold = args.threshold if args.threshold is not None else ctx.config.query.threshold

    show_findings = (not args.unknowns and not args.dead_ends) or args.all
    show_unknowns = args.unknowns or args.all
    show_dead_ends = args.dead_ends or args.all

    if args.fuzzy and args.search:
        return _run_fuzzy_query(
            ctx,
            project.id,
            args.search,
            (show_findings, show_unknowns, show_dead_ends),
            limit,
            threshold,
        )

    result: dict[str, Any] = {"project_id": project.id}
    if args.search:
        result["search"] = args.search

    if show_findings:
        if args.search:
            findings = ctx.store.find_findings_by_text(args.search, project.id, limit=limit)
        else:
            findings = ctx.store.list_findings(project.id, limit=limit)
        items = []
        for f in findings:
            assessment = assess_finding(f, ctx.now, ctx.oracle)
            item: dict[str, Any] = {
                "id": f.id,
                "finding": f.text,
                "status": assessment.status.value,
                "confidence": assessment.confidence,
                "days_old": int(assessment.days_since_verified),
            }
            if f.subject:
                item["scope"] = f.subject
                item["file_changed"] = assessment.file_changed
            items.append(item)
        result["findings"] = items
        result["findings_count"] = len(items)

    if show_unknowns:
        unknowns = ctx.store.list_unknowns(project.id, resolved=False, limit=limit)
        result["unknowns"] = [
            {"id": u.id, "unknown": u.text, **_scope_fields(u.subject)} for u in unknowns
        ]
        result["unknowns_count"] = len(unknowns)

    if show_dead_ends:
        dead_ends = ctx.store.list_dead_ends(project.id, limit=limit)
        result["dead_ends"] = [
            {
                "id": d.id,
                "approach": d.approach,
                "why_failed": d.why_failed,
                **_scope_fields(d.subject),
            }
            for d in dead_ends
        ]
        result["dead_ends_count"] = len(dead_ends)

    ctx.emit(result, render_query(project.name, result))
    return 0


# =============================================================================
# Self-assessment and goals
# =============================================================================


def cmd_assess(ctx: CommandContext) -> int:
    active = ctx.require_active()
    phase = CascadePhase(ctx.args.phase.upper())
    raw = json.loads(ctx.args.vectors)
    if not isinstance(raw, dict):
        raise ValueError("--vectors must be a JSON object")
    vectors = EpistemicVectors.from_dict(raw)

    reflex = ctx.store.create_reflex(
        active.session_id, phase, vectors, reasoning=ctx.args.reasoning, now=ctx.now
    )
    summary = vectors.summary()
    result: dict[str, Any] = {
        "status": "recorded",
        "reflex_id": reflex.id,
        "phase": phase.value,
        "overall_confidence": summary.confidence,
        "confidence_phase": summary.phase.value,
        "phase_marker": summary.phase.marker,
        "recommended_action": summary.action.value,
        "ready_to_proceed": summary.ready_to_proceed,
        "tiers": {
            "foundation": vectors.foundation_score(),
            "comprehension": vectors.comprehension_score(),
            "execution": vectors.execution_score(),
        },
    }
    text_lines = [
        f"{phase.value} recorded: {summary.phase.marker} {summary.action.value.upper()} "
        f"({summary.confidence * 100:.0f}% confidence)"
    ]

    if phase == CascadePhase.POSTFLIGHT:
        preflight = ctx.store.get_latest_reflex(active.session_id, CascadePhase.PREFLIGHT)
        if preflight is not None:
            delta = vectors.delta(preflight.vectors)
            gain = summary.confidence - preflight.vectors.overall_confidence()
            result["delta"] = delta.to_dict()
            result["confidence_gain"] = gain
            text_lines.append(f"  Confidence gain since PREFLIGHT: {gain:+.2f}")
            text_lines.extend(
                f"  {name}: {value:+.2f}" for name, value in delta.to_dict().items() if value
            )

    ctx.emit(result, "\n".join(text_lines))
    return 0


def cmd_goal_add(ctx: CommandContext) -> int:
    active = ctx.require_active()
    scope = ScopeVector(
        breadth=ctx.args.breadth, duration=ctx.args.duration, coordination=ctx.args.coordination
    )
    goal = ctx.store.create_goal(
        active.session_id,
        ctx.args.objective,
        scope=scope,
        project_id=active.project_id,
        now=ctx.now,
    )
    active.current_goal_id = goal.id
    ctx.active_file.save(active)
    ctx.emit(
        {
            "status": "created",
            "id": goal.id,
            "objective": goal.objective,
            "scope": asdict(scope),
        },
        f"{ICON_FRESH} Goal: {goal.objective} (id: {goal.id[:8]})",
    )
    return 0


def cmd_goal_list(ctx: CommandContext) -> int:
    active = ctx.active_file.load()
    project_id = active.project_id if active else ctx.project().id
    status = None if ctx.args.all else GoalStatus.IN_PROGRESS
    goals = ctx.store.list_goals(project_id=project_id, status=status)
    current = active.current_goal_id if active else None

    items = [
        {
            "id": g.id,
            "objective": g.objective,
            "status": g.status.value,
            "current": g.id == current,
        }
        for g in goals
    ]
    lines = [f"GOALS ({len(items)}):"]
    lines.extend(
        f"  {'*' if g['current'] else ' '} {g['objective']} [{g['status']}] (id: {g['id'][:8]})"
        for g in items
    )
    ctx.emit({"goals": items, "count": len(items)}, "\n".join(lines))
    return 0


def cmd_goal_done(ctx: CommandContext) -> int:
    active = ctx.require_active()
    goal_id = ctx.args.goal_id

    goal = ctx.store.get_goal(goal_id)
    if goal is None:
        candidates = [
            g
            for g in ctx.store.list_goals(project_id=active.project_id, limit=500)
            if g.id.startswith(goal_id)
        ]
        if not candidates:
            raise NotFoundError("goal", goal_id)
        if len(candidates) > 1:
            matches = [
                {"id": g.id, "text": g.objective, "goal_status": g.status.value}
                for g in candidates
            ]
            ctx.emit(
                {
                    "status": "multiple_matches",
                    "message": "Multiple goals match. Use a longer id prefix.",
                    "matches": matches,
                },
                render_matches("goal", matches),
            )
            return 0
        goal = candidates[0]

    ctx.store.complete_goal(goal.id, now=ctx.now)
    if active.current_goal_id == goal.id:
        active.current_goal_id = None
        ctx.active_file.save(active)

    ctx.emit(
        {"status": "completed", "id": goal.id, "objective": goal.objective},
        f"{ICON_FRESH} Goal complete: {goal.objective}",
    )
    return 0


def cmd_version(ctx: CommandContext) -> int:
    ctx.emit({"version": __version__}, f"{COMMAND_NAME} {__version__}")
    return 0


# =============================================================================
# Parser
# =============================================================================


def _common_options() -> argparse.ArgumentParser:
    # SUPPRESS keeps a subcommand from resetting options given before it
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--text",
        dest="text_output",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Human-readable output",
    )
    common.add_argument(
        "-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Debug logging"
    )
    common.add_argument("--db", default=argparse.SUPPRESS, help="Path to the SQLite database")
    common.add_argument("--config", default=argparse.SUPPRESS, help="Path to config.json")
    return common


def _add_command(
    subparsers: Any,
    name: str,
    handler: Callable[[CommandContext], int],
    common: argparse.ArgumentParser,
    help_text: str,
) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(name, parents=[common], help=help_text, description=help_text)
    parser.set_defaults(handler=handler)
    return parser


def _unit_float(value: str) -> float:
    number = float(value)
    if not 0.0 <= number <= 1.0:
        raise argparse.ArgumentTypeError(f"must be between 0.0 and 1.0, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = argparse.ArgumentParser(
        prog=COMMAND_NAME,
        description="Knowledge continuity for AI coding agents",
        parents=[common],
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    p = _add_command(subparsers, "start", cmd_start, common, "Start a new session")
    p.add_argument("objective")
    p.add_argument("--ai-id", default=None)

    _add_command(subparsers, "status", cmd_status, common, "Show current session status")

    p = _add_command(subparsers, "done", cmd_done, common, "End the current session")
    p.add_argument("summary")
    p.add_argument("--next", default=None, help="Recommendations for the next session")

    p = _add_command(subparsers, "learned", cmd_learned, common, "Log something you learned")
    p.add_argument("text")
    p.add_argument("--scope", default=None, help="File the finding is about")
    p.add_argument("--impact", type=_unit_float, default=0.5)

    p = _add_command(
        subparsers, "uncertain", cmd_uncertain, common, "Log something you're uncertain about"
    )
    p.add_argument("text")
    p.add_argument("--scope", default=None)

    p = _add_command(subparsers, "tried", cmd_tried, common, "Log a failed approach")
    p.add_argument("approach")
    p.add_argument("why_failed")
    p.add_argument("--scope", default=None)

    p = _add_command(subparsers, "resolved", cmd_resolved, common, "Resolve an open question")
    p.add_argument("text", nargs="?", default=None)
    p.add_argument("--id", default=None, help="Unknown id or id prefix")
    p.add_argument("--by", default=None, help="How it was resolved")

    p = _add_command(subparsers, "mistake", cmd_mistake, common, "Log a mistake")
    p.add_argument("text")
    p.add_argument("why_wrong")
    p.add_argument("--cost", default=None)
    p.add_argument(
        "--root-cause", default=None, choices=[v.value for v in RootCauseVector]
    )
    p.add_argument("--prevention", default=None)

    p = _add_command(subparsers, "verify", cmd_verify, common, "Re-verify a finding")
    p.add_argument("text", nargs="?", default=None)
    p.add_argument("--id", default=None, help="Finding id or id prefix")
    p.add_argument("--update", default=None, help="Replacement text")

    p = _add_command(subparsers, "query", cmd_query, common, "Query learnings")
    p.add_argument("search", nargs="?", default=None)
    p.add_argument("-u", "--unknowns", action="store_true")
    p.add_argument("-d", "--dead-ends", action="store_true")
    p.add_argument("-a", "--all", action="store_true")
    p.add_argument("-f", "--fuzzy", action="store_true")
    p.add_argument("-t", "--threshold", type=float, default=None)
    p.add_argument("-n", "--limit", type=int, default=None)

    p = _add_command(subparsers, "assess", cmd_assess, common, "Record a self-assessment")
    p.add_argument("phase", choices=["preflight", "check", "postflight"], type=str.lower)
    p.add_argument("--vectors", required=True, help="JSON object of vector values")
    p.add_argument("--reasoning", default=None)

    goal = subparsers.add_parser("goal", help="Manage goals", parents=[common])
    goal_sub = goal.add_subparsers(dest="goal_command", metavar="ACTION")
    goal_sub.required = True

    p = _add_command(goal_sub, "add", cmd_goal_add, common, "Add a goal and make it current")
    p.add_argument("objective")
    p.add_argument("--breadth", type=_unit_float, default=0.3)
    p.add_argument("--duration", type=_unit_float, default=0.3)
    p.add_argument("--coordination", type=_unit_float, default=0.1)

    p = _add_command(goal_sub, "list", cmd_goal_list, common, "List goals")
    p.add_argument("--all", action="store_true", help="Include finished goals")

    p = _add_command(goal_sub, "done", cmd_goal_done, common, "Complete a goal")
    p.add_argument("goal_id")

    _add_command(subparsers, "version", cmd_version, common, "Show version")
    return parser


# =============================================================================
# Entry point
# =============================================================================


def configure_logging(config: EpimemConfig, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level, logging.WARNING)
    logging.basicConfig(level=level, format=config.logging.format, stream=sys.stderr)
    logging.getLogger("epimem").setLevel(level)


def _report_error(error: Exception, text: bool) -> None:
    if text:
        print(f"Error: {error}", file=sys.stderr)
    else:
        print(json.dumps({"status": "error", "error": str(error)}), file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    text = getattr(args, "text_output", False)

    try:
        load_project_env()
        config_path = getattr(args, "config", None)
        config = EpimemConfig.load(Path(config_path) if config_path else None)
        configure_logging(config, getattr(args, "verbose", False))

        oracle = None
        if config.oracle.enabled:
            oracle = GitFileOracle(
                timeout_seconds=config.oracle.git_timeout_seconds,
                git_binary=config.oracle.git_binary,
            )
        ctx = CommandContext(
            args=args,
            config=config,
            store=MemoryStore(config.resolve_db_path(getattr(args, "db", None))),
            active_file=ActiveSessionFile(),
            oracle=oracle,
            now=now_ts(),
            text=text,
        )
        return args.handler(ctx)
    except (EpimemError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        _report_error(e, text)
        return 1


def run() -> None:
    sys.exit(main())
