"""
Human-readable (`--text`) rendering of CLI results.

JSON is the default output for agents; these functions only format what the
commands already computed.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from epimem.search import SearchResult
from epimem.types import SessionContext

RULE = "─" * 50
BAR_FILLED = "█"
BAR_EMPTY = "░"

ICON_FRESH = "✓"  # check mark
ICON_AGING = "○"  # circle
ICON_STALE = "⚠"  # warning
ICON_FAILED = "✗"  # cross
ICON_ARROW = "→"
BULLET = "•"

STATUS_ICONS = {"fresh": ICON_FRESH, "aging": ICON_AGING, "stale": ICON_STALE}


def format_vector_bar(value: float, width: int = 10) -> str:
    filled = max(0, min(width, int(value * width)))
    return BAR_FILLED * filled + BAR_EMPTY * (width - filled)


def format_duration(seconds: float) -> str:
    """Compact duration such as `1h05m` or `12m30s`."""
    total = int(max(0.0, seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes:02d}m"
    if minutes:
        return f"{minutes}m{secs:02d}s"
    return f"{secs}s"


def _decision_lines(context: SessionContext) -> list[str]:
    d = context.decision
    lines = [
        "",
        f"{d.phase_marker} {d.action.upper()} ({d.confidence * 100:.0f}% confidence)",
        f"  {d.reason}",
    ]
    if d.prerequisites:
        lines.append("")
        lines.append("  Before proceeding:")
        lines.extend(f"    {ICON_ARROW} {p}" for p in d.prerequisites)
    return lines


def _vector_lines(context: SessionContext) -> list[str]:
    v = context.vectors
    rows = [
        ("Know", v.know),
        ("Uncertainty", v.uncertainty),
        ("Clarity", v.clarity),
        ("Coherence", v.coherence),
        ("Completion", v.completion),
        ("Engagement", v.engagement),
    ]
    lines = ["", "Vectors:"]
    lines.extend(
        f"  {name + ':':<13}{format_vector_bar(value)} {value * 100:.0f}%" for name, value in rows
    )
    return lines


def render_session_context(
    context: SessionContext, header: Sequence[str], show_vectors: bool = False
) -> str:
    lines = list(header)
    lines.append(RULE)
    lines.extend(_decision_lines(context))
    if show_vectors:
        lines.extend(_vector_lines(context))

    if context.requires_verification:
        lines.append("")
        lines.append(f"{ICON_STALE} VERIFY BEFORE USING ({len(context.requires_verification)}):")
        for v in context.requires_verification:
            extra = " [file changed]" if v.file_changed else ""
            lines.append(f"  {BULLET} {v.finding} ({v.days_stale}d old{extra})")
            lines.append(f"    {v.verify_command}")

    if context.dead_ends:
        lines.append("")
        lines.append(f"{ICON_FAILED} DO NOT REPEAT ({len(context.dead_ends)}):")
        for d in context.dead_ends:
            lines.append(f"  {BULLET} {d.approach}")
            lines.append(f"    Why: {d.why_failed}")

    if context.knowledge:
        lines.append("")
        lines.append(f"{ICON_FRESH} KNOWN ({len(context.knowledge)}):")
        for k in context.knowledge:
            lines.append(f"  {STATUS_ICONS[k.status]} {k.finding}")

    if context.open_questions:
        lines.append("")
        lines.append(f"? OPEN QUESTIONS ({len(context.open_questions)}):")
        lines.extend(f"  {BULLET} {q}" for q in context.open_questions)

    if context.continuity is not None:
        c = context.continuity
        lines.append("")
        lines.append("─ Last Session ─")
        if c.time_since_last_session:
            lines.append(f"  {c.time_since_last_session}")
        if c.summary:
            lines.append(f"  {c.summary}")
        lines.extend(f"  {BULLET} {h}" for h in c.highlights)
        if c.recommendations:
            lines.append(f"  Recommendations: {c.recommendations}")

    return "\n".join(lines)


def render_done(result: dict[str, Any]) -> str:
    state = result["epistemic_state"]
    stats = result["stats"]
    lines = [
        f"Session completed: {result['objective']}",
        RULE,
        f"Duration: {result['duration']}",
        "",
        "Epistemic Delta:",
    ]
    for name in ("know", "uncertainty", "clarity"):
        label = f"{name.capitalize()}:"
        lines.append(f"  {label:<13}{result['delta'][name]:+.2f} (0.50 {ICON_ARROW} {state[name]:.2f})")
    lines.append("")
    lines.append(
        f"Final: {result['phase_marker']} {state['confidence_phase'].capitalize()} "
        f"({state['confidence'] * 100:.0f}% confidence)"
    )
    lines.append("")
    lines.append(
        f"Stats: {stats['findings']} findings, {stats['unknowns_resolved']} resolved, "
        f"{stats['unknowns_open']} open, {stats['dead_ends']} dead ends"
    )
    return "\n".join(lines)


def render_matches(kind: str, matches: Sequence[dict[str, Any]]) -> str:
    lines = [f"Multiple {kind}s match. Use --id to specify:"]
    for m in matches:
        icon = STATUS_ICONS.get(m.get("status", ""), BULLET)
        lines.append(f"  {icon} {m['text']} (id: {m['id'][:8]})")
    return "\n".join(lines)


def render_query(project_name: str, result: dict[str, Any]) -> str:
    lines = [f"Knowledge Base: {project_name}", RULE]

    if "findings" in result:
        search = result.get("search")
        title = f'FINDINGS matching "{search}"' if search else "FINDINGS"
        lines.append("")
        lines.append(f"{ICON_FRESH} {title} ({len(result['findings'])}):")
        if not result["findings"]:
            lines.append("  (none)")
        for f in result["findings"]:
            extra = ""
            if f["status"] == "aging":
                extra = f" [{f['days_old']}d]"
            elif f["status"] == "stale":
                extra = f" [stale: {f['days_old']}d]"
                if f.get("file_changed"):
                    extra += " [file changed]"
            lines.append(f"  {STATUS_ICONS[f['status']]} {f['finding']}{extra}")
            if f.get("scope"):
                lines.append(f"    scope: {f['scope']}")

    if "unknowns" in result:
        lines.append("")
        lines.append(f"? OPEN QUESTIONS ({len(result['unknowns'])}):")
        if not result["unknowns"]:
            lines.append("  (none)")
        for u in result["unknowns"]:
            lines.append(f"  {BULLET} {u['unknown']}")
            if u.get("scope"):
                lines.append(f"    scope: {u['scope']}")

    if "dead_ends" in result:
        lines.append("")
        lines.append(f"{ICON_FAILED} DEAD ENDS ({len(result['dead_ends'])}):")
        if not result["dead_ends"]:
            lines.append("  (none)")
        for d in result["dead_ends"]:
            lines.append(f"  {BULLET} {d['approach']}")
            lines.append(f"    Why: {d['why_failed']}")
            if d.get("scope"):
                lines.append(f"    scope: {d['scope']}")

    return "\n".join(lines)


def render_fuzzy(query: str, results: Sequence[SearchResult]) -> str:
    labels = {
        "finding": (ICON_FRESH, "FINDING"),
        "unknown": ("?", "QUESTION"),
        "dead_end": (ICON_FAILED, "DEAD END"),
    }
    lines = [f'Fuzzy Search: "{query}"', RULE]
    if not results:
        lines.append("No matches found.")
        return "\n".join(lines)

    lines.append("")
    lines.append(f"Found {len(results)} match(es):")
    for r in results:
        icon, label = labels.get(r.kind, (BULLET, r.kind.upper()))
        stars = max(1, min(5, int(r.score * 5)))
        lines.append("")
        lines.append(f"  {icon} [{label}] {'★' * stars}{'☆' * (5 - stars)}")
        lines.append(f"    {r.text}")
        if r.secondary_text:
            lines.append(f"    Why: {r.secondary_text}")
        if r.scope:
            lines.append(f"    scope: {r.scope}")
    return "\n".join(lines)
