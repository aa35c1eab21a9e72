"""
Unit tests for decision guidance and finding partitioning.
"""

import pytest

from epimem.epistemic.guidance import (
    build_guidance,
    partition_findings,
    truncate_text,
    verify_command,
)
from epimem.epistemic.synthesizer import EpistemicState, synthesize_state

NOW = 1_700_000_000.0
HOUR = 3600.0


def make_state(**overrides) -> EpistemicState:
    values = dict(
        know=0.8,
        uncertainty=0.3,
        clarity=0.9,
        coherence=0.9,
        completion=0.6,
        engagement=0.9,
        confidence=0.8,
    )
    values.update(overrides)
    return EpistemicState(**values)


class TestTruncation:
    def test_short_text_unchanged(self) -> None:
        assert truncate_text("short", 30) == "short"

    def test_long_text_ellipsis(self) -> None:
        result = truncate_text("x" * 40, 30)
        assert len(result) == 30
        assert result.endswith("...")


class TestVerifyCommand:
    def test_uses_id_prefix(self, make_finding) -> None:
        finding = make_finding()
        assert verify_command(finding) == f"epimem verify --id {finding.id[:8]}"

    def test_short_id_falls_back_to_text(self, make_finding) -> None:
        finding = make_finding("A finding whose text is considerably long")
        finding.id = "abc"
        assert verify_command(finding) == 'epimem verify "A finding whose text is con..."'

    def test_custom_command_name(self, make_finding) -> None:
        assert verify_command(make_finding(), command="mem").startswith("mem verify")


class TestPartitionFindings:
    def test_split_by_tier_preserves_order(self, make_finding) -> None:
        findings = [
            make_finding("fresh one", age_days=0),
            make_finding("stale one", age_days=20),
            make_finding("aging one", age_days=10),
            make_finding("stale two", age_days=40),
        ]
        partition = partition_findings(findings, NOW)

        assert [v.finding for v in partition.requires_verification] == ["stale one", "stale two"]
        assert [k.finding for k in partition.knowledge] == ["fresh one", "aging one"]
        assert [k.status for k in partition.knowledge] == ["fresh", "aging"]
        assert partition.stale_count == 2
        assert partition.requires_verification[0].days_stale == 20

    def test_changed_file_is_flagged(self, make_finding) -> None:
        finding = make_finding(age_days=15, subject="src/auth.py", subject_hash="old")
        partition = partition_findings([finding], NOW, lambda p, h: True)
        needed = partition.requires_verification[0]
        assert needed.file_changed
        assert needed.scope == "src/auth.py"
        assert needed.verify_command.startswith("epimem verify --id ")

    def test_changed_file_confidence_is_penalized(self, make_finding) -> None:
        finding = make_finding(age_days=0, subject="src/auth.py", subject_hash="old")
        item = partition_findings([finding], NOW, lambda p, h: True).knowledge[0]
        assert item.status == "aging"
        assert item.confidence == pytest.approx(0.5)

    def test_empty(self) -> None:
        partition = partition_findings([], NOW)
        assert partition.requires_verification == []
        assert partition.knowledge == []


class TestBuildGuidance:
    """Reason and prerequisite templates per recommended action."""

    def test_proceed(self) -> None:
        state = synthesize_state([], [], [], [], NOW, NOW)
        guidance = build_guidance(state, [], [], [], now=NOW)
        assert guidance.action == "proceed"
        assert guidance.ready_to_proceed
        assert guidance.reason.startswith("Knowledge is fresh")
        assert guidance.prerequisites == []
        assert guidance.confidence == state.confidence
        assert guidance.confidence_phase == state.confidence_phase.value
        assert guidance.phase_marker == state.confidence_phase.marker

    def test_investigate_with_open_questions(self, make_unknown) -> None:
        unknowns = [make_unknown(f"q{i}") for i in range(3)]
        state = synthesize_state([], unknowns, [], [], NOW, NOW)
        guidance = build_guidance(state, [], unknowns, [], now=NOW)
        assert guidance.action == "investigate"
        assert guidance.prerequisites == ["Resolve 3 open question(s)"]

    def test_investigate_low_knowledge(self) -> None:
        guidance = build_guidance(make_state(know=0.3), [], [], [], now=NOW)
        assert guidance.action == "investigate"
        assert guidance.prerequisites == ["Log discoveries with `epimem learned`"]

    def test_verify_counts_stale(self, make_finding) -> None:
        findings = [make_finding(age_days=30), make_finding(age_days=60)]
        state = synthesize_state(findings, [], [], [], NOW, NOW)
        guidance = build_guidance(state, findings, [], [], now=NOW)
        assert guidance.action == "verify"
        assert guidance.reason.startswith("2 finding(s) may be outdated")
        assert guidance.prerequisites == ["Verify stale findings with `epimem verify`"]

    def test_reset_mentions_dead_ends(self, make_dead_end) -> None:
        dead_ends = [make_dead_end(f"a{i}") for i in range(3)]
        guidance = build_guidance(make_state(coherence=0.3), [], [], dead_ends, now=NOW)
        assert guidance.action == "reset"
        assert guidance.prerequisites == [
            "Review 3 dead end(s) to avoid repeating mistakes"
        ]

    def test_stop(self) -> None:
        guidance = build_guidance(make_state(engagement=0.2), [], [], [], now=NOW)
        assert guidance.action == "stop"
        assert not guidance.ready_to_proceed
        assert "engagement is too low" in guidance.reason
        assert guidance.prerequisites == []

    @pytest.mark.parametrize("command", ["epimem", "mem"])
    def test_command_name_in_prerequisites(self, command) -> None:
        guidance = build_guidance(make_state(know=0.3), [], [], [], now=NOW, command=command)
        assert f"`{command} learned`" in guidance.prerequisites[0]
