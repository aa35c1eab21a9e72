"""
End-to-end integration tests for a full epimem session.

Each test drives epimem.cli.main in a throwaway project directory with its
own `.epimem/` database. git is replaced by an in-memory hash table so
file-change detection is deterministic.
"""

import json

import pytest

pytestmark = pytest.mark.integration


@pytest.fixture
def started(run_cli, workspace):
    """A started session with a scoped finding, a plain finding, two questions and a dead end."""
    _, hashes = workspace
    hashes["src/auth.py"] = "h1"

    code, out, _ = run_cli("start", "Implement user authentication")
    assert code == 0
    run_cli("learned", "Auth uses JWT with 15min expiry", "--scope", "src/auth.py")
    run_cli("learned", "Refresh tokens rotate on use")
    run_cli("uncertain", "Where are tokens revoked?")
    run_cli("uncertain", "Rate limits per user?")
    run_cli("tried", "localStorage for tokens", "XSS vulnerability", "--scope", "web/")
    return out


class TestSessionLifecycle:
    def test_start_payload(self, started):
        assert started["status"] == "started"
        context = started["context"]
        assert context["objective"] == "Implement user authentication"
        assert context["decision"]["action"] == "proceed"
        assert context["decision"]["ready_to_proceed"] is True
        assert "continuity" not in context

    def test_learned_captures_hash(self, run_cli, workspace):
        _, hashes = workspace
        hashes["lib.py"] = "abc"
        run_cli("start", "Objective")
        code, out, _ = run_cli("learned", "lib exports one function", "--scope", "lib.py")
        assert code == 0
        assert out == {
            "status": "logged",
            "type": "finding",
            "id": out["id"],
            "finding": "lib exports one function",
            "scope": "lib.py",
            "git_hash": "abc",
        }

    def test_status_counts(self, run_cli, started):
        code, out, _ = run_cli("status")
        assert code == 0
        assert out["status"] == "active"
        assert out["counts"] == {
            "findings": 2,
            "findings_fresh": 2,
            "findings_aging": 0,
            "findings_stale": 0,
            "unknowns_open": 2,
            "dead_ends": 1,
        }
        assert out["context"]["open_questions"] == [
            "Rate limits per user?",
            "Where are tokens revoked?",
        ]

    def test_done_then_continuity(self, run_cli, started):
        run_cli("resolved", "revoked", "--by", "Found the revoke endpoint")

        code, out, _ = run_cli("done", "JWT auth with refresh tokens", "--next", "Add rate limiting")
        assert code == 0
        assert out["status"] == "completed"
        assert out["stats"] == {
            "findings": 2,
            "unknowns_resolved": 1,
            "unknowns_open": 1,
            "dead_ends": 1,
        }
        assert out["epistemic_state"]["know"] == pytest.approx(0.85)
        assert out["delta"]["know"] == pytest.approx(0.35)
        assert out["delta"]["uncertainty"] == pytest.approx(0.0)

        assert run_cli("status")[1]["status"] == "no_session"
        code, _, err = run_cli("learned", "after done")
        assert code == 1

        code, out, _ = run_cli("start", "Add rate limiting")
        continuity = out["context"]["continuity"]
        assert continuity["summary"] == "JWT auth with refresh tokens"
        assert continuity["recommendations"] == "Add rate limiting"
        assert set(continuity["highlights"]) == {
            "Auth uses JWT with 15min expiry",
            "Refresh tokens rotate on use",
        }
        assert continuity["time_since_last_session"].endswith("minutes ago")
        # breadcrumbs are project-wide, so the new session sees them
        assert len(out["context"]["knowledge"]) == 2

    def test_restart_replaces_active_session(self, run_cli, started):
        first = run_cli("status")[1]["context"]["session_id"]
        run_cli("start", "Something else")
        second = run_cli("status")[1]["context"]
        assert second["session_id"] != first
        assert second["objective"] == "Something else"


class TestResolveAndVerify:
    def test_resolve_by_text(self, run_cli, started):
        code, out, _ = run_cli("resolved", "revoked", "--by", "Found it")
        assert code == 0
        assert out["status"] == "resolved"
        assert out["unknown"] == "Where are tokens revoked?"
        assert out["resolved_by"] == "Found it"

        code, _, err = run_cli("resolved", "revoked")
        assert code == 1
        assert json.loads(err)["error"] == "open unknown not found: revoked"

    def test_resolve_ambiguous(self, run_cli, started):
        code, out, _ = run_cli("resolved", "r")
        assert code == 0
        assert out["status"] == "multiple_matches"
        assert len(out["matches"]) == 2

    def test_resolve_by_id_prefix(self, run_cli, started):
        unknown_id = run_cli("uncertain", "Which cookie flags?")[1]["id"]
        code, out, _ = run_cli("resolved", "--id", unknown_id[:8])
        assert code == 0
        assert out["id"] == unknown_id
        assert out["resolved_by"] == "claude-code"

    def test_file_change_detected_and_cleared_by_verify(self, run_cli, workspace, started):
        _, hashes = workspace
        hashes["src/auth.py"] = "h2"

        findings = run_cli("query")[1]["findings"]
        scoped = next(f for f in findings if f.get("scope") == "src/auth.py")
        assert scoped["file_changed"] is True
        assert scoped["status"] == "aging"
        assert scoped["confidence"] == pytest.approx(0.5, abs=0.01)

        code, out, _ = run_cli("verify", "JWT")
        assert code == 0
        assert out["status"] == "verified"
        assert out["updated"] is False
        assert out["git_hash"] == "h2"

        findings = run_cli("query")[1]["findings"]
        scoped = next(f for f in findings if f.get("scope") == "src/auth.py")
        assert scoped["file_changed"] is False
        assert scoped["status"] == "fresh"

    def test_verify_with_update(self, run_cli, started):
        code, out, _ = run_cli("verify", "Refresh tokens", "--update", "Refresh tokens rotate; reuse revokes the family")
        assert code == 0
        assert out["updated"] is True
        assert out["finding"] == "Refresh tokens rotate; reuse revokes the family"
        assert "git_hash" not in out

    def test_verify_ambiguous(self, run_cli, started):
        code, out, _ = run_cli("verify", "e")
        assert code == 0
        assert out["status"] == "multiple_matches"
        assert out["message"] == "Multiple findings match. Use --id to specify."
        assert {m["status"] for m in out["matches"]} == {"fresh"}


class TestQuery:
    def test_default_shows_findings_only(self, run_cli, started):
        code, out, _ = run_cli("query")
        assert code == 0
        assert out["findings_count"] == 2
        assert "unknowns" not in out
        assert "dead_ends" not in out

    def test_unknowns_only(self, run_cli, started):
        out = run_cli("query", "-u")[1]
        assert out["unknowns_count"] == 2
        assert "findings" not in out

    def test_all(self, run_cli, started):
        out = run_cli("query", "-a")[1]
        assert out["findings_count"] == 2
        assert out["unknowns_count"] == 2
        assert out["dead_ends"][0] == {
            "id": out["dead_ends"][0]["id"],
            "approach": "localStorage for tokens",
            "why_failed": "XSS vulnerability",
            "scope": "web/",
        }

    def test_text_search(self, run_cli, started):
        out = run_cli("query", "jwt")[1]
        assert out["search"] == "jwt"
        assert [f["finding"] for f in out["findings"]] == ["Auth uses JWT with 15min expiry"]

    def test_fuzzy(self, run_cli, started):
        out = run_cli("query", "jwt", "-f")[1]
        assert out["query"] == "jwt"
        assert out["count"] == 1
        hit = out["results"][0]
        assert hit["type"] == "finding"
        assert hit["score"] == 1.0
        assert hit["scope"] == "src/auth.py"

    def test_fuzzy_secondary_text(self, run_cli, started):
        out = run_cli("query", "xss", "-f", "-a")[1]
        assert out["count"] == 1
        hit = out["results"][0]
        assert hit["type"] == "dead_end"
        assert hit["secondary_text"] == "XSS vulnerability"
        assert hit["score"] == pytest.approx(0.6)

    def test_fuzzy_limit(self, run_cli, started):
        out = run_cli("query", "tokens", "-f", "-a", "-n", "1")[1]
        assert out["count"] == 1


class TestMistakesGoalsAssessments:
    def test_mistake(self, run_cli, started):
        code, out, _ = run_cli(
            "mistake",
            "Edited generated file",
            "Overwritten on build",
            "--root-cause",
            "CONTEXT",
            "--prevention",
            "Check file headers",
        )
        assert code == 0
        assert out["type"] == "mistake"
        assert out["root_cause_vector"] == "CONTEXT"

    def test_goal_lifecycle(self, run_cli, started):
        code, out, _ = run_cli("goal", "add", "Add refresh tokens", "--breadth", "0.6")
        assert code == 0
        goal_id = out["id"]
        assert out["scope"]["breadth"] == 0.6

        goals = run_cli("goal", "list")[1]["goals"]
        assert goals == [
            {"id": goal_id, "objective": "Add refresh tokens", "status": "in_progress", "current": True}
        ]

        code, out, _ = run_cli("goal", "done", goal_id[:8])
        assert code == 0
        assert out["id"] == goal_id

        assert run_cli("goal", "list")[1]["count"] == 0
        all_goals = run_cli("goal", "list", "--all")[1]["goals"]
        assert all_goals[0]["status"] == "complete"
        assert all_goals[0]["current"] is False

    def test_goal_done_unknown(self, run_cli, started):
        code, _, err = run_cli("goal", "done", "zzzz")
        assert code == 1
        assert json.loads(err)["error"] == "goal not found: zzzz"

    def test_assess_postflight_delta(self, run_cli, started):
        pre = {"engagement": 0.7, "know": 0.4, "do": 0.5, "context": 0.5, "uncertainty": 0.6}
        post = dict(pre, know=0.8, uncertainty=0.2)

        code, out, _ = run_cli("assess", "preflight", "--vectors", json.dumps(pre))
        assert code == 0
        assert out["phase"] == "PREFLIGHT"
        assert "delta" not in out

        code, out, _ = run_cli(
            "assess", "postflight", "--vectors", json.dumps(post), "--reasoning", "read the code"
        )
        assert code == 0
        assert out["delta"]["know"] == pytest.approx(0.4)
        assert out["delta"]["uncertainty"] == pytest.approx(-0.4)
        assert out["confidence_gain"] > 0
        assert set(out["tiers"]) == {"foundation", "comprehension", "execution"}


class TestTextOutput:
    def test_start_and_status_text(self, run_cli, workspace):
        code, out, _ = run_cli("start", "Implement auth", text=True)
        assert code == 0
        assert out.startswith("Session started: Implement auth")
        assert "PROCEED" in out

        run_cli("learned", "Auth uses JWT")
        out = run_cli("status", text=True)[1]
        assert "Vectors:" in out
        assert "KNOWN (1):" in out

    def test_fuzzy_text(self, run_cli, started):
        out = run_cli("query", "jwt", "-f", text=True)[1]
        assert 'Fuzzy Search: "jwt"' in out
        assert "[FINDING]" in out
        assert "★★★★★" in out

    def test_done_text(self, run_cli, started):
        out = run_cli("done", "Finished", text=True)[1]
        assert out.startswith("Session completed: Implement user authentication")
        assert "Stats: 2 findings, 0 resolved, 2 open, 1 dead ends" in out
