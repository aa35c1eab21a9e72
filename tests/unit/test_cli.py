"""
Unit tests for CLI argument handling, output modes and error mapping.
"""

import json

import pytest

from epimem import __version__
from epimem.cli import build_parser, main


class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_global_options_before_and_after_command(self):
        parser = build_parser()
        before = parser.parse_args(["--text", "status"])
        after = parser.parse_args(["status", "--text"])
        assert before.text_output and after.text_output

    def test_suppressed_defaults_absent(self):
        args = build_parser().parse_args(["status"])
        assert not hasattr(args, "text_output")
        assert not hasattr(args, "db")

    def test_output_flag_does_not_clobber_positional_text(self):
        args = build_parser().parse_args(["learned", "Auth uses JWT", "--text"])
        assert args.text == "Auth uses JWT"
        assert args.text_output is True

    def test_impact_range_checked(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["learned", "x", "--impact", "1.5"])

    def test_query_flags(self):
        args = build_parser().parse_args(["query", "jwt", "-f", "-t", "0.5", "-n", "3", "-a"])
        assert args.search == "jwt"
        assert args.fuzzy and args.all
        assert args.threshold == 0.5
        assert args.limit == 3

    def test_assess_phase_case_insensitive(self):
        args = build_parser().parse_args(["assess", "PREFLIGHT", "--vectors", "{}"])
        assert args.phase == "preflight"

    def test_goal_subcommands(self):
        args = build_parser().parse_args(["goal", "add", "Ship it", "--breadth", "0.6"])
        assert args.objective == "Ship it"
        assert args.breadth == 0.6


class TestOutputModes:
    def test_version_json(self, run_cli):
        code, out, _ = run_cli("version")
        assert code == 0
        assert out == {"version": __version__}

    def test_version_text(self, run_cli):
        code, out, _ = run_cli("version", text=True)
        assert out.strip() == f"epimem {__version__}"

    def test_status_without_session(self, run_cli):
        code, out, _ = run_cli("status")
        assert code == 0
        assert out["status"] == "no_session"
        assert "epimem start" in out["message"]
        assert "context" not in out

    def test_breadcrumb_commands_default_to_json(self, run_cli):
        run_cli("start", "Objective")
        code, out, _ = run_cli("learned", "Auth uses JWT")
        assert code == 0
        assert out["type"] == "finding"
        assert out["finding"] == "Auth uses JWT"

        code, out, _ = run_cli("uncertain", "Where are tokens revoked?")
        assert out["type"] == "unknown"

    def test_text_flag_keeps_finding_text(self, run_cli):
        run_cli("start", "Objective")
        code, out, _ = run_cli("learned", "Auth uses JWT", text=True)
        assert code == 0
        assert out.startswith("✓ Learned: Auth uses JWT")

        code, out, _ = run_cli("verify", "JWT", text=True)
        assert code == 0
        assert "Verified: Auth uses JWT" in out


class TestGoalPrefix:
    def test_ambiguous_prefix_lists_candidates(self, run_cli, monkeypatch):
        run_cli("start", "Objective")
        ids = iter(["goal-aaaa-1", "goal-aaaa-2"])
        monkeypatch.setattr("epimem.store.new_id", lambda: next(ids))
        run_cli("goal", "add", "First goal")
        run_cli("goal", "add", "Second goal")

        code, out, _ = run_cli("goal", "done", "goal-aaaa")
        assert code == 0
        assert out["status"] == "multiple_matches"
        assert {m["id"] for m in out["matches"]} == {"goal-aaaa-1", "goal-aaaa-2"}
        assert run_cli("goal", "list")[1]["count"] == 2

        code, out, _ = run_cli("goal", "done", "goal-aaaa-2")
        assert out["status"] == "completed"
        assert out["objective"] == "Second goal"


class TestErrors:
    """EpimemError and ValueError map to exit 1 with a message on stderr."""

    def test_no_active_session_json(self, run_cli):
        code, out, err = run_cli("learned", "something")
        assert code == 1
        assert out == ""
        payload = json.loads(err)
        assert payload["status"] == "error"
        assert payload["error"].startswith("No active session")

    def test_no_active_session_text(self, run_cli):
        code, _, err = run_cli("uncertain", "something", text=True)
        assert code == 1
        assert err.startswith("Error: No active session")

    def test_verify_requires_text_or_id(self, run_cli):
        code, _, err = run_cli("verify")
        assert code == 1
        assert "--id" in json.loads(err)["error"]

    def test_verify_not_found(self, run_cli):
        code, _, err = run_cli("verify", "nothing like this")
        assert code == 1
        assert json.loads(err)["error"] == "finding not found: nothing like this"

    def test_invalid_vectors(self, run_cli):
        run_cli("start", "Objective")
        code, _, err = run_cli("assess", "check", "--vectors", '{"know": "high"}')
        assert code == 1
        assert "know" in json.loads(err)["error"]

    def test_vectors_must_be_object(self, run_cli):
        run_cli("start", "Objective")
        code, _, err = run_cli("assess", "check", "--vectors", "[1, 2]")
        assert code == 1
        assert "JSON object" in json.loads(err)["error"]

    def test_malformed_config(self, run_cli, workspace):
        project_dir, _ = workspace
        config = project_dir / "bad.json"
        config.write_text("{")
        code, _, err = run_cli("status", "--config", str(config))
        assert code == 1
        assert json.loads(err)["status"] == "error"


class TestExplicitPaths:
    def test_db_option(self, run_cli, workspace):
        project_dir, _ = workspace
        db_path = project_dir / "custom" / "mem.db"
        code, _, _ = run_cli("start", "Objective", "--db", str(db_path))
        assert code == 0
        assert db_path.exists()

    def test_main_accepts_argv(self, workspace, capsys):
        assert main(["version"]) == 0
        assert json.loads(capsys.readouterr().out)["version"] == __version__
