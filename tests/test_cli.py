"""Tests for the baseline-engine CLI (cli.py).

Covers:
- Parser construction and --help for every command
- JSON and text output
- Exit codes for policy violations, drift and missing config
"""

import argparse
import json

import pytest

from baseline_engine.catalog import ENGINE_VERSION
from baseline_engine.cli import build_parser, main
from baseline_engine.store.state import EngineState, save_state

COMMANDS = ["init", "diff", "apply", "upgrade", "doctor", "verify"]


# ── Parser construction ──────────────────────────────────────────


class TestParser:
    def test_build_parser_returns_parser(self):
        assert isinstance(build_parser(), argparse.ArgumentParser)

    def test_no_args_shows_help(self, capsys):
        assert main([]) == 0
        assert "baseline-engine" in capsys.readouterr().out

    @pytest.mark.parametrize("cmd", [["--help"]] + [[c, "--help"] for c in COMMANDS])
    def test_help_exits_zero(self, cmd, capsys):
        with pytest.raises(SystemExit) as exc:
            main(cmd)
        assert exc.value.code == 0

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            main(["--version"])
        assert ENGINE_VERSION in capsys.readouterr().out

    def test_common_flags_on_every_command(self):
        parser = build_parser()
        for cmd in COMMANDS:
            args = parser.parse_args([cmd, "--target", "/tmp/x", "--json", "-v"])
            assert args.target == "/tmp/x"
            assert args.json and args.verbose

    def test_invalid_profile_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["init", "--profile", "lax"])


# ── Commands ─────────────────────────────────────────────────────


class TestCommands:
    def test_init_json(self, target, capsys):
        rc = main(["init", "--target", str(target.path), "--json"])
        assert rc == 0
        data = json.loads(capsys.readouterr().out)
        assert data["command"] == "init"
        assert data["config_created"] is True
        assert data["written_files"] > 0

    def test_init_text(self, target, capsys):
        assert main(["init", "--target", str(target.path)]) == 0
        assert "Initialized baseline-engine" in capsys.readouterr().out

    def test_target_from_environment(self, target, monkeypatch, capsys):
        monkeypatch.setenv("BASELINE_TARGET_DIR", str(target.path))
        assert main(["init"]) == 0
        assert target.config_path.is_file()

    def test_diff_after_init(self, initialized, capsys):
        assert main(["diff", "--target", str(initialized.path), "--json"]) == 0
        assert json.loads(capsys.readouterr().out)["change_count"] == 0

    def test_apply_direct(self, initialized, update_config, capsys):
        update_config(initialized, ci={"node_version": "20"})
        assert main(["apply", "--target", str(initialized.path), "--direct", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["apply_mode"] == "direct"
        assert data["written_files"] >= 1

    def test_doctor_passes(self, initialized, capsys):
        assert main(["doctor", "--target", str(initialized.path)]) == 0
        assert "Result: PASS" in capsys.readouterr().out

    def test_verify_passes(self, initialized, capsys):
        assert main(["verify", "--target", str(initialized.path)]) == 0

    def test_upgrade_report(self, initialized, capsys):
        save_state(initialized, EngineState(installed_version="2.2.0"))
        assert main(["upgrade", "--target", str(initialized.path), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["applied"] is False
        assert [m["version"] for m in data["pending_migrations"]] == ["2.3.0"]

    def test_upgrade_apply(self, initialized, capsys):
        save_state(initialized, EngineState(installed_version="2.2.0"))
        assert main(["upgrade", "--target", str(initialized.path), "--apply", "--json"]) == 0
        assert json.loads(capsys.readouterr().out)["installed_version"] == ENGINE_VERSION


# ── Errors ───────────────────────────────────────────────────────


class TestErrors:
    def test_missing_config(self, target, capsys):
        assert main(["diff", "--target", str(target.path)]) == 1
        err = capsys.readouterr().err
        assert err.startswith("[baseline-engine] ConfigError:")
        assert "baseline-engine init" in err

    def test_doctor_gate_failure(self, initialized, update_config, capsys):
        update_config(initialized, policy={"require_pinned_action_refs": True})
        assert main(["doctor", "--target", str(initialized.path), "--json"]) == 1
        captured = capsys.readouterr()
        assert json.loads(captured.out)["policy_violations"]
        assert "[baseline-engine] PolicyViolation:" in captured.err

    def test_verify_drift(self, initialized, capsys):
        (initialized.path / ".github/workflows/baseline-pr-gate.yml").write_text("edited\n")
        assert main(["verify", "--target", str(initialized.path)]) == 1
        err = capsys.readouterr().err
        assert "ManifestDriftError" in err
        assert "modified on disk" in err

    def test_apply_blocked_by_lifecycle(self, initialized, capsys):
        save_state(initialized, EngineState(installed_version="2.2.0"))
        assert main(["apply", "--target", str(initialized.path), "--direct"]) == 1
        assert "LifecycleError" in capsys.readouterr().err

    def test_invalid_snapshot(self, initialized, capsys):
        initialized.capabilities_path.write_text("{not json")
        assert main(["doctor", "--target", str(initialized.path)]) == 1
        assert "CapabilitySnapshotInvalid" in capsys.readouterr().err
