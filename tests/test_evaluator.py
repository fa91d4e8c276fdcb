"""Tests for the capability evaluator."""

import pytest

from baseline_engine.capabilities.evaluator import evaluate, resolve_capability_requirements
from baseline_engine.modules import REGISTRY, get_module
from baseline_engine.modules.base import CapabilityRequirements, ManagedFile, ModuleDefinition


def _custom(module_id, requires, strategy):
    return ModuleDefinition(
        id=module_id,
        description="test module",
        requirements=CapabilityRequirements(requires=tuple(requires), degrade_strategy=strategy),
        generate=lambda inp: [ManagedFile.text(f"{module_id}.txt", module_id, "x\n")],
    )


class TestRequirements:
    def test_pass_through(self):
        module = get_module("core-ci")
        req = resolve_capability_requirements(module)
        assert req == {
            "requires": ["merge_queue"],
            "degrade_strategy": "warn",
            "remediation": dict(module.requirements.remediation),
        }

    def test_recomputed_each_call(self):
        module = get_module("core-governance")
        first = resolve_capability_requirements(module)
        first["requires"].append("environments")
        assert resolve_capability_requirements(module)["requires"] == ["rulesets"]

    def test_invalid_strategy_rejected(self):
        with pytest.raises(ValueError):
            CapabilityRequirements(requires=("rulesets",), degrade_strategy="ignore")


class TestEvaluate:
    def test_all_supported(self, make_config, make_snapshot, all_supported):
        result = evaluate(REGISTRY, make_snapshot(all_supported), make_config())
        assert result.missing_required_capabilities == []
        assert result.capability_degraded_modules == []
        assert result.required_capabilities == ["environments", "merge_queue", "rulesets"]
        assert result.active_modules == ["core-governance", "core-ci", "core-deployments", "core-planning"]

    def test_warn_module_degrades_but_generates(self, make_config, make_snapshot, all_supported):
        result = evaluate(REGISTRY, make_snapshot({**all_supported, "merge_queue": False}), make_config())
        ci = result.get("core-ci")
        assert ci.degraded
        assert ci.generates
        assert ci.missing_ids == ["merge_queue"]
        assert [m.id for m in result.capability_degraded_modules] == ["core-ci"]
        assert result.missing_required_capabilities == ["merge_queue"]
        assert result.errors == []

    def test_disabled_module_contributes_nothing(self, make_config, make_snapshot, all_supported):
        config = make_config(modules=["core-governance", "core-ci", "core-planning"])
        result = evaluate(REGISTRY, make_snapshot({**all_supported, "environments": False}), config)
        deployments = result.get("core-deployments")
        assert not deployments.enabled
        assert not deployments.degraded
        assert "environments" not in result.missing_required_capabilities
        assert "environments" not in result.required_capabilities
        assert "core-deployments" not in result.active_modules

    def test_absent_capability_counts_as_missing(self, make_config):
        from baseline_engine.capabilities.snapshot import parse_snapshot

        result = evaluate(REGISTRY, parse_snapshot({"capabilities": {}}), make_config())
        assert result.missing_required_capabilities == ["environments", "merge_queue", "rulesets"]
        assert all(m.state == "unknown" for m in result.get("core-ci").missing)

    def test_opted_out_feature_is_not_required(self, make_config, make_snapshot, all_supported):
        config = make_config(ci={"full_lane_triggers": {"merge_queue": False}})
        result = evaluate(REGISTRY, make_snapshot({**all_supported, "merge_queue": False}), config)
        assert result.get("core-ci").requires == []
        assert not result.get("core-ci").degraded
        assert "merge_queue" not in result.missing_required_capabilities

    def test_disable_strategy_drops_module(self, make_config, make_snapshot, all_supported):
        config = make_config(modules=["core-ci", "core-security"])
        result = evaluate(REGISTRY, make_snapshot({**all_supported, "code_scanning": False}), config)
        security = result.get("core-security")
        assert security.skipped
        assert not security.generates
        assert "code_scanning" not in result.missing_required_capabilities
        assert "core-security" not in result.active_modules
        assert any("core-security: disabled" in w for w in result.warnings)

    def test_fail_strategy_blocks(self, make_config, make_snapshot, all_supported):
        strict = _custom("core-planning", ["repo_variables"], "fail")
        result = evaluate([strict], make_snapshot({"repo_variables": False}), make_config())
        assert result.get("core-planning").hard_error
        assert result.errors == ["core-planning: required capabilities unavailable (repo_variables)"]
        assert result.missing_required_capabilities == ["repo_variables"]

    def test_remediation_attached(self, make_config, make_snapshot, all_supported):
        result = evaluate(REGISTRY, make_snapshot({**all_supported, "rulesets": False}), make_config())
        missing = result.get("core-governance").missing[0]
        assert missing.capability == "rulesets"
        assert missing.remediation == get_module("core-governance").requirements.remediation["rulesets"]


class TestGithubApp:
    def test_flagged_missing_capability(self, make_config, make_snapshot, all_supported):
        snapshot = make_snapshot({**all_supported, "rulesets": False}, rulesets=True)
        result = evaluate(REGISTRY, snapshot, make_config(policy={"require_github_app": True}))
        app = result.github_app
        assert app["required_for_full_feature_set"] is True
        assert app["policy_requires_app"] is True
        assert app["effective_required"] is True
        assert app["capabilities"] == ["rulesets"]

    def test_flagged_but_supported(self, make_config, make_snapshot, all_supported):
        snapshot = make_snapshot(all_supported, rulesets=True)
        result = evaluate(REGISTRY, snapshot, make_config(policy={"require_github_app": True}))
        assert result.github_app["required_for_full_feature_set"] is False
        assert result.github_app["effective_required"] is False

    def test_policy_off(self, make_config, make_snapshot, all_supported):
        snapshot = make_snapshot({**all_supported, "rulesets": False}, rulesets=True)
        result = evaluate(REGISTRY, snapshot, make_config())
        assert result.github_app["required_for_full_feature_set"] is True
        assert result.github_app["effective_required"] is False

    def test_app_capability_unsupported_with_gaps(self, make_config, make_snapshot, all_supported):
        snapshot = make_snapshot({**all_supported, "merge_queue": False, "github_app_required": False})
        result = evaluate(REGISTRY, snapshot, make_config())
        assert result.github_app["required_for_full_feature_set"] is True

    def test_disabled_module_gaps_do_not_require_app(self, make_config, make_snapshot, all_supported):
        snapshot = make_snapshot({**all_supported, "environments": False}, environments=True)
        config = make_config(modules=["core-ci"], policy={"require_github_app": True})
        result = evaluate(REGISTRY, snapshot, config)
        assert result.github_app["effective_required"] is False
