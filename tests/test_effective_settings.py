"""Tests for effective settings resolution."""

import pytest

from baseline_engine.capabilities.evaluator import evaluate
from baseline_engine.modules import REGISTRY
from baseline_engine.policy.effective_settings import RULES, get_path, resolve, rules_for_module, set_path


def _resolve(config, snapshot):
    return resolve(config, evaluate(REGISTRY, snapshot, config), snapshot)


class TestRules:
    def test_sorted_by_path(self):
        paths = [rule.path for rule in RULES]
        assert paths == sorted(paths)

    def test_rules_for_module(self):
        assert [r.capability for r in rules_for_module("core-security")] == ["code_scanning", "dependency_review"]
        assert rules_for_module("core-planning") == []


class TestPaths:
    def test_get_nested(self):
        assert get_path({"a": {"b": {"c": 1}}}, "a.b.c") == 1

    @pytest.mark.parametrize("data", [{}, {"a": 1}, {"a": {"x": 1}}])
    def test_get_missing_returns_default(self, data):
        assert get_path(data, "a.b", "fallback") == "fallback"

    def test_set_creates_parents(self):
        data = {"a": 1}
        set_path(data, "a.b.c", True)
        assert data == {"a": {"b": {"c": True}}}


class TestResolve:
    def test_no_overrides_when_everything_available(self, make_config, make_snapshot, all_supported):
        config = make_config(modules=["core-governance", "core-ci", "core-deployments", "core-planning", "core-security"])
        effective = _resolve(config, make_snapshot(all_supported))
        assert effective.overrides == []
        assert effective.config == config

    def test_unsupported_capability_forces_value(self, make_config, make_snapshot, all_supported):
        config = make_config(modules=["core-ci"])
        effective = _resolve(config, make_snapshot({**all_supported, "merge_queue": False}))
        override = effective.override_for("ci.full_lane_triggers.merge_queue")
        assert override["from"] is True
        assert override["to"] is False
        assert override["capability"] == "merge_queue"
        assert override["cause"] == "capability_auto_degrade"
        assert "unsupported" in override["reason"]
        assert effective.config.ci.full_lane_triggers.merge_queue is False
        assert config.ci.full_lane_triggers.merge_queue is True

    def test_disabled_module_forces_value(self, make_config, make_snapshot, all_supported):
        config = make_config(modules=["core-governance", "core-ci", "core-planning"])
        effective = _resolve(config, make_snapshot(all_supported))
        override = effective.override_for("deployments.require_environment_reviewers")
        assert override["reason"] == "module core-deployments is disabled in config"
        assert effective.config.deployments.require_environment_reviewers is False

    def test_disable_strategy_forces_sibling_setting(self, make_config, make_snapshot, all_supported):
        config = make_config(modules=["core-security"])
        effective = _resolve(config, make_snapshot({**all_supported, "code_scanning": False}))
        dependency = effective.override_for("security.dependency_review")
        assert dependency["reason"] == "module core-security is disabled by its degrade strategy"
        assert effective.override_for("security.code_scanning")["capability"] == "code_scanning"

    def test_user_opt_out_is_not_an_override(self, make_config, make_snapshot, all_supported):
        config = make_config(modules=["core-ci"], ci={"full_lane_triggers": {"merge_queue": False}})
        effective = _resolve(config, make_snapshot({**all_supported, "merge_queue": False}))
        assert effective.override_for("ci.full_lane_triggers.merge_queue") is None

    def test_overrides_sorted_by_key(self, make_config, make_snapshot):
        config = make_config(modules=["core-ci", "core-deployments", "core-security"])
        effective = _resolve(config, make_snapshot({}))
        keys = [o["key"] for o in effective.overrides]
        assert keys == sorted(keys)
        assert len(keys) == len(RULES)

    def test_idempotent(self, make_config, make_snapshot):
        config = make_config(modules=["core-ci", "core-deployments"])
        snapshot = make_snapshot({})
        first = _resolve(config, snapshot)
        second = _resolve(first.config, snapshot)
        assert second.overrides == []
        assert second.config == first.config

    def test_to_dict(self, make_config, make_snapshot):
        effective = _resolve(make_config(modules=["core-ci"]), make_snapshot({}))
        data = effective.to_dict()
        assert data["override_count"] == len(data["overrides"])
        assert set(data["by_path"]) == {o["key"] for o in data["overrides"]}
        assert data["config"]["ci"]["full_lane_triggers"]["merge_queue"] is False
