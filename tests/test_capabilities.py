"""Tests for the entitlement advisor and the capability snapshot loader."""

import json

import pytest

from baseline_engine.capabilities.entitlements import ENTITLEMENT_STATES, FEATURE_DOCS, evaluate_entitlements
from baseline_engine.capabilities.snapshot import load_snapshot, parse_snapshot, save_snapshot, stub_snapshot
from baseline_engine.catalog import CAPABILITY_KEYS
from baseline_engine.errors import CapabilitySnapshotInvalid, CapabilitySnapshotMissing


class TestEntitlements:
    @pytest.mark.parametrize("private", [False, None])
    def test_public_or_unknown_is_likely_supported(self, private):
        result = evaluate_entitlements("Organization", private)
        assert result["repository_visibility"] == "public_or_unknown"
        for feature in ("rulesets", "environment_required_reviewers", "custom_deployment_protection_rules"):
            row = result["by_feature"][feature]
            assert row["state"] == "likely_supported"
            assert row["remediation"] == ""

    def test_private_is_plan_dependent(self):
        result = evaluate_entitlements("User", True)
        for feature in ("rulesets", "environment_required_reviewers", "custom_deployment_protection_rules"):
            row = result["by_feature"][feature]
            assert row["state"] == "plan_dependent"
            assert row["reason"] == "private_repository"
            assert row["remediation"]

    @pytest.mark.parametrize("owner,private,state", [
        ("User", False, "unlikely_supported"),
        ("User", True, "unlikely_supported"),
        ("unknown", False, "unlikely_supported"),
        ("Organization", False, "likely_supported"),
        ("Organization", True, "plan_dependent"),
    ])
    def test_merge_queue(self, owner, private, state):
        assert evaluate_entitlements(owner, private)["by_feature"]["merge_queue"]["state"] == state

    @pytest.mark.parametrize("raw,normalized", [
        ("organization", "Organization"),
        ("  ORGANIZATION ", "Organization"),
        ("user", "User"),
        ("bot", "unknown"),
        (None, "unknown"),
    ])
    def test_owner_type_normalized(self, raw, normalized):
        assert evaluate_entitlements(raw, False)["owner_type"] == normalized

    def test_rows_carry_docs(self):
        result = evaluate_entitlements("Organization", True)
        assert result["feature_count"] == 4
        for row in result["features"]:
            assert row["docs_url"] == FEATURE_DOCS[row["feature"]]
            assert row["state"] in ENTITLEMENT_STATES

    def test_deterministic(self):
        assert evaluate_entitlements("User", True) == evaluate_entitlements("user", True)


class TestStubSnapshot:
    def test_every_capability_unprobed(self):
        data = stub_snapshot()
        assert set(data["capabilities"]) == set(CAPABILITY_KEYS)
        for key, entry in data["capabilities"].items():
            if key == "github_app_required":
                assert entry["supported"] is True
                assert entry["reason"] == "feature_dependent"
            else:
                assert entry == {**entry, "supported": False, "state": "unknown", "reason": "unprobed"}

    def test_annotated_with_entitlements(self):
        data = stub_snapshot("User", True)
        assert data["capabilities"]["merge_queue"]["entitlement"]["state"] == "unlikely_supported"
        assert data["capabilities"]["environments"]["entitlement"]["state"] == "plan_dependent"
        assert any(w.startswith("merge_queue:") for w in data["warnings"])

    def test_stub_parses(self):
        snapshot = parse_snapshot(stub_snapshot("Organization", False))
        assert snapshot.owner_type == "Organization"
        assert snapshot.private is False
        assert snapshot.warnings == []


class TestLoadSnapshot:
    def test_missing(self, target):
        with pytest.raises(CapabilitySnapshotMissing):
            load_snapshot(target)

    def test_invalid_json(self, target):
        target.capabilities_path.parent.mkdir(parents=True)
        target.capabilities_path.write_text("{not json")
        with pytest.raises(CapabilitySnapshotInvalid, match="invalid JSON"):
            load_snapshot(target)

    @pytest.mark.parametrize("data,fragment", [
        ([], "expected a JSON object"),
        ({"capabilities": []}, "capabilities: expected an object"),
        ({"capabilities": {"rulesets": True}}, "capabilities.rulesets"),
        ({"capabilities": {"rulesets": {"supported": "yes"}}}, "supported: expected a boolean"),
        ({"capabilities": {"rulesets": {"supported": False, "state": "maybe"}}}, "invalid value 'maybe'"),
        ({"capabilities": {"rulesets": {"supported": True, "state": "unsupported"}}}, "contradicts"),
        ({"warnings": "none"}, "warnings: expected a list"),
        ({"collaborators": 3}, "collaborators: expected an object"),
    ])
    def test_malformed(self, target, data, fragment):
        target.capabilities_path.parent.mkdir(parents=True)
        target.capabilities_path.write_text(json.dumps(data))
        with pytest.raises(CapabilitySnapshotInvalid) as exc:
            load_snapshot(target)
        assert fragment in str(exc.value)

    def test_absent_capability_is_unknown(self, target):
        save_snapshot(target, {"capabilities": {"rulesets": {"supported": True, "state": "supported"}}})
        snapshot = load_snapshot(target)
        assert snapshot.is_supported("rulesets")
        missing = snapshot.get("merge_queue")
        assert missing.state == "unknown"
        assert missing.supported is False

    def test_maintainer_count(self, target):
        save_snapshot(target, {"collaborators": {"maintainer_count": 4}})
        assert load_snapshot(target).maintainer_count == 4

    def test_capability_matrix_lists_catalog_keys(self, make_snapshot):
        matrix = make_snapshot({"rulesets": True}).capability_matrix()
        assert list(matrix)[: len(CAPABILITY_KEYS)] == list(CAPABILITY_KEYS)
        assert matrix["rulesets"]["supported"] is True
