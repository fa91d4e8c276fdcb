"""Capability snapshot — `.baseline/capabilities/github.json`.

The snapshot is written by an external probe (or seeded as a stub by
init) and is read-only to the engine. Layout:

    {
      "repository": {"owner", "repo", "owner_type", "private", "permissions"},
      "auth": {"viewer_login", "token_scopes"},
      "collaborators": {"maintainer_count"},
      "capabilities": {"<key>": {"supported", "state", "reason", "github_app_required"?}},
      "warnings": [...],
      "runtime": {"modules": [{"id", "missing": [...]}]}
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from baseline_engine.capabilities.entitlements import evaluate_entitlements
from baseline_engine.catalog import CAPABILITY_KEYS, CAPABILITY_STATES
from baseline_engine.errors import CapabilitySnapshotInvalid, CapabilitySnapshotMissing
from baseline_engine.paths import RepoRoot
from baseline_engine.store.io import read_bytes, write_json

logger = logging.getLogger(__name__)

# Entitlement advisor feature → capability key it annotates
ADVISORY_CAPABILITIES = {
    "rulesets": "rulesets",
    "merge_queue": "merge_queue",
    "environment_required_reviewers": "environments",
}


@dataclass(frozen=True)
class Capability:
    supported: bool = False
    state: str = "unknown"
    reason: str = "absent"
    github_app_required: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"supported": self.supported, "state": self.state, "reason": self.reason}
        if self.github_app_required:
            out["github_app_required"] = True
        return out


@dataclass
class CapabilitySnapshot:
    """Parsed snapshot. Never mutated after load."""

    capabilities: dict[str, Capability] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    repository: dict[str, Any] = field(default_factory=dict)
    collaborators: dict[str, Any] = field(default_factory=dict)
    auth: dict[str, Any] = field(default_factory=dict)
    runtime: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> Capability:
        """Capability entry; keys the probe did not report read as unknown."""
        return self.capabilities.get(key) or Capability()

    def is_supported(self, key: str) -> bool:
        return self.get(key).supported

    @property
    def owner_type(self) -> str:
        return str(self.repository.get("owner_type") or "unknown")

    @property
    def private(self) -> bool | None:
        value = self.repository.get("private")
        return value if isinstance(value, bool) else None

    @property
    def maintainer_count(self) -> int:
        value = self.collaborators.get("maintainer_count", 0)
        if isinstance(value, bool) or not isinstance(value, int):
            return 0
        return max(0, value)

    def capability_matrix(self) -> dict[str, dict[str, Any]]:
        """Every known capability key, in catalog order, plus any extras."""
        keys = list(CAPABILITY_KEYS) + sorted(k for k in self.capabilities if k not in CAPABILITY_KEYS)
        return {key: self.get(key).to_dict() for key in keys}


def _parse_capability(key: str, value: Any) -> Capability:
    if not isinstance(value, dict):
        raise CapabilitySnapshotInvalid(f"capabilities.{key}: expected an object")
    supported = value.get("supported", False)
    if not isinstance(supported, bool):
        raise CapabilitySnapshotInvalid(f"capabilities.{key}.supported: expected a boolean")
    state = str(value.get("state") or ("supported" if supported else "unknown"))
    if state not in CAPABILITY_STATES:
        raise CapabilitySnapshotInvalid(
            f"capabilities.{key}.state: invalid value '{state}' (valid: {', '.join(CAPABILITY_STATES)})"
        )
    if supported != (state == "supported"):
        raise CapabilitySnapshotInvalid(
            f"capabilities.{key}: supported={supported} contradicts state '{state}'"
        )
    return Capability(
        supported=supported,
        state=state,
        reason=str(value.get("reason") or ""),
        github_app_required=value.get("github_app_required") is True,
    )


def _section(data: dict, key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise CapabilitySnapshotInvalid(f"{key}: expected an object")
    return value


def parse_snapshot(data: Any) -> CapabilitySnapshot:
    """Validate a decoded snapshot document.

    Raises:
        CapabilitySnapshotInvalid: On any malformed section or entry.
    """
    if not isinstance(data, dict):
        raise CapabilitySnapshotInvalid("snapshot: expected a JSON object")
    caps_raw = _section(data, "capabilities")
    capabilities = {str(k): _parse_capability(str(k), v) for k, v in caps_raw.items()}

    warnings = data.get("warnings") or []
    if not isinstance(warnings, list):
        raise CapabilitySnapshotInvalid("warnings: expected a list")

    return CapabilitySnapshot(
        capabilities=capabilities,
        warnings=[str(w) for w in warnings],
        repository=_section(data, "repository"),
        collaborators=_section(data, "collaborators"),
        auth=_section(data, "auth"),
        runtime=_section(data, "runtime"),
    )


def load_snapshot(root: RepoRoot) -> CapabilitySnapshot:
    """Read the capability snapshot for a target.

    Raises:
        CapabilitySnapshotMissing: If the snapshot file does not exist.
        CapabilitySnapshotInvalid: If it is not valid JSON or is malformed.
    """
    path = root.capabilities_path
    raw = read_bytes(path)
    if raw is None:
        raise CapabilitySnapshotMissing(
            f"{path} not found. Run the capability probe or 'baseline-engine init'."
        )
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CapabilitySnapshotInvalid(f"{path}: invalid JSON: {e}") from e
    try:
        return parse_snapshot(data)
    except CapabilitySnapshotInvalid as e:
        raise CapabilitySnapshotInvalid(f"{path}: {e}") from e


def stub_snapshot(owner_type: Any = None, private: Any = None) -> dict[str, Any]:
    """Initial snapshot written by init before any probe has run.

    Every capability is unknown ("unprobed") except ``github_app_required``,
    which is feature dependent. Capabilities covered by the entitlement
    advisor carry its verdict, and non-favourable verdicts become warnings.
    """
    entitlements = evaluate_entitlements(owner_type, private)
    capabilities: dict[str, dict[str, Any]] = {}
    for key in CAPABILITY_KEYS:
        if key == "github_app_required":
            capabilities[key] = {"supported": True, "state": "supported", "reason": "feature_dependent"}
        else:
            capabilities[key] = {"supported": False, "state": "unknown", "reason": "unprobed"}

    warnings = []
    for feature, key in ADVISORY_CAPABILITIES.items():
        row = entitlements["by_feature"][feature]
        capabilities[key]["entitlement"] = {"state": row["state"], "reason": row["reason"]}
        if row["state"] != "likely_supported":
            warnings.append(f"{feature}: {row['state']} ({row['reason']}). {row['remediation']}")

    return {
        "repository": {
            "owner": "",
            "repo": "",
            "owner_type": entitlements["owner_type"],
            "private": private if isinstance(private, bool) else None,
            "permissions": {"admin": False, "maintain": False, "push": False, "pull": False},
        },
        "auth": {"viewer_login": "", "token_scopes": []},
        "collaborators": {"maintainer_count": 0},
        "capabilities": capabilities,
        "warnings": warnings,
        "runtime": {"modules": []},
    }


def save_snapshot(root: RepoRoot, data: dict[str, Any]) -> None:
    write_json(root.capabilities_path, data)
    logger.debug("wrote %s", root.capabilities_path)
