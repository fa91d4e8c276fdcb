"""Effective settings — user config plus capability-driven forced overrides.

A fixed rule table names every setting the engine may force. Each rule
fires when the configured value equals ``when_configured_equals`` and
either its capability is unsupported or its owning module is not
generating (disabled in config, or dropped by a ``disable`` strategy).

Generators read governed values only from the resulting EffectiveConfig,
so doctor's ``effective_settings`` and the generated files cannot diverge.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from baseline_engine.config.schema import EngineConfig

if TYPE_CHECKING:
    from baseline_engine.capabilities.evaluator import EvaluationResult
    from baseline_engine.capabilities.snapshot import CapabilitySnapshot

_UNSET = object()


@dataclass(frozen=True)
class SettingRule:
    id: str
    path: str
    capability: str
    module: str
    when_configured_equals: Any
    effective_value: Any
    remediation: str
    reason: str = "capability_auto_degrade"


RULES: tuple[SettingRule, ...] = tuple(sorted(
    (
        SettingRule(
            id="merge_queue_trigger",
            path="ci.full_lane_triggers.merge_queue",
            capability="merge_queue",
            module="core-ci",
            when_configured_equals=True,
            effective_value=False,
            remediation="Enable merge queue on an organization-owned repository or set "
                        "ci.full_lane_triggers.merge_queue to false.",
        ),
        SettingRule(
            id="environment_reviewers",
            path="deployments.require_environment_reviewers",
            capability="environments",
            module="core-deployments",
            when_configured_equals=True,
            effective_value=False,
            remediation="Environments are unavailable; approvals stay documented in the "
                        "approval matrix and must be enforced by review policy.",
        ),
        SettingRule(
            id="code_scanning",
            path="security.code_scanning",
            capability="code_scanning",
            module="core-security",
            when_configured_equals=True,
            effective_value=False,
            remediation="Enable GitHub code scanning (Advanced Security for private "
                        "repositories) or set security.code_scanning to false.",
        ),
        SettingRule(
            id="dependency_review",
            path="security.dependency_review",
            capability="dependency_review",
            module="core-security",
            when_configured_equals=True,
            effective_value=False,
            remediation="Enable the dependency graph and dependency review or set "
                        "security.dependency_review to false.",
        ),
    ),
    key=lambda rule: rule.path,
))


def rules_for_module(module_id: str) -> list[SettingRule]:
    return [rule for rule in RULES if rule.module == module_id]


def get_path(data: Any, path: str, default: Any = None) -> Any:
    current = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def set_path(data: dict, path: str, value: Any) -> dict:
    parts = path.split(".")
    current = data
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value
    return data


@dataclass
class EffectiveConfig:
    """Resolved configuration plus the provenance of every forced value."""

    config: EngineConfig
    overrides: list[dict[str, Any]] = field(default_factory=list)

    @property
    def by_path(self) -> dict[str, dict[str, Any]]:
        return {o["key"]: o for o in self.overrides}

    def override_for(self, path: str) -> dict[str, Any] | None:
        return self.by_path.get(path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "overrides": copy.deepcopy(self.overrides),
            "by_path": copy.deepcopy(self.by_path),
            "override_count": len(self.overrides),
        }


def resolve(
    config: EngineConfig,
    evaluation: "EvaluationResult",
    snapshot: "CapabilitySnapshot",
) -> EffectiveConfig:
    """Apply every firing rule to a copy of ``config``.

    Resolving an already-effective config adds no further overrides, since
    a forced value no longer equals its rule's trigger value.
    """
    data = config.to_dict()
    overrides: list[dict[str, Any]] = []

    for rule in RULES:
        configured = get_path(data, rule.path, _UNSET)
        if configured is _UNSET or configured != rule.when_configured_equals:
            continue

        capability = snapshot.get(rule.capability)
        module = evaluation.get(rule.module)
        module_active = module is not None and module.generates
        if capability.supported and module_active:
            continue

        if not capability.supported:
            reason = f"{rule.capability} capability is {capability.state} ({capability.reason or 'unknown'})"
        elif module is None or not module.enabled:
            reason = f"module {rule.module} is disabled in config"
        else:
            reason = f"module {rule.module} is disabled by its degrade strategy"

        remediation = rule.remediation
        if module is not None:
            remediation = module.remediation_for(rule.capability) or remediation

        set_path(data, rule.path, copy.deepcopy(rule.effective_value))
        overrides.append({
            "id": rule.id,
            "key": rule.path,
            "from": configured,
            "to": copy.deepcopy(rule.effective_value),
            "reason": reason,
            "cause": rule.reason,
            "capability": rule.capability,
            "module": rule.module,
            "remediation": remediation,
        })

    overrides.sort(key=lambda o: o["key"])
    return EffectiveConfig(config=EngineConfig.from_dict(data), overrides=overrides)
