"""Capability evaluator — which modules are degraded, dropped or blocking.

For every enabled module the evaluator takes the module's declared
requirements (recomputed on each call), removes capabilities whose
governing setting the user already switched off, and diffs the rest
against the snapshot. The module's degrade strategy then decides the
outcome:

    warn     module still generates; listed as capability-degraded
    disable  module generates nothing and adds nothing to the aggregate
    fail     hard blocker
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from baseline_engine.capabilities.snapshot import CapabilitySnapshot
from baseline_engine.config.schema import EngineConfig
from baseline_engine.modules.base import ModuleDefinition
from baseline_engine.policy.effective_settings import get_path, rules_for_module


@dataclass(frozen=True)
class MissingCapability:
    capability: str
    state: str
    reason: str
    remediation: str = ""
    github_app_required: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "capability": self.capability,
            "state": self.state,
            "reason": self.reason,
            "remediation": self.remediation,
            "github_app_required": self.github_app_required,
        }


@dataclass
class ModuleEvaluation:
    id: str
    enabled: bool
    degrade_strategy: str = "warn"
    requires: list[str] = field(default_factory=list)
    missing: list[MissingCapability] = field(default_factory=list)
    remediation: dict[str, str] = field(default_factory=dict)

    @property
    def missing_ids(self) -> list[str]:
        return [m.capability for m in self.missing]

    @property
    def degraded(self) -> bool:
        return self.enabled and bool(self.missing)

    @property
    def skipped(self) -> bool:
        """Enabled, but dropped by the ``disable`` strategy."""
        return self.degraded and self.degrade_strategy == "disable"

    @property
    def hard_error(self) -> bool:
        return self.degraded and self.degrade_strategy == "fail"

    @property
    def generates(self) -> bool:
        return self.enabled and not self.skipped

    def remediation_for(self, capability: str) -> str:
        return self.remediation.get(capability, "")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "enabled": self.enabled,
            "strategy": self.degrade_strategy,
            "requires": list(self.requires),
            "degraded": self.degraded,
            "skipped": self.skipped,
            "hard_error": self.hard_error,
            "missing": [m.to_dict() for m in self.missing],
        }


@dataclass
class EvaluationResult:
    modules: list[ModuleEvaluation] = field(default_factory=list)
    required_capabilities: list[str] = field(default_factory=list)
    missing_required_capabilities: list[str] = field(default_factory=list)
    github_app: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def get(self, module_id: str) -> ModuleEvaluation | None:
        for entry in self.modules:
            if entry.id == module_id:
                return entry
        return None

    @property
    def capability_degraded_modules(self) -> list[ModuleEvaluation]:
        return [m for m in self.modules if m.degraded]

    @property
    def active_modules(self) -> list[str]:
        return [m.id for m in self.modules if m.generates]

    def to_dict(self) -> dict[str, Any]:
        return {
            "modules": [m.to_dict() for m in self.modules],
            "required_capabilities": list(self.required_capabilities),
            "missing_required_capabilities": list(self.missing_required_capabilities),
            "github_app": dict(self.github_app),
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }


def resolve_capability_requirements(module: ModuleDefinition) -> dict[str, Any]:
    """The module's declared requirements, read fresh from its definition."""
    return module.requirements.to_dict()


def _effective_requires(module: ModuleDefinition, requires: list[str], config_data: dict) -> list[str]:
    """Drop requirements whose feature the user has already switched off."""
    opted_out = set()
    for rule in rules_for_module(module.id):
        if rule.capability in requires and get_path(config_data, rule.path) != rule.when_configured_equals:
            opted_out.add(rule.capability)
    return [c for c in requires if c not in opted_out]


def _github_app_summary(
    missing: list[str],
    snapshot: CapabilitySnapshot,
    config: EngineConfig,
) -> dict[str, Any]:
    flagged = [c for c in missing if snapshot.get(c).github_app_required]
    app = snapshot.get("github_app_required")
    required = bool(flagged) or (bool(missing) and not app.supported)

    if flagged:
        reason = f"capabilities requiring a GitHub App are missing: {', '.join(flagged)}"
    elif required:
        reason = f"github_app_required is {app.state} ({app.reason or 'unknown'}) with missing capabilities"
    elif missing:
        reason = "missing capabilities do not require a GitHub App"
    else:
        reason = "all required capabilities are available"

    policy_requires = config.policy.require_github_app
    return {
        "required_for_full_feature_set": required,
        "policy_requires_app": policy_requires,
        "effective_required": policy_requires and required,
        "reason": reason,
        "capabilities": flagged,
    }


def evaluate(
    modules: Iterable[ModuleDefinition],
    snapshot: CapabilitySnapshot,
    config: EngineConfig,
) -> EvaluationResult:
    """Evaluate every registered module against the snapshot and config."""
    config_data = config.to_dict()
    result = EvaluationResult()
    required: set[str] = set()
    missing_total: set[str] = set()

    for module in modules:
        declared = resolve_capability_requirements(module)
        entry = ModuleEvaluation(
            id=module.id,
            enabled=module.enabled(config),
            degrade_strategy=declared["degrade_strategy"],
            remediation=declared["remediation"],
        )
        result.modules.append(entry)
        if not entry.enabled:
            continue

        entry.requires = _effective_requires(module, declared["requires"], config_data)
        for capability in entry.requires:
            cap = snapshot.get(capability)
            if cap.supported:
                continue
            entry.missing.append(MissingCapability(
                capability=capability,
                state=cap.state,
                reason=cap.reason or cap.state,
                remediation=entry.remediation_for(capability),
                github_app_required=cap.github_app_required,
            ))

        if entry.skipped:
            result.warnings.append(
                f"{module.id}: disabled (missing {', '.join(entry.missing_ids)})"
            )
            continue

        required.update(entry.requires)
        missing_total.update(entry.missing_ids)
        if entry.hard_error:
            result.errors.append(
                f"{module.id}: required capabilities unavailable ({', '.join(entry.missing_ids)})"
            )
        elif entry.degraded:
            result.warnings.append(
                f"{module.id}: degraded (missing {', '.join(entry.missing_ids)})"
            )

    result.required_capabilities = sorted(required)
    result.missing_required_capabilities = sorted(missing_total)
    result.github_app = _github_app_summary(result.missing_required_capabilities, snapshot, config)
    return result
