"""Read-only diagnostic of capabilities, effective settings and gates.

Soft signals (degraded modules, warnings) are reported and exit 0. Only
hard policy gates make doctor fail.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from baseline_engine.capabilities.entitlements import evaluate_entitlements
from baseline_engine.catalog import ENGINE_VERSION
from baseline_engine.engine import Plan, build_plan, compute_changes
from baseline_engine.lifecycle import classify
from baseline_engine.modules import REGISTRY
from baseline_engine.paths import RepoRoot
from baseline_engine.policy.deployments import matrix_coverage
from baseline_engine.store.manifest import load_manifest
from baseline_engine.store.state import load_state


@dataclass
class DoctorReport:
    target: str
    lifecycle_state: str
    plan: Plan
    change_count: int = 0
    insights: dict[str, Any] = field(default_factory=dict)

    @property
    def violations(self) -> list[str]:
        return list(self.plan.violations)

    @property
    def passed(self) -> bool:
        return not self.plan.violations

    def to_dict(self) -> dict[str, Any]:
        evaluation = self.plan.evaluation
        return {
            "command": "doctor",
            "target": self.target,
            "engine_version": ENGINE_VERSION,
            "lifecycle_state": self.lifecycle_state,
            "module_count": len(REGISTRY),
            "enabled_modules": list(self.plan.config.modules),
            "active_modules": evaluation.active_modules,
            "capability_degraded_modules": [
                {
                    "module": m.id,
                    "strategy": m.degrade_strategy,
                    "missing": m.missing_ids,
                    "skipped": m.skipped,
                }
                for m in evaluation.capability_degraded_modules
            ],
            "required_capabilities": list(evaluation.required_capabilities),
            "missing_required_capabilities": list(evaluation.missing_required_capabilities),
            "github_app": dict(evaluation.github_app),
            "unpinned_action_refs": [dict(r) for r in self.plan.unpinned],
            "policy_violations": self.violations,
            "pending_changes": self.change_count,
            "warnings": self.plan.warnings,
            "insights": self.insights,
        }

    def summary(self) -> str:
        evaluation = self.plan.evaluation
        lines = ["Baseline Doctor", "=" * 40]
        lines.append(f"  Target:     {self.target}")
        lines.append(f"  Engine:     {ENGINE_VERSION}")
        lines.append(f"  Lifecycle:  {self.lifecycle_state}")
        lines.append(f"  Modules:    {', '.join(evaluation.active_modules) or 'none'}")
        if evaluation.missing_required_capabilities:
            lines.append(f"  Missing:    {', '.join(evaluation.missing_required_capabilities)}")

        degraded = evaluation.capability_degraded_modules
        if degraded:
            lines.append(f"\nDEGRADED ({len(degraded)}):")
            for m in degraded:
                suffix = " (skipped)" if m.skipped else ""
                lines.append(f"  {m.id} [{m.degrade_strategy}]: {', '.join(m.missing_ids)}{suffix}")

        overrides = self.plan.effective.overrides
        if overrides:
            lines.append(f"\nEFFECTIVE OVERRIDES ({len(overrides)}):")
            for o in overrides:
                lines.append(f"  {o['key']}: {o['from']} -> {o['to']} ({o['reason']})")

        app = evaluation.github_app
        lines.append(
            f"\nGitHub App: required_for_full_feature_set={app.get('required_for_full_feature_set')} "
            f"effective_required={app.get('effective_required')}"
        )
        if self.plan.unpinned:
            lines.append(f"Unpinned action refs: {len(self.plan.unpinned)}")

        if self.plan.warnings:
            lines.append(f"\nWARNINGS ({len(self.plan.warnings)}):")
            for w in self.plan.warnings:
                lines.append(f"  {w}")
        if self.violations:
            lines.append(f"\nCRITICAL ({len(self.violations)}):")
            for v in self.violations:
                lines.append(f"  {v}")
        lines.append(f"\nResult: {'PASS' if self.passed else 'FAIL'}")
        return "\n".join(lines)


def _insights(plan: Plan) -> dict[str, Any]:
    deployments = plan.config.deployments
    rows = [
        {"environment": r.environment, "component": r.component}
        for r in deployments.approval_matrix
    ]
    return {
        "effective_settings": plan.effective.to_dict(),
        "entitlements": evaluate_entitlements(plan.snapshot.owner_type, plan.snapshot.private),
        "capability_matrix": plan.snapshot.capability_matrix(),
        "modules": [m.to_dict() for m in plan.evaluation.modules],
        "approval_matrix_coverage": matrix_coverage(
            [e.name for e in deployments.environments],
            [c.id for c in deployments.components if c.enabled],
            rows,
        ),
    }


def run_doctor(root: RepoRoot) -> DoctorReport:
    """Diagnose a target without writing anything."""
    plan = build_plan(root)
    changes = compute_changes(root, plan.files, load_manifest(root))
    return DoctorReport(
        target=str(root.path),
        lifecycle_state=classify(True, load_state(root), len(changes)),
        plan=plan,
        change_count=len(changes),
        insights=_insights(plan),
    )
