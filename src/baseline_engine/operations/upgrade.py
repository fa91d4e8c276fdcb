"""Run pending version migrations and regenerate."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

from baseline_engine.catalog import ENGINE_VERSION
from baseline_engine.config import load_raw_config, save_config
from baseline_engine.config.schema import EngineConfig
from baseline_engine.engine import build_plan, compute_changes
from baseline_engine.errors import LifecycleError, PolicyViolation
from baseline_engine.lifecycle import PENDING_UPGRADE, UPGRADED, check_transition, classify
from baseline_engine.operations.writer import write_changes
from baseline_engine.paths import RepoRoot
from baseline_engine.store.manifest import load_manifest, save_manifest
from baseline_engine.store.migrations import Migration, parse_semver, pending_migrations
from baseline_engine.store.state import EngineState, load_state, save_state

logger = logging.getLogger(__name__)

POLICY_SECTIONS = ("modules", "policy", "branching", "ci", "deployments", "planning", "security", "updates")


@dataclass
class UpgradeReport:
    target: str
    current_version: str
    installed_version: str
    pending: list[Migration] = field(default_factory=list)
    applied: bool = False
    notes: list[str] = field(default_factory=list)
    policy_impact: list[dict[str, Any]] = field(default_factory=list)
    written: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": "upgrade",
            "target": self.target,
            "current_version": self.current_version,
            "target_version": ENGINE_VERSION,
            "installed_version": self.installed_version,
            "applied": self.applied,
            "pending_migrations": [m.to_dict() for m in self.pending],
            "notes": list(self.notes),
            "policy_impact": copy.deepcopy(self.policy_impact),
            "written_files": len(self.written),
            "deleted_files": len(self.deleted),
            "warnings": list(self.warnings),
        }

    def summary(self) -> str:
        if not self.pending and not self.applied:
            return f"Up to date (installed {self.installed_version}, engine {ENGINE_VERSION})."
        verb = "Applied" if self.applied else "Pending"
        lines = [f"{verb} migrations {self.current_version} -> {ENGINE_VERSION}:"]
        for m in self.pending:
            lines.append(f"  {m.version}  {m.description}")
        for note in self.notes:
            lines.append(f"    - {note}")
        if self.policy_impact:
            lines.append(f"  Config sections changed: {', '.join(p['section'] for p in self.policy_impact)}")
        if self.applied:
            lines.append(f"  Wrote {len(self.written)}, deleted {len(self.deleted)} managed file(s)")
        else:
            lines.append("  Run 'baseline-engine upgrade --apply' to migrate.")
        for w in self.warnings:
            lines.append(f"  WARNING: {w}")
        return "\n".join(lines)


def _policy_impact(before: dict[str, Any], after: dict[str, Any]) -> list[dict[str, Any]]:
    impact = []
    for section in POLICY_SECTIONS:
        if before.get(section) != after.get(section):
            impact.append({"section": section, "before": before.get(section), "after": after.get(section)})
    return impact


def run_upgrade(root: RepoRoot, apply: bool = False) -> UpgradeReport:
    """Report pending migrations, or run them with ``apply=True``.

    Applying migrates the raw config mapping, validates it, regenerates and
    writes managed files, then records the new ``installed_version``.

    Raises:
        LifecycleError: If the installed version is newer than this engine.
        PolicyViolation: If the migrated config fails a hard gate.
    """
    state = load_state(root) or EngineState()
    installed = state.installed_version
    if parse_semver(installed) > parse_semver(ENGINE_VERSION):
        raise LifecycleError(
            f"installed_version {installed} is newer than engine {ENGINE_VERSION}; "
            "upgrade the engine instead."
        )

    pending = pending_migrations(installed, ENGINE_VERSION)
    report = UpgradeReport(
        target=str(root.path),
        current_version=installed,
        installed_version=installed,
        pending=pending,
    )
    current = classify(True, state, 0)
    if not apply or current != PENDING_UPGRADE:
        return report

    ok, msg = check_transition(current, UPGRADED)
    if not ok:
        raise LifecycleError(msg)

    raw = load_raw_config(root)
    before = copy.deepcopy(raw)
    for migration in pending:
        migration.apply(raw, state, report.notes)
        state.migrations.append(migration.to_dict())
        logger.info("migration %s applied", migration.version)

    config = EngineConfig.from_dict(raw)
    plan = build_plan(root, config=config)
    if plan.violations:
        raise PolicyViolation(plan.violations)

    if raw != before:
        save_config(root, raw)
    report.policy_impact = _policy_impact(before, raw)

    manifest = load_manifest(root)
    outcome = write_changes(root, compute_changes(root, plan.files, manifest), manifest)
    save_manifest(root, manifest)

    state.installed_version = ENGINE_VERSION
    save_state(root, state)

    report.applied = True
    report.installed_version = ENGINE_VERSION
    report.written = outcome.written
    report.deleted = outcome.deleted
    report.warnings = plan.warnings + outcome.warnings
    return report
