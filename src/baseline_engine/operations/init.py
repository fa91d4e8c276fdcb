"""Seed `.baseline/` and write the first set of managed files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from baseline_engine.capabilities.snapshot import save_snapshot, stub_snapshot
from baseline_engine.catalog import ENGINE_VERSION
from baseline_engine.config import default_config, save_config
from baseline_engine.engine import build_plan, compute_changes
from baseline_engine.modules import REGISTRY
from baseline_engine.operations.writer import write_changes
from baseline_engine.paths import RepoRoot
from baseline_engine.store.manifest import load_manifest, save_manifest
from baseline_engine.store.state import EngineState, load_state, save_state

logger = logging.getLogger(__name__)


@dataclass
class InitReport:
    target: str
    config_created: bool = False
    snapshot_created: bool = False
    state_created: bool = False
    written: list[str] = field(default_factory=list)
    enabled_modules: list[str] = field(default_factory=list)
    maintainer_count: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": "init",
            "target": self.target,
            "engine_version": ENGINE_VERSION,
            "config_created": self.config_created,
            "snapshot_created": self.snapshot_created,
            "state_created": self.state_created,
            "module_count": len(REGISTRY),
            "enabled_modules": list(self.enabled_modules),
            "maintainer_count": self.maintainer_count,
            "written_files": len(self.written),
            "files": list(self.written),
            "warnings": list(self.warnings),
        }

    def summary(self) -> str:
        lines = [f"Initialized baseline-engine {ENGINE_VERSION} in {self.target}"]
        for label, created in (
            ("config.yaml", self.config_created),
            ("capabilities/github.json", self.snapshot_created),
            ("state.json", self.state_created),
        ):
            lines.append(f"  {label:<26}{'created' if created else 'kept existing'}")
        lines.append(f"  Modules: {', '.join(self.enabled_modules) or 'none'}")
        lines.append(f"  Wrote {len(self.written)} managed file(s)")
        for path in self.written:
            lines.append(f"    + {path}")
        for w in self.warnings:
            lines.append(f"  WARNING: {w}")
        return "\n".join(lines)


def run_init(
    root: RepoRoot,
    profile: str = "strict",
    owner_type: str | None = None,
    private: bool | None = None,
) -> InitReport:
    """Create config, state and a capability stub if absent, then write files.

    Existing config, state and snapshot are never overwritten. Afterwards
    the manifest tracks every generated file, so an immediate diff is empty.
    """
    report = InitReport(target=str(root.path))

    if not root.config_path.is_file():
        save_config(root, default_config(root, profile=profile))
        report.config_created = True
        logger.info("created %s", root.config_path)

    if not root.capabilities_path.is_file():
        save_snapshot(root, stub_snapshot(owner_type, private))
        report.snapshot_created = True
        logger.info("created capability stub %s", root.capabilities_path)

    if load_state(root) is None:
        save_state(root, EngineState(installed_version=ENGINE_VERSION))
        report.state_created = True

    manifest = load_manifest(root)
    plan = build_plan(root)
    changes = compute_changes(root, plan.files, manifest)
    outcome = write_changes(root, changes, manifest)
    save_manifest(root, manifest)

    report.written = outcome.written
    report.enabled_modules = list(plan.config.modules)
    report.maintainer_count = plan.snapshot.maintainer_count
    report.warnings = plan.warnings + outcome.warnings + plan.violations
    return report
