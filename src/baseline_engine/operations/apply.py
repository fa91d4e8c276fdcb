"""Write pending changes directly, or hand them to a publisher."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from baseline_engine.engine import Change, build_plan, compute_changes
from baseline_engine.errors import LifecycleError, PolicyViolation
from baseline_engine.lifecycle import APPLIED, IN_SYNC, check_transition, classify
from baseline_engine.operations.writer import write_changes
from baseline_engine.paths import RepoRoot
from baseline_engine.publish import Changeset, ChangesetExporter, CommandPublisher, publisher_for
from baseline_engine.store.manifest import load_manifest, save_manifest
from baseline_engine.store.state import load_state

logger = logging.getLogger(__name__)


@dataclass
class ApplyReport:
    target: str
    mode: str
    changes: list[Change] = field(default_factory=list)
    written: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    published: dict[str, Any] | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": "apply",
            "target": self.target,
            "apply_mode": self.mode,
            "change_count": len(self.changes),
            "changes": [c.to_dict() for c in self.changes],
            "written_files": len(self.written),
            "deleted_files": len(self.deleted),
            "kept_files": list(self.kept),
            "published": self.published,
            "warnings": list(self.warnings),
        }

    def summary(self) -> str:
        if not self.changes:
            return "Nothing to apply. Managed files are in sync."
        lines = [f"Applied {len(self.changes)} change(s) ({self.mode})"]
        if self.mode == "direct":
            lines.append(f"  Wrote {len(self.written)}, deleted {len(self.deleted)}")
        elif self.published:
            where = self.published.get("location") or " ".join(self.published.get("command", []))
            lines.append(f"  Changeset {self.published.get('digest')} -> {where}")
            lines.append("  Manifest unchanged until the changeset lands.")
        for w in self.warnings:
            lines.append(f"  WARNING: {w}")
        return "\n".join(lines)


def run_apply(
    root: RepoRoot,
    direct: bool = False,
    publisher: ChangesetExporter | CommandPublisher | None = None,
) -> ApplyReport:
    """Reconcile the target.

    Policy gates run before anything is written. In direct mode (``--direct``
    or ``updates.apply_mode: direct``) files are written and the manifest is
    updated; otherwise the changeset goes to the publisher and the manifest
    is left alone. ``installed_version`` is never touched.

    Raises:
        PolicyViolation: If a hard gate fails.
        LifecycleError: If the target is not initialized or needs an upgrade.
    """
    plan = build_plan(root)
    if plan.violations:
        raise PolicyViolation(plan.violations)

    manifest = load_manifest(root)
    changes = compute_changes(root, plan.files, manifest)
    mode = "direct" if direct or plan.config.updates.apply_mode == "direct" else "pr_first"
    report = ApplyReport(target=str(root.path), mode=mode, changes=changes, warnings=plan.warnings)

    current = classify(True, load_state(root), len(changes))
    if current == IN_SYNC:
        return report

    ok, msg = check_transition(current, APPLIED)
    if not ok:
        raise LifecycleError(f"{msg}. Run 'baseline-engine init' or 'upgrade --apply' first.")
    logger.info("apply: %d change(s), mode=%s", len(changes), mode)

    if mode == "direct":
        outcome = write_changes(root, changes, manifest)
        save_manifest(root, manifest)
        report.written = outcome.written
        report.deleted = outcome.deleted
        report.kept = outcome.kept
        report.warnings += outcome.warnings
    else:
        publisher = publisher or publisher_for(plan.config)
        report.published = publisher.publish(root, Changeset(changes=changes))
    return report
