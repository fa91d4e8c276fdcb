"""Read-only delta between the desired files and the target."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from baseline_engine.catalog import ENGINE_VERSION
from baseline_engine.engine import Change, build_plan, compute_changes
from baseline_engine.paths import RepoRoot
from baseline_engine.store.manifest import load_manifest

_MARKERS = {"added": "+", "modified": "~", "removed": "-"}


@dataclass
class DiffReport:
    target: str
    changes: list[Change] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def change_count(self) -> int:
        return len(self.changes)

    @property
    def conflict_count(self) -> int:
        return sum(1 for c in self.changes if c.locally_modified)

    @property
    def passed(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": "diff",
            "target": self.target,
            "engine_version": ENGINE_VERSION,
            "change_count": self.change_count,
            "conflict_count": self.conflict_count,
            "changes": [c.to_dict() for c in self.changes],
            "warnings": list(self.warnings),
        }

    def summary(self) -> str:
        if not self.changes:
            return "No changes. Managed files are in sync."
        lines = [f"{self.change_count} change(s):"]
        for c in self.changes:
            note = "  (locally modified)" if c.locally_modified else ""
            lines.append(f"  {_MARKERS[c.kind]} {c.path}  [{c.module}]{note}")
        for w in self.warnings:
            lines.append(f"  WARNING: {w}")
        return "\n".join(lines)


def run_diff(root: RepoRoot) -> DiffReport:
    plan = build_plan(root)
    changes = compute_changes(root, plan.files, load_manifest(root))
    return DiffReport(target=str(root.path), changes=changes, warnings=plan.warnings)
