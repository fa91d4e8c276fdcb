"""CI gate: managed files on disk must match manifest and generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from baseline_engine.engine import build_plan
from baseline_engine.errors import ManifestDriftError, PolicyViolation
from baseline_engine.paths import RepoRoot
from baseline_engine.store.io import read_bytes, sha256
from baseline_engine.store.manifest import load_manifest


@dataclass
class VerifyReport:
    target: str
    checked_files: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": "verify",
            "target": self.target,
            "doctor_ok": True,
            "checked_files": self.checked_files,
            "pending_changes": 0,
            "drift": [],
            "warning_count": len(self.warnings),
        }

    def summary(self) -> str:
        return f"Verified {self.checked_files} managed file(s). No drift."


def find_drift(root: RepoRoot, desired: dict[str, bytes], manifest_files: dict[str, str]) -> list[dict[str, str]]:
    """Every disagreement between generators, manifest and working tree."""
    drift = []
    for path in sorted(set(desired) | set(manifest_files)):
        recorded = manifest_files.get(path)
        current = read_bytes(root.file(path))
        if path not in desired:
            drift.append({"path": path, "problem": "no longer generated"})
        elif recorded is None:
            drift.append({"path": path, "problem": "not tracked in manifest"})
        elif current is None:
            drift.append({"path": path, "problem": "missing on disk"})
        elif sha256(current) != recorded:
            drift.append({"path": path, "problem": "modified on disk"})
        elif current != desired[path]:
            drift.append({"path": path, "problem": "out of date with generators"})
    return drift


def run_verify(root: RepoRoot) -> VerifyReport:
    """Regenerate in memory and compare. Never writes.

    Raises:
        PolicyViolation: If a hard gate fails.
        ManifestDriftError: On any drift, listing the affected paths.
    """
    plan = build_plan(root)
    if plan.violations:
        raise PolicyViolation(plan.violations)

    manifest = load_manifest(root)
    drift = find_drift(
        root,
        {f.path: f.content for f in plan.files},
        {path: entry.hash for path, entry in manifest.files.items()},
    )
    if drift:
        detail = "; ".join(f"{d['path']} ({d['problem']})" for d in drift)
        raise ManifestDriftError(f"{len(drift)} managed file(s) drifted: {detail}", [d["path"] for d in drift])

    return VerifyReport(target=str(root.path), checked_files=len(plan.files), warnings=plan.warnings)
