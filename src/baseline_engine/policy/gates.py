"""Hard policy gates shared by apply, doctor and verify."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from baseline_engine.capabilities.evaluator import EvaluationResult
    from baseline_engine.config.schema import EngineConfig
    from baseline_engine.modules.base import ManagedFile

WORKFLOWS_PREFIX = ".github/workflows/"

_USES_LINE = re.compile(r"^\s*(?:-\s+)?uses:\s*['\"]?([^'\"\s#]+)")
_SHA = re.compile(r"^[0-9a-f]{40}$")


def is_pinned(reference: str) -> bool:
    """True for local actions, digest-pinned docker images and 40-hex SHA refs."""
    if reference.startswith("./"):
        return True
    if reference.startswith("docker://"):
        return "@sha256:" in reference
    _, sep, ref = reference.rpartition("@")
    return bool(sep) and bool(_SHA.match(ref))


def workflow_references(files: Iterable["ManagedFile"]) -> list[dict[str, str]]:
    """Every ``uses:`` reference in generated workflow files, in file order."""
    refs = []
    for managed in files:
        if not managed.path.startswith(WORKFLOWS_PREFIX):
            continue
        for lineno, line in enumerate(managed.content.decode("utf-8").splitlines(), start=1):
            m = _USES_LINE.match(line)
            if m:
                refs.append({"path": managed.path, "line": str(lineno), "uses": m.group(1)})
    return refs


def unpinned_action_refs(files: Iterable["ManagedFile"]) -> list[dict[str, str]]:
    return [ref for ref in workflow_references(files) if not is_pinned(ref["uses"])]


def policy_violations(
    config: "EngineConfig",
    evaluation: "EvaluationResult",
    unpinned: list[dict[str, Any]],
) -> list[str]:
    """Hard failures. Capability degradation on its own is never one."""
    violations = list(evaluation.errors)

    if evaluation.github_app.get("effective_required"):
        violations.append(
            "policy.require_github_app is set and a GitHub App is required for the full "
            f"feature set ({evaluation.github_app.get('reason')})"
        )

    if config.policy.require_pinned_action_refs and unpinned:
        refs = sorted({ref["uses"] for ref in unpinned})
        violations.append(
            "policy.require_pinned_action_refs is set but generated workflows use unpinned "
            f"action references: {', '.join(refs)}. Pin ci.action_refs to full commit SHAs."
        )
    return violations
