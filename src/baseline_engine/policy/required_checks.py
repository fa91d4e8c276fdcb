"""Required status checks per branch role."""

from __future__ import annotations

from typing import Any

# Check names as rendered by the generated workflows ("<workflow> / <job>")
CHECK_NAMES = {
    "fast_lane": "Baseline PR Gate / baseline-fast-lane",
    "full_lane": "Baseline PR Gate / baseline-full-lane",
    "deploy": "Baseline Deploy / baseline-deploy",
    "code_scanning": "Baseline Security / baseline-code-scanning",
    "dependency_review": "Baseline Security / baseline-dependency-review",
}


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


def derive_required_checks_by_role(
    enabled_modules: list[str],
    active_review_policy: dict[str, Any],
    security_jobs: dict[str, bool] | None = None,
) -> dict[str, list[str]]:
    """Required checks for each branch role given the active modules.

    ``security_jobs`` maps ``code_scanning`` / ``dependency_review`` to the
    effective setting; a security check is required only while its job is
    emitted.
    """
    enabled = set(enabled_modules)
    has_ci = "core-ci" in enabled
    strict = bool(active_review_policy.get("require_strict_ci"))

    fast = [CHECK_NAMES["fast_lane"]] if has_ci else []
    full = [CHECK_NAMES["full_lane"]] if has_ci and strict else []
    deploy = [CHECK_NAMES["deploy"]] if "core-deployments" in enabled else []
    security = []
    if "core-security" in enabled:
        jobs = security_jobs or {}
        security = [CHECK_NAMES[job] for job in ("code_scanning", "dependency_review") if jobs.get(job)]

    return {
        "integration": _unique(fast + full + security),
        "production": _unique(fast + full + deploy + security),
        "release": _unique(fast + full + deploy + security),
        "hotfix": _unique(fast + full),
        "feature": _unique(fast),
        "custom": _unique(fast),
    }
