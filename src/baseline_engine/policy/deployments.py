"""Deployment environments, component detection and approval matrix."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from baseline_engine.catalog import DEFAULT_ENVIRONMENTS

_ENV_ROLES = {
    "production": ["production"],
    "staging": ["integration", "release"],
}


def default_environments() -> list[dict[str, Any]]:
    return [
        {
            "name": name,
            "branch_roles": list(_ENV_ROLES.get(name, ["integration", "feature"])),
            "default": True,
        }
        for name in DEFAULT_ENVIRONMENTS
    ]


def default_components() -> list[dict[str, Any]]:
    return [{"id": "application", "name": "application", "path": "apps", "enabled": True}]


def detect_components(target: Path) -> list[dict[str, Any]]:
    """Discover deployable components in a target repository.

    Each directory under ``apps/`` is a component, as is each existing
    workflow whose file name mentions "deploy". Falls back to a single
    ``application`` component.
    """
    components: list[dict[str, Any]] = []
    seen: set[str] = set()

    def add(component_id: str, name: str, path: str) -> None:
        if component_id and component_id not in seen:
            seen.add(component_id)
            components.append({"id": component_id, "name": name, "path": path, "enabled": True})

    apps = target / "apps"
    if apps.is_dir():
        for entry in sorted(apps.iterdir()):
            if entry.is_dir() and not entry.name.startswith("."):
                add(entry.name, entry.name, f"apps/{entry.name}")

    workflows = target / ".github" / "workflows"
    if workflows.is_dir():
        for wf in sorted(workflows.iterdir()):
            name = wf.name.lower()
            if wf.suffix.lower() not in (".yml", ".yaml") or "deploy" not in name:
                continue
            if name.startswith("baseline-"):
                continue
            stem = re.sub(r"\.ya?ml$", "", name)
            stem = re.sub(r"^deploy[-_]?", "", stem)
            stem = re.sub(r"[^a-z0-9]+", "-", stem).strip("-") or "application"
            add(stem, stem.replace("-", " "), f".github/workflows/{wf.name}")

    return components or default_components()


def build_approval_matrix(
    environments: list[str],
    components: list[str],
    profile: str = "strict",
) -> list[dict[str, Any]]:
    """One approval rule per (environment, component) pair.

    Production needs two approvers and staging one under the strict
    profile; ``moderate`` relaxes each by one and ``advisory`` drops all.
    """
    rows = []
    for env in environments:
        for component in components:
            base = 2 if env == "production" else 1 if env == "staging" else 0
            if profile == "advisory":
                approvers = 0
            elif profile == "moderate":
                approvers = max(0, base - 1)
            else:
                approvers = base
            rows.append({
                "environment": env,
                "component": component,
                "approval_required": approvers > 0,
                "min_approvers": approvers,
                "allow_self_approval": approvers == 0,
                "allowed_roles": ["maintain", "admin"] if approvers > 0 else ["write", "maintain", "admin"],
            })
    return rows


def matrix_coverage(
    environments: list[str],
    components: list[str],
    rows: list[dict[str, Any]],
) -> dict[str, Any]:
    """Compare the configured approval matrix with the expected pairs."""
    expected = [(env, comp) for env in environments for comp in components]
    expected_keys = set(expected)
    actual: set[tuple[str, str]] = set()
    duplicates: set[str] = set()
    for row in rows:
        key = (str(row.get("environment", "")), str(row.get("component", "")))
        if key in actual:
            duplicates.add(f"{key[0]}::{key[1]}")
        actual.add(key)

    missing = [{"environment": e, "component": c} for e, c in expected if (e, c) not in actual]
    stale = [{"environment": e, "component": c} for e, c in sorted(actual - expected_keys)]
    return {
        "expected_rows": len(expected),
        "actual_rows": len(rows),
        "missing_rows": missing,
        "stale_rows": stale,
        "duplicate_row_keys": sorted(duplicates),
        "healthy": not missing and not stale and not duplicates,
    }
