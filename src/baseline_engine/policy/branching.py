"""Branch topology presets and per-role branch policies."""

from __future__ import annotations

from typing import Any

_TOPOLOGIES: dict[str, list[dict[str, Any]]] = {
    "two_branch": [
        {"name": "dev", "role": "integration", "protected": True,
         "allowed_sources": ["feature/*", "fix/*", "backport/*", "automation/*"]},
        {"name": "main", "role": "production", "protected": True,
         "allowed_sources": ["dev", "hotfix/*"]},
        {"name": "hotfix/*", "role": "hotfix", "protected": False,
         "allowed_sources": ["main"]},
    ],
    "three_branch": [
        {"name": "develop", "role": "integration", "protected": True,
         "allowed_sources": ["feature/*", "fix/*", "automation/*"]},
        {"name": "release", "role": "release", "protected": True,
         "allowed_sources": ["develop", "hotfix/*"]},
        {"name": "main", "role": "production", "protected": True,
         "allowed_sources": ["release", "hotfix/*"]},
        {"name": "hotfix/*", "role": "hotfix", "protected": False,
         "allowed_sources": ["main"]},
    ],
    "trunk": [
        {"name": "main", "role": "production", "protected": True,
         "allowed_sources": ["feature/*", "fix/*", "hotfix/*", "automation/*"]},
        {"name": "hotfix/*", "role": "hotfix", "protected": False,
         "allowed_sources": ["main"]},
    ],
}


def resolve_topology(topology: str) -> list[dict[str, Any]]:
    """Return a fresh copy of the branch list for a topology preset.

    Unknown and ``custom`` topologies fall back to the two-branch preset.
    """
    preset = _TOPOLOGIES.get(topology, _TOPOLOGIES["two_branch"])
    return [{**branch, "allowed_sources": list(branch["allowed_sources"])} for branch in preset]


def resolve_branch_roles(branches: list[dict[str, Any]]) -> dict[str, str]:
    """Map role → branch name (last branch wins for a repeated role)."""
    roles: dict[str, str] = {}
    for branch in branches:
        name = str(branch.get("name", "")).strip()
        role = str(branch.get("role", "")).strip()
        if name and role:
            roles[role] = name
    return roles


def derive_branch_role_policies(
    branches: list[dict[str, Any]],
    required_checks_by_role: dict[str, list[str]],
) -> list[dict[str, Any]]:
    """Attach required checks to every branch according to its role."""
    policies = []
    for branch in branches:
        role = str(branch.get("role") or "custom")
        checks = required_checks_by_role.get(role, required_checks_by_role.get("custom", []))
        policies.append({
            "branch": str(branch.get("name", "")),
            "role": role,
            "protected": bool(branch.get("protected")),
            "allowed_sources": list(branch.get("allowed_sources") or []),
            "required_checks": list(checks),
        })
    return policies
