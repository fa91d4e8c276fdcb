"""Canonical engine identifiers.

Module ids, capability keys, strategies and profiles live here.
No other module should define its own copy of these lists.
"""

from __future__ import annotations

ENGINE_VERSION = "2.3.0"
CONFIG_VERSION = 1

# Capability keys reported by the GitHub probe
CAPABILITY_KEYS: tuple[str, ...] = (
    "rulesets",
    "merge_queue",
    "environments",
    "code_scanning",
    "dependency_review",
    "repo_variables",
    "github_app_required",
)

CAPABILITY_STATES = ("supported", "unsupported", "unknown")

# Module id → one-line description
MODULES: dict[str, str] = {
    "core-governance": "Branch topology, review thresholds and required checks",
    "core-ci":         "Two-lane PR gate and reusable node-run workflow",
    "core-deployments": "Deployment approval matrix and deploy workflow",
    "core-planning":   "Planning policy and automation allowlist",
    "core-security":   "Code scanning and dependency review workflow",
}

DEFAULT_MODULES: tuple[str, ...] = (
    "core-governance",
    "core-ci",
    "core-deployments",
    "core-planning",
)

DEGRADE_STRATEGIES = ("warn", "disable", "fail")
POLICY_PROFILES = ("strict", "moderate", "advisory")
BRANCH_TOPOLOGIES = ("two_branch", "three_branch", "trunk", "custom")
CI_MODES = ("two_lane", "full", "fast_only")
APPLY_MODES = ("pr_first", "direct")
UPDATE_CHANNELS = ("stable", "next")

DEFAULT_ENVIRONMENTS: tuple[str, ...] = ("dev", "staging", "production")

