"""core-governance — branch topology, adaptive review thresholds, required checks."""

from __future__ import annotations

from dataclasses import asdict

from baseline_engine.catalog import MODULES
from baseline_engine.modules.base import CapabilityRequirements, GenerationInput, ManagedFile, ModuleDefinition
from baseline_engine.policy.branching import derive_branch_role_policies
from baseline_engine.policy.required_checks import derive_required_checks_by_role
from baseline_engine.policy.reviewers import resolve_active_review_policy

MODULE_ID = "core-governance"

TOPOLOGY_PATH = "config/policy/baseline-branch-topology.json"
REVIEW_THRESHOLDS_PATH = "config/policy/baseline-review-thresholds.json"
REQUIRED_CHECKS_PATH = "config/policy/baseline-required-checks.json"

REQUIREMENTS = CapabilityRequirements(
    requires=("rulesets",),
    degrade_strategy="warn",
    remediation={
        "rulesets": "Rulesets are unavailable; branch policies are generated as documentation "
                    "and must be applied manually through branch protection.",
    },
)


def generate(inp: GenerationInput) -> list[ManagedFile]:
    branching = inp.config.branching
    branches = [asdict(b) for b in branching.branches]
    thresholds = {bucket: asdict(policy) for bucket, policy in branching.review_thresholds.items()}

    review = resolve_active_review_policy(inp.snapshot.maintainer_count, thresholds)
    security = inp.config.security
    checks_by_role = derive_required_checks_by_role(
        list(inp.active_modules),
        review["policy"],
        {"code_scanning": security.code_scanning, "dependency_review": security.dependency_review},
    )
    role_policies = derive_branch_role_policies(branches, checks_by_role)

    topology = {
        "version": 1,
        "degraded": inp.evaluation.degraded,
        "degraded_reasons": inp.degraded_reasons(),
        "topology": branching.topology,
        "branches": branches,
        "branch_role_policies": role_policies,
    }
    review_thresholds = {
        "version": 1,
        "maintainer_count": review["maintainer_count"],
        "active_bucket": review["active_bucket"],
        "active_policy": review["policy"],
        "thresholds": thresholds,
    }
    required_checks = {
        "version": 1,
        "required_checks_by_role": checks_by_role,
        "branch_policies": role_policies,
    }
    return [
        ManagedFile.json(TOPOLOGY_PATH, MODULE_ID, topology),
        ManagedFile.json(REVIEW_THRESHOLDS_PATH, MODULE_ID, review_thresholds),
        ManagedFile.json(REQUIRED_CHECKS_PATH, MODULE_ID, required_checks),
    ]


MODULE = ModuleDefinition(
    id=MODULE_ID,
    description=MODULES[MODULE_ID],
    requirements=REQUIREMENTS,
    generate=generate,
)
