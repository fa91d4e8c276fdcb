"""core-deployments — approval matrix and the deploy workflow."""

from __future__ import annotations

from dataclasses import asdict

from baseline_engine.catalog import MODULES
from baseline_engine.modules import templates
from baseline_engine.modules.base import CapabilityRequirements, GenerationInput, ManagedFile, ModuleDefinition
from baseline_engine.policy.deployments import matrix_coverage

MODULE_ID = "core-deployments"

APPROVAL_MATRIX_PATH = "config/policy/baseline-deployment-approval-matrix.json"
DEPLOY_PATH = ".github/workflows/baseline-deploy.yml"

REQUIREMENTS = CapabilityRequirements(
    requires=("environments",),
    degrade_strategy="warn",
    remediation={
        "environments": "Deployment environments are unavailable; the deploy workflow runs "
                        "without environment protection. Enforce approvals via the matrix.",
    },
)


def generate(inp: GenerationInput) -> list[ManagedFile]:
    deployments = inp.config.deployments
    env_names = [e.name for e in deployments.environments]
    components = [c for c in deployments.components if c.enabled]
    rows = [asdict(r) for r in deployments.approval_matrix]

    matrix = {
        "version": 1,
        "degraded": inp.evaluation.degraded,
        "degraded_reasons": inp.degraded_reasons(),
        "policy_profile": inp.config.policy.profile,
        "require_environment_reviewers": deployments.require_environment_reviewers,
        "environments": [asdict(e) for e in deployments.environments],
        "components": [asdict(c) for c in deployments.components],
        "approval_matrix": rows,
        "coverage": matrix_coverage(env_names, [c.id for c in components], rows),
    }

    binding = templates.ENVIRONMENT_BINDING if deployments.require_environment_reviewers else ""
    deploy = templates.DEPLOY.format(
        header=templates.GENERATED_HEADER,
        environment_options=templates.yaml_options(env_names),
        component_options=templates.yaml_options([c.id for c in components]),
        environment_binding=binding,
        checkout=templates.action(inp.config.ci.action_refs, "actions/checkout"),
    )
    return [
        ManagedFile.json(APPROVAL_MATRIX_PATH, MODULE_ID, matrix),
        ManagedFile.text(DEPLOY_PATH, MODULE_ID, deploy),
    ]


MODULE = ModuleDefinition(
    id=MODULE_ID,
    description=MODULES[MODULE_ID],
    requirements=REQUIREMENTS,
    generate=generate,
)
