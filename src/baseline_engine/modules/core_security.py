"""core-security — code scanning and dependency review workflow.

Not enabled by default. Uses the ``disable`` strategy: without the
scanning capabilities it generates nothing rather than a workflow that
would fail on every pull request.
"""

from __future__ import annotations

from baseline_engine.catalog import MODULES
from baseline_engine.modules import templates
from baseline_engine.modules.base import CapabilityRequirements, GenerationInput, ManagedFile, ModuleDefinition
from baseline_engine.policy.branching import resolve_branch_roles

MODULE_ID = "core-security"

SECURITY_PATH = ".github/workflows/baseline-security.yml"

REQUIREMENTS = CapabilityRequirements(
    requires=("code_scanning", "dependency_review"),
    degrade_strategy="disable",
    remediation={
        "code_scanning": "Enable code scanning (GitHub Advanced Security for private repositories).",
        "dependency_review": "Enable the dependency graph to use dependency review.",
    },
)


def generate(inp: GenerationInput) -> list[ManagedFile]:
    security = inp.config.security
    refs = inp.config.ci.action_refs
    checkout = templates.action(refs, "actions/checkout")

    jobs = []
    if security.code_scanning:
        jobs.append(templates.CODE_SCANNING_JOB.format(
            languages=", ".join(templates.scalar(lang) for lang in security.languages),
            checkout=checkout,
            codeql_init=templates.action(refs, "github/codeql-action/init"),
            codeql_analyze=templates.action(refs, "github/codeql-action/analyze"),
        ))
    if security.dependency_review:
        jobs.append(templates.DEPENDENCY_REVIEW_JOB.format(
            checkout=checkout,
            dependency_review=templates.action(refs, "actions/dependency-review-action"),
        ))

    roles = resolve_branch_roles([{"name": b.name, "role": b.role} for b in inp.config.branching.branches])
    workflow = templates.SECURITY.format(
        header=templates.GENERATED_HEADER,
        default_branch=templates.scalar(roles.get("production", "main")),
        jobs="\n".join(jobs) if jobs else templates.NO_SECURITY_JOBS,
    )
    return [ManagedFile.text(SECURITY_PATH, MODULE_ID, workflow)]


MODULE = ModuleDefinition(
    id=MODULE_ID,
    description=MODULES[MODULE_ID],
    requirements=REQUIREMENTS,
    generate=generate,
)
