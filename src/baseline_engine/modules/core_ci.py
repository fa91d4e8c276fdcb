"""core-ci — change profiles, two-lane PR gate and reusable node runner."""

from __future__ import annotations

from baseline_engine.catalog import MODULES
from baseline_engine.modules import templates
from baseline_engine.modules.base import CapabilityRequirements, GenerationInput, ManagedFile, ModuleDefinition

MODULE_ID = "core-ci"

CHANGE_PROFILES_PATH = "config/ci/baseline-change-profiles.json"
PR_GATE_PATH = ".github/workflows/baseline-pr-gate.yml"
NODE_RUN_PATH = ".github/workflows/baseline-node-run.yml"

REQUIREMENTS = CapabilityRequirements(
    requires=("merge_queue",),
    degrade_strategy="warn",
    remediation={
        "merge_queue": "Merge queue is unavailable; the full lane runs on label or manual "
                       "dispatch only. Disable ci.full_lane_triggers.merge_queue to silence this.",
    },
)


def _flag(value: bool) -> str:
    return "1" if value else "0"


def generate(inp: GenerationInput) -> list[ManagedFile]:
    ci = inp.config.ci
    triggers = ci.full_lane_triggers
    refs = ci.action_refs
    overrides = [o for o in inp.effective.overrides if o["key"].startswith("ci.")]

    profiles = {
        "version": 1,
        "profile_source": "settings",
        "ci_mode": ci.mode,
        "full_lane_triggers": {
            "merge_queue": triggers.merge_queue,
            "manual_dispatch": triggers.manual_dispatch,
            "label": triggers.label,
            "paths": list(triggers.paths),
        },
        "degraded": inp.evaluation.degraded,
        "degraded_reasons": inp.degraded_reasons(),
        "effective_overrides": overrides,
        "profiles": [
            {
                "id": p.id,
                "description": p.description,
                "include_re": list(p.include_re),
                "exclude_re": list(p.exclude_re),
                "skip_full_lane": p.skip_full_lane,
                "run_fast_checks": p.run_fast_checks,
            }
            for p in ci.change_profiles
        ],
    }

    pr_gate = templates.PR_GATE.format(
        header=templates.GENERATED_HEADER,
        merge_group_trigger=templates.MERGE_GROUP_TRIGGER if triggers.merge_queue else "",
        dispatch_trigger=templates.DISPATCH_TRIGGER if triggers.manual_dispatch else "",
        mode=ci.mode,
        merge_queue=_flag(triggers.merge_queue),
        manual_dispatch=_flag(triggers.manual_dispatch),
        label=templates.scalar(triggers.label),
        node_version=templates.scalar(ci.node_version),
        checkout=templates.action(refs, "actions/checkout"),
        setup_node=templates.action(refs, "actions/setup-node"),
    )
    node_run = templates.NODE_RUN.format(
        header=templates.GENERATED_HEADER,
        node_version=templates.scalar(ci.node_version),
        checkout=templates.action(refs, "actions/checkout"),
        setup_node=templates.action(refs, "actions/setup-node"),
    )

    return [
        ManagedFile.json(CHANGE_PROFILES_PATH, MODULE_ID, profiles),
        ManagedFile.text(PR_GATE_PATH, MODULE_ID, pr_gate),
        ManagedFile.text(NODE_RUN_PATH, MODULE_ID, node_run),
    ]


MODULE = ModuleDefinition(
    id=MODULE_ID,
    description=MODULES[MODULE_ID],
    requirements=REQUIREMENTS,
    generate=generate,
)
