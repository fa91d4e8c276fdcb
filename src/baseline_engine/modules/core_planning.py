"""core-planning — planning policy and the automation allowlist."""

from __future__ import annotations

from dataclasses import asdict

from baseline_engine.catalog import MODULES
from baseline_engine.modules.base import CapabilityRequirements, GenerationInput, ManagedFile, ModuleDefinition

MODULE_ID = "core-planning"

PLANNING_POLICY_PATH = "config/policy/baseline-planning-policy.json"


def generate(inp: GenerationInput) -> list[ManagedFile]:
    planning = inp.config.planning
    policy = {
        "version": 1,
        "required": planning.required,
        "automation_allowlist": [asdict(a) for a in planning.automation_allowlist],
        "degraded": inp.evaluation.degraded,
        "degraded_reasons": inp.degraded_reasons(),
    }
    return [ManagedFile.json(PLANNING_POLICY_PATH, MODULE_ID, policy)]


MODULE = ModuleDefinition(
    id=MODULE_ID,
    description=MODULES[MODULE_ID],
    requirements=CapabilityRequirements(),
    generate=generate,
)
