"""Module registry — the fixed table of generator modules.

Modules are registered statically, in generation order. There is no
runtime discovery: adding a module means adding it to REGISTRY.
"""

from __future__ import annotations

from baseline_engine.modules import core_ci, core_deployments, core_governance, core_planning, core_security
from baseline_engine.modules.base import (
    CapabilityRequirements,
    GenerationInput,
    ManagedFile,
    ModuleDefinition,
)

REGISTRY: tuple[ModuleDefinition, ...] = (
    core_governance.MODULE,
    core_ci.MODULE,
    core_deployments.MODULE,
    core_planning.MODULE,
    core_security.MODULE,
)


def get_module(module_id: str) -> ModuleDefinition:
    for module in REGISTRY:
        if module.id == module_id:
            return module
    raise KeyError(module_id)


__all__ = [
    "REGISTRY",
    "CapabilityRequirements",
    "GenerationInput",
    "ManagedFile",
    "ModuleDefinition",
    "get_module",
]
