"""What every registered generator module provides."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from baseline_engine.catalog import DEGRADE_STRATEGIES
from baseline_engine.store.io import sha256, stable_json

if TYPE_CHECKING:
    from baseline_engine.capabilities.evaluator import ModuleEvaluation
    from baseline_engine.capabilities.snapshot import CapabilitySnapshot
    from baseline_engine.config.schema import EngineConfig
    from baseline_engine.policy.effective_settings import EffectiveConfig

WRITE_STRATEGIES = ("replace",)


@dataclass(frozen=True)
class CapabilityRequirements:
    """Capabilities a module relies on and what happens when one is missing."""

    requires: tuple[str, ...] = ()
    degrade_strategy: str = "warn"
    remediation: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.degrade_strategy not in DEGRADE_STRATEGIES:
            raise ValueError(
                f"degrade_strategy must be one of {', '.join(DEGRADE_STRATEGIES)}, got {self.degrade_strategy!r}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "requires": list(self.requires),
            "degrade_strategy": self.degrade_strategy,
            "remediation": dict(self.remediation),
        }


@dataclass(frozen=True)
class ManagedFile:
    """One generated artifact, owned by exactly one module."""

    path: str
    content: bytes
    owner_module: str
    strategy: str = "replace"

    def __post_init__(self):
        if self.strategy not in WRITE_STRATEGIES:
            raise ValueError(f"unsupported write strategy {self.strategy!r} for {self.path}")

    @property
    def hash(self) -> str:
        return sha256(self.content)

    @classmethod
    def json(cls, path: str, owner_module: str, value: Any) -> "ManagedFile":
        return cls(path=path, content=stable_json(value).encode("utf-8"), owner_module=owner_module)

    @classmethod
    def text(cls, path: str, owner_module: str, text: str) -> "ManagedFile":
        return cls(path=path, content=text.encode("utf-8"), owner_module=owner_module)


@dataclass(frozen=True)
class GenerationInput:
    """Everything a generator may look at. Generators must not touch disk."""

    effective: "EffectiveConfig"
    evaluation: "ModuleEvaluation"
    snapshot: "CapabilitySnapshot"
    active_modules: tuple[str, ...] = ()

    @property
    def config(self) -> "EngineConfig":
        return self.effective.config

    def degraded_reasons(self) -> list[dict[str, str]]:
        return [
            {"capability": m.capability, "reason": m.reason, "remediation": m.remediation}
            for m in self.evaluation.missing
        ]


@dataclass(frozen=True)
class ModuleDefinition:
    id: str
    description: str
    requirements: CapabilityRequirements
    generate: Callable[[GenerationInput], list[ManagedFile]]

    def enabled(self, config: "EngineConfig") -> bool:
        return config.is_enabled(self.id)
