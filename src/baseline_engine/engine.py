"""Reconciliation pipeline.

config + capability snapshot → evaluate → resolve effective settings →
generate managed files → compare with the manifest and the working tree.

Nothing here writes to disk; operations decide what to persist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from baseline_engine.capabilities.evaluator import EvaluationResult, evaluate
from baseline_engine.capabilities.snapshot import CapabilitySnapshot, load_snapshot
from baseline_engine.config import load_config
from baseline_engine.config.schema import EngineConfig
from baseline_engine.errors import ModuleGenerationError
from baseline_engine.modules import REGISTRY
from baseline_engine.modules.base import GenerationInput, ManagedFile, ModuleDefinition
from baseline_engine.paths import RepoRoot
from baseline_engine.policy.effective_settings import EffectiveConfig, resolve
from baseline_engine.policy.gates import policy_violations, unpinned_action_refs
from baseline_engine.store.io import read_bytes, sha256
from baseline_engine.store.manifest import Manifest

logger = logging.getLogger(__name__)

CHANGE_KINDS = ("added", "modified", "removed")


@dataclass
class Change:
    path: str
    kind: str
    module: str
    file: ManagedFile | None = None
    locally_modified: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "kind": self.kind,
            "module": self.module,
            "locally_modified": self.locally_modified,
        }


@dataclass
class Plan:
    """One invocation's fully computed view of a target."""

    root: RepoRoot
    config: EngineConfig
    snapshot: CapabilitySnapshot
    evaluation: EvaluationResult
    effective: EffectiveConfig
    files: list[ManagedFile] = field(default_factory=list)
    unpinned: list[dict[str, str]] = field(default_factory=list)
    violations: list[str] = field(default_factory=list)

    @property
    def by_path(self) -> dict[str, ManagedFile]:
        return {f.path: f for f in self.files}

    @property
    def warnings(self) -> list[str]:
        return list(self.snapshot.warnings) + list(self.evaluation.warnings)


def generate_files(
    effective: EffectiveConfig,
    evaluation: EvaluationResult,
    snapshot: CapabilitySnapshot,
    registry: Iterable[ModuleDefinition] = REGISTRY,
) -> list[ManagedFile]:
    """Run every generating module in registry order.

    Raises:
        ModuleGenerationError: If a generator raises, or two modules claim
            the same path.
    """
    active = tuple(evaluation.active_modules)
    files: list[ManagedFile] = []
    owners: dict[str, str] = {}

    for module in registry:
        entry = evaluation.get(module.id)
        if entry is None or not entry.generates:
            continue
        inp = GenerationInput(effective=effective, evaluation=entry, snapshot=snapshot, active_modules=active)
        try:
            generated = list(module.generate(inp))
        except Exception as e:
            raise ModuleGenerationError(module.id, e) from e

        for managed in generated:
            if managed.path in owners:
                raise ModuleGenerationError(
                    module.id, ValueError(f"{managed.path} is already generated by {owners[managed.path]}")
                )
            owners[managed.path] = module.id
            files.append(managed)
        logger.debug("%s generated %d file(s)", module.id, len(generated))

    return files


def build_plan(
    root: RepoRoot,
    config: EngineConfig | None = None,
    snapshot: CapabilitySnapshot | None = None,
    registry: tuple[ModuleDefinition, ...] = REGISTRY,
) -> Plan:
    """Load whatever was not passed in and compute the desired file set."""
    config = config if config is not None else load_config(root)
    snapshot = snapshot if snapshot is not None else load_snapshot(root)

    evaluation = evaluate(registry, snapshot, config)
    effective = resolve(config, evaluation, snapshot)
    files = generate_files(effective, evaluation, snapshot, registry)
    unpinned = unpinned_action_refs(files)
    return Plan(
        root=root,
        config=config,
        snapshot=snapshot,
        evaluation=evaluation,
        effective=effective,
        files=files,
        unpinned=unpinned,
        violations=policy_violations(config, evaluation, unpinned),
    )


def compute_changes(root: RepoRoot, files: list[ManagedFile], manifest: Manifest) -> list[Change]:
    """Delta between the desired files, the manifest and the working tree.

    A desired file is ``added`` when absent on disk and ``modified`` unless
    the manifest hash, the on-disk hash and the desired hash all agree.
    Manifest entries no longer desired are ``removed``.
    """
    changes: list[Change] = []
    desired = set()

    for managed in files:
        desired.add(managed.path)
        entry = manifest.get(managed.path)
        current = read_bytes(root.file(managed.path))
        if current is None:
            changes.append(Change(managed.path, "added", managed.owner_module, managed))
            continue

        on_disk = sha256(current)
        recorded = entry.hash if entry else None
        if recorded == on_disk == managed.hash:
            continue
        changes.append(Change(
            managed.path,
            "modified",
            managed.owner_module,
            managed,
            locally_modified=recorded is not None and recorded != on_disk,
        ))

    for path in sorted(manifest.files):
        if path in desired:
            continue
        entry = manifest.files[path]
        current = read_bytes(root.file(path))
        changes.append(Change(
            path,
            "removed",
            entry.module,
            locally_modified=current is not None and sha256(current) != entry.hash,
        ))

    return sorted(changes, key=lambda c: c.path)
