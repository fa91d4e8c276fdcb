"""Write a set of changes to the working tree and record them in the manifest."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from baseline_engine.engine import Change
from baseline_engine.paths import RepoRoot
from baseline_engine.store.io import read_bytes, sha256, write_bytes
from baseline_engine.store.manifest import Manifest

logger = logging.getLogger(__name__)


@dataclass
class WriteOutcome:
    written: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def write_changes(root: RepoRoot, changes: list[Change], manifest: Manifest) -> WriteOutcome:
    """Apply changes file by file, updating ``manifest`` in memory.

    Added and modified files are replaced atomically. A removed file is
    deleted only while it still has the recorded hash; a file edited by
    hand is left in place and simply no longer managed. There is no
    rollback if a later write fails.
    """
    outcome = WriteOutcome()
    for change in changes:
        path = root.file(change.path)
        if change.kind == "removed":
            entry = manifest.get(change.path)
            current = read_bytes(path)
            if current is not None and entry is not None and sha256(current) == entry.hash:
                path.unlink()
                outcome.deleted.append(change.path)
                logger.info("deleted %s", change.path)
            elif current is not None:
                outcome.kept.append(change.path)
                outcome.warnings.append(
                    f"{change.path}: modified locally; left in place and no longer managed"
                )
            manifest.forget(change.path)
            continue

        managed = change.file
        if managed is None:
            continue
        if change.locally_modified:
            outcome.warnings.append(f"{change.path}: local edits overwritten")
        write_bytes(path, managed.content)
        manifest.record(managed.path, managed.owner_module, managed.hash, managed.strategy)
        outcome.written.append(managed.path)
        logger.info("wrote %s (%s)", managed.path, managed.owner_module)
    return outcome
