"""Changeset publishing for non-direct apply.

The engine never creates branches or pull requests itself. A non-direct
apply hands a Changeset to a publisher:

- ChangesetExporter writes it to `.baseline/changesets/<digest>.json`
  for an external tool to pick up (the default).
- CommandPublisher pipes the changeset JSON to ``updates.pr_command`` on
  stdin, run from the target root.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass, field
from typing import Any

from baseline_engine.catalog import ENGINE_VERSION
from baseline_engine.config.schema import EngineConfig
from baseline_engine.engine import Change
from baseline_engine.errors import PublishError
from baseline_engine.paths import RepoRoot
from baseline_engine.store.io import sha256, stable_json, write_text

logger = logging.getLogger(__name__)


@dataclass
class Changeset:
    changes: list[Change] = field(default_factory=list)
    engine_version: str = ENGINE_VERSION
    title: str = "chore(baseline): sync managed governance files"

    def to_dict(self) -> dict[str, Any]:
        files = []
        for change in self.changes:
            entry = change.to_dict()
            entry["content"] = change.file.content.decode("utf-8") if change.file else None
            entry["hash"] = change.file.hash if change.file else None
            files.append(entry)
        return {
            "version": 1,
            "engine_version": self.engine_version,
            "title": self.title,
            "change_count": len(files),
            "changes": files,
        }

    @property
    def digest(self) -> str:
        return sha256(stable_json(self.to_dict()).encode("utf-8"))[:16]


class ChangesetExporter:
    name = "export"

    def publish(self, root: RepoRoot, changeset: Changeset) -> dict[str, Any]:
        path = root.changesets_dir / f"{changeset.digest}.json"
        write_text(path, stable_json(changeset.to_dict()))
        logger.info("exported changeset %s (%d changes)", path, len(changeset.changes))
        return {"publisher": self.name, "location": str(path), "digest": changeset.digest}


class CommandPublisher:
    name = "command"

    def __init__(self, command: list[str]):
        self.command = list(command)

    def publish(self, root: RepoRoot, changeset: Changeset) -> dict[str, Any]:
        """Run the PR command with the changeset on stdin.

        Raises:
            PublishError: If the command cannot be started or exits non-zero.
        """
        payload = json.dumps(changeset.to_dict())
        try:
            result = subprocess.run(
                self.command,
                cwd=root.path,
                input=payload,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise PublishError(f"cannot run {self.command[0]}: {e}") from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise PublishError(
                f"{' '.join(self.command)} exited {result.returncode}" + (f": {detail}" if detail else "")
            )
        logger.info("published changeset %s via %s", changeset.digest, self.command[0])
        return {
            "publisher": self.name,
            "command": list(self.command),
            "digest": changeset.digest,
            "output": result.stdout.strip(),
        }


def publisher_for(config: EngineConfig) -> ChangesetExporter | CommandPublisher:
    if config.updates.pr_command:
        return CommandPublisher(config.updates.pr_command)
    return ChangesetExporter()
