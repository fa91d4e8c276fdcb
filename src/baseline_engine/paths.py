"""Target repository path resolution.

Every command works against an explicit RepoRoot. The target is taken
from --target, then the environment, then the current directory.

Environment variables:
    BASELINE_TARGET_DIR — target repository root (default: current directory)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

BASELINE_DIR = ".baseline"
CONFIG_FILE = f"{BASELINE_DIR}/config.yaml"
STATE_FILE = f"{BASELINE_DIR}/state.json"
MANIFEST_FILE = f"{BASELINE_DIR}/managed-files.json"
CAPABILITIES_FILE = f"{BASELINE_DIR}/capabilities/github.json"
CHANGESETS_DIR = f"{BASELINE_DIR}/changesets"


@dataclass(frozen=True)
class RepoRoot:
    """Absolute root of the target repository."""

    path: Path

    @classmethod
    def resolve(cls, raw: str | Path | None = None) -> "RepoRoot":
        value = raw or os.environ.get("BASELINE_TARGET_DIR") or os.getcwd()
        return cls(Path(value).expanduser().resolve())

    @property
    def config_path(self) -> Path:
        return self.path / CONFIG_FILE

    @property
    def state_path(self) -> Path:
        return self.path / STATE_FILE

    @property
    def manifest_path(self) -> Path:
        return self.path / MANIFEST_FILE

    @property
    def capabilities_path(self) -> Path:
        return self.path / CAPABILITIES_FILE

    @property
    def changesets_dir(self) -> Path:
        return self.path / CHANGESETS_DIR

    def file(self, relpath: str) -> Path:
        """Absolute path of a repo-relative POSIX path.

        Raises:
            ValueError: If the path is absolute or escapes the root.
        """
        rel = PurePosixPath(relpath)
        if rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"Managed path must stay inside the target: {relpath}")
        return self.path.joinpath(*rel.parts)
