"""Load and save `.baseline/managed-files.json`.

The manifest records every file the engine owns:

    {"version": 1, "files": {"<path>": {"module": ..., "hash": ..., "strategy": ...}}}

Only init, apply and upgrade write it. Saving re-reads the file first and
refuses to overwrite a manifest that another writer changed after it was
loaded.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from baseline_engine.errors import ManifestConflictError, ManifestDriftError
from baseline_engine.paths import RepoRoot
from baseline_engine.store.io import read_bytes, sha256, stable_json, write_text

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1


@dataclass
class ManifestEntry:
    module: str
    hash: str
    strategy: str = "replace"

    def to_dict(self) -> dict:
        return {"module": self.module, "hash": self.hash, "strategy": self.strategy}


@dataclass
class Manifest:
    """In-memory manifest plus the digest of the bytes it was read from."""

    files: dict[str, ManifestEntry] = field(default_factory=dict)
    loaded_digest: str | None = None

    def get(self, path: str) -> ManifestEntry | None:
        return self.files.get(path)

    def record(self, path: str, module: str, digest: str, strategy: str = "replace") -> None:
        self.files[path] = ManifestEntry(module=module, hash=digest, strategy=strategy)

    def forget(self, path: str) -> None:
        self.files.pop(path, None)

    def to_dict(self) -> dict:
        return {
            "version": MANIFEST_VERSION,
            "files": {path: self.files[path].to_dict() for path in sorted(self.files)},
        }


def load_manifest(root: RepoRoot) -> Manifest:
    """Read the manifest. A missing file yields an empty manifest.

    Raises:
        ManifestDriftError: If the file exists but cannot be parsed.
    """
    path = root.manifest_path
    raw = read_bytes(path)
    if raw is None:
        return Manifest()

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ManifestDriftError(f"{path}: invalid JSON: {e}", [str(path)]) from e

    files = data.get("files") if isinstance(data, dict) else None
    if not isinstance(files, dict):
        raise ManifestDriftError(f"{path}: expected an object with a 'files' mapping", [str(path)])

    manifest = Manifest(loaded_digest=sha256(raw))
    for rel, entry in files.items():
        if rel.startswith("/") or ".." in rel.split("/"):
            raise ManifestDriftError(f"{path}: entry '{rel}' points outside the target", [rel])
        if not isinstance(entry, dict) or not entry.get("hash"):
            raise ManifestDriftError(f"{path}: malformed entry for '{rel}'", [rel])
        manifest.record(
            rel,
            str(entry.get("module", "")),
            str(entry["hash"]),
            str(entry.get("strategy", "replace")),
        )
    return manifest


def save_manifest(root: RepoRoot, manifest: Manifest) -> None:
    """Write the manifest if nobody else has changed it since it was loaded.

    Raises:
        ManifestConflictError: On a concurrent modification.
    """
    path = root.manifest_path
    current = read_bytes(path)
    current_digest = sha256(current) if current is not None else None
    if current_digest != manifest.loaded_digest:
        raise ManifestConflictError(
            f"{path} changed since it was read; another baseline-engine run "
            "may be writing to this target. Re-run the command.",
            [str(path)],
        )

    text = stable_json(manifest.to_dict())
    write_text(path, text)
    manifest.loaded_digest = sha256(text.encode("utf-8"))
    logger.debug("wrote %s (%d files)", path, len(manifest.files))
