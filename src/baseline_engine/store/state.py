"""Load and save `.baseline/state.json`."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from baseline_engine.errors import ConfigError
from baseline_engine.paths import RepoRoot
from baseline_engine.store.io import read_bytes, write_json

logger = logging.getLogger(__name__)

STATE_SCHEMA_VERSION = 1


@dataclass
class EngineState:
    """Installed engine version and the migrations already applied."""

    installed_version: str = "0.0.0"
    channel: str = "stable"
    migrations: list[dict[str, str]] = field(default_factory=list)
    schema_version: int = STATE_SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "installed_version": self.installed_version,
            "channel": self.channel,
            "migrations": [dict(m) for m in self.migrations],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineState":
        migrations = data.get("migrations") or []
        if not isinstance(migrations, list):
            raise ConfigError("state.json: 'migrations' must be a list")
        return cls(
            installed_version=str(data.get("installed_version") or "0.0.0"),
            channel=str(data.get("channel") or "stable"),
            migrations=[dict(m) for m in migrations if isinstance(m, dict)],
            schema_version=int(data.get("schema_version") or STATE_SCHEMA_VERSION),
        )


def load_state(root: RepoRoot) -> EngineState | None:
    """Read state.json, or None if it does not exist.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = root.state_path
    raw = read_bytes(path)
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"{path}: invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} is not a JSON object")
    return EngineState.from_dict(data)


def save_state(root: RepoRoot, state: EngineState) -> None:
    write_json(root.state_path, state.to_dict())
    logger.debug("wrote %s (installed_version=%s)", root.state_path, state.installed_version)
