"""Version-gated config/state migrations.

Each migration is a plain function over the raw config mapping (as read
from config.yaml, before validation) and the engine state. A migration is
pending when its version lies in (installed_version, target_version].
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable

from baseline_engine.catalog import DEFAULT_MODULES, ENGINE_VERSION
from baseline_engine.config.schema import DEFAULT_ACTION_REFS
from baseline_engine.errors import ConfigError
from baseline_engine.store.state import EngineState

_SEMVER = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


def parse_semver(value: str) -> tuple[int, int, int]:
    """Parse ``MAJOR.MINOR.PATCH``.

    Raises:
        ConfigError: If the string is not a plain semantic version.
    """
    m = _SEMVER.match(str(value).strip())
    if not m:
        raise ConfigError(f"Invalid version '{value}' (expected MAJOR.MINOR.PATCH)")
    return int(m.group(1)), int(m.group(2)), int(m.group(3))


@dataclass(frozen=True)
class Migration:
    version: str
    description: str
    apply: Callable[[dict[str, Any], EngineState, list[str]], None]

    def to_dict(self) -> dict[str, str]:
        return {"version": self.version, "description": self.description}


def _section(config: dict[str, Any], key: str) -> dict[str, Any]:
    value = config.get(key)
    if not isinstance(value, dict):
        value = {}
        config[key] = value
    return value


def _migrate_2_2_0(config: dict[str, Any], state: EngineState, notes: list[str]) -> None:
    if "modules" not in config:
        config["modules"] = list(DEFAULT_MODULES)
        notes.append("Added default module list.")
    if not isinstance(config.get("updates"), dict):
        config["updates"] = {"channel": "stable", "apply_mode": "pr_first"}
        notes.append("Added updates block with PR-first mode.")
    if not isinstance(config.get("policy"), dict):
        config["policy"] = {
            "profile": "strict",
            "require_github_app": False,
            "enforce_codeowners_protected_paths": True,
        }
        notes.append("Added policy block.")
    state.channel = config["updates"].get("channel") or state.channel


def _migrate_2_3_0(config: dict[str, Any], state: EngineState, notes: list[str]) -> None:
    modules = config.get("modules")
    if isinstance(modules, dict):
        config["modules"] = list(modules.get("enabled") or DEFAULT_MODULES)
        notes.append("Flattened modules.enabled into a module list.")

    policy = _section(config, "policy")
    if "require_pinned_action_refs" not in policy:
        policy["require_pinned_action_refs"] = False
        notes.append("Added policy.require_pinned_action_refs (off).")

    ci = _section(config, "ci")
    if not isinstance(ci.get("action_refs"), dict):
        ci["action_refs"] = dict(DEFAULT_ACTION_REFS)
        notes.append("Added ci.action_refs with tag references.")

    deployments = _section(config, "deployments")
    if "require_environment_reviewers" not in deployments:
        deployments["require_environment_reviewers"] = True
        notes.append("Added deployments.require_environment_reviewers.")


MIGRATIONS: tuple[Migration, ...] = (
    Migration("2.2.0", "Introduce module registry, update channel and policy defaults.", _migrate_2_2_0),
    Migration("2.3.0", "Pinned action references and environment reviewer settings.", _migrate_2_3_0),
)


def pending_migrations(
    installed_version: str,
    target_version: str = ENGINE_VERSION,
    migrations: tuple[Migration, ...] = MIGRATIONS,
) -> list[Migration]:
    """Migrations newer than the installed version, up to the target, in order."""
    current = parse_semver(installed_version)
    target = parse_semver(target_version)
    selected = [m for m in migrations if current < parse_semver(m.version) <= target]
    return sorted(selected, key=lambda m: parse_semver(m.version))
