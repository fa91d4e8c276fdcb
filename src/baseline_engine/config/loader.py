"""Load and save `.baseline/config.yaml`."""

from __future__ import annotations

import logging
from typing import Any

import yaml

from baseline_engine.config.schema import EngineConfig
from baseline_engine.errors import ConfigError
from baseline_engine.paths import RepoRoot
from baseline_engine.policy.deployments import detect_components
from baseline_engine.store.io import write_text

logger = logging.getLogger(__name__)


def load_raw_config(root: RepoRoot) -> dict[str, Any]:
    """Read config.yaml as a plain mapping without applying defaults.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    path = root.config_path
    if not path.is_file():
        raise ConfigError(f"{path} not found. Run 'baseline-engine init' first.")
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML: {e}") from e
    except OSError as e:
        raise ConfigError(f"{path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} is not a YAML mapping")
    return data


def load_config(root: RepoRoot) -> EngineConfig:
    """Read and validate config.yaml."""
    raw = load_raw_config(root)
    try:
        return EngineConfig.from_dict(raw)
    except ConfigError as e:
        raise ConfigError(f"{root.config_path}: {e}") from e


def dump_config(data: dict[str, Any]) -> str:
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def save_config(root: RepoRoot, data: dict[str, Any]) -> None:
    """Write a config mapping back to config.yaml."""
    write_text(root.config_path, dump_config(data))
    logger.debug("wrote %s", root.config_path)


def default_config(
    root: RepoRoot,
    profile: str = "strict",
) -> dict[str, Any]:
    """Build the fully-expanded default config for a target repository.

    Deployment components are detected from the target tree; everything
    else comes from the schema defaults.
    """
    config = EngineConfig.from_dict({
        "policy": {"profile": profile},
        "deployments": {"components": detect_components(root.path)},
    })
    return config.to_dict()
