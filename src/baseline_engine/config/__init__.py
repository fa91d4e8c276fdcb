"""Typed configuration schema, defaults and the config.yaml loader."""

from baseline_engine.config.loader import default_config, load_config, load_raw_config, save_config
from baseline_engine.config.schema import EngineConfig

__all__ = [
    "EngineConfig",
    "default_config",
    "load_config",
    "load_raw_config",
    "save_config",
]
