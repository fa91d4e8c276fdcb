"""Engine-owned persistent state: manifest, state.json and migrations."""

from baseline_engine.store.manifest import Manifest, ManifestEntry, load_manifest, save_manifest
from baseline_engine.store.state import EngineState, load_state, save_state

__all__ = [
    "EngineState",
    "Manifest",
    "ManifestEntry",
    "load_manifest",
    "load_state",
    "save_manifest",
    "save_state",
]
