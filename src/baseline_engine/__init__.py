"""baseline-engine — generate, diff and apply managed governance artifacts.

The engine owns a set of files inside a target repository (CI workflows,
branch and deployment policy records) and keeps them reconciled with the
user's `.baseline/config.yaml`, the platform capability snapshot written by
an external probe, and the engine's own version.
"""

from baseline_engine.catalog import ENGINE_VERSION

__all__ = ["ENGINE_VERSION"]
