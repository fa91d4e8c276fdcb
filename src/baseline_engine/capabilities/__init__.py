"""Platform capabilities — snapshot loading, entitlement advice, module evaluation."""

from baseline_engine.capabilities.entitlements import evaluate_entitlements
from baseline_engine.capabilities.snapshot import (
    Capability,
    CapabilitySnapshot,
    load_snapshot,
    parse_snapshot,
    stub_snapshot,
)

__all__ = [
    "Capability",
    "CapabilitySnapshot",
    "evaluate_entitlements",
    "load_snapshot",
    "parse_snapshot",
    "stub_snapshot",
]
