"""Target lifecycle: UNINITIALIZED -> INITIALIZED -> IN_SYNC | PENDING_CHANGES -> APPLIED
-> PENDING_UPGRADE -> UPGRADED.

APPLIED and UPGRADED are the states a command leaves behind; on the next
read a target is classified as IN_SYNC, PENDING_CHANGES or PENDING_UPGRADE.
"""

from __future__ import annotations

from baseline_engine.catalog import ENGINE_VERSION
from baseline_engine.engine import build_plan, compute_changes
from baseline_engine.paths import RepoRoot
from baseline_engine.store.manifest import load_manifest
from baseline_engine.store.migrations import parse_semver
from baseline_engine.store.state import EngineState, load_state

UNINITIALIZED = "UNINITIALIZED"
INITIALIZED = "INITIALIZED"
IN_SYNC = "IN_SYNC"
PENDING_CHANGES = "PENDING_CHANGES"
APPLIED = "APPLIED"
PENDING_UPGRADE = "PENDING_UPGRADE"
UPGRADED = "UPGRADED"

TRANSITIONS = {
    UNINITIALIZED: [INITIALIZED],
    INITIALIZED: [IN_SYNC, PENDING_CHANGES, PENDING_UPGRADE],
    IN_SYNC: [PENDING_CHANGES, PENDING_UPGRADE],
    PENDING_CHANGES: [APPLIED, IN_SYNC, PENDING_UPGRADE],
    APPLIED: [IN_SYNC, PENDING_CHANGES, PENDING_UPGRADE],
    PENDING_UPGRADE: [UPGRADED],
    UPGRADED: [IN_SYNC, PENDING_CHANGES],
}


def upgrade_pending(state: EngineState, engine_version: str = ENGINE_VERSION) -> bool:
    return parse_semver(state.installed_version) < parse_semver(engine_version)


def classify(
    config_present: bool,
    state: EngineState | None,
    change_count: int,
    engine_version: str = ENGINE_VERSION,
) -> str:
    """Lifecycle state of a target from what is on disk."""
    if not config_present:
        return UNINITIALIZED
    if state is None:
        return INITIALIZED
    if upgrade_pending(state, engine_version):
        return PENDING_UPGRADE
    return PENDING_CHANGES if change_count else IN_SYNC


def detect_state(root: RepoRoot) -> str:
    """Classify a target, building a plan only when the answer depends on it."""
    if not root.config_path.is_file():
        return UNINITIALIZED
    state = load_state(root)
    if state is None or upgrade_pending(state):
        return classify(True, state, 0)

    plan = build_plan(root)
    changes = compute_changes(root, plan.files, load_manifest(root))
    return classify(True, state, len(changes))


def check_transition(current_state: str, target_state: str) -> tuple[bool, str]:
    """``(True, "")`` when ``current_state`` may move to ``target_state``.

    Otherwise ``(False, reason)``, with the reason naming where the target
    can go from here.
    """
    if current_state not in TRANSITIONS:
        return False, f"{current_state!r} is not a lifecycle state"
    allowed = TRANSITIONS[current_state]
    if target_state in allowed:
        return True, ""
    return False, (
        f"target is {current_state}; it can move to {' or '.join(allowed) or 'nothing'}, "
        f"not {target_state}"
    )
