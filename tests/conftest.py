"""Shared test fixtures for baseline-engine."""

import json

import pytest
import yaml

from baseline_engine.capabilities.snapshot import parse_snapshot, stub_snapshot
from baseline_engine.config.schema import EngineConfig
from baseline_engine.operations.init import run_init
from baseline_engine.paths import RepoRoot

ALL_SUPPORTED = {
    "rulesets": True,
    "merge_queue": True,
    "environments": True,
    "code_scanning": True,
    "dependency_review": True,
    "repo_variables": True,
    "github_app_required": True,
}

PINNED_REFS = {
    "actions/checkout": "b4ffde65f46336ab88eb53be808477a3936bae11",
    "actions/setup-node": "60edb5dd545a775178f52524783378180af0d1f8",
    "actions/dependency-review-action": "72eb03d02c7872a771aacd928f3123ac62ad6d3a",
    "github/codeql-action/init": "e5f05b81d5b6ff8cfa111c80c22c5fd02a384118",
    "github/codeql-action/analyze": "e5f05b81d5b6ff8cfa111c80c22c5fd02a384118",
}


def snapshot_data(supported: dict[str, bool] | None = None, maintainer_count: int = 1, **flags) -> dict:
    """Snapshot document with the given capabilities supported (others unsupported)."""
    data = stub_snapshot("Organization", False)
    for key, ok in (supported or {}).items():
        data["capabilities"][key] = {
            "supported": ok,
            "state": "supported" if ok else "unsupported",
            "reason": "api_success" if ok else "not_available",
        }
    for key, value in flags.items():
        data["capabilities"].setdefault(key, {"supported": False, "state": "unknown", "reason": "absent"})
        data["capabilities"][key]["github_app_required"] = value
    data["collaborators"]["maintainer_count"] = maintainer_count
    return data


@pytest.fixture
def target(tmp_path):
    """An empty target repository with two deployable apps."""
    (tmp_path / "apps" / "api").mkdir(parents=True)
    (tmp_path / "apps" / "web").mkdir(parents=True)
    return RepoRoot.resolve(tmp_path)


@pytest.fixture
def initialized(target):
    run_init(target)
    return target


@pytest.fixture
def write_snapshot():
    def _write(root: RepoRoot, supported: dict[str, bool] | None = None, **kwargs) -> None:
        root.capabilities_path.parent.mkdir(parents=True, exist_ok=True)
        root.capabilities_path.write_text(json.dumps(snapshot_data(supported, **kwargs), indent=2))
    return _write


@pytest.fixture
def update_config():
    def _update(root: RepoRoot, **sections) -> dict:
        data = yaml.safe_load(root.config_path.read_text()) or {}
        for key, value in sections.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key].update(value)
            else:
                data[key] = value
        root.config_path.write_text(yaml.safe_dump(data, sort_keys=False))
        return data
    return _update


@pytest.fixture
def make_config():
    def _make(**sections) -> EngineConfig:
        return EngineConfig.from_dict(sections)
    return _make


@pytest.fixture
def make_snapshot():
    def _make(supported: dict[str, bool] | None = None, **kwargs):
        return parse_snapshot(snapshot_data(supported, **kwargs))
    return _make


@pytest.fixture
def all_supported():
    return dict(ALL_SUPPORTED)


@pytest.fixture
def pinned_refs():
    return dict(PINNED_REFS)
