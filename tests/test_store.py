"""Tests for the manifest, state and file helpers."""

import json

import pytest

from baseline_engine.errors import ConfigError, ManifestConflictError, ManifestDriftError
from baseline_engine.store.io import read_bytes, stable_json, write_bytes
from baseline_engine.store.manifest import Manifest, load_manifest, save_manifest
from baseline_engine.store.state import EngineState, load_state, save_state


class TestIo:
    def test_write_creates_parents(self, tmp_path):
        path = tmp_path / "a" / "b" / "file.bin"
        write_bytes(path, b"data")
        assert path.read_bytes() == b"data"
        assert [p.name for p in path.parent.iterdir()] == ["file.bin"]

    def test_read_missing(self, tmp_path):
        assert read_bytes(tmp_path / "nope") is None

    def test_stable_json(self):
        assert stable_json({"b": 1, "a": [1]}) == '{\n  "b": 1,\n  "a": [\n    1\n  ]\n}\n'


class TestManifest:
    def test_missing_is_empty(self, target):
        manifest = load_manifest(target)
        assert manifest.files == {}
        assert manifest.loaded_digest is None

    def test_round_trip(self, target):
        manifest = load_manifest(target)
        manifest.record("b.txt", "core-ci", "22")
        manifest.record("a.txt", "core-ci", "11")
        save_manifest(target, manifest)

        data = json.loads(target.manifest_path.read_text())
        assert list(data["files"]) == ["a.txt", "b.txt"]
        again = load_manifest(target)
        assert again.get("a.txt").hash == "11"
        assert again.get("b.txt").module == "core-ci"

    def test_save_twice_from_same_load(self, target):
        manifest = load_manifest(target)
        save_manifest(target, manifest)
        manifest.record("a.txt", "core-ci", "11")
        save_manifest(target, manifest)
        assert load_manifest(target).get("a.txt") is not None

    def test_concurrent_write_detected(self, target):
        first = load_manifest(target)
        second = load_manifest(target)
        first.record("a.txt", "core-ci", "11")
        save_manifest(target, first)

        second.record("b.txt", "core-ci", "22")
        with pytest.raises(ManifestConflictError):
            save_manifest(target, second)
        assert load_manifest(target).get("b.txt") is None

    def test_invalid_json(self, target):
        target.manifest_path.parent.mkdir(parents=True)
        target.manifest_path.write_text("{nope")
        with pytest.raises(ManifestDriftError, match="invalid JSON"):
            load_manifest(target)

    @pytest.mark.parametrize("path", ["/etc/passwd", "../outside.txt", "a/../../b"])
    def test_escaping_entry_rejected(self, target, path):
        target.manifest_path.parent.mkdir(parents=True)
        target.manifest_path.write_text(json.dumps({"files": {path: {"hash": "x", "module": "m"}}}))
        with pytest.raises(ManifestDriftError, match="outside the target"):
            load_manifest(target)

    def test_entry_without_hash_rejected(self, target):
        target.manifest_path.parent.mkdir(parents=True)
        target.manifest_path.write_text(json.dumps({"files": {"a.txt": {"module": "m"}}}))
        with pytest.raises(ManifestDriftError, match="malformed"):
            load_manifest(target)

    def test_to_dict_sorted(self):
        manifest = Manifest()
        manifest.record("z", "m", "1")
        manifest.record("a", "m", "2")
        assert list(manifest.to_dict()["files"]) == ["a", "z"]


class TestState:
    def test_missing(self, target):
        assert load_state(target) is None

    def test_round_trip(self, target):
        state = EngineState(installed_version="2.2.0", migrations=[{"version": "2.2.0", "description": "x"}])
        save_state(target, state)
        assert load_state(target) == state

    def test_defaults_for_sparse_file(self, target):
        target.state_path.parent.mkdir(parents=True)
        target.state_path.write_text("{}")
        assert load_state(target).installed_version == "0.0.0"

    @pytest.mark.parametrize("content", ["[]", "{bad", '{"migrations": "x"}'])
    def test_invalid(self, target, content):
        target.state_path.parent.mkdir(parents=True)
        target.state_path.write_text(content)
        with pytest.raises(ConfigError):
            load_state(target)


class TestRepoRoot:
    @pytest.mark.parametrize("path", ["/abs", "../up", "a/../../up"])
    def test_file_rejects_escape(self, target, path):
        with pytest.raises(ValueError):
            target.file(path)

    def test_env_var(self, tmp_path, monkeypatch):
        from baseline_engine.paths import RepoRoot

        monkeypatch.setenv("BASELINE_TARGET_DIR", str(tmp_path))
        assert RepoRoot.resolve().path == tmp_path.resolve()
