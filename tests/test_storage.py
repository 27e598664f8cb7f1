from __future__ import annotations
import json

import pytest

import storage
from storage import JsonFileStore, MemoryStore, ensure_data_files, load_config, save_config


def test_memory_store_basics():
    s = MemoryStore({"a": "1"})
    assert s.get("a") == "1"
    s.set("b", "2")
    s.remove("a")
    s.remove("missing")
    assert s.get("a") is None
    assert "b" in s


def test_file_store_writes_and_replaces(tmp_path):
    s = JsonFileStore(tmp_path / "nested")
    assert s.get("k") is None
    s.set("k", '{"v": 1}')
    s.set("k", '{"v": 2}')
    assert json.loads(s.get("k")) == {"v": 2}
    assert not (tmp_path / "nested" / "k.json.tmp").exists()


def test_file_store_remove(tmp_path):
    s = JsonFileStore(tmp_path)
    s.set("k", "x")
    s.remove("k")
    s.remove("k")
    assert s.get("k") is None


def test_file_store_unreadable_file_is_none(tmp_path):
    (tmp_path / "k.json").write_bytes(b"\xff\xfe\x00bad")
    assert JsonFileStore(tmp_path).get("k") is None


def test_file_store_defaults_to_data_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(storage, "DATA_DIR", tmp_path)
    assert JsonFileStore().path_for("k") == tmp_path / "k.json"


def test_config_seeded_and_merged(tmp_path):
    path = tmp_path / "cfg" / "config.json"
    ensure_data_files({"storage_key": "a"}, path)
    assert json.loads(path.read_text(encoding="utf-8")) == {"storage_key": "a"}

    save_config({"storage_key": "b"}, path)
    cfg = load_config({"storage_key": "a", "other": 1}, path)
    assert cfg == {"storage_key": "b", "other": 1}

    # an existing file is left alone
    ensure_data_files({"storage_key": "c"}, path)
    assert load_config(config_path=path)["storage_key"] == "b"


def test_broken_config_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{oops", encoding="utf-8")
    assert load_config({"storage_key": "a"}, path) == {"storage_key": "a"}
    path.write_text("[1, 2]", encoding="utf-8")
    assert load_config({"storage_key": "a"}, path) == {"storage_key": "a"}


def test_incomplete_store_cannot_be_created():
    class HalfStore(storage.KeyValueStore):
        def get(self, key):
            return None

    with pytest.raises(TypeError):
        HalfStore()


def test_save_config_leaves_no_tmp_file(tmp_path):
    path = tmp_path / "config.json"
    save_config({"storage_key": "x"}, path)
    assert load_config(config_path=path) == {"storage_key": "x"}
    assert not (tmp_path / "config.json.tmp").exists()
