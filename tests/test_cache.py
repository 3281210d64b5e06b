# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Tests for the key/value cache."""

import json
import threading

import pytest

from rcc_client import Cache, PersistenceError


class TestCacheOperations:
    """Tests for point reads, writes and snapshots."""

    def test_get_missing_key(self):
        """Test that a missing key is reported as not found."""
        cache = Cache()
        assert cache.get("missing") == (None, False)

    def test_set_and_get(self):
        """Test upsert then lookup."""
        cache = Cache()
        cache.set("a", "1")
        cache.set("a", "2")
        assert cache.get("a") == ("2", True)
        assert len(cache) == 1

    def test_empty_string_is_found(self):
        """Test that an empty value is still a present key."""
        cache = Cache()
        cache.set("a", "")
        assert cache.get("a") == ("", True)

    def test_delete_is_noop_when_absent(self):
        """Test that deleting a missing key does nothing."""
        cache = Cache({"a": "1"})
        cache.delete("missing")
        cache.delete("a")
        assert cache.dump() == {}

    def test_dump_returns_copy(self):
        """Test that mutating a snapshot does not touch the cache."""
        cache = Cache({"a": "1"})
        snapshot = cache.dump()
        snapshot["b"] = "2"
        snapshot["a"] = "changed"
        assert cache.dump() == {"a": "1"}

    def test_initial_mapping_is_copied(self):
        """Test that the constructor does not alias its argument."""
        source = {"a": "1"}
        cache = Cache(source)
        source["a"] = "changed"
        assert cache.get("a") == ("1", True)

    def test_replace_swaps_whole_mapping(self):
        """Test that replace() drops keys absent from the new mapping."""
        cache = Cache({"a": "1", "b": "2"})
        cache.replace({"c": "3"})
        assert cache.dump() == {"c": "3"}
        assert cache.keys() == {"c"}
        assert "a" not in cache

    def test_concurrent_writers(self):
        """Test that concurrent set/dump calls stay consistent."""
        cache = Cache()

        def writer(prefix: str) -> None:
            for i in range(500):
                cache.set(f"{prefix}{i}", str(i))
                cache.dump()

        threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 2000


class TestCachePersistence:
    """Tests for store/load."""

    def test_round_trip(self, tmp_path):
        """Test that store then load reproduces the mapping exactly."""
        path = str(tmp_path / "snapshot")
        original = {"a": "1", "unicode": "配置", "empty": "", "json": '{"x": [1, 2]}', "spaces": "  v  "}
        Cache(original).store(path)

        restored = Cache()
        restored.load(path)
        assert restored.dump() == original

    def test_round_trip_empty_mapping(self, tmp_path):
        """Test that an empty mapping survives a round trip."""
        path = str(tmp_path / "snapshot")
        Cache().store(path)

        restored = Cache({"stale": "x"})
        restored.load(path)
        assert restored.dump() == {}

    def test_store_writes_json_object(self, tmp_path):
        """Test the on-disk format."""
        path = tmp_path / "snapshot"
        Cache({"k": "v"}).store(str(path))
        assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_store_leaves_no_temp_files(self, tmp_path):
        """Test that only the target file remains after a store."""
        Cache({"k": "v"}).store(str(tmp_path / "snapshot"))
        assert [p.name for p in tmp_path.iterdir()] == ["snapshot"]

    def test_store_into_missing_directory_fails(self, tmp_path):
        """Test that an unwritable target raises PersistenceError."""
        with pytest.raises(PersistenceError):
            Cache({"k": "v"}).store(str(tmp_path / "missing" / "snapshot"))

    def test_load_missing_file(self, tmp_path):
        """Test that a missing file raises PersistenceError."""
        with pytest.raises(PersistenceError):
            Cache().load(str(tmp_path / "nope"))

    @pytest.mark.parametrize(
        "content",
        [
            "not json",
            "[1, 2, 3]",
            '{"a": 1}',
            '{"a": null}',
        ],
    )
    def test_load_corrupt_file_keeps_cache(self, tmp_path, content):
        """Test that corrupt files raise and leave the cache untouched."""
        path = tmp_path / "snapshot"
        path.write_text(content, encoding="utf-8")

        cache = Cache({"keep": "me"})
        with pytest.raises(PersistenceError):
            cache.load(str(path))
        assert cache.dump() == {"keep": "me"}
