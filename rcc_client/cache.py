# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Thread-safe key/value cache with file persistence."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from typing import Mapping

from .exceptions import PersistenceError


class Cache:
    """In-memory snapshot of the current configuration.

    All operations take an internal lock, so callers never need external
    locking. dump() and keys() return copies, never the live mapping.

    The file format is a UTF-8 JSON object mapping every key to its value.
    """

    def __init__(self, initial: Mapping[str, str] | None = None):
        self._lock = threading.RLock()
        self._kv: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> tuple[str | None, bool]:
        """Look up a key.

        Returns:
            Tuple of (value, found); value is None when not found
        """
        with self._lock:
            if key in self._kv:
                return self._kv[key], True
            return None, False

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._kv[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._kv.pop(key, None)

    def dump(self) -> dict[str, str]:
        """Return a copy of the whole mapping."""
        with self._lock:
            return dict(self._kv)

    def keys(self) -> set[str]:
        with self._lock:
            return set(self._kv)

    def replace(self, mapping: Mapping[str, str]) -> None:
        """Swap the whole mapping in one step."""
        new_kv = dict(mapping)
        with self._lock:
            self._kv = new_kv

    def __len__(self) -> int:
        with self._lock:
            return len(self._kv)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._kv

    def store(self, path: str) -> None:
        """Write a consistent snapshot to path.

        The snapshot goes to a temporary file in the same directory which then
        replaces path, so an interrupted write never leaves a truncated file.

        Args:
            path: Destination file path

        Raises:
            PersistenceError: If the file cannot be written
        """
        snapshot = self.dump()
        directory = os.path.dirname(os.path.abspath(path))
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".rcc-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, ensure_ascii=False, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(f"Failed to store cache file {path}: {e}") from e

    def load(self, path: str) -> None:
        """Replace the cache contents with the snapshot stored at path.

        The cache is left untouched when loading fails.

        Args:
            path: Source file path

        Raises:
            PersistenceError: If the file is missing, unreadable or corrupt
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Failed to load cache file {path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"Corrupt cache file {path}: expected a JSON object")
        for key, value in data.items():
            if not isinstance(value, str):
                raise PersistenceError(
                    f"Corrupt cache file {path}: value for key '{key}' is not a string"
                )

        self.replace(data)
