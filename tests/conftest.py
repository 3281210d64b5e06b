# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Shared fixtures for rcc_client tests."""

import threading
import time
from typing import Any, Callable
from urllib.parse import parse_qs, urlparse

import pytest

from rcc_client import Conf, Requester, SilentLogger, TransportError


class FakeAuthority(Requester):
    """In-memory configuration authority speaking the client's URL protocol.

    Attributes:
        version_id: Version reported by /api/version
        versions: Items per version id, as {key: value} mappings
        down: When True every request raises TransportError
        fail_items: When True only /api/items requests fail
        calls: Every requested URL, in order
    """

    def __init__(self, version_id: int = 1, versions: dict[int, Any] | None = None):
        self.version_id = version_id
        self.versions: dict[int, Any] = versions if versions is not None else {}
        self.down = False
        self.fail_items = False
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def publish(self, version_id: int, kv: dict[str, str]) -> None:
        """Make kv the active configuration under version_id."""
        with self._lock:
            self.versions[version_id] = kv
            self.version_id = version_id

    def get(self, url: str) -> Any:
        with self._lock:
            self.calls.append(url)
            if self.down:
                raise TransportError("authority unreachable", url=url)

            parsed = urlparse(url)
            params = {k: v[0] for k, v in parse_qs(parsed.query).items()}
            if parsed.path == "/api/version":
                return {"versionId": self.version_id, "versionName": "active"}
            if parsed.path == "/api/items":
                if self.fail_items:
                    raise TransportError("items unavailable", url=url)
                kv = self.versions.get(int(params["versionId"]), {})
                if isinstance(kv, dict):
                    return [{"key": k, "value": v} for k, v in kv.items()]
                return kv
            raise TransportError(f"unknown path {parsed.path}", status=404, url=url)

    def paths(self) -> list[str]:
        with self._lock:
            return [urlparse(url).path for url in self.calls]


def wait_for(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    """Poll predicate until it is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def authority():
    """Fake authority serving version 1 with {a: 1, b: 2}."""
    return FakeAuthority(version_id=1, versions={1: {"a": "1", "b": "2"}})


@pytest.fixture
def silent_logger():
    return SilentLogger()


@pytest.fixture
def make_conf(tmp_path):
    """Build a Conf rooted in tmp_path; keyword arguments override defaults."""

    def _make(**overrides: Any) -> Conf:
        values: dict[str, Any] = {
            "server_url": "http://rcc.test:8088",
            "project_name": "demo",
            "env_name": "prod",
            "api_password": "secret",
            "cache_dir": str(tmp_path / "cache"),
            "poll_interval_seconds": 0.05,
            "request_timeout_seconds": 1,
        }
        values.update(overrides)
        return Conf(**values)

    return _make


@pytest.fixture
def wait():
    return wait_for
