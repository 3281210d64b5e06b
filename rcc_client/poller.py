# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Version polling against the configuration authority."""

import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable

from pydantic import ValidationError

from .api import api_version
from .conf import Conf
from .exceptions import TransportError
from .logger import Logger, create_logger
from .models import VersionInfo
from .requester import Requester


class PollerState(str, Enum):
    """Lifecycle states of a poller."""

    IDLE = "idle"
    PRELOADED = "preloaded"
    POLLING = "polling"
    STOPPED = "stopped"


class Poller(ABC):
    """Detects that the authority's active version has changed."""

    @abstractmethod
    def preload(self) -> None:
        """Resolve the active version and load its full key set once.

        Raises:
            TransportError: If the authority cannot be reached or errors
        """
        raise NotImplementedError

    @abstractmethod
    def start(self) -> None:
        """Run the polling loop until stop() is called (blocking)."""
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        """Terminate the polling loop. Safe to call in any state."""
        raise NotImplementedError

    @property
    @abstractmethod
    def state(self) -> PollerState:
        raise NotImplementedError

    @property
    @abstractmethod
    def last_version_id(self) -> int | None:
        """Version id most recently loaded, or None before the first load."""
        raise NotImplementedError


class RccPoller(Poller):
    """Poller that checks the version endpoint at a fixed interval.

    State machine: IDLE --preload--> PRELOADED --start--> POLLING --stop--> STOPPED.
    start() is also accepted from IDLE, for a client that came up from its
    disk cache. A STOPPED poller cannot be reused: preload() raises and
    start() returns immediately.
    """

    def __init__(
        self,
        conf: Conf,
        requester: Requester,
        loader: Callable[[int], object],
        on_update: Callable[[int], object],
        logger: Logger | None = None,
    ):
        """Initialize poller.

        Args:
            conf: Client settings
            requester: Requester used for version checks
            loader: Called with the version id during preload
            on_update: Called with the new version id when a change is detected
            logger: Optional logger instance
        """
        self.conf = conf
        self.requester = requester
        self._loader = loader
        self._on_update = on_update
        self.logger = logger or create_logger(name="rcc_client.poller")

        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._state = PollerState.IDLE
        self._last_version_id: int | None = None

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def last_version_id(self) -> int | None:
        return self._last_version_id

    def check_version(self) -> int:
        """Ask the authority which version is active.

        Returns:
            Active version id

        Raises:
            TransportError: If the request fails or the payload is malformed
        """
        url = api_version(self.conf)
        data = self.requester.fetch(url)
        try:
            return VersionInfo.model_validate(data).version_id
        except ValidationError as e:
            raise TransportError(f"Malformed version payload: {e}", url=url) from e

    def preload(self) -> None:
        with self._lock:
            if self._state is not PollerState.IDLE:
                raise RuntimeError(f"Cannot preload a poller in state {self._state.value}")

        version_id = self.check_version()
        self._loader(version_id)

        with self._lock:
            self._last_version_id = version_id
            self._state = PollerState.PRELOADED

    def start(self) -> None:
        with self._lock:
            if self._state is PollerState.STOPPED:
                # stop() won the race against the polling thread
                return
            if self._state is PollerState.POLLING:
                raise RuntimeError("Poller is already polling")
            self._state = PollerState.POLLING

        self.logger.info("Version polling started", interval_seconds=self.conf.poll_interval_seconds)

        while not self._stop_event.wait(self.conf.poll_interval_seconds):
            self._poll_once()

        with self._lock:
            self._state = PollerState.STOPPED

        self.logger.info("Version polling stopped")

    def stop(self) -> None:
        self._stop_event.set()
        with self._lock:
            self._state = PollerState.STOPPED

    def _poll_once(self) -> None:
        """Run one version check and trigger an update when the version moved."""
        try:
            version_id = self.check_version()
        except Exception as e:
            self.logger.warning("Version check failed", error=str(e))
            return

        if version_id == self._last_version_id:
            return

        if self._stop_event.is_set():
            # Stopped while the version check was in flight
            return

        self.logger.info(
            "Version change detected",
            old_version=self._last_version_id,
            new_version=version_id,
        )

        try:
            self._on_update(version_id)
        except Exception as e:
            # Last-known version stays put so the next interval retries
            self.logger.error(
                "Update handling failed",
                version_id=version_id,
                error=str(e),
                exc_info=True,
            )
            return

        self._last_version_id = version_id
