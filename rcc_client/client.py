# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Configuration sync client."""

import functools
import os
import threading
from typing import Any, Callable

from pydantic import TypeAdapter, ValidationError

from .api import api_items
from .cache import Cache
from .conf import Conf
from .exceptions import (
    AlreadyRunningError,
    ConfigurationError,
    PersistenceError,
    RccError,
    TransportError,
)
from .logger import Logger, create_logger
from .models import Change, ChangeEvent, ConfigItem
from .poller import Poller, RccPoller
from .requester import HTTPRequester, Requester
from .stream import DEFAULT_MAXSIZE, ChangeStream

PollerFactory = Callable[..., Poller]

_ITEMS = TypeAdapter(list[ConfigItem])


class Client:
    """Keeps a local key/value cache in sync with the configuration authority.

    Reads are served synchronously from memory. When ``enable_callback`` is
    on, a background thread polls the authority for version changes, pulls
    the full key set on change and publishes the difference as a ChangeEvent.

    Example:
        >>> conf = Conf(server_url="http://rcc:8088", project_name="demo", env_name="prod")
        >>> client = Client(conf)
        >>> client.start()
        >>> client.get_value("db.host", "localhost")
        >>> client.stop()
    """

    def __init__(
        self,
        conf: Conf,
        requester: Requester | None = None,
        logger: Logger | None = None,
        poller_factory: PollerFactory | None = None,
    ):
        """Initialize client.

        Args:
            conf: Normalized client settings
            requester: Requester for authority calls (defaults to HTTPRequester)
            logger: Optional logger instance
            poller_factory: Builds a fresh poller per start(); called with
                (conf, requester, loader, on_update, logger). Defaults to RccPoller.
        """
        if not isinstance(conf, Conf):
            raise ConfigurationError("Client requires a Conf instance")

        self.conf = conf
        self.logger = (logger or create_logger(name="rcc_client")).bind(
            project_name=conf.project_name,
            env_name=conf.env_name,
        )
        self.cache = Cache()
        self.requester = requester or HTTPRequester(timeout_seconds=conf.request_timeout_seconds)
        self._poller_factory = poller_factory or RccPoller
        self.poller: Poller | None = None

        self._running = threading.Lock()
        self._cancelled = threading.Event()
        self._sync_lock = threading.Lock()
        self._stream_lock = threading.Lock()
        self._update_stream: ChangeStream | None = None
        self._poll_thread: threading.Thread | None = None

    # Lifecycle

    @property
    def is_running(self) -> bool:
        return self._running.locked()

    @property
    def version_id(self) -> int | None:
        """Last version id observed by the current poller, if any."""
        if self.poller is None:
            return None
        return self.poller.last_version_id

    def start(self) -> None:
        """Preload the configuration and, if enabled, begin polling.

        Returns once preload has completed; polling continues in a daemon
        thread.

        Raises:
            AlreadyRunningError: If a previous start() has not been stopped
            TransportError: If preload failed and no usable cache file exists
        """
        if not self._running.acquire(blocking=False):
            raise AlreadyRunningError(
                f"rcc client for {self.conf.project_name}/{self.conf.env_name} is already running"
            )

        try:
            cancelled = threading.Event()
            with self._stream_lock:
                self._update_stream = None
                self._cancelled = cancelled
            self.poller = self._poller_factory(
                self.conf,
                self.requester,
                functools.partial(self._sync, persist=False),
                functools.partial(self._handle_update, cancelled=cancelled),
                self.logger,
            )
            self._preload()
        except BaseException:
            self._running.release()
            raise

        self.logger.info("Preload success", version_id=self.version_id)

        if self.conf.enable_callback:
            self.logger.info("Update callback enabled")
            self._poll_thread = threading.Thread(
                target=self.poller.start,
                name=f"rcc-poller-{self.conf.project_name}-{self.conf.env_name}",
                daemon=True,
            )
            self._poll_thread.start()

    def stop(self) -> None:
        """Stop polling, cancel pending delivery and close the change stream.

        Precondition: start() succeeded and stop() has not been called since.
        """
        if self.poller is not None:
            self.poller.stop()
        self._cancelled.set()

        with self._stream_lock:
            stream = self._update_stream
        if stream is not None:
            stream.close()

        thread = self._poll_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.conf.request_timeout_seconds + 1)
        self._poll_thread = None

        if self._running.locked():
            self._running.release()

        self.logger.info("Client stopped")

    def __enter__(self) -> "Client":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # Reads

    def get_value(self, key: str, default: str = "") -> str:
        """Return the value for key, or default if absent or empty."""
        value, found = self.cache.get(key)
        if found and value != "":
            return value
        return default

    def get_all_keys(self) -> set[str]:
        return self.cache.keys()

    def get_all(self) -> dict[str, str]:
        return self.cache.dump()

    # Change delivery

    def watch_update(self) -> ChangeStream:
        """Return the change stream, creating it on first request.

        The stream is reset by start(), so subscribe after starting. It is
        closed when the client stops.
        """
        with self._stream_lock:
            if self._update_stream is None:
                self._update_stream = ChangeStream(maxsize=DEFAULT_MAXSIZE)
            return self._update_stream

    def watch(self, callback: Callable[[ChangeEvent], Any]) -> threading.Thread:
        """Invoke callback for every change event on a dedicated thread.

        Exceptions raised by callback are logged and do not stop delivery of
        later events. The thread exits when the stream closes.

        Returns:
            The forwarding thread
        """
        stream = self.watch_update()

        def forward() -> None:
            for event in stream:
                try:
                    callback(event)
                except Exception as e:
                    self.logger.exception("Watch callback raised", version_id=event.version_id, error=str(e))

        thread = threading.Thread(
            target=forward,
            name=f"rcc-watch-{self.conf.project_name}-{self.conf.env_name}",
            daemon=True,
        )
        thread.start()
        return thread

    def _handle_update(self, version_id: int, cancelled: threading.Event | None = None) -> None:
        """Sync version_id and publish its changes.

        cancelled is the cancel event of the start() cycle that scheduled the
        update. A poll thread that outlived its stop() must not touch the
        cache or the stream of a later cycle.
        """
        if cancelled is None:
            cancelled = self._cancelled
        if cancelled.is_set():
            return
        event = self._sync(version_id)
        if event:
            self._deliver(event, cancelled)

    def _deliver(self, event: ChangeEvent, cancelled: threading.Event) -> None:
        with self._stream_lock:
            if cancelled is not self._cancelled or cancelled.is_set():
                return
            stream = self._update_stream
        if stream is None:
            return
        if not stream.put(event, cancelled):
            self.logger.debug("Change stream closed before delivery", version_id=event.version_id)

    # Sync

    def _sync(self, version_id: int, persist: bool = True) -> ChangeEvent:
        """Fetch the full key set of version_id and apply it to the cache.

        Raises:
            TransportError: If the fetch or decoding fails; the cache is untouched
        """
        url = api_items(self.conf, version_id)
        data = self.requester.fetch(url)
        try:
            items = _ITEMS.validate_python(data)
        except ValidationError as e:
            raise TransportError(f"Malformed items payload: {e}", url=url) from e

        return self._process_result(items, version_id=version_id, persist=persist)

    def _process_result(
        self,
        items: list[ConfigItem],
        version_id: int | None = None,
        persist: bool = True,
    ) -> ChangeEvent:
        """Diff items against the cache, apply them and return the changes.

        The new mapping replaces the cache in one step, so readers never see
        a partially applied diff. Duplicate keys in items: last one wins.
        """
        after: dict[str, str] = {}
        for item in items:
            after[item.key] = item.value

        event = ChangeEvent(version_id=version_id)
        with self._sync_lock:
            before = self.cache.dump()

            for key, old in before.items():
                if key not in after:
                    event.changes[key] = Change.delete(key, old)

            for key, new in after.items():
                if key not in before:
                    event.changes[key] = Change.add(key, new)
                elif before[key] != new:
                    event.changes[key] = Change.modify(key, before[key], new)

            self.cache.replace(after)

        self.logger.debug(
            "Applied configuration",
            version_id=version_id,
            added=len(event.added()),
            modified=len(event.modified()),
            deleted=len(event.deleted()),
        )

        if persist and self.conf.enable_cache:
            self._persist()

        return event

    # Preload and disk fallback

    def _preload(self) -> None:
        try:
            self.poller.preload()
        except RccError as e:
            if not self.conf.enable_cache:
                raise
            try:
                self._load_file()
            except PersistenceError as load_error:
                self.logger.warning(
                    "Preload from cache file failed",
                    cache_file=self.conf.cache_file, error=str(load_error),
                )
                raise e
            self.logger.warning(
                "Authority unavailable, started from cache file",
                cache_file=self.conf.cache_file, error=str(e),
            )
            return

        if self.conf.enable_cache:
            self._persist()

    def _persist(self) -> None:
        try:
            self._store_file()
        except (PersistenceError, ConfigurationError) as e:
            self.logger.warning(
                "Store cache file failed",
                cache_file=self.conf.cache_file, error=str(e),
            )

    def _load_file(self) -> None:
        self.cache.load(self.conf.cache_file)

    def _store_file(self) -> None:
        self._ensure_cache_dir()
        self.cache.store(self.conf.cache_file)

    def _ensure_cache_dir(self) -> None:
        """Create the cache directory if needed.

        Raises:
            ConfigurationError: If cache_dir exists but is not a directory
            PersistenceError: If the directory cannot be created
        """
        cache_dir = self.conf.cache_dir
        if os.path.exists(cache_dir):
            if not os.path.isdir(cache_dir):
                raise ConfigurationError(f"cache_dir {cache_dir} is not a directory")
            return
        try:
            os.makedirs(cache_dir, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to create cache_dir {cache_dir}: {e}") from e
