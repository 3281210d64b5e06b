# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""rcc-client: configuration sync client.

Keeps an in-memory key/value cache synchronized with a remote configuration
authority for one project/environment pair, publishes per-key change events
and falls back to the last persisted snapshot when the authority is down.

Example:
    >>> from rcc_client import Client, Conf
    >>>
    >>> conf = Conf(
    ...     server_url="http://rcc:8088",
    ...     project_name="demo",
    ...     env_name="prod",
    ...     api_password="secret",
    ...     enable_callback=True,
    ... )
    >>> client = Client(conf)
    >>> client.start()
    >>> client.watch(lambda event: print([c.to_dict() for c in event]))
    >>> client.get_value("db.host", "localhost")
"""

__version__ = "0.1.0"

from .cache import Cache
from .client import Client
from .conf import Conf
from .exceptions import (
    AlreadyRunningError,
    ConfigurationError,
    PersistenceError,
    RccError,
    StreamClosed,
    TransportError,
)
from .logger import Logger, SilentLogger, StdoutLogger, create_logger
from .models import Change, ChangeEvent, ChangeType, ConfigItem, VersionInfo
from .poller import Poller, PollerState, RccPoller
from .requester import HTTPRequester, Requester
from .stream import ChangeStream

__all__ = [
    # Version
    "__version__",
    # Client
    "Client",
    "Conf",
    "Cache",
    "ChangeStream",
    # Models
    "Change",
    "ChangeEvent",
    "ChangeType",
    "ConfigItem",
    "VersionInfo",
    # Collaborators
    "Poller",
    "PollerState",
    "RccPoller",
    "Requester",
    "HTTPRequester",
    # Logging
    "Logger",
    "StdoutLogger",
    "SilentLogger",
    "create_logger",
    # Errors
    "RccError",
    "ConfigurationError",
    "TransportError",
    "PersistenceError",
    "AlreadyRunningError",
    "StreamClosed",
]
