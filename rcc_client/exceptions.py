# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Exceptions for configuration sync operations."""


class RccError(Exception):
    """Base exception for rcc client errors."""
    pass


class ConfigurationError(RccError):
    """Raised when client settings are missing or invalid."""
    pass


class TransportError(RccError):
    """Raised when a request to the configuration authority fails.

    Attributes:
        status: Envelope or HTTP status reported by the authority, if any
        url: Request URL, if known
    """

    def __init__(self, message: str, status: int | None = None, url: str | None = None):
        super().__init__(message)
        self.status = status
        self.url = url


class PersistenceError(RccError):
    """Raised when the local cache file cannot be read or written."""
    pass


class AlreadyRunningError(RccError):
    """Raised when start() is called while a previous start() is still active."""
    pass


class StreamClosed(RccError):
    """Raised by ChangeStream.get() once the stream is closed and drained."""
    pass
