# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Requester interface and HTTP implementation."""

from abc import ABC, abstractmethod
from typing import Any

import requests

from .exceptions import TransportError


class Requester(ABC):
    """Fetches a payload from the configuration authority."""

    @abstractmethod
    def get(self, url: str) -> Any:
        """Fetch url and return the decoded payload.

        Args:
            url: Fully built request URL

        Returns:
            The "data" member of the authority's response envelope

        Raises:
            TransportError: On network, HTTP, decoding or authority errors
        """
        raise NotImplementedError

    def fetch(self, url: str) -> Any:
        """Call get() and report any failure as a TransportError.

        Implementations are expected to raise TransportError themselves;
        anything else they let escape (socket errors, decoder bugs) is
        wrapped here so callers only handle the RccError hierarchy.
        """
        try:
            return self.get(url)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Requester failed: {type(e).__name__}: {e}", url=url) from e

    def close(self) -> None:
        """Release any held connections."""
        pass


class HTTPRequester(Requester):
    """Requester backed by a requests.Session.

    The authority wraps every payload in an envelope
    {"status": 0, "msg": "", "data": ...}; a non-zero status is an error.
    """

    def __init__(self, timeout_seconds: float = 10.0, session: requests.Session | None = None):
        """Initialize HTTP requester.

        Args:
            timeout_seconds: Per-request timeout
            session: Optional pre-configured session
        """
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def get(self, url: str) -> Any:
        try:
            response = self.session.get(url, timeout=self.timeout_seconds)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise TransportError(f"HTTP error from authority: {e}", status=status, url=url) from e
        except requests.RequestException as e:
            raise TransportError(f"Request to authority failed: {e}", url=url) from e

        try:
            envelope = response.json()
        except ValueError as e:
            raise TransportError(f"Authority returned invalid JSON: {e}", url=url) from e

        if not isinstance(envelope, dict) or "status" not in envelope:
            raise TransportError("Authority returned a malformed response envelope", url=url)

        status = envelope.get("status")
        if status != 0:
            raise TransportError(
                f"Authority returned status {status}: {envelope.get('msg', '')}",
                status=status if isinstance(status, int) else None,
                url=url,
            )

        return envelope.get("data")

    def close(self) -> None:
        self.session.close()
