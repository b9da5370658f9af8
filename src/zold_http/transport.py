"""Transports that perform the blocking GET on behalf of the client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

import requests

from .data_models import TransportReply


class Transport(Protocol):
    """Anything able to perform one blocking GET; it may raise and may never return."""

    def get(self, uri: str, headers: Mapping[str, str]) -> TransportReply:
        ...


@dataclass
class RequestsTransport:
    """
    Real HTTP transport backed by ``requests``.

    - One fresh connection per call, no session reuse.
    - HTTP error statuses are returned, never raised.
    - ``timeout`` is a socket-level bound and is off by default; the
      client enforces its own deadline regardless.
    """

    timeout: Optional[float] = None
    allow_redirects: bool = False

    def get(self, uri: str, headers: Mapping[str, str]) -> TransportReply:
        response = requests.get(
            uri,
            headers=dict(headers),
            timeout=self.timeout,
            allow_redirects=self.allow_redirects,
        )
        try:
            return TransportReply(
                status=int(response.status_code),
                body=response.text,
                headers={k: v for k, v in response.headers.items()},
            )
        finally:
            response.close()
