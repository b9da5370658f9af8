"""Single-request HTTP client that talks to other nodes under a hard deadline."""

from __future__ import annotations

import itertools
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

from pydantic import ValidationError

from .config import NETWORK_HEADER, PROTOCOL_HEADER, SCORE_HEADER, VERSION_HEADER, get_settings
from .data_models import CallOutcome, HttpRequest, Identity, Response
from .exceptions import DeadlineExceeded, InvalidRequestError
from .logging_utils import configure_logging
from .transport import RequestsTransport, Transport

LOGGER = configure_logging(__name__)

_WORKER_IDS = itertools.count(1)


def build_headers(identity: Identity, network: str = "", score: Optional[str] = None) -> dict[str, str]:
    """Return the headers every request to a peer must carry."""

    headers = {
        "User-Agent": f"Zold {identity.version}",
        "Connection": "close",
        "Accept-Encoding": "gzip",
        PROTOCOL_HEADER: identity.protocol,
        VERSION_HEADER: identity.version,
    }
    if network:
        headers[NETWORK_HEADER] = network
    if score:
        headers[SCORE_HEADER] = score
    return headers


class Http:
    """
    GET one URI and always come back with a :class:`Response`.

    The transport runs on a daemon thread; the caller waits for it at most
    ``timeout`` seconds. Transport exceptions and expired deadlines both
    turn into a ``"599"`` response whose body explains what happened.
    """

    def __init__(
        self,
        uri: str,
        network: Optional[str] = None,
        timeout: Optional[float] = None,
        *,
        score: Optional[str] = None,
        transport: Optional[Transport] = None,
        identity: Optional[Identity] = None,
    ) -> None:
        settings = get_settings()
        try:
            self.request = HttpRequest(
                uri=str(uri),
                network=settings.NETWORK if network is None else network,
                timeout=settings.HTTP_TIMEOUT if timeout is None else timeout,
                score=score,
            )
        except ValidationError as exc:
            raise InvalidRequestError(f"Invalid request for {uri!r}: {exc}") from exc
        self.transport: Transport = transport if transport is not None else RequestsTransport()
        self.identity = identity if identity is not None else Identity()

    def __repr__(self) -> str:
        return f"Http(uri={self.request.uri!r}, network={self.request.network!r})"

    @property
    def uri(self) -> str:
        return self.request.uri

    def headers(self) -> dict[str, str]:
        return build_headers(self.identity, self.request.network, self.request.score)

    def get(self, timeout: Optional[float] = None) -> Response:
        """Perform the GET, bounded by ``timeout`` (or the configured default)."""

        deadline = self.request.timeout if timeout is None else timeout
        if not deadline > 0:
            raise InvalidRequestError(f"Timeout must be positive, got {deadline!r}")

        LOGGER.debug("GET %s (timeout=%.2fs)", self.request.uri, deadline)
        outcome = self._race(self.headers(), deadline)
        self._log_outcome(outcome)
        return outcome.to_response()

    def _race(self, headers: dict[str, str], deadline: float) -> CallOutcome:
        future: Future[CallOutcome] = Future()
        started = time.monotonic()
        worker = threading.Thread(
            target=self._dispatch,
            args=(future, headers, started),
            name=f"zold-http-{next(_WORKER_IDS)}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError as exc:
            return CallOutcome.failed(exc, time.monotonic() - started)

        try:
            return future.result(timeout=min(deadline, threading.TIMEOUT_MAX))
        except FutureTimeoutError:
            # The worker is orphaned; whatever it produces later lands in a future nobody reads.
            error = DeadlineExceeded(
                f"The request to {self.request.uri} was not completed in {deadline:.2f}s"
            )
            return CallOutcome.timed_out(error, time.monotonic() - started)

    def _dispatch(self, future: Future[CallOutcome], headers: dict[str, str], started: float) -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            reply = self.transport.get(self.request.uri, headers)
            outcome = CallOutcome.completed(reply, time.monotonic() - started)
        except BaseException as exc:
            # Runs on the worker only; whatever it raised must still resolve the future.
            outcome = CallOutcome.failed(exc, time.monotonic() - started)
        future.set_result(outcome)

    def _log_outcome(self, outcome: CallOutcome) -> None:
        if outcome.kind == "completed" and outcome.reply is not None:
            LOGGER.debug(
                "GET %s -> %s in %.3fs", self.request.uri, outcome.reply.status, outcome.elapsed
            )
        elif outcome.kind == "failed":
            LOGGER.warning(
                "GET %s failed after %.3fs with %s: %s",
                self.request.uri,
                outcome.elapsed,
                outcome.error_type,
                outcome.error.strip().splitlines()[-1] if outcome.error.strip() else "",
            )
        else:
            LOGGER.warning("GET %s %s: %s", self.request.uri, outcome.kind, outcome.error)
