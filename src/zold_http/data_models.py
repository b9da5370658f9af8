"""Typed data models for requests, transport replies and normalized responses."""

from __future__ import annotations

import traceback
from typing import Any, Literal, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator
from requests.structures import CaseInsensitiveDict

from .config import FAILURE_CODE, PROTOCOL, VERSION


class Headers(CaseInsensitiveDict):
    """Read-only, case-insensitive header mapping where absent keys read as ``None``."""

    def __init__(self, data: Any = None, **kwargs: str) -> None:
        self._sealed = False
        super().__init__(data, **kwargs)
        self._sealed = True

    def __setitem__(self, key: str, value: str) -> None:
        if self._sealed:
            raise TypeError("Headers are read-only")
        super().__setitem__(key, value)

    def __delitem__(self, key: str) -> None:
        raise TypeError("Headers are read-only")

    def __getitem__(self, key: str) -> Optional[str]:
        entry = self._store.get(key.lower())
        return entry[1] if entry is not None else None

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._store

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self[key] if key in self else default


class Identity(BaseModel):
    """Protocol revision and software version this node announces."""

    model_config = ConfigDict(frozen=True)

    protocol: str = Field(PROTOCOL, min_length=1, description="Wire protocol revision.")
    version: str = Field(VERSION, min_length=1, description="Software build identifier.")


class HttpRequest(BaseModel):
    """Request descriptor: where to go, which network we are, how long to wait."""

    model_config = ConfigDict(frozen=True)

    uri: str = Field(..., description="Absolute http(s) URI of the peer.")
    network: str = Field("", description="Network tag, empty when the node has none.")
    timeout: float = Field(..., gt=0.0, description="Deadline for the whole call, in seconds.")
    score: Optional[str] = Field(None, description="Score text announced to the peer.")

    @field_validator("uri")
    @classmethod
    def _absolute_http_uri(cls, value: str) -> str:
        value = value.strip()
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ValueError(f"Not an absolute HTTP URI: {value!r}")
        return value

    @field_validator("network", mode="before")
    @classmethod
    def _blank_network(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()


class TransportReply(BaseModel):
    """Raw status, body and headers as returned by a transport."""

    status: int
    body: str = ""
    headers: dict[str, str] = Field(default_factory=dict)


class Response(BaseModel):
    """Uniform result of one call: a real status, or ``"599"`` with a reason."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    code: str = Field(..., pattern=r"^\d{3}$", description="Three-digit status code.")
    body: str = Field("", description="Payload, or the failure description on 599.")
    header: Headers = Field(default_factory=Headers)

    @field_validator("header", mode="before")
    @classmethod
    def _as_headers(cls, value: Any) -> Headers:
        if isinstance(value, Headers):
            return value
        return Headers(value or {})

    @property
    def ok(self) -> bool:
        return self.code.startswith("2")

    @property
    def failed(self) -> bool:
        return self.code == FAILURE_CODE

    def __str__(self) -> str:
        return f"{self.code}: {self.body}"


class CallOutcome(BaseModel):
    """Internal result of a dispatched call, tagged by how it ended."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["completed", "failed", "timed_out"]
    elapsed: float = 0.0
    reply: Optional[TransportReply] = None
    error: str = ""
    error_type: str = ""

    @classmethod
    def completed(cls, reply: TransportReply, elapsed: float) -> "CallOutcome":
        return cls(kind="completed", reply=reply, elapsed=elapsed)

    @classmethod
    def failed(cls, exc: BaseException, elapsed: float) -> "CallOutcome":
        text = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(kind="failed", error=text, error_type=type(exc).__name__, elapsed=elapsed)

    @classmethod
    def timed_out(cls, exc: BaseException, elapsed: float) -> "CallOutcome":
        return cls(kind="timed_out", error=str(exc), error_type=type(exc).__name__, elapsed=elapsed)

    def to_response(self) -> Response:
        """Collapse the outcome into the shape callers see."""

        if self.kind == "completed" and self.reply is not None:
            if not 100 <= self.reply.status <= 999:
                return Response(
                    code=FAILURE_CODE,
                    body=f"Invalid HTTP status {self.reply.status}",
                    header=Headers(),
                )
            return Response(
                code=str(self.reply.status),
                body=self.reply.body,
                header=Headers(self.reply.headers),
            )
        return Response(code=FAILURE_CODE, body=self.error, header=Headers())

