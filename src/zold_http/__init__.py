"""Resilient single-request HTTP client for talking to other Zold nodes."""

from .client import Http, build_headers
from .config import PROTOCOL, VERSION, get_settings
from .data_models import Headers, Identity, Response
from .exceptions import DeadlineExceeded, InvalidRequestError, ZoldHttpError
from .transport import RequestsTransport, Transport

__all__ = [
    "Http",
    "build_headers",
    "PROTOCOL",
    "VERSION",
    "get_settings",
    "Headers",
    "Identity",
    "Response",
    "DeadlineExceeded",
    "InvalidRequestError",
    "ZoldHttpError",
    "RequestsTransport",
    "Transport",
]
