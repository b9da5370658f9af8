"""Custom exception types for the peer HTTP client."""

from __future__ import annotations


class ZoldHttpError(RuntimeError):
    """Base class for errors raised by this package."""


class InvalidRequestError(ZoldHttpError, ValueError):
    """Raised when a request descriptor violates its preconditions."""


class DeadlineExceeded(ZoldHttpError, TimeoutError):
    """Describes a call abandoned because its deadline elapsed."""
