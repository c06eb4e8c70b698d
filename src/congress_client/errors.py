"""Typed failure reported by every public call of the client."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    UNAUTHORIZED = "Unauthorized"
    NOT_FOUND = "NotFound"
    RATE_LIMITED = "RateLimited"
    VALIDATION_ERROR = "ValidationError"
    SERVER_ERROR = "ServerError"
    NETWORK_ERROR = "NetworkError"
    UNKNOWN_ERROR = "UnknownError"


class ConfigError(ValueError):
    """Raised when a ClientConfig cannot be built from the supplied values."""


class CongressApiError(Exception):
    """
    A classified failure of one logical call.

    Instances are created once, where the raw HTTP or transport outcome is
    classified, and are raised to the caller as-is. Callers should branch on
    ``kind`` rather than on the text of ``detail``.

    ``retryable`` marks kinds the retry engine may re-attempt (rate limiting and
    5xx server errors). Whether another attempt actually happens depends on the
    remaining attempt budget.
    """

    def __init__(
        self,
        kind: ErrorKind,
        detail: str,
        *,
        status: Optional[int] = None,
        request_id: Optional[str] = None,
        retryable: bool = False,
        retry_after: Optional[float] = None,
    ):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.status = status
        self.request_id = request_id
        self.retryable = retryable
        # seconds requested by the remote via Retry-After, when it sent one
        self.retry_after = retry_after

    def __repr__(self) -> str:
        return (f"CongressApiError(kind={self.kind.value}, status={self.status}, "
                f"detail={self.detail!r}, request_id={self.request_id!r}, retryable={self.retryable})")

    def __str__(self) -> str:
        prefix = f"{self.kind.value}"
        if self.status is not None:
            prefix += f" ({self.status})"
        return f"{prefix}: {self.detail}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CongressApiError):
            return NotImplemented
        return (self.kind, self.status, self.detail, self.request_id, self.retryable) == (
            other.kind, other.status, other.detail, other.request_id, other.retryable)

    __hash__ = Exception.__hash__
