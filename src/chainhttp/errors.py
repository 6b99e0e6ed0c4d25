# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    # httpx wraps the underlying socket/ssl error; inspect the cause first.
    cause = exc.__cause__ or exc.__context__
    if isinstance(cause, (ssl_module.SSLError, ssl_module.CertificateError)) or isinstance(
        exc, (ssl_module.SSLError, ssl_module.CertificateError)
    ):
        return ErrorCategory.SSL_ERROR

    if isinstance(cause, (socket.gaierror, socket.herror)) or isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(
        exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)
    ):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Request deadline exceeded",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.UNKNOWN_ERROR: "Network error during request",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")


class ChainHttpError(Exception):
    """Base exception for all chainhttp failures."""


class RequestBuildError(ChainHttpError):
    """Raised when the accumulated request cannot be turned into a wire request."""


class TransportError(ChainHttpError):
    """Raised for connection, TLS, timeout and stream failures during a send."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR,
        retry_safe: bool = False,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.retry_safe = retry_safe

    @classmethod
    def from_exception(cls, exc: BaseException) -> TransportError:
        category = categorize_exception(exc)
        return cls(str(exc) or type(exc).__name__, category=category)

    @property
    def reason(self) -> str:
        return error_category_to_reason(self.category)


class StatusError(ChainHttpError):
    """Raised for responses outside the successful status range."""

    def __init__(self, message: str, *, status_code: int, body: bytes = b"") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class InternalServerError(StatusError):
    """Raised for 5xx responses; the response body is never echoed."""

    MESSAGE = "internal server error"

    def __init__(self, *, status_code: int = 500, body: bytes = b"") -> None:
        super().__init__(self.MESSAGE, status_code=status_code, body=body)


class DecodeError(ChainHttpError, ValueError):
    """Raised when a response body cannot be decoded into the destination."""


class ScalarDecodeError(DecodeError):
    """Raised when text cannot be parsed into a numeric destination."""

    def __init__(self, type_name: str, payload: str, reason: str) -> None:
        super().__init__(f"cannot decode {payload!r} into {type_name}: {reason}")
        self.type_name = type_name
        self.payload = payload
        self.reason = reason


class UnknownDestinationError(DecodeError, TypeError):
    """Raised when the destination is not a supported decode target."""

    def __init__(self, destination: object) -> None:
        self.type_name = type(destination).__name__
        super().__init__(f"type ({self.type_name}) unknown destination type")


class UnsupportedFormatError(DecodeError):
    """Raised for a decode format tag outside DecodeFormat."""

    def __init__(self, fmt: object) -> None:
        super().__init__(f"decoder type not support: {fmt!r}")
        self.format = fmt


class AttachmentError(ChainHttpError):
    """Raised when a multipart attachment cannot be read or framed."""


class MultipartError(ChainHttpError):
    """Raised when a multipart writer is used after it was closed."""


__all__ = [
    "AttachmentError",
    "ChainHttpError",
    "DecodeError",
    "ErrorCategory",
    "InternalServerError",
    "MultipartError",
    "RequestBuildError",
    "ScalarDecodeError",
    "StatusError",
    "TransportError",
    "UnknownDestinationError",
    "UnsupportedFormatError",
    "categorize_exception",
    "error_category_to_reason",
]
