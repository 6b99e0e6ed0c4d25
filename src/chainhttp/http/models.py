# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request/response data models used by the chainhttp Client."""

from __future__ import annotations

import re
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from functools import partial
from typing import Any

import httpx

from ..errors import ChainHttpError, RequestBuildError
from .headers import HeaderMultimap
from .multipart import MultipartWriter

_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_BODY_CHUNK_SIZE = 64 * 1024
# Floor for the per-phase timeout handed to httpx; 0 would mean non-blocking sockets.
_MIN_PHASE_TIMEOUT = 0.001


@dataclass
class Option:
    """Per-client send options."""

    timeout: float | None = None

    def start_deadline(self) -> Deadline:
        """Start the whole-request clock; None or <= 0 disables it."""
        if self.timeout is None or self.timeout <= 0:
            return Deadline()
        return Deadline(time.monotonic() + self.timeout)


@dataclass(frozen=True)
class Deadline:
    """
    One deadline shared by every phase of a request, body reads included.

    httpx timeouts restart on each network operation, so a peer that drips
    bytes never trips them; ``guard`` checks the clock between chunks.
    """

    expires_at: float | None = None

    def remaining(self) -> float | None:
        if self.expires_at is None:
            return None
        return self.expires_at - time.monotonic()

    def httpx_timeout(self) -> httpx.Timeout:
        remaining = self.remaining()
        if remaining is None:
            return httpx.Timeout(None)
        return httpx.Timeout(max(remaining, _MIN_PHASE_TIMEOUT))

    def check(self, request: httpx.Request) -> None:
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise httpx.ReadTimeout("request deadline exceeded", request=request)

    def guard(self, chunks: Iterable[bytes], request: httpx.Request) -> Iterator[bytes]:
        """Yield ``chunks``, raising httpx.ReadTimeout once the deadline has passed."""
        for chunk in chunks:
            self.check(request)
            yield chunk


def _stream_body(body: Any) -> Iterator[bytes]:
    yield from iter(partial(body.read, _BODY_CHUNK_SIZE), b"")


@dataclass
class RequestDescriptor:
    """
    Request state accumulated by the builder.

    ``body`` and ``writer`` are mutually exclusive: the Client discards one
    when the other is installed.
    """

    method: str = ""
    url: str = ""
    headers: HeaderMultimap = field(default_factory=HeaderMultimap)
    body: Any = None
    writer: MultipartWriter | None = None

    def content(self) -> Any:
        if self.writer is not None:
            return self.writer.getvalue()
        body = self.body
        if body is not None and callable(getattr(body, "read", None)):
            return _stream_body(body)
        return body

    def build(self, client: httpx.Client, timeout: httpx.Timeout) -> httpx.Request:
        """Turn the descriptor into an httpx.Request bound to ``client``."""
        method = self.method or "GET"
        if not _METHOD_RE.fullmatch(method):
            raise RequestBuildError(f"invalid method {method!r}")
        try:
            url = httpx.URL(self.url)
        except httpx.InvalidURL as exc:
            raise RequestBuildError(f"invalid URL {self.url!r}: {exc}") from exc
        if url.scheme not in ("http", "https"):
            raise RequestBuildError(f"unsupported protocol scheme {url.scheme!r} in URL {self.url!r}")
        if not url.host:
            raise RequestBuildError(f"no host in request URL {self.url!r}")
        try:
            return client.build_request(
                method,
                url,
                headers=self.headers.multi_items(),
                content=self.content(),
                timeout=timeout,
            )
        except (TypeError, ValueError, httpx.InvalidURL) as exc:
            # Non-latin-1 header values, unsupported body types.
            raise RequestBuildError(f"build {method} {self.url!r}: {exc}") from exc


@dataclass
class ExecutionResult:
    """
    Outcome of the latest send: a response, or the first error recorded.

    The response is kept after an error (already closed) so callers can still
    read its status; ``error`` is authoritative.
    """

    response: httpx.Response | None = None
    error: ChainHttpError | None = None

    def fail(self, error: ChainHttpError) -> bool:
        """Record ``error`` unless an earlier one is already latched."""
        if self.error is not None:
            return False
        self.error = error
        return True


__all__ = ["Deadline", "ExecutionResult", "Option", "RequestDescriptor"]
