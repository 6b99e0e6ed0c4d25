# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport decorator that logs every request/response pair with its latency."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import httpx

from ..config import load_client_settings
from ..log import get_trace_logger
from .transport import Transport, create_default_transport

RED = "\033[97;41m"
RESET = "\033[0m"


def format_elapsed(seconds: float) -> str:
    if seconds < 1e-3:
        return f"{seconds * 1e6:.3f}µs"
    if seconds < 1:
        return f"{seconds * 1e3:.3f}ms"
    return f"{seconds:.3f}s"


def _body_text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class TraceRecord:
    """One observed request/response pair."""

    host: str
    method: str
    url: str
    request_body: str
    response_body: str
    elapsed: float
    slow: bool

    def format(self, colorize: bool = True) -> str:
        cost = format_elapsed(self.elapsed)
        if self.slow:
            cost = f"{RED}{cost}{RESET}" if colorize else f"{cost} [SLOW]"
        return (
            f"\n{self.host} {self.method} {self.url} \n"
            f"RequestBody: {self.request_body} \n"
            f"Response: {self.response_body} \n"
            f"Cost time: {cost}\n"
        )


class LoggingTransport(httpx.BaseTransport):
    """
    Wraps another transport and emits one trace line per successful exchange.

    Bodies are read into memory on the way through; httpx keeps the read
    content on the request/response objects, so the delegate and the caller
    still see the original bytes. A delegate exception propagates unchanged
    and produces no trace. Nothing is shared between calls except the logger,
    so one instance may serve many threads.
    """

    def __init__(
        self,
        delegate: Transport | None = None,
        *,
        level: int = logging.INFO,
        slow_threshold: float | None = None,
        colorize: bool | None = None,
        logger: logging.Logger | None = None,
    ):
        settings = load_client_settings()
        self.delegate = delegate or create_default_transport(settings)
        self.level = level
        self.slow_threshold = settings.slow_threshold if slow_threshold is None else slow_threshold
        self.colorize = settings.log_colors if colorize is None else colorize
        self._logger = logger or get_trace_logger()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        start = time.perf_counter()
        request_body = request.read()

        response = self.delegate.handle_request(request)
        response_body = response.read()

        elapsed = time.perf_counter() - start
        record = TraceRecord(
            host=request.url.netloc.decode("ascii"),
            method=request.method,
            url=str(request.url),
            request_body=_body_text(request_body),
            response_body=_body_text(response_body),
            elapsed=elapsed,
            slow=elapsed > self.slow_threshold,
        )
        self._emit(record)
        return response

    def _emit(self, record: TraceRecord) -> None:
        if not self._logger.isEnabledFor(self.level):
            return
        self._logger.log(
            self.level,
            record.format(self.colorize),
            extra={"trace": record, "slow": record.slow},
        )

    def close(self) -> None:
        self.delegate.close()


__all__ = ["LoggingTransport", "TraceRecord", "format_elapsed"]
