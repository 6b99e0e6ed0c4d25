# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fluent request builder: compose, send, classify and decode one request."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Mapping
from typing import Any

import httpx

from ..config import ClientSettings, load_client_settings
from ..decode.body import decode_into
from ..decode.formats import DecodeFormat
from ..errors import (
    AttachmentError,
    ChainHttpError,
    InternalServerError,
    MultipartError,
    RequestBuildError,
    StatusError,
    TransportError,
    categorize_exception,
)
from .headers import HeaderMultimap
from .logging_transport import LoggingTransport
from .models import Deadline, ExecutionResult, Option, RequestDescriptor
from .multipart import MultipartWriter
from .transport import Transport, create_default_transport

logger = logging.getLogger(__name__)

CONTENT_TYPE = "Content-Type"
JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"

# Body read failures that a retry on a fresh connection may cure.
_STREAM_ERRORS = (httpx.RemoteProtocolError, httpx.ReadError, httpx.StreamError)


def _query_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Client:
    """
    Single-use request builder.

    Builder methods return ``self`` and never raise: the first failure is
    latched in ``err`` and every later step that does I/O (form files,
    ``do()``, ``into()``) returns it untouched. ``into()`` and
    ``raise_for_error()`` raise the latched error.

    Raw body vs multipart form: the last one installed wins. ``set_body()``
    discards any form parts written so far, and a form field/file added after
    ``set_body()`` discards the raw body and starts a fresh multipart body.

    A Client is not safe for concurrent use; a transport passed in (for
    example a shared LoggingTransport) may be, and is never closed by the
    Client.
    """

    def __init__(
        self,
        *,
        transport: Transport | None = None,
        headers: Any = None,
        option: Option | None = None,
        settings: ClientSettings | None = None,
    ):
        self.settings = settings or load_client_settings()
        self.request = RequestDescriptor(headers=HeaderMultimap(headers))
        self.option = option or Option()
        self.result = ExecutionResult()
        self._deadline = Deadline()
        self._owns_transport = transport is None
        self.transport: Transport = transport or create_default_transport(self.settings)
        self._http: httpx.Client | None = None

    # -- state -----------------------------------------------------------------

    @property
    def err(self) -> ChainHttpError | None:
        return self.result.error

    @property
    def response(self) -> httpx.Response | None:
        return self.result.response

    @property
    def status_code(self) -> int | None:
        response = self.result.response
        return response.status_code if response is not None else None

    def _fail(self, error: ChainHttpError, cause: BaseException | None = None) -> Client:
        if cause is not None and error.__cause__ is None:
            error.__cause__ = cause
        if self.result.fail(error):
            logger.debug("%s %s failed: %s", self.request.method, self.request.url, error)
        return self

    def raise_for_error(self) -> Client:
        if self.err is not None:
            raise self.err
        return self

    # -- method / URL ----------------------------------------------------------

    def _set_target(self, method: str, url: str) -> Client:
        self.request.method = method
        self.request.url = url
        return self

    def get(self, url: str) -> Client:
        return self._set_target("GET", url)

    def post(self, url: str) -> Client:
        return self._set_target("POST", url)

    def put(self, url: str) -> Client:
        return self._set_target("PUT", url)

    def patch(self, url: str) -> Client:
        return self._set_target("PATCH", url)

    def delete(self, url: str) -> Client:
        return self._set_target("DELETE", url)

    def options(self, url: str) -> Client:
        return self._set_target("OPTIONS", url)

    # Non-standard verbs kept for servers that route on them.
    def header(self, url: str) -> Client:
        return self._set_target("HEADER", url)

    def update(self, url: str) -> Client:
        return self._set_target("UPDATE", url)

    def set_url(self, url: str) -> Client:
        self.request.url = url
        return self

    def set_timeout(self, seconds: float | None) -> Client:
        self.option.timeout = seconds
        return self

    # -- headers / query -------------------------------------------------------

    def add_header(self, headers: Mapping[str, Any] | Any) -> Client:
        """Append every value of a header mapping (values may be lists)."""
        self.request.headers.update(headers)
        return self

    def set_header(self, key: str, *values: str) -> Client:
        """Replace all values of ``key``."""
        self.request.headers.set(key, *values)
        return self

    def add_query(self, key: str, value: str) -> Client:
        """Append ``key=value`` to the URL; empty keys or values are ignored."""
        if not key or not value:
            return self
        separator = "&" if "?" in self.request.url else "?"
        self.request.url = f"{self.request.url}{separator}{key}={value}"
        return self

    def set_query(self, params: Mapping[str, Any] | None) -> Client:
        for key, value in (params or {}).items():
            self.add_query(key, _query_value(value))
        return self

    # -- body ------------------------------------------------------------------

    def set_body(self, body: Any) -> Client:
        """Install a raw body: bytes, str, a readable binary stream, or an iterable of chunks."""
        if self.request.writer is not None:
            logger.debug("raw body replaces %d-byte multipart form", len(self.request.writer.getvalue()))
            self.request.writer = None
        self.request.body = body
        return self

    def _multipart(self) -> MultipartWriter:
        if self.request.writer is None:
            if self.request.body is not None:
                logger.debug("multipart form replaces raw body")
                self.request.body = None
            self.request.writer = MultipartWriter()
        return self.request.writer

    def set_form_field(self, key: str, value: str) -> Client:
        if self.err is not None:
            return self
        try:
            self._multipart().write_field(key, value)
        except MultipartError as exc:
            return self._fail(exc)
        return self

    def set_form_file(self, key: str, path: str | os.PathLike[str]) -> Client:
        """Attach the file at ``path`` as form part ``key``; the file is closed on every path."""
        if self.err is not None:
            return self
        writer = self._multipart()
        try:
            with open(path, "rb") as handle:
                part = writer.create_form_file(key, os.path.basename(os.fspath(path)))
                shutil.copyfileobj(handle, part)
        except (OSError, MultipartError) as exc:
            return self._fail(AttachmentError(f"attach {os.fspath(path)!r} as {key!r}: {exc}"), exc)
        return self

    # -- transport -------------------------------------------------------------

    def enable_log(self, level: int = logging.INFO) -> Client:
        """Route subsequent sends through a LoggingTransport wrapping the current transport."""
        self.transport = LoggingTransport(
            self.transport,
            level=level,
            slow_threshold=self.settings.slow_threshold,
            colorize=self.settings.log_colors,
        )
        self._http = None
        return self

    def _http_client(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(
                transport=self.transport,
                follow_redirects=self.settings.follow_redirects,
                headers={"User-Agent": self.settings.user_agent},
            )
        return self._http

    # -- send ------------------------------------------------------------------

    def do(self) -> Client:
        if self.err is not None:
            return self

        writer = self.request.writer
        if writer is not None and not writer.closed:
            self.set_header(CONTENT_TYPE, writer.form_data_content_type())
            writer.close()

        http = self._http_client()
        # One clock for the whole exchange: build, send and every body read.
        self._deadline = deadline = self.option.start_deadline()
        try:
            wire_request = self.request.build(http, deadline.httpx_timeout())
        except RequestBuildError as exc:
            return self._fail(exc)

        try:
            response = http.send(wire_request, stream=True)
        except (httpx.HTTPError, OSError) as exc:
            return self._fail(TransportError.from_exception(exc), exc)

        self.result.response = response
        try:
            deadline.check(wire_request)
        except httpx.TimeoutException as exc:
            response.close()
            return self._fail(TransportError.from_exception(exc), exc)
        self._classify(response)
        return self

    def _classify(self, response: httpx.Response) -> None:
        status = response.status_code
        if status == httpx.codes.SWITCHING_PROTOCOLS:
            return
        if status >= httpx.codes.INTERNAL_SERVER_ERROR:
            response.close()
            self._fail(InternalServerError(status_code=status))
            return
        if status < httpx.codes.OK or status > httpx.codes.PARTIAL_CONTENT:
            self._fail(self._status_error(response))

    def _status_error(self, response: httpx.Response) -> ChainHttpError:
        try:
            body = b"".join(self._deadline.guard(response.iter_bytes(), response.request))
        except _STREAM_ERRORS as exc:
            error: ChainHttpError = TransportError(
                "stream error when reading response body, may be caused by closed connection. "
                f"Please retry. Original error: {exc}",
                category=categorize_exception(exc),
                retry_safe=True,
            )
            error.__cause__ = exc
            return error
        except (httpx.HTTPError, OSError) as exc:
            error = TransportError(
                f"unexpected error when reading response body. Please retry. Original error: {exc}",
                category=categorize_exception(exc),
            )
            error.__cause__ = exc
            return error
        finally:
            response.close()

        if not body:
            return StatusError(f"{response.status_code} {response.reason_phrase}".strip(), status_code=response.status_code)
        return StatusError(body.decode("utf-8", errors="replace"), status_code=response.status_code, body=body)

    # -- decode ----------------------------------------------------------------

    def into(self, destination: Any, fmt: DecodeFormat | str = DecodeFormat.JSON) -> Any:
        """
        Decode the response body into ``destination`` and return it.

        A latched error is raised before anything is decoded. A ``None``
        destination is a no-op.
        """
        if self.err is not None:
            raise self.err
        if destination is None:
            return None
        fmt = DecodeFormat.parse(fmt)
        response = self.result.response
        if response is None:
            raise RequestBuildError("request has not been sent; call do() first")
        try:
            return decode_into(self._deadline.guard(response.iter_bytes(), response.request), destination, fmt)
        except _STREAM_ERRORS as exc:
            raise TransportError(
                f"stream error when reading response body. Original error: {exc}",
                category=categorize_exception(exc),
                retry_safe=True,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError.from_exception(exc) from exc
        finally:
            response.close()

    # -- lifecycle -------------------------------------------------------------

    def close(self) -> None:
        if self.result.response is not None:
            self.result.response.close()
        if self._owns_transport:
            if self._http is not None:
                self._http.close()
            else:
                self.transport.close()
        self._http = None

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()


def new_client(*, transport: Transport | None = None, settings: ClientSettings | None = None) -> Client:
    """Bare client: no default headers, no timeout."""
    return Client(transport=transport, settings=settings)


def new_default_client(*, transport: Transport | None = None, settings: ClientSettings | None = None) -> Client:
    """Client preset with a JSON content type and the configured timeout (10 seconds by default)."""
    settings = settings or load_client_settings()
    return Client(
        transport=transport,
        headers={CONTENT_TYPE: JSON_CONTENT_TYPE},
        option=Option(timeout=settings.timeout),
        settings=settings,
    )


__all__ = [
    "CONTENT_TYPE",
    "Client",
    "JSON_CONTENT_TYPE",
    "XML_CONTENT_TYPE",
    "new_client",
    "new_default_client",
]
