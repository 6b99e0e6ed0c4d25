# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
chainhttp package entrypoint.

A fluent HTTP request builder on top of httpx: chain method, URL, headers,
query and body calls on a Client, send with ``do()``, then decode the
response with ``into(destination, fmt)``. Failures are latched on the client
and surface as one exception from ``into()``. ``LoggingTransport`` is an
httpx transport decorator that traces every exchange with its latency.
"""

from .config import TIMEOUT_10, TIMEOUT_20, ClientSettings, load_client_settings
from .decode import (
    BODY,
    JSON,
    YAML,
    BodyDecoder,
    BytesCell,
    DecodeFormat,
    FloatCell,
    IntCell,
    Ref,
    StringCell,
    UintCell,
)
from .errors import (
    AttachmentError,
    ChainHttpError,
    DecodeError,
    ErrorCategory,
    InternalServerError,
    RequestBuildError,
    ScalarDecodeError,
    StatusError,
    TransportError,
    UnknownDestinationError,
    UnsupportedFormatError,
)
from .http import (
    Client,
    LoggingTransport,
    Option,
    create_default_transport,
    new_client,
    new_default_client,
)
from .log import setup_logging
from .version import __version__

__all__ = [
    "AttachmentError",
    "BODY",
    "BodyDecoder",
    "BytesCell",
    "ChainHttpError",
    "Client",
    "ClientSettings",
    "DecodeError",
    "DecodeFormat",
    "ErrorCategory",
    "FloatCell",
    "IntCell",
    "InternalServerError",
    "JSON",
    "LoggingTransport",
    "Option",
    "Ref",
    "RequestBuildError",
    "ScalarDecodeError",
    "StatusError",
    "StringCell",
    "TIMEOUT_10",
    "TIMEOUT_20",
    "TransportError",
    "UintCell",
    "UnknownDestinationError",
    "UnsupportedFormatError",
    "YAML",
    "create_default_transport",
    "load_client_settings",
    "new_client",
    "new_default_client",
    "setup_logging",
    "__version__",
]
