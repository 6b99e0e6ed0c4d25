# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .client import (
    CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    XML_CONTENT_TYPE,
    Client,
    new_client,
    new_default_client,
)
from .headers import HeaderMultimap, canonical_header_key
from .logging_transport import LoggingTransport, TraceRecord
from .models import Deadline, ExecutionResult, Option, RequestDescriptor
from .multipart import MultipartWriter
from .transport import Transport, create_default_transport

__all__ = [
    "CONTENT_TYPE",
    "Client",
    "Deadline",
    "ExecutionResult",
    "HeaderMultimap",
    "JSON_CONTENT_TYPE",
    "LoggingTransport",
    "MultipartWriter",
    "Option",
    "RequestDescriptor",
    "TraceRecord",
    "Transport",
    "XML_CONTENT_TYPE",
    "canonical_header_key",
    "create_default_transport",
    "new_client",
    "new_default_client",
]
