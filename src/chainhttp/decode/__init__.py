# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Response body decoders and settable destinations."""

from .body import BodyDecoder, decode_body, decode_into
from .formats import BODY, JSON, YAML, DecodeFormat
from .scalar import decode_scalar, format_scalar, parse_duration
from .structured import decode_structured
from .targets import BytesCell, FloatCell, IntCell, Ref, StringCell, UintCell

__all__ = [
    "BODY",
    "BodyDecoder",
    "BytesCell",
    "DecodeFormat",
    "FloatCell",
    "IntCell",
    "JSON",
    "Ref",
    "StringCell",
    "UintCell",
    "YAML",
    "decode_body",
    "decode_into",
    "decode_scalar",
    "decode_structured",
    "format_scalar",
    "parse_duration",
]
