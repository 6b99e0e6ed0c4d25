# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Response body decoding: raw copies, text, bytes, scalars and structured formats."""

from __future__ import annotations

from collections.abc import Iterator
from functools import partial
from typing import Any

from ..errors import DecodeError, UnknownDestinationError
from .formats import DecodeFormat
from .scalar import decode_scalar
from .structured import decode_structured
from .targets import NUMERIC_CELLS, BytesCell, StringCell, is_byte_sink, unwrap

CHUNK_SIZE = 64 * 1024

# Undecodable bytes survive as lone surrogates, so text.encode("utf-8", TEXT_ERRORS)
# gives back the exact payload.
TEXT_ERRORS = "surrogateescape"

BodySource = Any  # bytes, a readable binary stream, or an iterable of byte chunks


def iter_chunks(source: BodySource) -> Iterator[bytes]:
    """Yield byte chunks from bytes, a readable stream, or an iterable of chunks."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        yield bytes(source)
        return
    read = getattr(source, "read", None)
    if callable(read):
        yield from iter(partial(read, CHUNK_SIZE), b"")
        return
    yield from source


def decode_body(source: BodySource, destination: Any) -> Any:
    """
    Decode a raw body into ``destination``.

    Byte sinks (anything with ``write``) receive the chunks as they arrive.
    Every other destination gets the body buffered once into an immutable
    ``bytes`` object, then:

    - StringCell: the text of the buffer
    - BytesCell: the buffer itself; a bytearray has its contents replaced
    - IntCell / UintCell / FloatCell: the buffer parsed as a number
    """
    if is_byte_sink(destination):
        try:
            for chunk in iter_chunks(source):
                destination.write(chunk)
        except (OSError, TypeError, ValueError) as exc:
            raise DecodeError(f"copy into {type(destination).__name__} failed: {exc}") from exc
        return destination

    target = unwrap(destination)
    if not isinstance(target, (StringCell, BytesCell, bytearray, *NUMERIC_CELLS)):
        raise UnknownDestinationError(target)

    payload = b"".join(iter_chunks(source))
    if isinstance(target, StringCell):
        target.value = payload.decode("utf-8", TEXT_ERRORS)
    elif isinstance(target, BytesCell):
        target.value = payload
    elif isinstance(target, bytearray):
        target[:] = payload
    else:
        decode_scalar(payload.decode("utf-8", TEXT_ERRORS), target)
    return destination


def decode_into(source: BodySource, destination: Any, fmt: DecodeFormat | str) -> Any:
    """Dispatch to the decoding strategy selected by ``fmt``."""
    fmt = DecodeFormat.parse(fmt)
    if fmt is DecodeFormat.BODY:
        return decode_body(source, destination)
    return decode_structured(b"".join(iter_chunks(source)), destination, fmt)


class BodyDecoder:
    """Raw-body decoder bound to one response stream."""

    def __init__(self, source: BodySource):
        self._source = source
        self._value: Any = None

    def decode(self, destination: Any) -> Any:
        self._value = decode_body(self._source, destination)
        return self._value

    @property
    def value(self) -> Any:
        """The destination filled by the last decode() call."""
        return self._value


__all__ = ["BodyDecoder", "decode_body", "decode_into", "iter_chunks"]
