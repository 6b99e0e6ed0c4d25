# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io

import pytest

from chainhttp.decode import (
    BODY,
    BodyDecoder,
    BytesCell,
    FloatCell,
    IntCell,
    Ref,
    StringCell,
    decode_body,
    decode_into,
)
from chainhttp.decode.formats import DecodeFormat
from chainhttp.errors import DecodeError, UnknownDestinationError, UnsupportedFormatError


class RecordingSink:
    def __init__(self):
        self.writes: list[bytes] = []

    def write(self, data: bytes) -> int:
        self.writes.append(data)
        return len(data)


def test_byte_sink_receives_chunks_as_they_arrive():
    consumed = []

    def chunks():
        for chunk in (b"ab", b"cd", b"ef"):
            consumed.append(chunk)
            yield chunk

    sink = RecordingSink()
    assert decode_body(chunks(), sink) is sink
    assert sink.writes == [b"ab", b"cd", b"ef"]
    assert consumed == sink.writes


def test_bytesio_sink_gets_exact_bytes():
    sink = io.BytesIO()
    decode_body(io.BytesIO(b"\x00\x01binary"), sink)
    assert sink.getvalue() == b"\x00\x01binary"


def test_sink_write_failure_is_a_decode_error():
    with pytest.raises(DecodeError, match="StringIO"):
        decode_body(b"data", io.StringIO())


def test_string_cell_observes_exact_byte_sequence():
    payload = b"caf\xc3\xa9 \xff\xfe raw"
    cell = StringCell()
    decode_body(payload, cell)
    assert cell.value.startswith("café ")
    assert cell.value.encode("utf-8", "surrogateescape") == payload


def test_bytes_cell_and_bytearray():
    cell = BytesCell()
    decode_body([b"he", b"llo"], cell)
    assert cell.value == b"hello"

    buffer = bytearray(b"old contents")
    decode_body(b"new", buffer)
    assert buffer == bytearray(b"new")


def test_numeric_cells_use_scalar_codec():
    count = IntCell(bits=16)
    decode_body(b"1234", count)
    assert count.value == 1234

    ratio = FloatCell()
    decode_body(b"0.75", ratio)
    assert ratio.value == 0.75


def test_reference_layers_are_followed():
    inner = StringCell()
    outer = Ref(Ref(inner))
    assert decode_body(b"deep", outer) is outer
    assert inner.value == "deep"


@pytest.mark.parametrize("destination", [5, "text", {"a": 1}, Ref(), object()])
def test_unknown_destination_names_the_type(destination):
    with pytest.raises(UnknownDestinationError) as excinfo:
        decode_body(b"x", destination)
    assert type(destination).__name__ in str(excinfo.value)
    assert isinstance(excinfo.value, TypeError)


def test_body_decoder_tracks_last_value():
    decoder = BodyDecoder(io.BytesIO(b"42"))
    assert decoder.value is None
    cell = IntCell()
    assert decoder.decode(cell) is cell
    assert decoder.value is cell
    assert cell.value == 42


def test_decode_into_dispatches_on_format():
    cell = StringCell()
    decode_into(b"plain", cell, BODY)
    assert cell.value == "plain"

    target = {}
    decode_into([b'{"a"', b": 1}"], target, "json")
    assert target == {"a": 1}


@pytest.mark.parametrize("fmt", ["xml", "JSON", None, 3])
def test_unknown_format_is_an_error(fmt):
    with pytest.raises(UnsupportedFormatError):
        decode_into(b"{}", {}, fmt)


def test_decode_format_parse_accepts_members_and_values():
    assert DecodeFormat.parse(DecodeFormat.YAML) is DecodeFormat.YAML
    assert DecodeFormat.parse("body") is DecodeFormat.BODY
    assert DecodeFormat.JSON.structured is True
    assert DecodeFormat.BODY.structured is False
