# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Text <-> numeric scalar conversion for raw-body destinations."""

from __future__ import annotations

import math
import re
import struct

from ..errors import ScalarDecodeError
from .targets import FloatCell, IntCell, NumericCell, UintCell

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)
_DURATION_PART_RE = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")

NANOSECOND = 1
MICROSECOND = 1000 * NANOSECOND
MILLISECOND = 1000 * MICROSECOND
SECOND = 1000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

DURATION_UNITS = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,
    "μs": MICROSECOND,
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}

_MAX_INT64 = (1 << 63) - 1


def _check_range(value: int, low: int, high: int) -> int:
    if not low <= value <= high:
        raise ValueError("value out of range")
    return value


def parse_int(text: str, bits: int = 0) -> int:
    """Parse a base-10 signed integer that must fit in ``bits`` (0 = 64)."""
    if not _INT_RE.fullmatch(text):
        raise ValueError("invalid syntax")
    return _check_range(int(text), *IntCell(bits=bits).bounds)


def parse_uint(text: str, bits: int = 0) -> int:
    """Parse a base-10 unsigned integer that must fit in ``bits`` (0 = 64)."""
    if not _UINT_RE.fullmatch(text):
        raise ValueError("invalid syntax")
    return _check_range(int(text), *UintCell(bits=bits).bounds)


def parse_float(text: str, bits: int = 64) -> float:
    """Parse a float, rounding to single precision when ``bits`` is 32."""
    if not _FLOAT_RE.fullmatch(text):
        raise ValueError("invalid syntax")
    value = float(text)
    if math.isinf(value) and "inf" not in text.lower():
        raise ValueError("value out of range")
    if bits == 32 and math.isfinite(value):
        try:
            (value,) = struct.unpack(">f", struct.pack(">f", value))
        except OverflowError:
            raise ValueError("value out of range") from None
    return value


def parse_duration(text: str) -> int:
    """
    Parse a duration literal such as ``"1h30m"`` or ``"-1.5s"`` into nanoseconds.

    Accepted units are ns, us (or µs), ms, s, m and h. A bare ``"0"`` is the
    only unitless literal allowed.
    """
    rest = text
    negative = False
    if rest[:1] in ("-", "+"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return 0
    if not rest:
        raise ValueError(f"invalid duration {text!r}")

    total = 0
    while rest:
        match = _DURATION_PART_RE.match(rest)
        whole, fraction, unit = match.group(1), match.group(2), match.group(3)
        if not whole and not fraction:
            raise ValueError(f"invalid duration {text!r}")
        if not unit:
            raise ValueError(f"missing unit in duration {text!r}")
        scale = DURATION_UNITS.get(unit)
        if scale is None:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")
        total += int(whole or "0") * scale
        if fraction:
            total += int(fraction) * scale // 10 ** len(fraction)
        if total > _MAX_INT64 + 1:
            raise ValueError(f"invalid duration {text!r}")
        rest = rest[match.end():]

    if negative:
        return -total
    if total > _MAX_INT64:
        raise ValueError(f"invalid duration {text!r}")
    return total


def format_scalar(value: int | float) -> str:
    """Render a scalar as text the matching parser accepts."""
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric scalar")
    if isinstance(value, float):
        return repr(value)
    return str(value)


def decode_scalar(text: str, cell: NumericCell) -> NumericCell:
    """
    Parse ``text`` according to the cell's kind and width and store the result.

    An empty payload decodes as zero. The 64-bit signed integer kind also
    accepts duration literals, stored as nanoseconds.
    """
    payload = text or "0"
    try:
        if isinstance(cell, IntCell):
            if cell.bits == 64:
                try:
                    value = parse_duration(payload)
                except ValueError:
                    value = parse_int(payload, 64)
            else:
                value = parse_int(payload, cell.bits)
        elif isinstance(cell, UintCell):
            value = parse_uint(payload, cell.bits)
        elif isinstance(cell, FloatCell):
            value = parse_float(payload, cell.bits)
        else:
            raise TypeError(f"{type(cell).__name__} is not a numeric cell")
    except ValueError as exc:
        raise ScalarDecodeError(cell.type_name, text, str(exc)) from exc
    cell.value = value
    return cell


__all__ = [
    "DURATION_UNITS",
    "decode_scalar",
    "format_scalar",
    "parse_duration",
    "parse_float",
    "parse_int",
    "parse_uint",
]
