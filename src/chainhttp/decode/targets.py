# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Settable decode destinations.

Python strings, bytes and numbers are immutable, so a decoder cannot write
through a reference to them. Callers hand in a cell instead: a small mutable
holder whose type also declares how the payload must be interpreted
(text, raw bytes, or a numeric kind of a given bit width).

A plain immutable value passed as a destination is a programmer error and is
reported as UnknownDestinationError rather than silently ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

INT_BITS = (0, 8, 16, 32, 64)
FLOAT_BITS = (32, 64)

# Width 0 is the platform-natural width.
NATIVE_BITS = 64


def _check_bits(bits: int, allowed: tuple[int, ...], kind: str) -> None:
    if bits not in allowed:
        raise ValueError(f"unsupported {kind} width {bits}; expected one of {allowed}")


@dataclass
class Ref:
    """Holds an arbitrary decoded value, or another cell to decode through."""

    value: Any = None


@dataclass
class StringCell:
    value: str = ""

    type_name = "string"


@dataclass
class BytesCell:
    value: bytes = b""

    type_name = "[]byte"


@dataclass
class IntCell:
    """Signed integer destination; ``bits=0`` means platform width."""

    value: int = 0
    bits: int = 0

    def __post_init__(self) -> None:
        _check_bits(self.bits, INT_BITS, "integer")

    @property
    def type_name(self) -> str:
        return f"int{self.bits}" if self.bits else "int"

    @property
    def bounds(self) -> tuple[int, int]:
        size = self.bits or NATIVE_BITS
        return -(1 << (size - 1)), (1 << (size - 1)) - 1


@dataclass
class UintCell:
    """Unsigned integer destination; ``bits=0`` means platform width."""

    value: int = 0
    bits: int = 0

    def __post_init__(self) -> None:
        _check_bits(self.bits, INT_BITS, "integer")

    @property
    def type_name(self) -> str:
        return f"uint{self.bits}" if self.bits else "uint"

    @property
    def bounds(self) -> tuple[int, int]:
        size = self.bits or NATIVE_BITS
        return 0, (1 << size) - 1


@dataclass
class FloatCell:
    value: float = 0.0
    bits: int = 64

    def __post_init__(self) -> None:
        _check_bits(self.bits, FLOAT_BITS, "float")

    @property
    def type_name(self) -> str:
        return f"float{self.bits}"


NumericCell = Union[IntCell, UintCell, FloatCell]
NUMERIC_CELLS = (IntCell, UintCell, FloatCell)
CELL_TYPES = (Ref, StringCell, BytesCell, *NUMERIC_CELLS)


def unwrap(destination: Any) -> Any:
    """Follow Ref layers down to the innermost settable destination."""
    seen: set[int] = set()
    while isinstance(destination, Ref) and isinstance(destination.value, (*CELL_TYPES, bytearray)):
        if id(destination) in seen:
            raise ValueError("reference cycle in decode destination")
        seen.add(id(destination))
        destination = destination.value
    return destination


def is_byte_sink(destination: Any) -> bool:
    """True when the destination accepts streamed writes."""
    return not isinstance(destination, CELL_TYPES) and callable(getattr(destination, "write", None))


__all__ = [
    "BytesCell",
    "CELL_TYPES",
    "FloatCell",
    "IntCell",
    "NUMERIC_CELLS",
    "NumericCell",
    "Ref",
    "StringCell",
    "UintCell",
    "is_byte_sink",
    "unwrap",
]
