# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header multimap and normalization utilities.

HTTP header field names are case-insensitive (RFC 9110). Requests keep their
headers in a HeaderMultimap: canonical key -> ordered list of values, so a
header may be sent more than once.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from typing import Any

_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def canonical_header_key(key: str) -> str:
    """
    Return the canonical form of a header name ("content-type" -> "Content-Type").

    Names containing characters outside the token set are returned unchanged.
    """
    if not _TOKEN_RE.fullmatch(key):
        return key
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


def _coerce_headers_mapping(headers: Any) -> Mapping[object, object] | None:
    """
    Best-effort coercion of "dict-like" header containers into a Mapping.

    Accepts plain dicts, httpx.Headers and anything exposing `.items()`.
    Iterables of pairs are handled by HeaderMultimap.update directly.
    """
    if not headers:
        return None
    if isinstance(headers, Mapping):
        return headers

    items = getattr(headers, "items", None)
    if callable(items):
        return dict(items())
    return None


def _iter_pairs(headers: Any) -> Iterator[tuple[str, str]]:
    multi_items = getattr(headers, "multi_items", None)
    if callable(multi_items):
        yield from multi_items()
        return
    coerced = _coerce_headers_mapping(headers)
    if coerced is None:
        for key, value in headers or ():
            yield str(key), str(value)
        return
    for key, value in coerced.items():
        if key is None:
            continue
        if isinstance(value, (list, tuple)):
            for item in value:
                yield str(key), "" if item is None else str(item)
        else:
            yield str(key), "" if value is None else str(value)


class HeaderMultimap:
    """Case-insensitive, order-preserving header multimap."""

    def __init__(self, headers: Any = None):
        self._values: dict[str, list[str]] = {}
        if headers:
            self.update(headers)

    def add(self, key: str, value: str) -> None:
        self._values.setdefault(canonical_header_key(key), []).append(value)

    def set(self, key: str, *values: str) -> None:
        """Replace every value of ``key``; no values removes the header."""
        canonical = canonical_header_key(key)
        if values:
            self._values[canonical] = list(values)
        else:
            self._values.pop(canonical, None)

    def get_all(self, key: str) -> list[str]:
        return list(self._values.get(canonical_header_key(key), []))

    def update(self, headers: Any) -> None:
        """Append every value from a mapping (values may be lists), httpx.Headers, or pairs."""
        for key, value in _iter_pairs(headers):
            self.add(key, value)

    def multi_items(self) -> list[tuple[str, str]]:
        return [(key, value) for key, values in self._values.items() for value in values]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonical_header_key(key) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"HeaderMultimap({self._values!r})"


__all__ = ["HeaderMultimap", "canonical_header_key"]
