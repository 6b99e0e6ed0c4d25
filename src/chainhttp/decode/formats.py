# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Decode format tags."""

from __future__ import annotations

from enum import Enum

from ..errors import UnsupportedFormatError


class DecodeFormat(str, Enum):
    JSON = "json"
    YAML = "yaml"
    BODY = "body"

    @classmethod
    def parse(cls, value: object) -> DecodeFormat:
        """Return the matching format or raise UnsupportedFormatError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedFormatError(value) from None

    @property
    def structured(self) -> bool:
        return self is not DecodeFormat.BODY


JSON = DecodeFormat.JSON
YAML = DecodeFormat.YAML
BODY = DecodeFormat.BODY

__all__ = ["BODY", "JSON", "YAML", "DecodeFormat"]
