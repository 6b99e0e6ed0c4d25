# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""JSON/YAML decoding into caller-supplied destinations."""

from __future__ import annotations

import base64
import binascii
import dataclasses
import json
import typing
from collections.abc import Mapping, MutableMapping, MutableSequence
from typing import Any

import yaml

from ..errors import DecodeError, UnknownDestinationError
from .formats import DecodeFormat
from .targets import BytesCell, FloatCell, IntCell, Ref, StringCell, UintCell, unwrap

_JSON_DECODER = json.JSONDecoder()


def parse_document(payload: bytes, fmt: DecodeFormat) -> Any:
    """Parse the first document of ``payload`` with the codec named by ``fmt``."""
    if fmt is DecodeFormat.JSON:
        try:
            text = payload.decode("utf-8-sig").lstrip()
            if not text:
                raise DecodeError("EOF")
            # First value only; trailing data is left unread.
            document, _ = _JSON_DECODER.raw_decode(text)
            return document
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(str(exc)) from exc
    if fmt is DecodeFormat.YAML:
        try:
            documents = yaml.safe_load_all(payload)
            return next(documents)
        except StopIteration:
            raise DecodeError("EOF") from None
        except yaml.YAMLError as exc:
            raise DecodeError(str(exc)) from exc
    raise ValueError(f"{fmt!r} is not a structured format")


def decode_structured(payload: bytes, destination: Any, fmt: DecodeFormat) -> Any:
    """Parse ``payload`` and assign the document into ``destination``."""
    document = parse_document(payload, fmt)
    assign(destination, document)
    return destination


def _type_label(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


def _mismatch(value: Any, target: str) -> DecodeError:
    return DecodeError(f"cannot unmarshal {_type_label(value)} into {target}")


def assign(destination: Any, value: Any) -> None:
    """Write ``value`` into a settable destination."""
    target = unwrap(destination)

    if isinstance(target, Ref):
        target.value = value
    elif isinstance(target, StringCell):
        if not isinstance(value, str):
            raise _mismatch(value, target.type_name)
        target.value = value
    elif isinstance(target, BytesCell):
        if not isinstance(value, str):
            raise _mismatch(value, target.type_name)
        try:
            target.value = base64.b64decode(value, validate=True)
        except binascii.Error as exc:
            raise DecodeError(f"illegal base64 data for {target.type_name}: {exc}") from exc
    elif isinstance(target, (IntCell, UintCell)):
        if not isinstance(value, int) or isinstance(value, bool):
            raise _mismatch(value, target.type_name)
        low, high = target.bounds
        if not low <= value <= high:
            raise DecodeError(f"cannot unmarshal number {value} into {target.type_name}: value out of range")
        target.value = value
    elif isinstance(target, FloatCell):
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise _mismatch(value, target.type_name)
        target.value = float(value)
    elif isinstance(target, MutableMapping):
        if not isinstance(value, Mapping):
            raise _mismatch(value, type(target).__name__)
        target.update(value)
    elif isinstance(target, MutableSequence) and not isinstance(target, (str, bytes, bytearray)):
        if not isinstance(value, list):
            raise _mismatch(value, type(target).__name__)
        target[:] = value
    elif dataclasses.is_dataclass(target) and not isinstance(target, type):
        if not isinstance(value, Mapping):
            raise _mismatch(value, type(target).__name__)
        _populate_dataclass(target, value)
    else:
        raise UnknownDestinationError(target)


def _field_key(field: dataclasses.Field) -> str:
    return field.metadata.get("key", field.name)


def _lookup(data: Mapping[str, Any], key: str) -> tuple[bool, Any]:
    """Exact key match first, then a case-insensitive one."""
    if key in data:
        return True, data[key]
    lowered = key.lower()
    for candidate, value in data.items():
        if isinstance(candidate, str) and candidate.lower() == lowered:
            return True, value
    return False, None


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {}


def _populate_dataclass(target: Any, data: Mapping[str, Any]) -> None:
    hints = _type_hints(type(target))
    cls_name = type(target).__name__
    for field in dataclasses.fields(target):
        found, raw = _lookup(data, _field_key(field))
        if not found:
            continue
        hint = hints.get(field.name, Any)
        current = getattr(target, field.name, None)
        if raw is None and not _allows_none(hint):
            continue
        if (
            isinstance(raw, Mapping)
            and dataclasses.is_dataclass(current)
            and not isinstance(current, type)
        ):
            _populate_dataclass(current, raw)
            continue
        setattr(target, field.name, _convert(raw, hint, f"{cls_name}.{field.name}"))


def _allows_none(hint: Any) -> bool:
    if hint is Any or hint is None or hint is type(None):
        return True
    return type(None) in typing.get_args(hint)


def _strip_optional(hint: Any) -> Any:
    args = typing.get_args(hint)
    if args and type(None) in args:
        remaining = [arg for arg in args if arg is not type(None)]
        if len(remaining) == 1:
            return remaining[0]
    return hint


def _convert(value: Any, hint: Any, where: str) -> Any:
    """Coerce a parsed value to a field's declared type where the mapping is unambiguous."""
    if value is None:
        return None
    hint = _strip_optional(hint)
    origin = typing.get_origin(hint)

    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        if not isinstance(value, Mapping):
            raise _mismatch(value, f"field {where} of type {hint.__name__}")
        return _build_dataclass(hint, value, where)
    if origin is list:
        if not isinstance(value, list):
            raise _mismatch(value, f"field {where} of type list")
        (item_hint,) = typing.get_args(hint) or (Any,)
        return [_convert(item, item_hint, f"{where}[{index}]") for index, item in enumerate(value)]
    if origin is dict:
        if not isinstance(value, Mapping):
            raise _mismatch(value, f"field {where} of type dict")
        return dict(value)
    if hint is bool:
        if not isinstance(value, bool):
            raise _mismatch(value, f"field {where} of type bool")
        return value
    if hint is int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise _mismatch(value, f"field {where} of type int")
        return value
    if hint is float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise _mismatch(value, f"field {where} of type float")
        return float(value)
    if hint is str:
        if not isinstance(value, str):
            raise _mismatch(value, f"field {where} of type str")
        return value
    return value


def _build_dataclass(cls: type, data: Mapping[str, Any], where: str) -> Any:
    hints = _type_hints(cls)
    kwargs: dict[str, Any] = {}
    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        found, raw = _lookup(data, _field_key(field))
        if not found or (raw is None and not _allows_none(hints.get(field.name, Any))):
            continue
        kwargs[field.name] = _convert(raw, hints.get(field.name, Any), f"{cls.__name__}.{field.name}")
    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise DecodeError(f"cannot build {cls.__name__} for field {where}: {exc}") from exc


__all__ = ["assign", "decode_structured", "parse_document"]
