"""Opaque JSON payloads carried verbatim between the API and callers.

Identity and event data are connector-specific JSON documents that this
package never interprets. ``RawData`` keeps the exact bytes received or
declared, and compares payloads structurally so that a read-back with
different key order or whitespace is not reported as drift.
"""
from __future__ import annotations

import json
import re
import uuid
from typing import Any, Collection, Union

from eventline_provider.core.eventline.exceptions import DecodeError, EncodeError


def _loads(data: Union[str, bytes], what: str) -> Any:
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"cannot decode {what}: {e}") from e


def canonical_json(value: Any) -> str:
    """Serialize a JSON value with sorted keys and no insignificant whitespace."""
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise EncodeError(f"cannot encode data: {e}") from e


def json_equal(a: Union[str, bytes], b: Union[str, bytes]) -> bool:
    """Return True when two JSON texts hold structurally equal values.

    Raises:
        DecodeError: If either text is not valid JSON
    """
    return _loads(a, "first document") == _loads(b, "second document")


class RawData:
    """Immutable envelope over raw JSON bytes."""

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes = b""):
        object.__setattr__(self, "_raw", bytes(raw))

    def __setattr__(self, name, value):
        raise AttributeError("RawData is immutable")

    @classmethod
    def from_text(cls, text: str) -> "RawData":
        return cls(text.encode("utf-8"))

    @classmethod
    def from_value(cls, value: Any) -> "RawData":
        """Encode a JSON-compatible value."""
        try:
            return cls(json.dumps(value).encode("utf-8"))
        except (TypeError, ValueError) as e:
            raise EncodeError(f"cannot encode data: {e}") from e

    def encode(self) -> bytes:
        return self._raw

    @property
    def text(self) -> str:
        return self._raw.decode("utf-8")

    def decode(self) -> Any:
        """Materialize the payload as Python values.

        Raises:
            DecodeError: If the payload is empty or not valid JSON
        """
        if not self._raw:
            raise DecodeError("empty data")
        return _loads(self._raw, "data")

    def canonical(self) -> str:
        return canonical_json(self.decode())

    def equivalent(self, other: "RawData") -> bool:
        """Structural comparison, ignoring key order and formatting."""
        return json_equal(self._raw, other._raw)

    def __bool__(self) -> bool:
        return bool(self._raw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RawData):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)

    def __repr__(self) -> str:
        return f"RawData({len(self._raw)} bytes)"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _check_embedded(raw: RawData) -> None:
    try:
        json.loads(raw.encode(), parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError) as e:
        raise EncodeError(f"cannot embed raw data: {e}") from e


def dumps(value: Any) -> bytes:
    """Serialize a JSON value to UTF-8, splicing ``RawData`` in verbatim.

    Embedded payloads are written byte for byte as declared, so numbers,
    duplicate keys and formatting inside them reach the server unchanged.

    Raises:
        EncodeError: If the value cannot be serialized, or an embedded
            payload is empty or not strict JSON
    """
    marker = uuid.uuid4().hex
    embedded = {}

    def placeholder(obj):
        if isinstance(obj, RawData):
            token = f"raw-data:{marker}:{len(embedded)}"
            embedded[token] = obj
            return token
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    try:
        encoded = json.dumps(value, default=placeholder, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodeError(f"cannot encode body: {e}") from e

    for token, raw in embedded.items():
        _check_embedded(raw)
        encoded = encoded.replace(json.dumps(token).encode("utf-8"), raw.encode(), 1)
    return encoded


# ─────────────────────────────────────────────────────────────────────────────
# Decoding with verbatim members
# ─────────────────────────────────────────────────────────────────────────────
_WHITESPACE = re.compile(r"[ \t\n\r]*")
_DECODER = json.JSONDecoder()


def _skip(text: str, idx: int) -> int:
    return _WHITESPACE.match(text, idx).end()


def _parse(text: str, idx: int, members, containers, capture: bool):
    char = text[idx:idx + 1]
    if char == "{":
        return _parse_object(text, idx + 1, members, containers, capture)
    if char == "[":
        return _parse_array(text, idx + 1, members, containers, capture)
    return _DECODER.raw_decode(text, idx)


def _parse_object(text: str, idx: int, members, containers, capture: bool):
    result = {}
    idx = _skip(text, idx)
    if text[idx:idx + 1] == "}":
        return result, idx + 1
    while True:
        if text[idx:idx + 1] != '"':
            raise json.JSONDecodeError("Expecting property name enclosed in double quotes", text, idx)
        key, idx = _DECODER.raw_decode(text, idx)
        idx = _skip(text, idx)
        if text[idx:idx + 1] != ":":
            raise json.JSONDecodeError("Expecting ':' delimiter", text, idx)
        start = _skip(text, idx + 1)
        value, idx = _parse(text, start, members, containers, capture and key in containers)
        if capture and key in members:
            value = RawData(text[start:idx].encode("utf-8"))
        result[key] = value

        idx = _skip(text, idx)
        char = text[idx:idx + 1]
        if char == "}":
            return result, idx + 1
        if char != ",":
            raise json.JSONDecodeError("Expecting ',' delimiter", text, idx)
        idx = _skip(text, idx + 1)


def _parse_array(text: str, idx: int, members, containers, capture: bool):
    result = []
    idx = _skip(text, idx)
    if text[idx:idx + 1] == "]":
        return result, idx + 1
    while True:
        value, idx = _parse(text, idx, members, containers, capture)
        result.append(value)

        idx = _skip(text, idx)
        char = text[idx:idx + 1]
        if char == "]":
            return result, idx + 1
        if char != ",":
            raise json.JSONDecodeError("Expecting ',' delimiter", text, idx)
        idx = _skip(text, idx + 1)


def loads_preserving(
    content: Union[str, bytes],
    members: Collection[str] = frozenset({"data"}),
    containers: Collection[str] = frozenset(),
) -> Any:
    """Decode a JSON document, keeping opaque members as received.

    Members named in ``members`` are returned as ``RawData`` holding their
    exact text when they belong to the top-level value: the root object,
    the objects of a root array, or objects reached through a member named
    in ``containers`` (e.g. the ``elements`` of a page). Everything else is
    decoded as ``json.loads`` would.

    Raises:
        DecodeError: If the document is not valid JSON
    """
    try:
        text = bytes(content).decode("utf-8") if not isinstance(content, str) else content
        start = _skip(text, 0)
        value, end = _parse(text, start, members, containers, True)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"cannot decode response body: {e}") from e
    if _skip(text, end) != len(text):
        raise DecodeError(f"cannot decode response body: extra data at position {end}")
    return value
