"""Input validation helpers for identifiers and import keys."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Tuple, Type, TypeVar

from eventline_provider.core.eventline.exceptions import ValidationError

# KSUID: 27 base62 characters encoding 20 bytes (4-byte timestamp + 16-byte payload)
KSUID_LENGTH = 27
KSUID_EPOCH = 1400000000
_BASE62_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
_DECODE_TABLE = {char: index for index, char in enumerate(_BASE62_ALPHABET)}
_MAX_KSUID_INT = (1 << 160) - 1

E = TypeVar("E", bound=Enum)


class Ksuid(str):
    """Validated Eventline identifier.

    Behaves as the canonical string so it can be placed in URLs and JSON
    directly. Instances only come out of ``parse_id``.
    """

    @property
    def _value(self) -> int:
        number = 0
        for char in self:
            number = number * 62 + _DECODE_TABLE[char]
        return number

    @property
    def timestamp(self) -> datetime:
        """Creation time encoded in the first four bytes."""
        seconds = self._value >> 128
        return datetime.fromtimestamp(KSUID_EPOCH + seconds, tz=timezone.utc)

    @property
    def payload(self) -> bytes:
        """Random 16-byte payload."""
        return (self._value & ((1 << 128) - 1)).to_bytes(16, byteorder="big")


def parse_id(value: str, field: str = "id") -> Ksuid:
    """Parse and validate an Eventline identifier.

    Args:
        value: Raw identifier string
        field: Field name for error messages (e.g., "project_id")

    Returns:
        Validated identifier

    Raises:
        ValidationError: If the string is not a well-formed KSUID
    """
    if isinstance(value, Ksuid):
        return value
    if not isinstance(value, str) or len(value) != KSUID_LENGTH:
        raise ValidationError(f"malformed identifier for {field}: {value!r}")
    if any(char not in _DECODE_TABLE for char in value):
        raise ValidationError(f"malformed identifier for {field}: {value!r}")

    candidate = Ksuid(value)
    if candidate._value > _MAX_KSUID_INT:
        raise ValidationError(f"malformed identifier for {field}: {value!r}")
    return candidate


def parse_import_key(key: str) -> Tuple[str, str]:
    """Split an import key of the form ``<scope-id>/<resource-id>``.

    Identifiers are not validated here; the Read that follows an import
    validates them before any request is issued.

    Raises:
        ValidationError: Unless the key has exactly two non-empty parts
    """
    parts = key.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValidationError(
            f"unexpected import identifier format: expected <project-id>/<resource-id>, got {key!r}"
        )
    return parts[0], parts[1]


def parse_enum(enum_cls: Type[E], value: str, field: str) -> E:
    """Look up an enum member by value, rejecting unknown values.

    Raises:
        ValidationError: If value is not one of the enum's values
    """
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"unknown {field} {value!r} (expected one of: {allowed})") from None
