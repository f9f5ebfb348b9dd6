"""
Full-text substring search over every scalar reachable from a record.

The walk is depth-first in field enumeration order and stops at the first
match. Map entries are compared as "[key, value]" so that map keys
can be found, while field names of records and bags are never matched.
Scalars are compared as text: str(value), except enum members (their
name) and bytes (decoded as UTF-8).
"""

from __future__ import annotations

import enum as _enum
import typing as _typing

import docmerge.accessor as accessor
import docmerge.representation as representation

_Rep = representation.Representation


def matches(record: _typing.Any, text: str, case_sensitive: bool = False) -> bool:
    """
    True if text occurs in any scalar value reachable from record.

    Example:
        >>> matches({"tags": ["alpha", "beta"]}, "BET")
        True
        >>> matches({"tags": ["alpha", "beta"]}, "BET", case_sensitive=True)
        False
    """
    if case_sensitive:

        def contains(value: str) -> bool:
            return text in value

    else:
        needle = text.casefold()

        def contains(value: str) -> bool:
            return needle in value.casefold()

    return _any_value_matches(record, contains)


def _any_value_matches(
    current: _typing.Any,
    contains: _typing.Callable[[str], bool],
) -> bool:
    if current is None:
        return False

    rep = representation.classify(current)
    if rep is _Rep.SCALAR:
        return contains(as_text(current))
    if rep is _Rep.SEQUENCE_FIELD:
        return any(_any_value_matches(item, contains) for item in current)
    if rep is _Rep.MAP_FIELD:
        return any(_entry_matches(key, value, contains) for key, value in current.items())

    for field in accessor.fields(current):
        if field.value is None:
            continue
        if _any_value_matches(field.value, contains):
            return True
    return False


def _entry_matches(
    key: _typing.Any,
    value: _typing.Any,
    contains: _typing.Callable[[str], bool],
) -> bool:
    # Entries read as "[key, value]", so keys are searchable too
    if value is None or representation.classify(value) is _Rep.SCALAR:
        shown = "" if value is None else as_text(value)
        return contains(f"[{as_text(key)}, {shown}]")
    return contains(as_text(key)) or _any_value_matches(value, contains)


def as_text(value: _typing.Any) -> str:
    """Text form of a scalar for substring comparison."""
    if isinstance(value, _enum.Enum):
        return value.name
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)
