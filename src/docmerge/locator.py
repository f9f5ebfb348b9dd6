"""
Field locator and default-value synthesizer.

Case-insensitive presence checks, reads and writes on a single record, plus
the zero value a store uses when it has to invent an identifier field.
"""

from __future__ import annotations

import datetime as _datetime
import decimal as _decimal
import enum as _enum
import typing as _typing
import uuid as _uuid

import docmerge.accessor as accessor
import docmerge.representation as representation

# Zero values for value types, checked in order (bool before int)
_ZERO_VALUES: tuple[tuple[type, _typing.Callable[[], _typing.Any]], ...] = (
    (bool, lambda: False),
    (int, lambda: 0),
    (float, lambda: 0.0),
    (complex, lambda: 0j),
    (_decimal.Decimal, lambda: _decimal.Decimal(0)),
    (_uuid.UUID, lambda: _uuid.UUID(int=0)),
    (_datetime.datetime, lambda: _datetime.datetime.min),
    (_datetime.date, lambda: _datetime.date.min),
    (_datetime.time, lambda: _datetime.time()),
    (_datetime.timedelta, lambda: _datetime.timedelta()),
)


def has_field(record: _typing.Any, name: str) -> bool:
    """True if record has a field called name (any casing)."""
    if record is None:
        return False
    return accessor.resolve(record, name) is not None


def get_field_value(record: _typing.Any, name: str) -> _typing.Any:
    """Value of the field called name (any casing), or None if absent."""
    if record is None:
        return None
    return accessor.get_value(record, name)


def add_or_set_field(record: _typing.Any, name: str, value: _typing.Any) -> None:
    """
    Store value under name.

    Bags and other mutable mappings always accept it: a key matching name
    case-insensitively keeps its spelling, otherwise name is added. Typed
    records are written only through an existing writable field; otherwise
    the call does nothing.
    """
    if record is None:
        return
    accessor.set_value(record, name, value)


def default_value_for(record_type: type, name: str) -> _typing.Any:
    """
    Zero value for the declared type of record_type's field called name.

    - no such field: 0
    - str or Optional[str]: "0"
    - value types (numbers, bool, Decimal, UUID, enums, dates): their zero
      value, e.g. 0, False, the nil UUID, the first enum member
    - Optional value types and everything else: None

    Example:
        >>> import dataclasses
        >>> @dataclasses.dataclass
        ... class Order:
        ...     id: int = 0
        ...     ref: str = ""
        >>> default_value_for(Order, "ID"), default_value_for(Order, "ref")
        (0, '0')
    """
    specs = accessor.declared_fields(record_type)
    spec = specs.get(name)
    if spec is None:
        folded = name.casefold()
        spec = next(
            (candidate for key, candidate in specs.items() if key.casefold() == folded),
            None,
        )
    if spec is None:
        return 0
    return _zero_value(spec.declared_type)


def _zero_value(tp: _typing.Any) -> _typing.Any:
    if _typing.get_origin(tp) is _typing.Annotated:
        tp = _typing.get_args(tp)[0]

    base = representation.unwrap_optional(tp)
    if base is str:
        return "0"
    if tp is not base and representation.admits_none(tp):
        # Optional value types default to None
        return None
    if _typing.get_origin(base) is not None or not isinstance(base, type):
        return None

    if issubclass(base, _enum.Enum):
        members = list(base)
        return members[0] if members else None
    for value_type, factory in _ZERO_VALUES:
        if issubclass(base, value_type):
            return factory()
    return None
