"""
Uniform field access over every record shape.

Typed records (dataclasses, pydantic models, NamedTuples, plain objects),
bags and maps all expose their fields through the same functions here.
Name resolution is case-insensitive unless asked otherwise.

Example:
    >>> import dataclasses
    >>> @dataclasses.dataclass
    ... class User:
    ...     name: str
    >>> get_value(User(name="Ada"), "NAME")
    'Ada'
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import functools as _functools
import inspect as _inspect
import types as _types
import typing as _typing

import pydantic as _pydantic

import docmerge.representation as representation

# Classes whose own properties are framework API, not record fields
_FRAMEWORK_BASES = frozenset(_pydantic.BaseModel.__mro__)


@_dataclasses.dataclass(frozen=True, slots=True)
class FieldSpec:
    """Class-level description of a typed record field."""

    name: str
    declared_type: _typing.Any
    writable: bool


@_dataclasses.dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """A field of one record: name, declared type (if known) and value."""

    name: str
    declared_type: _typing.Any
    value: _typing.Any
    writable: bool = True


# =============================================================================
# Class-level introspection
# =============================================================================


@_functools.lru_cache(maxsize=512)
def declared_fields(record_type: type) -> _abc.Mapping[str, FieldSpec]:
    """
    Enumerate the declared public fields of a typed record class.

    The result is cached per class and returned as a read-only mapping;
    copy it with dict() before adding entries.

    Order follows declaration order. Properties come after data fields.
    Private names (leading underscore) and ClassVar members are excluded.

    Writability:
    - dataclass fields: writable unless the dataclass is frozen
    - pydantic fields: writable unless the model or the field is frozen
    - NamedTuple fields: never writable
    - annotated attributes of plain classes: writable
    - properties: writable only if they define a setter
    """
    specs: dict[str, FieldSpec] = {}

    if representation.is_pydantic_model_type(record_type):
        model_frozen = bool(record_type.model_config.get("frozen", False))
        for name, info in record_type.model_fields.items():
            if name.startswith("_"):
                continue
            specs[name] = FieldSpec(
                name, info.annotation, not (model_frozen or bool(info.frozen))
            )
    elif _dataclasses.is_dataclass(record_type):
        frozen = record_type.__dataclass_params__.frozen  # type: ignore[attr-defined]
        hints = _type_hints(record_type)
        for f in _dataclasses.fields(record_type):
            if f.name.startswith("_"):
                continue
            specs[f.name] = FieldSpec(f.name, hints.get(f.name, f.type), not frozen)
    elif representation.is_namedtuple_type(record_type):
        hints = _type_hints(record_type)
        for name in record_type._fields:  # type: ignore[attr-defined]
            if name.startswith("_"):
                continue
            specs[name] = FieldSpec(name, hints.get(name), False)
        return _types.MappingProxyType(specs)
    else:
        for name, tp in _type_hints(record_type).items():
            if name.startswith("_") or _is_classvar(tp):
                continue
            specs[name] = FieldSpec(name, tp, True)

    for klass in reversed(record_type.__mro__):
        if klass in _FRAMEWORK_BASES:
            continue
        for name, attr in vars(klass).items():
            if name.startswith("_") or not isinstance(attr, property):
                continue
            specs[name] = FieldSpec(name, _property_type(attr), attr.fset is not None)

    return _types.MappingProxyType(specs)


def _type_hints(record_type: type) -> dict[str, _typing.Any]:
    """Resolved type hints, falling back to raw annotations."""
    try:
        return _typing.get_type_hints(record_type, include_extras=True)
    except (NameError, TypeError):
        hints: dict[str, _typing.Any] = {}
        for klass in reversed(record_type.__mro__):
            hints.update(_inspect.get_annotations(klass))
        return hints


def _property_type(prop: property) -> _typing.Any:
    """Return annotation of a property getter, or None."""
    if prop.fget is None:
        return None
    try:
        return _typing.get_type_hints(prop.fget).get("return")
    except (NameError, TypeError):
        return None


def _is_classvar(tp: _typing.Any) -> bool:
    if tp is _typing.ClassVar or _typing.get_origin(tp) is _typing.ClassVar:
        return True
    # Unresolved string annotations from the raw-annotation fallback
    return isinstance(tp, str) and tp.startswith(("ClassVar", "typing.ClassVar"))


# =============================================================================
# Per-record enumeration
# =============================================================================


def _record_specs(record: _typing.Any) -> dict[str, FieldSpec]:
    """Declared fields plus dynamic extras for one typed record instance."""
    record_type = type(record)
    specs = dict(declared_fields(record_type))

    if representation.is_pydantic_model_type(record_type):
        for name, value in (record.model_extra or {}).items():
            if not name.startswith("_") and name not in specs:
                specs[name] = FieldSpec(name, _runtime_type(value), True)
    elif not (
        _dataclasses.is_dataclass(record_type)
        or representation.is_namedtuple_type(record_type)
    ):
        instance_dict = getattr(record, "__dict__", None)
        if isinstance(instance_dict, dict):
            for name, value in instance_dict.items():
                if not name.startswith("_") and name not in specs:
                    specs[name] = FieldSpec(name, _runtime_type(value), True)

    return specs


def _runtime_type(value: _typing.Any) -> type | None:
    return None if value is None else type(value)


def fields(record: _typing.Any) -> list[FieldDescriptor]:
    """
    Enumerate a record's fields as (name, declared type, value) descriptors.

    Typed records enumerate in declaration order, bags and maps in insertion
    order (string keys only). Sequences and scalars have no fields.

    For bag and map entries the declared type is the runtime type of the
    value, or None when the value is None.
    """
    rep = representation.classify(record)
    if rep in (representation.Representation.DYNAMIC_BAG, representation.Representation.MAP_FIELD):
        return [
            FieldDescriptor(key, _runtime_type(value), value, True)
            for key, value in record.items()
            if isinstance(key, str)
        ]
    if rep is representation.Representation.TYPED_RECORD:
        return [
            FieldDescriptor(spec.name, spec.declared_type, getattr(record, spec.name, None), spec.writable)
            for spec in _record_specs(record).values()
        ]
    return []


def field_names(record: _typing.Any) -> list[str]:
    """Names of a record's fields, without reading their values."""
    rep = representation.classify(record)
    if rep in (representation.Representation.DYNAMIC_BAG, representation.Representation.MAP_FIELD):
        return [key for key in record if isinstance(key, str)]
    if rep is representation.Representation.TYPED_RECORD:
        return list(_record_specs(record))
    return []


# =============================================================================
# Name resolution
# =============================================================================


def resolve(record: _typing.Any, name: str, case_insensitive: bool = True) -> str | None:
    """
    Return the record's own spelling of a field name, or None if absent.

    An exact match wins over a case-insensitive one.
    """
    names = field_names(record)
    if name in names:
        return name
    if case_insensitive:
        folded = name.casefold()
        for candidate in names:
            if candidate.casefold() == folded:
                return candidate
    return None


def lookup(
    record: _typing.Any,
    name: str,
    case_insensitive: bool = True,
) -> FieldDescriptor | None:
    """Resolve one field and read its value."""
    resolved = resolve(record, name, case_insensitive)
    if resolved is None:
        return None
    rep = representation.classify(record)
    if rep is representation.Representation.TYPED_RECORD:
        spec = _record_specs(record)[resolved]
        return FieldDescriptor(
            resolved, spec.declared_type, getattr(record, resolved, None), spec.writable
        )
    value = record[resolved]
    writable = isinstance(record, _abc.MutableMapping)
    return FieldDescriptor(resolved, _runtime_type(value), value, writable)


def switch_first_char(name: str) -> str:
    """
    Swap the case of the first character: 'name' <-> 'Name'.

    Only the first character changes; 'user_name' never becomes 'UserName'.
    """
    if not name:
        return name
    first = name[0]
    swapped = first.upper() if first.islower() else first.lower()
    return swapped + name[1:]


def find_field(
    record: _typing.Any,
    name: str,
    swap_first_char: bool = True,
) -> FieldDescriptor | None:
    """
    Resolve a target field on a typed destination.

    Tries the exact name, then the name with its first character's case
    swapped (covers camelCase vs PascalCase sources).
    """
    found = lookup(record, name, case_insensitive=False)
    if found is None and swap_first_char:
        swapped = switch_first_char(name)
        if swapped != name:
            found = lookup(record, swapped, case_insensitive=False)
    return found


# =============================================================================
# Read / write
# =============================================================================


def get_value(record: _typing.Any, name: str) -> _typing.Any:
    """Case-insensitive read; None if the record has no such field."""
    found = lookup(record, name)
    return None if found is None else found.value


def set_value(record: _typing.Any, name: str, value: _typing.Any) -> bool:
    """
    Case-insensitive write. Returns True if the value was stored.

    Mutable mappings (bags included) always accept the write; an existing key
    keeps its spelling, otherwise the key is created as given. Typed records
    accept it only when a writable field matches; anything else is a silent
    no-op. Exceptions from the record's own setters propagate.
    """
    if isinstance(record, _abc.MutableMapping):
        record[resolve(record, name) or name] = value
        return True
    if representation.classify(record) is not representation.Representation.TYPED_RECORD:
        return False
    found = lookup(record, name)
    if found is None or not found.writable:
        return False
    setattr(record, found.name, value)
    return True
