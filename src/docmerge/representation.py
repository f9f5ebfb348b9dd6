"""
Representation classifier.

Every runtime value, and every declared field type, falls into exactly one
of five shapes:

- TYPED_RECORD: dataclass, pydantic model, NamedTuple, or a plain object
  that exposes named fields.
- DYNAMIC_BAG: docmerge.bag.Bag.
- MAP_FIELD: any other Mapping (dict, OrderedDict, ...).
- SEQUENCE_FIELD: any Sequence except text, bytes and NamedTuples.
- SCALAR: None, numbers, text, bytes, enums, dates, UUIDs, paths, sets,
  classes, and objects with no named fields.

Classification uses capability checks (collections.abc, dataclass and
pydantic metadata), never a fixed registry of record types. Declared types
are classified through typing generics: list[int] is a SEQUENCE_FIELD,
dict[str, X] a MAP_FIELD, Optional[X] and Annotated[X, ...] classify as X.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import datetime as _datetime
import decimal as _decimal
import enum as _enum
import fractions as _fractions
import inspect as _inspect
import pathlib as _pathlib
import types as _types
import typing as _typing
import uuid as _uuid

import pydantic as _pydantic

import docmerge.bag as bag


class Representation(_enum.Enum):
    """The closed set of record shapes the merge engine understands."""

    TYPED_RECORD = "typed_record"
    DYNAMIC_BAG = "dynamic_bag"
    MAP_FIELD = "map_field"
    SEQUENCE_FIELD = "sequence_field"
    SCALAR = "scalar"


# Terminal value types. Sets are treated as terminal: they have no positions
# to reconcile, so they are replaced wholesale like any other scalar.
SCALAR_TYPES: tuple[type, ...] = (
    type(None),
    bool,
    int,
    float,
    complex,
    _decimal.Decimal,
    _fractions.Fraction,
    str,
    bytes,
    bytearray,
    memoryview,
    _enum.Enum,
    _datetime.date,
    _datetime.time,
    _datetime.timedelta,
    _datetime.tzinfo,
    _uuid.UUID,
    _pathlib.PurePath,
    _abc.Set,
    type,
)

_NONE_TYPE = type(None)
_UNKNOWN_TYPES = (None, _typing.Any, object)


def classify(value: _typing.Any) -> Representation:
    """
    Classify a runtime value.

    Example:
        >>> classify({"a": 1})
        <Representation.MAP_FIELD: 'map_field'>
        >>> classify("text")
        <Representation.SCALAR: 'scalar'>
    """
    if isinstance(value, bag.Bag):
        return Representation.DYNAMIC_BAG
    if isinstance(value, SCALAR_TYPES):
        return Representation.SCALAR
    if isinstance(value, _abc.Mapping):
        return Representation.MAP_FIELD
    if is_namedtuple_type(type(value)):
        return Representation.TYPED_RECORD
    if isinstance(value, _abc.Sequence):
        return Representation.SEQUENCE_FIELD
    if _exposes_fields(value):
        return Representation.TYPED_RECORD
    return Representation.SCALAR


def classify_type(tp: _typing.Any) -> Representation | None:
    """
    Classify a declared field type.

    Returns None when the type says nothing useful about the shape: missing
    annotations, Any, object, type variables, forward references that were
    never resolved, and unions of several non-None members.

    Unlike classify(), any class that is not a scalar or a container is a
    TYPED_RECORD here: its fields are only known once an instance exists.
    """
    tp = unwrap_optional(tp)
    if tp in _UNKNOWN_TYPES:
        return None

    origin = _typing.get_origin(tp)
    if origin is _typing.Literal:
        return Representation.SCALAR
    if origin is _typing.Union or origin is _types.UnionType:
        return None
    if origin is not None:
        tp = origin

    if not isinstance(tp, type):
        return None
    if issubclass(tp, bag.Bag):
        return Representation.DYNAMIC_BAG
    if issubclass(tp, SCALAR_TYPES):
        return Representation.SCALAR
    if issubclass(tp, _abc.Mapping):
        return Representation.MAP_FIELD
    if is_namedtuple_type(tp):
        return Representation.TYPED_RECORD
    if issubclass(tp, _abc.Sequence):
        return Representation.SEQUENCE_FIELD
    return Representation.TYPED_RECORD


def is_reference(value: _typing.Any) -> bool:
    """True if a value can be recursed into (not None and not a scalar)."""
    return value is not None and classify(value) is not Representation.SCALAR


def is_reference_type(tp: _typing.Any) -> bool:
    """True if a declared type is a record shape (typed record or bag)."""
    return classify_type(tp) in (
        Representation.TYPED_RECORD,
        Representation.DYNAMIC_BAG,
    )


def is_namedtuple_type(tp: type) -> bool:
    """True for classes built by typing.NamedTuple or collections.namedtuple."""
    return isinstance(tp, type) and issubclass(tp, tuple) and hasattr(tp, "_fields")


def is_pydantic_model_type(tp: _typing.Any) -> bool:
    """True for pydantic BaseModel subclasses."""
    return isinstance(tp, type) and issubclass(tp, _pydantic.BaseModel)


def unwrap_optional(tp: _typing.Any) -> _typing.Any:
    """
    Strip Annotated[...] and a single Optional[...] wrapper from a type.

    Unions with more than one non-None member are returned unchanged.
    """
    if _typing.get_origin(tp) is _typing.Annotated:
        tp = _typing.get_args(tp)[0]
    origin = _typing.get_origin(tp)
    if origin is _typing.Union or origin is _types.UnionType:
        members = [arg for arg in _typing.get_args(tp) if arg is not _NONE_TYPE]
        if len(members) == 1:
            return unwrap_optional(members[0])
    return tp


def admits_none(tp: _typing.Any) -> bool:
    """True if None is a legal value for a declared type."""
    if tp in _UNKNOWN_TYPES or tp is _NONE_TYPE:
        return True
    if _typing.get_origin(tp) is _typing.Annotated:
        return admits_none(_typing.get_args(tp)[0])
    origin = _typing.get_origin(tp)
    if origin is _typing.Union or origin is _types.UnionType:
        return any(admits_none(arg) for arg in _typing.get_args(tp))
    return False


def element_type(tp: _typing.Any) -> _typing.Any:
    """
    Return the declared element type of a sequence type, or None.

    Example:
        >>> element_type(list[int])
        <class 'int'>
        >>> element_type(tuple[str, ...])
        <class 'str'>
        >>> element_type(list) is None
        True
    """
    tp = unwrap_optional(tp)
    args = _typing.get_args(tp)
    if not args:
        return None
    if _typing.get_origin(tp) is tuple and len(args) != 2:
        return None
    if _typing.get_origin(tp) is tuple and args[1] is not Ellipsis:
        return None
    return args[0]


def is_assignable(target_type: _typing.Any, source_type: _typing.Any) -> bool:
    """
    Structural check: can a field declared as target_type hold a value whose
    declared type is source_type?

    - Unknown targets (None, Any, object) accept anything.
    - An unknown source type (a None value in a bag) is accepted only by
      targets that admit None.
    - Union targets accept if any member accepts; union sources need every
      member to be accepted.
    - Generics compare their origins only (list[int] accepts list[str]).
    - int is accepted where float or complex is declared.
    """
    if target_type in _UNKNOWN_TYPES:
        return True
    if source_type is None or source_type is _NONE_TYPE:
        return admits_none(target_type)
    if source_type is _typing.Any:
        return True

    if _typing.get_origin(target_type) is _typing.Annotated:
        target_type = _typing.get_args(target_type)[0]
    if _typing.get_origin(source_type) is _typing.Annotated:
        source_type = _typing.get_args(source_type)[0]

    target_origin = _typing.get_origin(target_type)
    if target_origin is _typing.Union or target_origin is _types.UnionType:
        return any(
            is_assignable(member, source_type)
            for member in _typing.get_args(target_type)
            if member is not _NONE_TYPE
        )
    source_origin = _typing.get_origin(source_type)
    if source_origin is _typing.Union or source_origin is _types.UnionType:
        return all(
            is_assignable(target_type, member)
            for member in _typing.get_args(source_type)
        )
    if target_origin is _typing.Literal or source_origin is _typing.Literal:
        return target_type == source_type

    target_cls = target_origin or target_type
    source_cls = source_origin or source_type
    if not isinstance(target_cls, type):
        return True
    if not isinstance(source_cls, type):
        return False

    if target_cls in (float, complex) and issubclass(source_cls, int):
        return True
    if target_cls is complex and issubclass(source_cls, float):
        return True
    try:
        return issubclass(source_cls, target_cls)
    except TypeError:
        return False


def _exposes_fields(value: _typing.Any) -> bool:
    """True if a non-container object has named fields to merge."""
    cls = type(value)
    if _dataclasses.is_dataclass(cls) or is_pydantic_model_type(cls):
        return True
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, attr in vars(klass).items():
            if name.startswith("_"):
                continue
            if isinstance(attr, property):
                return True
        annotations = _inspect.get_annotations(klass)
        if any(not name.startswith("_") for name in annotations):
            return True
    instance_dict = getattr(value, "__dict__", None)
    if isinstance(instance_dict, dict):
        return any(not name.startswith("_") for name in instance_dict)
    return False
