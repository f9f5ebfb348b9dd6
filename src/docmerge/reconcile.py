"""
Map and sequence reconcilers used by the merge engine.

The two container kinds merge very differently:

- Maps are replaced: the destination is cleared and every source entry is
  copied in verbatim. Values are never merged, even when they are records.
- Sequences are merged by position: element i of the source lands on
  element i of the destination, growing the destination when it is too
  short. Destination elements past the end of the source are kept.

Example:
    >>> target = {"x": 1, "y": 2}
    >>> reconcile_map({"y": 9}, target)
    >>> target
    {'y': 9}
    >>> items = [1, 2, 3]
    >>> reconcile_sequence([9], items, merge=None)
    >>> items
    [9, 2, 3]
"""

from __future__ import annotations

import collections.abc as _abc
import inspect as _inspect
import typing as _typing

import docmerge.bag as bag
import docmerge.representation as representation

# Recursion hook: merge(source_item, destination_item, index)
MergeCallback: _typing.TypeAlias = _typing.Callable[[_typing.Any, _typing.Any, int], None]

_Rep = representation.Representation

# Element kinds that are overwritten wholesale rather than merged into
_WHOLESALE = (_Rep.SCALAR, _Rep.MAP_FIELD, _Rep.SEQUENCE_FIELD)


class _NotConstructible:
    """Sentinel returned by new_default() for record types needing arguments."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<NOT_CONSTRUCTIBLE>"


NOT_CONSTRUCTIBLE = _NotConstructible()


def reconcile_map(
    source: _abc.Mapping[_typing.Any, _typing.Any],
    destination: _abc.MutableMapping[_typing.Any, _typing.Any],
) -> None:
    """Clear destination, then copy every source entry into it (shallow)."""
    destination.clear()
    for key, value in source.items():
        destination[key] = value


def reconcile_sequence(
    source: _abc.Sequence[_typing.Any],
    destination: _abc.MutableSequence[_typing.Any],
    merge: MergeCallback | None,
    element_type: _typing.Any = None,
) -> None:
    """
    Merge source into destination position by position.

    Args:
        source: Source elements. None elements are skipped.
        destination: Mutable destination, grown in place when too short.
        merge: Called as merge(source_item, destination_item, index) for
            record elements. May be None when only scalars are expected.
        element_type: Declared element type of the destination, if known.
            When unknown, the type of the existing destination element is
            used, then the type of the source element.
    """
    for index, item in enumerate(source):
        if item is None:
            continue

        item_type = _element_type_at(destination, index, item, element_type)
        while len(destination) <= index:
            created = new_default(item_type)
            destination.append(None if created is NOT_CONSTRUCTIBLE else created)

        current = destination[index]
        kind = representation.classify_type(item_type)
        if (
            kind in _WHOLESALE
            or current is None
            or not representation.is_reference(current)
            or merge is None
        ):
            destination[index] = item
        else:
            merge(item, current, index)


def _element_type_at(
    destination: _abc.Sequence[_typing.Any],
    index: int,
    item: _typing.Any,
    declared: _typing.Any,
) -> _typing.Any:
    if representation.classify_type(declared) is not None:
        return declared
    if index < len(destination) and destination[index] is not None:
        return type(destination[index])
    return type(item)


def new_default(tp: _typing.Any) -> _typing.Any:
    """
    Build an empty value for a declared type.

    - unknown types and bags: an empty Bag
    - maps and sequences: an empty container of the declared kind (abstract
      kinds such as Mapping or Sequence give dict and list)
    - scalars: the type's zero value (0, 0.0, False, "", b""), or None when
      the type has no argument-free constructor
    - typed records: a no-argument instance, or NOT_CONSTRUCTIBLE
    """
    kind = representation.classify_type(tp)
    cls = representation.unwrap_optional(tp)
    cls = _typing.get_origin(cls) or cls

    if kind is None:
        return bag.Bag()
    if kind is _Rep.DYNAMIC_BAG:
        return cls()
    if kind is _Rep.MAP_FIELD:
        return _construct_container(cls, dict)
    if kind is _Rep.SEQUENCE_FIELD:
        return _construct_container(cls, list)
    if kind is _Rep.SCALAR:
        if not isinstance(cls, type):
            return None
        try:
            return cls()
        except (TypeError, ValueError):
            return None
    try:
        return cls()
    except (TypeError, ValueError):
        # pydantic.ValidationError is a ValueError
        return NOT_CONSTRUCTIBLE


def _construct_container(cls: type, fallback: type) -> _typing.Any:
    if _inspect.isabstract(cls):
        return fallback()
    try:
        return cls()
    except TypeError:
        return fallback()


def as_mutable(sequence: _abc.Sequence[_typing.Any]) -> _abc.MutableSequence[_typing.Any]:
    """Return the sequence itself if mutable, else a list copy of it."""
    if isinstance(sequence, _abc.MutableSequence):
        return sequence
    return list(sequence)


def rebuild_like(
    template: _abc.Sequence[_typing.Any],
    items: _abc.MutableSequence[_typing.Any],
) -> _abc.Sequence[_typing.Any]:
    """
    Put reconciled items back into the container kind of template.

    Mutable templates were edited in place and are returned as-is. Tuples
    (and tuple subclasses) are rebuilt; anything else comes back as a list.
    """
    if items is template:
        return template
    if isinstance(template, tuple):
        return type(template)(items)
    return list(items)
