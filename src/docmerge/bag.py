"""
Bag: the dynamic, open-field record shape.

A Bag is an insertion-ordered, string-keyed mapping whose keys are also
reachable as attributes. Fields can be added and removed at runtime, which
makes it the natural landing shape for loosely typed input such as parsed
JSON or partial update payloads.

Example:
    >>> doc = Bag(name="Ada", meta={"x": 1})
    >>> doc.name
    'Ada'
    >>> doc["role"] = "admin"
    >>> list(doc)
    ['name', 'meta', 'role']
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing


class Bag(_abc.MutableMapping[str, _typing.Any]):
    """
    Open, insertion-ordered set of named fields.

    Keys must be strings. Values are stored by reference; nothing is copied
    or converted on insertion (conversion of nested mappings is the job of
    the merge engine's normalization step).
    """

    __slots__ = ("_data",)

    def __init__(
        self,
        data: _abc.Mapping[str, _typing.Any] | _abc.Iterable[tuple[str, _typing.Any]] | None = None,
        /,
        **fields: _typing.Any,
    ) -> None:
        object.__setattr__(self, "_data", {})
        if data is not None:
            self.update(data)
        if fields:
            self.update(fields)

    def __getitem__(self, key: str) -> _typing.Any:
        return self._data[key]

    def __setitem__(self, key: str, value: _typing.Any) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Bag keys must be strings, got {type(key).__name__}")
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> _typing.Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    # Attribute access mirrors item access for public names

    def __getattr__(self, name: str) -> _typing.Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: _typing.Any) -> None:
        if name.startswith("_"):
            raise AttributeError(f"cannot set private attribute {name!r} on Bag")
        self._data[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._data[name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"Bag({self._data!r})"

    def __eq__(self, other: object) -> bool:
        """Compare equal to any Mapping with the same content."""
        if isinstance(other, _abc.Mapping):
            return dict(self.items()) == dict(other.items())
        return NotImplemented

    def __hash__(self) -> int:
        """Bag is not hashable (it is mutable)."""
        raise TypeError(f"unhashable type: '{type(self).__name__}'")

    def __reduce__(self) -> tuple[type[Bag], tuple[dict[str, _typing.Any]]]:
        """Pickle and copy support."""
        return (type(self), (self._data,))

    def to_dict(self) -> dict[str, _typing.Any]:
        """
        Return a plain-dict deep copy of this bag.

        Nested bags become dicts, lists and tuples are rebuilt with their
        elements converted. Other values are shared, not copied.
        """
        return {key: _to_plain(value) for key, value in self._data.items()}


def _to_plain(value: _typing.Any) -> _typing.Any:
    """Convert nested bags to dicts for to_dict()."""
    if isinstance(value, Bag):
        return value.to_dict()
    if isinstance(value, list):
        return [_to_plain(item) for item in value]
    if isinstance(value, tuple) and not hasattr(value, "_fields"):
        return tuple(_to_plain(item) for item in value)
    return value
