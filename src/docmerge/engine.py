"""
Merge engine: reconcile a source record's fields into a destination in place.

Both operands may be any record shape (see docmerge.representation). The
destination decides the algorithm:

- Bags and other mutable mappings are merged key by key. Unknown keys are
  created with the source's spelling, known keys are matched
  case-insensitively.
- Typed records are merged field by field. Fields are resolved by exact
  name, then with the first character's case swapped. Fields the
  destination cannot take are skipped and reported.

Per field, the source value's shape decides what happens:

- Nested records are merged recursively (additive).
- Maps replace the destination map's contents (destructive).
- Sequences are merged by position (additive beyond the source's length).
- Scalars overwrite.

Loosely typed sources (plain dicts and other non-bag mappings, e.g. parsed
JSON) are first converted into bags, deeply, so that their nested objects
merge as records rather than being treated as maps.

Example:
    >>> import docmerge
    >>> doc = docmerge.Bag(a=1, meta=docmerge.Bag(x=1))
    >>> docmerge.merge({"b": 2, "meta": {"y": 2}}, doc)
    >>> doc.to_dict()
    {'a': 1, 'meta': {'x': 1, 'y': 2}, 'b': 2}

Thread safety: none. Callers must serialize merges into the same
destination. A merge that raises part-way leaves the destination partially
updated.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import logging as _logging
import typing as _typing

import docmerge._types as _types
import docmerge.accessor as accessor
import docmerge.bag as bag
import docmerge.config as config
import docmerge.errors as errors
import docmerge.reconcile as reconcile
import docmerge.representation as representation
import docmerge.search as search

_logger = _logging.getLogger(__name__)

_Rep = representation.Representation

# Destination values a nested record can be merged into
_MERGEABLE = (_Rep.TYPED_RECORD, _Rep.DYNAMIC_BAG, _Rep.MAP_FIELD)


@_dataclasses.dataclass(frozen=True, slots=True)
class SkippedField:
    """A source field that was left out of a merge, and why."""

    path: _types.Path
    reason: errors.SkipReason

    def __str__(self) -> str:
        return f"{_types.format_path(self.path)}: {self.reason.value}"


@_dataclasses.dataclass
class MergeReport:
    """Outcome of Merger.merge_report(): every field that was skipped."""

    skipped: list[SkippedField] = _dataclasses.field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True if every source field was applied."""
        return not self.skipped

    def paths(self, reason: errors.SkipReason | None = None) -> list[str]:
        """Formatted paths of skipped fields, optionally for one reason."""
        return [
            _types.format_path(entry.path)
            for entry in self.skipped
            if reason is None or entry.reason is reason
        ]


def is_loosely_typed(value: _typing.Any) -> bool:
    """True for mappings that are not bags: parsed JSON, plain dicts, etc."""
    return isinstance(value, _abc.Mapping) and not isinstance(value, bag.Bag)


class Merger:
    """
    Merge engine bound to a set of settings.

    Holds no state between calls besides its settings, so one instance can
    serve any number of merges. Constructing a Merger without settings loads
    them from the environment and config file once, at construction. The
    module-level merge() and merge_report() share one such default Merger
    (see get_default_merger).
    """

    def __init__(self, settings: config.Settings | None = None) -> None:
        self._settings = settings if settings is not None else config.Settings()

    @property
    def settings(self) -> config.Settings:
        """The settings this merger runs with."""
        return self._settings

    # =========================================================================
    # Public API
    # =========================================================================

    def merge(self, source: _typing.Any, destination: _typing.Any) -> None:
        """
        Merge source into destination in place.

        Raises:
            NullArgumentError: If source or destination is None. Nothing is
                modified in that case.
            MergeDepthError: If max_depth is configured and exceeded.
        """
        self._start(source, destination, None)

    def merge_report(self, source: _typing.Any, destination: _typing.Any) -> MergeReport:
        """Like merge(), but return a report of the fields that were skipped."""
        report = MergeReport()
        self._start(source, destination, report)
        return report

    def normalize(self, value: _typing.Any) -> _typing.Any:
        """
        Deep-convert a value into bag shape.

        Mappings (bags included) become new Bags with string keys, typed
        records become Bags of their fields, sequences become lists (tuples
        stay tuples when merge.normalize_tuples is off). Scalars are returned
        unchanged.
        """
        rep = representation.classify(value)
        if rep in (_Rep.DYNAMIC_BAG, _Rep.MAP_FIELD):
            return bag.Bag(
                (key if isinstance(key, str) else str(key), self.normalize(item))
                for key, item in value.items()
            )
        if rep is _Rep.SEQUENCE_FIELD:
            items = [self.normalize(item) for item in value]
            if isinstance(value, tuple) and not self._settings.merge.normalize_tuples:
                return tuple(items)
            return items
        if rep is _Rep.TYPED_RECORD:
            return bag.Bag(
                (field.name, self.normalize(field.value))
                for field in accessor.fields(value)
            )
        return value

    def matches(
        self,
        record: _typing.Any,
        text: str,
        case_sensitive: bool | None = None,
    ) -> bool:
        """Full-text search with the configured default case sensitivity."""
        if case_sensitive is None:
            case_sensitive = self._settings.search.case_sensitive
        return search.matches(record, text, case_sensitive)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _start(
        self,
        source: _typing.Any,
        destination: _typing.Any,
        report: MergeReport | None,
    ) -> None:
        if source is None:
            raise errors.NullArgumentError("source")
        if destination is None:
            raise errors.NullArgumentError("destination")
        self._merge(source, destination, report, (), 0)

    def _merge(
        self,
        source: _typing.Any,
        destination: _typing.Any,
        report: MergeReport | None,
        path: _types.Path,
        depth: int,
    ) -> None:
        max_depth = self._settings.max_depth
        if max_depth is not None and depth > max_depth:
            raise errors.MergeDepthError(max_depth, _types.format_path(path))

        if is_loosely_typed(source):
            source = self.normalize(source)

        if isinstance(destination, _abc.MutableMapping):
            self._merge_into_bag(source, destination, report, path, depth)
        elif representation.classify(destination) is _Rep.TYPED_RECORD:
            self._merge_into_typed(source, destination, report, path, depth)
        else:
            _logger.debug(
                "Nothing to merge into %s at %s",
                type(destination).__name__,
                _types.format_path(path),
            )

    def _skip(
        self,
        report: MergeReport | None,
        path: _types.Path,
        reason: errors.SkipReason,
    ) -> None:
        if self._settings.merge.log_skips:
            _logger.debug("Skipping %s: %s", _types.format_path(path), reason.value)
        if report is not None:
            report.skipped.append(SkippedField(path, reason))

    def _element_merger(
        self,
        report: MergeReport | None,
        path: _types.Path,
        depth: int,
    ) -> reconcile.MergeCallback:
        def merge_element(item: _typing.Any, current: _typing.Any, index: int) -> None:
            self._merge(item, current, report, path + (index,), depth + 1)

        return merge_element

    # =========================================================================
    # Bag destinations
    # =========================================================================

    def _merge_into_bag(
        self,
        source: _typing.Any,
        destination: _abc.MutableMapping[str, _typing.Any],
        report: MergeReport | None,
        path: _types.Path,
        depth: int,
    ) -> None:
        for field in accessor.fields(source):
            key = accessor.resolve(destination, field.name) or field.name
            field_path = path + (key,)
            kind = _kind(field.declared_type, field.value)

            if field.value is None and kind in (_Rep.DYNAMIC_BAG, _Rep.MAP_FIELD, _Rep.SEQUENCE_FIELD):
                destination[key] = None
            elif kind is _Rep.DYNAMIC_BAG:
                target = destination.get(key)
                if target is None or representation.classify(target) not in _MERGEABLE:
                    target = destination[key] = bag.Bag()
                self._merge(field.value, target, report, field_path, depth + 1)
            elif kind is _Rep.MAP_FIELD:
                target = destination.get(key)
                if not isinstance(target, _abc.MutableMapping):
                    target = destination[key] = {}
                reconcile.reconcile_map(field.value, target)
            elif kind is _Rep.SEQUENCE_FIELD:
                target = destination.get(key)
                if target is None or representation.classify(target) is not _Rep.SEQUENCE_FIELD:
                    target = reconcile.new_default(type(field.value))
                work = reconcile.as_mutable(target)
                reconcile.reconcile_sequence(
                    field.value, work, self._element_merger(report, field_path, depth)
                )
                destination[key] = reconcile.rebuild_like(target, work)
            else:
                destination[key] = field.value

    # =========================================================================
    # Typed destinations
    # =========================================================================

    def _merge_into_typed(
        self,
        source: _typing.Any,
        destination: _typing.Any,
        report: MergeReport | None,
        path: _types.Path,
        depth: int,
    ) -> None:
        swap = self._settings.merge.swap_first_char
        for field in accessor.fields(source):
            target = accessor.find_field(destination, field.name, swap_first_char=swap)
            if target is None:
                self._skip(report, path + (field.name,), errors.SkipReason.NO_TARGET_FIELD)
                continue

            field_path = path + (target.name,)
            kind = _kind(field.declared_type, field.value)

            if kind is _Rep.DYNAMIC_BAG:
                self._merge_typed_record(field, destination, target, report, field_path, depth)
            elif kind is _Rep.MAP_FIELD:
                self._merge_typed_map(field, destination, target, report, field_path)
            elif kind is _Rep.SEQUENCE_FIELD:
                self._merge_typed_sequence(field, destination, target, report, field_path, depth)
            elif not target.writable:
                self._skip(report, field_path, errors.SkipReason.UNWRITABLE_FIELD)
            elif representation.is_reference_type(
                _effective_type(field)
            ) and representation.is_reference_type(_effective_type(target)):
                if target.value is None or field.value is None:
                    setattr(destination, target.name, field.value)
                else:
                    self._merge(field.value, target.value, report, field_path, depth + 1)
            elif not representation.is_assignable(target.declared_type, field.declared_type):
                self._skip(report, field_path, errors.SkipReason.TYPE_MISMATCH)
            else:
                setattr(destination, target.name, field.value)

    def _merge_typed_record(
        self,
        field: accessor.FieldDescriptor,
        destination: _typing.Any,
        target: accessor.FieldDescriptor,
        report: MergeReport | None,
        path: _types.Path,
        depth: int,
    ) -> None:
        """Merge a bag-valued source field into a typed destination field."""
        if field.value is None:
            if target.writable:
                setattr(destination, target.name, None)
            else:
                self._skip(report, path, errors.SkipReason.UNWRITABLE_FIELD)
            return

        current = target.value
        if current is None:
            if representation.classify_type(target.declared_type) in (
                _Rep.SCALAR,
                _Rep.SEQUENCE_FIELD,
            ):
                self._skip(report, path, errors.SkipReason.TYPE_MISMATCH)
                return
            if not target.writable:
                self._skip(report, path, errors.SkipReason.UNWRITABLE_FIELD)
                return
            created = reconcile.new_default(target.declared_type)
            if (
                created is reconcile.NOT_CONSTRUCTIBLE
                or representation.classify(created) not in _MERGEABLE
            ):
                self._skip(report, path, errors.SkipReason.NOT_CONSTRUCTIBLE)
                return
            setattr(destination, target.name, created)
            current = created
        elif representation.classify(current) not in _MERGEABLE:
            self._skip(report, path, errors.SkipReason.TYPE_MISMATCH)
            return

        self._merge(field.value, current, report, path, depth + 1)

    def _merge_typed_map(
        self,
        field: accessor.FieldDescriptor,
        destination: _typing.Any,
        target: accessor.FieldDescriptor,
        report: MergeReport | None,
        path: _types.Path,
    ) -> None:
        """Replace a typed destination map's contents with the source map."""
        if field.value is None:
            if target.writable:
                setattr(destination, target.name, None)
            else:
                self._skip(report, path, errors.SkipReason.UNWRITABLE_FIELD)
            return

        if _kind(target.declared_type, target.value) not in (
            None,
            _Rep.MAP_FIELD,
            _Rep.DYNAMIC_BAG,
        ):
            self._skip(report, path, errors.SkipReason.TYPE_MISMATCH)
            return

        current = target.value
        if isinstance(current, _abc.MutableMapping):
            reconcile.reconcile_map(field.value, current)
            return

        if not target.writable:
            self._skip(report, path, errors.SkipReason.UNWRITABLE_FIELD)
            return
        container_type = (
            target.declared_type
            if representation.classify_type(target.declared_type) is not None
            else type(field.value)
        )
        created = reconcile.new_default(container_type)
        reconcile.reconcile_map(field.value, created)
        setattr(destination, target.name, created)

    def _merge_typed_sequence(
        self,
        field: accessor.FieldDescriptor,
        destination: _typing.Any,
        target: accessor.FieldDescriptor,
        report: MergeReport | None,
        path: _types.Path,
        depth: int,
    ) -> None:
        """Merge a source sequence into a typed destination field by position."""
        if field.value is None:
            if target.writable:
                setattr(destination, target.name, None)
            else:
                self._skip(report, path, errors.SkipReason.UNWRITABLE_FIELD)
            return

        if _kind(target.declared_type, target.value) not in (None, _Rep.SEQUENCE_FIELD):
            self._skip(report, path, errors.SkipReason.TYPE_MISMATCH)
            return

        current = target.value
        if current is None:
            container_type = (
                target.declared_type
                if representation.classify_type(target.declared_type) is not None
                else type(field.value)
            )
            current = reconcile.new_default(container_type)

        work = reconcile.as_mutable(current)
        reconcile.reconcile_sequence(
            field.value,
            work,
            self._element_merger(report, path, depth),
            element_type=representation.element_type(target.declared_type),
        )
        result = reconcile.rebuild_like(current, work)
        if result is target.value:
            return
        if not target.writable:
            self._skip(report, path, errors.SkipReason.UNWRITABLE_FIELD)
            return
        setattr(destination, target.name, result)


def _kind(declared_type: _typing.Any, value: _typing.Any) -> representation.Representation | None:
    """Shape of a field: from its declared type, else from its value's type."""
    kind = representation.classify_type(declared_type)
    if kind is None and value is not None:
        kind = representation.classify_type(type(value))
    return kind


def _effective_type(field: accessor.FieldDescriptor) -> _typing.Any:
    if representation.classify_type(field.declared_type) is not None:
        return field.declared_type
    if field.value is not None:
        return type(field.value)
    return None


# =============================================================================
# Module-level convenience functions
# =============================================================================

# Global default merger, built on first use
_default_merger: Merger | None = None


def get_default_merger() -> Merger:
    """
    Get the merger used when no settings are passed.

    Settings are loaded once, on first use, and reused by every later
    module-level call. Changes to the environment or config file after that
    point are not picked up; call reset_default_merger() to reload.
    """
    global _default_merger
    if _default_merger is None:
        _default_merger = Merger()
    return _default_merger


def reset_default_merger() -> None:
    """Drop the default merger so the next call loads settings again."""
    global _default_merger
    _default_merger = None


def _merger_for(settings: config.Settings | None) -> Merger:
    return get_default_merger() if settings is None else Merger(settings)


def merge(
    source: _typing.Any,
    destination: _typing.Any,
    *,
    settings: config.Settings | None = None,
) -> None:
    """Merge source into destination in place (see Merger.merge)."""
    _merger_for(settings).merge(source, destination)


def merge_report(
    source: _typing.Any,
    destination: _typing.Any,
    *,
    settings: config.Settings | None = None,
) -> MergeReport:
    """Merge and report skipped fields (see Merger.merge_report)."""
    return _merger_for(settings).merge_report(source, destination)
