"""
Errors and skip reasons raised or reported by the merge engine.

Only argument errors and the optional depth guard are raised. Per-field
problems (no matching target, unwritable target, incompatible types) are
skips: the field is left alone, the skip is logged, and the merge carries
on with the next field. Exceptions raised by a record's own accessors
(property setters, pydantic validation on assignment) are not caught.
"""

from __future__ import annotations

import enum as _enum


class DocMergeError(Exception):
    """Base class for docmerge errors."""

    pass


class NullArgumentError(DocMergeError, ValueError):
    """Raised when the source or destination of a merge is None."""

    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"merge {argument} must not be None")


class MergeDepthError(DocMergeError, RecursionError):
    """Raised when a merge recurses deeper than the configured max_depth."""

    def __init__(self, max_depth: int, path: str) -> None:
        self.max_depth = max_depth
        self.path = path
        super().__init__(
            f"merge exceeded max_depth={max_depth} at {path} "
            f"(possible reference cycle in the record graph)"
        )


class SkipReason(_enum.Enum):
    """Why a source field was not applied to the destination."""

    NO_TARGET_FIELD = "no_target_field"
    """The destination has no field matching the source field's name."""

    UNWRITABLE_FIELD = "unwritable_field"
    """The destination field is read-only, frozen, private or static."""

    TYPE_MISMATCH = "type_mismatch"
    """The destination's declared type cannot accept the source value."""

    NOT_CONSTRUCTIBLE = "not_constructible"
    """A missing nested record could not be created for the destination."""
