"""
docmerge - Structural merge engine for document stores

Merges a source record into a destination record in place, whatever shape
each one has: dataclasses, pydantic models, plain objects, Bags, maps or
sequences. Also provides case-insensitive field access, default identifier
values and full-text search over records.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("docmerge")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from docmerge.bag import Bag  # noqa: E402
from docmerge.config import ConfigFileError, Settings  # noqa: E402
from docmerge.engine import MergeReport, Merger, SkippedField, get_default_merger, merge, merge_report  # noqa: E402
from docmerge.errors import DocMergeError, MergeDepthError, NullArgumentError, SkipReason  # noqa: E402
from docmerge.locator import add_or_set_field, default_value_for, get_field_value, has_field  # noqa: E402
from docmerge.representation import Representation, classify  # noqa: E402
from docmerge.search import matches  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "Bag",
    "ConfigFileError",
    "DocMergeError",
    "MergeDepthError",
    "MergeReport",
    "Merger",
    "NullArgumentError",
    "Representation",
    "Settings",
    "SkipReason",
    "SkippedField",
    "add_or_set_field",
    "classify",
    "default_value_for",
    "get_default_merger",
    "get_field_value",
    "has_field",
    "matches",
    "merge",
    "merge_report",
]
