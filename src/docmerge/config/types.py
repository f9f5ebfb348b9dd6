"""Configuration section types for docmerge settings.

These Pydantic models are nested within the main Settings class:
- MergeConfig: merge engine switches (first-character casing fallback,
  tuple normalization, skip logging)
- SearchConfig: full-text search defaults

Design decision: all types use `extra="allow"` so unknown keys in a config
file are preserved rather than silently dropped. Use `get_extra_fields()`
to audit them for typos.
"""

import typing as _typing

import pydantic as _pydantic


class ConfigBase(_pydantic.BaseModel):
    """Base class for config sections, with extra-field introspection."""

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Return fields that were provided but are not in the schema."""
        return dict(self.model_extra) if self.model_extra else {}


class MergeConfig(ConfigBase):
    """
    Merge engine settings.

    YAML section: merge.*
    """

    swap_first_char: bool = True
    """Retry typed-destination lookups with the first character's case swapped."""

    normalize_tuples: bool = True
    """Turn tuples into lists when converting loosely typed sources to bags."""

    log_skips: bool = True
    """Log skipped fields at DEBUG level."""


class SearchConfig(ConfigBase):
    """
    Full-text search settings.

    YAML section: search.*
    """

    case_sensitive: bool = False
    """Default case sensitivity for Merger.matches()."""
