"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with DOCMERGE_ prefix
3. .env file (only if DOCMERGE_ENV_FILE points at one)
4. YAML config file: $DOCMERGE_CONFIG_DIR/config.yaml or
   ~/.config/docmerge/config.yaml
5. Field defaults (lowest)

Nested config uses double underscore delimiter:
  DOCMERGE_MERGE__SWAP_FIRST_CHAR=false
  DOCMERGE_SEARCH__CASE_SENSITIVE=true
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import docmerge.config.sources as sources
import docmerge.config.types as types


def _get_env_file() -> str | None:
    """Determine which .env file to load.

    DOCMERGE_ENV_FILE selects one explicitly. If it is unset, or set to a
    path that does not exist, no .env file is loaded and configuration comes
    from the environment and the YAML file only.
    """
    if env_file := _os.environ.get("DOCMERGE_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    docmerge configuration settings.

    All settings can be overridden via environment variables with DOCMERGE_
    prefix. For nested config, use double underscore:
    DOCMERGE_SEARCH__CASE_SENSITIVE=true
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="DOCMERGE_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args), highest
        2. env_settings (DOCMERGE_* env vars)
        3. dotenv_settings (.env file)
        4. YAML config file
        5. (defaults via Field definitions), lowest
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            sources.YamlSettingsSource(settings_cls),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings without loading any .env file (test isolation)."""
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    max_depth: int | None = _pydantic.Field(default=None, ge=1)
    """
    Maximum record nesting depth a merge may recurse into.

    None (the default) disables the guard, so a record graph containing a
    reference cycle recurses until Python's own recursion limit.
    """

    merge: types.MergeConfig = _pydantic.Field(default_factory=types.MergeConfig)
    """Merge engine switches."""

    search: types.SearchConfig = _pydantic.Field(default_factory=types.SearchConfig)
    """Full-text search defaults."""
