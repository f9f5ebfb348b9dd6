"""Custom pydantic-settings source for docmerge configuration.

YamlSettingsSource loads a single optional YAML file:

- config.yaml in DOCMERGE_CONFIG_DIR, if that environment variable is set
- otherwise ~/.config/docmerge/config.yaml

A missing file is normal and contributes nothing. An unreadable file, a
malformed one, or one whose top level is not a mapping raises
ConfigFileError so that typos never silently fall back to defaults.
"""

import collections.abc as _abc
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

# Environment variable for overriding the config directory
ENV_CONFIG_DIR = "DOCMERGE_CONFIG_DIR"


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


class YamlSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that reads the docmerge YAML config file.

    Sits below environment variables and .env in precedence, above field
    defaults (see Settings.settings_customise_sources).
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        *,
        config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            config_path: Override path for the config file (for testing).
                If not provided, uses DOCMERGE_CONFIG_DIR or the XDG default.
        """
        super().__init__(settings_cls)
        self._config_path = config_path if config_path is not None else get_user_config_path()
        self._data = self._load_yaml_file(self._config_path)

    @property
    def config_path(self) -> _pathlib.Path:
        """Path of the config file this source reads (it may not exist)."""
        return self._config_path

    def _load_yaml_file(self, path: _pathlib.Path) -> dict[str, _typing.Any]:
        """
        Load the YAML file and return its contents as a dict.

        Returns:
            Parsed contents, or an empty dict if the file is missing or empty.

        Raises:
            ConfigFileError: If the file cannot be read, is malformed YAML,
                or contains non-dict content at the top level.
        """
        if not path.exists():
            return {}

        try:
            content = path.read_text(encoding="utf-8")
        except PermissionError as e:
            raise ConfigFileError(path, f"permission denied: {e}") from e
        except OSError as e:
            raise ConfigFileError(path, f"cannot read file: {e}") from e

        try:
            parsed = _yaml.safe_load(content)
        except _yaml.YAMLError as e:
            raise ConfigFileError(path, f"invalid YAML: {e}") from e

        if parsed is None:
            return {}

        if not isinstance(parsed, dict):
            type_name = type(parsed).__name__
            raise ConfigFileError(
                path,
                f"config must be a YAML mapping (dict), got {type_name}",
            )

        return parsed

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """
        Get value for a field from the loaded YAML data.

        Returns:
            Tuple of (value, field_name, is_complex).
            is_complex is True if the value is a dict or list.
        """
        value = self._data.get(field_name)
        if value is None:
            return None, field_name, False
        return value, field_name, isinstance(value, (_abc.Mapping, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return the loaded config (unknown keys included) for validation."""
        return dict(self._data)


def get_user_config_dir() -> _pathlib.Path:
    """
    Get the docmerge config directory.

    Respects DOCMERGE_CONFIG_DIR if set, otherwise uses the XDG path.
    """
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env)
    return _pathlib.Path.home() / ".config" / "docmerge"


def get_user_config_path() -> _pathlib.Path:
    """Get the path to config.yaml in the docmerge config directory."""
    return get_user_config_dir() / "config.yaml"
