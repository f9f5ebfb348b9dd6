"""Tests for the YAML pydantic-settings source.

- Locating the config file (DOCMERGE_CONFIG_DIR or the XDG default)
- Missing and empty files
- Malformed YAML and non-mapping content
- Integration with pydantic-settings
"""

import pathlib as _pathlib

import pydantic_settings as _pydantic_settings
import pytest as _pytest

import docmerge.config.sources as sources


# Minimal Settings class for testing
class MinimalSettings(_pydantic_settings.BaseSettings):
    """Minimal settings class for testing YamlSettingsSource."""

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="TEST_",
        extra="ignore",
    )

    version: int = 0
    name: str = "default"


class TestYamlSettingsSourceClass:
    """Verify the YamlSettingsSource class API."""

    def test_is_pydantic_settings_source(self) -> None:
        """YamlSettingsSource should be a pydantic-settings source."""
        assert issubclass(
            sources.YamlSettingsSource,
            _pydantic_settings.PydanticBaseSettingsSource,
        )


class TestHelperFunctions:
    """Tests for path helper functions."""

    def test_get_user_config_path_default(
        self,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        """Without env var, should return XDG-compliant user config path."""
        monkeypatch.delenv("DOCMERGE_CONFIG_DIR", raising=False)
        path = sources.get_user_config_path()
        assert path == _pathlib.Path.home() / ".config" / "docmerge" / "config.yaml"

    def test_get_user_config_dir_with_env_var(
        self,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        """With env var set, should use that directory."""
        monkeypatch.setenv("DOCMERGE_CONFIG_DIR", "/custom/config/dir")
        assert sources.get_user_config_dir() == _pathlib.Path("/custom/config/dir")
        assert sources.get_user_config_path() == _pathlib.Path("/custom/config/dir/config.yaml")


class TestYamlSettingsSourceLoading:
    """Tests for reading the config file."""

    def test_missing_file_is_empty(self, tmp_path: _pathlib.Path) -> None:
        """A missing file contributes nothing."""
        source = sources.YamlSettingsSource(
            MinimalSettings, config_path=tmp_path / "absent.yaml"
        )
        assert source() == {}

    def test_empty_file_is_empty(self, tmp_path: _pathlib.Path) -> None:
        """An empty file contributes nothing."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        source = sources.YamlSettingsSource(MinimalSettings, config_path=config_file)
        assert source() == {}

    def test_values_loaded(self, tmp_path: _pathlib.Path) -> None:
        """Top-level keys are returned as-is."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("version: 3\nname: from-yaml\n")
        source = sources.YamlSettingsSource(MinimalSettings, config_path=config_file)
        assert source() == {"version": 3, "name": "from-yaml"}
        assert source.config_path == config_file

    def test_default_path_from_env(
        self,
        isolated_env: _pathlib.Path,
    ) -> None:
        """Without an explicit path, DOCMERGE_CONFIG_DIR is used."""
        (isolated_env / "config.yaml").write_text("version: 7\n")
        source = sources.YamlSettingsSource(MinimalSettings)
        assert source.config_path == isolated_env / "config.yaml"
        assert source()["version"] == 7

    def test_get_field_value(self, tmp_path: _pathlib.Path) -> None:
        """get_field_value reports whether a value is complex."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("version: 3\nnested:\n  a: 1\n")
        source = sources.YamlSettingsSource(MinimalSettings, config_path=config_file)
        field = MinimalSettings.model_fields["version"]
        assert source.get_field_value(field, "version") == (3, "version", False)
        assert source.get_field_value(field, "nested") == ({"a": 1}, "nested", True)
        assert source.get_field_value(field, "missing") == (None, "missing", False)


class TestYamlSettingsSourceErrors:
    """Tests for malformed config files."""

    def test_malformed_yaml(self, tmp_path: _pathlib.Path) -> None:
        """Should raise ConfigFileError for malformed YAML."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("version: [unclosed\n")
        with _pytest.raises(sources.ConfigFileError) as exc_info:
            sources.YamlSettingsSource(MinimalSettings, config_path=config_file)
        assert exc_info.value.path == config_file
        assert "invalid YAML" in str(exc_info.value)

    def test_non_mapping_top_level(self, tmp_path: _pathlib.Path) -> None:
        """Should raise ConfigFileError when the file is not a mapping."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")
        with _pytest.raises(sources.ConfigFileError, match="got list"):
            sources.YamlSettingsSource(MinimalSettings, config_path=config_file)

    def test_unreadable_path(self, tmp_path: _pathlib.Path) -> None:
        """A directory in place of the file cannot be read."""
        config_dir = tmp_path / "config.yaml"
        config_dir.mkdir()
        with _pytest.raises(sources.ConfigFileError, match="cannot read"):
            sources.YamlSettingsSource(MinimalSettings, config_path=config_dir)
