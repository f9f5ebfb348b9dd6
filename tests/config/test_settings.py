"""Tests for configuration settings."""

import os as _os
import pathlib as _pathlib
import unittest.mock as _mock

import pydantic as _pydantic
import pytest as _pytest

import docmerge.config as config
import docmerge.config.types as types


class TestSettingsDefaults:
    """Test Settings default values when environment is clean."""

    def test_max_depth_disabled(self, clean_settings: config.Settings) -> None:
        """The recursion guard is off by default."""
        assert clean_settings.max_depth is None

    def test_merge_defaults(self, clean_settings: config.Settings) -> None:
        """Merge switches default to the classic behaviour."""
        assert clean_settings.merge.swap_first_char is True
        assert clean_settings.merge.normalize_tuples is True
        assert clean_settings.merge.log_skips is True

    def test_search_defaults(self, clean_settings: config.Settings) -> None:
        """Search is case-insensitive by default."""
        assert clean_settings.search.case_sensitive is False


class TestSettingsEnvironment:
    """Environment variable overrides."""

    def test_flat_variable(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """DOCMERGE_MAX_DEPTH sets max_depth."""
        monkeypatch.setenv("DOCMERGE_MAX_DEPTH", "16")
        assert config.Settings.construct_without_dotenv().max_depth == 16

    def test_nested_variable(self) -> None:
        """Double underscore reaches nested sections."""
        with _mock.patch.dict(
            _os.environ,
            {"DOCMERGE_SEARCH__CASE_SENSITIVE": "true", "DOCMERGE_MERGE__SWAP_FIRST_CHAR": "false"},
        ):
            settings = config.Settings.construct_without_dotenv()
        assert settings.search.case_sensitive is True
        assert settings.merge.swap_first_char is False

    def test_invalid_value_rejected(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """Out-of-range values fail validation."""
        monkeypatch.setenv("DOCMERGE_MAX_DEPTH", "0")
        with _pytest.raises(_pydantic.ValidationError):
            config.Settings.construct_without_dotenv()


class TestSettingsYaml:
    """Config file loading and precedence."""

    def test_yaml_values(self, isolated_env: _pathlib.Path) -> None:
        """Values from config.yaml are applied."""
        (isolated_env / "config.yaml").write_text(
            "max_depth: 32\nmerge:\n  log_skips: false\n"
        )
        settings = config.Settings.construct_without_dotenv()
        assert settings.max_depth == 32
        assert settings.merge.log_skips is False
        assert settings.merge.swap_first_char is True

    def test_env_overrides_yaml(
        self,
        isolated_env: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        """Environment variables win over the config file."""
        (isolated_env / "config.yaml").write_text("max_depth: 32\n")
        monkeypatch.setenv("DOCMERGE_MAX_DEPTH", "8")
        assert config.Settings.construct_without_dotenv().max_depth == 8

    def test_init_overrides_everything(
        self,
        isolated_env: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        """Constructor arguments have the highest precedence."""
        (isolated_env / "config.yaml").write_text("max_depth: 32\n")
        monkeypatch.setenv("DOCMERGE_MAX_DEPTH", "8")
        assert config.Settings.construct_without_dotenv(max_depth=4).max_depth == 4

    def test_malformed_yaml_raises(self, isolated_env: _pathlib.Path) -> None:
        """A broken config file is an error, not a silent fallback."""
        (isolated_env / "config.yaml").write_text("merge: [oops\n")
        with _pytest.raises(config.ConfigFileError):
            config.Settings.construct_without_dotenv()

    def test_unknown_keys_preserved(self, isolated_env: _pathlib.Path) -> None:
        """Unknown keys in a section are kept for auditing."""
        (isolated_env / "config.yaml").write_text("search:\n  fuzzy: true\n")
        settings = config.Settings.construct_without_dotenv()
        assert settings.search.get_extra_fields() == {"fuzzy": True}


class TestSectionTypes:
    """Config section models."""

    def test_get_extra_fields_empty(self) -> None:
        """No extras by default."""
        assert types.MergeConfig().get_extra_fields() == {}

    def test_get_extra_fields_with_extras(self) -> None:
        """Unknown keys are reported."""
        section = types.SearchConfig(case_sensitive=True, typo_field=1)  # type: ignore[call-arg]
        assert section.case_sensitive is True
        assert section.get_extra_fields() == {"typo_field": 1}
