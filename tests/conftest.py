"""
Shared pytest fixtures for docmerge tests.

This file is automatically loaded by pytest. Fixtures and sample record
types defined here are available to all test files.
"""

import dataclasses as _dataclasses
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pytest as _pytest

import docmerge.config as config
import docmerge.engine as engine

# =============================================================================
# Environment isolation
# =============================================================================


@_pytest.fixture(autouse=True)
def isolated_env(
    tmp_path: _pathlib.Path,
    monkeypatch: _pytest.MonkeyPatch,
) -> _pathlib.Path:
    """
    Isolate every test from the developer's docmerge configuration.

    Removes DOCMERGE_* variables, points DOCMERGE_CONFIG_DIR at an empty
    temporary directory and drops the cached default merger, so Settings()
    sees field defaults only.

    Returns:
        The temporary config directory (write config.yaml there to test
        file loading).
    """
    for key in list(_os.environ):
        if key.startswith("DOCMERGE_"):
            monkeypatch.delenv(key)
    config_dir = tmp_path / "docmerge-config"
    config_dir.mkdir()
    monkeypatch.setenv("DOCMERGE_CONFIG_DIR", str(config_dir))
    engine.reset_default_merger()
    return config_dir


@_pytest.fixture
def clean_settings() -> config.Settings:
    """Settings with default values (no .env, no config file)."""
    return config.Settings.construct_without_dotenv()


# =============================================================================
# Sample record types
# =============================================================================


@_dataclasses.dataclass
class Address:
    street: str = ""
    city: str = ""


@_dataclasses.dataclass
class Customer:
    name: str = ""
    age: int = 0
    score: float = 0.0
    address: Address | None = None
    tags: list[str] = _dataclasses.field(default_factory=list)
    attributes: dict[str, _typing.Any] = _dataclasses.field(default_factory=dict)


@_dataclasses.dataclass
class LineItem:
    sku: str = ""
    quantity: int = 0


@_dataclasses.dataclass
class Order:
    id: int = 0
    reference: str = ""
    items: list[LineItem] = _dataclasses.field(default_factory=list)
    notes: tuple[str, ...] = ()


@_dataclasses.dataclass(frozen=True)
class FrozenPoint:
    x: int = 0
    y: int = 0


class Account(_pydantic.BaseModel):
    """Pydantic record with a frozen field."""

    owner: str = ""
    balance: int = 0
    region: str = _pydantic.Field(default="eu", frozen=True)
    billing: Address | None = None


class Widget:
    """Plain class with annotations, a read-only property and a setter."""

    label: str
    size: int

    def __init__(self, label: str = "", size: int = 0) -> None:
        self.label = label
        self.size = size
        self._serial = "W-1"

    @property
    def serial(self) -> str:
        return self._serial

    @property
    def display(self) -> str:
        return f"{self.label}:{self.size}"

    @display.setter
    def display(self, value: str) -> None:
        label, _, size = value.partition(":")
        self.label = label
        self.size = int(size or 0)


class Coordinates(_typing.NamedTuple):
    lat: float
    lon: float


class NeedsArguments:
    """Typed record that cannot be built without constructor arguments."""

    code: str

    def __init__(self, code: str) -> None:
        self.code = code


@_dataclasses.dataclass
class Shipment:
    origin: NeedsArguments | None = None
    point: FrozenPoint | None = None
