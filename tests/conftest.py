"""Shared fixtures: the standard key catalog and a few keys used throughout."""

import pytest

from chordfinder.key_catalog import KeyCatalog, KeyDefinition, default_catalog


@pytest.fixture(scope="session")
def catalog() -> KeyCatalog:
    return default_catalog()


@pytest.fixture
def c_major(catalog: KeyCatalog) -> KeyDefinition:
    return catalog.get("C", "major")


@pytest.fixture
def a_minor(catalog: KeyCatalog) -> KeyDefinition:
    return catalog.get("A", "minor")
