"""
Pytest configuration and shared fixtures for AnyBase tests.

SQLite databases live in ``tmp_path``; batching and failure paths run against
an in-memory fake DB-API connection so no server is needed.
"""

import pytest

from anybase.connection import sqlite_connection
from anybase.core.config import Settings
from anybase.mapping import default_type_catalog
from anybase.schema import TemplateCatalog

from tests.fakes import FakeAdapter


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment's lock directory and catalog path."""
    return Settings(lock_directory=str(tmp_path), template_catalog_path=None, batch_size=10000)


@pytest.fixture
def types():
    return default_type_catalog()


@pytest.fixture
def templates():
    """Templates used by the record types in the tests."""
    return TemplateCatalog.from_dict({
        "templates": {
            "Product": {"primary_keys": ["sku"]},
            "Invoice": {
                "primary_keys": ["CompanyId", "INVOICE_NUMBER"],
                "excluded_fields": ["memorisedName"],
            },
            "TestTable": {
                "primary_keys": ["Primary1", "Primary2"],
                "type_overrides": {"sqlserver": {"Primary2": "nvarchar(20)"}},
            },
        }
    })


@pytest.fixture
def sqlite_descriptor(tmp_path):
    """A SQLite database file in the test's temporary folder."""
    return sqlite_connection(str(tmp_path), "test.db")


@pytest.fixture
def fake_adapter(sqlite_descriptor, settings):
    return FakeAdapter(sqlite_descriptor, settings)
