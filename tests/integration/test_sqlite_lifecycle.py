"""
Integration tests for database and table lifecycle on SQLite files.
"""

import os
from decimal import Decimal

import pytest

from anybase.connection import sqlite_connection
from anybase.crud import Crud
from anybase.lifecycle import DatabaseManager
from anybase.schema import build_table_descriptor
from anybase.shared.exceptions import ConnectionError, ErrorCategory


@pytest.fixture
def manager(sqlite_descriptor, settings, templates, types):
    return DatabaseManager(sqlite_descriptor, settings=settings, templates=templates, types=types)


@pytest.fixture
def orders(sqlite_descriptor, templates, types):
    return build_table_descriptor(
        "Orders", ["customer", "total"], [str, Decimal], sqlite_descriptor.provider, templates, types
    )


class TestDatabases:
    """Tests for SQLite database files."""

    def test_create_and_drop(self, manager, tmp_path):
        path = os.path.join(str(tmp_path), "test.db")
        assert not manager.database_exists()

        assert manager.create_database()
        assert os.path.isfile(path)
        assert manager.database_exists()

        assert manager.drop_database()
        assert not os.path.exists(path)

    def test_create_is_idempotent(self, manager):
        assert manager.create_database()
        assert manager.create_database()

    def test_drop_missing_database(self, manager):
        assert manager.drop_database()

    def test_table_checks_do_not_recreate_dropped_database(self, manager, orders, tmp_path):
        manager.create_table(orders)
        assert manager.drop_database()

        assert not manager.table_exists("Orders")
        assert manager.table_columns("Orders") == []
        assert manager.drop_table("Orders")

        assert not manager.database_exists()
        assert not os.path.exists(os.path.join(str(tmp_path), "test.db"))

    def test_test_connection(self, manager):
        assert manager.test_connection()


class TestTables:
    """Tests for table creation, inspection and removal."""

    def test_create_table(self, manager, orders):
        assert not manager.table_exists("Orders")

        assert manager.create_table(orders)

        assert manager.table_exists("Orders")
        assert manager.table_columns("Orders") == ["id", "customer", "total"]

    def test_create_existing_table_keeps_it(self, manager, orders, sqlite_descriptor, settings):
        manager.create_table(orders)
        crud = Crud(sqlite_descriptor, settings=settings, templates=manager.templates)
        crud.insert_records("Orders", ["customer", "total"], [str, Decimal], [["ann", Decimal("1")]])

        assert manager.create_table(orders)
        assert crud.read_records("Orders", [], []).row_count == 1

    def test_recreate_table_empties_it(self, manager, orders, sqlite_descriptor, settings):
        manager.create_table(orders)
        crud = Crud(sqlite_descriptor, settings=settings, templates=manager.templates)
        crud.insert_records("Orders", ["customer", "total"], [str, Decimal], [["ann", Decimal("1")]])

        assert manager.create_table(orders, recreate_if_exists=True)
        assert crud.read_records("Orders", [], []).row_count == 0

    def test_create_table_from_fields(self, manager):
        assert manager.create_table_from_fields("Notes", ["text"], [str])
        assert manager.table_columns("Notes") == ["id", "text"]

    def test_drop_table(self, manager, orders):
        manager.create_table(orders)

        assert manager.drop_table("Orders")
        assert not manager.table_exists("Orders")

    def test_drop_missing_table_reports_absent(self, manager):
        assert manager.drop_table("Nothing")

    def test_add_column(self, manager, orders):
        manager.create_table(orders)

        assert manager.add_column("Orders", "note", "str") is None
        assert manager.table_columns("Orders") == ["id", "customer", "total", "note"]

        error = manager.add_column("Orders", "note", "str")
        assert error.category == ErrorCategory.COLUMN_EXISTS

    def test_missing_folder_raises(self, tmp_path, settings, templates, types):
        descriptor = sqlite_connection(str(tmp_path / "missing"), "a.db")
        manager = DatabaseManager(descriptor, settings=settings, templates=templates, types=types)

        with pytest.raises(ConnectionError):
            manager.table_exists("Orders")
