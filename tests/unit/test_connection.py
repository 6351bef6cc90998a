"""
Unit tests for connection descriptors, settings and the adapter factory.
"""

import pytest

from anybase.adapters import (
    BaseAdapter,
    SQLiteAdapter,
    get_adapter,
    is_provider_supported,
    list_adapters,
    register_adapter,
)
from anybase.connection import (
    ConnectionKind,
    DatabaseProvider,
    connection_from_settings,
    database_connection_string,
    describe_for_error,
    mysql_connection,
    server_connection_string,
    sqlite_connection,
    sqlserver_connection,
    trusted_connection,
)
from anybase.core.config import Settings
from anybase.shared.exceptions import ConnectionError


class TestDescriptors:
    """Tests for descriptor constructors and connection strings."""

    def test_kinds(self):
        assert sqlite_connection("/data", "a.db").kind == ConnectionKind.FILE
        assert mysql_connection("db").kind == ConnectionKind.CREDENTIALED
        assert trusted_connection("sql01", "shop").kind == ConnectionKind.TRUSTED

    def test_mysql_defaults(self):
        descriptor = mysql_connection("db.local")
        assert descriptor.port == 3306
        assert descriptor.user_name == "root"

    def test_mysql_strings(self):
        descriptor = mysql_connection("db.local", 3307, "app", "secret", "shop")

        assert server_connection_string(descriptor) == (
            "server=db.local;port=3307;user id=app;password=secret"
        )
        assert database_connection_string(descriptor) == (
            "server=db.local;port=3307;database=shop;user id=app;password=secret"
        )

    def test_sql_server_strings(self):
        descriptor = sqlserver_connection("sql01", "sa", "pw", "shop")

        assert server_connection_string(descriptor) == "Server=sql01;User Id=sa;Password=pw;"
        assert database_connection_string(descriptor) == "Server=sql01;Database=shop;User Id=sa;Password=pw;"

    def test_trusted_strings(self):
        descriptor = trusted_connection("sql01", "shop")

        assert server_connection_string(descriptor) == "Server=sql01;Trusted_Connection=Yes;"
        assert database_connection_string(descriptor) == "Server=sql01;Database=shop;Trusted_Connection=Yes;"

    def test_sqlite_has_no_server(self):
        with pytest.raises(ConnectionError) as exc:
            server_connection_string(sqlite_connection("/data", "a.db"))
        assert "SQLite does not use servers" in str(exc.value)

    def test_repr_hides_password(self):
        assert "secret" not in repr(mysql_connection("db", password="secret"))

    def test_describe_for_error(self):
        assert describe_for_error(sqlite_connection("/data", "a.db"), server_only=True) == (
            "Cannot connect to a SQLite server. SQLite does not use servers"
        )
        message = describe_for_error(mysql_connection("db", 3306, "app", "x", "shop"))
        assert "shop" in message
        assert "db" in message
        assert "app" in message

    def test_describe_for_error_never_raises(self):
        assert describe_for_error(object())


class TestSettings:
    """Tests for configuration-driven descriptors."""

    def test_sqlite_from_settings(self, tmp_path):
        settings = Settings(provider="sqlite", folder=str(tmp_path), database="x.db")
        descriptor = connection_from_settings(settings)

        assert descriptor.provider == DatabaseProvider.SQLITE
        assert descriptor.folder_path == str(tmp_path)

    def test_trusted_from_settings(self):
        settings = Settings(provider="SQLServer", server="sql01", database="shop", trusted=True)
        assert connection_from_settings(settings).kind == ConnectionKind.TRUSTED

    def test_missing_provider(self):
        with pytest.raises(ConnectionError):
            connection_from_settings(Settings(provider=None))

    def test_unknown_provider(self):
        with pytest.raises(ConnectionError) as exc:
            connection_from_settings(Settings(provider="oracle"))
        assert "oracle" in str(exc.value)

    def test_batch_size_must_be_positive(self):
        with pytest.raises(ValueError):
            Settings(batch_size=0)


class TestAdapterFactory:
    """Tests for the adapter registry."""

    def test_builtin_adapters(self):
        assert set(list_adapters()) == {"sqlserver", "mysql", "sqlite"}
        assert is_provider_supported("SQLite")
        assert not is_provider_supported("oracle")

    def test_sqlite_adapter(self, sqlite_descriptor, settings):
        adapter = get_adapter(sqlite_descriptor, settings)

        assert isinstance(adapter, SQLiteAdapter)
        assert adapter.get_engine_info()["paramstyle"] == "named"

    def test_register_replacement(self, sqlite_descriptor, settings):
        class ReplacementAdapter(SQLiteAdapter):
            ENGINE = "replacement"

        try:
            register_adapter("sqlite", ReplacementAdapter)
            assert get_adapter(sqlite_descriptor, settings).ENGINE == "replacement"
        finally:
            register_adapter(DatabaseProvider.SQLITE, SQLiteAdapter)

    def test_sqlite_refuses_server_connections(self, sqlite_descriptor, settings):
        with pytest.raises(ConnectionError):
            SQLiteAdapter(sqlite_descriptor, settings).open_connection(server_only=True)

    def test_missing_folder(self, tmp_path, settings):
        adapter = SQLiteAdapter(sqlite_connection(str(tmp_path / "missing"), "a.db"), settings)
        with pytest.raises(ConnectionError):
            adapter.open_connection()

    def test_base_adapter_is_abstract(self, sqlite_descriptor):
        with pytest.raises(TypeError):
            BaseAdapter(sqlite_descriptor)
