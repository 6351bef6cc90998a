"""
SQL Statement Builder

Pure string assembly, no I/O. Values never appear in the text: every value is
an ``@``-prefixed placeholder that adapters translate to their driver's
paramstyle.

    build_insert("Orders", ["a", "b"])
        -> "INSERT INTO Orders (a, b) VALUES (@a, @b)"
    build_update("Orders", ["a"], ["id"], [[1]])
        -> "UPDATE Orders SET a=@Seta WHERE id=@Whereid"
    build_where(["a", "b"], [[1, 2]])
        -> " WHERE a=@Wherea AND b=@Whereb"

SET and WHERE placeholders use different prefixes so one UPDATE can bind
both without collisions.
"""

from typing import Any, Optional, Sequence

from anybase.connection.descriptor import DatabaseProvider
from anybase.schema.blueprint import FieldDescriptor, TableDescriptor, is_auto_increment

SET_PREFIX = "@Set"
WHERE_PREFIX = "@Where"
VALUE_PREFIX = "@"

# Providers that select the database per statement
_USE_CLAUSE_PROVIDERS = {DatabaseProvider.SQLSERVER}


def comma_separated(items: Sequence[str]) -> str:
    return ", ".join(items)


def use_clause(provider: DatabaseProvider, database_name: Optional[str]) -> str:
    if provider in _USE_CLAUSE_PROVIDERS and database_name:
        return f"USE {database_name};"
    return ""


def _prefixed(use: str, statement: str) -> str:
    return f"{use} {statement}" if use else statement


def build_where(field_names: Sequence[str], value_sets: Sequence[Sequence[Any]]) -> str:
    """WHERE fragment, or empty text when there are no fields or no value sets."""
    if not field_names or not value_sets:
        return ""
    conditions = " AND ".join(f"{name}={WHERE_PREFIX}{name}" for name in field_names)
    return f" WHERE {conditions}"


def build_insert(table_name: str, field_names: Sequence[str], use: str = "") -> str:
    placeholders = [f"{VALUE_PREFIX}{name}" for name in field_names]
    return _prefixed(
        use,
        f"INSERT INTO {table_name} ({comma_separated(field_names)}) VALUES ({comma_separated(placeholders)})",
    )


def build_update(
    table_name: str,
    set_field_names: Sequence[str],
    where_field_names: Sequence[str],
    where_value_sets: Sequence[Sequence[Any]],
    use: str = "",
) -> str:
    assignments = comma_separated([f"{name}={SET_PREFIX}{name}" for name in set_field_names])
    where = build_where(where_field_names, where_value_sets)
    return _prefixed(use, f"UPDATE {table_name} SET {assignments}{where}")


def build_delete(
    table_name: str,
    where_field_names: Sequence[str],
    where_value_sets: Sequence[Sequence[Any]],
    use: str = "",
) -> str:
    return _prefixed(use, f"DELETE FROM {table_name}{build_where(where_field_names, where_value_sets)}")


def build_select(
    table_name: str,
    select_field_names: Optional[Sequence[str]],
    where_field_names: Sequence[str],
    where_value_sets: Sequence[Sequence[Any]],
    use: str = "",
) -> str:
    selected = comma_separated(select_field_names) if select_field_names else "*"
    where = build_where(where_field_names, where_value_sets)
    return _prefixed(use, f"SELECT {selected} FROM {table_name}{where}")


# =============================================================================
# DDL
# =============================================================================

_AUTO_INCREMENT_COLUMNS = {
    DatabaseProvider.MYSQL: "{name} {sql_type} NOT NULL AUTO_INCREMENT",
    DatabaseProvider.SQLITE: "{name} INTEGER PRIMARY KEY AUTOINCREMENT",
    DatabaseProvider.SQLSERVER: "{name} {sql_type} IDENTITY(1,1) NOT NULL",
}


def build_column_definition(field: FieldDescriptor, provider: DatabaseProvider) -> str:
    if is_auto_increment(field):
        return _AUTO_INCREMENT_COLUMNS[provider].format(name=field.name, sql_type=field.sql_type)
    null = "NULL" if field.nullable else "NOT NULL"
    return f"{field.name} {field.sql_type} {null}"


def build_primary_key_clause(descriptor: TableDescriptor) -> str:
    # SQLite declares the auto-increment key inline
    if descriptor.provider == DatabaseProvider.SQLITE and descriptor.has_synthesized_key:
        return ""
    keys = descriptor.primary_key_names
    if not keys:
        return ""
    return f", PRIMARY KEY ({comma_separated(keys)})"


def build_create_table(descriptor: TableDescriptor, use: str = "") -> str:
    columns = comma_separated(
        [build_column_definition(f, descriptor.provider) for f in descriptor.fields]
    )
    return _prefixed(
        use,
        f"CREATE TABLE {descriptor.table_name} ({columns}{build_primary_key_clause(descriptor)})",
    )


def build_drop_table(table_name: str, use: str = "") -> str:
    return _prefixed(use, f"DROP TABLE {table_name}")


def build_add_column(
    table_name: str,
    column_name: str,
    sql_type: str,
    provider: DatabaseProvider,
    use: str = "",
) -> str:
    # SQL Server has no COLUMN keyword in ALTER TABLE ... ADD
    keyword = "ADD" if provider == DatabaseProvider.SQLSERVER else "ADD COLUMN"
    return _prefixed(use, f"ALTER TABLE {table_name} {keyword} {column_name} {sql_type}")
