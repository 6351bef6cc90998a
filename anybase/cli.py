#!/usr/bin/env python3
"""
AnyBase CLI - Command-line interface for database and table housekeeping

Usage:
    anybase --help
    anybase --provider sqlite --folder ./data --database shop.db create-db
    anybase tables exists Orders
    anybase tables columns Orders
    anybase read Orders --field id --field customer

Connection options can also be set through the environment:

    ANYBASE_PROVIDER=mysql ANYBASE_SERVER=db.local ANYBASE_PASSWORD=... anybase db-exists
"""

import json
import sys

import click
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from anybase import __version__
from anybase.connection import connection_from_settings
from anybase.core import Settings, configure_logging
from anybase.crud import Crud
from anybase.shared.exceptions import AnyBaseError

# =============================================================================
# CONFIGURATION
# =============================================================================

console = Console()

PROVIDERS = ["sqlserver", "mysql", "sqlite"]


def get_crud(ctx) -> Crud:
    """Build a CRUD facade from the group options."""
    settings = ctx.obj["settings"]
    try:
        return Crud(connection_from_settings(settings), settings=settings)
    except AnyBaseError as e:
        handle_error(e)


def handle_error(error: Exception):
    """Print an error with rich formatting and exit."""
    console.print(f"\n[bold red]Error[/bold red] [red]{error}[/red]")
    cause = getattr(error, "original_error", None)
    if cause is not None:
        console.print(f"[dim]Cause: {cause}[/dim]")
    sys.exit(1)


def print_errors(errors) -> None:
    for error in errors:
        console.print(f"[yellow]{error.category.value}[/yellow] {error.concatenated}")


def status(ok: bool, message: str) -> None:
    if ok:
        console.print(f"[green]✓[/green] {message}")
    else:
        console.print(f"[red]✗[/red] {message}")


# =============================================================================
# MAIN CLI GROUP
# =============================================================================

@click.group()
@click.option("--provider", type=click.Choice(PROVIDERS), help="Database provider")
@click.option("--server", help="Server address (MySQL, SQL Server)")
@click.option("--port", type=int, help="Server port")
@click.option("--user", help="Login name")
@click.option("--password", help="Login password")
@click.option("--database", help="Database name, or file name for SQLite")
@click.option("--folder", help="Folder holding the SQLite file")
@click.option("--trusted", is_flag=True, default=None, help="Use integrated authentication (SQL Server)")
@click.option("--log-level", help="Logging level (default: ANYBASE_LOG_LEVEL or INFO)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.version_option(version=__version__, prog_name="anybase")
@click.pass_context
def cli(ctx, provider, server, port, user, password, database, folder, trusted, log_level, output_json):
    """
    AnyBase CLI - Manage databases and tables from the command line.

    \b
    Quick Start:
        anybase --provider sqlite --folder . --database shop.db create-db
        anybase --provider sqlite --folder . --database shop.db tables columns Orders

    \b
    Environment Variables:
        ANYBASE_PROVIDER, ANYBASE_SERVER, ANYBASE_PORT, ANYBASE_USER,
        ANYBASE_PASSWORD, ANYBASE_DATABASE, ANYBASE_FOLDER, ANYBASE_TRUSTED
    """
    overrides = {
        "provider": provider,
        "server": server,
        "port": port,
        "user": user,
        "password": password,
        "database": database,
        "folder": folder,
        "trusted": trusted or None,
        "log_level": log_level,
    }
    settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    configure_logging(settings.log_level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["output_json"] = output_json


# =============================================================================
# DATABASE COMMANDS
# =============================================================================

@cli.command("db-exists")
@click.pass_context
def db_exists(ctx):
    """Check whether the database exists."""
    crud = get_crud(ctx)
    try:
        exists = crud.manager.database_exists()
    except AnyBaseError as e:
        handle_error(e)

    name = crud.descriptor.database_name
    if ctx.obj.get("output_json"):
        click.echo(json.dumps({"database": name, "exists": exists}))
        return
    status(exists, f"Database '{name}' {'exists' if exists else 'does not exist'}")
    if not exists:
        sys.exit(1)


@cli.command("create-db")
@click.pass_context
def create_db(ctx):
    """Create the database unless it exists."""
    crud = get_crud(ctx)
    try:
        created = crud.manager.create_database()
    except AnyBaseError as e:
        handle_error(e)

    status(created, f"Database '{crud.descriptor.database_name}' {'is ready' if created else 'could not be created'}")
    if not created:
        sys.exit(1)


@cli.command("drop-db")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def drop_db(ctx, yes):
    """Drop the database."""
    crud = get_crud(ctx)
    name = crud.descriptor.database_name
    if not yes:
        click.confirm(f"Drop database '{name}'?", abort=True)
    try:
        dropped = crud.manager.drop_database()
    except AnyBaseError as e:
        handle_error(e)

    status(dropped, f"Database '{name}' {'dropped' if dropped else 'could not be dropped'}")
    if not dropped:
        sys.exit(1)


# =============================================================================
# TABLE COMMANDS
# =============================================================================

@cli.group()
def tables():
    """Inspect and drop tables."""
    pass


@tables.command("exists")
@click.argument("table_name")
@click.pass_context
def tables_exists(ctx, table_name):
    """Check whether a table exists."""
    crud = get_crud(ctx)
    exists = crud.table_exists(table_name)
    if ctx.obj.get("output_json"):
        click.echo(json.dumps({"table": table_name, "exists": exists}))
        return
    status(exists, f"Table '{table_name}' {'exists' if exists else 'does not exist'}")
    if not exists:
        sys.exit(1)


@tables.command("drop")
@click.argument("table_name")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def tables_drop(ctx, table_name, yes):
    """Drop a table."""
    crud = get_crud(ctx)
    if not yes:
        click.confirm(f"Drop table '{table_name}'?", abort=True)
    dropped = crud.drop_table(table_name)
    status(dropped, f"Table '{table_name}' {'dropped' if dropped else 'could not be dropped'}")
    if not dropped:
        sys.exit(1)


@tables.command("columns")
@click.argument("table_name")
@click.pass_context
def tables_columns(ctx, table_name):
    """List the columns of a table."""
    crud = get_crud(ctx)
    columns = crud.manager.table_columns(table_name)

    if ctx.obj.get("output_json"):
        click.echo(json.dumps(columns))
        return

    if not columns:
        console.print(f"[yellow]Table '{table_name}' has no columns or does not exist[/yellow]")
        return

    table = Table(title=table_name, show_header=True)
    table.add_column("#", style="dim")
    table.add_column("Column", style="cyan")
    for index, column in enumerate(columns, start=1):
        table.add_row(str(index), column)
    console.print(table)


# =============================================================================
# READ COMMAND
# =============================================================================

@cli.command()
@click.argument("table_name")
@click.option("--field", "-f", "fields", multiple=True, help="Column to select (repeatable)")
@click.option("--limit", type=int, default=100, help="Maximum rows to print")
@click.pass_context
def read(ctx, table_name, fields, limit):
    """Print the rows of a table."""
    crud = get_crud(ctx)
    result = crud.read_records(table_name, [], [], list(fields) or None)

    if result.errors:
        print_errors(result.errors)
        sys.exit(1)

    rows = result.rows[:limit]

    if ctx.obj.get("output_json"):
        console.print(Syntax(json.dumps(rows, indent=2, default=str), "json"))
        return

    if not rows:
        console.print(f"[yellow]No rows in '{table_name}'[/yellow]")
        return

    table = Table(title=table_name, show_header=True)
    for column in result.columns:
        table.add_column(column, style="cyan")
    for row in rows:
        table.add_row(*["" if row.get(c) is None else str(row.get(c)) for c in result.columns])
    console.print(table)

    if result.row_count > limit:
        console.print(f"[dim]Showing {limit} of {result.row_count} rows[/dim]")


# =============================================================================
# ENTRY POINT
# =============================================================================

def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
