from __future__ import annotations

import sys

import psycopg
import typer

from product_crud.config import get_settings
from product_crud.infrastructure.session import build_dsn
from product_crud.menu import run_menu
from product_crud.statements import SCHEMA_DDL, TABLE_NAME
from product_crud.utils.logging import configure_logging

app = typer.Typer(help="Product CRUD CLI with explicit transaction handling.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"env={settings.app_env} log_level={settings.log_level} "
        f"connect_attempts={settings.db_connect_attempts}"
    )


@app.command("init-db")
def init_db() -> None:
    """
    Create the products table if it does not exist.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        with psycopg.connect(build_dsn(settings)) as conn:
            conn.execute(SCHEMA_DDL)
    except psycopg.Error as exc:
        typer.echo(f"Failed to initialize schema: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Table '{TABLE_NAME}' is ready.")


@app.command()
def menu() -> None:
    """
    Run the interactive create/read/update/delete menu.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    code = run_menu(settings)
    if code:
        raise typer.Exit(code=code)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
