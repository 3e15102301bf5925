from __future__ import annotations

import psycopg
from typer.testing import CliRunner

from product_crud import main as main_module
from product_crud.config import Settings
from product_crud.infrastructure import session as session_module
from product_crud.infrastructure.session import build_dsn
from product_crud.statements import SCHEMA_DDL, TABLE_NAME

runner = CliRunner()


def test_info_shows_connection_target(monkeypatch) -> None:
    monkeypatch.setattr(
        main_module, "get_settings", lambda: Settings(db_host="db", db_name="retail")
    )

    result = runner.invoke(main_module.app, ["info"])

    assert result.exit_code == 0
    assert "@db:5432/retail" in result.output


def test_menu_exits_nonzero_when_database_unreachable(monkeypatch) -> None:
    def refuse(dsn: str):
        raise psycopg.OperationalError("connection refused")

    monkeypatch.setattr(main_module, "get_settings", lambda: Settings(db_connect_attempts=1))
    monkeypatch.setattr(main_module, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(session_module, "_connect", refuse)

    result = runner.invoke(main_module.app, ["menu"])

    assert result.exit_code == 1
    assert "Could not connect to the database" in result.output


class _FakeAdminConnection:
    def __init__(self) -> None:
        self.executed: list[str] = []

    def __enter__(self) -> "_FakeAdminConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb

    def execute(self, sql: str) -> None:
        self.executed.append(sql)


def test_init_db_creates_products_table(monkeypatch) -> None:
    conn = _FakeAdminConnection()
    dsns: list[str] = []

    def connect(dsn: str) -> _FakeAdminConnection:
        dsns.append(dsn)
        return conn

    settings = Settings(db_host="db")
    monkeypatch.setattr(main_module, "get_settings", lambda: settings)
    monkeypatch.setattr(main_module, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(main_module.psycopg, "connect", connect)

    result = runner.invoke(main_module.app, ["init-db"])

    assert result.exit_code == 0
    assert conn.executed == [SCHEMA_DDL]
    assert dsns == [build_dsn(settings)]
    assert f"Table '{TABLE_NAME}' is ready." in result.output


def test_init_db_reports_failure_with_exit_code(monkeypatch) -> None:
    def refuse(dsn: str):
        raise psycopg.OperationalError("connection refused")

    monkeypatch.setattr(main_module, "get_settings", lambda: Settings(db_connect_attempts=1))
    monkeypatch.setattr(main_module, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(main_module.psycopg, "connect", refuse)

    result = runner.invoke(main_module.app, ["init-db"])

    assert result.exit_code == 1
    assert "Failed to initialize schema: connection refused" in result.output
