"""
Pytest configuration for the product CRUD engine.

Provides fixtures for:
- An in-memory fake psycopg connection with failure injection (unit tests)
- Storage session / executor / dispatcher wired around the fake
- Database connection management for integration tests
"""

from __future__ import annotations

import os
from decimal import Decimal
from typing import Any, Dict, Generator, List, Optional, Tuple

import psycopg
import pytest

from product_crud.config import Settings
from product_crud.dispatcher import OperationDispatcher
from product_crud.executor import TransactionExecutor
from product_crud.infrastructure.session import StorageSession, build_dsn
from product_crud.statements import SCHEMA_DDL, TABLE_NAME


class FakeCursor:
    """Executes the catalog statements against the owning FakeConnection's table."""

    def __init__(self, conn: "FakeConnection") -> None:
        self._conn = conn
        self._rows: List[Tuple[Any, ...]] = []
        self.rowcount = -1
        self.closed = False

    def execute(self, sql: str, params: Any = None, prepare: Optional[bool] = None) -> "FakeCursor":
        params = tuple(params or ())
        self._conn.executed.append((sql, params))
        self._conn.raise_if("execute")
        verb = sql.split()[0].upper()
        self._rows = []
        if verb == "INSERT":
            self._conn.begin()
            name, price, quantity = params
            product_id = self._conn.next_id
            self._conn.next_id += 1
            self._conn.table[product_id] = (product_id, name, Decimal(price), quantity)
            self._rows = [(product_id,)]
            self.rowcount = 1
        elif verb == "SELECT":
            self._rows = [self._conn.table[key] for key in sorted(self._conn.table)]
            self.rowcount = len(self._rows)
        elif verb == "UPDATE":
            self._conn.begin()
            name, price, quantity, product_id = params
            if product_id in self._conn.table:
                self._conn.table[product_id] = (product_id, name, Decimal(price), quantity)
                self.rowcount = 1
            else:
                self.rowcount = 0
        elif verb == "DELETE":
            self._conn.begin()
            (product_id,) = params
            self.rowcount = 1 if self._conn.table.pop(product_id, None) else 0
        return self

    def fetchone(self) -> Optional[Tuple[Any, ...]]:
        return self._rows.pop(0) if self._rows else None

    def __iter__(self):
        for index, row in enumerate(list(self._rows)):
            if index > 0:
                self._conn.raise_if("iterate")
            yield row
        self._rows = []

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    """
    Minimal stand-in for psycopg.Connection.

    Mutations are applied to `table` and undone on rollback. `fail_on` maps a
    call name ("cursor", "execute", "iterate", "commit", "rollback", "close")
    to the exception that call should raise.
    """

    def __init__(self) -> None:
        self.autocommit = True
        self.table: Dict[int, Tuple[Any, ...]] = {}
        self.next_id = 1
        self.executed: List[Tuple[str, Tuple[Any, ...]]] = []
        self.calls: List[str] = []
        self.fail_on: Dict[str, Exception] = {}
        self.closed = False
        self._snapshot: Optional[Dict[int, Tuple[Any, ...]]] = None

    def raise_if(self, name: str) -> None:
        if name in self.fail_on:
            raise self.fail_on[name]

    def begin(self) -> None:
        if self._snapshot is None:
            self._snapshot = dict(self.table)

    def cursor(self) -> FakeCursor:
        self.raise_if("cursor")
        return FakeCursor(self)

    def commit(self) -> None:
        self.calls.append("commit")
        self.raise_if("commit")
        self._snapshot = None

    def rollback(self) -> None:
        self.calls.append("rollback")
        self.raise_if("rollback")
        if self._snapshot is not None:
            self.table = self._snapshot
            self._snapshot = None

    def close(self) -> None:
        self.calls.append("close")
        self.raise_if("close")
        self.closed = True

    def seed(self, *rows: Tuple[str, str, int]) -> None:
        for name, price, quantity in rows:
            self.table[self.next_id] = (self.next_id, name, Decimal(price), quantity)
            self.next_id += 1


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def session(fake_connection: FakeConnection) -> StorageSession:
    return StorageSession(fake_connection)


@pytest.fixture
def executor(session: StorageSession) -> TransactionExecutor:
    return TransactionExecutor(session)


@pytest.fixture
def dispatcher(executor: TransactionExecutor) -> OperationDispatcher:
    return OperationDispatcher(executor)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "retail_db"),
        db_connect_attempts=1,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return build_dsn(test_settings)


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            conn.execute("SELECT 1;").fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped admin connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        conn.execute(SCHEMA_DDL)
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def clean_products_table(db_connection: psycopg.Connection):
    """
    Empty the products table before and after each test function.
    """
    db_connection.execute(f"TRUNCATE TABLE {TABLE_NAME} RESTART IDENTITY;")
    yield
    db_connection.execute(f"TRUNCATE TABLE {TABLE_NAME} RESTART IDENTITY;")
