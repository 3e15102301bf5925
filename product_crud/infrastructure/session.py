"""
Storage session for the product CRUD engine.

Owns the single live PostgreSQL connection for a program run. The session is
opened once at start-up with auto-commit disabled, so every statement runs in
a transaction the executor concludes explicitly, and closed exactly once at
shutdown regardless of earlier failures.

psycopg exceptions are translated into `product_crud.errors` here; nothing
above this module handles driver exception types.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator, Optional, Sequence, Tuple

import psycopg
from psycopg import Connection, Cursor
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from product_crud.config import Settings, get_settings
from product_crud.errors import (
    CommitError,
    ConnectError,
    ExecuteError,
    PrepareError,
    RollbackError,
)
from product_crud.statements import StatementTemplate
from product_crud.utils.logging import get_logger

log = get_logger(__name__)


class SessionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def _connect(dsn: str) -> Connection:
    return psycopg.connect(dsn)


def _connect_with_retry(dsn: str, attempts: int) -> Connection:
    """
    Open a connection, retrying transient failures with exponential backoff.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    retrying = retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
        reraise=True,
    )
    return retrying(_connect)(dsn)


class PreparedStatement:
    """
    A statement template bound to a cursor of the session's connection.

    Use as a context manager so the cursor is released on every exit path.
    """

    def __init__(self, template: StatementTemplate, cursor: Cursor) -> None:
        self.template = template
        self._cursor = cursor

    def execute(self, params: Sequence[Any] = ()) -> int:
        """Execute with bound parameters and return the affected-row count."""
        try:
            self._cursor.execute(self.template.sql, params, prepare=True)
        except psycopg.Error as exc:
            raise ExecuteError(str(exc)) from exc
        return self._cursor.rowcount

    def fetchone(self) -> Optional[Tuple[Any, ...]]:
        try:
            return self._cursor.fetchone()
        except psycopg.Error as exc:
            raise ExecuteError(str(exc)) from exc

    def rows(self) -> Iterator[Tuple[Any, ...]]:
        """
        Lazily yield result rows; the cursor is closed once the iterator is
        exhausted or discarded, so the sequence cannot be restarted.
        """
        try:
            for row in self._cursor:
                yield row
        except psycopg.Error as exc:
            raise ExecuteError(str(exc)) from exc
        finally:
            self.close()

    def close(self) -> None:
        self._cursor.close()

    def __enter__(self) -> "PreparedStatement":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class StorageSession:
    """
    The one live connection to persistent storage.

    States: DISCONNECTED -> CONNECTED (autocommit=False) -> DISCONNECTED.

    Example
    -------
        with StorageSession.open(build_dsn()) as session:
            with session.prepare(template) as stmt:
                stmt.execute(params)
            session.commit()
    """

    def __init__(self, connection: Optional[Connection] = None) -> None:
        self._connection = connection
        if connection is not None:
            connection.autocommit = False

    @classmethod
    def open(cls, dsn: str, attempts: int = 3) -> "StorageSession":
        session = cls()
        session.connect(dsn, attempts=attempts)
        return session

    @property
    def state(self) -> SessionState:
        if self._connection is None:
            return SessionState.DISCONNECTED
        return SessionState.CONNECTED

    def connect(self, dsn: str, attempts: int = 3) -> None:
        if self._connection is not None:
            raise ConnectError("Storage session is already connected")
        try:
            connection = _connect_with_retry(dsn, attempts)
        except psycopg.Error as exc:
            raise ConnectError(str(exc)) from exc
        try:
            connection.autocommit = False
        except psycopg.Error as exc:
            connection.close()
            raise ConnectError(str(exc)) from exc
        self._connection = connection
        log.info("Database connection established; autocommit disabled")

    def prepare(self, template: StatementTemplate) -> PreparedStatement:
        if self._connection is None:
            raise PrepareError("Storage session is not connected")
        try:
            cursor = self._connection.cursor()
        except psycopg.Error as exc:
            raise PrepareError(str(exc)) from exc
        return PreparedStatement(template, cursor)

    def commit(self) -> None:
        if self._connection is None:
            raise CommitError("Storage session is not connected")
        try:
            self._connection.commit()
        except psycopg.Error as exc:
            raise CommitError(str(exc)) from exc
        log.debug("Transaction committed")

    def rollback(self) -> None:
        if self._connection is None:
            raise RollbackError("Storage session is not connected")
        try:
            self._connection.rollback()
        except psycopg.Error as exc:
            raise RollbackError(str(exc)) from exc
        log.debug("Transaction rolled back")

    def close(self) -> None:
        """Close the connection; safe to call any number of times."""
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        try:
            connection.close()
            log.info("Database connection closed")
        except psycopg.Error as exc:
            log.error("Failed to close connection: %s", exc)

    def __enter__(self) -> "StorageSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "PreparedStatement",
    "SessionState",
    "StorageSession",
    "build_dsn",
]
