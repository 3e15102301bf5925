"""
Error hierarchy for the product CRUD engine.

Driver exceptions are translated into these at the storage session boundary
so nothing above it depends on psycopg exception types.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base class for failures raised by the storage session."""


class ConnectError(StorageError):
    """The initial connection could not be established."""


class PrepareError(StorageError):
    """A statement could not be prepared on the session."""


class ExecuteError(StorageError):
    """A prepared statement failed while executing or fetching."""


class CommitError(StorageError):
    """The pending transaction could not be committed."""


class RollbackError(StorageError):
    """The pending transaction could not be rolled back."""


class ExecutorBusyError(RuntimeError):
    """An operation was started while another one was still in flight."""


__all__ = [
    "CommitError",
    "ConnectError",
    "ExecuteError",
    "ExecutorBusyError",
    "PrepareError",
    "RollbackError",
    "StorageError",
]
