"""
Product CRUD - transactional create/read/update/delete engine for a products
table in PostgreSQL.

Each user-issued operation runs as a single parameterized statement on one
long-lived connection with auto-commit disabled. Mutations are committed only
when they affect at least one row and rolled back otherwise, and storage
failures are rolled back and reported without ending the session.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from product_crud.config import Settings, get_settings
from product_crud.dispatcher import OperationDispatcher, OperationRequest
from product_crud.domain.models import (
    OperationKind,
    OperationOutcome,
    OutcomeKind,
    Product,
    ProductDraft,
)
from product_crud.executor import ExecutorState, TransactionExecutor
from product_crud.infrastructure.session import StorageSession, build_dsn
from product_crud.reporter import FailureReporter
from product_crud.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "OperationKind",
    "OperationOutcome",
    "OutcomeKind",
    "Product",
    "ProductDraft",
    # Engine
    "ExecutorState",
    "FailureReporter",
    "OperationDispatcher",
    "OperationRequest",
    "StorageSession",
    "TransactionExecutor",
    "build_dsn",
    # Logging
    "configure_logging",
    "get_logger",
]
