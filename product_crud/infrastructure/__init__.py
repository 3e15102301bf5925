"""
Infrastructure package for the product CRUD engine.

Centralizes database connectivity concerns (the single storage session and
its prepared statements). Keep this layer focused on I/O and resource
management, decoupled from executor/dispatcher logic.
"""

from product_crud.infrastructure.session import (
    PreparedStatement,
    SessionState,
    StorageSession,
    build_dsn,
)

__all__ = [
    "PreparedStatement",
    "SessionState",
    "StorageSession",
    "build_dsn",
]
