"""
Utilities package for the product CRUD engine.

Exports shared helpers for cross-cutting concerns such as logging.
Keep this package lightweight and free of domain-specific logic.
"""

from product_crud.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
