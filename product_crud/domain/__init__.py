"""
Domain package for the product CRUD engine.

Exports the product models and the operation/outcome vocabulary used across
the dispatcher, executor and reporter. Keep this package focused on data
definitions and validation concerns.
"""

from product_crud.domain.models import (
    OperationKind,
    OperationOutcome,
    OutcomeKind,
    Product,
    ProductDraft,
)

__all__ = [
    "OperationKind",
    "OperationOutcome",
    "OutcomeKind",
    "Product",
    "ProductDraft",
]
