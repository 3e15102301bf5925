"""
Domain models for the product CRUD engine.

Defines the product schema aligned with `statements.SCHEMA_DDL`, the
caller-supplied draft used for create/update, and the operation/outcome
vocabulary shared by the dispatcher, executor and failure reporter.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, Tuple

from pydantic import BaseModel, Field


class Product(BaseModel):
    """
    Representation of a single row in the `products` table.
    """

    id: int = Field(..., description="Primary key, assigned by storage on insert.")
    name: str = Field(..., description="Product name.")
    price: Decimal = Field(..., description="Unit price.")
    quantity: int = Field(..., description="Units in stock.")

    model_config = {
        "frozen": True,
    }

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "Product":
        """Build a product from an `(id, name, price, quantity)` row."""
        product_id, name, price, quantity = row
        return cls(id=product_id, name=name, price=price, quantity=quantity)


class ProductDraft(BaseModel):
    """
    Field values supplied for a create or update, validated before any
    statement is issued.
    """

    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, allow_inf_nan=False)
    quantity: int = Field(..., ge=0)

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }


class OperationKind(str, Enum):
    """The five operations a caller can select."""

    CREATE = "create"
    READ_ALL = "read_all"
    UPDATE = "update"
    DELETE = "delete"
    EXIT = "exit"

    @property
    def label(self) -> str:
        return _OPERATION_LABELS[self]


_OPERATION_LABELS = {
    OperationKind.CREATE: "Create Product",
    OperationKind.READ_ALL: "Read All Products",
    OperationKind.UPDATE: "Update Product",
    OperationKind.DELETE: "Delete Product",
    OperationKind.EXIT: "Exit",
}


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    NO_EFFECT = "no_effect"
    INPUT_ERROR = "input_error"
    STORAGE_ERROR = "storage_error"
    CRITICAL_ERROR = "critical_error"
    CONNECTION_ERROR = "connection_error"


@dataclass(frozen=True)
class OperationOutcome:
    """
    Result of one dispatched operation.

    `rows` is only populated for read-all; straight out of the executor it is
    a lazy iterator, the dispatcher replaces it with a materialized tuple.
    """

    operation: OperationKind
    kind: OutcomeKind
    message: str
    key: Optional[int] = None
    rows_affected: int = 0
    rows: Iterable[Product] = ()
    exit_requested: bool = False

    @property
    def success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def as_tuple(self) -> Tuple[bool, str]:
        return self.success, self.message


__all__ = [
    "OperationKind",
    "OperationOutcome",
    "OutcomeKind",
    "Product",
    "ProductDraft",
]
