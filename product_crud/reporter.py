"""
Failure reporter: turns every operation result into an `OperationOutcome`
and logs it at the severity of its class.

Severity by outcome kind:
- success: INFO
- no effect (zero rows matched): WARNING, the transaction is rolled back but
  nothing went wrong
- input error: WARNING
- storage error: ERROR
- critical (rollback failed): CRITICAL
- connection error: CRITICAL
"""

from __future__ import annotations

import logging
from typing import Optional

from product_crud.domain.models import OperationKind, OperationOutcome, OutcomeKind
from product_crud.errors import ConnectError, RollbackError, StorageError
from product_crud.utils.logging import get_logger

log = get_logger(__name__)

_LEVELS = {
    OutcomeKind.SUCCESS: logging.INFO,
    OutcomeKind.NO_EFFECT: logging.WARNING,
    OutcomeKind.INPUT_ERROR: logging.WARNING,
    OutcomeKind.STORAGE_ERROR: logging.ERROR,
    OutcomeKind.CRITICAL_ERROR: logging.CRITICAL,
    OutcomeKind.CONNECTION_ERROR: logging.CRITICAL,
}


class FailureReporter:
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._log = logger or log

    def _emit(self, outcome: OperationOutcome, **extra) -> OperationOutcome:
        self._log.log(
            _LEVELS[outcome.kind],
            "[%s] %s",
            outcome.kind.value.upper(),
            outcome.message,
            extra={"operation": outcome.operation.value, "outcome": outcome.kind.value, **extra},
        )
        return outcome

    def success(
        self, operation: OperationKind, key: Optional[int], rows_affected: int
    ) -> OperationOutcome:
        return self._emit(
            OperationOutcome(
                operation=operation,
                kind=OutcomeKind.SUCCESS,
                message=(
                    f"{operation.label} succeeded for ID {key} "
                    f"({rows_affected} row(s) affected); transaction committed."
                ),
                key=key,
                rows_affected=rows_affected,
            ),
            key=key,
            rows_affected=rows_affected,
        )

    def read_completed(self, rows) -> OperationOutcome:
        outcome = OperationOutcome(
            operation=OperationKind.READ_ALL,
            kind=OutcomeKind.SUCCESS,
            message="Products retrieved.",
            rows=rows,
        )
        self._log.debug("Read-all statement executed", extra={"operation": outcome.operation.value})
        return outcome

    def exit_requested(self) -> OperationOutcome:
        return OperationOutcome(
            operation=OperationKind.EXIT,
            kind=OutcomeKind.SUCCESS,
            message="Exiting application. Goodbye!",
            exit_requested=True,
        )

    def no_effect(self, operation: OperationKind, key: Optional[int]) -> OperationOutcome:
        if key is None:
            message = f"{operation.label} had no effect. Transaction rolled back."
        else:
            message = f"No product found with ID {key}. Transaction rolled back."
        return self._emit(
            OperationOutcome(
                operation=operation, kind=OutcomeKind.NO_EFFECT, message=message, key=key
            ),
            key=key,
        )

    def input_error(self, operation: OperationKind, detail: str) -> OperationOutcome:
        return self._emit(
            OperationOutcome(
                operation=operation,
                kind=OutcomeKind.INPUT_ERROR,
                message=f"Invalid input for {operation.label}: {detail}",
            )
        )

    def storage_error(self, operation: OperationKind, error: StorageError) -> OperationOutcome:
        return self._emit(
            OperationOutcome(
                operation=operation,
                kind=OutcomeKind.STORAGE_ERROR,
                message=f"{operation.label} failed: {error}. Transaction rolled back.",
            ),
            error_type=type(error).__name__,
        )

    def critical(
        self,
        operation: OperationKind,
        rollback_error: RollbackError,
        cause: Optional[StorageError] = None,
    ) -> OperationOutcome:
        reason = f"{operation.label} failed: {cause}. " if cause is not None else ""
        return self._emit(
            OperationOutcome(
                operation=operation,
                kind=OutcomeKind.CRITICAL_ERROR,
                message=(
                    f"{reason}Could not execute rollback: {rollback_error}. "
                    "Session state is no longer reliable."
                ),
            ),
            error_type=type(cause).__name__ if cause is not None else None,
        )

    def connection_error(self, error: ConnectError) -> OperationOutcome:
        return self._emit(
            OperationOutcome(
                operation=OperationKind.EXIT,
                kind=OutcomeKind.CONNECTION_ERROR,
                message=f"Could not connect to the database: {error}",
                exit_requested=True,
            )
        )


__all__ = ["FailureReporter"]
