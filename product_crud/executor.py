"""
Transaction executor: runs one statement per operation and concludes it.

Every mutating operation ends in exactly one of commit (rows affected) or
rollback (no rows affected, or a storage failure) before control returns to
the caller, so the session is never left holding uncommitted changes. Storage
failures are returned as outcomes, not raised; only programming errors
propagate.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from product_crud.domain.models import OperationKind, OperationOutcome, Product, ProductDraft
from product_crud.errors import ExecutorBusyError, RollbackError, StorageError
from product_crud.infrastructure.session import PreparedStatement, StorageSession
from product_crud.reporter import FailureReporter
from product_crud.statements import StatementKind, get_template
from product_crud.utils.logging import get_logger

log = get_logger(__name__)


class ExecutorState(str, Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    EXECUTING = "executing"
    COMMITTING = "committing"
    ROLLING_BACK = "rolling_back"


class TransactionExecutor:
    """
    Exclusive owner of the storage session for the lifetime of a run.

    States: IDLE -> PREPARING -> EXECUTING -> {COMMITTING | ROLLING_BACK} -> IDLE.
    Read-all skips the last step: IDLE -> PREPARING -> EXECUTING -> IDLE.
    """

    def __init__(
        self, session: StorageSession, reporter: Optional[FailureReporter] = None
    ) -> None:
        self._session = session
        self._reporter = reporter or FailureReporter()
        self.state = ExecutorState.IDLE
        # Set once a rollback has failed; the server-side transaction state is unknown.
        self.integrity_compromised = False

    def _transition(self, state: ExecutorState) -> None:
        log.debug("Executor %s -> %s", self.state.value, state.value)
        self.state = state

    def _start(self, operation: OperationKind) -> None:
        if self.state is not ExecutorState.IDLE:
            raise ExecutorBusyError(
                f"Cannot start {operation.label} while executor is {self.state.value}"
            )
        self._transition(ExecutorState.PREPARING)

    def create(self, draft: ProductDraft) -> OperationOutcome:
        return self._mutate(
            OperationKind.CREATE,
            StatementKind.INSERT,
            {"name": draft.name, "price": draft.price, "quantity": draft.quantity},
        )

    def update(self, product_id: int, draft: ProductDraft) -> OperationOutcome:
        return self._mutate(
            OperationKind.UPDATE,
            StatementKind.UPDATE_BY_KEY,
            {
                "name": draft.name,
                "price": draft.price,
                "quantity": draft.quantity,
                "id": product_id,
            },
            key=product_id,
        )

    def delete(self, product_id: int) -> OperationOutcome:
        return self._mutate(
            OperationKind.DELETE,
            StatementKind.DELETE_BY_KEY,
            {"id": product_id},
            key=product_id,
        )

    def read_all(self) -> OperationOutcome:
        """
        Execute the select-all statement without opening a mutating transaction.

        The returned outcome carries a lazy, single-pass iterator of products in
        primary-key order; the caller is expected to drain it.
        """
        operation = OperationKind.READ_ALL
        self._start(operation)
        try:
            template = get_template(StatementKind.SELECT_ALL)
            stmt = self._session.prepare(template)
            self._transition(ExecutorState.EXECUTING)
            try:
                stmt.execute(template.bind({}))
            except StorageError:
                stmt.close()
                raise
        except StorageError as exc:
            return self._recover(operation, exc)
        finally:
            self._transition(ExecutorState.IDLE)
        return self._reporter.read_completed(self._products(stmt))

    def recover(self, operation: OperationKind, error: StorageError) -> OperationOutcome:
        """Roll back after a failure surfaced outside the executor (e.g. while fetching rows)."""
        self._start(operation)
        try:
            return self._recover(operation, error)
        finally:
            self._transition(ExecutorState.IDLE)

    def _products(self, stmt: PreparedStatement) -> Iterator[Product]:
        for row in stmt.rows():
            yield Product.from_row(row)

    def _mutate(
        self,
        operation: OperationKind,
        kind: StatementKind,
        values: Dict[str, Any],
        key: Optional[int] = None,
    ) -> OperationOutcome:
        self._start(operation)
        try:
            try:
                affected, key = self._execute(kind, values, key)
                if affected > 0:
                    self._transition(ExecutorState.COMMITTING)
                    self._session.commit()
                    return self._reporter.success(operation, key, affected)
            except StorageError as exc:
                return self._recover(operation, exc)
            return self._roll_back_no_effect(operation, key)
        finally:
            self._transition(ExecutorState.IDLE)

    def _execute(
        self, kind: StatementKind, values: Dict[str, Any], key: Optional[int]
    ) -> Tuple[int, Optional[int]]:
        template = get_template(kind)
        params = template.bind(values)
        with self._session.prepare(template) as stmt:
            self._transition(ExecutorState.EXECUTING)
            affected = stmt.execute(params)
            if template.returns_rows and affected > 0:
                row = stmt.fetchone()
                if row is not None:
                    key = row[0]
        return affected, key

    def _roll_back_no_effect(
        self, operation: OperationKind, key: Optional[int]
    ) -> OperationOutcome:
        self._transition(ExecutorState.ROLLING_BACK)
        try:
            self._session.rollback()
        except RollbackError as rollback_exc:
            self.integrity_compromised = True
            return self._reporter.critical(operation, rollback_exc)
        return self._reporter.no_effect(operation, key)

    def _recover(self, operation: OperationKind, error: StorageError) -> OperationOutcome:
        self._transition(ExecutorState.ROLLING_BACK)
        try:
            self._session.rollback()
        except RollbackError as rollback_exc:
            self.integrity_compromised = True
            return self._reporter.critical(operation, rollback_exc, cause=error)
        return self._reporter.storage_error(operation, error)


__all__ = ["ExecutorState", "TransactionExecutor"]
