"""
Operation dispatcher: the request/response contract between the menu and the
transaction executor.

Raw text arguments are parsed and validated here. A request that fails
validation is answered with an input-error outcome and never reaches the
executor, so no statement is issued and no transaction is opened.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, Tuple

from pydantic import ValidationError

from product_crud.domain.models import OperationKind, OperationOutcome, ProductDraft
from product_crud.errors import StorageError
from product_crud.executor import TransactionExecutor
from product_crud.reporter import FailureReporter

_ARITY: Dict[OperationKind, Tuple[str, ...]] = {
    OperationKind.CREATE: ("name", "price", "quantity"),
    OperationKind.READ_ALL: (),
    OperationKind.UPDATE: ("id", "name", "price", "quantity"),
    OperationKind.DELETE: ("id",),
    OperationKind.EXIT: (),
}


@dataclass(frozen=True)
class OperationRequest:
    kind: OperationKind
    args: Tuple[str, ...] = ()


class InputError(ValueError):
    """Raised internally when a request argument cannot be parsed."""


_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def _parse_id(text: str) -> int:
    # int() alone would also accept literal forms such as "1_0"
    stripped = text.strip()
    if not _ID_PATTERN.fullmatch(stripped):
        raise InputError(f"product ID must be an integer, got {text!r}")
    return int(stripped)


def _parse_draft(name: str, price: str, quantity: str) -> ProductDraft:
    try:
        return ProductDraft.model_validate(
            {"name": name, "price": price.strip(), "quantity": quantity.strip()}
        )
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise InputError(details) from None


class OperationDispatcher:
    """
    Maps each validated operation request to one executor invocation.

    The handler table covers every `OperationKind`; there is no default case.
    """

    def __init__(
        self, executor: TransactionExecutor, reporter: FailureReporter | None = None
    ) -> None:
        self._executor = executor
        self._reporter = reporter or FailureReporter()
        self._handlers: Dict[OperationKind, Callable[[Tuple[str, ...]], OperationOutcome]] = {
            OperationKind.CREATE: self._create,
            OperationKind.READ_ALL: self._read_all,
            OperationKind.UPDATE: self._update,
            OperationKind.DELETE: self._delete,
            OperationKind.EXIT: self._exit,
        }

    @property
    def executor(self) -> TransactionExecutor:
        return self._executor

    def dispatch(self, request: OperationRequest) -> OperationOutcome:
        expected = _ARITY[request.kind]
        if len(request.args) != len(expected):
            return self._reporter.input_error(
                request.kind,
                f"expected {len(expected)} argument(s) {expected}, got {len(request.args)}",
            )
        try:
            return self._handlers[request.kind](request.args)
        except InputError as exc:
            return self._reporter.input_error(request.kind, str(exc))

    def _create(self, args: Tuple[str, ...]) -> OperationOutcome:
        name, price, quantity = args
        return self._executor.create(_parse_draft(name, price, quantity))

    def _update(self, args: Tuple[str, ...]) -> OperationOutcome:
        product_id, name, price, quantity = args
        parsed_id = _parse_id(product_id)
        draft = _parse_draft(name, price, quantity)
        return self._executor.update(parsed_id, draft)

    def _delete(self, args: Tuple[str, ...]) -> OperationOutcome:
        (product_id,) = args
        return self._executor.delete(_parse_id(product_id))

    def _read_all(self, args: Tuple[str, ...]) -> OperationOutcome:
        outcome = self._executor.read_all()
        if not outcome.success:
            return outcome
        try:
            products = tuple(outcome.rows)
        except StorageError as exc:
            return self._executor.recover(OperationKind.READ_ALL, exc)
        return replace(outcome, rows=products)

    def _exit(self, args: Tuple[str, ...]) -> OperationOutcome:
        return self._reporter.exit_requested()


__all__ = ["OperationDispatcher", "OperationRequest"]
