"""
Interactive text menu for the product CRUD engine.

Collects a menu selection and the raw field values for it, hands them to the
dispatcher as an `OperationRequest`, and renders the outcome. All parsing and
validation happens in the dispatcher; this module only talks to the console.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, Tuple

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from product_crud.config import Settings
from product_crud.dispatcher import OperationDispatcher, OperationRequest
from product_crud.domain.models import OperationKind, OperationOutcome, OutcomeKind, Product
from product_crud.errors import ConnectError
from product_crud.executor import TransactionExecutor
from product_crud.infrastructure.session import StorageSession, build_dsn
from product_crud.reporter import FailureReporter
from product_crud.utils.logging import get_logger

log = get_logger(__name__)

Prompt = Callable[[str], str]

MENU_SELECTIONS: Dict[str, OperationKind] = {
    "1": OperationKind.CREATE,
    "2": OperationKind.READ_ALL,
    "3": OperationKind.UPDATE,
    "4": OperationKind.DELETE,
    "5": OperationKind.EXIT,
}

FIELD_PROMPTS: Dict[OperationKind, Tuple[str, ...]] = {
    OperationKind.CREATE: ("Enter Product Name", "Enter Price", "Enter Quantity"),
    OperationKind.UPDATE: (
        "Enter Product ID to update",
        "Enter New Product Name",
        "Enter New Price",
        "Enter New Quantity",
    ),
    OperationKind.DELETE: ("Enter Product ID to delete",),
}

_OUTCOME_STYLES = {
    OutcomeKind.SUCCESS: ("green", "SUCCESS"),
    OutcomeKind.NO_EFFECT: ("yellow", "WARNING"),
    OutcomeKind.INPUT_ERROR: ("yellow", "ERROR"),
    OutcomeKind.STORAGE_ERROR: ("red", "ERROR"),
    OutcomeKind.CRITICAL_ERROR: ("bold red", "CRITICAL"),
    OutcomeKind.CONNECTION_ERROR: ("bold red", "FATAL ERROR"),
}


def _default_prompt(text: str) -> str:
    return typer.prompt(text, type=str)


def print_products(console: Console, products: Iterable[Product]) -> None:
    """Render products as a rich table."""
    products = list(products)
    if not products:
        console.print("[yellow]No products found.[/yellow]")
        return

    table = Table(title="All Products in Database", box=box.ROUNDED)
    table.add_column("ID", justify="right", style="cyan", no_wrap=True)
    table.add_column("Name", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Quantity", justify="right", style="blue")

    for product in products:
        table.add_row(
            str(product.id),
            escape(product.name),
            f"${product.price:,.2f}",
            str(product.quantity),
        )

    console.print(table)


def print_outcome(console: Console, outcome: OperationOutcome) -> None:
    if outcome.operation is OperationKind.READ_ALL and outcome.success:
        print_products(console, outcome.rows)
        return
    if outcome.operation is OperationKind.EXIT and outcome.success:
        console.print(outcome.message)
        return
    style, tag = _OUTCOME_STYLES[outcome.kind]
    console.print(f"[{style}]\\[{tag}][/{style}] {escape(outcome.message)}")


class MenuLoop:
    def __init__(
        self,
        dispatcher: OperationDispatcher,
        console: Optional[Console] = None,
        prompt: Optional[Prompt] = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._console = console or Console()
        self._prompt = prompt or _default_prompt

    def show_menu(self) -> None:
        self._console.rule("Product CRUD Menu")
        self._console.print("1. Create New Product")
        self._console.print("2. Read All Products")
        self._console.print("3. Update Product Details")
        self._console.print("4. Delete Product")
        self._console.print("5. Exit")

    def run_once(self) -> Optional[OperationOutcome]:
        """Handle one menu selection; returns None for an unknown selection."""
        self.show_menu()
        choice = self._prompt("Enter your choice").strip()
        kind = MENU_SELECTIONS.get(choice)
        if kind is None:
            self._console.print(
                "[yellow]Invalid choice. Please enter a number between 1 and 5.[/yellow]"
            )
            return None

        if kind in FIELD_PROMPTS:
            self._console.print(f"\n--- {kind.label} ---")
        args = tuple(self._prompt(label) for label in FIELD_PROMPTS.get(kind, ()))
        outcome = self._dispatcher.dispatch(OperationRequest(kind=kind, args=args))
        print_outcome(self._console, outcome)
        return outcome

    def run(self) -> None:
        while True:
            outcome = self.run_once()
            if outcome is not None and outcome.exit_requested:
                break


def run_menu(
    settings: Settings,
    console: Optional[Console] = None,
    prompt: Optional[Prompt] = None,
) -> int:
    """
    Open the storage session, run the menu until exit, and close the session.

    Returns the process exit code: 0 on a normal exit, 1 if the initial
    connection failed (no operation is attempted in that case).
    """
    console = console or Console()
    reporter = FailureReporter()
    session = StorageSession()
    try:
        try:
            session.connect(build_dsn(settings), attempts=settings.db_connect_attempts)
        except ConnectError as exc:
            print_outcome(console, reporter.connection_error(exc))
            return 1
        console.print("Database connection established. AutoCommit set to false.")

        executor = TransactionExecutor(session, reporter)
        MenuLoop(OperationDispatcher(executor, reporter), console=console, prompt=prompt).run()
        if executor.integrity_compromised:
            log.critical("Session integrity was compromised during this run")
        return 0
    finally:
        session.close()


__all__ = [
    "FIELD_PROMPTS",
    "MENU_SELECTIONS",
    "MenuLoop",
    "print_outcome",
    "print_products",
    "run_menu",
]
