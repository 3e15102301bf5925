"""
Statement catalog: the fixed parameterized statements the engine issues.

Each template knows its named parameters in positional order, so callers bind
by name and never depend on placeholder positions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

TABLE_NAME = "products"

SCHEMA_DDL = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id BIGSERIAL PRIMARY KEY,
    name VARCHAR(255) NOT NULL CHECK (name <> ''),
    price NUMERIC(10, 2) NOT NULL CHECK (price >= 0),
    quantity INTEGER NOT NULL CHECK (quantity >= 0)
);
"""


class StatementKind(str, Enum):
    INSERT = "insert"
    SELECT_ALL = "select_all"
    UPDATE_BY_KEY = "update_by_key"
    DELETE_BY_KEY = "delete_by_key"


@dataclass(frozen=True)
class StatementTemplate:
    kind: StatementKind
    sql: str
    params: Tuple[str, ...] = ()
    returns_rows: bool = False

    def bind(self, values: Mapping[str, Any]) -> Tuple[Any, ...]:
        """
        Order named values into the positional parameters of the statement.

        Raises
        ------
        ValueError
            If a parameter is missing or an unknown name is supplied.
        """
        missing = [name for name in self.params if name not in values]
        unexpected = sorted(set(values) - set(self.params))
        if missing or unexpected:
            raise ValueError(
                f"Cannot bind {self.kind.value}: missing={missing} unexpected={unexpected}"
            )
        return tuple(values[name] for name in self.params)


CATALOG: Dict[StatementKind, StatementTemplate] = {
    StatementKind.INSERT: StatementTemplate(
        kind=StatementKind.INSERT,
        sql=f"INSERT INTO {TABLE_NAME} (name, price, quantity) VALUES (%s, %s, %s) RETURNING id",
        params=("name", "price", "quantity"),
        returns_rows=True,
    ),
    StatementKind.SELECT_ALL: StatementTemplate(
        kind=StatementKind.SELECT_ALL,
        sql=f"SELECT id, name, price, quantity FROM {TABLE_NAME} ORDER BY id",
        returns_rows=True,
    ),
    StatementKind.UPDATE_BY_KEY: StatementTemplate(
        kind=StatementKind.UPDATE_BY_KEY,
        sql=f"UPDATE {TABLE_NAME} SET name = %s, price = %s, quantity = %s WHERE id = %s",
        params=("name", "price", "quantity", "id"),
    ),
    StatementKind.DELETE_BY_KEY: StatementTemplate(
        kind=StatementKind.DELETE_BY_KEY,
        sql=f"DELETE FROM {TABLE_NAME} WHERE id = %s",
        params=("id",),
    ),
}


def get_template(kind: StatementKind) -> StatementTemplate:
    return CATALOG[kind]


__all__ = [
    "CATALOG",
    "SCHEMA_DDL",
    "StatementKind",
    "StatementTemplate",
    "TABLE_NAME",
    "get_template",
]
