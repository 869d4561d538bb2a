"""Read the live schema through the dialect's catalog queries."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from schemasync.dialect import Dialect
from schemasync.driver import Tx

logger = logging.getLogger(__name__)

FOREIGN_KEY = "FOREIGN KEY"
UNIQUE = "UNIQUE"


@dataclasses.dataclass
class LiveColumn:
    name: str
    raw_type: str
    type_class: str
    nullable: bool
    has_default: bool


@dataclasses.dataclass
class LiveIndex:
    name: str
    columns: list[str]
    primary: bool
    unique: bool


@dataclasses.dataclass
class LiveTable:
    name: str
    columns: list[LiveColumn]
    indexes: list[LiveIndex]

    def column(self, name: str) -> LiveColumn | None:
        for c in self.columns:
            if c.name == name:
                return c
        return None

    def unique_indexes(self, column: str) -> list[LiveIndex]:
        """Non-primary unique indexes covering exactly ``column``."""
        return [i for i in self.indexes if i.unique and not i.primary and i.columns == [column]]

    def primary_key(self) -> list[str]:
        for idx in self.indexes:
            if idx.primary:
                return list(idx.columns)
        return []


def parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("t", "true", "yes", "y", "1")
    return bool(value)


def has_default(value: Any) -> bool:
    if value is None:
        return False
    return not (isinstance(value, str) and value.strip().upper() == "NULL")


class Introspector:
    def __init__(self, tx: Tx, dialect: Dialect) -> None:
        self.tx = tx
        self.dialect = dialect

    def _count(self, query: str, *args: Any) -> int:
        rows = self.tx.query(query, args)
        if not rows:
            return 0
        return int(rows[0][0])

    def server_version(self) -> str:
        rows = self.tx.query(self.dialect.version_query)
        if not rows:
            raise ValueError("Server version query returned no rows")
        return str(rows[0][-1])

    def tables(self) -> list[str]:
        return [str(row[0]) for row in self.tx.query(self.dialect.tables_query)]

    def table_exists(self, name: str) -> bool:
        return self._count(self.dialect.table_exists_query, name) > 0

    def constraint_exists(self, kind: str, name: str) -> bool:
        return self._count(self.dialect.constraint_exists_query, kind, name) > 0

    def table_columns(self, name: str) -> list[LiveColumn]:
        columns: list[LiveColumn] = []
        for col_name, data_type, nullable, default, *extra in self.tx.query(self.dialect.columns_query, (name,)):
            raw_type = self.dialect.live_type(str(data_type), *extra)
            columns.append(
                LiveColumn(
                    name=str(col_name),
                    raw_type=raw_type,
                    type_class=self.dialect.type_class(raw_type),
                    nullable=parse_flag(nullable),
                    has_default=has_default(default),
                )
            )
        return columns

    def table_indexes(self, name: str) -> list[LiveIndex]:
        """Group catalog rows by index name, ordering columns by their position."""
        grouped: dict[str, LiveIndex] = {}
        positions: dict[str, list[tuple[int, str]]] = {}
        for idx_name, col_name, primary, unique, seq in self.tx.query(self.dialect.indexes_query, (name,)):
            idx_name = str(idx_name)
            if idx_name not in grouped:
                grouped[idx_name] = LiveIndex(
                    name=idx_name,
                    columns=[],
                    primary=parse_flag(primary),
                    unique=parse_flag(unique),
                )
                positions[idx_name] = []
            positions[idx_name].append((int(seq or 0), str(col_name)))
        for idx_name, idx in grouped.items():
            idx.columns = [col for _, col in sorted(positions[idx_name], key=lambda p: p[0])]
        return list(grouped.values())

    def table(self, name: str) -> LiveTable:
        return LiveTable(name=name, columns=self.table_columns(name), indexes=self.table_indexes(name))
