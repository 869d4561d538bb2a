"""Compute the change-set that moves a live table toward its desired definition."""

from __future__ import annotations

import dataclasses

from schemasync.dialect import Dialect
from schemasync.introspect import LiveColumn, LiveTable
from schemasync.schema import Column, Table


@dataclasses.dataclass
class Index:
    name: str
    columns: list[Column]
    unique: bool = True


@dataclasses.dataclass
class ChangeSet:
    add_columns: list[Column] = dataclasses.field(default_factory=list)
    drop_columns: list[LiveColumn] = dataclasses.field(default_factory=list)
    modify_columns: list[Column] = dataclasses.field(default_factory=list)
    add_indexes: list[Index] = dataclasses.field(default_factory=list)
    drop_indexes: list[str] = dataclasses.field(default_factory=list)

    def has_changes(self) -> bool:
        return bool(
            self.add_columns
            or self.drop_columns
            or self.modify_columns
            or self.add_indexes
            or self.drop_indexes
        )

    def has_column_changes(self) -> bool:
        return bool(self.add_columns or self.drop_columns or self.modify_columns)


def needs_modify(dialect: Dialect, desired: Column, live: LiveColumn) -> bool:
    if dialect.column_class(desired) != live.type_class:
        return True
    return desired.nullable != live.nullable


def diff_table(
    dialect: Dialect,
    table: Table,
    live: LiveTable,
    drop_column: bool = False,
    drop_index: bool = False,
) -> ChangeSet:
    change = ChangeSet()
    desired_names = {c.name for c in table.columns}

    for column in table.columns:
        current = live.column(column.name)
        if current is None:
            change.add_columns.append(column)
            continue
        # Primary key columns are NOT NULL by construction and never rewritten.
        if not table.is_primary(column.name) and needs_modify(dialect, column, current):
            change.modify_columns.append(column)

        unique_indexes = live.unique_indexes(column.name)
        if column.unique and not unique_indexes and not table.is_primary(column.name):
            name = dialect.shorten(f"{table.name}_{column.name}")
            change.add_indexes.append(Index(name=name, columns=[column]))
        elif not column.unique and unique_indexes and drop_index:
            change.drop_indexes.extend(idx.name for idx in unique_indexes)

    if drop_column:
        for current in live.columns:
            if current.name not in desired_names:
                change.drop_columns.append(current)

    return change
