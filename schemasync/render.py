"""Render tables and change-sets into dialect-correct DDL."""

from __future__ import annotations

from schemasync.diff import ChangeSet, Index
from schemasync.dialect import Dialect
from schemasync.schema import Column, ForeignKey, Table


class Renderer:
    def __init__(self, dialect: Dialect) -> None:
        self.dialect = dialect

    def quote_list(self, names: list[str]) -> str:
        return ", ".join(self.dialect.quote(n) for n in names)

    def column(self, column: Column, unique: bool = True) -> str:
        """Column definition. Pass ``unique=False`` where uniqueness is managed as a separate index."""
        parts = [self.dialect.quote(column.name), self.dialect.column_type(column)]
        if column.increment:
            parts.append(self.dialect.identity_clause(column))
        if unique and column.unique:
            parts.append("UNIQUE")
        parts.append("NULL" if column.nullable else "NOT NULL")
        if column.default is not None:
            parts.append(f"DEFAULT {self.dialect.default_literal(column.default)}")
        return " ".join(parts)

    def create_table(self, table: Table) -> str:
        """CREATE TABLE with columns in declared order and the primary key last.

        Foreign keys are left out; they are added once every table exists.
        """
        defs = [self.column(c) for c in table.columns]
        if table.primary_key:
            defs.append(f"PRIMARY KEY({self.quote_list([c.name for c in table.primary_key])})")
        return (
            f"CREATE TABLE IF NOT EXISTS {self.dialect.quote(table.name)}"
            f"({', '.join(defs)}){self.dialect.table_options}"
        )

    def alter_table(self, table: str, change: ChangeSet) -> list[str]:
        """Statements for the column and index parts of a change-set.

        Column changes share one ALTER TABLE in add, drop, modify order. Unique
        index creation follows as separate statements. Index removal needs a
        catalog lookup and is rendered by ``drop_unique``.
        """
        stmts: list[str] = []
        clauses: list[str] = []
        for c in change.add_columns:
            clauses.append(f"ADD COLUMN {self.column(c)}")
        for c in change.drop_columns:
            clauses.append(f"DROP COLUMN {self.dialect.quote(c.name)}")
        for c in change.modify_columns:
            clauses.extend(self.dialect.modify_column(c, self.column(c, unique=False)))
        if clauses:
            stmts.append(f"ALTER TABLE {self.dialect.quote(table)} {', '.join(clauses)}")
        for idx in change.add_indexes:
            stmts.append(self.create_index(table, idx))
        return stmts

    def create_index(self, table: str, idx: Index) -> str:
        kind = "UNIQUE INDEX" if idx.unique else "INDEX"
        return (
            f"CREATE {kind} {self.dialect.quote(idx.name)} "
            f"ON {self.dialect.quote(table)}({self.quote_list([c.name for c in idx.columns])})"
        )

    def drop_unique(self, table: str, name: str, constraint: bool) -> str:
        return self.dialect.drop_unique(table, name, constraint)

    def foreign_key_symbol(self, fk: ForeignKey) -> str:
        return self.dialect.shorten(fk.symbol)

    def add_foreign_keys(self, table: str, fks: list[ForeignKey]) -> str:
        clauses = []
        for fk in fks:
            clauses.append(
                f"ADD CONSTRAINT {self.dialect.quote(self.foreign_key_symbol(fk))} "
                f"FOREIGN KEY({self.quote_list([c.name for c in fk.columns])}) "
                f"REFERENCES {self.dialect.quote(fk.ref_table.name)}"
                f"({self.quote_list([c.name for c in fk.ref_columns])}) "
                f"ON DELETE {fk.on_delete.value}"
            )
        return f"ALTER TABLE {self.dialect.quote(table)} {', '.join(clauses)}"
