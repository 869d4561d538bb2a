"""Desired table model fed to the migration engine."""

from __future__ import annotations

import dataclasses
import enum
from typing import Any, Iterable


class FieldType(str, enum.Enum):
    BOOL = "bool"
    TIME = "time"
    JSON = "json"
    UUID = "uuid"
    BYTES = "bytes"
    ENUM = "enum"
    STRING = "string"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT = "int"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT = "uint"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    def is_integer(self) -> bool:
        return self.name.startswith(("INT", "UINT"))

    def is_float(self) -> bool:
        return self in (FieldType.FLOAT32, FieldType.FLOAT64)


class ReferenceOption(str, enum.Enum):
    NO_ACTION = "NO ACTION"
    RESTRICT = "RESTRICT"
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"


@dataclasses.dataclass(eq=False)
class Column:
    name: str
    type: FieldType
    nullable: bool = False
    unique: bool = False
    increment: bool = False
    default: Any = None
    size: int = 0
    enums: list[str] = dataclasses.field(default_factory=list)
    schema_type: dict[str, str] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(eq=False)
class ForeignKey:
    symbol: str
    columns: list[Column]
    ref_table: Table
    ref_columns: list[Column]
    on_delete: ReferenceOption = ReferenceOption.NO_ACTION


@dataclasses.dataclass(eq=False)
class Table:
    name: str
    columns: list[Column] = dataclasses.field(default_factory=list)
    primary_key: list[Column] = dataclasses.field(default_factory=list)
    foreign_keys: list[ForeignKey] = dataclasses.field(default_factory=list)

    def column(self, name: str) -> Column | None:
        for c in self.columns:
            if c.name == name:
                return c
        return None

    def add_columns(self, *columns: Column) -> Table:
        self.columns.extend(columns)
        return self

    def add_primary(self, column: Column) -> Table:
        """Add a column to the table and to its primary key."""
        self.columns.append(column)
        self.primary_key.append(column)
        return self

    def add_foreign_keys(self, *fks: ForeignKey) -> Table:
        self.foreign_keys.extend(fks)
        return self

    def is_primary(self, name: str) -> bool:
        return any(c.name == name for c in self.primary_key)

    def validate(self) -> None:
        names = [c.name for c in self.columns]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"Table {self.name} has duplicate columns: {dupes}")

        known = set(names)
        missing_pk = [c.name for c in self.primary_key if c.name not in known]
        if missing_pk:
            raise ValueError(f"Table {self.name} primary key references unknown columns: {missing_pk}")

        for c in self.columns:
            if c.increment and not self.is_primary(c.name):
                raise ValueError(f"{self.name}.{c.name} is an increment column outside the primary key")
            if c.type is FieldType.ENUM and not c.enums:
                raise ValueError(f"{self.name}.{c.name} is an enum column without values")

        for fk in self.foreign_keys:
            if len(fk.columns) != len(fk.ref_columns):
                raise ValueError(
                    f"Foreign key {fk.symbol} on {self.name} has {len(fk.columns)} columns "
                    f"but references {len(fk.ref_columns)}"
                )
            unknown = [c.name for c in fk.columns if c.name not in known]
            if unknown:
                raise ValueError(f"Foreign key {fk.symbol} on {self.name} uses unknown columns: {unknown}")
            ref_known = {c.name for c in fk.ref_table.columns}
            unknown = [c.name for c in fk.ref_columns if c.name not in ref_known]
            if unknown:
                raise ValueError(
                    f"Foreign key {fk.symbol} on {self.name} references unknown "
                    f"{fk.ref_table.name} columns: {unknown}"
                )


def column_names(columns: Iterable[Column]) -> list[str]:
    return [c.name for c in columns]
