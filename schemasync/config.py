"""Load declarative schema documents written in YAML."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any

import yaml

from schemasync.migrate import MigrateOptions
from schemasync.schema import Column, FieldType, ForeignKey, ReferenceOption, Table


@dataclasses.dataclass
class SchemaConfig:
    tables: list[Table]
    options: MigrateOptions
    dialect: str | None = None


def parse_field_type(value: str, where: str) -> FieldType:
    try:
        return FieldType(str(value).lower())
    except ValueError:
        raise ValueError(f"Unknown column type {value!r} for {where}") from None


def parse_on_delete(value: str | None, where: str) -> ReferenceOption:
    if value is None:
        return ReferenceOption.NO_ACTION
    normalized = " ".join(str(value).replace("_", " ").upper().split())
    try:
        return ReferenceOption(normalized)
    except ValueError:
        raise ValueError(f"Unknown ON DELETE action {value!r} for {where}") from None


def parse_column(spec: dict, table: str) -> Column:
    name = spec.get("name")
    if not name:
        raise ValueError(f"Column without a name in table {table}")
    where = f"{table}.{name}"
    return Column(
        name=name,
        type=parse_field_type(spec.get("type", ""), where),
        nullable=bool(spec.get("nullable", False)),
        unique=bool(spec.get("unique", False)),
        increment=bool(spec.get("increment", False)),
        default=spec.get("default"),
        size=int(spec.get("size", 0)),
        enums=[str(v) for v in spec.get("enums", [])],
        schema_type={str(k): str(v) for k, v in (spec.get("schema_type") or {}).items()},
    )


def pick_columns(table: Table, names: list[str], where: str) -> list[Column]:
    out: list[Column] = []
    for name in names:
        col = table.column(name)
        if col is None:
            raise ValueError(f"{where} references unknown column {table.name}.{name}")
        out.append(col)
    return out


def parse_tables(specs: list[dict]) -> list[Table]:
    tables: dict[str, Table] = {}
    for spec in specs:
        name = spec.get("name")
        if not name:
            raise ValueError("Table without a name in schema document")
        if name in tables:
            raise ValueError(f"Duplicate table in schema document: {name}")
        table = Table(name=name)
        table.add_columns(*(parse_column(c, name) for c in spec.get("columns", [])))
        table.primary_key = pick_columns(table, list(spec.get("primary_key", [])), f"Primary key of {name}")
        tables[name] = table

    # References resolve after every table is known, so forward and self references work.
    for spec in specs:
        table = tables[spec["name"]]
        for fk_spec in spec.get("foreign_keys", []):
            symbol = fk_spec.get("symbol")
            if not symbol:
                raise ValueError(f"Foreign key without a symbol in table {table.name}")
            where = f"Foreign key {symbol}"
            ref_table = tables.get(fk_spec.get("ref_table", ""))
            if ref_table is None:
                raise ValueError(f"{where} references unknown table {fk_spec.get('ref_table')!r}")
            table.add_foreign_keys(
                ForeignKey(
                    symbol=symbol,
                    columns=pick_columns(table, list(fk_spec.get("columns", [])), where),
                    ref_table=ref_table,
                    ref_columns=pick_columns(ref_table, list(fk_spec.get("ref_columns", [])), where),
                    on_delete=parse_on_delete(fk_spec.get("on_delete"), where),
                )
            )

    for table in tables.values():
        table.validate()
    return list(tables.values())


def parse_schema(doc: dict[str, Any]) -> SchemaConfig:
    options = doc.get("options") or {}
    return SchemaConfig(
        tables=parse_tables(doc.get("tables") or []),
        options=MigrateOptions(
            drop_column=bool(options.get("drop_column", False)),
            drop_index=bool(options.get("drop_index", False)),
            global_unique_id=bool(options.get("global_unique_id", False)),
        ),
        dialect=doc.get("dialect"),
    )


def load_schema(path: Path) -> SchemaConfig:
    doc = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(doc, dict):
        raise ValueError(f"Schema document {path} must be a mapping")
    return parse_schema(doc)
