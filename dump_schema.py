#!/usr/bin/env python3
"""Dump live tables to a YAML schema document readable by migrate_schema.py.

Raw catalog types are kept as schema_type overrides, so migrating the dumped
document against the same database is a no-op.

Usage:
    python dump_schema.py --dsn postgresql://user@localhost/app [--out schema.yaml] [--table users ...]
"""

from __future__ import annotations

import argparse
import os
import re
import sys
from pathlib import Path

import yaml

from migrate_schema import DSN_ENV, SCHEME_DIALECTS, connect, dialect_from_dsn
from schemasync import dialect
from schemasync.dialect import get_dialect
from schemasync.introspect import Introspector, LiveColumn, LiveTable

CLASS_FIELD_TYPES = {
    dialect.INTEGER: "int",
    dialect.FLOAT: "float64",
    dialect.DECIMAL: "float64",
    dialect.STRING: "string",
    dialect.BOOL: "bool",
    dialect.TIME: "time",
    dialect.BYTES: "bytes",
    dialect.JSON: "json",
    dialect.UUID: "uuid",
    dialect.ENUM: "enum",
}


def parse_enum_values(raw_type: str) -> list[str]:
    m = re.match(r"^\s*enum\((.*)\)\s*$", raw_type, flags=re.I | re.S)
    if not m:
        return []
    return [v.replace("''", "'") for v in re.findall(r"'((?:[^']|'')*)'", m.group(1))]


def column_spec(dialect_name: str, live: LiveTable, column: LiveColumn) -> dict:
    field_type = CLASS_FIELD_TYPES.get(column.type_class, "string")
    enums = parse_enum_values(column.raw_type) if field_type == "enum" else []
    if field_type == "enum" and not enums:
        field_type = "string"

    spec: dict = {"name": column.name, "type": field_type}
    if column.nullable:
        spec["nullable"] = True
    if live.unique_indexes(column.name):
        spec["unique"] = True
    pk = live.primary_key()
    # A lone integer primary key is assumed to be an identity column.
    if pk == [column.name] and column.type_class == dialect.INTEGER:
        spec["increment"] = True
    if enums:
        spec["enums"] = enums
    spec["schema_type"] = {dialect_name: column.raw_type}
    return spec


def table_spec(dialect_name: str, live: LiveTable) -> dict:
    spec: dict = {
        "name": live.name,
        "columns": [column_spec(dialect_name, live, c) for c in live.columns],
    }
    pk = live.primary_key()
    if pk:
        spec["primary_key"] = pk
    return spec


def dump_document(dialect_name: str, tables: list[LiveTable]) -> str:
    doc = {
        "dialect": dialect_name,
        "tables": [table_spec(dialect_name, t) for t in tables],
    }
    return yaml.safe_dump(doc, sort_keys=False, default_flow_style=False)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Dump live tables to a YAML schema document")
    parser.add_argument("--dsn", default=os.environ.get(DSN_ENV), help=f"Database DSN (default: ${DSN_ENV})")
    parser.add_argument("--dialect", choices=sorted(set(SCHEME_DIALECTS.values())), help="Override dialect")
    parser.add_argument("--out", default="schema.yaml", help="Output YAML file")
    parser.add_argument("--table", action="append", default=[], help="Table to dump (repeatable, default: all)")
    args = parser.parse_args(argv)

    if not args.dsn:
        print(f"No database DSN given; pass --dsn or set {DSN_ENV}", file=sys.stderr)
        return 2
    dialect_name = args.dialect or dialect_from_dsn(args.dsn)
    if not dialect_name:
        print(f"Cannot infer dialect from DSN {args.dsn!r}; pass --dialect", file=sys.stderr)
        return 2

    driver = connect(dialect_name, args.dsn)
    try:
        tx = driver.begin()
        try:
            inspect = Introspector(tx, get_dialect(dialect_name))
            names = args.table or inspect.tables()
            tables: list[LiveTable] = []
            for i, name in enumerate(names, 1):
                print(f"  [{i}/{len(names)}] {name}", flush=True)
                if not inspect.table_exists(name):
                    print(f"  {name}: table not found", file=sys.stderr)
                    return 1
                tables.append(inspect.table(name))
        finally:
            tx.rollback()
    finally:
        driver.conn.close()

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(dump_document(dialect_name, tables), encoding="utf-8")
    print(f"\nTotal: {len(tables)} tables written to {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
