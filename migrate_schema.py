#!/usr/bin/env python3
"""Reconcile a live database with a YAML-declared schema.

Usage:
    python migrate_schema.py --schema schema.yaml --dsn postgresql://user@localhost/app
    python migrate_schema.py --schema schema.yaml --check   # print pending DDL, exit 1 on drift
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
import urllib.parse
from pathlib import Path

from schemasync.config import SchemaConfig, load_schema
from schemasync.driver import DBAPIDriver
from schemasync.errors import SchemaSyncError
from schemasync.migrate import Migrate, MigrateOptions

DSN_ENV = "SCHEMASYNC_DSN"

SCHEME_DIALECTS = {
    "postgres": "postgres",
    "postgresql": "postgres",
    "mysql": "mysql",
}


def dialect_from_dsn(dsn: str) -> str | None:
    scheme = urllib.parse.urlsplit(dsn).scheme.split("+", 1)[0]
    return SCHEME_DIALECTS.get(scheme)


def connect(dialect: str, dsn: str) -> DBAPIDriver:
    if dialect == "postgres":
        try:
            import psycopg
        except ImportError as exc:  # pragma: no cover
            raise SystemExit("psycopg is required. Install with: pip install 'schemasync[postgres]'") from exc
        return DBAPIDriver(psycopg.connect(dsn), dialect)

    if dialect == "mysql":
        try:
            import pymysql
        except ImportError as exc:  # pragma: no cover
            raise SystemExit("PyMySQL is required. Install with: pip install 'schemasync[mysql]'") from exc
        url = urllib.parse.urlsplit(dsn)
        conn = pymysql.connect(
            host=url.hostname or "localhost",
            port=url.port or 3306,
            user=urllib.parse.unquote(url.username or ""),
            password=urllib.parse.unquote(url.password or ""),
            database=url.path.lstrip("/"),
            autocommit=False,
        )
        return DBAPIDriver(conn, dialect)

    raise SystemExit(f"Unsupported dialect: {dialect}")


def resolve_options(config: SchemaConfig, args: argparse.Namespace) -> MigrateOptions:
    return MigrateOptions(
        drop_column=config.options.drop_column or args.drop_column,
        drop_index=config.options.drop_index or args.drop_index,
        global_unique_id=config.options.global_unique_id or args.global_unique_id,
    )


def resolve_dialect(config: SchemaConfig, args: argparse.Namespace, dsn: str) -> str:
    dialect = args.dialect or config.dialect or dialect_from_dsn(dsn)
    if not dialect:
        raise SystemExit(f"Cannot infer dialect from DSN {dsn!r}; pass --dialect")
    return dialect


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or alter database tables to match a YAML schema")
    parser.add_argument("--schema", default="schema.yaml", help="Declarative YAML schema")
    parser.add_argument("--dsn", default=os.environ.get(DSN_ENV), help=f"Database DSN (default: ${DSN_ENV})")
    parser.add_argument("--dialect", choices=sorted(set(SCHEME_DIALECTS.values())), help="Override dialect")
    parser.add_argument("--drop-column", action="store_true", help="Drop columns missing from the schema")
    parser.add_argument("--drop-index", action="store_true", help="Drop unique indexes no longer declared")
    parser.add_argument("--global-unique-id", action="store_true", help="Assign disjoint primary key ranges")
    parser.add_argument("--check", action="store_true", help="Print pending statements without applying them")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every statement")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if not args.dsn:
        print(f"No database DSN given; pass --dsn or set {DSN_ENV}", file=sys.stderr)
        return 2

    config = load_schema(Path(args.schema))
    dialect = resolve_dialect(config, args, args.dsn)
    options = resolve_options(config, args)
    driver = connect(dialect, args.dsn)
    migrate = Migrate(driver, **dataclasses.asdict(options))

    try:
        if args.check:
            statements = migrate.plan(*config.tables)
            for stmt in statements:
                print(f"{stmt};")
            if statements:
                print(f"[check] {len(statements)} pending statements", file=sys.stderr)
                return 1
            return 0
        migrate.create(*config.tables)
    except SchemaSyncError as exc:
        print(f"migration failed: {exc}", file=sys.stderr)
        return 1
    finally:
        driver.conn.close()

    print(f"Migrated {len(config.tables)} tables")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
