"""PostgreSQL dialect."""

from __future__ import annotations

from typing import Any

from schemasync import dialect
from schemasync.schema import Column, FieldType

# Server versions are compared as reported by server_version_num.
MIN_VERSION = 100000

# Strings above this size are stored as text instead of varchar.
MAX_CHAR_SIZE = 10 << 20


class Postgres(dialect.Dialect):
    name = "postgres"
    quote_char = '"'
    max_identifier_length = 63

    version_query = "SHOW server_version_num"
    tables_query = (
        'SELECT "table_name" FROM INFORMATION_SCHEMA.TABLES '
        "WHERE \"table_schema\" = CURRENT_SCHEMA() AND \"table_type\" = 'BASE TABLE' "
        'ORDER BY "table_name"'
    )
    table_exists_query = (
        'SELECT COUNT(*) FROM INFORMATION_SCHEMA.TABLES '
        'WHERE "table_schema" = CURRENT_SCHEMA() AND "table_name" = %s'
    )
    columns_query = (
        'SELECT "column_name", "data_type", "is_nullable", "column_default", "udt_name" '
        'FROM INFORMATION_SCHEMA.COLUMNS '
        'WHERE "table_schema" = CURRENT_SCHEMA() AND "table_name" = %s '
        'ORDER BY "ordinal_position"'
    )
    indexes_query = (
        "SELECT i.relname AS index_name, a.attname AS column_name, "
        "idx.indisprimary AS \"primary\", idx.indisunique AS \"unique\", "
        "array_position(idx.indkey::int2[], a.attnum) AS seq_in_index "
        "FROM pg_class t "
        "JOIN pg_index idx ON t.oid = idx.indrelid "
        "JOIN pg_class i ON i.oid = idx.indexrelid "
        "JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = ANY(idx.indkey) "
        "JOIN pg_namespace n ON n.oid = t.relnamespace "
        "WHERE n.nspname = CURRENT_SCHEMA() AND t.relname = %s "
        "ORDER BY index_name, seq_in_index"
    )
    constraint_exists_query = (
        'SELECT COUNT(*) FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS '
        'WHERE "table_schema" = CURRENT_SCHEMA() AND "constraint_type" = %s AND "constraint_name" = %s'
    )

    type_classes = {
        "smallint": dialect.INTEGER,
        "integer": dialect.INTEGER,
        "bigint": dialect.INTEGER,
        "int": dialect.INTEGER,
        "int2": dialect.INTEGER,
        "int4": dialect.INTEGER,
        "int8": dialect.INTEGER,
        "smallserial": dialect.INTEGER,
        "serial": dialect.INTEGER,
        "bigserial": dialect.INTEGER,
        "real": dialect.FLOAT,
        "double precision": dialect.FLOAT,
        "float4": dialect.FLOAT,
        "float8": dialect.FLOAT,
        "numeric": dialect.DECIMAL,
        "decimal": dialect.DECIMAL,
        "character varying": dialect.STRING,
        "varchar": dialect.STRING,
        "character": dialect.STRING,
        "char": dialect.STRING,
        "bpchar": dialect.STRING,
        "text": dialect.STRING,
        "boolean": dialect.BOOL,
        "bool": dialect.BOOL,
        "timestamp with time zone": dialect.TIME,
        "timestamp without time zone": dialect.TIME,
        "timestamptz": dialect.TIME,
        "timestamp": dialect.TIME,
        "date": dialect.TIME,
        "time with time zone": dialect.TIME,
        "time without time zone": dialect.TIME,
        "time": dialect.TIME,
        "bytea": dialect.BYTES,
        "json": dialect.JSON,
        "jsonb": dialect.JSON,
        "uuid": dialect.UUID,
    }

    def live_type(self, data_type: str, *extra: Any) -> str:
        # Domains, extension types and enums report USER-DEFINED; arrays report
        # ARRAY with the element type prefixed by an underscore in udt_name.
        udt_name = str(extra[0]) if extra and extra[0] else ""
        if data_type == "USER-DEFINED" and udt_name:
            return udt_name
        if data_type == "ARRAY" and udt_name.startswith("_"):
            return udt_name[1:] + "[]"
        return data_type

    def supports_version(self, version: str) -> bool:
        try:
            return int(version.strip()) >= MIN_VERSION
        except ValueError:
            return False

    def sql_type(self, column: Column) -> str:
        t = column.type
        if t is FieldType.BOOL:
            return "boolean"
        if t in (FieldType.INT8, FieldType.INT16, FieldType.UINT8):
            return "smallint"
        if t in (FieldType.INT32, FieldType.UINT16):
            return "integer"
        if t.is_integer():
            return "bigint"
        if t is FieldType.FLOAT32:
            return "real"
        if t is FieldType.FLOAT64:
            return "double precision"
        if t is FieldType.BYTES:
            return "bytea"
        if t in (FieldType.STRING, FieldType.ENUM):
            if column.size > MAX_CHAR_SIZE:
                return "text"
            return "varchar"
        if t is FieldType.TIME:
            return "timestamp with time zone"
        if t is FieldType.JSON:
            return "jsonb"
        if t is FieldType.UUID:
            return "uuid"
        raise ValueError(f"Unsupported type {t.value!r} for column {column.name}")

    def identity_clause(self, column: Column) -> str:
        return "GENERATED BY DEFAULT AS IDENTITY"

    def modify_column(self, column: Column, definition: str) -> list[str]:
        name = self.quote(column.name)
        nullability = "DROP NOT NULL" if column.nullable else "SET NOT NULL"
        return [
            f"ALTER COLUMN {name} TYPE {self.column_type(column)}",
            f"ALTER COLUMN {name} {nullability}",
        ]

    def drop_unique(self, table: str, name: str, constraint: bool) -> str:
        if constraint:
            return f"ALTER TABLE {self.quote(table)} DROP CONSTRAINT {self.quote(name)}"
        return f"DROP INDEX {self.quote(name)}"

    def restart_identity(self, table: str, column: str, start: int) -> str:
        # Identity sequences start at 1; the first range keeps that floor.
        start = max(start, 1)
        return f"ALTER TABLE {self.quote(table)} ALTER COLUMN {self.quote(column)} RESTART WITH {start}"
