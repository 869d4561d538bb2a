"""MySQL dialect."""

from __future__ import annotations

import re

from schemasync import dialect
from schemasync.schema import Column, FieldType

MIN_VERSION = (5, 6, 0)


def parse_version(version: str) -> tuple[int, ...]:
    m = re.match(r"^\s*(\d+)\.(\d+)\.(\d+)", version)
    if not m:
        return ()
    return tuple(int(part) for part in m.groups())


class MySQL(dialect.Dialect):
    name = "mysql"
    quote_char = "`"
    max_identifier_length = 64
    table_options = " CHARACTER SET utf8mb4 COLLATE utf8mb4_bin"

    version_query = "SELECT VERSION()"
    tables_query = (
        "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES "
        "WHERE TABLE_SCHEMA = (SELECT DATABASE()) AND TABLE_TYPE = 'BASE TABLE' "
        "ORDER BY TABLE_NAME"
    )
    table_exists_query = (
        "SELECT COUNT(*) FROM INFORMATION_SCHEMA.TABLES "
        "WHERE TABLE_SCHEMA = (SELECT DATABASE()) AND TABLE_NAME = %s"
    )
    columns_query = (
        "SELECT COLUMN_NAME, COLUMN_TYPE, IS_NULLABLE, COLUMN_DEFAULT "
        "FROM INFORMATION_SCHEMA.COLUMNS "
        "WHERE TABLE_SCHEMA = (SELECT DATABASE()) AND TABLE_NAME = %s "
        "ORDER BY ORDINAL_POSITION"
    )
    indexes_query = (
        "SELECT INDEX_NAME, COLUMN_NAME, INDEX_NAME = 'PRIMARY', NON_UNIQUE = 0, SEQ_IN_INDEX "
        "FROM INFORMATION_SCHEMA.STATISTICS "
        "WHERE TABLE_SCHEMA = (SELECT DATABASE()) AND TABLE_NAME = %s "
        "ORDER BY INDEX_NAME, SEQ_IN_INDEX"
    )
    constraint_exists_query = (
        "SELECT COUNT(*) FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS "
        "WHERE TABLE_SCHEMA = (SELECT DATABASE()) AND CONSTRAINT_TYPE = %s AND CONSTRAINT_NAME = %s"
    )

    type_classes = {
        "tinyint": dialect.INTEGER,
        "smallint": dialect.INTEGER,
        "mediumint": dialect.INTEGER,
        "int": dialect.INTEGER,
        "integer": dialect.INTEGER,
        "bigint": dialect.INTEGER,
        # boolean is an alias of tinyint(1).
        "boolean": dialect.INTEGER,
        "bool": dialect.INTEGER,
        "float": dialect.FLOAT,
        "double": dialect.FLOAT,
        "double precision": dialect.FLOAT,
        "real": dialect.FLOAT,
        "decimal": dialect.DECIMAL,
        "numeric": dialect.DECIMAL,
        "char": dialect.STRING,
        "varchar": dialect.STRING,
        "tinytext": dialect.STRING,
        "text": dialect.STRING,
        "mediumtext": dialect.STRING,
        "longtext": dialect.STRING,
        "binary": dialect.BYTES,
        "varbinary": dialect.BYTES,
        "tinyblob": dialect.BYTES,
        "blob": dialect.BYTES,
        "mediumblob": dialect.BYTES,
        "longblob": dialect.BYTES,
        "timestamp": dialect.TIME,
        "datetime": dialect.TIME,
        "date": dialect.TIME,
        "time": dialect.TIME,
        "json": dialect.JSON,
        "enum": dialect.ENUM,
    }

    def supports_version(self, version: str) -> bool:
        parsed = parse_version(version)
        return bool(parsed) and parsed >= MIN_VERSION

    def sql_type(self, column: Column) -> str:
        t = column.type
        if t is FieldType.BOOL:
            return "boolean"
        ints = {
            FieldType.INT8: "tinyint",
            FieldType.UINT8: "tinyint unsigned",
            FieldType.INT16: "smallint",
            FieldType.UINT16: "smallint unsigned",
            FieldType.INT32: "int",
            FieldType.UINT32: "int unsigned",
            FieldType.INT: "bigint",
            FieldType.INT64: "bigint",
            FieldType.UINT: "bigint unsigned",
            FieldType.UINT64: "bigint unsigned",
        }
        if t in ints:
            return ints[t]
        if t is FieldType.FLOAT32:
            return "float"
        if t is FieldType.FLOAT64:
            return "double"
        if t is FieldType.BYTES:
            if column.size >= 1 << 24:
                return "longblob"
            if column.size >= 1 << 16:
                return "mediumblob"
            return "blob"
        if t is FieldType.STRING:
            size = column.size
            if size <= 0:
                return "varchar(255)"
            if size <= 255:
                return f"varchar({size})"
            if size < 1 << 16:
                return "text"
            if size < 1 << 24:
                return "mediumtext"
            return "longtext"
        if t is FieldType.ENUM:
            values = ", ".join(self.default_literal(v) for v in column.enums)
            return f"enum({values})"
        if t is FieldType.TIME:
            return "timestamp"
        if t is FieldType.JSON:
            return "json"
        if t is FieldType.UUID:
            return "char(36) binary"
        raise ValueError(f"Unsupported type {t.value!r} for column {column.name}")

    def identity_clause(self, column: Column) -> str:
        return "AUTO_INCREMENT"

    def modify_column(self, column: Column, definition: str) -> list[str]:
        return [f"MODIFY COLUMN {definition}"]

    def drop_unique(self, table: str, name: str, constraint: bool) -> str:
        # Unique constraints are always backed by an index of the same name.
        return f"ALTER TABLE {self.quote(table)} DROP INDEX {self.quote(name)}"

    def restart_identity(self, table: str, column: str, start: int) -> str:
        return f"ALTER TABLE {self.quote(table)} AUTO_INCREMENT = {start}"
