"""Per-database knowledge shared by the introspector, differ and renderer."""

from __future__ import annotations

import hashlib
import re
from typing import Any

from schemasync.schema import Column

INTEGER = "integer"
FLOAT = "float"
DECIMAL = "decimal"
STRING = "string"
BOOL = "bool"
TIME = "time"
BYTES = "bytes"
JSON = "json"
UUID = "uuid"
ENUM = "enum"

HASH_WIDTH = 32


def shorten(name: str, max_len: int) -> str:
    """Truncate ``name`` to ``max_len`` characters, keeping it unique and stable.

    Names that fit are returned untouched. Longer names keep their head and get
    an md5 digest of the full name appended, so the same logical name always
    maps to the same identifier.
    """
    if len(name) <= max_len:
        return name
    digest = hashlib.md5(name.encode("utf-8")).hexdigest()
    return f"{name[:max_len - HASH_WIDTH - 1]}_{digest}"


def base_type(raw: str) -> str:
    base = re.sub(r"\(.*\)", "", raw.strip().lower())
    for suffix in (" unsigned", " zerofill", " binary"):
        base = base.replace(suffix, "")
    return " ".join(base.split())


class Dialect:
    name = ""
    quote_char = '"'
    placeholder = "%s"
    max_identifier_length = 63
    table_options = ""

    version_query = ""
    tables_query = ""
    table_exists_query = ""
    columns_query = ""
    indexes_query = ""
    constraint_exists_query = ""

    # Raw catalog type name -> comparable type class.
    type_classes: dict[str, str] = {}

    def quote(self, ident: str) -> str:
        q = self.quote_char
        return q + ident.replace(q, q + q) + q

    def shorten(self, name: str) -> str:
        return shorten(name, self.max_identifier_length)

    def supports_version(self, version: str) -> bool:
        raise NotImplementedError

    def sql_type(self, column: Column) -> str:
        raise NotImplementedError

    def column_type(self, column: Column) -> str:
        override = column.schema_type.get(self.name)
        if override:
            return override
        return self.sql_type(column)

    def live_type(self, data_type: str, *extra: Any) -> str:
        """Type name to compare and dump for a column-listing row."""
        return data_type

    def type_class(self, raw: str) -> str:
        base = base_type(raw)
        if base.endswith("[]"):
            return self.type_class(base[:-2]) + "[]"
        return self.type_classes.get(base, base)

    def column_class(self, column: Column) -> str:
        return self.type_class(self.column_type(column))

    def identity_clause(self, column: Column) -> str:
        raise NotImplementedError

    def default_literal(self, value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        text = str(value).replace("'", "''")
        return f"'{text}'"

    def modify_column(self, column: Column, definition: str) -> list[str]:
        """Return the ALTER TABLE clauses that rewrite ``column`` in place."""
        raise NotImplementedError

    def drop_unique(self, table: str, name: str, constraint: bool) -> str:
        raise NotImplementedError

    def restart_identity(self, table: str, column: str, start: int) -> str:
        raise NotImplementedError


def get_dialect(name: str) -> Dialect:
    from schemasync.mysql import MySQL
    from schemasync.postgres import Postgres

    dialects: dict[str, type[Dialect]] = {Postgres.name: Postgres, MySQL.name: MySQL}
    try:
        return dialects[name]()
    except KeyError:
        raise ValueError(f"Unsupported dialect: {name!r} (expected one of {sorted(dialects)})") from None
