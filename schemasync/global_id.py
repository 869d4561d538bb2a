"""Global unique ID ranges.

Every table migrated with the feature enabled is registered in a bookkeeping
table. A table's position in that registry (its slot) reserves the primary key
range ``[slot << 32, (slot + 1) << 32)``. The registry is read in full at the
start of every migration and never shrinks; a table that was dropped and is
created again gets its old slot back.

Concurrent migrations against the same schema race on the registry. Run one
migration at a time.
"""

from __future__ import annotations

import logging

from schemasync.dialect import Dialect
from schemasync.driver import Tx
from schemasync.introspect import Introspector
from schemasync.render import Renderer
from schemasync.schema import Column, FieldType, Table

logger = logging.getLogger(__name__)

TYPE_TABLE = "schema_types"
RANGE = 1 << 32


def type_table() -> Table:
    return Table(TYPE_TABLE).add_primary(
        Column(name="id", type=FieldType.INT, increment=True)
    ).add_columns(
        Column(name="type", type=FieldType.STRING, unique=True),
    )


class Allocator:
    def __init__(self, tx: Tx, dialect: Dialect) -> None:
        self.tx = tx
        self.dialect = dialect
        self.types: list[str] = []

    def load(self, introspector: Introspector, renderer: Renderer) -> None:
        """Create the registry table if missing, otherwise read it in slot order."""
        if not introspector.table_exists(TYPE_TABLE):
            logger.info("creating type registry table %s", TYPE_TABLE)
            self.tx.exec(renderer.create_table(type_table()))
            self.types = []
            return
        q = self.dialect.quote
        rows = self.tx.query(f"SELECT {q('type')} FROM {q(TYPE_TABLE)} ORDER BY {q('id')} ASC")
        self.types = [str(row[0]) for row in rows]

    def slot(self, name: str) -> int | None:
        try:
            return self.types.index(name)
        except ValueError:
            return None

    def allocate(self, table: Table) -> int:
        """Assign ``table`` its range right after its CREATE TABLE.

        Returns the first ID of the range. Registered tables are restored into
        their previous slot without a new registry row.
        """
        slot = self.slot(table.name)
        if slot is None:
            q = self.dialect.quote
            self.tx.exec(
                f"INSERT INTO {q(TYPE_TABLE)} ({q('type')}) VALUES ({self.dialect.placeholder})",
                (table.name,),
            )
            self.types.append(table.name)
            slot = len(self.types) - 1
        else:
            logger.info("restoring table %s into slot %d", table.name, slot)
        start = slot * RANGE
        pk = table.primary_key[0].name
        self.tx.exec(self.dialect.restart_identity(table.name, pk, start))
        logger.info("table %s uses id range starting at %d", table.name, start)
        return start


def needs_range(table: Table) -> bool:
    # Join tables with composite keys share the ranges of the tables they join.
    return len(table.primary_key) == 1 and table.primary_key[0].type.is_integer()
