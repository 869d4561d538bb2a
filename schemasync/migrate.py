"""Migration entry point: reconcile live tables with their desired definitions."""

from __future__ import annotations

import contextlib
import dataclasses
import logging
from typing import Iterator

from schemasync import global_id
from schemasync.dialect import Dialect, get_dialect
from schemasync.diff import diff_table
from schemasync.driver import Driver, RecordingTx, Statement, Tx
from schemasync.errors import TransactionError, UnsupportedVersionError
from schemasync.introspect import FOREIGN_KEY, UNIQUE, Introspector
from schemasync.render import Renderer
from schemasync.schema import Table

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class MigrateOptions:
    drop_column: bool = False
    drop_index: bool = False
    global_unique_id: bool = False


class Migrate:
    def __init__(
        self,
        driver: Driver,
        *,
        drop_column: bool = False,
        drop_index: bool = False,
        global_unique_id: bool = False,
        dialect: Dialect | None = None,
    ) -> None:
        self.driver = driver
        self.dialect = dialect or get_dialect(driver.dialect)
        self.options = MigrateOptions(
            drop_column=drop_column,
            drop_index=drop_index,
            global_unique_id=global_unique_id,
        )
        self.renderer = Renderer(self.dialect)

    def create(self, *tables: Table) -> None:
        """Create or alter ``tables`` inside a single transaction.

        Any failure rolls the whole migration back and propagates.
        """
        for t in tables:
            t.validate()
        with self._transaction() as tx:
            self._create(tx, tables)

    def plan(self, *tables: Table) -> list[Statement]:
        """Return the statements ``create`` would run, without running them."""
        for t in tables:
            t.validate()
        with self._transaction(record=True) as tx:
            self._create(tx, tables)
        return tx.statements

    @contextlib.contextmanager
    def _transaction(self, record: bool = False) -> Iterator[Tx]:
        try:
            tx = self.driver.begin()
        except Exception as exc:
            raise TransactionError(f"starting transaction: {exc}") from exc
        if record:
            tx = RecordingTx(tx)
        try:
            yield tx
        except BaseException:
            self._rollback(tx)
            raise
        try:
            tx.commit()
        except Exception as exc:
            self._rollback(tx)
            raise TransactionError(f"committing transaction: {exc}") from exc

    @staticmethod
    def _rollback(tx: Tx) -> None:
        try:
            tx.rollback()
        except Exception:
            logger.exception("rolling back migration transaction")

    def _create(self, tx: Tx, tables: tuple[Table, ...]) -> None:
        inspect = Introspector(tx, self.dialect)

        version = inspect.server_version()
        if not self.dialect.supports_version(version):
            raise UnsupportedVersionError(self.dialect.name, version)

        allocator = None
        if self.options.global_unique_id:
            allocator = global_id.Allocator(tx, self.dialect)
            allocator.load(inspect, self.renderer)

        for t in tables:
            if inspect.table_exists(t.name):
                self._alter(tx, inspect, t)
                continue
            logger.info("creating table %s", t.name)
            tx.exec(self.renderer.create_table(t))
            if allocator is not None and global_id.needs_range(t):
                allocator.allocate(t)

        # Foreign keys go last: a table may reference one declared after it, or itself.
        for t in tables:
            fks = []
            for fk in t.foreign_keys:
                symbol = self.renderer.foreign_key_symbol(fk)
                if not inspect.constraint_exists(FOREIGN_KEY, symbol):
                    fks.append(fk)
            if fks:
                logger.info("adding %d foreign keys to %s", len(fks), t.name)
                tx.exec(self.renderer.add_foreign_keys(t.name, fks))

    def _alter(self, tx: Tx, inspect: Introspector, table: Table) -> None:
        live = inspect.table(table.name)
        change = diff_table(
            self.dialect,
            table,
            live,
            drop_column=self.options.drop_column,
            drop_index=self.options.drop_index,
        )
        if not change.has_changes():
            return
        logger.info("altering table %s", table.name)
        for stmt in self.renderer.alter_table(table.name, change):
            tx.exec(stmt)
        for name in change.drop_indexes:
            constraint = inspect.constraint_exists(UNIQUE, name)
            tx.exec(self.renderer.drop_unique(table.name, name, constraint))
