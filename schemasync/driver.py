"""Connection collaborator used by the engine.

The engine only needs to begin a transaction and, inside it, run statements
and catalog queries. ``DBAPIDriver`` adapts any PEP 249 connection whose
paramstyle is ``format`` (psycopg, PyMySQL) to that contract.
"""

from __future__ import annotations

import dataclasses
import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

logger = logging.getLogger(__name__)

Row = tuple[Any, ...]


class Tx(ABC):
    @abstractmethod
    def exec(self, query: str, args: Sequence[Any] = ()) -> None:
        """Run a statement that returns no rows."""

    @abstractmethod
    def query(self, query: str, args: Sequence[Any] = ()) -> list[Row]:
        """Run a statement and return all of its rows."""

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass


class Driver(ABC):
    # Name of the dialect spoken by the underlying connection.
    dialect: str = ""

    @abstractmethod
    def begin(self) -> Tx:
        pass


class DBAPITx(Tx):
    def __init__(self, conn: Any) -> None:
        self.conn = conn

    def exec(self, query: str, args: Sequence[Any] = ()) -> None:
        logger.debug("exec: %s %s", query, list(args))
        cur = self.conn.cursor()
        try:
            if args:
                cur.execute(query, tuple(args))
            else:
                cur.execute(query)
        finally:
            cur.close()

    def query(self, query: str, args: Sequence[Any] = ()) -> list[Row]:
        logger.debug("query: %s %s", query, list(args))
        cur = self.conn.cursor()
        try:
            if args:
                cur.execute(query, tuple(args))
            else:
                cur.execute(query)
            return [tuple(row) for row in cur.fetchall()]
        finally:
            cur.close()

    def commit(self) -> None:
        self.conn.commit()

    def rollback(self) -> None:
        self.conn.rollback()


class DBAPIDriver(Driver):
    """Drive a PEP 249 connection with autocommit disabled.

    DB-API connections open a transaction implicitly on the first statement,
    so ``begin`` only hands out a transaction view over the connection.
    """

    def __init__(self, conn: Any, dialect: str) -> None:
        self.conn = conn
        self.dialect = dialect

    def begin(self) -> Tx:
        return DBAPITx(self.conn)


@dataclasses.dataclass
class Statement:
    query: str
    args: tuple[Any, ...] = ()

    def __str__(self) -> str:
        if not self.args:
            return self.query
        return f"{self.query} -- args: {list(self.args)}"


class RecordingTx(Tx):
    """Pass catalog queries through, record statements instead of running them."""

    def __init__(self, tx: Tx) -> None:
        self.tx = tx
        self.statements: list[Statement] = []

    def exec(self, query: str, args: Sequence[Any] = ()) -> None:
        self.statements.append(Statement(query, tuple(args)))

    def query(self, query: str, args: Sequence[Any] = ()) -> list[Row]:
        return self.tx.query(query, args)

    def commit(self) -> None:
        # A plan never persists anything.
        self.tx.rollback()

    def rollback(self) -> None:
        self.tx.rollback()
