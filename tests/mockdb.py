"""Scripted driver that asserts an exact sequence of database calls."""

from __future__ import annotations

import dataclasses
import re
from collections import deque
from typing import Any, Sequence

from schemasync.driver import Driver, Row, Tx


@dataclasses.dataclass
class Expectation:
    kind: str
    query: str | re.Pattern | None = None
    args: tuple[Any, ...] | None = None
    rows: list[Row] = dataclasses.field(default_factory=list)
    error: Exception | None = None


class MockDB(Driver):
    def __init__(self, dialect: str = "postgres") -> None:
        self.dialect = dialect
        self.expected: deque[Expectation] = deque()
        self.executed: list[str] = []

    # Expectations.

    def expect_begin(self, error: Exception | None = None) -> None:
        self.expected.append(Expectation("begin", error=error))

    def expect_query(
        self,
        query: str | re.Pattern,
        args: Sequence[Any] | None = None,
        rows: Sequence[Sequence[Any]] = (),
        error: Exception | None = None,
    ) -> None:
        self.expected.append(
            Expectation(
                "query",
                query=query,
                args=tuple(args) if args is not None else None,
                rows=[tuple(r) for r in rows],
                error=error,
            )
        )

    def expect_exec(
        self,
        query: str | re.Pattern,
        args: Sequence[Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.expected.append(
            Expectation("exec", query=query, args=tuple(args) if args is not None else None, error=error)
        )

    def expect_commit(self, error: Exception | None = None) -> None:
        self.expected.append(Expectation("commit", error=error))

    def expect_rollback(self, error: Exception | None = None) -> None:
        self.expected.append(Expectation("rollback", error=error))

    def assert_done(self) -> None:
        if self.expected:
            pending = [f"{e.kind}: {e.query}" for e in self.expected]
            raise AssertionError(f"unmet expectations: {pending}")

    # Driver.

    def begin(self) -> Tx:
        self._next("begin")
        return MockTx(self)

    def _next(self, kind: str, query: str | None = None, args: Sequence[Any] = ()) -> Expectation:
        if not self.expected:
            raise AssertionError(f"unexpected {kind}: {query} {list(args)}")
        exp = self.expected.popleft()
        if exp.kind != kind:
            raise AssertionError(f"expected {exp.kind} {exp.query}, got {kind}: {query}")
        if exp.query is not None:
            if isinstance(exp.query, re.Pattern):
                matched = exp.query.fullmatch(query or "") is not None
            else:
                matched = exp.query == query
            if not matched:
                raise AssertionError(f"{kind} mismatch:\n  expected: {exp.query}\n  got:      {query}")
        if exp.args is not None and exp.args != tuple(args):
            raise AssertionError(f"{kind} args mismatch for {query}: expected {exp.args}, got {tuple(args)}")
        if exp.error is not None:
            raise exp.error
        return exp


class MockTx(Tx):
    def __init__(self, db: MockDB) -> None:
        self.db = db

    def exec(self, query: str, args: Sequence[Any] = ()) -> None:
        self.db._next("exec", query, args)
        self.db.executed.append(query)

    def query(self, query: str, args: Sequence[Any] = ()) -> list[Row]:
        return list(self.db._next("query", query, args).rows)

    def commit(self) -> None:
        self.db._next("commit")

    def rollback(self) -> None:
        self.db._next("rollback")
