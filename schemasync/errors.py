"""Errors raised by the migration engine."""

from __future__ import annotations


class SchemaSyncError(Exception):
    pass


class UnsupportedVersionError(SchemaSyncError):
    def __init__(self, dialect: str, version: str) -> None:
        super().__init__(f"unsupported {dialect} server version: {version}")
        self.dialect = dialect
        self.version = version


class TransactionError(SchemaSyncError):
    """Starting or committing the migration transaction failed at the driver level."""
