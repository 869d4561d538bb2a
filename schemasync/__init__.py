"""Dialect-aware schema reconciliation and migration engine."""

from schemasync.dialect import Dialect, get_dialect, shorten
from schemasync.driver import DBAPIDriver, Driver, Statement, Tx
from schemasync.errors import SchemaSyncError, TransactionError, UnsupportedVersionError
from schemasync.migrate import Migrate, MigrateOptions
from schemasync.schema import Column, FieldType, ForeignKey, ReferenceOption, Table

__all__ = [
    "Column",
    "DBAPIDriver",
    "Dialect",
    "Driver",
    "FieldType",
    "ForeignKey",
    "Migrate",
    "MigrateOptions",
    "ReferenceOption",
    "SchemaSyncError",
    "Statement",
    "Table",
    "TransactionError",
    "Tx",
    "UnsupportedVersionError",
    "get_dialect",
    "shorten",
]
