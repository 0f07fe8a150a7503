"""Database layer for fleettax application."""

from fleettax.database.base import Database
from fleettax.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
