"""Database layer for pocketbook."""

from pocketbook.database.base import Database
from pocketbook.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
