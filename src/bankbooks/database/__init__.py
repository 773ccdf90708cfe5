"""Database layer for bankbooks application."""

from bankbooks.database.base import Database
from bankbooks.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
