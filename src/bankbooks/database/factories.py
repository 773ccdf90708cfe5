"""Opening the books database.

All companies, their charts of accounts, rules, statements and journals
live in one SQLite file.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from bankbooks.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

DB_PATH_ENV = "BANKBOOKS_DB_PATH"
DEFAULT_DB_PATH = Path.home() / ".bankbooks" / "bankbooks.db"


def resolve_database_path(database_path: Optional[str] = None) -> Path:
    """Where the books live: explicit path, then $BANKBOOKS_DB_PATH, then ~/.bankbooks/bankbooks.db."""
    chosen = database_path or os.environ.get(DB_PATH_ENV)
    if chosen:
        return Path(chosen).expanduser()
    return DEFAULT_DB_PATH


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Open the books database, creating its directory when needed.

    Tables are created by ``initialize_schema()``.
    """
    path = resolve_database_path(database_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    logger.debug("Using books database at %s", path)
    return SQLAlchemyDatabase(f"sqlite:///{path}")
