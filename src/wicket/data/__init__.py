"""Lazy database access for wicket apps.

SQL in, dicts out. Not an ORM.

Basic usage::

    from wicket.data import Database

    db = Database("sqlite:///app.db")
    users = await db.fetch("SELECT * FROM users WHERE active = ?", True)

SQLite needs nothing beyond the standard library; PostgreSQL needs
``asyncpg``::

    pip install wicket[postgres]
"""

from wicket.data.database import Database
from wicket.data.errors import (
    DatabaseConnectionError,
    DataError,
    DriverNotInstalledError,
    QueryError,
)

__all__ = [
    "DataError",
    "Database",
    "DatabaseConnectionError",
    "DriverNotInstalledError",
    "QueryError",
]
