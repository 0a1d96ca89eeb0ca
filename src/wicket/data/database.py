"""Lazy, once-only database connection.

The app opens its database on first use, never at import or startup,
and opens it at most once per process. A failed connection attempt is
remembered rather than retried: in debug mode every later access
raises the stored error, in production it is logged once at ERROR and
``connection()`` returns ``None``.

Connection URL format::

    sqlite:///path/to/app.db       # SQLite file (stdlib sqlite3 + anyio)
    sqlite:///:memory:             # In-memory SQLite
    postgresql://host:5432/app     # PostgreSQL (asyncpg)

Usage::

    app = App(AppConfig(db=DatabaseConfig("sqlite:///app.db")))

    @app.get("/users")
    async def users(ctx):
        return await app.db.fetch("SELECT id, name FROM users")
"""

from __future__ import annotations

import logging
from typing import Any

import anyio

from wicket.config import DatabaseConfig
from wicket.data.errors import (
    DatabaseConnectionError,
    DataError,
    DriverNotInstalledError,
    QueryError,
)

logger = logging.getLogger("wicket.data")


class Database:
    """A single lazily opened connection shared by every request.

    Statements are serialized through one ``anyio.Lock``; the same lock
    guards the first connection attempt, so concurrent first requests
    connect exactly once.
    """

    __slots__ = ("_conn", "_debug", "_driver", "_error", "_lock", "_opened", "config")

    def __init__(self, config: DatabaseConfig | str, *, debug: bool = False) -> None:
        if isinstance(config, str):
            config = DatabaseConfig(url=config)
        self.config = config
        self._driver = _detect_driver(config.url)
        self._debug = debug
        self._lock: anyio.Lock | None = None  # Created on first use, inside a loop
        self._conn: Any = None
        self._error: DataError | None = None
        self._opened = False

    @property
    def driver(self) -> str:
        return self._driver

    @property
    def error(self) -> DataError | None:
        """The stored connection failure, if the attempt failed."""
        return self._error

    def _get_lock(self) -> anyio.Lock:
        if self._lock is None:
            self._lock = anyio.Lock()
        return self._lock

    async def connection(self) -> Any:
        """Return the open connection, connecting on first call.

        Returns ``None`` when the connection failed and debug is off.
        Raises ``DatabaseConnectionError`` when it failed and debug is on.
        """
        if not self._opened:
            async with self._get_lock():
                if not self._opened:
                    await self._open()
        if self._error is not None:
            if self._debug:
                raise self._error
            return None
        return self._conn

    async def _open(self) -> None:
        try:
            self._conn = await _connect(self._driver, self.config)
        except DataError as exc:
            self._error = exc
            logger.error("%s", exc)
        finally:
            self._opened = True

    async def _require(self) -> Any:
        conn = await self.connection()
        if conn is None:
            msg = "Database unavailable; see the earlier connection error in the log"
            raise DatabaseConnectionError(msg)
        return conn

    # -- Queries --

    async def fetch(self, sql: str, /, *params: Any) -> list[dict[str, Any]]:
        """Run a query and return every row as a dict."""
        conn = await self._require()
        async with self._get_lock():
            try:
                if self._driver == "sqlite":
                    return await conn.fetch(sql, params)
                return [dict(row) for row in await conn.fetch(sql, *params)]
            except Exception as exc:
                raise QueryError(str(exc)) from exc

    async def fetch_one(self, sql: str, /, *params: Any) -> dict[str, Any] | None:
        """Run a query and return the first row, or ``None``."""
        rows = await self.fetch(sql, *params)
        return rows[0] if rows else None

    async def fetch_val(self, sql: str, /, *params: Any) -> Any:
        """Run a query and return the first column of the first row."""
        row = await self.fetch_one(sql, *params)
        if row is None:
            return None
        return next(iter(row.values()))

    async def execute(self, sql: str, /, *params: Any) -> int:
        """Run a statement (INSERT/UPDATE/DELETE) and return rows affected."""
        conn = await self._require()
        async with self._get_lock():
            try:
                if self._driver == "sqlite":
                    return await conn.execute(sql, params)
                status = await conn.execute(sql, *params)
            except Exception as exc:
                raise QueryError(str(exc)) from exc
        # asyncpg returns "INSERT 0 1" style status strings
        parts = status.split()
        return int(parts[-1]) if parts and parts[-1].isdigit() else 0

    async def execute_script(self, sql: str, /) -> None:
        """Run several statements at once (schema setup, fixtures)."""
        conn = await self._require()
        async with self._get_lock():
            try:
                if self._driver == "sqlite":
                    await conn.executescript(sql)
                else:
                    await conn.execute(sql)
            except Exception as exc:
                raise QueryError(str(exc)) from exc

    # -- Lifecycle --

    async def close(self) -> None:
        """Close the connection. A later access reconnects."""
        if self._conn is not None:
            await self._conn.close()
        self._conn = None
        self._error = None
        self._opened = False

    async def __aenter__(self) -> Database:
        await self.connection()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()


# =============================================================================
# Driver detection and connection
# =============================================================================


def _detect_driver(url: str) -> str:
    """Detect the database driver from the URL scheme."""
    if url.startswith("sqlite"):
        return "sqlite"
    if url.startswith(("postgresql", "postgres")):
        return "postgresql"
    msg = (
        f"Unsupported database URL scheme: {url!r}. "
        "Supported: sqlite:///path, postgresql://host/db"
    )
    raise DataError(msg)


def _parse_sqlite_path(url: str) -> str:
    """Extract the file path from a sqlite:// URL."""
    # sqlite:///path/to/db  ->  path/to/db
    # sqlite:///:memory:    ->  :memory:
    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            return url[len(prefix) :]
    msg = f"Invalid SQLite URL: {url!r}"
    raise DataError(msg)


async def _connect(driver: str, config: DatabaseConfig) -> Any:
    """Open a connection, reporting any driver failure as ``DataError``."""
    try:
        if driver == "sqlite":
            return await _connect_sqlite(config)
        return await _connect_pg(config)
    except DataError:
        raise
    except Exception as exc:
        msg = f"Database connection failed: {exc}"
        raise DatabaseConnectionError(msg) from exc


async def _connect_sqlite(config: DatabaseConfig) -> Any:
    from wicket.data._sqlite import connect as sqlite_connect

    return await sqlite_connect(_parse_sqlite_path(config.url), **dict(config.options))


async def _connect_pg(config: DatabaseConfig) -> Any:
    try:
        import asyncpg
    except ImportError:
        msg = (
            "wicket.data requires 'asyncpg' for PostgreSQL databases. "
            "Install it with: pip install wicket[postgres]"
        )
        raise DriverNotInstalledError(msg) from None

    credentials: dict[str, Any] = {}
    if config.username:
        credentials["user"] = config.username
    if config.password:
        credentials["password"] = config.password
    return await asyncpg.connect(config.url, **credentials, **dict(config.options))
