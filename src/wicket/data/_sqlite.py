"""Async SQLite wrapper using stdlib sqlite3 + anyio.

Every blocking sqlite3 call runs in a worker thread via
``anyio.to_thread``, so handlers never block the event loop.
``check_same_thread=False`` is required because consecutive calls may
land on different pool threads; the ``Database`` lock serializes them.
"""

import sqlite3
from collections.abc import Callable, Sequence
from typing import Any

import anyio


def _run_sync(func: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking call in an anyio worker thread."""
    return anyio.to_thread.run_sync(func, *args)  # type: ignore[union-attr]


def _rows(cursor: sqlite3.Cursor) -> list[dict[str, Any]]:
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    return [dict(zip(columns, row, strict=True)) for row in cursor.fetchall()]


class SQLiteConnection:
    """One sqlite3 connection, driven from async code."""

    __slots__ = ("_conn",)

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def raw(self) -> sqlite3.Connection:
        """The underlying ``sqlite3.Connection``."""
        return self._conn

    async def fetch(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        return await _run_sync(lambda: _rows(self._conn.execute(sql, params)))

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        cursor = await _run_sync(lambda: self._conn.execute(sql, params))
        return cursor.rowcount

    async def executescript(self, sql: str) -> None:
        await _run_sync(lambda: self._conn.executescript(sql))

    async def close(self) -> None:
        await _run_sync(self._conn.close)


async def connect(path: str, **options: Any) -> SQLiteConnection:
    """Open an autocommit SQLite connection at *path*.

    Extra *options* are passed to ``sqlite3.connect`` untouched.
    """
    conn = await _run_sync(
        lambda: sqlite3.connect(path, autocommit=True, check_same_thread=False, **options)
    )
    return SQLiteConnection(conn)
