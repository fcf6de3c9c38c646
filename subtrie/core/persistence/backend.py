from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from subtrie.core.errors import StorageUnavailable


@dataclass(slots=True)
class SQLitePersistenceBackend:
    """Single-file SQLite backend with WAL support."""

    db_path: Path
    wal_mode: bool = True
    synchronous_mode: str = "FULL"
    _conn: sqlite3.Connection | None = field(init=False, default=None)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self) -> None:
        if self._conn is not None:
            return
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            await self.execute(
                "PRAGMA journal_mode=WAL"
                if self.wal_mode
                else "PRAGMA journal_mode=DELETE"
            )
            await self.execute(f"PRAGMA synchronous={self.synchronous_mode}")
            await self._initialize_schema()
        except (OSError, sqlite3.Error) as exc:
            logger.error("Cannot open SQLite backend at {}: {}", self.db_path, exc)
            await self.close()
            raise StorageUnavailable(
                f"Cannot open subscription storage at {self.db_path}"
            ) from exc

    async def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None

    async def _initialize_schema(self) -> None:
        await self.execute(
            """
            CREATE TABLE IF NOT EXISTS subscription_log (
                client_id TEXT NOT NULL PRIMARY KEY,
                subscriptions BLOB NOT NULL
            )
            """
        )

    async def execute(self, query: str, params: tuple[Any, ...] = ()) -> None:
        await self.run_transaction(
            lambda conn: conn.execute(query, params).close()
        )

    async def fetch_all(
        self, query: str, params: tuple[Any, ...] = ()
    ) -> list[tuple[Any, ...]]:
        return await self.run_transaction(
            lambda conn: conn.execute(query, params).fetchall()
        )

    async def run_transaction[R](self, work: Callable[[sqlite3.Connection], R]) -> R:
        """
        Run ``work`` against the connection in a worker thread and commit.

        Statements are serialized by the backend lock; if ``work`` raises, the
        transaction is rolled back and the error propagates unchanged.
        """
        if self._conn is None:
            raise StorageUnavailable("SQLite backend not opened")
        conn = self._conn
        async with self._lock:
            return await asyncio.to_thread(self._transaction_blocking, conn, work)

    @staticmethod
    def _transaction_blocking[R](
        conn: sqlite3.Connection, work: Callable[[sqlite3.Connection], R]
    ) -> R:
        try:
            result = work(conn)
        except BaseException:
            conn.rollback()
            raise
        conn.commit()
        return result
