"""
Durable subscription log.

Maps each client id to the ordered list of subscriptions that client has
made. The log is append-only per client and a client's list is only ever
removed as a whole. It exists so the in-memory trie can be rebuilt after a
restart; matching never reads it.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Any, Protocol

from loguru import logger

from subtrie.core.errors import IOFailure, StorageUnavailable
from subtrie.core.model import Subscription
from subtrie.core.persistence.backend import SQLitePersistenceBackend
from subtrie.datastructures.type_aliases import ClientId
from subtrie.serialization import JsonSerializer


class SubscriptionLog(Protocol):
    """Persistence interface for per-client subscription lists."""

    async def open(self) -> None: ...

    async def close(self) -> None: ...

    async def replay_all(self) -> list[tuple[ClientId, Subscription]]: ...

    async def append(self, client_id: ClientId, subscription: Subscription) -> None: ...

    async def delete_client(self, client_id: ClientId) -> None: ...

    async def clients(self) -> list[ClientId]: ...

    async def subscriptions_for(self, client_id: ClientId) -> list[Subscription]: ...


@dataclass(slots=True)
class MemorySubscriptionLog:
    """In-memory subscription log for development and tests."""

    _entries: dict[ClientId, list[Subscription]] = field(default_factory=dict)

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        self._entries.clear()

    async def replay_all(self) -> list[tuple[ClientId, Subscription]]:
        return [
            (client_id, subscription)
            for client_id in sorted(self._entries)
            for subscription in self._entries[client_id]
        ]

    async def append(self, client_id: ClientId, subscription: Subscription) -> None:
        self._entries.setdefault(client_id, []).append(subscription)

    async def delete_client(self, client_id: ClientId) -> None:
        self._entries.pop(client_id, None)

    async def clients(self) -> list[ClientId]:
        return sorted(self._entries)

    async def subscriptions_for(self, client_id: ClientId) -> list[Subscription]:
        return list(self._entries.get(client_id, []))


@dataclass(slots=True)
class SQLiteSubscriptionLog:
    """
    SQLite-backed subscription log.

    One row per client; the value is the client's subscriptions encoded as a
    JSON list in append order. Every write commits before returning.
    """

    backend: SQLitePersistenceBackend
    serializer: JsonSerializer = field(default_factory=JsonSerializer)

    async def open(self) -> None:
        await self.backend.open()
        logger.info("Opened subscription log at {}", self.backend.db_path)

    async def close(self) -> None:
        await self.backend.close()
        logger.debug("Closed subscription log at {}", self.backend.db_path)

    async def replay_all(self) -> list[tuple[ClientId, Subscription]]:
        rows = await self._read_all(
            "SELECT client_id, subscriptions FROM subscription_log ORDER BY client_id"
        )
        return [
            (client_id, subscription)
            for client_id, payload in rows
            for subscription in self._decode(client_id, payload)
        ]

    async def append(self, client_id: ClientId, subscription: Subscription) -> None:
        def work(conn: sqlite3.Connection) -> None:
            row = conn.execute(
                "SELECT subscriptions FROM subscription_log WHERE client_id=?",
                (client_id,),
            ).fetchone()
            existing = self._decode(client_id, row[0]) if row is not None else []
            existing.append(subscription)
            conn.execute(
                "INSERT OR REPLACE INTO subscription_log (client_id, subscriptions)"
                " VALUES (?, ?)",
                (client_id, self.serializer.serialize(existing)),
            )

        try:
            await self.backend.run_transaction(work)
        except sqlite3.Error as exc:
            logger.error("Failed to append subscription for {}: {}", client_id, exc)
            raise IOFailure(
                f"Could not persist subscription {subscription.topic!r}"
                f" for client {client_id!r}"
            ) from exc

    async def delete_client(self, client_id: ClientId) -> None:
        try:
            await self.backend.execute(
                "DELETE FROM subscription_log WHERE client_id=?", (client_id,)
            )
        except sqlite3.Error as exc:
            logger.error("Failed to delete subscriptions for {}: {}", client_id, exc)
            raise IOFailure(
                f"Could not delete subscriptions for client {client_id!r}"
            ) from exc

    async def clients(self) -> list[ClientId]:
        rows = await self._read_all(
            "SELECT client_id FROM subscription_log ORDER BY client_id"
        )
        return [row[0] for row in rows]

    async def subscriptions_for(self, client_id: ClientId) -> list[Subscription]:
        rows = await self._read_all(
            "SELECT subscriptions FROM subscription_log WHERE client_id=?",
            (client_id,),
        )
        if not rows:
            return []
        return self._decode(client_id, rows[0][0])

    async def _read_all(
        self, query: str, params: tuple[Any, ...] = ()
    ) -> list[tuple[Any, ...]]:
        try:
            return await self.backend.fetch_all(query, params)
        except sqlite3.Error as exc:
            logger.error("Failed to read subscription log: {}", exc)
            raise StorageUnavailable(
                f"Cannot read subscription log at {self.backend.db_path}"
            ) from exc

    def _decode(self, client_id: ClientId, payload: bytes) -> list[Subscription]:
        """
        Decode one client's row.

        Raises:
            StorageUnavailable: if the row is not a list of subscription records
        """
        try:
            items = self.serializer.deserialize(payload)
            if not isinstance(items, list):
                raise TypeError(f"expected a list, got {type(items).__name__}")
            return [Subscription.from_dict(item) for item in items]
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Corrupt subscription record for {}: {}", client_id, exc)
            raise StorageUnavailable(
                f"Corrupt subscription record for client {client_id!r}"
            ) from exc
