"""
Subscription store for the broker's publish path.

Composes the in-memory ``SubscriptionTrie`` with a durable
``SubscriptionLog``:

- ``init()`` opens the log and replays every persisted subscription
- ``add()`` validates the filter, makes it durable, then indexes it
- ``remove_for_client()`` forgets every subscription of a client
- ``matches()`` answers which subscriptions receive a publish

Mutators are serialized with an asyncio lock so a log write and its trie
change are never interleaved with another mutator. Readers go straight to
the trie, which guards itself.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from types import TracebackType

from loguru import logger

from subtrie.core.config import SubscriptionStoreSettings
from subtrie.core.errors import (
    InvalidTopicFilter,
    StorageError,
    StorageUnavailable,
    StoreNotReady,
)
from subtrie.core.model import Subscription
from subtrie.core.persistence.config import PersistenceConfig
from subtrie.core.persistence.registry import create_subscription_log
from subtrie.core.persistence.subscription_log import (
    MemorySubscriptionLog,
    SubscriptionLog,
)
from subtrie.core.topic import tokenize
from subtrie.datastructures.trie import SubscriptionTrie, TrieConfig, TrieStatistics
from subtrie.datastructures.type_aliases import (
    ClientId,
    SubscriptionCount,
    TopicName,
)


class StoreState(StrEnum):
    """Lifecycle of a subscription store."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    CLOSED = "closed"


@dataclass(slots=True)
class SubscriptionStore:
    """Durable, wildcard-aware index of client subscriptions."""

    log: SubscriptionLog = field(default_factory=MemorySubscriptionLog)
    trie: SubscriptionTrie[Subscription] = field(default_factory=SubscriptionTrie)
    state: StoreState = field(init=False, default=StoreState.UNINITIALIZED)
    _write_lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    @classmethod
    def from_config(
        cls, config: PersistenceConfig, *, prune_empty_nodes: bool = False
    ) -> SubscriptionStore:
        return cls(
            log=create_subscription_log(config),
            trie=SubscriptionTrie[Subscription](
                config=TrieConfig(prune_empty_nodes=prune_empty_nodes)
            ),
        )

    @classmethod
    def from_settings(cls, settings: SubscriptionStoreSettings) -> SubscriptionStore:
        return cls.from_config(
            settings.persistence_config(),
            prune_empty_nodes=settings.prune_empty_nodes,
        )

    async def init(self) -> None:
        """
        Open the log and rebuild the trie from it.

        A failed replay closes the log again and leaves the store
        uninitialized with an empty trie.

        Raises:
            StorageUnavailable: if the log cannot be opened or read, or holds
                a filter that no longer tokenizes
        """
        if self.state is StoreState.READY:
            return

        await self.log.open()

        logger.debug("Reloading all stored subscriptions...")
        try:
            replayed = await self._replay()
        except InvalidTopicFilter as exc:
            await self._abandon_replay()
            raise StorageUnavailable(
                f"Subscription log holds an invalid filter {exc.topic!r}"
            ) from exc
        except StorageError:
            await self._abandon_replay()
            raise

        self.state = StoreState.READY
        logger.info(
            "Subscription store ready: replayed {} entries, {} subscriptions indexed",
            replayed,
            self.trie.size(),
        )

    async def _replay(self) -> int:
        replayed = 0
        for _client_id, subscription in await self.log.replay_all():
            self.trie.insert(tokenize(subscription.topic), subscription)
            replayed += 1
        return replayed

    async def _abandon_replay(self) -> None:
        await self.log.close()
        self.trie.clear()

    async def close(self) -> None:
        if self.state is not StoreState.READY:
            return
        async with self._write_lock:
            if self.state is not StoreState.READY:
                return
            await self.log.close()
            self.trie.clear()
            self.state = StoreState.CLOSED
        logger.info("Subscription store closed")

    async def add(self, subscription: Subscription) -> None:
        """
        Register a subscription.

        The log append commits before the trie is updated, so a publish can
        only be routed to a subscription that is already durable.

        Raises:
            InvalidTopicFilter: if ``subscription.topic`` is malformed
            IOFailure: if the log append could not be committed; the trie is
                left unchanged
        """
        self._ensure_ready()
        tokens = tokenize(subscription.topic)

        async with self._write_lock:
            self._ensure_ready()
            if self.trie.contains_exact(tokens, subscription):
                logger.debug(
                    "Subscription already registered: {} -> {}",
                    subscription.client_id,
                    subscription.topic,
                )
                return
            await self.log.append(subscription.client_id, subscription)
            self.trie.insert(tokens, subscription)

        logger.debug(
            "Added subscription {} -> {}", subscription.client_id, subscription.topic
        )

    async def remove_for_client(self, client_id: ClientId) -> SubscriptionCount:
        """
        Forget every subscription held by ``client_id``.

        Returns:
            Number of subscriptions removed from the trie

        Raises:
            IOFailure: if the log deletion could not be committed; the trie
                is left unchanged
        """
        self._ensure_ready()
        async with self._write_lock:
            self._ensure_ready()
            await self.log.delete_client(client_id)
            removed = self.trie.remove_for_client(client_id)

        logger.debug("Removed {} subscriptions for client {}", removed, client_id)
        return removed

    def matches(self, topic: TopicName) -> set[Subscription]:
        """
        Find the subscriptions that should receive a publish to ``topic``.

        Raises:
            InvalidTopicFilter: if ``topic`` cannot be tokenized
        """
        self._ensure_ready()
        return self.trie.match(tokenize(topic))

    def contains(self, subscription: Subscription) -> bool:
        """
        Check whether anything registered matches ``subscription.topic``.

        This checks the topology, not set membership: it is true for a client
        that never subscribed as long as some filter covers the topic.
        """
        return bool(self.matches(subscription.topic))

    def size(self) -> SubscriptionCount:
        self._ensure_ready()
        return self.trie.size()

    def statistics(self) -> TrieStatistics:
        self._ensure_ready()
        return self.trie.get_statistics()

    async def __aenter__(self) -> SubscriptionStore:
        await self.init()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _ensure_ready(self) -> None:
        if self.state is not StoreState.READY:
            raise StoreNotReady(
                f"Subscription store is {self.state.value}; await init() first"
            )
