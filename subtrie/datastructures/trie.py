"""
Subscription trie for hierarchical topic matching.

Every node stands for one topic level. A subscription is stored at the node
where its filter ends, so matching a publish topic is a walk down the tree
that follows plain levels exactly and fans out through wildcard children.

Wildcard semantics:
- ``+`` (SINGLE) matches exactly one level
- ``#`` (MULTI) matches the remaining levels, and also the parent level
  itself ("sport/#" matches "sport")

Examples:
    >>> trie = SubscriptionTrie[Subscription]()
    >>> trie.insert(tokenize("sport/+/player1"), sub_a)
    >>> trie.insert(tokenize("sport/#"), sub_b)
    >>> trie.match(tokenize("sport/tennis/player1"))
    {sub_a, sub_b}
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from dataclasses import dataclass, field
from threading import RLock
from typing import Protocol

from subtrie.datastructures.token import MULTI, SINGLE, Token
from subtrie.datastructures.type_aliases import (
    ClientId,
    LevelIndex,
    NodeCount,
    SubscriptionCount,
    TrieDepth,
)


class ClientOwned(Hashable, Protocol):
    """Anything stored in the trie: hashable and owned by one client."""

    @property
    def client_id(self) -> ClientId: ...


@dataclass(frozen=True, slots=True)
class TrieStatistics:
    """Shape and population of a subscription trie."""

    total_nodes: NodeCount
    total_subscriptions: SubscriptionCount
    empty_leaves: NodeCount
    max_depth: TrieDepth
    distinct_clients: int


@dataclass(slots=True)
class TrieNode[S: ClientOwned]:
    """
    A node in the subscription trie.

    The root node has no token. Children are keyed by token, so a node never
    holds two children for the same level.
    """

    token: Token | None = None
    children: dict[Token, TrieNode[S]] = field(default_factory=dict)

    # Subscriptions whose filter ends exactly at this node
    subscriptions: set[S] = field(default_factory=set)

    def child_for(self, token: Token) -> TrieNode[S]:
        """Return the child for ``token``, creating it if missing."""
        child = self.children.get(token)
        if child is None:
            child = TrieNode[S](token=token)
            self.children[token] = child
        return child

    def is_leaf(self) -> bool:
        return not self.children


@dataclass(slots=True)
class TrieConfig:
    """Configuration for trie behavior."""

    # Drop childless nodes once their last subscription is removed
    prune_empty_nodes: bool = False


@dataclass(slots=True)
class SubscriptionTrie[S: ClientOwned]:
    """
    Thread-safe trie indexing subscriptions by their tokenized filter.

    All operations hold one re-entrant lock, so a concurrent ``match`` never
    sees a half-applied insert or a partially cleaned subscription set.
    """

    config: TrieConfig = field(default_factory=TrieConfig)
    root: TrieNode[S] = field(default_factory=TrieNode)

    _lock: RLock = field(default_factory=RLock)

    def insert(self, tokens: Sequence[Token], subscription: S) -> bool:
        """
        Register ``subscription`` at the node reached by ``tokens``.

        Intermediate nodes are created on demand. Inserting an equal
        subscription twice is a no-op.

        Returns:
            True if the subscription was new at that node, False otherwise
        """
        with self._lock:
            current = self.root
            for token in tokens:
                current = current.child_for(token)

            if subscription in current.subscriptions:
                return False
            current.subscriptions.add(subscription)
            return True

    def contains_exact(self, tokens: Sequence[Token], subscription: S) -> bool:
        """Check whether ``subscription`` is registered under exactly ``tokens``."""
        with self._lock:
            current = self.root
            for token in tokens:
                child = current.children.get(token)
                if child is None:
                    return False
                current = child
            return subscription in current.subscriptions

    def remove_for_client(self, client_id: ClientId) -> SubscriptionCount:
        """
        Remove every subscription owned by ``client_id``.

        Visits the whole tree; cost is proportional to the number of nodes,
        not to the number of subscriptions the client holds.

        Returns:
            Number of subscriptions removed
        """
        with self._lock:
            return self._remove_recursive(self.root, client_id)

    def match(self, tokens: Sequence[Token]) -> set[S]:
        """
        Collect the subscriptions whose filters match a concrete topic.

        Args:
            tokens: Tokenized publish topic

        Returns:
            Set of matching subscriptions
        """
        with self._lock:
            matches: set[S] = set()
            self._match_recursive(self.root, tuple(tokens), 0, matches)
            return matches

    def size(self) -> SubscriptionCount:
        """Total number of subscriptions over every node."""
        with self._lock:
            return self._count_subscriptions(self.root)

    def node_count(self) -> NodeCount:
        """Total number of nodes, root included."""
        with self._lock:
            return self._count_nodes(self.root)

    def all_subscriptions(self) -> set[S]:
        """Get every subscription stored in the trie."""
        with self._lock:
            subscriptions: set[S] = set()
            self._collect_all(self.root, subscriptions)
            return subscriptions

    def get_statistics(self) -> TrieStatistics:
        """Summarize the trie's shape and population."""
        with self._lock:
            subscriptions = self.all_subscriptions()
            return TrieStatistics(
                total_nodes=self._count_nodes(self.root),
                total_subscriptions=self._count_subscriptions(self.root),
                empty_leaves=self._count_empty_leaves(self.root),
                max_depth=self._max_depth(self.root),
                distinct_clients=len({sub.client_id for sub in subscriptions}),
            )

    def clear(self) -> None:
        """Drop every node and subscription."""
        with self._lock:
            self.root = TrieNode[S]()

    def _match_recursive(
        self,
        node: TrieNode[S],
        tokens: tuple[Token, ...],
        index: LevelIndex,
        matches: set[S],
    ) -> None:
        """Walk ``node`` against ``tokens[index:]``, collecting subscriptions."""

        # All levels consumed: this node matches, and so does a trailing "#"
        if index >= len(tokens):
            matches.update(node.subscriptions)
            multi_child = node.children.get(MULTI)
            if multi_child is not None:
                matches.update(multi_child.subscriptions)
            return

        # "#" absorbs however many levels remain
        if node.token is not None and node.token.is_multi:
            matches.update(node.subscriptions)
            return

        current = tokens[index]
        for candidate in {current, SINGLE, MULTI}:
            child = node.children.get(candidate)
            if child is not None and candidate.matches(current):
                self._match_recursive(child, tokens, index + 1, matches)

    def _remove_recursive(self, node: TrieNode[S], client_id: ClientId) -> int:
        owned = [sub for sub in node.subscriptions if sub.client_id == client_id]
        node.subscriptions.difference_update(owned)
        removed = len(owned)

        for token, child in list(node.children.items()):
            removed += self._remove_recursive(child, client_id)
            if (
                self.config.prune_empty_nodes
                and child.is_leaf()
                and not child.subscriptions
            ):
                del node.children[token]

        return removed

    def _count_subscriptions(self, node: TrieNode[S]) -> int:
        count = len(node.subscriptions)
        for child in node.children.values():
            count += self._count_subscriptions(child)
        return count

    def _count_nodes(self, node: TrieNode[S]) -> int:
        count = 1
        for child in node.children.values():
            count += self._count_nodes(child)
        return count

    def _count_empty_leaves(self, node: TrieNode[S]) -> int:
        if node.is_leaf():
            return 0 if node.subscriptions or node is self.root else 1
        return sum(self._count_empty_leaves(child) for child in node.children.values())

    def _max_depth(self, node: TrieNode[S]) -> int:
        if node.is_leaf():
            return 0
        return 1 + max(self._max_depth(child) for child in node.children.values())

    def _collect_all(self, node: TrieNode[S], subscriptions: set[S]) -> None:
        subscriptions.update(node.subscriptions)
        for child in node.children.values():
            self._collect_all(child, subscriptions)
