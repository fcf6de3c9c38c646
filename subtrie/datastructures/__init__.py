"""
Core datastructures for subtrie.

Key datastructures:
- Token: one level of a topic filter, including the wildcard singletons
- SubscriptionTrie: level-by-level index of subscriptions with wildcard matching
"""

from __future__ import annotations

from .token import EMPTY, MULTI, SINGLE, Token
from .trie import (
    ClientOwned,
    SubscriptionTrie,
    TrieConfig,
    TrieNode,
    TrieStatistics,
)

__all__ = [
    "EMPTY",
    "MULTI",
    "SINGLE",
    "Token",
    "ClientOwned",
    "SubscriptionTrie",
    "TrieConfig",
    "TrieNode",
    "TrieStatistics",
]
