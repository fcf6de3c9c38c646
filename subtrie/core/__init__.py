"""
subtrie core module.

Topic validation, the subscription model, error types, configuration and
the durable subscription store built on top of the trie.
"""

from .config import SubscriptionStoreSettings
from .errors import (
    InvalidTopicFilter,
    IOFailure,
    StorageError,
    StorageUnavailable,
    StoreNotReady,
    SubtrieError,
)
from .model import Subscription
from .subscription_store import StoreState, SubscriptionStore
from .topic import is_wildcard_filter, join_tokens, tokenize

__all__ = [
    "SubscriptionStoreSettings",
    "InvalidTopicFilter",
    "IOFailure",
    "StorageError",
    "StorageUnavailable",
    "StoreNotReady",
    "SubtrieError",
    "Subscription",
    "StoreState",
    "SubscriptionStore",
    "is_wildcard_filter",
    "join_tokens",
    "tokenize",
]
