"""
subtrie - subscription matching core for publish/subscribe brokers.

Keeps the topic subscriptions registered by clients in a trie for fast
wildcard matching against publish topics, and persists them in a durable
log so they survive a broker restart.

## Quick Start

```python
from subtrie import PersistenceConfig, PersistenceMode, Subscription, SubscriptionStore

store = SubscriptionStore.from_config(
    PersistenceConfig(mode=PersistenceMode.SQLITE, data_dir=Path("/var/lib/broker"))
)
await store.init()
await store.add(Subscription(client_id="client1", topic="sport/#"))
store.matches("sport/tennis")  # {Subscription(client_id='client1', ...)}
```
"""

from .core import (
    InvalidTopicFilter,
    IOFailure,
    StorageError,
    StorageUnavailable,
    StoreNotReady,
    StoreState,
    Subscription,
    SubscriptionStore,
    SubscriptionStoreSettings,
    SubtrieError,
    is_wildcard_filter,
    join_tokens,
    tokenize,
)
from .core.persistence import PersistenceConfig, PersistenceMode
from .datastructures import EMPTY, MULTI, SINGLE, SubscriptionTrie, Token

__version__ = "0.1.0"

__all__ = [
    "InvalidTopicFilter",
    "IOFailure",
    "StorageError",
    "StorageUnavailable",
    "StoreNotReady",
    "StoreState",
    "Subscription",
    "SubscriptionStore",
    "SubscriptionStoreSettings",
    "SubtrieError",
    "is_wildcard_filter",
    "join_tokens",
    "tokenize",
    "PersistenceConfig",
    "PersistenceMode",
    "EMPTY",
    "MULTI",
    "SINGLE",
    "SubscriptionTrie",
    "Token",
]
