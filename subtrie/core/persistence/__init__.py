from __future__ import annotations

from .config import PersistenceConfig, PersistenceMode

__all__ = [
    "PersistenceConfig",
    "PersistenceMode",
    "SQLitePersistenceBackend",
    "SubscriptionLog",
    "MemorySubscriptionLog",
    "SQLiteSubscriptionLog",
    "create_subscription_log",
]


def __getattr__(name: str):
    if name == "SQLitePersistenceBackend":
        from .backend import SQLitePersistenceBackend

        return SQLitePersistenceBackend
    if name in {"SubscriptionLog", "MemorySubscriptionLog", "SQLiteSubscriptionLog"}:
        from .subscription_log import (
            MemorySubscriptionLog,
            SQLiteSubscriptionLog,
            SubscriptionLog,
        )

        return {
            "SubscriptionLog": SubscriptionLog,
            "MemorySubscriptionLog": MemorySubscriptionLog,
            "SQLiteSubscriptionLog": SQLiteSubscriptionLog,
        }[name]
    if name == "create_subscription_log":
        from .registry import create_subscription_log

        return create_subscription_log
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
