from __future__ import annotations

from loguru import logger

from .backend import SQLitePersistenceBackend
from .config import PersistenceConfig, PersistenceMode
from .subscription_log import (
    MemorySubscriptionLog,
    SQLiteSubscriptionLog,
    SubscriptionLog,
)


def create_subscription_log(config: PersistenceConfig) -> SubscriptionLog:
    """Build the subscription log selected by ``config.mode``."""
    if config.mode is PersistenceMode.SQLITE:
        logger.info(
            "Initializing SQLite subscription log at {}",
            config.sqlite_path(),
        )
        return SQLiteSubscriptionLog(
            backend=SQLitePersistenceBackend(
                db_path=config.sqlite_path(),
                wal_mode=config.sqlite_wal,
                synchronous_mode=config.sqlite_synchronous,
            )
        )
    logger.info("Initializing in-memory subscription log")
    return MemorySubscriptionLog()
