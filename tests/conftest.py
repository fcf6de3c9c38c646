"""Pytest configuration and fixtures for subtrie testing.

Stores opened by these fixtures are always closed again so SQLite files are
released before ``tmp_path`` is cleaned up.
"""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
import pytest_asyncio
from loguru import logger

from subtrie.core.persistence.config import PersistenceConfig, PersistenceMode
from subtrie.core.subscription_store import SubscriptionStore


@pytest.fixture
def sqlite_config(tmp_path: Path) -> PersistenceConfig:
    """Persistence config pointing at a fresh SQLite file."""
    return PersistenceConfig(mode=PersistenceMode.SQLITE, data_dir=tmp_path / "data")


@pytest_asyncio.fixture
async def memory_store() -> AsyncGenerator[SubscriptionStore, None]:
    """An initialized store backed by the in-memory log."""
    store = SubscriptionStore()
    await store.init()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def sqlite_store(
    sqlite_config: PersistenceConfig,
) -> AsyncGenerator[SubscriptionStore, None]:
    """An initialized store backed by a SQLite log."""
    store = SubscriptionStore.from_config(sqlite_config)
    await store.init()
    yield store
    await store.close()


@pytest.fixture
def log_messages() -> Generator[list[str], None, None]:
    """Capture loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(str(message)), level="DEBUG"
    )
    yield messages
    logger.remove(handler_id)
