"""Exception hierarchy for the subscription core."""

from __future__ import annotations

from subtrie.datastructures.type_aliases import LevelIndex, TopicFilter


class SubtrieError(Exception):
    """Base exception for subscription core errors."""

    pass


class InvalidTopicFilter(SubtrieError, ValueError):
    """Raised when a topic or topic filter violates the level rules."""

    def __init__(self, topic: TopicFilter, index: LevelIndex, reason: str) -> None:
        self.topic = topic
        self.index = index
        self.reason = reason
        super().__init__(f"Invalid topic {topic!r} at level {index}: {reason}")


class StorageError(SubtrieError):
    """Base exception for subscription log failures."""

    pass


class StorageUnavailable(StorageError):
    """Raised when the subscription log cannot be created or opened."""

    pass


class IOFailure(StorageError):
    """Raised when a write to the subscription log could not be committed."""

    pass


class StoreNotReady(SubtrieError, RuntimeError):
    """Raised when the store is used before ``init()`` or after ``close()``."""

    pass
