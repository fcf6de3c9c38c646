from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path


class PersistenceMode(StrEnum):
    """Supported subscription log backends."""

    MEMORY = "memory"
    SQLITE = "sqlite"


@dataclass(slots=True)
class PersistenceConfig:
    """Configuration for the durable subscription log."""

    mode: PersistenceMode = PersistenceMode.MEMORY
    data_dir: Path = field(default_factory=lambda: Path("/tmp/subtrie_data"))
    sqlite_filename: str = "subscriptions.sqlite"
    sqlite_wal: bool = True
    # FULL makes every commit reach stable storage before it returns
    sqlite_synchronous: str = "FULL"

    def sqlite_path(self) -> Path:
        """Resolve the sqlite database path."""
        return self.data_dir / self.sqlite_filename
