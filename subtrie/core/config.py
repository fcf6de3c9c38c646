from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from subtrie.core.logging import configure_logging
from subtrie.core.persistence.config import PersistenceConfig, PersistenceMode


class SubscriptionStoreSettings(BaseSettings):
    """Subscription store configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="SUBTRIE_", env_file=".env", extra="ignore"
    )

    log_level: str = Field("INFO", description="Minimum level for log records.")
    log_debug_scopes: tuple[str, ...] = Field(
        default=(),
        description="Modules that still log at DEBUG when log_level is higher.",
    )
    persistence_mode: PersistenceMode = Field(
        PersistenceMode.SQLITE,
        description="Backend for the durable subscription log.",
    )
    data_dir: Path = Field(
        Path("/tmp/subtrie_data"),
        description="Directory holding the subscription log file.",
    )
    sqlite_filename: str = Field(
        "subscriptions.sqlite", description="File name of the SQLite log."
    )
    sqlite_synchronous: str = Field(
        "FULL",
        description="SQLite synchronous pragma; FULL flushes every commit.",
    )
    prune_empty_nodes: bool = Field(
        False,
        description="Remove childless trie nodes once their last subscription is gone.",
    )

    def persistence_config(self) -> PersistenceConfig:
        """Build the persistence configuration for the subscription log."""
        return PersistenceConfig(
            mode=self.persistence_mode,
            data_dir=self.data_dir,
            sqlite_filename=self.sqlite_filename,
            sqlite_synchronous=self.sqlite_synchronous,
        )

    def apply_logging(self) -> tuple[int, ...]:
        """Install loguru sinks for ``log_level`` and ``log_debug_scopes``."""
        return configure_logging(self.log_level, debug_scopes=self.log_debug_scopes)
