"""
Tests for the subtrie command line tools.

The log files are prepared with the store API and then inspected through
the CLI, the way an operator would look at a broker's data directory.
"""

import asyncio
import json
import sqlite3
from pathlib import Path

import pytest
from click.testing import CliRunner

from subtrie.cli.main import cli
from subtrie.core.model import Subscription
from subtrie.core.persistence.config import PersistenceConfig, PersistenceMode
from subtrie.core.subscription_store import SubscriptionStore


@pytest.fixture
def populated_db(tmp_path: Path) -> Path:
    config = PersistenceConfig(mode=PersistenceMode.SQLITE, data_dir=tmp_path)

    async def populate() -> None:
        async with SubscriptionStore.from_config(config) as store:
            await store.add(Subscription(client_id="client1", topic="sport/#"))
            await store.add(
                Subscription(client_id="client2", topic="sport/+/p1", qos=1)
            )
            await store.add(Subscription(client_id="client2", topic="news"))

    asyncio.run(populate())
    return config.sqlite_path()


@pytest.fixture
def corrupt_db(populated_db: Path) -> Path:
    conn = sqlite3.connect(populated_db)
    try:
        conn.execute(
            "INSERT INTO subscription_log VALUES (?, ?)", ("client3", b"not-json")
        )
        conn.commit()
    finally:
        conn.close()
    return populated_db

class TestSubtrieCLI:
    def test_cli_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "subtrie subscription log tools" in result.output
        assert "dump" in result.output
        assert "match" in result.output
        assert "check" in result.output

    def test_dump_json(self, populated_db):
        runner = CliRunner()
        result = runner.invoke(cli, ["dump", str(populated_db), "--output", "json"])

        assert result.exit_code == 0
        entries = json.loads(result.output)
        assert [(e["client_id"], e["topic"]) for e in entries] == [
            ("client1", "sport/#"),
            ("client2", "sport/+/p1"),
            ("client2", "news"),
        ]
        assert entries[1]["qos"] == 1

    def test_dump_single_client(self, populated_db):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["dump", str(populated_db), "--client", "client2", "-o", "json"]
        )

        assert result.exit_code == 0
        assert {e["client_id"] for e in json.loads(result.output)} == {"client2"}

    def test_dump_table(self, populated_db):
        runner = CliRunner()
        result = runner.invoke(cli, ["dump", str(populated_db)])

        assert result.exit_code == 0
        assert "client1" in result.output
        assert "sport/#" in result.output
        assert "3 subscription(s)" in result.output

    def test_dump_missing_file(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["dump", str(tmp_path / "missing.sqlite")])

        assert result.exit_code != 0

    def test_match(self, populated_db):
        runner = CliRunner()
        result = runner.invoke(cli, ["match", str(populated_db), "sport/golf/p1"])

        assert result.exit_code == 0
        assert "client1" in result.output
        assert "client2" in result.output

    def test_match_parent_level(self, populated_db):
        runner = CliRunner()
        result = runner.invoke(cli, ["match", str(populated_db), "sport"])

        assert result.exit_code == 0
        assert "client1" in result.output
        assert "client2" not in result.output

    def test_match_nothing(self, populated_db):
        runner = CliRunner()
        result = runner.invoke(cli, ["match", str(populated_db), "weather"])

        assert result.exit_code == 0
        assert "No subscriptions match weather" in result.output

    def test_match_invalid_topic(self, populated_db):
        runner = CliRunner()
        result = runner.invoke(cli, ["match", str(populated_db), "a//b"])

        assert result.exit_code == 2

    def test_check_valid_filter(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["check", "sport/+/#"])

        assert result.exit_code == 0
        assert "single-level wildcard" in result.output
        assert "multi-level wildcard" in result.output
        assert "Valid topic filter" in result.output

    def test_check_invalid_filter(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["check", "a/#/b"])

        assert result.exit_code == 1
        assert "final level" in result.output

    def test_dump_corrupt_log(self, corrupt_db):
        runner = CliRunner()
        result = runner.invoke(cli, ["dump", str(corrupt_db)])

        assert result.exit_code == 1
        assert "Cannot read subscription log" in result.output

    def test_match_corrupt_log(self, corrupt_db):
        runner = CliRunner()
        result = runner.invoke(cli, ["match", str(corrupt_db), "sport"])

        assert result.exit_code == 1
        assert "Cannot read subscription log" in result.output

    def test_debug_scope_option(self, populated_db):
        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "--debug-scope",
                "core.subscription_store",
                "match",
                str(populated_db),
                "news",
            ],
        )

        assert result.exit_code == 0
        assert "client2" in result.output
