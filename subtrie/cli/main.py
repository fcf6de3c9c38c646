#!/usr/bin/env python3
"""
Command line tools for inspecting subscription logs.

- dump: list the subscriptions persisted in a log file
- match: replay a log file and show which subscriptions a topic reaches
- check: validate a topic filter and show its levels
"""

import asyncio
import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from subtrie.core.errors import InvalidTopicFilter, StorageError
from subtrie.core.logging import configure_logging
from subtrie.core.model import Subscription
from subtrie.core.persistence.config import PersistenceConfig, PersistenceMode
from subtrie.core.persistence.registry import create_subscription_log
from subtrie.core.subscription_store import SubscriptionStore
from subtrie.core.topic import tokenize

console = Console()


def _sqlite_config(db_path: Path) -> PersistenceConfig:
    return PersistenceConfig(
        mode=PersistenceMode.SQLITE,
        data_dir=db_path.parent,
        sqlite_filename=db_path.name,
    )


def _subscription_table(title: str, subscriptions: list[Subscription]) -> Table:
    table = Table(title=title)
    table.add_column("Client", style="cyan")
    table.add_column("Topic", style="green")
    table.add_column("QoS", justify="right")
    table.add_column("Clean", justify="center")
    for sub in subscriptions:
        table.add_row(
            sub.client_id,
            sub.topic,
            str(sub.qos),
            "yes" if sub.clean_session else "no",
        )
    return table


def _sorted(subscriptions) -> list[Subscription]:
    return sorted(subscriptions, key=lambda sub: (sub.client_id, sub.topic, sub.qos))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--debug-scope",
    "debug_scopes",
    multiple=True,
    help="Module to log at DEBUG without -v, e.g. core.persistence",
)
@click.pass_context
def cli(ctx, verbose: bool, debug_scopes: tuple[str, ...]):
    """
    subtrie subscription log tools.

    Inspect persisted subscriptions and test topic matching offline.
    """
    configure_logging(
        "DEBUG" if verbose else "WARNING", debug_scopes=debug_scopes, colorize=True
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument(
    "db_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option("--client", "client_id", help="Only show this client's subscriptions")
@click.option(
    "--output",
    "-o",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
def dump(db_path: Path, client_id: str | None, output: str):
    """Dump the subscriptions persisted in a log file."""

    async def _load() -> list[tuple[str, Subscription]]:
        log = create_subscription_log(_sqlite_config(db_path))
        await log.open()
        try:
            return await log.replay_all()
        finally:
            await log.close()

    try:
        entries = asyncio.run(_load())
    except StorageError as e:
        console.print(f"[red]Cannot read subscription log: {e}[/red]")
        sys.exit(1)

    subscriptions = [
        sub for owner, sub in entries if client_id is None or owner == client_id
    ]

    if output == "json":
        click.echo(json.dumps([sub.to_dict() for sub in subscriptions], indent=2))
        return

    console.print(
        _subscription_table(f"Subscriptions in {db_path.name}", subscriptions)
    )
    console.print(f"{len(subscriptions)} subscription(s)")


@cli.command()
@click.argument(
    "db_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.argument("topic")
def match(db_path: Path, topic: str):
    """Replay a log file and show the subscriptions TOPIC is delivered to."""

    async def _match() -> set[Subscription]:
        async with SubscriptionStore.from_config(_sqlite_config(db_path)) as store:
            return store.matches(topic)

    try:
        matched = asyncio.run(_match())
    except InvalidTopicFilter as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(2)
    except StorageError as e:
        console.print(f"[red]Cannot read subscription log: {e}[/red]")
        sys.exit(1)

    if not matched:
        console.print(f"No subscriptions match {topic}")
        return

    console.print(_subscription_table(f"Matches for {topic}", _sorted(matched)))


@cli.command()
@click.argument("topic_filter")
def check(topic_filter: str):
    """Validate a topic filter and print its levels."""
    try:
        tokens = tokenize(topic_filter)
    except InvalidTopicFilter as e:
        console.print(f"[red]Invalid:[/red] {e.reason} (level {e.index})")
        sys.exit(1)

    table = Table(title="Levels")
    table.add_column("#", justify="right")
    table.add_column("Level")
    table.add_column("Kind")
    for index, token in enumerate(tokens):
        if token.is_multi:
            kind = "multi-level wildcard"
        elif token.is_single:
            kind = "single-level wildcard"
        elif token.name == "":
            kind = "empty"
        else:
            kind = "level"
        table.add_row(str(index), token.name, kind)
    console.print(table)
    console.print("[green]Valid topic filter[/green]")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
