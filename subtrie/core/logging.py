"""
Loguru setup shared by the settings layer and the CLI.

A single stderr sink carries records at ``level``. When ``level`` is above
DEBUG, ``debug_scopes`` adds a second sink that lets DEBUG records through
for selected modules only, so one can trace ``core.subscription_store``
without every trie walk. Scopes may be given relative to the package
(``"core.persistence"``) or fully qualified (``"subtrie.core.persistence"``).
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from loguru import logger

PACKAGE_PREFIX = "subtrie."

DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} - {message}"
)


def qualify_scopes(scopes: Iterable[str]) -> tuple[str, ...]:
    """Strip blanks and prefix package-relative scopes with ``subtrie.``."""
    qualified: list[str] = []
    for scope in scopes:
        scope = scope.strip()
        if not scope:
            continue
        if scope != "subtrie" and not scope.startswith(PACKAGE_PREFIX):
            scope = PACKAGE_PREFIX + scope
        qualified.append(scope)
    return tuple(qualified)


def debug_scope_filter(scopes: Iterable[str]) -> Callable[[Mapping[str, Any]], bool]:
    """Build a loguru filter accepting DEBUG records from ``scopes`` only."""
    prefixes = qualify_scopes(scopes)

    def _filter(record: Mapping[str, Any]) -> bool:
        if record["level"].name != "DEBUG":
            return False
        return str(record["name"]).startswith(prefixes)

    return _filter


def configure_logging(
    level: str,
    *,
    debug_scopes: Iterable[str] = (),
    colorize: bool = False,
) -> tuple[int, ...]:
    """
    Replace every loguru sink with the subtrie stderr sinks.

    Returns:
        The ids of the installed handlers
    """
    logger.remove()

    handler_ids = [
        logger.add(
            sys.stderr, level=level, format=DEFAULT_LOG_FORMAT, colorize=colorize
        )
    ]

    scopes = qualify_scopes(debug_scopes)
    if scopes and level.upper() != "DEBUG":
        handler_ids.append(
            logger.add(
                sys.stderr,
                level="DEBUG",
                format=DEFAULT_LOG_FORMAT,
                colorize=colorize,
                filter=debug_scope_filter(scopes),
            )
        )

    return tuple(handler_ids)
