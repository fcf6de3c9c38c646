"""
Topic tokenization and validation.

Turns a raw topic or topic filter into the token sequence the trie indexes.
Level rules:
- "/" separates levels; a leading "/" yields an empty first level
- no other level may be empty (so "a//b" and "a/b/" are rejected)
- "#" must be a whole level and the last one
- "+" must be a whole level
"""

from __future__ import annotations

from collections.abc import Iterable

from subtrie.core.errors import InvalidTopicFilter
from subtrie.datastructures.token import EMPTY, MULTI, SINGLE, Token
from subtrie.datastructures.type_aliases import TopicFilter

TOPIC_SEPARATOR = "/"


def tokenize(topic: TopicFilter) -> tuple[Token, ...]:
    """
    Split ``topic`` into tokens, enforcing wildcard placement.

    Trailing separators are an error, not dropped: ``"a/b/"`` and ``"/"``
    raise here, where a split that discards trailing empty strings would
    read them as ``a/b`` and a single empty level.

    Raises:
        InvalidTopicFilter: if a level is illegally empty or a wildcard
            character does not occupy a whole level in a legal position
    """
    segments = topic.split(TOPIC_SEPARATOR)
    last = len(segments) - 1
    tokens: list[Token] = []

    for index, segment in enumerate(segments):
        if segment == "":
            if index != 0:
                raise InvalidTopicFilter(
                    topic, index, "expected a level name between separators"
                )
            tokens.append(EMPTY)
        elif segment == Token.MULTI_SYMBOL:
            if index != last:
                raise InvalidTopicFilter(
                    topic, index, "multi-level wildcard must be the final level"
                )
            tokens.append(MULTI)
        elif Token.MULTI_SYMBOL in segment:
            raise InvalidTopicFilter(
                topic, index, f"wildcard must occupy a whole level: {segment!r}"
            )
        elif segment == Token.SINGLE_SYMBOL:
            tokens.append(SINGLE)
        elif Token.SINGLE_SYMBOL in segment:
            raise InvalidTopicFilter(
                topic, index, f"wildcard must occupy a whole level: {segment!r}"
            )
        else:
            tokens.append(Token(segment))

    return tuple(tokens)


def join_tokens(tokens: Iterable[Token]) -> TopicFilter:
    """Rebuild the topic string a token sequence was parsed from."""
    return TOPIC_SEPARATOR.join(token.name for token in tokens)


def is_wildcard_filter(topic: TopicFilter) -> bool:
    """Check whether a valid filter contains any wildcard level."""
    return any(token.is_wildcard for token in tokenize(topic))
