"""
Topic level tokens.

A topic filter such as ``sport/+/player1`` is indexed one level at a time.
Each level becomes a ``Token``. Three tokens are special and exist as
module-level singletons:

- ``EMPTY``: the empty first level produced by a leading separator ("/a/b")
  or by the empty topic
- ``SINGLE``: the single-level wildcard ``+``
- ``MULTI``: the multi-level wildcard ``#``, only valid as the final level

Every other token is a plain level whose name never contains a wildcard
character.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from subtrie.datastructures.type_aliases import LevelName


@dataclass(frozen=True, slots=True)
class Token:
    """One level of a topic or topic filter."""

    name: LevelName

    SINGLE_SYMBOL: ClassVar[str] = "+"
    MULTI_SYMBOL: ClassVar[str] = "#"

    def __post_init__(self) -> None:
        if self.name in (self.SINGLE_SYMBOL, self.MULTI_SYMBOL):
            return
        if self.SINGLE_SYMBOL in self.name or self.MULTI_SYMBOL in self.name:
            raise ValueError(
                f"Level name {self.name!r} may not embed a wildcard character"
            )

    @property
    def is_single(self) -> bool:
        return self.name == self.SINGLE_SYMBOL

    @property
    def is_multi(self) -> bool:
        return self.name == self.MULTI_SYMBOL

    @property
    def is_wildcard(self) -> bool:
        return self.is_single or self.is_multi

    def matches(self, concrete: Token) -> bool:
        """
        Check whether this token, used as a filter level, accepts ``concrete``.

        Wildcards accept any level. A plain level only accepts an equal level.
        """
        if self.is_wildcard:
            return True
        return self == concrete

    def __str__(self) -> str:
        return self.name


EMPTY = Token("")
SINGLE = Token(Token.SINGLE_SYMBOL)
MULTI = Token(Token.MULTI_SYMBOL)
