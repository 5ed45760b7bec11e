#!/usr/bin/env python3
"""Ordered include/exclude matching.

An OrderedMatcher holds two ranked pattern lists and evaluates a path
against them with fixed precedence:
1. Exclude patterns, in registration order: first match -> EXCLUDED
2. No include patterns at all -> MATCHED (an exclude-only matcher is a
   pure denylist)
3. Include patterns, in registration order: first match -> MATCHED
4. Otherwise -> NOT_MATCHED

Each pattern may carry a payload that is returned with the result.

Example:
    >>> matcher = (
    ...     OrderedMatcherBuilder()
    ...     .include("*.txt")
    ...     .exclude("secret.txt")
    ...     .build()
    ... )
    >>> matcher.evaluate("secret.txt").is_excluded
    True
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Iterable, List, Optional, Tuple, TypeVar

from treesmith.infrastructure.cache_manager import PatternCache
from treesmith.rules.patterns import MatcherStyle, PatternSpec

T = TypeVar("T")


class MatchStatus(Enum):
    """Outcome of evaluating a path against an OrderedMatcher."""

    MATCHED = "matched"
    EXCLUDED = "excluded"
    NOT_MATCHED = "not_matched"


@dataclass(frozen=True)
class MatcherResult(Generic[T]):
    """Status plus the payload of the pattern that decided it."""

    status: MatchStatus
    payload: Optional[T] = None

    @classmethod
    def matched(cls, payload: Optional[T] = None) -> "MatcherResult[T]":
        return cls(MatchStatus.MATCHED, payload)

    @classmethod
    def excluded(cls, payload: Optional[T] = None) -> "MatcherResult[T]":
        return cls(MatchStatus.EXCLUDED, payload)

    @classmethod
    def not_matched(cls) -> "MatcherResult[T]":
        return cls(MatchStatus.NOT_MATCHED)

    @property
    def is_matched(self) -> bool:
        return self.status is MatchStatus.MATCHED

    @property
    def is_excluded(self) -> bool:
        return self.status is MatchStatus.EXCLUDED

    @property
    def is_not_matched(self) -> bool:
        return self.status is MatchStatus.NOT_MATCHED


class OrderedMatcher(Generic[T]):
    """Immutable include/exclude matcher. Build it with OrderedMatcherBuilder."""

    def __init__(
        self,
        includes: Iterable[PatternSpec[T]] = (),
        excludes: Iterable[PatternSpec[T]] = (),
    ):
        self._includes: Tuple[PatternSpec[T], ...] = tuple(includes)
        self._excludes: Tuple[PatternSpec[T], ...] = tuple(excludes)

    @property
    def includes(self) -> Tuple[PatternSpec[T], ...]:
        return self._includes

    @property
    def excludes(self) -> Tuple[PatternSpec[T], ...]:
        return self._excludes

    def evaluate(self, path: str) -> MatcherResult[T]:
        """Evaluate ``path`` against excludes, then includes.

        Args:
            path: Path relative to the template root

        Returns:
            EXCLUDED / MATCHED with the deciding pattern's payload, or
            NOT_MATCHED
        """
        for spec in self._excludes:
            if spec.matches(path):
                return MatcherResult.excluded(spec.payload)

        if not self._includes:
            return MatcherResult.matched()

        for spec in self._includes:
            if spec.matches(path):
                return MatcherResult.matched(spec.payload)

        return MatcherResult.not_matched()

    def __repr__(self) -> str:
        includes = [spec.raw for spec in self._includes]
        excludes = [spec.raw for spec in self._excludes]
        return f"<OrderedMatcher includes={includes} excludes={excludes}>"


class OrderedMatcherBuilder(Generic[T]):
    """Fluent builder for OrderedMatcher.

    Patterns are compiled as they are added, so a malformed pattern raises
    PatternError here, before any path is evaluated.
    """

    def __init__(
        self,
        style: MatcherStyle = MatcherStyle.LOOSE,
        cache: Optional[PatternCache] = None,
    ):
        """Initialize builder.

        Args:
            style: Style given to patterns added from strings
            cache: Pattern cache (process-wide cache if None)
        """
        self._includes: List[PatternSpec[T]] = []
        self._excludes: List[PatternSpec[T]] = []
        self._style = MatcherStyle.from_value(style)
        self._cache = cache

    def with_style(self, style: MatcherStyle) -> "OrderedMatcherBuilder[T]":
        """Set the style for patterns added after this call."""
        self._style = MatcherStyle.from_value(style)
        return self

    def _spec(self, pattern: str, payload: Optional[T]) -> PatternSpec[T]:
        return PatternSpec.create(pattern, payload, self._style, self._cache)

    def include(self, pattern: str, payload: Optional[T] = None) -> "OrderedMatcherBuilder[T]":
        self._includes.append(self._spec(pattern, payload))
        return self

    def exclude(self, pattern: str, payload: Optional[T] = None) -> "OrderedMatcherBuilder[T]":
        self._excludes.append(self._spec(pattern, payload))
        return self

    def include_all(
        self, patterns: Optional[Iterable[str]], payload: Optional[T] = None
    ) -> "OrderedMatcherBuilder[T]":
        """Add several include patterns sharing one payload; None is a no-op."""
        for pattern in patterns or ():
            self.include(pattern, payload)
        return self

    def exclude_all(
        self, patterns: Optional[Iterable[str]], payload: Optional[T] = None
    ) -> "OrderedMatcherBuilder[T]":
        """Add several exclude patterns sharing one payload; None is a no-op."""
        for pattern in patterns or ():
            self.exclude(pattern, payload)
        return self

    def include_spec(self, spec: PatternSpec[T]) -> "OrderedMatcherBuilder[T]":
        self._includes.append(spec)
        return self

    def exclude_spec(self, spec: PatternSpec[T]) -> "OrderedMatcherBuilder[T]":
        self._excludes.append(spec)
        return self

    def build(self) -> OrderedMatcher[T]:
        return OrderedMatcher(self._includes, self._excludes)
