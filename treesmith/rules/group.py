#!/usr/bin/env python3
"""Matcher group: global scope plus per-variable placeholder scopes.

A MatcherGroup is built once per template run from fully resolved
variables and is read-only afterwards:
- The global matcher decides whether a file takes part at all
- Each variable's own matcher decides whether its placeholder is
  replaced in that file
- Replacements are applied in variable registration order, each one
  seeing the output of the previous one

Example:
    >>> group = MatcherGroup.from_resolved(
    ...     ["**"], [],
    ...     [ResolvedVariable("{{name}}", "world", includes=["*.txt"])],
    ... )
    >>> group.apply_content("hello {{name}}", "a.txt")
    'hello world'
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from treesmith.infrastructure.cache_manager import PatternCache
from treesmith.rules.matcher import MatcherResult, OrderedMatcher, OrderedMatcherBuilder
from treesmith.rules.patterns import MatcherStyle


@dataclass(frozen=True)
class ResolvedVariable:
    """A placeholder with its final replacement and path scope."""

    placeholder: str
    replacement: str
    includes: Sequence[str] = field(default_factory=tuple)
    excludes: Sequence[str] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.placeholder:
            raise ValueError("placeholder must be a non-empty string")


@dataclass(frozen=True)
class VariableMatcher:
    """Compiled form of a ResolvedVariable."""

    placeholder: str
    replacement: str
    matcher: OrderedMatcher[None]


class MatcherGroup:
    """Global matcher composed with variable-scoped matchers."""

    def __init__(self, global_matcher: OrderedMatcher[None], variables: Iterable[VariableMatcher] = ()):
        self._global = global_matcher
        self._variables: Tuple[VariableMatcher, ...] = tuple(variables)

    @classmethod
    def from_resolved(
        cls,
        global_includes: Optional[Iterable[str]],
        global_excludes: Optional[Iterable[str]],
        variables: Iterable[ResolvedVariable] = (),
        style: MatcherStyle = MatcherStyle.LOOSE,
        cache: Optional[PatternCache] = None,
    ) -> "MatcherGroup":
        """Compile a group from raw patterns and resolved variables.

        Raises:
            PatternError: If any pattern is malformed
        """
        global_matcher = (
            OrderedMatcherBuilder(style, cache)
            .include_all(global_includes)
            .exclude_all(global_excludes)
            .build()
        )

        compiled = []
        for var in variables:
            matcher = (
                OrderedMatcherBuilder(style, cache)
                .include_all(var.includes)
                .exclude_all(var.excludes)
                .build()
            )
            compiled.append(VariableMatcher(var.placeholder, var.replacement, matcher))

        return cls(global_matcher, compiled)

    @property
    def global_matcher(self) -> OrderedMatcher[None]:
        return self._global

    @property
    def variables(self) -> Tuple[VariableMatcher, ...]:
        return self._variables

    def is_in_scope(self, path: str) -> bool:
        """True if the file at ``path`` takes part in the run."""
        return self._global.evaluate(path).is_matched

    def filter_in_scope(self, paths: Iterable[str]) -> List[str]:
        return [path for path in paths if self.is_in_scope(path)]

    def variables_detail(self, path: str) -> List[Tuple[str, MatcherResult[None]]]:
        """Every placeholder with its matcher result for ``path``."""
        return [(var.placeholder, var.matcher.evaluate(path)) for var in self._variables]

    def applicable_variables(self, path: str) -> List[Tuple[str, str]]:
        """(placeholder, replacement) pairs that apply to ``path``, in order."""
        return [
            (var.placeholder, var.replacement)
            for var in self._variables
            if var.matcher.evaluate(path).is_matched
        ]

    def apply_content(self, content: str, path: str) -> str:
        """Replace every applicable placeholder in ``content``, sequentially."""
        for placeholder, replacement in self.applicable_variables(path):
            content = content.replace(placeholder, replacement)
        return content

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        placeholders = [var.placeholder for var in self._variables]
        return f"<MatcherGroup global={self._global!r} variables={placeholders}>"
