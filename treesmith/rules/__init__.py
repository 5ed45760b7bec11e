"""Treesmith Rules System.

Decides which files take part in a run and which placeholders apply:
- PatternSpec: Glob and regex patterns with strict/loose styles
- OrderedMatcher: Include/exclude lists with exclude precedence
- MatcherGroup: Global scope plus per-variable scopes
"""

from .group import MatcherGroup, ResolvedVariable, VariableMatcher
from .matcher import MatcherResult, MatchStatus, OrderedMatcher, OrderedMatcherBuilder
from .patterns import (
    CompiledPattern,
    MatcherStyle,
    PatternError,
    PatternKind,
    PatternSpec,
    compile_pattern,
    translate_glob,
)

__all__ = [
    # Pattern engine
    "PatternKind",
    "MatcherStyle",
    "CompiledPattern",
    "PatternSpec",
    "PatternError",
    "compile_pattern",
    "translate_glob",
    # Ordered matcher
    "MatchStatus",
    "MatcherResult",
    "OrderedMatcher",
    "OrderedMatcherBuilder",
    # Matcher group
    "ResolvedVariable",
    "VariableMatcher",
    "MatcherGroup",
]
