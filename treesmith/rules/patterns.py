#!/usr/bin/env python3
r"""Pattern matching for template paths with glob and regex support.

This module is the pattern engine of Treesmith:
- Raw pattern strings are globs unless prefixed with ``regex:``
- Globs are translated to anchored regular expressions once and cached
- Regexes use search semantics (anchor explicitly with ``^``/``$``)
- Strict style matches only the pattern itself; loose style also accepts
  paths that contain the raw pattern text as a substring
- Malformed patterns raise PatternError when the pattern is compiled,
  never when it is matched

Glob syntax follows the usual shell rules evaluated against the whole
relative path: ``*`` (any run of characters), ``?`` (one character),
``[abc]`` / ``[!a-z]`` (classes), ``{a,b}`` (alternatives) and ``**`` as a
whole path component (``**/x``, ``x/**``, ``a/**/b``).

Example:
    >>> spec = PatternSpec.create("regex:^src/.*\.py$", style=MatcherStyle.STRICT)
    >>> spec.matches("src/app.py")
    True
    >>> PatternSpec.create("file").matches("other_file.txt")  # loose
    True
"""

import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, Tuple, TypeVar, Union

from treesmith.core.constants import REGEX_PREFIX, ErrorCode, Limits, TreesmithError
from treesmith.infrastructure.cache_manager import PatternCache, get_pattern_cache

T = TypeVar("T")


class PatternError(TreesmithError):
    """Malformed glob or regex pattern."""

    def __init__(self, message: str, pattern: str):
        super().__init__(f"{message}: {pattern!r}", ErrorCode.INVALID_INPUT)
        self.pattern = pattern


class PatternKind(Enum):
    """Pattern matching type."""

    GLOB = "glob"
    REGEX = "regex"

    @classmethod
    def parse(cls, raw: str) -> Tuple["PatternKind", str]:
        """Split a raw pattern string into its kind and pattern text.

        The ``regex:`` prefix is matched case-sensitively and stripped.
        """
        if raw.startswith(REGEX_PREFIX):
            return cls.REGEX, raw[len(REGEX_PREFIX):]
        return cls.GLOB, raw


class MatcherStyle(Enum):
    """How a pattern is compared with a path."""

    STRICT = "strict"  # Pattern semantics only
    LOOSE = "loose"  # Pattern semantics, or raw text as a substring

    @classmethod
    def from_value(cls, value: Union["MatcherStyle", str]) -> "MatcherStyle":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise TreesmithError(
                f"Unknown matcher style: {value!r}", ErrorCode.INVALID_INPUT
            ) from None


def translate_glob(pattern: str) -> str:
    """Translate a glob into an equivalent regular expression body.

    The result is meant for ``re.fullmatch`` with ``re.DOTALL``.

    Raises:
        PatternError: On unclosed classes or braces, reversed ranges,
            nested braces, a trailing backslash, or ``**`` mixed with other
            characters in one path component
    """
    out = []
    i = 0
    n = len(pattern)
    in_alternation = False

    while i < n:
        c = pattern[i]

        if c == "*" and pattern.startswith("**", i):
            at_component_start = i == 0 or pattern[i - 1] == "/"
            at_component_end = i + 2 == n or pattern[i + 2] == "/"
            if not (at_component_start and at_component_end) or in_alternation:
                raise PatternError("Invalid use of '**', it must be a whole path component", pattern)
            if i + 2 == n:
                # Trailing "**" (or the whole pattern): everything below.
                out.append(".*")
                i += 2
            else:
                # "**/": zero or more leading directories.
                out.append("(?:.*/)?")
                i += 3
        elif c == "*":
            out.append(".*")
            i += 1
        elif c == "?":
            out.append(".")
            i += 1
        elif c == "[":
            class_regex, i = _translate_class(pattern, i)
            out.append(class_regex)
        elif c == "{":
            if in_alternation:
                raise PatternError("Nested alternation groups are not supported", pattern)
            in_alternation = True
            out.append("(?:")
            i += 1
        elif c == "}" and in_alternation:
            in_alternation = False
            out.append(")")
            i += 1
        elif c == "," and in_alternation:
            out.append("|")
            i += 1
        elif c == "\\":
            if i + 1 == n:
                raise PatternError("Dangling escape at end of glob", pattern)
            out.append(re.escape(pattern[i + 1]))
            i += 2
        else:
            out.append(re.escape(c))
            i += 1

    if in_alternation:
        raise PatternError("Unclosed alternation group", pattern)

    return "".join(out)


def _translate_class(pattern: str, start: int) -> Tuple[str, int]:
    """Translate the character class opening at ``start``.

    Returns:
        (regex class, index just past the closing bracket)
    """
    i = start + 1
    n = len(pattern)
    negated = False
    if i < n and pattern[i] in "!^":
        negated = True
        i += 1

    chars = []
    first = True
    while i < n and (pattern[i] != "]" or first):
        chars.append(pattern[i])
        first = False
        i += 1
    if i >= n:
        raise PatternError("Unclosed character class", pattern)

    parts = []
    j = 0
    while j < len(chars):
        if j + 2 < len(chars) and chars[j + 1] == "-":
            lo, hi = chars[j], chars[j + 2]
            if lo > hi:
                raise PatternError(f"Invalid range {lo}-{hi} in character class", pattern)
            parts.append(f"{re.escape(lo)}-{re.escape(hi)}")
            j += 3
        else:
            parts.append(re.escape(chars[j]))
            j += 1

    return "[" + ("^" if negated else "") + "".join(parts) + "]", i + 1


def _compile_glob(text: str) -> "CompiledPattern":
    regex = re.compile(translate_glob(text), re.DOTALL)
    return CompiledPattern(PatternKind.GLOB, text, regex)


def _compile_regex(text: str) -> "CompiledPattern":
    try:
        regex = re.compile(text)
    except re.error as e:
        raise PatternError(f"Invalid regex ({e})", text) from e
    return CompiledPattern(PatternKind.REGEX, text, regex)


def normalize_path(path: Union[str, os.PathLike]) -> str:
    """Normalize a candidate path for matching (forward slashes)."""
    path = os.fspath(path)
    if os.sep != "/":
        path = path.replace(os.sep, "/")
    return path


@dataclass(frozen=True)
class CompiledPattern:
    """A compiled glob or regex."""

    kind: PatternKind
    text: str
    regex: "re.Pattern[str]"

    def matches(self, path: str) -> bool:
        """Check a normalized relative path against the pattern."""
        if self.kind is PatternKind.GLOB:
            return self.regex.fullmatch(path) is not None
        return self.regex.search(path) is not None


def compile_pattern(raw: str, cache: Optional[PatternCache] = None) -> CompiledPattern:
    """Compile a raw pattern string through the pattern cache.

    Args:
        raw: Pattern string (``regex:`` prefix selects a regex)
        cache: Cache to use (the process-wide cache if None)

    Returns:
        Compiled pattern; identical text yields the identical object

    Raises:
        PatternError: If the pattern is malformed
    """
    if not raw:
        raise PatternError("Empty pattern", raw)
    if len(raw) > Limits.MAX_PATTERN_LENGTH:
        raise PatternError(f"Pattern longer than {Limits.MAX_PATTERN_LENGTH} characters", raw[:64])

    kind, text = PatternKind.parse(raw)
    cache = cache if cache is not None else get_pattern_cache()
    compiler = _compile_glob if kind is PatternKind.GLOB else _compile_regex
    return cache.get_or_compile(kind.value, text, compiler)


@dataclass(frozen=True)
class PatternSpec(Generic[T]):
    """A compiled pattern with its match style and an optional payload."""

    compiled: CompiledPattern
    style: MatcherStyle = MatcherStyle.LOOSE
    payload: Optional[T] = None

    @classmethod
    def create(
        cls,
        raw: str,
        payload: Optional[T] = None,
        style: MatcherStyle = MatcherStyle.LOOSE,
        cache: Optional[PatternCache] = None,
    ) -> "PatternSpec[T]":
        """Parse and compile ``raw``; raises PatternError if malformed."""
        return cls(compile_pattern(raw, cache), MatcherStyle.from_value(style), payload)

    @property
    def kind(self) -> PatternKind:
        return self.compiled.kind

    @property
    def text(self) -> str:
        return self.compiled.text

    @property
    def raw(self) -> str:
        if self.kind is PatternKind.REGEX:
            return REGEX_PREFIX + self.text
        return self.text

    def matches(self, path: Union[str, os.PathLike]) -> bool:
        """Check if the pattern matches ``path`` under this spec's style."""
        path = normalize_path(path)
        if self.compiled.matches(path):
            return True
        # TODO: drop the substring fallback once template configs stop relying on it.
        return self.style is MatcherStyle.LOOSE and self.text in path
