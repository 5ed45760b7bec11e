#!/usr/bin/env python3
"""Compiled-pattern cache for Treesmith.

Compiling a glob or regex is the only non-trivial cost of matching, and the
pattern vocabulary of a template is small, so compiled patterns are cached:
- Keyed by (pattern kind, literal pattern text)
- Never evicted for the lifetime of the cache
- Thread-safe; the lock is only held for lookups and insertions
- Hit/miss statistics

A process-wide instance is available through get_pattern_cache(); callers
that want isolation pass their own PatternCache explicitly.

Example:
    >>> cache = PatternCache()
    >>> compiled = cache.get_or_compile("glob", "*.txt", compile_glob)
    >>> cache.get_or_compile("glob", "*.txt", compile_glob) is compiled
    True
"""

import threading
from typing import Any, Callable, Dict, Optional, Tuple

CacheKey = Tuple[str, str]


class PatternCache:
    """Unbounded cache of compiled patterns."""

    def __init__(self):
        self._entries: Dict[CacheKey, Any] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, kind: str, text: str) -> Optional[Any]:
        """Return the cached object for (kind, text), or None."""
        with self._lock:
            return self._entries.get((kind, text))

    def get_or_compile(self, kind: str, text: str, compiler: Callable[[str], Any]) -> Any:
        """Return the cached object, compiling and storing it on a miss.

        Args:
            kind: Pattern kind namespace (e.g. "glob", "regex")
            text: Literal pattern text
            compiler: Called with ``text`` on a miss; its exceptions propagate
                and nothing is stored

        Returns:
            The compiled object shared by every caller asking for the same key
        """
        key = (kind, text)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._hits += 1
                return cached
            self._misses += 1

        compiled = compiler(text)

        with self._lock:
            # Another thread may have compiled the same key meanwhile.
            return self._entries.setdefault(key, compiled)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / total if total > 0 else 0.0,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        with self._lock:
            return key in self._entries


_global_cache: Optional[PatternCache] = None
_global_lock = threading.Lock()


def get_pattern_cache() -> PatternCache:
    """Get or create the process-wide pattern cache."""
    global _global_cache
    with _global_lock:
        if _global_cache is None:
            _global_cache = PatternCache()
        return _global_cache


def set_global_cache(cache: Optional[PatternCache]) -> None:
    """Replace (or reset with None) the process-wide pattern cache."""
    global _global_cache
    with _global_lock:
        _global_cache = cache
