#!/usr/bin/env python3
"""Generic middleware pipeline (chain of responsibility).

A pipeline is an ordered list of stages plus a terminal function. Each
stage receives the context and a ``next_handler`` standing for the rest
of the chain, so it can:
- pre-process the context before calling ``next_handler``
- post-process the result after it returns
- return a result directly without calling ``next_handler``

Composition order: the first stage added is the outermost and runs
first; the last stage added wraps the terminal directly.

The pipeline defines no error type; exceptions raised by stages
propagate to the caller unchanged.

Example:
    >>> def tag(name):
    ...     return lambda ctx, next_handler: next_handler(ctx) + [name]
    >>> handler = (
    ...     MiddlewarePipeline()
    ...     .add(tag("outer"))
    ...     .add(tag("inner"))
    ...     .finalize(lambda ctx: [])
    ... )
    >>> handler(None)
    ['inner', 'outer']
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Generic, List, Optional, TypeVar, Union

C = TypeVar("C")
R = TypeVar("R")

Handler = Callable[[C], R]
StageFn = Callable[[C, Handler], R]


class Middleware(ABC, Generic[C, R]):
    """Base class for named pipeline stages."""

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__

    @abstractmethod
    def handle(self, ctx: C, next_handler: Handler) -> R:
        """Process ``ctx``, normally by calling ``next_handler`` exactly once."""

    def __call__(self, ctx: C, next_handler: Handler) -> R:
        return self.handle(ctx, next_handler)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"


Stage = Union[Middleware, StageFn]


def _stage_name(stage: Stage) -> str:
    return getattr(stage, "name", None) or getattr(stage, "__name__", repr(stage))


class MiddlewarePipeline(Generic[C, R]):
    """Builder that folds stages into a single composed handler."""

    def __init__(self):
        self._stages: List[Stage] = []
        self._lock = threading.RLock()

    def add(self, stage: Stage) -> "MiddlewarePipeline[C, R]":
        """Append a stage; it runs inside every stage added before it."""
        if not callable(stage):
            raise TypeError(f"Pipeline stage must be callable, got {type(stage).__name__}")
        with self._lock:
            self._stages.append(stage)
        return self

    def add_optional(self, stage: Optional[Stage]) -> "MiddlewarePipeline[C, R]":
        """Append ``stage`` unless it is None."""
        if stage is not None:
            self.add(stage)
        return self

    def get_stages(self) -> List[Stage]:
        with self._lock:
            return self._stages.copy()

    def finalize(self, terminal: Handler) -> Handler:
        """Compose the stages around ``terminal``.

        Stages are folded from the last added to the first, each one
        closing over the handler built so far. Stages added after this
        call do not affect the returned handler.

        Args:
            terminal: Innermost handler, called with the context that
                reaches the end of the chain

        Returns:
            Callable taking a context and returning the result
        """
        handler = terminal
        for stage in reversed(self.get_stages()):
            handler = _bind(stage, handler)
        return handler

    def __len__(self) -> int:
        with self._lock:
            return len(self._stages)

    def __repr__(self) -> str:
        names = [_stage_name(stage) for stage in self.get_stages()]
        return f"<MiddlewarePipeline stages={names}>"


def _bind(stage: Stage, next_handler: Handler) -> Handler:
    # A separate function so each closure captures its own stage and successor.
    def composed(ctx):
        return stage(ctx, next_handler)

    composed.__name__ = f"composed_{_stage_name(stage)}"
    return composed
