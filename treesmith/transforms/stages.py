#!/usr/bin/env python3
"""Pipeline stages for the file transform engine.

- FilterStage: skips files outside the global matcher scope
- ReplaceStage: substitutes placeholders scoped by variable matchers
- RenderStage: renders Jinja2 template files and strips their suffix
- ProgressStage: reports every visited file to a ProgressTracker

Stages that change content pass the new content down the chain and fold
the inner verdict back, so later stages always see earlier edits:

    progress -> filter -> replace -> render -> terminal (NO_CHANGE)
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional

import jinja2

from treesmith.infrastructure.logger import Logger, get_logger
from treesmith.rules.group import MatcherGroup
from treesmith.transforms.base import (
    FileTransformContext,
    FileTransformVerdict,
    TransformError,
    VerdictKind,
)
from treesmith.transforms.middleware import Handler, Middleware

DEFAULT_TEMPLATE_SUFFIXES = (".j2", ".jinja2", ".tmpl")


def merge_content(verdict: FileTransformVerdict, content: str) -> FileTransformVerdict:
    """Fold content produced by an outer stage into the inner stage's verdict.

    Verdicts that already carry content (or write nothing) are returned as
    they are, since the inner stage saw ``content`` as its input.
    """
    if verdict.kind is VerdictKind.NO_CHANGE:
        return FileTransformVerdict.transform(content)
    if verdict.kind is VerdictKind.RENAME:
        return FileTransformVerdict.overwrite(content, verdict.new_name)
    return verdict


class FilterStage(Middleware[FileTransformContext, FileTransformVerdict]):
    """Skip files that the group's global matcher leaves out of scope."""

    def __init__(self, group: MatcherGroup, logger: Optional[Logger] = None, name: str = "filter"):
        super().__init__(name)
        self._group = group
        self._logger = logger or get_logger()

    def handle(self, ctx: FileTransformContext, next_handler: Handler) -> FileTransformVerdict:
        if not self._group.is_in_scope(ctx.relative_path):
            self._logger.debug("Skipping file outside template scope", path=ctx.relative_path)
            return FileTransformVerdict.skip()
        return next_handler(ctx)


class ReplaceStage(Middleware[FileTransformContext, FileTransformVerdict]):
    """Replace placeholders whose variable matcher accepts the file."""

    def __init__(self, group: MatcherGroup, logger: Optional[Logger] = None, name: str = "replace"):
        super().__init__(name)
        self._group = group
        self._logger = logger or get_logger()

    def handle(self, ctx: FileTransformContext, next_handler: Handler) -> FileTransformVerdict:
        replaced = self._group.apply_content(ctx.content, ctx.relative_path)
        if replaced == ctx.content:
            return next_handler(ctx)

        self._logger.debug("Replaced placeholders", path=ctx.relative_path)
        return merge_content(next_handler(ctx.with_content(replaced)), replaced)


class RenderStage(Middleware[FileTransformContext, FileTransformVerdict]):
    """Render Jinja2 template files and drop the template suffix.

    ``config.yaml.j2`` is rendered with the stage context and written as
    ``config.yaml``. Files without a template suffix pass through.
    """

    def __init__(
        self,
        context: Optional[Dict[str, Any]] = None,
        suffixes: Iterable[str] = DEFAULT_TEMPLATE_SUFFIXES,
        name: str = "render",
        logger: Optional[Logger] = None,
        **jinja_options,
    ):
        """Initialize render stage.

        Args:
            context: Template variables
            suffixes: File name suffixes marking a template (a single
                string is one suffix)
            name: Stage name
            logger: Logger (shared logger if None)
            **jinja_options: Extra jinja2.Environment options
        """
        super().__init__(name)
        self._context = dict(context or {})
        if isinstance(suffixes, str):
            suffixes = (suffixes,)
        self._suffixes = tuple(suffixes)
        self._logger = logger or get_logger()
        jinja_options.setdefault("keep_trailing_newline", True)
        self._env = jinja2.Environment(**jinja_options)

    def template_suffix(self, filename: str) -> Optional[str]:
        for suffix in self._suffixes:
            if filename.endswith(suffix) and len(filename) > len(suffix):
                return suffix
        return None

    def render(self, content: str, path: str) -> str:
        try:
            return self._env.from_string(content).render(**self._context)
        except jinja2.TemplateError as e:
            raise TransformError(f"Template error in {path}: {e}", self.name) from e

    def handle(self, ctx: FileTransformContext, next_handler: Handler) -> FileTransformVerdict:
        filename = ctx.target_path.name
        suffix = self.template_suffix(filename)
        if suffix is None:
            return next_handler(ctx)

        rendered = self.render(ctx.content, ctx.relative_path)
        new_name = filename[: -len(suffix)]
        self._logger.debug("Rendered template", path=ctx.relative_path, target=new_name)

        verdict = next_handler(ctx.with_content(rendered))
        if verdict.kind is VerdictKind.SKIP:
            return verdict
        if verdict.kind is VerdictKind.OVERWRITE:
            return verdict
        if verdict.kind is VerdictKind.RENAME:
            return FileTransformVerdict.overwrite(rendered, verdict.new_name)
        if verdict.kind is VerdictKind.TRANSFORM:
            return FileTransformVerdict.overwrite(verdict.new_content, new_name)
        return FileTransformVerdict.overwrite(rendered, new_name)


@dataclass
class ProgressTracker:
    """Shared counter updated once per visited file."""

    total: int = 0
    position: int = 0
    current: Optional[str] = None
    callback: Optional[Callable[["ProgressTracker"], None]] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def advance(self, path: str) -> None:
        with self._lock:
            self.position += 1
            self.current = path
        if self.callback is not None:
            self.callback(self)

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 0.0
        return min(self.position / self.total, 1.0)


class ProgressStage(Middleware[FileTransformContext, FileTransformVerdict]):
    """Advance a ProgressTracker for every file, then continue the chain."""

    def __init__(self, tracker: ProgressTracker, logger: Optional[Logger] = None, name: str = "progress"):
        super().__init__(name)
        self._tracker = tracker
        self._logger = logger or get_logger()

    @property
    def tracker(self) -> ProgressTracker:
        return self._tracker

    def handle(self, ctx: FileTransformContext, next_handler: Handler) -> FileTransformVerdict:
        self._tracker.advance(ctx.relative_path)
        self._logger.debug(
            "Processing file",
            path=ctx.relative_path,
            position=self._tracker.position,
            total=self._tracker.total,
        )
        return next_handler(ctx)
