#!/usr/bin/env python3
"""Tree walk that applies pipeline verdicts to a destination directory.

transform_tree() walks the source depth-first, reads every file, feeds a
FileTransformContext to the composed handler and applies the returned
verdict:

    SKIP       nothing is written
    TRANSFORM  new content at the mirrored path
    RENAME     original content under a new file name
    OVERWRITE  new content under a new file name
    NO_CHANGE  original content at the mirrored path

Empty source directories are recreated. Parent directories are created
before each write. The first I/O error aborts the walk.

Example:
    >>> summary = transform_tree("template/", "out/")
    >>> summary.files_processed
    12
"""

import os
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Callable, Optional, Union

from treesmith.core.constants import TreesmithError
from treesmith.core.file_ops import (
    SourceNotDirectoryError,
    create_directory,
    list_directory,
    read_file,
    write_file,
)
from treesmith.infrastructure.logger import Logger, get_logger
from treesmith.transforms.base import FileTransformContext, FileTransformVerdict, VerdictKind

TransformHandler = Callable[[FileTransformContext], FileTransformVerdict]
PathLike = Union[str, os.PathLike]


@dataclass
class TransformSummary:
    """Counters collected during one transform_tree() call."""

    files_visited: int = 0
    files_processed: int = 0  # Files written to the destination
    files_skipped: int = 0
    directories_created: int = 0


def apply_verdict(verdict: FileTransformVerdict, ctx: FileTransformContext) -> Optional[Path]:
    """Write the file described by ``verdict``.

    Returns:
        The path written, or None for SKIP
    """
    if verdict.kind is VerdictKind.SKIP:
        return None

    target = ctx.target_path
    if verdict.kind in (VerdictKind.RENAME, VerdictKind.OVERWRITE):
        target = target.with_name(verdict.new_name)

    if verdict.kind in (VerdictKind.TRANSFORM, VerdictKind.OVERWRITE):
        content = verdict.new_content
    else:
        content = ctx.content

    write_file(target, content)
    return target


class TreeTransformer:
    """Depth-first walker bound to one source root and one handler."""

    def __init__(
        self,
        source_dir: PathLike,
        dest_dir: PathLike,
        handler: Optional[TransformHandler] = None,
        logger: Optional[Logger] = None,
    ):
        self.source_dir = Path(source_dir)
        self.dest_dir = Path(dest_dir)
        self._handler = handler
        self._logger = logger or get_logger()
        self.summary = TransformSummary()

    def run(self) -> TransformSummary:
        """Walk the source tree.

        Raises:
            SourceNotDirectoryError: If the source is not a directory
            FileOperationError: On the first read or write failure
        """
        if not self.source_dir.is_dir():
            raise SourceNotDirectoryError(self.source_dir)

        self._logger.info(
            "Transforming tree", source=str(self.source_dir), target=str(self.dest_dir)
        )
        try:
            if create_directory(self.dest_dir):
                self.summary.directories_created += 1
            self._walk(self.source_dir, self.dest_dir)
        except TreesmithError as e:
            self._logger.error("Transform failed", error=e.message, code=e.error_code.name)
            raise
        self._logger.info(
            "Transform complete",
            visited=self.summary.files_visited,
            written=self.summary.files_processed,
            skipped=self.summary.files_skipped,
        )
        return self.summary

    def _walk(self, origin: Path, target: Path) -> None:
        entries = list_directory(origin)
        if not entries:
            if create_directory(target):
                self.summary.directories_created += 1
            return

        for entry in entries:
            entry_path = origin / entry.name
            if entry.is_dir():
                self._walk(entry_path, target / entry.name)
            elif entry.is_file():
                self._transform_file(entry_path, target / entry.name)

    def _relative(self, path: Path) -> str:
        return PurePath(os.path.relpath(path, self.source_dir)).as_posix()

    def _transform_file(self, origin: Path, target: Path) -> None:
        ctx = FileTransformContext(
            origin_path=origin,
            target_path=target,
            content=read_file(origin),
            relative_path=self._relative(origin),
        )
        self.summary.files_visited += 1

        verdict = self._handler(ctx) if self._handler is not None else FileTransformVerdict.no_change()
        written = apply_verdict(verdict, ctx)
        if written is None:
            self.summary.files_skipped += 1
            self._logger.debug("Skipped file", path=ctx.relative_path)
        else:
            self.summary.files_processed += 1
            self._logger.debug(
                "Wrote file", path=ctx.relative_path, target=str(written), verdict=verdict.kind.value
            )


def transform_tree(
    source_dir: PathLike,
    dest_dir: PathLike,
    handler: Optional[TransformHandler] = None,
    logger: Optional[Logger] = None,
) -> TransformSummary:
    """Mirror ``source_dir`` into ``dest_dir`` through ``handler``.

    Args:
        source_dir: Existing directory to read
        dest_dir: Destination root (created as needed)
        handler: Composed pipeline; None copies every file unchanged
        logger: Logger (shared logger if None)

    Returns:
        Summary counters for the run
    """
    return TreeTransformer(source_dir, dest_dir, handler, logger).run()
