#!/usr/bin/env python3
"""File transform vocabulary shared by the pipeline stages and the tree walk.

- FileTransformContext: what a stage sees for one file
- FileTransformVerdict: what the walk does with that file
- TransformError: failure raised by a stage

Example:
    >>> def upper(ctx, next_handler):
    ...     return FileTransformVerdict.transform(ctx.content.upper())
"""

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional

from treesmith.core.constants import ErrorCode, TreesmithError


class TransformError(TreesmithError):
    """Error raised by a transform stage."""

    def __init__(
        self,
        message: str,
        stage_name: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    ):
        super().__init__(message, error_code)
        self.stage_name = stage_name


@dataclass(frozen=True)
class FileTransformContext:
    """One file travelling through the pipeline.

    ``relative_path`` is the origin path relative to the walk root, with
    forward slashes; it is what patterns are matched against.
    """

    origin_path: Path
    target_path: Path
    content: str
    relative_path: str = ""

    def with_content(self, content: str) -> "FileTransformContext":
        return replace(self, content=content)


class VerdictKind(Enum):
    """Fate of a file at the destination."""

    SKIP = "skip"  # Write nothing
    TRANSFORM = "transform"  # New content, same name
    RENAME = "rename"  # Original content, new name
    OVERWRITE = "overwrite"  # New content, new name
    NO_CHANGE = "no_change"  # Original content, same name


@dataclass(frozen=True)
class FileTransformVerdict:
    """Result of running one file through the composed pipeline."""

    kind: VerdictKind
    new_content: Optional[str] = None
    new_name: Optional[str] = None

    @classmethod
    def skip(cls) -> "FileTransformVerdict":
        return cls(VerdictKind.SKIP)

    @classmethod
    def transform(cls, new_content: str) -> "FileTransformVerdict":
        return cls(VerdictKind.TRANSFORM, new_content=new_content)

    @classmethod
    def rename(cls, new_name: str) -> "FileTransformVerdict":
        return cls(VerdictKind.RENAME, new_name=new_name)

    @classmethod
    def overwrite(cls, new_content: str, new_name: str) -> "FileTransformVerdict":
        return cls(VerdictKind.OVERWRITE, new_content=new_content, new_name=new_name)

    @classmethod
    def no_change(cls) -> "FileTransformVerdict":
        return cls(VerdictKind.NO_CHANGE)

    def __post_init__(self):
        needs_content = self.kind in (VerdictKind.TRANSFORM, VerdictKind.OVERWRITE)
        needs_name = self.kind in (VerdictKind.RENAME, VerdictKind.OVERWRITE)
        if needs_content and self.new_content is None:
            raise TransformError(f"{self.kind.value} verdict requires new_content")
        if needs_name:
            if not self.new_name or "/" in self.new_name or self.new_name in (".", ".."):
                raise TransformError(
                    f"{self.kind.value} verdict requires a plain file name, got {self.new_name!r}",
                    error_code=ErrorCode.INVALID_INPUT,
                )

    @property
    def writes(self) -> bool:
        """False only for SKIP."""
        return self.kind is not VerdictKind.SKIP
