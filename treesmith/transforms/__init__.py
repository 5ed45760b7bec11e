"""Treesmith Transforms - File transform pipeline and tree walk.

- MiddlewarePipeline: Generic chain of responsibility
- FileTransformContext / FileTransformVerdict: Per-file vocabulary
- Stages: filter, replace, Jinja2 render, progress
- transform_tree: Applies verdicts to a destination directory
"""

from .base import FileTransformContext, FileTransformVerdict, TransformError, VerdictKind
from .middleware import Middleware, MiddlewarePipeline
from .stages import FilterStage, ProgressStage, ProgressTracker, RenderStage, ReplaceStage
from .tree import TransformSummary, TreeTransformer, apply_verdict, transform_tree

__all__ = [
    # Pipeline
    "Middleware",
    "MiddlewarePipeline",
    # Vocabulary
    "FileTransformContext",
    "FileTransformVerdict",
    "VerdictKind",
    "TransformError",
    # Stages
    "FilterStage",
    "ReplaceStage",
    "RenderStage",
    "ProgressStage",
    "ProgressTracker",
    # Tree walk
    "TransformSummary",
    "TreeTransformer",
    "apply_verdict",
    "transform_tree",
]
