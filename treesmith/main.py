#!/usr/bin/env python3
"""Treesmith application entry points.

Wires the pieces together for a template run:

1. A TemplateDefinition (from configuration or built by the caller)
   is compiled into a MatcherGroup; malformed patterns fail here,
   before anything is written
2. The standard pipeline is assembled:
   progress -> filter -> replace -> render -> NO_CHANGE
3. transform_tree() walks the template and writes the destination

Example:
    >>> template = load_template_definition({
    ...     "includes": ["**"],
    ...     "excludes": ["secret.key"],
    ...     "variables": [{"placeholder": "{{name}}", "value": "world"}],
    ... })
    >>> summary = apply_template("template/", "out/", template)
"""

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from treesmith.core.constants import ConfigKey
from treesmith.core.file_ops import count_files
from treesmith.core.validators import validate_match_style, validate_template_config
from treesmith.infrastructure.cache_manager import PatternCache
from treesmith.infrastructure.config_manager import ConfigManager, get_config_manager
from treesmith.infrastructure.logger import Logger, get_logger
from treesmith.rules.group import MatcherGroup, ResolvedVariable
from treesmith.rules.patterns import MatcherStyle
from treesmith.transforms.base import FileTransformVerdict
from treesmith.transforms.middleware import MiddlewarePipeline
from treesmith.transforms.stages import (
    DEFAULT_TEMPLATE_SUFFIXES,
    FilterStage,
    ProgressStage,
    ProgressTracker,
    RenderStage,
    ReplaceStage,
)
from treesmith.transforms.tree import TransformHandler, TransformSummary, transform_tree

PathLike = Union[str, os.PathLike]
ProgressCallback = Callable[[ProgressTracker], None]


@dataclass
class TemplateDefinition:
    """Fully resolved template: scope patterns, variables, render context."""

    name: str = "template"
    includes: List[str] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)
    variables: List[ResolvedVariable] = field(default_factory=list)
    render_context: Optional[Dict[str, Any]] = None

    def build_group(
        self, style: MatcherStyle = MatcherStyle.LOOSE, cache: Optional[PatternCache] = None
    ) -> MatcherGroup:
        """Compile the matcher group; raises PatternError on bad patterns."""
        return MatcherGroup.from_resolved(self.includes, self.excludes, self.variables, style, cache)


def load_template_definition(data: Dict[str, Any], name: str = "template") -> TemplateDefinition:
    """Build a TemplateDefinition from a configuration mapping.

    Raises:
        ValidationError: If the mapping is malformed
    """
    validate_template_config(data)

    variables = []
    for var in data.get(ConfigKey.TEMPLATE_VARIABLES) or []:
        value = var.get(ConfigKey.VAR_VALUE, var.get(ConfigKey.VAR_DEFAULT))
        variables.append(
            ResolvedVariable(
                placeholder=var[ConfigKey.VAR_PLACEHOLDER],
                replacement=str(value),
                includes=tuple(var.get(ConfigKey.VAR_INCLUDES) or ()),
                excludes=tuple(var.get(ConfigKey.VAR_EXCLUDES) or ()),
            )
        )

    render = data.get(ConfigKey.TEMPLATE_RENDER)
    if render is True:
        render_context: Optional[Dict[str, Any]] = {}
    elif isinstance(render, dict):
        render_context = dict(render)
    else:
        render_context = None

    return TemplateDefinition(
        name=name,
        includes=list(data.get(ConfigKey.TEMPLATE_INCLUDES) or []),
        excludes=list(data.get(ConfigKey.TEMPLATE_EXCLUDES) or []),
        variables=variables,
        render_context=render_context,
    )


def template_from_config(name: str, config: Optional[ConfigManager] = None) -> TemplateDefinition:
    """Look up and build a named template from configuration."""
    config = config or get_config_manager()
    return load_template_definition(config.get_template(name), name)


def configure_logging(config: Optional[ConfigManager] = None) -> Logger:
    """Apply the configured level and log file to the shared logger."""
    config = config or get_config_manager()
    logger = get_logger()
    logger.set_level(config.get(f"{ConfigKey.ROOT}.{ConfigKey.LOGGING}.level", "INFO"))

    log_file = config.get(f"{ConfigKey.ROOT}.{ConfigKey.LOGGING}.file")
    if log_file:
        logger.add_handler(logger.create_file_handler(log_file))
    return logger


def match_style_from_config(config: Optional[ConfigManager] = None) -> MatcherStyle:
    config = config or get_config_manager()
    style = config.get(f"{ConfigKey.ROOT}.{ConfigKey.MATCHING}.style", "loose")
    validate_match_style(style)
    return MatcherStyle.from_value(style)


def build_pipeline(
    group: Optional[MatcherGroup] = None,
    tracker: Optional[ProgressTracker] = None,
    render_context: Optional[Dict[str, Any]] = None,
    render_suffixes=DEFAULT_TEMPLATE_SUFFIXES,
    logger: Optional[Logger] = None,
) -> TransformHandler:
    """Assemble the standard file transform pipeline.

    Args:
        group: Matcher group; None disables filtering and replacement
        tracker: Progress tracker; None disables progress reporting
        render_context: Jinja2 context; None disables template rendering
        render_suffixes: Suffixes marking Jinja2 templates
        logger: Logger passed to every stage

    Returns:
        Composed handler for transform_tree()
    """
    logger = logger or get_logger()
    pipeline: MiddlewarePipeline = MiddlewarePipeline()

    if tracker is not None:
        pipeline.add(ProgressStage(tracker, logger))
    if group is not None:
        pipeline.add(FilterStage(group, logger))
        # Placeholders must be replaced before Jinja2 sees them.
        pipeline.add(ReplaceStage(group, logger))
    if render_context is not None:
        pipeline.add(RenderStage(render_context, render_suffixes, logger=logger))

    return pipeline.finalize(lambda ctx: FileTransformVerdict.no_change())


def apply_template(
    source_dir: PathLike,
    dest_dir: PathLike,
    template: Optional[TemplateDefinition] = None,
    progress: Optional[ProgressCallback] = None,
    style: Optional[MatcherStyle] = None,
    config: Optional[ConfigManager] = None,
    logger: Optional[Logger] = None,
) -> TransformSummary:
    """Apply a template directory to a destination directory.

    Args:
        source_dir: Template root
        dest_dir: Destination root
        template: Template definition; None copies everything unchanged
        progress: Called with the tracker after every visited file
        style: Matcher style (configured style if None)
        config: Configuration manager (shared one if None)
        logger: Logger (shared one if None)

    Returns:
        Summary of the run

    Raises:
        PatternError: If a pattern is malformed (nothing is written)
        SourceNotDirectoryError: If ``source_dir`` is not a directory
        FileOperationError: On the first I/O failure
    """
    config = config or get_config_manager()
    logger = logger or get_logger()

    group = None
    render_context = None
    if template is not None:
        group = template.build_group(style or match_style_from_config(config))
        render_context = template.render_context

    tracker = None
    if progress is not None:
        tracker = ProgressTracker(total=count_files(source_dir), callback=progress)

    suffixes = config.get(f"{ConfigKey.ROOT}.{ConfigKey.RENDER}.suffixes", DEFAULT_TEMPLATE_SUFFIXES)
    handler = build_pipeline(group, tracker, render_context, suffixes, logger)

    with logger.add_context(template=template.name if template else "copy"):
        return transform_tree(source_dir, dest_dir, handler, logger)
