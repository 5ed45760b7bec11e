"""Treesmith - Pattern-driven file tree transformation.

Walks a template directory and materializes a transformed copy:
- rules: glob/regex pattern engine, ordered matchers, matcher groups
- transforms: middleware pipeline, transform stages, tree walk
- infrastructure: logging, configuration, compiled-pattern cache
- core: constants, file operations, validators
"""

from treesmith.core.constants import TREESMITH_VERSION as __version__
from treesmith.main import (
    TemplateDefinition,
    apply_template,
    build_pipeline,
    configure_logging,
    load_template_definition,
    template_from_config,
)

__all__ = [
    "__version__",
    "TemplateDefinition",
    "apply_template",
    "build_pipeline",
    "configure_logging",
    "load_template_definition",
    "template_from_config",
]
