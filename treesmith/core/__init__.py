"""Treesmith Core - constants, file operations and validators.

Import specific functions from submodules:
    from treesmith.core.constants import ErrorCode
    from treesmith.core.file_ops import read_file, write_file
    from treesmith.core.validators import validate_template_config
"""

from treesmith.core import constants, file_ops, validators

__all__ = [
    "constants",
    "file_ops",
    "validators",
]
