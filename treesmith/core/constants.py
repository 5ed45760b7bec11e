"""
Treesmith Core: Constants and Type Definitions

This module provides system-wide constants, error codes, and the base
exception shared by every Treesmith layer.
"""
from enum import IntEnum

# Version information
TREESMITH_VERSION = "1.0.0"

# Pattern strings starting with this prefix are regular expressions.
# Part of the contract with configuration files: case-sensitive, exact.
REGEX_PREFIX = "regex:"


class ErrorCode(IntEnum):
    """Standardized error codes for Treesmith operations."""

    INVALID_INPUT = 1  # Bad pattern, invalid configuration
    NOT_FOUND = 2  # File or directory doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    CONFLICT = 4  # Resource conflict (exists, wrong type)
    INTERNAL_ERROR = 6  # Unexpected failure


class TreesmithError(Exception):
    """Base class for all Treesmith errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class Limits:
    """Resource limits and default values."""

    MAX_PATTERN_LENGTH = 4096
    MAX_PLACEHOLDER_LENGTH = 256
    MAX_FILE_SIZE = 256 * 1024 * 1024  # 256MB per template file

    # Text codec used for file contents
    CONTENT_ENCODING = "utf-8"
    CONTENT_ERRORS = "surrogateescape"


class ConfigKey:
    """Configuration key constants."""

    ROOT = "treesmith"

    LOGGING = "logging"
    MATCHING = "matching"
    RENDER = "render"
    TEMPLATES = "templates"

    # Template definition keys
    TEMPLATE_INCLUDES = "includes"
    TEMPLATE_EXCLUDES = "excludes"
    TEMPLATE_VARIABLES = "variables"
    TEMPLATE_RENDER = "render"

    # Variable definition keys
    VAR_PLACEHOLDER = "placeholder"
    VAR_VALUE = "value"
    VAR_DEFAULT = "default"
    VAR_INCLUDES = "includes"
    VAR_EXCLUDES = "excludes"


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.LOGGING: {
            "level": "INFO",
            "file": None,
        },
        ConfigKey.MATCHING: {
            "style": "loose",
        },
        ConfigKey.RENDER: {
            "suffixes": [".j2", ".jinja2", ".tmpl"],
        },
        ConfigKey.TEMPLATES: {},
    }
}
