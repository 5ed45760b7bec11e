"""
Treesmith Core: Input Validators.

Validation of template definitions coming from configuration files or
from callers building them by hand.
"""
from typing import Any, Dict, List

from treesmith.core.constants import ConfigKey, ErrorCode, Limits, TreesmithError

VALID_MATCH_STYLES = ("strict", "loose")


class ValidationError(TreesmithError):
    """Invalid configuration value."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        super().__init__(message, error_code)


def validate_pattern_list(patterns: Any, field_name: str = "patterns") -> bool:
    """Validate a list of raw pattern strings.

    Only the shape is checked here; the patterns themselves are compiled
    (and rejected if malformed) when the matcher group is built.

    Args:
        patterns: Value to check (None is accepted)
        field_name: Name used in error messages

    Returns:
        True if valid

    Raises:
        ValidationError: If the value is not a list of non-empty strings
    """
    if patterns is None:
        return True

    if not isinstance(patterns, list):
        raise ValidationError(f"{field_name} must be a list, got {type(patterns).__name__}")

    for pattern in patterns:
        if not isinstance(pattern, str) or not pattern:
            raise ValidationError(f"Invalid pattern in {field_name}: {pattern!r}")
        if len(pattern) > Limits.MAX_PATTERN_LENGTH:
            raise ValidationError(
                f"Pattern in {field_name} exceeds maximum length ({Limits.MAX_PATTERN_LENGTH})"
            )
        if "\x00" in pattern:
            raise ValidationError(f"Pattern in {field_name} contains null bytes")

    return True


def validate_variable_config(variable: Dict[str, Any]) -> bool:
    """Validate one template variable definition.

    A variable needs a placeholder and a replacement, given as ``value``
    or, failing that, ``default``.

    Raises:
        ValidationError: If the variable is invalid
    """
    if not isinstance(variable, dict):
        raise ValidationError("Variable must be a dictionary")

    placeholder = variable.get(ConfigKey.VAR_PLACEHOLDER)
    if not isinstance(placeholder, str) or not placeholder:
        raise ValidationError("Variable must have a non-empty 'placeholder' string")
    if len(placeholder) > Limits.MAX_PLACEHOLDER_LENGTH:
        raise ValidationError(
            f"Placeholder exceeds maximum length ({Limits.MAX_PLACEHOLDER_LENGTH})"
        )

    value = variable.get(ConfigKey.VAR_VALUE, variable.get(ConfigKey.VAR_DEFAULT))
    if value is None:
        raise ValidationError(f"Variable {placeholder!r} has no 'value' or 'default'")
    if not isinstance(value, (str, int, float, bool)):
        raise ValidationError(
            f"Variable {placeholder!r} value must be a scalar, got {type(value).__name__}"
        )

    validate_pattern_list(variable.get(ConfigKey.VAR_INCLUDES), f"{placeholder} includes")
    validate_pattern_list(variable.get(ConfigKey.VAR_EXCLUDES), f"{placeholder} excludes")

    return True


def validate_template_config(template: Dict[str, Any]) -> bool:
    """Validate a template definition.

    Raises:
        ValidationError: If the template or one of its variables is invalid
    """
    if not isinstance(template, dict):
        raise ValidationError("Template must be a dictionary")

    validate_pattern_list(template.get(ConfigKey.TEMPLATE_INCLUDES), "includes")
    validate_pattern_list(template.get(ConfigKey.TEMPLATE_EXCLUDES), "excludes")

    variables = template.get(ConfigKey.TEMPLATE_VARIABLES)
    if variables is not None:
        if not isinstance(variables, list):
            raise ValidationError("Template variables must be a list")

        seen: List[str] = []
        for i, variable in enumerate(variables):
            try:
                validate_variable_config(variable)
            except ValidationError as e:
                raise ValidationError(f"Invalid variable at index {i}: {e}") from e
            placeholder = variable[ConfigKey.VAR_PLACEHOLDER]
            if placeholder in seen:
                raise ValidationError(f"Duplicate placeholder {placeholder!r} at index {i}")
            seen.append(placeholder)

    render = template.get(ConfigKey.TEMPLATE_RENDER)
    if render is not None and not isinstance(render, (bool, dict)):
        raise ValidationError("Template 'render' must be a boolean or a context dictionary")

    return True


def validate_match_style(style: Any) -> bool:
    """Validate a matcher style name ("strict" or "loose")."""
    if not isinstance(style, str) or style.lower() not in VALID_MATCH_STYLES:
        raise ValidationError(
            f"Invalid match style: {style!r}. Must be one of {list(VALID_MATCH_STYLES)}"
        )
    return True
