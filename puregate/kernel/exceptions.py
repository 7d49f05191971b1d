"""Core exception hierarchy for puregate.

Validation outcomes are never reported through exceptions: syntax errors,
purity violations and style findings all travel inside a report. The
exceptions below cover programmer and configuration mistakes only. All of
them inherit from PureGateError for easy exception handling.
"""

from __future__ import annotations

# ============================================================================
# Base Exception
# ============================================================================


class PureGateError(Exception):
    """Base exception for all puregate errors.

    Catch this to handle all puregate-specific errors.
    """

    pass


# ============================================================================
# Configuration & Validation Errors
# ============================================================================


class ConfigurationError(PureGateError):
    """Raised when configuration is invalid or missing.

    Examples
    --------
    Example usage::

        raise ConfigurationError("style_rules", "unknown severity 'fatal'")
    """

    def __init__(self, component: str, reason: str) -> None:
        """Initialize configuration error.

        Args
        ----
            component: Name of the component with invalid configuration
            reason: Explanation of what's wrong
        """
        super().__init__(f"Configuration error in '{component}': {reason}")
        self.component = component
        self.reason = reason


class ValidationError(PureGateError):
    """Raised when an argument or model field fails validation.

    Examples
    --------
    Example usage::

        raise ValidationError("max_errors", "must be at least 1", value=0)
    """

    def __init__(self, field: str, constraint: str, value: object = None) -> None:
        """Initialize validation error.

        Args
        ----
            field: Name of the field that failed validation
            constraint: Description of the validation constraint
            value: The invalid value (optional)
        """
        if value is not None:
            msg = f"Validation failed for '{field}': {constraint} (got {value!r})"
        else:
            msg = f"Validation failed for '{field}': {constraint}"
        super().__init__(msg)
        self.field = field
        self.constraint = constraint
        self.value = value


# ============================================================================
# Parsing & Analysis Errors
# ============================================================================


class ParseError(PureGateError):
    """Raised when parser output cannot be turned into a syntax tree.

    Source text that simply fails to parse is not an exception; it produces
    syntax diagnostics. This error signals an adapter-level problem.
    """

    pass


class UnsupportedNodeError(ParseError):
    """Raised when the parser emits a node kind the syntax tree does not model.

    Examples
    --------
    Example usage::

        raise UnsupportedNodeError("jsx_element", line=3, column=11)
    """

    def __init__(self, node_type: str, *, line: int = 1, column: int = 0) -> None:
        """Initialize unsupported node error.

        Args
        ----
            node_type: The raw node type reported by the parser
            line: 1-indexed line of the node
            column: 0-indexed column of the node
        """
        super().__init__(f"Unsupported syntax node type '{node_type}'")
        self.node_type = node_type
        self.line = line
        self.column = column


class AnalysisError(PureGateError):
    """Raised when an internal invariant of the tree walkers is broken.

    The purity analyzer converts this (and any other traversal failure) into
    a synthetic violation instead of letting it escape.
    """

    pass


__all__ = [
    "AnalysisError",
    "ConfigurationError",
    "ParseError",
    "PureGateError",
    "UnsupportedNodeError",
    "ValidationError",
]
