"""puregate: validation gate for generated JavaScript.

Checks that a JavaScript source text is syntactically valid, keeps to a
pure-functional contract (no mutation of shared state, no side effects, no
global access, no loops, classes or ``this``) and satisfies a style rule
set, and reports every finding with a location, a code snippet and a hint.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("puregate")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"  # Source checkout without an install

from puregate.api.validation import (
    ais_valid,
    avalidate,
    avalidate_batch,
    validate,
    validate_syntax_only,
)
from puregate.kernel.diagnostics.models import (
    Category,
    Diagnostic,
    PurityResult,
    PurityViolation,
    Severity,
    SourceLocation,
    StyleResult,
    SyntaxResult,
    ValidationReport,
    ViolationKind,
)
from puregate.kernel.js.parser import ModuleFormat
from puregate.kernel.orchestration.options import ValidateOptions
from puregate.kernel.orchestration.validator import Validator

__all__ = [
    "Category",
    "Diagnostic",
    "ModuleFormat",
    "PurityResult",
    "PurityViolation",
    "Severity",
    "SourceLocation",
    "StyleResult",
    "SyntaxResult",
    "ValidateOptions",
    "ValidationReport",
    "Validator",
    "ViolationKind",
    "__version__",
    "ais_valid",
    "avalidate",
    "avalidate_batch",
    "validate",
    "validate_syntax_only",
]
