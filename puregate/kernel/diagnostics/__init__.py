"""Shared diagnostic model, snippets and remediation hints."""

from puregate.kernel.diagnostics.models import (
    Category,
    Diagnostic,
    PurityResult,
    PurityViolation,
    Severity,
    SourceLocation,
    StageResult,
    StyleResult,
    SyntaxResult,
    ValidationReport,
    ViolationKind,
)
from puregate.kernel.diagnostics.snippets import code_snippet

__all__ = [
    "Category",
    "Diagnostic",
    "PurityResult",
    "PurityViolation",
    "Severity",
    "SourceLocation",
    "StageResult",
    "StyleResult",
    "SyntaxResult",
    "ValidationReport",
    "ViolationKind",
    "code_snippet",
]
