"""Shared diagnostic model for the validation pipeline.

Every stage reports its findings in the same shape so that the validator can
aggregate them into a single :class:`ValidationReport`. All models are frozen;
they are created once per detected problem and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from puregate.kernel.exceptions import ValidationError

if TYPE_CHECKING:
    from puregate.kernel.js.nodes import Program


class Category(StrEnum):
    """Pipeline stage that produced a diagnostic."""

    SYNTAX = "syntax"
    PURITY = "purity"
    STYLE = "style"


class Severity(StrEnum):
    """Diagnostic severity. Only errors affect validity."""

    ERROR = "error"
    WARNING = "warning"


class ViolationKind(StrEnum):
    """Classification of a purity contract violation."""

    MUTATION = "mutation"
    SIDE_EFFECT = "side_effect"
    GLOBAL_ACCESS = "global_access"
    FORBIDDEN_CONSTRUCT = "forbidden_construct"


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Position of a finding in the validated source.

    Attributes
    ----------
    line : int
        1-indexed line number
    column : int
        0-indexed column
    end_line : int | None
        1-indexed end line, when known
    end_column : int | None
        0-indexed end column, when known
    file : str | None
        Virtual filename used for reporting
    """

    line: int
    column: int = 0
    end_line: int | None = None
    end_column: int | None = None
    file: str | None = None

    def __post_init__(self) -> None:
        """Validate positions.

        Raises
        ------
        ValidationError
            If line is below 1 or column is negative
        """
        if self.line < 1:
            raise ValidationError("line", "must be at least 1", self.line)
        if self.column < 0:
            raise ValidationError("column", "cannot be negative", self.column)

    def __str__(self) -> str:
        position = f"{self.line}:{self.column}"
        return f"{self.file}:{position}" if self.file else position

    def to_dict(self) -> dict[str, Any]:
        """Render as a plain dictionary, omitting unknown fields."""
        data: dict[str, Any] = {"line": self.line, "column": self.column}
        if self.end_line is not None:
            data["end_line"] = self.end_line
        if self.end_column is not None:
            data["end_column"] = self.end_column
        if self.file:
            data["file"] = self.file
        return data


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single problem reported by any pipeline stage."""

    category: Category
    severity: Severity
    message: str
    location: SourceLocation
    snippet: str = ""
    rule: str | None = None
    suggestion: str | None = None

    @property
    def is_error(self) -> bool:
        """True for error-severity diagnostics."""
        return self.severity == Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        """Render as a JSON-compatible dictionary."""
        return {
            "category": str(self.category),
            "severity": str(self.severity),
            "message": self.message,
            "location": self.location.to_dict(),
            "snippet": self.snippet,
            "rule": self.rule,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True, slots=True)
class PurityViolation:
    """A purity contract violation found by the analyzer.

    Attributes
    ----------
    kind : ViolationKind
        Violation classification
    pattern : str
        The matched pattern: an identifier, a dotted member path, a method
        name, a node kind or a short description such as
        ``"variable reassignment: counter"``
    message : str
        Human readable explanation
    location : SourceLocation
        Where the offending node starts
    snippet : str
        Source context around the location
    """

    kind: ViolationKind
    pattern: str
    message: str
    location: SourceLocation
    snippet: str = ""


# ---------------------------------------------------------------------------
# Stage results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StageResult:
    """Outcome of one pipeline stage."""

    valid: bool
    diagnostics: tuple[Diagnostic, ...] = ()
    duration_ms: float = 0.0

    @property
    def errors(self) -> list[Diagnostic]:
        """Diagnostics with severity 'error'."""
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        """Diagnostics with severity 'warning'."""
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]


@dataclass(frozen=True, slots=True)
class SyntaxResult(StageResult):
    """Syntax stage outcome; carries the tree when parsing succeeded."""

    ast: Program | None = None
    module_format: str = "infer"


@dataclass(frozen=True, slots=True)
class PurityResult(StageResult):
    """Purity stage outcome with violations in traversal order."""

    violations: tuple[PurityViolation, ...] = ()


@dataclass(frozen=True, slots=True)
class StyleResult(StageResult):
    """Style stage outcome."""

    error_count: int = 0
    warning_count: int = 0


def _stage_dict(result: StageResult) -> dict[str, Any]:
    return {
        "valid": result.valid,
        "duration_ms": round(result.duration_ms, 3),
        "diagnostics": [d.to_dict() for d in result.diagnostics],
    }


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Aggregated outcome of one validation call.

    ``purity`` and ``style`` are ``None`` when the stage did not run, which is
    distinct from a stage that ran and found nothing.
    """

    valid: bool
    errors: tuple[Diagnostic, ...]
    warnings: tuple[Diagnostic, ...]
    syntax: SyntaxResult
    purity: PurityResult | None = None
    style: StyleResult | None = None
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Render as a JSON-compatible dictionary (the syntax tree is omitted)."""
        purity: dict[str, Any] | None = None
        if self.purity is not None:
            purity = _stage_dict(self.purity)
            purity["violations"] = [
                {
                    "kind": str(v.kind),
                    "pattern": v.pattern,
                    "message": v.message,
                    "location": v.location.to_dict(),
                }
                for v in self.purity.violations
            ]
        style: dict[str, Any] | None = None
        if self.style is not None:
            style = _stage_dict(self.style)
            style["error_count"] = self.style.error_count
            style["warning_count"] = self.style.warning_count
        return {
            "valid": self.valid,
            "errors": [d.to_dict() for d in self.errors],
            "warnings": [d.to_dict() for d in self.warnings],
            "syntax": _stage_dict(self.syntax),
            "purity": purity,
            "style": style,
            "duration_ms": round(self.duration_ms, 3),
        }
