"""Tests for puregate.kernel.diagnostics.models."""

from __future__ import annotations

import dataclasses

import pytest

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
from puregate.kernel.exceptions import ValidationError


def _diagnostic(severity: Severity = Severity.ERROR, category: Category = Category.STYLE) -> Diagnostic:
    return Diagnostic(
        category=category,
        severity=severity,
        message="Unexpected var, use let or const instead.",
        location=SourceLocation(line=2, column=4, file="gen.js"),
        rule="no-var",
    )


class TestSourceLocation:
    """Tests for SourceLocation."""

    def test_str_with_file(self) -> None:
        assert str(SourceLocation(line=3, column=1, file="gen.js")) == "gen.js:3:1"

    def test_str_without_file(self) -> None:
        assert str(SourceLocation(line=3)) == "3:0"

    def test_line_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            SourceLocation(line=0)

    def test_column_cannot_be_negative(self) -> None:
        with pytest.raises(ValidationError):
            SourceLocation(line=1, column=-1)

    def test_to_dict_omits_unknown_fields(self) -> None:
        assert SourceLocation(line=1, column=2).to_dict() == {"line": 1, "column": 2}

    def test_to_dict_full(self) -> None:
        location = SourceLocation(line=1, column=2, end_line=1, end_column=8, file="a.js")
        assert location.to_dict() == {
            "line": 1,
            "column": 2,
            "end_line": 1,
            "end_column": 8,
            "file": "a.js",
        }

    def test_is_frozen(self) -> None:
        location = SourceLocation(line=1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            location.line = 2  # type: ignore[misc]


class TestDiagnostic:
    """Tests for Diagnostic."""

    def test_is_error(self) -> None:
        assert _diagnostic(Severity.ERROR).is_error
        assert not _diagnostic(Severity.WARNING).is_error

    def test_to_dict(self) -> None:
        data = _diagnostic().to_dict()
        assert data["category"] == "style"
        assert data["severity"] == "error"
        assert data["rule"] == "no-var"
        assert data["location"] == {"line": 2, "column": 4, "file": "gen.js"}
        assert data["suggestion"] is None


class TestStageResult:
    """Tests for the stage result partitions."""

    def test_errors_and_warnings(self) -> None:
        error = _diagnostic(Severity.ERROR)
        warning = _diagnostic(Severity.WARNING)
        result = StageResult(valid=False, diagnostics=(warning, error))
        assert result.errors == [error]
        assert result.warnings == [warning]

    def test_syntax_result_defaults(self) -> None:
        result = SyntaxResult(valid=True)
        assert result.ast is None
        assert result.diagnostics == ()
        assert result.module_format == "infer"

    def test_style_result_counts(self) -> None:
        result = StyleResult(valid=True, warning_count=2)
        assert result.error_count == 0
        assert result.warning_count == 2


class TestValidationReport:
    """Tests for ValidationReport serialization."""

    def test_absent_stages_serialize_as_none(self) -> None:
        error = _diagnostic(category=Category.SYNTAX)
        syntax = SyntaxResult(valid=False, diagnostics=(error,), duration_ms=1.23456)
        report = ValidationReport(valid=False, errors=(error,), warnings=(), syntax=syntax)
        data = report.to_dict()
        assert data["purity"] is None
        assert data["style"] is None
        assert data["syntax"]["valid"] is False
        assert data["syntax"]["duration_ms"] == 1.235
        assert len(data["errors"]) == 1

    def test_purity_violations_serialized(self) -> None:
        violation = PurityViolation(
            kind=ViolationKind.SIDE_EFFECT,
            pattern="console.log",
            message="'console.log' writes to the console",
            location=SourceLocation(line=1),
        )
        report = ValidationReport(
            valid=False,
            errors=(),
            warnings=(),
            syntax=SyntaxResult(valid=True),
            purity=PurityResult(valid=False, violations=(violation,)),
            style=StyleResult(valid=True),
        )
        data = report.to_dict()
        assert data["purity"]["violations"] == [
            {
                "kind": "side_effect",
                "pattern": "console.log",
                "message": "'console.log' writes to the console",
                "location": {"line": 1, "column": 0},
            }
        ]
        assert data["style"]["error_count"] == 0
        assert "ast" not in data["syntax"]
