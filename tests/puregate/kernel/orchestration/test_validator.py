"""Tests for puregate.kernel.orchestration.validator."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pydantic
import pytest

from puregate.kernel.diagnostics.models import (
    Category,
    Diagnostic,
    PurityResult,
    PurityViolation,
    Severity,
    SourceLocation,
    StyleResult,
    SyntaxResult,
    ViolationKind,
)
from puregate.kernel.js.parser import ModuleFormat
from puregate.kernel.linting.models import SEVERITY_ERROR, SEVERITY_WARN, StyleMessage
from puregate.kernel.orchestration.options import ValidateOptions
from puregate.kernel.orchestration.validator import (
    Validator,
    aggregate_diagnostics,
    violation_to_diagnostic,
)

ADD = "const add = (a, b) => a + b;"


class _StaticLinter:
    """Linter stub returning the same messages for every call."""

    def __init__(self, messages: list[StyleMessage] | None = None) -> None:
        self.messages = messages or []
        self.calls = 0

    async def alint(
        self, source: str, *, rules: Mapping[str, Any], filename: str | None = None
    ) -> list[StyleMessage]:
        self.calls += 1
        return list(self.messages)


def _diagnostic(category: Category, severity: Severity, message: str) -> Diagnostic:
    return Diagnostic(
        category=category, severity=severity, message=message, location=SourceLocation(line=1)
    )


class TestHelpers:
    """Tests for conversion and aggregation helpers."""

    def test_violation_to_diagnostic(self) -> None:
        violation = PurityViolation(
            kind=ViolationKind.MUTATION,
            pattern="push",
            message="'push()' mutates the array in place",
            location=SourceLocation(line=3, column=2),
            snippet="snippet",
        )
        diagnostic = violation_to_diagnostic(violation)
        assert diagnostic.category == Category.PURITY
        assert diagnostic.severity == Severity.ERROR
        assert diagnostic.rule == "push"
        assert diagnostic.location == violation.location
        assert diagnostic.snippet == "snippet"
        assert diagnostic.suggestion is not None
        assert "concat()" in diagnostic.suggestion

    def test_aggregate_keeps_stage_order(self) -> None:
        syntax = SyntaxResult(valid=True)
        purity = PurityResult(
            valid=False, diagnostics=(_diagnostic(Category.PURITY, Severity.ERROR, "p"),)
        )
        style = StyleResult(
            valid=False,
            diagnostics=(
                _diagnostic(Category.STYLE, Severity.WARNING, "w"),
                _diagnostic(Category.STYLE, Severity.ERROR, "s"),
            ),
        )
        errors, warnings = aggregate_diagnostics(syntax, purity, style)
        assert [d.message for d in errors] == ["p", "s"]
        assert [d.message for d in warnings] == ["w"]

    def test_aggregate_absent_stages(self) -> None:
        syntax = SyntaxResult(
            valid=False, diagnostics=(_diagnostic(Category.SYNTAX, Severity.ERROR, "x"),)
        )
        errors, warnings = aggregate_diagnostics(syntax, None, None)
        assert len(errors) == 1
        assert warnings == ()


class TestValidate:
    """End-to-end validation through the default collaborators."""

    def test_conforming_source(self, validator: Validator) -> None:
        report = validator.validate(ADD)
        assert report.valid
        assert report.errors == ()
        assert report.purity is not None
        assert report.purity.violations == ()
        assert report.style is not None
        assert report.style.valid
        assert report.duration_ms >= 0

    def test_syntax_failure_skips_other_stages(self, validator: Validator) -> None:
        report = validator.validate("const x = ;")
        assert not report.valid
        assert report.purity is None
        assert report.style is None
        assert report.errors
        assert all(d.category == Category.SYNTAX for d in report.errors)
        assert report.errors[0].location.line == 1
        assert report.duration_ms >= 0

    def test_idempotent(self, validator: Validator) -> None:
        source = "let counter = 0;\nconst inc = () => { counter = counter + 1; };\nvar x = 1;"
        first = validator.validate(source)
        second = validator.validate(source)
        assert first.valid == second.valid
        assert first.errors == second.errors
        assert first.warnings == second.warnings

    def test_local_mutation_allowed(self, validator: Validator) -> None:
        report = validator.validate(
            "const fn = () => { const arr = [3, 1, 2]; arr.sort(); return arr; };"
        )
        assert report.valid
        assert report.purity is not None
        assert report.purity.violations == ()

    def test_outer_mutation_flagged(self, validator: Validator) -> None:
        report = validator.validate("let counter = 0; const inc = () => { counter = counter + 1; };")
        assert not report.valid
        assert report.purity is not None
        violations = report.purity.violations
        assert len(violations) == 1
        assert violations[0].kind == ViolationKind.MUTATION
        assert "variable reassignment: counter" in violations[0].pattern

    def test_side_effect_reported_by_both_stages(self, validator: Validator) -> None:
        report = validator.validate("console.log('hi');")
        assert not report.valid
        assert report.purity is not None
        assert [v.pattern for v in report.purity.violations] == ["console.log"]
        assert report.purity.violations[0].location.line == 1
        assert [d.category for d in report.errors] == [Category.PURITY, Category.STYLE]
        assert report.errors[0].rule == "console.log"
        assert report.errors[1].rule == "no-console"

    def test_forbidden_construct(self, validator: Validator) -> None:
        report = validator.validate(
            "const f = () => { for (let i = 0; i < 3; i += 1) { } return 0; };"
        )
        assert report.purity is not None
        assert [v.pattern for v in report.purity.violations] == ["ForStatement"]
        assert "functional alternatives" in report.purity.violations[0].message

    def test_style_runs_when_purity_fails(self, validator: Validator) -> None:
        report = validator.validate("var state = {};\nconst set = (v) => { state.value = v; };")
        assert report.purity is not None
        assert not report.purity.valid
        assert report.style is not None
        assert [d.rule for d in report.style.diagnostics] == ["no-var"]

    def test_skip_style(self, validator: Validator) -> None:
        report = validator.validate("var a = 1;", skip_style=True)
        assert report.valid
        assert report.style is None

    def test_style_warning_does_not_fail(self, validator: Validator) -> None:
        report = validator.validate("var a = 1;", style_rules={"no-var": "warn"})
        assert report.valid
        assert report.errors == ()
        assert [d.rule for d in report.warnings] == ["no-var"]

    def test_style_error_fails(self, validator: Validator) -> None:
        report = validator.validate("var a = 1;")
        assert not report.valid
        assert [d.category for d in report.errors] == [Category.STYLE]

    def test_allow_lists(self, validator: Validator) -> None:
        source = "const stamp = () => Date.now();\nconst later = (f) => setTimeout(f, 1);"
        report = validator.validate(source, allowed_identifiers=frozenset({"Date"}))
        assert report.purity is not None
        assert [v.pattern for v in report.purity.violations] == ["setTimeout"]

    def test_filename_on_locations(self, validator: Validator) -> None:
        report = validator.validate("console.log(1);", filename="gen.js")
        assert all(d.location.file == "gen.js" for d in report.errors)

    def test_max_errors(self, validator: Validator) -> None:
        source = "\n".join(f"const v{i} = ;\nconst ok{i} = {i};" for i in range(15))
        assert 1 <= len(validator.validate(source).errors) <= 10
        assert len(validator.validate(source, max_errors=1).errors) == 1

    def test_source_not_modified(self, validator: Validator) -> None:
        source = "var a = 1;\n"
        report = validator.validate(source)
        assert source == "var a = 1;\n"
        assert report.style is not None


class TestOptions:
    """Tests for option handling."""

    def test_options_object(self, validator: Validator) -> None:
        options = ValidateOptions(skip_style=True, filename="a.js")
        report = validator.validate("var a = 1;", options)
        assert report.style is None

    def test_overrides_on_top_of_options(self, validator: Validator) -> None:
        options = ValidateOptions(skip_style=True)
        report = validator.validate("var a = 1;", options, skip_style=False)
        assert report.style is not None

    def test_unknown_override_rejected(self, validator: Validator) -> None:
        with pytest.raises(pydantic.ValidationError):
            validator.validate(ADD, fix=True)

    def test_invalid_max_errors_rejected(self, validator: Validator) -> None:
        with pytest.raises(pydantic.ValidationError):
            validator.validate(ADD, max_errors=0)

    def test_options_frozen(self) -> None:
        options = ValidateOptions()
        with pytest.raises(pydantic.ValidationError):
            options.skip_style = True  # type: ignore[misc]

    def test_module_format_from_string(self) -> None:
        assert ValidateOptions(module_format="esm").module_format == ModuleFormat.DECLARATIVE_EXPORT


class TestEntryPoints:
    """Tests for syntax-only, boolean and batch entry points."""

    def test_validate_syntax_only(self, validator: Validator) -> None:
        result = validator.validate_syntax_only("console.log('hi');")
        assert isinstance(result, SyntaxResult)
        assert result.valid

    @pytest.mark.asyncio
    async def test_avalidate(self, validator: Validator) -> None:
        report = await validator.avalidate(ADD)
        assert report.valid

    @pytest.mark.asyncio
    async def test_ais_valid(self, validator: Validator) -> None:
        assert await validator.ais_valid(ADD)
        assert not await validator.ais_valid("console.log(1);")

    @pytest.mark.asyncio
    async def test_batch_in_input_order(self, validator: Validator) -> None:
        reports = await validator.avalidate_batch([ADD, "const x = ;", "console.log(1);"])
        assert [r.valid for r in reports] == [True, False, False]
        assert reports[1].purity is None

    @pytest.mark.asyncio
    async def test_batch_per_item_options(self, validator: Validator) -> None:
        reports = await validator.avalidate_batch(
            [("var a = 1;", ValidateOptions(skip_style=True)), ("var a = 1;", None)]
        )
        assert reports[0].valid
        assert reports[0].style is None
        assert not reports[1].valid


class TestInjectedLinter:
    """Tests with a substituted style linter."""

    def test_linter_errors_fail_validation(self) -> None:
        linter = _StaticLinter([StyleMessage("custom", SEVERITY_ERROR, "bad", line=1, column=3)])
        report = Validator(linter=linter).validate(ADD)
        assert not report.valid
        assert report.errors[0].rule == "custom"
        assert report.errors[0].location.column == 2

    def test_linter_warnings_pass(self) -> None:
        linter = _StaticLinter([StyleMessage("custom", SEVERITY_WARN, "meh")])
        report = Validator(linter=linter).validate(ADD)
        assert report.valid
        assert len(report.warnings) == 1

    def test_linter_not_called_after_syntax_failure(self) -> None:
        linter = _StaticLinter()
        Validator(linter=linter).validate("const x = ;")
        assert linter.calls == 0

    def test_linter_not_called_when_skipped(self) -> None:
        linter = _StaticLinter()
        Validator(linter=linter).validate(ADD, skip_style=True)
        assert linter.calls == 0
