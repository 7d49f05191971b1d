"""Tests for puregate.kernel.syntax.gate."""

from __future__ import annotations

import pytest

from puregate.kernel.diagnostics.models import Category, Severity
from puregate.kernel.exceptions import ParseError, ValidationError
from puregate.kernel.js.nodes import Program
from puregate.kernel.js.parser import (
    MAX_SYNTAX_ERRORS,
    ModuleFormat,
    ParseErrorRecord,
    ParseOutcome,
)
from puregate.kernel.syntax.gate import SyntaxGate, validate_syntax


class _ScriptedParser:
    """Parser stub that returns a fixed outcome or raises."""

    def __init__(self, outcome: ParseOutcome | None = None, error: Exception | None = None) -> None:
        self.outcome = outcome
        self.error = error
        self.calls: list[dict] = []

    def parse(self, source, *, module_format=ModuleFormat.INFER, max_errors=MAX_SYNTAX_ERRORS):
        self.calls.append({"module_format": module_format, "max_errors": max_errors})
        if self.error is not None:
            raise self.error
        return self.outcome


class TestSyntaxGate:
    """Tests for SyntaxGate.check."""

    def test_valid_source(self) -> None:
        result = SyntaxGate().check("const add = (a, b) => a + b;")
        assert result.valid
        assert isinstance(result.ast, Program)
        assert result.diagnostics == ()
        assert result.duration_ms >= 0

    def test_invalid_source(self) -> None:
        result = SyntaxGate().check("const x = ;", filename="gen.js")
        assert not result.valid
        assert result.ast is None
        assert len(result.diagnostics) >= 1
        diagnostic = result.diagnostics[0]
        assert diagnostic.category == Category.SYNTAX
        assert diagnostic.severity == Severity.ERROR
        assert diagnostic.location.line == 1
        assert diagnostic.location.file == "gen.js"
        assert diagnostic.suggestion == "Check for typos or missing punctuation"
        assert ">    1 | const x = ;" in diagnostic.snippet

    def test_error_cap(self) -> None:
        source = "\n".join(f"const v{i} = ;\nconst ok{i} = {i};" for i in range(15))
        result = SyntaxGate().check(source)
        assert 1 <= len(result.diagnostics) <= MAX_SYNTAX_ERRORS
        lines = [d.location.line for d in result.diagnostics]
        assert lines == sorted(lines)

    def test_custom_cap(self) -> None:
        source = "\n".join(f"const v{i} = ;\nconst ok{i} = {i};" for i in range(5))
        assert len(SyntaxGate().check(source, max_errors=1).diagnostics) == 1

    def test_modern_syntax(self) -> None:
        result = SyntaxGate().check("const name = user?.profile?.name ?? 'anonymous';")
        assert result.valid

    def test_unclosed_block_hint(self) -> None:
        result = SyntaxGate().check("const f = () => {\n  return 1;\n")
        assert not result.valid
        assert result.diagnostics[0].suggestion is not None

    def test_invalid_cap(self) -> None:
        with pytest.raises(ValidationError):
            SyntaxGate().check("const a = 1;", max_errors=0)

    def test_module_format_reported(self) -> None:
        result = SyntaxGate().check("export default 1;")
        assert result.valid
        assert result.module_format == "esm"

    def test_parser_receives_options(self) -> None:
        parser = _ScriptedParser(ParseOutcome(program=Program()))
        SyntaxGate(parser).check("x", module_format=ModuleFormat.PROPERTY_EXPORT, max_errors=4)
        assert parser.calls == [{"module_format": ModuleFormat.PROPERTY_EXPORT, "max_errors": 4}]

    def test_gate_caps_parser_output(self) -> None:
        errors = tuple(ParseErrorRecord(f"error {i}", line=i + 1) for i in range(6))
        parser = _ScriptedParser(ParseOutcome(program=None, errors=errors))
        result = SyntaxGate(parser).check("x", max_errors=3)
        assert [d.message for d in result.diagnostics] == ["error 0", "error 1", "error 2"]

    def test_conversion_failure_is_a_syntax_error(self) -> None:
        parser = _ScriptedParser(error=ParseError("Unsupported syntax node type: JSXElement"))
        result = SyntaxGate(parser).check("<div />")
        assert not result.valid
        assert len(result.diagnostics) == 1
        assert "JSXElement" in result.diagnostics[0].message


class TestValidateSyntax:
    """Tests for the validate_syntax helper."""

    def test_helper(self) -> None:
        assert validate_syntax("const a = 1;").valid
        assert not validate_syntax("const a = ;").valid
