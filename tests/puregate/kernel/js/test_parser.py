"""Tests for puregate.kernel.js.parser."""

from __future__ import annotations

import pytest

from puregate.kernel.exceptions import ValidationError
from puregate.kernel.js.nodes import (
    ChainExpression,
    ClassDeclaration,
    ExpressionStatement,
    Literal,
    LogicalExpression,
    MemberExpression,
    Program,
    PropertyDefinition,
    VariableDeclaration,
)
from puregate.kernel.js.parser import (
    MAX_SYNTAX_ERRORS,
    MODULE_SYNTAX_IN_SCRIPT,
    RETURN_OUTSIDE_FUNCTION,
    JavaScriptParser,
    ModuleFormat,
    ParseErrorRecord,
    TreeSitterParser,
    detect_module_format,
)


def _malformed(count: int) -> str:
    """One independently broken declaration per line, separated by valid ones."""
    return "\n".join(f"const v{i} = ;\nconst ok{i} = {i};" for i in range(count))


class TestDetectModuleFormat:
    """Tests for keyword-based module format detection."""

    def test_import_is_declarative(self) -> None:
        assert detect_module_format("import fs from 'fs';") == ModuleFormat.DECLARATIVE_EXPORT

    def test_export_is_declarative(self) -> None:
        assert detect_module_format("export const a = 1;") == ModuleFormat.DECLARATIVE_EXPORT

    def test_require_is_property_export(self) -> None:
        source = "const path = require('path');"
        assert detect_module_format(source) == ModuleFormat.PROPERTY_EXPORT

    def test_module_exports_is_property_export(self) -> None:
        assert detect_module_format("module.exports = 1;") == ModuleFormat.PROPERTY_EXPORT

    def test_declarative_wins_over_property(self) -> None:
        source = "const a = require('a');\nexport default a;"
        assert detect_module_format(source) == ModuleFormat.DECLARATIVE_EXPORT

    def test_plain_script_is_infer(self) -> None:
        assert detect_module_format("const a = 1;") == ModuleFormat.INFER


class TestTreeSitterParser:
    """Tests for the default parser adapter."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(TreeSitterParser(), JavaScriptParser)

    def test_valid_source(self) -> None:
        outcome = TreeSitterParser().parse("const add = (a, b) => a + b;")
        assert outcome.ok
        assert isinstance(outcome.program, Program)
        assert isinstance(outcome.program.body[0], VariableDeclaration)
        assert outcome.errors == ()

    def test_locations_are_attached(self) -> None:
        outcome = TreeSitterParser().parse("const a = 1;\nconst b = 2;")
        assert outcome.program is not None
        second = outcome.program.body[1]
        assert second.loc is not None
        assert second.loc.line == 2
        assert second.loc.column == 0

    def test_columns_count_characters(self) -> None:
        outcome = TreeSitterParser().parse('const s = "é"; const t = 1;')
        assert outcome.program is not None
        second = outcome.program.body[1]
        assert second.loc is not None
        assert second.loc.column == 15

    def test_comments_are_skipped(self) -> None:
        outcome = TreeSitterParser().parse("// header\nconst a = 1; /* trailing */\n")
        assert outcome.ok
        assert outcome.program is not None
        assert len(outcome.program.body) == 1

    def test_module_source(self) -> None:
        outcome = TreeSitterParser().parse("export const double = (x) => x * 2;")
        assert outcome.ok
        assert outcome.module_format == ModuleFormat.DECLARATIVE_EXPORT
        assert outcome.program is not None
        assert outcome.program.source_type == "module"

    def test_explicit_script_rejects_import(self) -> None:
        outcome = TreeSitterParser().parse(
            "import fs from 'fs';", module_format=ModuleFormat.PROPERTY_EXPORT
        )
        assert not outcome.ok
        assert outcome.program is None
        assert outcome.errors[0].message == MODULE_SYNTAX_IN_SCRIPT

    def test_return_outside_function(self) -> None:
        outcome = TreeSitterParser().parse("const a = 1;\nreturn a;")
        assert not outcome.ok
        assert outcome.errors == (ParseErrorRecord(RETURN_OUTSIDE_FUNCTION, 2, 0),)

    def test_return_inside_function(self) -> None:
        assert TreeSitterParser().parse("const f = () => { return 1; };").ok

    def test_single_error(self) -> None:
        outcome = TreeSitterParser().parse("const x = ;")
        assert not outcome.ok
        assert outcome.program is None
        assert len(outcome.errors) >= 1
        error = outcome.errors[0]
        assert error.line == 1
        assert error.column >= 0
        assert error.message

    def test_recovers_to_report_later_errors(self) -> None:
        outcome = TreeSitterParser().parse(_malformed(3))
        lines = {e.line for e in outcome.errors}
        assert 1 in lines
        assert 5 in lines

    def test_errors_are_in_source_order(self) -> None:
        outcome = TreeSitterParser().parse(_malformed(4))
        positions = [(e.line, e.column) for e in outcome.errors]
        assert positions == sorted(positions)

    def test_default_error_cap(self) -> None:
        outcome = TreeSitterParser().parse(_malformed(15))
        assert 1 <= len(outcome.errors) <= MAX_SYNTAX_ERRORS

    def test_custom_error_cap(self) -> None:
        outcome = TreeSitterParser().parse(_malformed(15), max_errors=1)
        assert len(outcome.errors) == 1

    def test_invalid_cap(self) -> None:
        with pytest.raises(ValidationError):
            TreeSitterParser().parse("const a = 1;", max_errors=0)

    def test_unsupported_syntax_is_an_error(self) -> None:
        outcome = TreeSitterParser().parse("const view = <div />;")
        assert not outcome.ok
        assert outcome.errors[0].line == 1


class TestModernSyntax:
    """Syntax newer than ES2017 parses without errors."""

    @pytest.mark.parametrize(
        "source",
        [
            "const value = obj?.foo?.bar?.baz;",
            "const result = obj?.method?.();",
            "const item = arr?.[0]?.value;",
            "const value = input ?? defaultValue;",
            'const value = a ?? b ?? c ?? "default";',
            "const big = 123456789012345678901234567890n;",
            "const million = 1_000_000; const binary = 0b1010_0001;",
            "a ||= b; c &&= d; e ??= f;",
            'const module = import("./module.js");',
            "try { doSomething(); } catch { handleError(); }",
            "async function* asyncGen() { yield await promise; }",
            'class MyClass { property = "value"; static staticProp = 42; }',
            'class MyClass { #privateField = "secret"; #privateMethod() { return this.#privateField; } }',
            "const { a, ...rest } = obj; const copy = { ...obj, b: 1 };",
            "class Registry { static { init(); } }",
        ],
    )
    def test_parses(self, source: str) -> None:
        outcome = TreeSitterParser().parse(source)
        assert outcome.ok, outcome.errors

    def test_optional_chain_shape(self) -> None:
        program = TreeSitterParser().parse("obj?.foo.bar;").program
        assert program is not None
        statement = program.body[0]
        assert isinstance(statement, ExpressionStatement)
        chain = statement.expression
        assert isinstance(chain, ChainExpression)
        outer = chain.expression
        assert isinstance(outer, MemberExpression)
        assert not outer.optional
        inner = outer.object
        assert isinstance(inner, MemberExpression)
        assert inner.optional

    def test_nullish_is_logical(self) -> None:
        program = TreeSitterParser().parse("a ?? b;").program
        assert program is not None
        statement = program.body[0]
        assert isinstance(statement, ExpressionStatement)
        assert isinstance(statement.expression, LogicalExpression)
        assert statement.expression.operator == "??"

    def test_numeric_literals(self) -> None:
        program = TreeSitterParser().parse("const a = 1_000; const b = 10n; const c = 0x1F;").program
        assert program is not None
        values = []
        for statement in program.body:
            assert isinstance(statement, VariableDeclaration)
            init = statement.declarations[0].init
            assert isinstance(init, Literal)
            values.append((init.value, init.bigint))
        assert values == [(1000, None), (10, "10"), (31, None)]

    def test_class_fields(self) -> None:
        program = TreeSitterParser().parse("class C { static count = 0; #id; }").program
        assert program is not None
        declaration = program.body[0]
        assert isinstance(declaration, ClassDeclaration)
        fields = declaration.body.body
        assert all(isinstance(f, PropertyDefinition) for f in fields)
        assert [f.is_static for f in fields] == [True, False]


class TestParseErrorRecord:
    """Tests for the error record model."""

    def test_defaults(self) -> None:
        record = ParseErrorRecord(message="Unexpected token")
        assert record.line == 1
        assert record.column == 0

    def test_equal_records_compare_equal(self) -> None:
        assert ParseErrorRecord("a", 1, 2) == ParseErrorRecord("a", 1, 2)
