"""Tests for puregate.kernel.diagnostics.suggestions."""

from __future__ import annotations

import pytest

from puregate.kernel.diagnostics.models import PurityViolation, SourceLocation, ViolationKind
from puregate.kernel.diagnostics.suggestions import purity_suggestion, syntax_suggestion


def _violation(kind: ViolationKind, pattern: str) -> PurityViolation:
    return PurityViolation(kind=kind, pattern=pattern, message="", location=SourceLocation(line=1))


class TestSyntaxSuggestion:
    """Tests for syntax_suggestion."""

    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("Unexpected token }", "Check for missing opening brace or extra closing brace"),
            ("Unexpected token )", "Check for missing opening parenthesis or extra closing parenthesis"),
            ("Unexpected token ;", "Check for typos or missing punctuation"),
            ("Invalid or unexpected token", "Add the closing quote to terminate the string"),
            ("Unexpected end of input", "Check for an unclosed brace, parenthesis, bracket or string"),
            ("Unexpected reserved word", "This word is reserved and cannot be used as an identifier"),
            ('Unexpected token, expected "}"', "Add the missing closing brace"),
            ('Unexpected token, expected ")"', "Add the missing closing parenthesis"),
            ("Unexpected token ']'", "Check for missing opening bracket or extra closing bracket"),
            ("Missing semicolon.", "Add a semicolon at the end of the statement"),
            ("Unterminated template.", "Add the closing backtick to terminate the template literal"),
            (
                "Unsupported syntax: jsx self closing element",
                "Rewrite this construct in plain JavaScript; JSX and decorators are not accepted",
            ),
        ],
    )
    def test_known_messages(self, message: str, expected: str) -> None:
        assert syntax_suggestion(message) == expected

    def test_unknown_message(self) -> None:
        assert syntax_suggestion("Illegal break statement") is None


class TestPuritySuggestion:
    """Tests for purity_suggestion."""

    @pytest.mark.parametrize(
        ("kind", "pattern", "fragment"),
        [
            (ViolationKind.MUTATION, "push", "concat()"),
            (ViolationKind.MUTATION, "sort", "toSorted()"),
            (ViolationKind.MUTATION, "pop", "concat()"),
            (ViolationKind.MUTATION, "reverse", "toReversed()"),
            (ViolationKind.MUTATION, "splice", "toSpliced()"),
            (ViolationKind.MUTATION, "property assignment", "spread operator"),
            (ViolationKind.MUTATION, "variable reassignment: counter", "new value"),
            (ViolationKind.SIDE_EFFECT, "console.log", "console"),
            (ViolationKind.SIDE_EFFECT, "Math.random", "deterministic"),
            (ViolationKind.SIDE_EFFECT, "fs.promises.*", "I/O"),
            (ViolationKind.GLOBAL_ACCESS, "window", "parameters"),
            (ViolationKind.FORBIDDEN_CONSTRUCT, "ForStatement", "reduce()"),
            (ViolationKind.FORBIDDEN_CONSTRUCT, "ClassDeclaration", "factory functions"),
            (ViolationKind.FORBIDDEN_CONSTRUCT, "ThisExpression", "closures"),
        ],
    )
    def test_hint(self, kind: ViolationKind, pattern: str, fragment: str) -> None:
        suggestion = purity_suggestion(_violation(kind, pattern))
        assert suggestion is not None
        assert fragment in suggestion

    def test_generic_construct(self) -> None:
        suggestion = purity_suggestion(_violation(ViolationKind.FORBIDDEN_CONSTRUCT, "WithStatement"))
        assert suggestion == "Refactor to use functional patterns"

    @pytest.mark.parametrize(
        "pattern",
        [
            "variable reassignment: population",
            "parameter reassignment: sorted",
            "update expression (variable reassignment: shifted)",
            "variable reassignment: reversed",
        ],
    )
    def test_names_containing_method_words(self, pattern: str) -> None:
        suggestion = purity_suggestion(_violation(ViolationKind.MUTATION, pattern))
        assert suggestion == "Create a new value instead of mutating the existing one"
