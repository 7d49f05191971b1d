"""Heuristic remediation hints.

These hints are advisory. They are derived from substring matches on raw
parser messages and violation patterns, and they never influence whether a
source passes. Returning ``None`` means no hint applies.
"""

from __future__ import annotations

from puregate.kernel.diagnostics.models import PurityViolation, ViolationKind


def syntax_suggestion(message: str) -> str | None:
    """Suggest a fix for a raw parser error message."""
    lower = message.lower()

    if "unterminated string" in lower or "invalid or unexpected token" in lower:
        return "Add the closing quote to terminate the string"

    if 'expected "}"' in lower:
        return "Add the missing closing brace"
    if 'expected ")"' in lower:
        return "Add the missing closing parenthesis"
    if 'expected "]"' in lower:
        return "Add the missing closing bracket"

    if "unexpected token" in lower:
        if "}" in lower:
            return "Check for missing opening brace or extra closing brace"
        if ")" in lower:
            return "Check for missing opening parenthesis or extra closing parenthesis"
        if "]" in lower:
            return "Check for missing opening bracket or extra closing bracket"
        return "Check for typos or missing punctuation"

    if "unterminated template" in lower:
        return "Add the closing backtick to terminate the template literal"

    if "unexpected end of input" in lower:
        return "Check for an unclosed brace, parenthesis, bracket or string"

    if "missing semicolon" in lower:
        return "Add a semicolon at the end of the statement"

    if "reserved word" in lower:
        return "This word is reserved and cannot be used as an identifier"

    if "duplicate" in lower and "export" in lower:
        return "Remove the duplicate export or rename one of them"

    if "unsupported syntax" in lower:
        return "Rewrite this construct in plain JavaScript; JSX and decorators are not accepted"

    return None


def purity_suggestion(violation: PurityViolation) -> str | None:
    """Suggest a functional alternative for a purity violation."""
    pattern = violation.pattern

    match violation.kind:
        case ViolationKind.MUTATION:
            if pattern in ("push", "pop", "shift", "unshift"):
                return (
                    "Use spread operator [...arr, newItem] or concat() instead of "
                    "mutating array methods"
                )
            if pattern in ("sort", "reverse"):
                return "Use toSorted() or toReversed() for non-mutating alternatives"
            if pattern == "splice":
                return "Use toSpliced() or slice() to build a new array"
            if pattern in ("property assignment", "property deletion"):
                return "Use spread operator { ...obj, prop: value } to create a new object instead"
            if pattern.startswith("Object.") or pattern.startswith("Reflect."):
                return "Build a new object with spread syntax instead of reflecting on it"
            return "Create a new value instead of mutating the existing one"

        case ViolationKind.SIDE_EFFECT:
            if pattern.startswith("console"):
                return "Remove console statements for pure functions"
            if pattern in ("Math.random", "Date", "crypto.randomUUID", "performance.now"):
                return "Pass random or time-dependent values as parameters for deterministic behavior"
            if pattern.startswith(("fs.", "child_process.")):
                return "Move file and process I/O to the caller and pass data in as arguments"
            return "Remove side effects to make the function pure"

        case ViolationKind.GLOBAL_ACCESS:
            return "Pass required values as function parameters instead of accessing globals"

        case ViolationKind.FORBIDDEN_CONSTRUCT:
            if "For" in pattern or "While" in pattern:
                return "Use map(), filter(), reduce(), or recursion instead of loops"
            if "Class" in pattern:
                return "Use factory functions or plain objects instead of classes"
            if pattern == "ThisExpression":
                return "Use closures or pass context explicitly instead of 'this'"
            return "Refactor to use functional patterns"

    return None
