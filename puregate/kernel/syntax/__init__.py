"""Syntax gate."""

from puregate.kernel.syntax.gate import SyntaxGate, validate_syntax

__all__ = ["SyntaxGate", "validate_syntax"]
