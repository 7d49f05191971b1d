"""Core models for the style linting framework."""

from __future__ import annotations

from dataclasses import dataclass

from puregate.kernel.js.nodes import Node

SEVERITY_OFF = 0
SEVERITY_WARN = 1
SEVERITY_ERROR = 2


@dataclass(frozen=True, slots=True)
class RuleFinding:
    """One problem found by a rule, before severity is attached."""

    message: str
    node: Node
    suggestion: str | None = None


@dataclass(frozen=True, slots=True)
class StyleMessage:
    """A single message produced by a style linter.

    Attributes
    ----------
    rule_id : str | None
        Rule that produced the message; None for fatal parsing errors
    severity : int
        ``1`` (warning) or ``2`` (error)
    message : str
        Human-readable description
    line : int
        1-indexed line
    column : int
        1-indexed column
    fatal : bool
        True when the linter could not parse the source
    suggestion : str | None
        Optional remediation hint
    """

    rule_id: str | None
    severity: int
    message: str
    line: int = 1
    column: int = 1
    fatal: bool = False
    suggestion: str | None = None
