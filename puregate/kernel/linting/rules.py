"""Style rule protocol and runner."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from puregate.kernel.js.nodes import Node, Program, walk
from puregate.kernel.js.scope import ScopeManager, analyze_scopes
from puregate.kernel.linting.config import normalize_rule_setting
from puregate.kernel.linting.models import SEVERITY_OFF, RuleFinding, StyleMessage
from puregate.kernel.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RuleContext:
    """Everything a rule may inspect for one source text."""

    source: str
    program: Program
    scopes: ScopeManager
    nodes: tuple[Node, ...]

    @classmethod
    def build(cls, source: str, program: Program) -> RuleContext:
        return cls(source, program, analyze_scopes(program), tuple(walk(program)))

    def of_type(self, *types: type[Node]) -> list[Node]:
        """All nodes of the given classes, in pre-order."""
        return [node for node in self.nodes if isinstance(node, types)]


class StyleRule(Protocol):
    """Protocol for a single style rule."""

    rule_id: str
    description: str

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        """Run this rule against the context and return findings."""
        ...


def _message(rule_id: str, level: int, finding: RuleFinding) -> StyleMessage:
    span = finding.node.loc
    return StyleMessage(
        rule_id=rule_id,
        severity=level,
        message=finding.message,
        line=span.line if span else 1,
        # Linter messages carry 1-indexed columns
        column=span.column + 1 if span else 1,
        suggestion=finding.suggestion,
    )


def run_rules(
    registry: Mapping[str, StyleRule],
    settings: Mapping[str, Any],
    context: RuleContext,
) -> list[StyleMessage]:
    """Run every enabled rule in ``settings`` and return messages in source order.

    Rules named in ``settings`` but missing from ``registry`` are logged and
    ignored.
    """
    messages: list[StyleMessage] = []
    for rule_id, setting in settings.items():
        level, options = normalize_rule_setting(setting, rule_id)
        if level == SEVERITY_OFF:
            continue
        rule = registry.get(rule_id)
        if rule is None:
            logger.warning("Unknown style rule '{rule_id}' ignored", rule_id=rule_id)
            continue
        messages.extend(_message(rule_id, level, f) for f in rule.check(context, options))
    messages.sort(key=lambda m: (m.line, m.column))
    return messages
