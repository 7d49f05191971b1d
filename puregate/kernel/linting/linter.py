"""Style linter port and the default rule-engine implementation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from puregate.kernel.exceptions import ParseError
from puregate.kernel.js.parser import JavaScriptParser, TreeSitterParser
from puregate.kernel.linting.models import SEVERITY_ERROR, StyleMessage
from puregate.kernel.linting.rules import RuleContext, StyleRule, run_rules
from puregate.kernel.linting.style_rules import STYLE_RULE_REGISTRY
from puregate.kernel.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class StyleLinter(Protocol):
    """Port for linters that check source text against a rule configuration.

    Implementations never modify the source and report columns 1-indexed.
    """

    async def alint(
        self,
        source: str,
        *,
        rules: Mapping[str, Any],
        filename: str | None = None,
    ) -> list[StyleMessage]:
        """Lint ``source`` with the given rule settings."""
        ...


def _parsing_error(message: str, line: int = 1, column: int = 1) -> StyleMessage:
    return StyleMessage(
        rule_id=None,
        severity=SEVERITY_ERROR,
        message=f"Parsing error: {message}",
        line=line,
        column=column,
        fatal=True,
    )


class RuleEngineLinter:
    """Default :class:`StyleLinter` running the built-in style rules.

    Parameters
    ----------
    parser : JavaScriptParser | None
        Parser used to build the syntax tree; defaults to :class:`TreeSitterParser`
    registry : Mapping[str, StyleRule] | None
        Available rules by id; defaults to all built-in rules
    """

    def __init__(
        self,
        parser: JavaScriptParser | None = None,
        registry: Mapping[str, StyleRule] | None = None,
    ) -> None:
        self.parser: JavaScriptParser = parser or TreeSitterParser()
        self.registry: Mapping[str, StyleRule] = (
            registry if registry is not None else STYLE_RULE_REGISTRY
        )

    async def alint(
        self,
        source: str,
        *,
        rules: Mapping[str, Any],
        filename: str | None = None,
    ) -> list[StyleMessage]:
        try:
            outcome = self.parser.parse(source, max_errors=1)
        except ParseError as e:
            return [_parsing_error(str(e))]
        if not outcome.ok or outcome.program is None:
            if not outcome.errors:
                return [_parsing_error("Syntax error")]
            first = outcome.errors[0]
            return [_parsing_error(first.message, first.line, first.column + 1)]

        context = RuleContext.build(source, outcome.program)
        messages = run_rules(self.registry, rules, context)
        logger.debug(
            "Linted {file} with {rules} rule(s): {count} message(s)",
            file=filename or "<source>",
            rules=len(rules),
            count=len(messages),
        )
        return messages
