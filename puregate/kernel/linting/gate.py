"""Style gate: adapter between the validation pipeline and a style linter."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from puregate.kernel.diagnostics.models import (
    Category,
    Diagnostic,
    Severity,
    SourceLocation,
    StyleResult,
)
from puregate.kernel.diagnostics.snippets import code_snippet
from puregate.kernel.linting.config import convert_severity, merge_rule_config
from puregate.kernel.linting.linter import RuleEngineLinter, StyleLinter
from puregate.kernel.linting.models import StyleMessage
from puregate.kernel.logging import get_logger
from puregate.kernel.utils.timer import stage_timer

logger = get_logger(__name__)


def _diagnostic(message: StyleMessage, source: str, filename: str | None) -> Diagnostic:
    location = SourceLocation(
        line=max(message.line, 1),
        # Linter columns are 1-indexed, diagnostics are 0-indexed
        column=max(message.column - 1, 0),
        file=filename,
    )
    return Diagnostic(
        category=Category.STYLE,
        severity=convert_severity(message.severity),
        message=message.message,
        location=location,
        snippet=code_snippet(source, location),
        rule=message.rule_id,
        suggestion=message.suggestion,
    )


class StyleGate:
    """Run a style linter with the default rules plus caller overrides.

    Parameters
    ----------
    linter : StyleLinter | None
        Linter collaborator; defaults to :class:`RuleEngineLinter`
    """

    def __init__(self, linter: StyleLinter | None = None) -> None:
        self.linter: StyleLinter = linter or RuleEngineLinter()

    async def acheck(
        self,
        source: str,
        *,
        rules: Mapping[str, Any] | None = None,
        filename: str | None = None,
    ) -> StyleResult:
        """Lint ``source`` and fold the messages into a :class:`StyleResult`.

        ``valid`` is True when no message has error severity; warnings never
        fail the gate.
        """
        settings = merge_rule_config(rules)
        with stage_timer("style") as timer:
            messages = await self.linter.alint(source, rules=settings, filename=filename)
            diagnostics = tuple(_diagnostic(m, source, filename) for m in messages)

        error_count = sum(1 for d in diagnostics if d.severity == Severity.ERROR)
        warning_count = len(diagnostics) - error_count
        logger.debug(
            "Style check: {errors} error(s), {warnings} warning(s) in {ms}ms",
            errors=error_count,
            warnings=warning_count,
            ms=timer.duration_str,
        )
        return StyleResult(
            valid=error_count == 0,
            diagnostics=diagnostics,
            duration_ms=timer.duration_ms,
            error_count=error_count,
            warning_count=warning_count,
        )
