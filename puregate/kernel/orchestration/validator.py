"""Validation orchestrator: sequences the gates and aggregates their findings.

Stage order is fixed:

1. **Syntax** always runs first. On failure nothing else runs and the
   report carries only syntax diagnostics.
2. **Purity** runs to completion on the syntax tree.
3. **Style** runs unless skipped, even when purity already failed, so that
   one call reports every problem it can find.
4. **Aggregate** partitions diagnostics into errors and warnings in stage
   order.

A report is valid when purity passed and style passed or was skipped.
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Iterable
from typing import Any

from puregate.kernel.diagnostics.models import (
    Category,
    Diagnostic,
    PurityResult,
    PurityViolation,
    Severity,
    StyleResult,
    SyntaxResult,
    ValidationReport,
)
from puregate.kernel.diagnostics.suggestions import purity_suggestion
from puregate.kernel.js.parser import JavaScriptParser, TreeSitterParser
from puregate.kernel.linting.gate import StyleGate
from puregate.kernel.linting.linter import RuleEngineLinter, StyleLinter
from puregate.kernel.logging import get_logger
from puregate.kernel.orchestration.options import ValidateOptions
from puregate.kernel.purity.analyzer import PurityAnalyzer
from puregate.kernel.syntax.gate import SyntaxGate
from puregate.kernel.utils.timer import stage_timer

logger = get_logger(__name__)


def violation_to_diagnostic(violation: PurityViolation) -> Diagnostic:
    """Convert a purity violation into an error diagnostic with a hint."""
    return Diagnostic(
        category=Category.PURITY,
        severity=Severity.ERROR,
        message=violation.message,
        location=violation.location,
        snippet=violation.snippet,
        rule=violation.pattern,
        suggestion=purity_suggestion(violation),
    )


def aggregate_diagnostics(
    syntax: SyntaxResult,
    purity: PurityResult | None,
    style: StyleResult | None,
) -> tuple[tuple[Diagnostic, ...], tuple[Diagnostic, ...]]:
    """Partition all stage diagnostics into (errors, warnings), keeping stage order."""
    errors: list[Diagnostic] = []
    warnings: list[Diagnostic] = []
    for result in (syntax, purity, style):
        if result is None:
            continue
        for diagnostic in result.diagnostics:
            (errors if diagnostic.is_error else warnings).append(diagnostic)
    return tuple(errors), tuple(warnings)


class Validator:
    """Run source text through the syntax, purity and style gates.

    Collaborators are injected at construction so that tests and hosts can
    substitute their own parser or linter.

    Parameters
    ----------
    parser : JavaScriptParser | None
        Parser adapter shared by the syntax gate and the default linter
    linter : StyleLinter | None
        Style linter; defaults to :class:`RuleEngineLinter` on ``parser``

    Examples
    --------
    >>> validator = Validator()
    >>> validator.validate("const add = (a, b) => a + b;").valid
    True
    """

    def __init__(
        self,
        parser: JavaScriptParser | None = None,
        linter: StyleLinter | None = None,
    ) -> None:
        self.parser: JavaScriptParser = parser or TreeSitterParser()
        self.syntax_gate = SyntaxGate(self.parser)
        self.style_gate = StyleGate(linter or RuleEngineLinter(self.parser))

    @staticmethod
    def _options(options: ValidateOptions | None, overrides: dict[str, Any]) -> ValidateOptions:
        if options is None:
            return ValidateOptions(**overrides)
        if overrides:
            return ValidateOptions.model_validate({**options.model_dump(), **overrides})
        return options

    def _check_purity(self, syntax: SyntaxResult, source: str, opts: ValidateOptions) -> PurityResult:
        assert syntax.ast is not None
        analyzer = PurityAnalyzer(
            allowed_identifiers=opts.allowed_identifiers,
            allowed_members=opts.allowed_members,
        )
        result = analyzer.analyze(syntax.ast, source, opts.filename)
        return dataclasses.replace(
            result, diagnostics=tuple(violation_to_diagnostic(v) for v in result.violations)
        )

    async def avalidate(
        self, source: str, options: ValidateOptions | None = None, **overrides: Any
    ) -> ValidationReport:
        """Validate ``source`` through every gate.

        Parameters
        ----------
        source : str
            JavaScript source text; never modified
        options : ValidateOptions | None
            Call options; keyword ``overrides`` are applied on top

        Returns
        -------
        ValidationReport
            The aggregated report, including per-stage results and timing
        """
        opts = self._options(options, overrides)
        with stage_timer("validate") as timer:
            syntax = self.syntax_gate.check(
                source,
                module_format=opts.module_format,
                max_errors=opts.max_errors,
                filename=opts.filename,
            )
            if not syntax.valid:
                errors, warnings = aggregate_diagnostics(syntax, None, None)
                logger.debug(
                    "Validation of {file} stopped at syntax with {count} error(s)",
                    file=opts.filename or "<source>",
                    count=len(errors),
                )
                return ValidationReport(
                    valid=False,
                    errors=errors,
                    warnings=warnings,
                    syntax=syntax,
                    duration_ms=timer.duration_ms,
                )

            purity = self._check_purity(syntax, source, opts)

            style: StyleResult | None = None
            if not opts.skip_style:
                style = await self.style_gate.acheck(
                    source, rules=opts.style_rules, filename=opts.filename
                )

            errors, warnings = aggregate_diagnostics(syntax, purity, style)
            valid = purity.valid and (style is None or style.valid)

        logger.debug(
            "Validated {file}: valid={valid}, {errors} error(s), {warnings} warning(s) in {ms}ms",
            file=opts.filename or "<source>",
            valid=valid,
            errors=len(errors),
            warnings=len(warnings),
            ms=timer.duration_str,
        )
        return ValidationReport(
            valid=valid,
            errors=errors,
            warnings=warnings,
            syntax=syntax,
            purity=purity,
            style=style,
            duration_ms=timer.duration_ms,
        )

    def validate(
        self, source: str, options: ValidateOptions | None = None, **overrides: Any
    ) -> ValidationReport:
        """Blocking form of :meth:`avalidate`.

        Must not be called from a running event loop; use ``avalidate`` there.
        """
        return asyncio.run(self.avalidate(source, options, **overrides))

    def validate_syntax_only(
        self, source: str, options: ValidateOptions | None = None, **overrides: Any
    ) -> SyntaxResult:
        """Run only the syntax gate."""
        opts = self._options(options, overrides)
        return self.syntax_gate.check(
            source,
            module_format=opts.module_format,
            max_errors=opts.max_errors,
            filename=opts.filename,
        )

    async def ais_valid(
        self, source: str, options: ValidateOptions | None = None, **overrides: Any
    ) -> bool:
        """True when ``source`` passes full validation."""
        report = await self.avalidate(source, options, **overrides)
        return report.valid

    async def avalidate_batch(
        self,
        items: Iterable[str | tuple[str, ValidateOptions | None]],
        options: ValidateOptions | None = None,
        **overrides: Any,
    ) -> list[ValidationReport]:
        """Validate several sources one after another, reports in input order.

        Each item is a source string, validated with the shared options, or
        a ``(source, options)`` pair that carries its own options.
        """
        shared = self._options(options, overrides)
        reports: list[ValidationReport] = []
        for item in items:
            if isinstance(item, str):
                source, item_options = item, shared
            else:
                source, item_options = item[0], item[1] or shared
            reports.append(await self.avalidate(source, item_options))
        return reports
