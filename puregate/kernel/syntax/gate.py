"""Syntax gate: parse once in recovery mode and report every error it can find.

The gate is the first stage of every validation. When it fails, nothing
downstream runs; when it passes, its syntax tree is handed to the purity
analyzer and nothing parses the source a second time for that purpose.
"""

from __future__ import annotations

from puregate.kernel.diagnostics.models import (
    Category,
    Diagnostic,
    Severity,
    SourceLocation,
    SyntaxResult,
)
from puregate.kernel.diagnostics.snippets import code_snippet
from puregate.kernel.diagnostics.suggestions import syntax_suggestion
from puregate.kernel.exceptions import ParseError, ValidationError
from puregate.kernel.js.parser import (
    MAX_SYNTAX_ERRORS,
    JavaScriptParser,
    ModuleFormat,
    ParseErrorRecord,
    TreeSitterParser,
)
from puregate.kernel.logging import get_logger
from puregate.kernel.utils.timer import stage_timer

logger = get_logger(__name__)


def _diagnostic(record: ParseErrorRecord, source: str, filename: str | None) -> Diagnostic:
    location = SourceLocation(line=record.line, column=record.column, file=filename)
    return Diagnostic(
        category=Category.SYNTAX,
        severity=Severity.ERROR,
        message=record.message,
        location=location,
        snippet=code_snippet(source, location),
        suggestion=syntax_suggestion(record.message),
    )


class SyntaxGate:
    """Decide whether source text is well-formed JavaScript.

    Parameters
    ----------
    parser : JavaScriptParser | None
        Parser adapter; defaults to :class:`TreeSitterParser`
    """

    def __init__(self, parser: JavaScriptParser | None = None) -> None:
        self.parser: JavaScriptParser = parser or TreeSitterParser()

    def check(
        self,
        source: str,
        *,
        module_format: ModuleFormat = ModuleFormat.INFER,
        max_errors: int = MAX_SYNTAX_ERRORS,
        filename: str | None = None,
    ) -> SyntaxResult:
        """Parse ``source`` and report up to ``max_errors`` syntax errors.

        Returns
        -------
        SyntaxResult
            ``valid=True`` with the syntax tree attached, or ``valid=False``
            with one error diagnostic per collected parse error and no tree

        Raises
        ------
        ValidationError
            If ``max_errors`` is smaller than 1
        """
        if max_errors < 1:
            raise ValidationError("max_errors", "must be at least 1", max_errors)

        with stage_timer("syntax") as timer:
            try:
                outcome = self.parser.parse(
                    source, module_format=module_format, max_errors=max_errors
                )
            except ParseError as e:
                # Parsed, but the tree holds syntax the typed model cannot express
                logger.debug("Syntax tree conversion failed: {error}", error=e)
                record = ParseErrorRecord(message=str(e))
                return SyntaxResult(
                    valid=False,
                    diagnostics=(_diagnostic(record, source, filename),),
                    duration_ms=timer.duration_ms,
                    module_format=str(module_format),
                )

            if outcome.ok:
                logger.debug("Syntax check passed in {ms}ms", ms=timer.duration_str)
                return SyntaxResult(
                    valid=True,
                    ast=outcome.program,
                    duration_ms=timer.duration_ms,
                    module_format=str(outcome.module_format),
                )

            diagnostics = tuple(
                _diagnostic(record, source, filename) for record in outcome.errors[:max_errors]
            )
            logger.debug(
                "Syntax check failed with {count} error(s) in {ms}ms",
                count=len(diagnostics),
                ms=timer.duration_str,
            )
            return SyntaxResult(
                valid=False,
                diagnostics=diagnostics,
                duration_ms=timer.duration_ms,
                module_format=str(outcome.module_format),
            )


def validate_syntax(
    source: str,
    *,
    module_format: ModuleFormat = ModuleFormat.INFER,
    max_errors: int = MAX_SYNTAX_ERRORS,
    filename: str | None = None,
    parser: JavaScriptParser | None = None,
) -> SyntaxResult:
    """Run the syntax gate once with a default or given parser."""
    return SyntaxGate(parser).check(
        source, module_format=module_format, max_errors=max_errors, filename=filename
    )
