"""Module-level validation entry points.

Each function delegates to a shared default :class:`Validator`. Hosts that
need a different parser or linter construct their own ``Validator``.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import lru_cache
from typing import Any

from puregate.kernel.diagnostics.models import SyntaxResult, ValidationReport
from puregate.kernel.orchestration.options import ValidateOptions
from puregate.kernel.orchestration.validator import Validator


@lru_cache(maxsize=1)
def default_validator() -> Validator:
    """The shared validator with the default parser and linter."""
    return Validator()


async def avalidate(
    source: str, options: ValidateOptions | None = None, **overrides: Any
) -> ValidationReport:
    """Validate ``source`` through the syntax, purity and style gates.

    Examples
    --------
    >>> import asyncio
    >>> report = asyncio.run(avalidate("const add = (a, b) => a + b;"))
    >>> report.valid
    True
    """
    return await default_validator().avalidate(source, options, **overrides)


def validate(
    source: str, options: ValidateOptions | None = None, **overrides: Any
) -> ValidationReport:
    """Blocking form of :func:`avalidate`."""
    return default_validator().validate(source, options, **overrides)


def validate_syntax_only(
    source: str, options: ValidateOptions | None = None, **overrides: Any
) -> SyntaxResult:
    """Run only the syntax gate."""
    return default_validator().validate_syntax_only(source, options, **overrides)


async def ais_valid(source: str, options: ValidateOptions | None = None, **overrides: Any) -> bool:
    """True when ``source`` passes full validation."""
    return await default_validator().ais_valid(source, options, **overrides)


async def avalidate_batch(
    items: Iterable[str | tuple[str, ValidateOptions | None]],
    options: ValidateOptions | None = None,
    **overrides: Any,
) -> list[ValidationReport]:
    """Validate several sources sequentially; reports come back in input order."""
    return await default_validator().avalidate_batch(items, options, **overrides)
