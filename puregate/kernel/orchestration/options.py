"""Per-call validation options."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from puregate.kernel.js.parser import MAX_SYNTAX_ERRORS, ModuleFormat


class ValidateOptions(BaseModel):
    """Options for one validation call.

    Attributes
    ----------
    filename : str | None
        Name attached to every diagnostic location
    module_format : ModuleFormat
        Module convention used when parsing; inferred from the source by default
    skip_style : bool
        Skip the style gate; validity then depends on purity alone
    style_rules : dict[str, Any]
        Rule settings merged over the default style rules
    max_errors : int
        Cap on reported syntax errors
    allowed_identifiers : frozenset[str]
        Forbidden global names to permit
    allowed_members : tuple[str, ...]
        Dotted member paths or ``a.b.*`` prefixes to permit
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    filename: str | None = Field(default=None, description="Name used in diagnostic locations")
    module_format: ModuleFormat = Field(
        default=ModuleFormat.INFER, description="cjs, esm or infer"
    )
    skip_style: bool = Field(default=False, description="Skip the style gate")
    style_rules: dict[str, Any] = Field(
        default_factory=dict, description="Overrides for the default style rules"
    )
    max_errors: int = Field(
        default=MAX_SYNTAX_ERRORS, ge=1, description="Maximum syntax errors to report"
    )
    allowed_identifiers: frozenset[str] = Field(
        default_factory=frozenset, description="Forbidden identifiers to permit"
    )
    allowed_members: tuple[str, ...] = Field(
        default=(), description="Member paths or wildcard prefixes to permit"
    )
