"""Configuration data models for puregate."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from puregate.kernel.exceptions import ValidationError
from puregate.kernel.js.parser import MAX_SYNTAX_ERRORS, ModuleFormat

if TYPE_CHECKING:
    from puregate.kernel.orchestration.options import ValidateOptions


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging configuration for puregate.

    Attributes
    ----------
    level : str, default="WARNING"
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    format : str, default="structured"
        Output format (console, json, structured, rich)
    output_file : str | None, default=None
        Optional file path to write logs to
    use_color : bool, default=True
        Use ANSI color codes (auto-disabled for non-TTY)
    include_timestamp : bool, default=True
        Include timestamp in log output
    backtrace : bool, default=True
        Enable backtrace for debugging
    diagnose : bool, default=False
        Include variable values in tracebacks

    Examples
    --------
    TOML configuration:

    ```toml
    [tool.puregate.logging]
    level = "DEBUG"
    format = "rich"
    ```

    Environment variable overrides:

    ```bash
    export PUREGATE_LOG_LEVEL=DEBUG
    export PUREGATE_LOG_FORMAT=json
    export PUREGATE_LOG_FILE=/var/log/puregate.log
    ```
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json", "structured", "rich"] = "structured"
    output_file: str | None = None
    use_color: bool = True
    include_timestamp: bool = True
    backtrace: bool = True
    diagnose: bool = False


@dataclass(frozen=True, slots=True)
class PureGateConfig:
    """Project-level validation defaults.

    Attributes
    ----------
    max_errors : int
        Cap on reported syntax errors
    module_format : ModuleFormat
        Module convention used when parsing
    skip_style : bool
        Skip the style gate
    allowed_identifiers : tuple[str, ...]
        Forbidden global names to permit project-wide
    allowed_members : tuple[str, ...]
        Member paths or ``a.b.*`` prefixes to permit project-wide
    style_rules : dict[str, Any]
        Overrides for the default style rules
    logging : LoggingConfig
        Logging configuration

    Examples
    --------
    TOML configuration in pyproject.toml:

    ```toml
    [tool.puregate]
    max_errors = 5
    module_format = "esm"
    allowed_members = ["console.debug"]

    [tool.puregate.style_rules]
    no-console = "off"
    eqeqeq = ["error", "smart"]
    ```
    """

    max_errors: int = MAX_SYNTAX_ERRORS
    module_format: ModuleFormat = ModuleFormat.INFER
    skip_style: bool = False
    allowed_identifiers: tuple[str, ...] = ()
    allowed_members: tuple[str, ...] = ()
    style_rules: dict[str, Any] = field(default_factory=dict)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        """Validate configuration values.

        Raises
        ------
        ValidationError
            If ``max_errors`` is smaller than 1
        """
        if self.max_errors < 1:
            raise ValidationError("max_errors", "must be at least 1", self.max_errors)

    def to_options(self, **overrides: Any) -> ValidateOptions:
        """Build per-call options from these defaults, with ``overrides`` on top."""
        from puregate.kernel.orchestration.options import ValidateOptions

        values: dict[str, Any] = {
            "max_errors": self.max_errors,
            "module_format": self.module_format,
            "skip_style": self.skip_style,
            "allowed_identifiers": frozenset(self.allowed_identifiers),
            "allowed_members": self.allowed_members,
            "style_rules": dict(self.style_rules),
        }
        values.update(overrides)
        return ValidateOptions(**values)
