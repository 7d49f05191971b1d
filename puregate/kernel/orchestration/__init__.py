"""Validation orchestration."""

from puregate.kernel.orchestration.options import ValidateOptions
from puregate.kernel.orchestration.validator import (
    Validator,
    aggregate_diagnostics,
    violation_to_diagnostic,
)

__all__ = ["ValidateOptions", "Validator", "aggregate_diagnostics", "violation_to_diagnostic"]
