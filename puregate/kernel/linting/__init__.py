"""Style linting: rule settings, built-in rules, linter port and the style gate."""

from puregate.kernel.linting.config import (
    DEFAULT_STYLE_RULES,
    convert_severity,
    is_rule_enabled,
    list_enabled_rules,
    merge_rule_config,
    normalize_rule_setting,
)
from puregate.kernel.linting.gate import StyleGate
from puregate.kernel.linting.linter import RuleEngineLinter, StyleLinter
from puregate.kernel.linting.models import StyleMessage
from puregate.kernel.linting.style_rules import ALL_STYLE_RULES, STYLE_RULE_REGISTRY

__all__ = [
    "ALL_STYLE_RULES",
    "DEFAULT_STYLE_RULES",
    "STYLE_RULE_REGISTRY",
    "RuleEngineLinter",
    "StyleGate",
    "StyleLinter",
    "StyleMessage",
    "convert_severity",
    "is_rule_enabled",
    "list_enabled_rules",
    "merge_rule_config",
    "normalize_rule_setting",
]
