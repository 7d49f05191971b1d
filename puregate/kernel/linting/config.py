"""Style rule settings in the ESLint format.

A setting is a severity (``"off"``, ``"warn"``, ``"error"`` or ``0``, ``1``,
``2``) or a list whose first item is the severity and whose remaining
items are rule options::

    {"no-console": "off", "eqeqeq": ["error", "always"]}
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from puregate.kernel.diagnostics.models import Severity
from puregate.kernel.exceptions import ConfigurationError
from puregate.kernel.linting.models import SEVERITY_ERROR, SEVERITY_OFF, SEVERITY_WARN

_SEVERITY_NAMES = {"off": SEVERITY_OFF, "warn": SEVERITY_WARN, "error": SEVERITY_ERROR}

DEFAULT_STYLE_RULES: Mapping[str, Any] = MappingProxyType({
    "no-var": "error",
    "prefer-const": "error",
    "prefer-arrow-callback": "error",
    "no-unused-vars": [
        "error",
        {"args": "after-used", "argsIgnorePattern": "^_", "vars": "local"},
    ],
    "functional/no-loop-statements": "error",
    "functional/no-this-expressions": "error",
    "no-console": "error",
    "eqeqeq": ["error", "always"],
    "no-eval": "error",
    "no-implied-eval": "error",
    "no-new-func": "error",
    "no-param-reassign": "error",
})


def _severity_level(value: Any, rule_id: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"style_rules.{rule_id}", f"invalid severity {value!r}")
    if isinstance(value, int) and value in (SEVERITY_OFF, SEVERITY_WARN, SEVERITY_ERROR):
        return value
    if isinstance(value, str) and value.lower() in _SEVERITY_NAMES:
        return _SEVERITY_NAMES[value.lower()]
    raise ConfigurationError(
        f"style_rules.{rule_id}", f"invalid severity {value!r}; expected off, warn or error"
    )


def normalize_rule_setting(setting: Any, rule_id: str = "<rule>") -> tuple[int, tuple[Any, ...]]:
    """Split a rule setting into a numeric severity and its options.

    Raises
    ------
    ConfigurationError
        If the severity is not recognized
    """
    if isinstance(setting, list | tuple):
        if not setting:
            raise ConfigurationError(f"style_rules.{rule_id}", "empty rule setting")
        return _severity_level(setting[0], rule_id), tuple(setting[1:])
    return _severity_level(setting, rule_id), ()


def convert_severity(level: int) -> Severity:
    """Map a numeric linter severity onto the diagnostic severity."""
    return Severity.ERROR if level == SEVERITY_ERROR else Severity.WARNING


def merge_rule_config(overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Default rules with ``overrides`` applied on top, key by key."""
    merged = dict(DEFAULT_STYLE_RULES)
    if overrides:
        merged.update(overrides)
    return merged


def is_rule_enabled(rules: Mapping[str, Any], rule_id: str) -> bool:
    """True if ``rule_id`` is configured with a severity other than off."""
    if rule_id not in rules:
        return False
    level, _ = normalize_rule_setting(rules[rule_id], rule_id)
    return level != SEVERITY_OFF


def list_enabled_rules(rules: Mapping[str, Any]) -> list[str]:
    """Sorted ids of all enabled rules."""
    return sorted(rule_id for rule_id in rules if is_rule_enabled(rules, rule_id))
