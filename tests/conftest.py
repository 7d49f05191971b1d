"""Configuration file for pytest containing fixtures and configuration.

This module provides fixtures that can be used across multiple test files:
- parser: The default tree-sitter-backed parser
- parse: Parses a source that is expected to be valid and returns its program
- validator: A validator with the default parser and style linter
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from puregate.kernel.js.nodes import Program
from puregate.kernel.js.parser import ModuleFormat, TreeSitterParser
from puregate.kernel.orchestration.validator import Validator


@pytest.fixture(scope="session")
def parser() -> TreeSitterParser:
    """Fixture providing the default parser."""
    return TreeSitterParser()


@pytest.fixture
def parse(parser: TreeSitterParser) -> Callable[..., Program]:
    """Fixture returning a helper that parses valid source into a program."""

    def _parse(source: str, module_format: ModuleFormat = ModuleFormat.INFER) -> Program:
        outcome = parser.parse(source, module_format=module_format)
        assert outcome.ok, outcome.errors
        assert outcome.program is not None
        return outcome.program

    return _parse


@pytest.fixture
def validator() -> Validator:
    """Fixture providing a validator with default collaborators."""
    return Validator()
