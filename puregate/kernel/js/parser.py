"""Parser adapter: source text to typed syntax tree with error recovery.

The default adapter is backed by tree-sitter and its JavaScript grammar,
which covers current ECMAScript (optional chaining, nullish coalescing,
BigInt, numeric separators, logical assignment, class fields and private
members). tree-sitter always recovers: a single parse yields a complete tree
in which broken regions are ``ERROR`` nodes and tokens the parser had to
assume are zero-width ``MISSING`` nodes. Each of those becomes one error
record, in source order, up to the error cap.

The grammar accepts some programs an engine rejects at load time. The
adapter adds the two such checks that depend on the module format:
``import``/``export`` in a script, and ``return`` outside a function.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache
from typing import Any, Protocol, runtime_checkable

import tree_sitter_javascript
from tree_sitter import Language, Parser

from puregate.kernel.exceptions import UnsupportedNodeError, ValidationError
from puregate.kernel.js.convert import EXTRA_NODE_TYPES, TreeConverter
from puregate.kernel.js.nodes import Program
from puregate.kernel.logging import get_logger

logger = get_logger(__name__)

MAX_SYNTAX_ERRORS = 10


class ModuleFormat(StrEnum):
    """Module convention of the validated source."""

    PROPERTY_EXPORT = "cjs"
    DECLARATIVE_EXPORT = "esm"
    INFER = "infer"


_ESM_PATTERNS = (
    re.compile(r"\bimport\s+(?:[\w{*]|['\"])"),
    re.compile(r"\bimport\s*\("),
    re.compile(r"\bexport\s+(?:default|const|let|var|function|class|async|\*|\{)"),
)
_CJS_PATTERNS = (
    re.compile(r"\brequire\s*\("),
    re.compile(r"\bmodule\.exports\b"),
    re.compile(r"\bexports\."),
)

MODULE_SYNTAX_IN_SCRIPT = "'import' and 'export' may appear only with 'sourceType: module'"
RETURN_OUTSIDE_FUNCTION = "'return' outside of function."

_MODULE_STATEMENTS = frozenset({"import_statement", "export_statement"})
_FUNCTION_BOUNDARIES = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
    "method_definition",
    "class_static_block",
})
# Function bodies may return; ERROR regions are reported on their own
_SKIPPED_FOR_RETURNS = _FUNCTION_BOUNDARIES | {"ERROR"}


def detect_module_format(source: str) -> ModuleFormat:
    """Guess the module convention from keyword patterns.

    Declarative-export keywords win over property-export ones. Returns
    :attr:`ModuleFormat.INFER` when neither convention is recognizable.
    """
    if any(pattern.search(source) for pattern in _ESM_PATTERNS):
        return ModuleFormat.DECLARATIVE_EXPORT
    if any(pattern.search(source) for pattern in _CJS_PATTERNS):
        return ModuleFormat.PROPERTY_EXPORT
    return ModuleFormat.INFER


@dataclass(frozen=True, slots=True)
class ParseErrorRecord:
    """One syntax error as reported by the parser.

    Attributes
    ----------
    message : str
        Parser message without position prefix
    line : int
        1-indexed line
    column : int
        0-indexed column
    """

    message: str
    line: int = 1
    column: int = 0


@dataclass(frozen=True, slots=True)
class ParseOutcome:
    """Result of parsing: a program, or the collected errors and no program."""

    program: Program | None
    errors: tuple[ParseErrorRecord, ...] = ()
    module_format: ModuleFormat = ModuleFormat.INFER

    @property
    def ok(self) -> bool:
        """True when the source parsed without errors."""
        return self.program is not None and not self.errors


@runtime_checkable
class JavaScriptParser(Protocol):
    """Port for parsers that turn source text into a typed program."""

    def parse(
        self,
        source: str,
        *,
        module_format: ModuleFormat = ModuleFormat.INFER,
        max_errors: int = MAX_SYNTAX_ERRORS,
    ) -> ParseOutcome:
        """Parse ``source`` in recovery mode, collecting up to ``max_errors`` errors."""
        ...


@lru_cache(maxsize=1)
def javascript_language() -> Language:
    """The compiled tree-sitter JavaScript grammar, loaded once per process."""
    return Language(tree_sitter_javascript.language())


def _first_leaf(node: Any) -> Any:
    while node.child_count:
        node = node.children[0]
    return node


def _recovery_message(node: Any, converter: TreeConverter) -> str:
    """Describe an ``ERROR`` or ``MISSING`` node the way engines word syntax errors."""
    if node.is_missing:
        if node.type == ";":
            return "Missing semicolon."
        return f'Unexpected token, expected "{node.type}"'
    text = converter.text(_first_leaf(node)).strip()
    if not text:
        return "Unexpected end of input"
    if text[0] in "\"'":
        return "Unterminated string constant."
    if text[0] == "`":
        return "Unterminated template."
    if len(text) > 20:
        text = text[:20] + "..."
    return f"Unexpected token '{text}'"


def _recovery_nodes(root: Any) -> Iterator[Any]:
    """Yield ``ERROR`` and ``MISSING`` nodes in source order, outermost first."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            yield node
            continue
        if node.has_error:
            stack.extend(reversed(node.children))


def _misplaced_returns(node: Any) -> Iterator[Any]:
    stack = list(reversed(node.named_children))
    while stack:
        current = stack.pop()
        if current.type in _SKIPPED_FOR_RETURNS or current.type in EXTRA_NODE_TYPES:
            continue
        if current.type == "return_statement":
            yield current
        stack.extend(reversed(current.named_children))


class TreeSitterParser:
    """Default :class:`JavaScriptParser` backed by tree-sitter.

    Notes
    -----
    Sources whose module convention cannot be inferred are parsed as
    scripts. The grammar itself does not distinguish the two goals; the
    format decides which program-level checks apply and is recorded on the
    resulting :class:`Program`.
    """

    def parse(
        self,
        source: str,
        *,
        module_format: ModuleFormat = ModuleFormat.INFER,
        max_errors: int = MAX_SYNTAX_ERRORS,
    ) -> ParseOutcome:
        if max_errors < 1:
            raise ValidationError("max_errors", "must be at least 1", max_errors)

        resolved = ModuleFormat(module_format)
        if resolved == ModuleFormat.INFER:
            resolved = detect_module_format(source)
        is_module = resolved == ModuleFormat.DECLARATIVE_EXPORT

        encoded = source.encode("utf-8", "replace")
        tree = Parser(javascript_language()).parse(encoded)
        root = tree.root_node
        converter = TreeConverter(encoded, "module" if is_module else "script")

        errors: list[ParseErrorRecord] = []

        def record(message: str, node: Any) -> None:
            line, column = converter.position(*node.start_point)
            item = ParseErrorRecord(message=message, line=line, column=column)
            if item not in errors:
                errors.append(item)

        for node in _recovery_nodes(root):
            anchor = node if node.is_missing else _first_leaf(node)
            record(_recovery_message(node, converter), anchor)
        if not is_module:
            for statement in root.named_children:
                if statement.type in _MODULE_STATEMENTS:
                    record(MODULE_SYNTAX_IN_SCRIPT, statement)
        for statement in _misplaced_returns(root):
            record(RETURN_OUTSIDE_FUNCTION, statement)

        if not errors:
            try:
                return ParseOutcome(
                    program=converter.convert_program(root), module_format=resolved
                )
            except UnsupportedNodeError as e:
                logger.debug("Unsupported syntax {kind}", kind=e.node_type)
                errors.append(
                    ParseErrorRecord(
                        message=f"Unsupported syntax: {e.node_type.replace('_', ' ')}",
                        line=e.line,
                        column=e.column,
                    )
                )

        errors.sort(key=lambda e: (e.line, e.column))
        logger.debug("Parse failed with {count} error(s) as {fmt}", count=len(errors), fmt=resolved)
        return ParseOutcome(program=None, errors=tuple(errors[:max_errors]), module_format=resolved)
