"""Typed JavaScript syntax tree.

One frozen dataclass per ESTree node kind the parser can produce. The set is
closed: :data:`NODE_CLASSES` lists every variant, and the tree walkers check
at import time that they handle each one. Field names follow ESTree in
snake_case (``superClass`` becomes ``super_class``, ``async`` becomes
``is_async``). Child sequences are tuples so that trees stay immutable.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, fields
from typing import Any


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Start and end position of a node (1-indexed lines, 0-indexed columns)."""

    line: int
    column: int
    end_line: int
    end_column: int


@dataclass(frozen=True, slots=True, kw_only=True)
class Node:
    """Base class of all syntax tree nodes."""

    loc: SourceSpan | None = None

    @property
    def type(self) -> str:
        """ESTree node type name."""
        return type(self).__name__


# ---------------------------------------------------------------------------
# Program and statements
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class Program(Node):
    body: tuple[Node, ...] = ()
    source_type: str = "script"


@dataclass(frozen=True, slots=True, kw_only=True)
class ExpressionStatement(Node):
    expression: Node
    directive: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class BlockStatement(Node):
    body: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class EmptyStatement(Node):
    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class DebuggerStatement(Node):
    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class WithStatement(Node):
    object: Node
    body: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class ReturnStatement(Node):
    argument: Node | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class LabeledStatement(Node):
    label: Identifier
    body: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class BreakStatement(Node):
    label: Identifier | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ContinueStatement(Node):
    label: Identifier | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class IfStatement(Node):
    test: Node
    consequent: Node
    alternate: Node | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SwitchStatement(Node):
    discriminant: Node
    cases: tuple[SwitchCase, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class SwitchCase(Node):
    test: Node | None = None
    consequent: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class ThrowStatement(Node):
    argument: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class TryStatement(Node):
    block: BlockStatement
    handler: CatchClause | None = None
    finalizer: BlockStatement | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CatchClause(Node):
    param: Node | None = None
    body: BlockStatement


@dataclass(frozen=True, slots=True, kw_only=True)
class WhileStatement(Node):
    test: Node
    body: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class DoWhileStatement(Node):
    body: Node
    test: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class ForStatement(Node):
    init: Node | None = None
    test: Node | None = None
    update: Node | None = None
    body: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class ForInStatement(Node):
    left: Node
    right: Node
    body: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class ForOfStatement(Node):
    left: Node
    right: Node
    body: Node


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class FunctionDeclaration(Node):
    id: Identifier | None = None
    params: tuple[Node, ...] = ()
    body: BlockStatement
    generator: bool = False
    is_async: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class VariableDeclaration(Node):
    declarations: tuple[VariableDeclarator, ...] = ()
    kind: str = "var"


@dataclass(frozen=True, slots=True, kw_only=True)
class VariableDeclarator(Node):
    id: Node
    init: Node | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ClassDeclaration(Node):
    id: Identifier | None = None
    super_class: Node | None = None
    body: ClassBody


@dataclass(frozen=True, slots=True, kw_only=True)
class ClassBody(Node):
    body: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class MethodDefinition(Node):
    key: Node
    computed: bool = False
    value: FunctionExpression
    kind: str = "method"
    is_static: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class PropertyDefinition(Node):
    """A class field, such as ``count = 0`` or ``static #cache = null``."""

    key: Node
    computed: bool = False
    value: Node | None = None
    is_static: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class StaticBlock(Node):
    body: tuple[Node, ...] = ()


# ---------------------------------------------------------------------------
# Modules
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportDeclaration(Node):
    specifiers: tuple[Node, ...] = ()
    source: Literal


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportSpecifier(Node):
    imported: Identifier
    local: Identifier


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportDefaultSpecifier(Node):
    local: Identifier


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportNamespaceSpecifier(Node):
    local: Identifier


@dataclass(frozen=True, slots=True, kw_only=True)
class ExportNamedDeclaration(Node):
    declaration: Node | None = None
    specifiers: tuple[ExportSpecifier, ...] = ()
    source: Literal | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ExportSpecifier(Node):
    local: Identifier
    exported: Identifier


@dataclass(frozen=True, slots=True, kw_only=True)
class ExportDefaultDeclaration(Node):
    declaration: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class ExportAllDeclaration(Node):
    source: Literal
    exported: Identifier | None = None


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class Identifier(Node):
    name: str


@dataclass(frozen=True, slots=True, kw_only=True)
class PrivateIdentifier(Node):
    """A ``#name`` class member key. The name excludes the ``#``."""

    name: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Literal(Node):
    value: Any = None
    raw: str = ""
    regex_pattern: str | None = None
    regex_flags: str | None = None
    bigint: str | None = None

    @property
    def is_regex(self) -> bool:
        """True for regular expression literals."""
        return self.regex_pattern is not None


@dataclass(frozen=True, slots=True, kw_only=True)
class ThisExpression(Node):
    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class Super(Node):
    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class ArrayExpression(Node):
    elements: tuple[Node | None, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class ObjectExpression(Node):
    properties: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class Property(Node):
    key: Node
    value: Node
    kind: str = "init"
    computed: bool = False
    method: bool = False
    shorthand: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class FunctionExpression(Node):
    id: Identifier | None = None
    params: tuple[Node, ...] = ()
    body: BlockStatement
    generator: bool = False
    is_async: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class ArrowFunctionExpression(Node):
    params: tuple[Node, ...] = ()
    body: Node
    expression: bool = False
    is_async: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class ClassExpression(Node):
    id: Identifier | None = None
    super_class: Node | None = None
    body: ClassBody


@dataclass(frozen=True, slots=True, kw_only=True)
class TemplateLiteral(Node):
    quasis: tuple[TemplateElement, ...] = ()
    expressions: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class TemplateElement(Node):
    raw: str = ""
    cooked: str | None = None
    tail: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class TaggedTemplateExpression(Node):
    tag: Node
    quasi: TemplateLiteral


@dataclass(frozen=True, slots=True, kw_only=True)
class UnaryExpression(Node):
    operator: str
    argument: Node
    prefix: bool = True


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateExpression(Node):
    operator: str
    argument: Node
    prefix: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class BinaryExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class LogicalExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class AssignmentExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class ConditionalExpression(Node):
    test: Node
    consequent: Node
    alternate: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class CallExpression(Node):
    callee: Node
    arguments: tuple[Node, ...] = ()
    optional: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class NewExpression(Node):
    callee: Node
    arguments: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class MemberExpression(Node):
    object: Node
    property: Node
    computed: bool = False
    optional: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class ChainExpression(Node):
    """Wraps an optional chain such as ``a?.b.c()``; the links carry ``optional``."""

    expression: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class SequenceExpression(Node):
    expressions: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class YieldExpression(Node):
    argument: Node | None = None
    delegate: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class AwaitExpression(Node):
    argument: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class MetaProperty(Node):
    meta: Identifier
    property: Identifier


@dataclass(frozen=True, slots=True, kw_only=True)
class Import(Node):
    """Callee of a dynamic ``import()`` call."""


@dataclass(frozen=True, slots=True, kw_only=True)
class SpreadElement(Node):
    argument: Node


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class ObjectPattern(Node):
    properties: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class ArrayPattern(Node):
    elements: tuple[Node | None, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class RestElement(Node):
    argument: Node


@dataclass(frozen=True, slots=True, kw_only=True)
class AssignmentPattern(Node):
    left: Node
    right: Node


NODE_CLASSES: tuple[type[Node], ...] = (
    Program,
    ExpressionStatement,
    BlockStatement,
    EmptyStatement,
    DebuggerStatement,
    WithStatement,
    ReturnStatement,
    LabeledStatement,
    BreakStatement,
    ContinueStatement,
    IfStatement,
    SwitchStatement,
    SwitchCase,
    ThrowStatement,
    TryStatement,
    CatchClause,
    WhileStatement,
    DoWhileStatement,
    ForStatement,
    ForInStatement,
    ForOfStatement,
    FunctionDeclaration,
    VariableDeclaration,
    VariableDeclarator,
    ClassDeclaration,
    ClassBody,
    MethodDefinition,
    PropertyDefinition,
    StaticBlock,
    ImportDeclaration,
    ImportSpecifier,
    ImportDefaultSpecifier,
    ImportNamespaceSpecifier,
    ExportNamedDeclaration,
    ExportSpecifier,
    ExportDefaultDeclaration,
    ExportAllDeclaration,
    Identifier,
    PrivateIdentifier,
    Literal,
    ThisExpression,
    Super,
    ArrayExpression,
    ObjectExpression,
    Property,
    FunctionExpression,
    ArrowFunctionExpression,
    ClassExpression,
    TemplateLiteral,
    TemplateElement,
    TaggedTemplateExpression,
    UnaryExpression,
    UpdateExpression,
    BinaryExpression,
    LogicalExpression,
    AssignmentExpression,
    ConditionalExpression,
    CallExpression,
    NewExpression,
    MemberExpression,
    ChainExpression,
    SequenceExpression,
    YieldExpression,
    AwaitExpression,
    MetaProperty,
    Import,
    SpreadElement,
    ObjectPattern,
    ArrayPattern,
    RestElement,
    AssignmentPattern,
)

NODE_TYPES: dict[str, type[Node]] = {cls.__name__: cls for cls in NODE_CLASSES}

FunctionNode = FunctionDeclaration | FunctionExpression | ArrowFunctionExpression
LoopNode = ForStatement | ForInStatement | ForOfStatement | WhileStatement | DoWhileStatement

_FIELD_NAMES: dict[type[Node], tuple[str, ...]] = {
    cls: tuple(f.name for f in fields(cls) if f.name != "loc") for cls in NODE_CLASSES
}


def node_field_names(cls: type[Node]) -> tuple[str, ...]:
    """Field names of a node class in source order, excluding ``loc``."""
    return _FIELD_NAMES[cls]


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct children of ``node`` in source order."""
    for name in _FIELD_NAMES[type(node)]:
        value = getattr(node, name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, tuple):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_child_nodes(current))))


def is_function(node: Node) -> bool:
    """True for any kind of function node."""
    return isinstance(node, FunctionDeclaration | FunctionExpression | ArrowFunctionExpression)
