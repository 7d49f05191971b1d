"""Conversion of tree-sitter concrete syntax trees into the typed syntax tree.

tree-sitter-javascript produces a concrete tree: punctuation is kept as
anonymous children, parentheses are nodes of their own and comments may
appear between any two children. :class:`TreeConverter` maps that tree onto
the ESTree-shaped dataclasses in :mod:`puregate.kernel.js.nodes`. One handler
per grammar node type is registered in a dispatch table; a grammar node with
no handler (JSX, decorators) raises :class:`UnsupportedNodeError` carrying
its position.

Positions from tree-sitter are byte offsets. They are converted to
character columns so that diagnostics line up with the source text.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Callable
from typing import Any

from puregate.kernel.exceptions import ParseError, UnsupportedNodeError
from puregate.kernel.js.nodes import (
    ArrayExpression,
    ArrayPattern,
    ArrowFunctionExpression,
    AssignmentExpression,
    AssignmentPattern,
    AwaitExpression,
    BinaryExpression,
    BlockStatement,
    BreakStatement,
    CallExpression,
    CatchClause,
    ChainExpression,
    ClassBody,
    ClassDeclaration,
    ClassExpression,
    ConditionalExpression,
    ContinueStatement,
    DebuggerStatement,
    DoWhileStatement,
    EmptyStatement,
    ExportAllDeclaration,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    ExportSpecifier,
    ExpressionStatement,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    IfStatement,
    Import,
    ImportDeclaration,
    ImportDefaultSpecifier,
    ImportNamespaceSpecifier,
    ImportSpecifier,
    LabeledStatement,
    Literal,
    LogicalExpression,
    MemberExpression,
    MetaProperty,
    MethodDefinition,
    NewExpression,
    Node,
    ObjectExpression,
    ObjectPattern,
    PrivateIdentifier,
    Program,
    Property,
    PropertyDefinition,
    RestElement,
    ReturnStatement,
    SequenceExpression,
    SourceSpan,
    SpreadElement,
    StaticBlock,
    Super,
    SwitchCase,
    SwitchStatement,
    TaggedTemplateExpression,
    TemplateElement,
    TemplateLiteral,
    ThisExpression,
    ThrowStatement,
    TryStatement,
    UnaryExpression,
    UpdateExpression,
    VariableDeclaration,
    VariableDeclarator,
    WhileStatement,
    WithStatement,
    YieldExpression,
)

# Grammar nodes that may appear anywhere and carry no syntax
EXTRA_NODE_TYPES = frozenset({"comment", "html_comment", "hash_bang_line"})

_LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})
_CHAIN_LINKS = frozenset({"member_expression", "subscript_expression", "call_expression"})

_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v"}
_LINE_CONTINUATIONS = frozenset({"\n", "\r", "\r\n", "\u2028", "\u2029"})
_ESCAPE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|[0-7]{1,3}|\r\n|[\s\S])"
)


def _replace_escape(match: re.Match[str]) -> str:
    body = match.group(1)
    if body in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[body]
    if body in _LINE_CONTINUATIONS:
        return ""
    if body.startswith("u{"):
        return chr(int(body[2:-1], 16))
    if body[0] in "ux" and len(body) > 1:
        return chr(int(body[1:], 16))
    if body[0] in "01234567":
        return chr(int(body, 8))
    return body


def unescape_string(body: str) -> str:
    """Cook the body of a string or template literal (quotes already removed)."""
    cooked = _ESCAPE.sub(_replace_escape, body)
    # Join surrogate pairs produced by \uD83D\uDE00 style escapes
    return cooked.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")


def parse_number(text: str) -> tuple[int | float, str | None]:
    """Value of a numeric literal and, for BigInt literals, its decimal digits."""
    digits = text.replace("_", "")
    if digits.endswith("n"):
        value = int(digits[:-1], 0)
        return value, str(value)
    lower = digits.lower()
    if lower.startswith(("0x", "0o", "0b")):
        return int(digits, 0), None
    if any(c in lower for c in ".e"):
        return float(digits), None
    if len(digits) > 1 and digits.startswith("0"):
        # Legacy octal, or a decimal with a leading zero such as 08
        return (int(digits, 8) if set(digits) <= set("01234567") else int(digits, 10)), None
    return int(digits), None


class TreeConverter:
    """Convert one tree-sitter tree into a :class:`Program`.

    Parameters
    ----------
    source : bytes
        UTF-8 encoded source the tree was parsed from
    source_type : str
        ``"module"`` or ``"script"``, stored on the resulting program
    """

    def __init__(self, source: bytes, source_type: str = "script") -> None:
        self.source = source
        self.source_type = source_type
        self._ascii = source.isascii()
        self._line_starts = [0]
        self._line_starts.extend(m.end() for m in re.finditer(rb"\n", source))
        self._handlers: dict[str, Callable[[Any], Node]] = {
            # program and statements
            "program": self._program,
            "expression_statement": self._expression_statement,
            "statement_block": self._block,
            "empty_statement": lambda n: EmptyStatement(loc=self.span(n)),
            "debugger_statement": lambda n: DebuggerStatement(loc=self.span(n)),
            "with_statement": self._with,
            "return_statement": self._return,
            "throw_statement": self._throw,
            "labeled_statement": self._labeled,
            "break_statement": self._break,
            "continue_statement": self._continue,
            "if_statement": self._if,
            "switch_statement": self._switch,
            "try_statement": self._try,
            "while_statement": self._while,
            "do_statement": self._do,
            "for_statement": self._for,
            "for_in_statement": self._for_in,
            # declarations
            "function_declaration": self._function_declaration,
            "generator_function_declaration": self._function_declaration,
            "variable_declaration": self._variable_declaration,
            "lexical_declaration": self._variable_declaration,
            "variable_declarator": self._declarator,
            "class_declaration": self._class_declaration,
            # modules
            "import_statement": self._import,
            "export_statement": self._export,
            # primary expressions
            "identifier": self._identifier,
            "property_identifier": self._identifier,
            "shorthand_property_identifier": self._identifier,
            "shorthand_property_identifier_pattern": self._identifier,
            "statement_identifier": self._identifier,
            "undefined": self._identifier,
            "private_property_identifier": self._private_identifier,
            "this": lambda n: ThisExpression(loc=self.span(n)),
            "super": lambda n: Super(loc=self.span(n)),
            "true": self._boolean,
            "false": self._boolean,
            "null": lambda n: Literal(value=None, raw="null", loc=self.span(n)),
            "number": self._number,
            "string": self._string,
            "regex": self._regex,
            "template_string": self._template,
            "array": self._array,
            "object": self._object,
            "function_expression": self._function_expression,
            "function": self._function_expression,
            "generator_function": self._function_expression,
            "arrow_function": self._arrow_function,
            "class": self._class_expression,
            "meta_property": self._meta_property,
            "parenthesized_expression": self._parenthesized,
            "sequence_expression": self._sequence,
            # operators
            "assignment_expression": self._assignment,
            "augmented_assignment_expression": self._assignment,
            "binary_expression": self._binary,
            "unary_expression": self._unary,
            "update_expression": self._update,
            "ternary_expression": self._ternary,
            "await_expression": self._await,
            "yield_expression": self._yield,
            "spread_element": self._spread,
            # calls and members
            "call_expression": self._call,
            "new_expression": self._new,
            "member_expression": self._member,
            "subscript_expression": self._member,
            # patterns
            "object_pattern": self._object_pattern,
            "array_pattern": self._array_pattern,
            "assignment_pattern": self._assignment_pattern,
            "rest_pattern": self._rest,
        }

    # ------------------------------------------------------------------
    # Positions and tree access
    # ------------------------------------------------------------------

    def position(self, row: int, byte_column: int) -> tuple[int, int]:
        """1-indexed line and 0-indexed character column of a tree-sitter point."""
        if self._ascii or row >= len(self._line_starts):
            return row + 1, byte_column
        start = self._line_starts[row]
        prefix = self.source[start : start + byte_column]
        return row + 1, len(prefix.decode("utf-8", "replace"))

    def position_of_byte(self, offset: int) -> tuple[int, int]:
        row = bisect_right(self._line_starts, offset) - 1
        return self.position(row, offset - self._line_starts[row])

    def span(self, node: Any) -> SourceSpan:
        line, column = self.position(*node.start_point)
        end_line, end_column = self.position(*node.end_point)
        return SourceSpan(line, column, end_line, end_column)

    def _byte_span(self, start: int, end: int) -> SourceSpan:
        line, column = self.position_of_byte(start)
        end_line, end_column = self.position_of_byte(end)
        return SourceSpan(line, column, end_line, end_column)

    def text(self, node: Any) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", "replace")

    @staticmethod
    def named(node: Any) -> list[Any]:
        return [c for c in node.named_children if c.type not in EXTRA_NODE_TYPES]

    @staticmethod
    def _has_token(node: Any, *tokens: str) -> bool:
        return any(not c.is_named and c.type in tokens for c in node.children)

    def _first(self, node: Any) -> Any | None:
        children = self.named(node)
        return children[0] if children else None

    def _required(self, node: Any, field_name: str) -> Any:
        child = node.child_by_field_name(field_name)
        if child is None:
            raise ParseError(f"Malformed {node.type} node: missing '{field_name}'")
        return child

    def _optional(self, node: Any, field_name: str) -> Node | None:
        child = node.child_by_field_name(field_name)
        return self.convert(child) if child is not None else None

    def _elements(self, node: Any) -> tuple[Node | None, ...]:
        """Children of a bracketed list, with ``None`` for each hole."""
        elements: list[Node | None] = []
        expect_element = True
        for child in node.children:
            if child.type in EXTRA_NODE_TYPES:
                continue
            if child.is_named:
                elements.append(self.convert(child))
                expect_element = False
            elif child.type == ",":
                if expect_element:
                    elements.append(None)
                expect_element = True
        return tuple(elements)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def convert(self, node: Any) -> Node:
        """Convert one grammar node and its subtree.

        Raises
        ------
        UnsupportedNodeError
            If the grammar node has no typed counterpart
        ParseError
            If a required child is missing
        """
        handler = self._handlers.get(node.type)
        if handler is None:
            line, column = self.position(*node.start_point)
            raise UnsupportedNodeError(node.type, line=line, column=column)
        return handler(node)

    def convert_program(self, root: Any) -> Program:
        program = self.convert(root)
        if not isinstance(program, Program):
            raise ParseError(f"Expected a Program root, got {program.type}")
        return program

    # ------------------------------------------------------------------
    # Program and statements
    # ------------------------------------------------------------------

    def _statements(self, node: Any) -> tuple[Node, ...]:
        return tuple(self.convert(c) for c in self.named(node))

    def _program(self, node: Any) -> Program:
        return Program(
            body=self._statements(node), source_type=self.source_type, loc=self.span(node)
        )

    def _expression_statement(self, node: Any) -> ExpressionStatement:
        expression = self._first(node)
        if expression is None:
            raise ParseError("Malformed expression_statement node: no expression")
        return ExpressionStatement(expression=self.convert(expression), loc=self.span(node))

    def _block(self, node: Any) -> BlockStatement:
        return BlockStatement(body=self._statements(node), loc=self.span(node))

    def _with(self, node: Any) -> WithStatement:
        return WithStatement(
            object=self.convert(self._required(node, "object")),
            body=self.convert(self._required(node, "body")),
            loc=self.span(node),
        )

    def _return(self, node: Any) -> ReturnStatement:
        argument = self._first(node)
        return ReturnStatement(
            argument=self.convert(argument) if argument is not None else None,
            loc=self.span(node),
        )

    def _throw(self, node: Any) -> ThrowStatement:
        argument = self._first(node)
        if argument is None:
            raise ParseError("Malformed throw_statement node: no argument")
        return ThrowStatement(argument=self.convert(argument), loc=self.span(node))

    def _labeled(self, node: Any) -> LabeledStatement:
        return LabeledStatement(
            label=self._identifier(self._required(node, "label")),
            body=self.convert(self._required(node, "body")),
            loc=self.span(node),
        )

    def _break(self, node: Any) -> BreakStatement:
        return BreakStatement(label=self._optional(node, "label"), loc=self.span(node))

    def _continue(self, node: Any) -> ContinueStatement:
        return ContinueStatement(label=self._optional(node, "label"), loc=self.span(node))

    def _if(self, node: Any) -> IfStatement:
        alternate = node.child_by_field_name("alternative")
        if alternate is not None and alternate.type == "else_clause":
            alternate = self._first(alternate)
        return IfStatement(
            test=self.convert(self._required(node, "condition")),
            consequent=self.convert(self._required(node, "consequence")),
            alternate=self.convert(alternate) if alternate is not None else None,
            loc=self.span(node),
        )

    def _switch(self, node: Any) -> SwitchStatement:
        cases: list[SwitchCase] = []
        for case in self.named(self._required(node, "body")):
            test = case.child_by_field_name("value") if case.type == "switch_case" else None
            consequent = tuple(
                self.convert(c) for c in self.named(case) if test is None or c.id != test.id
            )
            cases.append(
                SwitchCase(
                    test=self.convert(test) if test is not None else None,
                    consequent=consequent,
                    loc=self.span(case),
                )
            )
        return SwitchStatement(
            discriminant=self.convert(self._required(node, "value")),
            cases=tuple(cases),
            loc=self.span(node),
        )

    def _try(self, node: Any) -> TryStatement:
        handler = node.child_by_field_name("handler")
        finalizer = node.child_by_field_name("finalizer")
        catch_clause = None
        if handler is not None:
            catch_clause = CatchClause(
                param=self._optional(handler, "parameter"),
                body=self._block(self._required(handler, "body")),
                loc=self.span(handler),
            )
        return TryStatement(
            block=self._block(self._required(node, "body")),
            handler=catch_clause,
            finalizer=(
                self._block(self._required(finalizer, "body")) if finalizer is not None else None
            ),
            loc=self.span(node),
        )

    def _while(self, node: Any) -> WhileStatement:
        return WhileStatement(
            test=self.convert(self._required(node, "condition")),
            body=self.convert(self._required(node, "body")),
            loc=self.span(node),
        )

    def _do(self, node: Any) -> DoWhileStatement:
        return DoWhileStatement(
            body=self.convert(self._required(node, "body")),
            test=self.convert(self._required(node, "condition")),
            loc=self.span(node),
        )

    def _for_clause(self, node: Any | None) -> Node | None:
        """One of the three clauses of a ``for (;;)`` header; empty clauses are None."""
        if node is None or not node.is_named or node.type == "empty_statement":
            return None
        if node.type == "expression_statement":
            inner = self._first(node)
            return self.convert(inner) if inner is not None else None
        return self.convert(node)

    def _for(self, node: Any) -> ForStatement:
        return ForStatement(
            init=self._for_clause(node.child_by_field_name("initializer")),
            test=self._for_clause(node.child_by_field_name("condition")),
            update=self._for_clause(node.child_by_field_name("increment")),
            body=self.convert(self._required(node, "body")),
            loc=self.span(node),
        )

    def _for_in(self, node: Any) -> ForInStatement | ForOfStatement:
        left_node = self._required(node, "left")
        left: Node = self.convert(left_node)
        kind = node.child_by_field_name("kind")
        if kind is not None:
            declarator = VariableDeclarator(id=left, loc=self.span(left_node))
            left = VariableDeclaration(
                declarations=(declarator,),
                kind=self.text(kind),
                loc=self._byte_span(kind.start_byte, left_node.end_byte),
            )
        operator = node.child_by_field_name("operator")
        cls = ForOfStatement if operator is not None and self.text(operator) == "of" else ForInStatement
        return cls(
            left=left,
            right=self.convert(self._required(node, "right")),
            body=self.convert(self._required(node, "body")),
            loc=self.span(node),
        )

    # ------------------------------------------------------------------
    # Functions and declarations
    # ------------------------------------------------------------------

    def _params(self, node: Any) -> tuple[Node, ...]:
        parameter = node.child_by_field_name("parameter")
        if parameter is not None:
            return (self.convert(parameter),)
        parameters = node.child_by_field_name("parameters")
        return self._statements(parameters) if parameters is not None else ()

    def _function_declaration(self, node: Any) -> FunctionDeclaration:
        return FunctionDeclaration(
            id=self._optional(node, "name"),
            params=self._params(node),
            body=self._block(self._required(node, "body")),
            generator=self._has_token(node, "*"),
            is_async=self._has_token(node, "async"),
            loc=self.span(node),
        )

    def _function_expression(self, node: Any) -> FunctionExpression:
        return FunctionExpression(
            id=self._optional(node, "name"),
            params=self._params(node),
            body=self._block(self._required(node, "body")),
            generator=self._has_token(node, "*"),
            is_async=self._has_token(node, "async"),
            loc=self.span(node),
        )

    def _arrow_function(self, node: Any) -> ArrowFunctionExpression:
        body = self._required(node, "body")
        return ArrowFunctionExpression(
            params=self._params(node),
            body=self.convert(body),
            expression=body.type != "statement_block",
            is_async=self._has_token(node, "async"),
            loc=self.span(node),
        )

    def _variable_declaration(self, node: Any) -> VariableDeclaration:
        kind = node.child_by_field_name("kind")
        return VariableDeclaration(
            declarations=tuple(
                self._declarator(c) for c in self.named(node) if c.type == "variable_declarator"
            ),
            kind=self.text(kind) if kind is not None else "var",
            loc=self.span(node),
        )

    def _declarator(self, node: Any) -> VariableDeclarator:
        return VariableDeclarator(
            id=self.convert(self._required(node, "name")),
            init=self._optional(node, "value"),
            loc=self.span(node),
        )

    def _reject_decorators(self, node: Any) -> None:
        for child in node.children:
            if child.type == "decorator":
                line, column = self.position(*child.start_point)
                raise UnsupportedNodeError("decorator", line=line, column=column)

    def _superclass(self, node: Any) -> Node | None:
        for child in self.named(node):
            if child.type == "class_heritage":
                parent = self._first(child)
                return self.convert(parent) if parent is not None else None
        return None

    def _class_body(self, node: Any) -> ClassBody:
        members: list[Node] = []
        for member in self.named(node):
            self._reject_decorators(member)
            if member.type == "method_definition":
                members.append(self._method_definition(member))
            elif member.type == "field_definition":
                members.append(self._field_definition(member))
            elif member.type == "class_static_block":
                body = self._required(member, "body")
                members.append(StaticBlock(body=self._statements(body), loc=self.span(member)))
            else:
                members.append(self.convert(member))
        return ClassBody(body=tuple(members), loc=self.span(node))

    def _class_declaration(self, node: Any) -> ClassDeclaration:
        self._reject_decorators(node)
        return ClassDeclaration(
            id=self._optional(node, "name"),
            super_class=self._superclass(node),
            body=self._class_body(self._required(node, "body")),
            loc=self.span(node),
        )

    def _class_expression(self, node: Any) -> ClassExpression:
        self._reject_decorators(node)
        return ClassExpression(
            id=self._optional(node, "name"),
            super_class=self._superclass(node),
            body=self._class_body(self._required(node, "body")),
            loc=self.span(node),
        )

    def _key(self, node: Any) -> tuple[Node, bool]:
        """Property key of a pair, method or field, and whether it is computed."""
        if node.type == "computed_property_name":
            inner = self._first(node)
            if inner is None:
                raise ParseError("Malformed computed_property_name node: no expression")
            return self.convert(inner), True
        return self.convert(node), False

    def _method_parts(self, node: Any) -> tuple[Node, bool, FunctionExpression, set[str]]:
        """Key, computed flag, function value and modifier tokens of a method."""
        name = self._required(node, "name")
        modifiers: set[str] = set()
        for child in node.children:
            if child.id == name.id:
                break
            if not child.is_named:
                modifiers.update(child.type.split())
        key, computed = self._key(name)
        parameters = self._required(node, "parameters")
        body = self._required(node, "body")
        value = FunctionExpression(
            params=self._statements(parameters),
            body=self._block(body),
            generator="*" in modifiers,
            is_async="async" in modifiers,
            loc=self._byte_span(parameters.start_byte, body.end_byte),
        )
        return key, computed, value, modifiers

    def _method_definition(self, node: Any) -> MethodDefinition:
        key, computed, value, modifiers = self._method_parts(node)
        is_static = "static" in modifiers
        if "get" in modifiers:
            kind = "get"
        elif "set" in modifiers:
            kind = "set"
        elif (
            not computed
            and not is_static
            and isinstance(key, Identifier)
            and key.name == "constructor"
        ):
            kind = "constructor"
        else:
            kind = "method"
        return MethodDefinition(
            key=key,
            computed=computed,
            value=value,
            kind=kind,
            is_static=is_static,
            loc=self.span(node),
        )

    def _field_definition(self, node: Any) -> PropertyDefinition:
        key, computed = self._key(self._required(node, "property"))
        return PropertyDefinition(
            key=key,
            computed=computed,
            value=self._optional(node, "value"),
            is_static=self._has_token(node, "static"),
            loc=self.span(node),
        )

    # ------------------------------------------------------------------
    # Modules
    # ------------------------------------------------------------------

    def _module_name(self, node: Any) -> Identifier:
        """An import or export name, which may also be written as a string."""
        if node.type == "string":
            value = self._string(node).value
            return Identifier(name=str(value), loc=self.span(node))
        return Identifier(name=self.text(node), loc=self.span(node))

    def _import(self, node: Any) -> ImportDeclaration:
        specifiers: list[Node] = []
        for clause in self.named(node):
            if clause.type != "import_clause":
                continue
            for part in self.named(clause):
                if part.type == "identifier":
                    specifiers.append(
                        ImportDefaultSpecifier(local=self._identifier(part), loc=self.span(part))
                    )
                elif part.type == "namespace_import":
                    local = self._first(part)
                    if local is None:
                        raise ParseError("Malformed namespace_import node: no name")
                    specifiers.append(
                        ImportNamespaceSpecifier(
                            local=self._identifier(local), loc=self.span(part)
                        )
                    )
                elif part.type == "named_imports":
                    specifiers.extend(self._import_specifier(s) for s in self.named(part))
        source = self._string(self._required(node, "source"))
        return ImportDeclaration(specifiers=tuple(specifiers), source=source, loc=self.span(node))

    def _import_specifier(self, node: Any) -> ImportSpecifier:
        name = self._required(node, "name")
        alias = node.child_by_field_name("alias")
        return ImportSpecifier(
            imported=self._module_name(name),
            local=self._module_name(alias if alias is not None else name),
            loc=self.span(node),
        )

    def _export(self, node: Any) -> Node:
        self._reject_decorators(node)
        declaration = node.child_by_field_name("declaration")
        source_node = node.child_by_field_name("source")
        source = self._string(source_node) if source_node is not None else None

        if self._has_token(node, "default"):
            target = declaration if declaration is not None else self._required(node, "value")
            return ExportDefaultDeclaration(declaration=self.convert(target), loc=self.span(node))
        if declaration is not None:
            return ExportNamedDeclaration(declaration=self.convert(declaration), loc=self.span(node))

        specifiers: list[ExportSpecifier] = []
        for child in self.named(node):
            if child.type == "namespace_export":
                exported = self._first(child)
                if source is None or exported is None:
                    raise ParseError("Malformed namespace export")
                return ExportAllDeclaration(
                    source=source, exported=self._module_name(exported), loc=self.span(node)
                )
            if child.type == "export_clause":
                specifiers.extend(self._export_specifier(s) for s in self.named(child))
        if self._has_token(node, "*"):
            if source is None:
                raise ParseError("Malformed export_statement node: '*' without a source")
            return ExportAllDeclaration(source=source, loc=self.span(node))
        return ExportNamedDeclaration(
            specifiers=tuple(specifiers), source=source, loc=self.span(node)
        )

    def _export_specifier(self, node: Any) -> ExportSpecifier:
        name = self._required(node, "name")
        alias = node.child_by_field_name("alias")
        return ExportSpecifier(
            local=self._module_name(name),
            exported=self._module_name(alias if alias is not None else name),
            loc=self.span(node),
        )

    # ------------------------------------------------------------------
    # Primary expressions
    # ------------------------------------------------------------------

    def _identifier(self, node: Any) -> Identifier:
        return Identifier(name=self.text(node), loc=self.span(node))

    def _private_identifier(self, node: Any) -> PrivateIdentifier:
        return PrivateIdentifier(name=self.text(node).lstrip("#"), loc=self.span(node))

    def _boolean(self, node: Any) -> Literal:
        raw = self.text(node)
        return Literal(value=raw == "true", raw=raw, loc=self.span(node))

    def _number(self, node: Any) -> Literal:
        raw = self.text(node)
        try:
            value, bigint = parse_number(raw)
        except ValueError as e:
            raise ParseError(f"Malformed number literal {raw!r}") from e
        return Literal(value=value, raw=raw, bigint=bigint, loc=self.span(node))

    def _string(self, node: Any) -> Literal:
        raw = self.text(node)
        return Literal(value=unescape_string(raw[1:-1]), raw=raw, loc=self.span(node))

    def _regex(self, node: Any) -> Literal:
        pattern = self._required(node, "pattern")
        flags = node.child_by_field_name("flags")
        return Literal(
            raw=self.text(node),
            regex_pattern=self.text(pattern),
            regex_flags=self.text(flags) if flags is not None else "",
            loc=self.span(node),
        )

    def _template_element(self, start: int, end: int, tail: bool) -> TemplateElement:
        raw = self.source[start:end].decode("utf-8", "replace")
        return TemplateElement(
            raw=raw, cooked=unescape_string(raw), tail=tail, loc=self._byte_span(start, end)
        )

    def _template(self, node: Any) -> TemplateLiteral:
        quasis: list[TemplateElement] = []
        expressions: list[Node] = []
        start = node.start_byte + 1
        for child in self.named(node):
            if child.type != "template_substitution":
                continue
            quasis.append(self._template_element(start, child.start_byte, tail=False))
            inner = self._first(child)
            if inner is None:
                raise ParseError("Malformed template_substitution node: no expression")
            expressions.append(self.convert(inner))
            start = child.end_byte
        quasis.append(self._template_element(start, node.end_byte - 1, tail=True))
        return TemplateLiteral(
            quasis=tuple(quasis), expressions=tuple(expressions), loc=self.span(node)
        )

    def _array(self, node: Any) -> ArrayExpression:
        return ArrayExpression(elements=self._elements(node), loc=self.span(node))

    def _object(self, node: Any) -> ObjectExpression:
        properties: list[Node] = []
        for member in self.named(node):
            if member.type == "pair":
                key, computed = self._key(self._required(member, "key"))
                properties.append(
                    Property(
                        key=key,
                        value=self.convert(self._required(member, "value")),
                        computed=computed,
                        loc=self.span(member),
                    )
                )
            elif member.type == "shorthand_property_identifier":
                properties.append(
                    Property(
                        key=self._identifier(member),
                        value=self._identifier(member),
                        shorthand=True,
                        loc=self.span(member),
                    )
                )
            elif member.type == "method_definition":
                self._reject_decorators(member)
                key, computed, value, modifiers = self._method_parts(member)
                kind = "get" if "get" in modifiers else "set" if "set" in modifiers else "init"
                properties.append(
                    Property(
                        key=key,
                        value=value,
                        kind=kind,
                        computed=computed,
                        method=kind == "init",
                        loc=self.span(member),
                    )
                )
            else:
                properties.append(self.convert(member))
        return ObjectExpression(properties=tuple(properties), loc=self.span(node))

    def _meta_property(self, node: Any) -> MetaProperty:
        meta, _, prop = "".join(self.text(node).split()).partition(".")
        span = self.span(node)
        return MetaProperty(
            meta=Identifier(name=meta, loc=span),
            property=Identifier(name=prop, loc=span),
            loc=span,
        )

    def _parenthesized(self, node: Any) -> Node:
        inner = self._first(node)
        if inner is None:
            raise ParseError("Malformed parenthesized_expression node: empty")
        return self.convert(inner)

    def _flatten_sequence(self, node: Any) -> list[Node]:
        expressions: list[Node] = []
        for child in self.named(node):
            if child.type == "sequence_expression":
                expressions.extend(self._flatten_sequence(child))
            else:
                expressions.append(self.convert(child))
        return expressions

    def _sequence(self, node: Any) -> SequenceExpression:
        return SequenceExpression(
            expressions=tuple(self._flatten_sequence(node)), loc=self.span(node)
        )

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def _operator(self, node: Any, default: str) -> str:
        operator = node.child_by_field_name("operator")
        return self.text(operator) if operator is not None else default

    def _assignment(self, node: Any) -> AssignmentExpression:
        return AssignmentExpression(
            operator=self._operator(node, "="),
            left=self.convert(self._required(node, "left")),
            right=self.convert(self._required(node, "right")),
            loc=self.span(node),
        )

    def _binary(self, node: Any) -> BinaryExpression | LogicalExpression:
        operator = self._operator(node, "")
        cls = LogicalExpression if operator in _LOGICAL_OPERATORS else BinaryExpression
        return cls(
            operator=operator,
            left=self.convert(self._required(node, "left")),
            right=self.convert(self._required(node, "right")),
            loc=self.span(node),
        )

    def _unary(self, node: Any) -> UnaryExpression:
        return UnaryExpression(
            operator=self._operator(node, ""),
            argument=self.convert(self._required(node, "argument")),
            prefix=True,
            loc=self.span(node),
        )

    def _update(self, node: Any) -> UpdateExpression:
        return UpdateExpression(
            operator=self._operator(node, "++"),
            argument=self.convert(self._required(node, "argument")),
            prefix=node.children[0].type in ("++", "--"),
            loc=self.span(node),
        )

    def _ternary(self, node: Any) -> ConditionalExpression:
        return ConditionalExpression(
            test=self.convert(self._required(node, "condition")),
            consequent=self.convert(self._required(node, "consequence")),
            alternate=self.convert(self._required(node, "alternative")),
            loc=self.span(node),
        )

    def _await(self, node: Any) -> AwaitExpression:
        argument = self._first(node)
        if argument is None:
            raise ParseError("Malformed await_expression node: no argument")
        return AwaitExpression(argument=self.convert(argument), loc=self.span(node))

    def _yield(self, node: Any) -> YieldExpression:
        argument = self._first(node)
        return YieldExpression(
            argument=self.convert(argument) if argument is not None else None,
            delegate=self._has_token(node, "*"),
            loc=self.span(node),
        )

    def _spread(self, node: Any) -> SpreadElement:
        argument = self._first(node)
        if argument is None:
            raise ParseError("Malformed spread_element node: no argument")
        return SpreadElement(argument=self.convert(argument), loc=self.span(node))

    # ------------------------------------------------------------------
    # Calls, members and optional chains
    # ------------------------------------------------------------------

    @staticmethod
    def _chain_inner(node: Any) -> Any | None:
        if node.type == "call_expression":
            return node.child_by_field_name("function")
        return node.child_by_field_name("object")

    def _is_optional_chain(self, node: Any) -> bool:
        current = node
        while current is not None and current.type in _CHAIN_LINKS:
            if current.child_by_field_name("optional_chain") is not None:
                return True
            current = self._chain_inner(current)
        return False

    def _continues_chain(self, node: Any) -> bool:
        """True when ``node`` is the object or callee of a further chain link."""
        parent = node.parent
        if parent is None or parent.type not in _CHAIN_LINKS:
            return False
        inner = self._chain_inner(parent)
        return inner is not None and inner.id == node.id

    def _chain(self, node: Any, link: Node) -> Node:
        """Wrap the outermost link of a chain that contains ``?.``."""
        if self._continues_chain(node) or not self._is_optional_chain(node):
            return link
        return ChainExpression(expression=link, loc=link.loc)

    def _arguments(self, node: Any | None) -> tuple[Node, ...]:
        return self._statements(node) if node is not None else ()

    def _call(self, node: Any) -> Node:
        function = self._required(node, "function")
        arguments = node.child_by_field_name("arguments")
        if arguments is not None and arguments.type == "template_string":
            return TaggedTemplateExpression(
                tag=self.convert(function), quasi=self._template(arguments), loc=self.span(node)
            )
        callee = (
            Import(loc=self.span(function)) if function.type == "import" else self.convert(function)
        )
        call = CallExpression(
            callee=callee,
            arguments=self._arguments(arguments),
            optional=node.child_by_field_name("optional_chain") is not None,
            loc=self.span(node),
        )
        return self._chain(node, call)

    def _new(self, node: Any) -> NewExpression:
        return NewExpression(
            callee=self.convert(self._required(node, "constructor")),
            arguments=self._arguments(node.child_by_field_name("arguments")),
            loc=self.span(node),
        )

    def _member(self, node: Any) -> Node:
        computed = node.type == "subscript_expression"
        prop = self._required(node, "index" if computed else "property")
        member = MemberExpression(
            object=self.convert(self._required(node, "object")),
            property=self.convert(prop),
            computed=computed,
            optional=node.child_by_field_name("optional_chain") is not None,
            loc=self.span(node),
        )
        return self._chain(node, member)

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------

    def _object_pattern(self, node: Any) -> ObjectPattern:
        properties: list[Node] = []
        for member in self.named(node):
            if member.type == "pair_pattern":
                key, computed = self._key(self._required(member, "key"))
                properties.append(
                    Property(
                        key=key,
                        value=self.convert(self._required(member, "value")),
                        computed=computed,
                        loc=self.span(member),
                    )
                )
            elif member.type == "shorthand_property_identifier_pattern":
                properties.append(
                    Property(
                        key=self._identifier(member),
                        value=self._identifier(member),
                        shorthand=True,
                        loc=self.span(member),
                    )
                )
            elif member.type == "object_assignment_pattern":
                left = self._required(member, "left")
                properties.append(
                    Property(
                        key=self._identifier(left),
                        value=AssignmentPattern(
                            left=self.convert(left),
                            right=self.convert(self._required(member, "right")),
                            loc=self.span(member),
                        ),
                        shorthand=True,
                        loc=self.span(member),
                    )
                )
            else:
                properties.append(self.convert(member))
        return ObjectPattern(properties=tuple(properties), loc=self.span(node))

    def _array_pattern(self, node: Any) -> ArrayPattern:
        return ArrayPattern(elements=self._elements(node), loc=self.span(node))

    def _assignment_pattern(self, node: Any) -> AssignmentPattern:
        return AssignmentPattern(
            left=self.convert(self._required(node, "left")),
            right=self.convert(self._required(node, "right")),
            loc=self.span(node),
        )

    def _rest(self, node: Any) -> RestElement:
        argument = self._first(node)
        if argument is None:
            raise ParseError("Malformed rest_pattern node: no argument")
        return RestElement(argument=self.convert(argument), loc=self.span(node))


def convert_tree(root: Any, source: bytes, *, source_type: str = "script") -> Program:
    """Convert a tree-sitter root node parsed from ``source`` into a :class:`Program`."""
    return TreeConverter(source, source_type).convert_program(root)
