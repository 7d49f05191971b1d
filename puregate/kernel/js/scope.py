"""Lexical scope and binding resolution.

Scopes are stored in an arena (:attr:`ScopeManager.scopes`) and refer to
their parent by index. Every scope records the index of its nearest
enclosing function scope; top-level code belongs to the module scope, index
0. A reference is *local* when its binding was declared below the module
scope and both the binding and the access share the same function scope
index.

Declaration sites (variable declarators, parameters, function and class
names, import specifiers, catch parameters) are not references. Neither are
non-computed member properties, non-computed object or class field keys
and labels, so :meth:`ScopeManager.reference` returns ``None`` for them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum

from puregate.kernel.exceptions import AnalysisError
from puregate.kernel.js.nodes import (
    ArrayPattern,
    ArrowFunctionExpression,
    AssignmentExpression,
    AssignmentPattern,
    BlockStatement,
    BreakStatement,
    CatchClause,
    ClassDeclaration,
    ClassExpression,
    ContinueStatement,
    ExportAllDeclaration,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    ImportDeclaration,
    LabeledStatement,
    MemberExpression,
    MetaProperty,
    MethodDefinition,
    Node,
    ObjectPattern,
    PrivateIdentifier,
    Program,
    Property,
    PropertyDefinition,
    RestElement,
    StaticBlock,
    SwitchStatement,
    UpdateExpression,
    VariableDeclaration,
    is_function,
    iter_child_nodes,
)

MODULE_SCOPE = 0


class ScopeKind(StrEnum):
    MODULE = "module"
    FUNCTION = "function"
    FUNCTION_NAME = "function-name"
    BLOCK = "block"
    FOR = "for"
    SWITCH = "switch"
    CATCH = "catch"
    CLASS = "class"


class BindingKind(StrEnum):
    PARAMETER = "parameter"
    VAR = "var"
    LET = "let"
    CONST = "const"
    FUNCTION = "function"
    CLASS = "class"
    IMPORT = "import"
    CATCH = "catch"
    FUNCTION_NAME = "function-name"


_DECLARATION_KINDS = {
    "var": BindingKind.VAR,
    "let": BindingKind.LET,
    "const": BindingKind.CONST,
}


@dataclass(eq=False, slots=True)
class Reference:
    """One identifier occurrence in a reference position."""

    identifier: Identifier
    scope: int
    function_scope: int
    binding: Binding | None = None
    is_read: bool = True
    is_write: bool = False

    @property
    def is_free(self) -> bool:
        """True when no declaration in scope matches the name."""
        return self.binding is None


@dataclass(eq=False, slots=True)
class Binding:
    """A declared name and every reference that resolved to it."""

    name: str
    kind: BindingKind
    scope: int
    function_scope: int
    identifiers: list[Identifier] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    initialized: bool = False
    exported: bool = False

    @property
    def is_parameter(self) -> bool:
        return self.kind == BindingKind.PARAMETER

    @property
    def reads(self) -> list[Reference]:
        return [r for r in self.references if r.is_read]

    @property
    def writes(self) -> list[Reference]:
        return [r for r in self.references if r.is_write]


@dataclass(eq=False, slots=True)
class Scope:
    index: int
    kind: ScopeKind
    node: Node
    parent: int | None
    function_scope: int
    bindings: dict[str, Binding] = field(default_factory=dict)
    references: list[Reference] = field(default_factory=list)
    children: list[int] = field(default_factory=list)


class ScopeManager:
    """Arena of scopes with lookup tables keyed by node identity."""

    def __init__(self) -> None:
        self.scopes: list[Scope] = []
        self.through: list[Reference] = []
        self._references: dict[int, Reference] = {}
        self._declarations: dict[int, Binding] = {}
        self._node_scopes: dict[int, int] = {}

    # -- construction --------------------------------------------------------

    def add_scope(self, kind: ScopeKind, node: Node, parent: int | None) -> int:
        index = len(self.scopes)
        if kind in (ScopeKind.MODULE, ScopeKind.FUNCTION) or parent is None:
            function_scope = index
        else:
            function_scope = self.scopes[parent].function_scope
        self.scopes.append(Scope(index, kind, node, parent, function_scope))
        if parent is not None:
            self.scopes[parent].children.append(index)
        self._node_scopes[id(node)] = index
        return index

    def declare(self, scope_index: int, identifier: Identifier, kind: BindingKind) -> Binding:
        scope = self.scopes[scope_index]
        binding = scope.bindings.get(identifier.name)
        if binding is None:
            binding = Binding(identifier.name, kind, scope_index, scope.function_scope)
            scope.bindings[identifier.name] = binding
        if not any(existing is identifier for existing in binding.identifiers):
            binding.identifiers.append(identifier)
        self._declarations[id(identifier)] = binding
        return binding

    def add_reference(
        self, identifier: Identifier, scope_index: int, *, read: bool = True, write: bool = False
    ) -> Reference:
        scope = self.scopes[scope_index]
        binding = self.resolve(identifier.name, scope_index)
        ref = Reference(identifier, scope_index, scope.function_scope, binding, read, write)
        scope.references.append(ref)
        if binding is None:
            self.through.append(ref)
        else:
            binding.references.append(ref)
        self._references[id(identifier)] = ref
        return ref

    # -- queries -------------------------------------------------------------

    @property
    def module_scope(self) -> Scope:
        return self.scopes[MODULE_SCOPE]

    def resolve(self, name: str, scope_index: int) -> Binding | None:
        """Find the binding visible under ``name`` from a scope."""
        current: int | None = scope_index
        while current is not None:
            scope = self.scopes[current]
            if name in scope.bindings:
                return scope.bindings[name]
            current = scope.parent
        return None

    def reference(self, identifier: Identifier) -> Reference | None:
        """The reference record of an identifier, or None for non-reference positions."""
        return self._references.get(id(identifier))

    def declared_binding(self, identifier: Identifier) -> Binding | None:
        """The binding an identifier declares, or None if it is not a declaration site."""
        return self._declarations.get(id(identifier))

    def scope_of(self, node: Node) -> Scope | None:
        """The scope a node opens, if any."""
        index = self._node_scopes.get(id(node))
        return self.scopes[index] if index is not None else None

    def is_local(self, reference: Reference) -> bool:
        """True when the access and its binding share the same function scope.

        Bindings declared in the module scope are never local.
        """
        binding = reference.binding
        return (
            binding is not None
            and binding.scope != MODULE_SCOPE
            and binding.function_scope == reference.function_scope
        )

    def bindings(self) -> Iterator[Binding]:
        for scope in self.scopes:
            yield from scope.bindings.values()


def pattern_identifiers(pattern: Node | None) -> Iterator[Identifier]:
    """Yield the identifiers a binding or assignment pattern introduces."""
    if pattern is None:
        return
    if isinstance(pattern, Identifier):
        yield pattern
    elif isinstance(pattern, ObjectPattern):
        for prop in pattern.properties:
            if isinstance(prop, Property):
                yield from pattern_identifiers(prop.value)
            else:
                yield from pattern_identifiers(prop)
    elif isinstance(pattern, ArrayPattern):
        for element in pattern.elements:
            yield from pattern_identifiers(element)
    elif isinstance(pattern, RestElement):
        yield from pattern_identifiers(pattern.argument)
    elif isinstance(pattern, AssignmentPattern):
        yield from pattern_identifiers(pattern.left)


class _ScopeBuilder:
    """Single pass that hoists declarations on scope entry and records references."""

    def __init__(self) -> None:
        self.manager = ScopeManager()
        self._handlers: dict[type[Node], Callable[[Node, int], None]] = {
            Program: self._program,
            Identifier: self._identifier,
            FunctionDeclaration: self._function_declaration,
            FunctionExpression: self._function_expression,
            ArrowFunctionExpression: self._arrow_function,
            BlockStatement: self._block,
            VariableDeclaration: self._variable_declaration,
            AssignmentExpression: self._assignment,
            UpdateExpression: self._update,
            MemberExpression: self._member,
            Property: self._property,
            MethodDefinition: self._method,
            PropertyDefinition: self._class_field,
            StaticBlock: self._static_block,
            PrivateIdentifier: self._skip,
            ClassDeclaration: self._class_declaration,
            ClassExpression: self._class_expression,
            ForStatement: self._for,
            ForInStatement: self._for_in_of,
            ForOfStatement: self._for_in_of,
            CatchClause: self._catch,
            SwitchStatement: self._switch,
            LabeledStatement: self._labeled,
            BreakStatement: self._skip,
            ContinueStatement: self._skip,
            MetaProperty: self._skip,
            ImportDeclaration: self._skip,
            ExportAllDeclaration: self._skip,
            ExportNamedDeclaration: self._export_named,
            ExportDefaultDeclaration: self._export_default,
        }

    def visit(self, node: Node | None, scope: int) -> None:
        if node is None:
            return
        handler = self._handlers.get(type(node))
        if handler is not None:
            handler(node, scope)
            return
        for child in iter_child_nodes(node):
            self.visit(child, scope)

    def visit_all(self, nodes: Iterable[Node | None], scope: int) -> None:
        for node in nodes:
            self.visit(node, scope)

    # -- hoisting ------------------------------------------------------------

    def _hoist_vars(self, node: Node, scope: int) -> None:
        """Declare every ``var`` below ``node`` that is not inside a nested function."""
        for child in iter_child_nodes(node):
            if is_function(child) or isinstance(child, ClassDeclaration | ClassExpression):
                continue
            if isinstance(child, VariableDeclaration) and child.kind == "var":
                for declarator in child.declarations:
                    for ident in pattern_identifiers(declarator.id):
                        self.manager.declare(scope, ident, BindingKind.VAR)
            self._hoist_vars(child, scope)

    def _hoist_lexical(self, statements: Iterable[Node], scope: int) -> None:
        """Declare let/const/class/function/import bindings of a statement list."""
        for statement in statements:
            if isinstance(statement, ExportNamedDeclaration | ExportDefaultDeclaration):
                if statement.declaration is None:
                    continue
                statement = statement.declaration
            if isinstance(statement, VariableDeclaration) and statement.kind != "var":
                kind = _DECLARATION_KINDS[statement.kind]
                for declarator in statement.declarations:
                    for ident in pattern_identifiers(declarator.id):
                        self.manager.declare(scope, ident, kind)
            elif isinstance(statement, FunctionDeclaration) and statement.id is not None:
                self.manager.declare(scope, statement.id, BindingKind.FUNCTION)
            elif isinstance(statement, ClassDeclaration) and statement.id is not None:
                self.manager.declare(scope, statement.id, BindingKind.CLASS)
            elif isinstance(statement, ImportDeclaration):
                for specifier in statement.specifiers:
                    local = getattr(specifier, "local", None)
                    if isinstance(local, Identifier):
                        self.manager.declare(scope, local, BindingKind.IMPORT)

    # -- patterns ------------------------------------------------------------

    def _pattern_expressions(self, pattern: Node | None, scope: int) -> None:
        """Visit default values and computed keys inside a declaration pattern."""
        if isinstance(pattern, AssignmentPattern):
            self._pattern_expressions(pattern.left, scope)
            self.visit(pattern.right, scope)
        elif isinstance(pattern, ObjectPattern):
            for prop in pattern.properties:
                if isinstance(prop, Property):
                    if prop.computed:
                        self.visit(prop.key, scope)
                    self._pattern_expressions(prop.value, scope)
                else:
                    self._pattern_expressions(prop, scope)
        elif isinstance(pattern, ArrayPattern):
            for element in pattern.elements:
                self._pattern_expressions(element, scope)
        elif isinstance(pattern, RestElement):
            self._pattern_expressions(pattern.argument, scope)

    def _target(self, target: Node | None, scope: int, *, read: bool) -> None:
        """Record writes for an assignment target."""
        if isinstance(target, Identifier):
            self.manager.add_reference(target, scope, read=read, write=True)
        elif isinstance(target, AssignmentPattern):
            self._target(target.left, scope, read=read)
            self.visit(target.right, scope)
        elif isinstance(target, ObjectPattern):
            for prop in target.properties:
                if isinstance(prop, Property):
                    if prop.computed:
                        self.visit(prop.key, scope)
                    self._target(prop.value, scope, read=read)
                else:
                    self._target(prop, scope, read=read)
        elif isinstance(target, ArrayPattern):
            for element in target.elements:
                self._target(element, scope, read=read)
        elif isinstance(target, RestElement):
            self._target(target.argument, scope, read=read)
        else:
            self.visit(target, scope)

    def _mark_initialized(self, pattern: Node | None) -> None:
        for ident in pattern_identifiers(pattern):
            binding = self.manager.declared_binding(ident)
            if binding is not None:
                binding.initialized = True

    # -- handlers ------------------------------------------------------------

    def _skip(self, node: Node, scope: int) -> None:
        return None

    def _program(self, node: Node, scope: int) -> None:
        assert isinstance(node, Program)
        module = self.manager.add_scope(ScopeKind.MODULE, node, None)
        self._hoist_vars(node, module)
        self._hoist_lexical(node.body, module)
        self.visit_all(node.body, module)

    def _identifier(self, node: Node, scope: int) -> None:
        assert isinstance(node, Identifier)
        self.manager.add_reference(node, scope)

    def _function(
        self,
        node: FunctionDeclaration | FunctionExpression | ArrowFunctionExpression,
        parent: int,
    ) -> None:
        function_scope = self.manager.add_scope(ScopeKind.FUNCTION, node, parent)
        for param in node.params:
            for ident in pattern_identifiers(param):
                self.manager.declare(function_scope, ident, BindingKind.PARAMETER).initialized = True
            self._pattern_expressions(param, function_scope)
        body = node.body
        if isinstance(body, BlockStatement):
            self._hoist_vars(body, function_scope)
            self._hoist_lexical(body.body, function_scope)
            self.visit_all(body.body, function_scope)
        else:
            self.visit(body, function_scope)

    def _function_declaration(self, node: Node, scope: int) -> None:
        assert isinstance(node, FunctionDeclaration)
        if node.id is not None and self.manager.declared_binding(node.id) is None:
            self.manager.declare(scope, node.id, BindingKind.FUNCTION)
        self._function(node, scope)

    def _function_expression(self, node: Node, scope: int) -> None:
        assert isinstance(node, FunctionExpression)
        if node.id is not None:
            name_scope = self.manager.add_scope(ScopeKind.FUNCTION_NAME, node.id, scope)
            self.manager.declare(name_scope, node.id, BindingKind.FUNCTION_NAME)
            scope = name_scope
        self._function(node, scope)

    def _arrow_function(self, node: Node, scope: int) -> None:
        assert isinstance(node, ArrowFunctionExpression)
        self._function(node, scope)

    def _block(self, node: Node, scope: int) -> None:
        assert isinstance(node, BlockStatement)
        block = self.manager.add_scope(ScopeKind.BLOCK, node, scope)
        self._hoist_lexical(node.body, block)
        self.visit_all(node.body, block)

    def _variable_declaration(self, node: Node, scope: int) -> None:
        assert isinstance(node, VariableDeclaration)
        for declarator in node.declarations:
            # Declarations outside a hoisting position, such as a lone
            # `let` used as a statement body, are declared here.
            for ident in pattern_identifiers(declarator.id):
                if self.manager.declared_binding(ident) is None:
                    self.manager.declare(scope, ident, _DECLARATION_KINDS[node.kind])
            self._pattern_expressions(declarator.id, scope)
            if declarator.init is not None:
                self._mark_initialized(declarator.id)
                self.visit(declarator.init, scope)

    def _assignment(self, node: Node, scope: int) -> None:
        assert isinstance(node, AssignmentExpression)
        self._target(node.left, scope, read=node.operator != "=")
        self.visit(node.right, scope)

    def _update(self, node: Node, scope: int) -> None:
        assert isinstance(node, UpdateExpression)
        if isinstance(node.argument, Identifier):
            self.manager.add_reference(node.argument, scope, read=True, write=True)
        else:
            self.visit(node.argument, scope)

    def _member(self, node: Node, scope: int) -> None:
        assert isinstance(node, MemberExpression)
        self.visit(node.object, scope)
        if node.computed:
            self.visit(node.property, scope)

    def _property(self, node: Node, scope: int) -> None:
        assert isinstance(node, Property)
        if node.computed:
            self.visit(node.key, scope)
        self.visit(node.value, scope)

    def _method(self, node: Node, scope: int) -> None:
        assert isinstance(node, MethodDefinition)
        if node.computed:
            self.visit(node.key, scope)
        self.visit(node.value, scope)

    def _class_field(self, node: Node, scope: int) -> None:
        assert isinstance(node, PropertyDefinition)
        if node.computed:
            self.visit(node.key, scope)
        self.visit(node.value, scope)

    def _static_block(self, node: Node, scope: int) -> None:
        assert isinstance(node, StaticBlock)
        # A static block has its own var scope, like a function body.
        block = self.manager.add_scope(ScopeKind.FUNCTION, node, scope)
        self._hoist_vars(node, block)
        self._hoist_lexical(node.body, block)
        self.visit_all(node.body, block)

    def _class_declaration(self, node: Node, scope: int) -> None:
        assert isinstance(node, ClassDeclaration)
        if node.id is not None and self.manager.declared_binding(node.id) is None:
            self.manager.declare(scope, node.id, BindingKind.CLASS)
        self.visit(node.super_class, scope)
        class_scope = self.manager.add_scope(ScopeKind.CLASS, node, scope)
        self.visit(node.body, class_scope)

    def _class_expression(self, node: Node, scope: int) -> None:
        assert isinstance(node, ClassExpression)
        self.visit(node.super_class, scope)
        class_scope = self.manager.add_scope(ScopeKind.CLASS, node, scope)
        if node.id is not None:
            self.manager.declare(class_scope, node.id, BindingKind.CLASS)
        self.visit(node.body, class_scope)

    def _for(self, node: Node, scope: int) -> None:
        assert isinstance(node, ForStatement)
        init = node.init
        if isinstance(init, VariableDeclaration) and init.kind != "var":
            scope = self.manager.add_scope(ScopeKind.FOR, node, scope)
            self._hoist_lexical([init], scope)
        self.visit(init, scope)
        self.visit(node.test, scope)
        self.visit(node.update, scope)
        self.visit(node.body, scope)

    def _for_in_of(self, node: Node, scope: int) -> None:
        assert isinstance(node, ForInStatement | ForOfStatement)
        left = node.left
        self.visit(node.right, scope)
        if isinstance(left, VariableDeclaration):
            if left.kind != "var":
                scope = self.manager.add_scope(ScopeKind.FOR, node, scope)
                self._hoist_lexical([left], scope)
            for declarator in left.declarations:
                self._mark_initialized(declarator.id)
                self._pattern_expressions(declarator.id, scope)
        else:
            self._target(left, scope, read=False)
        self.visit(node.body, scope)

    def _catch(self, node: Node, scope: int) -> None:
        assert isinstance(node, CatchClause)
        catch_scope = self.manager.add_scope(ScopeKind.CATCH, node, scope)
        for ident in pattern_identifiers(node.param):
            self.manager.declare(catch_scope, ident, BindingKind.CATCH).initialized = True
        self._pattern_expressions(node.param, catch_scope)
        self.visit(node.body, catch_scope)

    def _switch(self, node: Node, scope: int) -> None:
        assert isinstance(node, SwitchStatement)
        self.visit(node.discriminant, scope)
        switch_scope = self.manager.add_scope(ScopeKind.SWITCH, node, scope)
        for case in node.cases:
            self._hoist_lexical(case.consequent, switch_scope)
        for case in node.cases:
            self.visit(case.test, switch_scope)
            self.visit_all(case.consequent, switch_scope)

    def _labeled(self, node: Node, scope: int) -> None:
        assert isinstance(node, LabeledStatement)
        self.visit(node.body, scope)

    def _export_named(self, node: Node, scope: int) -> None:
        assert isinstance(node, ExportNamedDeclaration)
        if node.declaration is not None:
            self.visit(node.declaration, scope)
            self._mark_exported(node.declaration)
        elif node.source is None:
            for specifier in node.specifiers:
                ref = self.manager.add_reference(specifier.local, scope)
                if ref.binding is not None:
                    ref.binding.exported = True

    def _export_default(self, node: Node, scope: int) -> None:
        assert isinstance(node, ExportDefaultDeclaration)
        self.visit(node.declaration, scope)
        self._mark_exported(node.declaration)

    def _mark_exported(self, declaration: Node) -> None:
        identifiers: list[Identifier] = []
        if isinstance(declaration, VariableDeclaration):
            for declarator in declaration.declarations:
                identifiers.extend(pattern_identifiers(declarator.id))
        elif isinstance(declaration, FunctionDeclaration | ClassDeclaration) and declaration.id:
            identifiers.append(declaration.id)
        for ident in identifiers:
            binding = self.manager.declared_binding(ident)
            if binding is not None:
                binding.exported = True


def analyze_scopes(program: Program) -> ScopeManager:
    """Build the scope arena and resolve every reference in ``program``.

    Raises
    ------
    AnalysisError
        If ``program`` is not a Program root
    """
    if not isinstance(program, Program):
        raise AnalysisError(f"Scope analysis needs a Program root, got {type(program).__name__}")
    builder = _ScopeBuilder()
    builder.visit(program, MODULE_SCOPE)
    return builder.manager
