"""Purity analyzer: walks a program and reports every breach of the purity contract.

The walk is a single pre-order traversal. Each node class has exactly one
``visit_<Type>`` handler; the dispatch table is built at import time and
import fails if any node class is left without one, so adding a node type
forces a decision about how it is checked.

Decisions about mutation rely on the scope manager: an access is *local*
when it resolves to a binding declared in the same function scope as the
access and that binding is not module-level.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from puregate.kernel.diagnostics.models import (
    PurityResult,
    PurityViolation,
    SourceLocation,
    ViolationKind,
)
from puregate.kernel.diagnostics.snippets import code_snippet
from puregate.kernel.js.nodes import (
    NODE_CLASSES,
    ArrayExpression,
    AssignmentExpression,
    CallExpression,
    Identifier,
    MemberExpression,
    Node,
    ObjectExpression,
    Program,
    UnaryExpression,
    UpdateExpression,
    VariableDeclarator,
    is_function,
    iter_child_nodes,
    walk,
)
from puregate.kernel.js.scope import (
    Binding,
    BindingKind,
    ScopeManager,
    analyze_scopes,
    pattern_identifiers,
)
from puregate.kernel.logging import get_logger
from puregate.kernel.purity.constants import (
    CATEGORY_KINDS,
    EXPORT_MODULE_SLOT,
    EXPORT_OBJECT,
    FORBIDDEN_IDENTIFIERS,
    FORBIDDEN_MEMBERS,
    FORBIDDEN_NODE_TYPES,
    MUTATING_ARRAY_METHODS,
    MUTATING_OBJECT_METHODS,
    PURE_METHODS,
    PURE_OBJECT_CALLS,
    describe,
)
from puregate.kernel.purity.matching import (
    PatternSet,
    member_chain,
    member_path,
    member_root,
    property_name,
    unwrap_chain,
)
from puregate.kernel.utils.timer import stage_timer

logger = get_logger(__name__)

ANALYSIS_FAILURE_PATTERN = "analysis failure"
MODULE_LOADER = "require"


def _location(node: Node, filename: str | None) -> SourceLocation:
    span = node.loc
    if span is None:
        return SourceLocation(line=1, column=0, file=filename)
    return SourceLocation(
        line=max(span.line, 1),
        column=max(span.column, 0),
        end_line=span.end_line,
        end_column=span.end_column,
        file=filename,
    )


class _PurityWalk:
    """Traversal state for one analysis run."""

    def __init__(
        self,
        analyzer: PurityAnalyzer,
        scopes: ScopeManager,
        source: str,
        filename: str | None,
    ) -> None:
        self.analyzer = analyzer
        self.scopes = scopes
        self.source = source
        self.filename = filename
        self.violations: list[PurityViolation] = []
        self.function_depth = 0
        # Identity of nodes already covered by a matched member path
        self._covered: set[int] = set()
        # Bindings initialized from require(), e.g. const fs = require('fs')
        self._module_bindings: set[int] = set()

    def run(self, program: Program) -> None:
        self._collect_module_bindings(program)
        stack: list[tuple[Node, bool]] = [(program, False)]
        while stack:
            node, leaving = stack.pop()
            if leaving:
                self.function_depth -= 1
                continue
            _HANDLERS[type(node)](self, node)
            if is_function(node):
                self.function_depth += 1
                stack.append((node, True))
            stack.extend((child, False) for child in reversed(list(iter_child_nodes(node))))

    def report(self, kind: ViolationKind, pattern: str, message: str, node: Node) -> None:
        location = _location(node, self.filename)
        self.violations.append(
            PurityViolation(
                kind=kind,
                pattern=pattern,
                message=message,
                location=location,
                snippet=code_snippet(self.source, location),
            )
        )

    # ------------------------------------------------------------------
    # Shared checks
    # ------------------------------------------------------------------

    def _forbidden_construct(self, node: Node) -> None:
        self.report(
            ViolationKind.FORBIDDEN_CONSTRUCT, node.type, FORBIDDEN_NODE_TYPES[node.type], node
        )

    def _no_checks(self, node: Node) -> None:
        return None

    def _is_local_identifier(self, node: Node, *, allow_parameters: bool = True) -> bool:
        if not isinstance(node, Identifier):
            return False
        ref = self.scopes.reference(node)
        if ref is None or not self.scopes.is_local(ref):
            return False
        return allow_parameters or not (ref.binding is not None and ref.binding.is_parameter)

    def _collect_module_bindings(self, program: Program) -> None:
        for node in walk(program):
            if not isinstance(node, VariableDeclarator) or not isinstance(node.id, Identifier):
                continue
            init = node.init
            if not isinstance(init, CallExpression) or not isinstance(init.callee, Identifier):
                continue
            loader = self.scopes.reference(init.callee)
            if init.callee.name != MODULE_LOADER or loader is None or not loader.is_free:
                continue
            binding = self.scopes.declared_binding(node.id)
            if binding is not None:
                self._module_bindings.add(id(binding))

    def _holds_module(self, binding: Binding) -> bool:
        return binding.kind == BindingKind.IMPORT or id(binding) in self._module_bindings

    def _has_bound_root(self, node: Node) -> bool:
        """True when a member chain starts at a name the program declares itself.

        Imported and required names still stand for the module they load.
        """
        root = member_root(node)
        if not isinstance(root, Identifier):
            return False
        ref = self.scopes.reference(root)
        if ref is None or ref.binding is None:
            return False
        return not self._holds_module(ref.binding)

    def _is_export_slot(self, target: MemberExpression) -> bool:
        """True for ``module.exports``, ``module.exports.x`` and ``exports.x``."""
        obj = target.object
        if isinstance(obj, Identifier) and obj.name == EXPORT_OBJECT:
            return True
        if member_path(target) == EXPORT_MODULE_SLOT:
            return True
        return isinstance(obj, MemberExpression) and member_path(obj) == EXPORT_MODULE_SLOT

    def _property_write(self, node: Node, target: MemberExpression, pattern: str) -> None:
        if self.function_depth == 0 and self._is_export_slot(target):
            return
        if self._is_local_identifier(member_root(target)):
            return
        if pattern == "property deletion":
            message = (
                "Deleting a property of a non-local object mutates shared state; "
                "use rest destructuring or the spread operator to build a new object"
            )
        else:
            message = (
                "Assigning to a property of a non-local object mutates shared state; "
                "use the spread operator to create a new object instead"
            )
        self.report(ViolationKind.MUTATION, pattern, message, node)

    def _rebinding(self, identifier: Identifier, *, update: bool) -> None:
        ref = self.scopes.reference(identifier)
        if ref is not None and self.scopes.is_local(ref):
            return
        name = identifier.name
        if ref is not None and ref.binding is not None and ref.binding.is_parameter:
            label = f"parameter reassignment: {name}"
            message = f"Reassigning parameter '{name}' of an enclosing function mutates captured state"
        else:
            label = f"variable reassignment: {name}"
            message = f"Reassigning variable '{name}' outside its own function mutates shared state"
        if update:
            label = f"update expression ({label})"
            message = message.replace("Reassigning", "Incrementing or decrementing", 1)
        self.report(ViolationKind.MUTATION, label, message, identifier)

    def _cover_chain(self, node: MemberExpression) -> None:
        for inner in member_chain(node):
            self._covered.add(id(inner))

    # ------------------------------------------------------------------
    # Node handlers with checks
    # ------------------------------------------------------------------

    def visit_Identifier(self, node: Identifier) -> None:
        if id(node) in self._covered:
            return
        ref = self.scopes.reference(node)
        if ref is None or not ref.is_free:
            return
        if node.name in self.analyzer.allowed_identifiers:
            return
        category = FORBIDDEN_IDENTIFIERS.get(node.name)
        if category is None:
            return
        self.report(CATEGORY_KINDS[category], node.name, describe(category, node.name), node)

    def visit_MemberExpression(self, node: MemberExpression) -> None:
        if id(node) in self._covered:
            return
        path = member_path(node)
        if path is None or self._has_bound_root(node):
            return
        matched = self.analyzer.forbidden_members.match(path)
        if matched is None or self.analyzer.allowed_members.match(path):
            return
        # A matched chain reports once; its root and inner links stay quiet.
        self._cover_chain(node)
        category = FORBIDDEN_MEMBERS[matched]
        self.report(CATEGORY_KINDS[category], matched, describe(category, path), node)

    def visit_CallExpression(self, node: CallExpression) -> None:
        callee = unwrap_chain(node.callee)
        if not isinstance(callee, MemberExpression):
            return
        path = member_path(callee)
        if path is not None and not self._has_bound_root(callee):
            if path in PURE_OBJECT_CALLS or self.analyzer.allowed_members.match(path):
                return
            if path in MUTATING_OBJECT_METHODS:
                target = node.arguments[0] if node.arguments else None
                if path == "Object.assign" and isinstance(
                    target, ObjectExpression | ArrayExpression
                ):
                    return
                self.report(
                    ViolationKind.MUTATION,
                    path,
                    f"'{path}()' mutates its target object; build a new object with the "
                    "spread operator instead",
                    node,
                )
                return

        method = property_name(callee)
        if method is None or method in PURE_METHODS:
            return
        alternative = MUTATING_ARRAY_METHODS.get(method)
        if alternative is None:
            return
        if self._is_local_identifier(member_root(callee.object), allow_parameters=False):
            return
        self.report(
            ViolationKind.MUTATION,
            method,
            f"'{method}()' mutates the array in place; use {alternative} instead",
            node,
        )

    def visit_AssignmentExpression(self, node: AssignmentExpression) -> None:
        target = node.left
        if isinstance(target, MemberExpression):
            self._property_write(node, target, "property assignment")
            return
        for identifier in pattern_identifiers(target):
            self._rebinding(identifier, update=False)

    def visit_UpdateExpression(self, node: UpdateExpression) -> None:
        argument = node.argument
        if isinstance(argument, Identifier):
            self._rebinding(argument, update=True)
        elif isinstance(argument, MemberExpression):
            self.report(
                ViolationKind.MUTATION,
                "update expression on property",
                "Incrementing or decrementing a property mutates the object; "
                "compute a new object instead",
                node,
            )

    def visit_UnaryExpression(self, node: UnaryExpression) -> None:
        if node.operator == "delete" and isinstance(node.argument, MemberExpression):
            self._property_write(node, node.argument, "property deletion")

    visit_ForStatement = _forbidden_construct
    visit_ForInStatement = _forbidden_construct
    visit_ForOfStatement = _forbidden_construct
    visit_WhileStatement = _forbidden_construct
    visit_DoWhileStatement = _forbidden_construct
    visit_ClassDeclaration = _forbidden_construct
    visit_ClassExpression = _forbidden_construct
    visit_ThisExpression = _forbidden_construct
    visit_WithStatement = _forbidden_construct

    # ------------------------------------------------------------------
    # Node handlers without checks of their own
    # ------------------------------------------------------------------

    visit_Program = _no_checks
    visit_ExpressionStatement = _no_checks
    visit_BlockStatement = _no_checks
    visit_EmptyStatement = _no_checks
    visit_DebuggerStatement = _no_checks
    visit_ReturnStatement = _no_checks
    visit_LabeledStatement = _no_checks
    visit_BreakStatement = _no_checks
    visit_ContinueStatement = _no_checks
    visit_IfStatement = _no_checks
    visit_SwitchStatement = _no_checks
    visit_SwitchCase = _no_checks
    visit_ThrowStatement = _no_checks
    visit_TryStatement = _no_checks
    visit_CatchClause = _no_checks
    visit_FunctionDeclaration = _no_checks
    visit_VariableDeclaration = _no_checks
    visit_VariableDeclarator = _no_checks
    visit_ClassBody = _no_checks
    visit_MethodDefinition = _no_checks
    visit_PropertyDefinition = _no_checks
    visit_StaticBlock = _no_checks
    visit_ImportDeclaration = _no_checks
    visit_ImportSpecifier = _no_checks
    visit_ImportDefaultSpecifier = _no_checks
    visit_ImportNamespaceSpecifier = _no_checks
    visit_ExportNamedDeclaration = _no_checks
    visit_ExportSpecifier = _no_checks
    visit_ExportDefaultDeclaration = _no_checks
    visit_ExportAllDeclaration = _no_checks
    visit_PrivateIdentifier = _no_checks
    visit_Literal = _no_checks
    visit_Super = _no_checks
    visit_ArrayExpression = _no_checks
    visit_ObjectExpression = _no_checks
    visit_Property = _no_checks
    visit_FunctionExpression = _no_checks
    visit_ArrowFunctionExpression = _no_checks
    visit_TemplateLiteral = _no_checks
    visit_TemplateElement = _no_checks
    visit_TaggedTemplateExpression = _no_checks
    visit_BinaryExpression = _no_checks
    visit_LogicalExpression = _no_checks
    visit_ConditionalExpression = _no_checks
    visit_NewExpression = _no_checks
    visit_ChainExpression = _no_checks
    visit_SequenceExpression = _no_checks
    visit_YieldExpression = _no_checks
    visit_AwaitExpression = _no_checks
    visit_MetaProperty = _no_checks
    visit_Import = _no_checks
    visit_SpreadElement = _no_checks
    visit_ObjectPattern = _no_checks
    visit_ArrayPattern = _no_checks
    visit_RestElement = _no_checks
    visit_AssignmentPattern = _no_checks


def _build_handlers() -> dict[type[Node], Callable[[_PurityWalk, Any], None]]:
    handlers: dict[type[Node], Callable[[_PurityWalk, Any], None]] = {}
    missing: list[str] = []
    for cls in NODE_CLASSES:
        handler = getattr(_PurityWalk, f"visit_{cls.__name__}", None)
        if handler is None:
            missing.append(cls.__name__)
        else:
            handlers[cls] = handler
    if missing:
        raise TypeError(f"Purity analyzer has no handler for node types: {', '.join(missing)}")
    return handlers


_HANDLERS = _build_handlers()


class PurityAnalyzer:
    """Checks parsed programs against the purity contract.

    Parameters
    ----------
    allowed_identifiers : Iterable[str]
        Forbidden global names that are permitted for this analyzer
    allowed_members : Iterable[str]
        Dotted member paths (``a.b``) or prefixes (``a.b.*``) that are
        permitted even if they appear in the forbidden tables

    Examples
    --------
    >>> from puregate.kernel.js.parser import TreeSitterParser
    >>> program = TreeSitterParser().parse("const add = (a, b) => a + b;").program
    >>> PurityAnalyzer().analyze(program, "const add = (a, b) => a + b;").valid
    True
    """

    def __init__(
        self,
        *,
        allowed_identifiers: Iterable[str] = (),
        allowed_members: Iterable[str] = (),
    ) -> None:
        self.allowed_identifiers = frozenset(allowed_identifiers)
        self.allowed_members = PatternSet(allowed_members)
        self.forbidden_members = PatternSet(FORBIDDEN_MEMBERS)

    def analyze(self, program: Program, source: str, filename: str | None = None) -> PurityResult:
        """Analyze one program.

        Never raises: an internal failure is reported as a single
        ``side_effect`` violation with pattern ``"analysis failure"``.
        """
        with stage_timer("purity") as timer:
            try:
                walk = _PurityWalk(self, analyze_scopes(program), source, filename)
                walk.run(program)
                violations = tuple(walk.violations)
            except Exception as e:
                logger.opt(exception=e).error("Purity analysis failed: {error}", error=e)
                location = SourceLocation(line=1, column=0, file=filename)
                violations = (
                    PurityViolation(
                        kind=ViolationKind.SIDE_EFFECT,
                        pattern=ANALYSIS_FAILURE_PATTERN,
                        message=f"Purity analysis failed: {e}",
                        location=location,
                        snippet=code_snippet(source, location),
                    ),
                )

        logger.debug(
            "Purity analysis found {count} violation(s) in {ms}ms",
            count=len(violations),
            ms=timer.duration_str,
        )
        return PurityResult(
            valid=not violations, violations=violations, duration_ms=timer.duration_ms
        )


def analyze_purity(
    program: Program,
    source: str,
    *,
    allowed_identifiers: Iterable[str] = (),
    allowed_members: Iterable[str] = (),
    filename: str | None = None,
) -> PurityResult:
    """Run a one-off :class:`PurityAnalyzer` over ``program``."""
    analyzer = PurityAnalyzer(
        allowed_identifiers=allowed_identifiers, allowed_members=allowed_members
    )
    return analyzer.analyze(program, source, filename)
