"""Style rules for generated JavaScript.

Rule ids and message wording follow ESLint and eslint-plugin-functional so
that configurations written for those tools carry over unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Any

from puregate.kernel.js.nodes import (
    ArrowFunctionExpression,
    AssignmentExpression,
    BinaryExpression,
    CallExpression,
    DebuggerStatement,
    DoWhileStatement,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    FunctionExpression,
    Identifier,
    Literal,
    MemberExpression,
    NewExpression,
    Node,
    Super,
    TemplateLiteral,
    ThisExpression,
    UnaryExpression,
    UpdateExpression,
    VariableDeclaration,
    WhileStatement,
    is_function,
    iter_child_nodes,
)
from puregate.kernel.js.scope import MODULE_SCOPE, Binding, BindingKind, pattern_identifiers
from puregate.kernel.linting.models import RuleFinding
from puregate.kernel.linting.rules import RuleContext, StyleRule
from puregate.kernel.purity.matching import member_path, member_root, property_name, unwrap_chain

_GLOBAL_OBJECTS = ("window", "global", "globalThis")


def _option_dict(options: tuple[Any, ...], index: int = 0) -> dict[str, Any]:
    if len(options) > index and isinstance(options[index], dict):
        return options[index]
    return {}


def _is_free(context: RuleContext, node: Node, name: str) -> bool:
    """True for an identifier ``name`` that resolves to no declaration."""
    if not isinstance(node, Identifier) or node.name != name:
        return False
    ref = context.scopes.reference(node)
    return ref is not None and ref.is_free


def _is_global_call(context: RuleContext, callee: Node, names: tuple[str, ...]) -> str | None:
    """Name of a global function called as ``name`` or ``window.name``, if any."""
    callee = unwrap_chain(callee)
    if isinstance(callee, Identifier) and callee.name in names:
        return callee.name if _is_free(context, callee, callee.name) else None
    if isinstance(callee, MemberExpression):
        path = member_path(callee)
        if path is None or "." not in path:
            return None
        root, _, rest = path.partition(".")
        if root in _GLOBAL_OBJECTS and rest in names:
            return rest if _is_free(context, member_root(callee), root) else None
    return None


def _lexical_nodes(function: Node) -> Iterator[Node]:
    """Nodes of a function body that share its ``this``, skipping nested regular functions."""
    stack = list(iter_child_nodes(function))
    while stack:
        node = stack.pop()
        yield node
        if is_function(node) and not isinstance(node, ArrowFunctionExpression):
            continue
        stack.extend(iter_child_nodes(node))


def _never_read(binding: Binding) -> bool:
    """True when no reference reads the value other than to update it."""
    return all(not ref.is_read or ref.is_write for ref in binding.references)


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


class NoVarRule:
    """no-var: Require let or const instead of var."""

    rule_id = "no-var"
    description = "Require let or const instead of var"

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        return [
            RuleFinding(
                "Unexpected var, use let or const instead.",
                node,
                suggestion="Replace 'var' with 'const', or 'let' if the variable is reassigned",
            )
            for node in context.of_type(VariableDeclaration)
            if node.kind == "var"
        ]


class PreferConstRule:
    """prefer-const: let bindings that are never reassigned should be const."""

    rule_id = "prefer-const"
    description = "Require const for variables that are never reassigned"

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        findings: list[RuleFinding] = []
        for binding in context.scopes.bindings():
            if binding.kind != BindingKind.LET or not binding.initialized:
                continue
            if binding.writes or not binding.identifiers:
                continue
            findings.append(
                RuleFinding(
                    f"'{binding.name}' is never reassigned. Use 'const' instead.",
                    binding.identifiers[0],
                    suggestion="Declare it with 'const'",
                )
            )
        return findings


class NoUnusedVarsRule:
    """no-unused-vars: Disallow declared but unused variables and arguments.

    Options mirror ESLint: ``vars`` (``all``/``local``), ``args``
    (``after-used``/``all``/``none``), ``caughtErrors`` (``all``/``none``)
    and the ``argsIgnorePattern``, ``varsIgnorePattern`` and
    ``caughtErrorsIgnorePattern`` regular expressions.
    """

    rule_id = "no-unused-vars"
    description = "Disallow unused variables"

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        settings = _option_dict(options)
        if len(options) > 0 and isinstance(options[0], str):
            settings = {"vars": options[0]}
        vars_mode = settings.get("vars", "all")
        args_mode = settings.get("args", "after-used")
        caught_mode = settings.get("caughtErrors", "all")
        vars_ignore = _compile(settings.get("varsIgnorePattern"))
        args_ignore = _compile(settings.get("argsIgnorePattern"))
        caught_ignore = _compile(settings.get("caughtErrorsIgnorePattern"))

        findings: list[RuleFinding] = []
        for binding in context.scopes.bindings():
            if binding.exported or not binding.identifiers or not _never_read(binding):
                continue
            if binding.kind in (BindingKind.PARAMETER, BindingKind.FUNCTION_NAME):
                continue
            if binding.kind == BindingKind.CATCH:
                if caught_mode == "none" or _ignored(caught_ignore, binding.name):
                    continue
            elif vars_mode == "local" and binding.scope == MODULE_SCOPE:
                continue
            elif _ignored(vars_ignore, binding.name):
                continue
            findings.append(_unused(binding))

        if args_mode != "none":
            for function in context.nodes:
                if not is_function(function):
                    continue
                findings.extend(self._unused_params(context, function, args_mode, args_ignore))
        return findings

    def _unused_params(
        self,
        context: RuleContext,
        function: Node,
        args_mode: str,
        ignore: re.Pattern[str] | None,
    ) -> list[RuleFinding]:
        params: list[Binding] = []
        for param in getattr(function, "params", ()):
            for ident in pattern_identifiers(param):
                binding = context.scopes.declared_binding(ident)
                if binding is not None and binding.is_parameter and binding not in params:
                    params.append(binding)

        last_used = -1
        for index, binding in enumerate(params):
            if not _never_read(binding):
                last_used = index

        findings: list[RuleFinding] = []
        for index, binding in enumerate(params):
            if not _never_read(binding) or _ignored(ignore, binding.name):
                continue
            if args_mode == "after-used" and index < last_used:
                continue
            findings.append(_unused(binding))
        return findings


def _compile(pattern: Any) -> re.Pattern[str] | None:
    return re.compile(pattern) if isinstance(pattern, str) and pattern else None


def _ignored(pattern: re.Pattern[str] | None, name: str) -> bool:
    return pattern is not None and pattern.search(name) is not None


_DEFINED_ONLY_KINDS = frozenset({
    BindingKind.FUNCTION,
    BindingKind.CLASS,
    BindingKind.IMPORT,
    BindingKind.PARAMETER,
    BindingKind.CATCH,
})


def _unused(binding: Binding) -> RuleFinding:
    if binding.kind in _DEFINED_ONLY_KINDS:
        message = f"'{binding.name}' is defined but never used."
    elif binding.initialized or binding.writes:
        message = f"'{binding.name}' is assigned a value but never used."
    else:
        message = f"'{binding.name}' is defined but never used."
    return RuleFinding(message, binding.identifiers[0], suggestion="Remove it or prefix it with '_'")


class NoParamReassignRule:
    """no-param-reassign: Disallow reassigning function parameters.

    With ``{"props": true}`` assignments to parameter properties are
    reported too.
    """

    rule_id = "no-param-reassign"
    description = "Disallow reassignment of function parameters"

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        settings = _option_dict(options)
        findings: list[RuleFinding] = []
        for binding in context.scopes.bindings():
            if not binding.is_parameter:
                continue
            findings.extend(
                RuleFinding(
                    f"Assignment to function parameter '{binding.name}'.",
                    ref.identifier,
                    suggestion="Assign the new value to a fresh const instead",
                )
                for ref in binding.writes
            )

        if not settings.get("props", False):
            return findings
        ignored = set(settings.get("ignorePropertyModificationsFor", ()))
        for node in context.nodes:
            target = _property_target(node)
            if target is None:
                continue
            root = member_root(target)
            if not isinstance(root, Identifier) or root.name in ignored:
                continue
            ref = context.scopes.reference(root)
            if ref is not None and ref.binding is not None and ref.binding.is_parameter:
                findings.append(
                    RuleFinding(
                        f"Assignment to property of function parameter '{root.name}'.", node
                    )
                )
        return findings


def _property_target(node: Node) -> MemberExpression | None:
    if isinstance(node, AssignmentExpression) and isinstance(node.left, MemberExpression):
        return node.left
    if isinstance(node, UpdateExpression) and isinstance(node.argument, MemberExpression):
        return node.argument
    if (
        isinstance(node, UnaryExpression)
        and node.operator == "delete"
        and isinstance(node.argument, MemberExpression)
    ):
        return node.argument
    return None


# ---------------------------------------------------------------------------
# Functions and expressions
# ---------------------------------------------------------------------------


class PreferArrowCallbackRule:
    """prefer-arrow-callback: Callbacks should be arrow functions.

    Function expressions that use ``this``, ``super`` or ``arguments``,
    generators, and named functions that refer to themselves are exempt.
    """

    rule_id = "prefer-arrow-callback"
    description = "Require arrow functions as callbacks"

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        findings: list[RuleFinding] = []
        for call in context.of_type(CallExpression, NewExpression):
            for argument in call.arguments:
                if isinstance(argument, FunctionExpression) and self._convertible(
                    context, argument
                ):
                    findings.append(
                        RuleFinding(
                            "Unexpected function expression.",
                            argument,
                            suggestion="Use an arrow function: (x) => ...",
                        )
                    )
        return findings

    def _convertible(self, context: RuleContext, function: FunctionExpression) -> bool:
        if function.generator:
            return False
        if function.id is not None:
            binding = context.scopes.declared_binding(function.id)
            if binding is not None and binding.references:
                return False
        for node in _lexical_nodes(function):
            if isinstance(node, ThisExpression | Super):
                return False
            if _is_free(context, node, "arguments"):
                return False
        return True


class EqeqeqRule:
    """eqeqeq: Require === and !==.

    The first option is ``"always"`` (default) or ``"smart"``; ``"always"``
    accepts ``{"null": "ignore"}`` to allow comparisons against null.
    """

    rule_id = "eqeqeq"
    description = "Require the use of === and !=="

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        mode = options[0] if options and isinstance(options[0], str) else "always"
        ignore_null = _option_dict(options, 1).get("null") == "ignore"
        findings: list[RuleFinding] = []
        for node in context.of_type(BinaryExpression):
            if node.operator not in ("==", "!="):
                continue
            null_compare = _is_null(node.left) or _is_null(node.right)
            if mode == "smart" and (null_compare or _is_smart_pair(node)):
                continue
            if ignore_null and null_compare:
                continue
            findings.append(
                RuleFinding(
                    f"Expected '{node.operator}=' and instead saw '{node.operator}'.",
                    node,
                    suggestion=f"Use '{node.operator}=' for strict comparison",
                )
            )
        return findings


def _is_null(node: Node) -> bool:
    return isinstance(node, Literal) and node.value is None and node.raw == "null"


def _is_typeof(node: Node) -> bool:
    return isinstance(node, UnaryExpression) and node.operator == "typeof"


def _is_smart_pair(node: BinaryExpression) -> bool:
    if _is_typeof(node.left) or _is_typeof(node.right):
        return True
    return isinstance(node.left, Literal) and isinstance(node.right, Literal)


class NoConsoleRule:
    """no-console: Disallow the console object.

    ``{"allow": ["warn"]}`` permits the listed methods.
    """

    rule_id = "no-console"
    description = "Disallow the use of console"

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        allowed = set(_option_dict(options).get("allow", ()))
        findings: list[RuleFinding] = []
        for node in context.of_type(MemberExpression):
            if not _is_free(context, node.object, "console"):
                continue
            if property_name(node) in allowed:
                continue
            findings.append(
                RuleFinding(
                    "Unexpected console statement.",
                    node,
                    suggestion="Remove the console call",
                )
            )
        return findings


class NoEvalRule:
    """no-eval: Disallow eval()."""

    rule_id = "no-eval"
    description = "Disallow the use of eval()"

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        return [
            RuleFinding("eval can be harmful.", node)
            for node in context.of_type(CallExpression)
            if _is_global_call(context, node.callee, ("eval",))
        ]


class NoImpliedEvalRule:
    """no-implied-eval: Disallow string arguments to timer functions."""

    rule_id = "no-implied-eval"
    description = "Disallow the use of eval()-like methods"

    _NAMES = ("setTimeout", "setInterval", "execScript")

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        findings: list[RuleFinding] = []
        for node in context.of_type(CallExpression):
            if not node.arguments or not _is_global_call(context, node.callee, self._NAMES):
                continue
            if _is_string_like(node.arguments[0]):
                findings.append(
                    RuleFinding(
                        "Implied eval. Consider passing a function instead of a string.",
                        node,
                    )
                )
        return findings


def _is_string_like(node: Node) -> bool:
    if isinstance(node, Literal):
        return isinstance(node.value, str)
    if isinstance(node, TemplateLiteral):
        return True
    if isinstance(node, BinaryExpression) and node.operator == "+":
        return _is_string_like(node.left) or _is_string_like(node.right)
    return False


class NoNewFuncRule:
    """no-new-func: Disallow the Function constructor."""

    rule_id = "no-new-func"
    description = "Disallow new operators with the Function object"

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        return [
            RuleFinding("The Function constructor is eval.", node)
            for node in context.of_type(NewExpression, CallExpression)
            if _is_free(context, node.callee, "Function")
        ]


class NoDebuggerRule:
    """no-debugger: Disallow debugger statements."""

    rule_id = "no-debugger"
    description = "Disallow the use of debugger"

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        return [
            RuleFinding("Unexpected 'debugger' statement.", node)
            for node in context.of_type(DebuggerStatement)
        ]


# ---------------------------------------------------------------------------
# Functional style
# ---------------------------------------------------------------------------


class NoLoopStatementsRule:
    """functional/no-loop-statements: Disallow imperative loops."""

    rule_id = "functional/no-loop-statements"
    description = "Disallow imperative loops"

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        return [
            RuleFinding("Unexpected loop, use map or reduce instead.", node)
            for node in context.of_type(
                ForStatement, ForInStatement, ForOfStatement, WhileStatement, DoWhileStatement
            )
        ]


class NoThisExpressionsRule:
    """functional/no-this-expressions: Disallow this access."""

    rule_id = "functional/no-this-expressions"
    description = "Disallow this access"

    def check(self, context: RuleContext, options: tuple[Any, ...]) -> list[RuleFinding]:
        return [
            RuleFinding("Unexpected this, use functions not classes.", node)
            for node in context.of_type(ThisExpression)
        ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

ALL_STYLE_RULES: list[StyleRule] = [
    NoVarRule(),
    PreferConstRule(),
    PreferArrowCallbackRule(),
    NoUnusedVarsRule(),
    NoParamReassignRule(),
    EqeqeqRule(),
    NoConsoleRule(),
    NoEvalRule(),
    NoImpliedEvalRule(),
    NoNewFuncRule(),
    NoDebuggerRule(),
    NoLoopStatementsRule(),
    NoThisExpressionsRule(),
]

STYLE_RULE_REGISTRY: dict[str, StyleRule] = {rule.rule_id: rule for rule in ALL_STYLE_RULES}
