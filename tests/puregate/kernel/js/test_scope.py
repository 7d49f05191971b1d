"""Tests for puregate.kernel.js.scope."""

from __future__ import annotations

import pytest

from puregate.kernel.exceptions import AnalysisError
from puregate.kernel.js.nodes import Identifier, walk
from puregate.kernel.js.scope import (
    MODULE_SCOPE,
    Binding,
    BindingKind,
    ScopeManager,
    analyze_scopes,
    pattern_identifiers,
)


def _binding(manager: ScopeManager, name: str) -> Binding:
    matches = [b for b in manager.bindings() if b.name == name]
    assert len(matches) == 1, f"expected one binding named {name!r}"
    return matches[0]


class TestBindings:
    """Tests for declaration and reference resolution."""

    def test_module_level_let(self, parse) -> None:
        manager = analyze_scopes(parse("let counter = 0; const inc = () => { counter = counter + 1; };"))
        counter = manager.module_scope.bindings["counter"]
        assert counter.kind == BindingKind.LET
        assert counter.scope == MODULE_SCOPE
        assert counter.initialized
        assert len(counter.writes) == 1
        assert len(counter.reads) == 1

    def test_module_bindings_are_never_local(self, parse) -> None:
        manager = analyze_scopes(parse("let counter = 0; const inc = () => { counter = counter + 1; };"))
        counter = manager.module_scope.bindings["counter"]
        assert not any(manager.is_local(ref) for ref in counter.references)

    def test_function_local_binding(self, parse) -> None:
        manager = analyze_scopes(
            parse("const fn = () => { const arr = [3, 1, 2]; arr.sort(); return arr; };")
        )
        arr = _binding(manager, "arr")
        assert arr.kind == BindingKind.CONST
        assert len(arr.references) == 2
        assert all(manager.is_local(ref) for ref in arr.references)

    def test_own_parameter_is_local(self, parse) -> None:
        manager = analyze_scopes(parse("const f = (a) => { a = 1; return a; };"))
        a = _binding(manager, "a")
        assert a.is_parameter
        assert all(manager.is_local(ref) for ref in a.references)

    def test_captured_parameter_is_not_local(self, parse) -> None:
        manager = analyze_scopes(parse("const f = (a) => () => { a = 1; };"))
        a = _binding(manager, "a")
        assert a.is_parameter
        assert len(a.writes) == 1
        assert not manager.is_local(a.writes[0])

    def test_block_binding_shares_function_scope(self, parse) -> None:
        manager = analyze_scopes(parse("const f = (x) => { if (x) { let y = 1; y = 2; } return x; };"))
        y = _binding(manager, "y")
        assert all(manager.is_local(ref) for ref in y.references)

    def test_var_is_hoisted_to_function(self, parse) -> None:
        manager = analyze_scopes(parse("function f() { if (true) { var x = 1; } return x; }"))
        x = _binding(manager, "x")
        assert x.kind == BindingKind.VAR
        assert len(x.reads) == 1
        assert manager.scopes[x.scope].kind == "function"

    def test_function_declaration_is_hoisted(self, parse) -> None:
        manager = analyze_scopes(parse("const a = b(); function b() { return 1; }"))
        b = manager.module_scope.bindings["b"]
        assert b.kind == BindingKind.FUNCTION
        assert len(b.references) == 1
        assert not any(ref.identifier.name == "b" for ref in manager.through)

    def test_catch_parameter(self, parse) -> None:
        manager = analyze_scopes(parse("try { run(); } catch (err) { report(err); }"))
        err = _binding(manager, "err")
        assert err.kind == BindingKind.CATCH
        assert len(err.reads) == 1

    def test_exported_declaration(self, parse) -> None:
        manager = analyze_scopes(parse("export const a = 1;"))
        assert manager.module_scope.bindings["a"].exported

    def test_exported_specifier(self, parse) -> None:
        manager = analyze_scopes(parse("const a = 1;\nexport { a };"))
        assert manager.module_scope.bindings["a"].exported


class TestReferences:
    """Tests for reference positions."""

    def test_free_references(self, parse) -> None:
        manager = analyze_scopes(parse("console.log(x);"))
        assert sorted(ref.identifier.name for ref in manager.through) == ["console", "x"]
        assert all(ref.is_free for ref in manager.through)

    def test_member_property_is_not_a_reference(self, parse) -> None:
        program = parse("const f = (x) => x.process;")
        manager = analyze_scopes(program)
        process = next(
            node for node in walk(program) if isinstance(node, Identifier) and node.name == "process"
        )
        assert manager.reference(process) is None

    def test_computed_property_is_a_reference(self, parse) -> None:
        manager = analyze_scopes(parse("const f = (x, key) => x[key];"))
        key = _binding(manager, "key")
        assert len(key.reads) == 1

    def test_declaration_site_is_not_a_reference(self, parse) -> None:
        program = parse("function process() { return 1; }")
        manager = analyze_scopes(program)
        name = program.body[0].id
        assert manager.reference(name) is None
        assert manager.declared_binding(name) is manager.module_scope.bindings["process"]

    def test_update_is_read_and_write(self, parse) -> None:
        manager = analyze_scopes(parse("let n = 0; n++;"))
        ref = manager.module_scope.bindings["n"].references[0]
        assert ref.is_read
        assert ref.is_write

    def test_object_key_is_not_a_reference(self, parse) -> None:
        manager = analyze_scopes(parse("const o = { window: 1 };"))
        assert manager.through == []


class TestPatternIdentifiers:
    """Tests for pattern_identifiers."""

    def test_nested_patterns(self, parse) -> None:
        program = parse("const { a, b: [c, d = 1] } = obj; const [e, ...f] = g;")
        names = [
            ident.name
            for declaration in program.body
            for declarator in declaration.declarations
            for ident in pattern_identifiers(declarator.id)
        ]
        assert names == ["a", "c", "d", "e", "f"]

    def test_none(self) -> None:
        assert list(pattern_identifiers(None)) == []


class TestAnalyzeScopes:
    """Tests for analyze_scopes input checks."""

    def test_requires_program_root(self, parse) -> None:
        statement = parse("const a = 1;").body[0]
        with pytest.raises(AnalysisError, match="Program root"):
            analyze_scopes(statement)
