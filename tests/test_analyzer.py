"""Tests for semantic analysis."""

from conftest import assign, binop, call, const, fn, ident, int_lit, let

from exprvm.compiler import (
    AnalysisErrorKind,
    AnalysisWarningKind,
    Analyzer,
    Scope,
    SymbolKind,
    analyze,
)


def _error_kinds(results):
    return [(e.kind, e.name) for e in results.errors]


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

class TestIdentifiers:
    def test_unbound_reference(self):
        results = analyze([ident("x")])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNBOUND_IDENTIFIER, "x")]

    def test_declared_reference(self):
        results = analyze([let("x", int_lit(1)), ident("x")])
        assert results.ok
        assert results.warnings == []

    def test_visits_every_node(self):
        results = analyze([ident("a"), binop(ident("b"), "ADD", ident("c"))])
        assert [e.name for e in results.errors] == ["a", "b", "c"]

    def test_declaration_rhs_cannot_see_its_name(self):
        results = analyze([let("x", ident("x"))])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNBOUND_IDENTIFIER, "x")]


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

class TestDeclarations:
    def test_let_twice(self):
        results = analyze([let("x", int_lit(1)), let("x", int_lit(2))])
        assert _error_kinds(results) == [(AnalysisErrorKind.REDECLARING_IDENTIFIER, "x")]

    def test_const_twice(self):
        results = analyze([const("x", int_lit(1)), const("x", int_lit(2))])
        assert _error_kinds(results) == [(AnalysisErrorKind.REDECLARING_IDENTIFIER, "x")]

    def test_let_after_const(self):
        results = analyze([const("x", int_lit(1)), let("x", int_lit(2))])
        assert _error_kinds(results) == [(AnalysisErrorKind.REDECLARING_IDENTIFIER, "x")]

    def test_redeclaration_keeps_original_record(self):
        results = analyze([
            const("x", int_lit(1)),
            let("x", int_lit(2)),
            assign("x", int_lit(3)),
        ])
        assert _error_kinds(results) == [
            (AnalysisErrorKind.REDECLARING_IDENTIFIER, "x"),
            (AnalysisErrorKind.REASSIGNING_CONST, "x"),
        ]

    def test_redeclaration_still_checks_rhs(self):
        results = analyze([let("x", int_lit(1)), let("x", ident("y"))])
        assert _error_kinds(results) == [
            (AnalysisErrorKind.UNBOUND_IDENTIFIER, "y"),
            (AnalysisErrorKind.REDECLARING_IDENTIFIER, "x"),
        ]


# ---------------------------------------------------------------------------
# Assignment
# ---------------------------------------------------------------------------

class TestAssignment:
    def test_assign_let(self):
        results = analyze([let("x", int_lit(1)), assign("x", int_lit(2))])
        assert results.ok
        assert [(w.kind, w.name) for w in results.warnings] == [
            (AnalysisWarningKind.REASSIGNING_IDENTIFIER, "x"),
        ]

    def test_assign_undeclared(self):
        results = analyze([assign("x", int_lit(2))])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNBOUND_IDENTIFIER, "x")]
        assert len(results.warnings) == 1

    def test_assign_const(self):
        results = analyze([const("x", int_lit(1)), assign("x", int_lit(2))])
        assert _error_kinds(results) == [(AnalysisErrorKind.REASSIGNING_CONST, "x")]
        assert [(w.kind, w.name) for w in results.warnings] == [
            (AnalysisWarningKind.REASSIGNING_IDENTIFIER, "x"),
        ]

    def test_assign_checks_rhs(self):
        results = analyze([let("x", int_lit(1)), assign("x", ident("y"))])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNBOUND_IDENTIFIER, "y")]


# ---------------------------------------------------------------------------
# Function literals
# ---------------------------------------------------------------------------

class TestFunctionBodies:
    def test_body_sees_enclosing_scope(self):
        results = analyze([let("a", int_lit(1)), let("f", fn([], ident("a")))])
        assert results.ok

    def test_body_errors_reported(self):
        results = analyze([let("f", fn([], ident("missing")))])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNBOUND_IDENTIFIER, "missing")]

    def test_params_are_const(self):
        results = analyze([let("f", fn(["a"], assign("a", int_lit(1))))])
        assert _error_kinds(results) == [(AnalysisErrorKind.REASSIGNING_CONST, "a")]

    def test_params_visible_in_body(self):
        results = analyze([let("f", fn(["a", "b"], binop(ident("a"), "ADD", ident("b"))))])
        assert results.ok

    def test_duplicate_params(self):
        results = analyze([let("f", fn(["a", "a"], ident("a")))])
        assert _error_kinds(results) == [(AnalysisErrorKind.REDECLARING_IDENTIFIER, "a")]

    def test_body_declarations_do_not_leak(self):
        results = analyze([let("f", fn([], let("y", int_lit(1)))), ident("y")])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNBOUND_IDENTIFIER, "y")]

    def test_params_do_not_leak(self):
        results = analyze([let("f", fn(["p"], ident("p"))), ident("p")])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNBOUND_IDENTIFIER, "p")]

    def test_body_redeclaring_outer_name(self):
        results = analyze([let("x", int_lit(1)), let("f", fn([], let("x", int_lit(2))))])
        assert _error_kinds(results) == [(AnalysisErrorKind.REDECLARING_IDENTIFIER, "x")]

    def test_body_assigns_outer_let(self):
        results = analyze([let("x", int_lit(1)), let("f", fn([], assign("x", int_lit(2))))])
        assert results.ok
        assert len(results.warnings) == 1


# ---------------------------------------------------------------------------
# Calls and arity
# ---------------------------------------------------------------------------

class TestCalls:
    def test_matching_arity(self):
        results = analyze([let("f", fn(["a"], ident("a"))), call("f", int_lit(1))])
        assert results.ok

    def test_zero_param_function_called_with_argument(self):
        results = analyze([let("f", fn([], int_lit(3))), call("f", int_lit(1))])
        assert _error_kinds(results) == [
            (AnalysisErrorKind.FUNCTION_CALL_WITH_INCORRECT_ARITY, "f"),
        ]
        assert results.errors[0].expected == 0
        assert results.errors[0].actual == 1

    def test_too_few_arguments(self):
        results = analyze([const("f", fn(["a", "b"], ident("a"))), call("f", int_lit(1))])
        assert _error_kinds(results) == [
            (AnalysisErrorKind.FUNCTION_CALL_WITH_INCORRECT_ARITY, "f"),
        ]

    def test_undeclared_callee(self):
        results = analyze([call("f")])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNBOUND_IDENTIFIER, "f")]

    def test_non_function_callee(self):
        results = analyze([let("x", int_lit(3)), call("x")])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNKNOWN_FUNCTION, "x")]

    def test_arguments_are_analyzed(self):
        results = analyze([let("f", fn(["a"], ident("a"))), call("f", ident("z"))])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNBOUND_IDENTIFIER, "z")]

    def test_alias_carries_arity(self):
        results = analyze([
            let("f", fn(["a"], ident("a"))),
            let("g", ident("f")),
            call("g", int_lit(1)),
        ])
        assert results.ok

    def test_rebinding_to_value_forgets_arity(self):
        results = analyze([
            let("f", fn([], int_lit(1))),
            assign("f", int_lit(3)),
            call("f"),
        ])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNKNOWN_FUNCTION, "f")]

    def test_rebinding_to_other_function_updates_arity(self):
        results = analyze([
            let("f", fn([], int_lit(1))),
            assign("f", fn(["a"], ident("a"))),
            call("f", int_lit(1)),
        ])
        assert results.ok

    def test_parameter_is_not_callable(self):
        results = analyze([let("f", fn([], int_lit(1))), let("g", fn(["f"], call("f")))])
        assert _error_kinds(results) == [(AnalysisErrorKind.UNKNOWN_FUNCTION, "f")]

    def test_call_in_body_uses_enclosing_arity(self):
        results = analyze([
            let("f", fn([], int_lit(1))),
            let("g", fn([], call("f", int_lit(2)))),
        ])
        assert _error_kinds(results) == [
            (AnalysisErrorKind.FUNCTION_CALL_WITH_INCORRECT_ARITY, "f"),
        ]


# ---------------------------------------------------------------------------
# Session behaviour
# ---------------------------------------------------------------------------

class TestAnalyzerSession:
    def test_scope_accumulates(self):
        analyzer = Analyzer()
        assert analyzer.analyze([let("x", int_lit(1))]).ok
        assert analyzer.analyze([ident("x")]).ok
        assert analyzer.scope.symbols == {"x": SymbolKind.LET}

    def test_failed_analysis_is_not_committed(self):
        analyzer = Analyzer()
        results = analyzer.analyze([let("x", int_lit(1)), ident("nope")])
        assert not results.ok
        again = analyzer.analyze([ident("x")])
        assert _error_kinds(again) == [(AnalysisErrorKind.UNBOUND_IDENTIFIER, "x")]

    def test_redeclaration_across_submissions(self):
        analyzer = Analyzer()
        analyzer.analyze([let("x", int_lit(1))])
        results = analyzer.analyze([let("x", int_lit(2))])
        assert _error_kinds(results) == [(AnalysisErrorKind.REDECLARING_IDENTIFIER, "x")]

    def test_seeded_scope(self):
        analyzer = Analyzer(scope=Scope(symbols={"x": SymbolKind.CONST}))
        results = analyzer.analyze([assign("x", int_lit(1))])
        assert _error_kinds(results) == [(AnalysisErrorKind.REASSIGNING_CONST, "x")]

    def test_tree_is_not_mutated(self):
        program = [let("f", fn(["a"], ident("a"), ident("q"))), call("f", int_lit(1))]
        before = [e.model_dump() for e in program]
        analyze(program)
        assert [e.model_dump() for e in program] == before


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

class TestMessages:
    def test_error_messages_name_the_identifier(self):
        results = analyze([
            ident("a"),
            const("c", int_lit(1)),
            assign("c", int_lit(2)),
            let("f", fn([], int_lit(1))),
            call("f", int_lit(1)),
        ])
        messages = [e.message for e in results.errors]
        assert messages[0] == "'a' is not declared"
        assert messages[1] == "cannot assign to const 'c'"
        assert messages[2] == "'f' takes 0 argument(s) but 1 were given"

    def test_warning_message(self):
        results = analyze([let("x", int_lit(1)), assign("x", int_lit(2))])
        assert results.warnings[0].message == "reassigning 'x'"
