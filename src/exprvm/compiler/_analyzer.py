"""Semantic analysis: scope, const and arity checks over a syntax tree.

The analyzer never raises for problems in the program.  Every node is
visited and all diagnostics are collected into an ``AnalysisResults``;
the caller decides whether code generation may proceed.

Key concepts:

- **Scope**: name -> ``SymbolKind`` plus the recorded arity of names bound
  to function literals.  Function bodies are analyzed in a child scope
  copied from the declaring scope, so nothing declared inside a body is
  visible outside it.
- **Analyzer**: owns the session scope.  ``analyze()`` works on a copy and
  commits it only when no errors were found.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel

from exprvm.model.syntax import (
    Assignment,
    BinaryExpr,
    CallExpr,
    ConstDeclaration,
    Expression,
    FunctionLiteral,
    IdentifierRef,
    LetDeclaration,
    LiteralExpr,
)


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

class AnalysisErrorKind(str, Enum):
    UNBOUND_IDENTIFIER = "unbound_identifier"
    REDECLARING_IDENTIFIER = "redeclaring_identifier"
    REASSIGNING_CONST = "reassigning_const"
    FUNCTION_CALL_WITH_INCORRECT_ARITY = "function_call_with_incorrect_arity"
    UNKNOWN_FUNCTION = "unknown_function"


class AnalysisWarningKind(str, Enum):
    REASSIGNING_IDENTIFIER = "reassigning_identifier"


class AnalysisError(BaseModel):
    """A problem that blocks code generation."""

    kind: AnalysisErrorKind
    name: str
    expected: int | None = None
    actual: int | None = None

    @property
    def message(self) -> str:
        if self.kind == AnalysisErrorKind.UNBOUND_IDENTIFIER:
            return f"'{self.name}' is not declared"
        if self.kind == AnalysisErrorKind.REDECLARING_IDENTIFIER:
            return f"'{self.name}' is already declared in this scope"
        if self.kind == AnalysisErrorKind.REASSIGNING_CONST:
            return f"cannot assign to const '{self.name}'"
        if self.kind == AnalysisErrorKind.UNKNOWN_FUNCTION:
            return f"'{self.name}' is not bound to a function"
        return (
            f"'{self.name}' takes {self.expected} argument(s) "
            f"but {self.actual} were given"
        )


class AnalysisWarning(BaseModel):
    kind: AnalysisWarningKind
    name: str

    @property
    def message(self) -> str:
        return f"reassigning '{self.name}'"


class AnalysisResults(BaseModel):
    errors: list[AnalysisError] = []
    warnings: list[AnalysisWarning] = []

    @property
    def ok(self) -> bool:
        return not self.errors

    def error(self, kind: AnalysisErrorKind, name: str, **details: int) -> None:
        self.errors.append(AnalysisError(kind=kind, name=name, **details))

    def warn(self, kind: AnalysisWarningKind, name: str) -> None:
        self.warnings.append(AnalysisWarning(kind=kind, name=name))


# ---------------------------------------------------------------------------
# Scope
# ---------------------------------------------------------------------------

class SymbolKind(str, Enum):
    LET = "let"
    CONST = "const"


@dataclass
class Scope:
    """Declared names visible at one point of the program."""

    symbols: dict[str, SymbolKind] = field(default_factory=dict)
    """name -> let/const"""

    arities: dict[str, int] = field(default_factory=dict)
    """name -> parameter count, for names bound to function literals"""

    def child(self) -> Scope:
        """Independent copy; changes to the child never reach the parent."""
        return Scope(symbols=dict(self.symbols), arities=dict(self.arities))

    def record_arity(self, name: str, rhs: Expression) -> None:
        """Track (or forget) the arity of *name* after binding it to *rhs*."""
        if isinstance(rhs, FunctionLiteral):
            self.arities[name] = len(rhs.params)
        elif isinstance(rhs, IdentifierRef) and rhs.name in self.arities:
            self.arities[name] = self.arities[rhs.name]
        else:
            self.arities.pop(name, None)


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------

class Analyzer:
    """Validates expressions against the scope accumulated in a session."""

    def __init__(self, scope: Scope | None = None) -> None:
        self.scope = scope or Scope()

    def analyze(self, expressions: list[Expression]) -> AnalysisResults:
        """Check *expressions* in order and return every diagnostic found."""
        working = self.scope.child()
        results = AnalysisResults()
        for expr in expressions:
            self._visit(expr, working, results)
        if results.ok:
            self.scope = working
        return results

    # -----------------------------------------------------------------------
    # Dispatch
    # -----------------------------------------------------------------------

    def _visit(self, expr: Expression, scope: Scope, results: AnalysisResults) -> None:
        handler = self._DISPATCH.get(expr.kind)
        if handler is None:
            raise TypeError(f"Unsupported expression kind: {expr.kind}")
        handler(self, expr, scope, results)

    def _visit_literal(self, _expr: LiteralExpr, _scope: Scope, _results: AnalysisResults) -> None:
        pass

    def _visit_identifier(self, expr: IdentifierRef, scope: Scope, results: AnalysisResults) -> None:
        if expr.name not in scope.symbols:
            results.error(AnalysisErrorKind.UNBOUND_IDENTIFIER, expr.name)

    def _visit_assignment(self, expr: Assignment, scope: Scope, results: AnalysisResults) -> None:
        kind = scope.symbols.get(expr.name)
        if kind is None:
            results.error(AnalysisErrorKind.UNBOUND_IDENTIFIER, expr.name)
        elif kind == SymbolKind.CONST:
            results.error(AnalysisErrorKind.REASSIGNING_CONST, expr.name)
        results.warn(AnalysisWarningKind.REASSIGNING_IDENTIFIER, expr.name)

        self._visit(expr.rhs, scope, results)
        if kind == SymbolKind.LET:
            scope.record_arity(expr.name, expr.rhs)

    def _visit_declaration(
        self,
        expr: LetDeclaration | ConstDeclaration,
        scope: Scope,
        results: AnalysisResults,
    ) -> None:
        # rhs first: a closure never sees its own binding at runtime
        self._visit(expr.rhs, scope, results)
        if expr.name in scope.symbols:
            results.error(AnalysisErrorKind.REDECLARING_IDENTIFIER, expr.name)
            return
        scope.symbols[expr.name] = (
            SymbolKind.CONST if expr.kind == "const" else SymbolKind.LET
        )
        scope.record_arity(expr.name, expr.rhs)

    def _visit_binary(self, expr: BinaryExpr, scope: Scope, results: AnalysisResults) -> None:
        self._visit(expr.left, scope, results)
        self._visit(expr.right, scope, results)

    def _visit_function(self, expr: FunctionLiteral, scope: Scope, results: AnalysisResults) -> None:
        body_scope = scope.child()
        seen: set[str] = set()
        for param in expr.params:
            if param in seen:
                results.error(AnalysisErrorKind.REDECLARING_IDENTIFIER, param)
            seen.add(param)
            body_scope.symbols[param] = SymbolKind.CONST
            body_scope.arities.pop(param, None)
        for stmt in expr.body:
            self._visit(stmt, body_scope, results)

    def _visit_call(self, expr: CallExpr, scope: Scope, results: AnalysisResults) -> None:
        for arg in expr.args:
            self._visit(arg, scope, results)

        name = expr.callee
        if name not in scope.symbols:
            results.error(AnalysisErrorKind.UNBOUND_IDENTIFIER, name)
            return
        expected = scope.arities.get(name)
        if expected is None:
            results.error(AnalysisErrorKind.UNKNOWN_FUNCTION, name)
        elif expected != len(expr.args):
            results.error(
                AnalysisErrorKind.FUNCTION_CALL_WITH_INCORRECT_ARITY,
                name,
                expected=expected,
                actual=len(expr.args),
            )

    # Expression dispatch table
    _DISPATCH: dict[str, Callable[[Analyzer, Expression, Scope, AnalysisResults], None]] = {
        "literal": _visit_literal,
        "identifier": _visit_identifier,
        "assignment": _visit_assignment,
        "let": _visit_declaration,
        "const": _visit_declaration,
        "binary": _visit_binary,
        "function": _visit_function,
        "call": _visit_call,
    }


def analyze(expressions: list[Expression]) -> AnalysisResults:
    """Analyze *expressions* against an empty scope."""
    return Analyzer().analyze(expressions)
