"""Shared test helpers for the exprvm test suite."""

from exprvm.compiler import Analyzer, generate
from exprvm.model.syntax import (
    Assignment,
    BinaryExpr,
    BoolLiteral,
    CallExpr,
    ConstDeclaration,
    FloatLiteral,
    FunctionLiteral,
    IdentifierRef,
    IntLiteral,
    LetDeclaration,
    LiteralExpr,
    Operator,
    StringLiteral,
)
from exprvm.vm import VM


def int_lit(value):
    return LiteralExpr(value=IntLiteral(value=value))


def float_lit(value):
    return LiteralExpr(value=FloatLiteral(value=value))


def bool_lit(value):
    return LiteralExpr(value=BoolLiteral(value=value))


def str_lit(value):
    return LiteralExpr(value=StringLiteral(value=value))


def ident(name):
    return IdentifierRef(name=name)


def let(name, rhs):
    return LetDeclaration(name=name, rhs=rhs)


def const(name, rhs):
    return ConstDeclaration(name=name, rhs=rhs)


def assign(name, rhs):
    return Assignment(name=name, rhs=rhs)


def binop(left, op, right):
    return BinaryExpr(left=left, op=Operator(op), right=right)


def fn(params, *body):
    """Build a function literal: ``fn(["a"], ident("a"))``."""
    return FunctionLiteral(params=list(params), body=list(body))


def call(name, *args):
    return CallExpr(callee=name, args=list(args))


def compile_and_run(expressions, vm=None):
    """Analyze, generate and run *expressions*; fails the test on analysis errors."""
    results = Analyzer().analyze(expressions)
    assert results.ok, [e.message for e in results.errors]
    vm = vm or VM()
    return vm.run(generate(expressions))
