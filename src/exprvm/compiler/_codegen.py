"""Code generation: syntax tree -> flat bytecode.

``generate`` is a pure translation.  It assumes the tree has passed
semantic analysis and never inspects scope: Let, Const and plain
assignment all compile to ``Store``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from exprvm.model.bytecode import (
    Add,
    AllocateBytes,
    BoolValue,
    Call,
    Div,
    FloatValue,
    Instruction,
    IntValue,
    Lookup,
    MakeClosure,
    Mul,
    PushLiteral,
    Store,
    Sub,
)
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
    Operator,
)

logger = logging.getLogger(__name__)

_OPERATOR_INSTRUCTIONS: dict[Operator, type] = {
    Operator.ADD: Add,
    Operator.SUB: Sub,
    Operator.MUL: Mul,
    Operator.DIV: Div,
}


def generate(expressions: list[Expression]) -> list[Instruction]:
    """Translate *expressions* into one instruction sequence."""
    code: list[Instruction] = []
    for expr in expressions:
        code.extend(_generate(expr))
    logger.debug("generated %d instruction(s) from %d expression(s)", len(code), len(expressions))
    return code


def _generate(expr: Expression) -> list[Instruction]:
    handler = _DISPATCH.get(expr.kind)
    if handler is None:
        raise TypeError(f"Unsupported expression kind: {expr.kind}")
    return handler(expr)


def _gen_literal(expr: LiteralExpr) -> list[Instruction]:
    literal = expr.value
    if literal.kind == "string":
        # strings live on the heap and are referenced by pointer
        return [AllocateBytes(data=literal.value.encode("utf-8"))]
    if literal.kind == "int":
        return [PushLiteral(value=IntValue(value=literal.value))]
    if literal.kind == "float":
        return [PushLiteral(value=FloatValue(value=literal.value))]
    return [PushLiteral(value=BoolValue(value=literal.value))]


def _gen_identifier(expr: IdentifierRef) -> list[Instruction]:
    return [Lookup(name=expr.name)]


def _gen_binding(expr: Assignment | LetDeclaration | ConstDeclaration) -> list[Instruction]:
    return [*_generate(expr.rhs), Store(name=expr.name)]


def _gen_binary(expr: BinaryExpr) -> list[Instruction]:
    instruction = _OPERATOR_INSTRUCTIONS[expr.op]
    return [*_generate(expr.left), *_generate(expr.right), instruction()]


def _gen_function(expr: FunctionLiteral) -> list[Instruction]:
    # Arguments arrive on the stack; bind them in declared order first.
    body: list[Instruction] = [Store(name=param) for param in expr.params]
    for stmt in expr.body:
        body.extend(_generate(stmt))
    return [MakeClosure(params=list(expr.params), body=body)]


def _gen_call(expr: CallExpr) -> list[Instruction]:
    code: list[Instruction] = []
    for arg in expr.args:
        code.extend(_generate(arg))
    code.append(Lookup(name=expr.callee))
    code.append(Call(argc=len(expr.args)))
    return code


_DISPATCH: dict[str, Callable[[Expression], list[Instruction]]] = {
    "literal": _gen_literal,
    "identifier": _gen_identifier,
    "assignment": _gen_binding,
    "let": _gen_binding,
    "const": _gen_binding,
    "binary": _gen_binary,
    "function": _gen_function,
    "call": _gen_call,
}
