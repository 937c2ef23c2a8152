"""Source text -> syntax tree, via a lark Earley grammar."""

from __future__ import annotations

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError, VisitError

from exprvm.model.syntax import (
    INT_MAX,
    INT_MIN,
    Assignment,
    BinaryExpr,
    BoolLiteral,
    CallExpr,
    ConstDeclaration,
    Expression,
    FloatLiteral,
    FunctionLiteral,
    IdentifierRef,
    IntLiteral,
    LetDeclaration,
    LiteralExpr,
    Operator,
    StringLiteral,
)


class ParseError(Exception):
    """Source text does not match the grammar."""


GRAMMAR = r"""
    start: _statement (";" _statement)* ";"?

    _statement: let_decl
              | const_decl
              | assignment
              | expr

    let_decl: "let" NAME "=" expr
    const_decl: "const" NAME "=" expr
    assignment: NAME "=" expr

    ?expr: function
         | sum

    function: "(" [params] ")" "=>" (expr | block)
    params: NAME ("," NAME)*
    block: "{" _statement (";" _statement)* ";"? "}"

    ?sum: product
        | sum "+" product   -> add
        | sum "-" product   -> sub

    ?product: atom
            | product "*" atom   -> mul
            | product "/" atom   -> div

    ?atom: INT                    -> int_lit
         | FLOAT                  -> float_lit
         | "true"                 -> true_lit
         | "false"                -> false_lit
         | STRING                 -> string_lit
         | NAME "(" [args] ")"    -> call
         | NAME                   -> identifier
         | "(" expr ")"

    args: expr ("," expr)*

    NAME: /(?!(?:let|const|true|false)\b)[A-Za-z][A-Za-z0-9_]*/
    FLOAT: /[0-9]+\.[0-9]+/
    INT: /[0-9]+/
    STRING: /"[^"]*"/

    %import common.WS
    %ignore WS
"""

_parser = Lark(GRAMMAR, parser="earley")


@v_args(inline=True)
class _TreeBuilder(Transformer):
    """Builds syntax-tree models from the lark parse tree."""

    def start(self, *statements):
        return list(statements)

    def let_decl(self, name, rhs):
        return LetDeclaration(name=str(name), rhs=rhs)

    def const_decl(self, name, rhs):
        return ConstDeclaration(name=str(name), rhs=rhs)

    def assignment(self, name, rhs):
        return Assignment(name=str(name), rhs=rhs)

    def function(self, params, body):
        if not isinstance(body, list):
            body = [body]
        return FunctionLiteral(params=params or [], body=body)

    def params(self, *names):
        return [str(n) for n in names]

    def block(self, *statements):
        return list(statements)

    def add(self, left, right):
        return BinaryExpr(left=left, op=Operator.ADD, right=right)

    def sub(self, left, right):
        return BinaryExpr(left=left, op=Operator.SUB, right=right)

    def mul(self, left, right):
        return BinaryExpr(left=left, op=Operator.MUL, right=right)

    def div(self, left, right):
        return BinaryExpr(left=left, op=Operator.DIV, right=right)

    def int_lit(self, token):
        value = int(token)
        if not INT_MIN <= value <= INT_MAX:
            raise ParseError(f"integer literal out of range: {token}")
        return LiteralExpr(value=IntLiteral(value=value))

    def float_lit(self, token):
        return LiteralExpr(value=FloatLiteral(value=float(token)))

    def true_lit(self):
        return LiteralExpr(value=BoolLiteral(value=True))

    def false_lit(self):
        return LiteralExpr(value=BoolLiteral(value=False))

    def string_lit(self, token):
        return LiteralExpr(value=StringLiteral(value=str(token)[1:-1]))

    def call(self, name, args):
        return CallExpr(callee=str(name), args=args or [])

    def args(self, *exprs):
        return list(exprs)

    def identifier(self, name):
        return IdentifierRef(name=str(name))


_builder = _TreeBuilder()


def parse(source: str) -> list[Expression]:
    """Parse *source* into a list of top-level expressions.

    Raises
    ------
    ParseError
        If the text does not match the grammar or a literal is out of range.
    """
    try:
        tree = _parser.parse(source)
        return _builder.transform(tree)
    except VisitError as exc:
        raise ParseError(str(exc.orig_exc)) from exc
    except LarkError as exc:
        raise ParseError(str(exc)) from exc
