"""Syntax tree nodes consumed by the analyzer and the code generator."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


class Operator(str, Enum):
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    DIV = "DIV"


# ---------------------------------------------------------------------------
# Literal values
# ---------------------------------------------------------------------------

class IntLiteral(BaseModel):
    """A 32-bit signed integer constant."""

    kind: Literal["int"] = "int"
    value: int = Field(ge=INT_MIN, le=INT_MAX)


class FloatLiteral(BaseModel):
    kind: Literal["float"] = "float"
    value: float


class BoolLiteral(BaseModel):
    kind: Literal["bool"] = "bool"
    value: bool


class StringLiteral(BaseModel):
    """Text constant.  Compiled to a heap allocation, never pushed directly."""

    kind: Literal["string"] = "string"
    value: str


LiteralValue = Annotated[
    Union[IntLiteral, FloatLiteral, BoolLiteral, StringLiteral],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

class LiteralExpr(BaseModel):
    kind: Literal["literal"] = "literal"
    value: LiteralValue


class IdentifierRef(BaseModel):
    """Reference to a binding by name."""

    kind: Literal["identifier"] = "identifier"
    name: str


class Assignment(BaseModel):
    """``name = rhs`` on an existing binding."""

    kind: Literal["assignment"] = "assignment"
    name: str
    rhs: Expression


class LetDeclaration(BaseModel):
    kind: Literal["let"] = "let"
    name: str
    rhs: Expression


class ConstDeclaration(BaseModel):
    kind: Literal["const"] = "const"
    name: str
    rhs: Expression


class BinaryExpr(BaseModel):
    kind: Literal["binary"] = "binary"
    left: Expression
    op: Operator
    right: Expression


class FunctionLiteral(BaseModel):
    """``(a, b) => body``.  The body is a sequence of expressions."""

    kind: Literal["function"] = "function"
    params: list[str] = []
    body: list[Expression] = []


class CallExpr(BaseModel):
    """Call of a named function with positional arguments."""

    kind: Literal["call"] = "call"
    callee: str
    args: list[Expression] = []


Expression = Annotated[
    Union[
        LiteralExpr,
        IdentifierRef,
        Assignment,
        LetDeclaration,
        ConstDeclaration,
        BinaryExpr,
        FunctionLiteral,
        CallExpr,
    ],
    Field(discriminator="kind"),
]

# Rebuild models with recursive Expression references.
Assignment.model_rebuild()
LetDeclaration.model_rebuild()
ConstDeclaration.model_rebuild()
BinaryExpr.model_rebuild()
FunctionLiteral.model_rebuild()
CallExpr.model_rebuild()
