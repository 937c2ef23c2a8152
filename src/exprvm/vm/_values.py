"""Value system for the virtual machine.

Provides runtime faults, return values, arithmetic with its type checks
and human-readable formatting of values.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel

from exprvm.model.bytecode import FloatValue, IntValue, Value
from exprvm.model.syntax import INT_MAX, INT_MIN


class EvaluationError(Exception):
    """Runtime fault raised while executing bytecode."""


class MissingVariable(EvaluationError):
    """Lookup of a name with no binding in the current environment."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Variable '{name}' not found")


class InvalidOperation(EvaluationError):
    """An instruction was applied to operands it does not support."""


# ---------------------------------------------------------------------------
# Return values
# ---------------------------------------------------------------------------

class DisplayString(BaseModel):
    """Text produced for display (dereferenced strings, the env dump)."""

    kind: Literal["display_string"] = "display_string"
    text: str


class NoValue(BaseModel):
    """Result of a run that left nothing on the stack."""

    kind: Literal["no_value"] = "no_value"


ReturnValue = Union[Value, DisplayString, NoValue]


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

_VERBS = {"add": "add", "sub": "subtract", "mul": "multiply", "div": "divide"}
_SYMBOLS = {"add": "+", "sub": "-", "mul": "*", "div": "/"}


def arithmetic(op: str, left: Value, right: Value) -> Value:
    """Apply the arithmetic instruction *op* (``add``/``sub``/``mul``/``div``).

    Both operands must be ints or both floats.  Int results must fit in
    32 bits; int division truncates toward zero.
    """
    if isinstance(left, IntValue) and isinstance(right, IntValue):
        result = _int_op(op, left.value, right.value)
        if not INT_MIN <= result <= INT_MAX:
            raise InvalidOperation(
                f"integer overflow: {left.value} {_SYMBOLS[op]} {right.value}"
            )
        return IntValue(value=result)

    if isinstance(left, FloatValue) and isinstance(right, FloatValue):
        return FloatValue(value=_float_op(op, left.value, right.value))

    raise InvalidOperation(f"Can't {_VERBS[op]} {left.kind} and {right.kind}")


def _int_op(op: str, a: int, b: int) -> int:
    if op == "add":
        return a + b
    if op == "sub":
        return a - b
    if op == "mul":
        return a * b
    if b == 0:
        raise InvalidOperation("division by zero")
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _float_op(op: str, a: float, b: float) -> float:
    if op == "add":
        return a + b
    if op == "sub":
        return a - b
    if op == "mul":
        return a * b
    if b == 0.0:
        raise InvalidOperation("division by zero")
    return a / b


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_value(value: Value) -> str:
    """Human-readable form of a runtime value."""
    if value.kind == "bool":
        return "true" if value.value else "false"
    if value.kind in ("int", "float"):
        return str(value.value)
    if value.kind == "pointer":
        return f"<pointer {value.address}>"
    if value.kind == "bytes":
        return f"<bytes {len(value.data)}>"
    return f"<function/{value.arity}>"
