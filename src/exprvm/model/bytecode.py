"""Bytecode instructions and runtime values for the virtual machine.

Runtime values and instructions are mutually recursive (a closure holds
its body, ``PushLiteral`` holds a value), so both live in this module.

The heap is an append-only list of values and a ``Pointer`` is an index
into it.  The symbol table maps a name to the heap index of its current
binding.  Both are bundled in an ``Environment``, which closures capture
by value.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Runtime values
# ---------------------------------------------------------------------------

class IntValue(BaseModel):
    kind: Literal["int"] = "int"
    value: int


class FloatValue(BaseModel):
    kind: Literal["float"] = "float"
    value: float


class BoolValue(BaseModel):
    kind: Literal["bool"] = "bool"
    value: bool


class Pointer(BaseModel):
    """Index of a heap entry in the owning environment."""

    kind: Literal["pointer"] = "pointer"
    address: int = Field(ge=0)


class BytesValue(BaseModel):
    """Raw byte blob.  Only ever stored on the heap."""

    kind: Literal["bytes"] = "bytes"
    data: bytes


class Closure(BaseModel):
    """A function body paired with the environment captured at creation."""

    kind: Literal["closure"] = "closure"
    params: list[str] = []
    body: list[Instruction] = []
    env: Environment = Field(default_factory=lambda: Environment())

    @property
    def arity(self) -> int:
        return len(self.params)


Value = Annotated[
    Union[IntValue, FloatValue, BoolValue, Pointer, BytesValue, Closure],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Environment (heap + symbol table)
# ---------------------------------------------------------------------------

class Environment(BaseModel):
    """Heap and symbol table owned by one VM instance.

    Heap indices are never reused: rebinding a name appends a new entry
    and repoints the symbol, leaving the old entry unreachable.
    """

    heap: list[Value] = []
    symbols: dict[str, int] = {}

    def allocate(self, value: Value) -> int:
        """Append *value* to the heap and return its index."""
        self.heap.append(value)
        return len(self.heap) - 1

    def bind(self, name: str, value: Value) -> int:
        """Store *value* in a fresh heap slot and point *name* at it."""
        address = self.allocate(value)
        self.symbols[name] = address
        return address

    def address_of(self, name: str) -> int | None:
        return self.symbols.get(name)

    def load(self, address: int) -> Value:
        return self.heap[address]

    def snapshot(self) -> Environment:
        """Copy of the heap list and symbol table; later binds on either side
        are invisible to the other.

        Heap values are shared, not copied: no instruction mutates a value
        in place, and a closure's environment is snapshotted again before
        each call.
        """
        return self.model_copy(update={"heap": list(self.heap), "symbols": dict(self.symbols)})


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------

class PushLiteral(BaseModel):
    kind: Literal["push_literal"] = "push_literal"
    value: Value


class AllocateBytes(BaseModel):
    """Copy *data* onto the heap and push a pointer to it."""

    kind: Literal["allocate_bytes"] = "allocate_bytes"
    data: bytes


class Add(BaseModel):
    kind: Literal["add"] = "add"


class Sub(BaseModel):
    kind: Literal["sub"] = "sub"


class Mul(BaseModel):
    kind: Literal["mul"] = "mul"


class Div(BaseModel):
    kind: Literal["div"] = "div"


class Lookup(BaseModel):
    kind: Literal["lookup"] = "lookup"
    name: str


class Store(BaseModel):
    """Pop the top value and bind it to *name*."""

    kind: Literal["store"] = "store"
    name: str


class MakeClosure(BaseModel):
    kind: Literal["make_closure"] = "make_closure"
    params: list[str] = []
    body: list[Instruction] = []


class Call(BaseModel):
    """Pop a closure, then *argc* argument values, and run the closure."""

    kind: Literal["call"] = "call"
    argc: int = Field(default=0, ge=0)


Instruction = Annotated[
    Union[
        PushLiteral,
        AllocateBytes,
        Add,
        Sub,
        Mul,
        Div,
        Lookup,
        Store,
        MakeClosure,
        Call,
    ],
    Field(discriminator="kind"),
]

# Rebuild models with recursive Value / Instruction references.
Closure.model_rebuild()
Environment.model_rebuild()
PushLiteral.model_rebuild()
MakeClosure.model_rebuild()
