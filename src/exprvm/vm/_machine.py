"""Stack-based virtual machine with by-value closures.

The ``VM`` executes a flat instruction sequence against an operand stack
and an ``Environment`` (append-only heap + symbol table).  A function call
runs the closure body in a nested ``VM`` seeded with a snapshot of the
environment captured when the closure was made; afterwards, every name
the caller already knows takes the callee's final value (merge).
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable

from exprvm.model.bytecode import (
    AllocateBytes,
    BytesValue,
    Call,
    Closure,
    Environment,
    Instruction,
    Lookup,
    MakeClosure,
    Pointer,
    PushLiteral,
    Store,
    Value,
)

from ._values import (
    DisplayString,
    InvalidOperation,
    MissingVariable,
    NoValue,
    ReturnValue,
    arithmetic,
    format_value,
)

logger = logging.getLogger(__name__)


class VM:
    """Bytecode interpreter owning one environment.

    Parameters
    ----------
    env : Environment
        Heap and symbol table to execute against.  A fresh, empty
        environment is created when omitted.  The VM mutates it in place.
    """

    def __init__(self, env: Environment | None = None) -> None:
        self.env = env if env is not None else Environment()
        self.stack: list[Value] = []
        self.queue: deque[Instruction] = deque()

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def run(self, instructions: list[Instruction]) -> ReturnValue:
        """Execute *instructions* and return the final stack value.

        A pointer to a byte blob is returned as a ``DisplayString``; an
        empty stack gives ``NoValue``.  Raises ``EvaluationError`` on the
        first fault, keeping whatever was already written to the heap.
        """
        self.stack = []
        self.execute(instructions)
        return self._result()

    def execute(self, instructions: list[Instruction]) -> None:
        """Drain *instructions* in order on top of the current stack."""
        self.queue = deque(instructions)
        while self.queue:
            instr = self.queue.popleft()
            handler = self._DISPATCH.get(instr.kind)
            if handler is None:
                raise InvalidOperation(f"Unsupported instruction kind: {instr.kind}")
            handler(self, instr)
            logger.debug(
                "%s: stack=%d heap=%d pending=%d",
                instr.kind, len(self.stack), len(self.env.heap), len(self.queue),
            )

    def dump(self) -> str:
        """Describe the live symbol table and heap, one entry per line."""
        lines = ["symbols:"]
        for name in sorted(self.env.symbols):
            address = self.env.symbols[name]
            lines.append(f"  {name} -> #{address} {self._describe(self.env.load(address))}")
        lines.append("heap:")
        for address, value in enumerate(self.env.heap):
            lines.append(f"  #{address} {self._describe(value)}")
        return "\n".join(lines) + "\n"

    # -----------------------------------------------------------------------
    # Stack / heap helpers
    # -----------------------------------------------------------------------

    def _pop(self, instr: Instruction) -> Value:
        if not self.stack:
            raise InvalidOperation(f"stack underflow in {instr.kind}")
        return self.stack.pop()

    def _deref(self, pointer: Pointer, env: Environment | None = None) -> Value:
        env = env if env is not None else self.env
        if pointer.address >= len(env.heap):
            raise InvalidOperation(f"dangling pointer #{pointer.address}")
        return env.load(pointer.address)

    def _transfer(self, value: Value, source: Environment) -> Value:
        """Copy *value* from *source* into this VM's environment.

        Pointers are relocated: the referenced entry is copied onto this
        heap and a pointer to the copy is returned.
        """
        if isinstance(value, Pointer):
            target = self._transfer(self._deref(value, source), source)
            return Pointer(address=self.env.allocate(target))
        return value.model_copy()

    def _describe(self, value: Value) -> str:
        if isinstance(value, BytesValue):
            return repr(value.data.decode("utf-8", errors="replace"))
        return format_value(value)

    def _result(self) -> ReturnValue:
        if not self.stack:
            return NoValue()
        value = self.stack.pop()
        if isinstance(value, Pointer):
            target = self._deref(value)
            if isinstance(target, BytesValue):
                text = target.data.decode("utf-8", errors="replace")
                return DisplayString(text=f'"{text}"')
            return target
        return value

    # -----------------------------------------------------------------------
    # Instruction handlers
    # -----------------------------------------------------------------------

    def _exec_push_literal(self, instr: PushLiteral) -> None:
        self.stack.append(instr.value.model_copy())

    def _exec_allocate_bytes(self, instr: AllocateBytes) -> None:
        address = self.env.allocate(BytesValue(data=instr.data))
        self.stack.append(Pointer(address=address))

    def _exec_arithmetic(self, instr: Instruction) -> None:
        # right operand was pushed last
        right = self._pop(instr)
        left = self._pop(instr)
        self.stack.append(arithmetic(instr.kind, left, right))

    def _exec_lookup(self, instr: Lookup) -> None:
        address = self.env.address_of(instr.name)
        if address is None:
            raise MissingVariable(instr.name)
        self.stack.append(self.env.load(address).model_copy())

    def _exec_store(self, instr: Store) -> None:
        self.env.bind(instr.name, self._pop(instr))

    def _exec_make_closure(self, instr: MakeClosure) -> None:
        self.stack.append(
            Closure(params=list(instr.params), body=list(instr.body), env=self.env.snapshot())
        )

    def _exec_call(self, instr: Call) -> None:
        callee = self._pop(instr)
        args = [self._pop(instr) for _ in range(instr.argc)]
        args.reverse()

        if not isinstance(callee, Closure):
            raise InvalidOperation(f"Can't call {callee.kind}")
        if len(args) != callee.arity:
            raise InvalidOperation(
                f"function expects {callee.arity} argument(s), got {len(args)}"
            )

        child = VM(env=callee.env.snapshot())
        # the body opens with Store(param) per parameter: first param on top
        child.stack = [child._transfer(arg, self.env) for arg in reversed(args)]
        logger.debug("call: %d arg(s), %d captured binding(s)", len(args), len(child.env.symbols))

        try:
            child.execute(callee.body)
        finally:
            self._merge(child, callee.params)

        if child.stack:
            self.stack.append(self._transfer(child.stack.pop(), child.env))

    def _merge(self, child: VM, params: list[str]) -> None:
        """Rebind every name known to this VM to *child*'s final value for it."""
        for name, address in child.env.symbols.items():
            if name in params or name not in self.env.symbols:
                continue
            self.env.bind(name, self._transfer(child.env.load(address), child.env))
            logger.debug("merge: %r from callee", name)

    # Instruction dispatch table
    _DISPATCH: dict[str, Callable[[VM, Instruction], None]] = {
        "push_literal": _exec_push_literal,
        "allocate_bytes": _exec_allocate_bytes,
        "add": _exec_arithmetic,
        "sub": _exec_arithmetic,
        "mul": _exec_arithmetic,
        "div": _exec_arithmetic,
        "lookup": _exec_lookup,
        "store": _exec_store,
        "make_closure": _exec_make_closure,
        "call": _exec_call,
    }


def run(instructions: list[Instruction]) -> ReturnValue:
    """Execute *instructions* on a fresh VM."""
    return VM().run(instructions)
