"""exprvm virtual machine — stack execution of generated bytecode.

Entry point::

    from exprvm.vm import VM

    vm = VM()
    result = vm.run(code)
    print(vm.dump())
"""

from ._machine import VM, run
from ._values import (
    DisplayString,
    EvaluationError,
    InvalidOperation,
    MissingVariable,
    NoValue,
    ReturnValue,
    format_value,
)

__all__ = [
    "VM",
    "run",
    "DisplayString",
    "EvaluationError",
    "InvalidOperation",
    "MissingVariable",
    "NoValue",
    "ReturnValue",
    "format_value",
]
