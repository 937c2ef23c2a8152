"""exprvm runtime — evaluation of source text in a persistent session.

Entry point::

    from exprvm.runtime import Runtime

    rt = Runtime()
    rt.evaluate("let f = () => 3")
    result = rt.evaluate("f()")
    assert result.value.value == 3
"""

from ._parser import ParseError, parse
from ._results import (
    EvaluationFailure,
    EvaluationResult,
    ParseFailure,
    SemanticAnalysisFailure,
    Success,
    format_result,
)
from ._runtime import ENV_COMMAND, Runtime, evaluate
from ._shell import Shell, main

__all__ = [
    "ENV_COMMAND",
    "EvaluationFailure",
    "EvaluationResult",
    "ParseError",
    "ParseFailure",
    "Runtime",
    "SemanticAnalysisFailure",
    "Shell",
    "Success",
    "evaluate",
    "format_result",
    "main",
    "parse",
]
