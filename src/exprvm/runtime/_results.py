"""Tagged outcomes of evaluating one submission."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from exprvm.compiler import AnalysisError, AnalysisWarning
from exprvm.vm import DisplayString, EvaluationError, NoValue, ReturnValue, format_value


@dataclass(frozen=True)
class ParseFailure:
    message: str


@dataclass(frozen=True)
class SemanticAnalysisFailure:
    errors: list[AnalysisError]


@dataclass(frozen=True)
class EvaluationFailure:
    error: EvaluationError


@dataclass(frozen=True)
class Success:
    value: ReturnValue
    warnings: list[AnalysisWarning] = field(default_factory=list)


EvaluationResult = Union[ParseFailure, SemanticAnalysisFailure, EvaluationFailure, Success]


def format_result(result: EvaluationResult) -> str | None:
    """Render *result* for a console; ``None`` when there is nothing to show."""
    if isinstance(result, ParseFailure):
        return f"parse error: {result.message}"
    if isinstance(result, SemanticAnalysisFailure):
        return "\n".join(f"error: {e.message}" for e in result.errors)
    if isinstance(result, EvaluationFailure):
        return f"runtime error: {result.error}"

    value = result.value
    if isinstance(value, NoValue):
        return None
    if isinstance(value, DisplayString):
        return value.text
    return format_value(value)
