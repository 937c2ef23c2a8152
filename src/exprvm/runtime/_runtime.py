"""Orchestrator: parse -> analyze -> generate -> run for one submission."""

from __future__ import annotations

import logging

from exprvm.compiler import Analyzer, generate
from exprvm.vm import VM, DisplayString, EvaluationError

from ._parser import ParseError, parse
from ._results import (
    EvaluationFailure,
    EvaluationResult,
    ParseFailure,
    SemanticAnalysisFailure,
    Success,
)

logger = logging.getLogger(__name__)

ENV_COMMAND = ":env"
"""Reserved input that dumps the VM's symbol table and heap."""


class Runtime:
    """One interactive session: a persistent analyzer scope and VM.

    Parameters
    ----------
    analyzer : Analyzer
        Session analyzer (fresh when omitted).
    vm : VM
        Session virtual machine (fresh when omitted).
    """

    def __init__(self, analyzer: Analyzer | None = None, vm: VM | None = None) -> None:
        self.analyzer = analyzer or Analyzer()
        self.vm = vm or VM()

    def evaluate(self, source: str) -> EvaluationResult:
        """Evaluate one submission and map the outcome to a result."""
        if source.strip() == ENV_COMMAND:
            return Success(value=DisplayString(text=self.vm.dump()))

        try:
            program = parse(source)
        except ParseError as exc:
            return ParseFailure(message=str(exc))

        analysis = self.analyzer.analyze(program)
        if not analysis.ok:
            return SemanticAnalysisFailure(errors=analysis.errors)
        for warning in analysis.warnings:
            logger.info("warning: %s", warning.message)

        code = generate(program)
        try:
            value = self.vm.run(code)
        except EvaluationError as exc:
            return EvaluationFailure(error=exc)
        return Success(value=value, warnings=analysis.warnings)


def evaluate(source: str) -> EvaluationResult:
    """Evaluate *source* in a throwaway session."""
    return Runtime().evaluate(source)
