"""exprvm compiler — semantic analysis and bytecode generation.

Entry points::

    from exprvm.compiler import Analyzer, generate

    analyzer = Analyzer()
    results = analyzer.analyze(program)
    if results.ok:
        code = generate(program)
"""

from ._analyzer import (
    AnalysisError,
    AnalysisErrorKind,
    AnalysisResults,
    AnalysisWarning,
    AnalysisWarningKind,
    Analyzer,
    Scope,
    SymbolKind,
    analyze,
)
from ._codegen import generate

__all__ = [
    "AnalysisError",
    "AnalysisErrorKind",
    "AnalysisResults",
    "AnalysisWarning",
    "AnalysisWarningKind",
    "Analyzer",
    "Scope",
    "SymbolKind",
    "analyze",
    "generate",
]
