"""Formula diagnostics engine."""

from .analyzer import CancellationToken, FormulaScanner, analyze_formula
from .checks import (
    check_bounds,
    check_circular,
    check_deprecated,
    check_known_errors,
    check_performance_inline,
    check_syntax,
    check_volatile,
)
from .models import (
    AnalysisResult,
    CellAnalysis,
    Dependency,
    Diagnostic,
    IssueKind,
    PerformanceReport,
    Reference,
    ScanCheckpoint,
    ScanOutcome,
    Severity,
    Suggestion,
)
from .references import extract_dependencies, extract_references
from .scorer import score_performance

__all__ = [
    "CancellationToken",
    "FormulaScanner",
    "analyze_formula",
    "check_bounds",
    "check_circular",
    "check_deprecated",
    "check_known_errors",
    "check_performance_inline",
    "check_syntax",
    "check_volatile",
    "AnalysisResult",
    "CellAnalysis",
    "Dependency",
    "Diagnostic",
    "IssueKind",
    "PerformanceReport",
    "Reference",
    "ScanCheckpoint",
    "ScanOutcome",
    "Severity",
    "Suggestion",
    "extract_dependencies",
    "extract_references",
    "score_performance",
]
