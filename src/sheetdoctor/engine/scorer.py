"""Standalone 0-100 performance score for a single formula."""

from typing import Optional

from ..config import Settings, settings
from .models import PerformanceReport, PerformanceSuggestion
from .references import has_whole_line_range
from .rules import ARRAY_FUNCTION_PATTERN, VOLATILE_OCCURRENCE_PATTERN

LENGTH_PENALTY = 20
VOLATILE_PENALTY = 10
WHOLE_RANGE_PENALTY = 15
ARRAY_PENALTY = 10
NESTING_PENALTY = 15


def count_nesting_level(formula: str) -> int:
    """Deepest parenthesis nesting reached in a left-to-right scan."""
    max_level = 0
    level = 0
    for char in formula:
        if char == "(":
            level += 1
            max_level = max(max_level, level)
        elif char == ")":
            level -= 1
    return max_level


def score_performance(formula: str, config: Optional[Settings] = None) -> PerformanceReport:
    """
    Score a formula from 100 down, applying every deduction that fits.

    Each deduction comes with a suggestion whose ``improvement`` is the
    number of points it would recover. The score is clamped to [0, 100].
    """
    cfg = config or settings
    score = 100
    suggestions = []

    if len(formula) > cfg.score_length_threshold:
        score -= LENGTH_PENALTY
        suggestions.append(
            PerformanceSuggestion(
                description="Formula is very long. Consider breaking into helper columns",
                improvement=LENGTH_PENALTY,
            )
        )

    volatile_count = len(VOLATILE_OCCURRENCE_PATTERN.findall(formula))
    if volatile_count > 0:
        score -= volatile_count * VOLATILE_PENALTY
        suggestions.append(
            PerformanceSuggestion(
                description=f"Remove {volatile_count} volatile function(s) for better performance",
                improvement=volatile_count * VOLATILE_PENALTY,
            )
        )

    if has_whole_line_range(formula):
        score -= WHOLE_RANGE_PENALTY
        suggestions.append(
            PerformanceSuggestion(
                description="Avoid full column references. Use specific ranges",
                improvement=WHOLE_RANGE_PENALTY,
            )
        )

    if ARRAY_FUNCTION_PATTERN.search(formula):
        score -= ARRAY_PENALTY
        suggestions.append(
            PerformanceSuggestion(
                description="ARRAYFORMULA can be slow on large ranges",
                improvement=ARRAY_PENALTY,
            )
        )

    if count_nesting_level(formula) > cfg.score_nesting_threshold:
        score -= NESTING_PENALTY
        suggestions.append(
            PerformanceSuggestion(
                description="Deeply nested formula. Consider simplifying",
                improvement=NESTING_PENALTY,
            )
        )

    return PerformanceReport(score=min(100, max(0, score)), suggestions=suggestions)
