"""Rule tables for the table-driven checks.

Each table is an ordered tuple of immutable records; checks scan them in
order and stop at the first match. New rules are added here without touching
the checks themselves.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from .models import Severity, Suggestion
from . import suggestions

Rewrite = Callable[[str], list[Suggestion]]


def _call_pattern(name: str) -> re.Pattern:
    """Match a function name in call position, e.g. ``NOW(``."""
    return re.compile(rf"(?<![A-Za-z0-9_.]){re.escape(name)}\s*\(", re.IGNORECASE)


@dataclass(frozen=True)
class IncompatibilityRule:
    """A function missing from, or behaving differently in, Google Sheets."""

    function: str
    severity: Severity
    message: str
    rewrite: Rewrite
    pattern: re.Pattern = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "pattern", _call_pattern(self.function))


@dataclass(frozen=True)
class ErrorTokenRule:
    """A literal error value embedded in formula text."""

    token: str
    message: str
    rewrite: Rewrite
    report_span: bool = False


@dataclass(frozen=True)
class DeprecatedRule:
    """A function with a preferred replacement (or none)."""

    function: str
    replacement: Optional[str]
    message: str
    pattern: re.Pattern = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "pattern", _call_pattern(self.function))


@dataclass(frozen=True)
class VolatileRule:
    """A function that recalculates on every change."""

    function: str
    impact: str  # "high" or "medium"
    pattern: re.Pattern = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "pattern", _call_pattern(self.function))


INCOMPATIBILITIES: tuple[IncompatibilityRule, ...] = (
    IncompatibilityRule(
        function="XLOOKUP",
        severity=Severity.ERROR,
        message="XLOOKUP is not available in Google Sheets. Use VLOOKUP or INDEX/MATCH instead.",
        rewrite=suggestions.xlookup_rewrites,
    ),
    IncompatibilityRule(
        function="CONCATENATEX",
        severity=Severity.ERROR,
        message="CONCATENATEX is not available. Use CONCATENATE or & operator.",
        rewrite=suggestions.concatenatex_rewrites,
    ),
    IncompatibilityRule(
        function="TEXTJOIN",
        severity=Severity.WARNING,
        message="TEXTJOIN may not work as expected. Consider using JOIN or CONCATENATE.",
        rewrite=suggestions.textjoin_rewrites,
    ),
)

ERROR_TOKENS: tuple[ErrorTokenRule, ...] = (
    ErrorTokenRule(
        token="#REF!",
        message="Formula contains invalid cell reference (#REF!)",
        rewrite=suggestions.broken_reference_rewrites,
        report_span=True,
    ),
    ErrorTokenRule(
        token="#VALUE!",
        message="Formula has wrong type of argument (#VALUE!)",
        rewrite=suggestions.value_error_rewrites,
    ),
    ErrorTokenRule(
        token="#NAME?",
        message="Formula contains unrecognized function or name (#NAME?)",
        rewrite=suggestions.function_name_corrections,
    ),
)

DEPRECATED_FUNCTIONS: tuple[DeprecatedRule, ...] = (
    DeprecatedRule(
        function="DATEDIF",
        replacement="DAYS",
        message="DATEDIF is deprecated. Use DAYS or other date functions.",
    ),
    DeprecatedRule(
        function="ROMAN",
        replacement=None,
        message="ROMAN function has limited use. Consider alternatives.",
    ),
)

VOLATILE_FUNCTIONS: tuple[VolatileRule, ...] = (
    VolatileRule(function="NOW", impact="high"),
    VolatileRule(function="TODAY", impact="medium"),
    VolatileRule(function="RAND", impact="high"),
    VolatileRule(function="RANDBETWEEN", impact="high"),
    VolatileRule(function="OFFSET", impact="medium"),
    VolatileRule(function="INDIRECT", impact="medium"),
)

# Volatile functions the inline performance check cares about
RECALC_FUNCTIONS: tuple[VolatileRule, ...] = VOLATILE_FUNCTIONS[:4]

# Occurrence counter used by the performance scorer
VOLATILE_OCCURRENCE_PATTERN = re.compile(
    r"\b(NOW|TODAY|RAND|RANDBETWEEN|OFFSET|INDIRECT)\b", re.IGNORECASE
)

ARRAY_FUNCTION_PATTERN = _call_pattern("ARRAYFORMULA")
NESTED_IF_PATTERN = re.compile(r"\bIF\(", re.IGNORECASE)
MISSING_SEPARATOR_PATTERN = re.compile(r"\)\s+[A-Z]")
