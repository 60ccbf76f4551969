"""The seven formula checks.

Every check takes the formula text and the cell holding it, and returns at
most one Diagnostic: the first problem it finds. Text that does not start
with the formula marker is never diagnosed.
"""

from typing import Optional

from ..config import Settings, settings
from ..sheets.accessor import DocumentAccessor
from .graph import find_indirect_cycle, normalize_address
from .models import Diagnostic, ErrorSpan, IssueKind, Severity, Suggestion
from .references import extract_references, has_whole_column_range
from .rules import (
    ARRAY_FUNCTION_PATTERN,
    DEPRECATED_FUNCTIONS,
    ERROR_TOKENS,
    INCOMPATIBILITIES,
    MISSING_SEPARATOR_PATTERN,
    NESTED_IF_PATTERN,
    RECALC_FUNCTIONS,
    VOLATILE_FUNCTIONS,
)
from .suggestions import (
    bound_whole_columns,
    convert_to_ifs,
    remove_tokens,
    replace_function,
)

FORMULA_MARKER = "="


def is_formula(text: Optional[str]) -> bool:
    return isinstance(text, str) and text.startswith(FORMULA_MARKER)


def check_known_errors(formula: str, cell_ref: str) -> Optional[Diagnostic]:
    """Flag functions Google Sheets lacks, then literal error values."""
    if not is_formula(formula):
        return None

    for rule in INCOMPATIBILITIES:
        if rule.pattern.search(formula):
            return Diagnostic(
                kind=IssueKind.FORMULA_ERROR,
                severity=rule.severity,
                message=rule.message,
                cell=cell_ref,
                formula=formula,
                suggestions=rule.rewrite(formula),
            )

    for rule in ERROR_TOKENS:
        position = formula.find(rule.token)
        if position == -1:
            continue
        span = None
        if rule.report_span:
            span = ErrorSpan(start=position, end=position + len(rule.token))
        return Diagnostic(
            kind=IssueKind.FORMULA_ERROR,
            severity=Severity.ERROR,
            message=rule.message,
            cell=cell_ref,
            formula=formula,
            error_span=span,
            suggestions=rule.rewrite(formula),
        )

    return None


def check_circular(
    formula: str,
    cell_ref: str,
    accessor: DocumentAccessor,
    max_depth: Optional[int] = None,
) -> Optional[Diagnostic]:
    """Detect a formula that references its own cell, directly or through precedents."""
    if not is_formula(formula):
        return None

    own_address = normalize_address(cell_ref)
    sheet_name = accessor.sheet_name
    self_refs = [
        ref for ref in extract_references(formula)
        if ref.on_sheet(sheet_name) and ref.cells == own_address
    ]
    if self_refs:
        first = self_refs[0]
        return Diagnostic(
            kind=IssueKind.CIRCULAR_REFERENCE,
            severity=Severity.ERROR,
            message="Formula creates a circular reference by referencing its own cell",
            cell=cell_ref,
            formula=formula,
            error_span=ErrorSpan(start=first.start, end=first.end),
            suggestions=[
                Suggestion(
                    description="Remove self-reference",
                    formula=remove_tokens(formula, [(r.start, r.end) for r in self_refs]),
                )
            ],
        )

    if max_depth is None:
        max_depth = settings.max_circular_depth
    cycle = find_indirect_cycle(
        formula, cell_ref, accessor, max_depth=max_depth, sheet_name=sheet_name
    )
    if cycle:
        return Diagnostic(
            kind=IssueKind.CIRCULAR_REFERENCE,
            severity=Severity.ERROR,
            message=f"Indirect circular reference detected: {' -> '.join(cycle)}",
            cell=cell_ref,
            formula=formula,
        )

    return None


def check_bounds(
    formula: str,
    cell_ref: str,
    max_rows: int,
    max_cols: int,
    sheet_name: Optional[str] = None,
) -> Optional[Diagnostic]:
    """Flag the first reference that points outside the sheet.

    References qualified with another sheet are skipped; ones qualified with
    ``sheet_name`` are checked like local references.
    """
    if not is_formula(formula):
        return None

    for ref in extract_references(formula):
        if not ref.on_sheet(sheet_name):
            continue
        rows = [ref.row] + ([ref.end_row] if ref.end_row is not None else [])
        cols = [ref.column] + ([ref.end_column] if ref.end_column is not None else [])
        if max(rows) > max_rows or max(cols) > max_cols:
            return Diagnostic(
                kind=IssueKind.INVALID_REFERENCE,
                severity=Severity.WARNING,
                message=(
                    f"Reference {ref.raw} is outside sheet bounds "
                    f"(max: {max_rows} rows, {max_cols} cols)"
                ),
                cell=cell_ref,
                formula=formula,
                error_span=ErrorSpan(start=ref.start, end=ref.end),
            )

    return None


def check_deprecated(formula: str, cell_ref: str) -> Optional[Diagnostic]:
    """Flag deprecated functions, suggesting the replacement where one exists."""
    if not is_formula(formula):
        return None

    for rule in DEPRECATED_FUNCTIONS:
        if not rule.pattern.search(formula):
            continue
        fixes = []
        if rule.replacement:
            fixes.append(
                Suggestion(
                    description=f"Replace with {rule.replacement}",
                    formula=replace_function(formula, rule.function, rule.replacement),
                )
            )
        return Diagnostic(
            kind=IssueKind.DEPRECATED_FUNCTION,
            severity=Severity.WARNING,
            message=rule.message,
            cell=cell_ref,
            formula=formula,
            suggestions=fixes,
        )

    return None


def check_performance_inline(
    formula: str, cell_ref: str, config: Optional[Settings] = None
) -> Optional[Diagnostic]:
    """Cheap per-cell performance checks; see scorer.score_performance for the full report."""
    if not is_formula(formula):
        return None
    cfg = config or settings

    if ARRAY_FUNCTION_PATTERN.search(formula) and has_whole_column_range(formula):
        return Diagnostic(
            kind=IssueKind.PERFORMANCE,
            severity=Severity.WARNING,
            message="ARRAYFORMULA on entire columns can slow down sheet",
            cell=cell_ref,
            formula=formula,
            suggestions=[
                Suggestion(
                    description="Limit range to necessary rows",
                    formula=bound_whole_columns(formula, cfg.bounded_range_rows),
                )
            ],
        )

    if_count = len(NESTED_IF_PATTERN.findall(formula))
    if if_count > cfg.nested_if_threshold:
        flattened = convert_to_ifs(formula)
        return Diagnostic(
            kind=IssueKind.PERFORMANCE,
            severity=Severity.WARNING,
            message=f"Formula has {if_count} nested IF statements. Consider using IFS or SWITCH",
            cell=cell_ref,
            formula=formula,
            suggestions=(
                [Suggestion(description="Use IFS function for multiple conditions", formula=flattened)]
                if flattened
                else []
            ),
        )

    if len(formula) > cfg.volatile_length_threshold:
        for rule in RECALC_FUNCTIONS:
            if rule.pattern.search(formula):
                return Diagnostic(
                    kind=IssueKind.PERFORMANCE,
                    severity=Severity.WARNING,
                    message=f"Volatile function {rule.function} recalculates on every change",
                    cell=cell_ref,
                    formula=formula,
                )

    return None


def check_syntax(formula: str, cell_ref: str) -> Optional[Diagnostic]:
    """
    Check parenthesis balance, then look for a likely missing separator.

    Parentheses inside quoted text are counted like any other, so a literal
    such as "(draft" is reported as unbalanced.
    """
    if not is_formula(formula):
        return None

    balance = 0
    for char in formula:
        if char == "(":
            balance += 1
        elif char == ")":
            balance -= 1
        if balance < 0:
            body = formula[len(FORMULA_MARKER):]
            return Diagnostic(
                kind=IssueKind.SYNTAX_ERROR,
                severity=Severity.ERROR,
                message="Unmatched closing parenthesis",
                cell=cell_ref,
                formula=formula,
                suggestions=[
                    Suggestion(
                        description="Add opening parenthesis",
                        formula=f"{FORMULA_MARKER}({body}",
                    )
                ],
            )

    if balance > 0:
        return Diagnostic(
            kind=IssueKind.SYNTAX_ERROR,
            severity=Severity.ERROR,
            message=f"Missing {balance} closing parenthesis",
            cell=cell_ref,
            formula=formula,
            suggestions=[
                Suggestion(
                    description="Add closing parentheses",
                    formula=formula + ")" * balance,
                )
            ],
        )

    if MISSING_SEPARATOR_PATTERN.search(formula):
        return Diagnostic(
            kind=IssueKind.SYNTAX_ERROR,
            severity=Severity.WARNING,
            message="Possible missing comma between arguments",
            cell=cell_ref,
            formula=formula,
        )

    return None


def check_volatile(formula: str, cell_ref: str) -> Optional[Diagnostic]:
    """Note volatile functions. Informational only."""
    if not is_formula(formula):
        return None

    for rule in VOLATILE_FUNCTIONS:
        if rule.pattern.search(formula):
            return Diagnostic(
                kind=IssueKind.VOLATILE_FUNCTION,
                severity=Severity.INFO,
                message=f"{rule.function} recalculates on every change ({rule.impact} impact)",
                cell=cell_ref,
                formula=formula,
            )

    return None
