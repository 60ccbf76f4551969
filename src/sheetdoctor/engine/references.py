"""Cell and range reference extraction from formula text."""

import re
from typing import Optional

from ..sheets.notation import (
    CELL_NOTATION_PATTERN,
    cell_notation,
    column_letter_to_number,
    number_to_column_letter,
)
from .models import Dependency, Reference

# Optional sheet qualifier, a cell, then an optional ":cell" for ranges.
REFERENCE_PATTERN = re.compile(
    r"(?:(?P<sheet>'[^']+'|[A-Za-z_][A-Za-z0-9_.]*)!)?"
    r"(?P<first>\$?[A-Z]+\$?[0-9]+)"
    r"(?::(?P<second>\$?[A-Z]+\$?[0-9]+))?"
)

# Whole-column (A:C) or whole-row (1:5) range tokens
WHOLE_COLUMN_PATTERN = re.compile(r"(?<![A-Za-z0-9$])\$?([A-Z]{1,3}):\$?([A-Z]{1,3})(?![A-Za-z0-9(])")
WHOLE_ROW_PATTERN = re.compile(r"(?<![A-Za-z0-9$.])\$?(\d+):\$?(\d+)(?![A-Za-z0-9.])")

# Double-quoted text literal; "" inside a literal is an escaped quote
STRING_LITERAL_PATTERN = re.compile(r'"(?:[^"]|"")*"')

__all__ = [
    "REFERENCE_PATTERN",
    "WHOLE_COLUMN_PATTERN",
    "WHOLE_ROW_PATTERN",
    "cell_notation",
    "column_letter_to_number",
    "number_to_column_letter",
    "extract_references",
    "parse_cell_reference",
    "reference_type",
    "extract_dependencies",
    "has_whole_line_range",
    "has_whole_column_range",
    "mask_string_literals",
]


def parse_cell_reference(ref: str) -> Optional[tuple[int, int]]:
    """Decode a single-cell reference into (column, row); None for anything else."""
    match = CELL_NOTATION_PATTERN.match(ref)
    if not match or not match.group(1).isupper():
        return None
    return column_letter_to_number(match.group(1)), int(match.group(2))


def extract_references(formula: str) -> list[Reference]:
    """Find every cell and range reference, in order of appearance.

    Duplicates are kept. Bounds are not validated. Function names that look
    like cells (LOG10, ATAN2) are reported as references as well.
    """
    references = []
    for match in REFERENCE_PATTERN.finditer(formula):
        sheet = match.group("sheet")
        column, row = parse_cell_reference(match.group("first"))
        end_column = end_row = None
        if match.group("second"):
            end_column, end_row = parse_cell_reference(match.group("second"))

        references.append(
            Reference(
                raw=match.group(0),
                column=column,
                row=row,
                is_range=match.group("second") is not None,
                cross_sheet=sheet is not None,
                sheet=sheet.strip("'") if sheet else None,
                end_column=end_column,
                end_row=end_row,
                start=match.start(),
                end=match.end(),
            )
        )
    return references


def reference_type(ref: str) -> str:
    """Classify a reference token as "range", "cross-sheet" or "cell"."""
    if ":" in ref:
        return "range"
    if "!" in ref:
        return "cross-sheet"
    return "cell"


def extract_dependencies(formula: str, cell_ref: str) -> list[Dependency]:
    """List the precedents of a formula cell, skipping self-references."""
    own_address = cell_ref.replace("$", "")
    return [
        Dependency(cell=cell_ref, reference=ref.raw, type=reference_type(ref.raw))
        for ref in extract_references(formula)
        if ref.address != own_address
    ]


def mask_string_literals(formula: str) -> str:
    """Blank out the inside of quoted text, keeping every character position."""
    return STRING_LITERAL_PATTERN.sub(
        lambda m: '"' + " " * (len(m.group(0)) - 2) + '"', formula
    )


def has_whole_column_range(formula: str) -> bool:
    """True if a whole-column range (A:C) appears outside quoted text."""
    return bool(WHOLE_COLUMN_PATTERN.search(mask_string_literals(formula)))


def has_whole_line_range(formula: str) -> bool:
    """True if a whole-column or whole-row range appears outside quoted text.

    Time literals such as "10:30" are quoted text and never match.
    """
    masked = mask_string_literals(formula)
    return bool(WHOLE_COLUMN_PATTERN.search(masked) or WHOLE_ROW_PATTERN.search(masked))
