"""A1 notation helpers shared by the accessors and the reference extractor."""

import re
from typing import Optional

CELL_NOTATION_PATTERN = re.compile(r"^\$?([A-Za-z]+)\$?(\d+)$")


def column_letter_to_number(letters: str) -> int:
    """Convert column letters to a 1-based number. A=1, Z=26, AA=27, etc."""
    result = 0
    for char in letters.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result


def number_to_column_letter(number: int) -> str:
    """Convert a 1-based column number to its letters."""
    if number < 1:
        raise ValueError(f"Column number must be positive: {number}")
    result = ""
    while number > 0:
        number, remainder = divmod(number - 1, 26)
        result = chr(ord("A") + remainder) + result
    return result


def parse_cell_notation(cell: str) -> tuple[int, int]:
    """Parse A1 notation into a 1-based (row, col) pair."""
    match = CELL_NOTATION_PATTERN.match(cell.strip())
    if not match:
        raise ValueError(f"Invalid cell notation: {cell}")
    row = int(match.group(2))
    if row < 1:
        raise ValueError(f"Invalid cell notation: {cell}")
    return row, column_letter_to_number(match.group(1))


def cell_notation(row: int, col: int) -> str:
    """Build A1 notation from a 1-based row and column."""
    return f"{number_to_column_letter(col)}{row}"


def split_sheet_prefix(ref: str) -> tuple[Optional[str], str]:
    """Split ``'My Sheet'!A1`` into the sheet name and the cell part."""
    if "!" not in ref:
        return None, ref
    sheet, _, cell = ref.rpartition("!")
    return sheet.strip("'"), cell
