"""Document accessor boundary between the engine and the host spreadsheet."""

import logging
from typing import Optional, Protocol, runtime_checkable

from .models import GridRange, SheetBounds
from .notation import cell_notation, parse_cell_notation, split_sheet_prefix

logger = logging.getLogger(__name__)


class AccessorError(RuntimeError):
    """Raised when the host document cannot serve a read or write."""


@runtime_checkable
class DocumentAccessor(Protocol):
    """Read/write capability the engine needs from the host document.

    Reads of a range reference (``"A1:B5"``) resolve to its top-left cell.
    ``sheet_name`` names the sheet that unqualified references point into.
    """

    sheet_name: str

    def get_formula(self, cell_ref: str) -> Optional[str]:
        ...

    def get_formula_grid(self, grid: GridRange) -> list[list[str]]:
        ...

    def get_bounds(self) -> SheetBounds:
        ...

    def write_formula(self, cell_ref: str, formula: str) -> None:
        ...


def _anchor_cell(cell_ref: str) -> tuple[Optional[str], int, int]:
    """Resolve a cell or range reference to its sheet and top-left (row, col)."""
    sheet, cells = split_sheet_prefix(cell_ref.strip())
    row, col = parse_cell_notation(cells.split(":")[0])
    return sheet, row, col


class InMemoryAccessor:
    """Accessor over a dict of A1 notation -> cell text.

    Used by the CLI for standalone formulas and by tests in place of a live
    document.
    """

    def __init__(
        self,
        cells: Optional[dict[str, str]] = None,
        max_rows: int = 1000,
        max_cols: int = 26,
        sheet_name: str = "Sheet1",
        read_only: bool = False,
    ):
        self.sheet_name = sheet_name
        self.bounds = SheetBounds(max_rows=max_rows, max_cols=max_cols)
        self.read_only = read_only
        self._cells: dict[tuple[int, int], str] = {}
        self.writes: list[tuple[str, str]] = []
        for ref, text in (cells or {}).items():
            _, row, col = _anchor_cell(ref)
            self._cells[(row, col)] = text

    def _resolve(self, cell_ref: str) -> tuple[int, int]:
        sheet, row, col = _anchor_cell(cell_ref)
        if sheet is not None and sheet != self.sheet_name:
            raise AccessorError(f"Sheet not found: {sheet}")
        return row, col

    def get_formula(self, cell_ref: str) -> Optional[str]:
        """Return the formula text of a cell, or None for empty and value cells."""
        text = self._cells.get(self._resolve(cell_ref))
        if text and text.startswith("="):
            return text
        return None

    def get_formula_grid(self, grid: GridRange) -> list[list[str]]:
        """Return the raw text of every cell in the range, "" when empty."""
        return [
            [
                self._cells.get((grid.row + r, grid.col + c), "")
                for c in range(grid.width)
            ]
            for r in range(grid.height)
        ]

    def get_bounds(self) -> SheetBounds:
        return self.bounds

    def write_formula(self, cell_ref: str, formula: str) -> None:
        if self.read_only:
            raise AccessorError(f"Sheet '{self.sheet_name}' is read-only")
        row, col = self._resolve(cell_ref)
        self._cells[(row, col)] = formula
        self.writes.append((cell_notation(row, col), formula))
        logger.debug(f"Wrote formula to {cell_notation(row, col)}")
