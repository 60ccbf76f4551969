"""Data models for document access."""

from pydantic import BaseModel, Field

from .notation import cell_notation, parse_cell_notation, split_sheet_prefix


class SheetBounds(BaseModel):
    """Size of the sheet being analyzed."""

    max_rows: int = Field(ge=0)
    max_cols: int = Field(ge=0)

    @property
    def is_empty(self) -> bool:
        return self.max_rows == 0 or self.max_cols == 0


class GridRange(BaseModel):
    """A rectangular block of cells anchored at a 1-based (row, col)."""

    row: int = Field(ge=1)
    col: int = Field(ge=1)
    height: int = Field(ge=0)
    width: int = Field(ge=0)

    @classmethod
    def from_a1(cls, notation: str) -> "GridRange":
        """Build a range from ``"B2:D10"`` or a single cell such as ``"C14"``."""
        _, cells = split_sheet_prefix(notation.strip())
        start, _, end = cells.partition(":")
        start_row, start_col = parse_cell_notation(start)
        end_row, end_col = parse_cell_notation(end) if end else (start_row, start_col)
        top, bottom = sorted((start_row, end_row))
        left, right = sorted((start_col, end_col))
        return cls(
            row=top,
            col=left,
            height=bottom - top + 1,
            width=right - left + 1,
        )

    @property
    def cell_count(self) -> int:
        return self.height * self.width

    def to_a1(self) -> str:
        """Render the range in A1 notation."""
        start = cell_notation(self.row, self.col)
        if self.height <= 1 and self.width <= 1:
            return start
        end = cell_notation(self.row + self.height - 1, self.col + self.width - 1)
        return f"{start}:{end}"

    def cell_at(self, row_offset: int, col_offset: int) -> str:
        """A1 notation of the cell at a 0-based offset inside the range."""
        return cell_notation(self.row + row_offset, self.col + col_offset)
