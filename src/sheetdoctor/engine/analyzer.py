"""Runs the check pipeline over a cell, a range or a whole sheet."""

import logging
import threading
from typing import Callable, Optional

from ..config import Settings, settings
from ..sheets.accessor import DocumentAccessor
from ..sheets.models import GridRange, SheetBounds
from .checks import (
    check_bounds,
    check_circular,
    check_deprecated,
    check_known_errors,
    check_performance_inline,
    check_syntax,
    check_volatile,
    is_formula,
)
from .models import (
    AnalysisResult,
    CellAnalysis,
    Diagnostic,
    ScanCheckpoint,
    ScanOutcome,
    Severity,
)

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative cancellation, checked by the scanner between cells."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def analyze_formula(
    formula: str,
    cell_ref: str,
    accessor: DocumentAccessor,
    bounds: Optional[SheetBounds] = None,
    config: Optional[Settings] = None,
) -> CellAnalysis:
    """
    Run all seven checks against one formula and keep every finding.

    Checks run in a fixed order: formula errors, circular reference, invalid
    reference, deprecated function, inline performance, syntax, volatile
    function. A check that raises is logged and counts as no finding.

    Args:
        formula: Formula text, starting with "="
        cell_ref: A1 notation of the cell holding the formula
        accessor: Document accessor used by the circular reference walk
        bounds: Sheet size for the invalid reference check; read from the
            accessor when omitted, and the check is skipped if that fails
        config: Thresholds; the global settings when omitted
    """
    cfg = config or settings
    if bounds is None:
        bounds = _read_bounds(accessor)

    pipeline: list[tuple[str, Callable[[], Optional[Diagnostic]]]] = [
        ("formula errors", lambda: check_known_errors(formula, cell_ref)),
        (
            "circular reference",
            lambda: check_circular(formula, cell_ref, accessor, cfg.max_circular_depth),
        ),
        (
            "invalid references",
            lambda: (
                check_bounds(
                    formula,
                    cell_ref,
                    bounds.max_rows,
                    bounds.max_cols,
                    accessor.sheet_name,
                )
                if bounds is not None
                else None
            ),
        ),
        ("deprecated functions", lambda: check_deprecated(formula, cell_ref)),
        ("performance", lambda: check_performance_inline(formula, cell_ref, cfg)),
        ("syntax", lambda: check_syntax(formula, cell_ref)),
        ("volatile functions", lambda: check_volatile(formula, cell_ref)),
    ]

    issues = []
    for name, check in pipeline:
        try:
            diagnostic = check()
        except Exception as e:
            logger.error(f"Error checking {name} in {cell_ref}: {e}")
            continue
        if diagnostic is not None:
            issues.append(diagnostic)

    return CellAnalysis(
        cell=cell_ref,
        formula=formula,
        issues=issues,
        error_count=sum(1 for i in issues if i.severity == Severity.ERROR),
        warning_count=sum(1 for i in issues if i.severity == Severity.WARNING),
    )


def _read_bounds(accessor: DocumentAccessor) -> Optional[SheetBounds]:
    try:
        return accessor.get_bounds()
    except Exception as e:
        logger.error(f"Could not read sheet bounds, skipping bounds check: {e}")
        return None


class _Tally:
    """Running counts while a scan is in progress."""

    def __init__(self, partial: Optional[AnalysisResult] = None):
        partial = partial or AnalysisResult()
        self.issues: list[Diagnostic] = list(partial.issues)
        self.error_count = partial.error_count
        self.warning_count = partial.warning_count
        self.valid_count = partial.valid_count
        self.total_formulas = partial.total_formulas
        self.error_cells = partial.error_cells
        self.warning_cells = partial.warning_cells
        self.info_cells = partial.info_cells

    def add(self, analysis: CellAnalysis):
        self.total_formulas += 1
        worst = analysis.worst_severity
        if worst is None:
            self.valid_count += 1
            return
        self.issues.extend(analysis.issues)
        self.error_count += analysis.error_count
        self.warning_count += analysis.warning_count
        if worst == Severity.ERROR:
            self.error_cells += 1
        elif worst == Severity.WARNING:
            self.warning_cells += 1
        else:
            self.info_cells += 1

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(
            issues=self.issues,
            error_count=self.error_count,
            warning_count=self.warning_count,
            valid_count=self.valid_count,
            total_formulas=self.total_formulas,
            error_cells=self.error_cells,
            warning_cells=self.warning_cells,
            info_cells=self.info_cells,
        )


class FormulaScanner:
    """Scans a rectangular grid of cells, skipping cells without formulas."""

    def __init__(self, accessor: DocumentAccessor, config: Optional[Settings] = None):
        self.accessor = accessor
        self.config = config or settings

    def analyze_cell(self, cell_ref: str) -> AnalysisResult:
        """Analyze a single cell; a cell without a formula yields an empty result."""
        tally = _Tally()
        formula = self.accessor.get_formula(cell_ref)
        if is_formula(formula):
            tally.add(analyze_formula(formula, cell_ref, self.accessor, config=self.config))
        return tally.to_result()

    def scan(
        self,
        grid: GridRange,
        max_cells: Optional[int] = None,
        checkpoint: Optional[ScanCheckpoint] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ScanOutcome:
        """
        Analyze every formula cell in a grid, row by row.

        Args:
            grid: The block of cells to scan
            max_cells: Grid positions to visit in this pass; defaults to
                ``scan_chunk_size`` (0 means no limit). Only the rows holding
                those positions are read from the accessor.
            checkpoint: Resume a previous pass from where it stopped
            cancel_token: Checked before each cell; a cancelled scan returns
                its partial tallies with a checkpoint

        Returns:
            ScanOutcome with the result so far and, if unfinished, a checkpoint
        """
        if max_cells is None:
            max_cells = self.config.scan_chunk_size
        if max_cells < 0:
            raise ValueError(f"max_cells must not be negative: {max_cells}")
        start = checkpoint.position if checkpoint else 0
        tally = _Tally(checkpoint.partial if checkpoint else None)

        total_positions = grid.cell_count
        stop = total_positions if not max_cells else min(total_positions, start + max_cells)
        first_row = start // grid.width if grid.width else 0
        rows = self._read_rows(grid, first_row, start, stop)
        bounds = _read_bounds(self.accessor)

        logger.info(
            f"Scanning {grid.to_a1()} positions {start}-{stop} of {total_positions}"
        )

        position = start
        while position < stop:
            if cancel_token is not None and cancel_token.cancelled:
                logger.info(f"Scan of {grid.to_a1()} cancelled at position {position}")
                return self._unfinished(tally, position, cancelled=True)

            row_offset, col_offset = divmod(position, grid.width)
            text = _cell_text(rows, row_offset - first_row, col_offset)
            if is_formula(text):
                cell_ref = grid.cell_at(row_offset, col_offset)
                tally.add(
                    analyze_formula(text, cell_ref, self.accessor, bounds, self.config)
                )
            position += 1

        if position < total_positions:
            return self._unfinished(tally, position, cancelled=False)

        result = tally.to_result()
        logger.info(
            f"Scanned {result.total_formulas} formulas in {grid.to_a1()}: "
            f"{result.error_count} errors, {result.warning_count} warnings, "
            f"{result.valid_count} valid"
        )
        return ScanOutcome(result=result)

    def _read_rows(
        self, grid: GridRange, first_row: int, start: int, stop: int
    ) -> list[list[str]]:
        """Read the rows of the grid that hold positions [start, stop)."""
        if stop <= start:
            return []
        last_row = (stop - 1) // grid.width
        window = GridRange(
            row=grid.row + first_row,
            col=grid.col,
            height=last_row - first_row + 1,
            width=grid.width,
        )
        return self.accessor.get_formula_grid(window)

    @staticmethod
    def _unfinished(tally: _Tally, position: int, cancelled: bool) -> ScanOutcome:
        partial = tally.to_result()
        return ScanOutcome(
            result=partial,
            complete=False,
            cancelled=cancelled,
            checkpoint=ScanCheckpoint(position=position, partial=partial),
        )


def _cell_text(rows: list[list[str]], row_offset: int, col_offset: int) -> Optional[str]:
    if row_offset >= len(rows) or col_offset >= len(rows[row_offset]):
        return None
    return rows[row_offset][col_offset]
