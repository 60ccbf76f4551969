"""Host-facing entry points.

Every method returns a success/failure envelope and never raises.
"""

import logging
from typing import Optional, Union

from pydantic import BaseModel, Field

from .config import Settings, settings
from .engine import (
    AnalysisResult,
    CancellationToken,
    Dependency,
    FormulaScanner,
    PerformanceReport,
    ScanCheckpoint,
    extract_dependencies,
    score_performance,
)
from .engine.checks import is_formula
from .sheets.accessor import DocumentAccessor
from .sheets.models import GridRange

logger = logging.getLogger(__name__)


class AnalysisResponse(BaseModel):
    """Envelope for cell, range and sheet scans."""

    success: bool
    data: Optional[AnalysisResult] = None
    error: Optional[str] = None
    complete: bool = True
    checkpoint: Optional[ScanCheckpoint] = None


class PerformanceResponse(BaseModel):
    """Envelope for a performance score."""

    success: bool
    analysis: Optional[PerformanceReport] = None
    error: Optional[str] = None


class FixResponse(BaseModel):
    """Envelope for writing a suggested fix back to the document."""

    success: bool
    cell: Optional[str] = None
    formula: Optional[str] = None
    error: Optional[str] = None


class DependencyResponse(BaseModel):
    """Envelope for the precedents of a formula cell."""

    success: bool
    dependencies: list[Dependency] = Field(default_factory=list)
    error: Optional[str] = None


def score_formula(formula: str, config: Optional[Settings] = None) -> PerformanceResponse:
    """Score a formula without any document access."""
    try:
        if not is_formula(formula):
            return PerformanceResponse(success=False, error="No formula to analyze")
        return PerformanceResponse(success=True, analysis=score_performance(formula, config))
    except Exception as e:
        logger.error(f"Error analyzing performance: {e}")
        return PerformanceResponse(success=False, error=str(e))


class FormulaDebugger:
    """Formula diagnostics against one sheet, reached through an accessor."""

    def __init__(self, accessor: DocumentAccessor, config: Optional[Settings] = None):
        self.accessor = accessor
        self.config = config or settings
        self.scanner = FormulaScanner(accessor, self.config)

    def analyze_cell(self, cell_ref: str) -> AnalysisResponse:
        """Analyze the formula in one cell."""
        try:
            return AnalysisResponse(success=True, data=self.scanner.analyze_cell(cell_ref))
        except Exception as e:
            logger.error(f"Error debugging cell {cell_ref}: {e}")
            return AnalysisResponse(success=False, error=str(e))

    def analyze_range(
        self,
        cell_range: Union[str, GridRange],
        max_cells: Optional[int] = None,
        checkpoint: Optional[ScanCheckpoint] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AnalysisResponse:
        """
        Analyze every formula in a range.

        Args:
            cell_range: A1 notation such as "B2:D10", or a GridRange
            max_cells: Grid positions to visit before returning a checkpoint
            checkpoint: Resume an unfinished scan of the same range
            cancel_token: Cooperative cancellation between cells
        """
        try:
            grid = GridRange.from_a1(cell_range) if isinstance(cell_range, str) else cell_range
            outcome = self.scanner.scan(grid, max_cells, checkpoint, cancel_token)
            return AnalysisResponse(
                success=True,
                data=outcome.result,
                complete=outcome.complete,
                checkpoint=outcome.checkpoint,
            )
        except Exception as e:
            logger.error(f"Error debugging range {cell_range}: {e}")
            return AnalysisResponse(success=False, error=str(e))

    def analyze_sheet(
        self,
        max_cells: Optional[int] = None,
        checkpoint: Optional[ScanCheckpoint] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AnalysisResponse:
        """Analyze every formula in the sheet. An empty sheet is an error."""
        try:
            bounds = self.accessor.get_bounds()
            if bounds.is_empty:
                return AnalysisResponse(success=False, error="Sheet is empty")
            grid = GridRange(row=1, col=1, height=bounds.max_rows, width=bounds.max_cols)
            outcome = self.scanner.scan(grid, max_cells, checkpoint, cancel_token)
            return AnalysisResponse(
                success=True,
                data=outcome.result,
                complete=outcome.complete,
                checkpoint=outcome.checkpoint,
            )
        except Exception as e:
            logger.error(f"Error debugging all formulas: {e}")
            return AnalysisResponse(success=False, error=str(e))

    def score_performance(self, formula: str) -> PerformanceResponse:
        """Score a single formula's performance."""
        return score_formula(formula, self.config)

    def apply_fix(self, cell_ref: str, formula: str) -> FixResponse:
        """Write a formula to a cell through the accessor."""
        try:
            self.accessor.write_formula(cell_ref, formula)
            logger.info(f"Applied fix to {cell_ref}")
            return FixResponse(success=True, cell=cell_ref, formula=formula)
        except Exception as e:
            logger.error(f"Error applying fix to {cell_ref}: {e}")
            return FixResponse(success=False, cell=cell_ref, error=str(e))

    def analyze_dependencies(self, cell_ref: str) -> DependencyResponse:
        """List the cells and ranges a formula cell depends on."""
        try:
            formula = self.accessor.get_formula(cell_ref)
            if not is_formula(formula):
                return DependencyResponse(success=False, error="No formula in cell")
            return DependencyResponse(
                success=True, dependencies=extract_dependencies(formula, cell_ref)
            )
        except Exception as e:
            logger.error(f"Error analyzing dependencies of {cell_ref}: {e}")
            return DependencyResponse(success=False, error=str(e))
