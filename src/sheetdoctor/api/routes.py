"""API routes for SheetDoctor."""

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ..engine import ScanCheckpoint
from ..service import (
    AnalysisResponse,
    DependencyResponse,
    FixResponse,
    FormulaDebugger,
    PerformanceResponse,
    score_formula,
)
from ..sheets import GoogleSheetsAccessor
from ..sheets.accessor import DocumentAccessor

router = APIRouter()


def get_accessor(spreadsheet_id: str, sheet_name: str) -> DocumentAccessor:
    """Build the accessor for a request's sheet."""
    return GoogleSheetsAccessor(spreadsheet_id, sheet_name)


def get_debugger(spreadsheet_id: str, sheet_name: str) -> FormulaDebugger:
    return FormulaDebugger(get_accessor(spreadsheet_id, sheet_name))


class SheetRequest(BaseModel):
    """Identifies the sheet a request works on."""

    spreadsheet_id: str
    sheet_name: str = "Sheet1"


class CellRequest(SheetRequest):
    """Request naming a single cell."""

    cell: str


class RangeRequest(SheetRequest):
    """Request to scan a range such as "B2:D10"."""

    range_notation: str
    max_cells: Optional[int] = Field(default=None, ge=0)
    checkpoint: Optional[ScanCheckpoint] = None


class SheetScanRequest(SheetRequest):
    """Request to scan a whole sheet, optionally in chunks."""

    max_cells: Optional[int] = Field(default=None, ge=0)
    checkpoint: Optional[ScanCheckpoint] = None


class PerformanceRequest(BaseModel):
    """Request to score one formula."""

    formula: str


class FixRequest(CellRequest):
    """Request to write a suggested formula back to a cell."""

    formula: str


# Diagnostics endpoints (sync: they block on the Sheets API)


@router.post("/debug/cell", response_model=AnalysisResponse)
def debug_cell(request: CellRequest):
    """Analyze the formula in one cell."""
    debugger = get_debugger(request.spreadsheet_id, request.sheet_name)
    return debugger.analyze_cell(request.cell)


@router.post("/debug/range", response_model=AnalysisResponse)
def debug_range(request: RangeRequest):
    """Analyze every formula in a range."""
    debugger = get_debugger(request.spreadsheet_id, request.sheet_name)
    return debugger.analyze_range(
        request.range_notation,
        max_cells=request.max_cells,
        checkpoint=request.checkpoint,
    )


@router.post("/debug/sheet", response_model=AnalysisResponse)
def debug_sheet(request: SheetScanRequest):
    """Analyze every formula in a sheet."""
    debugger = get_debugger(request.spreadsheet_id, request.sheet_name)
    return debugger.analyze_sheet(
        max_cells=request.max_cells,
        checkpoint=request.checkpoint,
    )


@router.post("/debug/performance", response_model=PerformanceResponse)
def debug_performance(request: PerformanceRequest):
    """Score a formula. Needs no document access."""
    return score_formula(request.formula)


@router.post("/debug/fix", response_model=FixResponse)
def apply_fix(request: FixRequest):
    """Write a suggested formula to a cell."""
    debugger = get_debugger(request.spreadsheet_id, request.sheet_name)
    return debugger.apply_fix(request.cell, request.formula)


@router.post("/debug/dependencies", response_model=DependencyResponse)
def debug_dependencies(request: CellRequest):
    """List the precedents of a formula cell."""
    debugger = get_debugger(request.spreadsheet_id, request.sheet_name)
    return debugger.analyze_dependencies(request.cell)


# Health check


@router.get("/health")
async def health_check():
    """Health check endpoint with diagnostics."""
    from ..config import settings

    return {
        "status": "ok",
        "service": "sheetdoctor",
        "config": {
            "google_credentials_configured": settings.google_credentials_path.exists(),
            "max_circular_depth": settings.max_circular_depth,
            "scan_chunk_size": settings.scan_chunk_size,
        },
    }
