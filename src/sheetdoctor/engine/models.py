"""Data models for formula diagnostics."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IssueKind(str, Enum):
    """Category of a diagnostic."""

    FORMULA_ERROR = "FormulaError"
    CIRCULAR_REFERENCE = "CircularReference"
    INVALID_REFERENCE = "InvalidReference"
    DEPRECATED_FUNCTION = "DeprecatedFunction"
    PERFORMANCE = "Performance"
    SYNTAX_ERROR = "SyntaxError"
    VOLATILE_FUNCTION = "VolatileFunction"


class Severity(str, Enum):
    """Diagnostic severity, ordered error > warning > info."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return {"error": 3, "warning": 2, "info": 1}[self.value]


class Reference(BaseModel):
    """A cell or range pointer decoded from formula text."""

    model_config = ConfigDict(frozen=True)

    raw: str  # Token as written, e.g. "$B$2", "Data!A1:C3"
    column: int
    row: int
    is_range: bool = False
    cross_sheet: bool = False
    sheet: Optional[str] = None
    end_column: Optional[int] = None
    end_row: Optional[int] = None
    start: int = 0  # Span of raw within the formula
    end: int = 0

    @property
    def address(self) -> str:
        """Token without $ anchors, qualified with the sheet when cross-sheet."""
        if self.cross_sheet:
            return f"{self.sheet}!{self.cells}"
        return self.cells

    @property
    def cells(self) -> str:
        """Cell or range part of the token, without sheet or $ anchors."""
        return self.raw.rpartition("!")[2].replace("$", "")

    def on_sheet(self, sheet_name: Optional[str]) -> bool:
        """True if the reference points into ``sheet_name`` (or is unqualified)."""
        if not self.cross_sheet:
            return True
        return sheet_name is not None and self.sheet.casefold() == sheet_name.casefold()


class ErrorSpan(BaseModel):
    """Character span of the offending text within a formula."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int


class Suggestion(BaseModel):
    """A candidate fix. Never applied automatically."""

    model_config = ConfigDict(frozen=True)

    description: str
    formula: str


class Diagnostic(BaseModel):
    """A single finding produced by one check."""

    model_config = ConfigDict(frozen=True)

    kind: IssueKind
    severity: Severity
    message: str
    cell: str
    formula: str
    error_span: Optional[ErrorSpan] = None
    suggestions: tuple[Suggestion, ...] = ()


class CellAnalysis(BaseModel):
    """Outcome of running every check against one formula."""

    model_config = ConfigDict(frozen=True)

    cell: str
    formula: str
    issues: tuple[Diagnostic, ...] = ()
    error_count: int = 0
    warning_count: int = 0

    @property
    def worst_severity(self) -> Optional[Severity]:
        if not self.issues:
            return None
        return max((issue.severity for issue in self.issues), key=lambda s: s.rank)


class AnalysisResult(BaseModel):
    """Aggregate over every formula cell in a scanned scope."""

    model_config = ConfigDict(frozen=True)

    issues: tuple[Diagnostic, ...] = ()
    error_count: int = 0
    warning_count: int = 0
    valid_count: int = 0
    total_formulas: int = 0
    # Formula cells counted once by their worst severity
    error_cells: int = 0
    warning_cells: int = 0
    info_cells: int = 0


class PerformanceSuggestion(BaseModel):
    """An improvement and the score points it would recover."""

    model_config = ConfigDict(frozen=True)

    description: str
    improvement: int


class PerformanceReport(BaseModel):
    """Standalone performance score for one formula."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    suggestions: tuple[PerformanceSuggestion, ...] = ()


class Dependency(BaseModel):
    """A precedent of a formula cell."""

    model_config = ConfigDict(frozen=True)

    cell: str
    reference: str
    type: str  # "cell", "range", "cross-sheet"


class ScanCheckpoint(BaseModel):
    """Where an unfinished scan stopped, with the tallies so far."""

    model_config = ConfigDict(frozen=True)

    position: int = Field(ge=0)  # Row-major index of the next grid cell to visit
    partial: AnalysisResult


class ScanOutcome(BaseModel):
    """Result of one scan pass over a grid."""

    model_config = ConfigDict(frozen=True)

    result: AnalysisResult
    complete: bool = True
    cancelled: bool = False
    checkpoint: Optional[ScanCheckpoint] = None
