"""Tests for the FormulaDebugger entry points and their envelopes."""

from unittest.mock import patch

import pytest

from sheetdoctor.engine import CancellationToken, IssueKind
from sheetdoctor.service import FormulaDebugger, score_formula
from sheetdoctor.sheets import GridRange


class TestAnalyzeCell:
    """Test single-cell analysis."""

    def test_cell_with_issue(self, make_debugger):
        debugger = make_debugger({"B2": "=XLOOKUP(A2,C:C,D:D)"})
        response = debugger.analyze_cell("B2")

        assert response.success is True
        assert response.error is None
        assert response.data.total_formulas == 1
        assert response.data.error_count == 1
        assert response.data.issues[0].kind == IssueKind.FORMULA_ERROR

    def test_cell_without_formula(self, make_debugger):
        response = make_debugger({"A1": "plain text"}).analyze_cell("A1")

        assert response.success is True
        assert response.data.total_formulas == 0
        assert response.data.issues == ()

    def test_accessor_failure_becomes_error_envelope(self, make_debugger):
        response = make_debugger().analyze_cell("Other!A1")

        assert response.success is False
        assert "Sheet not found" in response.error
        assert response.data is None


class TestAnalyzeRange:
    """Test range analysis."""

    def test_range_notation(self, make_debugger):
        debugger = make_debugger({"A1": "=A1", "A2": "=SUM(B1:B2)", "B1": "3"})
        response = debugger.analyze_range("A1:B2")

        assert response.success is True
        assert response.complete is True
        assert response.data.total_formulas == 2
        assert response.data.error_cells == 1
        assert response.data.valid_count == 1

    def test_grid_range(self, make_debugger):
        debugger = make_debugger({"C3": "=NOW()"})
        response = debugger.analyze_range(GridRange(row=3, col=3, height=1, width=1))

        assert response.data.info_cells == 1

    def test_chunked_range(self, make_debugger):
        debugger = make_debugger({"A1": "=1", "A2": "=2", "A3": "=3"})

        first = debugger.analyze_range("A1:A3", max_cells=2)
        assert first.success is True
        assert first.complete is False
        assert first.data.total_formulas == 2

        second = debugger.analyze_range("A1:A3", checkpoint=first.checkpoint)
        assert second.complete is True
        assert second.checkpoint is None
        assert second.data.total_formulas == 3

    def test_cancelled_range(self, make_debugger):
        token = CancellationToken()
        token.cancel()
        response = make_debugger({"A1": "=1"}).analyze_range("A1:A3", cancel_token=token)

        assert response.success is True
        assert response.complete is False
        assert response.checkpoint.position == 0

    def test_negative_chunk_is_error(self, make_debugger):
        response = make_debugger({"A1": "=1"}).analyze_range("A1:A3", max_cells=-5)

        assert response.success is False
        assert "max_cells must not be negative" in response.error

    def test_invalid_range_notation(self, make_debugger):
        response = make_debugger().analyze_range("not a range")

        assert response.success is False
        assert "Invalid cell notation" in response.error


class TestAnalyzeSheet:
    """Test whole-sheet analysis."""

    def test_scans_used_area(self, make_debugger):
        debugger = make_debugger(
            {"A1": "=B1", "B1": "=A1", "C3": "=TODAY()"}, max_rows=3, max_cols=3
        )
        response = debugger.analyze_sheet()

        assert response.success is True
        assert response.data.total_formulas == 3
        assert response.data.error_cells == 2
        assert response.data.info_cells == 1

    def test_empty_sheet_is_error(self, make_debugger):
        response = make_debugger(max_rows=0, max_cols=0).analyze_sheet()

        assert response.success is False
        assert response.error == "Sheet is empty"

    def test_bounds_failure(self, make_debugger):
        debugger = make_debugger()
        with patch.object(debugger.accessor, "get_bounds", side_effect=RuntimeError("offline")):
            response = debugger.analyze_sheet()

        assert response.success is False
        assert response.error == "offline"


class TestScoring:
    """Test the performance score envelopes."""

    def test_score_formula(self, test_settings):
        response = score_formula("=SUM(A:A)", test_settings)

        assert response.success is True
        assert response.analysis.score == 85

    def test_score_rejects_non_formula(self):
        response = score_formula("SUM(A1)")

        assert response.success is False
        assert response.error == "No formula to analyze"

    def test_debugger_uses_its_config(self, make_debugger, test_settings):
        debugger = make_debugger()
        debugger.config = test_settings.model_copy(update={"score_length_threshold": 5})
        response = debugger.score_performance("=SUM(A1:A10)")

        assert response.analysis.score == 80


class TestApplyFix:
    """Test writing suggested fixes."""

    def test_apply_fix(self, make_debugger):
        debugger = make_debugger({"A1": "=SUM(B1:B3"})
        response = debugger.apply_fix("A1", "=SUM(B1:B3)")

        assert response.success is True
        assert response.cell == "A1"
        assert response.formula == "=SUM(B1:B3)"
        assert debugger.accessor.writes == [("A1", "=SUM(B1:B3)")]
        assert debugger.analyze_cell("A1").data.valid_count == 1

    def test_read_only_sheet(self, make_debugger):
        debugger = make_debugger({"A1": "=A1"}, read_only=True)
        response = debugger.apply_fix("A1", "=1")

        assert response.success is False
        assert "read-only" in response.error
        assert debugger.accessor.writes == []


class TestDependencies:
    """Test precedent listing."""

    def test_dependency_types(self, make_debugger):
        debugger = make_debugger({"D1": "=A1+Data!B2+SUM(C1:C3)+D1"})
        response = debugger.analyze_dependencies("D1")

        assert response.success is True
        assert [(d.reference, d.type) for d in response.dependencies] == [
            ("A1", "cell"),
            ("Data!B2", "cross-sheet"),
            ("C1:C3", "range"),
        ]
        assert all(d.cell == "D1" for d in response.dependencies)

    @pytest.mark.parametrize("cells", [{}, {"A1": "42"}])
    def test_no_formula(self, make_debugger, cells):
        response = make_debugger(cells).analyze_dependencies("A1")

        assert response.success is False
        assert response.error == "No formula in cell"


def test_debugger_defaults_to_global_settings(empty_accessor):
    from sheetdoctor.config import settings

    assert FormulaDebugger(empty_accessor).config is settings
