"""Tests for reference extraction and A1 notation helpers."""

import pytest

from sheetdoctor.engine.references import (
    extract_dependencies,
    extract_references,
    has_whole_line_range,
    mask_string_literals,
    parse_cell_reference,
    reference_type,
)
from sheetdoctor.sheets.models import GridRange
from sheetdoctor.sheets.notation import (
    cell_notation,
    column_letter_to_number,
    number_to_column_letter,
    parse_cell_notation,
)


class TestColumnDecoding:
    """Test base-26 column letter decoding."""

    @pytest.mark.parametrize(
        "letters,number",
        [("A", 1), ("Z", 26), ("AA", 27), ("AZ", 52), ("BA", 53), ("ZZ", 702), ("AAA", 703)],
    )
    def test_column_letter_to_number(self, letters, number):
        assert column_letter_to_number(letters) == number
        assert number_to_column_letter(number) == letters

    def test_number_to_column_letter_rejects_zero(self):
        with pytest.raises(ValueError):
            number_to_column_letter(0)

    def test_cell_notation(self):
        assert cell_notation(14, 3) == "C14"

    def test_parse_cell_notation_strips_anchors(self):
        assert parse_cell_notation("$C$14") == (14, 3)

    def test_parse_cell_notation_invalid(self):
        with pytest.raises(ValueError, match="Invalid cell notation"):
            parse_cell_notation("14C")


class TestExtractReferences:
    """Test the reference extractor."""

    def test_single_cells_in_order(self):
        refs = extract_references("=A1+B2*C3")

        assert [r.raw for r in refs] == ["A1", "B2", "C3"]
        assert (refs[1].column, refs[1].row) == (2, 2)

    def test_duplicates_preserved(self):
        refs = extract_references("=A1+A1")

        assert [r.raw for r in refs] == ["A1", "A1"]
        assert refs[0].start == 1
        assert refs[1].start == 4

    def test_range(self):
        (ref,) = extract_references("=SUM(A1:C10)")

        assert ref.raw == "A1:C10"
        assert ref.is_range is True
        assert (ref.column, ref.row) == (1, 1)
        assert (ref.end_column, ref.end_row) == (3, 10)

    def test_multi_letter_columns(self):
        (ref,) = extract_references("=AB12")

        assert ref.column == 28
        assert ref.row == 12

    def test_absolute_reference(self):
        (ref,) = extract_references("=$B$2*2")

        assert ref.raw == "$B$2"
        assert ref.address == "B2"

    def test_cross_sheet_reference(self):
        refs = extract_references("=Data!A1+'My Sheet'!B2:B5")

        assert refs[0].cross_sheet is True
        assert refs[0].sheet == "Data"
        assert refs[0].address == "Data!A1"
        assert refs[1].sheet == "My Sheet"
        assert refs[1].is_range is True

    def test_no_references(self):
        assert extract_references('="hello"') == []

    def test_lowercase_is_not_a_reference(self):
        assert extract_references("=a1") == []

    def test_bounds_not_validated(self):
        (ref,) = extract_references("=ZZZ999999")

        assert ref.column == column_letter_to_number("ZZZ")
        assert ref.row == 999999


class TestReferenceHelpers:
    """Test reference classification and dependency listing."""

    def test_parse_cell_reference(self):
        assert parse_cell_reference("C14") == (3, 14)
        assert parse_cell_reference("A1:B2") is None

    def test_reference_type(self):
        assert reference_type("A1") == "cell"
        assert reference_type("A1:B2") == "range"
        assert reference_type("Data!A1") == "cross-sheet"

    def test_extract_dependencies_skips_self(self):
        deps = extract_dependencies("=B1+C1:C5+Data!A1+A1", "A1")

        assert [(d.reference, d.type) for d in deps] == [
            ("B1", "cell"),
            ("C1:C5", "range"),
            ("Data!A1", "cross-sheet"),
        ]
        assert all(d.cell == "A1" for d in deps)

    def test_whole_line_ranges(self):
        assert has_whole_line_range("=SUM(A:A)") is True
        assert has_whole_line_range("=SUM(2:2)") is True
        assert has_whole_line_range("=SUM(A1:A10)") is False

    def test_quoted_time_is_not_a_row_range(self):
        assert has_whole_line_range('=TIMEVALUE("10:30")') is False
        assert has_whole_line_range('=IF(A1>TIME(9,0,0),"9:00","A:B")') is False
        assert has_whole_line_range('=COUNTIF(B:B,"10:30")') is True

    def test_mask_string_literals(self):
        assert mask_string_literals('=A1&"x""y"&B1') == '=A1&"    "&B1'
        assert mask_string_literals("=A1") == "=A1"


class TestGridRange:
    """Test GridRange construction."""

    def test_from_a1(self):
        grid = GridRange.from_a1("B2:D10")

        assert (grid.row, grid.col, grid.height, grid.width) == (2, 2, 9, 3)
        assert grid.to_a1() == "B2:D10"

    def test_from_a1_single_cell(self):
        grid = GridRange.from_a1("C14")

        assert grid.cell_count == 1
        assert grid.to_a1() == "C14"

    def test_from_a1_reversed_corners(self):
        grid = GridRange.from_a1("D10:B2")

        assert (grid.row, grid.col) == (2, 2)

    def test_cell_at(self):
        assert GridRange.from_a1("B2:D10").cell_at(1, 2) == "D3"
