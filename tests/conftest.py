"""Pytest configuration and shared fixtures."""

from unittest.mock import Mock

import pytest

from sheetdoctor.config import Settings
from sheetdoctor.service import FormulaDebugger
from sheetdoctor.sheets import GoogleSheetsClient, InMemoryAccessor


@pytest.fixture
def test_settings() -> Settings:
    """Settings with the default thresholds, independent of the environment."""
    return Settings(
        max_circular_depth=2,
        nested_if_threshold=3,
        volatile_length_threshold=100,
        bounded_range_rows=1000,
        score_length_threshold=200,
        score_nesting_threshold=5,
        scan_chunk_size=0,
        default_max_rows=1000,
        default_max_cols=26,
    )


@pytest.fixture
def make_accessor():
    """Factory for in-memory sheets."""

    def _make(cells=None, max_rows=1000, max_cols=26, **kwargs) -> InMemoryAccessor:
        return InMemoryAccessor(cells or {}, max_rows=max_rows, max_cols=max_cols, **kwargs)

    return _make


@pytest.fixture
def empty_accessor(make_accessor) -> InMemoryAccessor:
    return make_accessor()


@pytest.fixture
def make_debugger(make_accessor, test_settings):
    """Factory for a FormulaDebugger over an in-memory sheet."""

    def _make(cells=None, **kwargs) -> FormulaDebugger:
        return FormulaDebugger(make_accessor(cells, **kwargs), test_settings)

    return _make


@pytest.fixture
def mock_sheets_client() -> Mock:
    """Create a mocked Google Sheets client."""
    client = Mock(spec=GoogleSheetsClient)
    client.get_sheet_properties = Mock(
        return_value={"id": 0, "title": "Sheet1", "row_count": 100, "col_count": 26}
    )
    client.read_formulas = Mock(return_value=[])
    client.write_formula = Mock(return_value=1)
    return client


# Configure pytest-asyncio
def pytest_configure(config):
    """Configure pytest with asyncio settings."""
    config.addinivalue_line("markers", "asyncio: mark test as async")
