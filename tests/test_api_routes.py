"""Tests for API routes."""

import inspect
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sheetdoctor.api import create_app
from sheetdoctor.api import routes
from sheetdoctor.api.routes import router
from sheetdoctor.sheets import InMemoryAccessor


@pytest.fixture
def sheet() -> InMemoryAccessor:
    """In-memory sheet standing in for the Google spreadsheet."""
    return InMemoryAccessor(
        {
            "A1": "=A1+1",
            "A2": "=SUM(B1:B3",
            "A3": "=NOW()",
            "B1": "10",
            "C1": "=B1*2",
        },
        max_rows=3,
        max_cols=3,
    )


@pytest.fixture
def test_client(sheet):
    """Create a test client whose routes read the in-memory sheet."""
    app = FastAPI()
    app.include_router(router, prefix="/api")

    with patch("sheetdoctor.api.routes.get_accessor", return_value=sheet):
        yield TestClient(app)


class TestDebugEndpoints:
    """Test the /api/debug/* scan endpoints."""

    @pytest.mark.asyncio
    async def test_debug_cell(self, test_client):
        response = test_client.post(
            "/api/debug/cell", json={"spreadsheet_id": "abc", "cell": "A1"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["data"]["total_formulas"] == 1
        issue = data["data"]["issues"][0]
        assert issue["kind"] == "CircularReference"
        assert issue["severity"] == "error"
        assert issue["suggestions"][0]["formula"] == "=+1"

    @pytest.mark.asyncio
    async def test_debug_range(self, test_client):
        response = test_client.post(
            "/api/debug/range",
            json={"spreadsheet_id": "abc", "range_notation": "A1:A3"},
        )

        data = response.json()
        assert data["success"] is True
        assert data["complete"] is True
        assert data["data"]["total_formulas"] == 3
        assert data["data"]["error_cells"] == 2
        assert data["data"]["info_cells"] == 1

    @pytest.mark.asyncio
    async def test_debug_sheet_in_chunks(self, test_client):
        first = test_client.post(
            "/api/debug/sheet", json={"spreadsheet_id": "abc", "max_cells": 3}
        ).json()

        assert first["success"] is True
        assert first["complete"] is False
        assert first["checkpoint"]["position"] == 3

        second = test_client.post(
            "/api/debug/sheet",
            json={"spreadsheet_id": "abc", "checkpoint": first["checkpoint"]},
        ).json()

        assert second["complete"] is True
        assert second["data"]["total_formulas"] == 4
        assert second["data"]["valid_count"] == 1

    def test_debug_cell_requires_cell(self, test_client):
        response = test_client.post("/api/debug/cell", json={"spreadsheet_id": "abc"})
        assert response.status_code == 422

    @pytest.mark.parametrize("endpoint", ["/api/debug/range", "/api/debug/sheet"])
    def test_negative_max_cells_rejected(self, test_client, endpoint):
        response = test_client.post(
            endpoint,
            json={"spreadsheet_id": "abc", "range_notation": "A1:A3", "max_cells": -1},
        )
        assert response.status_code == 422

    def test_sheet_name_passed_to_accessor(self, sheet):
        app = FastAPI()
        app.include_router(router, prefix="/api")

        with patch("sheetdoctor.api.routes.get_accessor", return_value=sheet) as get_accessor:
            TestClient(app).post(
                "/api/debug/cell",
                json={"spreadsheet_id": "abc", "sheet_name": "Budget", "cell": "A1"},
            )

        get_accessor.assert_called_once_with("abc", "Budget")


class TestPerformanceEndpoint:
    """Test the /api/debug/performance endpoint."""

    def test_score(self, test_client):
        response = test_client.post(
            "/api/debug/performance", json={"formula": "=ARRAYFORMULA(A:A*2)"}
        )

        data = response.json()
        assert data["success"] is True
        assert data["analysis"]["score"] == 75
        assert len(data["analysis"]["suggestions"]) == 2

    def test_not_a_formula(self, test_client):
        data = test_client.post("/api/debug/performance", json={"formula": "hello"}).json()

        assert data["success"] is False
        assert data["error"] == "No formula to analyze"


class TestFixAndDependencies:
    """Test the fix and dependency endpoints."""

    def test_apply_fix(self, test_client, sheet):
        data = test_client.post(
            "/api/debug/fix",
            json={"spreadsheet_id": "abc", "cell": "A2", "formula": "=SUM(B1:B3)"},
        ).json()

        assert data == {"success": True, "cell": "A2", "formula": "=SUM(B1:B3)", "error": None}
        assert sheet.get_formula("A2") == "=SUM(B1:B3)"

    def test_dependencies(self, test_client):
        data = test_client.post(
            "/api/debug/dependencies", json={"spreadsheet_id": "abc", "cell": "C1"}
        ).json()

        assert data["success"] is True
        assert data["dependencies"] == [{"cell": "C1", "reference": "B1", "type": "cell"}]

    def test_dependencies_of_value_cell(self, test_client):
        data = test_client.post(
            "/api/debug/dependencies", json={"spreadsheet_id": "abc", "cell": "B1"}
        ).json()

        assert data["success"] is False
        assert data["error"] == "No formula in cell"


@pytest.mark.parametrize(
    "handler",
    [
        routes.debug_cell,
        routes.debug_range,
        routes.debug_sheet,
        routes.debug_performance,
        routes.apply_fix,
        routes.debug_dependencies,
    ],
)
def test_sheet_endpoints_run_in_threadpool(handler):
    assert not inspect.iscoroutinefunction(handler)


class TestHealthEndpoint:
    """Test the health check on the full application."""

    def test_health(self):
        client = TestClient(create_app())
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "sheetdoctor"
        assert "max_circular_depth" in data["config"]
