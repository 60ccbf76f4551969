"""Google Sheets API integration."""

import logging
from typing import Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..config import settings
from .accessor import AccessorError
from .models import GridRange, SheetBounds
from .notation import parse_cell_notation, split_sheet_prefix

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class GoogleSheetsClient:
    """Client for interacting with Google Sheets API."""

    def __init__(self):
        self._service = None
        self._credentials = None

    def _get_credentials(self) -> Credentials:
        """Get or refresh OAuth2 credentials."""
        creds = None

        if settings.google_token_path.exists():
            creds = Credentials.from_authorized_user_file(str(settings.google_token_path), SCOPES)

        if not creds or not creds.valid:
            if creds and creds.expired and creds.refresh_token:
                creds.refresh(Request())
            else:
                if not settings.google_credentials_path.exists():
                    raise FileNotFoundError(
                        f"Google credentials file not found at {settings.google_credentials_path}. "
                        "Please download it from Google Cloud Console."
                    )
                flow = InstalledAppFlow.from_client_secrets_file(
                    str(settings.google_credentials_path), SCOPES
                )
                creds = flow.run_local_server(port=0)

            # Save credentials for next run
            settings.google_token_path.parent.mkdir(parents=True, exist_ok=True)
            with open(settings.google_token_path, "w") as token:
                token.write(creds.to_json())

        return creds

    @property
    def service(self):
        """Get or create the Sheets API service."""
        if self._service is None:
            self._credentials = self._get_credentials()
            self._service = build("sheets", "v4", credentials=self._credentials)
        return self._service

    def get_sheet_properties(self, spreadsheet_id: str, sheet_name: str) -> dict:
        """Get the grid properties of one sheet in a spreadsheet."""
        try:
            result = self.service.spreadsheets().get(spreadsheetId=spreadsheet_id).execute()
        except HttpError as e:
            raise AccessorError(f"Failed to get spreadsheet info: {e}")

        for sheet in result.get("sheets", []):
            if sheet["properties"]["title"] == sheet_name:
                grid = sheet["properties"].get("gridProperties", {})
                return {
                    "id": sheet["properties"]["sheetId"],
                    "title": sheet_name,
                    "row_count": grid.get("rowCount", 0),
                    "col_count": grid.get("columnCount", 0),
                }
        raise AccessorError(f"Sheet '{sheet_name}' not found in spreadsheet {spreadsheet_id}")

    def read_formulas(self, spreadsheet_id: str, range_notation: str) -> list[list[str]]:
        """Read a range with formulas rendered as their source text."""
        try:
            result = (
                self.service.spreadsheets()
                .values()
                .get(
                    spreadsheetId=spreadsheet_id,
                    range=range_notation,
                    valueRenderOption="FORMULA",
                )
                .execute()
            )
        except HttpError as e:
            raise AccessorError(f"Failed to read range: {e}")
        return result.get("values", [])

    def write_formula(self, spreadsheet_id: str, range_notation: str, formula: str) -> int:
        """Write a single formula; returns the number of updated cells."""
        try:
            result = (
                self.service.spreadsheets()
                .values()
                .update(
                    spreadsheetId=spreadsheet_id,
                    range=range_notation,
                    valueInputOption="USER_ENTERED",
                    body={"values": [[formula]]},
                )
                .execute()
            )
        except HttpError as e:
            raise AccessorError(f"Failed to write formula: {e}")
        return result.get("updatedCells", 0)


class GoogleSheetsAccessor:
    """DocumentAccessor bound to one sheet of a Google spreadsheet."""

    def __init__(
        self,
        spreadsheet_id: str,
        sheet_name: str = "Sheet1",
        client: Optional[GoogleSheetsClient] = None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self.client = client or GoogleSheetsClient()

    def _qualify(self, cell_ref: str) -> str:
        sheet, cells = split_sheet_prefix(cell_ref)
        return f"'{sheet or self.sheet_name}'!{cells}"

    def get_formula(self, cell_ref: str) -> Optional[str]:
        """Return the formula in a cell, or in the top-left cell of a range."""
        _, cells = split_sheet_prefix(cell_ref)
        parse_cell_notation(cells.split(":")[0])
        anchor = cell_ref.split(":")[0]
        values = self.client.read_formulas(self.spreadsheet_id, self._qualify(anchor))
        if not values or not values[0]:
            return None
        value = values[0][0]
        if isinstance(value, str) and value.startswith("="):
            return value
        return None

    def get_formula_grid(self, grid: GridRange) -> list[list[str]]:
        """Return every cell of the range, padded to the full rectangle."""
        if grid.cell_count == 0:
            return []
        values = self.client.read_formulas(self.spreadsheet_id, self._qualify(grid.to_a1()))
        rows = []
        for r in range(grid.height):
            row_values = values[r] if r < len(values) else []
            rows.append(
                [
                    str(row_values[c]) if c < len(row_values) else ""
                    for c in range(grid.width)
                ]
            )
        return rows

    def get_bounds(self) -> SheetBounds:
        props = self.client.get_sheet_properties(self.spreadsheet_id, self.sheet_name)
        logger.debug(
            f"Sheet '{self.sheet_name}' dimensions: {props['row_count']}x{props['col_count']}"
        )
        return SheetBounds(max_rows=props["row_count"], max_cols=props["col_count"])

    def write_formula(self, cell_ref: str, formula: str) -> None:
        _, cells = split_sheet_prefix(cell_ref)
        parse_cell_notation(cells)
        self.client.write_formula(self.spreadsheet_id, self._qualify(cell_ref), formula)
        logger.info(f"Wrote formula to {self._qualify(cell_ref)} in {self.spreadsheet_id}")
