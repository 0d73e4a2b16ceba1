"""
Google Sheets Range Extraction

Fetches a raw cell range from the registration spreadsheet.
Authenticates once with a service account supplied as raw JSON.
"""

import json
import logging
from typing import Any, List, Optional

import gspread
from google.oauth2.service_account import Credentials

logger = logging.getLogger(__name__)


class GoogleSheetsExtractor:
    """
    Extracts raw cell grids from Google Sheets.

    The gspread client is built once and reused for every fetch; its
    authorized session refreshes the access token when it expires.
    """

    SCOPES = [
        "https://www.googleapis.com/auth/spreadsheets.readonly",
    ]

    def __init__(self, client_secret: str):
        """
        Initialize Google Sheets extractor.

        Args:
            client_secret: Service account key as raw JSON text

        Raises:
            ValueError: If the key is not valid JSON or not a service account key
        """
        self.client: Optional[gspread.Client] = None
        self._authenticate(client_secret)

    def _authenticate(self, client_secret: str) -> None:
        """
        Authenticate with Google Sheets API using service account info.

        Raises:
            ValueError: If the credential payload cannot be parsed
        """
        try:
            info = json.loads(client_secret)
            credentials = Credentials.from_service_account_info(info, scopes=self.SCOPES)
            self.client = gspread.authorize(credentials)
            logger.info("Successfully authenticated with Google Sheets API")
        except json.JSONDecodeError as e:
            logger.error(f"Google Sheets client secret is not valid JSON: {e}")
            raise ValueError("Google Sheets client secret is not valid JSON") from e
        except Exception as e:
            logger.error(f"Google Sheets authentication failed: {e}")
            raise

    def fetch_range(self, spreadsheet_id: str, cell_range: str = "A3:L") -> List[List[Any]]:
        """
        Fetch a cell range as a grid of values.

        Trailing empty cells are omitted by the API, so rows may be shorter
        than the range is wide.

        Args:
            spreadsheet_id: Google Sheet ID
            cell_range: A1 notation range (e.g., "A3:L")

        Returns:
            List of rows, each a list of cell values

        Raises:
            gspread.exceptions.SpreadsheetNotFound: If the sheet is not accessible
            gspread.exceptions.APIError: On any other API failure
        """
        if self.client is None:
            raise RuntimeError("Google Sheets client is closed")

        try:
            logger.info(f"Fetching range {cell_range} from spreadsheet {spreadsheet_id}")

            spreadsheet = self.client.open_by_key(spreadsheet_id)
            response = spreadsheet.values_get(cell_range)
            values = response.get("values", [])

            if not values:
                logger.warning(f"No data found in range {cell_range}")

            logger.info(f"Fetched {len(values)} rows from range {cell_range}")
            return values

        except gspread.exceptions.SpreadsheetNotFound:
            logger.error(f"Spreadsheet not found: {spreadsheet_id}")
            raise
        except gspread.exceptions.APIError as e:
            logger.error(f"Google Sheets API error for range {cell_range}: {e}")
            raise

    def close(self) -> None:
        """Release the underlying HTTP session."""
        if self.client is not None:
            self.client.http_client.session.close()
            self.client = None
            logger.info("Google Sheets client closed")

    def __enter__(self) -> "GoogleSheetsExtractor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
