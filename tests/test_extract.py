"""
Tests for Google Sheets range extraction.
"""

from unittest.mock import MagicMock, patch

import pytest

from whitelist_import.extract import GoogleSheetsExtractor

CLIENT_SECRET = '{"type": "service_account", "client_email": "importer@example.iam.gserviceaccount.com"}'


@pytest.fixture
def gspread_client():
    with patch("whitelist_import.extract.Credentials") as credentials, \
            patch("whitelist_import.extract.gspread.authorize") as authorize:
        client = MagicMock()
        authorize.return_value = client
        client.credentials_factory = credentials
        yield client


class TestGoogleSheetsExtractor:

    def test_authenticates_once_read_only(self, gspread_client):
        extractor = GoogleSheetsExtractor(CLIENT_SECRET)

        factory = gspread_client.credentials_factory.from_service_account_info
        factory.assert_called_once()
        info = factory.call_args[0][0]
        assert info["type"] == "service_account"
        assert factory.call_args[1]["scopes"] == [
            "https://www.googleapis.com/auth/spreadsheets.readonly"
        ]

        extractor.fetch_range("sheet-123")
        extractor.fetch_range("sheet-123")
        assert factory.call_count == 1

    def test_invalid_secret(self, gspread_client):
        with pytest.raises(ValueError):
            GoogleSheetsExtractor("not json")

    def test_fetch_range(self, gspread_client):
        rows = [["a", "b"], ["c"]]
        spreadsheet = gspread_client.open_by_key.return_value
        spreadsheet.values_get.return_value = {"range": "Sheet1!A3:L4", "values": rows}

        extractor = GoogleSheetsExtractor(CLIENT_SECRET)

        assert extractor.fetch_range("sheet-123", "A3:L") == rows
        gspread_client.open_by_key.assert_called_with("sheet-123")
        spreadsheet.values_get.assert_called_with("A3:L")

    def test_fetch_empty_range(self, gspread_client):
        gspread_client.open_by_key.return_value.values_get.return_value = {"range": "Sheet1!A3:L"}

        assert GoogleSheetsExtractor(CLIENT_SECRET).fetch_range("sheet-123") == []

    def test_fetch_failure_propagates(self, gspread_client):
        gspread_client.open_by_key.side_effect = ConnectionError("reset by peer")

        with pytest.raises(ConnectionError):
            GoogleSheetsExtractor(CLIENT_SECRET).fetch_range("sheet-123")

    def test_close_releases_session(self, gspread_client):
        with GoogleSheetsExtractor(CLIENT_SECRET) as extractor:
            pass

        gspread_client.http_client.session.close.assert_called_once()
        with pytest.raises(RuntimeError):
            extractor.fetch_range("sheet-123")
