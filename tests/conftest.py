"""
Pytest configuration and fixtures for whitelist import tests.
"""

from unittest.mock import MagicMock

import pytest

from config.settings import Settings
from whitelist_import.load import KYCService

ADDRESS_A = "0x" + "a" * 40
ADDRESS_B = "0x" + "b" * 40
ADDRESS_C = "0x" + "c" * 40


def make_row(address=None, referral=None, status=None, width=12):
    """Build a sheet row with values at the mapped columns."""
    row = [f"col{i}" for i in range(width)]
    if width > 5:
        row[5] = address
    if width > 10:
        row[10] = referral
    if width > 11:
        row[11] = status
    return row


@pytest.fixture
def settings(monkeypatch):
    """Settings with required values supplied."""
    monkeypatch.setattr(Settings, "SPREADSHEET_ID", "sheet-123")
    monkeypatch.setattr(Settings, "GOOGLE_SHEETS_CLIENT_SECRET", '{"type": "service_account"}')
    monkeypatch.setattr(Settings, "DB_USER", "whitelist")
    monkeypatch.setattr(Settings, "DB_PASSWORD", "secret")
    return Settings()


@pytest.fixture
def sample_rows():
    """Grid as returned by the sheet, including a duplicate and short rows."""
    return [
        make_row(ADDRESS_A, "dke02sx6" + ADDRESS_B, "APPROVED"),
        make_row(ADDRESS_A, "dke02sx6" + ADDRESS_B, "APPROVED"),
        make_row(ADDRESS_B, None, "PENDING"),
        make_row(ADDRESS_C, width=8),
        ["only", "three", "cells"],
    ]


@pytest.fixture
def extractor(sample_rows):
    mock = MagicMock()
    mock.fetch_range.return_value = sample_rows
    return mock


@pytest.fixture
def kyc_service():
    return MagicMock(spec=KYCService)
