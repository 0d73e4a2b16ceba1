"""
Configuration Management

Loads environment variables and provides settings for the import job.
Uses python-dotenv for local development and environment variables for production.
"""

import os
from dotenv import load_dotenv

# Load .env file for local development
load_dotenv()


class Settings:
    """
    Application settings loaded from environment variables.

    Ensures no hardcoded credentials in code.
    """

    # Google Sheets Configuration
    SPREADSHEET_ID: str = os.getenv("SPREADSHEET_ID")
    # Service account key, raw JSON text
    GOOGLE_SHEETS_CLIENT_SECRET: str = os.getenv("GOOGLE_SHEETS_CLIENT_SECRET")

    # KYC Store Configuration
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
    DB_NAME: str = os.getenv("DB_NAME", "whitelist")
    DB_USER: str = os.getenv("DB_USER")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD")

    # Import Job (fixed)
    SHEET_RANGE: str = "A3:L"
    IMPORT_INTERVAL_SECONDS: int = 300

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "logs/whitelist_import.log")

    def __init__(self):
        """Validate required settings on initialization."""
        self._validate_settings()

    def _validate_settings(self) -> None:
        """
        Validate that all required settings are provided.

        Raises:
            ValueError: If required settings are missing
        """
        required_fields = ["SPREADSHEET_ID", "GOOGLE_SHEETS_CLIENT_SECRET", "DB_USER", "DB_PASSWORD"]

        missing_fields = [
            field for field in required_fields
            if not getattr(self, field, None)
        ]

        if missing_fields:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing_fields)}. "
                f"Please check your .env file."
            )

    def __repr__(self) -> str:
        """Return string representation (excluding sensitive data)."""
        return (
            f"Settings("
            f"SPREADSHEET_ID={self.SPREADSHEET_ID}, "
            f"SHEET_RANGE={self.SHEET_RANGE}, "
            f"DB_HOST={self.DB_HOST}, "
            f"DB_NAME={self.DB_NAME}, "
            f"IMPORT_INTERVAL_SECONDS={self.IMPORT_INTERVAL_SECONDS}"
            f")"
        )
