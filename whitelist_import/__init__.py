"""
Whitelist KYC Import Package

Periodically imports whitelist/KYC registrations from Google Sheets and
hands them to the KYC store.

Modules:
- extract: Spreadsheet range fetch from Google Sheets
- referral: Referral code cleanup rules
- transform: Row-to-record mapping and deduplication
- load: KYC storage collaborator (PostgreSQL)
- history: Run history and health status
- run_import: Job orchestration and scheduling
"""

__version__ = "1.0.0"
