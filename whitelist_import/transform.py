"""
Row-to-Record Transformation

Maps raw spreadsheet rows onto KYC entries by fixed column position and
deduplicates them by value. Rows are never rejected here; malformed rows
yield entries with missing fields and are left for the KYC store to judge.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from whitelist_import.models import KYCEntry, RowShape
from whitelist_import.referral import clean_referral_code, is_blank

logger = logging.getLogger(__name__)

# Column positions in the A:L range (A = 0)
COLUMN_LAYOUT: Dict[str, int] = {
    "address": 5,       # F
    "referred_by": 10,  # K
    "status": 11,       # L
}

EXPECTED_ROW_WIDTH = max(COLUMN_LAYOUT.values()) + 1


def get_row_value(row: Sequence[Any], index: int) -> Optional[str]:
    """
    Return the cell at ``index`` as text.

    Args:
        row: Raw row as returned by the sheet (may be short)
        index: Zero-based column position

    Returns:
        Cell text, or None if the row is too short or the cell is empty
    """
    if index < len(row) and row[index] is not None:
        return str(row[index])
    return None


def classify_row(row: Sequence[Any]) -> RowShape:
    """
    Classify a row as well-formed or degraded.

    A well-formed row reaches the status column and has an address.
    """
    if len(row) < EXPECTED_ROW_WIDTH:
        return RowShape.DEGRADED
    if is_blank(row[COLUMN_LAYOUT["address"]]):
        return RowShape.DEGRADED
    return RowShape.WELL_FORMED


def create_kyc_entry(row: Sequence[Any]) -> KYCEntry:
    """Map one raw row onto a KYCEntry."""
    address = get_row_value(row, COLUMN_LAYOUT["address"])
    referred_by = clean_referral_code(get_row_value(row, COLUMN_LAYOUT["referred_by"]))

    return KYCEntry(
        address=address,
        referred_by=referred_by,
        referral_key=address,
        status=get_row_value(row, COLUMN_LAYOUT["status"]),
    )


class KYCEntryTransformer:
    """
    Transforms a fetched grid into a deduplicated set of KYC entries.

    Operations:
    - Row shape classification
    - Offset-based field extraction
    - Referral code cleanup
    - Value-equality deduplication
    """

    def __init__(self):
        """Initialize transformer metrics."""
        self.metrics: Dict[str, int] = {
            "total_rows": 0,
            "degraded_rows": 0,
            "unique_entries": 0,
            "duplicates_removed": 0,
        }

    def transform(self, rows: Iterable[Sequence[Any]]) -> Tuple[Set[KYCEntry], Dict[str, int]]:
        """
        Map every row and collapse identical entries.

        Args:
            rows: Grid of raw cell values

        Returns:
            Tuple of (entries, metrics)
        """
        entries: Set[KYCEntry] = set()
        total = 0
        degraded: List[int] = []

        for row_number, row in enumerate(rows, 1):
            total += 1
            if classify_row(row) is RowShape.DEGRADED:
                degraded.append(row_number)
            entries.add(create_kyc_entry(row))

        self.metrics["total_rows"] = total
        self.metrics["degraded_rows"] = len(degraded)
        self.metrics["unique_entries"] = len(entries)
        self.metrics["duplicates_removed"] = total - len(entries)

        if degraded:
            logger.warning(f"{len(degraded)} degraded rows passed through: {degraded[:20]}")

        logger.info(
            f"Mapped {total} rows into {len(entries)} entries "
            f"({self.metrics['duplicates_removed']} duplicates removed)"
        )

        return entries, self.metrics


def map_rows(rows: Iterable[Sequence[Any]]) -> Tuple[Set[KYCEntry], Dict[str, int]]:
    """
    Convenience function to transform a fetched grid.

    Args:
        rows: Grid of raw cell values

    Returns:
        Tuple of (entries, metrics)
    """
    transformer = KYCEntryTransformer()
    return transformer.transform(rows)
