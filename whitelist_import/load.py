"""
KYC Store

Defines the storage collaborator the import job submits to, and its
PostgreSQL implementation. Inserts are upserts keyed by address, so the
full range can be re-submitted every cycle.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Set, Tuple

from db.connection import DatabaseConnection
from whitelist_import.models import KYCEntry, KYCResult

logger = logging.getLogger(__name__)


class KYCService(ABC):
    """Storage collaborator for KYC entries."""

    @abstractmethod
    def insert(self, entries: Set[KYCEntry]) -> int:
        """
        Store a batch of entries.

        Returns:
            Number of entries written
        """
        pass

    @abstractmethod
    def get_result(self, address: str) -> Optional[KYCResult]:
        """Look up the KYC result for an address."""
        pass


class PostgresKYCService(KYCService):
    """
    KYC store backed by the ``kyc_entries`` table.

    Uses ON CONFLICT (address) DO UPDATE so repeated imports of the same
    rows are idempotent and status changes in the sheet are picked up.
    """

    UPSERT_QUERY = """
        INSERT INTO kyc_entries (address, referred_by, referral_key, status, updated_at)
        VALUES (%s, %s, %s, %s, NOW())
        ON CONFLICT (address) DO UPDATE
        SET referred_by = EXCLUDED.referred_by,
            referral_key = EXCLUDED.referral_key,
            status = EXCLUDED.status,
            updated_at = NOW();
    """

    def __init__(self, batch_size: int = 500):
        self.batch_size = batch_size

    def insert(self, entries: Set[KYCEntry]) -> int:
        """
        Upsert entries into the KYC table.

        Entries without an address cannot be keyed and are skipped. When
        several entries share an address, one is chosen by
        resolve_address_conflicts().

        Args:
            entries: Deduplicated entries from one import run

        Returns:
            Number of entries upserted
        """
        if not entries:
            logger.info("No entries to store")
            return 0

        keyed = [entry for entry in entries if entry.address]
        skipped = len(entries) - len(keyed)
        if skipped:
            logger.warning(f"Skipping {skipped} entries without an address")

        keyed = resolve_address_conflicts(keyed)

        logger.info(f"Storing {len(keyed)} KYC entries")

        written = 0
        try:
            for batch in _batches(keyed, self.batch_size):
                data = [
                    (entry.address, entry.referred_by, entry.referral_key, entry.status)
                    for entry in batch
                ]
                written += DatabaseConnection.execute_many(self.UPSERT_QUERY, data)
        except Exception as e:
            logger.error(f"Failed to store KYC entries: {e}")
            raise

        logger.info(f"Stored {written} KYC entries")
        return written

    def get_result(self, address: str) -> Optional[KYCResult]:
        """
        Look up an address and count the registrations it referred.

        Args:
            address: Wallet address

        Returns:
            KYCResult, or None if the address is not registered
        """
        query = """
            SELECT
                e.address,
                e.status,
                e.referred_by,
                e.message,
                (SELECT COUNT(*) FROM kyc_entries r WHERE r.referred_by = e.referral_key) AS referral_count
            FROM kyc_entries e
            WHERE LOWER(e.address) = LOWER(%s);
        """

        rows = DatabaseConnection.execute_query(query, (address,))
        if not rows:
            return None

        row = rows[0]
        return KYCResult.from_dict(
            {
                "address": row[0],
                "status": row[1],
                "referral": row[2],
                "message": row[3],
                "referral_count": row[4],
            }
        )


def _batches(items: List[KYCEntry], size: int) -> Iterable[List[KYCEntry]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


def _conflict_key(entry: KYCEntry) -> Tuple[Tuple[bool, str], ...]:
    return tuple(
        (value is not None, value or "")
        for value in (entry.address, entry.status, entry.referred_by, entry.referral_key)
    )


def resolve_address_conflicts(entries: Iterable[KYCEntry]) -> List[KYCEntry]:
    """
    Keep one entry per address.

    Entries are ordered by (address, status, referred_by, referral_key),
    absent values first, and the last entry for each address wins. The
    result does not depend on set iteration order.

    Args:
        entries: Entries with an address

    Returns:
        Entries sorted by address, one per address
    """
    resolved: Dict[str, KYCEntry] = {}
    conflicts = 0

    for entry in sorted(entries, key=_conflict_key):
        if entry.address in resolved:
            conflicts += 1
        resolved[entry.address] = entry

    if conflicts:
        logger.warning(f"Resolved {conflicts} conflicting entries sharing an address")

    return list(resolved.values())
