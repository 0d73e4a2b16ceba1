"""
KYC Data Model

Value objects produced by the import job and the read model served to
whitelist consumers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class KYCEntry:
    """
    One whitelist registration as read from the sheet.

    Frozen so that entries compare and hash on all four fields; two rows
    producing the same values collapse into one entry in a set.
    """
    address: Optional[str]
    referred_by: Optional[str]
    referral_key: Optional[str]
    status: Optional[str]


class RowShape(Enum):
    """Shape classification of a raw sheet row."""
    WELL_FORMED = "well_formed"
    DEGRADED = "degraded"


class KYCStatus(Enum):
    """Verification status exposed to whitelist consumers."""
    APPROVED = "APPROVED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_raw(cls, value: Any) -> "KYCStatus":
        """
        Parse a status code, tolerating case and surrounding whitespace.

        Args:
            value: Raw status (enum member, string or None)

        Returns:
            Matching KYCStatus, UNKNOWN when unrecognized
        """
        if isinstance(value, KYCStatus):
            return value
        if value is None:
            return cls.UNKNOWN
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.UNKNOWN


RESULT_SCHEMA_VERSION = 2


@dataclass
class KYCResult:
    """
    KYC lookup result for a single address (schema version 2).

    Version 1 carried an enumerated status and no referral; a parallel
    shape carried a free-text status plus the referral. Version 2 keeps
    the enumerated status and the referral, and parks unrecognized status
    text in ``message``.
    """
    address: str
    referral_count: int = 0
    status: KYCStatus = KYCStatus.UNKNOWN
    referral: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KYCResult":
        """
        Build a result from either historical payload shape.

        Args:
            data: Mapping with camelCase or snake_case keys

        Returns:
            Normalized KYCResult
        """
        raw_status = data.get("status")
        status = KYCStatus.from_raw(raw_status)
        message = data.get("message")

        if status is KYCStatus.UNKNOWN and raw_status and not message:
            message = str(raw_status)

        referral_count = data.get("referral_count", data.get("referralCount")) or 0

        return cls(
            address=data["address"],
            referral_count=int(referral_count),
            status=status,
            referral=data.get("referral"),
            message=message,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the versioned payload shape."""
        return {
            "schema_version": RESULT_SCHEMA_VERSION,
            "address": self.address,
            "referral_count": self.referral_count,
            "status": self.status.value,
            "referral": self.referral,
            "message": self.message,
        }
