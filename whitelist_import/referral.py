"""
Referral Code Cleanup

Referral codes in the registration sheet were pasted by hand and often
carry a tracking tag or trailing junk. The rules here turn such a cell
back into a bare referral code.
"""

from typing import Any, Callable, Optional, Tuple

# Longer tag first: "dke02sx6" contains "dke02sx"
REFERRAL_TAGS: Tuple[str, ...] = ("dke02sx6", "dke02sx")

# Length of a 0x-prefixed Ethereum address
REFERRAL_CODE_LENGTH = 42


def is_blank(value: Any) -> bool:
    """Return True for None, empty or whitespace-only values."""
    return value is None or not str(value).strip()


def strip_referral_tags(code: str) -> str:
    """Remove every occurrence of the known tracking tags."""
    for tag in REFERRAL_TAGS:
        code = code.replace(tag, "")
    return code


def truncate_referral_code(code: str) -> str:
    """Cut trailing junk beyond the length of an address."""
    if len(code) > REFERRAL_CODE_LENGTH:
        return code[:REFERRAL_CODE_LENGTH]
    return code


REFERRAL_CLEANUP_RULES: Tuple[Callable[[str], str], ...] = (
    strip_referral_tags,
    truncate_referral_code,
)


def clean_referral_code(raw: Any) -> Optional[str]:
    """
    Clean a raw referral cell.

    Args:
        raw: Cell value (string, number or None)

    Returns:
        Cleaned referral code, or None when the cell is blank or nothing
        is left after cleanup
    """
    if is_blank(raw):
        return None

    code = str(raw)
    for rule in REFERRAL_CLEANUP_RULES:
        code = rule(code)

    return code or None
