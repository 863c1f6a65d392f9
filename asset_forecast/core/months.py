"""
Month-key handling.

A month key is an English month abbreviation followed by a 2-digit year
('May26', 'Sept25', 'June26'). It is also the suffix of the per-month
sheet names ('FC-May26', 'CS-May26').
"""

import re
from types import MappingProxyType
from typing import Any, Optional
import logging

import pandas as pd

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = MappingProxyType({
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
})

_MONTH_KEY_PATTERN = re.compile(r"^\s*([A-Za-z]{3,9})\s*(\d{2})\s*$")
_ISO_PREFIX_PATTERN = re.compile(r"^\s*(\d{4})-(\d{1,2})")


def parse_month_key(month_key: str) -> Optional[tuple[int, int]]:
    """
    Parse a month key into (year, month).

    Parameters
    ----------
    month_key : str
        Key such as 'May26'. The first three letters select the month,
        so 'Sept' and 'June' are accepted. Years below 50 are 20xx,
        otherwise 19xx.

    Returns
    -------
    Optional[tuple[int, int]]
        (year, month) or None when the key cannot be read.
    """
    if not isinstance(month_key, str):
        return None
    match = _MONTH_KEY_PATTERN.match(month_key)
    if not match:
        return None

    month = MONTH_ABBREVIATIONS.get(match.group(1)[:3].lower())
    if month is None:
        return None

    yy = int(match.group(2))
    year = 2000 + yy if yy < 50 else 1900 + yy
    return year, month


def month_label(month_key: str) -> str:
    """Format a month key for display: 'May26' -> 'May-26'."""
    if parse_month_key(month_key) is None:
        return month_key
    match = _MONTH_KEY_PATTERN.match(month_key)
    return f"{match.group(1)}-{match.group(2)}"


def last_12_month_keys(year: int, month: int, count: int = 12) -> list[tuple[int, int]]:
    """
    Return the (year, month) pairs of the rolling window ending at a month.

    The target month comes first and the list walks backwards, wrapping
    the year at January.

    >>> last_12_month_keys(2026, 5)[-1]
    (2025, 6)
    """
    window = []
    y, m = year, month
    for _ in range(count):
        window.append((y, m))
        m -= 1
        if m == 0:
            m = 12
            y -= 1
    return window


def resolve_month_date(value: Any) -> Optional[tuple[int, int]]:
    """
    Resolve a row's month_date into (year, month).

    ISO-prefixed strings ('2026-05', '2026-05-01T00:00') are read
    directly; anything else goes through pandas date parsing.
    """
    if value is None:
        return None
    if hasattr(value, "year") and hasattr(value, "month"):
        return int(value.year), int(value.month)

    raw = str(value).strip()
    if not raw:
        return None

    match = _ISO_PREFIX_PATTERN.match(raw)
    if match:
        month = int(match.group(2))
        if 1 <= month <= 12:
            return int(match.group(1)), month

    parsed = pd.to_datetime(raw, errors="coerce")
    if pd.isna(parsed):
        return None
    return int(parsed.year), int(parsed.month)


def month_key_to_batch_key(month_key: str, default: str = "2026-01") -> str:
    """
    Map a month key to a 'YYYY-MM' batch key ('May26' -> '2026-05').

    Unreadable keys map to `default`.
    """
    parsed = parse_month_key(month_key)
    if parsed is None:
        logger.warning(f"Unreadable month key '{month_key}', using batch key {default}")
        return default
    year, month = parsed
    return f"{year:04d}-{month:02d}"
