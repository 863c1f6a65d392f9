"""
Coercion helpers for spreadsheet-shaped values.

Cells coming out of a workbook can hold numbers, currency strings,
percentages, blanks or NaN. These helpers turn them into plain Python
numbers and strings without ever raising.
"""

import math
import re
from typing import Any

import numpy as np
import pandas as pd

_STRIP_PATTERN = re.compile(r"[€£$,%\s]")


def _is_missing(v: Any) -> bool:
    """Return True for None and scalar NaN/NaT/NA values."""
    if v is None:
        return True
    try:
        return bool(pd.isna(v))
    except (TypeError, ValueError):
        # pd.isna on containers returns arrays; those are not "missing"
        return False


def num(v: Any) -> float:
    """
    Parse a spreadsheet cell into a number.

    Parameters
    ----------
    v : Any
        Raw cell value.

    Returns
    -------
    float
        The value itself when it is already a finite number, the parsed
        value of a currency/percentage string, or 0 when nothing usable
        is found.

    Examples
    --------
    >>> num("€1,234.50")
    1234.5
    >>> num("25%")
    25.0
    >>> num(None)
    0
    """
    if _is_missing(v) or (isinstance(v, str) and v.strip() == ""):
        return 0
    if isinstance(v, (bool, np.bool_)):
        return int(v)
    if isinstance(v, (int, float, np.integer, np.floating)):
        value = v.item() if isinstance(v, np.generic) else v
        return value if math.isfinite(value) else 0

    cleaned = _STRIP_PATTERN.sub("", str(v))
    try:
        parsed = float(cleaned)
    except ValueError:
        return 0
    return parsed if math.isfinite(parsed) else 0


def text(v: Any) -> str:
    """Return the trimmed string form of a cell, or '' for blanks."""
    if _is_missing(v):
        return ""
    return str(v).strip()


def round_half_away(x: float, digits: int = 0) -> float:
    """
    Round half away from zero, like a spreadsheet ROUND().

    Python's round() and numpy's np.round use banker's rounding, which
    breaks parity with workbook values such as ROUND(0.5) = 1.

    Parameters
    ----------
    x : float
        Value to round.
    digits : int
        Number of decimal places.

    Returns
    -------
    float
        Rounded value. Use round_count() when an integer is needed.
    """
    factor = 10.0 ** digits
    scaled = abs(float(x)) * factor
    # Nudge values that sit a float-epsilon below .5 (e.g. 1.005 * 100)
    rounded = np.floor(scaled + 0.5 + 1e-9)
    return float(np.sign(x) * rounded / factor)


def round_count(x: float) -> int:
    """Round half away from zero to a non-negative integer count; non-finite values give 0."""
    rounded = round_half_away(x)
    if not math.isfinite(rounded):
        return 0
    return max(0, int(rounded))


def date_text(v: Any) -> str:
    """
    Return a cell as a date-like string.

    Date and datetime cells become ISO dates ('2026-05-01'); anything
    else is returned as trimmed text.
    """
    if _is_missing(v):
        return ""
    if hasattr(v, "strftime") and hasattr(v, "year"):
        return v.strftime("%Y-%m-%d")
    return text(v)


def normalize_pct(value: Any, unit: str = "auto") -> float:
    """
    Convert a percentage to a 0-1 fraction.

    Parameters
    ----------
    value : Any
        Raw percentage (coerced with num()).
    unit : str
        'fraction' (already 0-1), 'percent' (0-100) or 'auto', where a
        value greater than 1 is read as 0-100.

    Returns
    -------
    float
        Fraction in 0-1 for sensible inputs.
    """
    pct = float(num(value))
    if unit == "percent":
        return pct / 100
    if unit == "fraction":
        return pct
    return pct / 100 if pct > 1 else pct
