"""
Parsing of the 'Use Case Data' sheet into normalized rows.

The sheet arrives as a 2-D grid of cell values (the workbook reader is
an external collaborator). Row 2 holds the headers and data starts on
row 3.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence
import logging
import math
import re

import pandas as pd

from ..config.schema import UseCaseRow
from .coercion import num, text, date_text
from .registry import FC_SHEET_PREFIX

logger = logging.getLogger(__name__)

HEADER_ROW_INDEX = 1
DATA_START_INDEX = 2

YEAR_RANGE = (2000, 2100)

# (field, header label, fallback column index)
HEADER_COLUMNS = (
    ("year_num", "Year", 1),
    ("month_date", "Month", 2),
    ("use_case", "UseCase", 3),
    ("graph_spent", "Graph Spent", 4),
    ("graph_revenue", "Graph Revenue", 5),
    ("roas", "ROAS", 6),
    ("results_spent", "Results Spent", 7),
    ("spent_pct_total", "Spent % total", 8),
    ("forecasted_spent", "Forecasted Spent", 9),
    ("forecasted_revenue", "Forecasted Revenue", 12),
)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def _header_key(value: Any) -> str:
    return _NON_ALNUM.sub("", text(value).lower())


@dataclass
class ParseResult:
    """Rows parsed from the workbook plus the sheet/month keys it contains."""
    rows: list[UseCaseRow] = field(default_factory=list)
    sheet_names: list[str] = field(default_factory=list)
    month_keys: list[str] = field(default_factory=list)


def extract_month_keys(sheet_names: Sequence[str]) -> list[str]:
    """
    Extract month keys from FC sheet names ('FC-May26' -> 'May26').

    Returns
    -------
    list[str]
        Deduplicated, sorted month keys.
    """
    keys = set()
    for name in sheet_names or ():
        name = text(name)
        if name.startswith(FC_SHEET_PREFIX):
            key = name[len(FC_SHEET_PREFIX):]
            if key:
                keys.add(key)
    return sorted(keys)


def resolve_columns(header_row: Sequence[Any]) -> dict[str, int]:
    """
    Map each row field to a column index.

    Headers are matched by a case-insensitive prefix comparison that
    ignores punctuation ('Graph. Spent' matches 'Graph Spent',
    'Spent % total (per year)' matches 'Spent % total'). A column claimed
    by one field is not reused by another. Labels that are not found
    fall back to the sheet's fixed layout.
    """
    header_keys = [_header_key(c) for c in header_row or ()]
    claimed: set[int] = set()
    columns: dict[str, int] = {}

    for field_name, label, fallback in HEADER_COLUMNS:
        wanted = _header_key(label)
        index: Optional[int] = None
        for i, key in enumerate(header_keys):
            if i in claimed or not key:
                continue
            if key.startswith(wanted) or wanted.startswith(key):
                index = i
                break
        if index is None:
            logger.debug(f"Header '{label}' not found, using column {fallback}")
            index = fallback
        claimed.add(index)
        columns[field_name] = index

    return columns


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if 0 <= index < len(row) else None


def _parse_year(value: Any) -> int:
    if isinstance(value, float) and math.isfinite(value):
        return int(value // 1)
    return int(num(value))


def parse_row(row: Sequence[Any], columns: dict[str, int]) -> Optional[UseCaseRow]:
    """
    Normalize one data row, or return None when it should be skipped.

    Rows without a use case, or with a year outside 2000-2100, are
    skipped. Graph spend falls back to results spend when zero, and ROAS
    is derived from revenue/spend when the sheet leaves it at zero.
    """
    use_case = text(_cell(row, columns["use_case"]))
    if not use_case:
        return None

    year_num = _parse_year(_cell(row, columns["year_num"]))
    if not YEAR_RANGE[0] <= year_num <= YEAR_RANGE[1]:
        return None

    results_spent = num(_cell(row, columns["results_spent"]))
    graph_spent = num(_cell(row, columns["graph_spent"])) or results_spent
    graph_revenue = num(_cell(row, columns["graph_revenue"]))
    roas = num(_cell(row, columns["roas"]))
    if not roas:
        roas = graph_revenue / graph_spent if graph_spent else 0

    raw_revenue = _cell(row, columns["forecasted_revenue"])
    forecasted_revenue = None if text(raw_revenue) == "" else num(raw_revenue)

    return UseCaseRow(
        year_num=year_num,
        month_date=date_text(_cell(row, columns["month_date"])),
        use_case=use_case,
        graph_spent=graph_spent,
        graph_revenue=graph_revenue,
        roas=roas,
        results_spent=results_spent,
        spent_pct_total=num(_cell(row, columns["spent_pct_total"])),
        forecasted_spent=num(_cell(row, columns["forecasted_spent"])),
        forecasted_revenue=forecasted_revenue,
    )


def parse_use_case_sheet(
    cells: Optional[Sequence[Sequence[Any]]],
    sheet_names: Sequence[str] = (),
) -> ParseResult:
    """
    Parse the 'Use Case Data' sheet.

    Parameters
    ----------
    cells : Sequence[Sequence[Any]], optional
        Sheet cells as rows of values. None or an empty grid yields no
        rows (a workbook without the sheet).
    sheet_names : Sequence[str]
        All sheet names of the workbook, used to list month keys.

    Returns
    -------
    ParseResult
        Normalized rows, sheet names and month keys.
    """
    sheet_names = [text(n) for n in sheet_names or ()]
    result = ParseResult(sheet_names=sheet_names, month_keys=extract_month_keys(sheet_names))

    if not cells or len(cells) <= HEADER_ROW_INDEX:
        logger.warning("Use Case Data sheet is missing or has no header row")
        return result

    columns = resolve_columns(cells[HEADER_ROW_INDEX])
    skipped = 0
    for raw in cells[DATA_START_INDEX:]:
        row = parse_row(list(raw or ()), columns)
        if row is None:
            skipped += 1
            continue
        result.rows.append(row)

    logger.info(
        f"Parsed {len(result.rows)} use-case rows ({skipped} skipped), "
        f"{len(result.month_keys)} month keys"
    )
    return result


def rows_to_frame(rows: Sequence[UseCaseRow]) -> pd.DataFrame:
    """
    Build a DataFrame of use-case rows.

    Columns follow the UseCaseRow fields plus 'total_spend'
    (results + forecasted spend). An empty input gives an empty frame
    with the same columns.
    """
    columns = list(UseCaseRow.model_fields) + ["total_spend"]
    if not rows:
        return pd.DataFrame(columns=columns)

    records = []
    for row in rows:
        record = row.model_dump()
        record["total_spend"] = row.total_spend
        records.append(record)
    return pd.DataFrame.from_records(records, columns=columns)
