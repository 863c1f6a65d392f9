"""
Parity check of the engines against a workbook.

A fixed set of control cells on the 'Use Case Data', FC and CS sheets is
read from the workbook and compared with the value the engines produce
for the same month. The report is used as a regression check whenever
the engines or the workbook change.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence
import logging
import re

import numpy as np
import pandas as pd

from ..config.schema import EngineSettings
from ..core.coercion import text
from ..core.parser import parse_use_case_sheet
from ..core.registry import USE_CASE_DATA_SHEET, cs_sheet_name, fc_sheet_name
from ..forecasting.cs_engine import compute_cs_output
from ..forecasting.fc_engine import OverrideInput, compute_fc_output
from ..forecasting.results import CsOutput, FcOutput

logger = logging.getLogger(__name__)

NUMERIC_TOLERANCE = 1e-6

_A1_PATTERN = re.compile(r"^\s*([A-Za-z]+)(\d+)\s*$")

# A sheet is a grid of rows; grid[0][0] is cell A1
Grid = Sequence[Sequence[Any]]


# =============================================================================
# Control cells
# =============================================================================

@dataclass(frozen=True)
class ControlCell:
    """A workbook cell compared against the engine output."""
    sheet: str
    cell: str
    description: str
    formula_family: str = ""


USE_CASE_CONTROLS = (
    ControlCell(USE_CASE_DATA_SHEET, "E3", "Graph Spent (real or forecast)", "IFERROR(IF(H<>0,H,...),0)"),
    ControlCell(USE_CASE_DATA_SHEET, "G3", "ROAS", "F/E"),
    ControlCell(USE_CASE_DATA_SHEET, "I3", "Spent % total per use case/year", "H/SUMIFS(H,D,D,B,B)"),
)


def fc_controls(month_key: str) -> list[ControlCell]:
    """Control cells of the month's FC sheet."""
    sheet = fc_sheet_name(month_key)
    return [
        ControlCell(sheet, "B3", "Total Ads Needed", "numeric_or_formula"),
        ControlCell(sheet, "F3", "BAU Production Target", "ROUND(E3*$B$3,0)"),
        ControlCell(sheet, "E8", "TOTAL % Attribution", "SUM(E3:E7)"),
        ControlCell(sheet, "F8", "TOTAL Production Target", "SUM(F3:F7)"),
        ControlCell(sheet, "O11", "Static % Attribution", "asset type"),
        ControlCell(sheet, "P11", "Static Production Target", "ROUND(O11*$B$3,0)"),
    ]


def cs_controls(month_key: str) -> list[ControlCell]:
    """Control cells of the month's CS sheet."""
    sheet = cs_sheet_name(month_key)
    return [
        ControlCell(sheet, "B8", "EXP Production Target (UGC Excluded)", "ROUND(F4-(F4*O14),0)"),
        ControlCell(sheet, "B9", "BAU Production Target (UGC Excluded)", "ROUND(F3-(F3*O14),0)"),
        ControlCell(sheet, "D8", "EXP CS Sheet (sum of assignments)", "SUMIF(B23:B1020,A8,M23:M1020)"),
        ControlCell(sheet, "G3", "Studio N # Assets", "SUMIF(K23:K1020,F3,M23:M1020)"),
    ]


def parity_controls(month_key: str) -> list[ControlCell]:
    """All control cells for a month: Use Case Data, then FC, then CS."""
    return list(USE_CASE_CONTROLS) + fc_controls(month_key) + cs_controls(month_key)


# =============================================================================
# Cell access
# =============================================================================

def parse_a1(ref: str) -> tuple[int, int]:
    """
    Convert an A1 reference into 0-based (row, column) indices.

    >>> parse_a1("P11")
    (10, 15)

    Raises
    ------
    ValueError
        If the reference is not in A1 form.
    """
    match = _A1_PATTERN.match(ref or "")
    if not match:
        raise ValueError(f"Not an A1 cell reference: {ref!r}")

    col = 0
    for ch in match.group(1).upper():
        col = col * 26 + (ord(ch) - ord("A") + 1)
    return int(match.group(2)) - 1, col - 1


def _as_grid(sheet: Any) -> Optional[Grid]:
    if sheet is None:
        return None
    if isinstance(sheet, pd.DataFrame):
        # Read with header=None so that row 0 is sheet row 1
        return sheet.astype(object).where(sheet.notna(), None).values.tolist()
    return sheet


def read_cell(grid: Optional[Grid], ref: str) -> Any:
    """
    Read a cell by A1 reference.

    Returns None for cells outside the grid and blank cells. Numbers are
    returned as they are; anything else as a string.
    """
    if grid is None:
        return None
    row, col = parse_a1(ref)
    if row >= len(grid):
        return None
    values = grid[row] or ()
    if col >= len(values):
        return None

    value = values[col]
    if isinstance(value, (bool, np.bool_)):
        return int(value)
    if isinstance(value, (int, float, np.integer, np.floating)):
        if pd.isna(value):
            return None
        return value.item() if isinstance(value, np.generic) else value
    cleaned = text(value)
    return cleaned if cleaned else None


# =============================================================================
# Comparison
# =============================================================================

@dataclass
class ParityResult:
    """Comparison of one control cell."""
    sheet: str
    cell: str
    description: str
    expected: Any
    actual: Any
    match: bool
    delta: Optional[float] = None


@dataclass
class ParityReport:
    """Control-cell comparison for one month."""
    month_key: str
    matches: list[ParityResult] = field(default_factory=list)
    mismatches: list[ParityResult] = field(default_factory=list)
    total: int = 0

    @property
    def passed(self) -> bool:
        return not self.mismatches

    @property
    def summary(self) -> str:
        return f"{len(self.matches)}/{self.total} control cells match"

    def to_dataframe(self) -> pd.DataFrame:
        """One row per control cell, mismatches first."""
        columns = ["sheet", "cell", "description", "expected", "actual", "match", "delta"]
        return pd.DataFrame(
            [vars(r) for r in self.mismatches + self.matches],
            columns=columns,
        )


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def values_equal(expected: Any, actual: Any, tolerance: float = NUMERIC_TOLERANCE) -> bool:
    """Compare numerically within tolerance, or as strings when either side is not a number."""
    a = _to_float(expected)
    b = _to_float(actual)
    if a is None or b is None or pd.isna(a) or pd.isna(b):
        return str(expected) == str(actual)
    return abs(a - b) <= tolerance


def _expected_value(
    control: ControlCell,
    fc: FcOutput,
    cs: CsOutput,
    rows: Sequence[Any],
) -> Any:
    if control.sheet == USE_CASE_DATA_SHEET:
        if not rows:
            return None
        first = rows[0]
        return {
            "E3": first.graph_spent,
            "G3": first.roas,
            "I3": first.spent_pct_total,
        }.get(control.cell)

    if control.sheet == fc_sheet_name(fc.month_key):
        bau = fc.asset_mix_row("BAU")
        static = fc.asset_type_row("Static")
        return {
            "B3": fc.total_ads_needed,
            "F3": bau.production_target if bau else 0,
            "E8": sum(r.pct_attribution for r in fc.asset_mix),
            "F8": sum(r.production_target for r in fc.asset_mix),
            "O11": static.pct_attribution if static else 0,
            "P11": static.production_target if static else 0,
        }.get(control.cell)

    if control.sheet == cs_sheet_name(cs.month_key):
        buckets = {r.bucket: r for r in cs.content_bucket_summary}
        exp = buckets.get("EXP")
        bau = buckets.get("BAU")
        return {
            "B8": exp.production_target_ugc_excluded if exp else 0,
            "B9": bau.production_target_ugc_excluded if bau else 0,
            "D8": exp.cs_sheet if exp else 0,
            "G3": cs.studio_agency_table[0].num_assets if cs.studio_agency_table else 0,
        }.get(control.cell)

    return None


def compare_control(control: ControlCell, expected: Any, actual: Any) -> ParityResult:
    """Build the comparison result of one control cell."""
    matched = expected is not None and actual is not None and values_equal(expected, actual)
    expected_out = "" if expected is None else expected
    actual_out = "" if actual is None else actual

    delta = None
    if not matched and isinstance(expected, (int, float)) and isinstance(actual, (int, float)):
        delta = float(expected) - float(actual)

    return ParityResult(
        sheet=control.sheet,
        cell=control.cell,
        description=control.description,
        expected=expected_out,
        actual=actual_out,
        match=matched,
        delta=delta,
    )


# =============================================================================
# Entry point
# =============================================================================

def run_parity_check(
    workbook: Mapping[str, Any],
    month_key: str,
    fc_override: OverrideInput = None,
    detail_rows: Optional[Sequence[Any]] = None,
    studio_agency_names: Optional[Sequence[str]] = None,
    settings: Optional[EngineSettings] = None,
) -> ParityReport:
    """
    Compare engine outputs against the workbook's control cells.

    Parameters
    ----------
    workbook : Mapping[str, grid]
        Sheet name -> grid of cell values (lists of rows, or DataFrames
        read with header=None).
    month_key : str
        Month to check, e.g. 'May26'.
    fc_override : ForecastOverride | dict, optional
        Override used by the workbook's FC sheet.
    detail_rows : Sequence[CsDetailRow | dict], optional
        Detail rows of the workbook's CS sheet.
    studio_agency_names : Sequence[str], optional
        Teams of the CS studio/agency table. Defaults to the settings list.
    settings : EngineSettings, optional
        Engine defaults.

    Returns
    -------
    ParityReport
        Matches and mismatches. A control cell whose sheet or value is
        missing counts as a mismatch.
    """
    settings = settings or EngineSettings()
    if studio_agency_names is None:
        studio_agency_names = settings.studio_agency_names

    parsed = parse_use_case_sheet(
        _as_grid(workbook.get(USE_CASE_DATA_SHEET)),
        sheet_names=list(workbook.keys()),
    )
    fc = compute_fc_output(month_key, parsed.rows, fc_override=fc_override, settings=settings)
    cs = compute_cs_output(fc, studio_agency_names=studio_agency_names, detail_rows=detail_rows)

    controls = parity_controls(month_key)
    report = ParityReport(month_key=month_key, total=len(controls))

    for control in controls:
        expected = _expected_value(control, fc, cs, parsed.rows)
        actual = read_cell(_as_grid(workbook.get(control.sheet)), control.cell)
        result = compare_control(control, expected, actual)
        if result.match:
            report.matches.append(result)
        else:
            report.mismatches.append(result)

    if report.mismatches:
        logger.warning(f"Parity check {month_key}: {report.summary}")
        for m in report.mismatches:
            logger.debug(f"  {m.sheet}!{m.cell} ({m.description}): expected {m.expected}, got {m.actual}")
    else:
        logger.info(f"Parity check {month_key}: {report.summary}")
    return report
