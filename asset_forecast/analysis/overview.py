"""
Multi-month overview: FC ads needed against briefed CS assets.
"""

from typing import Any, Mapping, Optional, Sequence
import logging

import pandas as pd

from ..config.schema import EngineSettings
from ..core.months import parse_month_key
from ..forecasting.cs_engine import compute_cs_output
from ..forecasting.fc_engine import coerce_rows, compute_fc_output

logger = logging.getLogger(__name__)

OVERVIEW_COLUMNS = ["month_key", "month_label", "total_ads_needed", "total_assets", "difference"]


def sort_month_keys(month_keys: Sequence[str]) -> list[str]:
    """Sort month keys chronologically; unreadable keys go last in their given order."""
    readable = [k for k in month_keys if parse_month_key(k) is not None]
    unreadable = [k for k in month_keys if parse_month_key(k) is None]
    return sorted(readable, key=parse_month_key) + unreadable


def build_overview(
    month_keys: Sequence[str],
    rows: Optional[Sequence[Any]],
    overrides: Optional[Mapping[str, Any]] = None,
    detail_rows: Optional[Mapping[str, Sequence[Any]]] = None,
    studio_agency_names: Optional[Sequence[str]] = None,
    settings: Optional[EngineSettings] = None,
) -> pd.DataFrame:
    """
    Compute FC and CS for several months and tabulate the totals.

    Parameters
    ----------
    month_keys : Sequence[str]
        Months to include. Duplicates are dropped.
    rows : Sequence[UseCaseRow | dict]
        Use-case rows of the run, shared by every month.
    overrides : Mapping[str, ForecastOverride | dict], optional
        Month key -> FC override.
    detail_rows : Mapping[str, Sequence[CsDetailRow | dict]], optional
        Month key -> CS detail rows.
    studio_agency_names : Sequence[str], optional
        Teams of the CS studio/agency table.
    settings : EngineSettings, optional
        Engine defaults.

    Returns
    -------
    pd.DataFrame
        One row per month in chronological order. 'difference' is
        total_assets - total_ads_needed, negative while briefing is
        behind the forecast.
    """
    overrides = overrides or {}
    detail_rows = detail_rows or {}
    use_case_rows = coerce_rows(rows)

    records = []
    for month_key in sort_month_keys(list(dict.fromkeys(month_keys or ()))):
        fc = compute_fc_output(
            month_key,
            use_case_rows,
            fc_override=overrides.get(month_key),
            settings=settings,
        )
        cs = compute_cs_output(
            fc,
            studio_agency_names=studio_agency_names,
            detail_rows=detail_rows.get(month_key),
        )
        records.append({
            "month_key": month_key,
            "month_label": fc.month_label,
            "total_ads_needed": fc.total_ads_needed,
            "total_assets": cs.total_assets,
            "difference": cs.total_assets - fc.total_ads_needed,
        })

    logger.info(f"Built overview for {len(records)} months")
    return pd.DataFrame(records, columns=OVERVIEW_COLUMNS)
