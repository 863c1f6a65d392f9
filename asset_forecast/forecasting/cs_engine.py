"""
Content Scheduling (CS) computation engine.

Reconciles the FC production targets against the manually maintained
CS detail rows: per-bucket targets with UGC removed, assets per
studio/agency and per-format totals.
"""

from collections import defaultdict
from typing import Any, Optional, Sequence
import logging

from pydantic import ValidationError

from ..config.schema import CsDetailRow
from ..core.coercion import normalize_pct, round_count
from ..core.registry import DETAIL_FORMATS, canonical_label
from .results import (
    CsContentBucketRow,
    CsFormatSummary,
    CsOutput,
    CsStudioAgencyRow,
    FcOutput,
)

logger = logging.getLogger(__name__)

DEFAULT_UGC_PCT_EXCLUDE = 0.27


def coerce_detail_rows(detail_rows: Optional[Sequence[Any]]) -> list[CsDetailRow]:
    """Return detail rows as CsDetailRow instances, dropping undecodable ones."""
    coerced = []
    for row in detail_rows or ():
        if isinstance(row, CsDetailRow):
            coerced.append(row)
            continue
        try:
            coerced.append(CsDetailRow.model_validate(row))
        except ValidationError:
            logger.warning(f"Dropped CS detail row that failed validation: {row!r}")
    return coerced


def compute_cs_output(
    fc: FcOutput,
    studio_agency_names: Optional[Sequence[str]] = None,
    detail_rows: Optional[Sequence[Any]] = None,
    ugc_pct_exclude: Optional[float] = None,
) -> CsOutput:
    """
    Compute the CS sheet for the month of an FC output.

    Parameters
    ----------
    fc : FcOutput
        FC output of the same month.
    studio_agency_names : Sequence[str], optional
        Teams to report on, in display order.
    detail_rows : Sequence[CsDetailRow | dict], optional
        The month's briefing rows. Empty means not yet briefed and gives
        all-zero counts.
    ugc_pct_exclude : float, optional
        UGC share removed from production targets, as 0-1 or 0-100.
        Defaults to the value carried on the FC output, then 0.27.

    Returns
    -------
    CsOutput
        Bucket summary, studio/agency table and format summary.
    """
    rows = coerce_detail_rows(detail_rows)
    if ugc_pct_exclude is not None:
        ugc = normalize_pct(ugc_pct_exclude)
    elif fc.ugc_pct_exclude is not None:
        ugc = fc.ugc_pct_exclude
    else:
        ugc = DEFAULT_UGC_PCT_EXCLUDE

    assets_by_bucket: dict[str, int] = defaultdict(int)
    for row in rows:
        assets_by_bucket[canonical_label(row.content_bucket)] += row.num_assets

    content_bucket_summary = [
        CsContentBucketRow(
            bucket=mix.bucket,
            production_target_ugc_excluded=round_count(mix.production_target * (1 - ugc)),
            forecasted_ugc_excluded=mix.static + mix.carousel + mix.video + mix.partnership_code,
            cs_sheet=assets_by_bucket.get(canonical_label(mix.bucket), 0),
        )
        for mix in fc.asset_mix
    ]

    studio_agency_table = []
    for name in studio_agency_names or ():
        team_rows = [r for r in rows if r.studio_agency == name]
        by_use_case: dict[str, dict[str, int]] = {}
        for r in team_rows:
            key = r.type_use_case or r.content_bucket
            counts = by_use_case.setdefault(key, {"static": 0, "carousel": 0, "video": 0})
            counts["static"] += r.static
            counts["carousel"] += r.carousel
            counts["video"] += r.video
        studio_agency_table.append(CsStudioAgencyRow(
            studio_agency=name,
            num_assets=sum(r.num_assets for r in team_rows),
            by_use_case=by_use_case,
        ))

    total_assets = sum(r.num_assets for r in rows)
    fc_forecasted = sum(
        t.forecasted for t in fc.asset_type if t.asset_type in DETAIL_FORMATS
    )
    format_summary = CsFormatSummary(
        static=sum(r.static for r in rows),
        carousel=sum(r.carousel for r in rows),
        video=sum(r.video for r in rows),
        total=total_assets,
        fc_forecasted=fc_forecasted,
        difference=total_assets - fc_forecasted,
    )

    logger.info(
        f"Computed CS {fc.month_key}: {len(rows)} detail rows, {total_assets} assets "
        f"(FC forecasted {fc_forecasted})"
    )

    return CsOutput(
        month_key=fc.month_key,
        month_label=fc.month_label,
        total_assets=total_assets,
        content_bucket_summary=content_bucket_summary,
        studio_agency_table=studio_agency_table,
        format_summary=format_summary,
        detail_rows=rows,
    )
