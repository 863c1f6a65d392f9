"""
Conversion of CS results into briefing assignments.

Detail rows become one assignment per non-zero format. When a month
has no detail rows yet, a minimal set of one assignment per content
bucket can be drafted from the CS production targets instead.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence
import logging
import uuid

from ..core.coercion import round_count
from ..core.months import month_key_to_batch_key
from ..core.registry import canonical_label
from ..forecasting.cs_engine import coerce_detail_rows
from ..forecasting.results import CsOutput, to_json_ready

logger = logging.getLogger(__name__)

PLACEHOLDER = "-"

# Briefs are sized for this many assets each
ASSETS_PER_BRIEF = 4

# Detail-row count field -> briefing format
FORMAT_BY_FIELD = (
    ("static", "static", "Static"),
    ("video", "video", "Video"),
    ("carousel", "static_carousel", "Carousel"),
)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class BriefingAssignment:
    """One brief to be produced, ready for the briefing board."""
    content_bucket: str
    product_or_use_case: str
    asset_count: int
    format: str
    batch_key: str
    brief_name: str
    ideation_starter: str = ""
    brief_owner: str = ""
    agency_ref: str = PLACEHOLDER
    funnel: str = "tof"
    source: str = "imported"
    campaign_partnership: Optional[str] = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return to_json_ready(self)


def bucket_to_content_bucket(bucket: str) -> str:
    """Map a content bucket to the briefing vocabulary: experimental, native_style or bau."""
    key = canonical_label(bucket)
    if key == "EXP":
        return "experimental"
    if key == "CAM":
        return "native_style"
    return "bau"


def detail_rows_to_assignments(
    detail_rows: Optional[Sequence[Any]],
    month_key: str,
) -> list[BriefingAssignment]:
    """
    Build assignments from CS detail rows.

    Parameters
    ----------
    detail_rows : Sequence[CsDetailRow | dict]
        The month's detail rows. Rows without assets are skipped.
    month_key : str
        Month the rows belong to, e.g. 'May26'.

    Returns
    -------
    list[BriefingAssignment]
        One assignment per format with a non-zero count, in row order
        (static, video, carousel). Brief names default to
        '<use case> <Format> <n>' where n numbers the contributing rows.
    """
    batch_key = month_key_to_batch_key(month_key)
    assignments = []
    index = 0

    for row in coerce_detail_rows(detail_rows):
        if row.num_assets <= 0:
            continue
        index += 1
        product = row.type_use_case or row.content_bucket or PLACEHOLDER

        for count_field, fmt, display in FORMAT_BY_FIELD:
            count = getattr(row, count_field)
            if count <= 0:
                continue
            assignments.append(BriefingAssignment(
                content_bucket=bucket_to_content_bucket(row.content_bucket),
                product_or_use_case=product,
                asset_count=count,
                format=fmt,
                batch_key=batch_key,
                brief_name=row.experiment_name or f"{product} {display} {index}",
                ideation_starter=row.ideation_starter,
                brief_owner=row.brief_owner,
                agency_ref=row.studio_agency or row.agency_ref or PLACEHOLDER,
            ))

    logger.info(f"Built {len(assignments)} briefing assignments from {index} detail rows ({month_key})")
    return assignments


def cs_output_to_minimal_assignments(cs: CsOutput) -> list[BriefingAssignment]:
    """
    Draft one static assignment per content bucket from CS targets.

    The asset count is the UGC-excluded production target (or the
    forecasted count when the target is 0) divided into briefs of four,
    with at least one. Buckets with nothing to produce are skipped.
    """
    batch_key = month_key_to_batch_key(cs.month_key)
    assignments = []
    for row in cs.content_bucket_summary:
        n = row.production_target_ugc_excluded or row.forecasted_ugc_excluded or 0
        if n <= 0:
            continue
        assignments.append(BriefingAssignment(
            content_bucket=bucket_to_content_bucket(row.bucket),
            product_or_use_case=row.bucket,
            asset_count=max(1, round_count(n / ASSETS_PER_BRIEF)),
            format="static",
            batch_key=batch_key,
            brief_name=f"{row.bucket} (from forecast)",
        ))
    return assignments
