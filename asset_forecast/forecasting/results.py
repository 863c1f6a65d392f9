"""
Result dataclasses for the FC and CS engines.

Field names are snake_case in Python; to_dict() emits the camelCase
JSON shape consumed by the API layer ('monthKey', 'assetMix', ...).
"""

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Optional

import numpy as np
import pandas as pd
from pydantic import BaseModel

from ..config.schema import CsDetailRow


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_json_ready(value: Any) -> Any:
    """
    Recursively convert results into JSON-serializable Python values.

    Dataclass fields are renamed to camelCase; dict keys (use-case
    names, labels) are kept as they are. numpy scalars become Python
    numbers.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {_camel(f.name): to_json_ready(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, CsDetailRow):
        data = value.model_dump(by_alias=True)
        data["numAssets"] = value.num_assets
        return data
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, dict):
        return {str(k): to_json_ready(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_ready(v) for v in value]
    if isinstance(value, np.generic):
        return value.item()
    return value


# =============================================================================
# FC
# =============================================================================

@dataclass
class FcHeaderBlock:
    """Budget figures at the top of the FC sheet."""
    adspend_target_global: float = 0.0
    adspend_target_expansion: float = 0.0
    total_adspend_target: float = 0.0
    creative_budget_pct: float = 0.0
    creative_budget_global: float = 0.0
    creative_budget_expansion: float = 0.0
    total_creative_budget: float = 0.0
    blended_cost_per_asset: float = 0.0


@dataclass
class FcAssetMixRow:
    """
    One content bucket of the asset-mix table.

    The per-format sub-counts are reserved: the engine leaves them at 0.
    """
    bucket: str
    pct_attribution: float
    production_target: int
    forecasted: int
    static: int = 0
    carousel: int = 0
    video: int = 0
    ugc: int = 0
    partnership_code: int = 0


@dataclass
class FcChannelMixRow:
    channel: str
    pct_attribution: float
    production_target: int


@dataclass
class FcFunnelRow:
    stage: str
    pct_attribution: float
    production_target: int
    forecasted: int


@dataclass
class FcAssetTypeRow:
    asset_type: str
    pct_attribution: float
    production_target: int
    forecasted: int
    cs_sheet: int = 0


@dataclass
class FcUseCaseResultRow:
    """Rolling-window performance and ads production for one use case."""
    use_case: str
    spend: float
    revenue: float
    roas: float
    manual_boost: float
    pct_total_spend: float
    ads_production: int
    exp_production: int
    type: str


@dataclass
class FcOutput:
    """
    Computed FC sheet for one month.

    Recomputed on demand from use-case rows and the month's override;
    never persisted.
    """

    month_key: str
    month_label: str
    total_ads_needed: int
    header_block: FcHeaderBlock
    asset_mix: list[FcAssetMixRow] = field(default_factory=list)
    channel_mix: list[FcChannelMixRow] = field(default_factory=list)
    funnel: list[FcFunnelRow] = field(default_factory=list)
    asset_type: list[FcAssetTypeRow] = field(default_factory=list)
    use_case_results: list[FcUseCaseResultRow] = field(default_factory=list)

    # Totals for parity checks
    total_production_target: int = 0
    total_forecasted: int = 0

    # Carried through to the CS engine
    ugc_pct_exclude: float = 0.27

    def asset_mix_row(self, bucket: str) -> Optional[FcAssetMixRow]:
        """Return the asset-mix row for a bucket, or None."""
        return next((r for r in self.asset_mix if r.bucket == bucket), None)

    def asset_type_row(self, asset_type: str) -> Optional[FcAssetTypeRow]:
        """Return the asset-type row for a type, or None."""
        return next((r for r in self.asset_type if r.asset_type == asset_type), None)

    def to_dict(self) -> dict:
        """Return the JSON-ready camelCase representation."""
        return to_json_ready(self)

    def to_dataframe(self, table: str = "asset_mix") -> pd.DataFrame:
        """
        Convert one FC table to a DataFrame.

        Parameters
        ----------
        table : str
            'asset_mix', 'channel_mix', 'funnel', 'asset_type' or
            'use_case_results'.

        Returns
        -------
        pd.DataFrame
            One row per table entry, snake_case columns.
        """
        if table not in {"asset_mix", "channel_mix", "funnel", "asset_type", "use_case_results"}:
            raise ValueError(f"Unknown FC table: {table}")
        rows = getattr(self, table)
        return pd.DataFrame([{f.name: getattr(r, f.name) for f in fields(r)} for r in rows])


# =============================================================================
# CS
# =============================================================================

@dataclass
class CsContentBucketRow:
    """Production target (UGC excluded) versus briefed assets for a bucket."""
    bucket: str
    production_target_ugc_excluded: int
    forecasted_ugc_excluded: int
    cs_sheet: int


@dataclass
class CsStudioAgencyRow:
    studio_agency: str
    num_assets: int
    # type/use case -> {'static', 'carousel', 'video'} totals
    by_use_case: dict[str, dict[str, int]] = field(default_factory=dict)


@dataclass
class CsFormatSummary:
    """Per-format totals of the detail rows, checked against FC."""
    static: int = 0
    carousel: int = 0
    video: int = 0
    total: int = 0
    fc_forecasted: int = 0
    difference: int = 0


@dataclass
class CsOutput:
    """Computed CS sheet for one month."""

    month_key: str
    month_label: str
    total_assets: int
    content_bucket_summary: list[CsContentBucketRow] = field(default_factory=list)
    studio_agency_table: list[CsStudioAgencyRow] = field(default_factory=list)
    format_summary: CsFormatSummary = field(default_factory=CsFormatSummary)
    detail_rows: list[CsDetailRow] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Return the JSON-ready camelCase representation."""
        return to_json_ready(self)

    def to_dataframe(self, table: str = "content_bucket_summary") -> pd.DataFrame:
        """Convert 'content_bucket_summary', 'studio_agency_table' or 'detail_rows' to a DataFrame."""
        if table == "detail_rows":
            return pd.DataFrame(
                [{**r.model_dump(), "num_assets": r.num_assets} for r in self.detail_rows],
                columns=list(CsDetailRow.model_fields) + ["num_assets"],
            )
        if table == "content_bucket_summary":
            return pd.DataFrame([vars(r) for r in self.content_bucket_summary])
        if table == "studio_agency_table":
            return pd.DataFrame(
                [{"studio_agency": r.studio_agency, "num_assets": r.num_assets}
                 for r in self.studio_agency_table]
            )
        raise ValueError(f"Unknown CS table: {table}")
