"""
Pydantic schemas for forecast inputs and engine settings.

These schemas define the records the engines consume (historical
use-case rows, per-month overrides, CS detail rows) and the settings
that hold every engine default.
"""

from typing import Optional, Literal, Any
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..core.coercion import num, text, date_text, normalize_pct, round_count
from ..core.registry import (
    DEFAULT_ASSET_MIX_PCT,
    DEFAULT_ASSET_TYPE_PCT,
    DEFAULT_CHANNEL_MIX_PCT,
    DEFAULT_FUNNEL_PCT,
    DEFAULT_STUDIO_AGENCY_NAMES,
    USE_CASE_TYPE,
    canonical_label,
)

PctUnit = Literal["auto", "fraction", "percent"]
UseCaseType = Literal["BAU", "EXP", "CAM"]

# Keys accepted in place of 'label' in override arrays
_LABEL_KEYS = ("bucket", "channel", "stage", "assetType", "asset_type", "name")


# =============================================================================
# Historical rows
# =============================================================================

class UseCaseRow(BaseModel):
    """One use case in one month of the 'Use Case Data' sheet."""
    year_num: int = Field(..., description="Calendar year of the row")
    month_date: str = Field("", description="Month as a date-like string (ISO when known)")
    use_case: str = Field(..., min_length=1, description="Use-case name")
    graph_spent: float = Field(0.0, description="Spend shown on the graph (real or forecast)")
    graph_revenue: float = Field(0.0, description="Revenue shown on the graph")
    roas: float = Field(0.0, description="Return on ad spend")
    results_spent: float = Field(0.0, description="Actual spend")
    spent_pct_total: float = Field(0.0, description="Share of the year's spend")
    forecasted_spent: float = Field(0.0, description="Forecasted spend")
    forecasted_revenue: Optional[float] = Field(None, description="Forecasted revenue, if any")

    class Config:
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def migrate_year_field(cls, data: Any) -> Any:
        """Accept 'year' as the name of the year column."""
        if isinstance(data, dict) and "year" in data and "year_num" not in data:
            data = dict(data)
            data["year_num"] = data.pop("year")
        return data

    @field_validator("year_num", mode="before")
    @classmethod
    def coerce_year(cls, v):
        return int(num(v))

    @field_validator("month_date", mode="before")
    @classmethod
    def coerce_month_date(cls, v):
        return date_text(v)

    @field_validator("use_case", mode="before")
    @classmethod
    def coerce_use_case(cls, v):
        return text(v)

    @field_validator(
        "graph_spent", "graph_revenue", "roas", "results_spent",
        "spent_pct_total", "forecasted_spent",
        mode="before",
    )
    @classmethod
    def coerce_number(cls, v):
        """Persisted nulls and spreadsheet strings become numbers."""
        return num(v)

    @field_validator("forecasted_revenue", mode="before")
    @classmethod
    def coerce_optional_number(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return num(v)

    @property
    def total_spend(self) -> float:
        """Actual plus forecasted spend, as summed on the FC sheet."""
        return self.results_spent + self.forecasted_spent


# =============================================================================
# Overrides
# =============================================================================

class PercentageEntry(BaseModel):
    """A single label/percentage pair of an override group."""
    label: str = Field(..., description="Group member label (bucket, channel, stage or asset type)")
    pct: float = Field(0.0, description="Percentage as supplied (0-1 or 0-100)")
    unit: Optional[PctUnit] = Field(None, description="Explicit unit; None defers to the override's pct_unit")

    @model_validator(mode="before")
    @classmethod
    def migrate_label_key(cls, data: Any) -> Any:
        """Accept 'bucket', 'channel', 'stage' or 'assetType' as the label key."""
        if isinstance(data, dict) and "label" not in data:
            data = dict(data)
            for key in _LABEL_KEYS:
                if key in data:
                    data["label"] = data.pop(key)
                    break
        return data

    @field_validator("label", mode="before")
    @classmethod
    def clean_label(cls, v):
        return canonical_label(text(v))

    @field_validator("pct", mode="before")
    @classmethod
    def coerce_pct(cls, v):
        return num(v)

    def fraction(self, default_unit: str = "auto") -> float:
        """Return the percentage as a 0-1 fraction."""
        return normalize_pct(self.pct, self.unit or default_unit)


class ForecastOverride(BaseModel):
    """
    Per-month overrides of the FC sheet inputs.

    Every field is optional. Absent values fall back to EngineSettings
    defaults inside the engine.
    """
    month_key: Optional[str] = Field(None, description="Month key the override belongs to")
    total_ads_needed: Optional[int] = Field(None, ge=0, description="Total ads needed for the month")
    adspend_target_global: Optional[float] = Field(None, description="Adspend target for global markets")
    adspend_target_expansion: Optional[float] = Field(None, description="Adspend target for expansion markets")
    creative_budget_pct: Optional[float] = Field(None, description="Creative budget as share of adspend (0-1 or 0-100)")
    pct_unit: PctUnit = Field("auto", description="Unit of every percentage in this override")
    channel_mix_json: list[PercentageEntry] = Field(default_factory=list)
    asset_mix_json: list[PercentageEntry] = Field(default_factory=list)
    funnel_json: list[PercentageEntry] = Field(default_factory=list)
    asset_type_json: list[PercentageEntry] = Field(default_factory=list)
    use_case_boost_json: dict[str, float] = Field(
        default_factory=dict,
        description="Use case -> manual boost multiplier (default 1)"
    )

    @field_validator(
        "channel_mix_json", "asset_mix_json", "funnel_json", "asset_type_json",
        mode="before",
    )
    @classmethod
    def migrate_map_form(cls, v):
        """Convert a {label: pct} map into a list of entries."""
        if v is None:
            return []
        if isinstance(v, dict):
            entries = []
            for label, value in v.items():
                if isinstance(value, dict):
                    entries.append({"label": label, **value})
                else:
                    entries.append({"label": label, "pct": value})
            return entries
        return v

    @field_validator("total_ads_needed", mode="before")
    @classmethod
    def coerce_total_ads(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return round_count(num(v))

    @field_validator(
        "adspend_target_global", "adspend_target_expansion", "creative_budget_pct",
        mode="before",
    )
    @classmethod
    def coerce_optional_number(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return num(v)

    @field_validator("use_case_boost_json", mode="before")
    @classmethod
    def coerce_boosts(cls, v):
        """Drop blank boosts so they default to 1 instead of 0."""
        if not v:
            return {}
        if not isinstance(v, dict):
            return v
        return {
            text(k): num(b) for k, b in v.items()
            if b is not None and not (isinstance(b, str) and not b.strip())
        }

    def creative_budget_fraction(self) -> Optional[float]:
        """Creative budget percentage as a 0-1 fraction, or None."""
        if self.creative_budget_pct is None:
            return None
        return normalize_pct(self.creative_budget_pct, self.pct_unit)

    def group(self, name: str) -> list[PercentageEntry]:
        """Return the entries of one percentage group ('asset_mix', 'funnel', ...)."""
        return getattr(self, f"{name}_json")

    def boost_for(self, use_case: str) -> float:
        """Manual boost for a use case (1 when not overridden)."""
        return self.use_case_boost_json.get(use_case, 1)


# =============================================================================
# CS detail rows
# =============================================================================

class CsDetailRow(BaseModel):
    """A manually maintained briefing row of the CS sheet."""
    siobhan_ref: str = Field("", description="Free-text row reference")
    content_bucket: str = Field("", description="Content bucket (BAU, EXP, CAM, ...)")
    static: int = Field(0, ge=0, description="Planned static assets")
    video: int = Field(0, ge=0, description="Planned video assets")
    carousel: int = Field(0, ge=0, description="Planned carousel assets")
    ideation_starter: str = ""
    experiment_name: str = ""
    notes: str = ""
    type_use_case: str = ""
    brief_owner: str = ""
    localisation_or_growth: str = ""
    studio_agency: str = Field("", description="Delivery team (studio or agency)")
    agency_ref: str = ""

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel

    @field_validator("static", "video", "carousel", mode="before")
    @classmethod
    def coerce_count(cls, v):
        """Counts are non-negative integers; junk and negatives become 0."""
        return round_count(num(v))

    @field_validator(
        "siobhan_ref", "content_bucket", "ideation_starter", "experiment_name",
        "notes", "type_use_case", "brief_owner", "localisation_or_growth",
        "studio_agency", "agency_ref",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v):
        return text(v)

    @property
    def num_assets(self) -> int:
        """Static + video + carousel, as in the 'No. of Assets' column."""
        return self.static + self.video + self.carousel


# =============================================================================
# Engine settings
# =============================================================================

def _normalized_table(v: dict) -> dict[str, float]:
    return {canonical_label(k): normalize_pct(p) for k, p in (v or {}).items()}


class EngineSettings(BaseModel):
    """
    Every built-in default used by the FC and CS engines.

    Kept in one place so discrepancies against a workbook can be traced
    to a named default instead of a literal buried in the engine.
    """
    default_total_ads_needed: int = Field(525, ge=0, description="Total ads needed when neither caller nor override sets it")
    default_creative_budget_pct: float = Field(0.08, ge=0, le=1, description="Creative budget share of adspend")
    ugc_pct_exclude: float = Field(0.27, ge=0, le=1, description="UGC share removed from CS production targets")
    production_factor: float = Field(0.5, ge=0, description="Multiplier applied to use-case ads production")
    window_months: int = Field(12, ge=1, le=60, description="Length of the rolling aggregation window")
    default_asset_mix: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_ASSET_MIX_PCT))
    default_channel_mix: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_CHANNEL_MIX_PCT))
    default_funnel: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_FUNNEL_PCT))
    default_asset_type: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_ASSET_TYPE_PCT))
    use_case_types: dict[str, UseCaseType] = Field(
        default_factory=lambda: dict(USE_CASE_TYPE),
        description="Known use cases and their BAU/EXP/CAM classification"
    )
    studio_agency_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_STUDIO_AGENCY_NAMES),
        description="Teams reported in the CS studio/agency table"
    )

    @field_validator(
        "default_asset_mix", "default_channel_mix", "default_funnel", "default_asset_type",
        mode="after",
    )
    @classmethod
    def normalize_table(cls, v):
        """Canonicalize labels and read >1 values as 0-100 percentages."""
        return _normalized_table(v)

    @field_validator("default_creative_budget_pct", "ugc_pct_exclude", mode="before")
    @classmethod
    def normalize_share(cls, v):
        return normalize_pct(v)

    def default_table(self, group: str) -> dict[str, float]:
        """Return the default percentage table for a group name."""
        return getattr(self, f"default_{group}")
