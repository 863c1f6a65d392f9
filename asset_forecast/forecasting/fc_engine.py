"""
Forecast (FC) computation engine.

Reproduces the FC sheet of the Asset Forecast workbook: header budget
block, percentage breakdowns (asset mix, channel mix, funnel, asset
type) and per-use-case ads production over a rolling 12-month window.

The engine is a pure function of its inputs. It never raises: missing
or malformed inputs degrade to the defaults held in EngineSettings.
"""

from typing import Any, Mapping, Optional, Sequence, Union
import logging

import pandas as pd
from pydantic import ValidationError

from ..config.schema import EngineSettings, ForecastOverride, UseCaseRow
from ..core.coercion import normalize_pct, num, round_count, round_half_away
from ..core.months import last_12_month_keys, month_label, parse_month_key, resolve_month_date
from ..core.parser import rows_to_frame
from ..core.registry import PERCENTAGE_GROUPS, classify_use_case
from .results import (
    FcAssetMixRow,
    FcAssetTypeRow,
    FcChannelMixRow,
    FcFunnelRow,
    FcHeaderBlock,
    FcOutput,
    FcUseCaseResultRow,
)

logger = logging.getLogger(__name__)

OverrideInput = Union[ForecastOverride, Mapping[str, Any], None]

_DEFAULT_SETTINGS = EngineSettings()


# =============================================================================
# Input coercion
# =============================================================================

def coerce_override(fc_override: OverrideInput) -> Optional[ForecastOverride]:
    """
    Return the override as a ForecastOverride.

    A mapping that cannot be decoded is logged and treated as absent, so
    the engine falls back to its defaults instead of raising. Use
    core.validation.parse_override at ingestion to reject such records.
    """
    if fc_override is None or isinstance(fc_override, ForecastOverride):
        return fc_override
    try:
        return ForecastOverride.model_validate(fc_override)
    except ValidationError as e:
        logger.warning(f"Ignoring FC override that failed validation: {e.error_count()} error(s)")
        return None


def coerce_rows(rows: Optional[Sequence[Any]]) -> list[UseCaseRow]:
    """Return rows as UseCaseRow instances, dropping undecodable ones."""
    coerced = []
    dropped = 0
    for row in rows or ():
        if isinstance(row, UseCaseRow):
            coerced.append(row)
            continue
        try:
            coerced.append(UseCaseRow.model_validate(row))
        except ValidationError:
            dropped += 1
    if dropped:
        logger.warning(f"Dropped {dropped} use-case row(s) that failed validation")
    return coerced


# =============================================================================
# Building blocks
# =============================================================================

def resolve_total_ads_needed(
    total_ads_needed: Optional[float],
    override: Optional[ForecastOverride],
    settings: EngineSettings = _DEFAULT_SETTINGS,
) -> int:
    """Explicit value, then the override, then the settings default."""
    if total_ads_needed is not None:
        return round_count(num(total_ads_needed))
    if override is not None and override.total_ads_needed is not None:
        return override.total_ads_needed
    return settings.default_total_ads_needed


def resolve_percentages(
    group: str,
    override: Optional[ForecastOverride],
    settings: EngineSettings = _DEFAULT_SETTINGS,
) -> list[tuple[str, float]]:
    """
    Resolve the (label, fraction) pairs of one percentage group.

    Override entries win when the override supplies any labelled entry
    for the group; otherwise the default table is used. Canonical
    labels always come first in sheet order (0 when the override omits
    them), followed by any extra labels in the order they were supplied.

    Parameters
    ----------
    group : str
        'asset_mix', 'channel_mix', 'funnel' or 'asset_type'.
    override : ForecastOverride, optional
        The month's override.
    settings : EngineSettings
        Engine defaults.

    Returns
    -------
    list[tuple[str, float]]
        Labels with 0-1 fractions.
    """
    canonical = PERCENTAGE_GROUPS[group]
    entries = override.group(group) if override is not None else []

    supplied: dict[str, float] = {}
    for entry in entries:
        if not entry.label:
            continue
        unit = entry.unit or override.pct_unit
        if unit == "auto" and entry.pct == 1:
            logger.warning(
                f"{group} '{entry.label}' is exactly 1 and read as 100%; "
                f"declare pct_unit to disambiguate"
            )
        supplied[entry.label] = entry.fraction(override.pct_unit)
    if not supplied:
        supplied = dict(settings.default_table(group))

    labels = list(canonical) + [label for label in supplied if label not in canonical]
    return [(label, supplied.get(label, 0.0)) for label in labels]


def build_header_block(
    total_ads_needed: int,
    override: Optional[ForecastOverride],
    settings: EngineSettings = _DEFAULT_SETTINGS,
) -> FcHeaderBlock:
    """
    Compute the FC header budget block.

    Creative budgets are ROUND(adspend * pct). Blended cost per asset is
    the total creative budget over total ads, rounded to 2 dp, and 0
    when no ads are needed.
    """
    adspend_global = 0.0
    adspend_expansion = 0.0
    creative_pct = settings.default_creative_budget_pct

    if override is not None:
        adspend_global = float(override.adspend_target_global or 0)
        adspend_expansion = float(override.adspend_target_expansion or 0)
        fraction = override.creative_budget_fraction()
        if fraction is not None:
            creative_pct = fraction

    creative_global = round_half_away(adspend_global * creative_pct)
    creative_expansion = round_half_away(adspend_expansion * creative_pct)
    total_creative = creative_global + creative_expansion

    blended = 0.0
    if total_ads_needed:
        blended = round_half_away(total_creative / total_ads_needed, 2)

    return FcHeaderBlock(
        adspend_target_global=adspend_global,
        adspend_target_expansion=adspend_expansion,
        total_adspend_target=adspend_global + adspend_expansion,
        creative_budget_pct=creative_pct,
        creative_budget_global=creative_global,
        creative_budget_expansion=creative_expansion,
        total_creative_budget=total_creative,
        blended_cost_per_asset=blended,
    )


def filter_rolling_window(
    frame: pd.DataFrame,
    year: int,
    month: int,
    months: int = 12,
) -> pd.DataFrame:
    """
    Keep the rows that fall inside the window ending at (year, month).

    A row is in the window when its month_date resolves to a window
    month and its year_num matches that month's year.
    """
    if frame.empty:
        return frame

    window = set(last_12_month_keys(year, month, months))
    resolved = frame["month_date"].map(resolve_month_date)
    mask = [
        ym is not None and ym in window and int(year_num) == ym[0]
        for ym, year_num in zip(resolved, frame["year_num"])
    ]
    return frame.loc[mask]


def compute_use_case_results(
    window_frame: pd.DataFrame,
    total_ads_needed: int,
    override: Optional[ForecastOverride],
    settings: EngineSettings = _DEFAULT_SETTINGS,
) -> list[FcUseCaseResultRow]:
    """
    Aggregate spend/revenue per known use case and derive ads production.

    Share of spend is taken against every in-window row, including use
    cases outside the known list. Use cases with no spend, revenue or
    production are dropped.
    """
    if window_frame.empty:
        return []

    grouped = window_frame.groupby("use_case").agg(
        spend=("total_spend", "sum"),
        revenue=("graph_revenue", "sum"),
    )
    total_spend = float(window_frame["total_spend"].sum())

    results = []
    for use_case in settings.use_case_types:
        if use_case in grouped.index:
            spend = float(grouped.at[use_case, "spend"])
            revenue = float(grouped.at[use_case, "revenue"])
        else:
            spend = revenue = 0.0

        roas = revenue / spend if spend else 0.0
        pct_total_spend = spend / total_spend if total_spend else 0.0
        use_case_type = classify_use_case(use_case, settings.use_case_types)
        boost = override.boost_for(use_case) if override is not None else 1

        if use_case_type == "CAM":
            ads_production = 0
        else:
            ads_production = round_count(
                pct_total_spend * total_ads_needed * boost * settings.production_factor
            )
        exp_production = ads_production if use_case_type == "EXP" else 0

        if spend == 0 and revenue == 0 and ads_production == 0:
            continue

        results.append(FcUseCaseResultRow(
            use_case=use_case,
            spend=spend,
            revenue=revenue,
            roas=roas,
            manual_boost=boost,
            pct_total_spend=pct_total_spend,
            ads_production=ads_production,
            exp_production=exp_production,
            type=use_case_type,
        ))

    return results


# =============================================================================
# Entry point
# =============================================================================

def compute_fc_output(
    month_key: str,
    rows: Optional[Sequence[Any]],
    total_ads_needed: Optional[float] = None,
    fc_override: OverrideInput = None,
    ugc_pct_exclude: Optional[float] = None,
    settings: Optional[EngineSettings] = None,
) -> FcOutput:
    """
    Compute the FC sheet for a month.

    Parameters
    ----------
    month_key : str
        Month key such as 'May26'.
    rows : Sequence[UseCaseRow | dict]
        Historical use-case rows of the run.
    total_ads_needed : float, optional
        Direct override of the month's total ads needed.
    fc_override : ForecastOverride | dict, optional
        The month's override record.
    ugc_pct_exclude : float, optional
        UGC share carried to the CS engine, as 0-1 or 0-100 (settings
        default 0.27).
    settings : EngineSettings, optional
        Engine defaults.

    Returns
    -------
    FcOutput
        The computed FC sheet. Identical inputs give equal outputs.

    Examples
    --------
    >>> fc = compute_fc_output("May26", [])
    >>> fc.total_ads_needed
    525
    """
    settings = settings or _DEFAULT_SETTINGS
    override = coerce_override(fc_override)
    use_case_rows = coerce_rows(rows)

    total_ads = resolve_total_ads_needed(total_ads_needed, override, settings)
    header_block = build_header_block(total_ads, override, settings)

    asset_mix = []
    for bucket, pct in resolve_percentages("asset_mix", override, settings):
        target = round_count(pct * total_ads)
        asset_mix.append(FcAssetMixRow(
            bucket=bucket,
            pct_attribution=pct,
            production_target=target,
            forecasted=target,
        ))

    channel_mix = [
        FcChannelMixRow(channel=label, pct_attribution=pct, production_target=round_count(pct * total_ads))
        for label, pct in resolve_percentages("channel_mix", override, settings)
    ]

    funnel = []
    for stage, pct in resolve_percentages("funnel", override, settings):
        target = round_count(pct * total_ads)
        funnel.append(FcFunnelRow(stage=stage, pct_attribution=pct, production_target=target, forecasted=target))

    asset_type = []
    for label, pct in resolve_percentages("asset_type", override, settings):
        target = round_count(pct * total_ads)
        asset_type.append(FcAssetTypeRow(
            asset_type=label, pct_attribution=pct, production_target=target, forecasted=target,
        ))

    parsed_key = parse_month_key(month_key)
    if parsed_key is None:
        logger.warning(f"Month key '{month_key}' is not readable; use-case results left empty")
        window_frame = rows_to_frame([])
    else:
        year, month = parsed_key
        window_frame = filter_rolling_window(
            rows_to_frame(use_case_rows), year, month, settings.window_months
        )
    use_case_results = compute_use_case_results(window_frame, total_ads, override, settings)

    ugc = settings.ugc_pct_exclude if ugc_pct_exclude is None else normalize_pct(ugc_pct_exclude)

    output = FcOutput(
        month_key=month_key,
        month_label=month_label(month_key),
        total_ads_needed=total_ads,
        header_block=header_block,
        asset_mix=asset_mix,
        channel_mix=channel_mix,
        funnel=funnel,
        asset_type=asset_type,
        use_case_results=use_case_results,
        total_production_target=sum(r.production_target for r in asset_mix),
        total_forecasted=sum(r.forecasted for r in asset_mix),
        ugc_pct_exclude=ugc,
    )

    logger.info(
        f"Computed FC {month_key}: {total_ads} ads needed, "
        f"{len(window_frame)} rows in window, {len(use_case_results)} use cases"
    )
    return output
