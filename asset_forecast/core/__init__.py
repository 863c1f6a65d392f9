"""Core helpers for Asset Forecast: coercion, month keys and lookup tables.

The sheet parser and override validation depend on the config schemas
and are imported from their modules (core.parser, core.validation).
"""

from .coercion import num, text, round_half_away, round_count, normalize_pct
from .months import parse_month_key, month_label, last_12_month_keys, month_key_to_batch_key
from .registry import (
    CONTENT_BUCKETS,
    ASSET_TYPES,
    FUNNEL_STAGES,
    CHANNELS,
    USE_CASE_TYPE,
    KNOWN_USE_CASES,
    DEFAULT_STUDIO_AGENCY_NAMES,
    classify_use_case,
    canonical_label,
)

__all__ = [
    "num",
    "text",
    "round_half_away",
    "round_count",
    "normalize_pct",
    "parse_month_key",
    "month_label",
    "last_12_month_keys",
    "month_key_to_batch_key",
    "CONTENT_BUCKETS",
    "ASSET_TYPES",
    "FUNNEL_STAGES",
    "CHANNELS",
    "USE_CASE_TYPE",
    "KNOWN_USE_CASES",
    "DEFAULT_STUDIO_AGENCY_NAMES",
    "classify_use_case",
    "canonical_label",
]
