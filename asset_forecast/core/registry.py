"""
Static lookup tables for the Asset Forecast workbook.

Labels, default percentage tables, use-case classification and sheet-name
conventions. Everything here is read-only: tables are tuples or
MappingProxyType so they cannot be mutated at runtime.
"""

from types import MappingProxyType
from typing import Optional

# =============================================================================
# Sheet names
# =============================================================================

USE_CASE_DATA_SHEET = "Use Case Data"
FC_SHEET_PREFIX = "FC-"
CS_SHEET_PREFIX = "CS-"


def fc_sheet_name(month_key: str) -> str:
    """Return the FC sheet name for a month key (e.g. 'FC-May26')."""
    return f"{FC_SHEET_PREFIX}{month_key}"


def cs_sheet_name(month_key: str) -> str:
    """Return the CS sheet name for a month key (e.g. 'CS-May26')."""
    return f"{CS_SHEET_PREFIX}{month_key}"


# =============================================================================
# Group labels (registry order = row order on the FC/CS sheets)
# =============================================================================

CONTENT_BUCKETS = ("BAU", "EXP", "CAM", "Localisation", "Growth")
ASSET_TYPES = ("Static", "Carousel", "Video", "UGC", "Partnership Code")
FUNNEL_STAGES = ("TOF", "BOF", "RET")
CHANNELS = ("Meta", "TikTok", "YouTube")

# Formats counted on CS detail rows (UGC and partnership are not briefed there)
DETAIL_FORMATS = ("Static", "Carousel", "Video")

USE_CASE_TYPES = ("BAU", "EXP", "CAM")

# =============================================================================
# Default percentage tables
# =============================================================================

DEFAULT_ASSET_MIX_PCT = MappingProxyType({
    "BAU": 0.52,
    "EXP": 0.08,
    "CAM": 0.27,
    "Localisation": 0.05,
    "Growth": 0.08,
})

DEFAULT_FUNNEL_PCT = MappingProxyType({
    "TOF": 0.75,
    "BOF": 0.20,
    "RET": 0.05,
})

DEFAULT_ASSET_TYPE_PCT = MappingProxyType({
    "Static": 0.38,
    "Carousel": 0.08,
    "Video": 0.22,
    "UGC": 0.27,
    "Partnership Code": 0.05,
})

DEFAULT_CHANNEL_MIX_PCT = MappingProxyType({
    "Meta": 0.90,
    "TikTok": 0.10,
    "YouTube": 0.0,
})

# =============================================================================
# Use cases
# =============================================================================

# Use case -> classification. Campaign-only names never get ads production.
USE_CASE_TYPE = MappingProxyType({
    "Bundles": "EXP",
    "Generic": "BAU",
    "Sleep": "BAU",
    "NoiseSensitive": "BAU",
    "Switch": "EXP",
    "Quiz": "EXP",
    "Festival": "BAU",
    "Focus": "BAU",
    "Kids": "BAU",
    "Comparison": "EXP",
    "Parenting": "BAU",
    "Wellness": "BAU",
    "DamagedHearing": "BAU",
    "Fashion": "BAU",
    "Hobbies": "BAU",
    "Reactive": "BAU",
    "SocialEvents": "BAU",
    "Sports": "BAU",
    "Travel&Commuting": "BAU",
    "Safety&Health@Work": "BAU",
    "BFCM": "BAU",
    "ProductLaunch": "CAM",
    "Christmas": "CAM",
    "ValentinesDay": "CAM",
    "MothersDay": "CAM",
    "FathersDay": "CAM",
    "PrimeDay": "CAM",
})

KNOWN_USE_CASES = tuple(USE_CASE_TYPE.keys())

DEFAULT_STUDIO_AGENCY_NAMES = (
    "Studio N",
    "Studio L",
    "5pm",
    "Studio N repurpose",
    "Monks",
    "Gain",
    "Viscap",
    "Loop Legends",
    "Reiterations",
    "Localisations",
    "KH",
    "Reactive",
)

# =============================================================================
# Label aliases
# =============================================================================

# Lower-cased spelling -> canonical label, shared by every percentage group
LABEL_ALIASES = MappingProxyType({
    "campaigns / product launches": "CAM",
    "campaigns": "CAM",
    "campaign": "CAM",
    "business as usual": "BAU",
    "experimental": "EXP",
    "experiments": "EXP",
    "localization": "Localisation",
    "partnership": "Partnership Code",
    "partnership code": "Partnership Code",
    "partnershipcode": "Partnership Code",
    "top of funnel": "TOF",
    "bottom of funnel": "BOF",
    "retention": "RET",
    "facebook": "Meta",
    "instagram": "Meta",
    "tik tok": "TikTok",
    "youtube": "YouTube",
})

_CANONICAL_LABELS = {
    label.lower(): label
    for label in CONTENT_BUCKETS + ASSET_TYPES + FUNNEL_STAGES + CHANNELS
}


def canonical_label(label: Optional[str]) -> str:
    """
    Map a user-supplied group label onto its canonical spelling.

    Unknown labels are returned trimmed but otherwise unchanged so they
    can still be reported as extra rows.
    """
    if label is None:
        return ""
    cleaned = str(label).strip()
    key = cleaned.lower()
    if key in _CANONICAL_LABELS:
        return _CANONICAL_LABELS[key]
    return LABEL_ALIASES.get(key, cleaned)


def classify_use_case(use_case: str, table=USE_CASE_TYPE) -> str:
    """Return BAU/EXP/CAM for a use case, BAU when unknown."""
    return table.get(use_case, "BAU")


# Percentage group -> canonical labels in sheet order
PERCENTAGE_GROUPS = MappingProxyType({
    "asset_mix": CONTENT_BUCKETS,
    "channel_mix": CHANNELS,
    "funnel": FUNNEL_STAGES,
    "asset_type": ASSET_TYPES,
})
