"""
Asset Forecast: creative production forecasting for paid social.

Reproduces the FC (forecast) and CS (content scheduling) sheets of the
Asset Forecast workbook from historical use-case spend, per-month
overrides and briefing rows.
"""

__version__ = "0.1.0"

from .config import EngineSettings, ForecastOverride, UseCaseRow, CsDetailRow, ConfigLoader
from .core.coercion import num, text
from .core.parser import parse_use_case_sheet
from .core.validation import parse_override, validate_override, OverrideValidationError
from .forecasting import compute_fc_output, compute_cs_output, FcOutput, CsOutput

__all__ = [
    "EngineSettings",
    "ForecastOverride",
    "UseCaseRow",
    "CsDetailRow",
    "ConfigLoader",
    "num",
    "text",
    "parse_use_case_sheet",
    "parse_override",
    "validate_override",
    "OverrideValidationError",
    "compute_fc_output",
    "compute_cs_output",
    "FcOutput",
    "CsOutput",
]
