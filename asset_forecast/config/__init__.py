"""Configuration and input schemas for Asset Forecast."""

from .schema import (
    UseCaseRow,
    PercentageEntry,
    ForecastOverride,
    CsDetailRow,
    EngineSettings,
)
from .loader import ConfigLoader

__all__ = [
    "UseCaseRow",
    "PercentageEntry",
    "ForecastOverride",
    "CsDetailRow",
    "EngineSettings",
    "ConfigLoader",
]
