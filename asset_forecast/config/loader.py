"""
Loader for engine settings stored as YAML.
"""

import yaml
from pathlib import Path
from typing import Union
import logging

from pydantic import ValidationError

from .schema import EngineSettings

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Load and save engine settings."""

    @staticmethod
    def from_yaml(path: Union[str, Path]) -> EngineSettings:
        """
        Load engine settings from a YAML file.

        Parameters
        ----------
        path : Union[str, Path]
            Path to the YAML settings file.

        Returns
        -------
        EngineSettings
            Validated settings. Keys missing from the file keep their
            defaults.

        Raises
        ------
        FileNotFoundError
            If the settings file doesn't exist.
        ValueError
            If the file is not a mapping or fails validation.
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            settings_dict = yaml.safe_load(f)

        if settings_dict is None:
            settings_dict = {}
        if not isinstance(settings_dict, dict):
            raise ValueError(f"Invalid settings in {path}: expected a mapping")

        try:
            settings = EngineSettings(**settings_dict)
        except ValidationError as e:
            raise ValueError(f"Invalid settings in {path}: {e}") from e

        logger.info(f"Loaded engine settings from {path}")
        return settings

    @staticmethod
    def to_yaml(settings: EngineSettings, path: Union[str, Path]) -> None:
        """
        Save engine settings to a YAML file.

        Parameters
        ----------
        settings : EngineSettings
            Settings to save.
        path : Union[str, Path]
            Destination path. Parent directories are created.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        settings_dict = settings.model_dump(mode="json")

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(settings_dict, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Saved engine settings to {path}")

    @staticmethod
    def from_dict(settings_dict: dict) -> EngineSettings:
        """Build settings from a dictionary."""
        return EngineSettings(**(settings_dict or {}))

    @staticmethod
    def get_template() -> dict:
        """
        Get a template settings dictionary holding every default.

        Returns
        -------
        dict
            Template that round-trips through from_dict().
        """
        return {
            "default_total_ads_needed": 525,
            "default_creative_budget_pct": 0.08,
            "ugc_pct_exclude": 0.27,
            "production_factor": 0.5,
            "window_months": 12,
            "default_asset_mix": {
                "BAU": 0.52,
                "EXP": 0.08,
                "CAM": 0.27,
                "Localisation": 0.05,
                "Growth": 0.08,
            },
            "default_channel_mix": {
                "Meta": 0.90,
                "TikTok": 0.10,
                "YouTube": 0.0,
            },
            "default_funnel": {
                "TOF": 0.75,
                "BOF": 0.20,
                "RET": 0.05,
            },
            "default_asset_type": {
                "Static": 0.38,
                "Carousel": 0.08,
                "Video": 0.22,
                "UGC": 0.27,
                "Partnership Code": 0.05,
            },
            "use_case_types": {
                "Generic": "BAU",
                "Bundles": "EXP",
                "ProductLaunch": "CAM",
            },
            "studio_agency_names": ["Studio N", "Studio L", "5pm"],
        }
