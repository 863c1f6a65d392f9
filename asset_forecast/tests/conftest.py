"""
Global pytest fixtures for Asset Forecast tests.
"""
import pytest

from asset_forecast.analysis.parity import parse_a1
from asset_forecast.config.schema import EngineSettings, ForecastOverride


USE_CASE_HEADER = [
    "", "Year", "Month", "UseCase", "Graph Spent", "Graph Revenue", "ROAS",
    "Results Spent", "Spent % total", "Forecasted Spent", "", "", "Forecasted Revenue",
]


def make_grid(cells: dict) -> list[list]:
    """Build a sheet grid from {A1 reference: value}."""
    positions = {parse_a1(ref): value for ref, value in cells.items()}
    n_rows = max((r for r, _ in positions), default=-1) + 1
    n_cols = max((c for _, c in positions), default=-1) + 1
    grid = [[None] * n_cols for _ in range(n_rows)]
    for (r, c), value in positions.items():
        grid[r][c] = value
    return grid


# =============================================================================
# Use-case rows
# =============================================================================

@pytest.fixture
def sample_rows() -> list[dict]:
    """
    Use-case rows around the May26 window (Jun 2025 - May 2026).

    In window: Generic 600, Bundles 300, ProductLaunch 100 (total 1000).
    Out of window: Generic in May 2025 and June 2026, plus a Sleep row
    whose year does not match its month date.
    """
    return [
        {"year_num": 2026, "month_date": "2026-05-01", "use_case": "Generic",
         "graph_spent": 600, "graph_revenue": 1800, "results_spent": 600, "forecasted_spent": 0},
        {"year_num": 2026, "month_date": "2026-01-01", "use_case": "Bundles",
         "graph_spent": 300, "graph_revenue": 600, "results_spent": 200, "forecasted_spent": 100},
        {"year_num": 2025, "month_date": "2025-11-01", "use_case": "ProductLaunch",
         "graph_spent": 100, "graph_revenue": 250, "results_spent": 100, "forecasted_spent": 0},
        {"year_num": 2025, "month_date": "2025-05-01", "use_case": "Generic",
         "graph_spent": 5000, "graph_revenue": 9000, "results_spent": 5000, "forecasted_spent": 0},
        {"year_num": 2026, "month_date": "2026-06-01", "use_case": "Generic",
         "graph_spent": 7000, "graph_revenue": 9000, "results_spent": 7000, "forecasted_spent": 0},
        {"year_num": 2026, "month_date": "2025-12-01", "use_case": "Sleep",
         "graph_spent": 400, "graph_revenue": 800, "results_spent": 400, "forecasted_spent": 0},
    ]


# =============================================================================
# Overrides and settings
# =============================================================================

@pytest.fixture
def sample_override_dict() -> dict:
    """May26 override with 0-100 percentages and a Generic boost."""
    return {
        "month_key": "May26",
        "total_ads_needed": 400,
        "adspend_target_global": 100000,
        "adspend_target_expansion": 50000,
        "creative_budget_pct": 8,
        "asset_mix_json": {
            "BAU": 50,
            "EXP": 10,
            "Campaigns / Product Launches": 30,
            "Localisation": 5,
            "Growth": 5,
        },
        "use_case_boost_json": {"Generic": 2},
    }


@pytest.fixture
def sample_override(sample_override_dict) -> ForecastOverride:
    return ForecastOverride.model_validate(sample_override_dict)


@pytest.fixture
def default_settings() -> EngineSettings:
    return EngineSettings()


# =============================================================================
# CS detail rows
# =============================================================================

@pytest.fixture
def sample_detail_rows() -> list[dict]:
    """
    Three briefing rows: 16 assets in total (9 static, 4 video, 3 carousel).

    Studio N holds 12 of them, Gain 4. Buckets: EXP 6, BAU 4, CAM 6.
    """
    return [
        {"siobhanRef": "R1", "contentBucket": "EXP", "static": 4, "video": 2, "carousel": 0,
         "typeUseCase": "Bundles", "studioAgency": "Studio N", "experimentName": "Bundle test",
         "briefOwner": "surya"},
        {"siobhan_ref": "R2", "content_bucket": "BAU", "static": "3", "video": None, "carousel": 1,
         "type_use_case": "Generic", "studio_agency": "Gain"},
        {"siobhanRef": "R3", "contentBucket": "Campaigns / Product Launches",
         "static": 2, "video": 2, "carousel": 2, "studioAgency": "Studio N"},
    ]


# =============================================================================
# Workbook
# =============================================================================

@pytest.fixture
def grid_factory():
    """make_grid, for tests that build their own sheets."""
    return make_grid


@pytest.fixture
def use_case_header() -> list:
    return list(USE_CASE_HEADER)


@pytest.fixture
def use_case_sheet() -> list[list]:
    """'Use Case Data' grid: title row, header row, then data rows."""
    return [
        ["Use Case - Results"],
        USE_CASE_HEADER,
        ["", 2026, "2026-05-01", "Generic", 600, 1800, 3, 600, 0.6, 0, "", "", ""],
        ["", 2026, "2026-01-01", "Bundles", 300, 600, 2, 200, 0.2, 100, "", "", 650],
        ["", 2025, "2025-11-01", "ProductLaunch", 100, 250, 2.5, 100, 0.1, 0, "", "", ""],
    ]


@pytest.fixture
def parity_workbook(use_case_sheet) -> dict:
    """Workbook whose control cells hold the default May26 engine values."""
    return {
        "Use Case Data": use_case_sheet,
        "FC-May26": make_grid({
            "A1": "May-26",
            "B3": 525,
            "F3": 273,
            "E8": 1,
            "F8": 525,
            "O11": 0.38,
            "P11": 200,
        }),
        "CS-May26": make_grid({
            "B8": 31,
            "B9": 199,
            "D8": 0,
            "G3": 0,
        }),
    }
