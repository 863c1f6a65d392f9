"""
Tests for forecasting/fc_engine.py - FC sheet computation.
"""

import logging

import pytest

from asset_forecast.config.schema import EngineSettings, ForecastOverride
from asset_forecast.core.parser import rows_to_frame
from asset_forecast.forecasting.fc_engine import (
    build_header_block,
    coerce_override,
    coerce_rows,
    compute_fc_output,
    filter_rolling_window,
    resolve_percentages,
    resolve_total_ads_needed,
)


def _targets(rows, label_attr):
    return {getattr(r, label_attr): r.production_target for r in rows}


# =============================================================================
# Defaults
# =============================================================================

class TestDefaultOutput:
    """compute_fc_output() with no rows and no override."""

    @pytest.fixture
    def fc(self):
        return compute_fc_output("May26", [])

    def test_total_ads_and_labels(self, fc):
        assert fc.total_ads_needed == 525
        assert fc.month_key == "May26"
        assert fc.month_label == "May-26"

    def test_header_block_is_zero(self, fc):
        header = fc.header_block
        assert header.adspend_target_global == 0
        assert header.adspend_target_expansion == 0
        assert header.total_adspend_target == 0
        assert header.creative_budget_global == 0
        assert header.creative_budget_expansion == 0
        assert header.total_creative_budget == 0
        assert header.blended_cost_per_asset == 0
        assert header.creative_budget_pct == pytest.approx(0.08)

    def test_default_asset_mix(self, fc):
        assert _targets(fc.asset_mix, "bucket") == {
            "BAU": 273, "EXP": 42, "CAM": 142, "Localisation": 26, "Growth": 42,
        }
        assert [r.bucket for r in fc.asset_mix] == ["BAU", "EXP", "CAM", "Localisation", "Growth"]
        assert all(r.forecasted == r.production_target for r in fc.asset_mix)
        assert fc.total_production_target == 525
        assert fc.total_forecasted == 525

    def test_reserved_sub_fields_are_zero(self, fc):
        for row in fc.asset_mix:
            assert (row.static, row.carousel, row.video, row.ugc, row.partnership_code) == (0, 0, 0, 0, 0)

    def test_default_asset_type(self, fc):
        assert _targets(fc.asset_type, "asset_type") == {
            "Static": 200, "Carousel": 42, "Video": 116, "UGC": 142, "Partnership Code": 26,
        }
        assert all(r.cs_sheet == 0 for r in fc.asset_type)

    def test_default_funnel_and_channels(self, fc):
        assert _targets(fc.funnel, "stage") == {"TOF": 394, "BOF": 105, "RET": 26}
        assert _targets(fc.channel_mix, "channel") == {"Meta": 473, "TikTok": 53, "YouTube": 0}

    def test_no_use_case_results(self, fc):
        assert fc.use_case_results == []

    def test_ugc_default_carried(self, fc):
        assert fc.ugc_pct_exclude == pytest.approx(0.27)


# =============================================================================
# Overrides
# =============================================================================

class TestOverrides:
    """compute_fc_output() with an override."""

    def test_total_ads_from_override(self, sample_override_dict):
        fc = compute_fc_output("May26", [], fc_override=sample_override_dict)
        assert fc.total_ads_needed == 400

    def test_explicit_total_wins(self, sample_override):
        fc = compute_fc_output("May26", [], total_ads_needed=100, fc_override=sample_override)
        assert fc.total_ads_needed == 100

    def test_header_block(self, sample_override):
        header = compute_fc_output("May26", [], fc_override=sample_override).header_block
        assert header.total_adspend_target == 150000
        assert header.creative_budget_pct == pytest.approx(0.08)
        assert header.creative_budget_global == 8000
        assert header.creative_budget_expansion == 4000
        assert header.total_creative_budget == 12000
        assert header.blended_cost_per_asset == 30.0

    def test_percent_asset_mix(self, sample_override):
        fc = compute_fc_output("May26", [], fc_override=sample_override)
        assert _targets(fc.asset_mix, "bucket") == {
            "BAU": 200, "EXP": 40, "CAM": 120, "Localisation": 20, "Growth": 20,
        }
        assert fc.asset_mix_row("CAM").pct_attribution == pytest.approx(0.3)

    def test_groups_without_entries_use_defaults(self, sample_override):
        fc = compute_fc_output("May26", [], fc_override=sample_override)
        assert _targets(fc.funnel, "stage") == {"TOF": 300, "BOF": 80, "RET": 20}

    def test_fraction_and_percent_agree(self):
        as_fraction = compute_fc_output("May26", [], fc_override={"asset_mix_json": [{"label": "BAU", "pct": 0.52}]})
        as_percent = compute_fc_output("May26", [], fc_override={"asset_mix_json": [{"label": "BAU", "pct": 52}]})
        assert as_fraction.asset_mix_row("BAU").production_target == 273
        assert as_percent.asset_mix_row("BAU").production_target == 273

    def test_omitted_labels_are_zero(self):
        fc = compute_fc_output("May26", [], fc_override={"asset_mix_json": {"BAU": 100}})
        assert fc.asset_mix_row("BAU").production_target == 525
        assert fc.asset_mix_row("EXP").production_target == 0
        assert len(fc.asset_mix) == 5

    def test_extra_labels_appended(self):
        fc = compute_fc_output("May26", [], fc_override={"channel_mix_json": {"Meta": 80, "Pinterest": 20}})
        assert [r.channel for r in fc.channel_mix] == ["Meta", "TikTok", "YouTube", "Pinterest"]
        assert fc.channel_mix[-1].production_target == 105

    def test_zero_total_ads_guards_blended_cost(self):
        fc = compute_fc_output("May26", [], fc_override={"total_ads_needed": 0, "adspend_target_global": 1000})
        assert fc.total_ads_needed == 0
        assert fc.header_block.total_creative_budget == 80
        assert fc.header_block.blended_cost_per_asset == 0
        assert fc.total_production_target == 0

    def test_undecodable_override_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            fc = compute_fc_output("May26", [], fc_override={"pct_unit": "basis_points", "total_ads_needed": 10})
        assert fc.total_ads_needed == 525
        assert "Ignoring FC override" in caplog.text

    def test_ambiguous_one_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            fc = compute_fc_output("May26", [], fc_override={"asset_mix_json": {"BAU": 1}})
        assert fc.asset_mix_row("BAU").production_target == 525
        assert "exactly 1" in caplog.text

    def test_percent_unit_declared(self):
        fc = compute_fc_output("May26", [], fc_override={"pct_unit": "percent", "asset_mix_json": {"BAU": 1}})
        assert fc.asset_mix_row("BAU").pct_attribution == pytest.approx(0.01)
        assert fc.asset_mix_row("BAU").production_target == 5

    def test_unlabelled_entries_use_defaults(self):
        fc = compute_fc_output("May26", [], fc_override={"funnel_json": [{"label": "", "pct": 0.5}]})
        assert _targets(fc.funnel, "stage") == {"TOF": 394, "BOF": 105, "RET": 26}

    def test_extreme_adspend_does_not_raise(self):
        fc = compute_fc_output("May26", [], fc_override={
            "adspend_target_global": 1e308,
            "adspend_target_expansion": 1e308,
            "creative_budget_pct": 100,
        })
        assert fc.total_ads_needed == 525
        assert fc.total_production_target == 525


# =============================================================================
# Use-case results
# =============================================================================

class TestUseCaseResults:
    """Rolling-window aggregation and ads production."""

    def test_window_and_production(self, sample_rows):
        fc = compute_fc_output("May26", sample_rows)
        results = {r.use_case: r for r in fc.use_case_results}

        assert list(results) == ["Bundles", "Generic", "ProductLaunch"]

        generic = results["Generic"]
        assert generic.spend == 600
        assert generic.revenue == 1800
        assert generic.roas == pytest.approx(3.0)
        assert generic.pct_total_spend == pytest.approx(0.6)
        assert generic.manual_boost == 1
        assert generic.ads_production == 158
        assert generic.exp_production == 0
        assert generic.type == "BAU"

        bundles = results["Bundles"]
        assert bundles.spend == 300
        assert bundles.ads_production == 79
        assert bundles.exp_production == 79
        assert bundles.type == "EXP"

    def test_campaign_use_cases_get_no_production(self, sample_rows):
        fc = compute_fc_output("May26", sample_rows)
        launch = next(r for r in fc.use_case_results if r.use_case == "ProductLaunch")
        assert launch.type == "CAM"
        assert launch.spend == 100
        assert launch.ads_production == 0

    def test_boost_applied(self, sample_rows, sample_override):
        fc = compute_fc_output("May26", sample_rows, fc_override=sample_override)
        results = {r.use_case: r for r in fc.use_case_results}
        assert results["Generic"].manual_boost == 2
        assert results["Generic"].ads_production == 240
        assert results["Bundles"].ads_production == 60

    def test_extreme_boost_gives_no_production(self):
        rows = [{"year_num": 2026, "month_date": "2026-05-01", "use_case": "Generic", "results_spent": 100}]
        fc = compute_fc_output("May26", rows, fc_override={"use_case_boost_json": {"Generic": 1e308}})
        generic = fc.use_case_results[0]
        assert generic.use_case == "Generic"
        assert generic.ads_production == 0

    def test_unknown_use_cases_count_toward_total(self):
        rows = [
            {"year_num": 2026, "month_date": "2026-05-01", "use_case": "Generic", "results_spent": 500},
            {"year_num": 2026, "month_date": "2026-04-01", "use_case": "Mystery", "results_spent": 500},
        ]
        fc = compute_fc_output("May26", rows)
        assert [r.use_case for r in fc.use_case_results] == ["Generic"]
        assert fc.use_case_results[0].pct_total_spend == pytest.approx(0.5)

    def test_window_excludes_other_months(self, sample_rows):
        fc = compute_fc_output("Jun26", sample_rows)
        generic = next(r for r in fc.use_case_results if r.use_case == "Generic")
        # June 2026 is in, May 2025 falls out of the Jul25-Jun26 window
        assert generic.spend == 7600

    def test_unreadable_month_key(self, sample_rows, caplog):
        with caplog.at_level(logging.WARNING):
            fc = compute_fc_output("Month13", sample_rows)
        assert fc.use_case_results == []
        assert fc.month_label == "Month13"
        assert fc.total_ads_needed == 525
        assert "not readable" in caplog.text

    def test_idempotent(self, sample_rows, sample_override_dict):
        first = compute_fc_output("May26", sample_rows, fc_override=sample_override_dict)
        second = compute_fc_output("May26", sample_rows, fc_override=sample_override_dict)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_custom_settings(self, sample_rows):
        settings = EngineSettings(default_total_ads_needed=1000, production_factor=1.0)
        fc = compute_fc_output("May26", sample_rows, settings=settings)
        generic = next(r for r in fc.use_case_results if r.use_case == "Generic")
        assert fc.total_ads_needed == 1000
        assert generic.ads_production == 600


# =============================================================================
# Building blocks
# =============================================================================

class TestBuildingBlocks:
    """Tests for the helpers behind compute_fc_output()."""

    def test_coerce_override(self, sample_override):
        assert coerce_override(None) is None
        assert coerce_override(sample_override) is sample_override
        assert isinstance(coerce_override({"total_ads_needed": 10}), ForecastOverride)

    def test_coerce_rows_drops_invalid(self, caplog):
        with caplog.at_level(logging.WARNING):
            rows = coerce_rows([{"year_num": 2026, "use_case": "Generic"}, {"year_num": 2026, "use_case": ""}])
        assert len(rows) == 1
        assert "Dropped 1" in caplog.text

    def test_resolve_total_ads_needed(self, sample_override):
        assert resolve_total_ads_needed(None, None) == 525
        assert resolve_total_ads_needed(None, sample_override) == 400
        assert resolve_total_ads_needed("250.5", sample_override) == 251

    def test_resolve_percentages_defaults(self):
        pairs = resolve_percentages("funnel", None)
        assert pairs == [("TOF", 0.75), ("BOF", 0.20), ("RET", 0.05)]

    def test_build_header_block_rounds(self):
        override = ForecastOverride(adspend_target_global=12345, creative_budget_pct=0.1)
        header = build_header_block(7, override)
        assert header.creative_budget_global == 1235
        assert header.blended_cost_per_asset == 176.43

    def test_filter_rolling_window(self, sample_rows):
        frame = rows_to_frame(coerce_rows(sample_rows))
        window = filter_rolling_window(frame, 2026, 5)
        assert sorted(window["use_case"]) == ["Bundles", "Generic", "ProductLaunch"]

    def test_filter_empty_frame(self):
        assert filter_rolling_window(rows_to_frame([]), 2026, 5).empty
