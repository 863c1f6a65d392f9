"""
Tests for analysis/overview.py - Multi-month overview table.
"""

from asset_forecast.analysis.overview import OVERVIEW_COLUMNS, build_overview, sort_month_keys


class TestSortMonthKeys:

    def test_chronological(self):
        assert sort_month_keys(["May26", "Sept25", "Jan26"]) == ["Sept25", "Jan26", "May26"]

    def test_unreadable_last(self):
        assert sort_month_keys(["bad", "May26", "Jan26"]) == ["Jan26", "May26", "bad"]


class TestBuildOverview:
    """Tests for build_overview()."""

    def test_per_month_totals(self, sample_rows, sample_detail_rows):
        frame = build_overview(
            ["Jun26", "May26", "May26"],
            sample_rows,
            overrides={"May26": {"total_ads_needed": 400}},
            detail_rows={"May26": sample_detail_rows},
        )

        assert list(frame.columns) == OVERVIEW_COLUMNS
        assert list(frame["month_key"]) == ["May26", "Jun26"]
        assert list(frame["month_label"]) == ["May-26", "Jun-26"]
        assert list(frame["total_ads_needed"]) == [400, 525]
        assert list(frame["total_assets"]) == [16, 0]
        assert list(frame["difference"]) == [-384, -525]

    def test_empty(self):
        frame = build_overview([], [])
        assert frame.empty
        assert list(frame.columns) == OVERVIEW_COLUMNS
