"""Tests for forecast orchestration and history merge."""

import math

import numpy as np
import pandas as pd
import pytest

from battery_cost_forecaster.chemistry import HISTORY_END_YEAR, Chemistry
from battery_cost_forecaster.core.adoption import UptakeShape
from battery_cost_forecaster.core.forecast import (
    ForecastParameters,
    compute_forecast,
    history_table,
    history_years,
    materials_breakdown,
    merge_with_history,
    percent_change,
)
from battery_cost_forecaster.utils.validators import validate_cost_trend, validate_forecast

# 22.2 + 36.8 * 0.8^5
LFP_AT_FIVE_DOUBLINGS = 34.258624


@pytest.fixture
def chemistries():
    """Create the default chemistry set."""
    return Chemistry.defaults()


@pytest.fixture
def default_result(chemistries):
    """Forecast with default parameters (2024, 12 years, 5 doublings, linear)."""
    return compute_forecast(chemistries, ForecastParameters())


class TestForecastParameters:
    """Test suite for ForecastParameters."""

    def test_defaults(self):
        """Test default parameter values."""
        params = ForecastParameters()
        assert params.start_year == 2024
        assert params.forecast_years == 12
        assert params.total_doublings == 5.0
        assert params.uptake_shape is UptakeShape.LINEAR

    def test_shape_from_string(self):
        """Test shape names are coerced to the enum."""
        assert ForecastParameters(uptake_shape="s-curve").uptake_shape is UptakeShape.S_CURVE

    def test_unknown_shape_rejected(self):
        """Test unknown shapes raise."""
        with pytest.raises(ValueError):
            ForecastParameters(uptake_shape="exponential")

    def test_years(self):
        """Test year labels."""
        assert ForecastParameters(start_year=2030, forecast_years=3).years == [2030, 2031, 2032]


class TestComputeForecast:
    """Test suite for compute_forecast."""

    def test_years_and_doublings(self, default_result):
        """Test year labels and doublings per step."""
        assert default_result.years == list(range(2024, 2036))
        assert default_result.doublings[0] == 0.0
        assert default_result.doublings[-1] == pytest.approx(5.0)
        assert default_result.doublings[6] == pytest.approx(5.0 * 6 / 11)

    def test_first_step_is_baseline(self, default_result, chemistries):
        """Test step 0 costs equal baseline for every chemistry."""
        for chem_id, chem in chemistries.items():
            assert default_result.costs[chem_id][0] == pytest.approx(chem.baseline_cost)

    def test_last_step_uses_total_doublings(self, default_result):
        """Test final step applies all doublings."""
        assert default_result.costs["lfp"][-1] == pytest.approx(LFP_AT_FIVE_DOUBLINGS)

    def test_costs_aligned_with_years(self, default_result):
        """Test every series has one cost per year."""
        for costs in default_result.costs.values():
            assert len(costs) == len(default_result.years)

    def test_series_pairs(self, default_result):
        """Test (year, cost) pairs."""
        series = default_result.series("lfp")
        assert series[0][0] == 2024
        assert series[0][1] == pytest.approx(59.0)
        assert series[-1][0] == 2035

    def test_summary(self, default_result):
        """Test percent change and direction."""
        summary = default_result.summaries["lfp"]
        assert summary.final_cost == pytest.approx(LFP_AT_FIVE_DOUBLINGS)
        assert summary.percent_change == pytest.approx(41.93, abs=0.01)
        assert summary.direction == "down"
        assert summary.arrow == "▼"

    def test_zero_doublings_is_flat(self, chemistries):
        """Test no doublings keeps cost at baseline."""
        result = compute_forecast(chemistries, ForecastParameters(total_doublings=0))
        for chem_id, chem in chemistries.items():
            assert result.costs[chem_id] == pytest.approx([chem.baseline_cost] * 12)
            assert result.summaries[chem_id].percent_change == pytest.approx(0.0, abs=1e-9)

    def test_single_year_horizon(self, chemistries):
        """Test a one-year horizon applies all doublings immediately."""
        result = compute_forecast(chemistries, ForecastParameters(forecast_years=1))
        assert result.years == [2024]
        assert result.doublings == [5.0]
        assert result.costs["lfp"][0] == pytest.approx(LFP_AT_FIVE_DOUBLINGS)

    def test_empty_horizon_rejected(self, chemistries):
        """Test a horizon shorter than one year raises."""
        with pytest.raises(ValueError, match="forecast_years"):
            compute_forecast(chemistries, ForecastParameters(forecast_years=0))

    def test_s_curve_midpoint_doublings(self, chemistries):
        """Test s-curve middle step consumes half the doublings."""
        params = ForecastParameters(forecast_years=11, uptake_shape="s-curve")
        result = compute_forecast(chemistries, params)
        assert result.doublings[5] == pytest.approx(2.5)

    def test_shape_does_not_change_endpoints(self, chemistries):
        """Test all shapes agree on first and last step."""
        for shape in UptakeShape:
            result = compute_forecast(chemistries, ForecastParameters(uptake_shape=shape))
            assert result.costs["nmc"][0] == pytest.approx(68.6)
            assert result.costs["nmc"][-1] == pytest.approx(
                compute_forecast(chemistries).costs["nmc"][-1]
            )

    def test_floor_above_baseline_reports_rise(self, chemistries):
        """Test floor above baseline: flat at floor, summary shows a rise."""
        chemistries["lfp"].floor_cost = 80.0
        result = compute_forecast(chemistries)
        assert result.costs["lfp"] == pytest.approx([80.0] * 12)
        assert result.summaries["lfp"].percent_change == pytest.approx((59 - 80) / 59 * 100)
        assert result.summaries["lfp"].direction == "up"
        assert result.summaries["lfp"].arrow == "▲"

    def test_to_dataframe(self, default_result):
        """Test forecast table layout."""
        df = default_result.to_dataframe()
        assert list(df.columns) == ["year", "doublings", "lfp", "nmc", "sodium"]
        assert len(df) == 12
        assert df["lfp"].iloc[-1] == pytest.approx(LFP_AT_FIVE_DOUBLINGS)

    def test_to_dict(self, default_result):
        """Test dictionary export."""
        data = default_result.to_dict()
        assert data["parameters"]["uptake_shape"] == "linear"
        assert data["summaries"]["sodium"]["direction"] == "down"
        assert len(data["costs"]["nmc"]) == 12

    def test_recompute_is_deterministic(self, chemistries):
        """Test repeated computation gives identical results."""
        first = compute_forecast(chemistries)
        second = compute_forecast(chemistries)
        assert first.costs == second.costs


class TestPercentChange:
    """Test suite for percent_change."""

    def test_fall_is_positive(self):
        assert percent_change(100.0, 75.0) == pytest.approx(25.0)

    def test_rise_is_negative(self):
        assert percent_change(100.0, 110.0) == pytest.approx(-10.0)

    def test_zero_baseline(self):
        assert math.isnan(percent_change(0.0, 10.0))

    def test_zero_baseline_summary_exports_none(self, chemistries):
        """Test an undefined change serializes as None."""
        chemistries["lfp"].baseline_cost = 0.0
        summary = compute_forecast(chemistries).summaries["lfp"]
        assert math.isnan(summary.percent_change)
        assert summary.to_dict()["percent_change"] is None


class TestHistoryMerge:
    """Test suite for merge_with_history and history tables."""

    def test_history_years(self, chemistries):
        """Test union of history years across chemistries."""
        assert history_years(chemistries, HISTORY_END_YEAR) == [
            2010, 2012, 2014, 2016, 2018, 2020, 2021, 2022, 2023, 2024,
        ]

    def test_history_years_cutoff(self, chemistries):
        """Test years after the cutoff are dropped."""
        assert history_years(chemistries, 2020)[-1] == 2020

    def test_timeline_shape(self, default_result, chemistries):
        """Test timeline covers history plus new forecast years for each chemistry."""
        timeline = merge_with_history(default_result, chemistries, HISTORY_END_YEAR)
        assert list(timeline.columns) == ["year", "chemistry", "cost", "is_historical"]
        # 10 history years + 2025..2035
        assert len(timeline) == 21 * 3

    def test_historical_flag(self, default_result, chemistries):
        """Test points up to and including the cutoff are historical."""
        timeline = merge_with_history(default_result, chemistries, HISTORY_END_YEAR)
        lfp = timeline[timeline["chemistry"] == "lfp"].set_index("year")
        assert bool(lfp.loc[2024, "is_historical"]) is True
        assert bool(lfp.loc[2025, "is_historical"]) is False

    def test_missing_observation_is_nan(self, default_result, chemistries):
        """Test years absent from one chemistry's history stay empty."""
        timeline = merge_with_history(default_result, chemistries, HISTORY_END_YEAR)
        lfp = timeline[timeline["chemistry"] == "lfp"].set_index("year")
        sodium = timeline[timeline["chemistry"] == "sodium"].set_index("year")
        assert np.isnan(lfp.loc[2021, "cost"])
        assert np.isnan(sodium.loc[2010, "cost"])
        assert sodium.loc[2021, "cost"] == 220.0

    def test_cutoff_year_shows_current_baseline(self, chemistries):
        """Test the cutoff year reflects an edited baseline, not the stored observation."""
        chemistries["nmc"].baseline_cost = 75.0
        result = compute_forecast(chemistries, ForecastParameters(start_year=2026))
        timeline = merge_with_history(result, chemistries, HISTORY_END_YEAR)
        nmc = timeline[timeline["chemistry"] == "nmc"].set_index("year")
        assert nmc.loc[2024, "cost"] == 75.0
        assert 2025 not in nmc.index

    def test_forecast_overrides_history(self, chemistries):
        """Test overlapping forecast years replace historical values."""
        result = compute_forecast(chemistries, ForecastParameters(start_year=2020))
        timeline = merge_with_history(result, chemistries, HISTORY_END_YEAR)
        lfp = timeline[timeline["chemistry"] == "lfp"].set_index("year")
        assert lfp.loc[2020, "cost"] == pytest.approx(59.0)
        assert lfp.loc[2021, "cost"] == pytest.approx(result.costs["lfp"][1])
        assert lfp.loc[2018, "cost"] == 162.0

    def test_history_table(self, chemistries):
        """Test wide history table with current baseline in the cutoff row."""
        chemistries["lfp"].baseline_cost = 61.0
        table = history_table(chemistries, HISTORY_END_YEAR)
        assert list(table.columns) == ["year", "lfp", "nmc", "sodium"]
        assert len(table) == 10
        rows = table.set_index("year")
        assert rows.loc[2024, "lfp"] == 61.0
        assert rows.loc[2010, "nmc"] == 780.0
        assert pd.isna(rows.loc[2010, "sodium"])

    def test_materials_breakdown(self, chemistries):
        """Test floor / above-floor split, never negative."""
        chemistries["sodium"].floor_cost = 100.0
        breakdown = materials_breakdown(chemistries).set_index("chemistry")
        assert breakdown.loc["lfp", "floor_cost"] == 22.2
        assert breakdown.loc["lfp", "above_floor"] == pytest.approx(36.8)
        assert breakdown.loc["sodium", "above_floor"] == 0.0
        assert breakdown.loc["nmc", "name"] == "NMC-811"


class TestForecastValidation:
    """Test validators against computed forecasts."""

    def test_default_forecast_valid(self, default_result, chemistries):
        """Test default forecast passes floor and trend checks."""
        report = validate_forecast(default_result, chemistries)
        assert set(report) == {"lfp", "nmc", "sodium"}
        for checks in report.values():
            assert all(check.passed for check in checks)

    def test_trend_detects_rise(self):
        """Test a rising series fails the trend check."""
        result = validate_cost_trend([60.0, 55.0, 58.0, 50.0])
        assert not result.passed
        assert result.details["increasing_count"] == 1
