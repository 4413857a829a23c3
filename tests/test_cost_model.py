"""Tests for the experience-curve cost model."""

import math

import numpy as np
import pytest

from battery_cost_forecaster.chemistry import Chemistry
from battery_cost_forecaster.core.cost_model import project_cost, project_costs, retention_ratio


class TestRetentionRatio:
    """Test suite for retention_ratio."""

    def test_typical(self):
        """Test ratio is 1 - learning rate inside [0, 1)."""
        assert retention_ratio(0.2) == pytest.approx(0.8)
        assert retention_ratio(0.0) == 1.0

    def test_clamped(self):
        """Test pathological learning rates are clamped."""
        assert retention_ratio(1.0) == 0.0
        assert retention_ratio(1.5) == 0.0
        assert retention_ratio(-0.3) == 1.0


class TestProjectCost:
    """Test suite for project_cost."""

    @pytest.fixture
    def lfp(self):
        """Create default LFP profile (59 / 22.2 / 20%)."""
        return Chemistry.from_name("lfp")

    @pytest.mark.parametrize("chem_id", ["lfp", "nmc", "sodium"])
    def test_zero_doublings_is_baseline(self, chem_id):
        """Test cost at zero doublings equals baseline."""
        chem = Chemistry.from_name(chem_id)
        assert project_cost(chem, 0) == pytest.approx(chem.baseline_cost)

    def test_one_doubling(self, lfp):
        """Test one doubling: 22.2 + 36.8 * 0.8."""
        assert project_cost(lfp, 1) == pytest.approx(51.64, abs=0.01)

    def test_five_doublings(self, lfp):
        """Test five doublings: 22.2 + 36.8 * 0.8^5."""
        assert project_cost(lfp, 5) == pytest.approx(34.26, abs=0.01)

    @pytest.mark.parametrize("chem_id", ["lfp", "nmc", "sodium"])
    def test_monotonic_non_increasing(self, chem_id):
        """Test cost never rises as doublings grow."""
        chem = Chemistry.from_name(chem_id)
        costs = [project_cost(chem, d) for d in np.linspace(0, 20, 101)]
        for i in range(1, len(costs)):
            assert costs[i] <= costs[i - 1]

    @pytest.mark.parametrize("chem_id", ["lfp", "nmc", "sodium"])
    def test_approaches_floor(self, chem_id):
        """Test cost converges to the floor for many doublings."""
        chem = Chemistry.from_name(chem_id)
        assert project_cost(chem, 200) == pytest.approx(chem.floor_cost, abs=1e-9)
        assert project_cost(chem, math.inf) == pytest.approx(chem.floor_cost)

    def test_never_below_floor(self, lfp):
        """Test floor holds for a wide range of doublings and rates."""
        for rate in (0.05, 0.2, 0.35, 0.99, 1.0, 1.7):
            lfp.learning_rate = rate
            for d in np.linspace(0, 50, 26):
                assert project_cost(lfp, d) >= lfp.floor_cost

    def test_floor_above_baseline_pins_cost_at_floor(self, lfp):
        """Test floor above baseline is accepted and clamps cost to the floor."""
        lfp.floor_cost = 80.0
        assert project_cost(lfp, 0) == 80.0
        assert project_cost(lfp, 3) == 80.0

    def test_learning_rate_at_or_above_one(self, lfp):
        """Test ratio clamp: baseline at zero doublings, floor afterwards."""
        lfp.learning_rate = 1.5
        assert project_cost(lfp, 0) == pytest.approx(59.0)
        assert project_cost(lfp, 0.5) == pytest.approx(22.2)

    def test_negative_learning_rate_holds_baseline(self, lfp):
        """Test negative learning rate clamps ratio to 1 (no learning)."""
        lfp.learning_rate = -0.2
        assert project_cost(lfp, 4) == pytest.approx(59.0)

    def test_negative_doublings_propagate(self, lfp):
        """Test negative doublings are not validated and run the curve backwards."""
        assert project_cost(lfp, -1) == pytest.approx(22.2 + 36.8 / 0.8)

    def test_nan_doublings_propagate(self, lfp):
        """Test NaN doublings give NaN cost rather than an exception."""
        assert math.isnan(project_cost(lfp, math.nan))

    def test_vectorized_matches_scalar(self, lfp):
        """Test project_costs agrees with project_cost element-wise."""
        doublings = np.array([0.0, 0.5, 1.0, 2.5, 5.0])
        expected = [project_cost(lfp, d) for d in doublings]
        np.testing.assert_allclose(project_costs(lfp, doublings), expected)

    def test_chemistry_method(self, lfp):
        """Test the convenience method on the chemistry."""
        assert lfp.project_cost(1) == pytest.approx(project_cost(lfp, 1))
        assert lfp.retention_ratio == pytest.approx(0.8)
