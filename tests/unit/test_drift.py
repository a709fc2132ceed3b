"""
Unit tests for drift.py module.
"""

import math

import pandas as pd
import pytest

from wealthcast.drift import (
    AllocationTarget,
    AssetHolding,
    DriftAnalyzer,
    calculate_drift,
)
from wealthcast.exceptions import ValidationError


# ============================================================================
# INPUT VALIDATION
# ============================================================================

class TestInputs:

    def test_negative_holding_rejected(self):
        with pytest.raises(ValidationError, match="holding value"):
            AssetHolding("A", -1)

    def test_empty_asset_class_rejected(self):
        with pytest.raises(ValidationError):
            AssetHolding("", 10)

    def test_target_weight_out_of_range(self):
        with pytest.raises(ValidationError):
            AllocationTarget({"A": 1.5})

    def test_target_weights_over_one(self):
        with pytest.raises(ValidationError, match="sum"):
            AllocationTarget({"A": 0.7, "B": 0.4})

    def test_threshold_out_of_range(self):
        with pytest.raises(ValidationError, match="rebalance_threshold"):
            AllocationTarget({"A": 1.0}, rebalance_threshold=-0.1)

    def test_target_weights_read_only(self, target_60_40):
        with pytest.raises(TypeError):
            target_60_40.weights["A"] = 0.1


# ============================================================================
# DRIFT CALCULATION
# ============================================================================

class TestCalculateDrift:

    def test_drifted_portfolio(self, drifted_holdings, target_60_40):
        report = calculate_drift(drifted_holdings, target_60_40)
        assert report["A"].drift == pytest.approx(0.2)
        assert report["B"].drift == pytest.approx(-0.2)
        assert report.max_drift == pytest.approx(0.2)
        assert report.needs_rebalance

    def test_drift_percent_relative_to_target(self, drifted_holdings, target_60_40):
        report = calculate_drift(drifted_holdings, target_60_40)
        assert report["A"].drift_percent == pytest.approx(33.333, rel=1e-3)
        assert report["B"].drift_percent == pytest.approx(-50.0)

    def test_balanced_portfolio(self, balanced_holdings, target_60_40):
        report = calculate_drift(balanced_holdings, target_60_40)
        assert report.max_drift == pytest.approx(0.0)
        assert not report.needs_rebalance

    def test_drift_at_threshold_does_not_rebalance(self):
        report = calculate_drift(
            [AssetHolding("A", 75), AssetHolding("B", 25)],
            AllocationTarget({"A": 0.5, "B": 0.5}, rebalance_threshold=0.25),
        )
        assert report.max_drift == 0.25
        assert not report.needs_rebalance

    def test_zero_total_value(self, target_60_40):
        report = calculate_drift([AssetHolding("A", 0), AssetHolding("B", 0)], target_60_40)
        assert report.total_value == 0
        assert report.max_drift == 0
        assert not report.needs_rebalance
        assert all(e.drift == 0 for e in report)

    def test_no_holdings(self, target_60_40):
        report = calculate_drift([], target_60_40)
        assert len(report) == 2
        assert not report.needs_rebalance

    def test_missing_class_counts_as_zero(self, target_60_40):
        report = calculate_drift([AssetHolding("A", 100)], target_60_40)
        assert report["B"].current == 0
        assert report["B"].drift == pytest.approx(-0.4)
        assert report["B"].shortfall == pytest.approx(40)

    def test_duplicate_holdings_are_summed(self, target_60_40):
        report = calculate_drift(
            [AssetHolding("A", 30), AssetHolding("A", 30), AssetHolding("B", 40)], target_60_40
        )
        assert report["A"].current_value == 60
        assert not report.needs_rebalance

    def test_untracked_class_warns(self, target_60_40):
        holdings = [AssetHolding("A", 60), AssetHolding("B", 30), AssetHolding("crypto", 10)]
        with pytest.warns(UserWarning, match="crypto"):
            report = calculate_drift(holdings, target_60_40)
        assert report.untracked_classes == ("crypto",)
        assert report.total_value == 100
        with pytest.raises(KeyError):
            report["crypto"]

    def test_zero_target_held_gives_infinite_percent(self):
        report = calculate_drift(
            [AssetHolding("A", 90), AssetHolding("B", 10)],
            AllocationTarget({"A": 1.0, "B": 0.0}),
        )
        assert math.isinf(report["B"].drift_percent)
        assert report["B"].drift == pytest.approx(0.1)

    def test_zero_target_not_held(self):
        report = calculate_drift([AssetHolding("A", 100)], AllocationTarget({"A": 1.0, "B": 0.0}))
        assert report["B"].drift_percent == 0.0

    def test_none_target_is_empty(self, drifted_holdings):
        with pytest.warns(UserWarning):
            report = calculate_drift(drifted_holdings, None)
        assert len(report) == 0
        assert report.max_drift == 0
        assert not report.needs_rebalance

    def test_underweight_flags(self, drifted_holdings, target_60_40):
        report = calculate_drift(drifted_holdings, target_60_40)
        assert report["B"].is_underweight
        assert not report["A"].is_underweight
        assert report["A"].shortfall == 0

    def test_analyzer_matches_function(self, drifted_holdings, target_60_40):
        a = DriftAnalyzer().calculate_drift(drifted_holdings, target_60_40)
        b = calculate_drift(drifted_holdings, target_60_40)
        assert a == b


class TestDriftReport:

    def test_to_frame(self, drifted_holdings, target_60_40):
        frame = calculate_drift(drifted_holdings, target_60_40).to_frame()
        assert isinstance(frame, pd.DataFrame)
        assert list(frame.index) == ["A", "B"]
        assert frame.loc["A", "target_value"] == pytest.approx(60)

    def test_repr(self, drifted_holdings, target_60_40):
        assert "rebalance" in repr(calculate_drift(drifted_holdings, target_60_40))
