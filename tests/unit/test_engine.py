"""
Unit tests for engine.py module.
"""

import pytest

from wealthcast.aggregator import ProjectionResult
from wealthcast.config import AppSettings
from wealthcast.drift import AllocationTarget, AssetHolding
from wealthcast.engine import ProjectionEngine, run_monte_carlo
from wealthcast.exceptions import CancelledError, ConfigurationError
from wealthcast.market import MarketAssumption, StaticMarketAssumptions
from wealthcast.random_source import SeededRandomSource
from wealthcast.state import SimulationConfig
from wealthcast.stress import StressScenario


class TestRunMonteCarlo:

    def test_zero_volatility_median(self, state_100k, deterministic_config):
        result = run_monte_carlo(state_100k, deterministic_config, source=SeededRandomSource(1))
        assert isinstance(result, ProjectionResult)
        assert result.median_at_horizon == pytest.approx(196_715.14, abs=0.01)
        assert result.success_probability == 100.0
        # every path is identical, so every band collapses
        final = result.final_percentiles()
        assert final["p10"] == pytest.approx(final["p90"])

    def test_reproducible_with_seed(self, state, stochastic_config):
        a = run_monte_carlo(state, stochastic_config, source=SeededRandomSource(21))
        b = run_monte_carlo(state, stochastic_config, source=SeededRandomSource(21))
        assert a.bands == b.bands

    def test_executor_does_not_change_result(self, state, stochastic_config):
        serial = run_monte_carlo(state, stochastic_config, source=SeededRandomSource(4))
        threaded = run_monte_carlo(state, stochastic_config, source=SeededRandomSource(4),
                                   executor="thread", max_workers=4)
        assert serial.bands == threaded.bands

    def test_config_snapshot(self, state, deterministic_config):
        result = run_monte_carlo(state, deterministic_config, source=SeededRandomSource(1))
        assert result.config == deterministic_config

    def test_invalid_config(self, state):
        with pytest.raises(ConfigurationError):
            run_monte_carlo(state, SimulationConfig(time_horizon_years=0))


class TestProjectionEngine:

    def test_from_settings(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("WEALTHCAST_EXECUTOR", "thread")
        monkeypatch.setenv("WEALTHCAST_MAX_WORKERS", "2")
        monkeypatch.setenv("WEALTHCAST_TIMEOUT_SECONDS", "30")
        engine = ProjectionEngine.from_settings(AppSettings())
        assert engine.orchestrator.executor == "thread"
        assert engine.orchestrator.max_workers == 2
        assert engine.timeout_seconds == 30

    def test_timeout_applies_when_no_token(self, state, stochastic_config):
        engine = ProjectionEngine(source=SeededRandomSource(1), timeout_seconds=0)
        with pytest.raises(CancelledError):
            engine.project(state, stochastic_config)

    def test_drift_and_destination(self, drifted_holdings, target_60_40):
        market = StaticMarketAssumptions({"B": MarketAssumption(0.06, 0.05)})
        engine = ProjectionEngine(market=market, cash_return=0.01)
        report = engine.calculate_drift(drifted_holdings, target_60_40)
        rec = engine.determine_destination(report, 100)
        assert rec.allocation_for("B") == pytest.approx(100)
        assert rec.expected_alpha == pytest.approx(0.05)

    def test_drift_without_target(self):
        engine = ProjectionEngine()
        report = engine.calculate_drift([], None)
        assert not report.needs_rebalance

    def test_stress(self, burning_state):
        engine = ProjectionEngine()
        result = engine.run_stress_test(burning_state, StressScenario("income", 0.0))
        assert result.runway_months == pytest.approx(12.0)

    def test_stress_including_assets(self):
        from wealthcast.state import FinancialState

        state = FinancialState(net_worth=20_000, monthly_expense=1_000,
                               asset_value=10_000, liquid_cash=10_000)
        engine = ProjectionEngine(include_assets_in_stress=True)
        result = engine.run_stress_test(state, StressScenario("expense", 0.0))
        assert result.runway_months == pytest.approx(20.0)

    def test_calculate_drift_accepts_generator(self, target_60_40):
        engine = ProjectionEngine()
        holdings = (AssetHolding(c, v) for c, v in (("A", 60), ("B", 40)))
        assert engine.calculate_drift(holdings, target_60_40).total_value == 100

    def test_empty_target_object(self, balanced_holdings):
        with pytest.warns(UserWarning):
            report = ProjectionEngine().calculate_drift(balanced_holdings, AllocationTarget())
        assert len(report) == 0
