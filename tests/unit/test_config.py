"""
Unit tests for config.py module.

Tests the pydantic file models, their conversion into domain objects and
environment-driven AppSettings.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from wealthcast.config import (
    AllocationTargetConfig,
    AppSettings,
    FinancialStateConfig,
    HoldingConfig,
    MarketAssumptionConfig,
    PortfolioConfig,
    ProjectionRequest,
    SimulationSettings,
    StressScenarioConfig,
)
from wealthcast.drift import AllocationTarget
from wealthcast.exceptions import ValidationError
from wealthcast.market import StaticMarketAssumptions
from wealthcast.state import FinancialState, SimulationConfig
from wealthcast.stress import StressScenario


# ============================================================================
# FINANCIAL STATE
# ============================================================================

class TestFinancialStateConfig:

    def test_defaults(self):
        cfg = FinancialStateConfig(net_worth=1_000)
        assert cfg.monthly_income == 0
        assert cfg.allocation == {}

    def test_to_domain(self):
        state = FinancialStateConfig(
            net_worth=5_000, monthly_income=100, allocation={"a": 0.5}
        ).to_domain()
        assert isinstance(state, FinancialState)
        assert state.allocation == {"a": 0.5}

    def test_negative_income_rejected(self):
        with pytest.raises(PydanticValidationError):
            FinancialStateConfig(net_worth=0, monthly_income=-1)

    def test_extra_field_forbidden(self):
        with pytest.raises(PydanticValidationError):
            FinancialStateConfig(net_worth=0, salary=10)

    def test_domain_validation_still_applies(self):
        cfg = FinancialStateConfig(net_worth=0, allocation={"a": 0.8, "b": 0.8})
        with pytest.raises(ValidationError):
            cfg.to_domain()

    def test_frozen(self):
        cfg = FinancialStateConfig(net_worth=0)
        with pytest.raises(PydanticValidationError):
            cfg.net_worth = 10


# ============================================================================
# SIMULATION
# ============================================================================

class TestSimulationSettings:

    def test_to_domain_drops_seed(self):
        settings = SimulationSettings(time_horizon_years=12, iterations=30, seed=3)
        cfg = settings.to_domain()
        assert isinstance(cfg, SimulationConfig)
        assert cfg.time_horizon_years == 12
        assert not hasattr(cfg, "seed")

    @pytest.mark.parametrize("kwargs", [
        {"time_horizon_years": 0},
        {"time_horizon_years": 60},
        {"iterations": 0},
        {"return_volatility": -0.1},
        {"period_granularity": "weekly"},
        {"guardrail_reduction_factor": 2.0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(PydanticValidationError):
            SimulationSettings(**kwargs)

    def test_json_round_trip(self):
        settings = SimulationSettings(retirement_start_period=20, monthly_withdrawal=3_000)
        assert SimulationSettings.model_validate_json(settings.model_dump_json()) == settings


# ============================================================================
# PORTFOLIO
# ============================================================================

class TestPortfolioConfig:

    @pytest.fixture
    def portfolio(self):
        return PortfolioConfig(
            holdings=[HoldingConfig(asset_class="A", value=80),
                      HoldingConfig(asset_class="B", value=20)],
            target=AllocationTargetConfig(weights={"A": 0.6, "B": 0.4}),
            market={"A": MarketAssumptionConfig(expected_return=0.1, volatility=0.2)},
        )

    def test_holdings_domain(self, portfolio):
        holdings = portfolio.holdings_domain()
        assert [h.value for h in holdings] == [80, 20]

    def test_target_domain(self, portfolio):
        target = portfolio.target.to_domain()
        assert isinstance(target, AllocationTarget)
        assert target.rebalance_threshold == 0.05

    def test_market_domain(self, portfolio):
        market = portfolio.market_domain()
        assert isinstance(market, StaticMarketAssumptions)
        assert market.assumption_for("A").expected_return == 0.1

    def test_no_market(self):
        assert PortfolioConfig().market_domain() is None

    def test_weight_out_of_range(self):
        with pytest.raises(PydanticValidationError, match="weight"):
            AllocationTargetConfig(weights={"A": 1.2})

    def test_negative_holding(self):
        with pytest.raises(PydanticValidationError):
            HoldingConfig(asset_class="A", value=-5)


# ============================================================================
# STRESS AND REQUEST
# ============================================================================

class TestStressScenarioConfig:

    def test_to_domain(self):
        scenario = StressScenarioConfig(
            variable_affected="expense", impact_magnitude=0.2, name="Rent hike"
        ).to_domain()
        assert scenario == StressScenario("expense", 0.2, name="Rent hike")

    def test_unknown_variable(self):
        with pytest.raises(PydanticValidationError):
            StressScenarioConfig(variable_affected="rates", impact_magnitude=0.1)


class TestProjectionRequest:

    def test_nested_validation(self):
        request = ProjectionRequest.model_validate({
            "name": "plan",
            "state": {"net_worth": 10},
            "simulation": {"iterations": 5},
        })
        assert request.simulation.iterations == 5
        assert request.simulation.time_horizon_years == 30

    def test_state_required(self):
        with pytest.raises(PydanticValidationError):
            ProjectionRequest.model_validate({"simulation": {}})


# ============================================================================
# APP SETTINGS
# ============================================================================

class TestAppSettings:

    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        settings = AppSettings()
        assert settings.executor == "serial"
        assert settings.log_level == "INFO"
        assert settings.timeout_seconds is None

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("WEALTHCAST_EXECUTOR", "thread")
        monkeypatch.setenv("WEALTHCAST_MAX_WORKERS", "3")
        monkeypatch.setenv("WEALTHCAST_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("WEALTHCAST_RESULTS_PATH", str(tmp_path / "h.jsonl"))
        settings = AppSettings()
        assert settings.executor == "thread"
        assert settings.max_workers == 3
        assert settings.timeout_seconds == 2.5
        assert settings.results_path == tmp_path / "h.jsonl"

    def test_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("WEALTHCAST_LOG_LEVEL=DEBUG\n")
        assert AppSettings().log_level == "DEBUG"

    def test_invalid_environment(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("WEALTHCAST_EXECUTOR", "gpu")
        with pytest.raises(PydanticValidationError):
            AppSettings()
