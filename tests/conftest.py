"""
Pytest configuration and fixtures for the wealthcast test suite.

Fixtures cover the common inputs: financial states, deterministic and
stochastic simulation configs, seeded random sources and small portfolios.
"""

import json
import logging

import pytest

from wealthcast.drift import AllocationTarget, AssetHolding
from wealthcast.random_source import SeededRandomSource
from wealthcast.state import FinancialState, SimulationConfig


# ---------------------------------------------------------------------------
# Basic Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def seed() -> int:
    """Standard random seed for reproducibility."""
    return 42


@pytest.fixture
def seeded_source(seed) -> SeededRandomSource:
    return SeededRandomSource(seed)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers attached by CLI invocations so they do not outlive a test."""
    yield
    logger = logging.getLogger("wealthcast")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Financial State Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def state() -> FinancialState:
    """
    Mid-career household.

    Net worth 250k, saving 3k/month, 50k liquid cash.
    """
    return FinancialState(
        net_worth=250_000,
        monthly_income=9_000,
        monthly_expense=6_000,
        monthly_savings=3_000,
        asset_value=200_000,
        liquid_cash=50_000,
        allocation={"stocks": 0.7, "bonds": 0.3},
    )


@pytest.fixture
def state_100k() -> FinancialState:
    """100k of invested wealth, no cash flows."""
    return FinancialState(net_worth=100_000, asset_value=100_000)


@pytest.fixture
def burning_state() -> FinancialState:
    """Spending 1k/month more than earned with 12k of cash."""
    return FinancialState(
        net_worth=12_000,
        monthly_income=3_000,
        monthly_expense=4_000,
        monthly_savings=-1_000,
        asset_value=0,
        liquid_cash=12_000,
    )


# ---------------------------------------------------------------------------
# Simulation Config Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def deterministic_config() -> SimulationConfig:
    """7% return, zero volatility, 10 years, accumulation only."""
    return SimulationConfig(
        time_horizon_years=10,
        iterations=20,
        expected_return=0.07,
        return_volatility=0.0,
    )


@pytest.fixture
def stochastic_config() -> SimulationConfig:
    """Small stochastic run used for structural checks."""
    return SimulationConfig(
        time_horizon_years=15,
        iterations=200,
        expected_return=0.07,
        return_volatility=0.15,
        monthly_contribution=500,
    )


@pytest.fixture
def guardrail_config() -> SimulationConfig:
    """
    Flat returns, 30/yr withdrawals from year 0, guardrail at 50% / 20% cut.

    Starting from 100: 100 → 70 → 40 → 16 → 0
    """
    return SimulationConfig(
        time_horizon_years=4,
        iterations=1,
        expected_return=0.0,
        return_volatility=0.0,
        retirement_start_period=0,
        monthly_withdrawal=2.5,
        dynamic_withdrawal_enabled=True,
        guardrail_threshold=0.5,
        guardrail_reduction_factor=0.2,
    )


# ---------------------------------------------------------------------------
# Portfolio Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def target_60_40() -> AllocationTarget:
    return AllocationTarget({"A": 0.6, "B": 0.4}, rebalance_threshold=0.05)


@pytest.fixture
def balanced_holdings():
    return [AssetHolding("A", 60), AssetHolding("B", 40)]


@pytest.fixture
def drifted_holdings():
    return [AssetHolding("A", 80), AssetHolding("B", 20)]


# ---------------------------------------------------------------------------
# File Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def request_file(tmp_path):
    """Projection request JSON with a deterministic simulation."""
    data = {
        "schema_version": "0.1.0",
        "name": "baseline",
        "state": {
            "net_worth": 100_000,
            "monthly_income": 5_000,
            "monthly_expense": 4_000,
            "monthly_savings": 1_000,
            "asset_value": 100_000,
            "liquid_cash": 0,
        },
        "simulation": {
            "time_horizon_years": 10,
            "iterations": 50,
            "expected_return": 0.07,
            "return_volatility": 0.0,
            "seed": 7,
        },
    }
    path = tmp_path / "request.json"
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def portfolio_file(tmp_path):
    data = {
        "schema_version": "0.1.0",
        "holdings": [
            {"asset_class": "A", "value": 80},
            {"asset_class": "B", "value": 20},
        ],
        "target": {"weights": {"A": 0.6, "B": 0.4}, "rebalance_threshold": 0.05},
        "market": {
            "A": {"expected_return": 0.10, "volatility": 0.16},
            "B": {"expected_return": 0.05, "volatility": 0.07},
        },
    }
    path = tmp_path / "portfolio.json"
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def state_file(tmp_path):
    data = {
        "schema_version": "0.1.0",
        "net_worth": 12_000,
        "monthly_income": 3_000,
        "monthly_expense": 4_000,
        "monthly_savings": -1_000,
        "liquid_cash": 12_000,
    }
    path = tmp_path / "state.json"
    path.write_text(json.dumps(data))
    return path
