"""
Configuration management module for wealthcast.

Purpose
-------
Pydantic models describing the JSON input files (financial state, simulation
settings, portfolio, stress scenarios) plus environment-driven application
settings. Each file model converts into the frozen domain dataclass with
``to_domain()``; domain-level validation (ValidationError,
ConfigurationError) still applies after conversion.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and ranges at the file boundary
- Immutable: frozen models, unknown keys rejected
- Environment-aware: AppSettings reads WEALTHCAST_* variables and .env

Example
-------
>>> from wealthcast.config import SimulationSettings
>>> settings = SimulationSettings(time_horizon_years=20, iterations=2_000, seed=7)
>>> settings.to_domain().total_steps
20
>>> SimulationSettings.model_validate_json(settings.model_dump_json()) == settings
True
"""

from __future__ import annotations
from typing import Dict, List, Literal, Optional
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_CASH_RETURN,
    DEFAULT_CHECK_INTERVAL,
    DEFAULT_EXPECTED_RETURN,
    DEFAULT_GUARDRAIL_REDUCTION,
    DEFAULT_GUARDRAIL_THRESHOLD,
    DEFAULT_ITERATIONS,
    DEFAULT_REBALANCE_THRESHOLD,
    DEFAULT_VOLATILITY,
    MAX_HORIZON_YEARS,
    MIN_HORIZON_YEARS,
)
from .drift import AllocationTarget, AssetHolding
from .market import MarketAssumption, StaticMarketAssumptions
from .state import FinancialState, SimulationConfig
from .stress import StressScenario

__all__ = [
    "FinancialStateConfig",
    "SimulationSettings",
    "HoldingConfig",
    "AllocationTargetConfig",
    "MarketAssumptionConfig",
    "PortfolioConfig",
    "StressScenarioConfig",
    "ProjectionRequest",
    "AppSettings",
]


# ---------------------------------------------------------------------------
# Financial state
# ---------------------------------------------------------------------------

class FinancialStateConfig(BaseModel):
    """
    Snapshot of a user's finances as stored in a JSON file.

    Examples
    --------
    >>> cfg = FinancialStateConfig(
    ...     net_worth=250_000, monthly_income=9_000, monthly_expense=6_000,
    ...     monthly_savings=3_000, asset_value=200_000, liquid_cash=50_000,
    ...     allocation={"stocks": 0.7, "bonds": 0.3},
    ... )
    >>> cfg.to_domain().net_monthly_flow
    3000.0
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    net_worth: float = Field(description="Total net worth (may be negative)")
    monthly_income: float = Field(default=0.0, ge=0, description="Gross monthly income")
    monthly_expense: float = Field(default=0.0, ge=0, description="Monthly spending")
    monthly_savings: float = Field(default=0.0, description="Monthly net savings")
    asset_value: float = Field(default=0.0, ge=0, description="Invested asset value")
    liquid_cash: float = Field(default=0.0, ge=0, description="Cash available for runway")
    allocation: Dict[str, float] = Field(
        default_factory=dict,
        description="Asset class to weight, each in [0, 1]"
    )

    def to_domain(self) -> FinancialState:
        return FinancialState(**self.model_dump())


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

class SimulationSettings(BaseModel):
    """
    Monte Carlo parameters as stored in a JSON file.

    ``seed`` is not part of the domain SimulationConfig; the CLI uses it to
    build a SeededRandomSource.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    time_horizon_years: int = Field(
        default=30,
        ge=MIN_HORIZON_YEARS,
        le=MAX_HORIZON_YEARS,
        description="Projection horizon in years"
    )
    iterations: int = Field(
        default=DEFAULT_ITERATIONS,
        ge=1,
        description="Number of Monte Carlo paths"
    )
    period_granularity: Literal["annual", "monthly"] = Field(
        default="annual",
        description="Simulation step length"
    )
    inflation_rate: float = Field(default=0.0, gt=-1, description="Annual inflation")
    expected_return: float = Field(
        default=DEFAULT_EXPECTED_RETURN, gt=-1,
        description="Expected annual arithmetic return"
    )
    return_volatility: float = Field(
        default=DEFAULT_VOLATILITY, ge=0,
        description="Annual return volatility"
    )
    monthly_contribution: float = Field(default=0.0, ge=0, description="Monthly contribution")
    dynamic_withdrawal_enabled: bool = Field(default=False, description="Enable guardrail")
    guardrail_threshold: float = Field(
        default=DEFAULT_GUARDRAIL_THRESHOLD, ge=0,
        description="Fraction of initial wealth that triggers the guardrail"
    )
    guardrail_reduction_factor: float = Field(
        default=DEFAULT_GUARDRAIL_REDUCTION, ge=0, le=1,
        description="Withdrawal cut while the guardrail is active"
    )
    retirement_start_period: Optional[int] = Field(
        default=None, ge=0,
        description="Year in which withdrawals replace contributions"
    )
    monthly_withdrawal: Optional[float] = Field(
        default=None, ge=0,
        description="Monthly withdrawal in retirement (default: monthly expense)"
    )
    contribution_inflation_decay: bool = Field(
        default=False,
        description="Erode contributions by inflation over time"
    )
    record_sub_periods: bool = Field(
        default=False,
        description="Keep every monthly step on each path"
    )
    seed: Optional[int] = Field(
        default=None,
        description="Random seed for reproducibility"
    )

    def to_domain(self) -> SimulationConfig:
        return SimulationConfig(**self.model_dump(exclude={"seed"}))


# ---------------------------------------------------------------------------
# Portfolio
# ---------------------------------------------------------------------------

class HoldingConfig(BaseModel):
    """Value held in one asset class."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    asset_class: str = Field(min_length=1, description="Asset class label")
    value: float = Field(ge=0, description="Market value")

    def to_domain(self) -> AssetHolding:
        return AssetHolding(asset_class=self.asset_class, value=self.value)


class AllocationTargetConfig(BaseModel):
    """Target weights and rebalance threshold."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    weights: Dict[str, float] = Field(
        default_factory=dict,
        description="Asset class to target weight"
    )
    rebalance_threshold: float = Field(
        default=DEFAULT_REBALANCE_THRESHOLD, ge=0, le=1,
        description="Maximum tolerated drift"
    )

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, v):
        """Each weight in [0, 1]."""
        for asset_class, weight in v.items():
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"weight for {asset_class!r} must be in [0, 1], got {weight}")
        return v

    def to_domain(self) -> AllocationTarget:
        return AllocationTarget(weights=self.weights, rebalance_threshold=self.rebalance_threshold)


class MarketAssumptionConfig(BaseModel):
    """Expected return and volatility of one asset class."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    expected_return: float = Field(gt=-1, description="Expected annual return")
    volatility: float = Field(default=0.0, ge=0, description="Annual volatility")

    def to_domain(self) -> MarketAssumption:
        return MarketAssumption(expected_return=self.expected_return, volatility=self.volatility)


class PortfolioConfig(BaseModel):
    """
    Holdings, target and optional market assumptions for drift analysis.

    Examples
    --------
    >>> cfg = PortfolioConfig(
    ...     holdings=[HoldingConfig(asset_class="A", value=80),
    ...               HoldingConfig(asset_class="B", value=20)],
    ...     target=AllocationTargetConfig(weights={"A": 0.6, "B": 0.4}),
    ... )
    >>> [h.asset_class for h in cfg.holdings_domain()]
    ['A', 'B']
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    holdings: List[HoldingConfig] = Field(default_factory=list, description="Current holdings")
    target: AllocationTargetConfig = Field(
        default_factory=AllocationTargetConfig,
        description="Target allocation"
    )
    market: Dict[str, MarketAssumptionConfig] = Field(
        default_factory=dict,
        description="Asset class to market assumption"
    )
    cash_return: float = Field(
        default=DEFAULT_CASH_RETURN,
        description="Return on idle cash for alpha estimates"
    )

    def holdings_domain(self) -> List[AssetHolding]:
        return [h.to_domain() for h in self.holdings]

    def market_domain(self) -> Optional[StaticMarketAssumptions]:
        if not self.market:
            return None
        return StaticMarketAssumptions({k: v.to_domain() for k, v in self.market.items()})


# ---------------------------------------------------------------------------
# Stress
# ---------------------------------------------------------------------------

class StressScenarioConfig(BaseModel):
    """Single-shock stress scenario."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    variable_affected: Literal["income", "expense", "asset_value"] = Field(
        description="Which variable the shock hits"
    )
    impact_magnitude: float = Field(ge=0, le=1, description="Shock size in [0, 1]")
    name: str = Field(default="", max_length=100, description="Scenario label")

    def to_domain(self) -> StressScenario:
        return StressScenario(
            variable_affected=self.variable_affected,
            impact_magnitude=self.impact_magnitude,
            name=self.name,
        )


# ---------------------------------------------------------------------------
# Projection request
# ---------------------------------------------------------------------------

class ProjectionRequest(BaseModel):
    """
    A complete projection input: financial state plus simulation settings.

    Examples
    --------
    >>> request = ProjectionRequest.model_validate({
    ...     "state": {"net_worth": 100_000, "monthly_income": 5_000,
    ...               "monthly_expense": 4_000},
    ...     "simulation": {"time_horizon_years": 10, "iterations": 200},
    ... })
    >>> request.simulation.to_domain().iterations
    200
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(default="", max_length=100, description="Request label")
    state: FinancialStateConfig = Field(description="Starting financial state")
    simulation: SimulationSettings = Field(
        default_factory=SimulationSettings,
        description="Monte Carlo parameters"
    )


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Variables are prefixed with WEALTHCAST_ (e.g. WEALTHCAST_EXECUTOR=process)
    and may also come from a .env file.

    Attributes
    ----------
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR"
    executor : str
        Monte Carlo executor: "serial", "thread" or "process"
    max_workers : int, optional
        Pool size for thread/process executors
    cancel_check_interval : int
        Paths simulated between two cancellation checks
    timeout_seconds : float, optional
        Abort projections running longer than this
    results_path : Path, optional
        Default JSON-lines file for projection history

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.executor
    'serial'
    """

    model_config = SettingsConfigDict(
        env_prefix="WEALTHCAST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )
    executor: Literal["serial", "thread", "process"] = Field(
        default="serial",
        description="Monte Carlo executor"
    )
    max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Worker pool size"
    )
    cancel_check_interval: int = Field(
        default=DEFAULT_CHECK_INTERVAL,
        ge=1,
        description="Paths between cancellation checks"
    )
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Projection timeout in seconds"
    )
    results_path: Optional[Path] = Field(
        default=None,
        description="JSON-lines projection history file"
    )
