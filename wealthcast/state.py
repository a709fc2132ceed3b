"""
Simulation inputs for wealthcast.

Purpose
-------
Defines the two immutable inputs of a projection:

- FinancialState:
    Snapshot of a household's finances, computed fresh by the caller from
    its own ledger aggregates. The core never mutates it.

- SimulationConfig:
    Monte Carlo parameters (horizon, iterations, return model, cash flows,
    withdrawal guardrail). Invalid values raise ConfigurationError at
    construction time, before any simulation work starts; nothing is clamped.

Design principles
-----------------
- Immutability: frozen dataclasses, allocation copied on construction
- Fail fast: every range is validated in __post_init__
- Units: horizon and retirement start are in years; cash flows are monthly
  and rescaled by the simulator to the step length
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal, Mapping, Optional

from .constants import (
    DEFAULT_EXPECTED_RETURN,
    DEFAULT_GUARDRAIL_REDUCTION,
    DEFAULT_GUARDRAIL_THRESHOLD,
    DEFAULT_ITERATIONS,
    DEFAULT_VOLATILITY,
    MAX_HORIZON_YEARS,
    MIN_HORIZON_YEARS,
    STEPS_PER_YEAR,
    WEIGHT_TOLERANCE,
)
from .exceptions import ConfigurationError, ValidationError

__all__ = [
    "FinancialState",
    "SimulationConfig",
    "Granularity",
]

Granularity = Literal["annual", "monthly"]


# ---------------------------------------------------------------------------
# Financial State
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FinancialState:
    """
    Point-in-time financial snapshot.

    Parameters
    ----------
    net_worth : float
        Starting wealth for the projection (may be negative; the simulator
        floors it at zero).
    monthly_income : float
        Gross monthly income (non-negative).
    monthly_expense : float
        Monthly spending (non-negative). Used as the default retirement
        withdrawal and as the baseline for expense shocks.
    monthly_savings : float
        Income minus expense as reported by the caller (may be negative).
    asset_value : float
        Market value of invested assets (non-negative).
    liquid_cash : float
        Cash available to absorb a shortfall (non-negative).
    allocation : Mapping[str, float]
        Asset class → weight, each in [0, 1], summing to at most 1.

    Examples
    --------
    >>> state = FinancialState(
    ...     net_worth=250_000, monthly_income=8_000, monthly_expense=5_500,
    ...     monthly_savings=2_500, asset_value=200_000, liquid_cash=50_000,
    ...     allocation={"stocks": 0.6, "bonds": 0.3},
    ... )
    >>> state.net_monthly_flow
    2500.0
    """
    net_worth: float
    monthly_income: float = 0.0
    monthly_expense: float = 0.0
    monthly_savings: float = 0.0
    asset_value: float = 0.0
    liquid_cash: float = 0.0
    allocation: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        for name in (
            "net_worth", "monthly_income", "monthly_expense",
            "monthly_savings", "asset_value", "liquid_cash",
        ):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValidationError(f"{name} must be finite, got {value}")
        for name in ("monthly_income", "monthly_expense", "asset_value", "liquid_cash"):
            value = getattr(self, name)
            if value < 0:
                raise ValidationError(f"{name} must be non-negative, got {value}")

        allocation = dict(self.allocation)
        for asset_class, weight in allocation.items():
            if not 0.0 <= weight <= 1.0:
                raise ValidationError(
                    f"allocation weight for {asset_class!r} must be in [0, 1], got {weight}"
                )
        total = sum(allocation.values())
        if total > 1.0 + WEIGHT_TOLERANCE:
            raise ValidationError(f"allocation weights must sum to <= 1, got {total:.6f}")
        # private copy; a plain dict keeps the state picklable for process pools
        object.__setattr__(self, "allocation", allocation)

    @classmethod
    def from_ledger(
        cls,
        *,
        monthly_income: float,
        monthly_expense: float,
        asset_value: float,
        liquid_cash: float,
        allocation: Optional[Mapping[str, float]] = None,
    ) -> "FinancialState":
        """
        Assemble a state from ledger aggregates.

        Derives ``monthly_savings = income - expense`` and
        ``net_worth = asset_value + liquid_cash``.
        """
        return cls(
            net_worth=asset_value + liquid_cash,
            monthly_income=monthly_income,
            monthly_expense=monthly_expense,
            monthly_savings=monthly_income - monthly_expense,
            asset_value=asset_value,
            liquid_cash=liquid_cash,
            allocation=allocation or {},
        )

    @property
    def net_monthly_flow(self) -> float:
        """Income minus expense (positive = saving, negative = burning)."""
        return float(self.monthly_income - self.monthly_expense)

    def __repr__(self) -> str:
        return (
            f"FinancialState(net_worth=${self.net_worth:,.0f}, "
            f"flow=${self.net_monthly_flow:,.0f}/month, "
            f"cash=${self.liquid_cash:,.0f})"
        )


# ---------------------------------------------------------------------------
# Simulation Config
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SimulationConfig:
    """
    Monte Carlo projection parameters.

    Parameters
    ----------
    time_horizon_years : int
        Projection length in years (1-50).
    iterations : int
        Number of independent paths (>= 1, typically 100-10,000).
    period_granularity : {"annual", "monthly"}
        Step length. Monthly splits each year into 12 sub-steps; wealth is
        still recorded once per year.
    inflation_rate : float
        Annual inflation used to scale withdrawals (> -1).
    expected_return : float
        Arithmetic annual expected return (> -1).
    return_volatility : float
        Annual volatility of log returns (>= 0).
    monthly_contribution : float
        Amount added per month during accumulation (>= 0).
    dynamic_withdrawal_enabled : bool
        Enable the spending guardrail during decumulation.
    guardrail_threshold : float
        Fraction of initial wealth below which spending is cut (>= 0).
    guardrail_reduction_factor : float
        Fractional spending cut while the guardrail is active ([0, 1]).
    retirement_start_period : int, optional
        First year (0-based) of decumulation. None means the whole horizon
        is accumulation.
    monthly_withdrawal : float, optional
        Base monthly retirement spending in today's money. None falls back to
        ``FinancialState.monthly_expense``.
    contribution_inflation_decay : bool
        Shrink contributions by (1 - inflation)^years. Off by default:
        contributions are held constant.
    record_sub_periods : bool
        Also keep wealth after every sub-step (monthly granularity only).

    Raises
    ------
    ConfigurationError
        If any value is outside its valid range.

    Examples
    --------
    >>> cfg = SimulationConfig(time_horizon_years=30, iterations=5_000,
    ...                        period_granularity="monthly",
    ...                        retirement_start_period=20,
    ...                        dynamic_withdrawal_enabled=True)
    >>> cfg.steps_per_year, cfg.total_steps
    (12, 360)
    """
    time_horizon_years: int = 30
    iterations: int = DEFAULT_ITERATIONS
    period_granularity: Granularity = "annual"
    inflation_rate: float = 0.0
    expected_return: float = DEFAULT_EXPECTED_RETURN
    return_volatility: float = DEFAULT_VOLATILITY
    monthly_contribution: float = 0.0
    dynamic_withdrawal_enabled: bool = False
    guardrail_threshold: float = DEFAULT_GUARDRAIL_THRESHOLD
    guardrail_reduction_factor: float = DEFAULT_GUARDRAIL_REDUCTION
    retirement_start_period: Optional[int] = None
    monthly_withdrawal: Optional[float] = None
    contribution_inflation_decay: bool = False
    record_sub_periods: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError on the first invalid field."""
        if not _is_int(self.time_horizon_years) or not (
            MIN_HORIZON_YEARS <= self.time_horizon_years <= MAX_HORIZON_YEARS
        ):
            raise ConfigurationError(
                f"time_horizon_years must be an integer in "
                f"[{MIN_HORIZON_YEARS}, {MAX_HORIZON_YEARS}], got {self.time_horizon_years!r}"
            )
        if not _is_int(self.iterations) or self.iterations < 1:
            raise ConfigurationError(f"iterations must be an integer >= 1, got {self.iterations!r}")
        if self.period_granularity not in STEPS_PER_YEAR:
            raise ConfigurationError(
                f"period_granularity must be one of {sorted(STEPS_PER_YEAR)}, "
                f"got {self.period_granularity!r}"
            )
        for name in (
            "inflation_rate", "expected_return", "return_volatility",
            "monthly_contribution", "guardrail_threshold", "guardrail_reduction_factor",
        ):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value}")
        if self.return_volatility < 0:
            raise ConfigurationError(
                f"return_volatility must be >= 0, got {self.return_volatility}"
            )
        if self.expected_return <= -1:
            raise ConfigurationError(f"expected_return must be > -1, got {self.expected_return}")
        if self.inflation_rate <= -1:
            raise ConfigurationError(f"inflation_rate must be > -1, got {self.inflation_rate}")
        if self.monthly_contribution < 0:
            raise ConfigurationError(
                f"monthly_contribution must be >= 0, got {self.monthly_contribution}"
            )
        if self.guardrail_threshold < 0:
            raise ConfigurationError(
                f"guardrail_threshold must be >= 0, got {self.guardrail_threshold}"
            )
        if not 0.0 <= self.guardrail_reduction_factor <= 1.0:
            raise ConfigurationError(
                f"guardrail_reduction_factor must be in [0, 1], "
                f"got {self.guardrail_reduction_factor}"
            )
        if self.retirement_start_period is not None and (
            not _is_int(self.retirement_start_period) or self.retirement_start_period < 0
        ):
            raise ConfigurationError(
                f"retirement_start_period must be an integer >= 0 or None, "
                f"got {self.retirement_start_period!r}"
            )
        if self.monthly_withdrawal is not None and (
            not math.isfinite(self.monthly_withdrawal) or self.monthly_withdrawal < 0
        ):
            raise ConfigurationError(
                f"monthly_withdrawal must be a finite value >= 0 or None, "
                f"got {self.monthly_withdrawal}"
            )

    @property
    def steps_per_year(self) -> int:
        return STEPS_PER_YEAR[self.period_granularity]

    @property
    def dt(self) -> float:
        """Step length in years."""
        return 1.0 / self.steps_per_year

    @property
    def total_steps(self) -> int:
        return self.time_horizon_years * self.steps_per_year

    def is_accumulation(self, period: int) -> bool:
        """True if year *period* (0-based) is before retirement."""
        return self.retirement_start_period is None or period < self.retirement_start_period


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
