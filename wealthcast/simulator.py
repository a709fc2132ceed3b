"""
Single-path wealth simulation for wealthcast.

Mathematical Framework
----------------------
Each step of length Δt (1 year or 1/12 year) applies a geometric Brownian
motion return, then the phase cash flow, then the zero floor:

    μ      = ln(1 + expected_return)            (log-space expected return)
    drift  = μ - σ²/2
    G_k    = exp(drift·Δt + σ·sqrt(Δt)·Z_k),    Z_k ~ N(0, 1)
    W'     = W_k · G_k
    W_{k+1} = max(0, W' + C_k)                  accumulation
    W_{k+1} = max(0, W' - D_k)                  decumulation

Cash flows per step, with y_k = k·Δt years elapsed:

    C_k = contribution·12Δt                      (held constant by default)
    C_k = contribution·12Δt·(1 - π)^y_k          (contribution_inflation_decay)
    D_k = base_withdrawal·12Δt·(1 + π)^y_k
    D_k ← D_k·(1 - guardrail_reduction)          if W' < threshold·W_0

Using μ = ln(1 + r) makes E[G] = (1 + r)^Δt, so a zero-volatility path
reproduces compound growth exactly: W_T = W_0·(1 + r)^T.

Key components
--------------
- gbm_step_factor / scheduled_withdrawal / apply_guardrail:
    Scalar building blocks, exposed for reuse and testing.
- PathResult:
    Immutable wealth path, one value per year including year 0.
- WealthPathSimulator:
    Pure function of (state, config, source); no shared state, safe to call
    concurrently with independent sources.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .constants import MONTHS_PER_YEAR
from .random_source import RandomVariateSource, SystemRandomSource
from .state import FinancialState, SimulationConfig

__all__ = [
    "PathResult",
    "WealthPathSimulator",
    "gbm_step_factor",
    "gbm_growth_factors",
    "scheduled_withdrawal",
    "apply_guardrail",
]


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def gbm_step_factor(expected_return: float, volatility: float, dt: float, z: float) -> float:
    """
    Gross return 1 + R for one GBM step given a standard-normal draw *z*.

    Examples
    --------
    >>> round(gbm_step_factor(0.07, 0.0, 1.0, 0.0), 10)
    1.07
    """
    drift = math.log1p(expected_return) - 0.5 * volatility ** 2
    exponent = drift * dt + volatility * math.sqrt(dt) * z
    return float(np.exp(exponent))


def gbm_growth_factors(config: SimulationConfig, source: RandomVariateSource) -> np.ndarray:
    """
    Gross returns for every step of one path, shape (total_steps,).

    No draws are consumed when volatility is zero.
    """
    steps = config.total_steps
    dt = config.dt
    sigma = config.return_volatility
    drift = math.log1p(config.expected_return) - 0.5 * sigma ** 2
    if sigma == 0.0:
        z = np.zeros(steps, dtype=float)
    else:
        z = source.normals(steps)
    # Overflow yields inf; the zero floor in the path loop absorbs any NaN.
    with np.errstate(over="ignore"):
        return np.exp(drift * dt + sigma * math.sqrt(dt) * z)


def scheduled_withdrawal(base: float, inflation_rate: float, years_elapsed: float) -> float:
    """Inflation-scaled withdrawal: base·(1 + inflation)^years_elapsed."""
    return float(base * (1.0 + inflation_rate) ** years_elapsed)


def apply_guardrail(
    withdrawal: float,
    wealth: float,
    initial_wealth: float,
    threshold: float,
    reduction: float,
) -> Tuple[float, bool]:
    """
    Cut *withdrawal* by *reduction* when *wealth* is below threshold·initial.

    Returns
    -------
    (withdrawal, triggered) : Tuple[float, bool]

    Examples
    --------
    >>> apply_guardrail(1_000.0, 40_000.0, 100_000.0, 0.5, 0.2)
    (800.0, True)
    >>> apply_guardrail(1_000.0, 60_000.0, 100_000.0, 0.5, 0.2)
    (1000.0, False)
    """
    if wealth < threshold * initial_wealth:
        return withdrawal * (1.0 - reduction), True
    return withdrawal, False


# ---------------------------------------------------------------------------
# Path result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PathResult:
    """
    Wealth trajectory of one Monte Carlo path.

    Attributes
    ----------
    values : Tuple[float, ...]
        Wealth at each year boundary, length time_horizon_years + 1.
        values[0] is the (floored) starting wealth.
    success : bool
        True when the final value is strictly positive.
    sub_period_values : Tuple[float, ...], optional
        Wealth after every sub-step (length total_steps + 1), only when
        record_sub_periods was requested.
    guardrail_steps : int
        Number of steps in which the spending guardrail cut the withdrawal.
    """
    values: Tuple[float, ...]
    success: bool
    sub_period_values: Optional[Tuple[float, ...]] = None
    guardrail_steps: int = 0

    @property
    def final_value(self) -> float:
        return self.values[-1]

    def __len__(self) -> int:
        return len(self.values)


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------

class WealthPathSimulator:
    """
    Advances one stochastic wealth path across the configured horizon.

    The simulator holds no state between calls; the randomness comes only from
    the source passed to ``simulate``.

    Examples
    --------
    >>> from wealthcast.random_source import SeededRandomSource
    >>> state = FinancialState(net_worth=100_000)
    >>> cfg = SimulationConfig(time_horizon_years=10, iterations=1,
    ...                        return_volatility=0.0)
    >>> path = WealthPathSimulator().simulate(state, cfg, SeededRandomSource(1))
    >>> round(path.final_value, 2)
    196715.14
    """

    def simulate(
        self,
        state: FinancialState,
        config: SimulationConfig,
        source: Optional[RandomVariateSource] = None,
    ) -> PathResult:
        if source is None:
            source = SystemRandomSource()

        steps_per_year = config.steps_per_year
        dt = config.dt
        step_months = MONTHS_PER_YEAR * dt
        growth = gbm_growth_factors(config, source)

        initial_wealth = max(0.0, float(state.net_worth))
        contribution = config.monthly_contribution * step_months
        base_monthly = (
            config.monthly_withdrawal
            if config.monthly_withdrawal is not None
            else state.monthly_expense
        )
        base_withdrawal = base_monthly * step_months
        record_sub = config.record_sub_periods and steps_per_year > 1

        wealth = initial_wealth
        values: List[float] = [wealth]
        sub_values: Optional[List[float]] = [wealth] if record_sub else None
        guardrail_steps = 0

        for k in range(config.total_steps):
            period = k // steps_per_year
            years_elapsed = k * dt

            wealth = wealth * growth[k]

            if config.is_accumulation(period):
                flow = contribution
                if config.contribution_inflation_decay:
                    flow *= (1.0 - config.inflation_rate) ** years_elapsed
                wealth += flow
            else:
                withdrawal = scheduled_withdrawal(
                    base_withdrawal, config.inflation_rate, years_elapsed
                )
                if config.dynamic_withdrawal_enabled:
                    withdrawal, triggered = apply_guardrail(
                        withdrawal,
                        wealth,
                        initial_wealth,
                        config.guardrail_threshold,
                        config.guardrail_reduction_factor,
                    )
                    guardrail_steps += int(triggered)
                wealth -= withdrawal

            # NaN compares False, so it floors to zero as well
            wealth = float(wealth) if wealth > 0.0 else 0.0

            if sub_values is not None:
                sub_values.append(wealth)
            if (k + 1) % steps_per_year == 0:
                values.append(wealth)

        return PathResult(
            values=tuple(values),
            success=values[-1] > 0.0,
            sub_period_values=tuple(sub_values) if sub_values is not None else None,
            guardrail_steps=guardrail_steps,
        )
