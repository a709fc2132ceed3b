"""
Single-shock stress scenarios on liquid runway.

Purpose
-------
Apply one shock (income loss, expense increase or asset drawdown) to a
FinancialState and report how many months the liquid balance lasts, a risk
tier, and how much a crisis pivot (cutting spending by 30%) would extend it.

Mathematical Framework
----------------------
Baseline monthly drift and balance:

    drift   = monthly_income - monthly_expense
    balance = liquid_cash (+ asset_value when include_assets)

Shock with magnitude m ∈ [0, 1]:

    income       drift ← drift · (1 - m)
    expense      drift ← drift - m · monthly_expense
    asset_value  balance ← balance · (1 - m),  drift ← drift · 0.9

Runway and risk:

    burn   = max(0, -drift)
    runway = balance / burn   (∞ when burn = 0)
    risk   = Low (> 24) | Moderate (> 12) | High (> 6) | Critical

Crisis pivot: runway_pivot = runway / 0.7, benefit = runway_pivot - runway
(0 when runway is infinite).

Key components
--------------
- StressScenario: what is shocked and by how much
- StressResult: runway, risk tier, pivot benefit, recommendations
- StressScenarioRunner / run_stress_test: the computation
- DEFAULT_SCENARIOS: the standard catalogue offered to new users
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Optional, Tuple

import pandas as pd

from .constants import (
    ASSET_VALUE_GROWTH_DRAG,
    CRISIS_PIVOT_CUT,
    RISK_HIGH_MONTHS,
    RISK_LOW_MONTHS,
    RISK_MODERATE_MONTHS,
)
from .exceptions import ValidationError
from .state import FinancialState
from .utils import calculate_runway

logger = logging.getLogger(__name__)

__all__ = [
    "StressVariable",
    "RiskLevel",
    "StressScenario",
    "StressResult",
    "StressScenarioRunner",
    "DEFAULT_SCENARIOS",
    "classify_risk",
    "crisis_pivot_benefit",
    "run_stress_test",
]

StressVariable = Literal["income", "expense", "asset_value"]
RiskLevel = Literal["Low", "Moderate", "High", "Critical"]

STRESS_VARIABLES: Tuple[str, ...] = ("income", "expense", "asset_value")


# ---------------------------------------------------------------------------
# Scenario and result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StressScenario:
    """
    One shock applied to a financial state.

    Parameters
    ----------
    variable_affected : {"income", "expense", "asset_value"}
    impact_magnitude : float
        Size of the shock in [0, 1] (0.3 = 30%).
    name : str
        Display label.

    Examples
    --------
    >>> StressScenario("income", 1.0, name="Job loss").impact_magnitude
    1.0
    """
    variable_affected: StressVariable
    impact_magnitude: float
    name: str = ""

    def __post_init__(self):
        if self.variable_affected not in STRESS_VARIABLES:
            raise ValidationError(
                f"variable_affected must be one of {STRESS_VARIABLES}, "
                f"got {self.variable_affected!r}"
            )
        if not math.isfinite(self.impact_magnitude) or not 0.0 <= self.impact_magnitude <= 1.0:
            raise ValidationError(
                f"impact_magnitude must be in [0, 1], got {self.impact_magnitude}"
            )

    @property
    def label(self) -> str:
        return self.name or f"{self.variable_affected} shock ({self.impact_magnitude:.0%})"


@dataclass(frozen=True)
class StressResult:
    """
    Outcome of a stress test.

    Attributes
    ----------
    scenario : StressScenario
    runway_months : float
        Months the stressed balance lasts (``inf`` when there is no burn).
    risk_level : {"Low", "Moderate", "High", "Critical"}
    pivot_benefit_months : float
        Extra months gained by a 30% spending cut.
    balance : float
        Stressed liquid balance.
    projected_hit : float
        Balance lost to the shock itself.
    adjusted_drift : float
        Stressed monthly net flow (negative = burning cash).
    monthly_burn : float
        max(0, -adjusted_drift).
    recommendations : Tuple[str, ...]
        Actions suggested for this scenario and runway.
    """
    scenario: StressScenario
    runway_months: float
    risk_level: RiskLevel
    pivot_benefit_months: float
    balance: float
    projected_hit: float
    adjusted_drift: float
    monthly_burn: float
    recommendations: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_secure(self) -> bool:
        return math.isinf(self.runway_months)

    def projected_solvency_date(self, as_of: Optional[date] = None) -> Optional[date]:
        """
        Month in which the stressed balance runs out.

        Whole months of runway are added to *as_of* (default: today). Returns
        None when the runway is infinite.

        Examples
        --------
        >>> from datetime import date
        >>> result = run_stress_test(
        ...     FinancialState(net_worth=0, monthly_income=0, monthly_expense=1_000,
        ...                    monthly_savings=-1_000, asset_value=0, liquid_cash=6_500),
        ...     StressScenario("income", 0.0),
        ... )
        >>> result.projected_solvency_date(date(2025, 1, 15))
        datetime.date(2025, 7, 15)
        """
        if self.is_secure:
            return None
        start = pd.Timestamp(as_of) if as_of is not None else pd.Timestamp.today().normalize()
        return (start + pd.DateOffset(months=int(math.floor(self.runway_months)))).date()

    def __repr__(self) -> str:
        runway = "∞" if self.is_secure else f"{self.runway_months:.1f}"
        return (
            f"StressResult({self.scenario.label!r}, runway={runway} months, "
            f"risk={self.risk_level})"
        )


DEFAULT_SCENARIOS: Tuple[StressScenario, ...] = (
    StressScenario("asset_value", 0.30, name="Global recession (30% asset hit)"),
    StressScenario("income", 1.00, name="Total income stop (job loss)"),
    StressScenario("expense", 0.15, name="Rent/mortgage hike (15% expense delta)"),
    StressScenario("asset_value", 0.50, name="Black-swan volatility"),
)
"""Catalogue of standard scenarios offered when a user has none."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def classify_risk(runway_months: float) -> RiskLevel:
    """
    Risk tier for a runway in months.

    Examples
    --------
    >>> classify_risk(float("inf")), classify_risk(18), classify_risk(12), classify_risk(6)
    ('Low', 'Moderate', 'High', 'Critical')
    """
    if runway_months > RISK_LOW_MONTHS:
        return "Low"
    if runway_months > RISK_MODERATE_MONTHS:
        return "Moderate"
    if runway_months > RISK_HIGH_MONTHS:
        return "High"
    return "Critical"


def crisis_pivot_benefit(runway_months: float) -> float:
    """
    Extra runway months from cutting spending by CRISIS_PIVOT_CUT.

    Returns 0 for an infinite runway.
    """
    if math.isinf(runway_months):
        return 0.0
    return runway_months / (1.0 - CRISIS_PIVOT_CUT) - runway_months


def _recommendations(scenario: StressScenario, runway_months: float) -> Tuple[str, ...]:
    if runway_months > RISK_MODERATE_MONTHS:
        return ("Maintain current allocation", "Review scenario quarterly")

    recs = ["Reduce discretionary spending by 20% immediately"]
    if scenario.variable_affected == "income":
        recs.append("Explore side-income opportunities to offset the drift")
        recs.append("Consolidate high-interest debts to lower the burn")
    elif scenario.variable_affected == "asset_value":
        recs.append("Move 40% of volatile assets into stable holdings")
        recs.append("Avoid realizing losses unless liquidity is required")
    if runway_months < RISK_HIGH_MONTHS:
        recs.append("IMMEDIATE: Make emergency funds accessible without penalties")
    return tuple(recs)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

class StressScenarioRunner:
    """
    Applies a StressScenario to a FinancialState.

    Parameters
    ----------
    include_assets : bool
        Count ``asset_value`` as part of the runway balance in addition to
        ``liquid_cash`` (default False: only cash funds the runway).
    """

    def __init__(self, include_assets: bool = False):
        self.include_assets = include_assets

    def run_stress_test(self, state: FinancialState, scenario: StressScenario) -> StressResult:
        drift = state.monthly_income - state.monthly_expense
        balance = state.liquid_cash + (state.asset_value if self.include_assets else 0.0)
        starting_balance = balance
        m = scenario.impact_magnitude

        if scenario.variable_affected == "income":
            drift = drift * (1.0 - m)
        elif scenario.variable_affected == "expense":
            drift = drift - m * state.monthly_expense
        else:
            balance = balance * (1.0 - m)
            drift = drift * ASSET_VALUE_GROWTH_DRAG

        burn = max(0.0, -drift)
        runway = calculate_runway(balance, burn)
        risk = classify_risk(runway)

        logger.info(
            "Stress test %r: runway=%s months, risk=%s",
            scenario.label, "inf" if math.isinf(runway) else f"{runway:.1f}", risk,
        )
        return StressResult(
            scenario=scenario,
            runway_months=runway,
            risk_level=risk,
            pivot_benefit_months=crisis_pivot_benefit(runway),
            balance=balance,
            projected_hit=starting_balance - balance,
            adjusted_drift=drift,
            monthly_burn=burn,
            recommendations=_recommendations(scenario, runway),
        )

    def run_all(self, state: FinancialState, scenarios=DEFAULT_SCENARIOS) -> Tuple[StressResult, ...]:
        """Run every scenario in *scenarios* against *state*."""
        return tuple(self.run_stress_test(state, s) for s in scenarios)


def run_stress_test(
    state: FinancialState,
    scenario: StressScenario,
    *,
    include_assets: bool = False,
) -> StressResult:
    """
    Functional entry point for StressScenarioRunner.run_stress_test.

    Examples
    --------
    >>> state = FinancialState(net_worth=12_000, monthly_income=0, monthly_expense=1_000,
    ...                        monthly_savings=-1_000, asset_value=0, liquid_cash=12_000)
    >>> run_stress_test(state, StressScenario("income", 0.5)).runway_months
    24.0
    """
    return StressScenarioRunner(include_assets=include_assets).run_stress_test(state, scenario)
