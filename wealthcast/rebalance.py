"""
Cash deployment advice from a drift report.

Purpose
-------
Given a DriftReport and an amount of new cash (dividends, savings sweep),
decide where the cash should go. Rebalancing is done with new money only:
underweight classes are topped up, nothing is sold.

Algorithm
---------
1. If the report does not need a rebalance (or is empty) → HOLD.
2. Keep classes with drift < 0 (underweight), ordered by |drift| descending.
3. Walk that order, giving each class min(remaining_cash, shortfall) where
   shortfall = target_value - current_value. Later classes may receive 0.
4. Cash still left after every shortfall is covered is split across the
   underweight classes in proportion to their target weights, so the whole
   amount is deployed.
5. Optionally estimate the alpha of deploying instead of holding cash:

       weighted_return = Σ_c expected_return_c · (allocation_c / deployed)
       alpha           = weighted_return - cash_return

   Expected returns come from an injected MarketAssumptionsProvider.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Tuple

from .constants import DEFAULT_CASH_RETURN
from .drift import DriftReport
from .exceptions import ValidationError
from .market import MarketAssumptionsProvider

logger = logging.getLogger(__name__)

__all__ = [
    "RebalanceAllocation",
    "RebalanceRecommendation",
    "HOLD",
    "RebalanceAdvisor",
    "determine_destination",
    "estimate_alpha",
]


@dataclass(frozen=True)
class RebalanceAllocation:
    """
    Suggested deployment into one asset class.

    Attributes
    ----------
    asset_class : str
    suggested_allocation : float
        Cash to deploy (may be 0 when earlier classes used it all).
    priority : int
        1-based rank; 1 is the most underweight class.
    drift : float
        Weight drift of the class (negative).
    urgency : {"high", "medium"}
        "high" when |drift| exceeds twice the rebalance threshold.
    """
    asset_class: str
    suggested_allocation: float
    priority: int
    drift: float
    urgency: Literal["high", "medium"]


@dataclass(frozen=True)
class RebalanceRecommendation:
    """
    Ordered deployment plan, or HOLD.

    Attributes
    ----------
    action : {"DEPLOY", "HOLD"}
    allocations : Tuple[RebalanceAllocation, ...]
        Ordered by |drift| descending (empty for HOLD).
    cash_amount : float
        Cash offered for deployment.
    cash_deployed : float
        Sum of suggested allocations.
    expected_alpha : float, optional
        Estimated excess return over cash; None without market assumptions.
    """
    action: Literal["DEPLOY", "HOLD"]
    allocations: Tuple[RebalanceAllocation, ...] = ()
    cash_amount: float = 0.0
    cash_deployed: float = 0.0
    expected_alpha: Optional[float] = None

    @property
    def is_hold(self) -> bool:
        return self.action == "HOLD"

    @property
    def cash_remaining(self) -> float:
        return self.cash_amount - self.cash_deployed

    def allocation_for(self, asset_class: str) -> float:
        for item in self.allocations:
            if item.asset_class == asset_class:
                return item.suggested_allocation
        return 0.0

    def __repr__(self) -> str:
        if self.is_hold:
            return "RebalanceRecommendation(HOLD)"
        plan = ", ".join(f"{a.asset_class}=${a.suggested_allocation:,.0f}" for a in self.allocations)
        return f"RebalanceRecommendation(DEPLOY: {plan})"


HOLD = RebalanceRecommendation(action="HOLD")
"""Shared recommendation returned when no rebalance is needed."""


def estimate_alpha(
    allocations: Sequence[RebalanceAllocation],
    market: MarketAssumptionsProvider,
    cash_return: float = DEFAULT_CASH_RETURN,
) -> Optional[float]:
    """
    Expected excess return of the deployment over holding cash.

    Classes without an assumption contribute 0 expected return. Returns None
    when nothing is deployed.
    """
    deployed = sum(a.suggested_allocation for a in allocations)
    if deployed <= 0:
        return None
    weighted = 0.0
    for item in allocations:
        assumption = market.assumption_for(item.asset_class)
        if assumption is None:
            logger.debug("No market assumption for %s; using 0", item.asset_class)
            continue
        weighted += assumption.expected_return * (item.suggested_allocation / deployed)
    return weighted - cash_return


class RebalanceAdvisor:
    """
    Turns a DriftReport plus new cash into a deployment plan.

    Parameters
    ----------
    market : MarketAssumptionsProvider, optional
        Enables the expected-alpha estimate.
    cash_return : float
        Return credited to idle cash in the alpha estimate.
    """

    def __init__(
        self,
        market: Optional[MarketAssumptionsProvider] = None,
        cash_return: float = DEFAULT_CASH_RETURN,
    ):
        self.market = market
        self.cash_return = cash_return

    def determine_destination(
        self,
        drift_report: DriftReport,
        cash_amount: float,
    ) -> RebalanceRecommendation:
        if not math.isfinite(cash_amount) or cash_amount < 0:
            raise ValidationError(f"cash_amount must be finite and >= 0, got {cash_amount}")
        if not drift_report.needs_rebalance or not drift_report.entries:
            logger.info("Portfolio within tolerance; holding %.2f in cash", cash_amount)
            return HOLD

        underweight = sorted(
            (e for e in drift_report.entries if e.drift < 0),
            key=lambda e: abs(e.drift),
            reverse=True,
        )
        if not underweight:
            logger.info("No underweight classes; holding %.2f in cash", cash_amount)
            return HOLD

        remaining = float(cash_amount)
        amounts = []
        for entry in underweight:
            amount = min(remaining, entry.shortfall)
            remaining -= amount
            amounts.append(amount)

        # Cash left once every shortfall is covered follows the target weights.
        if remaining > 0:
            weights = [e.target for e in underweight]
            total_weight = sum(weights)
            for i, weight in enumerate(weights):
                share = weight / total_weight if total_weight > 0 else float(i == 0)
                amounts[i] += remaining * share
            remaining = 0.0

        threshold = drift_report.rebalance_threshold
        allocations = [
            RebalanceAllocation(
                asset_class=entry.asset_class,
                suggested_allocation=amount,
                priority=rank,
                drift=entry.drift,
                urgency="high" if abs(entry.drift) > 2 * threshold else "medium",
            )
            for rank, (entry, amount) in enumerate(zip(underweight, amounts), start=1)
        ]

        deployed = sum(amounts)
        alpha = (
            estimate_alpha(allocations, self.market, self.cash_return)
            if self.market is not None
            else None
        )
        logger.info(
            "Deploying %.2f of %.2f across %d underweight classes",
            deployed, cash_amount, len(allocations),
        )
        return RebalanceRecommendation(
            action="DEPLOY",
            allocations=tuple(allocations),
            cash_amount=float(cash_amount),
            cash_deployed=deployed,
            expected_alpha=alpha,
        )


def determine_destination(
    drift_report: DriftReport,
    cash_amount: float,
    *,
    market: Optional[MarketAssumptionsProvider] = None,
    cash_return: float = DEFAULT_CASH_RETURN,
) -> RebalanceRecommendation:
    """
    Functional entry point for RebalanceAdvisor.determine_destination.

    Examples
    --------
    >>> from wealthcast.drift import AssetHolding, AllocationTarget, calculate_drift
    >>> report = calculate_drift(
    ...     [AssetHolding("A", 80), AssetHolding("B", 20)],
    ...     AllocationTarget({"A": 0.6, "B": 0.4}),
    ... )
    >>> determine_destination(report, 100).allocation_for("B")
    100.0
    """
    return RebalanceAdvisor(market=market, cash_return=cash_return).determine_destination(
        drift_report, cash_amount
    )
