"""
Market assumptions collaborator.

Expected returns and volatilities per asset class are supplied by the caller
(never fetched live, never kept as module-level state). The rebalance advisor
consumes them through the ``MarketAssumptionsProvider`` protocol; the static
implementation below covers configuration files and tests.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Protocol, runtime_checkable

from .exceptions import ValidationError

__all__ = [
    "MarketAssumption",
    "MarketAssumptionsProvider",
    "StaticMarketAssumptions",
]


@dataclass(frozen=True)
class MarketAssumption:
    """Annual expected return and volatility for one asset class."""
    expected_return: float
    volatility: float

    def __post_init__(self):
        if not math.isfinite(self.expected_return) or self.expected_return <= -1:
            raise ValidationError(
                f"expected_return must be finite and > -1, got {self.expected_return}"
            )
        if not math.isfinite(self.volatility) or self.volatility < 0:
            raise ValidationError(f"volatility must be finite and >= 0, got {self.volatility}")


@runtime_checkable
class MarketAssumptionsProvider(Protocol):
    """Anything that can answer ``assumption_for(asset_class)``."""

    def assumption_for(self, asset_class: str) -> Optional[MarketAssumption]:
        ...


class StaticMarketAssumptions:
    """
    In-memory provider built from an explicit mapping.

    Parameters
    ----------
    assumptions : Mapping[str, MarketAssumption]
        Asset class → assumption.
    default : MarketAssumption, optional
        Returned for classes missing from *assumptions* (None if omitted).

    Examples
    --------
    >>> market = StaticMarketAssumptions({
    ...     "stocks": MarketAssumption(0.105, 0.165),
    ...     "bonds": MarketAssumption(0.052, 0.075),
    ... })
    >>> market.assumption_for("bonds").expected_return
    0.052
    """

    def __init__(
        self,
        assumptions: Mapping[str, MarketAssumption],
        default: Optional[MarketAssumption] = None,
    ):
        self._assumptions = MappingProxyType(dict(assumptions))
        self.default = default

    def assumption_for(self, asset_class: str) -> Optional[MarketAssumption]:
        return self._assumptions.get(asset_class, self.default)

    @property
    def asset_classes(self):
        return tuple(self._assumptions)

    def __repr__(self) -> str:
        return f"StaticMarketAssumptions({list(self._assumptions)})"
