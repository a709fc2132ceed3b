"""
Portfolio drift analysis for wealthcast.

Purpose
-------
Compares current holdings to a target allocation. Independent of the Monte
Carlo engine; feeds the rebalance advisor.

Mathematical Framework
----------------------
With V = Σ holdings.value and, for each targeted asset class c:

    w_c        = value_c / V                 (current weight)
    drift_c    = w_c - target_c              (positive = overweight)
    drift%_c   = drift_c / target_c · 100
    max_drift  = max_c |drift_c|
    rebalance  ⇔ max_drift > rebalance_threshold

V = 0 is defined behaviour: every drift is 0 and no rebalance is needed.

Key components
--------------
- AssetHolding: value held in one asset class
- AllocationTarget: target weights + rebalance threshold
- DriftEntry / DriftReport: per-class and portfolio-level drift
- DriftAnalyzer / calculate_drift: the computation
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

import pandas as pd

from .constants import DEFAULT_REBALANCE_THRESHOLD, WEIGHT_TOLERANCE
from .exceptions import ValidationError

__all__ = [
    "AssetHolding",
    "AllocationTarget",
    "DriftEntry",
    "DriftReport",
    "DriftAnalyzer",
    "calculate_drift",
]


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AssetHolding:
    """Market value held in one asset class."""
    asset_class: str
    value: float

    def __post_init__(self):
        if not self.asset_class:
            raise ValidationError("asset_class must be a non-empty string")
        if not math.isfinite(self.value) or self.value < 0:
            raise ValidationError(
                f"holding value for {self.asset_class!r} must be finite and >= 0, got {self.value}"
            )


@dataclass(frozen=True)
class AllocationTarget:
    """
    Target weights per asset class.

    Parameters
    ----------
    weights : Mapping[str, float]
        Asset class → target weight in [0, 1]; weights sum to at most 1.
        An empty mapping is allowed and always yields HOLD downstream.
    rebalance_threshold : float
        Maximum tolerated |drift| before a rebalance is advised.

    Examples
    --------
    >>> target = AllocationTarget({"stocks": 0.6, "bonds": 0.4}, rebalance_threshold=0.05)
    >>> target.weights["stocks"]
    0.6
    """
    weights: Mapping[str, float] = field(default_factory=dict)
    rebalance_threshold: float = DEFAULT_REBALANCE_THRESHOLD

    def __post_init__(self):
        weights = dict(self.weights)
        for asset_class, weight in weights.items():
            if not 0.0 <= weight <= 1.0:
                raise ValidationError(
                    f"target weight for {asset_class!r} must be in [0, 1], got {weight}"
                )
        total = sum(weights.values())
        if total > 1.0 + WEIGHT_TOLERANCE:
            raise ValidationError(f"target weights must sum to <= 1, got {total:.6f}")
        if not 0.0 <= self.rebalance_threshold <= 1.0:
            raise ValidationError(
                f"rebalance_threshold must be in [0, 1], got {self.rebalance_threshold}"
            )
        object.__setattr__(self, "weights", MappingProxyType(weights))

    @property
    def is_empty(self) -> bool:
        return not self.weights


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DriftEntry:
    """
    Drift of a single asset class.

    ``drift_percent`` is relative to the target weight; for a zero target it
    is ``inf`` when the class is held and 0 otherwise.
    """
    asset_class: str
    target: float
    current: float
    drift: float
    drift_percent: float
    current_value: float
    target_value: float

    @property
    def is_underweight(self) -> bool:
        return self.drift < 0

    @property
    def shortfall(self) -> float:
        """Value needed to reach the target (0 when at or above target)."""
        return max(0.0, self.target_value - self.current_value)


@dataclass(frozen=True)
class DriftReport:
    """Portfolio-level drift summary."""
    entries: Tuple[DriftEntry, ...]
    max_drift: float
    needs_rebalance: bool
    total_value: float
    rebalance_threshold: float
    untracked_classes: Tuple[str, ...] = ()

    def __getitem__(self, asset_class: str) -> DriftEntry:
        for entry in self.entries:
            if entry.asset_class == asset_class:
                return entry
        raise KeyError(asset_class)

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_frame(self) -> pd.DataFrame:
        """Entries as a DataFrame indexed by asset class."""
        columns = ["target", "current", "drift", "drift_percent", "current_value", "target_value"]
        frame = pd.DataFrame(
            [{c: getattr(e, c) for c in columns} for e in self.entries],
            index=pd.Index([e.asset_class for e in self.entries], name="asset_class"),
            columns=columns,
        )
        return frame

    def __repr__(self) -> str:
        status = "rebalance" if self.needs_rebalance else "stable"
        return (
            f"DriftReport({len(self.entries)} classes, max_drift={self.max_drift:.2%}, "
            f"{status})"
        )


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------

class DriftAnalyzer:
    """Computes DriftReports; stateless."""

    def calculate_drift(
        self,
        holdings: Iterable[AssetHolding],
        target: AllocationTarget,
    ) -> DriftReport:
        values: Dict[str, float] = {}
        for holding in holdings:
            values[holding.asset_class] = values.get(holding.asset_class, 0.0) + holding.value
        total_value = float(sum(values.values()))

        untracked = tuple(sorted(c for c in values if c not in target.weights and values[c] > 0))
        if untracked:
            warnings.warn(
                f"Holdings in {list(untracked)} have no target weight; they count "
                f"toward total value but receive no drift entry.",
                UserWarning,
            )

        if total_value == 0.0:
            entries = tuple(
                DriftEntry(
                    asset_class=c, target=w, current=0.0, drift=0.0,
                    drift_percent=0.0, current_value=0.0, target_value=0.0,
                )
                for c, w in target.weights.items()
            )
            return DriftReport(
                entries=entries,
                max_drift=0.0,
                needs_rebalance=False,
                total_value=0.0,
                rebalance_threshold=target.rebalance_threshold,
                untracked_classes=untracked,
            )

        entries = tuple(
            _entry(c, w, values.get(c, 0.0), total_value) for c, w in target.weights.items()
        )
        max_drift = max((abs(e.drift) for e in entries), default=0.0)
        return DriftReport(
            entries=entries,
            max_drift=max_drift,
            needs_rebalance=max_drift > target.rebalance_threshold,
            total_value=total_value,
            rebalance_threshold=target.rebalance_threshold,
            untracked_classes=untracked,
        )


def _entry(asset_class: str, target_weight: float, value: float, total: float) -> DriftEntry:
    current = value / total
    drift = current - target_weight
    if target_weight > 0:
        drift_percent = drift / target_weight * 100.0
    else:
        drift_percent = math.inf if value > 0 else 0.0
    return DriftEntry(
        asset_class=asset_class,
        target=target_weight,
        current=current,
        drift=drift,
        drift_percent=drift_percent,
        current_value=value,
        target_value=target_weight * total,
    )


def calculate_drift(
    holdings: Iterable[AssetHolding],
    target: Optional[AllocationTarget],
) -> DriftReport:
    """
    Compare *holdings* with *target*.

    A missing target is treated as an empty one.

    Examples
    --------
    >>> report = calculate_drift(
    ...     [AssetHolding("A", 80), AssetHolding("B", 20)],
    ...     AllocationTarget({"A": 0.6, "B": 0.4}, rebalance_threshold=0.05),
    ... )
    >>> round(report["A"].drift, 10), round(report["B"].drift, 10), report.needs_rebalance
    (0.2, -0.2, True)
    """
    return DriftAnalyzer().calculate_drift(holdings, target or AllocationTarget())
