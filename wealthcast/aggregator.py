"""
Percentile aggregation of Monte Carlo paths.

Mathematical Framework
----------------------
For each period t = 0..H collect W_t across the n paths and sort ascending.
Percentile p is read with the nearest-rank rule:

    i(p) = clamp(ceil(p·n/100) - 1, 0, n - 1)
    P_p(t) = sorted_t[i(p)]

Because i(p) is non-decreasing in p, P_10 ≤ P_25 ≤ P_50 ≤ P_75 ≤ P_90 for
every period and every input. The arithmetic mean is reported alongside.

    success_probability = 100 · #{paths with success} / n

Key components
--------------
- PercentileBands: per-period p10/p25/p50/p75/p90/mean, each length H + 1
- ProjectionResult: bands + success probability; immutable, append-only
- PercentileAggregator: reduces PathResult lists into a ProjectionResult
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .constants import DEFAULT_PERCENTILES
from .exceptions import ValidationError
from .simulator import PathResult
from .state import SimulationConfig

__all__ = [
    "PercentileBands",
    "ProjectionResult",
    "PercentileAggregator",
    "nearest_rank_index",
]

BAND_NAMES: Tuple[str, ...] = ("p10", "p25", "p50", "p75", "p90", "mean")


def nearest_rank_index(p: float, n: int) -> int:
    """
    Zero-based index of percentile *p* in a sorted sample of size *n*.

    Examples
    --------
    >>> nearest_rank_index(10, 10), nearest_rank_index(50, 10), nearest_rank_index(90, 10)
    (0, 4, 8)
    >>> nearest_rank_index(10, 1)
    0
    """
    if n < 1:
        raise ValidationError(f"n must be >= 1, got {n}")
    return min(max(math.ceil(p * n / 100.0) - 1, 0), n - 1)


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PercentileBands:
    """Per-period summary statistics, one entry per year including year 0."""
    p10: Tuple[float, ...]
    p25: Tuple[float, ...]
    p50: Tuple[float, ...]
    p75: Tuple[float, ...]
    p90: Tuple[float, ...]
    mean: Tuple[float, ...]

    def __len__(self) -> int:
        return len(self.p50)

    def as_dict(self) -> Dict[str, Tuple[float, ...]]:
        return {name: getattr(self, name) for name in BAND_NAMES}


@dataclass(frozen=True)
class ProjectionResult:
    """
    Aggregated outcome of a Monte Carlo projection.

    Immutable once produced. Persisted as an append-only history record
    (see ``serialization.append_projection``), never edited in place.

    Attributes
    ----------
    bands : PercentileBands
        Per-year percentile bands, each of length time_horizon_years + 1.
    success_probability : float
        Share of paths ending with positive wealth, in percent [0, 100].
    iterations : int
        Number of paths aggregated.
    time_horizon_years : int
        Projection horizon.
    config : SimulationConfig, optional
        Snapshot of the configuration that produced the result.
    created_at : datetime
        UTC timestamp of aggregation.
    """
    bands: PercentileBands
    success_probability: float
    iterations: int
    time_horizon_years: int
    config: Optional[SimulationConfig] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def median_at_horizon(self) -> float:
        return self.bands.p50[-1]

    def final_percentiles(self) -> Dict[str, float]:
        """Band values at the last period."""
        return {name: values[-1] for name, values in self.bands.as_dict().items()}

    def to_frame(self) -> pd.DataFrame:
        """Bands as a DataFrame indexed by year (0..horizon)."""
        frame = pd.DataFrame(self.bands.as_dict())
        frame.index = pd.RangeIndex(len(frame), name="year")
        return frame

    def to_dict(self):
        """JSON-compatible record (see ``serialization.projection_to_dict``)."""
        from .serialization import projection_to_dict

        return projection_to_dict(self)

    def __repr__(self) -> str:
        return (
            f"ProjectionResult(horizon={self.time_horizon_years}y, "
            f"paths={self.iterations:,}, success={self.success_probability:.1f}%, "
            f"median_final=${self.median_at_horizon:,.0f})"
        )


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

class PercentileAggregator:
    """
    Reduces raw paths into percentile bands and a success probability.

    Stateless; the reported levels are DEFAULT_PERCENTILES (10, 25, 50, 75, 90).
    """

    percentiles: Tuple[int, ...] = DEFAULT_PERCENTILES

    def aggregate(
        self,
        paths: Sequence[PathResult],
        horizon: int,
        config: Optional[SimulationConfig] = None,
    ) -> ProjectionResult:
        """
        Build a ProjectionResult from *paths* over *horizon* years.

        Raises
        ------
        ValidationError
            If *paths* is empty or a path does not have horizon + 1 values.
        """
        n = len(paths)
        if n == 0:
            raise ValidationError("cannot aggregate an empty set of paths")
        expected = horizon + 1
        for i, path in enumerate(paths):
            if len(path.values) != expected:
                raise ValidationError(
                    f"path {i} has {len(path.values)} values, expected {expected} "
                    f"for a {horizon}-year horizon"
                )

        W = np.asarray([path.values for path in paths], dtype=float)  # (n, H+1)
        W_sorted = np.sort(W, axis=0)
        columns = {
            f"p{p}": tuple(float(v) for v in W_sorted[nearest_rank_index(p, n)])
            for p in self.percentiles
        }
        columns["mean"] = tuple(float(v) for v in W.mean(axis=0))

        successes = sum(1 for path in paths if path.success)
        return ProjectionResult(
            bands=PercentileBands(**columns),
            success_probability=100.0 * successes / n,
            iterations=n,
            time_horizon_years=horizon,
            config=config,
        )
