"""
Type definitions for wealthcast.

Purpose
-------
TypedDict definitions for the dictionary payloads that cross the
serialization boundary (projection history records, drift and stress
summaries printed by the CLI).

Usage
-----
>>> from wealthcast.types import BandsDict
>>> bands: BandsDict = {
...     "p10": [100.0], "p25": [100.0], "p50": [100.0],
...     "p75": [100.0], "p90": [100.0], "mean": [100.0],
... }

Type Definitions
----------------
BandsDict
    Per-year percentile bands: {"p10", "p25", "p50", "p75", "p90", "mean"}

ProjectionRecordDict
    One line of the projection history file

StressSummaryDict
    Flat stress result for display and export
"""

from typing import Dict, List, Optional, Union

from typing_extensions import NotRequired, TypedDict

__all__ = [
    "BandsDict",
    "ProjectionRecordDict",
    "StressSummaryDict",
]


class BandsDict(TypedDict):
    """
    Percentile bands keyed by band name.

    Each list has length time_horizon_years + 1 (index 0 is the start).
    """

    p10: List[float]
    p25: List[float]
    p50: List[float]
    p75: List[float]
    p90: List[float]
    mean: List[float]


class ProjectionRecordDict(TypedDict):
    """
    Serialized ProjectionResult.

    Attributes
    ----------
    schema_version : str
        Format version of the record.
    created_at : str
        ISO-8601 UTC timestamp.
    iterations : int
    time_horizon_years : int
    success_probability : float
        Percentage in [0, 100].
    bands : BandsDict
    config : dict, optional
        Simulation parameters that produced the result.
    """

    schema_version: str
    created_at: str
    iterations: int
    time_horizon_years: int
    success_probability: float
    bands: BandsDict
    config: NotRequired[Optional[Dict[str, Union[int, float, bool, str, None]]]]


class StressSummaryDict(TypedDict):
    """Flat view of a StressResult; runway is None when infinite."""

    scenario: str
    variable_affected: str
    impact_magnitude: float
    runway_months: Optional[float]
    risk_level: str
    pivot_benefit_months: float
    projected_hit: float
    monthly_burn: float
    recommendations: List[str]
