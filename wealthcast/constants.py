"""
Global constants for wealthcast.

Purpose
-------
Centralizes default values and magic numbers used throughout the wealthcast
codebase. Using constants instead of hardcoded values keeps the simulator,
the advisors and the CLI consistent with each other.

Usage
-----
>>> from wealthcast.constants import DEFAULT_PERCENTILES, MONTHS_PER_YEAR
>>> len(DEFAULT_PERCENTILES)
5

Categories
----------
- Simulation: horizon bounds, iteration defaults, granularity
- Withdrawal: guardrail defaults
- Aggregation: percentile levels
- Rebalancing: drift threshold, cash return
- Stress testing: risk bands, crisis pivot, asset-value drag
- Execution: cancellation check interval, batching
- Plotting: figure sizes, band transparency
"""

from typing import Dict, Tuple

__all__ = [
    # Simulation
    "MONTHS_PER_YEAR",
    "MIN_HORIZON_YEARS",
    "MAX_HORIZON_YEARS",
    "DEFAULT_ITERATIONS",
    "DEFAULT_EXPECTED_RETURN",
    "DEFAULT_VOLATILITY",
    "STEPS_PER_YEAR",
    # Withdrawal
    "DEFAULT_GUARDRAIL_THRESHOLD",
    "DEFAULT_GUARDRAIL_REDUCTION",
    # Aggregation
    "DEFAULT_PERCENTILES",
    # Rebalancing
    "DEFAULT_REBALANCE_THRESHOLD",
    "DEFAULT_CASH_RETURN",
    "WEIGHT_TOLERANCE",
    # Stress
    "RISK_LOW_MONTHS",
    "RISK_MODERATE_MONTHS",
    "RISK_HIGH_MONTHS",
    "CRISIS_PIVOT_CUT",
    "ASSET_VALUE_GROWTH_DRAG",
    # Execution
    "DEFAULT_CHECK_INTERVAL",
    "TASKS_PER_WORKER",
    # Plotting
    "DEFAULT_FIGSIZE",
    "DEFAULT_ALPHA_OUTER_BAND",
    "DEFAULT_ALPHA_INNER_BAND",
    # Logging
    "LOG_FORMAT",
]


# =============================================================================
# Simulation Defaults
# =============================================================================

MONTHS_PER_YEAR: int = 12
"""Number of months in a year (for contribution/withdrawal scaling)."""

MIN_HORIZON_YEARS: int = 1
"""Shortest projection horizon accepted by SimulationConfig."""

MAX_HORIZON_YEARS: int = 50
"""Longest projection horizon accepted by SimulationConfig."""

DEFAULT_ITERATIONS: int = 1_000
"""Default number of Monte Carlo paths."""

DEFAULT_EXPECTED_RETURN: float = 0.07
"""Default arithmetic annual expected return (7%)."""

DEFAULT_VOLATILITY: float = 0.15
"""Default annual return volatility (15%)."""

STEPS_PER_YEAR: Dict[str, int] = {"annual": 1, "monthly": 12}
"""Sub-steps per simulated year for each period granularity."""


# =============================================================================
# Withdrawal Guardrail Defaults
# =============================================================================

DEFAULT_GUARDRAIL_THRESHOLD: float = 0.5
"""Fraction of initial wealth below which spending is cut."""

DEFAULT_GUARDRAIL_REDUCTION: float = 0.2
"""Fractional spending cut applied while the guardrail is active."""


# =============================================================================
# Aggregation Defaults
# =============================================================================

DEFAULT_PERCENTILES: Tuple[int, ...] = (10, 25, 50, 75, 90)
"""Percentile levels reported in every ProjectionResult."""


# =============================================================================
# Rebalancing Defaults
# =============================================================================

DEFAULT_REBALANCE_THRESHOLD: float = 0.05
"""Absolute weight drift that triggers a rebalance (5 percentage points)."""

DEFAULT_CASH_RETURN: float = 0.04
"""Return assumed for idle cash when estimating deployment alpha."""

WEIGHT_TOLERANCE: float = 1e-9
"""Tolerance when checking that allocation weights sum to at most 1."""


# =============================================================================
# Stress Testing
# =============================================================================

RISK_LOW_MONTHS: float = 24.0
"""Runway above this many months is classified Low risk."""

RISK_MODERATE_MONTHS: float = 12.0
"""Runway above this many months (up to RISK_LOW_MONTHS) is Moderate."""

RISK_HIGH_MONTHS: float = 6.0
"""Runway above this many months (up to RISK_MODERATE_MONTHS) is High."""

CRISIS_PIVOT_CUT: float = 0.30
"""Discretionary spending cut assumed by the crisis pivot."""

ASSET_VALUE_GROWTH_DRAG: float = 0.9
"""Multiplier applied to net monthly drift after an asset-value shock."""


# =============================================================================
# Execution
# =============================================================================

DEFAULT_CHECK_INTERVAL: int = 100
"""Paths simulated between two cancellation checks."""

TASKS_PER_WORKER: int = 4
"""Batches submitted per pool worker (load balancing vs. overhead)."""


# =============================================================================
# Plotting Defaults
# =============================================================================

DEFAULT_FIGSIZE: Tuple[int, int] = (12, 6)
"""Standard figure size (width, height) in inches."""

DEFAULT_ALPHA_OUTER_BAND: float = 0.15
"""Transparency for the p10-p90 band."""

DEFAULT_ALPHA_INNER_BAND: float = 0.30
"""Transparency for the p25-p75 band."""


# =============================================================================
# Logging
# =============================================================================

LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
"""Record format applied by ``log.configure_logging``."""
