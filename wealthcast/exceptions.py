"""
Custom exceptions for wealthcast.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all wealthcast modules. All exceptions inherit from WealthcastError,
enabling catch-all handling when needed.

Exception Hierarchy
-------------------
WealthcastError (base)
├── ConfigurationError - Invalid simulation configuration or settings file
├── ValidationError - Domain input validation failures
├── CancelledError - Cooperative cancellation of a long-running simulation
└── SimulationError - Genuine fault while computing a path

Usage
-----
>>> from wealthcast.exceptions import ConfigurationError, CancelledError
>>>
>>> try:
...     result = run_monte_carlo(state, config, cancel_token=token)
... except CancelledError:
...     print("simulation aborted, nothing was produced")
... except WealthcastError as e:
...     print(f"wealthcast error: {e}")
"""

__all__ = [
    "WealthcastError",
    "ConfigurationError",
    "ValidationError",
    "CancelledError",
    "SimulationError",
]


class WealthcastError(Exception):
    """
    Base exception for all wealthcast errors.

    Examples
    --------
    >>> try:
    ...     engine.project(state, config)
    ... except WealthcastError as e:
    ...     logger.error("Projection failed: %s", e)
    """
    pass


class ConfigurationError(WealthcastError):
    """
    Invalid configuration or parameters.

    Raised synchronously, before any simulation work begins, when:
    - time_horizon_years is outside 1..50
    - iterations is not a positive integer
    - return_volatility is negative
    - a settings/request file fails schema validation

    Values are never clamped into range.

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "iterations must be >= 1, got 0. "
    ...     "Use at least one path for a projection."
    ... )
    """
    pass


class ValidationError(WealthcastError):
    """
    Data validation failures.

    Raised when domain inputs fail validation checks, such as:
    - Negative holding values or cash amounts
    - Impact magnitudes outside [0, 1]
    - Allocation weights that sum above 1
    - Aggregating an empty set of paths

    Examples
    --------
    >>> raise ValidationError(
    ...     f"impact_magnitude must be in [0, 1], got {magnitude}"
    ... )
    """
    pass


class CancelledError(WealthcastError):
    """
    Cooperative cancellation of a Monte Carlo run.

    Raised when a CancellationToken is cancelled (explicitly or by its
    deadline) while paths are still being generated. Partial results are
    discarded; no ProjectionResult is produced.

    Examples
    --------
    >>> raise CancelledError("Monte Carlo run cancelled after 4,200 of 10,000 paths")
    """
    pass


class SimulationError(WealthcastError):
    """
    Genuine computation fault.

    Raised when a worker fails while simulating a path for a reason other
    than cancellation or invalid configuration. The original exception is
    chained as ``__cause__``.

    Examples
    --------
    >>> raise SimulationError("path batch 3 failed: overflow in exp") from exc
    """
    pass
