"""General utilities for wealthcast

Contents
--------
- Validation helpers
- Rate conversions (annual ↔ monthly, compounded)
- Cash-flow primitives (compound growth, runway)
- Reporting helpers (format_currency, millions_formatter)
"""

from __future__ import annotations

import math

__all__ = [
    # Validation
    "check_non_negative",
    # Rates
    "annual_to_monthly",
    "monthly_to_annual",
    # Cash flow
    "compound_growth",
    "calculate_runway",
    # Reporting
    "millions_formatter",
    "format_currency",
]

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_non_negative(name: str, value: float) -> None:
    """Raise if *value* is negative (strict)."""
    if value < 0:
        raise ValueError(f"{name} must be non-negative (got {value}).")


# ---------------------------------------------------------------------------
# Rate conversions (compounded)
# ---------------------------------------------------------------------------

def annual_to_monthly(r_annual: float) -> float:
    """Convert nominal annual rate to equivalent compounded monthly rate.

    Uses: (1 + r_a) ** (1/12) - 1. Accepts negative values as well.
    """
    return float((1.0 + r_annual) ** (1.0 / 12.0) - 1.0)


def monthly_to_annual(r_monthly: float) -> float:
    """Convert nominal monthly rate to equivalent compounded annual rate.

    Uses: (1 + r_m) ** 12 - 1. Accepts negative values as well.
    """
    return float((1.0 + r_monthly) ** 12.0 - 1.0)


# ---------------------------------------------------------------------------
# Cash-flow primitives
# ---------------------------------------------------------------------------

def compound_growth(principal: float, rate: float, periods: float) -> float:
    """Grow *principal* at *rate* per period for *periods* periods.

    principal · (1 + rate) ** periods

    Examples
    --------
    >>> round(compound_growth(100_000, 0.07, 10), 2)
    196715.14
    """
    return float(principal * (1.0 + rate) ** periods)


def calculate_runway(balance: float, monthly_burn: float) -> float:
    """Months until *balance* is exhausted at *monthly_burn*.

    Returns ``math.inf`` when the burn is zero or negative (the position is
    self-sustaining or profitable).

    Parameters
    ----------
    balance : float
        Funds available to absorb the burn (non-negative).
    monthly_burn : float
        Net outflow per month.

    Examples
    --------
    >>> calculate_runway(12_000, 1_000)
    12.0
    >>> calculate_runway(5_000, 0)
    inf
    """
    check_non_negative("balance", balance)
    if monthly_burn <= 0:
        return math.inf
    return float(balance / monthly_burn)


# ---------------------------------------------------------------------------
# Matplotlib formatters
# ---------------------------------------------------------------------------

def millions_formatter(x, pos):
    """
    Format axis values as millions for matplotlib FuncFormatter.

    - 25_000_000 → "25M"
    - 12_500_000 → "12.5M"
    - 0 → "0"

    *pos* is unused but required by the FuncFormatter signature.
    """
    if x == 0:
        return '0'
    val = x / 1e6
    return f'{val:.0f}M' if val == int(val) else f'{val:.1f}M'


def format_currency(value, decimals=1, symbol='$', unit='M'):
    """
    Format a monetary value in millions for text labels and reports.

    - Consistent with millions_formatter() for axis ticks
    - ``math.inf`` renders as "∞" (used for unbounded runways)

    Examples
    --------
    >>> format_currency(2_340_000)
    '$2.3M'
    >>> format_currency(2_340_000, decimals=0)
    '$2M'
    """
    if math.isinf(value):
        return "∞"
    val = value / 1e6
    if decimals == 0:
        return f'{symbol}{val:.0f}{unit}'
    return f'{symbol}{val:.{decimals}f}{unit}'
