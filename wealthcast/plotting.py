"""
Plotting utilities for wealthcast results.

Purpose
-------
Fan charts for ProjectionResult and weight bars for DriftReport. Functions
draw onto a supplied ``Axes`` when given one and otherwise create a figure,
returning ``(fig, ax)`` in both cases so callers can save or compose them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np

from .constants import DEFAULT_ALPHA_INNER_BAND, DEFAULT_ALPHA_OUTER_BAND, DEFAULT_FIGSIZE

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure

    from .aggregator import ProjectionResult
    from .drift import DriftReport

__all__ = ["plot_projection", "plot_drift"]


def _figure_and_axes(ax: Optional["Axes"]) -> Tuple["Figure", "Axes"]:
    from matplotlib import pyplot as plt

    if ax is None:
        fig, ax = plt.subplots(figsize=DEFAULT_FIGSIZE)
    else:
        fig = ax.figure
    return fig, ax


def plot_projection(
    result: "ProjectionResult",
    ax: Optional["Axes"] = None,
    title: Optional[str] = None,
    color: str = "C0",
) -> Tuple["Figure", "Axes"]:
    """
    Fan chart of a Monte Carlo projection.

    Draws the p10-p90 band, the p25-p75 band, the median and the mean
    against the projection year.

    Parameters
    ----------
    result : ProjectionResult
    ax : matplotlib.axes.Axes, optional
        Target axes (a new figure is created if omitted).
    title : str, optional
        Defaults to a summary with horizon and success probability.
    color : str
        Base color for bands and median.

    Examples
    --------
    >>> fig, ax = plot_projection(result)
    >>> fig.savefig("projection.png")
    """
    from matplotlib.ticker import FuncFormatter
    from .utils import millions_formatter

    fig, ax = _figure_and_axes(ax)
    bands = result.bands
    years = np.arange(len(bands))

    ax.fill_between(years, bands.p10, bands.p90, color=color,
                    alpha=DEFAULT_ALPHA_OUTER_BAND, label="P10-P90")
    ax.fill_between(years, bands.p25, bands.p75, color=color,
                    alpha=DEFAULT_ALPHA_INNER_BAND, label="P25-P75")
    ax.plot(years, bands.p50, color=color, linewidth=2, label="Median")
    ax.plot(years, bands.mean, color="black", linestyle="--", linewidth=1, label="Mean")

    ax.yaxis.set_major_formatter(FuncFormatter(millions_formatter))
    ax.set_xlim(0, years[-1] if len(years) > 1 else 1)
    ax.set_xlabel("Year", fontsize=10)
    ax.set_ylabel("Net worth", fontsize=10)
    ax.set_title(
        title or (
            f"Net worth projection ({result.time_horizon_years}y, "
            f"{result.iterations:,} paths, success {result.success_probability:.1f}%)"
        ),
        fontsize=11, fontweight="bold",
    )
    ax.grid(True, alpha=0.3)
    ax.legend(loc="upper left", fontsize=8, framealpha=0.9)
    return fig, ax


def plot_drift(
    report: "DriftReport",
    ax: Optional["Axes"] = None,
    title: Optional[str] = None,
) -> Tuple["Figure", "Axes"]:
    """
    Grouped bars of current vs target weight per asset class.

    Classes drifting beyond the rebalance threshold are drawn in red.
    """
    fig, ax = _figure_and_axes(ax)
    labels = [e.asset_class for e in report.entries]
    x = np.arange(len(labels))
    width = 0.38

    ax.bar(x - width / 2, [e.target * 100 for e in report.entries], width,
           label="Target", color="0.7")
    current_colors = [
        "tab:red" if abs(e.drift) > report.rebalance_threshold else "tab:blue"
        for e in report.entries
    ]
    ax.bar(x + width / 2, [e.current * 100 for e in report.entries], width,
           label="Current", color=current_colors)

    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel("Weight (%)", fontsize=10)
    status = "rebalance needed" if report.needs_rebalance else "within tolerance"
    ax.set_title(title or f"Allocation drift ({status})", fontsize=11, fontweight="bold")
    ax.grid(True, axis="y", alpha=0.3)
    ax.legend(loc="upper right", fontsize=8)
    return fig, ax
