"""Projection engine for wealthcast

Wires the Monte Carlo orchestrator, percentile aggregator, drift analyzer,
rebalance advisor and stress runner behind one object, and exposes
``run_monte_carlo`` as the functional entry point.

Design goals
------------
- No hidden global state: random source, executor and market assumptions
  are injected (or taken from AppSettings via ``from_settings``).
- Same seed, same result, whatever the executor.

Typical usage
-------------
>>> from wealthcast.random_source import SeededRandomSource
>>> state = FinancialState(net_worth=250_000, monthly_income=9_000,
...                        monthly_expense=6_000, monthly_savings=3_000,
...                        asset_value=200_000, liquid_cash=50_000)
>>> engine = ProjectionEngine(source=SeededRandomSource(42))
>>> result = engine.project(state, SimulationConfig(time_horizon_years=25, iterations=1_000,
...                                                 monthly_contribution=3_000))
>>> result.success_probability
100.0
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from .aggregator import PercentileAggregator, ProjectionResult
from .constants import DEFAULT_CASH_RETURN, DEFAULT_CHECK_INTERVAL
from .drift import AllocationTarget, AssetHolding, DriftAnalyzer, DriftReport
from .market import MarketAssumptionsProvider
from .orchestrator import CancellationToken, ExecutorKind, MonteCarloOrchestrator
from .random_source import RandomVariateSource
from .rebalance import RebalanceAdvisor, RebalanceRecommendation
from .simulator import WealthPathSimulator
from .state import FinancialState, SimulationConfig
from .stress import StressResult, StressScenario, StressScenarioRunner

if TYPE_CHECKING:
    from .config import AppSettings

logger = logging.getLogger(__name__)

__all__ = [
    "ProjectionEngine",
    "run_monte_carlo",
]


class ProjectionEngine:
    """
    Facade over the projection, drift, rebalance and stress components.

    Parameters
    ----------
    source : RandomVariateSource, optional
        Root random source (default: OS entropy per run).
    executor : {"serial", "thread", "process"}
    max_workers : int, optional
    check_interval : int
        Paths between cancellation checks.
    market : MarketAssumptionsProvider, optional
        Enables expected-alpha estimates in rebalance advice.
    cash_return : float
        Return on idle cash used by the alpha estimate.
    include_assets_in_stress : bool
        Whether stress runway counts asset_value as liquid.
    """

    def __init__(
        self,
        source: Optional[RandomVariateSource] = None,
        executor: ExecutorKind = "serial",
        max_workers: Optional[int] = None,
        check_interval: int = DEFAULT_CHECK_INTERVAL,
        market: Optional[MarketAssumptionsProvider] = None,
        cash_return: float = DEFAULT_CASH_RETURN,
        include_assets_in_stress: bool = False,
        timeout_seconds: Optional[float] = None,
    ):
        self.orchestrator = MonteCarloOrchestrator(
            simulator=WealthPathSimulator(),
            source=source,
            executor=executor,
            max_workers=max_workers,
            check_interval=check_interval,
        )
        self.aggregator = PercentileAggregator()
        self.drift_analyzer = DriftAnalyzer()
        self.advisor = RebalanceAdvisor(market=market, cash_return=cash_return)
        self.stress_runner = StressScenarioRunner(include_assets=include_assets_in_stress)
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(
        cls,
        settings: "AppSettings",
        source: Optional[RandomVariateSource] = None,
        market: Optional[MarketAssumptionsProvider] = None,
    ) -> "ProjectionEngine":
        """Build an engine from application settings."""
        return cls(
            source=source,
            executor=settings.executor,
            max_workers=settings.max_workers,
            check_interval=settings.cancel_check_interval,
            market=market,
            timeout_seconds=settings.timeout_seconds,
        )

    # -------------------- Monte Carlo --------------------
    def project(
        self,
        state: FinancialState,
        config: SimulationConfig,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ProjectionResult:
        """Simulate ``config.iterations`` paths and aggregate them into bands."""
        if cancel_token is None and self.timeout_seconds is not None:
            cancel_token = CancellationToken(timeout=self.timeout_seconds)
        paths = self.orchestrator.run(state, config, cancel_token=cancel_token)
        result = self.aggregator.aggregate(paths, config.time_horizon_years, config=config)
        logger.info(
            "Projection done: success=%.1f%%, median at year %d = %.2f",
            result.success_probability, config.time_horizon_years, result.median_at_horizon,
        )
        return result

    # -------------------- Portfolio --------------------
    def calculate_drift(
        self,
        holdings: Iterable[AssetHolding],
        target: Optional[AllocationTarget],
    ) -> DriftReport:
        return self.drift_analyzer.calculate_drift(holdings, target or AllocationTarget())

    def determine_destination(
        self,
        drift_report: DriftReport,
        cash_amount: float,
    ) -> RebalanceRecommendation:
        return self.advisor.determine_destination(drift_report, cash_amount)

    # -------------------- Stress --------------------
    def run_stress_test(self, state: FinancialState, scenario: StressScenario) -> StressResult:
        return self.stress_runner.run_stress_test(state, scenario)


def run_monte_carlo(
    state: FinancialState,
    config: SimulationConfig,
    *,
    source: Optional[RandomVariateSource] = None,
    executor: ExecutorKind = "serial",
    max_workers: Optional[int] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> ProjectionResult:
    """
    Run a Monte Carlo projection and return its percentile bands.

    Parameters
    ----------
    state : FinancialState
        Starting position; ``net_worth`` is the initial wealth (floored at 0).
    config : SimulationConfig
        Horizon, iterations, return assumptions and withdrawal policy.
    source : RandomVariateSource, optional
        Root random source; pass ``SeededRandomSource(seed)`` for
        reproducible results.
    executor : {"serial", "thread", "process"}
    max_workers : int, optional
    cancel_token : CancellationToken, optional

    Raises
    ------
    ConfigurationError
        Invalid configuration (e.g. horizon <= 0, iterations <= 0,
        negative volatility).
    CancelledError
        The token fired before the run completed.

    Examples
    --------
    >>> from wealthcast.random_source import SeededRandomSource
    >>> state = FinancialState(net_worth=100_000, monthly_income=0, monthly_expense=0,
    ...                        monthly_savings=0, asset_value=100_000, liquid_cash=0)
    >>> cfg = SimulationConfig(time_horizon_years=10, iterations=50, return_volatility=0.0)
    >>> round(run_monte_carlo(state, cfg, source=SeededRandomSource(1)).median_at_horizon, 2)
    196715.14
    """
    engine = ProjectionEngine(source=source, executor=executor, max_workers=max_workers)
    return engine.project(state, config, cancel_token=cancel_token)
