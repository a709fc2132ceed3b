"""
wealthcast - Stochastic net-worth projections

Monte Carlo wealth paths, percentile bands, allocation drift with cash
deployment advice, and single-shock stress tests on liquid runway.

Modules
-------
- state          : FinancialState and SimulationConfig inputs
- random_source  : Uniform/normal variate sources (seeded, OS entropy, fixed)
- simulator      : Single GBM wealth path with contributions and withdrawals
- orchestrator   : Many paths on serial/thread/process executors, cancellation
- aggregator     : Percentile bands and success probability
- drift          : Allocation drift against a target
- rebalance      : Where to deploy new cash
- market         : Market assumptions collaborator
- stress         : Runway under income/expense/asset shocks
- engine         : ProjectionEngine facade and run_monte_carlo
- utils          : Shared numeric helpers (runway, compound growth, formatting)

"""

from .state import FinancialState, SimulationConfig
from .random_source import SeededRandomSource, SequenceRandomSource, SystemRandomSource
from .aggregator import ProjectionResult
from .drift import AllocationTarget, AssetHolding, DriftReport, calculate_drift
from .rebalance import HOLD, RebalanceRecommendation, determine_destination
from .stress import StressScenario, StressResult, run_stress_test
from .engine import ProjectionEngine, run_monte_carlo
from .utils import calculate_runway, compound_growth
from . import utils
