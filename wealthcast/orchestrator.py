"""
Monte Carlo orchestration for wealthcast.

Purpose
-------
Runs ``config.iterations`` independent wealth paths and returns them in
iteration order. Each path is a pure function of (state, config, its own
random stream), so the loop is a map that can run serially, on a thread
pool or on a process pool without changing the aggregated result.

Design
------
- Streams: one child source per path, spawned up front from the root source
  (``RandomVariateSource.spawn``). The same seed gives the same paths for
  every executor.
- Batching: paths are grouped into ``workers × TASKS_PER_WORKER`` batches to
  amortize submission overhead.
- Cancellation: a ``CancellationToken`` (manual ``cancel()`` or a timeout) is
  checked every ``check_interval`` paths inside serial and thread workers, and
  between completed batches for process pools. On cancellation all partial
  paths are dropped and ``CancelledError`` is raised.
- Faults: any unexpected exception inside a worker surfaces as
  ``SimulationError`` with the original exception chained.

Example
-------
>>> from wealthcast.random_source import SeededRandomSource
>>> orchestrator = MonteCarloOrchestrator(source=SeededRandomSource(7), executor="thread")
>>> paths = orchestrator.run(state, SimulationConfig(time_horizon_years=20, iterations=2_000))
>>> len(paths)
2000
"""

from __future__ import annotations

import logging
import math
import os
import threading
import time
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import Dict, List, Literal, Optional, Sequence

from .constants import DEFAULT_CHECK_INTERVAL, TASKS_PER_WORKER
from .exceptions import CancelledError, ConfigurationError, SimulationError, WealthcastError
from .random_source import RandomVariateSource, SystemRandomSource
from .simulator import PathResult, WealthPathSimulator
from .state import FinancialState, SimulationConfig

logger = logging.getLogger(__name__)

__all__ = [
    "CancellationToken",
    "MonteCarloOrchestrator",
    "ExecutorKind",
]

ExecutorKind = Literal["serial", "thread", "process"]


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------

class CancellationToken:
    """
    Cooperative cancellation flag with an optional deadline.

    Parameters
    ----------
    timeout : float, optional
        Seconds from construction after which the token reports cancelled.

    Examples
    --------
    >>> token = CancellationToken(timeout=30.0)
    >>> token.cancelled
    False
    >>> token.cancel()
    >>> token.cancelled
    True
    """

    def __init__(self, timeout: Optional[float] = None):
        if timeout is not None and timeout < 0:
            raise ValueError(f"timeout must be non-negative, got {timeout}")
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def raise_if_cancelled(self, completed: int = 0, total: int = 0) -> None:
        if self.cancelled:
            raise CancelledError(
                f"Monte Carlo run cancelled after {completed:,} of {total:,} paths"
            )


# ---------------------------------------------------------------------------
# Worker
# ---------------------------------------------------------------------------

def _simulate_batch(
    simulator: WealthPathSimulator,
    state: FinancialState,
    config: SimulationConfig,
    sources: Sequence[RandomVariateSource],
    token: Optional[CancellationToken] = None,
    check_interval: int = DEFAULT_CHECK_INTERVAL,
) -> List[PathResult]:
    """Simulate one path per source, checking *token* every *check_interval* paths."""
    results: List[PathResult] = []
    for i, source in enumerate(sources):
        if token is not None and i % check_interval == 0:
            token.raise_if_cancelled(i, len(sources))
        results.append(simulator.simulate(state, config, source))
    return results


def _chunk(items: Sequence, size: int) -> List[Sequence]:
    return [items[i:i + size] for i in range(0, len(items), size)]


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class MonteCarloOrchestrator:
    """
    Runs N independent wealth paths.

    Parameters
    ----------
    simulator : WealthPathSimulator, optional
        Path simulator (default: a new WealthPathSimulator).
    source : RandomVariateSource, optional
        Root source from which per-path streams are spawned. Defaults to a
        fresh SystemRandomSource on every run (non-reproducible).
    executor : {"serial", "thread", "process"}
        Where paths are computed.
    max_workers : int, optional
        Pool size (default: ``os.cpu_count()`` capped by the batch count).
    check_interval : int
        Paths between two cancellation checks (>= 1).
    """

    def __init__(
        self,
        simulator: Optional[WealthPathSimulator] = None,
        source: Optional[RandomVariateSource] = None,
        executor: ExecutorKind = "serial",
        max_workers: Optional[int] = None,
        check_interval: int = DEFAULT_CHECK_INTERVAL,
    ):
        if executor not in ("serial", "thread", "process"):
            raise ConfigurationError(
                f"executor must be 'serial', 'thread' or 'process', got {executor!r}"
            )
        if max_workers is not None and max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {max_workers}")
        if check_interval < 1:
            raise ConfigurationError(f"check_interval must be >= 1, got {check_interval}")
        self.simulator = simulator or WealthPathSimulator()
        self.source = source
        self.executor = executor
        self.max_workers = max_workers
        self.check_interval = check_interval

    def run(
        self,
        state: FinancialState,
        config: SimulationConfig,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[PathResult]:
        """
        Simulate ``config.iterations`` paths.

        Raises
        ------
        ConfigurationError
            If *config* is invalid (checked before any path is simulated).
        CancelledError
            If *cancel_token* fires before all paths complete.
        SimulationError
            If a path fails for any other reason.
        """
        config.validate()
        root = self.source if self.source is not None else SystemRandomSource()
        sources = root.spawn(config.iterations)

        logger.info(
            "Simulating %d paths over %d years (%s steps, executor=%s)",
            config.iterations, config.time_horizon_years,
            config.period_granularity, self.executor,
        )
        started = time.perf_counter()

        if cancel_token is not None and cancel_token.cancelled:
            logger.warning("Monte Carlo run cancelled before any path was simulated")
            cancel_token.raise_if_cancelled(0, len(sources))

        if self.executor == "serial":
            paths = self._run_serial(state, config, sources, cancel_token)
        else:
            paths = self._run_pool(state, config, sources, cancel_token)

        logger.debug(
            "Simulated %d paths in %.3fs", len(paths), time.perf_counter() - started
        )
        return paths

    # -------------------- Execution strategies --------------------
    def _run_serial(self, state, config, sources, token) -> List[PathResult]:
        try:
            return _simulate_batch(
                self.simulator, state, config, sources, token, self.check_interval
            )
        except CancelledError:
            logger.warning("Monte Carlo run cancelled; partial paths discarded")
            raise
        except WealthcastError:
            raise
        except Exception as exc:
            raise SimulationError(f"path simulation failed: {exc}") from exc

    def _run_pool(self, state, config, sources, token) -> List[PathResult]:
        workers = self._resolve_workers(len(sources))
        batch_size = max(1, math.ceil(len(sources) / (workers * TASKS_PER_WORKER)))
        batches = _chunk(sources, batch_size)
        # Tokens wrap a threading.Event and cannot cross process boundaries.
        worker_token = token if self.executor == "thread" else None

        pool_cls = ThreadPoolExecutor if self.executor == "thread" else ProcessPoolExecutor
        results: Dict[int, List[PathResult]] = {}
        completed = 0

        pool: Executor = pool_cls(max_workers=workers)
        try:
            futures = {
                pool.submit(
                    _simulate_batch, self.simulator, state, config,
                    batch, worker_token, self.check_interval,
                ): index
                for index, batch in enumerate(batches)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    results[index] = future.result()
                except WealthcastError:
                    raise
                except Exception as exc:
                    raise SimulationError(f"path batch {index} failed: {exc}") from exc
                completed += len(results[index])
                logger.debug("Batch %d done (%d/%d paths)", index, completed, len(sources))
                if token is not None:
                    token.raise_if_cancelled(completed, len(sources))
        except CancelledError:
            logger.warning("Monte Carlo run cancelled; partial paths discarded")
            pool.shutdown(wait=True, cancel_futures=True)
            raise
        except BaseException:
            pool.shutdown(wait=True, cancel_futures=True)
            raise
        else:
            pool.shutdown(wait=True)

        return [path for index in range(len(batches)) for path in results[index]]

    def _resolve_workers(self, n_paths: int) -> int:
        if self.max_workers is not None:
            return max(1, min(self.max_workers, n_paths))
        return max(1, min(os.cpu_count() or 1, n_paths))
