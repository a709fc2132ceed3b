"""
Serialization module for wealthcast.

Purpose
-------
JSON input files (projection requests, portfolios, stress scenarios) and the
append-only projection history.

Design Principles
-----------------
- Type-safe: files are parsed through the pydantic models in ``config``
- Append-only history: one JSON object per line; existing lines are never
  rewritten
- Versioned: every file carries ``schema_version``; a mismatch warns

Example
-------
>>> from pathlib import Path
>>> from wealthcast.serialization import load_projection_request, append_projection
>>> request = load_projection_request(Path("request.json"))
>>> append_projection(result, Path("history.jsonl"))
>>> history = load_projection_history(Path("history.jsonl"))
"""

from __future__ import annotations
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Type, TypeVar
import json
import warnings

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .aggregator import PercentileBands, ProjectionResult
from .config import (
    FinancialStateConfig,
    PortfolioConfig,
    ProjectionRequest,
    StressScenarioConfig,
)
from .exceptions import ConfigurationError
from .state import SimulationConfig
from .stress import StressResult
from .types import ProjectionRecordDict, StressSummaryDict

__all__ = [
    "SCHEMA_VERSION",
    "load_projection_request",
    "save_projection_request",
    "load_financial_state",
    "load_portfolio",
    "load_stress_scenario",
    "projection_to_dict",
    "projection_from_dict",
    "append_projection",
    "load_projection_history",
    "stress_to_dict",
]

SCHEMA_VERSION = "0.1.0"

ModelT = TypeVar("ModelT", bound=BaseModel)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _check_schema(data: Dict[str, Any], source: str) -> None:
    schema_version = data.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"{source} schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )


def _read_json(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a JSON object at top level")
    return data


def _load_model(path: Path, model: Type[ModelT]) -> ModelT:
    data = _read_json(path)
    _check_schema(data, str(path))
    data.pop("schema_version", None)
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigurationError(f"{path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Input files
# ---------------------------------------------------------------------------

def load_projection_request(path: Path) -> ProjectionRequest:
    """
    Load a projection request (state + simulation settings).

    Raises
    ------
    ConfigurationError
        If the file is not valid JSON or fails model validation.
    """
    return _load_model(path, ProjectionRequest)


def save_projection_request(request: ProjectionRequest, path: Path) -> None:
    """
    Write *request* to *path* as indented JSON.

    Examples
    --------
    >>> from pathlib import Path
    >>> save_projection_request(request, Path("request.json"))
    """
    config = {"schema_version": SCHEMA_VERSION, **request.model_dump(mode="json")}
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config, f, indent=2)


def load_financial_state(path: Path) -> FinancialStateConfig:
    """Load a financial state snapshot."""
    return _load_model(path, FinancialStateConfig)


def load_portfolio(path: Path) -> PortfolioConfig:
    """Load holdings, target allocation and optional market assumptions."""
    return _load_model(path, PortfolioConfig)


def load_stress_scenario(path: Path) -> StressScenarioConfig:
    """Load a single stress scenario."""
    return _load_model(path, StressScenarioConfig)


# ---------------------------------------------------------------------------
# ProjectionResult
# ---------------------------------------------------------------------------

def projection_to_dict(result: ProjectionResult) -> ProjectionRecordDict:
    """
    Convert a ProjectionResult to a JSON-compatible dictionary.

    Examples
    --------
    >>> record = projection_to_dict(result)
    >>> len(record["bands"]["p50"]) == result.time_horizon_years + 1
    True
    """
    record: ProjectionRecordDict = {
        "schema_version": SCHEMA_VERSION,
        "created_at": result.created_at.isoformat(),
        "iterations": result.iterations,
        "time_horizon_years": result.time_horizon_years,
        "success_probability": result.success_probability,
        "bands": {name: list(values) for name, values in result.bands.as_dict().items()},
        "config": asdict(result.config) if result.config is not None else None,
    }
    return record


def projection_from_dict(data: Dict[str, Any]) -> ProjectionResult:
    """
    Rebuild a ProjectionResult from ``projection_to_dict`` output.

    Raises
    ------
    ConfigurationError
        If required keys are missing or the stored config is invalid.
    """
    _check_schema(data, "Projection record")
    try:
        bands = PercentileBands(**{k: tuple(v) for k, v in data["bands"].items()})
        config = SimulationConfig(**data["config"]) if data.get("config") else None
        return ProjectionResult(
            bands=bands,
            success_probability=float(data["success_probability"]),
            iterations=int(data["iterations"]),
            time_horizon_years=int(data["time_horizon_years"]),
            config=config,
            created_at=datetime.fromisoformat(data["created_at"]),
        )
    except (KeyError, TypeError) as exc:
        raise ConfigurationError(f"malformed projection record: {exc}") from exc


def append_projection(result: ProjectionResult, path: Path) -> None:
    """
    Append *result* to the JSON-lines history at *path*.

    Existing records are never modified; the file is created if missing.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a") as f:
        f.write(json.dumps(projection_to_dict(result)) + "\n")


def load_projection_history(path: Path) -> List[ProjectionResult]:
    """Read every record of a JSON-lines history, oldest first."""
    results = []
    with open(path, "r") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"{path}:{lineno}: invalid JSON ({exc})") from exc
            results.append(projection_from_dict(data))
    return results


# ---------------------------------------------------------------------------
# StressResult
# ---------------------------------------------------------------------------

def stress_to_dict(result: StressResult) -> StressSummaryDict:
    """Flatten a StressResult; an infinite runway becomes None."""
    return {
        "scenario": result.scenario.label,
        "variable_affected": result.scenario.variable_affected,
        "impact_magnitude": result.scenario.impact_magnitude,
        "runway_months": None if result.is_secure else result.runway_months,
        "risk_level": result.risk_level,
        "pivot_benefit_months": result.pivot_benefit_months,
        "projected_hit": result.projected_hit,
        "monthly_burn": result.monthly_burn,
        "recommendations": list(result.recommendations),
    }
