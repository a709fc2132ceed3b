"""
Command-Line Interface for wealthcast.

Purpose
-------
Run projections, drift checks and stress tests from JSON files without
writing Python code.

Commands
--------
- project: Monte Carlo net-worth projection with percentile bands
- drift: Allocation drift and cash deployment advice
- stress: Runway under a single shock (or the default catalogue)
- config validate: Check an input file against its schema

Example Usage
-------------
    # Projection with overrides, appended to the history file
    $ wealthcast project -c request.json -n 5000 --seed 42 --history runs.jsonl

    # Drift plus where to put 2,000 of new cash
    $ wealthcast drift -p portfolio.json --cash 2000

    # Job loss stress test
    $ wealthcast stress -s state.json --variable income --magnitude 1.0

    # Validate a file
    $ wealthcast config validate request.json
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import AppSettings
from .exceptions import WealthcastError
from .log import configure_logging
from .utils import annual_to_monthly, format_currency

# Version
__version__ = "0.1.0"


def _fail(message: str) -> None:
    click.echo(message, err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="wealthcast")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def main(ctx: click.Context, quiet: bool) -> None:
    """
    wealthcast - stochastic net-worth projections.

    Monte Carlo projections, allocation drift and stress-scenario runway
    for personal finances.

    Use 'wealthcast COMMAND --help' for command-specific help.
    """
    settings = AppSettings()
    configure_logging(settings, level="WARNING" if quiet else None)
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["settings"] = settings
    ctx.obj["console"] = Console()


# ---------------------------------------------------------------------------
# project
# ---------------------------------------------------------------------------

@main.command()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Projection request file (JSON: state + simulation)"
)
@click.option("--iterations", "-n", type=int, default=None, help="Number of paths")
@click.option("--horizon", "-T", type=int, default=None, help="Horizon in years")
@click.option(
    "--granularity",
    type=click.Choice(["annual", "monthly"]),
    default=None,
    help="Step length"
)
@click.option("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
@click.option(
    "--executor",
    type=click.Choice(["serial", "thread", "process"]),
    default=None,
    help="Where paths run (default: WEALTHCAST_EXECUTOR or serial)"
)
@click.option("--workers", type=int, default=None, help="Pool size")
@click.option("--timeout", type=float, default=None, help="Abort after this many seconds")
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the result as JSON"
)
@click.option(
    "--history",
    type=click.Path(path_type=Path),
    default=None,
    help="Append the result to a JSON-lines history (default: WEALTHCAST_RESULTS_PATH)"
)
@click.option(
    "--plot",
    type=click.Path(path_type=Path),
    default=None,
    help="Save a fan chart (PNG)"
)
@click.pass_context
def project(
    ctx: click.Context,
    config: Path,
    iterations: Optional[int],
    horizon: Optional[int],
    granularity: Optional[str],
    seed: Optional[int],
    executor: Optional[str],
    workers: Optional[int],
    timeout: Optional[float],
    output: Optional[Path],
    history: Optional[Path],
    plot: Optional[Path],
) -> None:
    """
    Run a Monte Carlo projection.

    Example:
        wealthcast project -c request.json -T 25 -n 5000 --seed 42
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    settings: AppSettings = ctx.obj["settings"]

    from .engine import ProjectionEngine
    from .orchestrator import CancellationToken
    from .random_source import SeededRandomSource
    from .serialization import append_projection, load_projection_request, projection_to_dict

    try:
        request = load_projection_request(config)
        overrides = {
            key: value
            for key, value in {
                "iterations": iterations,
                "time_horizon_years": horizon,
                "period_granularity": granularity,
                "seed": seed,
            }.items()
            if value is not None
        }
        simulation = request.simulation.model_copy(update=overrides)
        state = request.state.to_domain()
        sim_config = simulation.to_domain()

        engine = ProjectionEngine(
            source=SeededRandomSource(simulation.seed) if simulation.seed is not None else None,
            executor=executor or settings.executor,
            max_workers=workers if workers is not None else settings.max_workers,
            check_interval=settings.cancel_check_interval,
        )
        timeout = timeout if timeout is not None else settings.timeout_seconds
        token = CancellationToken(timeout=timeout) if timeout is not None else None

        if not quiet:
            console.print(
                f"[bold]Running {sim_config.iterations:,} paths over "
                f"{sim_config.time_horizon_years} years...[/bold]"
            )
        result = engine.project(state, sim_config, cancel_token=token)
    except WealthcastError as e:
        _fail(f"Error: {e}")

    final = result.final_percentiles()
    if not quiet:
        table = Table(
            title=f"Projection Results (median {format_currency(result.median_at_horizon)})",
            show_header=True,
        )
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green", justify="right")
        table.add_row("Horizon", f"{result.time_horizon_years} years")
        table.add_row("Paths", f"{result.iterations:,}")
        table.add_row("Success Probability", f"{result.success_probability:.1f}%")
        table.add_row("", "")
        for name, label in (("p10", "10th Percentile"), ("p50", "Median"),
                            ("p90", "90th Percentile"), ("mean", "Mean")):
            table.add_row(label, f"${final[name]:,.0f}")
        console.print(table)
    else:
        click.echo(f"Success Probability: {result.success_probability:.1f}%")
        click.echo(f"Median Final Net Worth: ${final['p50']:,.0f}")

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w") as f:
            json.dump(projection_to_dict(result), f, indent=2)
        if not quiet:
            click.echo(f"Result saved to {output}")

    history = history or settings.results_path
    if history:
        append_projection(result, history)
        if not quiet:
            click.echo(f"Result appended to {history}")

    if plot:
        import matplotlib
        matplotlib.use("Agg")
        from .plotting import plot_projection

        fig, _ = plot_projection(result)
        plot.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(plot, dpi=120, bbox_inches="tight")
        if not quiet:
            click.echo(f"Chart saved to {plot}")


# ---------------------------------------------------------------------------
# drift
# ---------------------------------------------------------------------------

@main.command()
@click.option(
    "--portfolio", "-p",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Portfolio file (JSON: holdings, target, optional market)"
)
@click.option("--cash", type=float, default=0.0, help="New cash to deploy")
@click.pass_context
def drift(ctx: click.Context, portfolio: Path, cash: float) -> None:
    """
    Show allocation drift and where new cash should go.

    Example:
        wealthcast drift -p portfolio.json --cash 2000
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)

    from .drift import calculate_drift
    from .rebalance import determine_destination
    from .serialization import load_portfolio

    try:
        cfg = load_portfolio(portfolio)
        report = calculate_drift(cfg.holdings_domain(), cfg.target.to_domain())
        advice = determine_destination(
            report, cash, market=cfg.market_domain(), cash_return=cfg.cash_return
        ) if cash else None
    except WealthcastError as e:
        _fail(f"Error: {e}")

    if quiet:
        click.echo(f"Needs Rebalance: {report.needs_rebalance}")
        click.echo(f"Max Drift: {report.max_drift:.2%}")
    else:
        table = Table(title=f"Allocation Drift (total ${report.total_value:,.2f})")
        table.add_column("Asset Class", style="cyan")
        table.add_column("Target", justify="right")
        table.add_column("Current", justify="right")
        table.add_column("Drift", justify="right")
        for e in report.entries:
            style = "red" if abs(e.drift) > report.rebalance_threshold else "green"
            table.add_row(
                e.asset_class, f"{e.target:.1%}", f"{e.current:.1%}",
                f"[{style}]{e.drift:+.1%}[/{style}]",
            )
        console.print(table)
        console.print(
            f"Max drift {report.max_drift:.2%} vs threshold "
            f"{report.rebalance_threshold:.2%}: "
            + ("[bold red]rebalance needed[/bold red]" if report.needs_rebalance
               else "[bold green]within tolerance[/bold green]")
        )

    if advice is None:
        return
    if advice.is_hold:
        click.echo("Recommendation: HOLD")
        return
    if quiet:
        for a in advice.allocations:
            click.echo(f"{a.asset_class}: ${a.suggested_allocation:,.2f}")
        return

    plan = Table(title=f"Deploy ${advice.cash_amount:,.2f}")
    plan.add_column("Priority", justify="right")
    plan.add_column("Asset Class", style="cyan")
    plan.add_column("Amount", justify="right", style="green")
    plan.add_column("Urgency")
    for a in advice.allocations:
        plan.add_row(str(a.priority), a.asset_class,
                     f"${a.suggested_allocation:,.2f}", a.urgency)
    console.print(plan)
    if advice.expected_alpha is not None:
        console.print(
            f"Expected alpha vs cash: {advice.expected_alpha:+.2%}/yr "
            f"({annual_to_monthly(advice.expected_alpha):+.3%}/mo)"
        )


# ---------------------------------------------------------------------------
# stress
# ---------------------------------------------------------------------------

@main.command()
@click.option(
    "--state", "-s", "state_file",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Financial state file (JSON)"
)
@click.option(
    "--variable",
    type=click.Choice(["income", "expense", "asset_value"]),
    default=None,
    help="Variable hit by the shock"
)
@click.option("--magnitude", type=float, default=None, help="Shock size in [0, 1]")
@click.option(
    "--scenario",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Stress scenario file (JSON)"
)
@click.option("--include-assets", is_flag=True, help="Count asset value toward runway")
@click.pass_context
def stress(
    ctx: click.Context,
    state_file: Path,
    variable: Optional[str],
    magnitude: Optional[float],
    scenario: Optional[Path],
    include_assets: bool,
) -> None:
    """
    Runway under a single shock.

    Without --variable/--scenario the default scenario catalogue is run.

    Example:
        wealthcast stress -s state.json --variable income --magnitude 1.0
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)

    from .serialization import load_financial_state, load_stress_scenario
    from .stress import DEFAULT_SCENARIOS, StressScenario, StressScenarioRunner

    if (variable is None) != (magnitude is None):
        _fail("Error: --variable and --magnitude must be given together")
    if variable is not None and scenario is not None:
        _fail("Error: use either --variable/--magnitude or --scenario")

    try:
        state = load_financial_state(state_file).to_domain()
        if scenario is not None:
            scenarios = (load_stress_scenario(scenario).to_domain(),)
        elif variable is not None:
            scenarios = (StressScenario(variable, magnitude),)
        else:
            scenarios = DEFAULT_SCENARIOS
        results = StressScenarioRunner(include_assets=include_assets).run_all(state, scenarios)
    except WealthcastError as e:
        _fail(f"Error: {e}")

    if quiet:
        for r in results:
            runway = "inf" if r.is_secure else f"{r.runway_months:.1f}"
            click.echo(f"{r.scenario.label}: {runway} months ({r.risk_level})")
        return

    table = Table(title="Stress Test", show_header=True)
    table.add_column("Scenario", style="cyan")
    table.add_column("Runway", justify="right")
    table.add_column("Risk")
    table.add_column("Pivot Gain", justify="right")
    risk_style = {"Low": "green", "Moderate": "yellow", "High": "red", "Critical": "bold red"}
    for r in results:
        runway = "∞" if r.is_secure else f"{r.runway_months:.1f} mo"
        style = risk_style[r.risk_level]
        table.add_row(r.scenario.label, runway, f"[{style}]{r.risk_level}[/{style}]",
                      f"+{r.pivot_benefit_months:.1f} mo")
    console.print(table)

    if len(results) == 1:
        r = results[0]
        lines = "\n".join(f"  - {rec}" for rec in r.recommendations)
        solvency = r.projected_solvency_date()
        footer = "Secure" if solvency is None else solvency.strftime("%B %Y")
        console.print(Panel(f"{lines}\n\nProjected solvency: {footer}",
                            title="Recommendations", border_style="blue"))


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

@main.group()
def config() -> None:
    """
    Configuration management commands.
    """
    pass


@config.command("validate")
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--kind", "-k",
    type=click.Choice(["request", "state", "portfolio", "scenario"]),
    default="request",
    help="Which schema to validate against"
)
@click.pass_context
def config_validate(ctx: click.Context, config_file: Path, kind: str) -> None:
    """
    Validate an input file.

    Example:
        wealthcast config validate request.json
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)

    from .serialization import (
        load_financial_state,
        load_portfolio,
        load_projection_request,
        load_stress_scenario,
    )

    try:
        if kind == "request":
            request = load_projection_request(config_file)
            request.state.to_domain()
            sim = request.simulation.to_domain()
            summary = (
                f"Horizon: {sim.time_horizon_years} years ({sim.period_granularity})\n"
                f"Paths: {sim.iterations:,}\n"
                f"Return: {sim.expected_return:.2%} ± {sim.return_volatility:.2%}"
            )
        elif kind == "state":
            state = load_financial_state(config_file).to_domain()
            summary = f"Net worth: ${state.net_worth:,.0f}"
        elif kind == "portfolio":
            portfolio = load_portfolio(config_file)
            portfolio.target.to_domain()
            portfolio.holdings_domain()
            summary = f"Holdings: {len(portfolio.holdings)}"
        else:
            scenario = load_stress_scenario(config_file).to_domain()
            summary = f"Scenario: {scenario.label}"
    except WealthcastError as e:
        _fail(f"Configuration validation failed: {e}")

    if quiet:
        click.echo("Configuration is valid")
    else:
        console.print(Panel(f"[bold]Configuration Valid[/bold]\n\n{summary}",
                            title="Configuration Summary", border_style="green"))


if __name__ == "__main__":
    main()
