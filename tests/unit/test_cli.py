"""
Unit tests for cli.py module.

Commands are invoked through click's CliRunner, mostly with --quiet so the
assertions read plain lines instead of rich tables.
"""

import json

import pytest
from click.testing import CliRunner

from wealthcast.cli import __version__, main
from wealthcast.serialization import load_projection_history


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("WEALTHCAST_RESULTS_PATH", "WEALTHCAST_EXECUTOR", "WEALTHCAST_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


class TestMain:

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("project", "drift", "stress", "config"):
            assert command in result.output


# ============================================================================
# PROJECT
# ============================================================================

class TestProjectCommand:

    def test_quiet_output(self, runner, request_file):
        result = runner.invoke(main, ["--quiet", "project", "-c", str(request_file)])
        assert result.exit_code == 0, result.output
        assert "Success Probability: 100.0%" in result.output
        assert "Median Final Net Worth: $196,715" in result.output

    def test_rich_output(self, runner, request_file):
        result = runner.invoke(main, ["project", "-c", str(request_file)])
        assert result.exit_code == 0, result.output
        assert "Projection Results" in result.output

    def test_writes_output_and_history(self, runner, request_file, tmp_path):
        output = tmp_path / "out" / "result.json"
        history = tmp_path / "runs.jsonl"
        args = ["--quiet", "project", "-c", str(request_file), "-o", str(output),
                "--history", str(history)]
        assert runner.invoke(main, args).exit_code == 0
        assert runner.invoke(main, args).exit_code == 0

        record = json.loads(output.read_text())
        assert record["time_horizon_years"] == 10
        assert len(record["bands"]["p50"]) == 11
        assert len(load_projection_history(history)) == 2

    def test_history_from_environment(self, runner, request_file, tmp_path, monkeypatch):
        history = tmp_path / "env.jsonl"
        monkeypatch.setenv("WEALTHCAST_RESULTS_PATH", str(history))
        result = runner.invoke(main, ["--quiet", "project", "-c", str(request_file)])
        assert result.exit_code == 0, result.output
        assert history.exists()

    def test_overrides(self, runner, request_file, tmp_path):
        output = tmp_path / "result.json"
        result = runner.invoke(main, [
            "--quiet", "project", "-c", str(request_file),
            "-T", "5", "-n", "7", "--granularity", "monthly", "-o", str(output),
        ])
        assert result.exit_code == 0, result.output
        record = json.loads(output.read_text())
        assert record["iterations"] == 7
        assert record["config"]["period_granularity"] == "monthly"
        assert len(record["bands"]["p50"]) == 6

    def test_thread_executor(self, runner, request_file):
        result = runner.invoke(main, [
            "--quiet", "project", "-c", str(request_file), "--executor", "thread", "--workers", "2",
        ])
        assert result.exit_code == 0, result.output
        assert "$196,715" in result.output

    def test_invalid_override_fails(self, runner, request_file):
        result = runner.invoke(main, ["--quiet", "project", "-c", str(request_file), "-n", "0"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_zero_workers_fails(self, runner, request_file):
        result = runner.invoke(main, [
            "--quiet", "project", "-c", str(request_file), "--executor", "thread", "--workers", "0",
        ])
        assert result.exit_code == 1
        assert "max_workers" in result.output

    def test_zero_timeout_cancels(self, runner, request_file):
        result = runner.invoke(main, [
            "--quiet", "project", "-c", str(request_file), "--timeout", "0",
        ])
        assert result.exit_code == 1
        assert "cancelled" in result.output.lower()

    def test_invalid_file(self, runner, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{")
        result = runner.invoke(main, ["--quiet", "project", "-c", str(bad)])
        assert result.exit_code == 1
        assert "invalid JSON" in result.output

    def test_plot(self, runner, request_file, tmp_path):
        chart = tmp_path / "fan.png"
        result = runner.invoke(main, [
            "--quiet", "project", "-c", str(request_file), "--plot", str(chart),
        ])
        assert result.exit_code == 0, result.output
        assert chart.stat().st_size > 0


# ============================================================================
# DRIFT
# ============================================================================

class TestDriftCommand:

    def test_quiet_drift_only(self, runner, portfolio_file):
        result = runner.invoke(main, ["--quiet", "drift", "-p", str(portfolio_file)])
        assert result.exit_code == 0, result.output
        assert "Needs Rebalance: True" in result.output
        assert "Max Drift: 20.00%" in result.output
        assert "Recommendation" not in result.output

    def test_quiet_with_cash(self, runner, portfolio_file):
        result = runner.invoke(main, ["--quiet", "drift", "-p", str(portfolio_file),
                                      "--cash", "100"])
        assert result.exit_code == 0, result.output
        assert "B: $100.00" in result.output

    def test_rich_with_cash_shows_alpha(self, runner, portfolio_file):
        result = runner.invoke(main, ["drift", "-p", str(portfolio_file), "--cash", "100"])
        assert result.exit_code == 0, result.output
        assert "Expected alpha" in result.output

    def test_hold(self, runner, tmp_path):
        path = tmp_path / "p.json"
        path.write_text(json.dumps({
            "schema_version": "0.1.0",
            "holdings": [{"asset_class": "A", "value": 60}, {"asset_class": "B", "value": 40}],
            "target": {"weights": {"A": 0.6, "B": 0.4}},
        }))
        result = runner.invoke(main, ["--quiet", "drift", "-p", str(path), "--cash", "50"])
        assert result.exit_code == 0, result.output
        assert "Recommendation: HOLD" in result.output

    def test_negative_cash_fails(self, runner, portfolio_file):
        result = runner.invoke(main, ["--quiet", "drift", "-p", str(portfolio_file),
                                      "--cash=-5"])
        assert result.exit_code == 1
        assert "cash_amount" in result.output


# ============================================================================
# STRESS
# ============================================================================

class TestStressCommand:

    def test_single_shock(self, runner, state_file):
        result = runner.invoke(main, ["--quiet", "stress", "-s", str(state_file),
                                      "--variable", "income", "--magnitude", "0.5"])
        assert result.exit_code == 0, result.output
        assert "income shock (50%): 24.0 months (Moderate)" in result.output

    def test_default_catalogue(self, runner, state_file):
        result = runner.invoke(main, ["--quiet", "stress", "-s", str(state_file)])
        assert result.exit_code == 0, result.output
        lines = [line for line in result.output.splitlines() if "months" in line]
        assert len(lines) == 4
        assert any(line.startswith("Total income stop") for line in lines)

    def test_scenario_file(self, runner, state_file, tmp_path):
        scenario = tmp_path / "scenario.json"
        scenario.write_text(json.dumps({
            "schema_version": "0.1.0", "variable_affected": "expense",
            "impact_magnitude": 0.25, "name": "Rent hike",
        }))
        result = runner.invoke(main, ["--quiet", "stress", "-s", str(state_file),
                                      "--scenario", str(scenario)])
        assert result.exit_code == 0, result.output
        assert "Rent hike: 6.0 months (Critical)" in result.output

    def test_rich_single_shock_shows_recommendations(self, runner, state_file):
        result = runner.invoke(main, ["stress", "-s", str(state_file),
                                      "--variable", "expense", "--magnitude", "0.1"])
        assert result.exit_code == 0, result.output
        assert "Recommendations" in result.output
        assert "Projected solvency" in result.output

    def test_magnitude_without_variable(self, runner, state_file):
        result = runner.invoke(main, ["--quiet", "stress", "-s", str(state_file),
                                      "--magnitude", "0.5"])
        assert result.exit_code == 1
        assert "together" in result.output

    def test_out_of_range_magnitude(self, runner, state_file):
        result = runner.invoke(main, ["--quiet", "stress", "-s", str(state_file),
                                      "--variable", "income", "--magnitude", "2"])
        assert result.exit_code == 1
        assert "impact_magnitude" in result.output


# ============================================================================
# CONFIG
# ============================================================================

class TestConfigCommand:

    def test_validate_request(self, runner, request_file):
        result = runner.invoke(main, ["--quiet", "config", "validate", str(request_file)])
        assert result.exit_code == 0, result.output
        assert "Configuration is valid" in result.output

    @pytest.mark.parametrize("kind, fixture", [
        ("portfolio", "portfolio_file"),
        ("state", "state_file"),
    ])
    def test_validate_kinds(self, runner, request, kind, fixture):
        path = request.getfixturevalue(fixture)
        result = runner.invoke(main, ["config", "validate", str(path), "--kind", kind])
        assert result.exit_code == 0, result.output
        assert "Configuration Valid" in result.output

    def test_validate_wrong_kind_fails(self, runner, portfolio_file):
        result = runner.invoke(main, ["--quiet", "config", "validate", str(portfolio_file)])
        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output
