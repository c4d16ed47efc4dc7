import json
from pathlib import Path

from typer.testing import CliRunner

from flowcast_core.cli import app


runner = CliRunner()
DATA = Path(__file__).parent / "data"


def test_cli_baseline_then_purchase(tmp_path: Path):
    ledger_path = tmp_path / "ledger.csv"
    ledger_path.write_text((DATA / "ledger.csv").read_text())

    baseline_path = tmp_path / "baseline.json"
    sim_path = tmp_path / "sim.json"

    result_baseline = runner.invoke(
        app,
        [
            "baseline",
            "--ledger",
            str(ledger_path),
            "--months",
            "3",
            "--as-of",
            "2024-03-31",
            "--out",
            str(baseline_path),
        ],
    )
    assert result_baseline.exit_code == 0, result_baseline.stdout
    baseline = json.loads(baseline_path.read_text())
    assert [row["month"] for row in baseline["forecast"]] == ["2024-04-01", "2024-05-01", "2024-06-01"]
    # cash position 2350 plus an average month of 1233.33 - 450
    assert abs(baseline["forecast"][0]["balance"] - (2350.0 + 3700.0 / 3 - 450.0)) < 1e-6

    result_sim = runner.invoke(
        app,
        [
            "purchase",
            "--baseline",
            str(baseline_path),
            "--amount",
            "300",
            "--kind",
            "installments",
            "--installments",
            "2",
            "--start-month",
            "1",
            "--out",
            str(sim_path),
        ],
    )
    assert result_sim.exit_code == 0, result_sim.stdout

    payload = json.loads(sim_path.read_text())
    assert [row["adjustment"] for row in payload["simulation"]] == [0.0, -150.0, -150.0]
    assert payload["impact"]["total_applied"] == 300.0
    assert payload["impact"]["first_negative_month"] is None


def test_cli_forecast_monte_carlo(tmp_path: Path):
    out = tmp_path / "forecast.json"
    result = runner.invoke(
        app,
        [
            "forecast",
            "--ledger",
            str(DATA / "ledger.csv"),
            "--model",
            "monte_carlo",
            "--months",
            "6",
            "--simulations",
            "100",
            "--seed",
            "42",
            "--out",
            str(out),
        ],
    )
    assert result.exit_code == 0, result.stdout

    payload = json.loads(out.read_text())
    assert payload["model"] == "monte_carlo"
    assert payload["confidence"] == 0.95
    assert payload["scenario_count"] == 100
    assert len(payload["forecast"]) == 6
    assert set(payload["bands"]) == {"lower", "median", "upper"}
    assert payload["rejected"] == 0


def test_cli_forecast_rejects_out_of_range_horizon():
    result = runner.invoke(app, ["forecast", "--ledger", str(DATA / "ledger.csv"), "--months", "61"])
    assert result.exit_code != 0


def test_cli_purchase_needs_a_baseline_source():
    result = runner.invoke(app, ["purchase", "--amount", "10"])
    assert result.exit_code != 0


def test_cli_aggregate_prints_months():
    result = runner.invoke(app, ["aggregate", "--ledger", str(DATA / "ledger.csv")])
    assert result.exit_code == 0, result.stdout
    assert "2024-01" in result.stdout
    assert "2024-03" in result.stdout


def test_cli_forecast_rejects_negative_seed():
    result = runner.invoke(
        app, ["forecast", "--ledger", str(DATA / "ledger.csv"), "--model", "monte_carlo", "--seed=-1"]
    )
    assert result.exit_code != 0
