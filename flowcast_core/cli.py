from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from flowcast_core.domain.errors import FlowcastError
from flowcast_core.domain.models import (
    ForecastConfig,
    ForecastModel,
    ForecastPoint,
    ForecastResult,
    Purchase,
    PurchaseImpact,
    PurchaseKind,
    PurchaseSimulationPoint,
)
from flowcast_core.io import config as config_io
from flowcast_core.io import ledger as ledger_io
from flowcast_core.logging_setup import configure_logging
from flowcast_core.services import aggregator, baseline as baseline_service, forecaster
from flowcast_core.services import purchase as purchase_service

app = typer.Typer(help="Cash-flow forecasting and purchase simulation for small-business ledgers.")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Log level (default: FLOWCAST_LOG_LEVEL or INFO)"),
):
    configure_logging(log_level)


def _save_json(path: Path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _emit(payload: dict, out: Optional[Path], what: str) -> None:
    if out:
        _save_json(out, payload)
        typer.echo(f"{what} written to {out}")
    else:
        typer.echo(json.dumps(payload, indent=2))


def _point_to_json(p: ForecastPoint) -> dict:
    return {
        "month": p.month.isoformat(),
        "income": p.income,
        "expenses": p.expenses,
        "net_flow": p.net_flow,
        "balance": p.balance,
    }


def _forecast_to_json(result: ForecastResult, include_scenarios: bool = False) -> dict:
    payload = {
        "config": {
            "model": result.config.model.value,
            "horizon_months": result.config.horizon_months,
            "confidence_level": result.config.confidence_level,
            "parameters": dict(result.config.parameters),
            "start_balance": result.config.start_balance,
            "seed": result.config.seed,
        },
        "model": result.model_tag,
        "confidence": result.confidence,
        "forecast": [_point_to_json(p) for p in result.points],
        "rejected": len(result.rejected),
    }
    if result.bands:
        payload["bands"] = result.bands
    if result.seasonal_factors:
        payload["seasonal_factors"] = result.seasonal_factors
    if result.scenarios:
        payload["scenario_count"] = len(result.scenarios)
        if include_scenarios:
            payload["scenarios"] = [s.balances for s in result.scenarios]
    return payload


def _points_from_json(data: dict) -> List[ForecastPoint]:
    rows = data["forecast"] if isinstance(data, dict) else data
    points = []
    for item in rows:
        year, month = (int(x) for x in item["month"].split("-")[:2])
        points.append(
            ForecastPoint(
                month=date(year, month, 1),
                income=float(item.get("income", 0.0)),
                expenses=float(item.get("expenses", 0.0)),
                balance=float(item["balance"]),
            )
        )
    return points


def _simulation_to_json(points: List[PurchaseSimulationPoint], purchase: Purchase, impact: PurchaseImpact) -> dict:
    return {
        "purchase": {
            "description": purchase.description,
            "amount": purchase.amount,
            "kind": purchase.kind.value,
            "installments": purchase.installments,
            "start_month_index": purchase.start_month_index,
        },
        "impact": {
            "total_applied": impact.total_applied,
            "final_delta": impact.final_delta,
            "lowest_balance": impact.lowest_balance,
            "first_negative_month": impact.first_negative_month.isoformat() if impact.first_negative_month else None,
        },
        "simulation": [
            {
                "month": p.month.isoformat(),
                "income": p.income,
                "expenses": p.expenses,
                "original_balance": p.original_balance,
                "adjustment": p.adjustment,
                "simulated_balance": p.simulated_balance,
            }
            for p in points
        ],
    }


@app.command()
def aggregate(
    ledger: Path = typer.Option(..., help="CSV ledger with date,amount[,type,category,description]"),
):
    """Show monthly income/expense totals."""
    entries = ledger_io.load_ledger(ledger)
    series = aggregator.aggregate_transactions(entries).series()

    table = Table(title="Monthly totals")
    table.add_column("Month")
    table.add_column("Income", justify="right")
    table.add_column("Expenses", justify="right")
    table.add_column("Net", justify="right")
    for m in series:
        style = "green" if m.net >= 0 else "red"
        table.add_row(m.month_key, f"{m.income:,.2f}", f"{m.expenses:,.2f}", f"[{style}]{m.net:,.2f}[/{style}]")
    Console().print(table)


@app.command()
def forecast(
    ledger: Path = typer.Option(..., help="CSV ledger with date,amount[,type,category,description]"),
    model: str = typer.Option("linear", help="Forecast model: linear|seasonal|monte_carlo"),
    months: int = typer.Option(12, help="Months to forecast (1-60)"),
    confidence: float = typer.Option(0.95, help="Confidence level for Monte Carlo bands (0.5-0.99)"),
    simulations: int = typer.Option(1000, help="Monte Carlo repetitions"),
    volatility: float = typer.Option(0.1, help="Monte Carlo multiplicative noise (std dev)"),
    start_balance: Optional[float] = typer.Option(None, help="Opening balance (default: ledger cash position)"),
    seed: Optional[int] = typer.Option(None, help="Random seed"),
    config: Optional[Path] = typer.Option(None, help="JSON forecast config; overrides the options above"),
    as_of: Optional[str] = typer.Option(None, help="Reference date YYYY-MM-DD (default: today)"),
    scenarios: bool = typer.Option(False, help="Include every Monte Carlo balance path in the output"),
    out: Optional[Path] = typer.Option(None, help="Output path for forecast JSON"),
):
    """Generate a cash-flow forecast."""
    try:
        if config:
            forecast_conf = config_io.load_forecast_config(config)
        else:
            parameters = {}
            forecast_model = ForecastModel.parse(model)
            if forecast_model is ForecastModel.MONTE_CARLO:
                parameters = {"simulations": simulations, "volatility": volatility}
            forecast_conf = ForecastConfig(
                model=forecast_model,
                horizon_months=months,
                confidence_level=confidence,
                parameters=parameters,
                start_balance=start_balance,
                seed=seed,
            )
        entries = ledger_io.load_ledger(ledger)
        result = forecaster.forecast(entries, forecast_conf, as_of=_parse_as_of(as_of))
    except FlowcastError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _emit(_forecast_to_json(result, include_scenarios=scenarios), out, "Forecast")


@app.command()
def baseline(
    ledger: Path = typer.Option(..., help="CSV ledger with date,amount[,type,category,description]"),
    months: int = typer.Option(12, help="Months to project (1-60)"),
    recurring: Optional[Path] = typer.Option(None, help="JSON list of recurring items"),
    start_balance: Optional[float] = typer.Option(None, help="Opening balance (default: ledger cash position)"),
    as_of: Optional[str] = typer.Option(None, help="Reference date YYYY-MM-DD (default: today)"),
    out: Optional[Path] = typer.Option(None, help="Output path for baseline JSON"),
):
    """Project a running balance from average months plus recurring items."""
    try:
        items = config_io.load_recurring_items(recurring) if recurring else []
        points = baseline_service.project_baseline(
            ledger_io.load_ledger(ledger),
            months=months,
            recurring=items,
            start_balance=start_balance,
            as_of=_parse_as_of(as_of),
        )
    except FlowcastError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _emit({"forecast": [_point_to_json(p) for p in points]}, out, "Baseline")


@app.command()
def purchase(
    amount: float = typer.Option(..., help="Total purchase amount"),
    kind: str = typer.Option("one_time", help="Payment kind: one_time|installments"),
    installments: Optional[int] = typer.Option(None, help="Number of monthly installments"),
    start_month: int = typer.Option(0, help="Index of the first affected month in the baseline"),
    description: str = typer.Option("", help="What is being bought"),
    baseline: Optional[Path] = typer.Option(None, help="Baseline or forecast JSON"),
    ledger: Optional[Path] = typer.Option(None, help="Ledger CSV (used if baseline not supplied)"),
    months: int = typer.Option(12, help="Months to project if ledger is used"),
    recurring: Optional[Path] = typer.Option(None, help="Recurring items JSON if ledger is used"),
    as_of: Optional[str] = typer.Option(None, help="Reference date YYYY-MM-DD if ledger is used"),
    out: Optional[Path] = typer.Option(None, help="Output path for simulation JSON"),
):
    """Simulate the effect of a purchase on a baseline balance projection."""
    try:
        purchase_obj = Purchase(
            amount=amount,
            kind=PurchaseKind(kind.strip().upper()),
            installments=installments,
            start_month_index=start_month,
            description=description,
        )
    except ValueError as exc:
        raise typer.BadParameter(f"Unknown purchase kind: {kind}") from exc

    try:
        purchase_service.validate_purchase(purchase_obj)
        points = _load_baseline(baseline, ledger, months, recurring, as_of)
        simulated = purchase_service.simulate_purchase(points, purchase_obj)
    except FlowcastError as exc:
        raise typer.BadParameter(str(exc)) from exc

    impact = purchase_service.summarize_purchase(simulated)
    _emit(_simulation_to_json(simulated, purchase_obj, impact), out, "Purchase simulation")
    if out:
        Console().print(
            f"Lowest balance with purchase: [bold]{impact.lowest_balance:,.2f}[/bold]"
            + (f" | goes negative in {impact.first_negative_month:%Y-%m}" if impact.first_negative_month else "")
        )


def _parse_as_of(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise typer.BadParameter(f"as_of must be YYYY-MM-DD, got {raw!r}") from exc


def _load_baseline(
    baseline: Optional[Path],
    ledger: Optional[Path],
    months: int,
    recurring: Optional[Path],
    as_of: Optional[str],
) -> List[ForecastPoint]:
    if baseline:
        with baseline.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return _points_from_json(data)
    if ledger:
        items = config_io.load_recurring_items(recurring) if recurring else []
        return baseline_service.project_baseline(
            ledger_io.load_ledger(ledger),
            months=months,
            recurring=items,
            as_of=_parse_as_of(as_of),
        )
    raise typer.BadParameter("Provide either --baseline or --ledger")


if __name__ == "__main__":
    app()
