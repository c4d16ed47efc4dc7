from __future__ import annotations

import datetime as dt
from typing import Any, List, Mapping, Sequence, Tuple

import numpy as np

from flowcast_core.domain.errors import ValidationError
from flowcast_core.domain.models import (
    ForecastConfig,
    ForecastPoint,
    ForecastResult,
    MonteCarloScenario,
    MonthlyAggregate,
)

CONFIDENCE = 0.95
DEFAULT_SIMULATIONS = 1000
DEFAULT_VOLATILITY = 0.1
MAX_SIMULATIONS = 100_000


def read_parameters(parameters: Mapping[str, Any]) -> Tuple[int, float]:
    """Return (simulations, volatility) from free-form model parameters."""
    simulations = parameters.get("simulations", DEFAULT_SIMULATIONS)
    volatility = parameters.get("volatility", DEFAULT_VOLATILITY)
    if isinstance(simulations, bool) or not isinstance(simulations, int):
        raise ValidationError(f"simulations must be an integer, got {simulations!r}")
    if not 1 <= simulations <= MAX_SIMULATIONS:
        raise ValidationError(f"simulations must be between 1 and {MAX_SIMULATIONS}, got {simulations}")
    try:
        volatility = float(volatility)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"volatility must be a number, got {volatility!r}") from exc
    if not np.isfinite(volatility) or volatility < 0:
        raise ValidationError(f"volatility must be >= 0, got {volatility}")
    return simulations, volatility


def run_monte_carlo(
    series: Sequence[MonthlyAggregate],
    config: ForecastConfig,
    months: List[dt.date],
    start_balance: float,
) -> ForecastResult:
    """
    Vectorized bootstrap over monthly history.

    Each path draws one observed month (income and expenses together) per
    projected month, with replacement, and scales both by ``1 + N(0, volatility)``.
    Paths are the independent rows of one draw from ``default_rng(config.seed)``.
    """
    simulations, volatility = read_parameters(config.parameters)
    horizon = len(months)
    rng = np.random.default_rng(config.seed)

    history = np.array([[m.income, m.expenses] for m in series], dtype=float).reshape(-1, 2)
    if len(history) == 0:
        incomes = np.zeros((simulations, horizon))
        expenses = np.zeros((simulations, horizon))
    else:
        picks = rng.integers(0, len(history), size=(simulations, horizon))
        income_noise = rng.normal(0.0, volatility, size=(simulations, horizon))
        expense_noise = rng.normal(0.0, volatility, size=(simulations, horizon))
        incomes = np.maximum(history[picks, 0] * (1 + income_noise), 0.0)
        expenses = np.maximum(history[picks, 1] * (1 + expense_noise), 0.0)

    balances = start_balance + np.cumsum(incomes - expenses, axis=1)

    tail = (1 - config.confidence_level) / 2
    bands = {
        "lower": np.percentile(balances, tail * 100, axis=0).tolist(),
        "median": np.percentile(balances, 50, axis=0).tolist(),
        "upper": np.percentile(balances, (1 - tail) * 100, axis=0).tolist(),
    }

    median_income = np.median(incomes, axis=0)
    median_expense = np.median(expenses, axis=0)
    points = [
        ForecastPoint(
            month=month,
            income=float(median_income[i]),
            expenses=float(median_expense[i]),
            balance=float(bands["median"][i]),
        )
        for i, month in enumerate(months)
    ]
    scenarios = [
        MonteCarloScenario(incomes=inc.tolist(), expenses=exp.tolist(), balances=bal.tolist())
        for inc, exp, bal in zip(incomes, expenses, balances)
    ]
    return ForecastResult(
        config=config,
        confidence=CONFIDENCE,
        points=points,
        scenarios=scenarios,
        bands=bands,
    )
