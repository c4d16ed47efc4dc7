from __future__ import annotations

import datetime as dt
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from flowcast_core.domain.models import (
    ForecastConfig,
    ForecastModel,
    ForecastPoint,
    ForecastResult,
    MonthlyAggregate,
    month_start,
)
from flowcast_core.domain.records import TransactionLike
from flowcast_core.logging_setup import get_logger
from flowcast_core.services import simulator
from flowcast_core.services.aggregator import aggregate_transactions
from flowcast_core.services.trend import fit_linear_trend

logger = get_logger(__name__)

LINEAR_CONFIDENCE = 0.8
SEASONAL_CONFIDENCE = 0.85

ModelFn = Callable[[Sequence[MonthlyAggregate], ForecastConfig, List[dt.date], float], ForecastResult]


def future_months(as_of: dt.date, horizon: int) -> List[dt.date]:
    """First day of each of the ``horizon`` months following ``as_of``."""
    start = pd.Period(month_start(as_of), freq="M")
    return [(start + i).to_timestamp().date() for i in range(1, horizon + 1)]


def chain_balances(points: List[ForecastPoint], start_balance: float) -> List[ForecastPoint]:
    balance = start_balance
    for point in points:
        balance += point.net_flow
        point.balance = balance
    return points


def forecast_linear(
    series: Sequence[MonthlyAggregate],
    config: ForecastConfig,
    months: List[dt.date],
    start_balance: float,
) -> ForecastResult:
    """
    Linear projection from the two-point trend:
    - offset i (1-based) projects slope * i + intercept for income and expenses.
    - Magnitudes are clamped at zero; the resulting profit is not.
    """
    trend = fit_linear_trend(series)
    points = [
        ForecastPoint(
            month=month,
            income=max(0.0, trend.income.value_at(i)),
            expenses=max(0.0, trend.expenses.value_at(i)),
        )
        for i, month in enumerate(months, start=1)
    ]
    return ForecastResult(
        config=config,
        confidence=LINEAR_CONFIDENCE,
        points=chain_balances(points, start_balance),
    )


def seasonal_factors(series: Sequence[MonthlyAggregate]) -> Dict[str, List[float]]:
    """
    Multiplicative factor per calendar month (Jan..Dec) for income and expenses:
    the mean of that calendar month's totals over the mean of all monthly totals.
    Unobserved calendar months and all-zero series stay neutral at 1.0.
    """
    factors = {"income": [1.0] * 12, "expenses": [1.0] * 12}
    if not series:
        return factors

    df = pd.DataFrame(
        {
            "calendar_month": [m.month.month for m in series],
            "income": [m.income for m in series],
            "expenses": [m.expenses for m in series],
        }
    )
    by_month = df.groupby("calendar_month")[["income", "expenses"]].mean()
    for column in ("income", "expenses"):
        overall = df[column].mean()
        if overall == 0:
            continue
        for calendar_month, value in by_month[column].items():
            factors[column][int(calendar_month) - 1] = float(value / overall)
    return factors


def forecast_seasonal(
    series: Sequence[MonthlyAggregate],
    config: ForecastConfig,
    months: List[dt.date],
    start_balance: float,
) -> ForecastResult:
    """Linear trend scaled by the calendar month's seasonal factor."""
    trend = fit_linear_trend(series)
    factors = seasonal_factors(series)
    points = []
    for i, month in enumerate(months, start=1):
        slot = month.month - 1
        points.append(
            ForecastPoint(
                month=month,
                income=max(0.0, trend.income.value_at(i)) * factors["income"][slot],
                expenses=max(0.0, trend.expenses.value_at(i)) * factors["expenses"][slot],
            )
        )
    return ForecastResult(
        config=config,
        confidence=SEASONAL_CONFIDENCE,
        points=chain_balances(points, start_balance),
        seasonal_factors=factors,
    )


MODELS: Dict[ForecastModel, ModelFn] = {
    ForecastModel.LINEAR: forecast_linear,
    ForecastModel.SEASONAL: forecast_seasonal,
    ForecastModel.MONTE_CARLO: simulator.run_monte_carlo,
}


def forecast(
    records: Iterable[TransactionLike],
    config: ForecastConfig,
    as_of: Optional[dt.date] = None,
) -> ForecastResult:
    """
    Project ``config.horizon_months`` months after ``as_of`` (default: today).

    Raises ValidationError before touching the data when the config is unusable.
    Unreadable transactions are skipped and listed on ``result.rejected``.
    """
    config.validate()
    if config.model is ForecastModel.MONTE_CARLO:
        simulator.read_parameters(config.parameters)

    aggregation = aggregate_transactions(records)
    start_balance = config.start_balance if config.start_balance is not None else aggregation.cash_position
    months = future_months(as_of or dt.date.today(), config.horizon_months)

    result = MODELS[config.model](aggregation.series(), config, months, float(start_balance))
    result.rejected = aggregation.rejected
    logger.debug(
        "Forecast %s over %d months from %d observed months (%d rejected records)",
        config.model.tag,
        config.horizon_months,
        len(aggregation.months),
        len(aggregation.rejected),
    )
    return result
