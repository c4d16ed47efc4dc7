from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Tuple

from flowcast_core.domain.models import ForecastPoint, RecurringItem, TransactionType, validate_horizon
from flowcast_core.domain.records import TransactionLike
from flowcast_core.services.aggregator import aggregate_transactions
from flowcast_core.services.forecaster import chain_balances, future_months


def recurring_totals(items: Iterable[RecurringItem]) -> Tuple[float, float]:
    """Monthly-equivalent (income, expenses) of the recurring items."""
    income = 0.0
    expenses = 0.0
    for item in items:
        if item.type is TransactionType.INCOME:
            income += item.monthly_amount
        else:
            expenses += item.monthly_amount
    return income, expenses


def project_baseline(
    records: Iterable[TransactionLike],
    months: int = 12,
    recurring: Iterable[RecurringItem] = (),
    start_balance: Optional[float] = None,
    as_of: Optional[dt.date] = None,
) -> List[ForecastPoint]:
    """
    Naive running-balance projection:
    - Mean monthly income/expenses over the observed months.
    - Recurring items add their monthly equivalent.
    - Balance starts from the history's cash position unless given.
    """
    validate_horizon(months)
    aggregation = aggregate_transactions(records)
    series = aggregation.series()
    observed = max(1, len(series))
    mean_income = sum(m.income for m in series) / observed
    mean_expenses = sum(m.expenses for m in series) / observed
    extra_income, extra_expenses = recurring_totals(recurring)

    points = [
        ForecastPoint(month=month, income=mean_income + extra_income, expenses=mean_expenses + extra_expenses)
        for month in future_months(as_of or dt.date.today(), months)
    ]
    balance = start_balance if start_balance is not None else aggregation.cash_position
    return chain_balances(points, float(balance))
