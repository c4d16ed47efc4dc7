from __future__ import annotations

from typing import Sequence

from flowcast_core.domain.models import LineFit, MonthlyAggregate, TrendFit


def _two_point(first: float, last: float, n: int) -> LineFit:
    return LineFit(slope=(last - first) / (n - 1), intercept=last)


def fit_linear_trend(series: Sequence[MonthlyAggregate]) -> TrendFit:
    """
    Two-point trend over a month-ordered series.

    The slope runs from the first to the last observation and the line is
    anchored on the last one, so offset 0 reproduces the latest month.
    Fewer than two points gives a flat zero trend.
    """
    n = len(series)
    if n < 2:
        return TrendFit.flat()
    first, last = series[0], series[-1]
    return TrendFit(
        income=_two_point(first.income, last.income, n),
        expenses=_two_point(first.expenses, last.expenses, n),
    )
