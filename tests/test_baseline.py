import datetime as dt

import pytest

from flowcast_core.domain.errors import ValidationError
from flowcast_core.domain.models import Frequency, RecurringItem, Transaction, TransactionType
from flowcast_core.services.baseline import project_baseline


def _history():
    return [
        Transaction(date=dt.date(2024, 1, 3), amount=1000.0, type=TransactionType.INCOME),
        Transaction(date=dt.date(2024, 1, 9), amount=-600.0, type=TransactionType.EXPENSE),
        Transaction(date=dt.date(2024, 2, 3), amount=1400.0, type=TransactionType.INCOME),
        Transaction(date=dt.date(2024, 2, 9), amount=-400.0, type=TransactionType.EXPENSE),
    ]


def test_average_month_drives_running_balance():
    points = project_baseline(_history(), months=3, as_of=dt.date(2024, 2, 29))

    assert [p.month for p in points] == [dt.date(2024, 3, 1), dt.date(2024, 4, 1), dt.date(2024, 5, 1)]
    assert all(p.income == pytest.approx(1200.0) for p in points)
    assert all(p.expenses == pytest.approx(500.0) for p in points)
    # history leaves 1400 on hand
    assert [p.balance for p in points] == pytest.approx([2100.0, 2800.0, 3500.0])


def test_recurring_items_add_their_monthly_equivalent():
    recurring = [
        RecurringItem(description="Retainer", amount=300.0, type=TransactionType.INCOME),
        RecurringItem(description="Insurance", amount=1200.0, type=TransactionType.EXPENSE, frequency=Frequency.YEARLY),
        RecurringItem(description="Taxes", amount=-900.0, type=TransactionType.EXPENSE, frequency=Frequency.QUARTERLY),
    ]
    points = project_baseline(_history(), months=2, recurring=recurring, start_balance=0.0, as_of=dt.date(2024, 2, 29))

    assert points[0].income == pytest.approx(1500.0)
    assert points[0].expenses == pytest.approx(500.0 + 100.0 + 300.0)
    assert points[1].balance == pytest.approx(2 * (1500.0 - 900.0))


def test_empty_history_projects_recurring_only():
    points = project_baseline(
        [],
        months=2,
        recurring=[RecurringItem(description="Rent", amount=250.0, type=TransactionType.EXPENSE)],
        as_of=dt.date(2024, 1, 1),
    )

    assert [p.balance for p in points] == [-250.0, -500.0]


@pytest.mark.parametrize("months", [0, 61])
def test_horizon_is_validated(months):
    with pytest.raises(ValidationError):
        project_baseline(_history(), months=months)


def test_negative_recurring_income_reduces_the_projection():
    recurring = [
        RecurringItem(description="Chargeback", amount=-200.0, type=TransactionType.INCOME),
        RecurringItem(description="Refund", amount=-600.0, type=TransactionType.INCOME, frequency=Frequency.QUARTERLY),
    ]
    points = project_baseline(_history(), months=1, recurring=recurring, start_balance=0.0, as_of=dt.date(2024, 2, 29))

    assert points[0].income == pytest.approx(1200.0 - 200.0 - 200.0)
    assert points[0].balance == pytest.approx(800.0 - 500.0)
