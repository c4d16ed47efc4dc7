import datetime as dt

import pytest

from flowcast_core.domain.models import Transaction, TransactionType
from flowcast_core.services.aggregator import aggregate_by_month, aggregate_transactions, cash_position


def _tx(date: str, amount: float, kind: TransactionType = TransactionType.INCOME) -> Transaction:
    return Transaction(date=dt.date.fromisoformat(date), amount=amount, type=kind)


def test_totals_match_input_sums():
    entries = [
        _tx("2024-03-02", 500.0),
        _tx("2024-01-15", 250.0),
        _tx("2024-01-20", -80.0, TransactionType.EXPENSE),
        _tx("2024-03-30", 40.0, TransactionType.EXPENSE),
        _tx("2023-12-31", 125.5),
    ]
    months = aggregate_by_month(entries)

    assert sum(m.income for m in months.values()) == pytest.approx(875.5)
    assert sum(m.expenses for m in months.values()) == pytest.approx(120.0)


def test_same_calendar_month_shares_a_bucket():
    months = aggregate_by_month(
        [
            _tx("2024-05-01", 10.0),
            _tx("2024-05-31", 20.0),
            _tx("2023-05-15", 99.0),
        ]
    )

    assert set(months) == {dt.date(2024, 5, 1), dt.date(2023, 5, 1)}
    assert months[dt.date(2024, 5, 1)].income == pytest.approx(30.0)


def test_expenses_use_absolute_value_regardless_of_sign():
    months = aggregate_by_month(
        [
            _tx("2024-02-01", -30.0, TransactionType.EXPENSE),
            _tx("2024-02-02", 70.0, TransactionType.EXPENSE),
        ]
    )

    feb = months[dt.date(2024, 2, 1)]
    assert feb.expenses == pytest.approx(100.0)
    assert feb.income == 0.0
    assert feb.net == pytest.approx(-100.0)


def test_series_orders_months_chronologically():
    # "2024-10" sorts before "2024-2" as an unpadded string
    series = aggregate_transactions(
        [_tx("2024-10-03", 1.0), _tx("2024-02-03", 2.0), _tx("2023-11-03", 3.0)]
    ).series()

    assert [m.month_key for m in series] == ["2023-11", "2024-02", "2024-10"]


def test_bad_records_are_skipped_not_fatal():
    records = [
        {"date": "2024-01-10", "amount": "100", "type": "INCOME"},
        {"date": "someday", "amount": "50", "type": "INCOME"},
        {"date": "2024-01-11", "amount": "fifty", "type": "EXPENSE"},
        {"date": "2024-01-12", "amount": "20", "type": "REFUND"},
        {"date": "2024-01-13", "amount": "-15"},
        {"date": 20240115, "amount": "40", "type": "INCOME"},
        {"date": ["2024-01-16"], "amount": "40", "type": "INCOME"},
    ]
    result = aggregate_transactions(records)

    assert [r.index for r in result.rejected] == [1, 2, 3, 5, 6]
    jan = result.months[dt.date(2024, 1, 1)]
    assert jan.income == pytest.approx(100.0)
    assert jan.expenses == pytest.approx(15.0)


def test_empty_history_gives_empty_map():
    result = aggregate_transactions([])

    assert result.months == {}
    assert result.series() == []
    assert result.rejected == []


def test_cash_position_nets_income_against_expenses():
    entries = [
        _tx("2024-01-01", 1000.0),
        _tx("2024-01-05", 300.0, TransactionType.EXPENSE),
        _tx("2024-02-05", -200.0, TransactionType.EXPENSE),
    ]

    assert cash_position(entries) == pytest.approx(500.0)
