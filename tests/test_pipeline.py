import datetime as dt

import pytest

from flowcast_core.domain.errors import ValidationError
from flowcast_core.domain.models import ForecastConfig, ForecastModel, Purchase, PurchaseKind, Transaction, TransactionType
from flowcast_core.io.repository import FixedClock, InMemoryTransactionRepository
from flowcast_core.services.pipeline import forecast_for_business, simulate_purchase_for_business


@pytest.fixture
def repository():
    repo = InMemoryTransactionRepository()
    repo.extend(
        "acme",
        [
            Transaction(date=dt.date(2024, 4, 2), amount=2000.0, type=TransactionType.INCOME),
            Transaction(date=dt.date(2024, 4, 8), amount=-1500.0, type=TransactionType.EXPENSE),
        ],
    )
    repo.add("other", Transaction(date=dt.date(2024, 4, 2), amount=99.0, type=TransactionType.INCOME))
    return repo


def test_forecast_uses_the_business_history_and_clock(repository):
    result = forecast_for_business(
        repository,
        "acme",
        ForecastConfig(model=ForecastModel.LINEAR, horizon_months=2),
        clock=FixedClock(dt.date(2024, 4, 30)),
    )

    # a single observed month gives a flat zero trend
    assert [p.month for p in result.points] == [dt.date(2024, 5, 1), dt.date(2024, 6, 1)]
    assert [p.balance for p in result.points] == [500.0, 500.0]


def test_unknown_business_forecasts_from_empty_history(repository):
    result = forecast_for_business(
        repository, "nobody", ForecastConfig(horizon_months=3), clock=FixedClock(dt.date(2024, 1, 1))
    )
    assert [p.balance for p in result.points] == [0.0, 0.0, 0.0]


def test_purchase_simulation_overlays_baseline(repository):
    points, impact = simulate_purchase_for_business(
        repository,
        "acme",
        Purchase(amount=1200.0, kind=PurchaseKind.INSTALLMENTS, installments=3, start_month_index=0),
        months=4,
        clock=FixedClock(dt.date(2024, 4, 30)),
    )

    assert [p.original_balance for p in points] == [1000.0, 1500.0, 2000.0, 2500.0]
    assert [p.simulated_balance for p in points] == [600.0, 700.0, 800.0, 1300.0]
    assert impact.total_applied == pytest.approx(1200.0)
    assert impact.first_negative_month is None


def test_invalid_config_fails_before_reading_transactions():
    class ExplodingRepository:
        def list_transactions(self, business_id):
            raise AssertionError("should not be called")

    with pytest.raises(ValidationError):
        forecast_for_business(ExplodingRepository(), "acme", ForecastConfig(horizon_months=0))


def test_repository_returns_copies(repository):
    rows = repository.list_transactions("acme")
    rows.clear()
    assert len(repository.list_transactions("acme")) == 2
