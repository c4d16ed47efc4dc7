from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from flowcast_core.domain.models import (
    ForecastConfig,
    ForecastResult,
    Purchase,
    PurchaseImpact,
    PurchaseSimulationPoint,
    RecurringItem,
)
from flowcast_core.io.repository import Clock, SystemClock, TransactionRepository
from flowcast_core.services import baseline as baseline_service
from flowcast_core.services import forecaster
from flowcast_core.services import purchase as purchase_service


def forecast_for_business(
    repository: TransactionRepository,
    business_id: str,
    config: ForecastConfig,
    clock: Optional[Clock] = None,
) -> ForecastResult:
    config.validate()
    transactions = repository.list_transactions(business_id)
    return forecaster.forecast(transactions, config, as_of=(clock or SystemClock()).today())


def simulate_purchase_for_business(
    repository: TransactionRepository,
    business_id: str,
    purchase: Purchase,
    months: int = 12,
    recurring: Iterable[RecurringItem] = (),
    clock: Optional[Clock] = None,
) -> Tuple[List[PurchaseSimulationPoint], PurchaseImpact]:
    purchase_service.validate_purchase(purchase)
    transactions = repository.list_transactions(business_id)
    base = baseline_service.project_baseline(
        transactions,
        months=months,
        recurring=recurring,
        as_of=(clock or SystemClock()).today(),
    )
    simulated = purchase_service.simulate_purchase(base, purchase)
    return simulated, purchase_service.summarize_purchase(simulated)
