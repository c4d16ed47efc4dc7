from __future__ import annotations

from typing import List, Sequence

from flowcast_core.domain.errors import ValidationError
from flowcast_core.domain.models import (
    ForecastPoint,
    Purchase,
    PurchaseImpact,
    PurchaseKind,
    PurchaseSimulationPoint,
)


def validate_purchase(purchase: Purchase) -> Purchase:
    if not isinstance(purchase.kind, PurchaseKind):
        raise ValidationError(f"Unknown purchase kind: {purchase.kind!r}")
    if isinstance(purchase.amount, bool) or not isinstance(purchase.amount, (int, float)) or not purchase.amount > 0:
        raise ValidationError(f"Purchase amount must be greater than 0, got {purchase.amount!r}")
    if isinstance(purchase.start_month_index, bool) or not isinstance(purchase.start_month_index, int):
        raise ValidationError("start_month_index must be an integer")
    if purchase.start_month_index < 0:
        raise ValidationError(f"start_month_index must be >= 0, got {purchase.start_month_index}")
    if purchase.kind is PurchaseKind.INSTALLMENTS:
        n = purchase.installments
        if isinstance(n, bool) or not isinstance(n, int) or n < 1:
            raise ValidationError(f"Installment purchases need installments >= 1, got {n!r}")
    return purchase


def _adjustments(length: int, purchase: Purchase) -> List[float]:
    adjustments = [0.0] * length
    start = purchase.start_month_index
    if purchase.kind is PurchaseKind.ONE_TIME:
        if start < length:
            adjustments[start] = -float(purchase.amount)
        return adjustments

    share = float(purchase.amount) / purchase.installments
    for idx in range(start, min(start + purchase.installments, length)):
        adjustments[idx] = -share
    return adjustments


def simulate_purchase(baseline: Sequence[ForecastPoint], purchase: Purchase) -> List[PurchaseSimulationPoint]:
    """
    Overlay a hypothetical purchase on a baseline projection.

    One-time purchases hit a single month; installments split the amount evenly
    over consecutive months, dropping any that fall past the end of the baseline.
    The running adjustment carries into every later month's balance.
    """
    validate_purchase(purchase)
    adjustments = _adjustments(len(baseline), purchase)

    simulated: List[PurchaseSimulationPoint] = []
    cumulative = 0.0
    for point, adjustment in zip(baseline, adjustments):
        cumulative += adjustment
        simulated.append(
            PurchaseSimulationPoint(
                month=point.month,
                income=point.income,
                expenses=point.expenses,
                original_balance=point.balance,
                adjustment=adjustment,
                simulated_balance=point.balance + cumulative,
            )
        )
    return simulated


def summarize_purchase(points: Sequence[PurchaseSimulationPoint]) -> PurchaseImpact:
    """Compare the simulated series against its baseline."""
    if not points:
        return PurchaseImpact(total_applied=0.0, final_delta=0.0, lowest_balance=0.0)
    first_negative = next((p.month for p in points if p.simulated_balance < 0), None)
    return PurchaseImpact(
        total_applied=-sum(p.adjustment for p in points),
        final_delta=points[-1].simulated_balance - points[-1].original_balance,
        lowest_balance=min(p.simulated_balance for p in points),
        first_negative_month=first_negative,
    )
