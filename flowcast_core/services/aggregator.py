from __future__ import annotations

import dataclasses
import datetime as dt
from typing import Dict, Iterable, List, Tuple

import pandas as pd

from flowcast_core.domain.errors import DataQualityError
from flowcast_core.domain.models import MonthlyAggregate, RejectedRecord, Transaction, TransactionType, month_start
from flowcast_core.domain.records import TransactionLike, coerce_transaction
from flowcast_core.logging_setup import get_logger

logger = get_logger(__name__)


@dataclasses.dataclass
class Aggregation:
    months: Dict[dt.date, MonthlyAggregate]
    transactions: List[Transaction]
    rejected: List[RejectedRecord]

    def series(self) -> List[MonthlyAggregate]:
        return [self.months[key] for key in sorted(self.months)]

    @property
    def cash_position(self) -> float:
        return float(sum(t.signed_amount for t in self.transactions))


def clean_transactions(records: Iterable[TransactionLike]) -> Tuple[List[Transaction], List[RejectedRecord]]:
    """Coerce every record, setting aside the ones that cannot be read."""
    accepted: List[Transaction] = []
    rejected: List[RejectedRecord] = []
    for idx, record in enumerate(records):
        try:
            accepted.append(coerce_transaction(record))
        except DataQualityError as exc:
            logger.warning("Skipping transaction #%d: %s", idx, exc)
            rejected.append(RejectedRecord(index=idx, record=record, reason=str(exc)))
    return accepted, rejected


def aggregate_transactions(records: Iterable[TransactionLike]) -> Aggregation:
    """
    Monthly aggregation:
    - Buckets transactions by calendar month (keyed by the month's first day).
    - Income adds the stored amount; everything else adds its absolute value to expenses.
    - Unreadable records are skipped and reported in ``rejected``.
    """
    entries, rejected = clean_transactions(records)
    if not entries:
        return Aggregation(months={}, transactions=[], rejected=rejected)

    df = pd.DataFrame(
        [
            {
                "month": month_start(e.date),
                "income": e.amount if e.type is TransactionType.INCOME else 0.0,
                "expenses": abs(e.amount) if e.type is not TransactionType.INCOME else 0.0,
            }
            for e in entries
        ]
    )
    monthly = df.groupby("month")[["income", "expenses"]].sum().sort_index()

    months: Dict[dt.date, MonthlyAggregate] = {}
    for key, row in monthly.iterrows():
        months[key] = MonthlyAggregate(month=key, income=float(row["income"]), expenses=float(row["expenses"]))

    logger.debug("Aggregated %d transactions into %d months", len(entries), len(months))
    return Aggregation(months=months, transactions=entries, rejected=rejected)


def aggregate_by_month(records: Iterable[TransactionLike]) -> Dict[dt.date, MonthlyAggregate]:
    return aggregate_transactions(records).months


def cash_position(records: Iterable[TransactionLike]) -> float:
    """Balance implied by the whole history: income in, expenses out."""
    return aggregate_transactions(records).cash_position
