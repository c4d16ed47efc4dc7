from __future__ import annotations

import datetime as dt
from collections import defaultdict
from typing import Dict, Iterable, List, Protocol

from flowcast_core.domain.models import Transaction


class TransactionRepository(Protocol):
    def list_transactions(self, business_id: str) -> List[Transaction]:
        ...


class Clock(Protocol):
    def today(self) -> dt.date:
        ...


class SystemClock:
    def today(self) -> dt.date:
        return dt.date.today()


class FixedClock:
    def __init__(self, today: dt.date):
        self._today = today

    def today(self) -> dt.date:
        return self._today


class InMemoryTransactionRepository:
    """Per-business transaction store held in process memory."""

    def __init__(self) -> None:
        self._rows: Dict[str, List[Transaction]] = defaultdict(list)

    def add(self, business_id: str, transaction: Transaction) -> None:
        self._rows[business_id].append(transaction)

    def extend(self, business_id: str, transactions: Iterable[Transaction]) -> None:
        self._rows[business_id].extend(transactions)

    def list_transactions(self, business_id: str) -> List[Transaction]:
        return list(self._rows.get(business_id, []))
