from __future__ import annotations

import dataclasses
import datetime as dt
import math
from typing import Any, Mapping, Optional, Union

import pandas as pd

from flowcast_core.domain.errors import DataQualityError
from flowcast_core.domain.models import Transaction, TransactionType

TransactionLike = Union[Transaction, Mapping[str, Any]]


def _field(record: Mapping[str, Any], name: str) -> Any:
    # CSV exports disagree on header case ("amount" vs "Amount").
    if name in record:
        return record[name]
    return record.get(name.capitalize())


def parse_date(value: Any) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if value is None or (isinstance(value, float) and math.isnan(value)):
        raise DataQualityError("missing date")
    # numbers would be read as epoch offsets
    if not isinstance(value, str):
        raise DataQualityError(f"unparseable date {value!r}")
    try:
        parsed = pd.to_datetime(value)
    except (ValueError, TypeError, OverflowError) as exc:
        raise DataQualityError(f"unparseable date {value!r}") from exc
    if not isinstance(parsed, pd.Timestamp) or pd.isna(parsed):
        raise DataQualityError(f"unparseable date {value!r}")
    return parsed.date()


def parse_amount(value: Any) -> float:
    if isinstance(value, bool):
        raise DataQualityError(f"non-numeric amount {value!r}")
    try:
        amount = float(value)
    except (TypeError, ValueError) as exc:
        raise DataQualityError(f"non-numeric amount {value!r}") from exc
    if not math.isfinite(amount):
        raise DataQualityError(f"non-finite amount {value!r}")
    return amount


def parse_type(value: Any, amount: float) -> TransactionType:
    if value is None or (isinstance(value, float) and math.isnan(value)) or value == "":
        return TransactionType.INCOME if amount > 0 else TransactionType.EXPENSE
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().upper())
    except ValueError:
        raise DataQualityError(f"unknown transaction type {value!r}") from None


def _text(value: Optional[Any]) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return str(value)


def coerce_transaction(record: TransactionLike) -> Transaction:
    """
    Turn a Transaction or a raw mapping (CSV row, JSON object) into a Transaction.

    Raises DataQualityError when the date, amount or type cannot be read.
    A record without a type is classified by the sign of its amount.
    """
    if isinstance(record, Transaction):
        amount = parse_amount(record.amount)
        date = parse_date(record.date)
        kind = parse_type(record.type, amount)
        if type(record.date) is dt.date and amount == record.amount and type(record.type) is TransactionType:
            return record
        return dataclasses.replace(record, date=date, amount=amount, type=kind)
    if not isinstance(record, Mapping):
        raise DataQualityError(f"unsupported record {type(record).__name__}")

    amount = parse_amount(_field(record, "amount"))
    kind = _field(record, "type")
    if kind is None:
        kind = _field(record, "kind")
    return Transaction(
        date=parse_date(_field(record, "date")),
        amount=amount,
        type=parse_type(kind, amount),
        category=_text(_field(record, "category")),
        description=_text(_field(record, "description")),
    )
