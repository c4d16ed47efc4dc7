from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from flowcast_core.domain.errors import ValidationError
from flowcast_core.domain.models import (
    ForecastConfig,
    Frequency,
    Purchase,
    PurchaseKind,
    RecurringItem,
    TransactionType,
)


def load_forecast_config(path: str | Path) -> ForecastConfig:
    return ForecastConfig.from_dict(_read_json(path))


def purchase_from_dict(data: Dict[str, Any]) -> Purchase:
    try:
        kind = PurchaseKind(str(data.get("kind", data.get("type", "ONE_TIME"))).upper())
        installments = data.get("installments")
        return Purchase(
            amount=float(data["amount"]),
            kind=kind,
            installments=int(installments) if installments is not None else None,
            start_month_index=int(data.get("start_month_index", data.get("startMonth", 0))),
            description=str(data.get("description", "")),
        )
    except KeyError as exc:
        raise ValidationError(f"Purchase is missing {exc.args[0]!r}") from exc
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid purchase: {exc}") from exc


def load_purchase(path: str | Path) -> Purchase:
    return purchase_from_dict(_read_json(path))


def load_recurring_items(path: str | Path) -> List[RecurringItem]:
    data = _read_json(path)
    rows = data.get("items", []) if isinstance(data, dict) else data
    items: List[RecurringItem] = []
    for row in rows:
        try:
            items.append(
                RecurringItem(
                    description=str(row.get("description", "")),
                    amount=float(row["amount"]),
                    type=TransactionType(str(row.get("type", "EXPENSE")).upper()),
                    frequency=Frequency(str(row.get("frequency", "MONTHLY")).upper()),
                )
            )
        except KeyError as exc:
            raise ValidationError(f"Recurring item is missing {exc.args[0]!r}") from exc
        except (AttributeError, TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid recurring item {row!r}: {exc}") from exc
    return items


def _read_json(path: str | Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"{path} is not valid JSON: {exc}") from exc
