from __future__ import annotations

import dataclasses
import datetime as dt
import enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from flowcast_core.domain.errors import ValidationError

MIN_HORIZON_MONTHS = 1
MAX_HORIZON_MONTHS = 60
MIN_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.99


class TransactionType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class ForecastModel(str, enum.Enum):
    LINEAR = "LINEAR"
    SEASONAL = "SEASONAL"
    MONTE_CARLO = "MONTE_CARLO"

    @property
    def tag(self) -> str:
        return _MODEL_TAGS[self]

    @classmethod
    def parse(cls, value: Any) -> "ForecastModel":
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper().replace("-", "_")
        try:
            return cls(name)
        except ValueError:
            raise ValidationError(f"Unknown forecast model: {value!r}") from None


_MODEL_TAGS = {
    ForecastModel.LINEAR: "linear_regression",
    ForecastModel.SEASONAL: "seasonal_adjustment",
    ForecastModel.MONTE_CARLO: "monte_carlo",
}


class PurchaseKind(str, enum.Enum):
    ONE_TIME = "ONE_TIME"
    INSTALLMENTS = "INSTALLMENTS"


class Frequency(str, enum.Enum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"

    @property
    def months(self) -> int:
        return {"MONTHLY": 1, "QUARTERLY": 3, "YEARLY": 12}[self.value]


def month_start(date: dt.date) -> dt.date:
    return dt.date(date.year, date.month, 1)


def month_label(month: dt.date) -> str:
    return month.strftime("%Y-%m")


@dataclasses.dataclass(frozen=True)
class Transaction:
    date: dt.date
    amount: float
    type: TransactionType
    category: str = ""
    description: str = ""

    @property
    def signed_amount(self) -> float:
        if self.type is TransactionType.INCOME:
            return self.amount
        return -abs(self.amount)


@dataclasses.dataclass(frozen=True)
class RecurringItem:
    description: str
    amount: float
    type: TransactionType
    frequency: Frequency = Frequency.MONTHLY

    @property
    def monthly_amount(self) -> float:
        if self.type is TransactionType.INCOME:
            return self.amount / self.frequency.months
        return abs(self.amount) / self.frequency.months


@dataclasses.dataclass
class MonthlyAggregate:
    month: dt.date
    income: float = 0.0
    expenses: float = 0.0

    @property
    def month_key(self) -> str:
        return month_label(self.month)

    @property
    def net(self) -> float:
        return self.income - self.expenses


@dataclasses.dataclass(frozen=True)
class LineFit:
    slope: float = 0.0
    intercept: float = 0.0

    def value_at(self, offset: int) -> float:
        return self.slope * offset + self.intercept


@dataclasses.dataclass(frozen=True)
class TrendFit:
    income: LineFit
    expenses: LineFit

    @classmethod
    def flat(cls) -> "TrendFit":
        return cls(income=LineFit(0.0, 0.0), expenses=LineFit(0.0, 0.0))


@dataclasses.dataclass(frozen=True)
class ForecastConfig:
    model: ForecastModel = ForecastModel.LINEAR
    horizon_months: int = 12
    confidence_level: float = 0.95
    parameters: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    start_balance: Optional[float] = None
    seed: Optional[int] = None

    def validate(self) -> "ForecastConfig":
        """Raise ValidationError unless every field is usable; returns self."""
        validate_horizon(self.horizon_months)
        if isinstance(self.confidence_level, bool) or not isinstance(self.confidence_level, (int, float)):
            raise ValidationError("confidence_level must be a number")
        if not MIN_CONFIDENCE <= self.confidence_level <= MAX_CONFIDENCE:
            raise ValidationError(
                f"confidence_level must be between {MIN_CONFIDENCE} and {MAX_CONFIDENCE}, "
                f"got {self.confidence_level}"
            )
        if not isinstance(self.model, ForecastModel):
            raise ValidationError(f"Unknown forecast model: {self.model!r}")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int) or self.seed < 0):
            raise ValidationError(f"seed must be a non-negative integer, got {self.seed!r}")
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ForecastConfig":
        """
        Build a config from a plain mapping. Accepts the API field names
        (model_type, time_horizon) as well as the attribute names.
        """
        model = data.get("model", data.get("model_type", ForecastModel.LINEAR.value))
        horizon = data.get("horizon_months", data.get("time_horizon", 12))
        if isinstance(horizon, float) and not horizon.is_integer():
            raise ValidationError(f"horizon must be a whole number of months, got {horizon!r}")
        start_balance = data.get("start_balance")
        seed = data.get("seed")
        try:
            horizon = int(horizon)
            confidence = float(data.get("confidence_level", 0.95))
            start_balance = float(start_balance) if start_balance is not None else None
            seed = int(seed) if seed is not None else None
        except (TypeError, ValueError) as exc:
            raise ValidationError(str(exc)) from exc
        parameters = data.get("parameters") or {}
        if not isinstance(parameters, Mapping):
            raise ValidationError("parameters must be an object")
        return cls(
            model=ForecastModel.parse(model),
            horizon_months=horizon,
            confidence_level=confidence,
            parameters=dict(parameters),
            start_balance=start_balance,
            seed=seed,
        )


def validate_horizon(months: Any) -> int:
    if isinstance(months, bool) or not isinstance(months, int):
        raise ValidationError(f"horizon must be an integer number of months, got {months!r}")
    if not MIN_HORIZON_MONTHS <= months <= MAX_HORIZON_MONTHS:
        raise ValidationError(
            f"horizon must be between {MIN_HORIZON_MONTHS} and {MAX_HORIZON_MONTHS} months, got {months}"
        )
    return months


@dataclasses.dataclass
class ForecastPoint:
    month: dt.date
    income: float
    expenses: float
    balance: float = 0.0

    @property
    def net_flow(self) -> float:
        return self.income - self.expenses

    @property
    def profit(self) -> float:
        return self.net_flow

    @property
    def label(self) -> str:
        return month_label(self.month)


@dataclasses.dataclass
class MonteCarloScenario:
    incomes: List[float]
    expenses: List[float]
    balances: List[float]

    @property
    def final_balance(self) -> float:
        return self.balances[-1] if self.balances else 0.0


@dataclasses.dataclass(frozen=True)
class RejectedRecord:
    index: int
    record: Any
    reason: str


@dataclasses.dataclass
class ForecastResult:
    config: ForecastConfig
    confidence: float
    points: List[ForecastPoint]
    scenarios: List[MonteCarloScenario] = dataclasses.field(default_factory=list)
    bands: Dict[str, List[float]] = dataclasses.field(default_factory=dict)
    seasonal_factors: Dict[str, List[float]] = dataclasses.field(default_factory=dict)
    rejected: List[RejectedRecord] = dataclasses.field(default_factory=list)

    @property
    def model(self) -> ForecastModel:
        return self.config.model

    @property
    def model_tag(self) -> str:
        return self.config.model.tag

    def to_timeseries(self) -> List[Tuple[str, float]]:
        return [(p.label, p.balance) for p in self.points]


@dataclasses.dataclass(frozen=True)
class Purchase:
    amount: float
    kind: PurchaseKind = PurchaseKind.ONE_TIME
    installments: Optional[int] = None
    start_month_index: int = 0
    description: str = ""


@dataclasses.dataclass
class PurchaseSimulationPoint:
    month: dt.date
    income: float
    expenses: float
    original_balance: float
    adjustment: float
    simulated_balance: float

    @property
    def net_flow(self) -> float:
        return self.income - self.expenses

    @property
    def label(self) -> str:
        return month_label(self.month)


@dataclasses.dataclass
class PurchaseImpact:
    total_applied: float
    final_delta: float
    lowest_balance: float
    first_negative_month: Optional[dt.date] = None
