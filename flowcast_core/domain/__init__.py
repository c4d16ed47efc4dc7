from flowcast_core.domain.errors import DataQualityError, FlowcastError, ValidationError  # noqa: F401
from flowcast_core.domain.models import (  # noqa: F401
    ForecastConfig,
    ForecastModel,
    ForecastPoint,
    ForecastResult,
    Frequency,
    LineFit,
    MonteCarloScenario,
    MonthlyAggregate,
    Purchase,
    PurchaseImpact,
    PurchaseKind,
    PurchaseSimulationPoint,
    RecurringItem,
    RejectedRecord,
    Transaction,
    TransactionType,
    TrendFit,
)
from flowcast_core.domain.records import coerce_transaction  # noqa: F401

__all__ = [
    "DataQualityError",
    "FlowcastError",
    "ValidationError",
    "ForecastConfig",
    "ForecastModel",
    "ForecastPoint",
    "ForecastResult",
    "Frequency",
    "LineFit",
    "MonteCarloScenario",
    "MonthlyAggregate",
    "Purchase",
    "PurchaseImpact",
    "PurchaseKind",
    "PurchaseSimulationPoint",
    "RecurringItem",
    "RejectedRecord",
    "Transaction",
    "TransactionType",
    "TrendFit",
    "coerce_transaction",
]
