from flowcast_core.io.ledger import load_ledger  # noqa: F401
from flowcast_core.io.config import (  # noqa: F401
    load_forecast_config,
    load_purchase,
    load_recurring_items,
)
from flowcast_core.io.repository import (  # noqa: F401
    FixedClock,
    InMemoryTransactionRepository,
    SystemClock,
)

__all__ = [
    "load_ledger",
    "load_forecast_config",
    "load_purchase",
    "load_recurring_items",
    "FixedClock",
    "InMemoryTransactionRepository",
    "SystemClock",
]
