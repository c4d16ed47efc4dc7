from flowcast_core.services.aggregator import aggregate_by_month, aggregate_transactions  # noqa: F401
from flowcast_core.services.baseline import project_baseline  # noqa: F401
from flowcast_core.services.forecaster import forecast  # noqa: F401
from flowcast_core.services.pipeline import forecast_for_business, simulate_purchase_for_business  # noqa: F401
from flowcast_core.services.purchase import simulate_purchase, summarize_purchase  # noqa: F401
from flowcast_core.services.simulator import run_monte_carlo  # noqa: F401
from flowcast_core.services.trend import fit_linear_trend  # noqa: F401

__all__ = [
    "aggregate_by_month",
    "aggregate_transactions",
    "fit_linear_trend",
    "forecast",
    "forecast_for_business",
    "project_baseline",
    "run_monte_carlo",
    "simulate_purchase",
    "simulate_purchase_for_business",
    "summarize_purchase",
]
