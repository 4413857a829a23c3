"""Core forecasting components."""

from battery_cost_forecaster.core.adoption import UptakeShape, adoption_curve, adoption_progress
from battery_cost_forecaster.core.cost_model import project_cost, project_costs, retention_ratio
from battery_cost_forecaster.core.forecast import (
    ChemistrySummary,
    ForecastParameters,
    ForecastResult,
    compute_forecast,
    merge_with_history,
)
from battery_cost_forecaster.core.session import ForecastSession

__all__ = [
    "UptakeShape",
    "adoption_curve",
    "adoption_progress",
    "project_cost",
    "project_costs",
    "retention_ratio",
    "ChemistrySummary",
    "ForecastParameters",
    "ForecastResult",
    "compute_forecast",
    "merge_with_history",
    "ForecastSession",
]
