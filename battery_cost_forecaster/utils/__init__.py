"""Utility modules for the cost forecaster."""

from battery_cost_forecaster.utils.config_loader import load_config, save_config, ScenarioConfigModel
from battery_cost_forecaster.utils.validators import validate_forecast, ValidationResult

__all__ = [
    "load_config",
    "save_config",
    "ScenarioConfigModel",
    "validate_forecast",
    "ValidationResult",
]
