"""
Battery Pack Cost Forecaster

Experience-curve (Wright's Law) projections of battery pack cost for LFP,
NMC-811 and sodium-ion chemistries, with adjustable adoption shapes and a
materials cost floor.
"""

from battery_cost_forecaster.chemistry import Chemistry
from battery_cost_forecaster.core.forecast import ForecastParameters, compute_forecast
from battery_cost_forecaster.core.session import ForecastSession

__version__ = "1.0.0"
__all__ = ["Chemistry", "ForecastParameters", "ForecastSession", "compute_forecast"]
