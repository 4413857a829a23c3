"""Forecast orchestration: adoption curve + cost model across chemistries."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional

import numpy as np
import pandas as pd

from battery_cost_forecaster.core.adoption import UptakeShape, adoption_progress
from battery_cost_forecaster.core.cost_model import project_costs

if TYPE_CHECKING:
    from battery_cost_forecaster.chemistry.base_chemistry import BaseChemistry

logger = logging.getLogger(__name__)

DEFAULT_START_YEAR = 2024
DEFAULT_FORECAST_YEARS = 12
DEFAULT_TOTAL_DOUBLINGS = 5.0


@dataclass
class ForecastParameters:
    """Forecast horizon and adoption settings."""

    start_year: int = DEFAULT_START_YEAR
    forecast_years: int = DEFAULT_FORECAST_YEARS  # Number of yearly steps
    total_doublings: float = DEFAULT_TOTAL_DOUBLINGS  # Reached by the final step
    uptake_shape: UptakeShape = UptakeShape.LINEAR

    def __post_init__(self):
        self.uptake_shape = UptakeShape(self.uptake_shape)

    @property
    def years(self) -> List[int]:
        """Year label for every step."""
        return [self.start_year + i for i in range(self.forecast_years)]

    def to_dict(self) -> dict:
        """Convert parameters to dictionary."""
        return {
            "start_year": self.start_year,
            "forecast_years": self.forecast_years,
            "total_doublings": self.total_doublings,
            "uptake_shape": self.uptake_shape.value,
        }


@dataclass
class ChemistrySummary:
    """End-of-horizon summary for one chemistry."""

    chemistry_id: str
    baseline_cost: float
    floor_cost: float
    final_cost: float
    percent_change: float  # Positive means cost fell

    @property
    def direction(self) -> str:
        """'down' when cost fell (or held), 'up' when it rose."""
        return "down" if self.percent_change >= 0 else "up"

    @property
    def arrow(self) -> str:
        return "▼" if self.direction == "down" else "▲"

    def to_dict(self) -> dict:
        """Convert summary to dictionary; an undefined change becomes None."""
        change = self.percent_change
        return {
            "chemistry_id": self.chemistry_id,
            "baseline_cost": self.baseline_cost,
            "floor_cost": self.floor_cost,
            "final_cost": self.final_cost,
            "percent_change": None if math.isnan(change) else change,
            "direction": self.direction,
        }


@dataclass
class ForecastResult:
    """Projected cost series for every chemistry over the horizon."""

    parameters: ForecastParameters
    years: List[int]
    doublings: List[float]
    costs: Dict[str, List[float]] = field(default_factory=dict)
    summaries: Dict[str, ChemistrySummary] = field(default_factory=dict)

    def series(self, chemistry_id: str) -> List[tuple]:
        """Ordered (year, cost) pairs for one chemistry."""
        return list(zip(self.years, self.costs[chemistry_id]))

    def to_dataframe(self) -> pd.DataFrame:
        """
        Forecast table: one row per year.

        Columns: year, doublings, then one cost column per chemistry id.
        """
        data = {"year": self.years, "doublings": self.doublings}
        data.update(self.costs)
        return pd.DataFrame(data)

    def to_dict(self) -> dict:
        """Convert result to dictionary."""
        return {
            "parameters": self.parameters.to_dict(),
            "years": list(self.years),
            "doublings": list(self.doublings),
            "costs": {chem_id: list(costs) for chem_id, costs in self.costs.items()},
            "summaries": {
                chem_id: summary.to_dict() for chem_id, summary in self.summaries.items()
            },
        }


def percent_change(baseline_cost: float, final_cost: float) -> float:
    """
    Percent fall from baseline to final cost.

    Returns NaN when the baseline is zero.
    """
    if baseline_cost == 0:
        return math.nan
    return (baseline_cost - final_cost) / baseline_cost * 100


def summarize(chemistry: BaseChemistry, costs: List[float]) -> ChemistrySummary:
    """Build the end-of-horizon summary from a chemistry's cost series."""
    final_cost = costs[-1]
    return ChemistrySummary(
        chemistry_id=chemistry.id,
        baseline_cost=chemistry.baseline_cost,
        floor_cost=chemistry.floor_cost,
        final_cost=final_cost,
        percent_change=percent_change(chemistry.baseline_cost, final_cost),
    )


def compute_forecast(
    chemistries: Mapping[str, BaseChemistry],
    parameters: Optional[ForecastParameters] = None,
) -> ForecastResult:
    """
    Project cost for every chemistry at every step of the horizon.

    The adoption curve is evaluated once per step and shared by all
    chemistries; doublings at a step are progress * total_doublings.

    Args:
        chemistries: Mapping of chemistry id to profile
        parameters: Forecast parameters (defaults if None)

    Returns:
        Forecast result with aligned year, doublings and cost series

    Raises:
        ValueError: If forecast_years < 1
    """
    parameters = parameters or ForecastParameters()
    steps = int(parameters.forecast_years)
    if steps < 1:
        raise ValueError(f"forecast_years ({parameters.forecast_years}) must be >= 1")

    years = [parameters.start_year + i for i in range(steps)]
    progress = np.array(
        [adoption_progress(i, steps, parameters.uptake_shape) for i in range(steps)]
    )
    doublings = progress * parameters.total_doublings

    result = ForecastResult(
        parameters=parameters,
        years=years,
        doublings=doublings.tolist(),
    )
    for chem_id, chemistry in chemistries.items():
        costs = project_costs(chemistry, doublings).tolist()
        result.costs[chem_id] = costs
        result.summaries[chem_id] = summarize(chemistry, costs)

    logger.debug(
        "Forecast %d-%d (%s, %.2f doublings) for %s",
        years[0],
        years[-1],
        parameters.uptake_shape.value,
        parameters.total_doublings,
        list(chemistries),
    )
    return result


def history_years(chemistries: Mapping[str, BaseChemistry], end_year: int) -> List[int]:
    """Sorted union of all chemistries' history years up to end_year."""
    years = set()
    for chemistry in chemistries.values():
        years.update(chemistry.history_lookup(end_year).keys())
    return sorted(years)


def merge_with_history(
    result: ForecastResult,
    chemistries: Mapping[str, BaseChemistry],
    end_year: int,
) -> pd.DataFrame:
    """
    Combine static history with the forecast into one timeline.

    Rules per year:
    - before ``end_year``: the historical observation, if any
    - ``end_year`` itself: the chemistry's current baseline cost
    - any forecast year: the forecast value, overriding the above

    Args:
        result: Forecast to merge
        chemistries: Chemistry profiles carrying history
        end_year: Last historical year

    Returns:
        Long DataFrame with columns year, chemistry, cost, is_historical.
        Missing observations have NaN cost.
    """
    past_years = history_years(chemistries, end_year)
    timeline_years = past_years + [year for year in result.years if year not in past_years]
    forecast_index = {year: i for i, year in enumerate(result.years)}

    rows = []
    for chem_id, chemistry in chemistries.items():
        lookup = chemistry.history_lookup(end_year)
        costs = result.costs.get(chem_id)
        for year in timeline_years:
            value = None
            if year < end_year:
                value = lookup.get(year)
            elif year == end_year:
                value = chemistry.baseline_cost

            if costs is not None and year in forecast_index:
                value = costs[forecast_index[year]]

            rows.append(
                {
                    "year": year,
                    "chemistry": chem_id,
                    "cost": np.nan if value is None else float(value),
                    "is_historical": year <= end_year,
                }
            )

    return pd.DataFrame(rows, columns=["year", "chemistry", "cost", "is_historical"])


def history_table(chemistries: Mapping[str, BaseChemistry], end_year: int) -> pd.DataFrame:
    """
    Historical cost table: one row per history year, one column per chemistry.

    The ``end_year`` row shows each chemistry's current baseline cost.
    Missing observations are NaN.
    """
    rows = []
    for year in history_years(chemistries, end_year):
        row = {"year": year}
        for chem_id, chemistry in chemistries.items():
            if year == end_year:
                row[chem_id] = chemistry.baseline_cost
            else:
                row[chem_id] = chemistry.history_lookup(end_year).get(year, np.nan)
        rows.append(row)
    return pd.DataFrame(rows, columns=["year", *chemistries.keys()])


def materials_breakdown(chemistries: Mapping[str, BaseChemistry]) -> pd.DataFrame:
    """
    Split each chemistry's baseline cost into floor and above-floor parts.

    Returns:
        DataFrame with columns chemistry, name, floor_cost, above_floor
    """
    rows = [
        {
            "chemistry": chem_id,
            "name": chemistry.name,
            "floor_cost": chemistry.floor_cost,
            "above_floor": max(chemistry.baseline_cost - chemistry.floor_cost, 0.0),
        }
        for chem_id, chemistry in chemistries.items()
    ]
    return pd.DataFrame(rows, columns=["chemistry", "name", "floor_cost", "above_floor"])
