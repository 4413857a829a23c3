"""Forecast session: editable state plus the recompute pipeline."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable, Dict, Optional

import pandas as pd

from battery_cost_forecaster.chemistry import HISTORY_END_YEAR, BaseChemistry, Chemistry
from battery_cost_forecaster.core.adoption import UptakeShape
from battery_cost_forecaster.core.forecast import (
    ForecastParameters,
    ForecastResult,
    compute_forecast,
    history_table,
    materials_breakdown,
    merge_with_history,
)

if TYPE_CHECKING:
    from battery_cost_forecaster.utils.config_loader import ScenarioConfigModel

logger = logging.getLogger(__name__)

# Forecast parameters that take a number, and the type they are stored as
NUMERIC_PARAMETERS = {
    "start_year": int,
    "forecast_years": int,
    "total_doublings": float,
}


class ForecastSession:
    """
    Owns the chemistry and forecast parameters for one user session.

    Every change goes through the same pipeline:

        apply_chemistry_change / apply_parameter_change / reset
            -> recompute
            -> registered update callbacks (rendering)

    Recompute always rebuilds the whole forecast from current values, so
    calling it repeatedly is harmless.
    """

    def __init__(
        self,
        chemistries: Optional[Dict[str, BaseChemistry]] = None,
        parameters: Optional[ForecastParameters] = None,
        history_end_year: Optional[int] = HISTORY_END_YEAR,
    ):
        """
        Initialize session.

        Args:
            chemistries: Chemistry profiles keyed by id (default set if None)
            parameters: Forecast parameters (defaults if None)
            history_end_year: Last historical year; None disables history
        """
        self.chemistries = chemistries if chemistries is not None else Chemistry.defaults()
        self.parameters = parameters if parameters is not None else ForecastParameters()
        self.history_end_year = history_end_year

        self._callbacks: list[Callable[[ForecastResult], None]] = []
        self._result: Optional[ForecastResult] = None

    @classmethod
    def from_config(cls, config: ScenarioConfigModel) -> "ForecastSession":
        """
        Create a session from a validated scenario configuration.

        Chemistry overrides in the config are applied on top of the defaults.
        """
        chemistries = Chemistry.defaults()
        for chem_id, overrides in config.chemistries.items():
            if chem_id not in chemistries:
                raise ValueError(
                    f"Unknown chemistry '{chem_id}'. Available: {list(chemistries)}"
                )
            for field_name, value in overrides.model_dump(exclude_none=True).items():
                chemistries[chem_id].update(field_name, value)

        parameters = ForecastParameters(
            start_year=config.forecast.start_year,
            forecast_years=config.forecast.forecast_years,
            total_doublings=config.forecast.total_doublings,
            uptake_shape=config.forecast.uptake_shape,
        )
        history_end_year = config.history.end_year if config.history.enabled else None
        return cls(chemistries=chemistries, parameters=parameters, history_end_year=history_end_year)

    def on_update(self, callback: Callable[[ForecastResult], None]) -> None:
        """Register a callback run with every freshly computed forecast."""
        self._callbacks.append(callback)

    @property
    def result(self) -> ForecastResult:
        """Latest forecast, computing one if nothing has run yet."""
        if self._result is None:
            return self.recompute()
        return self._result

    def get_chemistry(self, chemistry_id: str) -> BaseChemistry:
        """
        Look up a chemistry in this session.

        Raises:
            ValueError: If the id is not part of the session
        """
        if chemistry_id not in self.chemistries:
            raise ValueError(
                f"Unknown chemistry '{chemistry_id}'. Available: {list(self.chemistries)}"
            )
        return self.chemistries[chemistry_id]

    def apply_chemistry_change(self, chemistry_id: str, field_name: str, value) -> bool:
        """
        Edit one chemistry parameter and recompute.

        Values that do not parse to a finite number are ignored.

        Returns:
            True if the edit was applied
        """
        chemistry = self.get_chemistry(chemistry_id)
        if not chemistry.update(field_name, value):
            logger.debug("Ignoring non-finite %s.%s = %r", chemistry_id, field_name, value)
            return False
        self.recompute()
        return True

    def apply_parameter_change(self, name: str, value) -> bool:
        """
        Edit one forecast parameter and recompute.

        Numeric values that do not parse to a finite number are ignored.

        Returns:
            True if the edit was applied

        Raises:
            ValueError: For unknown parameters, unknown shapes, or a
                horizon shorter than one year, or negative doublings
        """
        if name == "uptake_shape":
            self.parameters.uptake_shape = UptakeShape(value)
            self.recompute()
            return True

        if name not in NUMERIC_PARAMETERS:
            available = list(NUMERIC_PARAMETERS) + ["uptake_shape"]
            raise ValueError(f"Unknown forecast parameter '{name}'. Available: {available}")

        try:
            number = float(value)
        except (TypeError, ValueError):
            number = math.nan
        if not math.isfinite(number):
            logger.debug("Ignoring non-finite %s = %r", name, value)
            return False

        cast = NUMERIC_PARAMETERS[name]
        number = cast(number)
        if name == "forecast_years" and number < 1:
            raise ValueError(f"forecast_years ({number}) must be >= 1")
        if name == "total_doublings" and number < 0:
            raise ValueError(f"total_doublings ({number}) must be >= 0")

        setattr(self.parameters, name, number)
        self.recompute()
        return True

    def recompute(self) -> ForecastResult:
        """
        Rebuild the full forecast from current state and notify callbacks.

        A start year earlier than the history cutoff is raised to the cutoff
        first, so the forecast always picks up where history ends.
        """
        if self.history_end_year is not None and self.parameters.start_year < self.history_end_year:
            logger.info(
                "Start year %d precedes history cutoff; using %d",
                self.parameters.start_year,
                self.history_end_year,
            )
            self.parameters.start_year = self.history_end_year

        self._result = compute_forecast(self.chemistries, self.parameters)
        for callback in self._callbacks:
            callback(self._result)
        return self._result

    def reset(self) -> ForecastResult:
        """Restore default chemistries and forecast parameters, then recompute."""
        logger.info("Resetting session to defaults")
        self.chemistries = Chemistry.defaults()
        self.parameters = ForecastParameters()
        return self.recompute()

    def timeline(self) -> pd.DataFrame:
        """
        Combined history + forecast timeline for charting.

        Without history this is the forecast alone, every point flagged as
        not historical.
        """
        result = self.result
        if self.history_end_year is None:
            frame = result.to_dataframe().drop(columns="doublings")
            frame = frame.melt(id_vars="year", var_name="chemistry", value_name="cost")
            frame["is_historical"] = False
            return frame
        return merge_with_history(result, self.chemistries, self.history_end_year)

    def history_table(self) -> pd.DataFrame:
        """Historical cost table with the current baselines in the cutoff row."""
        if self.history_end_year is None:
            return pd.DataFrame(columns=["year", *self.chemistries.keys()])
        return history_table(self.chemistries, self.history_end_year)

    def materials_breakdown(self) -> pd.DataFrame:
        """Floor vs above-floor split of each baseline cost."""
        return materials_breakdown(self.chemistries)

    def validate(self) -> Dict[str, list[str]]:
        """Advisory messages per chemistry (only chemistries with messages)."""
        messages = {}
        for chem_id, chemistry in self.chemistries.items():
            found = chemistry.validate()
            if found:
                messages[chem_id] = found
        return messages
