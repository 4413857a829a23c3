"""Scenario configuration loading and validation utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from battery_cost_forecaster.chemistry import HISTORY_END_YEAR, Chemistry
from battery_cost_forecaster.core.adoption import UptakeShape


class ForecastConfigModel(BaseModel):
    """Forecast horizon configuration model."""

    start_year: int = Field(default=2024, ge=1900, le=2200)
    forecast_years: int = Field(default=12, ge=1)
    total_doublings: float = Field(default=5.0, ge=0)
    uptake_shape: str = UptakeShape.LINEAR.value

    @field_validator("uptake_shape")
    @classmethod
    def validate_uptake_shape(cls, v: str) -> str:
        valid_shapes = [shape.value for shape in UptakeShape]
        if v.lower() not in valid_shapes:
            raise ValueError(f"Invalid uptake shape '{v}'. Must be one of: {valid_shapes}")
        return v.lower()


class ChemistryOverrideModel(BaseModel):
    """Per-chemistry parameter overrides."""

    baseline_cost: float | None = Field(default=None, gt=0)
    floor_cost: float | None = Field(default=None, ge=0)
    learning_rate: float | None = None


class HistoryConfigModel(BaseModel):
    """Historical data configuration model."""

    enabled: bool = True
    end_year: int = HISTORY_END_YEAR


class OutputConfigModel(BaseModel):
    """Output configuration model."""

    format: str = "forecast"
    directory: str = "./output"
    summary: bool = True

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        valid_formats = ["forecast", "csv", "timeline"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Invalid format '{v}'. Must be one of: {valid_formats}")
        return v.lower()


class ScenarioConfigModel(BaseModel):
    """Complete forecast scenario configuration model."""

    name: str = "Battery Cost Forecast"
    log_level: str = "WARNING"

    forecast: ForecastConfigModel = Field(default_factory=ForecastConfigModel)
    history: HistoryConfigModel = Field(default_factory=HistoryConfigModel)
    chemistries: dict[str, ChemistryOverrideModel] = Field(default_factory=dict)
    output: OutputConfigModel = Field(default_factory=OutputConfigModel)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level '{v}'. Must be one of: {valid_levels}")
        return v.upper()

    @field_validator("chemistries")
    @classmethod
    def validate_chemistry_ids(
        cls, v: dict[str, ChemistryOverrideModel]
    ) -> dict[str, ChemistryOverrideModel]:
        available = Chemistry.list_available()
        unknown = [chem_id for chem_id in v if chem_id.lower() not in available]
        if unknown:
            raise ValueError(f"Unknown chemistries {unknown}. Available: {available}")
        return {chem_id.lower(): overrides for chem_id, overrides in v.items()}


def load_config(config_path: str | Path) -> ScenarioConfigModel:
    """
    Load scenario configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated configuration model

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        raw_config = yaml.safe_load(f) or {}

    config_dict = _map_yaml_to_model(raw_config)
    return ScenarioConfigModel(**config_dict)


def _map_yaml_to_model(raw: dict[str, Any]) -> dict[str, Any]:
    """Map YAML configuration to model structure."""
    result = {}

    # Top-level scenario settings
    if "scenario" in raw:
        scenario = raw["scenario"]
        result["name"] = scenario.get("name", "Battery Cost Forecast")
        result["log_level"] = scenario.get("log_level", "WARNING")

    # Forecast horizon; 'years' and 'doublings' are accepted as short forms
    if "forecast" in raw:
        forecast = dict(raw["forecast"])
        if "years" in forecast:
            forecast.setdefault("forecast_years", forecast.pop("years"))
        if "doublings" in forecast:
            forecast.setdefault("total_doublings", forecast.pop("doublings"))
        if "shape" in forecast:
            forecast.setdefault("uptake_shape", forecast.pop("shape"))
        result["forecast"] = forecast

    if "history" in raw:
        result["history"] = raw["history"]

    if "chemistries" in raw:
        result["chemistries"] = raw["chemistries"] or {}

    if "output" in raw:
        result["output"] = raw["output"]

    return result


def save_config(config: ScenarioConfigModel, output_path: str | Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration model
        output_path: Path to save YAML file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.model_dump(exclude_none=True)
    scenario = {
        "scenario": {"name": config_dict.pop("name"), "log_level": config_dict.pop("log_level")},
    }
    scenario.update(config_dict)

    with open(output_path, "w") as f:
        yaml.dump(scenario, f, default_flow_style=False, sort_keys=False)
