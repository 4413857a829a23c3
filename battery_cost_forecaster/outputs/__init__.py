"""Output formatters for forecast data."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from battery_cost_forecaster.outputs.base_writer import BaseWriter
from battery_cost_forecaster.outputs.csv_writer import ForecastCSVWriter, TimelineCSVWriter


def get_writer(format_name: str, output_path: Union[str, Path]) -> BaseWriter:
    """
    Get appropriate writer for the specified format.

    Args:
        format_name: Format name ('forecast', 'csv', 'timeline')
        output_path: Output file path

    Returns:
        Writer instance

    Raises:
        ValueError: If format is not recognized
    """
    writers = {
        "forecast": ForecastCSVWriter,
        "csv": ForecastCSVWriter,
        "timeline": TimelineCSVWriter,
    }

    format_lower = format_name.lower()
    if format_lower not in writers:
        available = list(writers.keys())
        raise ValueError(f"Unknown format '{format_name}'. Available: {available}")

    return writers[format_lower](output_path)


__all__ = [
    "get_writer",
    "BaseWriter",
    "ForecastCSVWriter",
    "TimelineCSVWriter",
]
