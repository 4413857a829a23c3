"""CSV writers for forecast tables."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from battery_cost_forecaster.outputs.base_writer import BaseWriter


class ForecastCSVWriter(BaseWriter):
    """
    Wide forecast table.

    Outputs one row per forecast year with columns:
    - year
    - doublings
    - one cost column per chemistry id ($/kWh)
    """

    LEADING_COLUMNS = ["year", "doublings"]

    def __init__(self, output_path: str | Path):
        """Initialize forecast CSV writer."""
        super().__init__(output_path)
        # Ensure .csv extension
        if self.output_path.suffix.lower() != ".csv":
            self.output_path = self.output_path.with_suffix(".csv")

    def get_columns(self, data: pd.DataFrame) -> list[str]:
        """Leading columns followed by the chemistry columns present in data."""
        return self.LEADING_COLUMNS + [
            col for col in data.columns if col not in self.LEADING_COLUMNS
        ]

    def _write_row(self, row: dict) -> None:
        values = []
        for col in self._columns:
            value = row.get(col)
            if col == "year":
                values.append(str(int(value)))
            elif col == "doublings":
                values.append(f"{float(value):.4f}")
            else:
                values.append(self._format_cost(value))
        self._write_line(",".join(values))


class TimelineCSVWriter(BaseWriter):
    """
    Long combined history + forecast timeline.

    Columns: year, chemistry, cost, is_historical. Years without an
    observation have an empty cost cell.
    """

    COLUMNS = ["year", "chemistry", "cost", "is_historical"]

    def __init__(self, output_path: str | Path):
        """Initialize timeline CSV writer."""
        super().__init__(output_path)
        if self.output_path.suffix.lower() != ".csv":
            self.output_path = self.output_path.with_suffix(".csv")

    def get_columns(self, data: pd.DataFrame) -> list[str]:
        """Get column names."""
        return self.COLUMNS

    def _write_row(self, row: dict) -> None:
        values = [
            str(int(row["year"])),
            str(row["chemistry"]),
            self._format_cost(row["cost"]),
            "true" if row["is_historical"] else "false",
        ]
        self._write_line(",".join(values))
