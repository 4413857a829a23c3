"""Shared plumbing for the CSV table writers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TextIO

import pandas as pd


class BaseWriter(ABC):
    """
    Writes a forecast DataFrame as delimited text, one record per line.

    Subclasses choose the column layout from the first frame they see and
    render each record; this class owns the file handle and the header.
    """

    def __init__(self, output_path: str | Path):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file: TextIO | None = None
        self._columns: list[str] = []
        self._row_count = 0

    def __enter__(self) -> "BaseWriter":
        self._file = open(self.output_path, "w", newline="", encoding="utf-8")
        self._columns = []
        self._row_count = 0
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def write_data(self, data: pd.DataFrame) -> None:
        """Append every row of ``data``; the header goes out with the first frame."""
        if self._file is None:
            raise RuntimeError(f"{type(self).__name__} must be used as a context manager")

        if not self._columns:
            self._columns = self.get_columns(data)
            self._write_line(",".join(self._columns))

        for row in data.to_dict(orient="records"):
            self._write_row(row)
            self._row_count += 1

    @abstractmethod
    def get_columns(self, data: pd.DataFrame) -> list[str]:
        """Header for this layout, derived from the first frame."""

    @abstractmethod
    def _write_row(self, row: dict) -> None:
        """Render one record."""

    def _write_line(self, line: str) -> None:
        self._file.write(line + "\n")

    @staticmethod
    def _format_cost(value) -> str:
        """Costs to cents; missing values as empty cells."""
        if value is None or pd.isna(value):
            return ""
        return f"{float(value):.2f}"

    @property
    def row_count(self) -> int:
        """Data rows written, header excluded."""
        return self._row_count
