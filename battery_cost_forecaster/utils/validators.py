"""Validation utilities for forecast output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

import numpy as np

if TYPE_CHECKING:
    from battery_cost_forecaster.chemistry.base_chemistry import BaseChemistry
    from battery_cost_forecaster.core.forecast import ForecastResult


@dataclass
class ValidationResult:
    """Result of a validation check."""

    passed: bool
    message: str
    details: dict | None = None


def validate_cost_trend(
    costs: list[float] | np.ndarray,
    tolerance: float = 1e-9,
) -> ValidationResult:
    """
    Check that a cost series never increases from one step to the next.

    Args:
        costs: Cost values over the horizon
        tolerance: Allowed floating-point rise between steps

    Returns:
        Validation result
    """
    cost_array = np.asarray(costs, dtype=float)
    differences = np.diff(cost_array)
    increasing_count = int(np.sum(differences > tolerance))

    if increasing_count:
        return ValidationResult(
            passed=False,
            message=f"Cost not monotonically decreasing: {increasing_count}/{len(differences)} increases",
            details={"increasing_count": increasing_count, "total": len(differences)},
        )

    return ValidationResult(passed=True, message="Cost trend non-increasing")


def validate_floor(
    costs: list[float] | np.ndarray,
    floor_cost: float,
) -> ValidationResult:
    """Check that no projected cost is below the materials floor."""
    lowest = float(np.min(costs))
    if lowest < floor_cost:
        return ValidationResult(
            passed=False,
            message=f"Cost ${lowest:.2f} below floor ${floor_cost:.2f}",
            details={"min_cost": lowest, "floor_cost": floor_cost},
        )
    return ValidationResult(passed=True, message=f"Cost stays at or above floor ${floor_cost:.2f}")


def validate_forecast(
    result: ForecastResult,
    chemistries: Mapping[str, BaseChemistry],
) -> dict[str, list[ValidationResult]]:
    """
    Validate every chemistry's cost series in a forecast.

    The trend check is only meaningful when the curve is expected to fall:
    learning rate in (0, 1) and floor at or below baseline. Other
    combinations are reported as skipped (passed) rather than failed.

    Args:
        result: Forecast to check
        chemistries: Chemistry profiles the forecast was computed from

    Returns:
        Validation results per chemistry id
    """
    report = {}
    for chem_id, costs in result.costs.items():
        chemistry = chemistries[chem_id]
        checks = [validate_floor(costs, chemistry.floor_cost)]

        if 0 < chemistry.learning_rate < 1 and chemistry.floor_cost <= chemistry.baseline_cost:
            checks.append(validate_cost_trend(costs))
        else:
            checks.append(
                ValidationResult(
                    passed=True,
                    message="Trend check skipped: curve not expected to fall",
                )
            )
        report[chem_id] = checks
    return report
