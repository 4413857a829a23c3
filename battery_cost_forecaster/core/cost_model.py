"""
Experience-curve cost model.

Wright's Law with a materials floor:

    cost(d) = floor + (baseline - floor) * r^d,    r = clamp(1 - learning_rate, 0, 1)

clamped so the result never drops below the floor. ``d`` is the number of
cumulative production doublings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from battery_cost_forecaster.chemistry.base_chemistry import BaseChemistry


def retention_ratio(learning_rate: float) -> float:
    """
    Share of above-floor cost kept per doubling.

    Learning rates at or above 100%, or negative, would flip or blow up the
    curve, so the ratio is clamped to [0, 1].
    """
    return float(np.clip(1.0 - learning_rate, 0.0, 1.0))


def project_cost(chemistry: BaseChemistry, doublings: float) -> float:
    """
    Project cost for a chemistry after a number of doublings.

    ``doublings`` is not validated: negative or non-finite values go through
    the power term with plain float semantics. Callers supply doublings >= 0.

    Args:
        chemistry: Chemistry profile (baseline, floor, learning rate)
        doublings: Cumulative production doublings

    Returns:
        Projected cost ($/kWh)
    """
    return float(project_costs(chemistry, doublings))


def project_costs(chemistry: BaseChemistry, doublings) -> np.ndarray:
    """
    Vectorized ``project_cost`` over an array of doublings.

    Args:
        chemistry: Chemistry profile
        doublings: Scalar or array of doublings

    Returns:
        Array of projected costs, same shape as ``doublings``
    """
    ratio = retention_ratio(chemistry.learning_rate)
    baseline = float(chemistry.baseline_cost)
    floor = float(chemistry.floor_cost)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        decay = np.power(ratio, np.asarray(doublings, dtype=float))
        raw_cost = floor + (baseline - floor) * decay
    return np.maximum(floor, raw_cost)
