"""Base chemistry class for battery cost profiles."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

# Fields a user may edit on a live chemistry
EDITABLE_FIELDS = ("baseline_cost", "floor_cost", "learning_rate")


@dataclass
class BaseChemistry(ABC):
    """
    Abstract base class for battery chemistry cost profiles.

    Holds the experience-curve parameters for one chemistry:
    - Baseline pack cost at zero doublings ($/kWh)
    - Materials floor the projected cost never drops below ($/kWh)
    - Learning rate (fractional cost reduction per doubling)
    - Static historical cost observations

    Display metadata (name, badge, color) is carried along for the app
    and plays no part in the projection.
    """

    # Chemistry identification
    id: str = field(default="base", init=False)
    name: str = field(default="BaseChemistry", init=False)
    badge: str = field(default="", init=False)
    color: str = field(default="#ffffff", init=False)

    # Experience-curve parameters
    baseline_cost: float = field(default=100.0, init=False)  # $/kWh
    floor_cost: float = field(default=20.0, init=False)  # $/kWh
    learning_rate: float = field(default=0.2, init=False)  # fraction per doubling

    # Historical observations: list of [year, cost] pairs
    history: list[list[float]] = field(default_factory=list, init=False)

    def __post_init__(self):
        """Initialize chemistry-specific parameters."""
        self._init_parameters()

    @abstractmethod
    def _init_parameters(self) -> None:
        """Initialize chemistry-specific parameters. Must be implemented by subclasses."""
        pass

    @property
    def retention_ratio(self) -> float:
        """Fraction of above-floor cost retained per doubling."""
        from battery_cost_forecaster.core.cost_model import retention_ratio

        return retention_ratio(self.learning_rate)

    def project_cost(self, doublings: float) -> float:
        """
        Project pack cost after a number of production doublings.

        Args:
            doublings: Cumulative production doublings (>= 0)

        Returns:
            Projected cost ($/kWh), never below the materials floor
        """
        from battery_cost_forecaster.core.cost_model import project_cost

        return project_cost(self, doublings)

    def history_lookup(self, end_year: int | None = None) -> dict[int, float]:
        """
        Get historical observations keyed by year.

        Args:
            end_year: Drop observations after this year (None keeps all)
        """
        return {
            int(year): float(cost)
            for year, cost in self.history
            if end_year is None or year <= end_year
        }

    def update(self, field_name: str, value: float) -> bool:
        """
        Set one editable parameter in place.

        Non-finite values are ignored and the previous value stays in effect.

        Args:
            field_name: One of 'baseline_cost', 'floor_cost', 'learning_rate'
            value: New value

        Returns:
            True if the value was applied

        Raises:
            ValueError: If the field is not editable
        """
        if field_name not in EDITABLE_FIELDS:
            raise ValueError(
                f"Unknown chemistry field '{field_name}'. Available: {list(EDITABLE_FIELDS)}"
            )
        try:
            number = float(value)
        except (TypeError, ValueError):
            return False
        if not math.isfinite(number):
            return False
        setattr(self, field_name, number)
        return True

    def validate(self) -> list[str]:
        """
        Check parameters for combinations that give odd-looking projections.

        Nothing here is enforced: a floor above the baseline pins every
        projected cost (and the final change) at the floor, and an
        out-of-range learning rate is clamped by the cost model.

        Returns:
            List of advisory messages (empty if parameters look sane)
        """
        messages = []

        if self.baseline_cost <= 0:
            messages.append(f"baseline_cost ({self.baseline_cost}) should be > 0")

        if self.floor_cost > self.baseline_cost:
            messages.append(
                f"floor_cost ({self.floor_cost}) is above baseline_cost "
                f"({self.baseline_cost}); projected cost will sit at the floor"
            )

        if not (0 <= self.learning_rate < 1):
            messages.append(
                f"learning_rate ({self.learning_rate}) is outside [0, 1); "
                f"retention ratio will be clamped to {self.retention_ratio}"
            )

        return messages

    def to_dict(self) -> dict:
        """Convert chemistry to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "badge": self.badge,
            "color": self.color,
            "baseline_cost": self.baseline_cost,
            "floor_cost": self.floor_cost,
            "learning_rate": self.learning_rate,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"id='{self.id}', "
            f"baseline=${self.baseline_cost}/kWh, "
            f"floor=${self.floor_cost}/kWh, "
            f"learning_rate={self.learning_rate})"
        )
