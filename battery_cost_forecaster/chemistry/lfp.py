"""LFP (LiFePO4) cost profile."""

from dataclasses import dataclass

from battery_cost_forecaster.chemistry.base_chemistry import BaseChemistry


@dataclass
class LFPChemistry(BaseChemistry):
    """
    LFP (Lithium Iron Phosphate) pack cost profile.

    Characteristics:
    - Cheapest incumbent chemistry for stationary storage and mass-market EVs
    - No nickel or cobalt, so the materials floor is low
    - Steep historical learning curve (~20% per doubling)
    """

    def _init_parameters(self) -> None:
        """Initialize LFP-specific parameters."""
        self.id = "lfp"
        self.name = "LFP"
        self.badge = "Iron phosphate workhorse"
        self.color = "#38bdf8"

        self.baseline_cost = 59.0  # $/kWh
        self.floor_cost = 22.2  # $/kWh
        self.learning_rate = 0.2

        self.history = [
            [2010, 600.0],
            [2012, 420.0],
            [2014, 310.0],
            [2016, 215.0],
            [2018, 162.0],
            [2020, 130.0],
            [2022, 96.0],
            [2023, 76.0],
            [2024, 59.0],
        ]
