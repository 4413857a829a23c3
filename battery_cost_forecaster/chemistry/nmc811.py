"""NMC811 cost profile."""

from dataclasses import dataclass

from battery_cost_forecaster.chemistry.base_chemistry import BaseChemistry


@dataclass
class NMC811Chemistry(BaseChemistry):
    """
    NMC811 (LiNi0.8Mn0.1Co0.1O2) pack cost profile.

    Characteristics:
    - High energy density, premium EV segment
    - Nickel and cobalt keep the materials floor high
    """

    def _init_parameters(self) -> None:
        """Initialize NMC811-specific parameters."""
        self.id = "nmc"
        self.name = "NMC-811"
        self.badge = "High nickel energy density"
        self.color = "#c084fc"

        self.baseline_cost = 68.6  # $/kWh
        self.floor_cost = 33.75  # $/kWh
        self.learning_rate = 0.18

        self.history = [
            [2010, 780.0],
            [2012, 560.0],
            [2014, 410.0],
            [2016, 290.0],
            [2018, 210.0],
            [2020, 160.0],
            [2022, 120.0],
            [2023, 92.0],
            [2024, 68.6],
        ]
