"""Sodium-ion cost profile."""

from dataclasses import dataclass

from battery_cost_forecaster.chemistry.base_chemistry import BaseChemistry


@dataclass
class SodiumIonChemistry(BaseChemistry):
    """
    Sodium-ion pack cost profile.

    Early in its production ramp: expensive today, but abundant materials
    give it the lowest floor and the fastest assumed learning rate.
    """

    def _init_parameters(self) -> None:
        """Initialize sodium-ion parameters."""
        self.id = "sodium"
        self.name = "Sodium-ion"
        self.badge = "Emerging storage contender"
        self.color = "#facc15"

        self.baseline_cost = 87.0  # $/kWh
        self.floor_cost = 21.57  # $/kWh
        self.learning_rate = 0.22

        # No commercial data before 2012
        self.history = [
            [2012, 650.0],
            [2014, 520.0],
            [2016, 410.0],
            [2018, 320.0],
            [2020, 250.0],
            [2021, 220.0],
            [2022, 185.0],
            [2023, 140.0],
            [2024, 87.0],
        ]
