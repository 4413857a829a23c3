"""Battery chemistry cost profiles."""

from __future__ import annotations

from typing import Dict, List

from battery_cost_forecaster.chemistry.base_chemistry import BaseChemistry, EDITABLE_FIELDS
from battery_cost_forecaster.chemistry.lfp import LFPChemistry
from battery_cost_forecaster.chemistry.nmc811 import NMC811Chemistry
from battery_cost_forecaster.chemistry.sodium_ion import SodiumIonChemistry

# Last year with observed (non-modelled) pack prices
HISTORY_END_YEAR = 2024


class Chemistry:
    """Factory for creating chemistry cost profiles."""

    LFP = "lfp"
    NMC = "nmc"
    SODIUM = "sodium"

    # Display order of the default set
    DEFAULT_ORDER = ("lfp", "nmc", "sodium")

    _registry = {
        "LFP": LFPChemistry,
        "NMC": NMC811Chemistry,
        "NMC811": NMC811Chemistry,
        "NMC-811": NMC811Chemistry,
        "SODIUM": SodiumIonChemistry,
        "SODIUM-ION": SodiumIonChemistry,
        "NA-ION": SodiumIonChemistry,
    }

    @classmethod
    def from_name(cls, name: str) -> BaseChemistry:
        """
        Create chemistry profile from name.

        Args:
            name: Chemistry name or id (e.g., 'lfp', 'NMC811', 'Sodium-ion')

        Returns:
            Fresh chemistry profile with default parameters

        Raises:
            ValueError: If chemistry name is not recognized
        """
        name_upper = name.upper().replace(" ", "-").replace("_", "-")
        if name_upper not in cls._registry:
            available = list(cls._registry.keys())
            raise ValueError(f"Unknown chemistry '{name}'. Available: {available}")
        return cls._registry[name_upper]()

    @classmethod
    def defaults(cls) -> Dict[str, BaseChemistry]:
        """
        Create the default chemistry set.

        Every call returns new objects, so edits to one set never leak into
        another.

        Returns:
            Mapping of chemistry id to profile, in display order
        """
        return {chem_id: cls.from_name(chem_id) for chem_id in cls.DEFAULT_ORDER}

    @classmethod
    def list_available(cls) -> List[str]:
        """List available chemistry ids."""
        return list(cls.DEFAULT_ORDER)

    @classmethod
    def register(cls, name: str, chemistry_class: type) -> None:
        """Register a custom chemistry."""
        cls._registry[name.upper()] = chemistry_class


__all__ = [
    "Chemistry",
    "BaseChemistry",
    "EDITABLE_FIELDS",
    "HISTORY_END_YEAR",
    "LFPChemistry",
    "NMC811Chemistry",
    "SodiumIonChemistry",
]
