"""Runtime configuration for chart computations."""

from __future__ import annotations

from dataclasses import dataclass

from ..ephemeris.swisseph_adapter import HOUSE_CODE_BY_NAME
from ..scoring.orb import (
    NATAL_PROFILE,
    PATTERN_PROFILE,
    TRANSIT_PROFILE,
    OrbProfile,
    available_profiles,
    load_orb_profile,
)

__all__ = [
    "ChartConfig",
    "VALID_HOUSE_SYSTEMS",
    "VALID_NODE_VARIANTS",
]

VALID_HOUSE_SYSTEMS = frozenset(HOUSE_CODE_BY_NAME)
VALID_NODE_VARIANTS = frozenset({"mean", "true"})


@dataclass(frozen=True)
class ChartConfig:
    """House system, node variant and the orb profiles used per context."""

    house_system: str = "placidus"
    nodes_variant: str = "mean"
    aspect_profile: str = NATAL_PROFILE
    transit_profile: str = TRANSIT_PROFILE
    pattern_profile: str = PATTERN_PROFILE

    def __post_init__(self) -> None:
        house_normalized = self.house_system.strip().lower()
        if house_normalized not in VALID_HOUSE_SYSTEMS:
            options = ", ".join(sorted(VALID_HOUSE_SYSTEMS))
            raise ValueError(
                f"Unknown house system '{self.house_system}'. Valid options: {options}"
            )
        object.__setattr__(self, "house_system", house_normalized)

        nodes_variant = (self.nodes_variant or "mean").lower()
        if nodes_variant not in VALID_NODE_VARIANTS:
            options = ", ".join(sorted(VALID_NODE_VARIANTS))
            raise ValueError(
                f"Unknown nodes variant '{self.nodes_variant}'. Valid options: {options}"
            )
        object.__setattr__(self, "nodes_variant", nodes_variant)

        profiles = set(available_profiles())
        for field_name in ("aspect_profile", "transit_profile", "pattern_profile"):
            value = str(getattr(self, field_name)).strip().lower()
            if value not in profiles:
                options = ", ".join(sorted(profiles))
                raise ValueError(
                    f"Unknown orb profile '{value}' for {field_name}. "
                    f"Valid options: {options}"
                )
            object.__setattr__(self, field_name, value)

    def aspect_orbs(self) -> OrbProfile:
        return load_orb_profile(self.aspect_profile)

    def transit_orbs(self) -> OrbProfile:
        return load_orb_profile(self.transit_profile)

    def pattern_orbs(self) -> OrbProfile:
        return load_orb_profile(self.pattern_profile)
