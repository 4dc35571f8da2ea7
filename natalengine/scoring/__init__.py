"""Aspect tables and orb tolerance profiles."""

from __future__ import annotations

from .orb import (
    ASPECT_TYPES,
    NATAL_PROFILE,
    PATTERN_PROFILE,
    TRANSIT_PROFILE,
    AspectType,
    OrbProfile,
    aspect_type,
    available_profiles,
    load_orb_profile,
)

__all__ = [
    "ASPECT_TYPES",
    "NATAL_PROFILE",
    "PATTERN_PROFILE",
    "TRANSIT_PROFILE",
    "AspectType",
    "OrbProfile",
    "aspect_type",
    "available_profiles",
    "load_orb_profile",
]
