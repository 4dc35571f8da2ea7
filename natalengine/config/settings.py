"""Configuration models and helpers for natalengine settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from ..scoring.orb import ASPECT_TYPES, OrbProfile, available_profiles, load_orb_profile

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..chart.config import ChartConfig
    from ..chart.natal import NatalChart
    from ..chart.transits import TransitContact
    from ..detectors.aspects import Aspect
    from ..ephemeris.oracle import OracleFactory

__all__ = [
    "AspectsCfg",
    "ChartCfg",
    "EphemerisCfg",
    "Settings",
    "config_path",
    "default_settings",
    "get_config_home",
    "load_settings",
    "save_settings",
]

MAX_ORB_DEG = 15.0

# -------------------- Settings Schema --------------------


class EphemerisCfg(BaseModel):
    """Ephemeris source configuration."""

    path: Optional[str] = None
    prefer_moshier: bool = False


class ChartCfg(BaseModel):
    """Chart construction options."""

    nodes_variant: Literal["mean", "true"] = "mean"


class AspectsCfg(BaseModel):
    """Per-profile orb overrides and presentation hints."""

    orb_overrides: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    top_n: int = Field(default=4, ge=0)

    @field_validator("orb_overrides", mode="before")
    @classmethod
    def _cap_orb_overrides(
        cls, data: Dict[str, Dict[str, float]] | object
    ) -> Dict[str, Dict[str, float]] | object:
        if not isinstance(data, dict):
            return data
        return {
            str(profile).lower(): {
                str(aspect).lower(): max(0.0, min(MAX_ORB_DEG, float(value)))
                for aspect, value in (overrides or {}).items()
            }
            for profile, overrides in data.items()
        }

    @field_validator("orb_overrides")
    @classmethod
    def _known_names(
        cls, data: Dict[str, Dict[str, float]]
    ) -> Dict[str, Dict[str, float]]:
        profiles = set(available_profiles())
        aspects = {aspect.name.lower() for aspect in ASPECT_TYPES}
        for profile, overrides in data.items():
            if profile not in profiles:
                raise ValueError(f"unknown orb profile '{profile}'")
            unknown = set(overrides) - aspects
            if unknown:
                raise ValueError(
                    f"unknown aspects for profile '{profile}': {sorted(unknown)}"
                )
        return data


class Settings(BaseModel):
    """Top-level settings model persisted on disk."""

    ephemeris: EphemerisCfg = Field(default_factory=EphemerisCfg)
    chart: ChartCfg = Field(default_factory=ChartCfg)
    aspects: AspectsCfg = Field(default_factory=AspectsCfg)

    def orb_profile(self, name: str) -> OrbProfile:
        """Return the built-in profile ``name`` with configured overrides."""

        profile = load_orb_profile(name)
        return profile.with_overrides(self.aspects.orb_overrides.get(profile.name))

    def chart_config(self) -> ChartConfig:
        from ..chart.config import ChartConfig

        return ChartConfig(nodes_variant=self.chart.nodes_variant)

    def oracle_factory(self) -> OracleFactory:
        """Return an ephemeris session factory honouring these settings."""

        from ..chart.natal import default_oracle_factory

        return default_oracle_factory(
            self.chart_config(),
            ephemeris_path=self.ephemeris.path,
            prefer_moshier=self.ephemeris.prefer_moshier,
        )

    def top_aspects(self, chart: NatalChart) -> tuple[Aspect, ...]:
        """Return the chart's tightest aspects, ``aspects.top_n`` of them."""

        return chart.top_aspects(self.aspects.top_n)

    def top_transits(self, contacts: Sequence[TransitContact]) -> list[TransitContact]:
        from ..chart.transits import top_transits

        return top_transits(contacts, self.aspects.top_n)


# -------------------- I/O Helpers --------------------

CONFIG_FILENAME = "settings.yaml"


def get_config_home() -> Path:
    """Return the directory where settings should be stored."""

    return Path(os.environ.get("NATALENGINE_HOME", str(Path.home() / ".natalengine")))


def config_path() -> Path:
    """Return the full path to the settings file, creating directories as needed."""

    home = get_config_home()
    home.mkdir(parents=True, exist_ok=True)
    return home / CONFIG_FILENAME


def default_settings() -> Settings:
    return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Persist the given settings to disk as YAML."""

    target_path = Path(path) if path else config_path()
    target_path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump()
    with target_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
    return target_path


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from disk, creating defaults if missing."""

    source_path = Path(path) if path else config_path()
    if not source_path.exists():
        settings = default_settings()
        save_settings(settings, source_path)
        return settings
    with source_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raw = {}
    return Settings(**raw)
