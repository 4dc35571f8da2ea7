"""Configuration helpers exposed at :mod:`natalengine.config`."""

from __future__ import annotations

from .settings import (
    AspectsCfg,
    ChartCfg,
    EphemerisCfg,
    Settings,
    config_path,
    default_settings,
    get_config_home,
    load_settings,
    save_settings,
)

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
