"""Chart computation entry points for :mod:`natalengine`."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "BirthEvent",
    "ChartAngle",
    "ChartConfig",
    "MoonPhase",
    "NatalChart",
    "TransitContact",
    "assemble_chart",
    "build_chart",
    "compute_moon_phase",
    "compute_transits",
    "derive_south_node",
    "moon_phase",
    "top_transits",
]


if TYPE_CHECKING:
    from .config import ChartConfig
    from .lunar import MoonPhase, compute_moon_phase, moon_phase
    from .natal import (
        BirthEvent,
        ChartAngle,
        NatalChart,
        assemble_chart,
        build_chart,
        derive_south_node,
    )
    from .transits import TransitContact, compute_transits, top_transits

_LAZY_SUBMODULES: dict[str, tuple[str, ...]] = {
    "config": ("ChartConfig",),
    "lunar": ("MoonPhase", "compute_moon_phase", "moon_phase"),
    "natal": (
        "BirthEvent",
        "ChartAngle",
        "NatalChart",
        "assemble_chart",
        "build_chart",
        "derive_south_node",
    ),
    "transits": ("TransitContact", "compute_transits", "top_transits"),
}

_LAZY_ATTRS: dict[str, tuple[str, str]] = {}
for _module, _names in _LAZY_SUBMODULES.items():
    for _name in _names:
        _LAZY_ATTRS[_name] = (_module, _name)


def __getattr__(name: str) -> Any:
    try:
        module_name, attr_name = _LAZY_ATTRS[name]
    except KeyError as exc:
        raise AttributeError(name) from exc
    module = import_module(f".{module_name}", __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(__all__) | set(_LAZY_ATTRS) | set(globals().keys()))
