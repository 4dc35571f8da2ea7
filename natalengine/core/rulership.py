"""Sign rulership table and per-body house rulerships."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from .bodies import NODE_NAMES, ChartBody
from .houses import HouseCusp, build_house_cusps

__all__ = ["SIGN_RULERS", "compute_rulerships", "rulers_of"]

# Classical ruler first; Scorpio, Aquarius and Pisces also carry a modern ruler.
SIGN_RULERS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "Aries": ("Mars",),
        "Taurus": ("Venus",),
        "Gemini": ("Mercury",),
        "Cancer": ("Moon",),
        "Leo": ("Sun",),
        "Virgo": ("Mercury",),
        "Libra": ("Venus",),
        "Scorpio": ("Mars", "Pluto"),
        "Sagittarius": ("Jupiter",),
        "Capricorn": ("Saturn",),
        "Aquarius": ("Saturn", "Uranus"),
        "Pisces": ("Jupiter", "Neptune"),
    }
)


def rulers_of(sign: str) -> tuple[str, ...]:
    """Return the ruling bodies of ``sign`` (empty for unknown labels)."""

    return SIGN_RULERS.get(sign, ())


def compute_rulerships(
    cusps: Sequence[float] | Sequence[HouseCusp],
    bodies: Iterable[ChartBody | str],
) -> dict[str, tuple[int, ...]]:
    """Return ``body name -> house indices`` whose cusp sign the body rules.

    Every non-node body appears in the result, possibly with an empty tuple.
    Lunar nodes are omitted entirely.
    """

    if cusps and isinstance(cusps[0], HouseCusp):
        records = tuple(cusps)  # type: ignore[arg-type]
    else:
        records = build_house_cusps(cusps)  # type: ignore[arg-type]

    rulerships: dict[str, list[int]] = {}
    for body in bodies:
        if isinstance(body, ChartBody):
            if body.is_node:
                continue
            rulerships[body.name] = []
        elif str(body) not in NODE_NAMES:
            rulerships[str(body)] = []

    for cusp in records:
        for ruler in rulers_of(cusp.sign):
            if ruler in rulerships:
                rulerships[ruler].append(cusp.index)
    return {name: tuple(houses) for name, houses in rulerships.items()}
