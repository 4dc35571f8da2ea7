"""House cusp records and house assignment for ecliptic longitudes."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..utils.angles import norm360
from .signs import SignPlacement, resolve_sign

LOG = logging.getLogger(__name__)

__all__ = [
    "HOUSE_COUNT",
    "CuspInvariantError",
    "HouseCusp",
    "build_house_cusps",
    "house_of",
]

HOUSE_COUNT = 12


class CuspInvariantError(ValueError):
    """Raised when a longitude falls in no house span (malformed cusps)."""


@dataclass(frozen=True, slots=True)
class HouseCusp:
    """Starting longitude of one of the twelve houses."""

    index: int
    longitude: float

    @property
    def placement(self) -> SignPlacement:
        return resolve_sign(self.longitude)

    @property
    def sign(self) -> str:
        return self.placement.sign

    def to_dict(self) -> dict[str, object]:
        placement = self.placement
        return {
            "house": self.index,
            "sign": placement.sign,
            "degrees": placement.degrees,
            "longitude": self.longitude,
        }


def _cusp_values(cusps: Sequence[float] | Sequence[HouseCusp]) -> list[float]:
    if len(cusps) != HOUSE_COUNT:
        raise CuspInvariantError(
            f"expected {HOUSE_COUNT} house cusps, received {len(cusps)}"
        )
    values: list[float] = []
    for cusp in cusps:
        raw = cusp.longitude if isinstance(cusp, HouseCusp) else cusp
        values.append(norm360(float(raw)))
    return values


def build_house_cusps(cusps: Sequence[float]) -> tuple[HouseCusp, ...]:
    """Return :class:`HouseCusp` records numbered 1..12 for ``cusps``."""

    values = _cusp_values(cusps)
    return tuple(
        HouseCusp(index=idx + 1, longitude=value) for idx, value in enumerate(values)
    )


def house_of(
    longitude: float,
    cusps: Sequence[float] | Sequence[HouseCusp],
    *,
    fallback: int | None = None,
) -> int:
    """Return the 1-indexed house containing ``longitude``.

    House ``i`` spans from its own cusp up to (not including) the next cusp;
    the span wraps through 0° when the next cusp is numerically smaller. With
    monotonic cusps every longitude matches exactly one house. When nothing
    matches the cusps are malformed: ``fallback`` is returned if supplied,
    otherwise :class:`CuspInvariantError` is raised.
    """

    values = _cusp_values(cusps)
    lon = norm360(longitude)
    for idx in range(HOUSE_COUNT):
        start = values[idx]
        end = values[(idx + 1) % HOUSE_COUNT]
        if end >= start:
            if start <= lon < end:
                return idx + 1
        elif lon >= start or lon < end:
            return idx + 1

    LOG.warning(
        {
            "event": "cusp_invariant_violation",
            "longitude": longitude,
            "cusps": values,
            "fallback": fallback,
        }
    )
    if fallback is not None:
        return fallback
    raise CuspInvariantError(
        f"longitude {longitude!r} matched no house span for cusps {values}"
    )
