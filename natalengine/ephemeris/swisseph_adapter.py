"""Swiss Ephemeris oracle session built on :mod:`pyswisseph`."""

from __future__ import annotations

import asyncio
import importlib
import logging
import math
import os
from collections.abc import Mapping
from datetime import UTC, datetime
from types import MappingProxyType, ModuleType
from typing import TYPE_CHECKING, Any

from ..observability import ORACLE_SESSIONS
from .oracle import (
    BodyPosition,
    HouseComputationFailed,
    HousePositions,
    OracleComputationError,
    OracleUnavailable,
)
from .utils import get_se_ephe_path, has_ephemeris_files

if TYPE_CHECKING:  # pragma: no cover - runtime import avoided for typing only
    from ..chart.config import ChartConfig

logger = logging.getLogger(__name__)

__all__ = [
    "HOUSE_CODE_BY_NAME",
    "SwissEphemerisAdapter",
    "resolve_house_code",
]


HOUSE_CODE_BY_NAME: Mapping[str, str] = MappingProxyType({"placidus": "P"})

# pyswisseph keeps one global data path; closing any session resets it.
_APPLIED_PATHS: dict[int, str | None] = {}
_UNSET = object()


def resolve_house_code(name_or_code: str) -> tuple[str, str]:
    """Return the canonical name and Swiss code for ``name_or_code``."""

    token = (name_or_code or "").strip()
    if not token:
        return "placidus", HOUSE_CODE_BY_NAME["placidus"]
    if len(token) == 1:
        for name, code in HOUSE_CODE_BY_NAME.items():
            if code == token.upper():
                return name, code
    lowered = token.lower()
    if lowered in HOUSE_CODE_BY_NAME:
        return lowered, HOUSE_CODE_BY_NAME[lowered]
    raise ValueError(
        f"Unsupported house system '{name_or_code}'. Valid options: "
        f"{sorted(HOUSE_CODE_BY_NAME)}"
    )


def _load_module() -> ModuleType:
    """Import :mod:`swisseph`; runs in a worker thread during :meth:`open`."""

    try:
        return importlib.import_module("swisseph")
    except ImportError as exc:
        raise RuntimeError(
            "Swiss Ephemeris not available. Install pyswisseph (package: 'pyswisseph') "
            "and set SE_EPHE_PATH to your ephemeris data directory."
        ) from exc


class SwissEphemerisAdapter:
    """One ephemeris session: configured on open, released by :meth:`close`.

    Sessions are created with :meth:`open`, which loads :mod:`swisseph` off
    the event loop. All calculation methods are synchronous.
    """

    def __init__(
        self,
        module: Any,
        *,
        ephemeris_path: str | os.PathLike[str] | None = None,
        prefer_moshier: bool = False,
        house_system: str = "placidus",
        nodes_variant: str = "mean",
    ) -> None:
        self._swe = module
        self.house_system, self._house_code = resolve_house_code(house_system)
        variant = (nodes_variant or "mean").lower()
        if variant not in {"mean", "true"}:
            raise ValueError(
                f"Unknown nodes variant '{nodes_variant}'. Valid options: mean, true"
            )
        self.nodes_variant = variant
        self._requested_path = ephemeris_path
        self._prefer_moshier = prefer_moshier
        self._closed = False
        self.mode = "moshier"
        self.ephemeris_path: str | None = None
        self._flags = self._configure()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @classmethod
    async def open(
        cls,
        *,
        ephemeris_path: str | os.PathLike[str] | None = None,
        prefer_moshier: bool = False,
        house_system: str = "placidus",
        nodes_variant: str = "mean",
    ) -> SwissEphemerisAdapter:
        """Load pyswisseph and return a ready session.

        Raises :class:`OracleUnavailable` when the extension cannot be loaded.
        """

        try:
            module = await asyncio.to_thread(_load_module)
        except RuntimeError as exc:
            ORACLE_SESSIONS.labels(outcome="unavailable").inc()
            raise OracleUnavailable(str(exc)) from exc
        adapter = cls(
            module,
            ephemeris_path=ephemeris_path,
            prefer_moshier=prefer_moshier,
            house_system=house_system,
            nodes_variant=nodes_variant,
        )
        ORACLE_SESSIONS.labels(outcome="opened").inc()
        return adapter

    @classmethod
    async def from_chart_config(
        cls,
        config: ChartConfig,
        *,
        ephemeris_path: str | os.PathLike[str] | None = None,
        prefer_moshier: bool = False,
    ) -> SwissEphemerisAdapter:
        return await cls.open(
            ephemeris_path=ephemeris_path,
            prefer_moshier=prefer_moshier,
            house_system=config.house_system,
            nodes_variant=config.nodes_variant,
        )

    def close(self) -> None:
        """Release Swiss Ephemeris file handles; safe to call twice."""

        if self._closed:
            return
        self._closed = True
        self._swe.close()
        _APPLIED_PATHS.pop(id(self._swe), None)
        logger.debug("Swiss ephemeris session closed")

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> SwissEphemerisAdapter:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _configure(self) -> int:
        swe = self._swe
        resolved = get_se_ephe_path(self._requested_path)
        if not self._prefer_moshier and resolved and has_ephemeris_files(resolved):
            self.mode = "swiss"
            self.ephemeris_path = resolved
            base = int(swe.FLG_SWIEPH)
        else:
            base = int(swe.FLG_MOSEPH)
        self._apply_path()
        logger.info(
            "Ephemeris runtime mode: %s (path=%s)", self.mode, resolved or "(auto)"
        )
        return base | int(swe.FLG_SPEED)

    def _apply_path(self) -> None:
        self._swe.set_ephe_path(self.ephemeris_path)
        _APPLIED_PATHS[id(self._swe)] = self.ephemeris_path

    def _ensure_open(self) -> None:
        if self._closed:
            raise OracleUnavailable("Swiss ephemeris session already closed")
        if _APPLIED_PATHS.get(id(self._swe), _UNSET) != self.ephemeris_path:
            self._apply_path()

    # ------------------------------------------------------------------
    # Core public API
    # ------------------------------------------------------------------
    def julian_day(self, moment: datetime) -> float:
        """Return the UT Julian day for a timezone-aware :class:`datetime`."""

        if moment.tzinfo is None or moment.tzinfo.utcoffset(moment) is None:
            raise ValueError(
                "datetime must be timezone-aware in UTC or convertible to UTC"
            )
        moment_utc = moment.astimezone(UTC)
        hour = (
            moment_utc.hour
            + moment_utc.minute / 60.0
            + moment_utc.second / 3600.0
            + moment_utc.microsecond / 3.6e9
        )
        return self._swe.julday(moment_utc.year, moment_utc.month, moment_utc.day, hour)

    def body_position(
        self, jd_ut: float, body_code: int, body_name: str
    ) -> BodyPosition:
        """Compute longitude/latitude/speed data for a single body."""

        self._ensure_open()
        try:
            xx, ret_flag = self._swe.calc_ut(jd_ut, body_code, self._flags)
        except Exception as exc:
            raise OracleComputationError(
                f"Swiss ephemeris failed for {body_name} at JD {jd_ut}: {exc}",
                body=body_name,
                julian_day=jd_ut,
            ) from exc
        if ret_flag < 0:
            raise OracleComputationError(
                f"Swiss ephemeris returned error code {ret_flag} for {body_name}",
                body=body_name,
                julian_day=jd_ut,
            )
        lon, lat, dist, speed_lon = xx[0], xx[1], xx[2], xx[3]
        return BodyPosition(
            body=body_name,
            julian_day=jd_ut,
            longitude=lon % 360.0,
            latitude=lat,
            distance_au=dist,
            speed_longitude=speed_lon,
        )

    def lunar_node(self, jd_ut: float) -> BodyPosition:
        """Return the north lunar node using the configured variant."""

        attr = "TRUE_NODE" if self.nodes_variant == "true" else "MEAN_NODE"
        code = int(getattr(self._swe, attr))
        return self.body_position(jd_ut, code, "North Node")

    def houses(
        self, jd_ut: float, latitude: float, longitude: float
    ) -> HousePositions:
        """Compute house cusps and angles for a location.

        Raises :class:`HouseComputationFailed` when Swiss Ephemeris rejects the
        request, e.g. Placidus inside the polar circles. No other system is
        substituted.
        """

        self._ensure_open()
        code = self._house_code
        try:
            cusps, angles = self._swe.houses_ex(
                jd_ut, latitude, longitude, code.encode("ascii")
            )
        except Exception as exc:
            logger.warning(
                {
                    "event": "house_computation_failed",
                    "system": self.house_system,
                    "latitude": latitude,
                    "longitude": longitude,
                    "reason": str(exc),
                }
            )
            raise HouseComputationFailed(
                f"Swiss ephemeris could not compute {self.house_system} houses "
                f"at latitude {latitude}: {exc}",
                latitude=latitude,
                longitude=longitude,
                system=self.house_system,
            ) from exc

        values = tuple(float(c) for c in cusps)
        # Older pyswisseph releases return a leading placeholder at index 0.
        if len(values) == 13:
            values = values[1:]
        if len(values) < 12 or not all(math.isfinite(c) for c in values[:12]):
            raise HouseComputationFailed(
                f"Swiss ephemeris returned malformed cusps: {values}",
                latitude=latitude,
                longitude=longitude,
                system=self.house_system,
            )
        return HousePositions(
            system=code,
            cusps=values[:12],
            ascendant=float(angles[0]) % 360.0,
            midheaven=float(angles[1]) % 360.0,
        )
