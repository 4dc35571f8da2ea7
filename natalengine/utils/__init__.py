"""Shared helpers for :mod:`natalengine`."""

from __future__ import annotations

from .angles import norm360, separation

__all__ = ["norm360", "separation"]
