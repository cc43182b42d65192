"""Zenith angles of observed twilights at a known calibration site."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .solar import solar_geometry
from .twilights import TwilightEvent

__all__ = ["ZenithCalibration", "twilight_zeniths", "calibrate"]


@dataclass(frozen=True)
class ZenithCalibration:
    """Summary of the zenith angles observed at a calibration site."""

    count: int
    mean: float
    sd: float
    median: float
    minimum: float
    maximum: float


def twilight_zeniths(
    events: Iterable[TwilightEvent],
    longitude: float,
    latitude: float,
    refraction: bool = True,
) -> np.ndarray:
    """Return the solar zenith (degrees) at the site for each twilight."""

    return np.array(
        [solar_geometry(event.instant, longitude, latitude, refraction) for event in events],
        dtype=float,
    )


def calibrate(
    events: Iterable[TwilightEvent],
    longitude: float,
    latitude: float,
    refraction: bool = True,
) -> ZenithCalibration:
    """Summarise twilight zeniths recorded while the tag sat at a known site.

    Raises
    ------
    ValueError
        If *events* is empty.
    """

    zeniths = twilight_zeniths(events, longitude, latitude, refraction)
    if not zeniths.size:
        raise ValueError("calibration requires at least one twilight")
    sd = float(np.std(zeniths, ddof=1)) if zeniths.size > 1 else 0.0
    return ZenithCalibration(
        count=int(zeniths.size),
        mean=float(np.mean(zeniths)),
        sd=sd,
        median=float(np.median(zeniths)),
        minimum=float(np.min(zeniths)),
        maximum=float(np.max(zeniths)),
    )
