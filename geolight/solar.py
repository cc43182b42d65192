"""Solar position, zenith angle and atmospheric refraction.

The calculations follow the NOAA solar calculator spreadsheet
(https://gml.noaa.gov/grad/solcalc/). All instants are UTC; naive
datetimes are rejected.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime

__all__ = [
    "SolarState",
    "solar_state",
    "zenith_angle",
    "apply_refraction",
    "unrefract",
    "solar_zenith",
    "solar_geometry",
]

UNIX_EPOCH_JULIAN_DAY = 2440587.5
J2000_JULIAN_DAY = 2451545.0
DAYS_PER_JULIAN_CENTURY = 36525.0
SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class SolarState:
    """Solar time and declination components for a single instant.

    Attributes
    ----------
    solar_time:
        Solar time unadjusted for longitude (degrees). Not reduced modulo 360
        since it is only used inside a cosine.
    equation_of_time:
        Equation of time (minutes of time).
    sin_declination, cos_declination:
        Sine and cosine of the solar declination.
    """

    solar_time: float
    equation_of_time: float
    sin_declination: float
    cos_declination: float


def _julian_day(instant: datetime) -> float:
    if instant.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    return instant.astimezone(UTC).timestamp() / SECONDS_PER_DAY + UNIX_EPOCH_JULIAN_DAY


def solar_state(instant: datetime) -> SolarState:
    """Compute solar time, equation of time and declination for *instant*."""

    rad = math.radians
    jd = _julian_day(instant)
    jc = (jd - J2000_JULIAN_DAY) / DAYS_PER_JULIAN_CENTURY

    # Geometric mean longitude and anomaly of the sun (degrees).
    l0 = (280.46646 + jc * (36000.76983 + 0.0003032 * jc)) % 360.0
    m = 357.52911 + jc * (35999.05029 - 0.0001537 * jc)

    eccentricity = 0.016708634 - jc * (0.000042037 + 0.0000001267 * jc)

    eq_centre = (
        math.sin(rad(m)) * (1.914602 - jc * (0.004817 + 0.000014 * jc))
        + math.sin(rad(2.0 * m)) * (0.019993 - 0.000101 * jc)
        + math.sin(rad(3.0 * m)) * 0.000289
    )

    true_longitude = l0 + eq_centre
    omega = 125.04 - 1934.136 * jc
    apparent_longitude = true_longitude - 0.00569 - 0.00478 * math.sin(rad(omega))

    seconds = 21.448 - jc * (46.815 + jc * (0.00059 - jc * 0.001813))
    mean_obliquity = 23.0 + (26.0 + seconds / 60.0) / 60.0
    obliquity = mean_obliquity + 0.00256 * math.cos(rad(omega))

    y = math.tan(rad(obliquity / 2.0)) ** 2
    equation_of_time = math.degrees(
        y * math.sin(rad(2.0 * l0))
        - 2.0 * eccentricity * math.sin(rad(m))
        + 4.0 * eccentricity * y * math.sin(rad(m)) * math.cos(rad(2.0 * l0))
        - 0.5 * y * y * math.sin(rad(4.0 * l0))
        - 1.25 * eccentricity * eccentricity * math.sin(rad(2.0 * m))
    ) * 4.0

    # Only the sine and cosine of the declination are ever needed.
    sin_declination = math.sin(rad(obliquity)) * math.sin(rad(apparent_longitude))
    cos_declination = math.sqrt(1.0 - sin_declination * sin_declination)

    solar_time = (((jd - 0.5) % 1.0) * 1440.0 + equation_of_time) / 4.0

    return SolarState(
        solar_time=solar_time,
        equation_of_time=equation_of_time,
        sin_declination=sin_declination,
        cos_declination=cos_declination,
    )


def zenith_angle(state: SolarState, longitude: float, latitude: float) -> float:
    """Return the solar zenith angle (degrees) at the given location.

    No refraction correction is applied; see :func:`apply_refraction`.
    """

    hour_angle = state.solar_time + longitude - 180.0
    lat = math.radians(latitude)
    cos_zenith = (
        math.sin(lat) * state.sin_declination
        + math.cos(lat) * state.cos_declination * math.cos(math.radians(hour_angle))
    )
    cos_zenith = min(1.0, max(-1.0, cos_zenith))
    return math.degrees(math.acos(cos_zenith))


def apply_refraction(zenith: float) -> float:
    """Adjust a zenith angle (degrees) for atmospheric refraction.

    The correction is an empirical fit in four regimes of apparent
    elevation, expressed in arcseconds.
    """

    elevation = 90.0 - zenith
    te = math.tan(math.radians(elevation))
    if elevation > 85.0:
        correction = 0.0
    elif elevation > 5.0:
        correction = 58.1 / te - 0.07 / te**3 + 0.000086 / te**5
    elif elevation > -0.575:
        correction = 1735.0 + elevation * (
            -518.2 + elevation * (103.4 + elevation * (-12.79 + elevation * 0.711))
        )
    else:
        correction = -20.772 / te
    return zenith - correction / 3600.0


def unrefract(
    zenith: float,
    tolerance: float = 1e-9,
    max_iterations: int = 100,
) -> float:
    """Invert :func:`apply_refraction` for a single refracted zenith.

    Refraction never moves the zenith by more than one degree, so the
    unrefracted value is bracketed by ``[zenith - 1, zenith + 1]`` and is
    refined by bisection.
    """

    if not math.isfinite(zenith):
        raise ValueError(f"zenith must be finite, got {zenith!r}")

    low, high = zenith - 1.0, zenith + 1.0
    for _ in range(max_iterations):
        mid = 0.5 * (low + high)
        if high - low <= tolerance:
            return mid
        if apply_refraction(mid) < zenith:
            low = mid
        else:
            high = mid
    return 0.5 * (low + high)


def solar_zenith(
    state: SolarState,
    longitude: float,
    latitude: float,
    refraction: bool = True,
) -> float:
    """Zenith angle (degrees) for *state*, optionally corrected for refraction."""

    zenith = zenith_angle(state, longitude, latitude)
    if refraction:
        zenith = apply_refraction(zenith)
    return zenith


def solar_geometry(
    instant: datetime,
    longitude: float,
    latitude: float,
    refraction: bool = True,
) -> float:
    """Solar zenith angle (degrees) at *instant* for the given location."""

    return solar_zenith(solar_state(instant), longitude, latitude, refraction)
