"""Search a tag light record for twilights spanning known nights."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

__all__ = [
    "LightSample",
    "TwilightEvent",
    "LightSeriesError",
    "TwilightSearchError",
    "find_twilights",
    "interleave_twilights",
    "split_twilights",
]

LOGGER = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0
SECONDS_PER_MINUTE = 60.0


class LightSeriesError(ValueError):
    """Raised when a light record or search parameter is invalid."""


class TwilightSearchError(RuntimeError):
    """Raised when the night expansion fails to reach a fixpoint."""


@dataclass(frozen=True)
class LightSample:
    """A single light reading recorded by the tag."""

    timestamp: datetime
    intensity: float


@dataclass(frozen=True)
class TwilightEvent:
    """A threshold crossing, tagged as sunrise or sunset."""

    instant: datetime
    is_sunrise: bool


@dataclass(frozen=True)
class _NightInterval:
    fall_index: int
    rise_index: int
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def midpoint(self) -> float:
        return self.start + (self.end - self.start) / 2.0


LightInput = Union[LightSample, Tuple[datetime, float]]


def _to_seconds(instant: datetime, name: str) -> float:
    if not isinstance(instant, datetime):
        raise LightSeriesError(f"{name} must contain datetime values, got {instant!r}")
    if instant.tzinfo is None:
        raise LightSeriesError(f"{name} must contain timezone-aware (UTC) datetimes")
    return instant.astimezone(UTC).timestamp()


def _from_seconds(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=UTC)


def _light_arrays(light: Iterable[LightInput]) -> Tuple[np.ndarray, np.ndarray]:
    """Validate the light record and return ``(times, intensities)`` arrays."""

    times: List[float] = []
    intensities: List[float] = []
    for sample in light:
        if isinstance(sample, LightSample):
            timestamp, intensity = sample.timestamp, sample.intensity
        else:
            timestamp, intensity = sample
        times.append(_to_seconds(timestamp, "light"))
        intensities.append(float(intensity))

    if not times:
        raise LightSeriesError("light record is empty")

    t = np.asarray(times, dtype=float)
    obs = np.asarray(intensities, dtype=float)

    bad = np.flatnonzero(~np.isfinite(obs))
    if bad.size:
        raise LightSeriesError(f"light intensity is not finite at sample {int(bad[0])}")
    steps = np.diff(t)
    bad = np.flatnonzero(steps <= 0)
    if bad.size:
        index = int(bad[0]) + 1
        raise LightSeriesError(
            f"light timestamps must be strictly increasing (sample {index} at "
            f"{_from_seconds(t[index]).isoformat()})"
        )
    return t, obs


def _contains_any(start: float, end: float, instants: Sequence[float]) -> bool:
    return any(start <= x <= end for x in instants)


def _night_intervals(t: np.ndarray, obs: np.ndarray, threshold: float) -> List[_NightInterval]:
    """Pair falls below *threshold* with the following rise back above it.

    ``fall_index`` is the last sample before light drops below the
    threshold and ``rise_index`` the last sample before it rises to or above
    it again, so a night spans ``t[fall_index]`` to ``t[rise_index + 1]``.
    """

    above = (obs >= threshold).astype(np.int8)
    edges = np.diff(above)
    falls = np.flatnonzero(edges == -1)
    rises = np.flatnonzero(edges == 1)
    if not falls.size or not rises.size:
        return []

    # A rise cannot start a night.
    if rises[0] < falls[0]:
        rises = rises[1:]
    count = min(falls.size, rises.size)

    return [
        _NightInterval(int(a), int(b), float(t[a]), float(t[b + 1]))
        for a, b in zip(falls[:count], rises[:count])
    ]


def _crossing(t: np.ndarray, obs: np.ndarray, index: int, threshold: float) -> float:
    """Linearly interpolate the threshold crossing between two samples."""

    fraction = (threshold - obs[index]) / (obs[index + 1] - obs[index])
    return float(t[index] + fraction * (t[index + 1] - t[index]))


def _expand(
    intervals: Sequence[_NightInterval],
    include: Sequence[float],
    extend: float,
) -> List[int]:
    """Return indices of the nights reachable from *include* in 24h steps."""

    kept: set = set()
    added = [i for i, night in enumerate(intervals) if _contains_any(night.start, night.end, include)]
    max_passes = len(intervals) + 1
    passes = 0
    while added:
        passes += 1
        if passes > max_passes:
            raise TwilightSearchError(
                f"night expansion did not converge within {max_passes} passes"
            )
        kept.update(added)
        probes = [
            intervals[i].midpoint + offset
            for i in added
            for offset in (-SECONDS_PER_DAY, SECONDS_PER_DAY)
        ]
        added = [
            i
            for i, night in enumerate(intervals)
            if i not in kept and _contains_any(night.start - extend, night.end + extend, probes)
        ]
    return sorted(kept)


def find_twilights(
    light: Iterable[LightInput],
    threshold: float,
    include: Iterable[datetime],
    exclude: Optional[Iterable[datetime]] = None,
    extend: float = 0.0,
    dark_min: float = 0.0,
    interleave: bool = True,
) -> Union[List[TwilightEvent], Tuple[List[datetime], List[datetime]]]:
    """Search for sunset/sunrise pairs that cross a light threshold.

    Nights spanning any of the *include* times are kept first. Periods of
    darkness lying 24 hours (plus or minus *extend*) from the midpoints of
    kept nights are then added, repeating until no new night is found.

    Parameters
    ----------
    light:
        Light record as :class:`LightSample` objects or ``(timestamp,
        intensity)`` pairs with strictly increasing UTC timestamps.
    threshold:
        Light level that defines twilight.
    include:
        Times known to fall within nights of interest.
    exclude:
        Times whose spanning nights are dropped.
    extend:
        Tolerance in minutes on the 24 hour spacing between nights.
    dark_min:
        Minimum duration of darkness in minutes.
    interleave:
        When false, return separate ``(sunsets, sunrises)`` lists.

    Returns
    -------
    list[TwilightEvent]
        Twilights sorted by instant, a sunset followed by its sunrise for
        each night. Empty when no night qualifies.

    Raises
    ------
    LightSeriesError
        If the light record or a parameter is invalid.
    """

    t, obs = _light_arrays(light)
    threshold = float(threshold)
    if not math.isfinite(threshold):
        raise LightSeriesError(f"threshold must be finite, got {threshold!r}")
    low, high = float(obs.min()), float(obs.max())
    if not low <= threshold <= high:
        raise LightSeriesError(
            f"threshold {threshold} is outside the observed light range [{low}, {high}]"
        )
    if extend < 0 or dark_min < 0:
        raise LightSeriesError("extend and dark_min must be non-negative")

    include_s = [_to_seconds(x, "include") for x in include]
    exclude_s = [_to_seconds(x, "exclude") for x in (exclude or [])]
    extend_s = float(extend) * SECONDS_PER_MINUTE
    dark_min_s = float(dark_min) * SECONDS_PER_MINUTE

    candidates = _night_intervals(t, obs, threshold)
    nights = [
        night
        for night in candidates
        if not _contains_any(night.start, night.end, exclude_s)
        and night.duration < SECONDS_PER_DAY
        and night.duration >= dark_min_s
    ]
    kept = [nights[i] for i in _expand(nights, include_s, extend_s)]

    sunsets = [_from_seconds(_crossing(t, obs, night.fall_index, threshold)) for night in kept]
    sunrises = [_from_seconds(_crossing(t, obs, night.rise_index, threshold)) for night in kept]

    LOGGER.debug(
        json.dumps(
            {
                "event": "twilight_search",
                "samples": int(t.size),
                "threshold": threshold,
                "candidates": len(candidates),
                "valid": len(nights),
                "kept": len(kept),
            }
        )
    )

    if not interleave:
        return sunsets, sunrises
    return interleave_twilights(sunsets, sunrises)


def interleave_twilights(
    sunsets: Iterable[datetime],
    sunrises: Iterable[datetime],
) -> List[TwilightEvent]:
    """Merge separate sunset and sunrise times into one ordered sequence."""

    events = [TwilightEvent(instant=x, is_sunrise=False) for x in sunsets]
    events.extend(TwilightEvent(instant=x, is_sunrise=True) for x in sunrises)
    events.sort(key=lambda event: (event.instant, event.is_sunrise))
    return events


def split_twilights(events: Iterable[TwilightEvent]) -> Tuple[List[datetime], List[datetime]]:
    """Return the sunset and sunrise instants of *events* as two lists."""

    sunsets: List[datetime] = []
    sunrises: List[datetime] = []
    for event in events:
        (sunrises if event.is_sunrise else sunsets).append(event.instant)
    return sunsets, sunrises
