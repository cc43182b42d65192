"""Tag twilights with the stationary period they fall in."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from .twilights import TwilightEvent

__all__ = ["StationaryPeriod", "TaggedTwilight", "tag_twilights"]


@dataclass(frozen=True)
class StationaryPeriod:
    """A span during which the bird did not move, as segmented upstream."""

    sta_id: int
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("stationary period bounds must be timezone-aware (UTC)")
        if self.end < self.start:
            raise ValueError(f"stationary period {self.sta_id} ends before it starts")

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


@dataclass(frozen=True)
class TaggedTwilight:
    instant: datetime
    is_sunrise: bool
    sta_id: Optional[int]


def tag_twilights(
    events: Iterable[TwilightEvent],
    periods: Iterable[StationaryPeriod],
) -> List[TaggedTwilight]:
    """Attach the id of the containing stationary period to each twilight.

    Twilights outside every period (in flight, or before the first period)
    get ``sta_id=None``.

    Raises
    ------
    ValueError
        If two periods overlap or a twilight instant is naive.
    """

    ordered = sorted(periods, key=lambda period: period.start)
    for previous, current in zip(ordered, ordered[1:]):
        if current.start <= previous.end:
            raise ValueError(
                f"stationary periods {previous.sta_id} and {current.sta_id} overlap"
            )

    tagged: List[TaggedTwilight] = []
    for event in events:
        if event.instant.tzinfo is None:
            raise ValueError("twilight instants must be timezone-aware (UTC)")
        sta_id = next(
            (period.sta_id for period in ordered if period.contains(event.instant)),
            None,
        )
        tagged.append(TaggedTwilight(event.instant, event.is_sunrise, sta_id))
    return tagged
