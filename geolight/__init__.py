"""Twilight extraction and solar geometry for light-level geolocators."""

from .calibration import ZenithCalibration, calibrate, twilight_zeniths
from .periods import StationaryPeriod, TaggedTwilight, tag_twilights
from .solar import (
    SolarState,
    apply_refraction,
    solar_geometry,
    solar_state,
    solar_zenith,
    unrefract,
    zenith_angle,
)
from .twilights import (
    LightSample,
    LightSeriesError,
    TwilightEvent,
    TwilightSearchError,
    find_twilights,
    interleave_twilights,
    split_twilights,
)

__version__ = "0.1.0"

__all__ = [
    "SolarState",
    "solar_state",
    "zenith_angle",
    "apply_refraction",
    "unrefract",
    "solar_zenith",
    "solar_geometry",
    "LightSample",
    "TwilightEvent",
    "LightSeriesError",
    "TwilightSearchError",
    "find_twilights",
    "interleave_twilights",
    "split_twilights",
    "ZenithCalibration",
    "twilight_zeniths",
    "calibrate",
    "StationaryPeriod",
    "TaggedTwilight",
    "tag_twilights",
]
