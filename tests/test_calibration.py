from __future__ import annotations

from datetime import UTC, datetime, timedelta

import numpy as np
import pytest

from geolight.calibration import ZenithCalibration, calibrate, twilight_zeniths
from geolight.solar import solar_geometry
from geolight.twilights import LightSample, TwilightEvent, find_twilights

# Calibration site near Bern
SITE_LON = 7.5
SITE_LAT = 46.9
TWILIGHT_ZENITH = 96.0


def _site_light(days: int, step=timedelta(minutes=2)):
    start = datetime(2021, 6, 1, tzinfo=UTC)
    samples = []
    current = start
    while current < start + timedelta(days=days):
        zenith = solar_geometry(current, SITE_LON, SITE_LAT, refraction=False)
        samples.append(LightSample(current, 0.0 if zenith > TWILIGHT_ZENITH else 64.0))
        current += step
    return samples


def test_calibration_recovers_twilight_zenith():
    light = _site_light(days=5)
    events = find_twilights(light, 32.0, include=[datetime(2021, 6, 2, tzinfo=UTC)])
    assert len(events) >= 6

    summary = calibrate(events, SITE_LON, SITE_LAT, refraction=False)
    assert isinstance(summary, ZenithCalibration)
    assert summary.count == len(events)
    assert summary.mean == pytest.approx(TWILIGHT_ZENITH, abs=0.25)
    assert summary.sd < 0.25
    assert summary.minimum <= summary.median <= summary.maximum


def test_twilight_zeniths_match_solar_geometry():
    instants = [datetime(2021, 6, 1, 19, tzinfo=UTC), datetime(2021, 6, 2, 4, tzinfo=UTC)]
    events = [TwilightEvent(instants[0], False), TwilightEvent(instants[1], True)]
    zeniths = twilight_zeniths(events, SITE_LON, SITE_LAT)
    assert isinstance(zeniths, np.ndarray)
    expected = [solar_geometry(instant, SITE_LON, SITE_LAT) for instant in instants]
    np.testing.assert_allclose(zeniths, expected)


def test_single_twilight_has_zero_spread():
    event = TwilightEvent(datetime(2021, 6, 1, 19, tzinfo=UTC), False)
    summary = calibrate([event], SITE_LON, SITE_LAT)
    assert summary.count == 1
    assert summary.sd == 0.0
    assert summary.mean == summary.median == summary.minimum == summary.maximum


def test_calibration_requires_twilights():
    with pytest.raises(ValueError):
        calibrate([], SITE_LON, SITE_LAT)
