from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from celestial.events import TypeEventTrack
from celestial.measurement import MILLIS_PER_DAY, InvalidArgumentError
from celestial.solar import calculate_blue_hour_period, calculate_magic_hour_period

UTC = timezone.utc
NEW_YORK = timezone(timedelta(hours=-4))


def _covered_millis(period) -> int:
    return (
        period.daylight_before_ring.to_total_milliseconds()
        + period.darkness_after_ring.to_total_milliseconds()
        + sum(track.duration_millis() for track in period.events)
    )


def test_new_york_summer_has_morning_and_evening_magic_hour():
    period = calculate_magic_hour_period(40.7128, -74.0060, datetime(2024, 6, 1, tzinfo=NEW_YORK))
    assert len(period.events) == 2
    morning, evening = period.events
    assert morning.type_event_track == TypeEventTrack.MAGIC_HOUR
    assert morning.start.date_time.hour in (4, 5)
    assert evening.finish.date_time.hour in (20, 21)
    for track in period.events:
        assert track.start.azimuth is not None
        assert track.finish.azimuth is not None
        assert 30 * 60_000 < track.duration_millis() < 2 * 3_600_000
    # north-east in the morning, north-west in the evening
    assert 30.0 < morning.start.azimuth < 90.0
    assert 270.0 < evening.finish.azimuth < 330.0
    assert _covered_millis(period) == MILLIS_PER_DAY


def test_blue_hour_precedes_morning_magic_hour():
    when = datetime(2024, 6, 1, tzinfo=NEW_YORK)
    blue = calculate_blue_hour_period(40.7128, -74.0060, when)
    magic = calculate_magic_hour_period(40.7128, -74.0060, when)
    assert len(blue.events) == 2
    assert all(track.type_event_track == TypeEventTrack.BLUE_HOUR for track in blue.events)
    # the -4 deg crossing ends the blue hour and opens the magic hour
    shared = blue.events[0].finish.date_time
    assert shared == magic.events[0].start.date_time
    assert blue.events[1].start.date_time == magic.events[1].finish.date_time
    assert _covered_millis(blue) == MILLIS_PER_DAY


@pytest.mark.parametrize("month", [6, 12])
def test_near_pole_solstice_has_no_intervals(month):
    period = calculate_magic_hour_period(89.9, 0.0, datetime(2024, month, 21, tzinfo=UTC))
    assert period.events == ()
    assert period.daylight_before_ring is not None
    assert period.darkness_after_ring is not None
    assert _covered_millis(period) == MILLIS_PER_DAY
    if month == 6:
        assert period.daylight_before_ring.to_total_milliseconds() == MILLIS_PER_DAY
    else:
        assert period.darkness_after_ring.to_total_milliseconds() == MILLIS_PER_DAY


def test_polar_night_reports_both_durations():
    period = calculate_magic_hour_period(
        68.9585, 33.0827, datetime(2025, 12, 21, tzinfo=timezone(timedelta(hours=3)))
    )
    assert period.daylight_before_ring.to_total_milliseconds() == 0
    assert period.darkness_after_ring.to_total_milliseconds() > 0
    assert _covered_millis(period) == MILLIS_PER_DAY


def test_band_active_at_midnight_leaves_day_edge_without_azimuth():
    # Murmansk under the midnight sun: the Sun grazes a few degrees up at local midnight
    tz = timezone(timedelta(hours=3))
    period = calculate_magic_hour_period(68.9585, 33.0827, datetime(2025, 6, 21, tzinfo=tz))
    assert period.events
    first, last = period.events[0], period.events[-1]
    assert first.start.azimuth is None
    assert first.start.date_time == datetime(2025, 6, 21, tzinfo=tz)
    assert last.finish.azimuth is None
    assert last.finish.date_time == datetime(2025, 6, 22, tzinfo=tz)
    assert _covered_millis(period) == MILLIS_PER_DAY


@pytest.mark.parametrize(
    "lat, lon, when",
    [
        (40.7128, -74.0060, datetime(2024, 12, 21, tzinfo=timezone(timedelta(hours=-5)))),
        (-33.8688, 151.2093, datetime(2024, 3, 3, 18, tzinfo=timezone(timedelta(hours=11)))),
        (64.1466, -21.9426, datetime(2024, 9, 30, 6, tzinfo=UTC)),
        (0.0, 0.0, datetime(2025, 3, 20, tzinfo=UTC)),
    ],
)
def test_intervals_and_remainders_sum_to_one_day(lat, lon, when):
    period = calculate_magic_hour_period(lat, lon, when)
    assert _covered_millis(period) == MILLIS_PER_DAY
    for earlier, later in zip(period.events, period.events[1:]):
        assert earlier.finish.date_time <= later.start.date_time


def test_invalid_latitude_is_rejected():
    with pytest.raises(InvalidArgumentError):
        calculate_magic_hour_period(-91.0, 0.0, datetime(2024, 6, 1, tzinfo=UTC))
