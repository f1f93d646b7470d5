from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from celestial.events import EventType, HorizonCrossingSolarState
from celestial.measurement import MILLIS_PER_DAY, InvalidArgumentError
from celestial.solar import (
    calculate_solar_absolute_event_day,
    calculate_solar_event_day,
    calculate_twilight_event_day,
    find_upcoming_solar_absolute_event_day,
    find_upcoming_solar_relative_event_day,
    find_upcoming_solar_relative_short_event_day,
)

UTC = timezone.utc
TASHKENT = timezone(timedelta(hours=5))
MURMANSK = timezone(timedelta(hours=3))
MURMANSK_LAT, MURMANSK_LON = 68.9585, 33.0827
TASHKENT_LAT, TASHKENT_LON = 41.2995, 69.2401


def _minutes(time) -> float:
    return time.hour * 60 + time.minute + time.second / 60.0


def _assert_sorted_with_valid_azimuth(events, key) -> None:
    keys = [key(event) for event in events]
    assert keys == sorted(keys)
    for event in events:
        assert 0.0 <= event.azimuth < 360.0


def test_equinox_on_equator():
    day = calculate_solar_event_day(0.0, 0.0, datetime(2025, 3, 20, tzinfo=UTC))
    assert day.state == HorizonCrossingSolarState.RISEN_AND_SET
    assert [event.type for event in day.events] == [EventType.RISE, EventType.SET]
    sunrise, sunset = day.events
    assert abs(_minutes(sunrise.time) - (6 * 60 + 4)) <= 2.5
    assert abs(_minutes(sunset.time) - (18 * 60 + 10)) <= 2.5
    # rises almost due east and sets almost due west at the equinox
    assert abs(sunrise.azimuth - 90.0) < 1.0
    assert abs(sunset.azimuth - 270.0) < 1.0


def test_tashkent_spring_day():
    day = calculate_solar_event_day(
        TASHKENT_LAT, TASHKENT_LON, datetime(2024, 3, 20, 9, 30, tzinfo=TASHKENT)
    )
    assert day.state == HorizonCrossingSolarState.RISEN_AND_SET
    assert day.previous_state == HorizonCrossingSolarState.RISEN_AND_SET
    assert 700 <= day.day_length.to_total_minutes() <= 740
    _assert_sorted_with_valid_azimuth(day.events, lambda e: e.time.to_total_milliseconds())
    assert 12 * 60 + 15 <= _minutes(day.meridian_crossing) <= 12 * 60 + 45
    assert _minutes(day.antimeridian_crossing) <= 60


def test_polar_day_murmansk():
    day = calculate_solar_event_day(
        MURMANSK_LAT, MURMANSK_LON, datetime(2025, 6, 21, tzinfo=MURMANSK)
    )
    assert day.state == HorizonCrossingSolarState.POLAR_DAY
    assert day.previous_state == HorizonCrossingSolarState.POLAR_DAY
    assert day.events == ()
    assert day.day_length.to_total_milliseconds() == MILLIS_PER_DAY
    assert day.night_length.to_total_milliseconds() == 0


def test_polar_night_murmansk():
    day = calculate_solar_event_day(
        MURMANSK_LAT, MURMANSK_LON, datetime(2025, 12, 21, tzinfo=MURMANSK)
    )
    assert day.state == HorizonCrossingSolarState.POLAR_NIGHT
    assert day.events == ()
    assert day.night_length.to_total_milliseconds() > 0
    assert day.day_length.to_total_milliseconds() == 0


@pytest.mark.parametrize(
    "lat, lon, when",
    [
        (TASHKENT_LAT, TASHKENT_LON, datetime(2024, 7, 1, tzinfo=TASHKENT)),
        (-33.8688, 151.2093, datetime(2025, 1, 10, tzinfo=timezone(timedelta(hours=11)))),
        (MURMANSK_LAT, MURMANSK_LON, datetime(2025, 5, 20, tzinfo=MURMANSK)),
        (64.1466, -21.9426, datetime(2025, 12, 1, tzinfo=UTC)),
    ],
)
def test_day_and_night_cover_exactly_one_day(lat, lon, when):
    day = calculate_solar_event_day(lat, lon, when)
    total = day.day_length.to_total_milliseconds() + day.night_length.to_total_milliseconds()
    assert total == MILLIS_PER_DAY
    _assert_sorted_with_valid_azimuth(day.events, lambda e: e.time.to_total_milliseconds())


def test_absolute_events_stay_in_callers_zone_and_day():
    when = datetime(2024, 3, 20, 15, 0, tzinfo=TASHKENT)
    day = calculate_solar_absolute_event_day(TASHKENT_LAT, TASHKENT_LON, when)
    midnight = when.replace(hour=0)
    assert len(day.events) == 2
    for event in day.events:
        assert event.date_time.utcoffset() == timedelta(hours=5)
        assert midnight <= event.date_time < midnight + timedelta(days=1)
        assert event.date_time.microsecond % 1000 == 0


def test_absolute_and_clock_views_agree():
    when = datetime(2024, 3, 20, tzinfo=TASHKENT)
    clock = calculate_solar_event_day(TASHKENT_LAT, TASHKENT_LON, when)
    absolute = calculate_solar_absolute_event_day(TASHKENT_LAT, TASHKENT_LON, when)
    for clock_event, absolute_event in zip(clock.events, absolute.events):
        assert clock_event.type == absolute_event.type
        assert clock_event.time.hour == absolute_event.date_time.hour
        assert clock_event.time.minute == absolute_event.date_time.minute
    assert clock.day_length == absolute.day_length


def test_identical_inputs_give_identical_results():
    when = datetime(2025, 8, 14, 17, 45, tzinfo=UTC)
    first = calculate_solar_event_day(51.5074, -0.1278, when)
    second = calculate_solar_event_day(51.5074, -0.1278, when)
    assert first == second


def test_invalid_latitude_is_rejected():
    with pytest.raises(InvalidArgumentError):
        calculate_solar_event_day(-91.0, 0.0, datetime(2025, 1, 1, tzinfo=UTC))


def test_invalid_longitude_is_rejected():
    with pytest.raises(InvalidArgumentError):
        find_upcoming_solar_relative_short_event_day(0.0, 181.0, datetime(2025, 1, 1, tzinfo=UTC))


def test_naive_datetime_is_rejected():
    with pytest.raises(InvalidArgumentError):
        calculate_solar_event_day(0.0, 0.0, datetime(2025, 1, 1))


def test_civil_twilight_brackets_sunrise_and_sunset():
    when = datetime(2024, 3, 20, tzinfo=TASHKENT)
    official = calculate_solar_event_day(TASHKENT_LAT, TASHKENT_LON, when)
    civil = calculate_twilight_event_day(TASHKENT_LAT, TASHKENT_LON, when, "civil")
    assert civil.state == HorizonCrossingSolarState.RISEN_AND_SET
    assert civil.events[0].time.to_total_milliseconds() < official.events[0].time.to_total_milliseconds()
    assert civil.events[1].time.to_total_milliseconds() > official.events[1].time.to_total_milliseconds()
    assert civil.day_length.to_total_milliseconds() > official.day_length.to_total_milliseconds()


def test_astronomical_twilight_never_ends_in_murmansk_summer():
    day = calculate_twilight_event_day(
        MURMANSK_LAT, MURMANSK_LON, datetime(2025, 6, 21, tzinfo=MURMANSK), "astronomical"
    )
    assert day.state == HorizonCrossingSolarState.POLAR_DAY


def test_unknown_twilight_is_rejected():
    with pytest.raises(ValueError):
        calculate_twilight_event_day(0.0, 0.0, datetime(2025, 1, 1, tzinfo=UTC), "golden")


def test_short_event_before_sunrise_is_rise():
    event = find_upcoming_solar_relative_short_event_day(
        0.0, 0.0, datetime(2025, 6, 1, 5, 0, tzinfo=UTC)
    )
    assert event is not None
    assert event.event_type == EventType.RISE
    assert 0 < event.timestamp_millis < 2 * 3_600_000
    assert 60.0 < event.azimuth < 70.0


def test_short_event_after_sunrise_is_set():
    event = find_upcoming_solar_relative_short_event_day(
        0.0, 0.0, datetime(2025, 6, 1, 7, 0, tzinfo=UTC)
    )
    assert event is not None
    assert event.event_type == EventType.SET
    assert 10 * 3_600_000 < event.timestamp_millis < 12 * 3_600_000


def test_short_event_searches_past_polar_night():
    event = find_upcoming_solar_relative_short_event_day(
        89.9, 0.0, datetime(2025, 1, 1, tzinfo=UTC)
    )
    assert event is not None
    assert event.event_type == EventType.RISE
    assert event.timestamp_millis > 60 * MILLIS_PER_DAY


def test_short_event_gives_up_at_search_horizon(monkeypatch, caplog):
    monkeypatch.setenv("CELESTIAL_MAX_SEARCH_DAYS", "30")
    with caplog.at_level("WARNING"):
        event = find_upcoming_solar_relative_short_event_day(
            89.9, 0.0, datetime(2025, 1, 1, tzinfo=UTC)
        )
    assert event is None
    assert "upcoming_search_exhausted" in caplog.text


def test_upcoming_relative_day_starts_from_query():
    when = datetime(2024, 3, 20, 12, 0, tzinfo=TASHKENT)
    day = find_upcoming_solar_relative_event_day(TASHKENT_LAT, TASHKENT_LON, when)
    assert day.state == HorizonCrossingSolarState.RISEN_AND_SET
    assert day.events
    assert day.events[0].type == EventType.SET
    offsets = [event.time_to_nearest_event_millis for event in day.events]
    assert offsets == sorted(offsets)
    assert all(offset >= 0 for offset in offsets)
    assert day.time_to_first_event_millis() == offsets[0]

    short = find_upcoming_solar_relative_short_event_day(TASHKENT_LAT, TASHKENT_LON, when)
    assert short.timestamp_millis == offsets[0]
    assert short.event_type == day.events[0].type


def test_upcoming_absolute_day_events_follow_query():
    when = datetime(2024, 3, 20, 20, 0, tzinfo=TASHKENT)
    day = find_upcoming_solar_absolute_event_day(TASHKENT_LAT, TASHKENT_LON, when)
    assert day.events
    assert day.events[0].type == EventType.RISE
    assert all(event.date_time >= when for event in day.events)
    assert day.events[0].date_time.date() == when.date() + timedelta(days=1)


def test_upcoming_in_polar_day_reports_current_state():
    when = datetime(2025, 6, 21, 12, 0, tzinfo=MURMANSK)
    day = find_upcoming_solar_relative_event_day(MURMANSK_LAT, MURMANSK_LON, when)
    assert day.state == HorizonCrossingSolarState.POLAR_DAY
    assert day.events
    assert day.events[0].type == EventType.SET
    assert day.events[0].time_to_nearest_event_millis > 20 * MILLIS_PER_DAY
