"""Sunrise, sunset, twilight and lighting-band calculators."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional

from .bodies import BLUE_HOUR_BAND, MAGIC_HOUR_BAND, SUN, twilight_altitude_degrees
from .classifier import classify_solar
from .engine import (
    DaySummary,
    clock_time,
    millis_between,
    search_upcoming,
    summarize_day,
    validate_query,
)
from .events import (
    Event,
    HorizonCrossingSolarState,
    MagicHourPeriod,
    SolarAbsoluteEventDay,
    SolarEventDay,
    SolarRelativeEventDay,
    TypeEventTrack,
    UpcomingAbsoluteEvent,
    UpcomingRelativeEvent,
    UpcomingRelativeShortEvent,
)
from .magic_hour import segment_band

__all__ = [
    "calculate_solar_event_day",
    "calculate_solar_absolute_event_day",
    "calculate_twilight_event_day",
    "find_upcoming_solar_absolute_event_day",
    "find_upcoming_solar_relative_event_day",
    "find_upcoming_solar_relative_short_event_day",
    "calculate_magic_hour_period",
    "calculate_blue_hour_period",
]

LOGGER = logging.getLogger(__name__)

SolarSummary = DaySummary[HorizonCrossingSolarState]


def _summary(latitude, longitude, date_time, threshold=None) -> SolarSummary:
    coordinate = validate_query(latitude, longitude, date_time)
    return summarize_day(SUN, coordinate, date_time, classify_solar, threshold)


def _day_fields(summary: SolarSummary) -> dict:
    return {
        "state": summary.state,
        "previous_state": summary.previous_state,
        "day_length": summary.above,
        "night_length": summary.below,
        "meridian_crossing": summary.meridian_crossing,
        "antimeridian_crossing": summary.antimeridian_crossing,
    }


def _log_day(kind: str, latitude: float, longitude: float, date_time: datetime, day) -> None:
    LOGGER.debug(
        json.dumps(
            {
                "event": kind,
                "lat": latitude,
                "lon": longitude,
                "at": date_time.isoformat(),
                "state": day.state.value,
                "events": len(day.events),
            }
        )
    )


def calculate_solar_event_day(
    latitude: float, longitude: float, date_time: datetime
) -> SolarEventDay:
    """Rise and set of the civil day containing *date_time* as wall-clock times."""

    summary = _summary(latitude, longitude, date_time)
    day = SolarEventDay(
        events=tuple(
            Event(type=c.type, time=clock_time(c.date_time), azimuth=c.azimuth)
            for c in summary.crossings
        ),
        **_day_fields(summary),
    )
    _log_day("solar_event_day", latitude, longitude, date_time, day)
    return day


def calculate_solar_absolute_event_day(
    latitude: float, longitude: float, date_time: datetime
) -> SolarAbsoluteEventDay:
    summary = _summary(latitude, longitude, date_time)
    return SolarAbsoluteEventDay(
        events=tuple(
            UpcomingAbsoluteEvent(type=c.type, date_time=c.date_time, azimuth=c.azimuth)
            for c in summary.crossings
        ),
        **_day_fields(summary),
    )


def calculate_twilight_event_day(
    latitude: float, longitude: float, date_time: datetime, twilight: str
) -> SolarEventDay:
    """Same as :func:`calculate_solar_event_day` against a twilight depression angle.

    *twilight* is one of ``official``, ``civil``, ``nautical`` or
    ``astronomical``; the lengths then measure time above that angle.
    """

    threshold = twilight_altitude_degrees(twilight)
    summary = _summary(latitude, longitude, date_time, threshold)
    day = SolarEventDay(
        events=tuple(
            Event(type=c.type, time=clock_time(c.date_time), azimuth=c.azimuth)
            for c in summary.crossings
        ),
        **_day_fields(summary),
    )
    _log_day("solar_twilight_day", latitude, longitude, date_time, day)
    return day


def find_upcoming_solar_absolute_event_day(
    latitude: float, longitude: float, date_time: datetime
) -> SolarAbsoluteEventDay:
    """Events from *date_time* onward; state and lengths describe the current civil day."""

    coordinate = validate_query(latitude, longitude, date_time)
    summary = summarize_day(SUN, coordinate, date_time, classify_solar)
    upcoming = search_upcoming(SUN, coordinate, date_time)
    return SolarAbsoluteEventDay(
        events=tuple(
            UpcomingAbsoluteEvent(type=c.type, date_time=c.date_time, azimuth=c.azimuth)
            for c in upcoming
        ),
        **_day_fields(summary),
    )


def find_upcoming_solar_relative_event_day(
    latitude: float, longitude: float, date_time: datetime
) -> SolarRelativeEventDay:
    coordinate = validate_query(latitude, longitude, date_time)
    summary = summarize_day(SUN, coordinate, date_time, classify_solar)
    upcoming = search_upcoming(SUN, coordinate, date_time)
    day = SolarRelativeEventDay(
        events=tuple(
            UpcomingRelativeEvent(
                type=c.type,
                time=clock_time(c.date_time),
                azimuth=c.azimuth,
                time_to_nearest_event_millis=millis_between(date_time, c.date_time),
            )
            for c in upcoming
        ),
        **_day_fields(summary),
    )
    _log_day("solar_upcoming_day", latitude, longitude, date_time, day)
    return day


def find_upcoming_solar_relative_short_event_day(
    latitude: float, longitude: float, date_time: datetime
) -> Optional[UpcomingRelativeShortEvent]:
    """Nearest rise or set at or after *date_time*, or None past the search horizon."""

    coordinate = validate_query(latitude, longitude, date_time)
    upcoming = search_upcoming(SUN, coordinate, date_time)
    if not upcoming:
        return None
    first = upcoming[0]
    return UpcomingRelativeShortEvent(
        event_type=first.type,
        azimuth=first.azimuth,
        timestamp_millis=millis_between(date_time, first.date_time),
    )


def calculate_magic_hour_period(
    latitude: float, longitude: float, date_time: datetime
) -> MagicHourPeriod:
    coordinate = validate_query(latitude, longitude, date_time)
    return segment_band(coordinate, date_time, MAGIC_HOUR_BAND, TypeEventTrack.MAGIC_HOUR)


def calculate_blue_hour_period(
    latitude: float, longitude: float, date_time: datetime
) -> MagicHourPeriod:
    coordinate = validate_query(latitude, longitude, date_time)
    return segment_band(coordinate, date_time, BLUE_HOUR_BAND, TypeEventTrack.BLUE_HOUR)
