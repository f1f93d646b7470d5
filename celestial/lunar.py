"""Moonrise, moonset and visibility calculators."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional

from .bodies import MOON
from .classifier import classify_lunar
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
    HorizonCrossingLunarState,
    LunarAbsoluteEventDay,
    LunarEventDay,
    LunarRelativeEventDay,
    UpcomingAbsoluteEvent,
    UpcomingRelativeEvent,
    UpcomingRelativeShortEvent,
)
from .measurement import Coordinate
from .phase import calculate_lunar_phase

__all__ = [
    "calculate_lunar_event_day",
    "calculate_lunar_absolute_event_day",
    "find_upcoming_lunar_absolute_event_day",
    "find_upcoming_lunar_relative_event_day",
    "find_upcoming_lunar_relative_short_event_day",
    "calculate_lunar_phase",
]

LOGGER = logging.getLogger(__name__)


def _day_fields(
    summary: DaySummary[HorizonCrossingLunarState], date_time: datetime
) -> dict:
    phase = calculate_lunar_phase(date_time)
    return {
        "state": summary.state,
        "previous_state": summary.previous_state,
        "visible_length": summary.above,
        "invisible_length": summary.below,
        "meridian_crossing": summary.meridian_crossing,
        "antimeridian_crossing": summary.antimeridian_crossing,
        "age_in_days": phase.age_in_days,
        "illumination_percent": phase.illumination_percent,
    }


def _lunar_day(latitude: float, longitude: float, date_time: datetime):
    coordinate = validate_query(latitude, longitude, date_time)
    summary = summarize_day(MOON, coordinate, date_time, classify_lunar)
    LOGGER.debug(
        json.dumps(
            {
                "event": "lunar_event_day",
                "lat": latitude,
                "lon": longitude,
                "at": date_time.isoformat(),
                "state": summary.state.value,
                "previous_state": summary.previous_state.value,
            }
        )
    )
    return coordinate, summary


def calculate_lunar_event_day(
    latitude: float, longitude: float, date_time: datetime
) -> LunarEventDay:
    """Moonrise and moonset of the civil day containing *date_time* as wall-clock times.

    Up to three crossings fit in one day because the Moon returns to the
    same hour angle roughly fifty minutes later each day.
    """

    _, summary = _lunar_day(latitude, longitude, date_time)
    return LunarEventDay(
        events=tuple(
            Event(type=c.type, time=clock_time(c.date_time), azimuth=c.azimuth)
            for c in summary.crossings
        ),
        **_day_fields(summary, date_time),
    )


def calculate_lunar_absolute_event_day(
    latitude: float, longitude: float, date_time: datetime
) -> LunarAbsoluteEventDay:
    _, summary = _lunar_day(latitude, longitude, date_time)
    return LunarAbsoluteEventDay(
        events=tuple(
            UpcomingAbsoluteEvent(type=c.type, date_time=c.date_time, azimuth=c.azimuth)
            for c in summary.crossings
        ),
        **_day_fields(summary, date_time),
    )


def find_upcoming_lunar_absolute_event_day(
    latitude: float, longitude: float, date_time: datetime
) -> LunarAbsoluteEventDay:
    coordinate, summary = _lunar_day(latitude, longitude, date_time)
    upcoming = search_upcoming(MOON, coordinate, date_time)
    return LunarAbsoluteEventDay(
        events=tuple(
            UpcomingAbsoluteEvent(type=c.type, date_time=c.date_time, azimuth=c.azimuth)
            for c in upcoming
        ),
        **_day_fields(summary, date_time),
    )


def find_upcoming_lunar_relative_event_day(
    latitude: float, longitude: float, date_time: datetime
) -> LunarRelativeEventDay:
    """Crossings from *date_time* onward with their offsets from it.

    The search walks forward in 25 hour windows; state and lengths still
    describe the civil day containing *date_time*.
    """

    coordinate, summary = _lunar_day(latitude, longitude, date_time)
    upcoming = search_upcoming(MOON, coordinate, date_time)
    return LunarRelativeEventDay(
        events=tuple(
            UpcomingRelativeEvent(
                type=c.type,
                time=clock_time(c.date_time),
                azimuth=c.azimuth,
                time_to_nearest_event_millis=millis_between(date_time, c.date_time),
            )
            for c in upcoming
        ),
        **_day_fields(summary, date_time),
    )


def find_upcoming_lunar_relative_short_event_day(
    latitude: float, longitude: float, date_time: datetime
) -> Optional[UpcomingRelativeShortEvent]:
    coordinate: Coordinate = validate_query(latitude, longitude, date_time)
    upcoming = search_upcoming(MOON, coordinate, date_time)
    if not upcoming:
        return None
    first = upcoming[0]
    return UpcomingRelativeShortEvent(
        event_type=first.type,
        azimuth=first.azimuth,
        timestamp_millis=millis_between(date_time, first.date_time),
    )
