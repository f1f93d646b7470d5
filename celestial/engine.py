"""Day-window machinery shared by the solar and lunar calculators.

A civil day is the half-open window ``[local midnight, next local midnight)``
in the caller's zone. Every instant leaving this module is rounded to whole
milliseconds so durations derived from it add up exactly.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from datetime import time as dt_time
from typing import Callable, Generic, List, Optional, Tuple, TypeVar

from .bodies import CelestialBody, altitude_signal, observe
from .config import resolve_search_horizon_days
from .events import EventType
from .measurement import Coordinate, InvalidArgumentError, Time
from .solver import CrossingScan, scan_crossings
from .timescale import datetime_from_julian, julian_date, signed_degrees

__all__ = [
    "DayWindow",
    "TimedCrossing",
    "DaySummary",
    "validate_query",
    "summarize_day",
    "scan_window",
    "timed_crossings",
    "search_upcoming",
    "to_datetime",
    "clock_time",
    "millis_between",
]

LOGGER = logging.getLogger(__name__)

_MILLISECOND = timedelta(milliseconds=1)

S = TypeVar("S")


def validate_query(latitude: float, longitude: float, date_time: datetime) -> Coordinate:
    """Fail fast on bad input before any astronomy is evaluated."""

    coordinate = Coordinate(latitude, longitude)
    if date_time.tzinfo is None or date_time.utcoffset() is None:
        raise InvalidArgumentError("date_time must be timezone-aware")
    return coordinate


def to_datetime(jd: float, tz) -> datetime:
    """UT Julian Date to an aware datetime in *tz*, rounded to the millisecond."""

    return datetime_from_julian(jd).astimezone(tz)


def clock_time(moment: datetime) -> Time:
    return Time(moment.hour, moment.minute, moment.second, moment.microsecond // 1000)


def millis_between(earlier: datetime, later: datetime) -> int:
    return (later - earlier) // _MILLISECOND


def _local_midnight(day: date, tz) -> datetime:
    # normalise through UTC so a zone's real offset at that midnight is kept
    return datetime.combine(day, dt_time(), tzinfo=tz).astimezone(UTC).astimezone(tz)


@dataclass(frozen=True)
class DayWindow:
    """One civil date in the caller's zone, from its midnight to the next.

    On a daylight-saving transition the window is 23 or 25 hours long.
    """

    start: datetime
    end: datetime

    @classmethod
    def for_date(cls, day: date, tz) -> "DayWindow":
        return cls(
            start=_local_midnight(day, tz),
            end=_local_midnight(day + timedelta(days=1), tz),
        )

    @classmethod
    def containing(cls, date_time: datetime) -> "DayWindow":
        return cls.for_date(date_time.date(), date_time.tzinfo)

    @property
    def jd_start(self) -> float:
        return julian_date(self.start)

    @property
    def jd_end(self) -> float:
        return julian_date(self.end)

    @property
    def length_millis(self) -> int:
        return millis_between(self.start, self.end)

    def shifted(self, days: int) -> "DayWindow":
        return DayWindow.for_date(self.start.date() + timedelta(days=days), self.start.tzinfo)


@dataclass(frozen=True)
class TimedCrossing:
    type: EventType
    date_time: datetime
    azimuth: float


@dataclass(frozen=True)
class DaySummary(Generic[S]):
    """Everything the calculators publish about one civil day of one body."""

    window: DayWindow
    crossings: Tuple[TimedCrossing, ...]
    state: S
    previous_state: S
    above: Time
    below: Time
    meridian_crossing: Optional[Time]
    antimeridian_crossing: Optional[Time]


def scan_window(
    body: CelestialBody,
    coordinate: Coordinate,
    jd_start: float,
    jd_end: float,
    threshold: Optional[float] = None,
) -> CrossingScan:
    return scan_crossings(altitude_signal(body, coordinate, threshold), jd_start, jd_end)


def timed_crossings(
    body: CelestialBody, coordinate: Coordinate, scan: CrossingScan, tz
) -> List[TimedCrossing]:
    timed = []
    for crossing in scan.crossings:
        _, horizontal = observe(body, coordinate, crossing.jd)
        timed.append(
            TimedCrossing(
                type=crossing.type,
                date_time=to_datetime(crossing.jd, tz),
                azimuth=float(horizontal.azimuth),
            )
        )
    return timed


def _time_above(window: DayWindow, scan: CrossingScan, crossings: List[TimedCrossing]) -> int:
    edges = [window.start] + [c.date_time for c in crossings] + [window.end]
    above = scan.starts_above
    total = 0
    for low, high in zip(edges, edges[1:]):
        if above:
            total += millis_between(low, high)
        above = not above
    return min(max(total, 0), window.length_millis)


def _transit(
    body: CelestialBody, coordinate: Coordinate, window: DayWindow, hour_angle: float
) -> Optional[Time]:
    """First instant in the window at which the local hour angle passes *hour_angle*."""

    def signal(jd_ut):
        _, horizontal = observe(body, coordinate, jd_ut)
        return signed_degrees(horizontal.hour_angle - hour_angle)

    scan = scan_crossings(signal, window.jd_start, window.jd_end)
    # descending changes are the +180/-180 wrap, not a transit
    for crossing in scan.crossings:
        if crossing.type is EventType.RISE:
            return clock_time(to_datetime(crossing.jd, window.start.tzinfo))
    return None


def summarize_day(
    body: CelestialBody,
    coordinate: Coordinate,
    date_time: datetime,
    classify: Callable[[CrossingScan, Optional[S]], S],
    threshold: Optional[float] = None,
) -> DaySummary[S]:
    """Scan the civil day containing *date_time* and the day before it, then classify."""

    window = DayWindow.containing(date_time)
    previous_window = window.shifted(-1)
    previous_scan = scan_window(
        body, coordinate, previous_window.jd_start, previous_window.jd_end, threshold
    )
    scan = scan_window(body, coordinate, window.jd_start, window.jd_end, threshold)

    previous_state = classify(previous_scan, None)
    state = classify(scan, previous_state)
    crossings = timed_crossings(body, coordinate, scan, window.start.tzinfo)
    above = _time_above(window, scan, crossings)

    LOGGER.debug(
        json.dumps(
            {
                "event": "day_summary",
                "body": body.name,
                "date": window.start.date().isoformat(),
                "state": getattr(state, "value", state),
                "previous_state": getattr(previous_state, "value", previous_state),
                "crossings": len(crossings),
            }
        )
    )
    return DaySummary(
        window=window,
        crossings=tuple(crossings),
        state=state,
        previous_state=previous_state,
        above=Time.from_total_milliseconds(above),
        below=Time.from_total_milliseconds(window.length_millis - above),
        meridian_crossing=_transit(body, coordinate, window, 0.0),
        antimeridian_crossing=_transit(body, coordinate, window, 180.0),
    )


def search_upcoming(
    body: CelestialBody,
    coordinate: Coordinate,
    date_time: datetime,
    threshold: Optional[float] = None,
) -> List[TimedCrossing]:
    """Crossings at or after *date_time* from the first window that has any.

    Windows are ``body.search_window_hours`` long and laid end to end from the
    query instant; the loop stops at the configured horizon and returns an
    empty list rather than searching further.
    """

    jd_query = julian_date(date_time)
    window_days = body.search_window_hours / 24.0
    horizon_days = resolve_search_horizon_days()
    max_windows = math.ceil(horizon_days / window_days)

    for index in range(max_windows):
        jd_start = jd_query + index * window_days
        scan = scan_window(body, coordinate, jd_start, jd_start + window_days, threshold)
        crossings = [
            c
            for c in timed_crossings(body, coordinate, scan, date_time.tzinfo)
            if c.date_time >= date_time
        ]
        if crossings:
            return crossings

    LOGGER.warning(
        json.dumps(
            {
                "event": "upcoming_search_exhausted",
                "body": body.name,
                "lat": coordinate.latitude,
                "lon": coordinate.longitude,
                "from": date_time.isoformat(),
                "horizon_days": horizon_days,
            }
        )
    )
    return []
