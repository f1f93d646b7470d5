"""Immutable result records published by the solar and lunar calculators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from .measurement import InvalidArgumentError, Time

__all__ = [
    "SYNODIC_MONTH_DAYS",
    "EventType",
    "HorizonCrossingSolarState",
    "HorizonCrossingLunarState",
    "TypeEventTrack",
    "Event",
    "UpcomingAbsoluteEvent",
    "UpcomingRelativeEvent",
    "UpcomingRelativeShortEvent",
    "SolarEventDay",
    "SolarAbsoluteEventDay",
    "SolarRelativeEventDay",
    "LunarEventDay",
    "LunarAbsoluteEventDay",
    "LunarRelativeEventDay",
    "TrackPoint",
    "EventTrack",
    "MagicHourPeriod",
    "check_lunar_metrics",
]

SYNODIC_MONTH_DAYS = 29.530588853

_MILLISECOND = timedelta(milliseconds=1)

_E = TypeVar("_E")


class EventType(str, Enum):
    RISE = "RISE"
    SET = "SET"


class HorizonCrossingSolarState(str, Enum):
    RISEN_AND_SET = "RISEN_AND_SET"
    SET_AND_RISEN = "SET_AND_RISEN"
    POLAR_DAY = "POLAR_DAY"
    POLAR_NIGHT = "POLAR_NIGHT"


class HorizonCrossingLunarState(str, Enum):
    SET_AND_RISEN = "SET_AND_RISEN"
    RISEN_AND_SET = "RISEN_AND_SET"
    SET_RISE_SET = "SET_RISE_SET"
    FULL_DAY = "FULL_DAY"
    FULL_NIGHT = "FULL_NIGHT"
    ONLY_SET = "ONLY_SET"
    ONLY_RISEN = "ONLY_RISEN"
    ERROR = "ERROR"


class TypeEventTrack(str, Enum):
    MAGIC_HOUR = "MAGIC_HOUR"
    BLUE_HOUR = "BLUE_HOUR"


def _check_azimuth(azimuth: float) -> None:
    if not 0.0 <= azimuth < 360.0:
        raise InvalidArgumentError(f"azimuth must be within [0, 360), got {azimuth}")


def _check_aware(value: datetime) -> None:
    if value.tzinfo is None:
        raise InvalidArgumentError("event datetimes must be timezone-aware")


def _require_chronological(events: Sequence[_E], key: Callable[[_E], object]) -> None:
    keys = [key(event) for event in events]
    if any(later < earlier for earlier, later in zip(keys, keys[1:])):
        raise InvalidArgumentError("events must be sorted chronologically")


def check_lunar_metrics(age_in_days: float, illumination_percent: float) -> None:
    """Reject an illumination outside [0, 100] or an age outside one synodic month."""

    if not 0.0 <= illumination_percent <= 100.0:
        raise InvalidArgumentError(
            "Illumination percent must be between 0 and 100 inclusive."
        )
    if not 0.0 <= age_in_days < SYNODIC_MONTH_DAYS:
        raise InvalidArgumentError(
            f"age in days must be within [0, {SYNODIC_MONTH_DAYS}), got {age_in_days}"
        )


@dataclass(frozen=True)
class Event:
    """Rise or set inside one civil day, as a wall-clock reading."""

    type: EventType
    time: Time
    azimuth: float

    def __post_init__(self) -> None:
        _check_azimuth(self.azimuth)


@dataclass(frozen=True)
class UpcomingAbsoluteEvent:
    type: EventType
    date_time: datetime
    azimuth: float

    def __post_init__(self) -> None:
        _check_azimuth(self.azimuth)
        _check_aware(self.date_time)


@dataclass(frozen=True)
class UpcomingRelativeEvent:
    """Event as wall-clock time plus the offset from the query instant."""

    type: EventType
    time: Time
    azimuth: float
    time_to_nearest_event_millis: int

    def __post_init__(self) -> None:
        _check_azimuth(self.azimuth)
        if self.time_to_nearest_event_millis < 0:
            raise InvalidArgumentError("time to event cannot be negative")


@dataclass(frozen=True)
class UpcomingRelativeShortEvent:
    event_type: EventType
    azimuth: float
    timestamp_millis: int

    def __post_init__(self) -> None:
        _check_azimuth(self.azimuth)
        if self.timestamp_millis < 0:
            raise InvalidArgumentError("timestamp offset cannot be negative")


@dataclass(frozen=True)
class SolarEventDay:
    events: Tuple[Event, ...] = ()
    state: Optional[HorizonCrossingSolarState] = None
    previous_state: Optional[HorizonCrossingSolarState] = None
    day_length: Optional[Time] = None
    night_length: Optional[Time] = None
    meridian_crossing: Optional[Time] = None
    antimeridian_crossing: Optional[Time] = None

    def __post_init__(self) -> None:
        _require_chronological(self.events, lambda e: e.time.to_total_milliseconds())


@dataclass(frozen=True)
class SolarAbsoluteEventDay:
    events: Tuple[UpcomingAbsoluteEvent, ...] = ()
    state: Optional[HorizonCrossingSolarState] = None
    previous_state: Optional[HorizonCrossingSolarState] = None
    day_length: Optional[Time] = None
    night_length: Optional[Time] = None
    meridian_crossing: Optional[Time] = None
    antimeridian_crossing: Optional[Time] = None

    def __post_init__(self) -> None:
        _require_chronological(self.events, lambda e: e.date_time)


@dataclass(frozen=True)
class SolarRelativeEventDay:
    events: Tuple[UpcomingRelativeEvent, ...] = ()
    state: Optional[HorizonCrossingSolarState] = None
    previous_state: Optional[HorizonCrossingSolarState] = None
    day_length: Optional[Time] = None
    night_length: Optional[Time] = None
    meridian_crossing: Optional[Time] = None
    antimeridian_crossing: Optional[Time] = None

    def __post_init__(self) -> None:
        _require_chronological(self.events, lambda e: e.time_to_nearest_event_millis)

    def time_to_first_event_millis(self) -> Optional[int]:
        if not self.events:
            return None
        return self.events[0].time_to_nearest_event_millis


@dataclass(frozen=True)
class LunarEventDay:
    events: Tuple[Event, ...] = ()
    state: Optional[HorizonCrossingLunarState] = None
    previous_state: Optional[HorizonCrossingLunarState] = None
    visible_length: Optional[Time] = None
    invisible_length: Optional[Time] = None
    meridian_crossing: Optional[Time] = None
    antimeridian_crossing: Optional[Time] = None
    age_in_days: float = 0.0
    illumination_percent: float = 0.0

    def __post_init__(self) -> None:
        _require_chronological(self.events, lambda e: e.time.to_total_milliseconds())
        check_lunar_metrics(self.age_in_days, self.illumination_percent)


@dataclass(frozen=True)
class LunarAbsoluteEventDay:
    events: Tuple[UpcomingAbsoluteEvent, ...] = ()
    state: Optional[HorizonCrossingLunarState] = None
    previous_state: Optional[HorizonCrossingLunarState] = None
    visible_length: Optional[Time] = None
    invisible_length: Optional[Time] = None
    meridian_crossing: Optional[Time] = None
    antimeridian_crossing: Optional[Time] = None
    age_in_days: float = 0.0
    illumination_percent: float = 0.0

    def __post_init__(self) -> None:
        _require_chronological(self.events, lambda e: e.date_time)
        check_lunar_metrics(self.age_in_days, self.illumination_percent)


@dataclass(frozen=True)
class LunarRelativeEventDay:
    events: Tuple[UpcomingRelativeEvent, ...] = ()
    state: Optional[HorizonCrossingLunarState] = None
    previous_state: Optional[HorizonCrossingLunarState] = None
    visible_length: Optional[Time] = None
    invisible_length: Optional[Time] = None
    meridian_crossing: Optional[Time] = None
    antimeridian_crossing: Optional[Time] = None
    age_in_days: float = 0.0
    illumination_percent: float = 0.0

    def __post_init__(self) -> None:
        _require_chronological(self.events, lambda e: e.time_to_nearest_event_millis)
        check_lunar_metrics(self.age_in_days, self.illumination_percent)

    def time_to_first_event_millis(self) -> Optional[int]:
        if not self.events:
            return None
        return self.events[0].time_to_nearest_event_millis


@dataclass(frozen=True)
class TrackPoint:
    """Interval boundary; ``azimuth`` is None when the boundary is a day edge."""

    date_time: datetime
    azimuth: Optional[float] = None

    def __post_init__(self) -> None:
        _check_aware(self.date_time)
        if self.azimuth is not None:
            _check_azimuth(self.azimuth)


@dataclass(frozen=True)
class EventTrack:
    type_event_track: TypeEventTrack
    start: TrackPoint
    finish: TrackPoint

    def __post_init__(self) -> None:
        if self.finish.date_time < self.start.date_time:
            raise InvalidArgumentError("interval finishes before it starts")

    def duration_millis(self) -> int:
        delta = self.finish.date_time - self.start.date_time
        return delta // _MILLISECOND


@dataclass(frozen=True)
class MagicHourPeriod:
    """Lighting intervals of one day and the time left outside them.

    ``daylight_before_ring`` is the time the Sun spends above the band and
    ``darkness_after_ring`` the time below it; together with the intervals
    they cover the civil day exactly.
    """

    events: Tuple[EventTrack, ...] = ()
    daylight_before_ring: Optional[Time] = None
    darkness_after_ring: Optional[Time] = None

    def __post_init__(self) -> None:
        _require_chronological(self.events, lambda e: e.start.date_time)
        for earlier, later in zip(self.events, self.events[1:]):
            if later.start.date_time < earlier.finish.date_time:
                raise InvalidArgumentError("lighting intervals must not overlap")

