"""Solar and lunar horizon-crossing events for an arbitrary place and instant."""

from .events import (
    EventType,
    HorizonCrossingLunarState,
    HorizonCrossingSolarState,
    TypeEventTrack,
)
from .lunar import (
    calculate_lunar_absolute_event_day,
    calculate_lunar_event_day,
    find_upcoming_lunar_absolute_event_day,
    find_upcoming_lunar_relative_event_day,
    find_upcoming_lunar_relative_short_event_day,
)
from .measurement import Coordinate, InvalidArgumentError, Time
from .phase import LunarPhase, calculate_lunar_phase
from .solar import (
    calculate_blue_hour_period,
    calculate_magic_hour_period,
    calculate_solar_absolute_event_day,
    calculate_solar_event_day,
    calculate_twilight_event_day,
    find_upcoming_solar_absolute_event_day,
    find_upcoming_solar_relative_event_day,
    find_upcoming_solar_relative_short_event_day,
)

__all__ = [
    "Coordinate",
    "Time",
    "InvalidArgumentError",
    "EventType",
    "HorizonCrossingSolarState",
    "HorizonCrossingLunarState",
    "TypeEventTrack",
    "LunarPhase",
    "calculate_solar_event_day",
    "calculate_solar_absolute_event_day",
    "calculate_twilight_event_day",
    "find_upcoming_solar_absolute_event_day",
    "find_upcoming_solar_relative_event_day",
    "find_upcoming_solar_relative_short_event_day",
    "calculate_magic_hour_period",
    "calculate_blue_hour_period",
    "calculate_lunar_event_day",
    "calculate_lunar_absolute_event_day",
    "find_upcoming_lunar_absolute_event_day",
    "find_upcoming_lunar_relative_event_day",
    "find_upcoming_lunar_relative_short_event_day",
    "calculate_lunar_phase",
]
