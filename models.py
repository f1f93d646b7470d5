"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from celestial.events import (
    EventType,
    HorizonCrossingLunarState,
    HorizonCrossingSolarState,
    TypeEventTrack,
)
from celestial.phase import MoonPhaseName


class Twilight(str, Enum):
    """Depression angle used by ``/sun/twilight``; ``official`` is the -0.8333 deg horizon."""

    official = "official"
    civil = "civil"
    nautical = "nautical"
    astronomical = "astronomical"


class CelestialQueryParams(BaseModel):
    """Validated query parameters shared by every body endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    at: datetime = Field(
        ..., description="Query instant, ISO-8601 with a UTC offset (e.g. 2025-03-20T12:00:00+05:00)"
    )

    @field_validator("at")
    @classmethod
    def validate_at(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("at must include a UTC offset")
        return value


class TwilightQueryParams(CelestialQueryParams):
    twilight: Twilight = Field(Twilight.civil, description="Twilight definition")


class PhaseQueryParams(BaseModel):
    at: datetime = Field(..., description="Query instant, ISO-8601 with a UTC offset")

    @field_validator("at")
    @classmethod
    def validate_at(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("at must include a UTC offset")
        return value


class DayEvent(BaseModel):
    """Rise or set within the requested civil day."""

    type: EventType
    time: str = Field(..., description="Local wall-clock time (HH:MM:SS[.mmm])")
    azimuth: float = Field(..., ge=0.0, lt=360.0)


class UpcomingEvent(BaseModel):
    type: EventType
    time: str = Field(..., description="Local wall-clock time (HH:MM:SS[.mmm])")
    azimuth: float = Field(..., ge=0.0, lt=360.0)
    time_to_event_ms: int = Field(..., ge=0, description="Milliseconds from the query instant")


class SolarDayResponse(BaseModel):
    ok: bool = True
    latitude: float
    longitude: float
    at: datetime
    state: HorizonCrossingSolarState
    previous_state: HorizonCrossingSolarState
    events: List[DayEvent]
    day_length_ms: int
    night_length_ms: int
    meridian_crossing: Optional[str] = None
    antimeridian_crossing: Optional[str] = None
    twilight: Optional[Twilight] = None


class SolarUpcomingResponse(BaseModel):
    ok: bool = True
    latitude: float
    longitude: float
    at: datetime
    state: HorizonCrossingSolarState
    previous_state: HorizonCrossingSolarState
    events: List[UpcomingEvent]
    day_length_ms: int
    night_length_ms: int
    meridian_crossing: Optional[str] = None
    antimeridian_crossing: Optional[str] = None


class LunarDayResponse(BaseModel):
    ok: bool = True
    latitude: float
    longitude: float
    at: datetime
    state: HorizonCrossingLunarState
    previous_state: HorizonCrossingLunarState
    events: List[DayEvent]
    visible_length_ms: int
    invisible_length_ms: int
    meridian_crossing: Optional[str] = None
    antimeridian_crossing: Optional[str] = None
    age_in_days: float
    illumination_percent: float = Field(..., ge=0.0, le=100.0)


class LunarUpcomingResponse(BaseModel):
    ok: bool = True
    latitude: float
    longitude: float
    at: datetime
    state: HorizonCrossingLunarState
    previous_state: HorizonCrossingLunarState
    events: List[UpcomingEvent]
    visible_length_ms: int
    invisible_length_ms: int
    meridian_crossing: Optional[str] = None
    antimeridian_crossing: Optional[str] = None
    age_in_days: float
    illumination_percent: float = Field(..., ge=0.0, le=100.0)


class NextEventResponse(BaseModel):
    """Nearest upcoming crossing; ``found`` is false past the search horizon."""

    ok: bool = True
    found: bool
    event_type: Optional[EventType] = None
    azimuth: Optional[float] = None
    time_to_event_ms: Optional[int] = None


class TrackPointModel(BaseModel):
    date_time: datetime
    azimuth: Optional[float] = Field(
        None, description="Absent when the boundary is the edge of the day"
    )


class LightingInterval(BaseModel):
    type: TypeEventTrack
    start: TrackPointModel
    finish: TrackPointModel
    duration_ms: int


class LightingPeriodResponse(BaseModel):
    ok: bool = True
    latitude: float
    longitude: float
    at: datetime
    intervals: List[LightingInterval]
    daylight_ms: int
    darkness_ms: int


class LunarPhaseResponse(BaseModel):
    ok: bool = True
    at: datetime
    age_in_days: float
    illumination_percent: float = Field(..., ge=0.0, le=100.0)
    phase: MoonPhaseName


class HealthResponse(BaseModel):
    """Service version and the configured upcoming-search horizon."""

    ok: bool = True
    version: str
    search_horizon_days: int


class ErrorResponse(BaseModel):
    """Body of every non-2xx response; ``code`` is machine-readable."""

    ok: bool = False
    code: str
    error: str
