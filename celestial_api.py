"""FastAPI application exposing solar and lunar event computations."""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Annotated, Callable, List, Optional, TypeVar

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from celestial import lunar, solar
from celestial.config import (
    resolve_cors_origins,
    resolve_log_level,
    resolve_search_horizon_days,
)
from celestial.events import EventTrack, MagicHourPeriod
from celestial.measurement import Time
from celestial.phase import calculate_lunar_phase
from models import (
    CelestialQueryParams,
    DayEvent,
    ErrorResponse,
    HealthResponse,
    LightingInterval,
    LightingPeriodResponse,
    LunarDayResponse,
    LunarPhaseResponse,
    LunarUpcomingResponse,
    NextEventResponse,
    PhaseQueryParams,
    SolarDayResponse,
    SolarUpcomingResponse,
    TrackPointModel,
    TwilightQueryParams,
    UpcomingEvent,
)

logging.basicConfig(level=resolve_log_level(), format="%(message)s")
LOGGER = logging.getLogger("celestial-api")

APP_VERSION = "1.0.0"
APP_DESCRIPTION = (
    "Sunrise, sunset, twilight, magic hour, moonrise, moonset and lunar phase "
    "for any coordinate and time-zone-aware instant"
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

R = TypeVar("R")


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - exercised in integration tests
    LOGGER.info(
        json.dumps(
            {
                "event": "startup",
                "version": APP_VERSION,
                "search_horizon_days": resolve_search_horizon_days(),
            }
        )
    )
    yield


app = FastAPI(
    title="Celestial Events API",
    description=APP_DESCRIPTION,
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=resolve_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    LOGGER.error(
        json.dumps({"event": "error", "path": request.url.path, "code": code, "message": message})
    )
    body = ErrorResponse(code=code, error=message).model_dump()
    return JSONResponse(status_code=status_code, content=body)


def _describe_validation(error: dict) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "query")
    return f"{field}: {error['msg']}" if field else error["msg"]


def _describe_detail(detail) -> str:
    if isinstance(detail, dict):
        return str(detail.get("error") or detail.get("message") or detail)
    if isinstance(detail, list):
        return ", ".join(map(str, detail))
    return str(detail)


@app.exception_handler(RequestValidationError)
async def on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "; ".join(_describe_validation(error) for error in exc.errors())
    return _error_response(request, 422, "validation_error", message)


@app.exception_handler(HTTPException)
async def on_http_error(request: Request, exc: HTTPException) -> JSONResponse:
    code = f"http_{exc.status_code}"
    return _error_response(request, exc.status_code, code, _describe_detail(exc.detail))


@app.exception_handler(Exception)
async def on_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception(json.dumps({"event": "unhandled", "path": request.url.path}), exc_info=exc)
    return _error_response(request, 500, "internal_error", "Unhandled server error")


def _timed(event: str, params, compute: Callable[[], R]) -> R:
    """Run *compute*, mapping core ValueErrors to 400, and log one line per request."""

    start_time = time.perf_counter()
    try:
        result = compute()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    duration_ms = (time.perf_counter() - start_time) * 1000.0
    record = {"event": event, "at": params.at.isoformat()}
    if hasattr(params, "lat"):
        record.update({"lat": params.lat, "lon": params.lon})
    record["duration_ms"] = round(duration_ms, 3)
    LOGGER.info(json.dumps(record))
    return result


def _clock(value: Optional[Time]) -> Optional[str]:
    return None if value is None else str(value)


def _day_events(events) -> List[DayEvent]:
    return [DayEvent(type=e.type, time=str(e.time), azimuth=e.azimuth) for e in events]


def _upcoming_events(events) -> List[UpcomingEvent]:
    return [
        UpcomingEvent(
            type=e.type,
            time=str(e.time),
            azimuth=e.azimuth,
            time_to_event_ms=e.time_to_nearest_event_millis,
        )
        for e in events
    ]


def _interval(track: EventTrack) -> LightingInterval:
    return LightingInterval(
        type=track.type_event_track,
        start=TrackPointModel(date_time=track.start.date_time, azimuth=track.start.azimuth),
        finish=TrackPointModel(date_time=track.finish.date_time, azimuth=track.finish.azimuth),
        duration_ms=track.duration_millis(),
    )


def _lighting_response(params: CelestialQueryParams, period: MagicHourPeriod) -> LightingPeriodResponse:
    return LightingPeriodResponse(
        latitude=params.lat,
        longitude=params.lon,
        at=params.at,
        intervals=[_interval(track) for track in period.events],
        daylight_ms=period.daylight_before_ring.to_total_milliseconds(),
        darkness_ms=period.darkness_after_ring.to_total_milliseconds(),
    )


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(
        ok=True,
        version=APP_VERSION,
        search_horizon_days=resolve_search_horizon_days(),
    )


@app.get("/sun/day", response_model=SolarDayResponse, responses=ERROR_RESPONSES)
def sun_day(params: Annotated[CelestialQueryParams, Query()]) -> SolarDayResponse:
    day = _timed(
        "sun_day",
        params,
        lambda: solar.calculate_solar_event_day(params.lat, params.lon, params.at),
    )
    return SolarDayResponse(
        latitude=params.lat,
        longitude=params.lon,
        at=params.at,
        state=day.state,
        previous_state=day.previous_state,
        events=_day_events(day.events),
        day_length_ms=day.day_length.to_total_milliseconds(),
        night_length_ms=day.night_length.to_total_milliseconds(),
        meridian_crossing=_clock(day.meridian_crossing),
        antimeridian_crossing=_clock(day.antimeridian_crossing),
    )


@app.get("/sun/twilight", response_model=SolarDayResponse, responses=ERROR_RESPONSES)
def sun_twilight(params: Annotated[TwilightQueryParams, Query()]) -> SolarDayResponse:
    day = _timed(
        "sun_twilight",
        params,
        lambda: solar.calculate_twilight_event_day(
            params.lat, params.lon, params.at, params.twilight.value
        ),
    )
    return SolarDayResponse(
        latitude=params.lat,
        longitude=params.lon,
        at=params.at,
        state=day.state,
        previous_state=day.previous_state,
        events=_day_events(day.events),
        day_length_ms=day.day_length.to_total_milliseconds(),
        night_length_ms=day.night_length.to_total_milliseconds(),
        meridian_crossing=_clock(day.meridian_crossing),
        antimeridian_crossing=_clock(day.antimeridian_crossing),
        twilight=params.twilight,
    )


@app.get("/sun/upcoming", response_model=SolarUpcomingResponse, responses=ERROR_RESPONSES)
def sun_upcoming(params: Annotated[CelestialQueryParams, Query()]) -> SolarUpcomingResponse:
    day = _timed(
        "sun_upcoming",
        params,
        lambda: solar.find_upcoming_solar_relative_event_day(params.lat, params.lon, params.at),
    )
    return SolarUpcomingResponse(
        latitude=params.lat,
        longitude=params.lon,
        at=params.at,
        state=day.state,
        previous_state=day.previous_state,
        events=_upcoming_events(day.events),
        day_length_ms=day.day_length.to_total_milliseconds(),
        night_length_ms=day.night_length.to_total_milliseconds(),
        meridian_crossing=_clock(day.meridian_crossing),
        antimeridian_crossing=_clock(day.antimeridian_crossing),
    )


@app.get("/sun/next", response_model=NextEventResponse, responses=ERROR_RESPONSES)
def sun_next(params: Annotated[CelestialQueryParams, Query()]) -> NextEventResponse:
    event = _timed(
        "sun_next",
        params,
        lambda: solar.find_upcoming_solar_relative_short_event_day(
            params.lat, params.lon, params.at
        ),
    )
    if event is None:
        return NextEventResponse(found=False)
    return NextEventResponse(
        found=True,
        event_type=event.event_type,
        azimuth=event.azimuth,
        time_to_event_ms=event.timestamp_millis,
    )


@app.get("/sun/magic-hour", response_model=LightingPeriodResponse, responses=ERROR_RESPONSES)
def sun_magic_hour(params: Annotated[CelestialQueryParams, Query()]) -> LightingPeriodResponse:
    period = _timed(
        "sun_magic_hour",
        params,
        lambda: solar.calculate_magic_hour_period(params.lat, params.lon, params.at),
    )
    return _lighting_response(params, period)


@app.get("/sun/blue-hour", response_model=LightingPeriodResponse, responses=ERROR_RESPONSES)
def sun_blue_hour(params: Annotated[CelestialQueryParams, Query()]) -> LightingPeriodResponse:
    period = _timed(
        "sun_blue_hour",
        params,
        lambda: solar.calculate_blue_hour_period(params.lat, params.lon, params.at),
    )
    return _lighting_response(params, period)


@app.get("/moon/day", response_model=LunarDayResponse, responses=ERROR_RESPONSES)
def moon_day(params: Annotated[CelestialQueryParams, Query()]) -> LunarDayResponse:
    day = _timed(
        "moon_day",
        params,
        lambda: lunar.calculate_lunar_event_day(params.lat, params.lon, params.at),
    )
    return LunarDayResponse(
        latitude=params.lat,
        longitude=params.lon,
        at=params.at,
        state=day.state,
        previous_state=day.previous_state,
        events=_day_events(day.events),
        visible_length_ms=day.visible_length.to_total_milliseconds(),
        invisible_length_ms=day.invisible_length.to_total_milliseconds(),
        meridian_crossing=_clock(day.meridian_crossing),
        antimeridian_crossing=_clock(day.antimeridian_crossing),
        age_in_days=day.age_in_days,
        illumination_percent=day.illumination_percent,
    )


@app.get("/moon/upcoming", response_model=LunarUpcomingResponse, responses=ERROR_RESPONSES)
def moon_upcoming(params: Annotated[CelestialQueryParams, Query()]) -> LunarUpcomingResponse:
    day = _timed(
        "moon_upcoming",
        params,
        lambda: lunar.find_upcoming_lunar_relative_event_day(params.lat, params.lon, params.at),
    )
    return LunarUpcomingResponse(
        latitude=params.lat,
        longitude=params.lon,
        at=params.at,
        state=day.state,
        previous_state=day.previous_state,
        events=_upcoming_events(day.events),
        visible_length_ms=day.visible_length.to_total_milliseconds(),
        invisible_length_ms=day.invisible_length.to_total_milliseconds(),
        meridian_crossing=_clock(day.meridian_crossing),
        antimeridian_crossing=_clock(day.antimeridian_crossing),
        age_in_days=day.age_in_days,
        illumination_percent=day.illumination_percent,
    )


@app.get("/moon/next", response_model=NextEventResponse, responses=ERROR_RESPONSES)
def moon_next(params: Annotated[CelestialQueryParams, Query()]) -> NextEventResponse:
    event = _timed(
        "moon_next",
        params,
        lambda: lunar.find_upcoming_lunar_relative_short_event_day(
            params.lat, params.lon, params.at
        ),
    )
    if event is None:
        return NextEventResponse(found=False)
    return NextEventResponse(
        found=True,
        event_type=event.event_type,
        azimuth=event.azimuth,
        time_to_event_ms=event.timestamp_millis,
    )


@app.get("/moon/phase", response_model=LunarPhaseResponse, responses=ERROR_RESPONSES)
def moon_phase(params: Annotated[PhaseQueryParams, Query()]) -> LunarPhaseResponse:
    phase = _timed("moon_phase", params, lambda: calculate_lunar_phase(params.at))
    return LunarPhaseResponse(
        at=params.at,
        age_in_days=phase.age_in_days,
        illumination_percent=phase.illumination_percent,
        phase=phase.name,
    )
