"""The two observed bodies as variants of one capability record.

A :class:`CelestialBody` bundles what the solver and the day engines need to
know about a body: how to place it on the sky, which altitude counts as the
horizon, and how long one search window is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Union

import numpy as np

from .measurement import Coordinate
from .position import (
    EquatorialPosition,
    HorizontalPosition,
    moon_position,
    sun_position,
    to_horizontal,
)
from .timescale import terrestrial_time

__all__ = [
    "CelestialBody",
    "SUN",
    "MOON",
    "TWILIGHT_ANGLES",
    "MAGIC_HOUR_BAND",
    "BLUE_HOUR_BAND",
    "twilight_altitude_degrees",
    "observe",
    "altitude_signal",
]

ArrayLike = Union[float, np.ndarray]
Signal = Callable[[ArrayLike], ArrayLike]

SUN_HORIZON_ALTITUDE = -0.8333  # refraction 34' plus solar semi-diameter 16'
MOON_REFRACTION = 0.5667  # 34'

TWILIGHT_ANGLES: Dict[str, float] = {
    "official": SUN_HORIZON_ALTITUDE,
    "civil": -6.0,
    "nautical": -12.0,
    "astronomical": -18.0,
}

MAGIC_HOUR_BAND: Tuple[float, float] = (-4.0, 6.0)
BLUE_HOUR_BAND: Tuple[float, float] = (-6.0, -4.0)


@dataclass(frozen=True)
class CelestialBody:
    name: str
    position: Callable[[ArrayLike], EquatorialPosition]
    horizon_altitude: Callable[[EquatorialPosition], ArrayLike]
    search_window_hours: float


def _sun_horizon(position: EquatorialPosition) -> ArrayLike:
    return np.full(np.shape(position.declination), SUN_HORIZON_ALTITUDE)


def _moon_horizon(position: EquatorialPosition) -> ArrayLike:
    # Meeus 15: h0 = 0.7275 * parallax - 34' for the geocentric altitude.
    return 0.7275 * np.asarray(position.parallax) - MOON_REFRACTION


SUN = CelestialBody(
    name="sun",
    position=sun_position,
    horizon_altitude=_sun_horizon,
    search_window_hours=24.0,
)

MOON = CelestialBody(
    name="moon",
    position=moon_position,
    horizon_altitude=_moon_horizon,
    search_window_hours=25.0,
)


def twilight_altitude_degrees(twilight: str) -> float:
    try:
        return TWILIGHT_ANGLES[twilight]
    except KeyError as exc:
        raise ValueError(f"Unsupported twilight selector: {twilight}") from exc


def observe(
    body: CelestialBody, coordinate: Coordinate, jd_ut: ArrayLike
) -> Tuple[EquatorialPosition, HorizontalPosition]:
    """Return the geocentric and horizontal place of *body* at UT Julian Date(s)."""

    jd_tt = terrestrial_time(jd_ut)
    position = body.position(jd_tt)
    horizontal = to_horizontal(
        position, jd_ut, jd_tt, coordinate.latitude, coordinate.longitude
    )
    return position, horizontal


def altitude_signal(
    body: CelestialBody, coordinate: Coordinate, threshold: Optional[float] = None
) -> Signal:
    """Build ``f(jd_ut) = altitude - threshold`` for the horizon-crossing solver.

    Without an explicit *threshold* the body's own (possibly per-instant)
    horizon altitude is used.
    """

    def signal(jd_ut: ArrayLike) -> ArrayLike:
        position, horizontal = observe(body, coordinate, jd_ut)
        limit = body.horizon_altitude(position) if threshold is None else threshold
        return horizontal.altitude - limit

    return signal
