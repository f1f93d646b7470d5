"""Lunar age and illuminated fraction from the Sun-Earth-Moon geometry."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import numpy as np

from .events import SYNODIC_MONTH_DAYS, check_lunar_metrics
from .position import moon_position, sun_position
from .timescale import julian_date, normalize_degrees, terrestrial_time

__all__ = ["MoonPhaseName", "LunarPhase", "lunar_phase_at", "calculate_lunar_phase"]

LOGGER = logging.getLogger(__name__)


class MoonPhaseName(str, Enum):
    NEW_MOON = "New Moon"
    WAXING_CRESCENT = "Waxing Crescent"
    FIRST_QUARTER = "First Quarter"
    WAXING_GIBBOUS = "Waxing Gibbous"
    FULL_MOON = "Full Moon"
    WANING_GIBBOUS = "Waning Gibbous"
    LAST_QUARTER = "Last Quarter"
    WANING_CRESCENT = "Waning Crescent"


# upper bound of each name as a fraction of the synodic cycle
_PHASE_BOUNDS = (
    (0.03, MoonPhaseName.NEW_MOON),
    (0.22, MoonPhaseName.WAXING_CRESCENT),
    (0.28, MoonPhaseName.FIRST_QUARTER),
    (0.47, MoonPhaseName.WAXING_GIBBOUS),
    (0.53, MoonPhaseName.FULL_MOON),
    (0.72, MoonPhaseName.WANING_GIBBOUS),
    (0.78, MoonPhaseName.LAST_QUARTER),
    (0.97, MoonPhaseName.WANING_CRESCENT),
)


@dataclass(frozen=True)
class LunarPhase:
    age_in_days: float
    illumination_percent: float
    name: MoonPhaseName

    def __post_init__(self) -> None:
        check_lunar_metrics(self.age_in_days, self.illumination_percent)


def _phase_name(fraction: float) -> MoonPhaseName:
    for bound, name in _PHASE_BOUNDS:
        if fraction < bound:
            return name
    return MoonPhaseName.NEW_MOON


def lunar_phase_at(jd_ut: float) -> LunarPhase:
    """Phase of the Moon at a UT Julian Date.

    The phase angle follows Meeus ch. 48: the geocentric elongation ``psi``
    gives ``i = atan2(R sin psi, delta - R cos psi)`` and the lit fraction is
    ``(1 + cos i) / 2``. The age is the Moon-Sun longitude difference scaled
    onto the synodic month.
    """

    jd_tt = terrestrial_time(jd_ut)
    sun = sun_position(jd_tt)
    moon = moon_position(jd_tt)

    difference = np.radians(moon.ecliptic_longitude - sun.ecliptic_longitude)
    beta = np.radians(moon.ecliptic_latitude)
    elongation = np.arccos(np.clip(np.cos(beta) * np.cos(difference), -1.0, 1.0))
    phase_angle = np.arctan2(
        sun.distance_km * np.sin(elongation),
        moon.distance_km - sun.distance_km * np.cos(elongation),
    )
    illumination = float(np.clip((1.0 + np.cos(phase_angle)) / 2.0 * 100.0, 0.0, 100.0))

    fraction = float(
        normalize_degrees(moon.ecliptic_longitude - sun.ecliptic_longitude)
    ) / 360.0
    age = fraction * SYNODIC_MONTH_DAYS
    if age >= SYNODIC_MONTH_DAYS:
        age = 0.0
        fraction = 0.0

    phase = LunarPhase(age_in_days=age, illumination_percent=illumination, name=_phase_name(fraction))
    LOGGER.debug(
        json.dumps(
            {
                "event": "lunar_phase",
                "jd": jd_ut,
                "age_in_days": round(age, 4),
                "illumination_percent": round(illumination, 3),
                "name": phase.name.value,
            }
        )
    )
    return phase


def calculate_lunar_phase(date_time: datetime) -> LunarPhase:
    """Phase at an aware instant; a naive datetime raises InvalidArgumentError."""

    return lunar_phase_at(julian_date(date_time))
