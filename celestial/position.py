"""Low-precision geocentric positions of the Sun and Moon and the horizontal transform.

Series follow the truncated solar and lunar theories of Meeus, *Astronomical
Algorithms*, ch. 25 and 47. All functions accept scalars or numpy arrays of
Julian Dates so a whole search window can be evaluated in one call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

from .timescale import (
    julian_centuries,
    local_sidereal_degrees,
    mean_obliquity_degrees,
    normalize_degrees,
    nutation_in_longitude_degrees,
    signed_degrees,
)

__all__ = [
    "AU_KM",
    "EARTH_EQUATORIAL_RADIUS_KM",
    "EquatorialPosition",
    "HorizontalPosition",
    "sun_position",
    "moon_position",
    "to_horizontal",
]

ArrayLike = Union[float, np.ndarray]

AU_KM = 149_597_870.7
EARTH_EQUATORIAL_RADIUS_KM = 6378.14

# Periodic terms for the Moon's longitude (1e-6 deg) and distance (m).
# Columns: D, M, M', F multipliers.
_LR_ARGUMENTS = np.array(
    [
        [0, 0, 1, 0], [2, 0, -1, 0], [2, 0, 0, 0], [0, 0, 2, 0],
        [0, 1, 0, 0], [0, 0, 0, 2], [2, 0, -2, 0], [2, -1, -1, 0],
        [2, 0, 1, 0], [2, -1, 0, 0], [0, 1, -1, 0], [1, 0, 0, 0],
        [0, 1, 1, 0], [2, 0, 0, -2], [0, 0, 1, 2], [0, 0, 1, -2],
        [4, 0, -1, 0], [0, 0, 3, 0], [4, 0, -2, 0], [2, 1, -1, 0],
        [2, 1, 0, 0], [1, 0, -1, 0], [1, 1, 0, 0], [2, -1, 1, 0],
        [2, 0, 2, 0], [4, 0, 0, 0], [2, 0, -3, 0], [0, 1, -2, 0],
        [2, 0, -1, 2], [2, -1, -2, 0], [1, 0, 1, 0], [2, -2, 0, 0],
    ],
    dtype=float,
)
_L_COEFFICIENTS = np.array(
    [
        6288774, 1274027, 658314, 213618, -185116, -114332, 58793, 57066,
        53322, 45758, -40923, -34720, -30383, 15327, -12528, 10980,
        10675, 10034, 8548, -7888, -6766, -5163, 4987, 4036,
        3994, 3861, 3665, -2689, -2602, 2390, -2348, 2236,
    ],
    dtype=float,
)
_R_COEFFICIENTS = np.array(
    [
        -20905355, -3699111, -2955968, -569925, 48888, -3149, 246158, -152138,
        -170733, -204586, -129620, 108743, 104755, 10321, 0, 79661,
        -34782, -23210, -21636, 24208, 30824, -8379, -16675, -12831,
        -10445, -11650, 14403, -7003, 0, 10056, 6322, -9884,
    ],
    dtype=float,
)

# Periodic terms for the Moon's latitude (1e-6 deg).
_B_ARGUMENTS = np.array(
    [
        [0, 0, 0, 1], [0, 0, 1, 1], [0, 0, 1, -1], [2, 0, 0, -1],
        [2, 0, -1, 1], [2, 0, -1, -1], [2, 0, 0, 1], [0, 0, 2, 1],
        [2, 0, 1, -1], [0, 0, 2, -1], [2, -1, 0, -1], [2, 0, -2, -1],
        [2, 0, 1, 1], [2, 1, 0, -1], [2, -1, -1, 1], [2, -1, 0, 1],
        [2, -1, -1, -1], [0, 1, -1, -1], [4, 0, -1, -1], [0, 1, 0, 1],
        [0, 0, 0, 3], [0, 1, -1, 1], [1, 0, 0, 1], [0, 1, 1, 1],
        [0, 1, 1, -1], [0, 1, 0, -1], [1, 0, 0, -1], [0, 0, 3, 1],
        [4, 0, 0, -1], [4, 0, -1, 1],
    ],
    dtype=float,
)
_B_COEFFICIENTS = np.array(
    [
        5128122, 280602, 277693, 173237, 55413, 46271, 32573, 17198,
        9266, 8822, 8216, 4324, 4200, -3359, 2463, 2211,
        2065, -1870, 1828, -1794, -1749, -1565, -1491, -1475,
        -1410, -1344, -1335, 1107, 1021, 833,
    ],
    dtype=float,
)


@dataclass(frozen=True)
class EquatorialPosition:
    """Apparent geocentric place; angles in degrees."""

    right_ascension: ArrayLike
    declination: ArrayLike
    ecliptic_longitude: ArrayLike
    ecliptic_latitude: ArrayLike
    distance_km: ArrayLike
    parallax: ArrayLike


@dataclass(frozen=True)
class HorizontalPosition:
    """Altitude above the horizon and azimuth clockwise from north, in degrees.

    ``hour_angle`` is the local hour angle wrapped onto [-180, 180).
    """

    altitude: ArrayLike
    azimuth: ArrayLike
    hour_angle: ArrayLike


def _ecliptic_to_equatorial(longitude, latitude, obliquity):
    lam = np.radians(longitude)
    beta = np.radians(latitude)
    eps = np.radians(obliquity)
    ra = np.degrees(
        np.arctan2(np.sin(lam) * np.cos(eps) - np.tan(beta) * np.sin(eps), np.cos(lam))
    )
    dec = np.degrees(
        np.arcsin(np.sin(beta) * np.cos(eps) + np.cos(beta) * np.sin(eps) * np.sin(lam))
    )
    return normalize_degrees(ra), dec


def sun_position(jd_tt: ArrayLike) -> EquatorialPosition:
    """Apparent position of the Sun (accuracy about 0.01 deg)."""

    t = julian_centuries(jd_tt)
    mean_longitude = 280.46646 + 36000.76983 * t + 0.0003032 * t * t
    mean_anomaly = 357.52911 + 35999.05029 * t - 0.0001537 * t * t
    m = np.radians(mean_anomaly)
    center = (
        (1.914602 - 0.004817 * t - 0.000014 * t * t) * np.sin(m)
        + (0.019993 - 0.000101 * t) * np.sin(2.0 * m)
        + 0.000289 * np.sin(3.0 * m)
    )
    true_longitude = mean_longitude + center
    true_anomaly = np.radians(mean_anomaly + center)
    eccentricity = 0.016708634 - 0.000042037 * t - 0.0000001267 * t * t
    radius_au = 1.000001018 * (1.0 - eccentricity ** 2) / (
        1.0 + eccentricity * np.cos(true_anomaly)
    )

    omega = np.radians(125.04 - 1934.136 * t)
    apparent_longitude = true_longitude - 0.00569 - 0.00478 * np.sin(omega)
    obliquity = mean_obliquity_degrees(jd_tt) + 0.00256 * np.cos(omega)

    ra, dec = _ecliptic_to_equatorial(apparent_longitude, 0.0, obliquity)
    distance_km = radius_au * AU_KM
    return EquatorialPosition(
        right_ascension=ra,
        declination=dec,
        ecliptic_longitude=normalize_degrees(apparent_longitude),
        ecliptic_latitude=np.zeros_like(dec),
        distance_km=distance_km,
        parallax=np.degrees(np.arcsin(EARTH_EQUATORIAL_RADIUS_KM / distance_km)),
    )


def _periodic_sum(arguments, coefficients, angles, eccentricity, func):
    """Evaluate sum(c_i * E^|M_i| * func(args_i . angles)) over the term table."""

    expand = (-1,) + (1,) * np.ndim(eccentricity)
    phases = np.tensordot(arguments, angles, axes=(1, 0))
    weights = coefficients.reshape(expand) * np.power(
        np.asarray(eccentricity, dtype=float), np.abs(arguments[:, 1]).reshape(expand)
    )
    return np.sum(weights * func(phases), axis=0)


def moon_position(jd_tt: ArrayLike) -> EquatorialPosition:
    """Apparent position of the Moon from the leading periodic terms."""

    t = julian_centuries(jd_tt)
    t2, t3, t4 = t * t, t * t * t, t * t * t * t
    mean_longitude = np.mod(
        218.3164477 + 481267.88123421 * t - 0.0015786 * t2 + t3 / 538841.0 - t4 / 65194000.0,
        360.0,
    )
    elongation = np.mod(
        297.8501921 + 445267.1114034 * t - 0.0018819 * t2 + t3 / 545868.0 - t4 / 113065000.0,
        360.0,
    )
    sun_anomaly = np.mod(
        357.5291092 + 35999.0502909 * t - 0.0001536 * t2 + t3 / 24490000.0, 360.0
    )
    moon_anomaly = np.mod(
        134.9633964 + 477198.8675055 * t + 0.0087414 * t2 + t3 / 69699.0 - t4 / 14712000.0,
        360.0,
    )
    node_distance = np.mod(
        93.2720950 + 483202.0175233 * t - 0.0036539 * t2 - t3 / 3526000.0 + t4 / 863310000.0,
        360.0,
    )
    eccentricity = 1.0 - 0.002516 * t - 0.0000074 * t2

    lp = np.radians(mean_longitude)
    mp = np.radians(moon_anomaly)
    f = np.radians(node_distance)
    angles = np.stack(
        [np.radians(elongation), np.radians(sun_anomaly), mp, f]
    )
    a1 = np.radians(119.75 + 131.849 * t)
    a2 = np.radians(53.09 + 479264.290 * t)
    a3 = np.radians(313.45 + 481266.484 * t)

    sum_l = _periodic_sum(_LR_ARGUMENTS, _L_COEFFICIENTS, angles, eccentricity, np.sin)
    sum_r = _periodic_sum(_LR_ARGUMENTS, _R_COEFFICIENTS, angles, eccentricity, np.cos)
    sum_b = _periodic_sum(_B_ARGUMENTS, _B_COEFFICIENTS, angles, eccentricity, np.sin)

    sum_l = sum_l + 3958.0 * np.sin(a1) + 1962.0 * np.sin(lp - f) + 318.0 * np.sin(a2)
    sum_b = (
        sum_b
        - 2235.0 * np.sin(lp)
        + 382.0 * np.sin(a3)
        + 175.0 * np.sin(a1 - f)
        + 175.0 * np.sin(a1 + f)
        + 127.0 * np.sin(lp - mp)
        - 115.0 * np.sin(lp + mp)
    )

    longitude = mean_longitude + sum_l / 1_000_000.0 + nutation_in_longitude_degrees(jd_tt)
    latitude = sum_b / 1_000_000.0
    distance_km = 385000.56 + sum_r / 1000.0

    omega = np.radians(125.04 - 1934.136 * t)
    obliquity = mean_obliquity_degrees(jd_tt) + 0.00256 * np.cos(omega)
    ra, dec = _ecliptic_to_equatorial(longitude, latitude, obliquity)
    return EquatorialPosition(
        right_ascension=ra,
        declination=dec,
        ecliptic_longitude=normalize_degrees(longitude),
        ecliptic_latitude=latitude,
        distance_km=distance_km,
        parallax=np.degrees(np.arcsin(EARTH_EQUATORIAL_RADIUS_KM / distance_km)),
    )


def to_horizontal(
    position: EquatorialPosition,
    jd_ut: ArrayLike,
    jd_tt: ArrayLike,
    latitude: float,
    longitude: float,
) -> HorizontalPosition:
    """Project a geocentric place onto the observer's horizon."""

    sidereal = local_sidereal_degrees(jd_ut, jd_tt, longitude)
    hour_angle = signed_degrees(sidereal - position.right_ascension)
    h = np.radians(hour_angle)
    phi = np.radians(latitude)
    delta = np.radians(position.declination)

    sin_alt = np.sin(phi) * np.sin(delta) + np.cos(phi) * np.cos(delta) * np.cos(h)
    altitude = np.degrees(np.arcsin(np.clip(sin_alt, -1.0, 1.0)))
    # Meeus measures from the south; shift by 180 deg to count from north.
    azimuth = np.degrees(
        np.arctan2(np.sin(h), np.cos(h) * np.sin(phi) - np.tan(delta) * np.cos(phi))
    )
    return HorizontalPosition(
        altitude=altitude,
        azimuth=normalize_degrees(azimuth + 180.0),
        hour_angle=hour_angle,
    )
