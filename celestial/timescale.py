"""Time-scale conversions: calendar instants, Julian Dates, delta-T and sidereal time."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Sequence, Tuple, Union

import erfa
import numpy as np
from numpy.polynomial import polynomial

from .measurement import InvalidArgumentError

__all__ = [
    "J2000",
    "SECONDS_PER_DAY",
    "julian_date",
    "datetime_from_julian",
    "decimal_year",
    "delta_t_seconds",
    "terrestrial_time",
    "julian_centuries",
    "mean_obliquity_degrees",
    "nutation_in_longitude_degrees",
    "local_sidereal_degrees",
    "normalize_degrees",
    "signed_degrees",
]

ArrayLike = Union[float, np.ndarray]

J2000 = erfa.DJ00
SECONDS_PER_DAY = erfa.DAYSEC
DAYS_PER_CENTURY = erfa.DJC

_J2000_DATETIME = datetime(2000, 1, 1, 12, tzinfo=UTC)

# (first year, last year, polynomial origin, coefficients in ascending order), seconds.
_DELTA_T_ERAS: Sequence[Tuple[float, float, float, Tuple[float, ...]]] = (
    (1860.0, 1900.0, 1860.0, (7.62, 0.5737, -0.251754, 0.01680668, -0.0004473624, 1.0 / 233174.0)),
    (1900.0, 1920.0, 1900.0, (-2.79, 1.494119, -0.0598939, 0.0061966, -0.000197)),
    (1920.0, 1941.0, 1920.0, (21.20, 0.84493, -0.076100, 0.0020936)),
    (1941.0, 1961.0, 1950.0, (29.07, 0.407, -1.0 / 233.0, 1.0 / 2547.0)),
    (1961.0, 1986.0, 1975.0, (45.45, 1.067, -1.0 / 260.0, -1.0 / 718.0)),
    (1986.0, 2005.0, 2000.0, (63.86, 0.3345, -0.060374, 0.0017275, 0.000651814, 0.00002373599)),
    (2005.0, 2050.0, 2000.0, (62.92, 0.32217, 0.005589)),
)


def julian_date(dt: datetime) -> float:
    """Return the UTC Julian Date of a timezone-aware datetime."""

    if dt.tzinfo is None:
        raise InvalidArgumentError("datetime must be timezone-aware")
    dt_utc = dt.astimezone(UTC)
    djm0, djm = erfa.cal2jd(dt_utc.year, dt_utc.month, dt_utc.day)
    seconds = (
        dt_utc.hour * 3600.0
        + dt_utc.minute * 60.0
        + dt_utc.second
        + dt_utc.microsecond / 1_000_000
    )
    return float(djm0) + float(djm) + seconds / SECONDS_PER_DAY


def datetime_from_julian(jd: float) -> datetime:
    """Inverse of :func:`julian_date` in UTC, rounded to the millisecond."""

    millis = round((jd - J2000) * SECONDS_PER_DAY * 1000.0)
    return _J2000_DATETIME + timedelta(milliseconds=millis)


def decimal_year(jd: ArrayLike) -> ArrayLike:
    return 2000.0 + (np.asarray(jd, dtype=float) - 2451544.5) / 365.2425


def delta_t_seconds(year: float) -> float:
    """Approximate TT - UT in seconds for a decimal year.

    Piecewise polynomials cover 1860-2150; outside that range the long-term
    parabola is used, so far-off epochs degrade in accuracy instead of failing.
    """

    for first, last, origin, coefficients in _DELTA_T_ERAS:
        if first <= year < last:
            return float(polynomial.polyval(year - origin, coefficients))
    u = (year - 1820.0) / 100.0
    long_term = -20.0 + 32.0 * u * u
    if 2050.0 <= year < 2150.0:
        return long_term - 0.5628 * (2150.0 - year)
    return long_term


def terrestrial_time(jd_ut: ArrayLike) -> ArrayLike:
    """Shift a UT Julian Date (scalar or array) onto Terrestrial Time."""

    if np.ndim(jd_ut) == 0:
        jd = float(jd_ut)
        return jd + delta_t_seconds(float(decimal_year(jd))) / SECONDS_PER_DAY
    jd = np.asarray(jd_ut, dtype=float)
    # delta-T drifts by well under a millisecond across one search window
    offset = delta_t_seconds(float(decimal_year(jd.mean()))) / SECONDS_PER_DAY
    return jd + offset


def julian_centuries(jd_tt: ArrayLike) -> ArrayLike:
    return (np.asarray(jd_tt, dtype=float) - J2000) / DAYS_PER_CENTURY


def mean_obliquity_degrees(jd_tt: ArrayLike) -> ArrayLike:
    """IAU 2006 mean obliquity of the ecliptic."""

    return np.degrees(erfa.obl06(jd_tt, 0.0))


def nutation_in_longitude_degrees(jd_tt: ArrayLike) -> ArrayLike:
    """Low-precision nutation in longitude (four leading terms, ~0.5")."""

    t = julian_centuries(jd_tt)
    omega = np.radians(125.04452 - 1934.136261 * t)
    sun_mean = np.radians(280.4665 + 36000.7698 * t)
    moon_mean = np.radians(218.3165 + 481267.8813 * t)
    arcsec = (
        -17.20 * np.sin(omega)
        - 1.32 * np.sin(2.0 * sun_mean)
        - 0.23 * np.sin(2.0 * moon_mean)
        + 0.21 * np.sin(2.0 * omega)
    )
    return arcsec / 3600.0


def local_sidereal_degrees(jd_ut: ArrayLike, jd_tt: ArrayLike, longitude: float) -> ArrayLike:
    """Apparent local sidereal time in degrees, [0, 360)."""

    gmst = np.degrees(erfa.gmst06(jd_ut, 0.0, jd_tt, 0.0))
    equation_of_equinoxes = nutation_in_longitude_degrees(jd_tt) * np.cos(
        np.radians(mean_obliquity_degrees(jd_tt))
    )
    return np.mod(gmst + equation_of_equinoxes + longitude, 360.0)


def normalize_degrees(angle: ArrayLike) -> ArrayLike:
    """Wrap an angle onto [0, 360), guarding the ``-tiny % 360 == 360`` case."""

    wrapped = np.mod(angle, 360.0)
    wrapped = np.where(wrapped >= 360.0, 0.0, wrapped)
    if np.ndim(wrapped) == 0:
        return float(wrapped)
    return wrapped


def signed_degrees(angle: ArrayLike) -> ArrayLike:
    """Wrap an angle onto [-180, 180)."""

    return np.mod(np.asarray(angle, dtype=float) + 180.0, 360.0) - 180.0
