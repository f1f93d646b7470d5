"""Validated value types shared by every calculator: coordinates and clock times."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "InvalidArgumentError",
    "Coordinate",
    "Time",
    "MILLIS_PER_SECOND",
    "MILLIS_PER_MINUTE",
    "MILLIS_PER_HOUR",
    "MILLIS_PER_DAY",
]

MILLIS_PER_SECOND = 1000
MILLIS_PER_MINUTE = 60 * MILLIS_PER_SECOND
MILLIS_PER_HOUR = 60 * MILLIS_PER_MINUTE
MILLIS_PER_DAY = 24 * MILLIS_PER_HOUR


class InvalidArgumentError(ValueError):
    """Raised when a coordinate, clock field or result invariant is violated."""


@dataclass(frozen=True)
class Coordinate:
    """Geographic position in degrees, east-positive longitude."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidArgumentError(
                f"latitude must be within [-90, 90], got {self.latitude}"
            )
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidArgumentError(
                f"longitude must be within [-180, 180], got {self.longitude}"
            )


@dataclass(frozen=True)
class Time:
    """Clock time with an optional signed day offset.

    Used both for wall-clock readings (``days == 0``) and for durations, where
    ``days`` carries the whole-day part. Normalisation is floored, so a
    negative total keeps non-negative clock fields and a negative ``days``.
    """

    hour: int
    minute: int = 0
    second: int = 0
    millisecond: int = 0
    days: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise InvalidArgumentError(f"hour must be within [0, 23], got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise InvalidArgumentError(f"minute must be within [0, 59], got {self.minute}")
        if not 0 <= self.second <= 59:
            raise InvalidArgumentError(f"second must be within [0, 59], got {self.second}")
        if not 0 <= self.millisecond <= 999:
            raise InvalidArgumentError(
                f"millisecond must be within [0, 999], got {self.millisecond}"
            )

    @classmethod
    def from_total_milliseconds(cls, total: int) -> "Time":
        days, rest = divmod(int(total), MILLIS_PER_DAY)
        hour, rest = divmod(rest, MILLIS_PER_HOUR)
        minute, rest = divmod(rest, MILLIS_PER_MINUTE)
        second, millisecond = divmod(rest, MILLIS_PER_SECOND)
        return cls(hour, minute, second, millisecond, days)

    def to_total_milliseconds(self) -> int:
        return (
            self.days * MILLIS_PER_DAY
            + self.hour * MILLIS_PER_HOUR
            + self.minute * MILLIS_PER_MINUTE
            + self.second * MILLIS_PER_SECOND
            + self.millisecond
        )

    def to_total_minutes(self) -> int:
        return self.to_total_milliseconds() // MILLIS_PER_MINUTE

    def __str__(self) -> str:
        clock = f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        if self.millisecond:
            clock = f"{clock}.{self.millisecond:03d}"
        if self.days:
            return f"{self.days:+d}d {clock}"
        return clock
