"""Horizon-crossing root finder over a sampled altitude signal."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Tuple, Union

import numpy as np

from .events import EventType
from .timescale import SECONDS_PER_DAY

__all__ = ["Crossing", "CrossingScan", "scan_crossings", "refine_crossing"]

LOGGER = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]
Signal = Callable[[ArrayLike], ArrayLike]

DEFAULT_STEP_MINUTES = 10.0
DEFAULT_TOLERANCE_SECONDS = 1.0


@dataclass(frozen=True)
class Crossing:
    jd: float
    type: EventType


@dataclass(frozen=True)
class CrossingScan:
    """Sign changes of ``signal`` over ``[jd_start, jd_end)``.

    ``starts_above`` / ``ends_above`` give the side of the threshold at the
    window edges; a value exactly on the threshold counts as above.
    """

    jd_start: float
    jd_end: float
    crossings: Tuple[Crossing, ...]
    starts_above: bool
    ends_above: bool


def refine_crossing(
    signal: Signal,
    low: float,
    high: float,
    low_value: float,
    high_value: float,
    tolerance_days: float,
    max_iterations: int = 40,
) -> float:
    """Narrow a bracketed sign change by bisection, then interpolate linearly."""

    if low_value == 0:
        return low
    if high_value == 0:
        return high
    for _ in range(max_iterations):
        if high - low <= tolerance_days:
            break
        mid = low + (high - low) / 2
        mid_value = float(signal(mid))
        if (mid_value >= 0) == (high_value >= 0):
            high, high_value = mid, mid_value
        else:
            low, low_value = mid, mid_value
    return low + (high - low) * low_value / (low_value - high_value)


def scan_crossings(
    signal: Signal,
    jd_start: float,
    jd_end: float,
    step_minutes: float = DEFAULT_STEP_MINUTES,
    tolerance_seconds: float = DEFAULT_TOLERANCE_SECONDS,
) -> CrossingScan:
    """Sample ``signal`` at a fixed step and refine every sign change.

    An ascending change is reported as RISE, a descending one as SET, in
    chronological order. Roots landing exactly on ``jd_end`` belong to the
    next window and are dropped.
    """

    step_days = step_minutes * 60.0 / SECONDS_PER_DAY
    count = max(1, math.ceil((jd_end - jd_start) / step_days - 1e-9))
    times = np.linspace(jd_start, jd_end, count + 1)
    values = np.asarray(signal(times), dtype=float)
    above = values >= 0

    tolerance_days = tolerance_seconds / SECONDS_PER_DAY
    crossings: List[Crossing] = []
    for idx in np.flatnonzero(above[1:] != above[:-1]):
        root = refine_crossing(
            signal,
            float(times[idx]),
            float(times[idx + 1]),
            float(values[idx]),
            float(values[idx + 1]),
            tolerance_days,
        )
        if root >= jd_end:
            continue
        event_type = EventType.RISE if above[idx + 1] else EventType.SET
        crossings.append(Crossing(jd=root, type=event_type))

    scan = CrossingScan(
        jd_start=jd_start,
        jd_end=jd_end,
        crossings=tuple(crossings),
        starts_above=bool(above[0]),
        ends_above=bool(above[-1]),
    )
    LOGGER.debug(
        json.dumps(
            {
                "event": "crossing_scan",
                "jd_start": jd_start,
                "jd_end": jd_end,
                "crossings": [c.type.value for c in crossings],
                "starts_above": scan.starts_above,
            }
        )
    )
    return scan
