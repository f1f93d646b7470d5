"""Split a civil day into the spans the Sun spends inside an altitude band."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from .bodies import SUN, observe
from .engine import DayWindow, millis_between, scan_window, to_datetime
from .events import EventTrack, EventType, MagicHourPeriod, TrackPoint, TypeEventTrack
from .measurement import Coordinate, Time

__all__ = ["segment_band"]

LOGGER = logging.getLogger(__name__)

_ABOVE = "above"
_BAND = "band"
_BELOW = "below"


def _region(above_low: bool, above_high: bool) -> str:
    if above_high:
        return _ABOVE
    return _BAND if above_low else _BELOW


def _boundaries(
    coordinate: Coordinate, window: DayWindow, low: float, high: float
) -> Tuple[str, List[Tuple[datetime, float, str]]]:
    """Region at midnight plus every band-edge crossing as ``(when, azimuth, region after)``."""

    low_scan = scan_window(SUN, coordinate, window.jd_start, window.jd_end, low)
    high_scan = scan_window(SUN, coordinate, window.jd_start, window.jd_end, high)

    merged = sorted(
        [(c.jd, "low", c) for c in low_scan.crossings]
        + [(c.jd, "high", c) for c in high_scan.crossings],
        key=lambda item: item[0],
    )
    above_low = low_scan.starts_above
    above_high = high_scan.starts_above
    initial = _region(above_low, above_high)

    tz = window.start.tzinfo
    boundaries = []
    for jd, edge, crossing in merged:
        rising = crossing.type is EventType.RISE
        if edge == "low":
            above_low = rising
        else:
            above_high = rising
        _, horizontal = observe(SUN, coordinate, jd)
        boundaries.append(
            (to_datetime(jd, tz), float(horizontal.azimuth), _region(above_low, above_high))
        )
    return initial, boundaries


def segment_band(
    coordinate: Coordinate,
    date_time: datetime,
    band: Tuple[float, float],
    track_type: TypeEventTrack,
) -> MagicHourPeriod:
    """Maximal intervals of the civil day where ``low <= altitude < high``.

    A boundary that is a real threshold crossing carries its azimuth; one
    that falls on the day edge because the band was already active carries
    none. Time above the band is reported as daylight and the remainder of
    the civil day, outside every interval, as darkness.
    """

    low, high = band
    window = DayWindow.containing(date_time)
    region, boundaries = _boundaries(coordinate, window, low, high)

    tracks: List[EventTrack] = []
    daylight = 0
    previous = window.start
    span_start: datetime = window.start
    span_azimuth: Optional[float] = None
    for when, azimuth, next_region in boundaries + [(window.end, None, None)]:
        if region == _ABOVE:
            daylight += millis_between(previous, when)
        if region == _BAND and next_region != _BAND:
            tracks.append(
                EventTrack(
                    type_event_track=track_type,
                    start=TrackPoint(span_start, span_azimuth),
                    finish=TrackPoint(when, azimuth),
                )
            )
        elif next_region == _BAND and region != _BAND:
            span_start, span_azimuth = when, azimuth
        region = next_region
        previous = when

    in_band = sum(track.duration_millis() for track in tracks)
    darkness = window.length_millis - daylight - in_band

    LOGGER.debug(
        json.dumps(
            {
                "event": "band_segments",
                "track": track_type.value,
                "date": window.start.date().isoformat(),
                "intervals": len(tracks),
                "daylight_ms": daylight,
                "in_band_ms": in_band,
            }
        )
    )
    return MagicHourPeriod(
        events=tuple(tracks),
        daylight_before_ring=Time.from_total_milliseconds(daylight),
        darkness_after_ring=Time.from_total_milliseconds(darkness),
    )
