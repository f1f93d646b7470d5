"""Map a day's crossing pattern and the previous day's end state onto a horizon state.

Both tables are keyed by ``(signature, up_at_start)`` where ``signature`` is
the ordered tuple of event types in the day (or the single ``ABOVE``/``BELOW``
marker when nothing crosses) and ``up_at_start`` is whether the previous day
ended with the body above the horizon, ``None`` when that is unknown.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .events import EventType, HorizonCrossingLunarState, HorizonCrossingSolarState
from .solver import CrossingScan

__all__ = [
    "HorizonPosition",
    "crossing_signature",
    "classify_solar",
    "classify_lunar",
    "solar_ends_up",
    "lunar_ends_up",
]

LOGGER = logging.getLogger(__name__)


class HorizonPosition(str, Enum):
    ABOVE = "ABOVE"
    BELOW = "BELOW"


Signature = Tuple[Union[EventType, HorizonPosition], ...]

RISE = EventType.RISE
SET = EventType.SET
ABOVE = (HorizonPosition.ABOVE,)
BELOW = (HorizonPosition.BELOW,)

_Solar = HorizonCrossingSolarState
_Lunar = HorizonCrossingLunarState

SOLAR_STATES: Dict[Tuple[Signature, Optional[bool]], HorizonCrossingSolarState] = {
    (ABOVE, True): _Solar.POLAR_DAY,
    (ABOVE, None): _Solar.POLAR_DAY,
    (BELOW, False): _Solar.POLAR_NIGHT,
    (BELOW, None): _Solar.POLAR_NIGHT,
    ((RISE, SET), False): _Solar.RISEN_AND_SET,
    ((RISE, SET), None): _Solar.RISEN_AND_SET,
    ((SET, RISE), True): _Solar.SET_AND_RISEN,
    ((SET, RISE), None): _Solar.SET_AND_RISEN,
    # single crossing: up at midnight and set, or down at midnight and rose
    ((SET,), True): _Solar.RISEN_AND_SET,
    ((SET,), None): _Solar.RISEN_AND_SET,
    ((RISE,), False): _Solar.SET_AND_RISEN,
    ((RISE,), None): _Solar.SET_AND_RISEN,
    # grazing days near the polar-circle transitions
    ((RISE, SET, RISE), False): _Solar.RISEN_AND_SET,
    ((RISE, SET, RISE), None): _Solar.RISEN_AND_SET,
    ((SET, RISE, SET), True): _Solar.SET_AND_RISEN,
    ((SET, RISE, SET), None): _Solar.SET_AND_RISEN,
}

LUNAR_STATES: Dict[Tuple[Signature, Optional[bool]], HorizonCrossingLunarState] = {
    (ABOVE, True): _Lunar.FULL_DAY,
    (ABOVE, None): _Lunar.FULL_DAY,
    (BELOW, False): _Lunar.FULL_NIGHT,
    (BELOW, None): _Lunar.FULL_NIGHT,
    ((RISE, SET), False): _Lunar.RISEN_AND_SET,
    ((RISE, SET), None): _Lunar.RISEN_AND_SET,
    ((SET, RISE), True): _Lunar.SET_AND_RISEN,
    ((SET, RISE), None): _Lunar.SET_AND_RISEN,
    ((SET, RISE, SET), True): _Lunar.SET_RISE_SET,
    ((SET, RISE, SET), None): _Lunar.SET_RISE_SET,
    ((SET,), True): _Lunar.ONLY_SET,
    ((SET,), None): _Lunar.ONLY_SET,
    ((RISE,), False): _Lunar.ONLY_RISEN,
    ((RISE,), None): _Lunar.ONLY_RISEN,
}

_SOLAR_ENDS_UP = {
    _Solar.POLAR_DAY: True,
    _Solar.POLAR_NIGHT: False,
    _Solar.RISEN_AND_SET: False,
    _Solar.SET_AND_RISEN: True,
}

_LUNAR_ENDS_UP = {
    _Lunar.FULL_DAY: True,
    _Lunar.FULL_NIGHT: False,
    _Lunar.RISEN_AND_SET: False,
    _Lunar.SET_AND_RISEN: True,
    _Lunar.SET_RISE_SET: False,
    _Lunar.ONLY_SET: False,
    _Lunar.ONLY_RISEN: True,
}


def crossing_signature(scan: CrossingScan) -> Signature:
    if scan.crossings:
        return tuple(c.type for c in scan.crossings)
    return ABOVE if scan.starts_above else BELOW


def solar_ends_up(state: Optional[HorizonCrossingSolarState]) -> Optional[bool]:
    if state is None:
        return None
    return _SOLAR_ENDS_UP[state]


def lunar_ends_up(state: Optional[HorizonCrossingLunarState]) -> Optional[bool]:
    """End condition of a lunar day; unknown for ERROR or a missing state."""

    if state is None:
        return None
    return _LUNAR_ENDS_UP.get(state)


def classify_solar(
    scan: CrossingScan, previous: Optional[HorizonCrossingSolarState] = None
) -> HorizonCrossingSolarState:
    """Solar days always resolve: an inconsistent prior falls back to the day alone."""

    signature = crossing_signature(scan)
    state = SOLAR_STATES.get((signature, solar_ends_up(previous)))
    if state is None:
        state = SOLAR_STATES.get((signature, None))
    if state is None:
        # more than three crossings: only the leading pair decides the label
        first = signature[0]
        state = _Solar.RISEN_AND_SET if first is RISE else _Solar.SET_AND_RISEN
    return state


def classify_lunar(
    scan: CrossingScan, previous: Optional[HorizonCrossingLunarState] = None
) -> HorizonCrossingLunarState:
    signature = crossing_signature(scan)
    up_at_start = lunar_ends_up(previous)
    state = LUNAR_STATES.get((signature, up_at_start))
    if state is None:
        LOGGER.warning(
            json.dumps(
                {
                    "event": "lunar_classification_unresolved",
                    "signature": [item.value for item in signature],
                    "previous": previous.value if previous is not None else None,
                }
            )
        )
        return _Lunar.ERROR
    return state
