from __future__ import annotations

import numpy as np
import pytest

from celestial.classifier import (
    HorizonPosition,
    classify_lunar,
    classify_solar,
    crossing_signature,
    lunar_ends_up,
)
from celestial.events import EventType, HorizonCrossingLunarState, HorizonCrossingSolarState
from celestial.solver import Crossing, CrossingScan, scan_crossings

RISE = EventType.RISE
SET = EventType.SET
Solar = HorizonCrossingSolarState
Lunar = HorizonCrossingLunarState

ONE_SECOND = 1.0 / 86400.0


def _scan(types, starts_above):
    crossings = tuple(Crossing(jd=0.1 * (i + 1), type=t) for i, t in enumerate(types))
    ends_above = types[-1] is RISE if types else starts_above
    return CrossingScan(
        jd_start=0.0,
        jd_end=1.0,
        crossings=crossings,
        starts_above=starts_above,
        ends_above=ends_above,
    )


def test_scan_finds_sine_roots():
    scan = scan_crossings(lambda t: np.sin(2.0 * np.pi * t), 0.1, 1.1)
    assert [c.type for c in scan.crossings] == [SET, RISE]
    assert scan.crossings[0].jd == pytest.approx(0.5, abs=ONE_SECOND)
    assert scan.crossings[1].jd == pytest.approx(1.0, abs=ONE_SECOND)
    assert scan.starts_above is True
    assert scan.ends_above is True


def test_scan_without_roots():
    scan = scan_crossings(lambda t: np.full(np.shape(t), -3.0), 0.0, 1.0)
    assert scan.crossings == ()
    assert scan.starts_above is False
    assert scan.ends_above is False


def test_signature():
    assert crossing_signature(_scan((), True)) == (HorizonPosition.ABOVE,)
    assert crossing_signature(_scan((), False)) == (HorizonPosition.BELOW,)
    assert crossing_signature(_scan((RISE, SET), False)) == (RISE, SET)


@pytest.mark.parametrize(
    "types, starts_above, previous, expected",
    [
        ((), True, None, Solar.POLAR_DAY),
        ((), False, Solar.POLAR_NIGHT, Solar.POLAR_NIGHT),
        ((RISE, SET), False, Solar.RISEN_AND_SET, Solar.RISEN_AND_SET),
        ((SET, RISE), True, Solar.POLAR_DAY, Solar.SET_AND_RISEN),
        ((SET,), True, Solar.POLAR_DAY, Solar.RISEN_AND_SET),
        ((RISE,), False, Solar.POLAR_NIGHT, Solar.SET_AND_RISEN),
        ((RISE, SET, RISE), False, None, Solar.RISEN_AND_SET),
    ],
)
def test_solar_table(types, starts_above, previous, expected):
    assert classify_solar(_scan(types, starts_above), previous) == expected


def test_solar_falls_back_when_prior_disagrees():
    # previous day ended below but today opens with a set
    scan = _scan((SET, RISE), True)
    assert classify_solar(scan, Solar.RISEN_AND_SET) == Solar.SET_AND_RISEN


def test_solar_long_pattern_uses_leading_event():
    scan = _scan((RISE, SET, RISE, SET), False)
    assert classify_solar(scan, None) == Solar.RISEN_AND_SET


@pytest.mark.parametrize(
    "types, starts_above, previous, expected",
    [
        ((), True, Lunar.FULL_DAY, Lunar.FULL_DAY),
        ((), False, None, Lunar.FULL_NIGHT),
        ((RISE, SET), False, Lunar.RISEN_AND_SET, Lunar.RISEN_AND_SET),
        ((SET, RISE), True, Lunar.ONLY_RISEN, Lunar.SET_AND_RISEN),
        ((SET, RISE, SET), True, Lunar.SET_AND_RISEN, Lunar.SET_RISE_SET),
        ((SET,), True, Lunar.SET_AND_RISEN, Lunar.ONLY_SET),
        ((RISE,), False, Lunar.SET_RISE_SET, Lunar.ONLY_RISEN),
    ],
)
def test_lunar_table(types, starts_above, previous, expected):
    assert classify_lunar(_scan(types, starts_above), previous) == expected


def test_lunar_inconsistent_pattern_is_error(caplog):
    scan = _scan((RISE, SET), False)
    with caplog.at_level("WARNING"):
        state = classify_lunar(scan, Lunar.FULL_DAY)
    assert state == Lunar.ERROR
    assert "lunar_classification_unresolved" in caplog.text


def test_lunar_unknown_pattern_is_error():
    scan = _scan((RISE, SET, RISE), False)
    assert classify_lunar(scan, None) == Lunar.ERROR


def test_error_has_no_end_condition():
    assert lunar_ends_up(Lunar.ERROR) is None
    assert lunar_ends_up(Lunar.ONLY_RISEN) is True
    assert lunar_ends_up(Lunar.RISEN_AND_SET) is False
