from datetime import date, datetime, time

import pytest

from fakes import DAY_SHIFT, NIGHT_SHIFT, TZ, dt
from hr_attendance.core.enums import ShiftKind
from hr_attendance.core.exceptions import ValidationError
from hr_attendance.shifts.model import AdminConfig, ShiftConfig
from hr_attendance.shifts.window import ShiftWindowCalculator

D = date(2024, 5, 1)
NEXT = date(2024, 5, 2)


def test_day_window_boundaries():
    w = ShiftWindowCalculator(TZ).window(shift=DAY_SHIFT, kind=ShiftKind.DAY, anchor_date=D)

    assert w.earliest_allowed == dt(D, 8)
    assert w.window_start == dt(D, 9)
    assert w.grace_cutoff == dt(D, 9, 15)
    assert w.window_end == dt(D, 18)
    assert w.latest_allowed_checkout == dt(D, 19)
    assert w.earliest_allowed <= w.window_start <= w.grace_cutoff < w.window_end


def test_day_latest_checkout_is_capped_at_22():
    shift = ShiftConfig.from_strings("13:00", "21:30")
    w = ShiftWindowCalculator(TZ).window(shift=shift, kind=ShiftKind.DAY, anchor_date=D)

    assert w.latest_allowed_checkout == dt(D, 22, 30)
    assert w.grace_cutoff == w.window_start


def test_night_window_crosses_midnight():
    w = ShiftWindowCalculator(TZ).window(shift=NIGHT_SHIFT, kind=ShiftKind.NIGHT, anchor_date=D)

    assert w.earliest_allowed == dt(D, 21)
    assert w.window_start == dt(D, 22)
    assert w.grace_cutoff == dt(D, 22, 15)
    assert w.window_end == dt(NEXT, 6)
    assert w.latest_allowed_checkout == dt(NEXT, 7)


def test_night_latest_checkout_late_in_the_evening_is_end_of_anchor_day():
    now = dt(D, 23)
    w = ShiftWindowCalculator(TZ).window(shift=NIGHT_SHIFT, kind=ShiftKind.NIGHT, anchor_date=D, now=now)

    assert w.latest_allowed_checkout == datetime.combine(D, time.max, tzinfo=TZ)


def test_night_grace_before_start_clock_lands_on_next_day():
    shift = ShiftConfig.from_strings("22:00", "06:00", "00:30")
    w = ShiftWindowCalculator(TZ).window(shift=shift, kind=ShiftKind.NIGHT, anchor_date=D)

    assert w.grace_cutoff == dt(NEXT, 0, 30)
    assert w.window_start < w.grace_cutoff < w.window_end


def test_grace_before_start_on_day_shift_is_clamped():
    shift = ShiftConfig.from_strings("09:00", "18:00", "08:45")
    w = ShiftWindowCalculator(TZ).window(shift=shift, kind=ShiftKind.DAY, anchor_date=D)

    assert w.grace_cutoff == w.window_start


@pytest.mark.parametrize(
    "now, expected",
    [
        (dt(NEXT, 3), D),
        (dt(NEXT, 0, 5), D),
        (dt(NEXT, 6, 30), D),
        (dt(NEXT, 7), NEXT),
        (dt(D, 22, 30), D),
    ],
)
def test_night_anchor_date(now, expected):
    calc = ShiftWindowCalculator(TZ)

    assert calc.resolve_anchor_date(shift=NIGHT_SHIFT, kind=ShiftKind.NIGHT, now=now) == expected


def test_day_anchor_date_is_calendar_date():
    calc = ShiftWindowCalculator(TZ)

    assert calc.resolve_anchor_date(shift=DAY_SHIFT, kind=ShiftKind.DAY, now=dt(NEXT, 3)) == NEXT


def test_anchor_date_reads_utc_instants_in_organization_timezone():
    calc = ShiftWindowCalculator(TZ)
    # 2024-05-01 20:00 UTC is 02:00 on May 2nd in Dhaka.
    now = datetime.fromisoformat("2024-05-01T20:00:00+00:00")

    assert calc.resolve_anchor_date(shift=NIGHT_SHIFT, kind=ShiftKind.NIGHT, now=now) == D


def test_window_is_idempotent():
    calc = ShiftWindowCalculator(TZ)

    first = calc.window(shift=NIGHT_SHIFT, kind=ShiftKind.NIGHT, anchor_date=D)
    second = calc.window(shift=NIGHT_SHIFT, kind=ShiftKind.NIGHT, anchor_date=D)

    assert first == second


def test_checkout_candidates_order():
    calc = ShiftWindowCalculator(TZ)

    assert calc.checkout_candidates(shift=NIGHT_SHIFT, kind=ShiftKind.NIGHT, now=dt(NEXT, 7)) == [D, NEXT]
    assert calc.checkout_candidates(shift=NIGHT_SHIFT, kind=ShiftKind.NIGHT, now=dt(NEXT, 8)) == [NEXT, D]
    assert calc.checkout_candidates(shift=DAY_SHIFT, kind=ShiftKind.DAY, now=dt(NEXT, 2)) == [NEXT, D]


def test_auto_checkout_instant_is_shift_end():
    calc = ShiftWindowCalculator(TZ)

    assert calc.auto_checkout_at(shift=DAY_SHIFT, kind=ShiftKind.DAY, anchor_date=D) == dt(D, 18)
    assert calc.auto_checkout_at(shift=NIGHT_SHIFT, kind=ShiftKind.NIGHT, anchor_date=D) == dt(NEXT, 6)


def test_shift_config_parsing_and_crossing():
    shift = ShiftConfig.from_strings("22:00", "06:00")

    assert shift.crosses_midnight
    assert shift.effective_grace == time(22, 0)
    assert not DAY_SHIFT.crosses_midnight
    assert shift.to_dict() == {"start": "22:00", "grace": "22:00", "end": "06:00"}


def test_shift_config_rejects_bad_clock():
    with pytest.raises(ValidationError):
        ShiftConfig.from_strings("25:00", "06:00")


def test_missing_night_config_is_a_validation_error():
    config = AdminConfig(working_hours=DAY_SHIFT)

    assert config.shift_for(ShiftKind.DAY) == DAY_SHIFT
    with pytest.raises(ValidationError):
        config.shift_for(ShiftKind.NIGHT)
