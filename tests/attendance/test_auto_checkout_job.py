from datetime import date

from fakes import InMemoryAttendance, dt, record
from hr_attendance.attendance.auto_checkout import AutoCheckoutJob
from hr_attendance.core.enums import CheckoutSource, ShiftKind

D = date(2024, 5, 1)
NEXT = date(2024, 5, 2)


class ExplodingAttendance(InMemoryAttendance):
    def close(self, *, attendance_id, check_out, source):
        if attendance_id == 1:
            raise RuntimeError("connection lost")
        return super().close(attendance_id=attendance_id, check_out=check_out, source=source)


def test_day_record_is_closed_just_after_the_hour_past_shift_end(container, repos):
    attendance = repos["attendance_repo"]
    attendance.add(record(1, 1, D, dt(D, 9)))

    result = container.auto_checkout_job.run(now=dt(D, 19, 1), process_all=True)

    closed = attendance.get_by_id(1)
    assert closed.check_out == dt(D, 18)
    assert closed.checkout_source == CheckoutSource.AUTO
    assert closed.is_auto_checkout
    assert (result.processed, result.day_shift, result.failed) == (1, 1, 0)


def test_record_is_left_open_exactly_one_hour_after_shift_end(container, repos):
    attendance = repos["attendance_repo"]
    attendance.add(record(1, 1, D, dt(D, 9)))

    result = container.auto_checkout_job.run(now=dt(D, 19), process_all=True)

    assert attendance.get_by_id(1).check_out is None
    assert (result.processed, result.skipped) == (0, 1)


def test_record_is_left_open_before_grace_passes(container, repos):
    attendance = repos["attendance_repo"]
    attendance.add(record(1, 1, D, dt(D, 9)))

    result = container.auto_checkout_job.run(now=dt(D, 17), process_all=True)

    assert attendance.get_by_id(1).check_out is None
    assert result.processed == 0
    assert result.skipped == 1


def test_default_mode_skips_yesterdays_night_shift(container, repos):
    attendance = repos["attendance_repo"]
    attendance.add(record(1, 1, D, dt(D, 9)))
    attendance.add(record(2, 2, D, dt(D, 22), kind=ShiftKind.NIGHT))

    result = container.auto_checkout_job.run(now=dt(NEXT, 8))

    assert result.scope == "2024-05-01"
    assert attendance.get_by_id(1).check_out == dt(D, 18)
    assert attendance.get_by_id(2).check_out is None
    assert (result.scanned, result.processed, result.skipped) == (2, 1, 1)


def test_process_all_closes_night_shift_at_next_morning_end(container, repos):
    attendance = repos["attendance_repo"]
    attendance.add(record(2, 2, D, dt(D, 22), kind=ShiftKind.NIGHT))

    result = container.auto_checkout_job.run(now=dt(NEXT, 7, 1), process_all=True)

    assert attendance.get_by_id(2).check_out == dt(NEXT, 6)
    assert result.night_shift == 1
    assert result.scope == "all dates"


def test_closed_records_are_not_touched(container, repos):
    attendance = repos["attendance_repo"]
    attendance.add(record(1, 1, D, dt(D, 9), dt(D, 17), checkout_source=CheckoutSource.MANUAL))

    result = container.auto_checkout_job.run(now=dt(NEXT, 8), process_all=True)

    assert attendance.get_by_id(1).check_out == dt(D, 17)
    assert result.scanned == 0


def test_one_failure_does_not_stop_the_batch(repos, classifier):
    attendance = ExplodingAttendance()
    attendance.add(record(1, 1, D, dt(D, 9)))
    attendance.add(record(2, 2, D, dt(D, 9)))
    job = AutoCheckoutJob(attendance, repos["configs_repo"], classifier=classifier)

    result = job.run(now=dt(NEXT, 8), process_all=True)

    assert (result.processed, result.failed) == (1, 1)
    assert attendance.get_by_id(2).check_out == dt(D, 18)


def test_missing_config_processes_nothing(container, repos):
    repos["attendance_repo"].add(record(1, 1, D, dt(D, 9)))
    repos["configs_repo"].config = None

    result = container.auto_checkout_job.run(now=dt(NEXT, 8), process_all=True)

    assert result.processed == 0
    assert repos["attendance_repo"].get_by_id(1).check_out is None


def test_overlapping_run_returns_immediately(container, repos):
    repos["attendance_repo"].add(record(1, 1, D, dt(D, 9)))
    job = container.auto_checkout_job

    job._lock.acquire()
    try:
        result = job.run(now=dt(NEXT, 8), process_all=True)
    finally:
        job._lock.release()

    assert result.already_running
    assert repos["attendance_repo"].get_by_id(1).check_out is None
    assert result.to_dict()["already_running"] is True
