from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional


def calculate_shift_hours(start_time: time, end_time: time, break_minutes: int = 0) -> float:
    """Return the paid hours of a shift after deducting its break.

    Args:
        start_time: Scheduled start.
        end_time: Scheduled end. An end before the start is treated as an overnight shift.
        break_minutes: Unpaid break inside the shift.

    Returns:
        float: Paid hours (never below zero).
    """
    start_datetime = datetime.combine(date.min, start_time)
    end_datetime = datetime.combine(date.min, end_time)

    # Handle overnight shifts
    if end_datetime < start_datetime:
        end_datetime += timedelta(days=1)

    total_minutes = (end_datetime - start_datetime).total_seconds() / 60
    working_minutes = total_minutes - (break_minutes or 0)
    return max(0.0, working_minutes / 60)


def total_shift_hours(shifts: Iterable) -> float:
    """Sum of paid hours across shift-like objects (start_time, end_time, break_minutes)."""
    return sum(
        calculate_shift_hours(s.start_time, s.end_time, s.break_minutes) for s in shifts
    )


def worked_hours(check_in: Optional[time], check_out: Optional[time], break_minutes: int = 0) -> Optional[float]:
    """Hours between a check-in and check-out pair, or None while still checked in."""
    if check_in is None or check_out is None:
        return None
    return calculate_shift_hours(check_in, check_out, break_minutes)
