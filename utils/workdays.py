from datetime import date, timedelta


def count_weekdays(start: date, end: date) -> int:
    """Number of Monday-Friday days in the inclusive range ``start``..``end``.

    Weekends never count. An inverted range counts zero days.
    """
    if end < start:
        return 0

    total_days = (end - start).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    weekdays = full_weeks * 5

    # Walk the leftover days (fewer than a week)
    day = start + timedelta(days=full_weeks * 7)
    for _ in range(remainder):
        if day.weekday() < 5:
            weekdays += 1
        day += timedelta(days=1)

    return weekdays
