"""
Return deadlines and late fees.

Rules:
- The return must be initiated within 36 hours of ``end_date``.
- 36-48 h after ``end_date``: half the daily rate.
- Beyond 48 h: the half day plus one daily rate per started 24 h block.
"""

from datetime import datetime
from math import floor, isfinite

RETURN_WINDOW_HOURS = 36
GRACE_PERIOD_HOURS = 12


def _safe_number(value) -> float:
    """NaN, None and unparseable values become 0 instead of propagating."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if isfinite(number) else 0.0


def _hours_between(start: datetime, end: datetime) -> float:
    try:
        return _safe_number((end - start).total_seconds() / 3600)
    except TypeError:
        return 0.0


def calculate_late_fee(end_date: datetime, return_instant: datetime, daily_rate) -> dict:
    rate = max(0.0, _safe_number(daily_rate))
    hours_past_end = _hours_between(end_date, return_instant)

    if hours_past_end <= RETURN_WINDOW_HOURS:
        return {"late_fee": 0.0, "hours_late": 0.0, "days_late": 0.0, "is_late": False}

    hours_late = hours_past_end - RETURN_WINDOW_HOURS

    # Half a day covers the first 12 hours past the window
    late_fee = rate * 0.5
    days_late = 0.5

    if hours_late > GRACE_PERIOD_HOURS:
        overage = hours_late - GRACE_PERIOD_HOURS
        full_days = floor(overage / 24)
        remaining_hours = overage % 24

        late_fee += full_days * rate
        days_late += full_days

        if remaining_hours > 0:
            late_fee += rate
            days_late += 1

    return {
        "late_fee": round(max(0.0, _safe_number(late_fee)), 2),
        "hours_late": round(max(0.0, _safe_number(hours_late)), 2),
        "days_late": round(max(0.0, _safe_number(days_late)), 2),
        "is_late": True,
    }


def is_return_window_open(end_date: datetime, now: datetime | None = None) -> bool:
    now = now or datetime.utcnow()
    return _hours_between(end_date, now) <= RETURN_WINDOW_HOURS


def get_return_window_remaining(end_date: datetime, now: datetime | None = None) -> dict:
    now = now or datetime.utcnow()
    hours_past_end = _hours_between(end_date, now)

    if hours_past_end < 0:
        return {
            "status": "not_started",
            "message": "Rental period not ended yet",
            "hours_remaining": None,
        }

    hours_remaining = RETURN_WINDOW_HOURS - hours_past_end
    if hours_remaining > 0:
        return {
            "status": "open",
            "message": f"{floor(hours_remaining)} hours remaining to initiate return",
            "hours_remaining": round(hours_remaining, 2),
        }

    return {
        "status": "overdue",
        "message": "Return window expired - late fees apply",
        "hours_remaining": 0,
        "hours_overdue": round(abs(hours_remaining), 2),
    }
