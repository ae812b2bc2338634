"""
Billing Period Resolver.

Pure functions with deterministic behavior. No I/O.

Maps a (start date, billing frequency) pair to the inclusive end date of
the billing period.

Rules:
- Default: a customer billed "every N days" gets an inclusive window of N
  days, so end = start + N - 1.
- Calendar-month billing: a 30-day frequency starting on the first of a
  month is billed as that calendar month, ending on its last day
  (28, 29, 30 or 31 days).

Usage:
    from billing_engines.period import resolve_period, build_billing_period

    resolve_period(date(2024, 2, 1), 30)    # date(2024, 2, 29)
    resolve_period(date(2024, 3, 15), 30)   # date(2024, 4, 13)
    period = build_billing_period("C2201", date(2024, 3, 1), 30)
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from billing_engines.tracer import traced_engine
from billing_kernel.domain.dtos import BillingPeriod
from billing_kernel.exceptions import InvalidPeriodError
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.period")

CALENDAR_MONTH_FREQUENCY_DAYS = 30


def is_calendar_month_billing(
    start_date: date,
    frequency_days: int,
    calendar_month_frequency: int = CALENDAR_MONTH_FREQUENCY_DAYS,
) -> bool:
    """True when the calendar-month rule applies to this start and frequency."""
    return frequency_days == calendar_month_frequency and start_date.day == 1


def last_day_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def _validate(start_date: object, frequency_days: object) -> None:
    # datetime is a date subclass; a timestamp is not a billing start date
    if not isinstance(start_date, date) or isinstance(start_date, datetime):
        raise InvalidPeriodError(start_date, frequency_days, "start_date must be a calendar date")
    if isinstance(frequency_days, bool) or not isinstance(frequency_days, int):
        raise InvalidPeriodError(start_date, frequency_days, "frequency_days must be an integer")
    if frequency_days <= 0:
        raise InvalidPeriodError(start_date, frequency_days, "frequency_days must be positive")


def _add_days(start_date: date, days: int) -> date:
    # The window must end on a representable date (date.max is 9999-12-31)
    try:
        return start_date + timedelta(days=days)
    except OverflowError as exc:
        raise InvalidPeriodError(start_date, days + 1, "end date out of range") from exc


@traced_engine("period", "1.0", fingerprint_fields=("start_date", "frequency_days"))
def resolve_period(
    start_date: date,
    frequency_days: int,
    calendar_month_frequency: int = CALENDAR_MONTH_FREQUENCY_DAYS,
) -> date:
    """
    Resolve the inclusive end date of a billing period.

    Pure function - same inputs always produce the same output.

    Args:
        start_date: First day of the period
        frequency_days: Customer billing frequency in days (> 0)
        calendar_month_frequency: Frequency that triggers calendar-month billing

    Returns:
        Inclusive end date, never earlier than start_date

    Raises:
        InvalidPeriodError: If frequency_days <= 0, start_date is not a date,
            or the end date would fall past date.max
    """
    try:
        _validate(start_date, frequency_days)
        if is_calendar_month_billing(start_date, frequency_days, calendar_month_frequency):
            end_date = last_day_of_month(start_date)
            rule = "calendar_month"
        else:
            end_date = _add_days(start_date, frequency_days - 1)
            rule = "day_count"
    except InvalidPeriodError as exc:
        logger.warning("period_resolution_rejected", extra={
            "start_date": exc.start_date,
            "frequency_days": str(frequency_days),
            "reason": exc.reason,
        })
        raise

    logger.debug("period_resolved", extra={
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "frequency_days": frequency_days,
        "rule": rule,
    })
    return end_date


def build_billing_period(
    customer_id: str,
    start_date: date,
    frequency_days: int,
    calendar_month_frequency: int = CALENDAR_MONTH_FREQUENCY_DAYS,
) -> BillingPeriod:
    """Resolve the period window for a customer as a BillingPeriod."""
    end_date = resolve_period(start_date, frequency_days, calendar_month_frequency)
    return BillingPeriod(
        customer_id=customer_id,
        start_date=start_date,
        end_date=end_date,
        frequency_days=frequency_days,
    )


def next_period_start(period: BillingPeriod) -> date:
    """First day of the period that follows ``period``."""
    return period.next_start()
