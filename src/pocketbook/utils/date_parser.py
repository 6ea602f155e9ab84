"""Date and period parsing utilities."""

from datetime import date, datetime, time, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

BUDGET_PERIODS = ("monthly", "yearly")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and a few
    relative ones: "today", "yesterday", "tomorrow" and "last/this/next"
    followed by "month" or "year" (first day of that period).

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    offsets = {"last": -1, "this": 0, "next": 1}
    words = date_str.split()
    if len(words) == 2 and words[0] in offsets:
        offset = offsets[words[0]]
        if words[1] == "month":
            return (today + relativedelta(months=offset)).replace(day=1)
        if words[1] == "year":
            return today.replace(month=1, day=1) + relativedelta(years=offset)

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named reporting period.

    Args:
        period: One of this-month, this-year, last-month, last-year

    Returns:
        Tuple of (start_date, end_date); "this" periods end today

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        return (today.replace(day=1), today)

    if period == "this-year":
        return (today.replace(month=1, day=1), today)

    if period == "last-month":
        start_date = (today - relativedelta(months=1)).replace(day=1)
        end_date = today.replace(day=1) - timedelta(days=1)
        return (start_date, end_date)

    if period == "last-year":
        start_date = today.replace(month=1, day=1) - relativedelta(years=1)
        end_date = today.replace(month=1, day=1) - timedelta(days=1)
        return (start_date, end_date)

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-month, this-year, last-month, last-year"
    )


def resolve_period_window(period: str, reference: datetime) -> tuple[datetime, datetime]:
    """Resolve a budget period keyword into explicit window instants.

    The window is the calendar month or year containing ``reference``, from
    its first instant up to the last microsecond of its last day.

    Raises:
        ValueError: If period is not "monthly" or "yearly"
    """
    period = period.strip().lower()
    if period == "monthly":
        first_day = reference.date().replace(day=1)
        next_first = first_day + relativedelta(months=1)
    elif period == "yearly":
        first_day = reference.date().replace(month=1, day=1)
        next_first = first_day + relativedelta(years=1)
    else:
        raise ValueError(
            f"Unknown budget period: '{period}'. Supported periods: {', '.join(BUDGET_PERIODS)}"
        )

    start = datetime.combine(first_day, time.min)
    end = datetime.combine(next_first - timedelta(days=1), time.max)
    return (start, end)


def day_window(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """Expand an inclusive date range into window instants covering whole days."""
    return (datetime.combine(start_date, time.min), datetime.combine(end_date, time.max))
