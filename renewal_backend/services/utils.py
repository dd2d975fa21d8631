from __future__ import annotations

# renewal_backend/services/utils.py
import calendar
from datetime import date, timedelta


def today() -> date:
    return date.today()


def to_dash(d: date) -> str: return d.isoformat()


def parse_dash(s: str) -> date:
    return date.fromisoformat(str(s)[:10])


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def add_months(d: date, months: int) -> date:
    """Shift by calendar months, clamping the day (Jan 31 + 1 month -> Feb 28/29)."""
    idx = d.year * 12 + (d.month - 1) + months
    y, m = divmod(idx, 12)
    m += 1
    last = calendar.monthrange(y, m)[1]
    return date(y, m, min(d.day, last))


def month_bounds(d: date) -> tuple[date, date]:
    first = d.replace(day=1)
    last = d.replace(day=calendar.monthrange(d.year, d.month)[1])
    return first, last


def month_label(d: date) -> str:
    # e.g. "Oct 2026"
    return f"{calendar.month_abbr[d.month]} {d.year}"


def display_date(value) -> str:
    """US short date without zero padding, e.g. 10/7/2026."""
    d = value if isinstance(value, date) else parse_dash(value)
    return f"{d.month}/{d.day}/{d.year}"
