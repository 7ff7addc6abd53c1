from datetime import date, datetime
import calendar
from utils.constants import DATE_FORMAT

# ── Display date format options ───────────────────────────────────────────────

_STRFTIME_MAP = {
    "MM/DD/YYYY": "%m/%d/%Y",
    "DD/MM/YYYY": "%d/%m/%Y",
    "YYYY-MM-DD": "%Y-%m-%d",
    "DD.MM.YYYY": "%d.%m.%Y",
    "MM-DD-YYYY": "%m-%d-%Y",
}


def today() -> date:
    return date.today()


def as_date(value: date | datetime) -> date:
    """Drop the time part of a datetime; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def local_date_key(value: date | datetime) -> str:
    """YYYY-MM-DD from the local calendar fields, no timezone conversion."""
    d = as_date(value)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def sunday_weekday(d: date) -> int:
    """Day of week with Sunday=0 .. Saturday=6."""
    return (d.weekday() + 1) % 7


def parse_date(date_str: str | None) -> date | None:
    """Parse a date string in YYYY-MM-DD format, returning None on failure.

    Full ISO timestamps (e.g. '2026-03-15T08:30:00') are accepted and reduced
    to their date part.
    """
    if not date_str:
        return None
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(date_str).date()
    except ValueError:
        return None


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    return min(day, days_in_month(year, month))


def shift_month(year: int, month_index: int) -> tuple[int, int]:
    """Normalize a 0-based month index that may under/overflow.

    Returns (year, month) with month in 1..12, e.g. (2026, -1) -> (2025, 12).
    """
    year += month_index // 12
    return year, month_index % 12 + 1


def friendly_date(d: date) -> str:
    """e.g. 'Feb 13, 2026'."""
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def format_display_date(date_str: str, fmt_key: str = "MM/DD/YYYY") -> str:
    """Convert a YYYY-MM-DD storage string to the user-facing display format."""
    if not date_str:
        return date_str
    d = parse_date(date_str)
    if d is None:
        return date_str
    return d.strftime(_STRFTIME_MAP.get(fmt_key, "%m/%d/%Y"))


def parse_display_date(display_str: str, fmt_key: str) -> date | None:
    """Parse a date in the given display format. Returns None on failure.

    Falls back to ISO 8601 parse if the display format doesn't match.
    """
    if not display_str:
        return None
    fmt = _STRFTIME_MAP.get(fmt_key, "%m/%d/%Y")
    try:
        return datetime.strptime(display_str.strip(), fmt).date()
    except ValueError:
        return parse_date(display_str)
