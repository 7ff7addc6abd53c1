from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class MonthlySchedule:
    day: int                # 1-31, clamped to the month's last day

    frequency = "monthly"


@dataclass(frozen=True)
class WeeklySchedule:
    day: int                # 0=Sun..6=Sat

    frequency = "weekly"


Schedule = Union[MonthlySchedule, WeeklySchedule]


def _valid_int(value, low: int, high: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high


def schedule_from_fields(
    frequency: str,
    day_of_month: int | None = None,
    day_of_week: int | None = None,
) -> Schedule | None:
    """Build the schedule for a stored rule; None when the fields don't fit the frequency."""
    if frequency == "monthly" and _valid_int(day_of_month, 1, 31):
        return MonthlySchedule(day_of_month)
    if frequency == "weekly" and _valid_int(day_of_week, 0, 6):
        return WeeklySchedule(day_of_week)
    return None


@dataclass
class RecurringRule:
    id: int
    name: str
    type: str               # 'income' | 'expense'
    amount: float
    category_id: Optional[int]
    schedule: Optional[Schedule]   # None = malformed, never due
    last_applied: Optional[str] = None   # 'YYYY-MM-DD'
    category_name: str = ""
    raw_frequency: str = ""

    @property
    def frequency(self) -> str:
        return self.schedule.frequency if self.schedule else self.raw_frequency

    @property
    def day_of_month(self) -> int | None:
        return self.schedule.day if isinstance(self.schedule, MonthlySchedule) else None

    @property
    def day_of_week(self) -> int | None:
        return self.schedule.day if isinstance(self.schedule, WeeklySchedule) else None
