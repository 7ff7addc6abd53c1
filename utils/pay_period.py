"""Pay period arithmetic.

A pay period starts on the 15th of each month. When the 15th falls on a
Saturday or Sunday the payday moves back to the preceding Friday, so a payday
is never a weekend day.
"""
from datetime import date, datetime, timedelta
from models.pay_period import PayPeriod
from utils.constants import PAYDAY_DAY_OF_MONTH
from utils.date_helpers import local_date_key, shift_month


def adjusted_payday_for_month(year: int, month_index: int) -> date:
    """Payday for a 0-based month index; -1 is December of the previous year."""
    y, m = shift_month(year, month_index)
    payday = date(y, m, PAYDAY_DAY_OF_MONTH)
    weekday = payday.weekday()
    if weekday == 5:        # Saturday -> Friday
        payday -= timedelta(days=1)
    elif weekday == 6:      # Sunday -> Friday
        payday -= timedelta(days=2)
    return payday


def _on_or_after(reference: date | datetime, payday: date) -> bool:
    # A datetime is compared by timestamp against the payday at midnight.
    if isinstance(reference, datetime):
        midnight = datetime.combine(payday, datetime.min.time(), tzinfo=reference.tzinfo)
        return reference >= midnight
    return reference >= payday


def get_current_pay_period_start(reference: date | datetime | None = None) -> date:
    ref = reference if reference is not None else datetime.now()
    month_index = ref.month - 1
    current = adjusted_payday_for_month(ref.year, month_index)
    if _on_or_after(ref, current):
        return current
    return adjusted_payday_for_month(ref.year, month_index - 1)


def get_current_pay_period_key(reference: date | datetime | None = None) -> str:
    return local_date_key(get_current_pay_period_start(reference))


def get_current_pay_period(reference: date | datetime | None = None) -> PayPeriod:
    start = get_current_pay_period_start(reference)
    return PayPeriod(
        start=start,
        key=local_date_key(start),
        end=adjusted_payday_for_month(start.year, start.month),
    )
