import re
from datetime import date, datetime, timedelta

import pytest

from utils.pay_period import (
    adjusted_payday_for_month,
    get_current_pay_period,
    get_current_pay_period_key,
    get_current_pay_period_start,
)


def test_payday_never_on_weekend():
    for year in range(2000, 2041):
        for month_index in range(12):
            assert adjusted_payday_for_month(year, month_index).weekday() < 5


@pytest.mark.parametrize("year, month_index, expected", [
    (2026, 0, date(2026, 1, 15)),    # Thursday, unchanged
    (2026, 1, date(2026, 2, 13)),    # Sunday -> Friday
    (2026, 7, date(2026, 8, 14)),    # Saturday -> Friday
    (2026, 10, date(2026, 11, 13)),  # Sunday -> Friday
])
def test_adjusted_payday(year, month_index, expected):
    assert adjusted_payday_for_month(year, month_index) == expected


def test_adjusted_paydays_are_fridays_when_moved():
    for year in range(2020, 2031):
        for month_index in range(12):
            payday = adjusted_payday_for_month(year, month_index)
            if payday.day != 15:
                assert payday.weekday() == 4


def test_month_index_underflow_and_overflow():
    assert adjusted_payday_for_month(2026, -1) == date(2025, 12, 15)
    assert adjusted_payday_for_month(2025, 12) == date(2026, 1, 15)


def test_before_adjusted_payday_uses_previous_month():
    # Feb 15 2026 is a Sunday, so February's payday is the 13th
    assert get_current_pay_period_start(date(2026, 2, 10)) == date(2026, 1, 15)


def test_on_and_after_adjusted_payday():
    assert get_current_pay_period_start(date(2026, 2, 13)) == date(2026, 2, 13)
    assert get_current_pay_period_start(date(2026, 2, 14)) == date(2026, 2, 13)
    assert get_current_pay_period_start(date(2026, 3, 1)) == date(2026, 2, 13)


def test_year_boundary():
    assert get_current_pay_period_start(date(2026, 1, 3)) == date(2025, 12, 15)
    assert get_current_pay_period_key(date(2026, 1, 3)) == "2025-12-15"


def test_datetime_reference_compares_by_timestamp():
    assert get_current_pay_period_start(datetime(2026, 2, 13, 0, 0)) == date(2026, 2, 13)
    assert get_current_pay_period_start(datetime(2026, 2, 13, 23, 59)) == date(2026, 2, 13)
    assert get_current_pay_period_start(datetime(2026, 2, 12, 23, 59)) == date(2026, 1, 15)


def test_key_is_zero_padded():
    pattern = re.compile(r"^\d{4}-\d{2}-\d{2}$")
    d = date(2025, 1, 1)
    while d < date(2027, 1, 1):
        key = get_current_pay_period_key(d)
        assert pattern.match(key)
        assert key == get_current_pay_period_start(d).isoformat()
        d += timedelta(days=5)


def test_current_pay_period_has_end_at_next_payday():
    period = get_current_pay_period(date(2026, 2, 10))
    assert period.start == date(2026, 1, 15)
    assert period.key == "2026-01-15"
    assert period.end == date(2026, 2, 13)

    december = get_current_pay_period(date(2025, 12, 20))
    assert december.end == date(2026, 1, 15)
