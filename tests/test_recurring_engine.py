import logging
from datetime import date, datetime

import pytest

from models.recurring_rule import MonthlySchedule, RecurringRule, WeeklySchedule
from services.recurring_engine import find_due_rules, is_due, next_due_date, rule_problem


def monthly_rule(day=15, last_applied=None, name="Salary", rule_id=1):
    return RecurringRule(
        id=rule_id, name=name, type="income", amount=100.0, category_id=None,
        schedule=MonthlySchedule(day), last_applied=last_applied,
    )


def weekly_rule(day=1, last_applied=None, name="Cleaner", rule_id=2):
    return RecurringRule(
        id=rule_id, name=name, type="expense", amount=40.0, category_id=None,
        schedule=WeeklySchedule(day), last_applied=last_applied,
    )


def broken_rule(name="Broken", rule_id=3, **overrides):
    fields = dict(
        id=rule_id, name=name, type="expense", amount=10.0, category_id=None,
        schedule=None, raw_frequency="monthly",
    )
    fields.update(overrides)
    return RecurringRule(**fields)


class TestMonthly:
    def test_due_on_scheduled_day_when_never_applied(self):
        assert is_due(monthly_rule(15), date(2026, 3, 15))

    def test_not_due_on_other_days(self):
        assert not is_due(monthly_rule(15), date(2026, 3, 14))
        assert not is_due(monthly_rule(15), date(2026, 3, 16))

    def test_not_due_twice_in_same_month(self):
        rule = monthly_rule(15, last_applied="2026-03-15")
        assert not is_due(rule, date(2026, 3, 15))

    def test_applied_earlier_in_same_month_blocks(self):
        # e.g. the schedule day was edited after this month's application
        rule = monthly_rule(20, last_applied="2026-03-02")
        assert not is_due(rule, date(2026, 3, 20))

    def test_due_again_next_month(self):
        rule = monthly_rule(15, last_applied="2026-02-15")
        assert is_due(rule, date(2026, 3, 15))

    def test_same_month_previous_year_is_due(self):
        rule = monthly_rule(15, last_applied="2025-03-15")
        assert is_due(rule, date(2026, 3, 15))

    @pytest.mark.parametrize("today, expected", [
        (date(2026, 2, 28), True),
        (date(2028, 2, 29), True),
        (date(2028, 2, 28), False),
        (date(2026, 4, 30), True),
        (date(2026, 3, 30), False),
        (date(2026, 3, 31), True),
    ])
    def test_day_beyond_month_end_fires_on_last_day(self, today, expected):
        assert is_due(monthly_rule(31), today) is expected

    def test_accepts_datetime(self):
        assert is_due(monthly_rule(15), datetime(2026, 3, 15, 8, 30))

    def test_full_iso_timestamp_in_last_applied(self):
        rule = monthly_rule(15, last_applied="2026-03-15T09:00:00")
        assert not is_due(rule, date(2026, 3, 15))


class TestWeekly:
    def test_due_one_week_after_last(self):
        rule = weekly_rule(1, last_applied="2026-03-02")
        assert is_due(rule, date(2026, 3, 9))

    def test_weekday_mismatch(self):
        rule = weekly_rule(1, last_applied="2026-03-02")
        assert not is_due(rule, date(2026, 3, 3))

    def test_never_applied_due_on_weekday(self):
        assert is_due(weekly_rule(1), date(2026, 3, 2))

    def test_sunday_is_zero(self):
        assert is_due(weekly_rule(0), date(2026, 3, 15))
        assert is_due(weekly_rule(6), date(2026, 3, 14))

    def test_not_twice_on_same_day(self):
        rule = weekly_rule(1, last_applied="2026-03-09")
        assert not is_due(rule, date(2026, 3, 9))

    def test_no_second_application_within_seven_days(self):
        # Last applied on a Friday under an older schedule
        rule = weekly_rule(1, last_applied="2026-03-06")
        assert not is_due(rule, date(2026, 3, 9))
        assert is_due(rule, date(2026, 3, 16))


class TestGuards:
    def test_last_applied_in_future_is_not_due(self):
        assert not is_due(monthly_rule(15, last_applied="2026-04-15"), date(2026, 3, 15))
        assert not is_due(weekly_rule(1, last_applied="2026-03-16"), date(2026, 3, 9))

    def test_malformed_rule_is_never_due(self):
        assert rule_problem(broken_rule()) is not None
        assert not is_due(broken_rule(), date(2026, 3, 15))

    def test_unreadable_last_applied_is_never_due(self):
        rule = monthly_rule(15, last_applied="not-a-date")
        assert rule_problem(rule)
        assert not is_due(rule, date(2026, 3, 15))

    def test_unknown_type_is_never_due(self):
        rule = monthly_rule(15)
        rule.type = "transfer"
        assert not is_due(rule, date(2026, 3, 15))

    @pytest.mark.parametrize("amount", [float("inf"), float("nan"), -5.0])
    def test_non_finite_or_negative_amount_is_never_due(self, amount):
        rule = monthly_rule(15)
        rule.amount = amount
        assert rule_problem(rule)
        assert not is_due(rule, date(2026, 3, 15))


class TestFindDueRules:
    def test_keeps_input_order_and_skips_not_due(self):
        rules = [
            monthly_rule(15, name="Salary", rule_id=1),
            weekly_rule(1, name="Cleaner", rule_id=2),
            monthly_rule(15, name="Bonus", rule_id=3),
        ]
        due = find_due_rules(rules, date(2026, 3, 15))
        assert [r.name for r in due] == ["Salary", "Bonus"]

    def test_malformed_rule_does_not_block_others(self, caplog):
        rules = [broken_rule(name="Broken"), monthly_rule(15, name="Salary")]
        with caplog.at_level(logging.WARNING, logger="payday_budget"):
            due = find_due_rules(rules, date(2026, 3, 15))
        assert [r.name for r in due] == ["Salary"]
        assert "Broken" in caplog.text

    def test_does_not_modify_rules(self):
        rule = monthly_rule(15)
        find_due_rules([rule], date(2026, 3, 15))
        assert rule.last_applied is None


class TestNextDueDate:
    def test_monthly_after_application(self):
        rule = monthly_rule(15, last_applied="2026-03-15")
        assert next_due_date(rule, date(2026, 3, 15)) == date(2026, 4, 15)

    def test_monthly_same_day_not_applied_yet_is_next_month(self):
        # strictly after `after`
        assert next_due_date(monthly_rule(15), date(2026, 3, 15)) == date(2026, 4, 15)

    def test_monthly_short_month(self):
        assert next_due_date(monthly_rule(31), date(2026, 2, 1)) == date(2026, 2, 28)

    def test_weekly(self):
        rule = weekly_rule(1, last_applied="2026-03-09")
        assert next_due_date(rule, date(2026, 3, 9)) == date(2026, 3, 16)

    def test_malformed(self):
        assert next_due_date(broken_rule(), date(2026, 3, 9)) is None
