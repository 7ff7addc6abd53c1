import sqlite3
from datetime import date

import pytest


MAR_15 = date(2026, 3, 15)   # a Sunday


def test_create_monthly_rule(recurring_service):
    rule = recurring_service.create("  Salary ", "income", 2500.0, None, "monthly", day_of_month=15)
    assert rule.name == "Salary"
    assert rule.frequency == "monthly"
    assert rule.day_of_month == 15
    assert rule.day_of_week is None
    assert rule.last_applied is None


def test_create_drops_field_of_other_frequency(recurring_service):
    rule = recurring_service.create(
        "Cleaner", "expense", 40.0, None, "weekly", day_of_month=15, day_of_week=3
    )
    assert rule.day_of_week == 3
    assert rule.day_of_month is None


def test_create_defaults_schedule_day(recurring_service):
    assert recurring_service.create("Rent", "expense", 1.0, None, "monthly").day_of_month == 1
    assert recurring_service.create("Gym", "expense", 1.0, None, "weekly").day_of_week == 1


@pytest.mark.parametrize("kwargs, message", [
    (dict(name=" "), "Name"),
    (dict(type_="transfer"), "Type"),
    (dict(amount=-1.0), "Amount"),
    (dict(amount=float("nan")), "Amount"),
    (dict(frequency="yearly"), "Frequency"),
    (dict(day_of_month=0), "Day of month"),
    (dict(day_of_month=32), "Day of month"),
    (dict(frequency="weekly", day_of_week=7), "Day of week"),
])
def test_create_validation(recurring_service, kwargs, message):
    args = dict(name="Rule", type_="expense", amount=10.0, category_id=None, frequency="monthly")
    args.update(kwargs)
    with pytest.raises(ValueError, match=message):
        recurring_service.create(**args)


def test_update_keeps_last_applied(recurring_service, recurring_dao):
    rule = recurring_service.create("Rent", "expense", 900.0, None, "monthly", day_of_month=1)
    recurring_dao.update_last_applied(rule.id, "2026-03-01")
    updated = recurring_service.update(rule.id, "Rent", "expense", 950.0, None, "weekly", day_of_week=5)
    assert updated.amount == 950.0
    assert updated.frequency == "weekly"
    assert updated.day_of_month is None
    assert updated.last_applied == "2026-03-01"


def test_update_missing_rule(recurring_service):
    with pytest.raises(ValueError):
        recurring_service.update(999, "X", "expense", 1.0, None, "monthly", day_of_month=1)


def test_apply_then_reapply_same_day(recurring_service):
    rule = recurring_service.create("Salary", "income", 2500.0, None, "monthly", day_of_month=15)

    first = recurring_service.check_and_apply_recurring(MAR_15)
    assert first.applied_count == 1
    assert first.applied_names == ["Salary"]
    assert recurring_service.get_by_id(rule.id).last_applied == "2026-03-15"

    second = recurring_service.check_and_apply_recurring(MAR_15)
    assert second.applied_count == 0
    assert second.applied_names == []


def test_monthly_due_weekly_not_due(recurring_service):
    recurring_service.create("Salary", "income", 2500.0, None, "monthly", day_of_month=15)
    recurring_service.create("Cleaner", "expense", 40.0, None, "weekly", day_of_week=1)

    result = recurring_service.check_and_apply_recurring(MAR_15)

    assert result.applied_count == 1
    assert result.applied_names == ["Salary"]
    assert result.failed_names == []


def test_applied_names_follow_rule_order(recurring_service):
    for name in ("Salary", "Rent", "Savings"):
        recurring_service.create(name, "expense", 10.0, None, "monthly", day_of_month=15)
    result = recurring_service.check_and_apply_recurring(MAR_15)
    assert result.applied_names == ["Salary", "Rent", "Savings"]


def test_weekly_rule_applies_each_week(recurring_service):
    rule = recurring_service.create("Cleaner", "expense", 40.0, None, "weekly", day_of_week=1)
    assert recurring_service.check_and_apply_recurring(date(2026, 3, 2)).applied_count == 1
    assert recurring_service.check_and_apply_recurring(date(2026, 3, 3)).applied_count == 0
    assert recurring_service.check_and_apply_recurring(date(2026, 3, 9)).applied_count == 1
    assert recurring_service.get_by_id(rule.id).last_applied == "2026-03-09"


def test_malformed_stored_rule_is_skipped(recurring_service, db):
    db.get_connection().execute(
        """INSERT INTO recurring_rules (name, type, amount, frequency, day_of_month)
           VALUES ('Broken', 'expense', 5, 'monthly', 40)"""
    )
    db.get_connection().commit()
    recurring_service.create("Salary", "income", 2500.0, None, "monthly", day_of_month=15)

    result = recurring_service.check_and_apply_recurring(MAR_15)

    assert result.applied_names == ["Salary"]
    broken = next(r for r in recurring_service.get_all() if r.name == "Broken")
    assert broken.schedule is None
    assert broken.last_applied is None


def test_failed_apply_does_not_block_other_rules(recurring_service, budget_service, monkeypatch):
    recurring_service.create("Rent", "expense", 900.0, None, "monthly", day_of_month=15)
    recurring_service.create("Salary", "income", 2500.0, None, "monthly", day_of_month=15)

    original = budget_service.apply_recurring

    def flaky(rule, on_date, commit=True):
        if rule.name == "Rent":
            raise sqlite3.OperationalError("database is locked")
        return original(rule, on_date, commit=commit)

    monkeypatch.setattr(budget_service, "apply_recurring", flaky)
    result = recurring_service.check_and_apply_recurring(MAR_15)

    assert result.applied_names == ["Salary"]
    assert result.failed_names == ["Rent"]
    rent = next(r for r in recurring_service.get_all() if r.name == "Rent")
    assert rent.last_applied is None

    # a retry the same day only picks up the failed rule
    monkeypatch.setattr(budget_service, "apply_recurring", original)
    retry = recurring_service.check_and_apply_recurring(MAR_15)
    assert retry.applied_names == ["Rent"]


def test_failed_apply_rolls_back_partial_writes(recurring_service, recurring_dao, tx_dao, monkeypatch):
    recurring_service.create("Gym", "expense", 30.0, None, "monthly", day_of_month=15)

    def fail(*args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(recurring_dao, "update_last_applied", fail)
    result = recurring_service.check_and_apply_recurring(MAR_15)

    assert result.failed_names == ["Gym"]
    assert tx_dao.get_all() == []


def test_find_due_rules_has_no_side_effects(recurring_service, tx_dao):
    recurring_service.create("Salary", "income", 2500.0, None, "monthly", day_of_month=15)
    due = recurring_service.find_due_rules(MAR_15)
    assert [r.name for r in due] == ["Salary"]
    assert tx_dao.get_all() == []
    assert recurring_service.find_due_rules(MAR_15)[0].last_applied is None


def test_next_due_date(recurring_service):
    rule = recurring_service.create("Salary", "income", 1.0, None, "monthly", day_of_month=15)
    assert recurring_service.next_due_date(rule, date(2026, 3, 1)) == MAR_15


def test_delete(recurring_service):
    rule = recurring_service.create("Salary", "income", 1.0, None, "monthly", day_of_month=15)
    recurring_service.delete(rule.id)
    assert recurring_service.get_by_id(rule.id) is None
