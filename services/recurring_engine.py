"""Decides which recurring rules are due on a given day.

Everything here is pure: rules are only read. Applying the due rules (writing
transactions, advancing last_applied) is RecurringService's job, so a failed
write can be retried without re-running the scan.
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from models.recurring_rule import MonthlySchedule, RecurringRule, WeeklySchedule
from models.transaction import Transaction
from utils.constants import RULE_TYPES, WEEKLY_MIN_GAP_DAYS
from utils.date_helpers import as_date, clamp_day_to_month, parse_date, sunday_weekday
from utils.logging_setup import get_logger

log = get_logger("recurring")

# Longest gap between two firings is a 31st-of-month rule skipping short months.
_SEARCH_HORIZON_DAYS = 400


@dataclass
class AutomationResult:
    applied_names: list[str] = field(default_factory=list)
    failed_names: list[str] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def applied_count(self) -> int:
        return len(self.applied_names)


def rule_problem(rule: RecurringRule) -> str | None:
    """Why the rule can never fire, or None if it is well-formed."""
    if rule.schedule is None:
        return f"missing or out-of-range day for frequency {rule.frequency!r}"
    if rule.type not in RULE_TYPES:
        return f"unknown type {rule.type!r}"
    if rule.amount is None or not math.isfinite(rule.amount) or rule.amount < 0:
        return f"invalid amount {rule.amount!r}"
    if rule.last_applied and parse_date(rule.last_applied) is None:
        return f"unreadable last_applied {rule.last_applied!r}"
    return None


def is_due(rule: RecurringRule, today: date | datetime) -> bool:
    """True if the rule should be applied on `today`.

    Monthly: today is the scheduled day (clamped to the month's last day) and
    the rule has not been applied in today's month yet.
    Weekly: today is the scheduled weekday and at least 7 days have passed
    since the last application.
    A last_applied after today never fires, so last_applied cannot go back.
    """
    if rule_problem(rule):
        return False
    today = as_date(today)
    last = parse_date(rule.last_applied) if rule.last_applied else None
    if last and last > today:
        return False

    schedule = rule.schedule
    if isinstance(schedule, MonthlySchedule):
        if today.day != clamp_day_to_month(today.year, today.month, schedule.day):
            return False
        return last is None or (last.year, last.month) != (today.year, today.month)

    if isinstance(schedule, WeeklySchedule):
        if sunday_weekday(today) != schedule.day:
            return False
        return last is None or (today - last).days >= WEEKLY_MIN_GAP_DAYS

    return False


def find_due_rules(rules: list[RecurringRule], today: date | datetime) -> list[RecurringRule]:
    """Due rules in input order. Malformed rules are logged and skipped."""
    due = []
    for rule in rules:
        problem = rule_problem(rule)
        if problem:
            log.warning("Skipping recurring rule %s (%s): %s", rule.id, rule.name, problem)
            continue
        if is_due(rule, today):
            due.append(rule)
    return due


def next_due_date(rule: RecurringRule, after: date | datetime) -> date | None:
    """First date strictly after `after` on which the rule would fire."""
    if rule_problem(rule):
        return None
    d = as_date(after)
    for _ in range(_SEARCH_HORIZON_DAYS):
        d += timedelta(days=1)
        if is_due(rule, d):
            return d
    return None
