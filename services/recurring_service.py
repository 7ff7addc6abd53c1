import math
import sqlite3
from datetime import date, datetime
from models.recurring_rule import RecurringRule
from database.db_manager import DatabaseManager
from database.recurring_dao import RecurringDAO
from services.budget_service import BudgetService
from services.recurring_engine import AutomationResult, find_due_rules, next_due_date
from utils.constants import FREQUENCIES, RULE_TYPES
from utils.date_helpers import as_date, format_date, today
from utils.logging_setup import get_logger

log = get_logger("recurring")


class RecurringService:
    def __init__(
        self,
        recurring_dao: RecurringDAO,
        budget_service: BudgetService,
        db: DatabaseManager,
    ):
        self._dao = recurring_dao
        self._budget = budget_service
        self._db = db

    def get_all(self) -> list[RecurringRule]:
        return self._dao.get_all()

    def get_by_id(self, rule_id: int) -> RecurringRule | None:
        return self._dao.get_by_id(rule_id)

    def create(
        self,
        name: str,
        type_: str,
        amount: float,
        category_id: int | None,
        frequency: str,
        day_of_month: int | None = None,
        day_of_week: int | None = None,
    ) -> RecurringRule:
        day_of_month, day_of_week = self._validate(
            name, type_, amount, frequency, day_of_month, day_of_week
        )
        rule = self._dao.create(
            name=name.strip(), type_=type_, amount=amount, category_id=category_id,
            frequency=frequency, day_of_month=day_of_month, day_of_week=day_of_week,
        )
        log.info("Created recurring rule %s (%s)", rule.id, rule.name)
        return rule

    def update(
        self,
        rule_id: int,
        name: str,
        type_: str,
        amount: float,
        category_id: int | None,
        frequency: str,
        day_of_month: int | None = None,
        day_of_week: int | None = None,
    ) -> RecurringRule:
        """Edit a rule's definition. last_applied is kept as-is."""
        day_of_month, day_of_week = self._validate(
            name, type_, amount, frequency, day_of_month, day_of_week
        )
        rule = self._dao.update(
            rule_id=rule_id, name=name.strip(), type_=type_, amount=amount,
            category_id=category_id, frequency=frequency,
            day_of_month=day_of_month, day_of_week=day_of_week,
        )
        if rule is None:
            raise ValueError("Recurring rule no longer exists.")
        return rule

    def delete(self, rule_id: int):
        self._dao.delete(rule_id)

    def next_due_date(self, rule: RecurringRule, after: date | None = None) -> date | None:
        """Return the next date the rule is due after `after` (default: today)."""
        return next_due_date(rule, after or today())

    def find_due_rules(self, reference_date: date | datetime | None = None) -> list[RecurringRule]:
        return find_due_rules(self._dao.get_all(), reference_date or today())

    def apply_rules(
        self, rules: list[RecurringRule], reference_date: date | datetime
    ) -> AutomationResult:
        """
        Apply each rule on reference_date: budget effect, transaction, last_applied.
        Each rule is its own DB transaction; a failing rule is rolled back,
        reported in failed_names and does not stop the others.
        """
        on_date = as_date(reference_date)
        day_str = format_date(on_date)
        result = AutomationResult()

        for rule in rules:
            try:
                with self._db.transaction():
                    tx = self._budget.apply_recurring(rule, on_date, commit=False)
                    self._dao.update_last_applied(rule.id, day_str, commit=False)
            except sqlite3.Error:
                log.exception("Failed to apply recurring rule %s (%s)", rule.id, rule.name)
                result.failed_names.append(rule.name)
                continue
            rule.last_applied = day_str
            result.applied_names.append(rule.name)
            result.transactions.append(tx)
            log.info("Applied recurring rule %s (%s) for %s", rule.id, rule.name, day_str)

        return result

    def check_and_apply_recurring(
        self, reference_date: date | datetime | None = None
    ) -> AutomationResult:
        """Apply every rule due on reference_date (default: today). Safe to repeat."""
        ref = as_date(reference_date or today())
        return self.apply_rules(self.find_due_rules(ref), ref)

    def _validate(self, name, type_, amount, frequency, day_of_month, day_of_week):
        if not name or not name.strip():
            raise ValueError("Name cannot be empty.")
        if type_ not in RULE_TYPES:
            raise ValueError("Type must be income or expense.")
        if not isinstance(amount, (int, float)) or not math.isfinite(amount) or amount < 0:
            raise ValueError("Amount must be zero or more.")
        if frequency not in FREQUENCIES:
            raise ValueError("Frequency must be monthly or weekly.")

        if frequency == "monthly":
            day = 1 if day_of_month is None else day_of_month
            if not isinstance(day, int) or not 1 <= day <= 31:
                raise ValueError("Day of month must be 1-31.")
            return day, None

        day = 1 if day_of_week is None else day_of_week
        if not isinstance(day, int) or not 0 <= day <= 6:
            raise ValueError("Day of week must be 0 (Sunday) to 6 (Saturday).")
        return None, day
