import math
from datetime import date, datetime
from models.category import BudgetCategory
from models.pay_period import PayPeriod
from models.recurring_rule import RecurringRule
from models.transaction import Transaction
from database.db_manager import DatabaseManager
from database.category_dao import CategoryDAO
from database.transaction_dao import TransactionDAO
from utils.constants import CATEGORY_TYPES, DEFAULT_CATEGORIES, DEFAULT_INCOME, MONTHLY_INCOME_KEY
from utils.date_helpers import format_date
from utils.logging_setup import get_logger
from utils.pay_period import get_current_pay_period

log = get_logger("budget")


def clamp_amounts(type_: str, allocated: float, spent: float) -> tuple[float, float]:
    """Fixed categories never carry spending; budget spending stops at the allocation."""
    allocated = max(0.0, allocated)
    if type_ == "fixed":
        return allocated, 0.0
    return allocated, min(max(0.0, spent), allocated)


class BudgetService:
    def __init__(
        self,
        category_dao: CategoryDAO,
        tx_dao: TransactionDAO,
        db: DatabaseManager,
    ):
        self._category_dao = category_dao
        self._tx_dao = tx_dao
        self._db = db

    # ── Categories ────────────────────────────────────────────────────────────
    def get_categories(self) -> list[BudgetCategory]:
        return self._category_dao.get_all()

    def add_category(self, name: str, type_: str) -> BudgetCategory:
        name = name.strip()
        if not name:
            raise ValueError("Category name cannot be empty.")
        if type_ not in CATEGORY_TYPES:
            raise ValueError("Category type must be budget or fixed.")
        if self._category_dao.get_by_name(name):
            raise ValueError(f"A category named '{name}' already exists.")
        return self._category_dao.create(name, type_)

    def update_category_amounts(
        self,
        category_id: int,
        allocated: float | None = None,
        spent: float | None = None,
    ) -> BudgetCategory:
        cat = self._category_dao.get_by_id(category_id)
        if cat is None:
            raise ValueError("Category no longer exists.")
        new_allocated = cat.allocated if allocated is None else _finite_or_zero(allocated)
        new_spent = cat.spent if spent is None else _finite_or_zero(spent)
        new_allocated, new_spent = clamp_amounts(cat.type, new_allocated, new_spent)
        return self._category_dao.update_amounts(category_id, new_allocated, new_spent)

    def remove_category(self, category_id: int):
        self._category_dao.delete(category_id)

    def reorder_categories(self, ordered_ids: list[int]) -> bool:
        """Apply a new display order. Ignored unless it lists every category exactly once."""
        current = {c.id for c in self._category_dao.get_all()}
        if len(ordered_ids) != len(current) or set(ordered_ids) != current:
            return False
        self._category_dao.set_positions(ordered_ids)
        return True

    # ── Income & totals ───────────────────────────────────────────────────────
    def get_income(self) -> float:
        try:
            return float(self._db.get_setting(MONTHLY_INCOME_KEY, "0"))
        except ValueError:
            return 0.0

    def update_income(self, income: float):
        if not isinstance(income, (int, float)) or not math.isfinite(income) or income < 0:
            raise ValueError("Income must be a non-negative number.")
        self._db.set_setting(MONTHLY_INCOME_KEY, f"{float(income)}")

    def get_totals(self) -> dict:
        cats = self._category_dao.get_all()
        allocated = sum(c.allocated for c in cats)
        spent = sum(c.spent for c in cats)
        return {"allocated": allocated, "spent": spent, "remaining": allocated - spent}

    def reset_dashboard(self):
        """Restore the sample categories and income.

        Sample categories that still exist are reset in place, so recurring
        rules linked to them stay linked. Other categories are removed.
        """
        keep_ids = []
        with self._db.transaction():
            for cat in DEFAULT_CATEGORIES:
                existing = self._category_dao.get_by_name(cat["name"])
                if existing is None:
                    existing = self._category_dao.create(cat["name"], cat["type"], commit=False)
                self._category_dao.reset(
                    existing.id, cat["type"], cat["allocated"], cat["spent"], commit=False
                )
                keep_ids.append(existing.id)
            self._category_dao.delete_except(keep_ids, commit=False)
            self._category_dao.set_positions(keep_ids, commit=False)
            self._db.set_setting(MONTHLY_INCOME_KEY, f"{DEFAULT_INCOME}", commit=False)
        log.info("Dashboard reset to sample data")

    # ── Recurring effects ─────────────────────────────────────────────────────
    def apply_recurring(
        self, rule: RecurringRule, on_date: date, commit: bool = True
    ) -> Transaction:
        """
        Book one occurrence of a recurring rule.

        Income raises the monthly income. An expense adds to its category's
        allocation (and spending, for budget categories); without a known
        category it lands in a fixed category named after the rule.
        """
        category_id = rule.category_id
        if rule.type == "income":
            self._db.set_setting(
                MONTHLY_INCOME_KEY, f"{self.get_income() + rule.amount}", commit=commit
            )
            if category_id is not None and self._category_dao.get_by_id(category_id) is None:
                category_id = None
        else:
            cat = self._category_dao.get_by_id(category_id) if category_id is not None else None
            if cat is None:
                cat = self._category_dao.get_by_name(rule.name)
            if cat is None:
                cat = self._category_dao.create(rule.name, "fixed", rule.amount, commit=commit)
            else:
                allocated = cat.allocated + rule.amount
                spent = cat.spent + rule.amount if cat.type == "budget" else cat.spent
                allocated, spent = clamp_amounts(cat.type, allocated, spent)
                self._category_dao.update_amounts(cat.id, allocated, spent, commit=commit)
            category_id = cat.id

        return self._tx_dao.create(
            type_=rule.type,
            amount=rule.amount,
            date=format_date(on_date),
            description=rule.name,
            category_id=category_id,
            recurring_rule_id=rule.id,
            commit=commit,
        )

    # ── Pay period ────────────────────────────────────────────────────────────
    def current_pay_period(self, reference: date | datetime | None = None) -> PayPeriod:
        return get_current_pay_period(reference)

    def get_period_transactions(
        self, reference: date | datetime | None = None
    ) -> list[Transaction]:
        period = get_current_pay_period(reference)
        return self._tx_dao.get_between(format_date(period.start), format_date(period.end))


def _finite_or_zero(value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0
