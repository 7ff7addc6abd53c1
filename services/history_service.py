from dataclasses import asdict
from datetime import date, datetime
from models.category import BudgetCategory
from models.snapshot import HistorySnapshot
from database.snapshot_dao import SnapshotDAO
from services.budget_service import BudgetService
from utils.logging_setup import get_logger
from utils.pay_period import get_current_pay_period_key

log = get_logger("history")


def compute_summary(income: float, categories: list[BudgetCategory]) -> dict:
    allocated = sum(c.allocated for c in categories)
    spent = sum(c.spent for c in categories)
    return {
        "allocated": allocated,
        "spent": spent,
        "total_saved": max(income - allocated, 0.0),
    }


class HistoryService:
    def __init__(self, snapshot_dao: SnapshotDAO, budget_service: BudgetService):
        self._dao = snapshot_dao
        self._budget = budget_service

    def create_snapshot(self, reference: date | datetime | None = None) -> HistorySnapshot:
        """Archive the current categories and income under the pay period of `reference`."""
        categories = self._budget.get_categories()
        income = self._budget.get_income()
        summary = compute_summary(income, categories)
        snapshot = self._dao.create(
            period_key=get_current_pay_period_key(reference),
            income=income,
            categories=[asdict(c) for c in categories],
            **summary,
        )
        log.info("Saved history snapshot %s for pay period %s", snapshot.id, snapshot.period_key)
        return snapshot

    def get_all(self) -> list[HistorySnapshot]:
        return self._dao.get_all()

    def get_by_id(self, snapshot_id: int) -> HistorySnapshot | None:
        return self._dao.get_by_id(snapshot_id)

    def delete(self, snapshot_id: int):
        self._dao.delete(snapshot_id)
