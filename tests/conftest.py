"""Pytest fixtures: a fresh sqlite database per test plus the wired services."""
import pytest

from database.db_manager import DatabaseManager
from database.category_dao import CategoryDAO
from database.recurring_dao import RecurringDAO
from database.snapshot_dao import SnapshotDAO
from database.transaction_dao import TransactionDAO
from services.budget_service import BudgetService
from services.history_service import HistoryService
from services.recurring_service import RecurringService


class DictStore:
    """In-memory KeyValueStore without compare-and-set."""

    def __init__(self, initial: dict | None = None):
        self.data = dict(initial or {})

    def get(self, key, default=None):
        return self.data.get(key, default)

    def set(self, key, value):
        self.data[key] = value


@pytest.fixture
def db(tmp_path):
    manager = DatabaseManager(str(tmp_path / "budget_test.db"))
    manager.initialize(seed_samples=False)
    yield manager
    manager.close()


@pytest.fixture
def seeded_db(tmp_path):
    manager = DatabaseManager(str(tmp_path / "budget_seeded.db"))
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def category_dao(db):
    return CategoryDAO(db)


@pytest.fixture
def tx_dao(db):
    return TransactionDAO(db)


@pytest.fixture
def recurring_dao(db):
    return RecurringDAO(db)


@pytest.fixture
def budget_service(category_dao, tx_dao, db):
    return BudgetService(category_dao, tx_dao, db)


@pytest.fixture
def recurring_service(recurring_dao, budget_service, db):
    return RecurringService(recurring_dao, budget_service, db)


@pytest.fixture
def history_service(db, budget_service):
    return HistoryService(SnapshotDAO(db), budget_service)


@pytest.fixture
def store():
    return DictStore()

