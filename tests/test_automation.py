import sqlite3
from datetime import datetime

import pytest

from database.settings_store import KeyValueStore, SettingsStore
from services.automation_service import RecurringAutomation, summarize
from services.recurring_engine import AutomationResult
from utils.constants import LAST_AUTOMATION_DAY_KEY


class FakeEngine:
    """Records the dates it was called with and returns canned results."""

    def __init__(self, names=(), failed=()):
        self.calls = []
        self.names = list(names)
        self.failed = list(failed)

    def __call__(self, today):
        self.calls.append(today)
        return AutomationResult(applied_names=list(self.names), failed_names=list(self.failed))


MORNING = datetime(2026, 3, 15, 8, 30)
EVENING = datetime(2026, 3, 15, 23, 59)
NEXT_DAY = datetime(2026, 3, 16, 0, 1)


class TestSummarize:
    def test_nothing_applied(self):
        assert summarize(AutomationResult()) is None

    def test_up_to_three_names(self):
        result = AutomationResult(applied_names=["Salary", "Rent"])
        assert summarize(result) == "Today's recurring check applied 2 transactions (Salary, Rent)."

    def test_more_than_three_names(self):
        result = AutomationResult(applied_names=["a", "b", "c", "d", "e"])
        assert summarize(result) == "Today's recurring check applied 5 transactions (a, b, c…)."

    def test_exactly_three_names_has_no_ellipsis(self):
        result = AutomationResult(applied_names=["a", "b", "c"])
        assert summarize(result).endswith("(a, b, c).")


class TestDayGuard:
    def test_runs_once_per_day(self, store):
        engine = FakeEngine(["Salary"])
        automation = RecurringAutomation(store, engine)

        assert automation.run(MORNING) is not None
        assert automation.run(EVENING) is None
        assert len(engine.calls) == 1
        assert engine.calls[0] == MORNING.date()
        assert store.get(LAST_AUTOMATION_DAY_KEY) == "2026-03-15"

    def test_runs_again_next_day(self, store):
        engine = FakeEngine()
        automation = RecurringAutomation(store, engine)
        automation.run(EVENING)
        automation.run(NEXT_DAY)
        assert [d.isoformat() for d in engine.calls] == ["2026-03-15", "2026-03-16"]

    def test_guard_survives_restart(self, store):
        engine = FakeEngine()
        RecurringAutomation(store, engine).run(MORNING)
        assert RecurringAutomation(store, engine).has_run_today(EVENING)
        assert RecurringAutomation(store, engine).run(EVENING) is None
        assert len(engine.calls) == 1

    def test_uses_injected_clock(self, store):
        engine = FakeEngine()
        automation = RecurringAutomation(store, engine, clock=lambda: MORNING)
        automation.run()
        assert engine.calls == [MORNING.date()]

    def test_message_set_when_applied(self, store):
        automation = RecurringAutomation(store, FakeEngine(["Salary"]))
        automation.run(MORNING)
        assert automation.message == "Today's recurring check applied 1 transactions (Salary)."
        automation.clear_message()
        assert automation.message is None

    def test_no_message_when_nothing_applied(self, store):
        automation = RecurringAutomation(store, FakeEngine())
        result = automation.run(MORNING)
        assert result.applied_count == 0
        assert automation.message is None

    def test_failures_release_the_day(self, store):
        engine = FakeEngine(["Salary"], failed=["Rent"])
        automation = RecurringAutomation(store, engine)

        result = automation.run(MORNING)

        assert result.failed_names == ["Rent"]
        assert automation.message == "Today's recurring check applied 1 transactions (Salary)."
        assert not automation.has_run_today(MORNING)
        automation.run(EVENING)
        assert len(engine.calls) == 2

    def test_plain_store_satisfies_protocol(self, store):
        assert isinstance(store, KeyValueStore)


class TestSettingsStore:
    def test_get_set(self, db):
        store = SettingsStore(db)
        assert store.get("missing") is None
        assert store.get("missing", "x") == "x"
        store.set("k", "v")
        assert store.get("k") == "v"
        assert isinstance(store, KeyValueStore)

    def test_compare_and_set(self, db):
        store = SettingsStore(db)
        assert store.compare_and_set("k", None, "2026-03-15")
        assert not store.compare_and_set("k", None, "2026-03-16")
        assert not store.compare_and_set("k", "2026-03-14", "2026-03-16")
        assert store.compare_and_set("k", "2026-03-15", "2026-03-16")
        assert store.get("k") == "2026-03-16"

    def test_second_session_cannot_claim_same_day(self, db):
        class StaleStore(SettingsStore):
            # Read happened before the other session wrote the key.
            def get(self, key, default=None):
                return default

        first = FakeEngine(["Salary"])
        second = FakeEngine(["Salary"])

        assert RecurringAutomation(SettingsStore(db), first).run(MORNING) is not None
        assert RecurringAutomation(StaleStore(db), second).run(MORNING) is None
        assert second.calls == []

    def test_end_to_end_with_recurring_service(self, db, recurring_service):
        recurring_service.create("Salary", "income", 2500.0, None, "monthly", day_of_month=15)
        store = SettingsStore(db)

        automation = RecurringAutomation(store, recurring_service.check_and_apply_recurring)
        result = automation.run(MORNING)

        assert result.applied_names == ["Salary"]
        assert automation.message == "Today's recurring check applied 1 transactions (Salary)."
        assert store.get(LAST_AUTOMATION_DAY_KEY) == "2026-03-15"

        again = RecurringAutomation(store, recurring_service.check_and_apply_recurring)
        assert again.run(EVENING) is None
        assert again.message is None


    def test_failed_scan_releases_the_day(self, db, recurring_service, recurring_dao, monkeypatch):
        recurring_service.create("Salary", "income", 2500.0, None, "monthly", day_of_month=15)
        store = SettingsStore(db)
        store.set(LAST_AUTOMATION_DAY_KEY, "2026-03-14")

        def locked():
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(recurring_dao, "get_all", locked)
        automation = RecurringAutomation(store, recurring_service.check_and_apply_recurring)
        with pytest.raises(sqlite3.OperationalError):
            automation.run(MORNING)

        assert store.get(LAST_AUTOMATION_DAY_KEY) == "2026-03-14"
        assert automation.message is None

        monkeypatch.undo()
        retry = RecurringAutomation(store, recurring_service.check_and_apply_recurring)
        assert retry.run(EVENING).applied_names == ["Salary"]
        assert store.get(LAST_AUTOMATION_DAY_KEY) == "2026-03-15"

@pytest.mark.parametrize("previous", [None, "2026-03-14", ""])
def test_claim_from_any_previous_value(db, previous):
    store = SettingsStore(db)
    if previous is not None:
        store.set(LAST_AUTOMATION_DAY_KEY, previous)
    engine = FakeEngine()
    assert RecurringAutomation(store, engine).run(MORNING) is not None
    assert store.get(LAST_AUTOMATION_DAY_KEY) == "2026-03-15"


def test_engine_error_releases_plain_store(store):
    def boom(today):
        raise sqlite3.OperationalError("disk I/O error")

    automation = RecurringAutomation(store, boom)
    with pytest.raises(sqlite3.OperationalError):
        automation.run(MORNING)
    assert not automation.has_run_today(MORNING)
