import os
import sqlite3
import sys
import customtkinter as ctk

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from database.category_dao import CategoryDAO
from database.transaction_dao import TransactionDAO
from database.recurring_dao import RecurringDAO
from database.snapshot_dao import SnapshotDAO
from database.settings_store import SettingsStore

from services.budget_service import BudgetService
from services.recurring_service import RecurringService
from services.history_service import HistoryService
from services.automation_service import RecurringAutomation

from ui.app_window import AppWindow
from utils.app_config import get_db_folder, get_log_level
from utils.logging_setup import setup_logging


def main():
    # ── Bootstrap: logging + DB folder from pre-DB config ─────────────────────
    log = setup_logging(get_log_level())
    db_folder = get_db_folder()

    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager.open_in_folder(db_folder)

    # ── DAOs ─────────────────────────────────────────────────────────────────
    category_dao = CategoryDAO(db)
    tx_dao = TransactionDAO(db)
    recurring_dao = RecurringDAO(db)
    snapshot_dao = SnapshotDAO(db)

    # ── Services ─────────────────────────────────────────────────────────────
    budget_svc = BudgetService(category_dao, tx_dao, db)
    recurring_svc = RecurringService(recurring_dao, budget_svc, db)
    history_svc = HistoryService(snapshot_dao, budget_svc)

    # ── Apply due recurring rules, at most once per day ──────────────────────
    automation = RecurringAutomation(SettingsStore(db), recurring_svc.check_and_apply_recurring)
    try:
        automation.run()
    except sqlite3.Error:
        log.exception("Recurring check failed; it will run again on next start")
    if automation.message:
        log.info(automation.message)

    # ── Appearance ───────────────────────────────────────────────────────────
    appearance = db.get_setting("appearance_mode", "system")
    date_format = db.get_setting("date_format", "MM/DD/YYYY")
    ctk.set_appearance_mode(appearance)
    ctk.set_default_color_theme("blue")

    # ── Launch UI ────────────────────────────────────────────────────────────
    app = AppWindow(
        budget_service=budget_svc,
        recurring_service=recurring_svc,
        history_service=history_svc,
        automation=automation,
        date_format=date_format,
    )

    def on_close():
        db.close()
        app.destroy()

    app.protocol("WM_DELETE_WINDOW", on_close)
    app.mainloop()


if __name__ == "__main__":
    main()
