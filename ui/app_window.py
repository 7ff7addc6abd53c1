import customtkinter as ctk
from services.automation_service import RecurringAutomation
from services.budget_service import BudgetService
from services.history_service import HistoryService
from services.recurring_service import RecurringService
from ui.components.alert_banner import AlertBanner
from ui.tabs.dashboard_tab import DashboardTab
from ui.tabs.history_tab import HistoryTab
from ui.tabs.recurring_tab import RecurringTab
from utils.constants import APP_NAME, APP_WIDTH, APP_HEIGHT, SEVERITY_COLORS


_REFRESH_SCOPES: dict[str, set[str]] = {
    "budget":    {"dashboard", "history"},
    "recurring": {"dashboard", "recurring"},
    "history":   {"history"},
    "full":      {"dashboard", "recurring", "history"},
}


class AppWindow(ctk.CTk):
    def __init__(
        self,
        budget_service: BudgetService,
        recurring_service: RecurringService,
        history_service: HistoryService,
        automation: RecurringAutomation | None = None,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._budget_svc = budget_service
        self._recurring_svc = recurring_service
        self._history_svc = history_service
        self._automation = automation
        self._date_format = date_format

        self.title(APP_NAME)
        self.minsize(APP_WIDTH, APP_HEIGHT)
        self.geometry(f"{APP_WIDTH}x{APP_HEIGHT}")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._build_banner_area()
        self._build_tabs()

        # Show the automation summary once the window is drawn
        if self._automation and self._automation.message:
            self.after(300, self._show_automation_banner)

    def _build_banner_area(self):
        self._banner_frame = ctk.CTkFrame(self, fg_color="transparent", height=0)
        self._banner_frame.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

    def _build_tabs(self):
        self._tabview = ctk.CTkTabview(self)
        self._tabview.grid(row=1, column=0, sticky="nsew", padx=8, pady=(0, 8))

        for tab_name in ("Dashboard", "Recurring", "History"):
            self._tabview.add(tab_name)
            self._tabview.tab(tab_name).grid_columnconfigure(0, weight=1)
            self._tabview.tab(tab_name).grid_rowconfigure(0, weight=1)

        self._dashboard_tab = DashboardTab(
            self._tabview.tab("Dashboard"),
            budget_service=self._budget_svc,
            notify_refresh=self.notify_tabs_refresh,
            date_format=self._date_format,
        )
        self._dashboard_tab.grid(row=0, column=0, sticky="nsew")

        self._recurring_tab = RecurringTab(
            self._tabview.tab("Recurring"),
            recurring_service=self._recurring_svc,
            budget_service=self._budget_svc,
            notify_refresh=self.notify_tabs_refresh,
            date_format=self._date_format,
        )
        self._recurring_tab.grid(row=0, column=0, sticky="nsew")

        self._history_tab = HistoryTab(
            self._tabview.tab("History"),
            history_service=self._history_svc,
            notify_refresh=self.notify_tabs_refresh,
            date_format=self._date_format,
        )
        self._history_tab.grid(row=0, column=0, sticky="nsew")

    # ── Refresh ──────────────────────────────────────────────────────────────
    def notify_tabs_refresh(self, scope: str = "full"):
        tabs = _REFRESH_SCOPES.get(scope, _REFRESH_SCOPES["full"])
        if "dashboard" in tabs: self._dashboard_tab.refresh()
        if "recurring" in tabs: self._recurring_tab.refresh()
        if "history"   in tabs: self._history_tab.refresh()

    # ── Banners ──────────────────────────────────────────────────────────────
    def _show_automation_banner(self):
        for w in self._banner_frame.winfo_children():
            w.destroy()
        banner = AlertBanner(
            self._banner_frame,
            message=self._automation.message,
            color=SEVERITY_COLORS["info"],
            action_text="View",
            action_cmd=lambda: self._tabview.set("Dashboard"),
            on_close=self._automation.clear_message,
        )
        banner.pack(fill="x", pady=2)
