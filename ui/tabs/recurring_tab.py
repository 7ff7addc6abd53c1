import customtkinter as ctk
from services.recurring_service import RecurringService
from services.budget_service import BudgetService
from ui.components.recurring_form import RecurringForm
from ui.components.confirm_dialog import ConfirmDialog
from utils.constants import DAYS_OF_WEEK
from utils.currency import format_currency
from utils.date_helpers import format_date, format_display_date, today


class RecurringTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        recurring_service: RecurringService,
        budget_service: BudgetService,
        notify_refresh,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = recurring_service
        self._budget_svc = budget_service
        self._notify_refresh = notify_refresh
        self._date_format = date_format

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._build_toolbar()
        self._build_list()
        self._load()

    def refresh(self):
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkLabel(
            bar, text="Recurring Rules",
            font=ctk.CTkFont(size=14, weight="bold"),
        ).pack(side="left", padx=12, pady=8)
        ctk.CTkButton(bar, text="+ Add Rule", command=self._open_add).pack(
            side="right", padx=8, pady=6
        )

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()

        rules = self._svc.get_all()
        if not rules:
            ctk.CTkLabel(
                self._scroll,
                text="No recurring rules yet. Click '+ Add Rule' to create one.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=40)
            return

        # Header
        hdr = ctk.CTkFrame(self._scroll, fg_color=("gray82", "gray22"), corner_radius=0)
        hdr.grid(row=0, column=0, sticky="ew", pady=(0, 2))
        for i, (col, w) in enumerate([
            ("Name", 160), ("Type", 70), ("Amount", 90), ("Category", 120),
            ("Schedule", 150), ("Last Applied", 110), ("Next Due", 100), ("Actions", 100),
        ]):
            ctk.CTkLabel(
                hdr, text=col, width=w, anchor="w",
                font=ctk.CTkFont(weight="bold"),
            ).grid(row=0, column=i, padx=4, pady=4)

        ref = today()
        for idx, rule in enumerate(rules):
            self._add_row(idx + 1, rule, ref)

    def _schedule_text(self, rule) -> str:
        if rule.schedule is None:
            return "Invalid schedule"
        if rule.frequency == "monthly":
            return f"Monthly • Day {rule.day_of_month}"
        return f"Weekly • {DAYS_OF_WEEK[rule.day_of_week]}"

    def _add_row(self, idx, rule, ref):
        bg = ("gray92", "gray17") if idx % 2 == 0 else ("gray88", "gray21")
        row = ctk.CTkFrame(self._scroll, fg_color=bg, corner_radius=4)
        row.grid(row=idx, column=0, sticky="ew", pady=1, padx=2)

        next_due = self._svc.next_due_date(rule, ref)
        next_due_str = format_display_date(format_date(next_due), self._date_format) if next_due else "—"
        last_str = (
            format_display_date(rule.last_applied, self._date_format)
            if rule.last_applied else "Not applied yet"
        )

        data = [
            (rule.name, 160),
            (rule.type.title(), 70),
            (format_currency(rule.amount), 90),
            (rule.category_name or "—", 120),
            (self._schedule_text(rule), 150),
            (last_str, 110),
            (next_due_str, 100),
        ]
        for i, (text, width) in enumerate(data):
            ctk.CTkLabel(row, text=text, width=width, anchor="w").grid(
                row=0, column=i, padx=4, pady=4
            )

        acts = ctk.CTkFrame(row, fg_color="transparent")
        acts.grid(row=0, column=len(data), padx=(4, 6))
        ctk.CTkButton(
            acts, text="Edit", width=40, height=24,
            command=lambda r=rule: self._open_edit(r),
        ).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Delete", width=52, height=24,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda r=rule: self._delete(r),
        ).pack(side="left")

    def _open_add(self):
        form = RecurringForm(self.winfo_toplevel(), self._svc, self._budget_svc)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("recurring")

    def _open_edit(self, rule):
        form = RecurringForm(self.winfo_toplevel(), self._svc, self._budget_svc, rule=rule)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("recurring")

    def _delete(self, rule):
        dialog = ConfirmDialog(
            self.winfo_toplevel(),
            title="Delete Rule",
            message=f"Delete the recurring rule '{rule.name}'? Past transactions are kept.",
        )
        if dialog.result:
            self._svc.delete(rule.id)
            self._notify_refresh("recurring")
