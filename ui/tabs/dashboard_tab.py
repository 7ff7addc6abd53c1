import customtkinter as ctk
from services.budget_service import BudgetService
from ui.components.category_form import CategoryForm
from ui.components.confirm_dialog import ConfirmDialog
from utils.currency import format_currency, format_signed
from utils.date_helpers import format_display_date, friendly_date


class DashboardTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        budget_service: BudgetService,
        notify_refresh,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = budget_service
        self._notify_refresh = notify_refresh
        self._date_format = date_format
        self._period_var = ctk.StringVar()

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_toolbar()
        self._build_summary_cards()
        self._build_bottom_section()
        self._load()

    def refresh(self):
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkLabel(
            bar, textvariable=self._period_var,
            font=ctk.CTkFont(size=14, weight="bold"),
        ).pack(side="left", padx=12, pady=8)
        ctk.CTkButton(
            bar, text="Reset", width=70,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._reset,
        ).pack(side="right", padx=8, pady=6)
        ctk.CTkButton(bar, text="Edit Income", width=100, command=self._edit_income).pack(
            side="right", padx=4, pady=6
        )
        ctk.CTkButton(bar, text="+ Add Category", command=self._open_add).pack(
            side="right", padx=4, pady=6
        )

    def _build_summary_cards(self):
        self._card_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._card_frame.grid(row=1, column=0, sticky="ew", padx=16, pady=12)
        self._card_frame.grid_columnconfigure((0, 1, 2, 3), weight=1)

    def _build_bottom_section(self):
        bottom = ctk.CTkFrame(self, fg_color="transparent")
        bottom.grid(row=2, column=0, sticky="nsew", padx=16, pady=(0, 12))
        bottom.grid_columnconfigure(0, weight=3)
        bottom.grid_columnconfigure(1, weight=2)
        bottom.grid_rowconfigure(0, weight=1)

        self._budget_frame = ctk.CTkScrollableFrame(
            bottom, label_text="Categories", height=260
        )
        self._budget_frame.grid(row=0, column=0, sticky="nsew", padx=(0, 8))

        self._recent_frame = ctk.CTkScrollableFrame(
            bottom, label_text="This Pay Period", height=260
        )
        self._recent_frame.grid(row=0, column=1, sticky="nsew", padx=(8, 0))

    def _load(self):
        period = self._svc.current_pay_period()
        self._period_var.set(
            f"Pay period {friendly_date(period.start)} – {friendly_date(period.end)}"
        )

        # Summary cards
        for w in self._card_frame.winfo_children():
            w.destroy()
        totals = self._svc.get_totals()
        income = self._svc.get_income()
        card_data = [
            ("Income",    income,              "#4CAF50"),
            ("Allocated", totals["allocated"], "#2196F3"),
            ("Spent",     totals["spent"],     "#F44336"),
            ("Remaining", totals["remaining"], "#4CAF50" if totals["remaining"] >= 0 else "#FF9800"),
        ]
        for i, (label, value, color) in enumerate(card_data):
            self._make_card(self._card_frame, i, label, value, color)

        # Category progress bars
        for w in self._budget_frame.winfo_children():
            w.destroy()
        categories = self._svc.get_categories()
        if not categories:
            ctk.CTkLabel(
                self._budget_frame, text="No categories yet.", text_color="gray60",
            ).pack(pady=20)
        for idx, cat in enumerate(categories):
            pct = min(cat.percentage, 1.0)
            bar_color = "#4CAF50" if pct < 0.8 else ("#FF9800" if pct < 1.0 else "#F44336")
            f = ctk.CTkFrame(self._budget_frame, fg_color="transparent")
            f.pack(fill="x", pady=4, padx=4)
            top_row = ctk.CTkFrame(f, fg_color="transparent")
            top_row.pack(fill="x")
            ctk.CTkLabel(top_row, text=f"{cat.name}  [{cat.type}]", anchor="w").pack(side="left")
            ctk.CTkButton(
                top_row, text="Edit", width=40, height=22,
                command=lambda c=cat: self._open_edit(c),
            ).pack(side="right", padx=(6, 0))
            ctk.CTkButton(
                top_row, text="▼", width=24, height=22, fg_color="transparent",
                text_color=("gray10", "gray90"),
                state="normal" if idx < len(categories) - 1 else "disabled",
                command=lambda i=idx: self._move(categories, i, 1),
            ).pack(side="right")
            ctk.CTkButton(
                top_row, text="▲", width=24, height=22, fg_color="transparent",
                text_color=("gray10", "gray90"),
                state="normal" if idx > 0 else "disabled",
                command=lambda i=idx: self._move(categories, i, -1),
            ).pack(side="right")
            amount_text = (
                format_currency(cat.allocated) if cat.type == "fixed"
                else f"{format_currency(cat.spent)} / {format_currency(cat.allocated)}"
            )
            ctk.CTkLabel(top_row, text=amount_text, anchor="e", text_color="gray60").pack(side="right")
            if cat.type == "budget":
                progress = ctk.CTkProgressBar(f, progress_color=bar_color)
                progress.pack(fill="x", pady=2)
                progress.set(pct)

        # Transactions in the current pay period, newest first
        for w in self._recent_frame.winfo_children():
            w.destroy()
        txs = list(reversed(self._svc.get_period_transactions()))
        if not txs:
            ctk.CTkLabel(
                self._recent_frame, text="No transactions this pay period.", text_color="gray60",
            ).pack(pady=20)
        for idx, tx in enumerate(txs):
            bg = ("gray90", "gray20") if idx % 2 == 0 else ("gray86", "gray24")
            f = ctk.CTkFrame(self._recent_frame, fg_color=bg, corner_radius=4)
            f.pack(fill="x", pady=1)
            f.grid_columnconfigure(1, weight=1)
            color = "#4CAF50" if tx.type == "income" else "#F44336"
            ctk.CTkLabel(
                f, text=format_display_date(tx.date, self._date_format), width=85, anchor="w"
            ).grid(row=0, column=0, padx=6, pady=3)
            ctk.CTkLabel(f, text=tx.description or tx.category_name, anchor="w").grid(
                row=0, column=1, padx=4, sticky="ew"
            )
            ctk.CTkLabel(
                f, text=format_signed(tx.signed_amount), text_color=color, anchor="e", width=100,
            ).grid(row=0, column=2, padx=6)

    def _make_card(self, parent, col, label, value, color):
        card = ctk.CTkFrame(parent, fg_color=("gray90", "gray20"), corner_radius=10)
        card.grid(row=0, column=col, padx=6, sticky="ew")
        card.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(
            card, text=label, font=ctk.CTkFont(size=12), text_color="gray60",
        ).grid(row=0, column=0, pady=(12, 0), padx=16)
        ctk.CTkLabel(
            card,
            text=format_currency(value),
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=color,
        ).grid(row=1, column=0, pady=(4, 12), padx=16)

    def _open_add(self):
        form = CategoryForm(self.winfo_toplevel(), self._svc)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("budget")

    def _open_edit(self, category):
        form = CategoryForm(self.winfo_toplevel(), self._svc, category=category)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("budget")

    def _move(self, categories, index, step):
        ids = [c.id for c in categories]
        ids[index], ids[index + step] = ids[index + step], ids[index]
        if self._svc.reorder_categories(ids):
            self._notify_refresh("budget")

    def _edit_income(self):
        dialog = ctk.CTkInputDialog(
            title="Monthly Income",
            text=f"Monthly income (currently {format_currency(self._svc.get_income())}):",
        )
        raw = dialog.get_input()
        if not raw:
            return
        try:
            self._svc.update_income(float(raw.replace(",", "").replace("$", "")))
        except ValueError:
            return
        self._notify_refresh("budget")

    def _reset(self):
        dialog = ConfirmDialog(
            self.winfo_toplevel(),
            title="Reset Dashboard",
            message="Replace all categories and income with the sample budget?",
        )
        if dialog.result:
            self._svc.reset_dashboard()
            self._notify_refresh("budget")
