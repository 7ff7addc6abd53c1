import customtkinter as ctk
from services.recurring_service import RecurringService
from services.budget_service import BudgetService
from models.recurring_rule import RecurringRule, schedule_from_fields
from utils.constants import FREQUENCIES, DAYS_OF_WEEK
from utils.date_helpers import friendly_date

_NO_CATEGORY = "(none)"


class RecurringForm(ctk.CTkToplevel):
    """Add or edit a recurring rule."""

    def __init__(
        self,
        master,
        recurring_service: RecurringService,
        budget_service: BudgetService,
        rule: RecurringRule | None = None,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = recurring_service
        self._rule = rule
        self.saved = False

        self.title("Edit Recurring Rule" if rule else "New Recurring Rule")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        self._cats = budget_service.get_categories()
        cat_names = [_NO_CATEGORY] + [c.name for c in self._cats]

        r = 0

        # Name
        self._add_label("Name:", r)
        self._name_var = ctk.StringVar(value=rule.name if rule else "")
        ctk.CTkEntry(self, textvariable=self._name_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        # Type
        self._add_label("Type:", r)
        self._type_var = ctk.StringVar(value=rule.type if rule else "expense")
        type_frame = ctk.CTkFrame(self, fg_color="transparent")
        type_frame.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        for t in ("income", "expense"):
            ctk.CTkRadioButton(
                type_frame, text=t.title(), variable=self._type_var, value=t,
            ).pack(side="left", padx=4)
        r += 1

        # Amount
        self._add_label("Amount:", r)
        self._amount_var = ctk.StringVar(value=f"{rule.amount:.2f}" if rule else "")
        ctk.CTkEntry(self, textvariable=self._amount_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        # Category
        self._add_label("Category:", r)
        current_cat = rule.category_name if rule and rule.category_name else _NO_CATEGORY
        self._cat_var = ctk.StringVar(value=current_cat)
        ctk.CTkComboBox(
            self, values=cat_names, variable=self._cat_var,
            width=220, state="readonly"
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        # Frequency
        self._add_label("Frequency:", r)
        self._freq_var = ctk.StringVar(
            value=rule.frequency if rule and rule.frequency in FREQUENCIES else "monthly"
        )
        ctk.CTkComboBox(
            self, values=FREQUENCIES, variable=self._freq_var,
            width=220, state="readonly",
            command=self._on_freq_change,
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        # Day fields (dynamic)
        self._day_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._day_frame.grid(row=r, column=0, columnspan=2, padx=16, pady=2, sticky="ew")
        self._day_frame.grid_columnconfigure(1, weight=1)
        r += 1
        dom = rule.day_of_month if rule and rule.day_of_month is not None else 1
        dow = rule.day_of_week if rule and rule.day_of_week is not None else 1
        self._dom_var = ctk.StringVar(value=str(dom))
        self._dow_var = ctk.StringVar(value=DAYS_OF_WEEK[dow])

        self._next_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._next_var, text_color="gray60",
            font=ctk.CTkFont(size=11), anchor="w",
        ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1
        self._refresh_day_fields()

        # Error + buttons
        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=280, anchor="w"
        ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=r, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        if rule:
            ctk.CTkButton(
                btn_frame, text="Delete", width=80,
                fg_color="#F44336", hover_color="#D32F2F",
                command=self._on_delete,
            ).pack(side="left", padx=8)
        ctk.CTkButton(btn_frame, text="Save", width=90, command=self._on_save).pack(side="right")

        self.transient(master)
        self.grab_set()
        self._center()

    def _add_label(self, text, row):
        ctk.CTkLabel(self, text=text).grid(
            row=row, column=0, padx=(16, 8), pady=4, sticky="e"
        )

    def _on_freq_change(self, value=None):
        self._refresh_day_fields()

    def _refresh_day_fields(self):
        for w in self._day_frame.winfo_children():
            w.destroy()

        if self._freq_var.get() == "monthly":
            ctk.CTkLabel(self._day_frame, text="Day of Month:").grid(
                row=0, column=0, padx=(0, 8), sticky="e"
            )
            ctk.CTkComboBox(
                self._day_frame, values=[str(i) for i in range(1, 32)],
                variable=self._dom_var, width=80, state="readonly",
                command=self._update_next_run,
            ).grid(row=0, column=1, sticky="w")
        else:
            ctk.CTkLabel(self._day_frame, text="Day of Week:").grid(
                row=0, column=0, padx=(0, 8), sticky="e"
            )
            ctk.CTkComboBox(
                self._day_frame, values=DAYS_OF_WEEK,
                variable=self._dow_var, width=120, state="readonly",
                command=self._update_next_run,
            ).grid(row=0, column=1, sticky="w")
        self._update_next_run()

    def _update_next_run(self, _value=None):
        """Preview the next date the rule would fire with the chosen schedule."""
        dow_str = self._dow_var.get()
        schedule = schedule_from_fields(
            self._freq_var.get(),
            int(self._dom_var.get()) if self._dom_var.get().isdigit() else None,
            DAYS_OF_WEEK.index(dow_str) if dow_str in DAYS_OF_WEEK else None,
        )
        preview = RecurringRule(
            id=None, name="", type=self._type_var.get(), amount=0.0, category_id=None,
            schedule=schedule,
            last_applied=self._rule.last_applied if self._rule else None,
        )
        next_due = self._svc.next_due_date(preview)
        self._next_var.set(f"Next run: {friendly_date(next_due)}" if next_due else "")

    def _on_save(self):
        name = self._name_var.get().strip()
        type_ = self._type_var.get()
        freq = self._freq_var.get()

        try:
            amount = float(self._amount_var.get())
        except ValueError:
            self._error_var.set("Invalid amount.")
            return

        cat = next((c for c in self._cats if c.name == self._cat_var.get()), None)
        category_id = cat.id if cat else None

        day_of_month = None
        day_of_week = None
        if freq == "monthly":
            try:
                day_of_month = int(self._dom_var.get())
            except ValueError:
                self._error_var.set("Day of month must be 1-31.")
                return
        else:
            dow_str = self._dow_var.get()
            day_of_week = DAYS_OF_WEEK.index(dow_str) if dow_str in DAYS_OF_WEEK else 1

        try:
            if self._rule:
                self._svc.update(
                    self._rule.id, name, type_, amount, category_id,
                    freq, day_of_month, day_of_week,
                )
            else:
                self._svc.create(
                    name, type_, amount, category_id, freq, day_of_month, day_of_week,
                )
            self.saved = True
            self.destroy()
        except ValueError as e:
            self._error_var.set(str(e))

    def _on_delete(self):
        self._svc.delete(self._rule.id)
        self.saved = True
        self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
