import customtkinter as ctk
from services.budget_service import BudgetService
from models.category import BudgetCategory
from utils.constants import CATEGORY_TYPES


class CategoryForm(ctk.CTkToplevel):
    """Add a budget category, or edit an existing one's allocated/spent amounts."""

    def __init__(
        self,
        master,
        budget_service: BudgetService,
        category: BudgetCategory | None = None,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = budget_service
        self._category = category
        self.saved = False

        self.title(f"Edit {category.name}" if category else "New Category")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        r = 0
        if category is None:
            self._add_label("Name:", r)
            self._name_var = ctk.StringVar()
            ctk.CTkEntry(self, textvariable=self._name_var, width=200).grid(
                row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew"
            )
            r += 1

            self._add_label("Type:", r)
            self._type_var = ctk.StringVar(value="budget")
            type_frame = ctk.CTkFrame(self, fg_color="transparent")
            type_frame.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
            for t in CATEGORY_TYPES:
                ctk.CTkRadioButton(
                    type_frame, text=t.title(), variable=self._type_var, value=t,
                ).pack(side="left", padx=4)
            r += 1
        else:
            self._add_label("Allocated ($):", r)
            self._allocated_var = ctk.StringVar(value=f"{category.allocated:.2f}")
            ctk.CTkEntry(self, textvariable=self._allocated_var, width=200).grid(
                row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew"
            )
            r += 1

            self._add_label("Spent ($):", r)
            self._spent_var = ctk.StringVar(value=f"{category.spent:.2f}")
            spent_entry = ctk.CTkEntry(self, textvariable=self._spent_var, width=200)
            spent_entry.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
            if category.type == "fixed":
                spent_entry.configure(state="disabled")
            r += 1

        # Error label
        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=280, anchor="w"
        ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1

        # Buttons
        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=r, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        if category:
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
            row=row, column=0, padx=(16, 8), pady=(16, 4) if row == 0 else 4, sticky="e"
        )

    def _on_save(self):
        try:
            if self._category is None:
                self._svc.add_category(self._name_var.get(), self._type_var.get())
            else:
                try:
                    allocated = float(self._allocated_var.get())
                    spent = float(self._spent_var.get() or 0)
                except ValueError:
                    self._error_var.set("Invalid amount.")
                    return
                self._svc.update_category_amounts(self._category.id, allocated, spent)
            self.saved = True
            self.destroy()
        except ValueError as e:
            self._error_var.set(str(e))

    def _on_delete(self):
        self._svc.remove_category(self._category.id)
        self.saved = True
        self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
