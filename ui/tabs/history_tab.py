import customtkinter as ctk
from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from services.history_service import HistoryService
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.date_picker import DatePickerWidget
from utils.currency import format_currency
from utils.date_helpers import format_display_date, today


class HistoryTab(ctk.CTkFrame):
    """Archived pay-period snapshots with an allocated/spent/saved chart."""

    def __init__(
        self,
        master,
        history_service: HistoryService,
        notify_refresh,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = history_service
        self._notify_refresh = notify_refresh
        self._date_format = date_format

        self.grid_columnconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._build_toolbar()
        self._build_list()
        self._build_chart()
        self._load()

    def refresh(self):
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, columnspan=2, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkLabel(
            bar, text="History", font=ctk.CTkFont(size=14, weight="bold"),
        ).pack(side="left", padx=12, pady=8)

        ctk.CTkButton(bar, text="Save Snapshot", command=self._capture).pack(
            side="right", padx=8, pady=6
        )
        self._ref_picker = DatePickerWidget(bar, initial=today(), date_format=self._date_format)
        self._ref_picker.pack(side="right", padx=4)
        ctk.CTkLabel(bar, text="Pay period of:").pack(side="right", padx=(8, 4))

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(bar, textvariable=self._error_var, text_color="#F44336").pack(
            side="right", padx=8
        )

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self, label_text="Snapshots")
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=(8, 4), pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)

    def _build_chart(self):
        outer = ctk.CTkFrame(self, fg_color=("gray90", "gray20"), corner_radius=8)
        outer.grid(row=1, column=1, sticky="nsew", padx=(4, 8), pady=8)
        ctk.CTkLabel(
            outer, text="Allocated vs Spent vs Saved",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(pady=(10, 0))
        self._fig = Figure(figsize=(5, 3), dpi=80, tight_layout=True)
        self._ax = self._fig.add_subplot(111)
        self._mpl = FigureCanvasTkAgg(self._fig, master=outer)
        self._mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 10))

    def _style_ax(self):
        is_dark = ctk.get_appearance_mode() == "Dark"
        bg = "#2b2b2b" if is_dark else "#e4e4e4"
        fg = "#aaaaaa" if is_dark else "#444444"
        self._fig.patch.set_facecolor(bg)
        self._ax.set_facecolor(bg)
        self._ax.tick_params(colors=fg, labelsize=8)
        for spine in self._ax.spines.values():
            spine.set_edgecolor(fg)

    def _load(self):
        snapshots = self._svc.get_all()

        for w in self._scroll.winfo_children():
            w.destroy()
        if not snapshots:
            ctk.CTkLabel(
                self._scroll,
                text="No history yet. Save your first pay-period snapshot.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=40)
        for idx, snap in enumerate(snapshots):
            bg = ("gray92", "gray17") if idx % 2 == 0 else ("gray88", "gray21")
            row = ctk.CTkFrame(self._scroll, fg_color=bg, corner_radius=4)
            row.grid(row=idx, column=0, sticky="ew", pady=1, padx=2)
            row.grid_columnconfigure(1, weight=1)
            ctk.CTkLabel(
                row, text=format_display_date(snap.period_key, self._date_format),
                width=90, anchor="w", font=ctk.CTkFont(weight="bold"),
            ).grid(row=0, column=0, padx=6, pady=4)
            ctk.CTkLabel(
                row,
                text=(f"Saved {format_currency(snap.total_saved)} • "
                      f"Spent {format_currency(snap.spent)} of {format_currency(snap.allocated)}"),
                anchor="w",
            ).grid(row=0, column=1, padx=4, sticky="ew")
            ctk.CTkButton(
                row, text="Delete", width=52, height=24,
                fg_color="transparent", border_width=1,
                text_color=("gray10", "gray90"),
                command=lambda s=snap: self._delete(s),
            ).grid(row=0, column=2, padx=6)

        # Oldest on the left
        recent = list(reversed(snapshots[:8]))
        self._ax.clear()
        self._style_ax()
        if recent:
            xs = range(len(recent))
            width = 0.27
            self._ax.bar([x - width for x in xs], [s.allocated for s in recent], width,
                         label="Allocated", color="#2196F3")
            self._ax.bar(list(xs), [s.spent for s in recent], width,
                         label="Spent", color="#F44336")
            self._ax.bar([x + width for x in xs], [s.total_saved for s in recent], width,
                         label="Saved", color="#4CAF50")
            self._ax.set_xticks(list(xs))
            self._ax.set_xticklabels([s.period_key[5:] for s in recent])
            self._ax.legend(fontsize=8)
        self._mpl.draw()

    def _capture(self):
        ref = self._ref_picker.get_date()
        if ref is None:
            self._error_var.set("Invalid date.")
            return
        self._error_var.set("")
        self._svc.create_snapshot(ref)
        self._notify_refresh("history")

    def _delete(self, snapshot):
        dialog = ConfirmDialog(
            self.winfo_toplevel(),
            title="Delete Snapshot",
            message=f"Delete the snapshot for the pay period starting {snapshot.period_key}?",
        )
        if dialog.result:
            self._svc.delete(snapshot.id)
            self._notify_refresh("history")
