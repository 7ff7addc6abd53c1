import tkinter as tk
from datetime import date
import customtkinter as ctk
from tkcalendar import Calendar
from utils.date_helpers import format_date, format_display_date, parse_date, parse_display_date


class DatePickerWidget(ctk.CTkFrame):
    """Entry in the user's display format plus a calendar popup.

    .get_date() returns the chosen date, or None when the entry is empty or invalid.
    """

    def __init__(
        self,
        master,
        initial: date | None = None,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._date_format = date_format
        self._popup: ctk.CTkToplevel | None = None

        self._var = tk.StringVar(value=self._display(initial) if initial else "")
        self._entry = ctk.CTkEntry(self, textvariable=self._var, width=110)
        self._entry.grid(row=0, column=0, sticky="ew")
        self._entry.bind("<FocusOut>", self._normalize)
        self._entry.bind("<Return>", self._normalize)

        ctk.CTkButton(self, text="📅", width=32, command=self._toggle_popup).grid(
            row=0, column=1, padx=(4, 0)
        )

    def get_date(self) -> date | None:
        raw = self._var.get().strip()
        if not raw:
            return None
        d = parse_display_date(raw, self._date_format)
        if d is None:
            d = parse_date(raw.replace("/", "-").replace(".", "-"))
        return d

    def set_date(self, d: date | None):
        self._var.set(self._display(d) if d else "")
        self._entry.configure(border_color=("gray65", "gray35"))

    def _display(self, d: date) -> str:
        return format_display_date(format_date(d), self._date_format)

    def _normalize(self, _event=None):
        if not self._var.get().strip():
            return
        d = self.get_date()
        if d:
            self.set_date(d)
        else:
            self._entry.configure(border_color="#F44336")

    def _toggle_popup(self):
        if self._popup and self._popup.winfo_exists():
            self._close_popup()
            return

        popup = ctk.CTkToplevel(self)
        popup.overrideredirect(True)
        popup.resizable(False, False)
        self._popup = popup

        dark = ctk.get_appearance_mode() == "Dark"
        bg, fg = ("#2b2b2b", "#ffffff") if dark else ("#ffffff", "#000000")
        current = self.get_date() or date.today()
        cal = Calendar(
            popup,
            selectmode="day",
            year=current.year, month=current.month, day=current.day,
            date_pattern="yyyy-mm-dd",
            background=bg, foreground=fg,
            headersbackground=bg, headersforeground=fg,
            selectbackground="#1f6aa5",
            weekendbackground=bg, weekendforeground=fg,
            othermonthforeground="gray60",
            bordercolor=bg,
        )
        cal.pack(padx=4, pady=4)
        cal.bind("<<CalendarSelected>>", lambda _e: self._on_selected(cal))

        self._entry.update_idletasks()
        x = self._entry.winfo_rootx()
        y = self._entry.winfo_rooty() + self._entry.winfo_height() + 2
        popup.geometry(f"+{x}+{y}")

    def _on_selected(self, cal: Calendar):
        self.set_date(parse_date(cal.get_date()))
        self._close_popup()

    def _close_popup(self):
        if self._popup is not None:
            self._popup.destroy()
            self._popup = None
