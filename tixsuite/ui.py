"""
Design (ui.py)
- Purpose: Build and manage the Tkinter UI: Generate, Scan, Reports and Settings tabs,
           the toast bar and the Logs panel.
- Inputs: TicketLedger (shared state), Notifier, optional CameraBackend.
- Outputs: None (renders UI, calls ledger operations).
- Side effects: Creates windows; reads/writes export, import and print files chosen by the user.
- Thread-safety: UI code runs on the main thread; notifier timers, the camera thread and log
                 records are marshalled onto it with root.after().
"""

import logging
import tkinter as tk
from tkinter import filedialog, messagebox, ttk
from typing import Callable, List, Optional

from PIL import ImageTk

from .codec import export_filename, parse_manual_entry
from .config import (
    APP_TITLE,
    DEFAULT_GENERATE_COUNT,
    DEFAULT_PREFIX,
    LOG_MAX_LINES,
    MAX_USERS_RANGE,
    SCAN_HISTORY_SIZE,
)
from .errors import TixError
from .logging_config import HumanFormatter
from .models import Notification, ScanLookup, ScanOutcome, Ticket
from .notify import Notifier, desktop_notifier
from .render import make_qr_image, save_print_sheet
from .reports import FILTER_MODES, PERIODS, bucket_by_period, filter_tickets, summarize
from .repository import TicketLedger
from .scanner import CameraBackend, ScanSession
from .utils import format_local, normalize_prefix, utc_now_iso

logger = logging.getLogger(__name__)

BG = "#1e1e1e"
PANEL_BG = "#2b2b2b"
FG = "#f0f0f0"
TOAST_COLOURS = {
    "success": "#10b981",
    "error": "#ef4444",
    "warning": "#f59e0b",
    "info": "#3b82f6",
}


class TkLogHandler(logging.Handler):
    """Mirror log records into the Logs panel (via a main-thread callback)."""

    def __init__(self, root: tk.Tk, append: Callable[[str], None]) -> None:
        super().__init__()
        self.root = root
        self.append = append
        self.setFormatter(HumanFormatter(colour=False))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record) + "\n"
            self.root.after(0, lambda: self.append(line))
        except (RuntimeError, tk.TclError):
            # window already destroyed
            pass


class AppUI:
    """
    Design (AppUI)
    - Purpose: Encapsulate all UI creation and behavior.
    - Public attributes:
        enable_notifications (tk.BooleanVar): toggles desktop notifications (plyer)
        show_logs (tk.BooleanVar): toggles visibility of the Logs panel
    - Public methods:
        refresh_ui(): repaint every tab from the ledger snapshot
        close(): stop the camera and timers before the window is destroyed
    """

    def __init__(
        self,
        root: tk.Tk,
        ledger: TicketLedger,
        notifier: Notifier,
        camera: Optional[CameraBackend] = None,
    ) -> None:
        self.root = root
        self.ledger = ledger
        self.notifier = notifier
        self.session = (
            ScanSession(camera, self._on_camera_lookup, self._on_camera_stopped) if camera is not None else None
        )

        # UI state variables
        self.enable_notifications = tk.BooleanVar(value=True)
        self.show_logs = tk.BooleanVar(value=False)
        self.generated: List[Ticket] = []
        self.scan_history: List[tuple] = []
        self._qr_photo = None

        # Window
        self.root.title(APP_TITLE)
        self.root.rowconfigure(0, weight=1)
        self.root.columnconfigure(0, weight=1)
        self.root.configure(bg=BG)
        self.root.protocol("WM_DELETE_WINDOW", self.close)

        self._configure_style()

        self.paned = ttk.PanedWindow(self.root, orient=tk.VERTICAL)
        self.paned.grid(row=0, column=0, sticky="nsew")

        content = tk.Frame(self.paned, bg=BG)
        content.rowconfigure(0, weight=1)
        content.columnconfigure(0, weight=1)
        self.paned.add(content, weight=1)

        self.notebook = ttk.Notebook(content)
        self.notebook.grid(row=0, column=0, sticky="nsew", padx=10, pady=(10, 5))
        self._build_generate_tab()
        self._build_scan_tab()
        self._build_reports_tab()
        self._build_settings_tab()
        self.notebook.bind("<<NotebookTabChanged>>", lambda _e: self.refresh_ui())

        # Toast bar + toggles
        bar = tk.Frame(content, bg=BG)
        bar.grid(row=1, column=0, sticky="ew", padx=10, pady=(0, 10))
        self.toast_label = tk.Label(bar, text="", fg="white", bg=BG, anchor="w", padx=8)
        self.toast_label.pack(side=tk.LEFT, fill=tk.X, expand=True)
        tk.Button(bar, text="×", command=self.notifier.hide, fg="white", bg=BG, relief="flat").pack(side=tk.LEFT)
        self._checkbutton(bar, "Enable Notifications", self.enable_notifications).pack(side=tk.LEFT, padx=5)
        self._checkbutton(bar, "Show Logs", self.show_logs, self.toggle_logs).pack(side=tk.LEFT, padx=5)

        # Bottom pane: Logs (collapsed until toggled)
        self.bottom_frame = tk.Frame(self.paned, bg=BG)
        self.logs_box = tk.Text(self.bottom_frame, height=6, bg="#1b1b1b", fg="#dddddd", wrap="none")
        self.logs_box.configure(state="disabled")
        self.paned.add(self.bottom_frame, weight=0)

        self.log_handler = TkLogHandler(self.root, self._append_log)
        logging.getLogger().addHandler(self.log_handler)

        self.notifier.subscribe(lambda note: self.root.after(0, self._render_toast, note))
        self.notifier.subscribe(desktop_notifier(self.enable_notifications.get))

        self.refresh_ui()

    # ---------- layout helpers ----------

    def _configure_style(self) -> None:
        style = ttk.Style(self.root)
        style.theme_use("default")
        style.configure("TFrame", background=BG)
        style.configure("TLabel", background=BG, foreground=FG)
        style.configure("TNotebook", background=BG)
        style.configure("TNotebook.Tab", background=PANEL_BG, foreground=FG, padding=(12, 4))
        style.configure(
            "Treeview",
            background=PANEL_BG,
            foreground=FG,
            fieldbackground=PANEL_BG,
            rowheight=24,
            font=("Segoe UI", 10),
        )
        style.configure(
            "Treeview.Heading",
            background=BG,
            foreground="#ffffff",
            font=("Segoe UI", 10, "bold"),
        )
        style.map("Treeview", background=[("selected", "#444")], foreground=[])

    def _checkbutton(self, parent, text: str, variable: tk.BooleanVar, command=None) -> tk.Checkbutton:
        return tk.Checkbutton(
            parent,
            text=text,
            variable=variable,
            command=command,
            fg="white",
            bg=BG,
            selectcolor=PANEL_BG,
            activebackground=BG,
            activeforeground="white",
        )

    def _label(self, parent, text: str = "", **kwargs) -> tk.Label:
        kwargs.setdefault("fg", "white")
        kwargs.setdefault("bg", BG)
        return tk.Label(parent, text=text, **kwargs)

    def _tree(self, parent, columns: dict, height: int = 10) -> ttk.Treeview:
        tree = ttk.Treeview(parent, columns=tuple(columns), show="headings", height=height)
        for key, title in columns.items():
            tree.heading(key, text=title)
            tree.column(key, width=150, anchor="w")
        return tree

    def _guard(self, action: Callable[[], None]) -> None:
        """Run a UI action, turning TixError into an error toast."""
        try:
            action()
        except TixError as exc:
            self.notifier.show(str(exc), "error")

    # ---------- Generate tab ----------

    def _build_generate_tab(self) -> None:
        tab = ttk.Frame(self.notebook)
        self.notebook.add(tab, text="Generate")

        self._label(tab, "Number of Tickets (1-200)").grid(row=0, column=0, sticky="e", padx=5, pady=5)
        self.v_count = tk.StringVar(value=str(DEFAULT_GENERATE_COUNT))
        tk.Spinbox(tab, from_=self.ledger.min_count, to=self.ledger.max_count, textvariable=self.v_count, width=8).grid(
            row=0, column=1, sticky="w", padx=5, pady=5
        )

        self._label(tab, "Ticket Prefix").grid(row=1, column=0, sticky="e", padx=5, pady=5)
        self.v_prefix = tk.StringVar(value=DEFAULT_PREFIX)
        self.v_prefix.trace_add("write", self._uppercase_prefix)
        tk.Entry(tab, textvariable=self.v_prefix).grid(row=1, column=1, sticky="w", padx=5, pady=5)

        self._label(tab, "Additional Information (Optional)").grid(row=2, column=0, sticky="e", padx=5, pady=5)
        self.v_extra = tk.StringVar()
        tk.Entry(tab, textvariable=self.v_extra, width=40).grid(row=2, column=1, sticky="w", padx=5, pady=5)

        buttons = ttk.Frame(tab)
        buttons.grid(row=3, column=0, columnspan=3, sticky="w", padx=5, pady=5)
        ttk.Button(buttons, text="Generate Tickets", command=self.generate).pack(side=tk.LEFT, padx=5)
        self.undo_button = ttk.Button(buttons, text="Undo Last Generation", command=self.undo)
        self.undo_button.pack(side=tk.LEFT, padx=5)
        ttk.Button(buttons, text="Save Print Sheet (PDF)", command=self.save_print_sheet).pack(side=tk.LEFT, padx=5)

        self.preview_tree = self._tree(tab, {"number": "Number", "generated": "Generated", "extra": "Info"})
        self.preview_tree.grid(row=4, column=0, columnspan=2, sticky="nsew", padx=5, pady=5)
        self.preview_tree.bind("<<TreeviewSelect>>", self._show_selected_qr)
        self.qr_label = tk.Label(tab, bg=BG)
        self.qr_label.grid(row=4, column=2, sticky="n", padx=5, pady=5)
        tab.rowconfigure(4, weight=1)
        tab.columnconfigure(1, weight=1)

    def _uppercase_prefix(self, *_args) -> None:
        value = self.v_prefix.get()
        if value != value.upper():
            self.v_prefix.set(value.upper())

    def generate(self) -> None:
        """
        Purpose: Read the form, generate a batch and show it in the preview list.
        Side effects: Mutates the ledger.
        """
        try:
            count = int(self.v_count.get())
        except ValueError:
            self.notifier.show("Count must be a whole number", "error")
            return

        def _run():
            self.generated = self.ledger.generate(count, normalize_prefix(self.v_prefix.get()), self.v_extra.get())
            self.refresh_ui()

        self._guard(_run)

    def undo(self) -> None:
        if self.ledger.undo_last_generation():
            self.generated = []
            self._qr_photo = None
            self.qr_label.configure(image="")
        self.refresh_ui()

    def save_print_sheet(self) -> None:
        if not self.generated:
            self.notifier.show("Generate tickets before printing", "error")
            return
        path = filedialog.asksaveasfilename(
            title="Save Print Sheet", defaultextension=".pdf", filetypes=[("PDF", "*.pdf")]
        )
        if not path:
            return
        try:
            save_print_sheet(self.generated, self.ledger.settings, path)
        except OSError as exc:
            logger.error("Could not write %s: %s", path, exc)
            self.notifier.show("Failed to save print sheet", "error")
            return
        self.notifier.show(f"Saved {len(self.generated)} ticket(s) to {path}", "success")

    def _show_selected_qr(self, _event=None) -> None:
        selected = self.preview_tree.selection()
        if not selected:
            return
        ticket = self.ledger.get(ScanLookup(id=selected[0]))
        if ticket is None:
            return
        self._qr_photo = ImageTk.PhotoImage(make_qr_image(ticket, box_size=4))
        self.qr_label.configure(image=self._qr_photo)

    # ---------- Scan tab ----------

    def _build_scan_tab(self) -> None:
        tab = ttk.Frame(self.notebook)
        self.notebook.add(tab, text="Scan")

        camera = ttk.Frame(tab)
        camera.grid(row=0, column=0, columnspan=3, sticky="w", padx=5, pady=5)
        self.start_button = ttk.Button(camera, text="Start Scanning", command=self.start_scanning)
        self.start_button.pack(side=tk.LEFT, padx=5)
        self.stop_button = ttk.Button(camera, text="Stop Scanning", command=self.stop_scanning)
        self.stop_button.pack(side=tk.LEFT, padx=5)
        if self.session is None:
            self.start_button.state(["disabled"])
            self._label(camera, "No camera backend configured; use manual entry.", font=("Segoe UI", 8)).pack(
                side=tk.LEFT, padx=5
            )

        self._label(tab, "Enter Ticket Number or QR Data").grid(row=1, column=0, sticky="e", padx=5, pady=5)
        self.v_manual = tk.StringVar()
        entry = tk.Entry(tab, textvariable=self.v_manual, width=40)
        entry.grid(row=1, column=1, sticky="w", padx=5, pady=5)
        entry.bind("<Return>", lambda _e: self.scan_manually())
        ttk.Button(tab, text="Scan Manually", command=self.scan_manually).grid(row=1, column=2, padx=5, pady=5)

        self.result_label = self._label(tab, "", font=("Segoe UI", 12, "bold"))
        self.result_label.grid(row=2, column=0, columnspan=3, sticky="w", padx=5, pady=5)

        self.history_tree = self._tree(tab, {"number": "Ticket", "time": "Time", "status": "Status"}, height=SCAN_HISTORY_SIZE)
        self.history_tree.grid(row=3, column=0, columnspan=3, sticky="nsew", padx=5, pady=5)
        self.history_tree.tag_configure("green", foreground="#7CFC00")
        self.history_tree.tag_configure("red", foreground="#FF6A6A")
        tab.rowconfigure(3, weight=1)
        tab.columnconfigure(1, weight=1)
        self._update_camera_buttons()

    def scan_manually(self) -> None:
        def _run():
            lookup = parse_manual_entry(self.v_manual.get())
            self._record_scan(lookup, self.ledger.scan(lookup))
            self.v_manual.set("")

        self._guard(_run)

    def start_scanning(self) -> None:
        if self.session is None:
            return
        self._guard(self.session.start)
        self._update_camera_buttons()

    def stop_scanning(self) -> None:
        if self.session is not None:
            self.session.stop()
        self._update_camera_buttons()

    def _on_camera_lookup(self, lookup: ScanLookup) -> None:
        # called on the camera thread
        self.root.after(0, self._scan_from_camera, lookup)

    def _on_camera_stopped(self, reason: str) -> None:
        # called on the camera thread after capture failed
        self.root.after(0, self._camera_lost, reason)

    def _camera_lost(self, reason: str) -> None:
        self.notifier.show(reason, "error")
        self._update_camera_buttons()

    def _scan_from_camera(self, lookup: ScanLookup) -> None:
        outcome = self.ledger.scan(lookup)
        self._record_scan(lookup, outcome)
        if outcome.success:
            self.stop_scanning()

    def _record_scan(self, lookup: ScanLookup, outcome: ScanOutcome) -> None:
        number = outcome.ticket.number if outcome.ticket else (lookup.number or lookup.id)
        status = "Duplicate" if outcome.duplicate else outcome.message
        stamp = format_local(utc_now_iso())
        self.scan_history = [(number, stamp, status, outcome.success)] + self.scan_history[: SCAN_HISTORY_SIZE - 1]
        colour = TOAST_COLOURS["success"] if outcome.success else TOAST_COLOURS["error"]
        text = f"{outcome.message}: {number}"
        if outcome.duplicate:
            text += " (this ticket was already scanned!)"
        self.result_label.configure(text=text, fg=colour)
        self.refresh_ui()

    def _update_camera_buttons(self) -> None:
        active = self.session is not None and self.session.active
        self.stop_button.state(["!disabled"] if active else ["disabled"])
        if self.session is not None:
            self.start_button.state(["disabled"] if active else ["!disabled"])

    # ---------- Reports tab ----------

    def _build_reports_tab(self) -> None:
        tab = ttk.Frame(self.notebook)
        self.notebook.add(tab, text="Reports")

        self.stats_label = self._label(tab, "", font=("Segoe UI", 11, "bold"))
        self.stats_label.grid(row=0, column=0, columnspan=2, sticky="w", padx=5, pady=5)

        self._label(tab, "Generated vs Scanned").grid(row=1, column=0, sticky="w", padx=5)
        self.v_period = tk.StringVar(value="daily")
        period = ttk.Combobox(tab, textvariable=self.v_period, values=PERIODS, state="readonly", width=12)
        period.grid(row=1, column=1, sticky="e", padx=5)
        period.bind("<<ComboboxSelected>>", lambda _e: self.refresh_ui())
        self.period_tree = self._tree(tab, {"period": "Period", "generated": "Generated", "scanned": "Scanned"}, height=6)
        self.period_tree.grid(row=2, column=0, columnspan=2, sticky="nsew", padx=5, pady=5)

        self._label(tab, "Ticket List").grid(row=3, column=0, sticky="w", padx=5)
        self.v_filter = tk.StringVar(value="all")
        filt = ttk.Combobox(tab, textvariable=self.v_filter, values=FILTER_MODES, state="readonly", width=12)
        filt.grid(row=3, column=1, sticky="e", padx=5)
        filt.bind("<<ComboboxSelected>>", lambda _e: self.refresh_ui())
        self.report_tree = self._tree(
            tab, {"number": "Number", "generated": "Generated", "status": "Status", "scanned": "Scanned At"}
        )
        self.report_tree.grid(row=4, column=0, columnspan=2, sticky="nsew", padx=5, pady=5)
        self.report_tree.tag_configure("green", foreground="#7CFC00")
        self.report_tree.tag_configure("orange", foreground="#FFA500")
        tab.rowconfigure(4, weight=1)
        tab.columnconfigure(0, weight=1)

    # ---------- Settings tab ----------

    def _build_settings_tab(self) -> None:
        tab = ttk.Frame(self.notebook)
        self.notebook.add(tab, text="Settings")
        settings = self.ledger.settings

        self._label(tab, "Organization Name").grid(row=0, column=0, sticky="e", padx=5, pady=5)
        self.v_org = tk.StringVar(value=settings.organization_name)
        tk.Entry(tab, textvariable=self.v_org, width=40).grid(row=0, column=1, sticky="w", padx=5, pady=5)

        low, high = MAX_USERS_RANGE
        self._label(tab, "Max Concurrent Users").grid(row=1, column=0, sticky="e", padx=5, pady=5)
        self.v_max_users = tk.StringVar(value=str(settings.max_users))
        tk.Spinbox(tab, from_=low, to=high, textvariable=self.v_max_users, width=8).grid(
            row=1, column=1, sticky="w", padx=5, pady=5
        )
        self._label(tab, "Informational only; data is stored on this computer.", fg="gray", font=("Segoe UI", 8)).grid(
            row=2, column=1, sticky="w", padx=5
        )
        ttk.Button(tab, text="Save Settings", command=self.save_settings).grid(row=3, column=1, sticky="w", padx=5, pady=10)

        self.data_label = self._label(tab, "")
        self.data_label.grid(row=4, column=0, columnspan=2, sticky="w", padx=5, pady=5)
        buttons = ttk.Frame(tab)
        buttons.grid(row=5, column=0, columnspan=2, sticky="w", padx=5, pady=5)
        ttk.Button(buttons, text="Export Data (JSON)", command=self.export_data).pack(side=tk.LEFT, padx=5)
        ttk.Button(buttons, text="Import Data (JSON)", command=self.import_data).pack(side=tk.LEFT, padx=5)
        ttk.Button(buttons, text="Clear All Data", command=self.clear_all).pack(side=tk.LEFT, padx=5)

    def save_settings(self) -> None:
        try:
            max_users = int(self.v_max_users.get())
        except ValueError:
            self.notifier.show("Max users must be a whole number", "error")
            return
        self._guard(lambda: self.ledger.update_settings({
            "organization_name": self.v_org.get().strip(),
            "max_users": max_users,
        }))

    def export_data(self) -> None:
        path = filedialog.asksaveasfilename(
            title="Export Data",
            initialfile=export_filename(),
            defaultextension=".json",
            filetypes=[("JSON", "*.json")],
        )
        if not path:
            return
        text = self.ledger.export_data()
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as exc:
            logger.error("Could not write %s: %s", path, exc)
            self.notifier.show("Failed to write export file", "error")

    def import_data(self) -> None:
        path = filedialog.askopenfilename(title="Import Data", filetypes=[("JSON", "*.json")])
        if not path:
            return
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Could not read %s: %s", path, exc)
            self.notifier.show("Failed to read file", "error")
            return
        try:
            self.ledger.import_data(text)
        except TixError:
            # ledger already reported it
            return
        settings = self.ledger.settings
        self.v_org.set(settings.organization_name)
        self.v_max_users.set(str(settings.max_users))
        self.generated = []
        self.refresh_ui()

    def clear_all(self) -> None:
        """
        Purpose: Remove all tickets after user confirmation.
        Side effects: Mutates the ledger (which persists itself).
        """
        if not messagebox.askyesno(
            "Clear All Data", "Are you sure you want to delete all tickets? This action cannot be undone."
        ):
            return
        self.ledger.clear_all_data()
        self.generated = []
        self.refresh_ui()

    # ---------- refresh ----------

    def refresh_ui(self) -> None:
        """
        Purpose: Rebuild every list from the ledger snapshot.
        Thread-safety: Main thread only.
        """
        tickets = self.ledger.tickets
        batch = self.ledger.last_batch

        # Generate
        self.preview_tree.delete(*self.preview_tree.get_children())
        for ticket in self.generated:
            self.preview_tree.insert(
                "", "end", iid=ticket.id, values=(ticket.number, format_local(ticket.generated_at), ticket.extra)
            )
        if batch:
            self.undo_button.configure(text=f"Undo Last Generation ({len(batch)} tickets)")
            self.undo_button.state(["!disabled"])
        else:
            self.undo_button.configure(text="Undo Last Generation")
            self.undo_button.state(["disabled"])

        # Scan history
        self.history_tree.delete(*self.history_tree.get_children())
        for number, stamp, status, ok in self.scan_history:
            self.history_tree.insert("", "end", values=(number, stamp, status), tags=("green" if ok else "red",))

        # Reports
        stats = summarize(tickets)
        self.stats_label.configure(
            text=(
                f"Total: {stats.total}    Scanned: {stats.scanned}    "
                f"Not Scanned: {stats.not_scanned}    Scan Rate: {stats.scan_rate}%"
            )
        )
        self.period_tree.delete(*self.period_tree.get_children())
        for bucket in bucket_by_period(tickets, self.v_period.get()):
            self.period_tree.insert("", "end", values=(bucket.label, bucket.generated, bucket.scanned))
        self.report_tree.delete(*self.report_tree.get_children())
        for ticket in filter_tickets(tickets, self.v_filter.get()):
            status = "Scanned" if ticket.is_scanned else "Pending"
            self.report_tree.insert(
                "",
                "end",
                values=(ticket.number, format_local(ticket.generated_at), status, format_local(ticket.scanned_at)),
                tags=("green" if ticket.is_scanned else "orange",),
            )

        # Settings
        self.data_label.configure(
            text=f"Total Tickets: {stats.total}    Scanned: {stats.scanned}    Storage: {self.ledger.store.__class__.__name__}"
        )

    # ---------- toast & logs ----------

    def _render_toast(self, note: Optional[Notification]) -> None:
        if note is None:
            self.toast_label.configure(text="", bg=BG)
            return
        self.toast_label.configure(text=note.message, bg=TOAST_COLOURS.get(note.kind, BG))

    def toggle_logs(self) -> None:
        """Show logs in bottom pane. Resize pane to show/hide."""
        if self.show_logs.get():
            self.paned.pane(self.bottom_frame, weight=1)
            self.logs_box.pack(fill=tk.BOTH, expand=True, padx=10, pady=(0, 6))
            self.paned.update_idletasks()
            total = self.paned.winfo_height()
            if total > 0:
                self.paned.sashpos(0, int(total * 0.8))
        else:
            self.logs_box.pack_forget()
            self.paned.pane(self.bottom_frame, weight=0)
            self.paned.update_idletasks()
            total = self.paned.winfo_height()
            if total > 0:
                self.paned.sashpos(0, total)

    def _append_log(self, text: str) -> None:
        """
        Purpose: Append one line to the Logs panel and trim to LOG_MAX_LINES.
        Thread-safety: Main thread only (called via after()).
        """
        self.logs_box.configure(state="normal")
        self.logs_box.insert("end", text)
        self.logs_box.see("end")
        total_lines = int(self.logs_box.index("end-1c").split(".")[0])
        if total_lines > LOG_MAX_LINES:
            remove = total_lines - LOG_MAX_LINES
            self.logs_box.delete("1.0", f"{remove + 1}.0")
        self.logs_box.configure(state="disabled")

    def close(self) -> None:
        """Release the camera, cancel the toast timer and detach the log handler, then quit."""
        if self.session is not None:
            self.session.stop()
        self.notifier.close()
        logging.getLogger().removeHandler(self.log_handler)
        self.root.destroy()
