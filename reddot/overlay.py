"""
Overlay renderer: Vimium-style letter tags next to each badge, and a small
status HUD. All methods must be called on the tk thread.
"""

import tkinter as tk
from typing import List, Optional

from .events import Hint


HINT_BG = "#FFEB3B"  # Vimium yellow
HINT_FG = "#000000"
HINT_FONT = ("Menlo", 14, "bold")
STATUS_BG = "#000000"
STATUS_FG = "#FFFFFF"
STATUS_FONT = ("Menlo", 18, "bold")
STATUS_BOTTOM_OFFSET = 120  # Pixels above the bottom edge of the screen


class TkOverlay:
    """Borderless always-on-top tk windows used as hint tags and status HUD."""

    def __init__(self, root: tk.Tk):
        self.root = root
        self._hint_windows: List[tk.Toplevel] = []
        self._status_window: Optional[tk.Toplevel] = None
        self._status_label: Optional[tk.Label] = None
        self._hide_job: Optional[str] = None

    def _borderless(self) -> tk.Toplevel:
        w = tk.Toplevel(self.root)
        w.overrideredirect(True)
        w.attributes("-topmost", True)
        return w

    def show_hints(self, hints: List[Hint]) -> None:
        """Show one tag per hint; the tag sits just left of the badge, top-aligned."""
        self._clear_hints()

        for hint in hints:
            w = self._borderless()
            w.configure(bg=HINT_BG, highlightthickness=1, highlightbackground="#4d4d4d")
            label = tk.Label(w, text=hint.label, font=HINT_FONT, fg=HINT_FG, bg=HINT_BG, padx=6, pady=2)
            label.pack()
            w.update_idletasks()

            x, y = hint.point.rounded()
            tag_w = w.winfo_reqwidth()
            w.geometry(f"+{x - tag_w - 2}+{y}")
            self._hint_windows.append(w)

    def show_status(self, text: str, auto_dismiss_seconds: float = 2.0) -> None:
        """Show a short message centred near the bottom of the screen."""
        self._cancel_hide()

        if self._status_window is None:
            w = self._borderless()
            w.configure(bg=STATUS_BG)
            try:
                w.attributes("-alpha", 0.75)
            except tk.TclError:
                pass  # No compositor
            self._status_label = tk.Label(
                w, font=STATUS_FONT, fg=STATUS_FG, bg=STATUS_BG, padx=24, pady=12
            )
            self._status_label.pack()
            self._status_window = w

        self._status_label.config(text=text)
        w = self._status_window
        w.update_idletasks()
        width, height = w.winfo_reqwidth(), w.winfo_reqheight()
        x = (w.winfo_screenwidth() - width) // 2
        y = w.winfo_screenheight() - STATUS_BOTTOM_OFFSET - height
        w.geometry(f"+{x}+{y}")
        w.deiconify()
        w.lift()

        self._hide_job = self.root.after(int(auto_dismiss_seconds * 1000), self._hide_status)

    def dismiss_all(self) -> None:
        """Hide hints and status. Safe to call when nothing is showing."""
        self._clear_hints()
        self._cancel_hide()
        self._hide_status()

    def _clear_hints(self) -> None:
        for w in self._hint_windows:
            w.destroy()
        self._hint_windows = []

    def _cancel_hide(self) -> None:
        if self._hide_job is not None:
            self.root.after_cancel(self._hide_job)
            self._hide_job = None

    def _hide_status(self) -> None:
        self._hide_job = None
        if self._status_window is not None:
            self._status_window.withdraw()
