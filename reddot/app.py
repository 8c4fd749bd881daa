"""
Reddot service - wires capture, detection, the hint controller, the overlay
and the keyboard hook together around one tk main loop.
"""

import signal
import tkinter as tk
from typing import Optional

from .config import ReddotConfig, config
from .controller import HintSelectionController
from .detector import BadgeDetector
from .exceptions import InterceptionError
from .executors import MouseExecutor
from .hotkeys import KeyInterceptor
from .overlay import TkOverlay
from .screenshot import WindowCapture
from .utils import log_to_console


class ReddotApp:
    """One process-wide service: start() once, stop() once."""

    def __init__(self, cfg: Optional[ReddotConfig] = None):
        self.config = cfg or config
        self.config.validate()

        self.root = tk.Tk()
        self.root.withdraw()  # Only overlay windows are ever shown

        self.capture = WindowCapture(
            scale_factor=self.config.scale_factor,
            fullscreen_fallback=self.config.fullscreen_fallback,
            min_window_size=self.config.min_window_size,
        )
        self.detector = BadgeDetector(self.config.detection_settings())
        self.overlay = TkOverlay(self.root)
        self.mouse = MouseExecutor(press_duration=self.config.press_duration)
        self.controller = HintSelectionController(
            detect=lambda: self.detector.detect_foreground(self.capture),
            overlay=self.overlay,
            injector=self.mouse,
            persistent=self.config.persistent_mode,
            status_seconds=self.config.status_seconds,
            hover_settle=self.config.hover_settle,
            persistent_settle=self.config.persistent_settle,
        )
        self.interceptor = KeyInterceptor(self.controller, self.config.hotkey)
        self._pump_job: Optional[str] = None
        self._stopped = False

    def start(self) -> None:
        """Start the controller, install the keyboard hook and the message pump."""
        self.controller.start()
        self.interceptor.start()
        self._pump()

    def _pump(self) -> None:
        """Process controller messages from the hook and worker threads."""
        try:
            self.controller.process_pending()

            if self.controller.running and not self.interceptor.is_alive():
                log_to_console("Keyboard hook stopped; reinstalling", "warning")
                self.controller.reset("keyboard hook stopped")
                try:
                    self.interceptor.start()
                except InterceptionError as e:
                    log_to_console(str(e), "error")
        finally:
            # One failed tick must not end the pump
            if not self._stopped:
                self._pump_job = self.root.after(self.config.pump_interval_ms, self._pump)

    def stop(self) -> None:
        """Shut down. Safe to call more than once."""
        if self._stopped:
            return
        self._stopped = True
        if self._pump_job is not None:
            self.root.after_cancel(self._pump_job)
            self._pump_job = None
        self.interceptor.stop()
        self.controller.stop()
        self.root.quit()

    def run(self) -> None:
        """Run until Ctrl+C in the terminal."""
        # Signals are only delivered between tk events; the pump keeps them flowing
        signal.signal(signal.SIGINT, lambda *_: self.root.after(0, self.stop))
        self.start()
        try:
            self.root.mainloop()
        finally:
            self.stop()
            self.root.destroy()


def launch():
    """Launch the Reddot service."""
    app = ReddotApp()
    app.run()
