"""
Utility functions for Reddot.
"""

import platform
from dataclasses import dataclass
from typing import Optional

from rich.console import Console

from .coordinates import WindowRect


console = Console()

_TAG_STYLES = {
    "info": "dim",
    "success": "green",
    "action": "cyan",
    "warning": "yellow",
    "error": "bold red",
}


@dataclass
class ForegroundWindow:
    """The window currently owning keyboard focus."""
    handle: int
    title: str
    process_name: Optional[str]
    rect: WindowRect


def get_foreground_window(min_size: int = 50) -> Optional[ForegroundWindow]:
    """
    Find the foreground window and its on-screen rectangle.

    Returns:
        ForegroundWindow, or None when it cannot be resolved on this platform
        or is smaller than `min_size` points.
    """
    system = platform.system()
    if system == "Windows":
        window = _foreground_window_win32()
    elif system == "Darwin":
        window = _foreground_window_quartz()
    else:
        window = None

    if window is None:
        return None
    if window.rect.width < min_size or window.rect.height < min_size:
        return None
    return window


def _foreground_window_win32() -> Optional[ForegroundWindow]:
    try:
        import win32gui
        import win32process
        import psutil
    except ImportError:
        return None

    hwnd = win32gui.GetForegroundWindow()
    if not hwnd:
        return None

    left, top, right, bottom = win32gui.GetWindowRect(hwnd)
    title = win32gui.GetWindowText(hwnd)
    _, pid = win32process.GetWindowThreadProcessId(hwnd)
    try:
        process_name = psutil.Process(pid).name()
    except psutil.Error:
        process_name = None

    return ForegroundWindow(
        handle=hwnd,
        title=title,
        process_name=process_name,
        rect=WindowRect(left=left, top=top, width=right - left, height=bottom - top),
    )


def _foreground_window_quartz() -> Optional[ForegroundWindow]:
    try:
        import Quartz
        from AppKit import NSWorkspace
    except ImportError:
        return None

    front_app = NSWorkspace.sharedWorkspace().frontmostApplication()
    if front_app is None:
        return None
    pid = front_app.processIdentifier()

    window_list = Quartz.CGWindowListCopyWindowInfo(
        Quartz.kCGWindowListOptionOnScreenOnly | Quartz.kCGWindowListExcludeDesktopElements,
        Quartz.kCGNullWindowID,
    )
    # Front-to-back order; the first normal-layer window of the app is its main window
    for window in window_list:
        if window.get("kCGWindowOwnerPID") != pid or window.get("kCGWindowLayer", 0) != 0:
            continue
        bounds = window.get("kCGWindowBounds", {})
        # Quartz global coordinates are already top-left based
        return ForegroundWindow(
            handle=int(window.get("kCGWindowNumber", 0)),
            title=window.get("kCGWindowName", "") or "",
            process_name=front_app.localizedName(),
            rect=WindowRect(
                left=float(bounds.get("X", 0)),
                top=float(bounds.get("Y", 0)),
                width=float(bounds.get("Width", 0)),
                height=float(bounds.get("Height", 0)),
            ),
        )
    return None


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.0f}s"


def log_to_console(message: str, tag: str = "info") -> None:
    """Default log sink: one styled line on the rich console."""
    style = _TAG_STYLES.get(tag, "")
    console.print(f"[reddot] {message}", style=style, markup=False, highlight=False)
