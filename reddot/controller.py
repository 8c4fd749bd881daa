"""
Hint selection controller - the keyboard-driven badge clicking state machine.

Idle -> Detecting -> Active -> Dispatching -> Idle (or back to Detecting in
persistent mode). Key interception runs on a foreign OS thread, so the
interception side only reads the state and posts messages; every transition
and every overlay call happens in process_pending() on the owning thread
(the tk main loop in the app).
"""

import queue
import threading
import time
from enum import Enum
from typing import Callable, List, Optional

from .coordinates import ScreenPoint
from .events import (
    ControllerEvent,
    DetectionFinished,
    DispatchFinished,
    Hint,
    KeyEvent,
    ResetEvent,
    TriggerEvent,
)
from .keymap import CANCEL_KEY, HINT_LABELS, label_for_index
from .utils import log_to_console


NO_BADGE_TEXT = "NO BADGE"


class HintState(Enum):
    """State of the controller."""
    IDLE = "idle"
    DETECTING = "detecting"
    ACTIVE = "active"
    DISPATCHING = "dispatching"


def assign_hints(points: List[ScreenPoint]) -> List[Hint]:
    """Label points a, b, c... in order; points past the 26th get no hint."""
    hints = []
    for index, point in enumerate(points):
        label = label_for_index(index)
        if label is None:
            break
        hints.append(Hint(label=label, point=point))
    return hints


def _spawn_thread(target: Callable, *args) -> None:
    threading.Thread(target=target, args=args, daemon=True).start()


class HintSelectionController:
    """
    Owns the hint state, the current hint set and the message queue.

    Collaborators:
        detect: no-arg callable returning screen points (blocking; run on a worker)
        overlay: show_hints(hints), show_status(text, seconds), dismiss_all()
        injector: move_to(x, y) and click(x, y), each returning an ActionResult
    """

    def __init__(
        self,
        detect: Callable[[], List[ScreenPoint]],
        overlay,
        injector,
        persistent: bool = False,
        status_seconds: float = 0.8,
        hover_settle: float = 0.05,
        persistent_settle: float = 0.6,
        spawn: Optional[Callable] = None,
        sleep: Callable[[float], None] = time.sleep,
        log_callback: Optional[Callable[[str, str], None]] = None,
    ):
        self._detect = detect
        self.overlay = overlay
        self.injector = injector
        self.persistent = persistent
        self.status_seconds = status_seconds
        self.hover_settle = hover_settle
        self.persistent_settle = persistent_settle
        self._spawn = spawn or _spawn_thread
        self._sleep = sleep
        self._log_callback = log_callback

        self._lock = threading.Lock()
        self._queue: "queue.Queue[ControllerEvent]" = queue.Queue()
        self._state = HintState.IDLE
        self._hints: List[Hint] = []
        self._request_id = 0
        self._running = False

    # ------------------------------------------------------------------
    # Lifecycle

    def start(self) -> None:
        """Begin accepting input. Call once at service start."""
        self._running = True
        self.log("Hint controller started", "success")

    def stop(self) -> None:
        """Force back to idle and stop accepting input. Safe to call repeatedly."""
        if self._running:
            self.log("Hint controller stopping", "info")
        self._running = False
        self.reset("stopped")
        self._drain()

    def _drain(self) -> None:
        try:
            while True:
                self._queue.get_nowait()
        except queue.Empty:
            pass

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def state(self) -> HintState:
        with self._lock:
            return self._state

    @property
    def hints(self) -> List[Hint]:
        with self._lock:
            return list(self._hints)

    @property
    def running(self) -> bool:
        return self._running

    def set_log_callback(self, callback: Optional[Callable[[str, str], None]]) -> None:
        self._log_callback = callback

    def log(self, message, tag="info"):
        (self._log_callback or log_to_console)(str(message), str(tag))

    # ------------------------------------------------------------------
    # Interception side (foreign thread, must return immediately)

    def handle_trigger(self) -> bool:
        """The hotkey fired. Returns True so the hotkey is swallowed."""
        if not self._running:
            return False
        self._queue.put(TriggerEvent())
        return True

    def handle_key(self, key: str) -> bool:
        """
        A key went down. Returns True if it must be swallowed.

        While hints are showing every key is swallowed and queued; otherwise
        keys pass through untouched.
        """
        if not self._running:
            return False
        with self._lock:
            active = self._state is HintState.ACTIVE
        if not active:
            return False
        self._queue.put(KeyEvent(key=key))
        return True

    def request_reset(self, reason: str) -> None:
        """Thread-safe request to force the controller back to idle."""
        self._queue.put(ResetEvent(reason=reason))

    # ------------------------------------------------------------------
    # Owner side

    def process_pending(self) -> int:
        """
        Apply every queued message. Call periodically on the owning thread.

        Returns:
            Number of messages handled
        """
        handled = 0
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                break
            handled += 1
            try:
                self._dispatch(event)
            except Exception as e:
                self.log(f"Error handling {event.event_type.value}: {e}", "error")
                self.reset(f"error: {e}")
                try:
                    self.overlay.show_status(NO_BADGE_TEXT, self.status_seconds)
                except Exception as status_error:
                    self.log(f"Overlay could not show status: {status_error}", "error")
        return handled

    def _dispatch(self, event: ControllerEvent) -> None:
        if isinstance(event, ResetEvent):
            self.reset(event.reason)
        elif not self._running:
            return
        elif isinstance(event, TriggerEvent):
            self._on_trigger()
        elif isinstance(event, KeyEvent):
            self._on_key(event.key)
        elif isinstance(event, DetectionFinished):
            self._on_detection_finished(event)
        elif isinstance(event, DispatchFinished):
            self._on_dispatch_finished(event)

    def reset(self, reason: str = "") -> None:
        """
        Force back to idle, hide everything and orphan in-flight work.
        Owner thread only; idempotent.
        """
        with self._lock:
            was = self._state
            self._state = HintState.IDLE
            self._hints = []
            self._request_id += 1
        try:
            self.overlay.dismiss_all()
        except Exception as e:
            self.log(f"Overlay could not dismiss: {e}", "error")
        if was is not HintState.IDLE:
            self.log(f"Reset from {was.value} ({reason or 'no reason'})", "warning")

    def _set_state(self, state: HintState) -> None:
        with self._lock:
            self._state = state

    def _on_trigger(self) -> None:
        state = self.state
        if state is not HintState.IDLE:
            self.log(f"Trigger ignored while {state.value}", "info")
            return
        self._start_detection()

    def _start_detection(self) -> None:
        with self._lock:
            self._request_id += 1
            request_id = self._request_id
            self._state = HintState.DETECTING
            self._hints = []
        self.log(f"Detecting badges (request {request_id})", "action")
        self._spawn(self._run_detection, request_id)

    def _run_detection(self, request_id: int) -> None:
        """Worker thread: run the detector and post the result back."""
        try:
            points = list(self._detect())
        except Exception as e:
            self._queue.put(DetectionFinished(request_id=request_id, error=str(e)))
            return
        self._queue.put(DetectionFinished(request_id=request_id, points=points))

    def _on_detection_finished(self, event: DetectionFinished) -> None:
        with self._lock:
            current = event.request_id == self._request_id and self._state is HintState.DETECTING
        if not current:
            self.log(f"Discarding stale detection result (request {event.request_id})", "info")
            return

        if event.error:
            self.log(f"Detection failed: {event.error}", "error")
        if not event.points:
            self._set_state(HintState.IDLE)
            self.overlay.show_status(NO_BADGE_TEXT, self.status_seconds)
            return

        hints = assign_hints(event.points)
        dropped = len(event.points) - len(hints)
        if dropped:
            self.log(f"{dropped} badges beyond '{HINT_LABELS[-1]}' have no hint", "warning")

        with self._lock:
            self._hints = hints
            self._state = HintState.ACTIVE
        self.overlay.show_hints(list(hints))
        self.log(f"Showing {len(hints)} hints", "success")

    def _on_key(self, key: str) -> None:
        if self.state is not HintState.ACTIVE:
            return

        if key == CANCEL_KEY:
            self.log("Hint mode cancelled", "info")
            self.reset("cancelled")
            return

        with self._lock:
            hint = next((h for h in self._hints if h.label == key), None)
            if hint is None:
                return
            self._state = HintState.DISPATCHING
            self._hints = []
            request_id = self._request_id

        self.overlay.dismiss_all()
        self.log(f"Clicking hint '{hint.label}' at ({hint.point.x:.0f}, {hint.point.y:.0f})", "action")
        self._spawn(self._run_dispatch, request_id, hint)

    def _run_dispatch(self, request_id: int, hint: Hint) -> None:
        """Worker thread: move, settle, click, then report back."""
        x, y = hint.point.x, hint.point.y
        try:
            result = self.injector.move_to(x, y)
            if result.success:
                self._sleep(self.hover_settle)
                result = self.injector.click(x, y)
            if self.persistent:
                self._sleep(self.persistent_settle)
            self._queue.put(DispatchFinished(
                request_id=request_id, label=hint.label, success=result.success, message=result.message
            ))
        except Exception as e:
            self._queue.put(DispatchFinished(
                request_id=request_id, label=hint.label, success=False, message=str(e)
            ))

    def _on_dispatch_finished(self, event: DispatchFinished) -> None:
        with self._lock:
            current = event.request_id == self._request_id and self._state is HintState.DISPATCHING
        if not current:
            return

        if not event.success:
            self.log(f"Click on '{event.label}' failed: {event.message}", "error")

        if self.persistent:
            self._start_detection()
        else:
            self._set_state(HintState.IDLE)
