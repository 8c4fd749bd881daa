"""
Global keyboard interception with pynput.

On Windows and macOS the listener's platform event filters decide, still on
the hook thread, whether a key is swallowed. Other platforms cannot
suppress single events, so keys are observed but always passed through.
"""

import platform
from typing import Optional

from pynput import keyboard

from .controller import HintSelectionController, HintState
from .exceptions import InterceptionError
from .keymap import (
    OTHER_KEY,
    WIN32_KEYDOWN_MESSAGES,
    key_for_mac_keycode,
    key_for_pynput,
    key_for_win32_vk,
    parse_hotkey,
)
from .utils import log_to_console


# pynput canonical modifier keys -> names used in hotkey specs
_MODIFIER_NAMES = {
    keyboard.Key.ctrl: "ctrl",
    keyboard.Key.shift: "shift",
    keyboard.Key.alt: "alt",
    keyboard.Key.cmd: "cmd",
}


class KeyInterceptor:
    """Feeds global key presses into a HintSelectionController."""

    def __init__(self, controller: HintSelectionController, hotkey: str = "<ctrl>+f"):
        self.controller = controller
        self.hotkey = hotkey
        self._trigger_modifiers, self._trigger_key = parse_hotkey(hotkey)
        self._held_modifiers = set()
        self._listener: Optional[keyboard.Listener] = None
        self.system = platform.system()
        self.can_suppress = self.system in ("Windows", "Darwin")

    def start(self) -> None:
        """Install the global hook."""
        if self._listener is not None and self._listener.is_alive():
            return

        self._held_modifiers.clear()
        kwargs = {}
        if self.system == "Windows":
            kwargs["win32_event_filter"] = self._win32_filter
        elif self.system == "Darwin":
            kwargs["darwin_intercept"] = self._darwin_intercept

        try:
            self._listener = keyboard.Listener(
                on_press=self._on_press,
                on_release=self._on_release,
                **kwargs,
            )
            self._listener.start()
            self._listener.wait()
        except Exception as e:
            raise InterceptionError(f"Could not install keyboard hook: {e}") from e

        if not self.can_suppress:
            log_to_console(
                "Key suppression is not available on this platform; hint keys will also reach the focused app",
                "warning",
            )
        log_to_console(f"Listening for {self.hotkey}", "success")

    def stop(self) -> None:
        """Remove the hook. Safe to call repeatedly."""
        if self._listener is not None:
            self._listener.stop()
            self._listener = None

    def is_alive(self) -> bool:
        return self._listener is not None and self._listener.is_alive()

    # ------------------------------------------------------------------
    # Decision

    def _should_swallow(self, key_name: str) -> bool:
        """
        Decide for one key-down. Only returns True after handing the key to
        the controller, so a swallowed key is never lost.
        """
        if self.controller.state is HintState.ACTIVE:
            return self.controller.handle_key(key_name)
        if key_name == self._trigger_key and self._trigger_modifiers <= self._held_modifiers:
            return self.controller.handle_trigger()
        return False

    # ------------------------------------------------------------------
    # pynput callbacks

    def _modifier_name(self, key) -> Optional[str]:
        listener = self._listener
        canonical = listener.canonical(key) if listener is not None else key
        return _MODIFIER_NAMES.get(canonical)

    def _on_press(self, key) -> None:
        modifier = self._modifier_name(key)
        if modifier:
            self._held_modifiers.add(modifier)
            return
        if not self.can_suppress:
            # Filters did not run; observe only
            self._should_swallow(key_for_pynput(key))

    def _on_release(self, key) -> None:
        modifier = self._modifier_name(key)
        if modifier:
            self._held_modifiers.discard(modifier)

    def _win32_filter(self, msg, data) -> bool:
        if msg not in WIN32_KEYDOWN_MESSAGES:
            return True
        key_name = key_for_win32_vk(data.vkCode)
        if key_name == OTHER_KEY and self.controller.state is not HintState.ACTIVE:
            return True
        if self._should_swallow(key_name):
            self._listener.suppress_event()
        return True

    def _darwin_intercept(self, event_type, event):
        import Quartz

        if event_type != Quartz.kCGEventKeyDown:
            return event
        code = Quartz.CGEventGetIntegerValueField(event, Quartz.kCGKeyboardEventKeycode)
        if self._should_swallow(key_for_mac_keycode(code)):
            return None
        return event
