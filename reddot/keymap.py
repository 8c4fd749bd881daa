"""
Fixed key tables: OS key codes to hint letters and the cancel key.
"""

import string
from typing import Optional, Tuple

from .exceptions import ConfigError


HINT_LABELS = string.ascii_lowercase
CANCEL_KEY = "escape"
OTHER_KEY = "other"

# macOS virtual key codes (kVK_ANSI_*), which follow the physical ANSI layout
MAC_KEYCODE_TO_KEY = {
    0: "a", 11: "b", 8: "c", 2: "d", 14: "e", 3: "f", 5: "g", 4: "h",
    34: "i", 38: "j", 40: "k", 37: "l", 46: "m", 45: "n", 31: "o",
    35: "p", 12: "q", 15: "r", 1: "s", 17: "t", 32: "u", 9: "v",
    13: "w", 7: "x", 16: "y", 6: "z",
    53: CANCEL_KEY,
}

# Win32 virtual-key codes: VK_A..VK_Z are ASCII 'A'..'Z', VK_ESCAPE is 0x1B
WIN32_VK_TO_KEY = {ord(c.upper()): c for c in HINT_LABELS}
WIN32_VK_TO_KEY[0x1B] = CANCEL_KEY

WIN32_KEYDOWN_MESSAGES = (0x0100, 0x0104)  # WM_KEYDOWN, WM_SYSKEYDOWN


def key_for_mac_keycode(code: int) -> str:
    return MAC_KEYCODE_TO_KEY.get(code, OTHER_KEY)


def key_for_win32_vk(vk: int) -> str:
    return WIN32_VK_TO_KEY.get(vk, OTHER_KEY)


def key_for_pynput(key) -> str:
    """
    Logical key name for a pynput Key/KeyCode.

    Letters come back lowercase whatever the modifiers; Escape is
    CANCEL_KEY; everything else is OTHER_KEY.
    """
    name = getattr(key, "name", None)
    if name == "esc":
        return CANCEL_KEY
    if name is not None:
        # Any other special key (tab, enter, arrows...)
        return OTHER_KEY

    char = getattr(key, "char", None)
    if char and len(char) == 1 and char.lower() in HINT_LABELS:
        return char.lower()

    # Ctrl+letter arrives as a control character on some backends
    if char and len(char) == 1 and 1 <= ord(char) <= 26:
        return HINT_LABELS[ord(char) - 1]

    vk = getattr(key, "vk", None)
    if char is None and vk in WIN32_VK_TO_KEY:
        return WIN32_VK_TO_KEY[vk]
    return OTHER_KEY


def parse_hotkey(combo: str) -> Tuple[frozenset, str]:
    """
    Split a pynput-style hotkey ("<ctrl>+f", "<cmd>+<shift>+j") into its
    modifier names and its letter.

    Raises:
        ConfigError: empty combination, or the last part is not a single letter
    """
    parts = [p.strip().lower() for p in combo.split("+") if p.strip()]
    if not parts:
        raise ConfigError("Hotkey is empty")

    *mods, trigger = parts
    if len(trigger) != 1 or trigger not in HINT_LABELS:
        raise ConfigError(f"Hotkey must end in a letter, got '{trigger}'")

    modifiers = set()
    for mod in mods:
        if not (mod.startswith("<") and mod.endswith(">")):
            raise ConfigError(f"Modifier '{mod}' must be written like <ctrl>")
        modifiers.add(mod[1:-1])
    return frozenset(modifiers), trigger


def label_for_index(index: int) -> Optional[str]:
    """Hint label for the index-th badge, or None past 'z'."""
    if 0 <= index < len(HINT_LABELS):
        return HINT_LABELS[index]
    return None
