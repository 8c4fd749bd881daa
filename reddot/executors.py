"""
Input injector: moves the pointer and clicks on behalf of the user.
"""

import time
from dataclasses import dataclass

import pyautogui


# Disable pyautogui failsafe (a badge may sit in a screen corner)
pyautogui.FAILSAFE = False
pyautogui.PAUSE = 0


@dataclass
class ActionResult:
    """Result of an action execution."""
    success: bool
    message: str


class MouseExecutor:
    """Handles mouse input actions."""

    def __init__(self, press_duration: float = 0.03):
        self.press_duration = press_duration

    def move_to(self, x: float, y: float, duration: float = 0.0) -> ActionResult:
        """Move mouse to absolute position."""
        x, y = int(round(x)), int(round(y))
        try:
            pyautogui.moveTo(x, y, duration=duration)
            return ActionResult(True, f"Moved mouse to ({x}, {y})")
        except Exception as e:
            return ActionResult(False, f"Failed to move mouse: {str(e)}")

    def click(self, x: float, y: float) -> ActionResult:
        """
        Press and release the left button at an absolute position.

        The button stays down for `press_duration` seconds.
        """
        x, y = int(round(x)), int(round(y))
        try:
            pyautogui.mouseDown(x, y)
            time.sleep(self.press_duration)
            pyautogui.mouseUp(x, y)
            return ActionResult(True, f"Clicked at ({x}, {y})")
        except Exception as e:
            return ActionResult(False, f"Failed to click: {str(e)}")
