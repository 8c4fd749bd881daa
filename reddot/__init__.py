"""
Reddot - keyboard-driven clicking of notification badges.
Detects small red badges in the foreground window and lets you click them
with Vimium-style letter hints.
"""

__version__ = "0.3.0"
