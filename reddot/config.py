"""
Configuration management for Reddot.
Every setting can be overridden from a .env file in the project root or from
the environment (REDDOT_* variables).
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigError
from .keymap import parse_hotkey

# Load .env file if it exists
load_dotenv(dotenv_path=Path(__file__).resolve().parent.parent / ".env")


def _env_bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(name, default))


def _env_int(name: str, default: str) -> int:
    return int(os.getenv(name, default))


@dataclass
class ReddotConfig:
    """Configuration for the badge detector and the hint controller."""

    # Pixel classification
    v_min: int = field(default_factory=lambda: _env_int("REDDOT_V_MIN", "128"))  # of 255
    s_min: float = field(default_factory=lambda: _env_float("REDDOT_S_MIN", "0.60"))

    # Region merging / shape filter
    merge_gap: int = field(default_factory=lambda: _env_int("REDDOT_MERGE_GAP", "3"))
    min_pixels: int = 20
    max_pixels: int = 3000
    min_width: int = 5
    max_width: int = 60
    min_height: int = 5
    max_height: int = 40
    min_aspect: float = 0.5
    max_aspect: float = 3.0
    min_fill_ratio: float = 0.35
    row_height: int = 20  # Reading-order row tolerance in image pixels

    # Capture
    scale_factor: Optional[float] = field(
        default_factory=lambda: float(os.getenv("REDDOT_SCALE_FACTOR")) if os.getenv("REDDOT_SCALE_FACTOR") else None
    )  # None = ask the display
    fullscreen_fallback: bool = field(default_factory=lambda: _env_bool("REDDOT_FULLSCREEN_FALLBACK", "1"))
    min_window_size: int = 50  # Ignore foreground windows smaller than this (points)

    # Hint mode
    hotkey: str = field(default_factory=lambda: os.getenv("REDDOT_HOTKEY", "<ctrl>+f"))
    persistent_mode: bool = field(default_factory=lambda: _env_bool("REDDOT_PERSISTENT", "0"))
    status_seconds: float = 0.8  # "NO BADGE" auto-dismiss
    hover_settle: float = 0.05  # Pause after moving the pointer, before pressing
    press_duration: float = 0.03  # Pause between button press and release
    persistent_settle: float = field(
        default_factory=lambda: _env_float("REDDOT_PERSISTENT_SETTLE", "0.6")
    )  # Let the target app redraw before detecting again
    pump_interval_ms: int = 30  # tk message pump period

    # Debugging
    debug_dump_dir: str = field(default_factory=lambda: os.getenv("REDDOT_DEBUG_DUMP", ""))

    def validate(self) -> bool:
        """Validate the configuration."""
        if not 0 <= self.v_min <= 255:
            raise ConfigError(f"v_min must be within 0-255, got {self.v_min}")
        if not 0.0 < self.s_min <= 1.0:
            raise ConfigError(f"s_min must be within (0, 1], got {self.s_min}")
        if self.merge_gap < 0:
            raise ConfigError(f"merge_gap must not be negative, got {self.merge_gap}")
        if self.min_pixels > self.max_pixels:
            raise ConfigError("min_pixels is larger than max_pixels")
        if self.min_width > self.max_width or self.min_height > self.max_height:
            raise ConfigError("minimum marker size is larger than the maximum")
        if self.min_aspect > self.max_aspect:
            raise ConfigError("min_aspect is larger than max_aspect")
        if self.row_height <= 0:
            raise ConfigError(f"row_height must be positive, got {self.row_height}")
        if self.scale_factor is not None and self.scale_factor <= 0:
            raise ConfigError(f"scale_factor must be positive, got {self.scale_factor}")
        for name in ("status_seconds", "hover_settle", "press_duration", "persistent_settle"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        parse_hotkey(self.hotkey)
        return True

    def marker_thresholds(self):
        """Pixel classifier thresholds as plain values."""
        from .color_mask import MarkerThresholds

        return MarkerThresholds(v_min=self.v_min, s_min_255=int(round(self.s_min * 255)))

    def shape_limits(self):
        """Shape filter bounds as plain values."""
        from .shape_filter import ShapeLimits

        return ShapeLimits(
            min_pixels=self.min_pixels,
            max_pixels=self.max_pixels,
            min_width=self.min_width,
            max_width=self.max_width,
            min_height=self.min_height,
            max_height=self.max_height,
            min_aspect=self.min_aspect,
            max_aspect=self.max_aspect,
            min_fill_ratio=self.min_fill_ratio,
        )

    def detection_settings(self):
        """Everything BadgeDetector needs, bundled."""
        from .detector import DetectionSettings

        return DetectionSettings(
            thresholds=self.marker_thresholds(),
            merge_gap=self.merge_gap,
            limits=self.shape_limits(),
            row_height=self.row_height,
            debug_dump_dir=self.debug_dump_dir,
        )


# Global config instance
config = ReddotConfig()
