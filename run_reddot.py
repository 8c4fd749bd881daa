#!/usr/bin/env python3
"""
Reddot - Main Entry Point

Press the hotkey (Ctrl+F by default) to tag every red notification badge in
the foreground window with a letter, then type the letter to click it.

Usage:
    python run_reddot.py
    python run_reddot.py --persistent --hotkey "<ctrl>+<shift>+j"
    python run_reddot.py --detect-once
    python run_reddot.py --image screenshot.png
"""

import sys
import argparse
from typing import List, Optional

from PIL import Image
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from reddot import __version__
from reddot.config import config
from reddot.controller import assign_hints
from reddot.coordinates import WindowRect
from reddot.detector import BadgeDetector
from reddot.exceptions import ConfigError, ReddotError
from reddot.screenshot import PixelBuffer


console = Console()


def print_banner():
    """Print the startup banner."""
    banner = f"""
+===========================================================+
|                                                           |
|      REDDOT {__version__:<46}|
|                                                           |
|      Click notification badges from the keyboard          |
|                                                           |
+===========================================================+
"""
    console.print(banner, style="bold red")


def print_status():
    """Print current configuration."""
    table = Table(title="Configuration", show_header=False, border_style="dim")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Hotkey", config.hotkey)
    table.add_row("Persistent mode", "on" if config.persistent_mode else "off")
    table.add_row("Scale factor", str(config.scale_factor) if config.scale_factor else "auto")
    table.add_row("Thresholds", f"V >= {config.v_min}, S >= {config.s_min:.2f}")
    table.add_row("Merge gap", f"{config.merge_gap}px")
    table.add_row("Debug dump", config.debug_dump_dir or "off")

    console.print(table)
    console.print()


def print_points(points, title: str):
    """Print detections as a table of hint label and screen position."""
    hints = assign_hints(points)
    table = Table(title=title, border_style="dim")
    table.add_column("Hint", style="bold yellow")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")

    for i, point in enumerate(points):
        label = hints[i].label if i < len(hints) else "-"
        table.add_row(label, f"{point.x:.1f}", f"{point.y:.1f}")

    console.print(table)


def parse_window(value: str) -> WindowRect:
    """'x,y,w,h' -> WindowRect."""
    try:
        left, top, width, height = (float(v) for v in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError("expected x,y,width,height")
    return WindowRect(left, top, width, height)


def detect_image(path: str, window: Optional[WindowRect]) -> int:
    """Run the detector on a saved screenshot."""
    image = Image.open(path)
    buffer = PixelBuffer.from_image(image)
    rect = window or WindowRect(0, 0, buffer.width, buffer.height)

    detector = BadgeDetector(config.detection_settings())
    points = detector.detect(buffer, rect)
    print_points(points, f"{len(points)} badges in {path}")
    return 0 if points else 1


def detect_once() -> int:
    """Capture the foreground window once and list its badges."""
    from reddot.screenshot import WindowCapture

    capture = WindowCapture(
        scale_factor=config.scale_factor,
        fullscreen_fallback=config.fullscreen_fallback,
        min_window_size=config.min_window_size,
    )
    detector = BadgeDetector(config.detection_settings())
    points = detector.detect_foreground(capture)
    print_points(points, f"{len(points)} badges in the foreground window")
    return 0 if points else 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Reddot - click notification badges from the keyboard"
    )
    parser.add_argument(
        "-p", "--persistent",
        action="store_true",
        help="Detect again after every click instead of returning to idle"
    )
    parser.add_argument(
        "-k", "--hotkey",
        default=None,
        help=f"Hotkey that shows the hints (default: {config.hotkey})"
    )
    parser.add_argument(
        "--scale-factor",
        type=float,
        default=None,
        help="Device pixels per screen point (default: measured)"
    )
    parser.add_argument(
        "--debug-dump",
        default=None,
        metavar="DIR",
        help="Save every capture and its red mask as PNGs in DIR"
    )
    parser.add_argument(
        "--detect-once",
        action="store_true",
        help="Detect badges in the foreground window, print them and exit"
    )
    parser.add_argument(
        "--image",
        default=None,
        metavar="PATH",
        help="Detect badges in a saved screenshot, print them and exit"
    )
    parser.add_argument(
        "--window",
        type=parse_window,
        default=None,
        metavar="X,Y,W,H",
        help="Screen rectangle the --image was taken from"
    )

    args = parser.parse_args(argv)

    # Override config if needed
    if args.persistent:
        config.persistent_mode = True
    if args.hotkey:
        config.hotkey = args.hotkey
    if args.scale_factor:
        config.scale_factor = args.scale_factor
    if args.debug_dump:
        config.debug_dump_dir = args.debug_dump

    try:
        config.validate()
    except ConfigError as e:
        console.print(Panel(str(e), title="CONFIGURATION ERROR", border_style="red"))
        return 2

    try:
        if args.image:
            return detect_image(args.image, args.window)
        if args.detect_once:
            return detect_once()
    except ReddotError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        return 1

    print_banner()
    print_status()
    console.print("[dim]Press Ctrl+C here to quit.[/dim]")

    from reddot.app import launch
    try:
        launch()
    except ReddotError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
