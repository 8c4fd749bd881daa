"""Tests for the command-line entry point's offline modes."""
import argparse

import pytest
from PIL import Image, ImageDraw

import run_reddot
from reddot.coordinates import WindowRect


@pytest.fixture
def screenshot_path(tmp_path):
    image = Image.new("RGB", (200, 100), (240, 240, 240))
    draw = ImageDraw.Draw(image)
    draw.rectangle((20, 20, 35, 35), fill=(230, 30, 30))
    draw.rectangle((120, 60, 135, 75), fill=(230, 30, 30))
    path = tmp_path / "shot.png"
    image.save(path)
    return path


def test_image_mode_lists_badges(screenshot_path, capsys):
    assert run_reddot.main(["--image", str(screenshot_path)]) == 0
    out = capsys.readouterr().out
    assert "Hint" in out


def test_image_mode_without_badges(tmp_path):
    path = tmp_path / "blank.png"
    Image.new("RGB", (50, 50), (255, 255, 255)).save(path)
    assert run_reddot.main(["--image", str(path)]) == 1


def test_image_mode_with_window_offset(screenshot_path, monkeypatch):
    seen = []
    monkeypatch.setattr(run_reddot, "print_points", lambda points, title: seen.extend(points))

    run_reddot.main(["--image", str(screenshot_path), "--window", "1000,500,100,50"])

    assert [(p.x, p.y) for p in seen] == [(1000 + 27.5 / 2, 500 + 27.5 / 2), (1000 + 127.5 / 2, 500 + 67.5 / 2)]


def test_parse_window():
    assert run_reddot.parse_window("1,2,3,4") == WindowRect(1, 2, 3, 4)
    with pytest.raises(argparse.ArgumentTypeError):
        run_reddot.parse_window("1,2,3")
