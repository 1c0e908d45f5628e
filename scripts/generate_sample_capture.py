#!/usr/bin/env python3
"""Generate a synthetic capture for OverlayForge pipeline testing.

Writes pointer samples at 60 Hz and a matching raw input event log for a
~12-second session:
  0-2s    sweep across the screen
  2-5s    parked (cursor should hide)
  5-7s    small circles around one spot (anchored drift, should stay hidden)
  7-9s    move to a button and click it at 8.5s
  9-10s   type "Ctrl + S", then scroll
  10-12s  parked again
"""

import json
import math
import sys
from pathlib import Path

RATE = 60
DURATION = 12.0


def pointer_at(t: float) -> tuple[float, float, bool]:
    if t < 2.0:
        return 200 + 700 * t, 300 + 150 * t, False
    if t < 5.0:
        return 1600.0, 600.0, False
    if t < 7.0:
        angle = 2 * math.pi * (t - 5.0) / 0.5
        return 1600 + 6 * math.cos(angle), 600 + 6 * math.sin(angle), False
    if t < 9.0:
        frac = min(1.0, (t - 7.0) / 1.2)
        return 1606 - 800 * frac, 600 - 300 * frac, abs(t - 8.5) < 0.05
    return 806.0, 300.0, False


def generate_sample_capture(output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)

    samples = []
    for i in range(int(DURATION * RATE) + 1):
        t = i / RATE
        x, y, clicked = pointer_at(t)
        samples.append({"x": round(x, 1), "y": round(y, 1), "timestamp": round(t, 4), "is_clicked": clicked})

    ctrl = {"ctrl": True}
    events = [
        {"type": "mousedown", "timestamp": 8.48, "button": "left", "direction": "down"},
        {"type": "mousedown", "timestamp": 8.56, "button": "left", "direction": "up"},
        {"type": "keyboard", "timestamp": 9.1, "key": "Ctrl", "vk": 17, "direction": "down", "modifiers": ctrl},
        {"type": "keyboard", "timestamp": 9.2, "key": "S", "vk": 83, "direction": "down", "modifiers": ctrl},
        {"type": "keyboard", "timestamp": 9.3, "key": "S", "vk": 83, "direction": "up", "modifiers": ctrl},
        {"type": "keyboard", "timestamp": 9.35, "key": "Ctrl", "vk": 17, "direction": "up"},
        {"type": "wheel", "timestamp": 9.6, "direction": "down"},
        {"type": "wheel", "timestamp": 9.7, "direction": "down"},
    ]

    manifest = {
        "version": "1",
        "pointer_samples": "capture.json",
        "input_events": "events.json",
        "output": "capture_overlays.json",
        "duration": DURATION,
        "width": 1920,
        "height": 1080,
        "keystrokes": {"mode": "keyboardMouse"},
        "export": {"bake": True, "fps": 30},
    }

    (output_dir / "capture.json").write_text(json.dumps({"samples": samples}, indent=1))
    (output_dir / "events.json").write_text(json.dumps({"events": events}, indent=1))
    (output_dir / "manifest.json").write_text(json.dumps(manifest, indent=2))
    print(f"Generated: {output_dir} ({len(samples)} samples, {len(events)} events)")


if __name__ == "__main__":
    out = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("tests/fixtures/synthetic")
    generate_sample_capture(out)
