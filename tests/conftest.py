"""Shared test fixtures."""

import math
from pathlib import Path

import pytest

from overlayforge.models import PointerSample

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_manifest_path() -> Path:
    return FIXTURES_DIR / "sample_manifest.json"


@pytest.fixture
def capture_path() -> Path:
    return FIXTURES_DIR / "capture.json"


@pytest.fixture
def events_path() -> Path:
    return FIXTURES_DIR / "events.json"


def still_track(x: float, y: float, start: float, end: float, step: float = 0.02) -> list[PointerSample]:
    """Samples parked at one point from ``start`` to ``end`` inclusive."""
    n = int(round((end - start) / step))
    return [PointerSample(x=x, y=y, timestamp=start + i * step) for i in range(n + 1)]


def moving_track(
    x0: float, y0: float, vx: float, start: float, end: float, step: float = 0.02
) -> list[PointerSample]:
    """Samples moving horizontally at ``vx`` px/s."""
    n = int(round((end - start) / step))
    return [
        PointerSample(x=x0 + vx * i * step, y=y0, timestamp=start + i * step)
        for i in range(n + 1)
    ]


def drift_track(
    cx: float, cy: float, radius: float, start: float, end: float,
    period: float = 0.4, step: float = 0.02,
) -> list[PointerSample]:
    """Samples circling a point, fast enough to look like movement."""
    n = int(round((end - start) / step))
    out = []
    for i in range(n + 1):
        t = start + i * step
        angle = 2 * math.pi * t / period
        out.append(PointerSample(x=cx + radius * math.cos(angle), y=cy + radius * math.sin(angle), timestamp=t))
    return out


@pytest.fixture
def idle_middle_track() -> list[PointerSample]:
    """Move for 1.5s, rest for 3s, move again for 1.5s (6s total)."""
    first = moving_track(100.0, 300.0, 400.0, 0.0, 1.5)
    rest = still_track(first[-1].x, 300.0, 1.52, 4.5)
    last = moving_track(first[-1].x, 300.0, 400.0, 4.5, 6.0)[1:]
    return first + rest + last
