"""Idle-cursor detection: pointer samples -> cursor visibility intervals."""

import logging
import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass

from overlayforge.intervals import clamp_to_range, merge
from overlayforge.manifest import CursorHidingConfig
from overlayforge.models import DisplayInterval, PointerSample, TimeRange

logger = logging.getLogger(__name__)

ANCHORED_MIN_SPAN = 0.8
ANCHORED_MERGE_TOLERANCE = 0.05


@dataclass
class ActivityFlag:
    time: float
    active: bool
    clicked: bool


def _window_motion(window: list[PointerSample]) -> tuple[float, float, float]:
    """Return (velocity, net distance, path distance) across a window."""
    if len(window) < 2:
        return 0.0, 0.0, 0.0

    first, last = window[0], window[-1]
    velocity = net = 0.0
    dt = last.timestamp - first.timestamp
    if dt > 0:
        net = math.hypot(last.x - first.x, last.y - first.y)
        velocity = net / dt

    path = 0.0
    for prev, cur in zip(window, window[1:]):
        path += math.hypot(cur.x - prev.x, cur.y - prev.y)
    return velocity, net, path


def find_anchored_ranges(
    samples: list[PointerSample], config: CursorHidingConfig
) -> list[TimeRange]:
    """Windows where the cursor drifts but never leaves a small radius.

    ``samples`` must be sorted by timestamp.  Each candidate window starts at a
    sample and must cover at least 80% of ``anchored_duration``.
    """
    times = [s.timestamp for s in samples]
    found: list[TimeRange] = []

    for i, sample in enumerate(samples):
        hi = bisect_right(times, sample.timestamp + config.anchored_duration)
        window = samples[i:hi]
        if len(window) < 2:
            continue
        span = window[-1].timestamp - window[0].timestamp
        if span < config.anchored_duration * ANCHORED_MIN_SPAN:
            continue

        cx = sum(p.x for p in window) / len(window)
        cy = sum(p.y for p in window) / len(window)
        max_dist = max(math.hypot(p.x - cx, p.y - cy) for p in window)
        if max_dist <= config.anchored_radius:
            found.append(TimeRange(start=window[0].timestamp, end=window[-1].timestamp))

    merged: list[TimeRange] = []
    for rng in found:
        if merged and rng.start <= merged[-1].end + ANCHORED_MERGE_TOLERANCE:
            merged[-1].end = max(merged[-1].end, rng.end)
        else:
            merged.append(TimeRange(start=rng.start, end=rng.end))
    return merged


def classify_samples(
    samples: list[PointerSample], config: CursorHidingConfig
) -> list[ActivityFlag]:
    """Flag each sample active/inactive.

    ``samples`` must be sorted by timestamp.  Anchored drift overrides the
    velocity rule unless a click is nearby.
    """
    times = [s.timestamp for s in samples]
    half = config.velocity_window / 2
    flags: list[ActivityFlag] = []

    for sample in samples:
        t = sample.timestamp
        window = samples[bisect_left(times, t - half):bisect_right(times, t + half)]
        clicked = any(p.is_clicked for p in window)
        velocity, net, path = _window_motion(window)
        moving = velocity >= config.idle_velocity and (
            net >= config.active_net_distance or path >= config.active_path_distance
        )
        flags.append(ActivityFlag(time=t, active=clicked or moving, clicked=clicked))

    anchored = find_anchored_ranges(samples, config)
    if anchored:
        for flag in flags:
            if flag.clicked:
                continue
            if any(r.start <= flag.time <= r.end for r in anchored):
                flag.active = False

    return flags


def find_idle_runs(
    flags: list[ActivityFlag], last_time: float, config: CursorHidingConfig
) -> list[TimeRange]:
    """Consecutive inactive runs lasting at least ``idle_duration``."""
    runs: list[TimeRange] = []
    idle_start: float | None = None

    for flag in flags:
        if not flag.active:
            if idle_start is None:
                idle_start = flag.time
        elif idle_start is not None:
            if flag.time - idle_start >= config.idle_duration:
                runs.append(TimeRange(start=idle_start, end=flag.time))
            idle_start = None

    if idle_start is not None and last_time - idle_start >= config.idle_duration:
        runs.append(TimeRange(start=idle_start, end=last_time))
    return runs


def detect_cursor_visibility(
    samples: list[PointerSample],
    duration: float | None = None,
    trim_end: float = 0.0,
    config: CursorHidingConfig | None = None,
) -> list[DisplayInterval]:
    """Return the windows during which the cursor should be visible.

    With fewer than two samples the cursor stays visible for the whole
    timeline.  A non-positive duration yields no intervals.
    """
    config = config or CursorHidingConfig()
    if duration is None:
        duration = max([trim_end] + [s.timestamp for s in samples])
    if duration <= 0:
        return []

    positions = sorted(
        (s for s in samples if 0.0 <= s.timestamp <= duration),
        key=lambda s: s.timestamp,
    )
    if len(positions) < 2:
        return [DisplayInterval(start=0.0, end=duration)]

    flags = classify_samples(positions, config)
    idle_runs = find_idle_runs(flags, positions[-1].timestamp, config)
    logger.debug(
        "Cursor activity: %d samples, %d inactive, %d idle runs",
        len(flags), sum(1 for f in flags if not f.active), len(idle_runs),
    )

    if not idle_runs:
        return [DisplayInterval(start=0.0, end=duration)]

    visible: list[DisplayInterval] = []
    cursor = 0.0
    for idle in idle_runs:
        if idle.start > cursor:
            visible.append(DisplayInterval(start=cursor, end=idle.start))
        cursor = idle.end
    if cursor < duration:
        visible.append(DisplayInterval(start=cursor, end=duration))

    extended = [
        DisplayInterval(start=iv.start - config.margin_before, end=iv.end + config.margin_after)
        for iv in visible
    ]
    merged = merge(clamp_to_range(extended, 0.0, duration), config.min_gap_to_merge)
    return [DisplayInterval(start=iv.start, end=iv.end) for iv in merged]
