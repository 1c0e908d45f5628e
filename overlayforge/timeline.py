"""Segment-level edit actions.

Each action takes a Segment and returns a new one; derived lists are replaced
wholesale, never patched in place.
"""

from dataclasses import replace

from overlayforge.analyzers.activity import detect_cursor_visibility
from overlayforge.analyzers.autozoom import generate_motion_path
from overlayforge.analyzers.keystrokes import (
    MAX_DELAY,
    build_keystroke_events,
    filter_events_by_mode,
    generate_keystroke_visibility,
    migrate_keystroke_intervals,
)
from overlayforge.editors.camera import default_influence_points
from overlayforge.intervals import clamp_to_range, merge
from overlayforge.manifest import (
    KEYSTROKE_MODES,
    AutoZoomConfig,
    CursorHidingConfig,
    KeystrokeConfig,
)
from overlayforge.models import DisplayInterval, PointerSample, RawInputEvent, Segment
from overlayforge.trim import trim_bounds

DEFAULT_MATCH_TOLERANCE = 0.01
DEFAULT_EDIT_LENGTH = 2.0
MIN_EDIT_LENGTH = 0.1


def toggle_auto_zoom(
    segment: Segment,
    samples: list[PointerSample],
    width: float,
    height: float,
    duration: float,
    config: AutoZoomConfig | None = None,
) -> Segment:
    """Discard an existing camera path, or generate one if there is none."""
    if segment.camera_path:
        return replace(segment, camera_path=[], influence_points=[])
    if not samples or width <= 0 or height <= 0:
        return segment

    start, end = trim_bounds(segment, duration)
    path = generate_motion_path(
        samples, start, end, width, height, segment.zoom_keyframes, config
    )
    return replace(
        segment,
        camera_path=path,
        influence_points=default_influence_points(duration) if path else [],
    )


def is_default_cursor_visibility(segment: Segment, duration: float) -> bool:
    """True if the cursor list is missing, empty, or a single full-length interval."""
    ivs = segment.cursor_visibility
    if not ivs:
        return True
    return (
        len(ivs) == 1
        and abs(ivs[0].start) < DEFAULT_MATCH_TOLERANCE
        and abs(ivs[0].end - duration) < DEFAULT_MATCH_TOLERANCE
    )


def toggle_cursor_hiding(
    segment: Segment,
    samples: list[PointerSample],
    duration: float,
    config: CursorHidingConfig | None = None,
) -> Segment:
    """Generate hiding intervals, or reset customized ones to always-visible."""
    if not is_default_cursor_visibility(segment, duration):
        return replace(segment, cursor_visibility=[DisplayInterval(start=0.0, end=duration)])
    return replace(
        segment,
        cursor_visibility=detect_cursor_visibility(samples, duration, segment.trim_end, config),
    )


def _new_window(at_time: float, duration: float, length: float) -> DisplayInterval:
    start = max(0.0, min(at_time - length / 2, duration - length))
    return DisplayInterval(start=start, end=min(start + length, duration))


def _resized(
    intervals: list[DisplayInterval],
    interval_id: str,
    duration: float,
    start: float | None,
    end: float | None,
) -> list[DisplayInterval] | None:
    for i, iv in enumerate(intervals):
        if iv.id != interval_id:
            continue
        lo = iv.start if start is None else min(max(0.0, start), iv.end - MIN_EDIT_LENGTH)
        hi = iv.end if end is None else max(min(duration, end), lo + MIN_EDIT_LENGTH)
        return merge([*intervals[:i], replace(iv, start=lo, end=hi), *intervals[i + 1:]])
    return None


def _moved(
    intervals: list[DisplayInterval], interval_id: str, start: float, duration: float
) -> list[DisplayInterval] | None:
    for i, iv in enumerate(intervals):
        if iv.id != interval_id:
            continue
        length = iv.end - iv.start
        lo = max(0.0, min(start, duration - length))
        moved = replace(iv, start=lo, end=min(lo + length, duration))
        return merge([*intervals[:i], moved, *intervals[i + 1:]])
    return None


def add_cursor_interval(
    segment: Segment, at_time: float, duration: float, length: float = DEFAULT_EDIT_LENGTH
) -> Segment:
    """Insert a ``length``-second visible window centred on ``at_time``.

    The window is shifted left when it would run past ``duration``.
    """
    new = _new_window(at_time, duration, length)
    return replace(segment, cursor_visibility=merge([*(segment.cursor_visibility or []), new]))


def delete_cursor_interval(segment: Segment, interval_id: str) -> Segment:
    if segment.cursor_visibility is None:
        return segment
    remaining = [iv for iv in segment.cursor_visibility if iv.id != interval_id]
    return replace(segment, cursor_visibility=remaining)


def resize_cursor_interval(
    segment: Segment,
    interval_id: str,
    duration: float,
    start: float | None = None,
    end: float | None = None,
) -> Segment:
    """Drag one or both edges of a cursor interval.

    The start stays within [0, end - 0.1] and the end within
    [start + 0.1, duration]; overlapping neighbours are merged.
    """
    updated = _resized(segment.cursor_visibility or [], interval_id, duration, start, end)
    if updated is None:
        return segment
    return replace(segment, cursor_visibility=updated)


def move_cursor_interval(
    segment: Segment, interval_id: str, start: float, duration: float
) -> Segment:
    """Slide a cursor interval to ``start``, keeping its length and staying in [0, duration]."""
    updated = _moved(segment.cursor_visibility or [], interval_id, start, duration)
    if updated is None:
        return segment
    return replace(segment, cursor_visibility=updated)


def keystroke_intervals_for_mode(segment: Segment) -> list[DisplayInterval]:
    """Intervals the keystroke overlay should use for the segment's current mode."""
    if segment.keystroke_mode == "keyboard":
        return segment.keyboard_visibility or []
    if segment.keystroke_mode == "keyboardMouse":
        return segment.keyboard_mouse_visibility or []
    return []


def _with_mode_intervals(segment: Segment, mode: str, intervals: list[DisplayInterval]) -> Segment:
    if mode == "keyboard":
        return replace(segment, keyboard_visibility=merge(intervals))
    if mode == "keyboardMouse":
        return replace(segment, keyboard_mouse_visibility=merge(intervals))
    return segment


def with_keystroke_intervals(
    segment: Segment, intervals: list[DisplayInterval], duration: float | None = None
) -> Segment:
    """Store hand-edited intervals for the current mode, clipped to [0, duration] if given."""
    if duration is not None:
        intervals = clamp_to_range(intervals, 0.0, duration)
    return _with_mode_intervals(segment, segment.keystroke_mode, intervals)


def add_keystroke_interval(
    segment: Segment, at_time: float, duration: float, length: float = DEFAULT_EDIT_LENGTH
) -> Segment:
    """Insert a keystroke window centred on ``at_time`` into the current mode's list."""
    if segment.keystroke_mode not in ("keyboard", "keyboardMouse"):
        return segment
    new = _new_window(at_time, duration, length)
    return with_keystroke_intervals(
        segment, [*keystroke_intervals_for_mode(segment), new], duration
    )


def delete_keystroke_interval(segment: Segment, interval_id: str) -> Segment:
    current = keystroke_intervals_for_mode(segment)
    remaining = [iv for iv in current if iv.id != interval_id]
    if len(remaining) == len(current):
        return segment
    return with_keystroke_intervals(segment, remaining)


def resize_keystroke_interval(
    segment: Segment,
    interval_id: str,
    duration: float,
    start: float | None = None,
    end: float | None = None,
) -> Segment:
    updated = _resized(keystroke_intervals_for_mode(segment), interval_id, duration, start, end)
    if updated is None:
        return segment
    return with_keystroke_intervals(segment, updated)


def move_keystroke_interval(
    segment: Segment, interval_id: str, start: float, duration: float
) -> Segment:
    updated = _moved(keystroke_intervals_for_mode(segment), interval_id, start, duration)
    if updated is None:
        return segment
    return with_keystroke_intervals(segment, updated)


def _clamp_delay(delay: float) -> float:
    return max(-MAX_DELAY, min(MAX_DELAY, delay))


def rebuild_keystroke_visibility(
    segment: Segment, mode: str, duration: float, config: KeystrokeConfig | None = None
) -> Segment:
    """Regenerate one mode's intervals from the events, discarding edits."""
    events = filter_events_by_mode(segment.keystroke_events, mode)
    rebuilt = generate_keystroke_visibility(
        events, duration, mode, _clamp_delay(segment.keystroke_delay), config
    )
    return _with_mode_intervals(segment, mode, rebuilt)


def ensure_keystroke_visibility(
    segment: Segment, duration: float, config: KeystrokeConfig | None = None
) -> Segment:
    """Fill in missing per-mode interval lists.

    Lists that still match the zero-delay auto result are migrated to the
    segment's current delay; anything else is kept as the user left it.
    """
    delay = _clamp_delay(segment.keystroke_delay)
    updated = segment
    for mode, existing in (
        ("keyboard", segment.keyboard_visibility),
        ("keyboardMouse", segment.keyboard_mouse_visibility),
    ):
        intervals = migrate_keystroke_intervals(
            existing, segment.keystroke_events, duration, mode, 0.0, delay, config
        )
        if mode == "keyboard":
            updated = replace(updated, keyboard_visibility=intervals)
        else:
            updated = replace(updated, keyboard_mouse_visibility=intervals)
    return updated


def set_keystroke_delay(
    segment: Segment, delay: float, duration: float, config: KeystrokeConfig | None = None
) -> Segment:
    """Change the global delay, migrating only lists that were never hand-edited."""
    old_delay = _clamp_delay(segment.keystroke_delay)
    new_delay = _clamp_delay(delay)
    updated = replace(segment, keystroke_delay=new_delay)
    return replace(
        updated,
        keyboard_visibility=migrate_keystroke_intervals(
            segment.keyboard_visibility, segment.keystroke_events, duration,
            "keyboard", old_delay, new_delay, config,
        ),
        keyboard_mouse_visibility=migrate_keystroke_intervals(
            segment.keyboard_mouse_visibility, segment.keystroke_events, duration,
            "keyboardMouse", old_delay, new_delay, config,
        ),
    )


def set_keystroke_mode(
    segment: Segment, mode: str, duration: float, config: KeystrokeConfig | None = None
) -> Segment:
    if mode not in KEYSTROKE_MODES:
        raise ValueError(f"Unknown keystroke mode {mode!r}")
    return ensure_keystroke_visibility(replace(segment, keystroke_mode=mode), duration, config)


def import_input_events(
    segment: Segment,
    raw_events: list[RawInputEvent],
    duration: float,
    config: KeystrokeConfig | None = None,
) -> Segment:
    """Rebuild keystroke events and both per-mode interval lists from raw input."""
    config = config or KeystrokeConfig()
    events = build_keystroke_events(raw_events, duration, config)
    updated = replace(
        segment,
        keystroke_events=events,
        keyboard_visibility=None,
        keyboard_mouse_visibility=None,
    )
    return ensure_keystroke_visibility(updated, duration, config)
