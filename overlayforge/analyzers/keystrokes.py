"""Keystroke badges: raw input events -> logical presses -> display intervals."""

import logging
import math
from dataclasses import replace

from overlayforge.intervals import MIN_INTERVAL_LENGTH, intervals_equivalent, merge
from overlayforge.manifest import KeystrokeConfig
from overlayforge.models import DisplayInterval, InputModifiers, KeystrokeEvent, RawInputEvent

logger = logging.getLogger(__name__)

MODIFIER_KEYS = frozenset({"Shift", "Ctrl", "Alt", "Win", "Meta"})
MAX_DELAY = 1.0


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def _modifier_prefix(mods: InputModifiers) -> str:
    parts = []
    if mods.ctrl:
        parts.append("Ctrl")
    if mods.alt:
        parts.append("Alt")
    if mods.shift:
        parts.append("Shift")
    if mods.meta:
        parts.append("Win")
    return " + ".join(parts)


def format_label(event: RawInputEvent) -> str:
    """Human-readable badge text, e.g. "Ctrl + Alt + S" or "↑ Scroll"."""
    if event.type == "wheel":
        arrow = {"up": "↑", "down": "↓"}.get(event.direction or "", "")
        text = f"{arrow} Scroll".strip()
    elif event.type == "mousedown":
        button = event.button.capitalize() if event.button else "Mouse"
        text = f"{button} Click"
    else:
        text = event.key or f"VK_{event.vk or 0}"

    prefix = _modifier_prefix(event.modifiers)
    return f"{prefix} + {text}" if prefix else text


def _token(event: RawInputEvent) -> str:
    if event.type == "mousedown":
        return f"btn:{event.button or 'mouse'}"
    if event.vk is not None:
        return f"vk:{event.vk}"
    return f"key:{event.key or ''}"


def _percentile(values: list[float], fraction: float) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    idx = int((len(ordered) - 1) * fraction)
    return ordered[max(0, min(len(ordered) - 1, idx))]


def build_keystroke_events(
    raw_events: list[RawInputEvent],
    duration: float,
    config: KeystrokeConfig | None = None,
) -> list[KeystrokeEvent]:
    """Pair down/up events into logical presses.

    A press shows for ``display_duration`` unless its release arrives, in
    which case it ends at the release (but no sooner than
    ``min_release_display`` after the press).  Modifier-only key presses are
    dropped; they only appear as label prefixes.
    """
    config = config or KeystrokeConfig()
    if not raw_events:
        return []

    max_time = duration if duration > 0 else math.inf
    ordered = sorted(
        (e for e in raw_events if math.isfinite(e.timestamp)),
        key=lambda e: e.timestamp,
    )
    out: list[KeystrokeEvent] = []
    active: dict[str, int] = {}

    for raw in ordered:
        if raw.type == "keyboard" and raw.key in MODIFIER_KEYS:
            continue

        timestamp = _clamp(raw.timestamp, 0.0, max_time)
        pairs = raw.type in ("keyboard", "mousedown")

        if pairs and raw.direction == "up":
            token = _token(raw)
            index = active.pop(token, None)
            if index is not None:
                press = out[index]
                held = max(0.0, timestamp - press.start)
                out[index] = replace(
                    press,
                    end=_clamp(max(press.start + config.min_release_display, timestamp), 0.0, max_time),
                    is_hold=held >= config.hold_min_duration,
                )
            continue

        end = _clamp(timestamp + config.display_duration, 0.0, max_time)
        if end - timestamp <= MIN_INTERVAL_LENGTH:
            continue

        out.append(
            KeystrokeEvent(
                type=raw.type,
                start=timestamp,
                end=end,
                label=format_label(raw),
                modifiers=raw.modifiers,
                key=raw.key,
                button=raw.button,
                direction="down" if pairs else raw.direction,
            )
        )
        if pairs:
            active[_token(raw)] = len(out) - 1

    durations = [max(0.0, e.end - e.start) for e in out]
    logger.debug(
        "Keystrokes: %d raw -> %d built (min=%.3f p50=%.3f p90=%.3f max=%.3f)",
        len(ordered), len(out),
        min(durations, default=0.0), _percentile(durations, 0.5),
        _percentile(durations, 0.9), max(durations, default=0.0),
    )
    return out


def filter_events_by_mode(events: list[KeystrokeEvent], mode: str) -> list[KeystrokeEvent]:
    if mode == "keyboard":
        return [e for e in events if e.type == "keyboard"]
    if mode == "keyboardMouse":
        return list(events)
    return []


def effective_end_times(
    events: list[KeystrokeEvent], duration: float, mode: str = "keyboardMouse"
) -> list[tuple[KeystrokeEvent, float]]:
    """Pair each event (sorted by start) with its end trimmed to the next press.

    In "keyboardMouse" mode keyboard badges are trimmed by the next keyboard
    press and mouse/wheel badges by the next mouse/wheel press; otherwise any
    following press trims.
    """
    ordered = sorted(events, key=lambda e: e.start)
    ends = [0.0] * len(ordered)
    next_any = next_keyboard = next_mouse = math.inf

    for i in range(len(ordered) - 1, -1, -1):
        event = ordered[i]
        if mode == "keyboardMouse":
            next_start = next_keyboard if event.type == "keyboard" else next_mouse
        else:
            next_start = next_any
        ends[i] = min(event.end, next_start, duration)
        next_any = event.start
        if event.type == "keyboard":
            next_keyboard = event.start
        else:
            next_mouse = event.start

    return list(zip(ordered, ends))


def generate_keystroke_visibility(
    events: list[KeystrokeEvent],
    duration: float,
    mode: str = "keyboardMouse",
    delay: float = 0.0,
    config: KeystrokeConfig | None = None,
) -> list[DisplayInterval]:
    """Display intervals for already mode-filtered keystroke events."""
    config = config or KeystrokeConfig()
    duration = max(duration, 0.0)
    if not events or duration <= 0:
        return []

    delay = _clamp(delay, -MAX_DELAY, MAX_DELAY)
    raw: list[DisplayInterval] = []
    for event, effective_end in effective_end_times(events, duration, mode):
        start = _clamp(event.start + delay, 0.0, duration)
        end = _clamp(effective_end + delay, 0.0, duration)
        if end - start <= MIN_INTERVAL_LENGTH:
            continue
        start = _clamp(start - config.margin_before, 0.0, duration)
        end = _clamp(end + config.margin_after, 0.0, duration)
        if end - start <= MIN_INTERVAL_LENGTH:
            continue
        raw.append(DisplayInterval(start=start, end=end))

    return merge(raw, config.min_gap_to_merge)


def migrate_keystroke_intervals(
    existing: list[DisplayInterval] | None,
    events: list[KeystrokeEvent],
    duration: float,
    mode: str,
    old_delay: float,
    new_delay: float,
    config: KeystrokeConfig | None = None,
) -> list[DisplayInterval]:
    """Re-derive intervals after a delay change without clobbering manual edits.

    The stored list is replaced only when it still matches, boundary for
    boundary, what auto-generation produced with ``old_delay``.  Anything
    else is treated as hand-edited and returned untouched.
    """
    filtered = filter_events_by_mode(events, mode)
    auto_new = generate_keystroke_visibility(filtered, duration, mode, new_delay, config)
    if existing is None:
        return auto_new
    if old_delay == new_delay:
        return existing

    auto_old = generate_keystroke_visibility(filtered, duration, mode, old_delay, config)
    if intervals_equivalent(existing, auto_old) and not intervals_equivalent(existing, auto_new):
        logger.debug("Migrating %s keystroke intervals to delay %.3f", mode, new_delay)
        return auto_new
    return existing
