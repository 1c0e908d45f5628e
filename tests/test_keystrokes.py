"""Unit tests for keystroke badge building and display intervals."""

import math

import pytest

from overlayforge.analyzers.keystrokes import (
    build_keystroke_events,
    effective_end_times,
    filter_events_by_mode,
    format_label,
    generate_keystroke_visibility,
    migrate_keystroke_intervals,
)
from overlayforge.models import DisplayInterval, InputModifiers, KeystrokeEvent, RawInputEvent


def _key(t, key="A", direction="down", **mods):
    return RawInputEvent(
        type="keyboard", timestamp=t, key=key, direction=direction,
        modifiers=InputModifiers(**mods),
    )


def _press(t, end=None, type="keyboard", label="A"):
    return KeystrokeEvent(type=type, start=t, end=end if end is not None else t + 1.2, label=label)


def _bounds(intervals):
    return [(round(iv.start, 6), round(iv.end, 6)) for iv in intervals]


class TestFormatLabel:
    def test_modifier_chord(self):
        assert format_label(_key(0, "S", ctrl=True, alt=True)) == "Ctrl + Alt + S"

    def test_meta_is_win(self):
        assert format_label(_key(0, "E", meta=True)) == "Win + E"

    def test_mouse_button(self):
        event = RawInputEvent(type="mousedown", timestamp=0, button="left", direction="down")
        assert format_label(event) == "Left Click"

    def test_wheel(self):
        assert format_label(RawInputEvent(type="wheel", timestamp=0, direction="up")) == "↑ Scroll"
        assert format_label(RawInputEvent(type="wheel", timestamp=0)) == "Scroll"

    def test_unknown_key_uses_virtual_code(self):
        assert format_label(RawInputEvent(type="keyboard", timestamp=0, vk=65)) == "VK_65"


class TestBuildKeystrokeEvents:
    def test_empty(self):
        assert build_keystroke_events([], 10.0) == []

    def test_quick_tap_shows_minimum_time(self):
        [event] = build_keystroke_events([_key(1.0), _key(1.1, direction="up")], 10.0)
        assert event.start == 1.0
        assert event.end == pytest.approx(1.34)
        assert event.is_hold is False
        assert event.label == "A"

    def test_long_press_ends_at_release(self):
        [event] = build_keystroke_events([_key(1.0), _key(2.0, direction="up")], 10.0)
        assert event.end == pytest.approx(2.0)
        assert event.is_hold is True

    def test_unreleased_press_uses_display_duration(self):
        [event] = build_keystroke_events([_key(1.0)], 10.0)
        assert event.end == pytest.approx(2.2)

    def test_end_clamped_to_duration(self):
        [event] = build_keystroke_events([_key(2.5)], 3.0)
        assert event.end == 3.0

    def test_press_at_duration_is_dropped(self):
        assert build_keystroke_events([_key(3.0)], 3.0) == []

    def test_non_positive_duration_is_unbounded(self):
        [event] = build_keystroke_events([_key(5.0)], 0.0)
        assert event.end == pytest.approx(6.2)

    def test_modifier_keys_are_dropped(self):
        events = build_keystroke_events(
            [_key(0.5, "Ctrl", ctrl=True), _key(0.6, "S", ctrl=True), _key(0.9, "Ctrl", "up")],
            10.0,
        )
        assert [e.label for e in events] == ["Ctrl + S"]

    def test_non_finite_timestamps_are_dropped(self):
        events = build_keystroke_events([_key(math.nan), _key(math.inf), _key(1.0)], 10.0)
        assert [e.start for e in events] == [1.0]

    def test_orphan_release_is_ignored(self):
        assert build_keystroke_events([_key(1.0, direction="up")], 10.0) == []

    def test_wheel_is_not_paired(self):
        [event] = build_keystroke_events(
            [RawInputEvent(type="wheel", timestamp=1.0, direction="down")], 10.0
        )
        assert event.direction == "down"
        assert event.end == pytest.approx(2.2)

    def test_unsorted_input(self):
        events = build_keystroke_events([_key(2.0, "B"), _key(1.0, "A")], 10.0)
        assert [e.label for e in events] == ["A", "B"]


class TestModes:
    def test_filter(self):
        events = [_press(0.0), _press(1.0, type="mousedown"), _press(2.0, type="wheel")]
        assert len(filter_events_by_mode(events, "keyboard")) == 1
        assert len(filter_events_by_mode(events, "keyboardMouse")) == 3
        assert filter_events_by_mode(events, "off") == []


class TestEffectiveEnds:
    def test_next_press_trims(self):
        ends = effective_end_times([_press(0.0), _press(0.05)], 10.0)
        assert ends[0][1] <= 0.05
        assert ends[1][1] == pytest.approx(1.25)

    def test_keyboard_mouse_trims_within_kind(self):
        events = [_press(0.0), _press(0.1, type="mousedown"), _press(2.0)]
        ends = dict((e.start, end) for e, end in effective_end_times(events, 10.0, "keyboardMouse"))
        assert ends[0.0] == pytest.approx(1.2)

    def test_other_modes_trim_across_kinds(self):
        events = [_press(0.0), _press(0.1, type="mousedown")]
        ends = dict((e.start, end) for e, end in effective_end_times(events, 10.0, "keyboard"))
        assert ends[0.0] == pytest.approx(0.1)

    def test_duration_caps_end(self):
        [(_, end)] = effective_end_times([_press(9.5)], 10.0)
        assert end == 10.0


class TestKeystrokeVisibility:
    def test_single_press_gets_margins(self):
        result = generate_keystroke_visibility([_press(1.0, 1.34)], 10.0, "keyboard")
        assert _bounds(result) == [(0.96, 1.42)]

    def test_delay_shifts_intervals(self):
        result = generate_keystroke_visibility([_press(1.0, 1.34)], 10.0, "keyboard", delay=0.1)
        assert _bounds(result) == [(1.06, 1.52)]

    def test_delay_is_clamped(self):
        result = generate_keystroke_visibility([_press(1.0, 1.34)], 10.0, "keyboard", delay=5.0)
        assert _bounds(result) == [(1.96, 2.42)]

    def test_start_clamped_at_zero(self):
        result = generate_keystroke_visibility([_press(0.0, 0.5)], 10.0, "keyboard")
        assert result[0].start == 0.0

    def test_close_presses_merge(self):
        result = generate_keystroke_visibility(
            [_press(1.0, 1.34), _press(1.5, 1.84)], 10.0, "keyboard"
        )
        assert _bounds(result) == [(0.96, 1.92)]

    def test_far_presses_stay_apart(self):
        result = generate_keystroke_visibility(
            [_press(1.0, 1.34), _press(5.0, 5.34)], 10.0, "keyboard"
        )
        assert len(result) == 2

    def test_degenerate_input(self):
        assert generate_keystroke_visibility([], 10.0) == []
        assert generate_keystroke_visibility([_press(1.0)], 0.0) == []


class TestMigration:
    EVENTS = [_press(1.0, 1.34), _press(4.0, 4.34, type="mousedown", label="Left Click")]

    def _auto(self, delay):
        return generate_keystroke_visibility(
            filter_events_by_mode(self.EVENTS, "keyboard"), 10.0, "keyboard", delay
        )

    def test_missing_intervals_are_generated(self):
        result = migrate_keystroke_intervals(None, self.EVENTS, 10.0, "keyboard", 0.0, 0.2)
        assert _bounds(result) == [(1.16, 1.62)]

    def test_unchanged_delay_returns_existing(self):
        existing = [DisplayInterval(0.0, 9.0)]
        assert migrate_keystroke_intervals(existing, self.EVENTS, 10.0, "keyboard", 0.2, 0.2) is existing

    def test_auto_intervals_follow_delay(self):
        result = migrate_keystroke_intervals(self._auto(0.0), self.EVENTS, 10.0, "keyboard", 0.0, 0.2)
        assert _bounds(result) == _bounds(self._auto(0.2))

    def test_hand_edited_intervals_are_kept(self):
        existing = [DisplayInterval(0.5, 3.0)]
        result = migrate_keystroke_intervals(existing, self.EVENTS, 10.0, "keyboard", 0.0, 0.2)
        assert result is existing

    def test_rounding_noise_still_counts_as_auto(self):
        existing = [DisplayInterval(iv.start + 0.0004, iv.end - 0.0004) for iv in self._auto(0.0)]
        result = migrate_keystroke_intervals(existing, self.EVENTS, 10.0, "keyboard", 0.0, 0.2)
        assert _bounds(result) == _bounds(self._auto(0.2))

    def test_millisecond_edit_counts_as_manual(self):
        existing = [DisplayInterval(iv.start + 0.001, iv.end) for iv in self._auto(0.0)]
        result = migrate_keystroke_intervals(existing, self.EVENTS, 10.0, "keyboard", 0.0, 0.2)
        assert result is existing

    def test_recomputation_is_bit_identical(self):
        first = [(iv.start, iv.end) for iv in self._auto(0.1)]
        second = [(iv.start, iv.end) for iv in self._auto(0.1)]
        assert first == second

    def test_chained_delay_changes_keep_migrating(self):
        current = self._auto(0.0)
        for old, new in [(0.0, 0.1), (0.1, 0.35), (0.35, -0.2)]:
            current = migrate_keystroke_intervals(current, self.EVENTS, 10.0, "keyboard", old, new)
        assert _bounds(current) == _bounds(self._auto(-0.2))

    def test_mode_filters_events(self):
        result = migrate_keystroke_intervals(None, self.EVENTS, 10.0, "keyboardMouse", 0.0, 0.0)
        assert len(result) == 2
