"""Unit tests for the interval algebra."""

from overlayforge.intervals import (
    clamp_to_range,
    complement,
    intersect,
    intervals_equivalent,
    merge,
)
from overlayforge.models import DisplayInterval, TimeRange


def _iv(start: float, end: float, id: str | None = None) -> DisplayInterval:
    return DisplayInterval(start=start, end=end, id=id) if id else DisplayInterval(start=start, end=end)


def _bounds(intervals) -> list[tuple[float, float]]:
    return [(iv.start, iv.end) for iv in intervals]


class TestMerge:
    def test_empty(self):
        assert merge([]) == []

    def test_sorts_and_folds_overlaps(self):
        result = merge([_iv(5, 6), _iv(0, 2), _iv(1, 3)])
        assert _bounds(result) == [(0, 3), (5, 6)]

    def test_touching_intervals_are_merged(self):
        assert _bounds(merge([_iv(0, 1), _iv(1, 2)])) == [(0, 2)]

    def test_tolerance_bridges_small_gaps(self):
        assert _bounds(merge([_iv(0, 1), _iv(1.3, 2)], touch_tolerance=0.5)) == [(0, 2)]
        assert _bounds(merge([_iv(0, 1), _iv(1.3, 2)])) == [(0, 1), (1.3, 2)]

    def test_contained_interval_does_not_shrink(self):
        assert _bounds(merge([_iv(0, 5), _iv(1, 2)])) == [(0, 5)]

    def test_keeps_first_id(self):
        result = merge([_iv(1, 3, "b"), _iv(0, 2, "a")])
        assert result[0].id == "a"

    def test_does_not_mutate_input(self):
        items = [_iv(0, 2, "a"), _iv(1, 3, "b")]
        merge(items)
        assert _bounds(items) == [(0, 2), (1, 3)]

    def test_idempotent(self):
        items = [_iv(3, 4), _iv(0, 1), _iv(0.5, 2), _iv(2, 2.5), _iv(7, 9), _iv(8, 8.5)]
        once = merge(items)
        assert _bounds(merge(once)) == _bounds(once)
        assert [iv.id for iv in merge(once)] == [iv.id for iv in once]


class TestClampToRange:
    def test_clips_bounds(self):
        assert _bounds(clamp_to_range([_iv(-1, 2), _iv(8, 12)], 0, 10)) == [(0, 2), (8, 10)]

    def test_drops_slivers(self):
        assert clamp_to_range([_iv(9.9995, 11)], 0, 10) == []

    def test_drops_fully_outside(self):
        assert clamp_to_range([_iv(-3, -1), _iv(11, 12)], 0, 10) == []

    def test_none_and_degenerate_range(self):
        assert clamp_to_range(None, 0, 10) == []
        assert clamp_to_range([_iv(0, 1)], 0, 0) == []

    def test_merges_after_clipping(self):
        assert _bounds(clamp_to_range([_iv(-2, 1), _iv(0.5, 3)], 0, 10)) == [(0, 3)]


class TestIntersect:
    def test_clips_to_range(self):
        result = intersect(TimeRange(2, 6), [_iv(0, 3), _iv(4, 5), _iv(5.5, 9)])
        assert _bounds(result) == [(2, 3), (4, 5), (5.5, 6)]

    def test_no_overlap(self):
        assert intersect(TimeRange(2, 3), [_iv(0, 1), _iv(4, 5)]) == []


class TestComplement:
    def test_gaps_inside_range(self):
        gaps = complement(TimeRange(0, 10), [_iv(2, 3), _iv(5, 7)])
        assert gaps == [TimeRange(0, 2), TimeRange(3, 5), TimeRange(7, 10)]

    def test_fully_covered(self):
        assert complement(TimeRange(1, 2), [_iv(0, 5)]) == []

    def test_nothing_covered(self):
        assert complement(TimeRange(1, 2), []) == [TimeRange(1, 2)]


class TestEquivalence:
    def test_ignores_ids(self):
        assert intervals_equivalent([_iv(0, 1, "a")], [_iv(0, 1, "b")])

    def test_within_half_millisecond(self):
        assert intervals_equivalent([_iv(0, 1)], [_iv(0.0004, 1.0004)])
        assert not intervals_equivalent([_iv(0, 1)], [_iv(0.001, 1)])

    def test_length_mismatch(self):
        assert not intervals_equivalent([_iv(0, 1)], [])

    def test_none_is_empty(self):
        assert intervals_equivalent(None, [])
