"""Interval algebra over DisplayInterval lists.

All functions are pure: inputs are never mutated and a new list is always
returned.  Output lists are sorted by start time and free of overlaps.
"""

from dataclasses import replace
from typing import Iterable

from overlayforge.models import DisplayInterval, TimeRange

MIN_INTERVAL_LENGTH = 0.001
EQUIVALENCE_TOLERANCE = 0.0005


def merge(
    intervals: Iterable[DisplayInterval], touch_tolerance: float = 0.0
) -> list[DisplayInterval]:
    """Fold intervals whose start lies within ``touch_tolerance`` of the previous end.

    The merged interval keeps the id of the earliest member.
    """
    ordered = sorted(intervals, key=lambda iv: (iv.start, iv.end))
    if not ordered:
        return []

    merged: list[DisplayInterval] = [ordered[0]]
    for iv in ordered[1:]:
        last = merged[-1]
        if iv.start <= last.end + touch_tolerance:
            if iv.end > last.end:
                merged[-1] = replace(last, end=iv.end)
        else:
            merged.append(iv)
    return merged


def clamp_to_range(
    intervals: Iterable[DisplayInterval] | None, start: float, end: float
) -> list[DisplayInterval]:
    """Clip every interval into [start, end], drop slivers, then merge."""
    if not intervals or end <= start:
        return []

    clipped = []
    for iv in intervals:
        lo = min(max(iv.start, start), end)
        hi = min(max(iv.end, start), end)
        if hi - lo > MIN_INTERVAL_LENGTH:
            clipped.append(replace(iv, start=lo, end=hi))
    return merge(clipped)


def intersect(rng: TimeRange, intervals: Iterable[DisplayInterval]) -> list[DisplayInterval]:
    """Parts of ``intervals`` that fall inside ``rng``, clipped to it."""
    out = []
    for iv in merge(intervals):
        lo = max(iv.start, rng.start)
        hi = min(iv.end, rng.end)
        if hi > lo:
            out.append(replace(iv, start=lo, end=hi))
    return out


def complement(rng: TimeRange, intervals: Iterable[DisplayInterval]) -> list[TimeRange]:
    """Gaps inside ``rng`` not covered by any interval."""
    gaps: list[TimeRange] = []
    cursor = rng.start
    for iv in intersect(rng, intervals):
        if iv.start > cursor:
            gaps.append(TimeRange(start=cursor, end=iv.start))
        cursor = max(cursor, iv.end)
    if cursor < rng.end:
        gaps.append(TimeRange(start=cursor, end=rng.end))
    return gaps


def intervals_equivalent(
    a: list[DisplayInterval] | None,
    b: list[DisplayInterval] | None,
    tolerance: float = EQUIVALENCE_TOLERANCE,
) -> bool:
    """Boundary-wise comparison, ignoring ids.  ``None`` compares like ``[]``."""
    left = a or []
    right = b or []
    if len(left) != len(right):
        return False
    for x, y in zip(left, right):
        if abs(x.start - y.start) > tolerance or abs(x.end - y.end) > tolerance:
            return False
    return True
