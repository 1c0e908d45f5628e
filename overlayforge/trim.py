"""Trim ranges: which parts of the source recording end up in the output."""

from overlayforge.models import Segment, TimeRange

MIN_TRIM_DURATION = 0.1
EPSILON = 0.0001


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def merge_trim_ranges(ranges: list[TimeRange]) -> list[TimeRange]:
    ordered = sorted(ranges, key=lambda r: r.start)
    merged: list[TimeRange] = []
    for rng in ordered:
        if merged and rng.start <= merged[-1].end + EPSILON:
            merged[-1].end = max(merged[-1].end, rng.end)
        else:
            merged.append(TimeRange(start=rng.start, end=rng.end))
    return merged


def get_trim_ranges(segment: Segment, duration: float) -> list[TimeRange]:
    """Kept ranges clipped to [0, duration], falling back to the trim bounds."""
    base = segment.trim_ranges or [TimeRange(start=segment.trim_start, end=segment.trim_end)]
    clipped = [
        TimeRange(start=_clamp(r.start, 0.0, duration), end=_clamp(r.end, 0.0, duration))
        for r in base
    ]
    clipped = [r for r in clipped if r.end - r.start >= MIN_TRIM_DURATION]

    if not clipped:
        return [
            TimeRange(
                start=_clamp(segment.trim_start, 0.0, duration),
                end=_clamp(segment.trim_end or duration, 0.0, duration),
            )
        ]
    return merge_trim_ranges(clipped)


def trim_bounds(segment: Segment, duration: float) -> tuple[float, float]:
    ranges = get_trim_ranges(segment, duration)
    return ranges[0].start, ranges[-1].end


def total_trim_duration(segment: Segment, duration: float) -> float:
    return sum(r.end - r.start for r in get_trim_ranges(segment, duration))


def to_compact_time(source_time: float, segment: Segment, duration: float) -> float:
    """Map a source-recording time onto the trimmed output timeline."""
    compact = 0.0
    for rng in get_trim_ranges(segment, duration):
        if source_time <= rng.start:
            return compact
        if source_time < rng.end:
            return compact + (source_time - rng.start)
        compact += rng.end - rng.start
    return compact


def to_source_time(compact_time: float, segment: Segment, duration: float) -> float:
    """Inverse of ``to_compact_time``."""
    ranges = get_trim_ranges(segment, duration)
    remaining = _clamp(compact_time, 0.0, sum(r.end - r.start for r in ranges))
    for rng in ranges:
        length = rng.end - rng.start
        if remaining <= length:
            return rng.start + remaining
        remaining -= length
    return ranges[-1].end


def clamp_to_trim(source_time: float, segment: Segment, duration: float) -> float:
    """Snap a time that falls in a cut to the nearest kept boundary."""
    ranges = get_trim_ranges(segment, duration)
    if source_time <= ranges[0].start:
        return ranges[0].start
    if source_time >= ranges[-1].end:
        return ranges[-1].end

    for rng, nxt in zip(ranges, ranges[1:] + [None]):
        if rng.start <= source_time <= rng.end:
            return source_time
        if nxt is not None and rng.end < source_time < nxt.start:
            return nxt.start if nxt.start - source_time < source_time - rng.end else rng.end
    return source_time
