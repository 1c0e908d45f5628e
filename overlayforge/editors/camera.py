"""Camera path lookup for preview and export."""

import math
from bisect import bisect_left
from typing import Sequence

from overlayforge.models import CameraPathSample, InfluencePoint


def default_influence_points(duration: float) -> list[InfluencePoint]:
    """Full automatic zoom across the whole timeline."""
    return [InfluencePoint(time=0.0, value=1.0), InfluencePoint(time=duration, value=1.0)]


def influence_at(points: Sequence[InfluencePoint], time: float) -> float:
    """Cosine-interpolated influence value, held flat past either end."""
    if not points:
        return 1.0
    times = [p.time for p in points]
    idx = bisect_left(times, time)
    if idx == 0:
        return points[0].value
    if idx >= len(points):
        return points[-1].value

    p1, p2 = points[idx - 1], points[idx]
    span = p2.time - p1.time
    frac = (time - p1.time) / span if span > 0 else 1.0
    eased = (1 - math.cos(frac * math.pi)) / 2
    return p1.value * (1 - eased) + p2.value * eased


def sample_camera_path(
    path: Sequence[CameraPathSample],
    time: float,
    influence_points: Sequence[InfluencePoint] | None = None,
    center: tuple[float, float] | None = None,
) -> CameraPathSample | None:
    """Camera at ``time``, interpolated between baked samples.

    Influence scales the camera back toward ``center`` at zoom 1.0; without a
    center only the zoom is scaled.  Returns ``None`` for an empty path.
    """
    if not path:
        return None

    times = [p.time for p in path]
    idx = bisect_left(times, time)
    if idx == 0:
        x, y, zoom = path[0].x, path[0].y, path[0].zoom
    elif idx >= len(path):
        x, y, zoom = path[-1].x, path[-1].y, path[-1].zoom
    else:
        p1, p2 = path[idx - 1], path[idx]
        span = p2.time - p1.time
        frac = (time - p1.time) / span if span > 0 else 0.0
        x = p1.x + (p2.x - p1.x) * frac
        y = p1.y + (p2.y - p1.y) * frac
        zoom = p1.zoom + (p2.zoom - p1.zoom) * frac

    if influence_points:
        value = influence_at(sorted(influence_points, key=lambda p: p.time), time)
        zoom = 1.0 + (zoom - 1.0) * value
        if center is not None:
            cx, cy = center
            x = cx + (x - cx) * value
            y = cy + (y - cy) * value

    return CameraPathSample(time=time, x=x, y=y, zoom=zoom)
