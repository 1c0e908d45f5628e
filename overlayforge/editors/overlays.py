"""Per-frame overlay baking and the JSON overlay track sidecar."""

import json
import math
from dataclasses import dataclass
from pathlib import Path

from overlayforge.editors.camera import sample_camera_path
from overlayforge.editors.visibility import visibility_at
from overlayforge.manifest import FadeConfig
from overlayforge.models import Segment
from overlayforge.timeline import keystroke_intervals_for_mode
from overlayforge.trim import trim_bounds


@dataclass
class OverlayFrame:
    time: float
    cursor_opacity: float
    cursor_scale: float
    keystroke_opacity: float
    keystroke_scale: float
    camera_x: float | None = None
    camera_y: float | None = None
    camera_zoom: float | None = None

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "cursor": {"opacity": self.cursor_opacity, "scale": self.cursor_scale},
            "keystroke": {"opacity": self.keystroke_opacity, "scale": self.keystroke_scale},
            "camera": None if self.camera_zoom is None else {
                "x": self.camera_x, "y": self.camera_y, "zoom": self.camera_zoom,
            },
        }


def bake_overlay_frames(
    segment: Segment,
    duration: float,
    fps: int = 60,
    center: tuple[float, float] | None = None,
    fade: FadeConfig | None = None,
) -> list[OverlayFrame]:
    """Evaluate every overlay once per exported frame across the trim bounds.

    Uses the same pure evaluators as interactive preview, so a baked frame
    matches what preview shows at that time.
    """
    if fps <= 0 or duration <= 0:
        return []
    fade = fade or FadeConfig()
    start, end = trim_bounds(segment, duration)
    keystroke_intervals = (
        keystroke_intervals_for_mode(segment) if segment.keystroke_mode != "off" else []
    )

    frames: list[OverlayFrame] = []
    count = int(math.floor((end - start) * fps + 1e-9)) + 1
    for i in range(count):
        t = start + i / fps
        cursor = visibility_at(t, segment.cursor_visibility, fade)
        keys = visibility_at(t, keystroke_intervals, fade)
        cam = sample_camera_path(segment.camera_path, t, segment.influence_points, center)
        frames.append(
            OverlayFrame(
                time=round(t, 6),
                cursor_opacity=round(cursor.opacity, 3),
                cursor_scale=round(cursor.scale, 3),
                keystroke_opacity=round(keys.opacity, 3),
                keystroke_scale=round(keys.scale, 3),
                camera_x=None if cam is None else round(cam.x, 1),
                camera_y=None if cam is None else round(cam.y, 1),
                camera_zoom=None if cam is None else round(cam.zoom, 3),
            )
        )
    return frames


def write_overlay_track(
    segment: Segment,
    output_path: Path,
    duration: float,
    frames: list[OverlayFrame] | None = None,
    fps: int | None = None,
) -> Path:
    """Write the segment (and optional baked frames) as a JSON sidecar."""
    payload = {
        "version": "1",
        "duration": duration,
        "segment": segment.to_dict(),
    }
    if frames is not None:
        payload["frames"] = {"fps": fps, "items": [f.to_dict() for f in frames]}

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return output_path
