"""Pipeline driver: derives every overlay a Manifest asks for."""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable

from overlayforge import ffutil
from overlayforge.analyzers.activity import detect_cursor_visibility
from overlayforge.analyzers.autozoom import generate_motion_path
from overlayforge.editors.camera import default_influence_points
from overlayforge.editors.overlays import bake_overlay_frames, write_overlay_track
from overlayforge.manifest import Manifest, load_input_events, load_pointer_samples
from overlayforge.models import PointerSample, Segment, TimeRange
from overlayforge.timeline import import_input_events, keystroke_intervals_for_mode

logger = logging.getLogger(__name__)


@dataclass
class EngineResult:
    output_path: Path
    segment: Segment = field(default_factory=Segment)
    duration: float = 0.0
    cursor_intervals: int = 0
    keystroke_events: int = 0
    keystroke_intervals: int = 0
    camera_samples: int = 0
    frames_baked: int = 0


def _resolve_geometry(
    manifest: Manifest, samples: list[PointerSample]
) -> tuple[float, int, int]:
    """Duration and video size, probing the recording for anything not given."""
    duration, width, height = manifest.duration, manifest.width, manifest.height

    if manifest.video is not None and (duration is None or not width or not height):
        ffutil.check_ffprobe()
        info = ffutil.probe(manifest.video)
        duration = duration if duration is not None else info.duration
        width = width or info.width
        height = height or info.height

    if duration is None:
        duration = max([manifest.trim_end or 0.0] + [s.timestamp for s in samples])
    if not width or not height:
        width = width or int(max((s.x for s in samples), default=0.0))
        height = height or int(max((s.y for s in samples), default=0.0))
        logger.warning(
            "Video size unknown; using pointer extent %dx%d for the camera", width, height
        )
    return duration, width, height


def process(
    manifest: Manifest,
    on_progress: Callable[[str, float], None] | None = None,
) -> EngineResult:
    """Execute the full overlay pipeline.

    Args:
        manifest: Validated overlay manifest.
        on_progress: Optional callback(stage_name, fraction_complete).
    """

    def _progress(stage: str, frac: float) -> None:
        logger.info("%s (%.0f%%)", stage, frac * 100)
        if on_progress:
            on_progress(stage, frac)

    def _sub_progress(stage: str, base: float, span: float):
        """Return a callback that maps a [0,1] fraction to [base, base+span]."""
        def cb(frac: float) -> None:
            _progress(stage, base + frac * span)
        return cb

    _progress("Loading capture data", 0.0)
    samples = load_pointer_samples(manifest.pointer_samples)
    raw_events = load_input_events(manifest.input_events) if manifest.input_events else []

    duration, width, height = _resolve_geometry(manifest, samples)
    trim_end = manifest.trim_end if manifest.trim_end is not None else duration
    segment = Segment(
        trim_start=manifest.trim_start,
        trim_end=trim_end,
        trim_ranges=[TimeRange(start=manifest.trim_start, end=trim_end)],
        zoom_keyframes=list(manifest.zoom_keyframes),
        keystroke_mode=manifest.keystrokes.mode,
        keystroke_delay=manifest.keystrokes.delay,
    )
    _progress("Loading capture data", 0.05)

    # --- Cursor hiding ---
    if manifest.cursor_hiding.enabled:
        _progress("Detecting idle cursor", 0.1)
        segment = replace(
            segment,
            cursor_visibility=detect_cursor_visibility(
                samples, duration, trim_end, manifest.cursor_hiding
            ),
        )

    # --- Keystrokes ---
    if raw_events:
        _progress("Building keystroke overlays", 0.2)
        segment = import_input_events(segment, raw_events, duration, manifest.keystrokes)

    # --- Auto zoom ---
    if manifest.auto_zoom.enabled and width > 0 and height > 0:
        _progress("Simulating camera path", 0.3)
        path = generate_motion_path(
            samples,
            manifest.trim_start,
            trim_end,
            width,
            height,
            manifest.zoom_keyframes,
            manifest.auto_zoom,
            on_progress=_sub_progress("Simulating camera path", 0.3, 0.5),
        )
        if not path:
            logger.warning("Not enough pointer data for auto zoom; camera path left empty")
        segment = replace(
            segment,
            camera_path=path,
            influence_points=default_influence_points(duration) if path else [],
        )

    # --- Export ---
    frames = None
    if manifest.export.bake:
        _progress("Baking overlay frames", 0.85)
        frames = bake_overlay_frames(
            segment, duration, manifest.export.fps, (width / 2, height / 2), manifest.fade
        )

    _progress("Writing overlay track", 0.95)
    write_overlay_track(
        segment, manifest.output, duration, frames,
        manifest.export.fps if frames is not None else None,
    )

    _progress("Done", 1.0)
    return EngineResult(
        output_path=manifest.output,
        segment=segment,
        duration=duration,
        cursor_intervals=len(segment.cursor_visibility or []),
        keystroke_events=len(segment.keystroke_events),
        keystroke_intervals=len(keystroke_intervals_for_mode(segment)),
        camera_samples=len(segment.camera_path),
        frames_baked=len(frames or []),
    )
