"""JSON manifest schema shared by the CLI, the web API and the engine."""

import json
from dataclasses import dataclass, field
from pathlib import Path

from overlayforge.models import PointerSample, RawInputEvent, ZoomKeyframe

KEYSTROKE_MODES = ("off", "keyboard", "keyboardMouse")


@dataclass
class CursorHidingConfig:
    """Tunables for idle-cursor detection."""

    enabled: bool = True
    idle_velocity: float = 2.0          # px/s
    idle_duration: float = 1.5          # s of inactivity before hiding
    anchored_radius: float = 18.0       # px
    anchored_duration: float = 0.9      # s
    velocity_window: float = 0.1        # s, centered
    active_net_distance: float = 3.5    # px
    active_path_distance: float = 6.0   # px
    margin_before: float = 0.3
    margin_after: float = 0.2
    min_gap_to_merge: float = 0.5


@dataclass
class KeystrokeConfig:
    """Keystroke badge reconstruction and visibility."""

    mode: str = "off"
    delay: float = 0.0
    display_duration: float = 1.2
    hold_min_duration: float = 0.2
    min_release_display: float = 0.34
    margin_before: float = 0.04
    margin_after: float = 0.08
    min_gap_to_merge: float = 0.2


@dataclass
class AutoZoomConfig:
    """Camera simulator constants.

    Position uses a critically damped spring (friction = 2·sqrt(tension·mass));
    zoom runs the same spring with twice the mass.
    """

    enabled: bool = True
    fps: int = 60
    tension: float = 20.0
    friction: float = 20.0
    mass: float = 5.0
    zoom_mass_factor: float = 2.0
    look_ahead_max: float = 0.45        # s
    look_ahead_scale: float = 700.0     # px/s reaching ~63% of max
    max_velocity_zoom_penalty: float = 1500.0
    base_zoom: float = 2.0
    min_zoom: float = 1.0
    max_zoom: float = 2.0
    click_zoom: float = 1.7
    click_window: float = 0.5
    hover_move_threshold: float = 2.0   # px per step
    long_hover: float = 2.0             # s
    zoom_filter: float = 0.05
    velocity_window: float = 0.1
    keyframe_window: float = 1.5
    zoom_floor: float = 1.0
    zoom_ceiling: float = 5.0


@dataclass
class FadeConfig:
    """Entrance/exit animation for visibility-driven overlays."""

    fade_in: float = 0.2
    fade_out: float = 0.25
    scale_hidden: float = 0.5
    scale_visible: float = 1.0


@dataclass
class ExportConfig:
    """Per-frame baking of the overlay track."""

    bake: bool = False
    fps: int = 60


@dataclass
class Manifest:
    """Top-level overlay manifest."""

    pointer_samples: Path
    output: Path
    version: str = "1"
    input_events: Path | None = None
    video: Path | None = None
    duration: float | None = None
    width: int | None = None
    height: int | None = None
    trim_start: float = 0.0
    trim_end: float | None = None
    zoom_keyframes: list[ZoomKeyframe] = field(default_factory=list)
    cursor_hiding: CursorHidingConfig = field(default_factory=CursorHidingConfig)
    keystrokes: KeystrokeConfig = field(default_factory=KeystrokeConfig)
    auto_zoom: AutoZoomConfig = field(default_factory=AutoZoomConfig)
    fade: FadeConfig = field(default_factory=FadeConfig)
    export: ExportConfig = field(default_factory=ExportConfig)


def _optional_path(value) -> Path | None:
    return Path(value) if value else None


def load_manifest(path: str | Path) -> Manifest:
    """Load and validate a manifest from a JSON file.

    Relative capture/output paths are resolved against the manifest's directory.
    """
    path = Path(path)
    data = json.loads(path.read_text())

    if "pointer_samples" not in data or "output" not in data:
        raise ValueError("Manifest must contain 'pointer_samples' and 'output' fields")

    base = path.parent

    def _resolve(value) -> Path | None:
        p = _optional_path(value)
        if p is None or p.is_absolute():
            return p
        return base / p

    keystrokes = KeystrokeConfig(**data["keystrokes"]) if "keystrokes" in data else KeystrokeConfig()
    if keystrokes.mode not in KEYSTROKE_MODES:
        raise ValueError(f"Unknown keystroke mode {keystrokes.mode!r}; expected one of {KEYSTROKE_MODES}")

    return Manifest(
        version=data.get("version", "1"),
        pointer_samples=_resolve(data["pointer_samples"]),
        output=_resolve(data["output"]),
        input_events=_resolve(data.get("input_events")),
        video=_resolve(data.get("video")),
        duration=float(data["duration"]) if data.get("duration") is not None else None,
        width=int(data["width"]) if data.get("width") is not None else None,
        height=int(data["height"]) if data.get("height") is not None else None,
        trim_start=float(data.get("trim_start", 0.0)),
        trim_end=float(data["trim_end"]) if data.get("trim_end") is not None else None,
        zoom_keyframes=[ZoomKeyframe.from_dict(k) for k in data.get("zoom_keyframes", [])],
        cursor_hiding=CursorHidingConfig(**data["cursor_hiding"]) if "cursor_hiding" in data else CursorHidingConfig(),
        keystrokes=keystrokes,
        auto_zoom=AutoZoomConfig(**data["auto_zoom"]) if "auto_zoom" in data else AutoZoomConfig(),
        fade=FadeConfig(**data["fade"]) if "fade" in data else FadeConfig(),
        export=ExportConfig(**data["export"]) if "export" in data else ExportConfig(),
    )


def _records(data, key: str) -> list[dict]:
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of {key} records")
    return data


def load_pointer_samples(path: str | Path) -> list[PointerSample]:
    """Read captured pointer samples (a JSON list or ``{"samples": [...]}``)."""
    data = json.loads(Path(path).read_text())
    return [PointerSample.from_dict(d) for d in _records(data, "samples")]


def load_input_events(path: str | Path) -> list[RawInputEvent]:
    """Read captured raw input events (a JSON list or ``{"events": [...]}``)."""
    data = json.loads(Path(path).read_text())
    return [RawInputEvent.from_dict(d) for d in _records(data, "events")]
