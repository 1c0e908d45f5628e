"""Shared data types used across OverlayForge.

Times are seconds from the start of the recording; positions are pixels in
source-video space unless noted otherwise.  Every type round-trips through
plain dicts via ``to_dict()`` / ``from_dict()`` so capture files and the
exported overlay track stay ordinary JSON.
"""

import uuid
from dataclasses import asdict, dataclass, field


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class TimeRange:
    """A start/end time pair in seconds."""

    start: float
    end: float


@dataclass(frozen=True)
class PointerSample:
    """One captured cursor position."""

    x: float
    y: float
    timestamp: float
    is_clicked: bool = False
    cursor_kind: str = "default"

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(d: dict) -> "PointerSample":
        return PointerSample(
            x=float(d["x"]),
            y=float(d["y"]),
            timestamp=float(d["timestamp"]),
            is_clicked=bool(d.get("is_clicked", d.get("isClicked", False))),
            cursor_kind=d.get("cursor_kind", d.get("cursor_type", "default")) or "default",
        )


@dataclass(frozen=True)
class InputModifiers:
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    meta: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(d: dict | None) -> "InputModifiers":
        d = d or {}
        if not isinstance(d, dict):
            raise TypeError(f"modifiers must be an object, got {type(d).__name__}")
        return InputModifiers(
            ctrl=bool(d.get("ctrl")),
            alt=bool(d.get("alt")),
            shift=bool(d.get("shift")),
            meta=bool(d.get("meta", d.get("win"))),
        )


@dataclass(frozen=True)
class RawInputEvent:
    """A raw keyboard, mouse-button or wheel event from the capture hook.

    Key and button events may arrive as separate down/up pairs; ``direction``
    is ``None`` for instantaneous events.  For wheel events ``direction`` is
    the scroll direction instead.
    """

    type: str
    timestamp: float
    key: str | None = None
    vk: int | None = None
    button: str | None = None
    direction: str | None = None
    modifiers: InputModifiers = field(default_factory=InputModifiers)

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(d: dict) -> "RawInputEvent":
        vk = d.get("vk")
        return RawInputEvent(
            type=d["type"],
            timestamp=float(d["timestamp"]),
            key=d.get("key"),
            vk=int(vk) if vk is not None else None,
            button=d.get("button", d.get("btn")),
            direction=d.get("direction"),
            modifiers=InputModifiers.from_dict(d.get("modifiers")),
        )


@dataclass(frozen=True)
class DisplayInterval:
    """Show an overlay between ``start`` and ``end`` (output-timeline seconds)."""

    start: float
    end: float
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "start": self.start, "end": self.end}

    @staticmethod
    def from_dict(d: dict) -> "DisplayInterval":
        return DisplayInterval(
            start=float(d.get("start", d.get("startTime", 0.0))),
            end=float(d.get("end", d.get("endTime", 0.0))),
            id=d.get("id") or new_id(),
        )


@dataclass(frozen=True)
class ZoomKeyframe:
    """A user-authored zoom target; positions are normalized to [0, 1]."""

    time: float
    duration: float = 0.0
    zoom_factor: float = 1.0
    position_x: float = 0.5
    position_y: float = 0.5
    easing: str = "easeOut"

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(d: dict) -> "ZoomKeyframe":
        return ZoomKeyframe(
            time=float(d["time"]),
            duration=float(d.get("duration", 0.0)),
            zoom_factor=max(1.0, float(d.get("zoom_factor", d.get("zoomFactor", 1.0)))),
            position_x=float(d.get("position_x", d.get("positionX", 0.5))),
            position_y=float(d.get("position_y", d.get("positionY", 0.5))),
            easing=d.get("easing", d.get("easingType", "easeOut")),
        )


@dataclass(frozen=True)
class CameraPathSample:
    time: float
    x: float
    y: float
    zoom: float

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(d: dict) -> "CameraPathSample":
        return CameraPathSample(
            time=float(d["time"]), x=float(d["x"]), y=float(d["y"]), zoom=float(d["zoom"])
        )


@dataclass(frozen=True)
class InfluencePoint:
    """How strongly the automatic camera applies at ``time`` (0..1)."""

    time: float
    value: float

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(d: dict) -> "InfluencePoint":
        return InfluencePoint(time=float(d["time"]), value=float(d["value"]))


@dataclass
class KeystrokeEvent:
    """One logical press reconstructed from raw input events."""

    type: str
    start: float
    end: float
    label: str
    id: str = field(default_factory=new_id)
    is_hold: bool = False
    modifiers: InputModifiers = field(default_factory=InputModifiers)
    key: str | None = None
    button: str | None = None
    direction: str | None = None
    count: int = 1

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(d: dict) -> "KeystrokeEvent":
        return KeystrokeEvent(
            type=d["type"],
            start=float(d["start"]),
            end=float(d["end"]),
            label=d.get("label", ""),
            id=d.get("id") or new_id(),
            is_hold=bool(d.get("is_hold", False)),
            modifiers=InputModifiers.from_dict(d.get("modifiers")),
            key=d.get("key"),
            button=d.get("button"),
            direction=d.get("direction"),
            count=int(d.get("count", 1)),
        )


@dataclass
class ProbeResult:
    """Metadata extracted from a media file via ffprobe."""

    duration: float
    width: int
    height: int
    fps: float
    codec_video: str


@dataclass
class Segment:
    """The editable timeline segment that owns all derived overlay data.

    ``cursor_visibility`` is ``None`` while cursor hiding is off.  The two
    keystroke interval lists are kept per mode so switching modes does not
    discard manual edits made in the other one.
    """

    trim_start: float = 0.0
    trim_end: float = 0.0
    trim_ranges: list[TimeRange] = field(default_factory=list)
    zoom_keyframes: list[ZoomKeyframe] = field(default_factory=list)
    camera_path: list[CameraPathSample] = field(default_factory=list)
    influence_points: list[InfluencePoint] = field(default_factory=list)
    cursor_visibility: list[DisplayInterval] | None = None
    keystroke_mode: str = "off"
    keystroke_delay: float = 0.0
    keystroke_events: list[KeystrokeEvent] = field(default_factory=list)
    keyboard_visibility: list[DisplayInterval] | None = None
    keyboard_mouse_visibility: list[DisplayInterval] | None = None

    def to_dict(self) -> dict:
        def _intervals(items):
            return None if items is None else [iv.to_dict() for iv in items]

        return {
            "trim_start": self.trim_start,
            "trim_end": self.trim_end,
            "trim_ranges": [asdict(r) for r in self.trim_ranges],
            "zoom_keyframes": [kf.to_dict() for kf in self.zoom_keyframes],
            "camera_path": [p.to_dict() for p in self.camera_path],
            "influence_points": [p.to_dict() for p in self.influence_points],
            "cursor_visibility": _intervals(self.cursor_visibility),
            "keystroke_mode": self.keystroke_mode,
            "keystroke_delay": self.keystroke_delay,
            "keystroke_events": [e.to_dict() for e in self.keystroke_events],
            "keyboard_visibility": _intervals(self.keyboard_visibility),
            "keyboard_mouse_visibility": _intervals(self.keyboard_mouse_visibility),
        }

    @staticmethod
    def from_dict(d: dict) -> "Segment":
        def _intervals(items):
            return None if items is None else [DisplayInterval.from_dict(i) for i in items]

        return Segment(
            trim_start=float(d.get("trim_start", 0.0)),
            trim_end=float(d.get("trim_end", 0.0)),
            trim_ranges=[TimeRange(**r) for r in d.get("trim_ranges", [])],
            zoom_keyframes=[ZoomKeyframe.from_dict(k) for k in d.get("zoom_keyframes", [])],
            camera_path=[CameraPathSample.from_dict(p) for p in d.get("camera_path", [])],
            influence_points=[InfluencePoint.from_dict(p) for p in d.get("influence_points", [])],
            cursor_visibility=_intervals(d.get("cursor_visibility")),
            keystroke_mode=d.get("keystroke_mode", "off"),
            keystroke_delay=float(d.get("keystroke_delay", 0.0)),
            keystroke_events=[KeystrokeEvent.from_dict(e) for e in d.get("keystroke_events", [])],
            keyboard_visibility=_intervals(d.get("keyboard_visibility")),
            keyboard_mouse_visibility=_intervals(d.get("keyboard_mouse_visibility")),
        )
