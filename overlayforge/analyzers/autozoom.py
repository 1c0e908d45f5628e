"""Auto-zoom: simulate a virtual camera that follows the pointer.

The simulation runs at a fixed timestep.  All running state lives in
``SimulationState`` and is threaded through ``step``; nothing is kept on a
module or instance, so independent segments can be simulated in parallel.
"""

import logging
import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Callable, NamedTuple, Sequence

from overlayforge.manifest import AutoZoomConfig
from overlayforge.models import CameraPathSample, PointerSample, ZoomKeyframe

logger = logging.getLogger(__name__)

# Samples this far outside the trim window still inform look-ahead and velocity.
SAMPLE_PADDING = 1.0


class CameraTarget(NamedTuple):
    x: float
    y: float
    zoom: float


@dataclass(frozen=True)
class CameraState:
    x: float
    y: float
    zoom: float
    vx: float = 0.0
    vy: float = 0.0
    vz: float = 0.0


@dataclass(frozen=True)
class InteractionState:
    hover_time: float
    last_x: float
    last_y: float


@dataclass(frozen=True)
class SimulationState:
    camera: CameraState
    interaction: InteractionState
    smoothed_zoom: float


class PointerTrack:
    """Time-sorted pointer samples with interpolated lookups."""

    def __init__(self, samples: Sequence[PointerSample]):
        self.samples = sorted(samples, key=lambda s: s.timestamp)
        self.times = [s.timestamp for s in self.samples]

    def __len__(self) -> int:
        return len(self.samples)

    def sample(self, t: float) -> tuple[float, float]:
        """Linearly interpolated position at ``t``, clamped at both ends."""
        first, last = self.samples[0], self.samples[-1]
        if t <= first.timestamp:
            return first.x, first.y
        if t >= last.timestamp:
            return last.x, last.y

        idx = bisect_left(self.times, t)
        p1, p2 = self.samples[idx - 1], self.samples[idx]
        span = p2.timestamp - p1.timestamp
        ratio = (t - p1.timestamp) / span if span > 0 else 0.0
        return p1.x + (p2.x - p1.x) * ratio, p1.y + (p2.y - p1.y) * ratio

    def speed(self, t: float, window: float) -> float:
        """Centered finite-difference speed in px/s."""
        if window <= 0:
            return 0.0
        x1, y1 = self.sample(t - window)
        x2, y2 = self.sample(t + window)
        return math.hypot(x2 - x1, y2 - y1) / (window * 2)

    def clicked_near(self, t: float, window: float) -> bool:
        lo = bisect_left(self.times, t - window / 2)
        hi = bisect_right(self.times, t + window / 2)
        return any(s.is_clicked for s in self.samples[lo:hi])


def look_ahead(speed: float, config: AutoZoomConfig) -> float:
    """Seconds of anticipation: ~0 when still, saturating at ``look_ahead_max``."""
    if config.look_ahead_scale <= 0:
        return 0.0
    return config.look_ahead_max * (1 - math.exp(-speed / config.look_ahead_scale))


def target_zoom(speed: float, clicked: bool, hover_time: float, config: AutoZoomConfig) -> float:
    """Unfiltered zoom the camera should aim for at this step."""
    if config.max_velocity_zoom_penalty > 0:
        factor = min(1.0, speed / config.max_velocity_zoom_penalty)
    else:
        factor = 1.0
    zoom = config.base_zoom * (1 - factor) + config.min_zoom * factor
    if clicked:
        zoom = max(zoom, config.click_zoom)
    if hover_time > config.long_hover:
        zoom = config.max_zoom
    return zoom


def keyframe_influence(
    keyframes: Sequence[ZoomKeyframe], t: float, window: float
) -> tuple[ZoomKeyframe | None, float]:
    """Nearest keyframe within ``window`` and its raised-cosine weight."""
    best: ZoomKeyframe | None = None
    best_dist = window
    for kf in keyframes:
        dist = abs(kf.time - t)
        if dist < best_dist:
            best, best_dist = kf, dist
    if best is None or window <= 0:
        return None, 0.0
    return best, (1 + math.cos(best_dist / window * math.pi)) / 2


def blend_target(auto: CameraTarget, manual: CameraTarget, weight: float) -> CameraTarget:
    """Mix automatic tracking with a keyframe; weight 1 follows the keyframe exactly."""
    return CameraTarget(
        x=auto.x * (1 - weight) + manual.x * weight,
        y=auto.y * (1 - weight) + manual.y * weight,
        zoom=auto.zoom * (1 - weight) + manual.zoom * weight,
    )


def spring_step(
    position: float,
    velocity: float,
    target: float,
    mass: float,
    config: AutoZoomConfig,
    dt: float,
) -> tuple[float, float]:
    """One explicit-Euler step of a mass-spring-damper."""
    accel = (-config.tension * (position - target) - config.friction * velocity) / mass
    velocity += accel * dt
    return position + velocity * dt, velocity


def initial_state(
    track: PointerTrack, width: float, height: float, config: AutoZoomConfig
) -> SimulationState:
    first = track.samples[0]
    return SimulationState(
        camera=CameraState(x=width / 2, y=height / 2, zoom=1.0),
        interaction=InteractionState(hover_time=0.0, last_x=first.x, last_y=first.y),
        smoothed_zoom=config.base_zoom,
    )


def step(
    state: SimulationState,
    t: float,
    track: PointerTrack,
    keyframes: Sequence[ZoomKeyframe],
    width: float,
    height: float,
    config: AutoZoomConfig,
    dt: float,
) -> tuple[SimulationState, CameraPathSample]:
    """Advance the simulation to time ``t`` and emit the recorded sample."""
    mouse_x, mouse_y = track.sample(t)
    speed = track.speed(t, config.velocity_window)
    future_x, future_y = track.sample(t + look_ahead(speed, config))
    clicked = track.clicked_near(t, config.click_window)

    interaction = state.interaction
    moved = math.hypot(mouse_x - interaction.last_x, mouse_y - interaction.last_y)
    if moved < config.hover_move_threshold:
        hover = interaction.hover_time + dt
    else:
        hover = max(0.0, interaction.hover_time - dt * 2)
    interaction = InteractionState(hover_time=hover, last_x=mouse_x, last_y=mouse_y)

    raw_zoom = target_zoom(speed, clicked, hover, config)
    smoothed = state.smoothed_zoom + (raw_zoom - state.smoothed_zoom) * config.zoom_filter
    target = CameraTarget(future_x, future_y, smoothed)

    if keyframes:
        kf, weight = keyframe_influence(keyframes, t, config.keyframe_window)
        if kf is not None and weight > 0:
            manual = CameraTarget(kf.position_x * width, kf.position_y * height, kf.zoom_factor)
            target = blend_target(target, manual, weight)
            # The blended zoom becomes the filter state for the next step.
            smoothed = target.zoom

    cam = state.camera
    x, vx = spring_step(cam.x, cam.vx, target.x, config.mass, config, dt)
    y, vy = spring_step(cam.y, cam.vy, target.y, config.mass, config, dt)
    zoom, vz = spring_step(
        cam.zoom, cam.vz, target.zoom, config.mass * config.zoom_mass_factor, config, dt
    )
    # Position is left unclamped; the renderer keeps the crop in bounds.
    zoom = max(config.zoom_floor, min(config.zoom_ceiling, zoom))

    new_state = SimulationState(
        camera=CameraState(x=x, y=y, zoom=zoom, vx=vx, vy=vy, vz=vz),
        interaction=interaction,
        smoothed_zoom=smoothed,
    )
    sample = CameraPathSample(time=round(t, 6), x=round(x, 1), y=round(y, 1), zoom=round(zoom, 3))
    return new_state, sample


def generate_motion_path(
    samples: Sequence[PointerSample],
    trim_start: float,
    trim_end: float,
    width: float,
    height: float,
    keyframes: Sequence[ZoomKeyframe] = (),
    config: AutoZoomConfig | None = None,
    on_progress: Callable[[float], None] | None = None,
) -> list[CameraPathSample]:
    """Simulate the camera over [trim_start, trim_end] at ``config.fps``.

    Returns an empty path when fewer than two pointer samples are usable.
    """
    config = config or AutoZoomConfig()
    track = PointerTrack(
        [
            s for s in samples
            if trim_start - SAMPLE_PADDING <= s.timestamp <= trim_end + SAMPLE_PADDING
        ]
    )
    if len(track) < 2 or trim_end < trim_start or config.fps <= 0:
        return []

    keyframes = sorted(keyframes, key=lambda kf: kf.time)
    dt = 1 / config.fps
    steps = int(math.floor((trim_end - trim_start) * config.fps + 1e-9)) + 1
    report_every = max(1, steps // 100)

    state = initial_state(track, width, height, config)
    path: list[CameraPathSample] = []
    for i in range(steps):
        state, sample = step(
            state, trim_start + i * dt, track, keyframes, width, height, config, dt
        )
        path.append(sample)
        if on_progress and (i + 1) % report_every == 0:
            on_progress((i + 1) / steps)

    logger.debug(
        "Motion path: %d steps over [%.3f, %.3f] from %d samples",
        steps, trim_start, trim_end, len(track),
    )
    return path
