"""Visibility curve evaluator shared by the cursor and keystroke overlays.

``visibility_at`` is called for every preview frame and every exported frame,
so it must stay a pure function of its arguments: no caching and no state
carried between calls.
"""

from typing import NamedTuple, Sequence

from overlayforge.manifest import FadeConfig
from overlayforge.models import DisplayInterval

DEFAULT_FADE = FadeConfig()


class Visibility(NamedTuple):
    opacity: float
    scale: float


FULLY_VISIBLE = Visibility(1.0, 1.0)


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def ease_in_cubic(t: float) -> float:
    return t * t * t


def _eased(fraction: float, fade: FadeConfig) -> Visibility:
    return Visibility(
        fraction, fade.scale_hidden + (fade.scale_visible - fade.scale_hidden) * fraction
    )


def visibility_at(
    time: float,
    intervals: Sequence[DisplayInterval] | None,
    fade: FadeConfig = DEFAULT_FADE,
) -> Visibility:
    """Opacity and scale of an overlay at ``time``.

    ``None`` means the feature is off and the overlay is always shown; an empty
    list means nothing is ever shown.  Otherwise the first interval whose body,
    entrance ramp or exit ramp contains ``time`` decides the result.
    """
    if intervals is None:
        return FULLY_VISIBLE

    for iv in intervals:
        if iv.start <= time <= iv.end:
            return FULLY_VISIBLE

        if fade.fade_in > 0 and iv.start - fade.fade_in <= time < iv.start:
            t = (time - (iv.start - fade.fade_in)) / fade.fade_in
            return _eased(ease_out_cubic(max(0.0, min(1.0, t))), fade)

        if fade.fade_out > 0 and iv.end < time <= iv.end + fade.fade_out:
            t = (time - iv.end) / fade.fade_out
            return _eased(1 - ease_in_cubic(max(0.0, min(1.0, t))), fade)

    return Visibility(0.0, fade.scale_hidden)
