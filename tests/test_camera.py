"""Tests for camera path lookup and influence curves."""

import pytest

from overlayforge.editors.camera import (
    default_influence_points,
    influence_at,
    sample_camera_path,
)
from overlayforge.models import CameraPathSample, InfluencePoint

PATH = [
    CameraPathSample(time=0.0, x=100.0, y=100.0, zoom=1.0),
    CameraPathSample(time=1.0, x=200.0, y=300.0, zoom=2.0),
]


class TestInfluence:
    def test_defaults_span_duration(self):
        points = default_influence_points(12.5)
        assert [(p.time, p.value) for p in points] == [(0.0, 1.0), (12.5, 1.0)]

    def test_empty_is_full_influence(self):
        assert influence_at([], 3.0) == 1.0

    def test_cosine_interpolation(self):
        points = [InfluencePoint(0.0, 0.0), InfluencePoint(2.0, 1.0)]
        assert influence_at(points, 1.0) == pytest.approx(0.5)
        assert influence_at(points, 0.5) == pytest.approx(0.1464466, abs=1e-6)

    def test_held_past_ends(self):
        points = [InfluencePoint(1.0, 0.2), InfluencePoint(2.0, 0.8)]
        assert influence_at(points, 0.0) == 0.2
        assert influence_at(points, 5.0) == 0.8


class TestSampleCameraPath:
    def test_empty_path(self):
        assert sample_camera_path([], 1.0) is None

    def test_interpolates(self):
        cam = sample_camera_path(PATH, 0.5)
        assert (cam.x, cam.y, cam.zoom) == pytest.approx((150.0, 200.0, 1.5))

    def test_clamps_outside_path(self):
        assert sample_camera_path(PATH, -1.0).x == 100.0
        assert sample_camera_path(PATH, 9.0).zoom == 2.0

    def test_zero_influence_returns_to_centre(self):
        points = [InfluencePoint(0.0, 0.0), InfluencePoint(1.0, 0.0)]
        cam = sample_camera_path(PATH, 1.0, points, center=(640.0, 360.0))
        assert (cam.x, cam.y, cam.zoom) == pytest.approx((640.0, 360.0, 1.0))

    def test_influence_without_centre_scales_zoom_only(self):
        points = [InfluencePoint(0.0, 0.5), InfluencePoint(1.0, 0.5)]
        cam = sample_camera_path(PATH, 1.0, points)
        assert cam.x == 200.0
        assert cam.zoom == pytest.approx(1.5)
