"""Tests for the engine module."""

import json
import logging
import shutil
from dataclasses import replace
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from overlayforge.engine import EngineResult, process
from overlayforge.manifest import AutoZoomConfig, ExportConfig, Manifest, load_manifest
from overlayforge.models import ProbeResult

from conftest import FIXTURES_DIR


@pytest.fixture
def manifest(tmp_path) -> Manifest:
    workdir = tmp_path / "fixtures"
    shutil.copytree(FIXTURES_DIR, workdir)
    return load_manifest(workdir / "sample_manifest.json")


class TestEngineResult:
    def test_defaults(self):
        r = EngineResult(output_path=Path("out.json"))
        assert r.duration == 0.0
        assert r.cursor_intervals == 0
        assert r.camera_samples == 0
        assert r.segment.cursor_visibility is None


class TestProcess:
    def test_full_pipeline(self, manifest):
        result = process(manifest)

        assert result.output_path.exists()
        assert result.duration == 4.0
        assert result.cursor_intervals == 2
        assert result.keystroke_events == 3
        assert result.keystroke_intervals == 1
        assert result.camera_samples == 241
        assert result.frames_baked == 121

        data = json.loads(result.output_path.read_text())
        assert data["duration"] == 4.0
        assert data["frames"]["fps"] == 30
        assert len(data["frames"]["items"]) == 121
        assert data["segment"]["keystroke_mode"] == "keyboard"
        assert data["segment"]["keystroke_delay"] == 0.1

    def test_cursor_hidden_while_parked(self, manifest):
        result = process(manifest)
        [first, second] = result.segment.cursor_visibility
        assert first.start == 0.0
        assert first.end < 1.5
        assert second.start > 2.5
        assert second.end == 4.0

    def test_progress_callback(self, manifest):
        on_progress = MagicMock()
        process(manifest, on_progress=on_progress)
        calls = [c.args for c in on_progress.call_args_list]
        fractions = [frac for _, frac in calls]
        assert fractions == sorted(fractions)
        assert calls[-1] == ("Done", 1.0)
        assert any(stage == "Simulating camera path" for stage, _ in calls)

    def test_auto_zoom_disabled(self, manifest):
        result = process(replace(manifest, auto_zoom=AutoZoomConfig(enabled=False)))
        assert result.camera_samples == 0
        assert result.segment.influence_points == []

    def test_without_events_or_bake(self, manifest):
        result = process(replace(manifest, input_events=None, export=ExportConfig()))
        assert result.keystroke_events == 0
        assert result.frames_baked == 0
        assert "frames" not in json.loads(result.output_path.read_text())

    @patch("overlayforge.engine.ffutil.probe")
    @patch("overlayforge.engine.ffutil.check_ffprobe")
    def test_probes_video_for_missing_geometry(self, mock_check, mock_probe, manifest):
        mock_probe.return_value = ProbeResult(
            duration=4.0, width=1920, height=1080, fps=60.0, codec_video="h264"
        )
        video = manifest.pointer_samples.with_name("capture.mp4")
        result = process(replace(manifest, video=video, duration=None, width=None, height=None))
        mock_check.assert_called_once()
        mock_probe.assert_called_once_with(video)
        assert result.duration == 4.0
        assert result.camera_samples == 241

    def test_falls_back_to_pointer_extent(self, manifest, caplog):
        with caplog.at_level(logging.WARNING, logger="overlayforge.engine"):
            result = process(replace(manifest, duration=None, width=None, height=None))
        assert "pointer extent 450x250" in caplog.text
        assert result.duration == 4.0
