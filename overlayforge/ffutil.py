"""ffprobe subprocess helpers."""

import json
import shutil
import subprocess
from pathlib import Path

from overlayforge.models import ProbeResult


class FFprobeNotFoundError(RuntimeError):
    pass


class NoVideoStreamError(ValueError):
    """Raised when the probed file has no video stream."""
    pass


def check_ffprobe() -> None:
    """Raise FFprobeNotFoundError if ffprobe is not on PATH."""
    if shutil.which("ffprobe") is None:
        raise FFprobeNotFoundError("ffprobe not found on PATH")


def probe(input_path: Path) -> ProbeResult:
    """Extract recording metadata via ffprobe."""
    cmd = [
        "ffprobe",
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(input_path),
    ]
    result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    data = json.loads(result.stdout)

    video_stream = next(
        (s for s in data.get("streams", []) if s.get("codec_type") == "video"), None
    )
    if video_stream is None:
        raise NoVideoStreamError(f"No video stream found in {input_path}")

    # Parse fps from r_frame_rate (e.g. "30/1")
    num, den = video_stream.get("r_frame_rate", "0/1").split("/")
    fps = int(num) / int(den) if int(den) else 0.0

    duration = data.get("format", {}).get("duration") or video_stream.get("duration") or 0.0

    return ProbeResult(
        duration=float(duration),
        width=int(video_stream["width"]),
        height=int(video_stream["height"]),
        fps=fps,
        codec_video=video_stream.get("codec_name", ""),
    )
