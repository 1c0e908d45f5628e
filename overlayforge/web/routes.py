"""Web API routes for OverlayForge."""

import json
import logging
import queue
import threading
import uuid

from flask import Blueprint, Response, jsonify, request

from overlayforge.analyzers.activity import detect_cursor_visibility
from overlayforge.analyzers.autozoom import generate_motion_path
from overlayforge.analyzers.keystrokes import (
    build_keystroke_events,
    filter_events_by_mode,
    generate_keystroke_visibility,
)
from overlayforge.editors.camera import default_influence_points
from overlayforge.editors.visibility import visibility_at
from overlayforge.manifest import (
    KEYSTROKE_MODES,
    AutoZoomConfig,
    CursorHidingConfig,
    FadeConfig,
    KeystrokeConfig,
)
from overlayforge.models import (
    DisplayInterval,
    PointerSample,
    RawInputEvent,
    ZoomKeyframe,
)

logger = logging.getLogger(__name__)

bp = Blueprint("api", __name__)

# In-memory job store: job_id -> job dict
_jobs: dict[str, dict] = {}


class BadRequest(ValueError):
    pass


@bp.errorhandler(BadRequest)
def bad_request(error):
    return jsonify({"error": str(error)}), 400


def _payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("Expected a JSON object body")
    return data


def _parse(records, factory, what: str) -> list:
    if not isinstance(records, list):
        raise BadRequest(f"'{what}' must be a list")
    if not all(isinstance(r, dict) for r in records):
        raise BadRequest(f"Invalid {what} record: expected an object")
    try:
        return [factory(r) for r in records]
    except (KeyError, TypeError, ValueError) as e:
        raise BadRequest(f"Invalid {what} record: {e}") from e


def _number(data: dict, key: str, default: float | None = None) -> float:
    value = data.get(key, default)
    if value is None:
        raise BadRequest(f"'{key}' is required")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise BadRequest(f"'{key}' must be a number") from e


def _config(factory, block):
    try:
        return factory(**(block or {}))
    except TypeError as e:
        raise BadRequest(str(e)) from e


@bp.route("/")
def index():
    return jsonify({
        "name": "OverlayForge",
        "endpoints": [
            "/api/cursor-visibility",
            "/api/keystrokes",
            "/api/visibility",
            "/api/motion-path",
        ],
    })


@bp.route("/api/cursor-visibility", methods=["POST"])
def cursor_visibility():
    data = _payload()
    samples = _parse(data.get("samples", []), PointerSample.from_dict, "samples")
    config = _config(CursorHidingConfig, data.get("config"))
    duration = _number(data, "duration") if data.get("duration") is not None else None
    intervals = detect_cursor_visibility(samples, duration, _number(data, "trim_end", 0.0), config)
    return jsonify({"intervals": [iv.to_dict() for iv in intervals]})


@bp.route("/api/keystrokes", methods=["POST"])
def keystrokes():
    data = _payload()
    raw = _parse(data.get("events", []), RawInputEvent.from_dict, "events")
    mode = data.get("mode", "keyboardMouse")
    if mode not in KEYSTROKE_MODES:
        raise BadRequest(f"Unknown mode {mode!r}")
    duration = _number(data, "duration", 0.0)
    config = _config(KeystrokeConfig, data.get("config"))

    events = build_keystroke_events(raw, duration, config)
    intervals = generate_keystroke_visibility(
        filter_events_by_mode(events, mode), duration, mode, _number(data, "delay", 0.0), config
    )
    return jsonify({
        "events": [e.to_dict() for e in events],
        "intervals": [iv.to_dict() for iv in intervals],
    })


@bp.route("/api/visibility", methods=["POST"])
def visibility():
    data = _payload()
    records = data.get("intervals")
    intervals = None if records is None else _parse(records, DisplayInterval.from_dict, "intervals")
    fade = _config(FadeConfig, data.get("fade"))
    result = visibility_at(_number(data, "time"), intervals, fade)
    return jsonify({"opacity": result.opacity, "scale": result.scale})


@bp.route("/api/motion-path", methods=["POST"])
def start_motion_path():
    data = _payload()
    samples = _parse(data.get("samples", []), PointerSample.from_dict, "samples")
    keyframes = _parse(data.get("keyframes", []), ZoomKeyframe.from_dict, "keyframes")
    config = _config(AutoZoomConfig, data.get("config"))
    width = _number(data, "width")
    height = _number(data, "height")
    trim_start = _number(data, "trim_start", 0.0)
    trim_end = _number(data, "trim_end")
    duration = _number(data, "duration", trim_end)

    job_id = uuid.uuid4().hex[:12]
    progress_queue: queue.Queue = queue.Queue()
    job = {"status": "processing", "error": None, "progress_queue": progress_queue}
    _jobs[job_id] = job

    def run():
        try:
            def on_progress(frac: float):
                progress_queue.put({"stage": "Simulating camera path", "progress": round(frac, 3)})

            path = generate_motion_path(
                samples, trim_start, trim_end, width, height, keyframes, config, on_progress
            )
            influence = default_influence_points(duration) if path else []
            job["result"] = {
                "camera_path": [p.to_dict() for p in path],
                "influence_points": [p.to_dict() for p in influence],
            }
            job["status"] = "done"
        except Exception as e:
            logger.exception("Motion path job %s failed", job_id)
            job["status"] = "error"
            job["error"] = str(e)
        finally:
            progress_queue.put(None)  # sentinel

    threading.Thread(target=run, daemon=True).start()
    return jsonify({"job_id": job_id, "status": "started"})


@bp.route("/api/jobs/<job_id>/progress")
def progress_stream(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    q = job.get("progress_queue")

    def generate():
        while True:
            try:
                msg = q.get(timeout=120)
            except queue.Empty:
                yield "data: {\"error\": \"timeout\"}\n\n"
                break
            if msg is None:
                if job["status"] == "error":
                    data = json.dumps({"error": job["error"]})
                else:
                    data = json.dumps({"stage": "complete", "progress": 1.0})
                yield f"data: {data}\n\n"
                break
            yield f"data: {json.dumps(msg)}\n\n"

    return Response(generate(), mimetype="text/event-stream")


@bp.route("/api/jobs/<job_id>/result")
def job_result(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    if job["status"] != "done":
        return jsonify({"error": "Job not complete"}), 409
    return jsonify(job["result"])


@bp.route("/api/jobs/<job_id>/status")
def job_status(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    resp = {"status": job["status"]}
    if job["status"] == "error":
        resp["error"] = job.get("error")
    return jsonify(resp)
