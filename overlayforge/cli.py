"""Command-line entry point: turns arguments or a manifest file into an overlay track."""

import argparse
import logging
import sys
from pathlib import Path

from overlayforge.engine import process
from overlayforge.manifest import (
    KEYSTROKE_MODES,
    AutoZoomConfig,
    ExportConfig,
    KeystrokeConfig,
    Manifest,
    load_manifest,
)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="overlayforge",
        description="OverlayForge: cursor hiding, keystroke badges and auto-zoom for screen recordings.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    proc = sub.add_parser("process", help="Derive overlays from a capture")
    proc.add_argument("capture", nargs="?", type=Path, help="Pointer samples JSON file")
    proc.add_argument("--manifest", "-m", type=Path, help="Path to a JSON manifest file")
    proc.add_argument("--events", type=Path, help="Raw input events JSON file")
    proc.add_argument("--video", type=Path, help="Recording to probe for duration and size")
    proc.add_argument("--output", "-o", type=Path, help="Output overlay track path")
    proc.add_argument("--duration", type=float, help="Timeline duration in seconds")
    proc.add_argument("--width", type=int, help="Video width in pixels")
    proc.add_argument("--height", type=int, help="Video height in pixels")
    proc.add_argument("--no-auto-zoom", action="store_true", help="Skip camera path generation")
    proc.add_argument("--keystrokes", choices=KEYSTROKE_MODES, default="off", help="Keystroke overlay mode")
    proc.add_argument("--keystroke-delay", type=float, default=0.0, help="Keystroke delay in seconds (-1..1)")
    proc.add_argument("--bake-fps", type=int, default=0, help="Bake per-frame overlay state at this fps")

    serve = sub.add_parser("serve", help="Launch the web API")
    serve.add_argument("--port", type=int, default=8321, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from overlayforge.web import create_app
        app = create_app()
        print(f"OverlayForge API: http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=False)
        return

    if args.manifest:
        m = load_manifest(args.manifest)
    elif args.capture:
        output = args.output or args.capture.with_name(args.capture.stem + "_overlays.json")
        m = Manifest(
            pointer_samples=args.capture,
            output=output,
            input_events=args.events,
            video=args.video,
            duration=args.duration,
            width=args.width,
            height=args.height,
            keystrokes=KeystrokeConfig(mode=args.keystrokes, delay=args.keystroke_delay),
            auto_zoom=AutoZoomConfig(enabled=not args.no_auto_zoom),
            export=ExportConfig(bake=args.bake_fps > 0, fps=args.bake_fps or 60),
        )
    else:
        print("Error: provide either a CAPTURE argument or --manifest.", file=sys.stderr)
        sys.exit(1)

    def on_progress(stage: str, frac: float) -> None:
        print(f"  [{frac:3.0%}] {stage}")

    result = process(m, on_progress=on_progress)

    print()
    print(f"Done! Output: {result.output_path}")
    print(f"  Duration: {result.duration:.1f}s")
    print(f"  Cursor visibility intervals: {result.cursor_intervals}")
    if result.keystroke_events:
        print(f"  Keystrokes: {result.keystroke_events} events, {result.keystroke_intervals} intervals")
    if result.camera_samples:
        print(f"  Camera path: {result.camera_samples} samples")
    if result.frames_baked:
        print(f"  Baked frames: {result.frames_baked}")
