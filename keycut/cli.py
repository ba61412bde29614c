"""Thin CLI entry point — builds a CutManifest and calls the engine."""

import argparse
import sys
from pathlib import Path

from keycut.errors import KeycutError
from keycut.logging_config import setup_logging
from keycut.manifest import CutManifest, EngineConfig, load_config, load_manifest

CUT_USAGE = "keycut cut <start> <end> <input> <output>"


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="keycut",
        description="Keycut — cut video on exact frames, re-encoding as little as possible.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every ffmpeg command")
    parser.add_argument("--config", "-c", type=Path, help="Path to a JSON engine config")
    sub = parser.add_subparsers(dest="command")

    cut = sub.add_parser(
        "cut",
        usage=CUT_USAGE,
        help="Cut [start, end) out of a video",
        description=(
            "Times may be seconds (12.5), fractions (25/2), mm:ss, hh:mm:ss "
            "or frame indices (f300)."
        ),
    )
    cut.add_argument("args", nargs="*", metavar="ARG", help="start end input output")
    cut.add_argument("--manifest", "-m", type=Path, help="Path to a JSON cut manifest")

    burn = sub.add_parser("burn", help="Burn frame numbers and timestamps onto a copy")
    burn.add_argument("video", type=Path, help="Input video file")
    burn.add_argument("output", nargs="?", type=Path, help="Output file path")
    burn.add_argument("--fontfile", type=Path, help="TrueType font for drawtext")

    serve = sub.add_parser("serve", help="Launch the web UI")
    serve.add_argument("--port", type=int, default=8321, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")

    return parser


def _run_cut(parser: argparse.ArgumentParser, args: argparse.Namespace, config: EngineConfig) -> None:
    from keycut.engine import process

    if args.manifest:
        if args.args:
            parser.error("cut takes either --manifest or four positional arguments")
        m = load_manifest(args.manifest)
    elif len(args.args) == 4:
        start, end, video, output = args.args
        m = CutManifest(
            input=Path(video),
            output=Path(output),
            start=start,
            end=end,
            engine=config,
        )
    else:
        print(f"Usage: {CUT_USAGE}", file=sys.stderr)
        sys.exit(1)

    def on_progress(stage: str, frac: float) -> None:
        print(f"  [{frac:3.0%}] {stage}")

    result = process(m, on_progress=on_progress)

    print()
    print(f"Done! Output: {result.output_path}")
    print(f"  Cut: {result.case.value}")
    print(
        f"  Duration: {float(result.duration_requested):.3f}s requested, "
        f"{float(result.duration_final):.3f}s written"
    )


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        config = load_config(args.config) if args.config else EngineConfig()
    except (OSError, ValueError) as e:
        print(f"error: config: {e}", file=sys.stderr)
        sys.exit(1)
    setup_logging("DEBUG" if args.verbose else config.log_level)

    if args.command == "serve":
        from keycut.web import create_app
        app = create_app(work_dir=config.work_dir, engine=config)
        print(f"Keycut web UI: http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=False)
        return

    try:
        if args.command == "burn":
            from keycut.editors.burn import apply_frame_burn
            result = apply_frame_burn(args.video, args.output, fontfile=args.fontfile)
            print(f"Done! Video with frame info created: {result.output_path}")
        else:
            _run_cut(parser, args, config)
    except (KeycutError, OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
