"""Command-line interface for maneframe."""

import argparse
import sys


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'")
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="maneframe",
        description="maneframe - Guided selfie capture and hair edit masks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  maneframe capture -o selfie.png                 # Webcam 0, auto-capture
  maneframe capture --camera clip.mp4 -o out.png  # Replay a recording
  maneframe mask selfie.png -o mask.png           # Fallback gradient mask
  maneframe mask selfie.png -o mask.png --segment --preview check.png
""",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # capture command
    cap_parser = subparsers.add_parser(
        "capture",
        help="Auto-capture a photo once the face is aligned",
        description="Track face alignment and capture after the 3-2-1 countdown.",
    )
    cap_parser.add_argument(
        "--camera", default="0",
        help="Camera index or video file path (default: 0)",
    )
    cap_parser.add_argument("--output", "-o", required=True, help="Output photo path")
    cap_parser.add_argument("--fps", type=float, default=10.0, help="Analysis FPS (default: 10)")
    cap_parser.add_argument(
        "--no-mirror", action="store_true",
        help="Save the photo as seen by the camera instead of mirrored",
    )
    cap_parser.add_argument(
        "--max-frames", type=_positive_int, default=None, metavar="N",
        help="Stop after N camera frames without a capture",
    )
    cap_parser.add_argument(
        "--min-confidence", type=float, default=0.5,
        help="Minimum face detection confidence (default: 0.5)",
    )
    cap_parser.add_argument("--device", default="cpu", help="MediaPipe delegate: cpu or gpu")

    # mask command
    mask_parser = subparsers.add_parser(
        "mask",
        help="Build the hair edit mask for a photo",
        description="Write an RGBA mask PNG whose transparent pixels may be repainted.",
    )
    mask_parser.add_argument("path", help="Path to photo file")
    mask_parser.add_argument("--output", "-o", required=True, help="Output mask PNG path")
    mask_parser.add_argument(
        "--canvas-size", type=_positive_int, default=1024,
        help="Square canvas side in pixels (default: 1024)",
    )
    mask_parser.add_argument(
        "--segment", action="store_true",
        help="Use MediaPipe person segmentation (falls back to a gradient mask)",
    )
    mask_parser.add_argument("--image-out", help="Also write the square canvas image")
    mask_parser.add_argument("--preview", help="Write a tinted preview of the editable region")
    mask_parser.add_argument("--device", default="cpu", help="MediaPipe delegate: cpu or gpu")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    from maneframe.cli.utils import configure_logging

    configure_logging(args.verbose)

    from maneframe.cli import commands

    if args.command == "capture":
        sys.exit(commands.run_capture(args))

    elif args.command == "mask":
        sys.exit(commands.run_mask(args))

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
