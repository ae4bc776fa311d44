"""Command-line interface: ``pagestrip info|rearrange|crop|compose``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pagestrip_ecs import __version__, api
from pagestrip_ecs.errors import PagestripError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagestrip",
        description="Descramble, crop and stack page images",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to pagestrip.toml (defaults to PAGESTRIP_CONFIG or ./pagestrip.toml)",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="-v for INFO, -vv for DEBUG"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="Print width, height and format as JSON")
    info.add_argument("image", type=Path)

    rearrange = sub.add_parser("rearrange", help="Undo strip scrambling")
    rearrange.add_argument("image", type=Path)
    rearrange.add_argument("--rows", type=int, required=True, help="Strip count")
    rearrange.add_argument("-o", "--output", type=Path, required=True)

    crop = sub.add_parser("crop", help="Crop a rectangle")
    crop.add_argument("image", type=Path)
    crop.add_argument("--x", type=int, default=0)
    crop.add_argument("--y", type=int, default=0)
    crop.add_argument("--width", type=int, required=True)
    crop.add_argument("--height", type=int, required=True)
    crop.add_argument("-o", "--output", type=Path, required=True)

    compose = sub.add_parser("compose", help="Stack images top-to-bottom")
    compose.add_argument("images", type=Path, nargs="+")
    compose.add_argument("-o", "--output", type=Path, required=True)

    return parser


def _run(args: argparse.Namespace) -> None:
    if args.command == "info":
        info = api.get_image_info(args.image.read_bytes(), config_path=args.config)
        print(info.model_dump_json())
        return

    if args.command == "rearrange":
        png = api.rearrange_image_rows(
            args.image.read_bytes(), args.rows, config_path=args.config
        )
    elif args.command == "crop":
        png = api.crop_image(
            args.image.read_bytes(),
            args.x,
            args.y,
            args.width,
            args.height,
            config_path=args.config,
        )
    else:
        png = api.compose_vertical(
            [p.read_bytes() for p in args.images], config_path=args.config
        )
    args.output.write_bytes(png)
    print(f"Wrote {args.output} ({len(png)} bytes)")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        _run(args)
    except (PagestripError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
