import argparse
import logging
import sys

import msgspec

from ._core import _LocatedError
from .json import FORMATS
from .trip import trip

logger = logging.getLogger("geocodec")


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="geocodec",
        description="Round trip a GeoJSON document: decode it and encode it back",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default="-",
        metavar="FILE",
        help="The GeoJSON file. Use - for stdin (the default)",
    )
    parser.add_argument(
        "-l",
        "--locs",
        action="store_true",
        help="Report the file and the location in the document of errors",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default="minify",
        metavar="FMT",
        help="Output style. Must be either indent or minify, defaults to minify",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Check position and bbox lengths, and require feature members",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug information to stderr",
    )
    return parser


def _error_message(exc, file, locs):
    if isinstance(exc, _LocatedError):
        msg = str(exc) if locs else exc.msg
    else:
        msg = str(exc)
    if locs:
        msg = f"{'<stdin>' if file == '-' else file}: {msg}"
    # Diagnostics are a single line
    return " ".join(msg.split())


def main(argv=None):
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )
    logger.debug("Round tripping %s as %s", args.file, args.format)

    options = {"format": args.format, "strict": args.strict}
    try:
        if args.file == "-":
            trip(sys.stdin.buffer, sys.stdout.buffer, **options)
        else:
            with open(args.file, "rb") as f:
                trip(f, sys.stdout.buffer, **options)
    except (msgspec.MsgspecError, OSError) as exc:
        print(f"Error: {_error_message(exc, args.file, args.locs)}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
