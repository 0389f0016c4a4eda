"""CLI entry point: python -m superview --input /path/to/video.mp4"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from superview.errors import SuperviewError
from superview.lib.paths import get_project_root
from superview.pipeline import load_config, superview


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="superview",
        description="Superview -- widen 4:3 video to 16:9 with a superview remap",
    )
    parser.add_argument(
        "-i", "--input",
        required=True,
        help="The input video filename",
    )
    parser.add_argument(
        "-o", "--output",
        default="output.mp4",
        help="The output video filename",
    )
    parser.add_argument(
        "-b", "--bitrate",
        type=int,
        default=None,
        help="The bitrate in bytes/second to encode in. "
             "If not specified, take the same bitrate as the input file",
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to config.toml (default: config/config.toml or SUPERVIEW_CONFIG)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main(argv=None):
    load_dotenv(get_project_root() / ".env")
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_config(args.config)
        output = superview(args.input, args.output, args.bitrate, config=config)
    except SuperviewError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Done! You can open the output file '{output}' to see the result", file=sys.stderr)


if __name__ == "__main__":
    main()
