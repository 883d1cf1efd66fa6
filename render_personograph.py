#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from pathlib import Path

from personograph_lib import InvalidArgumentError, PersonographChart


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Render personograph JSON to an SVG file.")
    parser.add_argument("input_json", type=Path, help="Path to input JSON file.")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("personograph.svg"),
        help="Path to output SVG file (default: personograph.svg).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log resolved options and output path.")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    chart = PersonographChart()
    try:
        data = json.loads(args.input_json.read_text(encoding="utf-8"))
        chart.load_from_json(data)
    except (json.JSONDecodeError, InvalidArgumentError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    chart.render_and_save(str(args.output))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
