"""
classdiff Entry Point
=====================

Command-line interface. Every action loads two builds of a library and
diffs them; they differ in what they report.

Usage:
    python -m classdiff diff <previous_jar> <current_jar>
    python -m classdiff check <previous_jar> <current_jar>
    python -m classdiff infer <previous_version> <previous_jar> <current_jar>
    python -m classdiff validate <previous_version> <previous_jar> <current_version> <current_jar>

Filters are semicolon-separated globs, e.g. --excludes "**/internal/**;**/impl/**".
"""
import argparse
import logging
import sys

from .comparer import Comparer
from .delta import Delta
from .dumper import TextDumper
from .errors import ClassDiffError
from .utils import DEFAULT_FILTER_SEPARATOR, split_filters
from .version import Version

# Default Configuration
DEFAULT_CONFIG = {
    "FILTER_SEPARATOR": DEFAULT_FILTER_SEPARATOR,
    "LOG_FORMAT": "%(levelname)s %(name)s: %(message)s",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="classdiff",
        description="Semantic versioning checks for compiled JVM libraries")
    parser.add_argument("--verbose", action="store_true", help="Log loading and diff progress to stderr")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--includes", default="",
                        help="Only consider classes matching one of these filters")
    common.add_argument("--excludes", default="",
                        help="Ignore classes matching any of these filters")

    actions = parser.add_subparsers(dest="action", metavar="action")
    actions.required = True

    p = actions.add_parser("diff", parents=[common], help="Dump all differences")
    p.add_argument("previous_jar")
    p.add_argument("current_jar")

    p = actions.add_parser("check", parents=[common], help="Print the compatibility type")
    p.add_argument("previous_jar")
    p.add_argument("current_jar")

    p = actions.add_parser("infer", parents=[common], help="Print the inferred next version")
    p.add_argument("previous_version")
    p.add_argument("previous_jar")
    p.add_argument("current_jar")

    p = actions.add_parser("validate", parents=[common],
                           help="Print whether current_version is valid for the differences")
    p.add_argument("previous_version")
    p.add_argument("previous_jar")
    p.add_argument("current_version")
    p.add_argument("current_jar")

    return parser


def compute_delta(args) -> Delta:
    separator = DEFAULT_CONFIG["FILTER_SEPARATOR"]
    comparer = Comparer(args.previous_jar, args.current_jar,
                        split_filters(args.includes, separator),
                        split_filters(args.excludes, separator))
    return comparer.diff()


def run(args):
    """
    Executes one action and prints its result to stdout.

    Raises:
        ClassDiffError: On unreadable input, bad versions or bad arguments.
    """
    if args.action == "diff":
        TextDumper().dump(compute_delta(args))

    elif args.action == "check":
        print(compute_delta(args).compute_compatibility_type().name)

    elif args.action == "infer":
        previous = Version.parse(args.previous_version)
        print(compute_delta(args).infer(previous))

    elif args.action == "validate":
        previous = Version.parse(args.previous_version)
        current = Version.parse(args.current_version)
        print(str(compute_delta(args).validate(previous, current)).lower())


def main(argv=None):
    """
    Main execution function.

    1. Parses command line arguments.
    2. Loads and diffs both builds.
    3. Prints the result of the requested action.
    """
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format=DEFAULT_CONFIG["LOG_FORMAT"], stream=sys.stderr)

    try:
        run(args)
    except ClassDiffError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
