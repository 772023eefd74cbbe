"""Argument parsing functionality for npname."""

import argparse

from . import __version__
from .constants import Constants

EPILOG = """\
exit codes:
  0   all names available (or valid with --validate)
  1   some names unavailable, invalid or not checkable
  2   invalid arguments or errors

examples:
  npname my-package
  npname pkg1 pkg2 pkg3
  npname @scope/package --registry https://npm.pkg.github.com/
  npname "my pkg" --validate
  npname foo bar baz --json
"""


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="npname",
        description="Check npm package name validity and availability",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=True,
    )

    parser.add_argument("NAMES",
                        metavar="name",
                        help="Package name(s) to check",
                        nargs="*")

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument("-v", "--validate",
                            dest="VALIDATE",
                            help="Only validate name(s), no network check",
                            action="store_true")
    mode_group.add_argument("-c", "--check",
                            dest="CHECK",
                            help="Full check: validate + availability, one name at a time",
                            action="store_true")

    parser.add_argument("-r", "--registry",
                        dest="REGISTRY",
                        help="Custom registry URL",
                        action="store",
                        type=str)
    parser.add_argument("-t", "--timeout",
                        dest="TIMEOUT",
                        help=f"Request timeout in milliseconds (default: {Constants.DEFAULT_TIMEOUT_MS})",
                        action="store",
                        type=int)
    parser.add_argument("--concurrency",
                        dest="CONCURRENCY",
                        help=f"Parallel requests for batch checks (default: {Constants.DEFAULT_CONCURRENCY})",
                        action="store",
                        type=int)
    parser.add_argument("-j", "--json",
                        dest="JSON",
                        help="Output as JSON for scripting",
                        action="store_true",
                        default=None)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Minimal output, just exit codes",
                        action="store_true",
                        default=None)

    parser.add_argument("--config",
                        dest="CONFIG",
                        help="Path to a YAML file with defaults for registry, timeout, concurrency, json and quiet",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--version",
                        action="version",
                        version=f"%(prog)s {__version__}")

    return parser.parse_args(argv)
