"""npname command-line entry point.

Validates the given names and, unless ``--validate`` is used, checks them
against the registry. Per-name failures are reported next to the name and
never abort the run; only argument problems exit with ``ExitCodes.ERROR``.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Dict, List, Optional

from .args import parse_args
from .cli_config import ConfigFileError, apply_config, load_config
from .common.logging_utils import configure_logging, extra_context, is_debug_enabled, redact
from .constants import Constants, ExitCodes
from .models import AvailabilityOptions, BatchOptions, ValidationResult
from .output import CliResult, render
from .registry.availability import check, check_availability_many
from .validate import validate

logger = logging.getLogger(__name__)


def _setup_logging(args) -> None:
    configure_logging(getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _argument_error(args) -> Optional[str]:
    if args.CONCURRENCY < 1:
        return "--concurrency must be at least 1"
    if args.TIMEOUT <= 0:
        return "--timeout must be greater than 0"
    if not args.NAMES:
        return "No package names provided\nUsage: npname <name> [names...]"
    return None


def process_validate_only(names: List[str]) -> List[CliResult]:
    """Validate names without any network access."""
    return [CliResult.from_validation(name, validate(name)) for name in names]


async def process_availability(names: List[str], options: BatchOptions) -> List[CliResult]:
    """Validate every name, then batch-check the valid ones.

    If the batch check fails, every valid name is reported as unknown with
    the batch error attached.
    """
    validations: Dict[str, ValidationResult] = {name: validate(name) for name in names}
    valid_names = [name for name in names if validations[name].valid_for_new_packages]

    checked: Dict[str, CliResult] = {}
    if valid_names:
        try:
            availability = await check_availability_many(valid_names, options)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.debug("Failed to check availability: %s", redact(str(exc)))
            checked = {
                name: CliResult.from_validation(name, validations[name], None, str(exc))
                for name in valid_names
            }
        else:
            checked = {
                name: CliResult.from_validation(name, validations[name], availability.get(name))
                for name in valid_names
            }

    return [
        checked.get(name) or CliResult.from_validation(name, validations[name])
        for name in names
    ]


async def process_full_check(names: List[str], options: AvailabilityOptions) -> List[CliResult]:
    """Run the full check for each name in turn; failures degrade per name."""
    results = []
    for name in names:
        logger.info("Checking %s...", name)
        result = await check(name, options)
        results.append(
            CliResult.from_validation(
                result.name,
                result.validation,
                result.available,
                str(result.error) if result.error is not None else None,
            )
        )
    return results


def determine_exit_code(results: List[CliResult], validate_only: bool) -> ExitCodes:
    """Success only when every name is valid (validate mode) or available."""
    if any(r.error is not None for r in results):
        return ExitCodes.UNAVAILABLE
    if validate_only:
        ok = all(r.valid_for_new_packages for r in results)
    else:
        ok = all(r.available is True for r in results)
    return ExitCodes.SUCCESS if ok else ExitCodes.UNAVAILABLE


def run(argv=None) -> int:
    """Parse ``argv``, process the names and print results; returns the exit code."""
    args = parse_args(argv)
    _setup_logging(args)

    try:
        apply_config(args, load_config(args.CONFIG))
    except ConfigFileError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return ExitCodes.ERROR.value

    problem = _argument_error(args)
    if problem:
        sys.stderr.write(f"Error: {problem}\n")
        return ExitCodes.ERROR.value

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(
                event="function_entry",
                component="cli",
                action="run",
                count=len(args.NAMES),
                mode="validate" if args.VALIDATE else ("check" if args.CHECK else "batch"),
            ),
        )

    if args.VALIDATE:
        results = process_validate_only(args.NAMES)
    elif args.CHECK:
        options = AvailabilityOptions(registry_url=args.REGISTRY, timeout=args.TIMEOUT)
        results = asyncio.run(process_full_check(args.NAMES, options))
    else:
        options = BatchOptions(
            registry_url=args.REGISTRY,
            timeout=args.TIMEOUT,
            concurrency=args.CONCURRENCY,
        )
        results = asyncio.run(process_availability(args.NAMES, options))

    mode = "validate" if args.VALIDATE else "check"
    text = render(results, mode, as_json=args.JSON, quiet=args.QUIET)
    if text:
        print(text)

    return determine_exit_code(results, args.VALIDATE).value


def main():
    """Main function of the program."""
    sys.exit(run())


if __name__ == "__main__":
    main()
