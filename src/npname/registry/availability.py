"""npm registry availability checks.

A name is probed with ``HEAD <registry><name>``: 404 means the name is
free, 2xx means it is taken. Scoped packages and organizations on private
or auth-gated registries may answer 401/403, which leaves availability
unknown (``None``).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

import aiohttp

from ..common import http_client
from ..common.logging_utils import extra_context, is_debug_enabled, redact, safe_url
from ..constants import Constants
from ..models import (
    AvailabilityOptions,
    BatchOptions,
    CheckFailedError,
    CheckResult,
    InvalidNameError,
    UnexpectedStatusError,
)
from ..validate import is_organization, is_scoped, validate
from .config import get_auth_token, get_registry_url, normalize_url

logger = logging.getLogger(__name__)


def _ensure_valid(name: str, check_name: str) -> None:
    validation = validate(check_name)
    if validation.valid_for_new_packages:
        return
    notices = [f"- {notice}" for notice in validation.warnings + validation.errors]
    message = "\n".join([f"Invalid package name: {name}"] + notices)
    raise InvalidNameError(message, validation.errors, validation.warnings)


def build_package_url(name: str, registry_url: str) -> str:
    """Return the URL probed for ``name`` on ``registry_url``.

    Organizations are looked up on the npm website; scoped names keep the
    scope in a single path segment (``@scope%2fname``).
    """
    if is_organization(name):
        return Constants.NPM_ORGANIZATION_URL + name.replace("@", "").replace("/", "").lower()
    url_name = name.replace("/", "%2f") if is_scoped(name) else name
    return normalize_url(registry_url) + url_name.lower()


def _build_headers(registry_url: str, is_org: bool) -> Dict[str, str]:
    if is_org:
        return {}
    auth = get_auth_token(registry_url)
    if auth is None:
        return {}
    return {"authorization": auth.header_value()}


def _resolve_timeout(options: AvailabilityOptions) -> int:
    timeout = options.timeout
    if timeout is None:
        return Constants.DEFAULT_TIMEOUT_MS
    # aiohttp treats a zero total timeout as "no timeout"
    if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout < 1:
        raise ValueError(f"timeout must be a positive integer, got {timeout!r}")
    return timeout


def interpret_status(status: int, scoped_or_org: bool) -> Optional[bool]:
    """Map a probe status to availability: True free, False taken, None unknown."""
    if 200 <= status < 300:
        return False
    if status == 404:
        return True
    if scoped_or_org and status in (401, 403):
        return None
    raise UnexpectedStatusError(status)


async def check_availability(
    name: str,
    options: Optional[AvailabilityOptions] = None,
    *,
    session: Optional[aiohttp.ClientSession] = None,
) -> Optional[bool]:
    """Check whether ``name`` is free on the registry.

    Args:
        name: Package name, scoped name or organization handle (``@org``).
        options: Registry override and timeout in milliseconds.
        session: Optional aiohttp session shared across several checks.

    Returns:
        True if available, False if taken, None if the registry requires
        authentication to tell.

    Raises:
        ValueError: ``name`` is not a non-empty string, or the timeout is
            not a positive integer.
        InvalidNameError: ``name`` is not valid for new packages.
        UnexpectedStatusError: The registry answered with an unexpected status.
        RequestTimeoutError: The probe timed out.
        RequestAbortedError: The connection was dropped.
    """
    if not isinstance(name, str) or not name:
        raise ValueError("Package name required")

    options = options or AvailabilityOptions()
    timeout = _resolve_timeout(options)
    is_org = is_organization(name)
    check_name = name.replace("@", "").replace("/", "") if is_org else name
    _ensure_valid(name, check_name)

    registry_url = normalize_url(options.registry_url or get_registry_url())
    package_url = build_package_url(name, registry_url)
    headers = _build_headers(registry_url, is_org)

    status = await http_client.head(
        package_url,
        timeout_ms=timeout,
        headers=headers,
        session=session,
    )
    available = interpret_status(status, is_scoped(name) or is_org)
    if is_debug_enabled(logger):
        logger.debug(
            "Availability determined",
            extra=extra_context(
                event="decision",
                component="availability",
                action="check",
                package_name=name,
                target=safe_url(package_url),
                status_code=status,
                outcome=str(available),
            ),
        )
    return available


def _create_batches(names: Sequence[str], batch_size: int) -> List[List[str]]:
    return [list(names[i:i + batch_size]) for i in range(0, len(names), batch_size)]


async def _check_batch(
    batch: List[str],
    options: BatchOptions,
    session: aiohttp.ClientSession,
) -> list:
    return await asyncio.gather(
        *(check_availability(name, options, session=session) for name in batch),
        return_exceptions=True,
    )


async def check_availability_many(
    names: Sequence[str],
    options: Optional[BatchOptions] = None,
) -> Dict[str, Optional[bool]]:
    """Check several names, at most ``options.concurrency`` at a time.

    Names are processed in consecutive batches; a batch starts only after
    the previous one has settled.

    Returns:
        dict: name -> availability, in input order.

    Raises:
        TypeError: ``names`` is not a list or tuple.
        ValueError: concurrency or timeout is not a positive integer.
        CheckFailedError: At least one name failed; ``errors`` holds every
            per-name exception and partial results are discarded.
    """
    if not isinstance(names, (list, tuple)):
        raise TypeError(f"Expected an array of names, got {type(names).__name__}")

    options = options or BatchOptions()
    concurrency = options.concurrency
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError(f"concurrency must be a positive integer, got {concurrency!r}")
    _resolve_timeout(options)

    results: Dict[str, Optional[bool]] = {}
    errors: List[Exception] = []
    batches = _create_batches(names, concurrency)
    logger.debug("Checking %d names in %d batches", len(names), len(batches))

    async with aiohttp.ClientSession() as session:
        for batch in batches:
            outcomes = await _check_batch(batch, options, session)
            for name, outcome in zip(batch, outcomes):
                if isinstance(outcome, Exception):
                    errors.append(outcome)
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    results[name] = outcome

    if errors:
        logger.debug("%d of %d checks failed", len(errors), len(names))
        raise CheckFailedError("Some package checks failed", errors)
    return results


async def check(
    name: str,
    options: Optional[AvailabilityOptions] = None,
) -> CheckResult:
    """Validate ``name`` and check its availability without raising.

    Any failure is attached to the result with ``available`` set to None.
    """
    validation = validate(name)
    if not validation.valid_for_new_packages:
        return CheckResult(
            name=name,
            available=None,
            validation=validation,
            error=InvalidNameError(
                f"Invalid package name: {name}",
                validation.errors,
                validation.warnings,
            ),
        )

    try:
        available = await check_availability(name, options)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.debug("Check for %s failed: %s", name, redact(str(exc)))
        return CheckResult(name=name, available=None, validation=validation, error=exc)
    return CheckResult(name=name, available=available, validation=validation)
