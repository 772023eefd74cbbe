"""Shared async HTTP helpers used by the registry clients.

Encapsulates request/timeout error handling so callers deal with npname
errors instead of transport specifics. Only ``HEAD`` is needed: npm
registries answer availability probes by status code alone.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

import aiohttp

from ..constants import Constants
from ..models import RequestAbortedError, RequestTimeoutError
from .logging_utils import Timer, extra_context, is_debug_enabled, safe_url

logger = logging.getLogger(__name__)


def _request_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    result = {"User-Agent": Constants.USER_AGENT}
    if headers:
        result.update(headers)
    return result


async def _head(
    session: aiohttp.ClientSession,
    url: str,
    headers: Dict[str, str],
    timeout_ms: int,
) -> int:
    timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)
    async with session.head(url, headers=headers, timeout=timeout, allow_redirects=True) as res:
        return res.status


async def head(
    url: str,
    *,
    timeout_ms: int = Constants.DEFAULT_TIMEOUT_MS,
    headers: Optional[Dict[str, str]] = None,
    session: Optional[aiohttp.ClientSession] = None,
    context: str = "npm",
) -> int:
    """Perform a HEAD request and return the response status code.

    Args:
        url: Target URL.
        timeout_ms: Total time allowed for the request, in milliseconds.
        headers: Extra request headers.
        session: Session to reuse; a short-lived one is opened when omitted.
        context: Human-readable source tag for logs (e.g., "npm").

    Returns:
        int: HTTP status code.

    Raises:
        RequestTimeoutError: The request did not finish within ``timeout_ms``.
        RequestAbortedError: The server dropped the connection mid-request.
        aiohttp.ClientError: Any other transport failure, unchanged.
    """
    safe_target = safe_url(url)
    request_headers = _request_headers(headers)

    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="HEAD",
                    target=safe_target,
                    context=context,
                    authenticated="authorization" in {k.lower() for k in request_headers},
                ),
            )
        try:
            if session is None:
                async with aiohttp.ClientSession() as own_session:
                    status = await _head(own_session, url, request_headers, timeout_ms)
            else:
                status = await _head(session, url, request_headers, timeout_ms)
        except asyncio.TimeoutError as exc:
            logger.debug(
                "%s request timed out after %sms",
                context,
                timeout_ms,
                extra=extra_context(event="http_exception", outcome="timeout", target=safe_target),
            )
            raise RequestTimeoutError(timeout_ms) from exc
        except aiohttp.ServerDisconnectedError as exc:
            logger.debug(
                "%s request aborted: %s",
                context,
                exc,
                extra=extra_context(event="http_exception", outcome="aborted", target=safe_target),
            )
            raise RequestAbortedError() from exc
        except aiohttp.ClientError as exc:
            logger.debug(
                "%s connection error: %s",
                context,
                exc,
                extra=extra_context(event="http_exception", outcome="client_error", target=safe_target),
            )
            raise

    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="HEAD",
                status_code=status,
                duration_ms=t.duration_ms(),
                target=safe_target,
                context=context,
            ),
        )
    return status
